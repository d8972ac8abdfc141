MISSING_DRUG_NAMES = "Both drug names are required"
INTERNAL_ERROR = "Internal server error"

NO_INTERACTION_DESCRIPTION = (
    "No known significant interactions found between these medications in our database."
)
NO_INTERACTION_NARRATIVE = (
    "Based on current medical data, these medications do not have significant documented "
    "interactions. However, always consult with your healthcare provider as individual "
    "factors may affect medication interactions."
)
