from __future__ import annotations

from typing import Any, Optional, Tuple

from src.models import DrugInteraction, SourceRecord
from .normalize import normalize_severity
from .store import LookupResult, TableStore


def _text(v: Any) -> str:
    return "" if v is None else str(v).strip()


def _optional_text(v: Any) -> Optional[str]:
    return _text(v) or None


class SchemaShape:
    """
    One column-naming convention an interaction table may use.
    Subclasses name the two drug columns, the columns a table must have,
    the columns read only when the table has them, and how a record maps
    onto DrugInteraction.
    """
    name: str = ""
    left_field: str = ""
    right_field: str = ""
    columns: Tuple[str, ...] = ()
    optional_columns: Tuple[str, ...] = ()

    def try_match(self, store: TableStore, source: str, drug_a: str, drug_b: str) -> LookupResult:
        return store.find_one(
            source,
            {self.left_field: drug_a, self.right_field: drug_b},
            self.columns,
            self.optional_columns,
        )

    def to_interaction(self, record: SourceRecord) -> DrugInteraction:
        raise NotImplementedError


class DirectShape(SchemaShape):
    name = "direct"
    left_field = "drug1"
    right_field = "drug2"
    columns = ("drug1", "drug2", "severity")
    optional_columns = ("description", "interaction")

    def to_interaction(self, record: SourceRecord) -> DrugInteraction:
        # severity still goes through the normalizer; stored text is not trusted
        return DrugInteraction(
            drug1=_text(record.get("drug1")),
            drug2=_text(record.get("drug2")),
            severity=normalize_severity(record.get("severity")),
            description=_optional_text(record.get("description")),
            interaction=_optional_text(record.get("interaction")),
        )


class PairedNameShape(SchemaShape):
    """DDInter-style tables: free-text severity, no description columns."""
    name = "paired_name"
    left_field = "primary_drug_name"
    right_field = "secondary_drug_name"
    columns = ("primary_drug_name", "secondary_drug_name", "interaction_severity")

    def to_interaction(self, record: SourceRecord) -> DrugInteraction:
        return DrugInteraction(
            drug1=_text(record.get("primary_drug_name")),
            drug2=_text(record.get("secondary_drug_name")),
            severity=normalize_severity(record.get("interaction_severity")),
        )


DEFAULT_SHAPES: Tuple[SchemaShape, ...] = (DirectShape(), PairedNameShape())
