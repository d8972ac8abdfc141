from __future__ import annotations
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class Severity(str, Enum):
    MAJOR = "Major"
    MODERATE = "Moderate"
    MINOR = "Minor"
    NONE = "None"


class DrugPairRequest(BaseModel):
    # optional so a missing name reaches the 400 path instead of a framework error
    drug1: Optional[str] = Field(None, description="First drug name")
    drug2: Optional[str] = Field(None, description="Second drug name")


class DrugInteraction(BaseModel):
    drug1: str
    drug2: str
    severity: Severity
    description: Optional[str] = None
    interaction: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str


# a row exactly as the store connector returned it
SourceRecord = Dict[str, Any]
