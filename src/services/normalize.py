from __future__ import annotations

from typing import Any, Optional

from src.models import Severity

# Checked in this order; the first keyword found wins.
SEVERITY_KEYWORDS = (
    ("major", Severity.MAJOR),
    ("moderate", Severity.MODERATE),
    ("minor", Severity.MINOR),
)


def normalize_name(name: Optional[str]) -> str:
    return (name or "").lower().strip()


def normalize_severity(raw: Any) -> Severity:
    """
    Map free-form severity text onto the closed Severity set.

    Case-insensitive substring test in priority order Major > Moderate > Minor;
    anything else (including None or empty text) is Severity.NONE.
    """
    if isinstance(raw, Severity):
        return raw
    if raw is None:
        return Severity.NONE

    s = str(raw).lower()
    for keyword, severity in SEVERITY_KEYWORDS:
        if keyword in s:
            return severity
    return Severity.NONE
