from __future__ import annotations

from typing import Any, Iterator, List, Optional, Sequence, Tuple

import structlog

from src.config import ResolverConfig
from src.constants.messages import NO_INTERACTION_DESCRIPTION, NO_INTERACTION_NARRATIVE
from src.models import DrugInteraction, Severity
from .normalize import normalize_name
from .shapes import DEFAULT_SHAPES, SchemaShape
from .store import FAILED, TableStore


def fallback_interaction(drug1: str, drug2: str) -> DrugInteraction:
    return DrugInteraction(
        drug1=drug1,
        drug2=drug2,
        severity=Severity.NONE,
        description=NO_INTERACTION_DESCRIPTION,
        interaction=NO_INTERACTION_NARRATIVE,
    )


class InteractionResolver:
    """
    Looks a drug pair up across the configured sources.

    Per source, every shape is tried with the names in caller order, then
    every shape again with the names swapped. The first record found wins.
    Failed lookups are logged and the next source is tried; when nothing
    matches anywhere, the fixed "no known interaction" result is returned.
    """

    def __init__(
        self,
        store: TableStore,
        config: Optional[ResolverConfig] = None,
        shapes: Sequence[SchemaShape] = DEFAULT_SHAPES,
        logger: Optional[Any] = None,
    ):
        self.store = store
        self.config = config or ResolverConfig()
        self.shapes = tuple(shapes)
        self.logger = logger or structlog.get_logger(__name__)

    def _attempts(self, a: str, b: str) -> Iterator[Tuple[SchemaShape, str, str, bool]]:
        for swapped, (left, right) in ((False, (a, b)), (True, (b, a))):
            for shape in self.shapes:
                yield shape, left, right, swapped

    def _resolve_in_source(self, source: str, a: str, b: str) -> Optional[DrugInteraction]:
        errors: List[str] = []
        for shape, left, right, swapped in self._attempts(a, b):
            result = shape.try_match(self.store, source, left, right)
            if result.ok:
                self.logger.info(
                    "interaction_match",
                    source=source,
                    shape=shape.name,
                    swapped=swapped,
                )
                return shape.to_interaction(result.record or {})
            if result.status == FAILED:
                errors.append(f"{shape.name}: {result.error}")

        if errors:
            self.logger.warning(
                "interaction_source_failed",
                source=source,
                errors=" | ".join(errors),
            )
        return None

    def resolve_interaction(self, drug_a: str, drug_b: str) -> DrugInteraction:
        caller_a = (drug_a or "").strip()
        caller_b = (drug_b or "").strip()
        if not caller_a or not caller_b:
            # callers validate names first; a blank one would match every row
            self.logger.warning("interaction_blank_name", drug1=caller_a, drug2=caller_b)
            return fallback_interaction(caller_a, caller_b)

        a = normalize_name(drug_a)
        b = normalize_name(drug_b)

        for source in self.config.sources:
            try:
                match = self._resolve_in_source(source, a, b)
            except Exception:
                # a misbehaving connector must not abort the lookup
                self.logger.exception("interaction_source_error", source=source)
                continue
            if match is not None:
                return match

        self.logger.info("interaction_fallback", drug1=caller_a, drug2=caller_b)
        return fallback_interaction(caller_a, caller_b)
