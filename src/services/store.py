from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol, Sequence

import pandas as pd
import structlog
from sqlalchemy import column, create_engine, inspect, select, table
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from src.config import Settings
from src.models import SourceRecord

logger = structlog.get_logger(__name__)

FOUND = "found"
EMPTY = "empty"
FAILED = "failed"


@dataclass(frozen=True)
class LookupResult:
    """Outcome of one limit-one lookup: a record, no rows, or a transport failure."""
    status: str
    record: Optional[SourceRecord] = None
    error: Optional[str] = None

    @classmethod
    def found(cls, record: SourceRecord) -> "LookupResult":
        return cls(FOUND, record=record)

    @classmethod
    def empty(cls) -> "LookupResult":
        return cls(EMPTY)

    @classmethod
    def failed(cls, error: str) -> "LookupResult":
        return cls(FAILED, error=error)

    @property
    def ok(self) -> bool:
        return self.status == FOUND


class TableStore(Protocol):
    def find_one(
        self,
        source: str,
        filters: Mapping[str, str],
        columns: Sequence[str],
        optional_columns: Sequence[str] = (),
    ) -> LookupResult:
        """
        Return at most one record of `source` whose every filter field contains
        the given substring (case-insensitive). `columns` must exist in the table;
        `optional_columns` are read when present and come back as None otherwise.
        Transport problems come back as LookupResult.failed, never as exceptions.
        """
        ...


def _norm_text(s: Any) -> str:
    if s is None:
        return ""
    if isinstance(s, float) and pd.isna(s):
        return ""
    return str(s).strip()


def _like_pattern(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SqlTableStore:
    """Any SQLAlchemy-supported database; one table per source identifier."""

    def __init__(self, engine: Engine):
        self.engine = engine

    @classmethod
    def from_url(cls, database_url: str, **engine_kwargs: Any) -> "SqlTableStore":
        return cls(create_engine(database_url, **engine_kwargs))

    def find_one(self, source, filters, columns, optional_columns=()) -> LookupResult:
        try:
            with self.engine.connect() as conn:
                present = []
                if optional_columns:
                    existing = {c["name"] for c in inspect(conn).get_columns(source)}
                    present = [c for c in optional_columns if c in existing]

                selected = list(dict.fromkeys([*columns, *present]))
                tbl = table(source, *[column(n) for n in dict.fromkeys([*selected, *filters])])
                stmt = select(*[tbl.c[c] for c in selected]).limit(1)
                for field, value in filters.items():
                    stmt = stmt.where(tbl.c[field].ilike(_like_pattern(value), escape="\\"))

                row = conn.execute(stmt).mappings().first()
        except SQLAlchemyError as e:
            detail = getattr(e, "orig", None) or e
            return LookupResult.failed(f"{type(e).__name__}: {detail}")

        if row is None:
            return LookupResult.empty()
        record = {c: None for c in optional_columns}
        record.update(row)
        return LookupResult.found(record)


class CsvTableStore:
    """
    Directory of `<source>.csv` files, one per source identifier.
    Files are read on every lookup; empty cells come back as None.
    """

    def __init__(self, data_dir: str):
        self.data_dir = data_dir

    def path_for(self, source: str) -> str:
        return os.path.join(self.data_dir, f"{source}.csv")

    def find_one(self, source, filters, columns, optional_columns=()) -> LookupResult:
        path = self.path_for(source)
        if not os.path.exists(path):
            return LookupResult.failed(f"Could not find table file for {source!r} at {path}")

        try:
            df = pd.read_csv(path, dtype=str, keep_default_na=False)
        except (OSError, ValueError) as e:
            # pandas' EmptyDataError and ParserError are ValueErrors
            return LookupResult.failed(f"{type(e).__name__}: {e}")

        df.columns = [str(c).strip() for c in df.columns]
        missing = [c for c in dict.fromkeys([*filters, *columns]) if c not in df.columns]
        if missing:
            return LookupResult.failed(
                f"Table {source!r} missing column(s) {missing}. Found: {list(df.columns)}"
            )

        mask = pd.Series(True, index=df.index)
        for field, value in filters.items():
            mask &= df[field].str.lower().str.contains(value.lower(), regex=False)

        hits = df.loc[mask]
        if hits.empty:
            return LookupResult.empty()

        row = hits.iloc[0]
        return LookupResult.found(
            {
                c: (_norm_text(row[c]) or None) if c in df.columns else None
                for c in dict.fromkeys([*columns, *optional_columns])
            }
        )


def build_store(settings: Settings) -> TableStore:
    if settings.database_url:
        logger.info("store_selected", kind="sql")
        return SqlTableStore.from_url(settings.database_url, pool_pre_ping=True)
    logger.info("store_selected", kind="csv", data_dir=settings.data_dir)
    return CsvTableStore(settings.data_dir)
