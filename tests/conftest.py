"""Pytest configuration and fixtures."""

import os

import pandas as pd
import pytest
from sqlalchemy import create_engine

from src.services.store import CsvTableStore, LookupResult, SqlTableStore


class FakeStore:
    """In-memory TableStore: source -> list of records, or an error string for a broken source."""

    def __init__(self, tables=None):
        self.tables = tables or {}
        self.calls = []

    def find_one(self, source, filters, columns, optional_columns=()):
        self.calls.append((source, dict(filters)))
        rows = self.tables.get(source)
        if rows is None:
            return LookupResult.failed(f"relation {source!r} does not exist")
        if isinstance(rows, str):
            return LookupResult.failed(rows)

        for row in rows:
            if not all(f in row for f in list(filters) + list(columns)):
                return LookupResult.failed(f"column missing in {source!r}")
            if all(v.lower() in str(row[f]).lower() for f, v in filters.items()):
                record = {c: row[c] for c in columns}
                record.update({c: row.get(c) for c in optional_columns})
                return LookupResult.found(record)
        return LookupResult.empty()


class RecordingLogger:
    """Stands in for a structlog logger and remembers every event."""

    def __init__(self):
        self.events = []

    def _log(self, level, event, **kw):
        self.events.append((level, event, kw))

    def info(self, event, **kw):
        self._log("info", event, **kw)

    def warning(self, event, **kw):
        self._log("warning", event, **kw)

    def exception(self, event, **kw):
        self._log("exception", event, **kw)

    def named(self, event):
        return [e for e in self.events if e[1] == event]


DIRECT_ROWS = [
    {
        "drug1": "warfarin",
        "drug2": "aspirin",
        "severity": "Major bleeding risk",
        "description": "Increased risk of bleeding.",
        "interaction": "Concomitant use increases anticoagulant effect.",
    },
]

PAIRED_ROWS = [
    {
        "primary_drug_name": "metformin",
        "secondary_drug_name": "lisinopril",
        "interaction_severity": "no significant interaction - minor monitoring advised",
    },
    {
        "primary_drug_name": "Simvastatin",
        "secondary_drug_name": "Clarithromycin",
        "interaction_severity": "MAJOR",
    },
]


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def fake_store():
    return FakeStore(
        {
            "drug_interactions": DIRECT_ROWS,
            "DrugInteraction": PAIRED_ROWS,
            "druginteraction": [],
        }
    )


@pytest.fixture
def sqlite_store(tmp_path):
    """SQLite database with a direct-shape primary table and a paired-name fallback table."""
    engine = create_engine(f"sqlite:///{tmp_path / 'interactions.db'}")
    pd.DataFrame(DIRECT_ROWS).to_sql("drug_interactions", engine, index=False)
    pd.DataFrame(PAIRED_ROWS).to_sql("DrugInteraction", engine, index=False)
    yield SqlTableStore(engine)
    engine.dispose()


@pytest.fixture
def csv_store(tmp_path):
    data_dir = tmp_path / "tables"
    os.makedirs(data_dir)
    pd.DataFrame(DIRECT_ROWS).to_csv(data_dir / "drug_interactions.csv", index=False)
    pd.DataFrame(PAIRED_ROWS).to_csv(data_dir / "DrugInteraction.csv", index=False)
    return CsvTableStore(str(data_dir))
