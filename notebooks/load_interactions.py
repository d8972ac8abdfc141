# load_interactions.py
"""
Takes an interaction CSV export and loads it as a lookup table the API can query.

Input CSV, either shape (column names are matched case-insensitively):
- direct:      drug1, drug2, severity [, description, interaction]
- paired-name: Drug_A / primary_drug_name, Drug_B / secondary_drug_name,
               Level / interaction_severity   (DDInter downloads)

Output:
- a table named --table, written either into --database-url (SQLAlchemy URL)
  or as <output-dir>/<table>.csv for the CSV store

Cleaning:
- trims cells, normalizes hyphens/dashes
- drops rows missing either drug name
- keeps one row per unordered drug pair (A+B and B+A are the same interaction)
"""

import os
import argparse
from typing import Dict, List, Optional

import pandas as pd
from sqlalchemy import create_engine

DIRECT_COLUMNS = ["drug1", "drug2", "severity", "description", "interaction"]
PAIRED_COLUMNS = ["primary_drug_name", "secondary_drug_name", "interaction_severity"]

# accepted header spellings -> canonical column
COLUMN_ALIASES: Dict[str, List[str]] = {
    "drug1": ["drug1", "drug 1", "drug_1"],
    "drug2": ["drug2", "drug 2", "drug_2"],
    "severity": ["severity"],
    "description": ["description"],
    "interaction": ["interaction", "clinical significance", "clinical_significance"],
    "primary_drug_name": ["primary_drug_name", "drug_a", "drug a"],
    "secondary_drug_name": ["secondary_drug_name", "drug_b", "drug b"],
    "interaction_severity": ["interaction_severity", "level"],
}


def norm(s) -> str:
    if s is None or (isinstance(s, float) and pd.isna(s)):
        return ""
    return (
        str(s)
        .replace("–", "-")
        .replace("—", "-")
        .strip()
    )


def rename_columns(df: pd.DataFrame) -> pd.DataFrame:
    lookup = {c.lower().strip(): c for c in df.columns}
    renames = {}
    for canonical, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in lookup:
                renames[lookup[alias]] = canonical
                break
    return df.rename(columns=renames)


def detect_shape(df: pd.DataFrame) -> str:
    cols = set(df.columns)
    if {"drug1", "drug2", "severity"} <= cols:
        return "direct"
    if set(PAIRED_COLUMNS) <= cols:
        return "paired_name"
    raise ValueError(f"Unrecognized interaction table. Found columns: {list(df.columns)}")


def clean_interactions(raw: pd.DataFrame) -> pd.DataFrame:
    df = rename_columns(raw)
    shape = detect_shape(df)

    if shape == "direct":
        # optional text columns are always written, empty when the export lacks them
        keep = DIRECT_COLUMNS
        left, right = "drug1", "drug2"
    else:
        keep = PAIRED_COLUMNS
        left, right = "primary_drug_name", "secondary_drug_name"

    df = df.reindex(columns=keep)
    for c in keep:
        df[c] = df[c].map(lambda v: norm(v) or None).astype(object)

    df = df[df[left].notna() & df[right].notna()]

    # one row per unordered pair
    pair_key = pd.Series(
        [tuple(sorted((a.lower(), b.lower()))) for a, b in zip(df[left], df[right])],
        index=df.index,
        dtype=object,
    )
    df = df.loc[~pair_key.duplicated()]

    return df.reset_index(drop=True)


def write_table(
    df: pd.DataFrame,
    table: str,
    database_url: Optional[str] = None,
    output_dir: Optional[str] = None,
) -> str:
    if database_url:
        engine = create_engine(database_url)
        df.to_sql(table, engine, if_exists="replace", index=False)
        return f"{database_url} :: {table}"

    if not output_dir:
        raise ValueError("Either database_url or output_dir is required")
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, f"{table}.csv")
    df.to_csv(path, index=False)
    return path


def main(input_path: str, table: str, database_url: Optional[str], output_dir: Optional[str]) -> None:
    raw = pd.read_csv(input_path, dtype=str)
    out = clean_interactions(raw)
    target = write_table(out, table, database_url=database_url, output_dir=output_dir)
    print(f"✅ Wrote {len(out)} interactions to: {target}")


if __name__ == "__main__":
    base = os.path.dirname(os.path.abspath(__file__))

    parser = argparse.ArgumentParser()
    parser.add_argument("--input", required=True, help="Path to the interaction CSV export")
    parser.add_argument("--table", default="drug_interactions", help="Table name to write")
    parser.add_argument(
        "--database-url",
        default=os.getenv("DATABASE_URL"),
        help="SQLAlchemy URL; when unset the table is written as CSV",
    )
    parser.add_argument(
        "--output-dir",
        default=os.path.join(base, "..", "data", "tables"),
        help="Directory for <table>.csv when no database URL is given",
    )
    args = parser.parse_args()

    main(args.input, args.table, args.database_url, args.output_dir)
