"""
Dataset assembly and export.

The dataset is one pandas DataFrame with the columns in model.COLUMNS,
rows in course order and, within a course, in page order.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, Sequence

import pandas as pd

from unisport.errors import SchemaMismatchError
from unisport.model import COLUMNS, SessionRecord


def empty_dataset() -> pd.DataFrame:
    return pd.DataFrame({name: [] for name in COLUMNS}, columns=COLUMNS, dtype=object)


def concat_tables(tables: Sequence[pd.DataFrame]) -> pd.DataFrame:
    """
    Concatenate per-course tables into one dataset.

    All tables must have exactly the same column list; nothing is
    deduplicated or sorted.
    """
    if not tables:
        return empty_dataset()

    expected = list(tables[0].columns)
    for i, table in enumerate(tables):
        if list(table.columns) != expected:
            raise SchemaMismatchError(f"table {i} has columns {list(table.columns)}, expected {expected}")

    return pd.concat(list(tables), ignore_index=True)


def iter_records(df: pd.DataFrame) -> Iterator[SessionRecord]:
    for row in df.itertuples(index=False):
        yield SessionRecord(
            course=str(row.Course),
            level=str(row.Level),
            day=str(row.Day),
            time=str(row.Time),
            period=str(row.Period),
            price=str(row.Prices),
        )


def write_dataset(
    df: pd.DataFrame,
    csv_path: str | Path | None = None,
    pickle_path: str | Path | None = None,
) -> list[Path]:
    """
    Write the dataset as CSV and/or pickle. Returns the written paths.
    """
    written: list[Path] = []

    if csv_path is not None:
        out = Path(csv_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(out, index=False, encoding="utf-8")
        written.append(out)

    if pickle_path is not None:
        out = Path(pickle_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        df.to_pickle(out)
        written.append(out)

    return written


def read_dataset(path: str | Path) -> pd.DataFrame:
    """
    Load a dataset written by write_dataset(); the format follows the suffix.

    Raises SchemaMismatchError when the file holds anything but a table
    with exactly the dataset columns.
    """
    p = Path(path)
    if p.suffix in (".pkl", ".pickle"):
        df = pd.read_pickle(p)
    else:
        # keep_default_na: empty prices stay "" instead of NaN
        df = pd.read_csv(p, dtype=str, keep_default_na=False, encoding="utf-8")

    if not isinstance(df, pd.DataFrame):
        raise SchemaMismatchError(f"{p} does not contain a table (got {type(df).__name__})")
    if list(df.columns) != COLUMNS:
        raise SchemaMismatchError(f"{p} has columns {list(df.columns)}, expected {COLUMNS}")
    return df
