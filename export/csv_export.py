"""Tabular export of the clients list."""
from __future__ import annotations

import io
from typing import Any, Iterable, List

import pandas as pd

from eventos.presets import FIELD_LABELS

TABLE_COLUMNS: List[str] = [
    "id",
    "nombre",
    "telefono",
    "mail",
    "lugar",
    "fechaEvento",
    "presupuesto",
    "estado",
]


def _row(record: Any) -> dict:
    if hasattr(record, "wire_fields"):
        return record.wire_fields()
    return dict(record)


def records_frame(records: Iterable[Any], columns: List[str] = TABLE_COLUMNS, labels: bool = True) -> pd.DataFrame:
    """DataFrame with a fixed column order; missing values become ``""``."""
    df = pd.DataFrame([_row(r) for r in records])
    df = df.reindex(columns=columns).fillna("")
    if labels:
        df = df.rename(columns={c: FIELD_LABELS.get(c, c) for c in columns})
    return df


def records_to_csv_bytes(records: Iterable[Any], columns: List[str] = TABLE_COLUMNS) -> bytes:
    buf = io.StringIO()
    records_frame(records, columns).to_csv(buf, index=False)
    return buf.getvalue().encode("utf-8")
