# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Internal pandas helpers"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

import pandas as pd


def _row(record: Any) -> Dict[str, Any]:
    if isinstance(record, dict):
        return dict(record)
    attributes = getattr(record, "attributes", None)
    if isinstance(attributes, dict):
        return attributes
    raise TypeError(f"Cannot convert {type(record).__name__} to a DataFrame row")


def records_to_dataframe(records: Iterable[Any]) -> pd.DataFrame:
    """Convert mapped records (or plain dicts) to a DataFrame, one row per record."""
    rows: List[Dict[str, Any]] = [_row(r) for r in records]
    return pd.DataFrame(rows)


def dataframe_to_records(df: pd.DataFrame, na_as_null: bool = False) -> List[Dict[str, Any]]:
    """Convert a DataFrame to a list of attribute dicts, converting Timestamps to datetimes.

    :param df: Input DataFrame.
    :param na_as_null: When False (default), missing values are omitted from each dict.
        When True, missing values are included as None (clearing the field on save).
    """
    records = []
    for row in df.to_dict(orient="records"):
        clean = {}
        for k, v in row.items():
            if pd.notna(v):
                clean[k] = v.to_pydatetime() if isinstance(v, pd.Timestamp) else v
            elif na_as_null:
                clean[k] = None
        records.append(clean)
    return records
