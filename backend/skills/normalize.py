"""
Row normalization skill.

Rewrites raw records into typed rows against an already-decided schema. A bad
cell degrades to its type's default; it never fails the whole record.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import numpy as np

from core.models import ColumnProfile, ColumnType
from core.utils import is_blank, parse_date, render_text, to_number


def normalize_number(raw: Any) -> float:
    num = to_number(raw)
    return 0.0 if num is None else num


def normalize_string(raw: Any) -> str:
    return render_text(raw)


def normalize_date(raw: Any) -> Optional[datetime]:
    if is_blank(raw):
        return None
    return parse_date(raw)


def normalize_boolean(raw: Any) -> Optional[bool]:
    """Native bools pass through, 'true'/'false' text parses, anything else is absent."""
    if isinstance(raw, (bool, np.bool_)):
        return bool(raw)
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text == "true":
            return True
        if text == "false":
            return False
    return None


_NORMALIZERS: Dict[ColumnType, Callable[[Any], Any]] = {
    ColumnType.NUMBER: normalize_number,
    ColumnType.STRING: normalize_string,
    ColumnType.DATE: normalize_date,
    ColumnType.BOOLEAN: normalize_boolean,
}


def normalize_value(raw: Any, col_type: ColumnType) -> Any:
    return _NORMALIZERS[col_type](raw)


def normalize_row(record: Mapping[str, Any], columns: Sequence[ColumnProfile]) -> Dict[str, Any]:
    """One entry per column, in column order; absent keys are treated as null."""
    return {col.name: normalize_value(record.get(col.name), col.type) for col in columns}


def normalize_rows(
    records: Sequence[Mapping[str, Any]],
    columns: Sequence[ColumnProfile],
) -> List[Dict[str, Any]]:
    return [normalize_row(r, columns) for r in records]
