"""
Column type inference skill.

Classifies one column's raw values into a ColumnType from a full pass over the
column. Blank cells are ignored; the remaining cells vote NUMBER / DATE /
BOOLEAN and a class wins only with a share strictly above TYPE_THRESHOLD.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import numpy as np

from core.models import ColumnType
from core.utils import is_blank, is_native_date, is_native_number, is_numeric_text, parse_date

TYPE_THRESHOLD = 0.8

# Strings this short (or shorter) are never tried as dates
_MIN_DATE_TEXT_LEN = 5

# Evaluation order matters: first type to clear the threshold wins
_PRIORITY = (ColumnType.NUMBER, ColumnType.DATE, ColumnType.BOOLEAN)


def classify_value(value: Any) -> Optional[ColumnType]:
    """Return the class a single non-blank cell votes for, or None."""
    if isinstance(value, (bool, np.bool_)):
        return ColumnType.BOOLEAN
    if is_native_number(value):
        return ColumnType.NUMBER
    if is_native_date(value):
        return ColumnType.DATE
    if not isinstance(value, str):
        return None
    if is_numeric_text(value):
        return ColumnType.NUMBER
    if looks_like_date_text(value):
        return ColumnType.DATE
    return None


def looks_like_date_text(text: str) -> bool:
    # Purely-digit strings are excluded so that codes like "202301" are not dates.
    if len(text) <= _MIN_DATE_TEXT_LEN or text.isdigit():
        return False
    return parse_date(text) is not None


def infer_column_type(values: Iterable[Any]) -> ColumnType:
    """Infer the semantic type of a column from all of its raw values."""
    counts: Dict[ColumnType, int] = {t: 0 for t in _PRIORITY}
    valid_count = 0

    for value in values:
        if is_blank(value):
            continue
        valid_count += 1
        kind = classify_value(value)
        if kind is not None:
            counts[kind] += 1

    if valid_count == 0:
        return ColumnType.STRING

    for kind in _PRIORITY:
        if counts[kind] / valid_count > TYPE_THRESHOLD:
            return kind
    return ColumnType.STRING
