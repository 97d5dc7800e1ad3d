"""
Column profiling skill.

Builds a ColumnProfile (distinct/null counts, examples, numeric stats) from one
column's raw values. Pure: the raw values are never modified.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Sequence

from core.models import ColumnProfile, ColumnType
from core.utils import distinct_key, is_blank, to_number

logger = logging.getLogger("uvicorn.error")

EXAMPLE_COUNT = 5


# ---------------------------------------------------------------------------
# Stats helpers
# ---------------------------------------------------------------------------

def numeric_stats(values: Sequence[Any]) -> Dict[str, float]:
    """
    min/max/sum/avg over the values that coerce to a finite number.

    Returns an empty dict when no value coerces, or when the sum overflows the
    float range, so the profile fields stay absent rather than zero or inf.
    """
    nums: List[float] = []
    for v in values:
        num = to_number(v)
        if num is not None:
            nums.append(num)
    if not nums:
        return {}

    total = 0.0
    for n in nums:
        total += n
    if not math.isfinite(total):
        logger.warning("Numeric sum overflowed over %d values; stats omitted", len(nums))
        return {}
    lo, hi = min(nums), max(nums)
    # float rounding can push the mean a hair outside [min, max]
    avg = min(max(total / len(nums), lo), hi)
    return {"min": lo, "max": hi, "sum": total, "avg": avg}


def count_distinct(values: Sequence[Any]) -> int:
    return len({distinct_key(v) for v in values})


def count_nulls(values: Sequence[Any]) -> int:
    return sum(1 for v in values if is_blank(v))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def profile_column(name: str, col_type: ColumnType, values: Sequence[Any]) -> ColumnProfile:
    """Profile one column whose type has already been inferred."""
    stats: Dict[str, float] = {}
    if col_type == ColumnType.NUMBER:
        stats = numeric_stats(values)

    return ColumnProfile(
        name=name,
        type=col_type,
        distinct_count=count_distinct(values),
        null_count=count_nulls(values),
        example_values=tuple(values[:EXAMPLE_COUNT]),
        **stats,
    )
