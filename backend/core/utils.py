"""
Shared value helpers: blank detection, coercion, text rendering, display formatting.

Pure functions, free of I/O.
"""

from __future__ import annotations

import math
import numbers
import re
import warnings
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd


# ---------------------------------------------------------------------------
# Blank detection
# ---------------------------------------------------------------------------

def is_missing(value: Any) -> bool:
    """True for None and pandas/numpy missing markers (NaN, NaT)."""
    if value is None:
        return True
    if isinstance(value, (str, bytes, list, tuple, dict, set)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def is_blank(value: Any) -> bool:
    """Missing or the empty string. Whitespace-only text is *not* blank."""
    return is_missing(value) or (isinstance(value, str) and value == "")


# ---------------------------------------------------------------------------
# Numeric coercion
# ---------------------------------------------------------------------------

_NUMERIC_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def is_numeric_text(text: str) -> bool:
    """Whole-string decimal literal check (no currency, no suffixes, no nan/inf)."""
    return bool(_NUMERIC_RE.fullmatch(text.strip()))


def is_native_number(value: Any) -> bool:
    return isinstance(value, numbers.Number) and not isinstance(value, (bool, np.bool_))


def to_number(value: Any) -> Optional[float]:
    """
    Coerce a raw cell to a finite float.

    Returns None for missing, unparseable or non-finite values. Booleans count
    as 1/0.
    """
    if is_missing(value):
        return None
    if isinstance(value, (bool, np.bool_)):
        return 1.0 if value else 0.0
    if isinstance(value, numbers.Number):
        try:
            num = float(value)
        except (TypeError, ValueError, OverflowError):
            return None
        return num if math.isfinite(num) else None
    if isinstance(value, str):
        if not is_numeric_text(value):
            return None
        num = float(value.strip())
        return num if math.isfinite(num) else None
    return None


# ---------------------------------------------------------------------------
# Date coercion
# ---------------------------------------------------------------------------

def is_native_date(value: Any) -> bool:
    return isinstance(value, (datetime, date)) and not is_missing(value)


def parse_date(value: Any) -> Optional[datetime]:
    """Parse a raw cell into a datetime; None when it is not a valid calendar date."""
    if is_missing(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    with warnings.catch_warnings():
        # pandas warns when it has to guess the format of a single string
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


# ---------------------------------------------------------------------------
# Text rendering
# ---------------------------------------------------------------------------

NULL_TEXT = "null"


def render_text(value: Any) -> str:
    """Plain textual rendering of a cell; missing values render as ''."""
    if is_missing(value):
        return ""
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if isinstance(value, (float, np.floating)):
        if math.isfinite(value) and float(value).is_integer():
            return str(int(value))
        return str(float(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def distinct_key(value: Any) -> str:
    """Rendering used for distinct counts: missing values share the 'null' bucket."""
    if is_missing(value):
        return NULL_TEXT
    return render_text(value)


# ---------------------------------------------------------------------------
# JSON safety
# ---------------------------------------------------------------------------

def json_safe_value(value: Any) -> Any:
    if is_missing(value):
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, numbers.Number):
        num = float(value)
        if not math.isfinite(num):
            return None
        return int(num) if isinstance(value, numbers.Integral) else num
    return value


def records_json_safe(rows: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Convert row dicts so json.dumps works (ISO dates, NaN/inf -> None)."""
    return [{k: json_safe_value(v) for k, v in row.items()} for row in rows]


# ---------------------------------------------------------------------------
# Display formatting (fixed pt-BR locale)
# ---------------------------------------------------------------------------

_THOUSANDS_SEP = "."
_DECIMAL_SEP = ","
_CURRENCY_PREFIX = "R$\u00a0"


def format_decimal(value: float, max_fraction: int = 3, min_fraction: int = 0) -> str:
    """Group thousands with '.' and use ',' as decimal mark, rounding half up."""
    if not math.isfinite(value):
        raise ValueError(f"cannot format non-finite number {value!r}")
    exact = Decimal(str(value))
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the fraction digits
        ctx.prec = max(60, exact.adjusted() + max_fraction + 2)
        q = exact.quantize(Decimal(1).scaleb(-max_fraction), rounding=ROUND_HALF_UP)
        sign = "-" if q < 0 else ""
        int_part, _, frac = f"{abs(q):f}".partition(".")
    frac = frac.rstrip("0").ljust(min_fraction, "0")
    grouped = f"{int(int_part):,}".replace(",", _THOUSANDS_SEP)
    return sign + grouped + (_DECIMAL_SEP + frac if frac else "")


def format_integer(value: int) -> str:
    return format_decimal(value, max_fraction=0)


def format_currency(value: float) -> str:
    """BRL currency with a no-break space after the symbol, always two fraction digits."""
    body = format_decimal(abs(value), max_fraction=2, min_fraction=2)
    sign = "-" if value < 0 and body.strip("0,.") else ""
    return f"{sign}{_CURRENCY_PREFIX}{body}"

