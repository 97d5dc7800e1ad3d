"""
Tabular file parsing skill.

Turns uploaded bytes into a RawTable: the header row becomes the record keys,
missing cells become None. Only the first sheet of a workbook is read.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from core.config import get_settings
from core.models import RawTable
from core.utils import is_missing

logger = logging.getLogger("uvicorn.error")

CSV_EXTENSIONS = {"csv", "txt", "tsv"}
EXCEL_EXTENSIONS = {"xlsx", "xlsm", "xls"}

_CSV_DELIMITERS = (",", ";", "\t", "|")
_SNIFF_SAMPLE_CHARS = 64 * 1024


class IngestionError(RuntimeError):
    """Raised when an uploaded file cannot be turned into a dataset."""


class NoDataError(IngestionError):
    """Raised when a file parses but yields zero records."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def file_extension(filename: str) -> str:
    return (filename.rsplit(".", 1)[1].lower() if "." in filename else "").strip()


def _raw_cell(value: Any) -> Any:
    """Unwrap pandas/numpy scalars into plain Python values."""
    if is_missing(value):
        return None
    if isinstance(value, str):
        return value if value != "" else None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, np.generic):
        return value.item()
    return value


def _sniff_delimiter(text: str) -> str:
    """csv.Sniffer over the first lines; falls back to counting in the header."""
    sample = text[:_SNIFF_SAMPLE_CHARS]
    if len(text) > _SNIFF_SAMPLE_CHARS:
        sample = sample.rsplit("\n", 1)[0]
    try:
        return csv.Sniffer().sniff(sample, delimiters="".join(_CSV_DELIMITERS)).delimiter
    except csv.Error:
        header = sample.split("\n", 1)[0]
        best = max(_CSV_DELIMITERS, key=header.count)
        return best if header.count(best) > 0 else ","


def _decode(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        # latin-1 maps every byte, so this cannot fail
        return content.decode("latin-1")


def _read_csv(content: bytes) -> pd.DataFrame:
    text = _decode(content)
    return pd.read_csv(
        io.StringIO(text),
        sep=_sniff_delimiter(text),
        dtype=object,
        keep_default_na=False,
    )


def _read_excel(content: bytes) -> pd.DataFrame:
    return pd.read_excel(io.BytesIO(content), sheet_name=0, dtype=object)


def frame_to_table(df: pd.DataFrame) -> RawTable:
    headers = [str(c) for c in df.columns]
    records: List[Dict[str, Any]] = []
    for values in df.itertuples(index=False, name=None):
        records.append({h: _raw_cell(v) for h, v in zip(headers, values)})
    return RawTable(headers=headers, records=records)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def read_table(content: bytes, filename: str) -> RawTable:
    """
    Parse file bytes into headers + raw records.

    Raises NoDataError for empty input and IngestionError for anything the
    parser cannot read.
    """
    settings = get_settings()
    if not content:
        raise NoDataError("No data found in the file.")
    if len(content) > settings.max_upload_bytes:
        raise IngestionError(
            f"File too large ({len(content)} bytes, limit {settings.max_upload_bytes})."
        )

    ext = file_extension(filename)
    if ext in CSV_EXTENSIONS:
        reader = _read_csv
    elif ext in EXCEL_EXTENSIONS:
        reader = _read_excel
    else:
        raise IngestionError(f"Unsupported file type '.{ext}'. Use .csv or .xlsx.")

    try:
        df = reader(content)
    except pd.errors.EmptyDataError as exc:
        raise NoDataError("No data found in the file.") from exc
    except IngestionError:
        raise
    except Exception as exc:
        logger.exception("Failed to parse %s", filename)
        raise IngestionError(f"Failed to read {filename}: {exc}") from exc

    return frame_to_table(df)
