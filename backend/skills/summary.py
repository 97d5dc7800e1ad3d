"""
Profile summary skill: the compact, JSON-safe view of a dataset sent to the LLM.
"""

from __future__ import annotations

from typing import Any, Dict, List

from core.models import Dataset
from core.utils import records_json_safe

DEFAULT_SAMPLE_ROWS = 10


def summarize_dataset(dataset: Dataset, sample_rows: int = DEFAULT_SAMPLE_ROWS) -> Dict[str, Any]:
    """Total rows, per-column type/min/max/avg/nullCount, and the first normalized rows."""
    columns: List[Dict[str, Any]] = [
        {
            "name": c.name,
            "type": c.type.value,
            "min": c.min,
            "max": c.max,
            "avg": c.avg,
            "nullCount": c.null_count,
        }
        for c in dataset.columns
    ]
    return {
        "totalRows": dataset.total_rows,
        "columns": columns,
        "sampleData": records_json_safe(dataset.rows[:sample_rows]),
    }
