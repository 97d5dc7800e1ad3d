"""
Row browsing skill: filtered, paginated view over the normalized rows.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional, Sequence

from core.models import Dataset, RowPage
from core.utils import is_missing, render_text

DEFAULT_FILTER_HINT = "PEDIDO"


def default_filter_column(dataset: Dataset) -> Optional[str]:
    """First column whose name contains PEDIDO, else the first column."""
    for col in dataset.columns:
        if DEFAULT_FILTER_HINT in col.name.upper():
            return col.name
    return dataset.columns[0].name if dataset.columns else None


def filter_rows(rows: Sequence[Mapping[str, Any]], column: Optional[str], query: str) -> Sequence[Mapping[str, Any]]:
    if not query or not column:
        return rows
    needle = query.lower()
    matched = []
    for row in rows:
        cell = row.get(column)
        if is_missing(cell):
            continue
        if needle in render_text(cell).lower():
            matched.append(row)
    return matched


def browse_rows(
    dataset: Dataset,
    column: Optional[str] = None,
    query: str = "",
    page: int = 0,
    page_size: int = 10,
) -> RowPage:
    """
    Return one page of rows whose `column` text contains `query`.

    Unknown columns fall back to the default filter column; pages past the end
    come back empty.
    """
    if column is None or dataset.column(column) is None:
        column = default_filter_column(dataset)
    page_size = max(1, page_size)
    page = max(0, page)

    matched = filter_rows(dataset.rows, column, query)
    start = page * page_size
    return RowPage(
        column=column,
        query=query,
        page=page,
        page_size=page_size,
        total_matches=len(matched),
        total_pages=math.ceil(len(matched) / page_size),
        rows=[dict(row) for row in matched[start:start + page_size]],
    )
