"""
Headline indicator skill.

Always returns exactly four indicators, in a fixed order: record count,
total weight, total monetary value, unique locations. An indicator whose
column cannot be found (or has no numeric sum) renders the placeholder "-".
"""

from __future__ import annotations

import math
from typing import Dict, List, Optional

from core.models import ColumnProfile, Dataset, Indicator, IndicatorColor
from core.utils import format_currency, format_decimal, format_integer
from skills.concepts import Concept, resolve_concepts

PLACEHOLDER = "-"

LABEL_RECORDS = "Total de Registros"
LABEL_WEIGHT = "Peso Total"
LABEL_VALUE = "Valor Total"
LABEL_LOCATIONS = "Número de Cidades Únicas"


def _placeholder(label: str) -> Indicator:
    return Indicator(label=label, value=PLACEHOLDER, color=IndicatorColor.gray)


def record_count_indicator(dataset: Dataset) -> Indicator:
    return Indicator(
        label=LABEL_RECORDS,
        value=format_integer(dataset.total_rows),
        color=IndicatorColor.blue,
    )


def _has_sum(col: Optional[ColumnProfile]) -> bool:
    return col is not None and col.sum is not None and math.isfinite(col.sum)


def weight_indicator(col: Optional[ColumnProfile]) -> Indicator:
    if not _has_sum(col):
        return _placeholder(LABEL_WEIGHT)
    return Indicator(
        label=LABEL_WEIGHT,
        value=format_decimal(col.sum, max_fraction=2),
        color=IndicatorColor.green,
    )


def value_indicator(col: Optional[ColumnProfile]) -> Indicator:
    if not _has_sum(col):
        return _placeholder(LABEL_VALUE)
    return Indicator(label=LABEL_VALUE, value=format_currency(col.sum), color=IndicatorColor.blue)


def locations_indicator(col: Optional[ColumnProfile]) -> Indicator:
    if col is None:
        return _placeholder(LABEL_LOCATIONS)
    return Indicator(
        label=LABEL_LOCATIONS,
        value=format_integer(col.distinct_count),
        color=IndicatorColor.gray,
    )


def generate_indicators(dataset: Dataset) -> List[Indicator]:
    """Compute the four headline indicators for a dataset."""
    concepts: Dict[Concept, Optional[ColumnProfile]] = resolve_concepts(dataset.columns)
    return [
        record_count_indicator(dataset),
        weight_indicator(concepts[Concept.weight]),
        value_indicator(concepts[Concept.monetary_value]),
        locations_indicator(concepts[Concept.location]),
    ]
