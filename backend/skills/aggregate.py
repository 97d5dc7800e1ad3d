"""
Aggregation planning skill: categorical aggregates shaped for charts.

Each chart checks its own preconditions; a chart whose columns cannot be
located is simply left out. Never raises.
"""

from __future__ import annotations

import math
from typing import Dict, List, Optional, Tuple

from core.models import (
    MAX_CHART_POINTS,
    AggregateChartSpec,
    ChartEncoding,
    ChartKind,
    ChartOptions,
    ChartPoint,
    ChartType,
    ColumnProfile,
    Dataset,
    EncodingChannel,
)
from core.utils import is_blank, render_text, to_number
from skills.concepts import Concept, resolve_concepts

UNDEFINED_CATEGORY = "Indefinido"


# ---------------------------------------------------------------------------
# Grouping helpers
# ---------------------------------------------------------------------------

def category_of(value) -> str:
    return UNDEFINED_CATEGORY if is_blank(value) else render_text(value)


def top_groups(totals: Dict[str, float], limit: int = MAX_CHART_POINTS) -> List[ChartPoint]:
    """
    Sort descending by value and cap. Ties keep first-encounter order (stable sort).
    Groups whose total overflowed the float range are left out.
    """
    finite = [(k, v) for k, v in totals.items() if math.isfinite(v)]
    ranked: List[Tuple[str, float]] = sorted(finite, key=lambda kv: kv[1], reverse=True)
    return [ChartPoint(category=k, value=v) for k, v in ranked[:limit]]


def sum_by_category(dataset: Dataset, category: str, value: str) -> Dict[str, float]:
    totals: Dict[str, float] = {}
    for row in dataset.rows:
        key = category_of(row.get(category))
        totals[key] = totals.get(key, 0.0) + (to_number(row.get(value)) or 0.0)
    return totals


def count_by_category(dataset: Dataset, category: str) -> Dict[str, float]:
    counts: Dict[str, float] = {}
    for row in dataset.rows:
        key = category_of(row.get(category))
        counts[key] = counts.get(key, 0) + 1
    return counts


# ---------------------------------------------------------------------------
# Chart builders
# ---------------------------------------------------------------------------

def ranked_bar_chart(
    dataset: Dataset, category: ColumnProfile, value: ColumnProfile
) -> AggregateChartSpec:
    totals = sum_by_category(dataset, category.name, value.name)
    return AggregateChartSpec(
        kind=ChartKind.ranked_bar,
        chart_type=ChartType.bar,
        title=f"Top {MAX_CHART_POINTS} {category.name} por {value.name}",
        encoding=ChartEncoding(
            x=EncodingChannel(field="value", type="quantitative", aggregate="sum"),
            y=EncodingChannel(field="category", type="nominal"),
        ),
        options=ChartOptions(sort="descending", top_n=MAX_CHART_POINTS, orientation="horizontal"),
        data=top_groups(totals),
        fields_used=[category.name, value.name],
    )


def distribution_chart(dataset: Dataset, category: ColumnProfile) -> AggregateChartSpec:
    counts = count_by_category(dataset, category.name)
    return AggregateChartSpec(
        kind=ChartKind.distribution,
        chart_type=ChartType.pie,
        title=f"Distribuição de {category.name}",
        encoding=ChartEncoding(
            theta=EncodingChannel(field="value", type="quantitative", aggregate="count"),
            color=EncodingChannel(field="category", type="nominal"),
        ),
        options=ChartOptions(sort="descending", top_n=MAX_CHART_POINTS),
        data=top_groups(counts),
        fields_used=[category.name],
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def plan_charts(dataset: Dataset) -> List[AggregateChartSpec]:
    """Return zero, one or two chart specs (ranked bar first, then distribution)."""
    concepts = resolve_concepts(dataset.columns)
    category: Optional[ColumnProfile] = concepts[Concept.chart_category]
    value: Optional[ColumnProfile] = concepts[Concept.chart_value]

    charts: List[AggregateChartSpec] = []
    if category is not None and value is not None:
        charts.append(ranked_bar_chart(dataset, category, value))
    if category is not None:
        charts.append(distribution_chart(dataset, category))
    return charts
