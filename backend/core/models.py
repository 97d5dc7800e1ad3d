"""
Core Pydantic models for the tabular insights engine.

All domain types live here so every module shares the same vocabulary.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator


# ---------------------------------------------------------------------------
# Column & Dataset
# ---------------------------------------------------------------------------

class ColumnType(str, Enum):
    STRING = "STRING"
    NUMBER = "NUMBER"
    DATE = "DATE"
    BOOLEAN = "BOOLEAN"


class ColumnProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: ColumnType = ColumnType.STRING
    distinct_count: int = 0
    null_count: int = 0
    example_values: Tuple[Any, ...] = ()
    # numeric stats, only for NUMBER columns with at least one finite value
    min: Optional[float] = None
    max: Optional[float] = None
    sum: Optional[float] = None
    avg: Optional[float] = None

    @property
    def has_stats(self) -> bool:
        return self.sum is not None


class Dataset(BaseModel):
    """Canonical in-memory dataset. Built once per ingestion, never mutated."""

    model_config = ConfigDict(frozen=True)

    name: str
    columns: Tuple[ColumnProfile, ...]
    # rows are read-only views; copy with dict(row) to get a mutable record
    rows: Tuple[Mapping[str, Any], ...]
    total_rows: int

    @field_validator("rows", mode="after")
    @classmethod
    def _freeze_rows(cls, rows: Tuple[Mapping[str, Any], ...]) -> Tuple[Mapping[str, Any], ...]:
        return tuple(MappingProxyType(dict(row)) for row in rows)

    @field_serializer("rows")
    def _dump_rows(self, rows: Tuple[Mapping[str, Any], ...]) -> List[Dict[str, Any]]:
        return [dict(row) for row in rows]

    @model_validator(mode="after")
    def _check_row_count(self) -> "Dataset":
        if self.total_rows != len(self.rows):
            raise ValueError(
                f"total_rows ({self.total_rows}) does not match row count ({len(self.rows)})"
            )
        return self

    def column(self, name: str) -> Optional[ColumnProfile]:
        for col in self.columns:
            if col.name == name:
                return col
        return None


class RawTable(BaseModel):
    """Parser output: header order plus raw records keyed by header."""

    headers: List[str]
    records: List[Dict[str, Any]]


# ---------------------------------------------------------------------------
# Indicators
# ---------------------------------------------------------------------------

class IndicatorColor(str, Enum):
    green = "green"
    blue = "blue"
    gray = "gray"
    red = "red"


class Indicator(BaseModel):
    label: str
    value: str
    color: IndicatorColor = IndicatorColor.gray


# ---------------------------------------------------------------------------
# Chart specification
# ---------------------------------------------------------------------------

class ChartKind(str, Enum):
    ranked_bar = "categorical-ranked-bar"
    distribution = "categorical-distribution"


class ChartType(str, Enum):
    bar = "bar"
    pie = "pie"


class EncodingChannel(BaseModel):
    field: str
    type: Optional[str] = None           # quantitative, nominal
    aggregate: Optional[str] = None      # sum, count


class ChartEncoding(BaseModel):
    x: Optional[EncodingChannel] = None
    y: Optional[EncodingChannel] = None
    color: Optional[EncodingChannel] = None
    theta: Optional[EncodingChannel] = None


class ChartOptions(BaseModel):
    sort: Optional[str] = None            # ascending / descending
    top_n: Optional[int] = None
    orientation: Optional[str] = None     # horizontal / vertical


class ChartPoint(BaseModel):
    category: str
    value: float


MAX_CHART_POINTS = 10


class AggregateChartSpec(BaseModel):
    kind: ChartKind
    chart_type: ChartType
    title: str = ""
    encoding: ChartEncoding = Field(default_factory=ChartEncoding)
    options: ChartOptions = Field(default_factory=ChartOptions)
    data: List[ChartPoint] = Field(default_factory=list, max_length=MAX_CHART_POINTS)
    fields_used: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Narrative insights
# ---------------------------------------------------------------------------

class InsightReport(BaseModel):
    trends: List[str] = Field(default_factory=list)
    anomalies: List[str] = Field(default_factory=list)
    opportunities: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    placeholder: bool = False


# ---------------------------------------------------------------------------
# Session & row browsing
# ---------------------------------------------------------------------------

class SessionSnapshot(BaseModel):
    dataset: Dataset
    indicators: List[Indicator] = Field(default_factory=list)
    charts: List[AggregateChartSpec] = Field(default_factory=list)
    saved_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"))


class RowPage(BaseModel):
    column: Optional[str] = None
    query: str = ""
    page: int = 0
    page_size: int = 10
    total_matches: int = 0
    total_pages: int = 0
    rows: List[Dict[str, Any]] = Field(default_factory=list)
