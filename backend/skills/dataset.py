"""
Dataset building skill.

Two strictly sequenced phases over a RawTable:

1. profile(): infer the type of and profile every column, then freeze the schema.
2. normalize(): rewrite every record against that frozen schema.

Normalization refuses to start before the schema is complete, so no row can
ever observe a type decided from a partial column scan.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from core.models import ColumnProfile, Dataset, RawTable
from skills.classify import infer_column_type
from skills.ingest import NoDataError
from skills.normalize import normalize_rows
from skills.profile import profile_column

logger = logging.getLogger("uvicorn.error")


class DatasetBuilder:
    """Explicit profile-then-normalize builder for one ingestion."""

    def __init__(self, table: RawTable, name: str):
        if not table.records:
            raise NoDataError("No data found in the file.")
        self.table = table
        self.name = name
        self._columns: Optional[Tuple[ColumnProfile, ...]] = None
        self._rows: Optional[List[Dict[str, Any]]] = None

    @property
    def schema_ready(self) -> bool:
        return self._columns is not None

    def profile(self) -> List[ColumnProfile]:
        """Phase 1: infer and profile every column in header order."""
        if self._columns is None:
            profiles: List[ColumnProfile] = []
            for header in self.table.headers:
                values = [r.get(header) for r in self.table.records]
                col_type = infer_column_type(values)
                profiles.append(profile_column(header, col_type, values))
            self._columns = tuple(profiles)
        return list(self._columns)

    def normalize(self) -> List[Dict[str, Any]]:
        """Phase 2: normalize every record against the frozen schema."""
        if self._columns is None:
            raise RuntimeError("Cannot normalize rows before every column is profiled.")
        if self._rows is None:
            self._rows = normalize_rows(self.table.records, self._columns)
        return self._rows

    def build(self) -> Dataset:
        columns = self.profile()
        rows = self.normalize()
        return Dataset(name=self.name, columns=columns, rows=rows, total_rows=len(rows))


def build_dataset(table: RawTable, name: str) -> Dataset:
    """Build the canonical dataset or raise NoDataError when there are no records."""
    dataset = DatasetBuilder(table, name).build()
    logger.info(
        "Built dataset %r: %d rows, %d columns (%s)",
        dataset.name,
        dataset.total_rows,
        len(dataset.columns),
        ", ".join(f"{c.name}:{c.type.value}" for c in dataset.columns),
    )
    return dataset
