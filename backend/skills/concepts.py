"""
Business-concept resolution skill.

Maps free-form column names onto a small fixed set of concepts through an
explicit ranked pattern table. For each concept the patterns are tried in
order; the first column (in declared order) matching a pattern wins.
Matching is case-insensitive.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from core.models import ColumnProfile


class Concept(str, Enum):
    weight = "weight"
    monetary_value = "monetary_value"
    location = "location"
    chart_category = "chart_category"
    chart_value = "chart_value"


class MatchMode(str, Enum):
    equals = "equals"
    contains = "contains"


Pattern = Tuple[MatchMode, str]

CONCEPT_PATTERNS: Dict[Concept, List[Pattern]] = {
    Concept.weight: [
        (MatchMode.contains, "PESO"),
        (MatchMode.contains, "WEIGHT"),
    ],
    Concept.monetary_value: [
        (MatchMode.equals, "VALOR"),
        (MatchMode.contains, "VALOR"),
        (MatchMode.contains, "AMOUNT"),
    ],
    Concept.location: [
        (MatchMode.contains, "Cidades"),
        (MatchMode.contains, "Cidade"),
        (MatchMode.contains, "City"),
    ],
    # charts group by city names only, and sum VALOR columns only
    Concept.chart_category: [
        (MatchMode.contains, "Cidades"),
        (MatchMode.contains, "Cidade"),
    ],
    Concept.chart_value: [
        (MatchMode.equals, "VALOR"),
        (MatchMode.contains, "VALOR"),
    ],
}


def name_matches(name: str, mode: MatchMode, pattern: str) -> bool:
    name_u, pattern_u = name.upper(), pattern.upper()
    if mode == MatchMode.equals:
        return name_u == pattern_u
    return pattern_u in name_u


def find_column(columns: Sequence[ColumnProfile], patterns: Sequence[Pattern]) -> Optional[ColumnProfile]:
    for mode, pattern in patterns:
        for col in columns:
            if name_matches(col.name, mode, pattern):
                return col
    return None


def resolve_concepts(columns: Sequence[ColumnProfile]) -> Dict[Concept, Optional[ColumnProfile]]:
    """Resolve every concept once; concepts with no matching column map to None."""
    return {concept: find_column(columns, patterns) for concept, patterns in CONCEPT_PATTERNS.items()}
