"""
In-memory persisted-session store.

One snapshot per client session under the fixed key "current"; the last write
wins and a load returns exactly the last saved snapshot (or None).
"""

from __future__ import annotations

from typing import Dict, List, Optional

from .models import AggregateChartSpec, Dataset, Indicator, SessionSnapshot

SESSION_KEY = "current"

# session_id -> {SESSION_KEY: SessionSnapshot}
SESSIONS: Dict[str, Dict[str, SessionSnapshot]] = {}


def get_session(session_id: str) -> Dict[str, SessionSnapshot]:
    if session_id not in SESSIONS:
        SESSIONS[session_id] = {}
    return SESSIONS[session_id]


def save_session(
    session_id: str,
    dataset: Dataset,
    indicators: List[Indicator],
    charts: List[AggregateChartSpec],
) -> SessionSnapshot:
    """Store (overwrite) the session's current snapshot."""
    snapshot = SessionSnapshot(dataset=dataset, indicators=list(indicators), charts=list(charts))
    get_session(session_id)[SESSION_KEY] = snapshot
    return snapshot


def load_session(session_id: str) -> Optional[SessionSnapshot]:
    return SESSIONS.get(session_id, {}).get(SESSION_KEY)


def clear_session(session_id: str) -> None:
    SESSIONS.get(session_id, {}).pop(SESSION_KEY, None)
