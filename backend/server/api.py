"""
Dashboard API routes: mounted as a sub-router on the main FastAPI app.

Every route is scoped by the X-Session-Id header.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from fastapi import APIRouter, File, HTTPException, Query, Request, UploadFile

from core.config import get_settings
from core.models import SessionSnapshot
from core.storage import clear_session, load_session
from server.orchestrator import ingest_upload
from skills.browse import browse_rows
from skills.ingest import IngestionError
from skills.narrate import generate_insights

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/api", tags=["dashboard"])

INGESTION_FAILED_MESSAGE = (
    "Falha ao processar arquivo. Certifique-se de que é um Excel ou CSV válido "
    "com os cabeçalhos corretos."
)


def _require_session_id(request: Request) -> str:
    sid = request.headers.get("X-Session-Id")
    if not sid:
        raise HTTPException(status_code=400, detail="Missing X-Session-Id header.")
    return sid


def _require_snapshot(sid: str) -> SessionSnapshot:
    snapshot = _load_or_none(sid)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="No dataset loaded for this session.")
    return snapshot


def _load_or_none(sid: str) -> Optional[SessionSnapshot]:
    try:
        return load_session(sid)
    except Exception:
        logger.exception("Failed to load session %s", sid)
        return None


def _log_response(ctx: str, payload) -> None:
    """Pretty-print JSON-able payloads; fall back to str()."""
    try:
        logger.info("%s response: %s", ctx, json.dumps(payload, indent=2, default=str))
    except (TypeError, ValueError):
        logger.info("%s response (non-serializable): %s", ctx, str(payload))


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/upload")
async def upload(request: Request, file: UploadFile = File(...)):
    """Ingest a CSV/XLSX file and replace the session's dataset."""
    sid = _require_session_id(request)
    try:
        snapshot = await ingest_upload(sid, file)
    except IngestionError as e:
        logger.warning("Ingestion failed for %s: %s", file.filename, e)
        raise HTTPException(status_code=400, detail=INGESTION_FAILED_MESSAGE)

    _log_response("UPLOAD", {
        "table": snapshot.dataset.name,
        "rows": snapshot.dataset.total_rows,
        "columns": [f"{c.name} ({c.type.value})" for c in snapshot.dataset.columns],
        "indicators": [i.model_dump(mode="json") for i in snapshot.indicators],
    })
    return snapshot.model_dump(mode="json")


@router.get("/session")
async def get_current_session(request: Request):
    """Return the last saved snapshot for this session."""
    sid = _require_session_id(request)
    return _require_snapshot(sid).model_dump(mode="json")


@router.delete("/session")
async def reset_session(request: Request):
    """Discard the session's dataset (start a new analysis)."""
    sid = _require_session_id(request)
    try:
        clear_session(sid)
    except Exception:
        logger.exception("Failed to clear session %s", sid)
    return {"ok": True}


@router.get("/rows")
async def list_rows(
    request: Request,
    column: Optional[str] = Query(None),
    q: str = Query(""),
    page: int = Query(0, ge=0),
):
    """Paginated, filterable view of the normalized rows."""
    sid = _require_session_id(request)
    snapshot = _require_snapshot(sid)
    result = browse_rows(
        snapshot.dataset,
        column=column,
        query=q,
        page=page,
        page_size=get_settings().rows_page_size,
    )
    return result.model_dump(mode="json")


@router.post("/insights")
def insights(request: Request):
    """Narrative insights for the current dataset (placeholder when no LLM is configured)."""
    sid = _require_session_id(request)
    snapshot = _require_snapshot(sid)
    report = generate_insights(snapshot.dataset)
    return report.model_dump(mode="json")
