"""
Ingestion orchestrator: the one asynchronous boundary of the engine.

Awaits the uploaded bytes, then runs the synchronous pipeline:
parse -> build dataset -> (indicators || charts) -> persist snapshot.
A failed ingestion raises IngestionError and leaves the previous session
snapshot untouched; a failed save is only logged.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List

from fastapi import UploadFile

from core.models import AggregateChartSpec, Dataset, Indicator, SessionSnapshot
from core.storage import save_session
from skills.aggregate import plan_charts
from skills.dataset import build_dataset
from skills.indicators import generate_indicators
from skills.ingest import IngestionError, read_table

logger = logging.getLogger("uvicorn.error")

_executor = ThreadPoolExecutor(max_workers=2)


def build_from_bytes(content: bytes, filename: str) -> Dataset:
    try:
        table = read_table(content, filename)
        return build_dataset(table, filename)
    except IngestionError:
        raise
    except Exception as e:
        logger.exception("Unexpected failure while building dataset from %s", filename)
        raise IngestionError(f"Failed to process {filename}: {e}") from e


def persist_snapshot(
    session_id: str,
    dataset: Dataset,
    indicators: List[Indicator],
    charts: List[AggregateChartSpec],
) -> SessionSnapshot:
    try:
        return save_session(session_id, dataset, indicators, charts)
    except Exception:
        logger.exception("Failed to save session %s; continuing without persistence", session_id)
        return SessionSnapshot(dataset=dataset, indicators=indicators, charts=charts)


async def ingest_bytes(session_id: str, content: bytes, filename: str) -> SessionSnapshot:
    loop = asyncio.get_running_loop()

    dataset = await loop.run_in_executor(_executor, build_from_bytes, content, filename)

    # Both consume the same frozen dataset; order does not matter.
    indicators, charts = await asyncio.gather(
        loop.run_in_executor(_executor, generate_indicators, dataset),
        loop.run_in_executor(_executor, plan_charts, dataset),
    )

    snapshot = persist_snapshot(session_id, dataset, indicators, charts)
    logger.info(
        "Ingested %s for session %s: %d rows, %d indicators, %d charts",
        filename, session_id, dataset.total_rows, len(indicators), len(charts),
    )
    return snapshot


async def ingest_upload(session_id: str, upload: UploadFile) -> SessionSnapshot:
    """Read an uploaded file and replace the session's dataset with it."""
    content = await upload.read()
    filename = upload.filename or "table.csv"
    return await ingest_bytes(session_id, content, filename)
