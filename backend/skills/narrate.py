"""
Narration skill: asks the LLM for trends, anomalies, opportunities and
recommendations over a dataset summary.

Never raises: without a configured provider, or on any LLM failure, a fixed
placeholder report (placeholder=True) is returned instead.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

from app.llm import LLMUnavailableError, chat_json
from app.prompts import INSIGHTS_SYSTEM_PROMPT, INSIGHTS_USER_TEMPLATE
from core.config import get_settings
from core.models import Dataset, InsightReport
from skills.summary import summarize_dataset

logger = logging.getLogger("uvicorn.error")

# Track whether we've already warned about LLM unavailability this process
_llm_warn_logged = False

INSIGHT_SECTIONS = ("trends", "anomalies", "opportunities", "recommendations")

MISSING_KEY_REPORT = InsightReport(
    trends=["Please configure your LLM API key to see real trends."],
    anomalies=["API key missing."],
    opportunities=["Add LLM_API_KEY to .env"],
    recommendations=["Set LLM_PROVIDER and LLM_API_KEY, then restart the server."],
    placeholder=True,
)

FAILED_REPORT = InsightReport(
    trends=["Analysis failed."],
    anomalies=["Could not process data."],
    opportunities=[],
    recommendations=["Try again later."],
    placeholder=True,
)


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None and str(v).strip()]
    return [str(value)]


def report_from_llm(result: Dict[str, Any]) -> InsightReport:
    return InsightReport(**{key: _as_str_list(result.get(key)) for key in INSIGHT_SECTIONS})


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def generate_insights(dataset: Dataset) -> InsightReport:
    """Narrative insights for a dataset, or a placeholder report when the LLM is unavailable."""
    global _llm_warn_logged
    summary = summarize_dataset(dataset, sample_rows=get_settings().insights_sample_rows)
    user_msg = INSIGHTS_USER_TEMPLATE.format(summary=json.dumps(summary, indent=2, default=str))

    try:
        result = chat_json(INSIGHTS_SYSTEM_PROMPT, user_msg)
    except LLMUnavailableError as e:
        if not _llm_warn_logged:
            logger.warning("No LLM configured, returning placeholder insights: %s", e)
            _llm_warn_logged = True
        return MISSING_KEY_REPORT.model_copy(deep=True)
    except Exception:
        logger.exception("Insight generation failed for dataset %r", dataset.name)
        return FAILED_REPORT.model_copy(deep=True)

    return report_from_llm(result)
