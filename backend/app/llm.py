import json
import logging
import re
from typing import Any, Dict, Iterable

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from .llm_loader import LLMConfigError, get_chat_model

logger = logging.getLogger("uvicorn.error")

JSON_ONLY_SUFFIX = "\nReturn ONE JSON object. No prose, no code fences."


class LLMError(RuntimeError):
    pass


class LLMUnavailableError(LLMError):
    """No usable provider: missing credentials, package, or unknown provider name."""


def _get_llm(temperature: float = 0.1):
    try:
        return get_chat_model(temperature=temperature)
    except LLMConfigError as exc:
        raise LLMUnavailableError(str(exc)) from exc


# ---------- reply text ----------


def _join_chunks(chunks: Iterable[Any]) -> str:
    out = []
    for chunk in chunks:
        if isinstance(chunk, dict) and isinstance(chunk.get("text"), str):
            out.append(chunk["text"])
        else:
            out.append(chunk if isinstance(chunk, str) else str(chunk))
    return "".join(out)


def content_text(content: Any) -> str:
    """Flatten LangChain message content (str, chunk list, dict or AIMessage) to text."""
    if content is None:
        return ""
    if isinstance(content, AIMessage):
        content = content.content
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return _join_chunks(content)
    if isinstance(content, dict):
        text = content.get("text", content.get("content"))
        return text if isinstance(text, str) else str(content)
    return str(content)


def reply_text(resp: Any) -> str:
    """
    Text of a chat reply. Some providers (NVIDIA reasoning models) leave
    `content` empty and put the answer in additional_kwargs instead.
    """
    text = content_text(getattr(resp, "content", None))
    if text:
        return text
    extras = getattr(resp, "additional_kwargs", None)
    if not isinstance(extras, dict):
        return ""
    fallback = extras.get("reasoning_content") or extras.get("content")
    return fallback if isinstance(fallback, str) and fallback.strip() else ""


# ---------- JSON recovery ----------

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE | re.MULTILINE)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_PY_LITERAL = re.compile(r"\b(None|True|False)\b")
_PY_TO_JSON = {"None": "null", "True": "true", "False": "false"}


def _outermost_block(text: str) -> str:
    """Slice from the first opening bracket to its matching close."""
    opener = re.search(r"[\[{]", text)
    if opener is None:
        raise ValueError("reply contains no JSON")
    depth = 0
    for pos in range(opener.start(), len(text)):
        if text[pos] in "{[":
            depth += 1
        elif text[pos] in "}]":
            depth -= 1
            if depth == 0:
                return text[opener.start():pos + 1]
    raise ValueError("reply JSON is not terminated")


def _loads_lenient(block: str) -> Any:
    try:
        return json.loads(block)
    except ValueError:
        patched = _TRAILING_COMMA.sub(r"\1", block)
        patched = _PY_LITERAL.sub(lambda m: _PY_TO_JSON[m.group(1)], patched)
        return json.loads(patched)


def load_json_object(text: str) -> Dict[str, Any]:
    """Parse an LLM reply into a dict, tolerating fences, prose and trailing commas."""
    cleaned = _FENCE.sub("", (text or "").strip())
    if not cleaned.strip():
        raise LLMError("empty LLM response text")
    try:
        parsed = json.loads(cleaned)
    except ValueError:
        try:
            parsed = _loads_lenient(_outermost_block(cleaned))
        except ValueError as e:
            raise LLMError(f"json_parse_failed: {e}") from e

    if isinstance(parsed, list):
        parsed = next((item for item in parsed if isinstance(item, dict)), None)
    if not isinstance(parsed, dict):
        raise LLMError(f"expected a JSON object, got {type(parsed).__name__}")
    return parsed


# ---------- public ----------


def chat_json(system_prompt: str, user_message: str, *, max_tokens: int = 1024) -> Dict[str, Any]:
    """One system + one user turn; the reply must be a JSON object."""
    llm = _get_llm().bind(
        extra_body={
            "response_format": {"type": "json_object"},
            "max_tokens": max_tokens,
        }
    )
    resp = llm.invoke([
        SystemMessage(system_prompt + JSON_ONLY_SUFFIX),
        HumanMessage(user_message),
    ])
    text = reply_text(resp)
    if not text.strip():
        raise LLMError(f"no_content: additional={getattr(resp, 'additional_kwargs', None)}")
    logger.debug("LLM reply (%d chars)", len(text))
    return load_json_object(text)
