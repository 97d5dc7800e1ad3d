"""LLM provider loader.

Builds the chat model used for narrative insights from LLM_PROVIDER, LLM_MODEL,
LLM_API_KEY and LLM_BASE_URL. A missing package or API key raises
LLMConfigError so callers can fall back to a placeholder report.
"""

from __future__ import annotations

from typing import Callable, Dict

from langchain_core.language_models.chat_models import BaseChatModel

from core.config import env

DEFAULT_NVIDIA_BASE = "https://integrate.api.nvidia.com/v1"


class LLMConfigError(RuntimeError):
    """Raised when the requested LLM provider cannot be initialised."""


def _resolve_provider() -> str:
    return (env("LLM_PROVIDER", "groq") or "groq").lower()


def _resolve_model(default: str) -> str:
    return env("LLM_MODEL", default) or default


def _require_key(provider: str, *keys: str) -> str:
    for key in keys:
        value = env(key)
        if value:
            return value
    raise LLMConfigError(
        f"{provider} provider selected but no API key found. Set {' or '.join(keys)}."
    )


def _missing_package(provider: str, package: str) -> str:
    return (
        f"{provider} provider selected but {package} is not installed. "
        f"Run `pip install {package}` or switch LLM_PROVIDER."
    )


def _build_groq(temperature: float) -> BaseChatModel:
    try:
        from langchain_groq import ChatGroq  # type: ignore
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise LLMConfigError(_missing_package("Groq", "langchain-groq")) from exc

    api_key = _require_key("Groq", "LLM_API_KEY", "GROQ_API_KEY")
    return ChatGroq(
        model=_resolve_model("llama-3.1-8b-instant"),
        temperature=temperature,
        groq_api_key=api_key,
    )


def _build_nvidia(temperature: float) -> BaseChatModel:
    try:
        from langchain_nvidia_ai_endpoints import ChatNVIDIA  # type: ignore
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise LLMConfigError(_missing_package("NVIDIA", "langchain-nvidia-ai-endpoints")) from exc

    api_key = _require_key("NVIDIA", "LLM_API_KEY", "NVIDIA_API_KEY", "NVCF_API_KEY")
    base_url = env("LLM_BASE_URL", DEFAULT_NVIDIA_BASE) or DEFAULT_NVIDIA_BASE
    return ChatNVIDIA(
        model=_resolve_model("meta/llama-3.1-8b-instruct"),
        temperature=temperature,
        base_url=base_url.rstrip("/"),
        api_key=api_key,
    )


def _build_openai(temperature: float) -> BaseChatModel:
    try:
        from langchain_openai import ChatOpenAI  # type: ignore
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise LLMConfigError(_missing_package("OpenAI", "langchain-openai")) from exc

    kwargs = {
        "model": _resolve_model("gpt-4o-mini"),
        "temperature": temperature,
        "api_key": _require_key("OpenAI", "LLM_API_KEY", "OPENAI_API_KEY"),
    }
    base_url = env("LLM_BASE_URL") or env("OPENAI_BASE_URL")
    if base_url:
        kwargs["base_url"] = base_url.rstrip("/")
    return ChatOpenAI(**kwargs)


_PROVIDERS: Dict[str, Callable[[float], BaseChatModel]] = {
    "groq": _build_groq,
    "nvidia": _build_nvidia,
    "nv": _build_nvidia,
    "nvcf": _build_nvidia,
    "openai": _build_openai,
    "oa": _build_openai,
}


def get_provider_name() -> str:
    return _resolve_provider()


def get_chat_model(temperature: float = 0.1) -> BaseChatModel:
    """Return a LangChain chat model for the configured provider."""
    provider = _resolve_provider()
    builder = _PROVIDERS.get(provider)
    if builder is None:
        raise LLMConfigError(
            f"Unsupported LLM_PROVIDER '{provider}'. Expected 'groq', 'nvidia' or 'openai'."
        )
    return builder(temperature)
