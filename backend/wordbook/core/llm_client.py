from __future__ import annotations

import logging

from .llm_provider import LLMProvider, UnavailableLLMProvider, build_provider

logger = logging.getLogger(__name__)

# One handle per process, set up by the startup hook.
_provider: LLMProvider = UnavailableLLMProvider()


def _describe_key(key: str | None) -> str:
    return f"present (length {len(key)})" if key else "missing"


def init_provider(settings) -> LLMProvider:
    global _provider
    logger.info(
        "LLM keys: deepseek %s, gemini %s",
        _describe_key(settings.deepseek_api_key),
        _describe_key(settings.gemini_api_key),
    )
    _provider = build_provider(settings)
    if _provider.available:
        logger.info("LLM provider ready: %s (%s)", _provider.name, _provider.model)
    else:
        logger.warning("LLM provider unavailable, new words will get placeholder content")
    return _provider


async def close_provider() -> None:
    global _provider
    await _provider.aclose()
    _provider = UnavailableLLMProvider()


# FastAPI dependency
def get_provider() -> LLMProvider:
    return _provider
