from __future__ import annotations

import logging
from typing import Any, Dict

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from ..models import Word
from .llm_provider import LLMProvider, LLMRateLimitError
from .prompts import (
    CONFIG_ERROR_DEFINITION,
    CONFIG_ERROR_EXAMPLE,
    GENERATION_FAILED_DEFINITION,
    GENERATION_FAILED_EXAMPLE,
    build_word_prompt,
)
from .sanitizer import parse_llm_json
from .word_repository import WordFields, create_word, upsert_word

logger = logging.getLogger(__name__)


def _pick_str(info: Dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = info.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def map_word_info(info: Dict[str, Any]) -> WordFields:
    """
    Map the model's JSON onto our columns field by field.
    Models drift on key names, so a few spellings are accepted.
    """
    return WordFields(
        definition=_pick_str(info, "meaning", "definition") or GENERATION_FAILED_DEFINITION,
        example=_pick_str(info, "example") or GENERATION_FAILED_EXAMPLE,
        uk_phonetic=_pick_str(info, "ukPhonetic", "uk_phonetic") or "",
        us_phonetic=_pick_str(info, "usPhonetic", "us_phonetic") or "",
    )


async def generate_word_fields(provider: LLMProvider, text: str) -> WordFields:
    """
    Ask the provider about one word. Never raises except for rate limits:
    every other failure comes back as placeholder fields.
    """
    if not provider.available:
        logger.warning("No LLM configured, storing placeholder for %r", text)
        return WordFields(definition=CONFIG_ERROR_DEFINITION, example=CONFIG_ERROR_EXAMPLE)

    try:
        resp = await provider.generate(build_word_prompt(text))
        info = parse_llm_json(resp.content)
    except LLMRateLimitError:
        logger.warning("%s rate limited while looking up %r", provider.name, text)
        raise
    except Exception:
        logger.exception("Lookup of %r via %s failed, storing placeholder", text, provider.name)
        return WordFields(
            definition=GENERATION_FAILED_DEFINITION,
            example=GENERATION_FAILED_EXAMPLE,
        )

    return map_word_info(info)


async def lookup_and_save(
    db: Session,
    provider: LLMProvider,
    text: str,
    mode: str = "upsert",
) -> Word:
    """
    Generate content for a word and persist it: exactly one write per call,
    none when the provider rate-limits us.
    """
    text = text.strip()
    if not text:
        raise ValueError("word text must not be empty")

    logger.info("Looking up word %r", text)
    fields = await generate_word_fields(provider, text)

    # Session calls block, keep them off the event loop
    write = create_word if mode == "insert" else upsert_word
    return await run_in_threadpool(write, db, text, fields)
