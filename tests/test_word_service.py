import asyncio
import threading

import pytest

from conftest import FakeProvider, UBIQUITOUS_REPLY
from wordbook.core.llm_provider import LLMProviderError, LLMRateLimitError, UnavailableLLMProvider
from wordbook.core.prompts import (
    CONFIG_ERROR_DEFINITION,
    GENERATION_FAILED_DEFINITION,
    GENERATION_FAILED_EXAMPLE,
)
from wordbook.core.word_repository import count_words
from wordbook.core import word_service
from wordbook.core.word_service import lookup_and_save, map_word_info


def _run(coro):
    return asyncio.run(coro)


def test_successful_lookup_maps_fields(db_session):
    provider = FakeProvider(reply=UBIQUITOUS_REPLY)

    w = _run(lookup_and_save(db_session, provider, "  ubiquitous "))

    assert w.text == "ubiquitous"
    assert w.definition == "无处不在的"
    assert w.example == "Smartphones have become ubiquitous."
    assert w.uk_phonetic == "/juːˈbɪkwɪtəs/"
    assert w.us_phonetic == "/juːˈbɪkwətəs/"
    assert '"ubiquitous"' in provider.prompts[0]


def test_stored_text_is_the_users_input_not_the_models(db_session):
    provider = FakeProvider(reply='{"word": "Running", "meaning": "跑", "example": "I run."}')

    w = _run(lookup_and_save(db_session, provider, "running"))

    assert w.text == "running"


def test_missing_key_stores_config_placeholder_without_calling(db_session):
    provider = UnavailableLLMProvider()

    w = _run(lookup_and_save(db_session, provider, "ubiquitous"))

    assert w.text == "ubiquitous"
    assert w.definition == CONFIG_ERROR_DEFINITION
    assert w.example
    assert count_words(db_session) == 1


@pytest.mark.parametrize(
    "provider",
    [
        FakeProvider(error=LLMProviderError("boom", status_code=500)),
        FakeProvider(error=RuntimeError("network down")),
        FakeProvider(reply="Sorry, I can't help with that."),
        FakeProvider(reply="```json\n[1, 2]\n```"),
    ],
)
def test_failures_store_generation_placeholder(db_session, provider):
    w = _run(lookup_and_save(db_session, provider, "apple"))

    assert w.text == "apple"
    assert w.definition == GENERATION_FAILED_DEFINITION
    assert w.example == GENERATION_FAILED_EXAMPLE
    assert count_words(db_session) == 1


def test_rate_limit_propagates_and_writes_nothing(db_session):
    provider = FakeProvider(error=LLMRateLimitError("slow down"))

    with pytest.raises(LLMRateLimitError):
        _run(lookup_and_save(db_session, provider, "apple"))

    assert count_words(db_session) == 0


def test_upsert_mode_keeps_one_row_per_word(db_session):
    provider = FakeProvider(reply=UBIQUITOUS_REPLY)

    first = _run(lookup_and_save(db_session, provider, "ubiquitous"))
    second = _run(lookup_and_save(db_session, provider, "ubiquitous"))

    assert first.id == second.id
    assert count_words(db_session) == 1
    assert len(provider.prompts) == 2


def test_upsert_replaces_placeholder_with_real_content(db_session):
    _run(lookup_and_save(db_session, UnavailableLLMProvider(), "ubiquitous"))
    w = _run(lookup_and_save(db_session, FakeProvider(reply=UBIQUITOUS_REPLY), "ubiquitous"))

    assert w.definition == "无处不在的"
    assert count_words(db_session) == 1


def test_insert_mode_adds_a_row_per_lookup(db_session):
    provider = FakeProvider(reply=UBIQUITOUS_REPLY)

    _run(lookup_and_save(db_session, provider, "ubiquitous", mode="insert"))
    _run(lookup_and_save(db_session, provider, "ubiquitous", mode="insert"))

    assert count_words(db_session) == 2


def test_blank_text_is_rejected(db_session):
    with pytest.raises(ValueError):
        _run(lookup_and_save(db_session, FakeProvider(), "   "))
    assert count_words(db_session) == 0


def test_map_word_info_accepts_alternate_keys():
    fields = map_word_info(
        {"definition": "a fruit", "example": "Eat it.", "uk_phonetic": "/a/", "us_phonetic": "/b/"}
    )
    assert fields.definition == "a fruit"
    assert fields.uk_phonetic == "/a/"
    assert fields.us_phonetic == "/b/"


def test_map_word_info_fills_missing_values():
    fields = map_word_info({"meaning": "苹果", "example": None, "ukPhonetic": 3})
    assert fields.definition == "苹果"
    assert fields.example == GENERATION_FAILED_EXAMPLE
    assert fields.uk_phonetic == ""
    assert fields.us_phonetic == ""


def test_database_write_runs_off_the_event_loop_thread(db_session, monkeypatch):
    threads = {}
    real_upsert = word_service.upsert_word

    def recording_upsert(db, text, fields):
        threads["write"] = threading.get_ident()
        return real_upsert(db, text, fields)

    monkeypatch.setattr(word_service, "upsert_word", recording_upsert)

    async def lookup():
        threads["loop"] = threading.get_ident()
        return await lookup_and_save(db_session, FakeProvider(reply=UBIQUITOUS_REPLY), "apple")

    w = _run(lookup())

    assert w.text == "apple"
    assert threads["write"] != threads["loop"]
