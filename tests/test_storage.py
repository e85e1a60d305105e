"""Tests for correction stores and LM selection."""

from dataclasses import FrozenInstanceError

import pytest

from conftest import NOW, OTHER_OWNER, OWNER, make_correction
from taxxy.config import get_config
from taxxy.database.correction_store import InMemoryCorrectionStore
from taxxy.llms.llm import get_llm_for_agent


@pytest.fixture(params=["memory", "sql"])
def any_store(request, sql_store):
    if request.param == "memory":
        return InMemoryCorrectionStore()
    return sql_store


class TestCorrectionStores:
    def test_add_assigns_id(self, any_store):
        stored = any_store.add(make_correction("Adobe", corrected_reason="Work laptop apps"))

        assert stored.id is not None
        assert stored.owner == OWNER
        assert stored.corrected_reason == "Work laptop apps"
        assert stored.timestamp == NOW

    def test_owner_required(self, any_store):
        with pytest.raises(ValueError):
            any_store.add(make_correction("Adobe", owner=""))

    def test_list_recent_newest_first_and_limited(self, any_store):
        any_store.add(make_correction("old", days_ago=10))
        any_store.add(make_correction("newest", days_ago=0))
        any_store.add(make_correction("middle", days_ago=5))
        any_store.add(make_correction("other user", owner=OTHER_OWNER, days_ago=0))

        recent = any_store.list_recent(OWNER, limit=2)

        assert [c.transaction_description for c in recent] == ["newest", "middle"]
        assert len(any_store.list_for_owner(OWNER)) == 3
        assert len(any_store.list_for_owner(OTHER_OWNER)) == 1

    def test_listed_corrections_cannot_rewrite_log(self, any_store):
        any_store.add(make_correction("Adobe", corrected_purpose="business"))
        listed = any_store.list_recent(OWNER)[0]

        with pytest.raises(FrozenInstanceError):
            listed.corrected_purpose = "personal"

        assert any_store.list_recent(OWNER)[0].corrected_purpose == "business"

    def test_same_timestamp_later_insert_first(self, any_store):
        first = any_store.add(make_correction("first", days_ago=1))
        second = any_store.add(make_correction("second", days_ago=1))

        assert [c.id for c in any_store.list_recent(OWNER)] == [second.id, first.id]


class TestLLMSelection:
    def test_openai_model_prefixed(self, monkeypatch):
        config = get_config()
        monkeypatch.setattr(config, "classification_llm", "openai")
        monkeypatch.setattr(config.openai, "model", "gpt-4o-mini")
        monkeypatch.setattr(config.openai, "api_key", "sk-test")
        monkeypatch.setattr(config.openai, "base_url", None)

        lm = get_llm_for_agent("classification")

        assert lm.model == "openai/gpt-4o-mini"

    def test_anthropic_model_prefixed(self, monkeypatch):
        config = get_config()
        monkeypatch.setattr(config, "write_off_llm", "anthropic")
        monkeypatch.setattr(config.anthropic, "model", "claude-3-5-haiku-latest")
        monkeypatch.setattr(config.anthropic, "api_key", "sk-ant-test")

        lm = get_llm_for_agent("write_off")

        assert lm.model == "anthropic/claude-3-5-haiku-latest"

    def test_unknown_provider(self, monkeypatch):
        monkeypatch.setattr(get_config(), "classification_llm", "cohere")
        with pytest.raises(ValueError):
            get_llm_for_agent("classification")
