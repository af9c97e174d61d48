"""
tests/test_metadata_suggestion_service.py

Coverage:
  - successful JSON suggestion and the prompt it was built from
  - placeholder row when a dataset has no stored sample
  - degradation to an empty suggestion: adapter error, adapter factory
    error, timeout, unreadable output
  - free-text fallback when the model ignores the JSON instruction
  - adapter selection from LLMSettings
"""

from __future__ import annotations

import logging
import threading

import pytest

from app.config import LLMSettings
from app.services.metadata_suggestion_service import PLACEHOLDER_CELL, MetadataSuggestionService
from llm_metadata.adapter import BaseLLMAdapter, MockLLMAdapter, build_adapter
from tests.conftest import SALES_SUGGESTION, StubLLMAdapter

LOGGER_NAME = "app.services.metadata_suggestion_service"


class BlockingAdapter(BaseLLMAdapter):
    def __init__(self) -> None:
        self.release = threading.Event()

    def generate(self, prompt: str) -> str:
        self.release.wait(timeout=5)
        return "{}"


def _service(adapter: BaseLLMAdapter, timeout_seconds: float = 5.0) -> MetadataSuggestionService:
    return MetadataSuggestionService(adapter_factory=lambda: adapter, timeout_seconds=timeout_seconds)


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestSuggest:
    def test_returns_parsed_suggestion(self, stub_adapter: StubLLMAdapter) -> None:
        result = _service(stub_adapter).suggest([{"id": "1", "amount": "10"}], ["id", "amount"])

        assert result.title == SALES_SUGGESTION["title"]
        assert result.tags == ["sales"]
        assert result.category == "finance"

    def test_prompt_contains_sample(self, stub_adapter: StubLLMAdapter) -> None:
        _service(stub_adapter).suggest([{"id": "1", "amount": "10"}], ["id", "amount"])

        assert len(stub_adapter.prompts) == 1
        assert "| 1 | 10 |" in stub_adapter.prompts[0]

    def test_placeholder_row_without_sample(self, stub_adapter: StubLLMAdapter) -> None:
        _service(stub_adapter).suggest(None, ["id", "amount"])

        assert f"| {PLACEHOLDER_CELL} | {PLACEHOLDER_CELL} |" in stub_adapter.prompts[0]

    def test_arabic_prompt(self, stub_adapter: StubLLMAdapter) -> None:
        _service(stub_adapter).suggest([{"id": "1"}], ["id"], language="ar")

        assert "باللغة العربية" in stub_adapter.prompts[0]

    def test_text_fallback(self) -> None:
        adapter = StubLLMAdapter("Title: Sales\nTags: a, b\nCategory: Retail")
        result = _service(adapter).suggest([{"id": "1"}], ["id"])

        assert result.title == "Sales"
        assert result.tags == ["a", "b"]
        assert result.category == "Retail"


# ---------------------------------------------------------------------------
# Degradation
# ---------------------------------------------------------------------------


class TestDegradation:
    def test_adapter_error(self, caplog: pytest.LogCaptureFixture) -> None:
        adapter = StubLLMAdapter(ConnectionError("network down"))

        with caplog.at_level(logging.WARNING, logger=LOGGER_NAME):
            result = _service(adapter).suggest([{"id": "1"}], ["id"])

        assert result.is_empty
        assert "network down" in caplog.text

    def test_adapter_factory_error(self) -> None:
        def _no_key() -> BaseLLMAdapter:
            raise RuntimeError("LLM_API_KEY (or OPENAI_API_KEY) must be set in production.")

        service = MetadataSuggestionService(adapter_factory=_no_key, timeout_seconds=1.0)

        assert service.suggest([{"id": "1"}], ["id"]).is_empty

    def test_timeout(self, caplog: pytest.LogCaptureFixture) -> None:
        adapter = BlockingAdapter()
        try:
            with caplog.at_level(logging.WARNING, logger=LOGGER_NAME):
                result = _service(adapter, timeout_seconds=0.05).suggest([{"id": "1"}], ["id"])
        finally:
            adapter.release.set()

        assert result.is_empty
        assert "timed out" in caplog.text

    def test_unreadable_output(self) -> None:
        result = _service(StubLLMAdapter("Sorry, I cannot do that.")).suggest([{"id": "1"}], ["id"])

        assert result.is_empty

    def test_empty_output(self) -> None:
        assert _service(StubLLMAdapter("")).suggest([{"id": "1"}], ["id"]).is_empty


# ---------------------------------------------------------------------------
# Adapter selection
# ---------------------------------------------------------------------------


class TestBuildAdapter:
    def test_mock_adapter(self) -> None:
        adapter = build_adapter(LLMSettings(adapter="mock"))

        assert isinstance(adapter, MockLLMAdapter)
        result = _service(adapter).suggest([{"id": "1"}], ["id"])
        assert result.title == "Sample Tabular Dataset"

    def test_production_requires_api_key(self) -> None:
        with pytest.raises(RuntimeError):
            build_adapter(LLMSettings(adapter="openai", api_key=None), is_production=True)
