"""
app/services/metadata_suggestion_service.py

Turns a structural summary into an AI metadata suggestion.

suggest() never raises. Upstream failures (missing key, network, timeout,
unparseable output) degrade to MetadataSuggestion.empty() with a WARNING log.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from typing import Any

from app.config import get_app_settings, get_llm_settings
from llm_metadata.adapter import BaseLLMAdapter, build_adapter
from llm_metadata.prompt_builder import MetadataPromptBuilder
from llm_metadata.schema import MetadataSuggestion
from llm_metadata.validator import (
    MetadataOutputValidationError,
    extract_metadata_from_text,
    parse_metadata_response,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_CELL = "example data"

AdapterFactory = Callable[[], BaseLLMAdapter]


def _default_adapter_factory() -> BaseLLMAdapter:
    return build_adapter(get_llm_settings(), is_production=get_app_settings().is_production)


def placeholder_rows(column_names: Sequence[str]) -> list[dict[str, Any]]:
    """One stand-in row used when a dataset has no stored sample."""
    return [{name: PLACEHOLDER_CELL for name in column_names}]


class MetadataSuggestionService:
    """
    Builds the prompt, calls the adapter with a hard timeout and parses the
    response, first strictly as JSON and then leniently from free text.
    """

    def __init__(
        self,
        *,
        adapter_factory: AdapterFactory | None = None,
        prompt_builder: MetadataPromptBuilder | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self._adapter_factory = adapter_factory or _default_adapter_factory
        self._prompt_builder = prompt_builder or MetadataPromptBuilder()
        self._timeout_seconds = timeout_seconds

    def _resolve_timeout(self) -> float:
        if self._timeout_seconds is not None:
            return self._timeout_seconds
        return get_llm_settings().timeout_seconds

    def _generate(self, prompt: str) -> str:
        adapter = self._adapter_factory()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="metadata-suggestion")
        try:
            future = executor.submit(adapter.generate, prompt)
            return future.result(timeout=self._resolve_timeout())
        finally:
            # A timed-out call keeps running in its worker; do not wait for it.
            executor.shutdown(wait=False, cancel_futures=True)

    def suggest(
        self,
        sample_rows: Sequence[dict[str, Any]] | None,
        column_names: Sequence[str],
        language: str = "en",
    ) -> MetadataSuggestion:
        try:
            rows = list(sample_rows or []) or placeholder_rows(column_names)
            prompt = self._prompt_builder.build_prompt(rows, column_names, language)
            raw_response = self._generate(prompt)
        except TimeoutError:
            logger.warning(
                "Metadata suggestion timed out after %.1fs; returning empty suggestion",
                self._resolve_timeout(),
            )
            return MetadataSuggestion.empty()
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Metadata suggestion unavailable (%s: %s); returning empty suggestion",
                exc.__class__.__name__,
                exc,
            )
            return MetadataSuggestion.empty()

        try:
            return parse_metadata_response(raw_response)
        except MetadataOutputValidationError as exc:
            logger.warning(
                "Metadata response was not valid JSON (stage=%s); using text extraction",
                exc.stage,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Metadata response could not be parsed: %s", exc)
            return MetadataSuggestion.empty()

        try:
            return extract_metadata_from_text(raw_response)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Metadata text extraction failed: %s", exc)
            return MetadataSuggestion.empty()


@lru_cache(maxsize=1)
def get_metadata_suggestion_service() -> MetadataSuggestionService:
    """
    Return the shared metadata suggestion service instance.
    """

    return MetadataSuggestionService()
