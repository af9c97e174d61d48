"""LLM adapters for metadata suggestions.

Provides a base interface, an adapter for OpenAI-compatible APIs, a
deterministic mock for local runs, and the factory that picks one from
LLMSettings.
"""

import json
from abc import ABC, abstractmethod
from typing import Optional

from app.config import LLMSettings


class BaseLLMAdapter(ABC):
    """Abstract base for all LLM adapters."""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Send a prompt to the LLM and return the raw response text.

        Args:
            prompt: The fully formatted prompt string.

        Returns:
            Raw string response from the model (expected to be JSON).
        """


class OpenAILLMAdapter(BaseLLMAdapter):
    """Adapter for OpenAI-compatible chat completion APIs.

    Configured for deterministic, non-streaming JSON output.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        max_tokens: int = 1024,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        """Initialise the OpenAI adapter.

        Args:
            model: Model identifier.
            max_tokens: Maximum tokens in the completion.
            api_key: API key for the endpoint.
            base_url: Optional base URL for OpenAI-compatible endpoints.
            timeout_seconds: Per-request timeout handed to the client.
        """
        from openai import OpenAI

        client_kwargs: dict = {
            "api_key": api_key or "",
            "timeout": timeout_seconds,
            "max_retries": 0,
        }
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = OpenAI(**client_kwargs)
        self._model = model
        self._max_tokens = max_tokens

    def generate(self, prompt: str) -> str:
        response = self._client.chat.completions.create(
            model=self._model,
            messages=[{"role": "user", "content": prompt}],
            temperature=0,
            top_p=1,
            max_tokens=self._max_tokens,
            stream=False,
            seed=42,
            response_format={"type": "json_object"},
        )
        return response.choices[0].message.content or ""


# ---------------------------------------------------------------------------
# Fixed mock response used for local runs without an API key.
# ---------------------------------------------------------------------------
_MOCK_RESPONSE = {
    "title": "Sample Tabular Dataset",
    "description": "Mock description generated without a language model.",
    "tags": ["sample", "tabular", "mock"],
    "category": "General",
}

_MOCK_RESPONSE_JSON = json.dumps(_MOCK_RESPONSE, indent=2)


class MockLLMAdapter(BaseLLMAdapter):
    """Deterministic adapter that returns a fixed valid JSON response."""

    def generate(self, prompt: str) -> str:
        return _MOCK_RESPONSE_JSON


def build_adapter(settings: LLMSettings, *, is_production: bool = False) -> BaseLLMAdapter:
    """Build the adapter selected by LLM_ADAPTER.

    Raises:
        RuntimeError: In production when the OpenAI adapter has no API key.
    """
    if settings.adapter == "mock":
        return MockLLMAdapter()

    if is_production and not settings.api_key:
        raise RuntimeError("LLM_API_KEY (or OPENAI_API_KEY) must be set in production.")

    return OpenAILLMAdapter(
        model=settings.model,
        max_tokens=settings.max_tokens,
        api_key=settings.api_key,
        base_url=settings.base_url,
        timeout_seconds=settings.timeout_seconds,
    )
