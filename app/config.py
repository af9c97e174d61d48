"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import current_environment, is_production_environment, load_env_files

SUPPORTED_LANGUAGES: tuple[str, ...] = ("en", "ar")

_ALLOWED_LLM_ADAPTERS = {"openai", "mock"}


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class AppSettings:
    """
    Top-level application settings.
    """

    environment: str
    is_production: bool
    default_reviewer: str = "reviewer"


@dataclass(frozen=True)
class UploadSettings:
    """
    Limits and sampling knobs for uploaded files.

    CSV files at or below csv_prefix_threshold_bytes are parsed in full.
    Larger ones are summarised from their first csv_prefix_bytes bytes and
    the row count is extrapolated.
    """

    max_bytes: int = 10 * 1024 * 1024
    sample_rows: int = 10
    csv_prefix_threshold_bytes: int = 5 * 1024 * 1024
    csv_prefix_bytes: int = 64 * 1024


@dataclass(frozen=True)
class LLMSettings:
    """
    Metadata-suggestion model settings.
    """

    adapter: str = "openai"
    model: str = "gpt-4o-mini"
    max_tokens: int = 1024
    timeout_seconds: float = 30.0
    api_key: str | None = None
    base_url: str | None = None


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """
    Return cached application settings.
    """

    _load_env_once()
    return AppSettings(
        environment=current_environment(),
        is_production=is_production_environment(),
        default_reviewer=_get_str_env("REVIEWER_DEFAULT", "reviewer"),
    )


@lru_cache(maxsize=1)
def get_upload_settings() -> UploadSettings:
    """
    Return cached upload settings from environment variables.
    """

    return UploadSettings(
        max_bytes=max(1, _get_int_env("UPLOAD_MAX_BYTES", 10 * 1024 * 1024)),
        sample_rows=min(10, max(1, _get_int_env("CSV_SAMPLE_ROWS", 10))),
        csv_prefix_threshold_bytes=max(1, _get_int_env("CSV_PREFIX_THRESHOLD_BYTES", 5 * 1024 * 1024)),
        csv_prefix_bytes=max(1024, _get_int_env("CSV_PREFIX_BYTES", 64 * 1024)),
    )


@lru_cache(maxsize=1)
def get_llm_settings() -> LLMSettings:
    """
    Return cached LLM settings.

    Raises RuntimeError when LLM_ADAPTER names an unknown adapter.
    """

    adapter = _get_str_env("LLM_ADAPTER", "openai").lower()
    if adapter not in _ALLOWED_LLM_ADAPTERS:
        raise RuntimeError(
            f"LLM_ADAPTER '{adapter}' is not valid. "
            f"Allowed values: {sorted(_ALLOWED_LLM_ADAPTERS)}."
        )

    return LLMSettings(
        adapter=adapter,
        model=_get_str_env("LLM_MODEL", "gpt-4o-mini"),
        max_tokens=max(64, _get_int_env("LLM_MAX_TOKENS", 1024)),
        timeout_seconds=max(1.0, _get_float_env("LLM_TIMEOUT_SECONDS", 30.0)),
        api_key=_get_optional_str_env("LLM_API_KEY") or _get_optional_str_env("OPENAI_API_KEY"),
        base_url=_get_optional_str_env("LLM_BASE_URL"),
    )
