"""
Shared environment-driven database configuration helpers.
"""

from __future__ import annotations

import os
from pathlib import Path

PRODUCTION_ENVIRONMENTS = frozenset({"prod", "production", "staging"})

_LOCAL_DEFAULT_URL = "sqlite:///./dataset_publishing.db"


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def current_environment() -> str:
    load_env_files()
    return os.getenv("ENVIRONMENT", "local").strip().lower() or "local"


def is_production_environment() -> bool:
    return current_environment() in PRODUCTION_ENVIRONMENTS


def normalize_postgres_url(url: str) -> str:
    """
    Normalize postgres URLs to SQLAlchemy's recommended psycopg driver form.
    """

    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def resolve_database_url() -> str:
    """
    Resolve the database URL from the environment and optional .env files.

    Outside production a local SQLite file is used when DATABASE_URL is not
    set. In a production-like ENVIRONMENT a missing DATABASE_URL is an error;
    this is only evaluated when an engine is actually built.
    """

    load_env_files()

    direct_url = (os.getenv("DATABASE_URL") or "").strip()
    if direct_url:
        return normalize_postgres_url(direct_url)

    if is_production_environment():
        raise RuntimeError(
            "DATABASE_URL is not set. A database URL is required when "
            f"ENVIRONMENT={current_environment()!r}."
        )

    return _LOCAL_DEFAULT_URL
