"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

_ALLOWED_LLM_ADAPTERS = {"gemini", "openai", "mock"}

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


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
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class LLMSettings:
    """
    Text-generation endpoint settings used by the insight requestor.
    """

    adapter: str = "gemini"
    api_key: str | None = None
    model: str | None = None
    base_url: str | None = None
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class CSVIngestionSettings:
    """
    Runtime settings for CSV ingestion.
    """

    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES


@dataclass(frozen=True)
class LoggingSettings:
    """
    Root logger settings.
    """

    level: str = "INFO"


def _resolve_adapter_name() -> str:
    """
    Read LLM_ADAPTER and fall back to 'gemini' on unknown values.
    """

    raw = _get_str_env("LLM_ADAPTER", "gemini").lower()
    if raw not in _ALLOWED_LLM_ADAPTERS:
        logging.getLogger(__name__).warning(
            "Unknown LLM_ADAPTER '%s'; allowed values: %s. Using 'gemini'.",
            raw,
            sorted(_ALLOWED_LLM_ADAPTERS),
        )
        return "gemini"
    return raw


@lru_cache(maxsize=1)
def get_llm_settings() -> LLMSettings:
    """
    Return cached text-generation settings from environment variables.
    """

    return LLMSettings(
        adapter=_resolve_adapter_name(),
        api_key=_get_optional_str_env("LLM_API_KEY") or _get_optional_str_env("GEMINI_API_KEY"),
        model=_get_optional_str_env("LLM_MODEL"),
        base_url=_get_optional_str_env("LLM_BASE_URL"),
        timeout_seconds=max(1.0, _get_float_env("LLM_TIMEOUT_SECONDS", 30.0)),
    )


@lru_cache(maxsize=1)
def get_csv_ingestion_settings() -> CSVIngestionSettings:
    """
    Return cached CSV ingestion settings from environment variables.
    """

    return CSVIngestionSettings(
        max_upload_bytes=max(1, _get_int_env("CSV_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)),
    )


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """
    Return cached logging settings from environment variables.
    """

    return LoggingSettings(level=_get_str_env("LOG_LEVEL", "INFO").upper())
