from __future__ import annotations

import pytest

from app import config
from app.services.insight_service import build_llm_adapter
from llm_synthesis.adapter import GeminiLLMAdapter, MockLLMAdapter


@pytest.fixture(autouse=True)
def _clear_settings_cache(monkeypatch: pytest.MonkeyPatch):
    for name in (
        "LLM_ADAPTER",
        "LLM_API_KEY",
        "GEMINI_API_KEY",
        "LLM_MODEL",
        "LLM_BASE_URL",
        "LLM_TIMEOUT_SECONDS",
        "CSV_MAX_UPLOAD_BYTES",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "load_env_files", lambda: None)
    config._load_env_once.cache_clear()
    config.get_llm_settings.cache_clear()
    config.get_csv_ingestion_settings.cache_clear()
    config.get_logging_settings.cache_clear()
    yield
    config._load_env_once.cache_clear()
    config.get_llm_settings.cache_clear()
    config.get_csv_ingestion_settings.cache_clear()
    config.get_logging_settings.cache_clear()


def test_llm_defaults() -> None:
    settings = config.get_llm_settings()

    assert settings.adapter == "gemini"
    assert settings.api_key is None
    assert settings.model is None
    assert settings.timeout_seconds == 30.0


def test_llm_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLM_ADAPTER", " MOCK ")
    monkeypatch.setenv("GEMINI_API_KEY", "abc")
    monkeypatch.setenv("LLM_MODEL", "gemini-1.5-pro")
    monkeypatch.setenv("LLM_TIMEOUT_SECONDS", "0.2")

    settings = config.get_llm_settings()

    assert settings.adapter == "mock"
    assert settings.api_key == "abc"
    assert settings.model == "gemini-1.5-pro"
    assert settings.timeout_seconds == 1.0


def test_unknown_adapter_falls_back_to_gemini(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLM_ADAPTER", "carrier-pigeon")

    assert config.get_llm_settings().adapter == "gemini"


def test_invalid_numbers_fall_back_to_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CSV_MAX_UPLOAD_BYTES", "lots")
    monkeypatch.setenv("LLM_TIMEOUT_SECONDS", "soon")

    assert config.get_csv_ingestion_settings().max_upload_bytes == config.DEFAULT_MAX_UPLOAD_BYTES
    assert config.get_llm_settings().timeout_seconds == 30.0


def test_logging_level_is_upper_cased(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")

    assert config.get_logging_settings().level == "DEBUG"


def test_build_llm_adapter_selects_implementation() -> None:
    assert isinstance(build_llm_adapter(config.LLMSettings(adapter="mock")), MockLLMAdapter)

    gemini = build_llm_adapter(
        config.LLMSettings(adapter="gemini", model="gemini-x", base_url="https://example.test/api/")
    )
    assert isinstance(gemini, GeminiLLMAdapter)
    assert gemini.endpoint == "https://example.test/api/models/gemini-x:generateContent"
