from pathlib import Path

import pytest

from echo_notes.config import get_settings


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "ECHO_BASE_DIR",
        "LLM_BASE_URL",
        "LLM_API_KEY",
        "LLM_MODEL",
        "LLM_TEMPERATURE",
        "LLM_MAX_TOKENS",
        "SUMMARY_CHUNK_SIZE",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.base_dir == str(Path.home() / "Documents" / "echo" / "Classes")
    assert settings.llm_base_url == "https://api.studio.nebius.ai/v1"
    assert settings.llm_api_key is None
    assert settings.llm_model == "meta-llama/Meta-Llama-3.1-8B-Instruct-fast"
    assert settings.llm_temperature == 0.3
    assert settings.llm_max_tokens == 2048
    assert settings.summary_chunk_size == 1000


def test_settings_read_explicit_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ECHO_BASE_DIR", "data/lectures")
    monkeypatch.setenv("SUMMARY_CHUNK_SIZE", "250")
    monkeypatch.setenv("LLM_TEMPERATURE", "0.7")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.base_dir == "data/lectures"
    assert settings.summary_chunk_size == 250
    assert settings.llm_temperature == 0.7
    assert settings.log_level == "DEBUG"


def test_settings_clamp_to_minimum(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUMMARY_CHUNK_SIZE", "0")
    monkeypatch.setenv("LLM_MAX_TOKENS", "-10")

    settings = get_settings()

    assert settings.summary_chunk_size == 1
    assert settings.llm_max_tokens == 1
