from pathlib import Path

import pytest

from app import config
from core.transport import HostedProviderConfig, LocalProviderConfig


def test_defaults_with_empty_environment():
    env: dict = {}

    assert config.get_llm_provider(env) == "none"
    assert config.build_provider_config(env) is None
    assert config.get_llm_timeout(env) == 20.0
    assert config.get_default_language(env) == "en"
    assert config.get_lexicon_path(env) is None
    assert config.is_logging_enabled(env) is True
    assert config.get_interpretation_log_path(env) == Path("logs") / "interpretations.jsonl"
    assert config.is_log_redaction_enabled(env) is True
    assert config.get_log_redaction_patterns(env) == ["email", "phone", "url"]
    assert config.get_log_max_bytes(env) == 1_000_000
    assert config.get_log_backup_count(env) == 5
    assert config.get_web_host(env) == "127.0.0.1"
    assert config.get_web_port(env) == 9000


def test_local_provider_config():
    provider = config.build_provider_config({"LLM_PROVIDER": "Local", "LOCAL_LLM_MODEL": "qwen2"})

    assert provider == LocalProviderConfig(base_url="http://localhost:11434/v1", model="qwen2")


def test_hosted_provider_config():
    provider = config.build_provider_config(
        {"LLM_PROVIDER": "hosted", "HOSTED_LLM_API_KEY": " sk-test ", "HOSTED_LLM_MODEL": "llama-3.3-70b"}
    )

    assert isinstance(provider, HostedProviderConfig)
    assert provider.api_key == "sk-test"
    assert provider.base_url == "https://api.cerebras.ai/v1"
    assert provider.model == "llama-3.3-70b"


def test_hosted_provider_without_key_is_an_error():
    with pytest.raises(ValueError):
        config.build_provider_config({"LLM_PROVIDER": "hosted"})


def test_unknown_provider_is_an_error():
    with pytest.raises(ValueError):
        config.get_llm_provider({"LLM_PROVIDER": "gemini"})


@pytest.mark.parametrize("raw,expected", [("5", 5.0), ("0", 20.0), ("-1", 20.0), ("abc", 20.0)])
def test_llm_timeout_parsing(raw, expected):
    assert config.get_llm_timeout({"LLM_TIMEOUT_SECONDS": raw}) == expected


@pytest.mark.parametrize("raw,expected", [("false", False), ("0", False), ("on", True), ("maybe", True)])
def test_logging_flag(raw, expected):
    assert config.is_logging_enabled({"LOGGING_ENABLED": raw}) is expected


def test_log_overrides(tmp_path):
    env = {
        "LOG_DIR": str(tmp_path),
        "LOG_REDACTION_ENABLED": "no",
        "LOG_REDACTION_PATTERNS": " Email , ,url",
        "LOG_MAX_BYTES": "-5",
        "LOG_BACKUP_COUNT": "x",
        "LEXICON_PATH": str(tmp_path / "lexicon.yml"),
        "DEFAULT_LANGUAGE": "HI",
    }

    assert config.get_interpretation_log_path(env) == tmp_path / "interpretations.jsonl"
    assert config.is_log_redaction_enabled(env) is False
    assert config.get_log_redaction_patterns(env) == ["email", "url"]
    assert config.get_log_max_bytes(env) == 0
    assert config.get_log_backup_count(env) == 5
    assert config.get_lexicon_path(env) == tmp_path / "lexicon.yml"
    assert config.get_default_language(env) == "hi"


@pytest.mark.parametrize("raw,expected", [("8080", 8080), ("0", 9000), ("70000", 9000), ("http", 9000)])
def test_web_port_validation(raw, expected):
    assert config.get_web_port({"WEB_PORT": raw}) == expected


def test_environment_is_read_by_default(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "local")
    monkeypatch.setenv("LOCAL_LLM_BASE_URL", "http://gpu-box:8000/v1")

    provider = config.build_provider_config()

    assert provider == LocalProviderConfig(base_url="http://gpu-box:8000/v1", model="llama3")
