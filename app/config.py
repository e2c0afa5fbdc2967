"""Centralize defaults and environment lookups for the interpreter."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from dotenv import load_dotenv

from core.transport import HostedProviderConfig, LocalProviderConfig, ProviderConfig

load_dotenv()

# ---------------------------------------------------------------------------
# Default configuration values
# ---------------------------------------------------------------------------
_PROVIDERS = ("none", "local", "hosted")
_DEFAULT_LLM_PROVIDER = "none"
_DEFAULT_LOCAL_LLM_BASE_URL = "http://localhost:11434/v1"
_DEFAULT_LOCAL_LLM_MODEL = "llama3"
_DEFAULT_HOSTED_LLM_BASE_URL = "https://api.cerebras.ai/v1"
_DEFAULT_HOSTED_LLM_MODEL = "llama3.1-8b"
_DEFAULT_LLM_TIMEOUT_SECONDS = 20.0
_DEFAULT_LANGUAGE = "en"
_LANGUAGES = ("en", "hi")
_DEFAULT_LOGGING_ENABLED: bool = True
_DEFAULT_LOG_REDACTION_ENABLED: bool = True
_DEFAULT_LOG_DIR = "logs"
_INTERPRETATION_LOG_FILENAME = "interpretations.jsonl"
_DEFAULT_LOG_REDACTION_PATTERNS = "email,phone,url"
_DEFAULT_LOG_MAX_BYTES = 1_000_000
_DEFAULT_LOG_BACKUP_COUNT = 5
_DEFAULT_WEB_HOST = "127.0.0.1"
_DEFAULT_WEB_PORT = 9000


def _source(env: Dict[str, str] | None) -> Mapping[str, str]:
    return env if env is not None else os.environ


def _flag(raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in {"0", "false", "no", "off"}:
        return False
    if normalized in {"1", "true", "yes", "on"}:
        return True
    return default


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------
def get_llm_provider(env: Dict[str, str] | None = None) -> str:
    """Return ``none``, ``local`` or ``hosted``; anything else is a configuration error."""

    value = _source(env).get("LLM_PROVIDER", _DEFAULT_LLM_PROVIDER).strip().lower() or _DEFAULT_LLM_PROVIDER
    if value not in _PROVIDERS:
        raise ValueError(f"Unknown LLM_PROVIDER '{value}'. Expected one of {_PROVIDERS}.")
    return value


def get_llm_timeout(env: Dict[str, str] | None = None) -> float:
    """Return the per-request timeout in seconds for the remote call."""

    raw = _source(env).get("LLM_TIMEOUT_SECONDS")
    if raw is None:
        return _DEFAULT_LLM_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError:
        return _DEFAULT_LLM_TIMEOUT_SECONDS
    return value if value > 0 else _DEFAULT_LLM_TIMEOUT_SECONDS


def build_provider_config(env: Dict[str, str] | None = None) -> Optional[ProviderConfig]:
    """Translate environment settings into an explicit provider value.

    Returns ``None`` when no remote provider is configured. A hosted provider
    without ``HOSTED_LLM_API_KEY`` raises ``ValueError``.
    """

    source = _source(env)
    provider = get_llm_provider(env)
    if provider == "local":
        return LocalProviderConfig(
            base_url=source.get("LOCAL_LLM_BASE_URL") or _DEFAULT_LOCAL_LLM_BASE_URL,
            model=source.get("LOCAL_LLM_MODEL") or _DEFAULT_LOCAL_LLM_MODEL,
        )
    if provider == "hosted":
        return HostedProviderConfig(
            api_key=(source.get("HOSTED_LLM_API_KEY") or "").strip(),
            base_url=source.get("HOSTED_LLM_BASE_URL") or _DEFAULT_HOSTED_LLM_BASE_URL,
            model=source.get("HOSTED_LLM_MODEL") or _DEFAULT_HOSTED_LLM_MODEL,
        )
    return None


# ---------------------------------------------------------------------------
# Language + vocabulary
# ---------------------------------------------------------------------------
def get_default_language(env: Dict[str, str] | None = None) -> str:
    value = _source(env).get("DEFAULT_LANGUAGE", _DEFAULT_LANGUAGE).strip().lower()
    return value if value in _LANGUAGES else _DEFAULT_LANGUAGE


def get_lexicon_path(env: Dict[str, str] | None = None) -> Path | None:
    """Return the optional YAML file that extends the built-in lexicon."""

    override = _source(env).get("LEXICON_PATH")
    return Path(override) if override else None


# ---------------------------------------------------------------------------
# Interpretation log
# ---------------------------------------------------------------------------
def is_logging_enabled(env: Dict[str, str] | None = None) -> bool:
    """Determine whether the JSONL interpretation log is active."""

    return _flag(_source(env).get("LOGGING_ENABLED"), _DEFAULT_LOGGING_ENABLED)


def get_log_dir(env: Dict[str, str] | None = None) -> Path:
    override = _source(env).get("LOG_DIR")
    return Path(override) if override else Path(_DEFAULT_LOG_DIR)


def get_interpretation_log_path(env: Dict[str, str] | None = None) -> Path:
    return get_log_dir(env) / _INTERPRETATION_LOG_FILENAME


def is_log_redaction_enabled(env: Dict[str, str] | None = None) -> bool:
    """Determine whether emails, phones and URLs are scrubbed before logging."""

    return _flag(_source(env).get("LOG_REDACTION_ENABLED"), _DEFAULT_LOG_REDACTION_ENABLED)


def get_log_redaction_patterns(env: Dict[str, str] | None = None) -> List[str]:
    raw = _source(env).get("LOG_REDACTION_PATTERNS")
    values = raw if raw is not None else _DEFAULT_LOG_REDACTION_PATTERNS
    return [segment.strip().lower() for segment in values.split(",") if segment.strip()]


def get_log_max_bytes(env: Dict[str, str] | None = None) -> int:
    """Return the maximum size in bytes before rotating the log file."""

    raw = _source(env).get("LOG_MAX_BYTES")
    if raw is None:
        return _DEFAULT_LOG_MAX_BYTES
    try:
        value = int(raw)
    except ValueError:
        return _DEFAULT_LOG_MAX_BYTES
    return max(value, 0)


def get_log_backup_count(env: Dict[str, str] | None = None) -> int:
    """Return the number of rotated log files to retain."""

    raw = _source(env).get("LOG_BACKUP_COUNT")
    if raw is None:
        return _DEFAULT_LOG_BACKUP_COUNT
    try:
        value = int(raw)
    except ValueError:
        return _DEFAULT_LOG_BACKUP_COUNT
    return max(value, 0)


# ---------------------------------------------------------------------------
# HTTP API
# ---------------------------------------------------------------------------
def get_web_host(env: Dict[str, str] | None = None) -> str:
    return _source(env).get("WEB_HOST", _DEFAULT_WEB_HOST)


def get_web_port(env: Dict[str, str] | None = None) -> int:
    raw = _source(env).get("WEB_PORT")
    if raw is None:
        return _DEFAULT_WEB_PORT
    try:
        value = int(raw)
    except ValueError:
        return _DEFAULT_WEB_PORT
    return value if 0 < value <= 65535 else _DEFAULT_WEB_PORT
