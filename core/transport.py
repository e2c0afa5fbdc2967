"""Chat-completion transports for OpenAI-compatible endpoints.

Two providers are supported: a local server (Ollama-style ``/chat/completions``
over plain HTTP, no auth) and a hosted, key-authenticated service reached
through the ``openai`` SDK. Both make exactly one attempt per call and convert
every failure into :class:`~core.errors.TransportFailure`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Union

import requests
from requests.adapters import HTTPAdapter

from core.errors import TransportFailure

logger = logging.getLogger(__name__)

Messages = List[Dict[str, str]]

DEFAULT_TIMEOUT_SECONDS = 20.0


@dataclass(frozen=True)
class LocalProviderConfig:
    base_url: str
    model: str


@dataclass(frozen=True)
class HostedProviderConfig:
    api_key: str
    base_url: str
    model: str

    def __post_init__(self) -> None:
        if not (self.api_key or "").strip():
            raise ValueError("Hosted provider requires an API key.")


ProviderConfig = Union[LocalProviderConfig, HostedProviderConfig]


class ChatTransport(Protocol):
    def complete(
        self,
        messages: Messages,
        *,
        temperature: float,
        max_tokens: int,
        response_format: Optional[Dict[str, str]] = None,
    ) -> str:
        ...


# ---------------------------------------------------------------------------
# Local provider (requests)
# ---------------------------------------------------------------------------


def _single_attempt_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})
    adapter = HTTPAdapter(max_retries=0)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class HttpChatTransport:
    """POSTs to ``{base_url}/chat/completions`` with a bounded timeout."""

    def __init__(
        self,
        config: LocalProviderConfig,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._config = config
        self._timeout = timeout
        self._session = session or _single_attempt_session()

    @property
    def url(self) -> str:
        return f"{self._config.base_url.rstrip('/')}/chat/completions"

    def complete(
        self,
        messages: Messages,
        *,
        temperature: float,
        max_tokens: int,
        response_format: Optional[Dict[str, str]] = None,
    ) -> str:
        body: Dict[str, Any] = {
            "model": self._config.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if response_format:
            body["response_format"] = response_format

        try:
            response = self._session.post(self.url, json=body, timeout=self._timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise TransportFailure(f"Chat request to {self.url} failed: {exc}") from exc
        except ValueError as exc:
            raise TransportFailure("Chat endpoint returned a non-JSON body.") from exc

        return _content_from_payload(payload)


def _content_from_payload(payload: Any) -> str:
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise TransportFailure("Chat reply is missing choices[0].message.content.") from exc
    if not isinstance(content, str) or not content.strip():
        raise TransportFailure("Chat reply content is empty.")
    return content


# ---------------------------------------------------------------------------
# Hosted provider (openai SDK)
# ---------------------------------------------------------------------------


class OpenAIChatTransport:
    """Uses the OpenAI SDK against any OpenAI-compatible hosted endpoint."""

    def __init__(self, config: HostedProviderConfig, *, timeout: float = DEFAULT_TIMEOUT_SECONDS, client: Any = None):
        self._config = config
        self._timeout = timeout
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            try:
                from openai import OpenAI
            except ImportError as exc:
                raise TransportFailure("Hosted provider unavailable: OpenAI package is not installed.") from exc
            self._client = OpenAI(
                api_key=self._config.api_key,
                base_url=self._config.base_url,
                timeout=self._timeout,
                max_retries=0,
            )
        return self._client

    def complete(
        self,
        messages: Messages,
        *,
        temperature: float,
        max_tokens: int,
        response_format: Optional[Dict[str, str]] = None,
    ) -> str:
        client = self._get_client()
        kwargs: Dict[str, Any] = {
            "model": self._config.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if response_format:
            kwargs["response_format"] = response_format
        try:
            response = client.chat.completions.create(**kwargs)
        except Exception as exc:
            raise TransportFailure(f"Hosted chat request failed: {exc}") from exc

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as exc:
            raise TransportFailure("Hosted reply is missing choices[0].message.content.") from exc
        if not isinstance(content, str) or not content.strip():
            raise TransportFailure("Hosted reply content is empty.")
        return content


def build_transport(config: ProviderConfig, *, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> ChatTransport:
    """Return the transport matching an explicit provider configuration."""

    if isinstance(config, LocalProviderConfig):
        logger.debug("Using local chat provider at %s (model=%s)", config.base_url, config.model)
        return HttpChatTransport(config, timeout=timeout)
    if isinstance(config, HostedProviderConfig):
        logger.debug("Using hosted chat provider at %s (model=%s)", config.base_url, config.model)
        return OpenAIChatTransport(config, timeout=timeout)
    raise ValueError(f"Unsupported provider configuration: {config!r}")


__all__ = [
    "ChatTransport",
    "DEFAULT_TIMEOUT_SECONDS",
    "HostedProviderConfig",
    "HttpChatTransport",
    "LocalProviderConfig",
    "OpenAIChatTransport",
    "ProviderConfig",
    "build_transport",
]
