"""JSONL audit log for interpretation results.

One record is appended per interpretation. Text-bearing fields are scrubbed
of emails, phone numbers and URLs before they reach disk, and the file is
rotated to numbered backups once it grows past the configured size.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, IO, Iterable, List, Optional, Pattern

logger = logging.getLogger(__name__)

_KNOWN_PATTERNS: Dict[str, Pattern[str]] = {
    "email": re.compile(r"\b[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}\b", re.IGNORECASE),
    "url": re.compile(r"https?://[^\s]+", re.IGNORECASE),
    "phone": re.compile(r"(?:\+?\d[\d\s\-().]{6,}\d)"),
}
# URLs and emails first so their digits are not mistaken for phone numbers.
_PATTERN_ORDER = ("email", "url", "phone")
_REDACT_FIELDS = {"text", "fields", "extras", "failure_reason"}


def _utc_now() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


@dataclass
class InterpretationRecord:
    """Flat, JSON-friendly view of one ``InterpretationResult``."""

    timestamp: str
    text: str
    language: str
    intent: str
    confidence: float
    source: str
    fallback_triggered: bool = False
    failure_reason: Optional[str] = None
    pending: List[str] = field(default_factory=list)
    fields: Dict[str, Any] = field(default_factory=dict)
    extras: Dict[str, Any] = field(default_factory=dict)
    due_at: Optional[str] = None
    time_class: Optional[str] = None
    is_shopping: bool = False
    latency_ms: Optional[float] = None

    @classmethod
    def from_result(cls, result: Any) -> "InterpretationRecord":
        """WHAT: snapshot an interpretation result with a fresh UTC timestamp.

        HOW: read the command's wire fields and the orchestrator metadata;
        datetimes are rendered as ISO-8601 strings.
        """

        command = result.command
        return cls(
            timestamp=_utc_now(),
            text=result.utterance.text,
            language=result.utterance.language,
            intent=command.intent.value,
            confidence=command.confidence,
            source=result.source,
            fallback_triggered=result.fallback_triggered,
            failure_reason=result.failure_reason,
            pending=[request.value for request in result.pending],
            fields=command.fields(),
            extras=dict(command.extras),
            due_at=result.due_at.isoformat() if result.due_at else None,
            time_class=result.time_class,
            is_shopping=result.is_shopping,
            latency_ms=round(result.latency_ms, 3),
        )


class InterpretationLogger:
    """Append-only JSONL writer with redaction and size-based rotation."""

    def __init__(
        self,
        *,
        log_path: Path,
        enabled: bool = True,
        redact: bool = True,
        patterns: Iterable[str] | None = None,
        max_bytes: int = 0,
        backup_count: int = 0,
    ) -> None:
        self._log_path = Path(log_path)
        self._enabled = enabled
        self._redact = redact
        self._max_bytes = max_bytes
        self._backup_count = backup_count
        selected = set(patterns) if patterns else set(_KNOWN_PATTERNS)
        self._redaction_patterns = [
            (key, _KNOWN_PATTERNS[key]) for key in _PATTERN_ORDER if key in selected
        ]

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def log_path(self) -> Path:
        return self._log_path

    def log(self, result: Any) -> None:
        """Persist ``result``; disk errors are logged and never interrupt the caller."""

        if not self._enabled:
            return
        try:
            self.write(InterpretationRecord.from_result(result))
        except OSError:
            logger.exception("Could not write interpretation log to %s", self._log_path)

    def write(self, record: InterpretationRecord) -> None:
        if not self._enabled:
            return
        self._append_json_line(asdict(record))

    def _append_json_line(self, payload: Dict[str, Any]) -> None:
        """WHAT: append one redacted JSON line, rotating first when over size.

        HOW: serialize with ``ensure_ascii=False`` so Devanagari stays readable,
        measure the encoded size and hand it to ``_rotate_if_needed``.
        """

        self._log_path.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(self._prepare_payload(payload), ensure_ascii=False)
        self._rotate_if_needed(len(line.encode("utf-8")) + 1)
        with self._open_file(self._log_path) as handle:
            handle.write(line)
            handle.write("\n")

    @staticmethod
    def _open_file(path: Path) -> IO[str]:
        return path.open("a", encoding="utf-8")

    def _prepare_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self._redact or not self._redaction_patterns:
            return payload
        return {
            key: self._scrub_value(value) if key in _REDACT_FIELDS else value
            for key, value in payload.items()
        }

    def _scrub_value(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {key: self._scrub_value(item) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._scrub_value(item) for item in value]
        if isinstance(value, str):
            return self._scrub_string(value)
        return value

    def _scrub_string(self, value: str) -> str:
        for key, pattern in self._redaction_patterns:
            value = pattern.sub(f"[REDACTED_{key.upper()}]", value)
        return value

    def _rotate_if_needed(self, incoming_bytes: int) -> None:
        """WHAT: keep the active file under ``max_bytes``.

        HOW: shift ``log.N`` to ``log.N+1`` (dropping the oldest), move the
        active file to ``log.1``; with no backups configured the file is
        simply truncated by removal.
        """

        path = self._log_path
        if self._max_bytes <= 0 or not path.exists():
            return
        if path.stat().st_size + incoming_bytes <= self._max_bytes:
            return

        if self._backup_count <= 0:
            path.unlink()
            return

        oldest = Path(f"{path}.{self._backup_count}")
        if oldest.exists():
            oldest.unlink()
        for index in range(self._backup_count - 1, 0, -1):
            source = Path(f"{path}.{index}")
            if source.exists():
                source.replace(Path(f"{path}.{index + 1}"))
        path.replace(Path(f"{path}.1"))


__all__ = ["InterpretationLogger", "InterpretationRecord"]
