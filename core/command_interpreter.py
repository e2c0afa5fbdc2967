"""Public entry point turning one utterance into a resolved command.

The interpreter tries the remote model first (when one is configured), falls
back to the keyword classifier on any remote failure, then post-processes the
command: the negation guard, shopping-vs-reminder disambiguation, title
synthesis and due-time resolution. Information it could not derive is
reported through ``InputRequest`` values instead of being guessed.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from core.commands import (
    InterpretedCommand,
    PantryAddCommand,
    PantryQueryCommand,
    ReminderCommand,
    Utterance,
    command_to_dict,
)
from core.entity_extractor import (
    canonical_item,
    extract_item_name,
    extract_multiple_items,
    extract_quantity,
    extract_unit,
    has_completed_purchase,
    has_negation,
    has_purchase_intent,
    is_usable_item,
)
from core.errors import InterpreterError, TransportFailure
from core.fallback_classifier import classify, shopping_title
from core.lexicon import DEFAULT_LEXICON, Lexicon
from core.parser_utils.text import contains_marker, tokenize
from core.remote_interpreter import RemoteInterpreter
from core.time_resolver import resolve_with_class

logger = logging.getLogger(__name__)


class InterpreterState(str, Enum):
    IDLE = "idle"
    AWAITING_REMOTE = "awaiting_remote"
    REMOTE_OK = "remote_ok"
    REMOTE_FAILED = "remote_failed"
    RESOLVED = "resolved"


class InputRequest(str, Enum):
    MANUAL_TIME = "manual_time"
    ITEM_NAME = "item_name"
    PANTRY_CONFIRMATION = "pantry_confirmation"


@dataclass
class InterpretationResult:
    utterance: Utterance
    command: InterpretedCommand
    source: str
    due_at: Optional[datetime] = None
    time_class: Optional[str] = None
    pending: List[InputRequest] = field(default_factory=list)
    is_shopping: bool = False
    fallback_triggered: bool = False
    failure_reason: Optional[str] = None
    states: List[InterpreterState] = field(default_factory=list)
    latency_ms: float = 0.0

    @property
    def intent(self) -> str:
        return self.command.intent.value

    def needs(self, request: InputRequest) -> bool:
        return request in self.pending

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.utterance.text,
            "language": self.utterance.language,
            "command": command_to_dict(self.command),
            "source": self.source,
            "dueAt": self.due_at.isoformat() if self.due_at else None,
            "timeClass": self.time_class,
            "pending": [request.value for request in self.pending],
            "isShopping": self.is_shopping,
            "fallbackTriggered": self.fallback_triggered,
            "failureReason": self.failure_reason,
            "states": [state.value for state in self.states],
            "latencyMs": round(self.latency_ms, 3),
        }


# ---------------------------------------------------------------------------
# Post-processing
# ---------------------------------------------------------------------------


def is_stop_phrase(title: Optional[str], lexicon: Lexicon = DEFAULT_LEXICON) -> bool:
    """True for titles made only of stop words, e.g. ``है खरीदना``."""

    tokens = tokenize(title or "")
    return not tokens or all(lexicon.is_stop_word(token) for token in tokens)


def _usable_or_none(name: Optional[str], lexicon: Lexicon) -> Optional[str]:
    if not name or not is_usable_item(name, lexicon):
        return None
    return canonical_item(name, lexicon)


def _fill_quantity(
    quantity: Optional[float], unit: Optional[str], text: str, lexicon: Lexicon
) -> Tuple[Optional[float], Optional[str]]:
    if quantity is None:
        quantity = extract_quantity(text) or None
    if unit is None and contains_marker(text, lexicon.unit):
        unit = extract_unit(text)
    return quantity, unit


def negation_guard(
    command: InterpretedCommand, utterance: Utterance, lexicon: Lexicon = DEFAULT_LEXICON
) -> InterpretedCommand:
    """Turn a negated pantry addition into a shopping reminder."""

    if not isinstance(command, PantryAddCommand):
        return command
    if not (command.is_negated or has_negation(utterance.text, lexicon, utterance.language)):
        return command
    return ReminderCommand(
        confidence=command.confidence,
        item_name=command.item_names[0] if command.item_names else None,
        quantity=command.quantity,
        unit=command.unit,
        is_negated=True,
        add_to_pantry=False,
        reminder_type="shopping",
        extras=dict(command.extras),
    )


def finish_reminder(
    command: ReminderCommand, utterance: Utterance, now: datetime, lexicon: Lexicon = DEFAULT_LEXICON
) -> Tuple[ReminderCommand, Optional[datetime], Optional[str], List[InputRequest], bool]:
    """Resolve item, title, due time and pending requests for a reminder."""

    text = utterance.text
    negated = command.is_negated or has_negation(text, lexicon, utterance.language)
    buying = has_purchase_intent(text, lexicon) or (negated and has_completed_purchase(text, lexicon))
    item = _usable_or_none(command.item_name, lexicon) or _usable_or_none(extract_item_name(text, lexicon), lexicon)
    is_shopping = buying and item is not None

    if command.title and not is_stop_phrase(command.title, lexicon):
        title = command.title
    elif is_shopping:
        title = shopping_title(item, utterance.language)
    else:
        title = text.strip()

    resolved = resolve_with_class(command.when, now) if command.when else None
    if resolved is None:
        resolved = resolve_with_class(text, now)
    time_class, due_at = resolved if resolved else (None, None)

    quantity, unit = _fill_quantity(command.quantity, command.unit, text, lexicon)
    finished = replace(
        command,
        title=title,
        item_name=item if is_shopping else _usable_or_none(command.item_name, lexicon),
        quantity=quantity,
        unit=unit,
        is_negated=negated,
        reminder_type="shopping" if is_shopping else (command.reminder_type or "task"),
    )
    pending = [] if due_at else [InputRequest.MANUAL_TIME]
    return finished, due_at, time_class, pending, is_shopping


def finish_pantry_add(
    command: PantryAddCommand, utterance: Utterance, lexicon: Lexicon = DEFAULT_LEXICON
) -> Tuple[PantryAddCommand, List[InputRequest], bool]:
    """Resolve item list and quantity, then decide whether confirmation is needed."""

    text = utterance.text
    items = _dedupe(_usable_or_none(name, lexicon) for name in command.item_names)
    if not items:
        items = [name for name in extract_multiple_items(text, lexicon) if is_usable_item(name, lexicon)]
    quantity, unit = _fill_quantity(command.quantity, command.unit, text, lexicon)
    is_shopping = has_purchase_intent(text, lexicon)

    pending: List[InputRequest] = []
    if not items:
        pending.append(InputRequest.ITEM_NAME)
    if not (command.add_to_pantry and not is_shopping):
        pending.append(InputRequest.PANTRY_CONFIRMATION)
    finished = replace(command, item_names=items, quantity=quantity, unit=unit)
    return finished, pending, is_shopping


def _dedupe(names: Iterable[Optional[str]]) -> List[str]:
    unique: List[str] = []
    for name in names:
        if name and name not in unique:
            unique.append(name)
    return unique


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class CommandInterpreter:
    """Remote-first interpretation with deterministic fallback."""

    def __init__(
        self,
        remote: Optional[RemoteInterpreter] = None,
        *,
        lexicon: Lexicon = DEFAULT_LEXICON,
        clock: Callable[[], datetime] = datetime.now,
        log: Optional[Any] = None,
    ) -> None:
        self._remote = remote
        self._lexicon = lexicon
        self._clock = clock
        self._log = log

    @property
    def lexicon(self) -> Lexicon:
        return self._lexicon

    @property
    def remote_enabled(self) -> bool:
        return self._remote is not None

    def interpret(
        self,
        text: str,
        language: str = "en",
        context: Optional[Iterable[str]] = None,
        *,
        now: Optional[datetime] = None,
    ) -> InterpretationResult:
        """Interpret ``text``; remote failures are recovered, never raised."""

        started = time.perf_counter()
        utterance = Utterance(text=text, language=language, context=tuple(context or ()))
        reference = now or self._clock()

        states = [InterpreterState.IDLE]
        source = "fallback"
        failure_reason: Optional[str] = None
        command: Optional[InterpretedCommand] = None

        if self._remote is not None:
            states.append(InterpreterState.AWAITING_REMOTE)
            try:
                command = self._remote.interpret(utterance)
            except InterpreterError as exc:
                logger.warning("Remote interpretation failed (%s): %s", exc.reason, exc)
                failure_reason = exc.reason
            except Exception:
                logger.exception("Remote transport raised an unexpected error")
                failure_reason = TransportFailure.reason
            if command is None:
                states.append(InterpreterState.REMOTE_FAILED)
            else:
                states.append(InterpreterState.REMOTE_OK)
                source = "remote"

        if command is None:
            logger.debug("Using fallback classifier for %r", utterance.text)
            command = classify(utterance, self._lexicon)

        result = self._post_process(utterance, command, reference)
        result.source = source
        result.fallback_triggered = source == "fallback"
        result.failure_reason = failure_reason
        states.append(InterpreterState.RESOLVED)
        result.states = states
        result.latency_ms = (time.perf_counter() - started) * 1000.0

        if self._log is not None:
            self._log.log(result)
        return result

    # WHAT: apply the negation guard then the per-intent finishing step.
    # HOW: reminders and pantry additions get their own helper; queries only canonicalize.
    def _post_process(self, utterance: Utterance, command: InterpretedCommand, now: datetime) -> InterpretationResult:
        command = negation_guard(command, utterance, self._lexicon)
        result = InterpretationResult(utterance=utterance, command=command, source="fallback")

        if isinstance(command, ReminderCommand):
            finished, due_at, time_class, pending, is_shopping = finish_reminder(command, utterance, now, self._lexicon)
            result.command = finished
            result.due_at = due_at
            result.time_class = time_class
            result.pending = pending
            result.is_shopping = is_shopping
        elif isinstance(command, PantryAddCommand):
            finished_pantry, pending, is_shopping = finish_pantry_add(command, utterance, self._lexicon)
            result.command = finished_pantry
            result.pending = pending
            result.is_shopping = is_shopping
        elif isinstance(command, PantryQueryCommand) and command.item_name:
            result.command = replace(command, item_name=canonical_item(command.item_name, self._lexicon))
        return result


__all__ = [
    "CommandInterpreter",
    "InputRequest",
    "InterpretationResult",
    "InterpreterState",
    "finish_pantry_add",
    "finish_reminder",
    "is_stop_phrase",
    "negation_guard",
]
