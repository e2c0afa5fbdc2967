"""Completion helpers for results that still need input from the caller.

An ``InterpretationResult`` may carry pending ``InputRequest`` values. These
helpers apply the caller's answer and return plain draft records that a
storage layer can persist as is.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import List, Optional, Union

from core.command_interpreter import InputRequest, InterpretationResult, finish_pantry_add
from core.commands import PantryAddCommand, ReminderCommand
from core.entity_extractor import canonical_item, is_usable_item
from core.errors import NoExtractableEntity, UnresolvedTime
from core.fallback_classifier import shopping_title
from core.lexicon import DEFAULT_LEXICON, Lexicon
from core.time_resolver import resolve

DEFAULT_REMINDER_DELAY = timedelta(hours=1)


@dataclass
class ReminderDraft:
    title: str
    due_at: Optional[datetime]
    reminder_type: str = "task"
    item_name: Optional[str] = None
    quantity: Optional[float] = None
    unit: Optional[str] = None
    language: str = "en"
    original_text: str = ""


@dataclass
class PantryDraft:
    item_name: str
    quantity: float = 1
    unit: str = "pieces"
    added_at: Optional[datetime] = None


def _reminder_from_result(result: InterpretationResult) -> ReminderDraft:
    command = result.command
    text = result.utterance.text
    if isinstance(command, ReminderCommand):
        return ReminderDraft(
            title=command.title or text,
            due_at=result.due_at,
            reminder_type=command.reminder_type or "task",
            item_name=command.item_name,
            quantity=command.quantity,
            unit=command.unit,
            language=result.utterance.language,
            original_text=text,
        )
    if isinstance(command, PantryAddCommand):
        item = command.item_names[0] if command.item_names else None
        return ReminderDraft(
            title=shopping_title(item, result.utterance.language) if item else text,
            due_at=None,
            reminder_type="shopping",
            item_name=item,
            quantity=command.quantity,
            unit=command.unit,
            language=result.utterance.language,
            original_text=text,
        )
    raise ValueError(f"Cannot build a reminder from a '{result.intent}' command.")


def read_chosen_time(answer: Optional[str], now: datetime) -> Optional[datetime]:
    """Read a typed time answer; blank means "use the default", unreadable raises."""

    if not (answer or "").strip():
        return None
    chosen = resolve(answer, now)
    if chosen is None:
        raise UnresolvedTime(f"Could not read a time from {answer!r}.")
    return chosen


def schedule_reminder(
    result: InterpretationResult,
    chosen_at: Optional[datetime],
    now: datetime,
    default_delay: timedelta = DEFAULT_REMINDER_DELAY,
) -> ReminderDraft:
    """Complete a manual-time request.

    ``chosen_at`` is the instant the caller picked; ``None`` means the caller
    skipped the picker, which schedules the reminder at ``now + default_delay``.
    A result that already resolved its own time keeps it unless the caller
    supplies one.
    """

    draft = _reminder_from_result(result)
    if chosen_at is not None:
        draft.due_at = chosen_at
    elif draft.due_at is None:
        draft.due_at = now + default_delay
    return draft


def confirm_pantry_addition(
    result: InterpretationResult,
    confirmed: bool,
    now: datetime,
) -> Union[List[PantryDraft], ReminderDraft]:
    """Yes turns a pantry addition into drafts; no turns it into a shopping reminder.

    The reminder returned on "no" has no due time yet, so the caller must
    follow up with :func:`schedule_reminder` semantics.
    """

    command = result.command
    if not isinstance(command, PantryAddCommand):
        raise ValueError(f"Only pantry additions need confirmation, got '{result.intent}'.")
    if not confirmed:
        return _reminder_from_result(result)
    if not command.item_names:
        raise NoExtractableEntity("Pantry addition has no item name to store.")
    return [
        PantryDraft(
            item_name=name,
            quantity=command.quantity if command.quantity else 1,
            unit=command.unit or "pieces",
            added_at=now,
        )
        for name in command.item_names
    ]


def supply_item_name(
    result: InterpretationResult,
    name: str,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> InterpretationResult:
    """Fill an item the caller re-prompted for; blank or unusable input raises."""

    value = (name or "").strip()
    if not is_usable_item(value, lexicon):
        raise NoExtractableEntity("Could not find an item name in the reply.")
    item = canonical_item(value, lexicon)
    command = result.command

    if isinstance(command, PantryAddCommand):
        updated, pending, is_shopping = finish_pantry_add(replace(command, item_names=[item]), result.utterance, lexicon)
        return replace(result, command=updated, pending=pending, is_shopping=is_shopping)
    if isinstance(command, ReminderCommand):
        title = command.title
        if not title or title == result.utterance.text.strip():
            title = shopping_title(item, result.utterance.language)
        updated_reminder = replace(command, item_name=item, title=title, reminder_type="shopping")
        pending = [request for request in result.pending if request is not InputRequest.ITEM_NAME]
        return replace(result, command=updated_reminder, pending=pending, is_shopping=True)
    raise ValueError(f"'{result.intent}' commands do not take an item name.")


__all__ = [
    "DEFAULT_REMINDER_DELAY",
    "PantryDraft",
    "ReminderDraft",
    "confirm_pantry_addition",
    "read_chosen_time",
    "schedule_reminder",
    "supply_item_name",
]
