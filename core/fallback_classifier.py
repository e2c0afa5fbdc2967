"""Keyword-driven intent classification used when the remote model is unavailable."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from core.commands import (
    InterpretedCommand,
    PantryAddCommand,
    RecipeRequestCommand,
    ReminderCommand,
    UnknownCommand,
    Utterance,
)
from core.entity_extractor import (
    extract_item_name,
    extract_multiple_items,
    extract_quantity,
    extract_unit,
    has_completed_purchase,
    has_negation,
    has_purchase_intent,
    is_usable_item,
)
from core.lexicon import DEFAULT_LEXICON, Lexicon
from core.parser_utils.text import contains_marker

REMINDER_CONFIDENCE = 0.7
PANTRY_CONFIDENCE = 0.6
RECIPE_CONFIDENCE = 0.6
UNKNOWN_CONFIDENCE = 0.3


def shopping_title(item: str, language: str) -> str:
    return f"{item} खरीदना" if language == "hi" else f"Buy {item}"


def _quantity_or_none(text: str) -> Optional[float]:
    quantity = extract_quantity(text)
    return quantity or None


def _unit_or_none(text: str, lexicon: Lexicon) -> Optional[str]:
    return extract_unit(text) if contains_marker(text, lexicon.unit) else None


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FallbackRule:
    """One ordered entry: a predicate over the utterance and its command builder."""

    name: str
    matches: Callable[[Utterance, Lexicon], bool]
    build: Callable[[Utterance, Lexicon], InterpretedCommand]


def _is_reminder(utterance: Utterance, lexicon: Lexicon) -> bool:
    return contains_marker(utterance.text, lexicon.scheduling) or has_purchase_intent(utterance.text, lexicon)


def _build_reminder(utterance: Utterance, lexicon: Lexicon) -> ReminderCommand:
    text = utterance.text
    shopping = has_purchase_intent(text, lexicon)
    item = extract_item_name(text, lexicon) if shopping else ""
    usable = is_usable_item(item, lexicon)
    return ReminderCommand(
        confidence=REMINDER_CONFIDENCE,
        title=shopping_title(item, utterance.language) if usable else text.strip(),
        item_name=item if usable else None,
        quantity=_quantity_or_none(text),
        unit=_unit_or_none(text, lexicon),
        is_negated=has_negation(text, lexicon, utterance.language),
        reminder_type="shopping" if shopping else "task",
    )


def _is_pantry(utterance: Utterance, lexicon: Lexicon) -> bool:
    text = utterance.text
    return contains_marker(text, lexicon.unit) or has_completed_purchase(text, lexicon)


def _build_pantry(utterance: Utterance, lexicon: Lexicon) -> InterpretedCommand:
    text = utterance.text
    items = [item for item in extract_multiple_items(text, lexicon) if is_usable_item(item, lexicon)]
    quantity = _quantity_or_none(text)
    unit = _unit_or_none(text, lexicon)
    if has_negation(text, lexicon, utterance.language):
        # "I haven't bought tomatoes" is a shopping need, not stock.
        item = items[0] if items else None
        return ReminderCommand(
            confidence=REMINDER_CONFIDENCE,
            title=shopping_title(item, utterance.language) if item else text.strip(),
            item_name=item,
            quantity=quantity,
            unit=unit,
            is_negated=True,
            reminder_type="shopping",
        )
    return PantryAddCommand(confidence=PANTRY_CONFIDENCE, item_names=items, quantity=quantity, unit=unit)


def _is_recipe(utterance: Utterance, lexicon: Lexicon) -> bool:
    return contains_marker(utterance.text, lexicon.recipe)


def _build_recipe(utterance: Utterance, lexicon: Lexicon) -> RecipeRequestCommand:
    return RecipeRequestCommand(confidence=RECIPE_CONFIDENCE, query=utterance.text.strip() or None)


RULES: Tuple[FallbackRule, ...] = (
    FallbackRule("reminder", _is_reminder, _build_reminder),
    FallbackRule("pantry_add", _is_pantry, _build_pantry),
    FallbackRule("recipe_request", _is_recipe, _build_recipe),
)


def classify(utterance: Utterance, lexicon: Lexicon = DEFAULT_LEXICON) -> InterpretedCommand:
    """Return the command for the first matching rule, ``unknown`` otherwise.

    Reminder markers are checked before pantry markers, which are checked
    before meal markers, so "2 kilo doodh lena hai" stays a reminder even
    though it carries a unit word.
    """

    for rule in RULES:
        if rule.matches(utterance, lexicon):
            return rule.build(utterance, lexicon)
    return UnknownCommand(confidence=UNKNOWN_CONFIDENCE)


__all__ = [
    "FallbackRule",
    "PANTRY_CONFIDENCE",
    "RECIPE_CONFIDENCE",
    "REMINDER_CONFIDENCE",
    "RULES",
    "UNKNOWN_CONFIDENCE",
    "classify",
    "shopping_title",
]
