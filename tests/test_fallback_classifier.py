import pytest

from core.commands import (
    Intent,
    PantryAddCommand,
    RecipeRequestCommand,
    ReminderCommand,
    UnknownCommand,
    Utterance,
)
from core.fallback_classifier import classify


def test_purchase_with_quantity_is_a_shopping_reminder():
    command = classify(Utterance("mujhe 2 kilo doodh lena hai", "hi"))

    assert isinstance(command, ReminderCommand)
    assert command.confidence == 0.7
    assert command.item_name == "दूध"
    assert command.quantity == 2
    assert command.unit == "kg"
    assert command.title == "दूध खरीदना"
    assert command.reminder_type == "shopping"
    assert command.is_negated is False


def test_english_shopping_reminder_title():
    command = classify(Utterance("please buy onions", "en"))

    assert isinstance(command, ReminderCommand)
    assert command.title == "Buy प्याज"
    assert command.quantity is None
    assert command.unit is None


def test_scheduling_words_make_a_task_reminder():
    command = classify(Utterance("remind me to call the doctor tomorrow"))

    assert isinstance(command, ReminderCommand)
    assert command.reminder_type == "task"
    assert command.title == "remind me to call the doctor tomorrow"
    assert command.item_name is None


def test_completed_purchase_is_a_pantry_addition():
    command = classify(Utterance("I bought milk"))

    assert isinstance(command, PantryAddCommand)
    assert command.confidence == 0.6
    assert command.item_names == ["दूध"]
    assert command.add_to_pantry is False


def test_unit_words_without_verbs_are_pantry_additions():
    command = classify(Utterance("2 kilo aloo aur 1 kg pyaz", "hi"))

    assert isinstance(command, PantryAddCommand)
    assert command.item_names == ["आलू", "प्याज"]
    assert command.quantity == 2
    assert command.unit == "kg"


def test_negated_completed_purchase_becomes_reminder():
    command = classify(Utterance("I haven't bought tomatoes"))

    assert isinstance(command, ReminderCommand)
    assert command.is_negated is True
    assert command.reminder_type == "shopping"
    assert command.item_name == "टमाटर"
    assert command.title == "Buy टमाटर"


def test_meal_words_request_recipes():
    command = classify(Utterance("what can I cook for dinner"))

    assert isinstance(command, RecipeRequestCommand)
    assert command.confidence == 0.6
    assert command.query == "what can I cook for dinner"


def test_unmatched_phrase_is_unknown():
    command = classify(Utterance("hello there"))

    assert isinstance(command, UnknownCommand)
    assert command.intent is Intent.UNKNOWN
    assert command.confidence == 0.3


def test_reminder_markers_beat_meal_markers():
    command = classify(Utterance("remind me to cook dinner"))

    assert isinstance(command, ReminderCommand)


@pytest.mark.parametrize(
    "text,language",
    [
        ("I haven't bought milk", "en"),
        ("I didn't buy 2 kg rice", "en"),
        ("2 kilo doodh nahi", "hi"),
        ("अभी टमाटर नहीं खरीदे", "hi"),
        ("मैं दूध नहीं ले आया", "hi"),
    ],
)
def test_negated_phrases_are_never_pantry_additions(text, language):
    command = classify(Utterance(text, language))

    assert command.intent is not Intent.PANTRY_ADD


def test_english_noun_mat_keeps_pantry_addition():
    command = classify(Utterance("I bought a yoga mat", "en"))

    assert isinstance(command, PantryAddCommand)
    assert command.is_negated is False
    assert command.item_names == ["mat"]
