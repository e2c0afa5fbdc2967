from datetime import datetime, timedelta

import pytest

from core.command_interpreter import CommandInterpreter, InputRequest
from core.errors import NoExtractableEntity, UnresolvedTime
from core.followups import (
    PantryDraft,
    ReminderDraft,
    confirm_pantry_addition,
    read_chosen_time,
    schedule_reminder,
    supply_item_name,
)

NOW = datetime(2025, 1, 15, 10, 30)


def _interpret(text: str, language: str = "en"):
    return CommandInterpreter().interpret(text, language, now=NOW)


def test_skipped_time_picker_defaults_to_one_hour_later():
    draft = schedule_reminder(_interpret("mujhe 2 kilo doodh lena hai", "hi"), None, NOW)

    assert isinstance(draft, ReminderDraft)
    assert draft.due_at == NOW + timedelta(hours=1)
    assert draft.title == "दूध खरीदना"
    assert draft.reminder_type == "shopping"
    assert draft.item_name == "दूध"
    assert draft.quantity == 2
    assert draft.unit == "kg"
    assert draft.original_text == "mujhe 2 kilo doodh lena hai"


def test_chosen_time_wins_over_resolved_time():
    result = _interpret("doodh lena hai 6 baje", "hi")
    chosen = datetime(2025, 1, 16, 8, 0)

    assert schedule_reminder(result, None, NOW).due_at == datetime(2025, 1, 15, 18, 0)
    assert schedule_reminder(result, chosen, NOW).due_at == chosen


def test_custom_default_delay():
    draft = schedule_reminder(_interpret("buy onions"), None, NOW, default_delay=timedelta(minutes=15))

    assert draft.due_at == NOW + timedelta(minutes=15)


def test_confirmed_pantry_addition_becomes_drafts():
    drafts = confirm_pantry_addition(_interpret("I bought milk"), True, NOW)

    assert drafts == [PantryDraft(item_name="दूध", quantity=1, unit="pieces", added_at=NOW)]


def test_confirmed_multi_item_addition_keeps_quantity():
    drafts = confirm_pantry_addition(_interpret("2 kilo aloo aur 1 kg pyaz", "hi"), True, NOW)

    assert [draft.item_name for draft in drafts] == ["आलू", "प्याज"]
    assert all(draft.quantity == 2 and draft.unit == "kg" for draft in drafts)


def test_declined_pantry_addition_becomes_shopping_reminder():
    draft = confirm_pantry_addition(_interpret("I bought milk"), False, NOW)

    assert isinstance(draft, ReminderDraft)
    assert draft.reminder_type == "shopping"
    assert draft.title == "Buy दूध"
    assert draft.item_name == "दूध"
    assert draft.due_at is None


def test_confirmation_requires_pantry_addition():
    with pytest.raises(ValueError):
        confirm_pantry_addition(_interpret("remind me to call the doctor tomorrow"), True, NOW)


def test_confirming_without_item_raises():
    with pytest.raises(NoExtractableEntity):
        confirm_pantry_addition(_interpret("I bought it"), True, NOW)


def test_supplied_item_completes_pantry_addition():
    result = _interpret("I bought it")
    assert result.needs(InputRequest.ITEM_NAME)

    updated = supply_item_name(result, "milk")

    assert updated.command.item_names == ["दूध"]
    assert updated.pending == [InputRequest.PANTRY_CONFIRMATION]


def test_supplied_item_turns_reminder_into_shopping_reminder():
    result = _interpret("remind me to buy")
    assert result.command.item_name is None

    updated = supply_item_name(result, "tomatoes")

    assert updated.command.item_name == "टमाटर"
    assert updated.command.title == "Buy टमाटर"
    assert updated.command.reminder_type == "shopping"
    assert updated.is_shopping is True
    assert updated.pending == [InputRequest.MANUAL_TIME]


@pytest.mark.parametrize("answer", ["", "   ", "है", "खरीदना", "hai"])
def test_unusable_item_answers_raise(answer):
    with pytest.raises(NoExtractableEntity):
        supply_item_name(_interpret("I bought it"), answer)


def test_recipe_requests_do_not_take_items():
    with pytest.raises(ValueError):
        supply_item_name(_interpret("what can I cook for dinner"), "rice")


def test_typed_time_answers():
    assert read_chosen_time("", NOW) is None
    assert read_chosen_time("in 10 min", NOW) == NOW + timedelta(minutes=10)
    with pytest.raises(UnresolvedTime):
        read_chosen_time("whenever", NOW)
