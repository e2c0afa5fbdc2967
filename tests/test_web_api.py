from __future__ import annotations

import json
from pathlib import Path

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from app.web_api import create_app
from core.command_interpreter import CommandInterpreter
from core.errors import TransportFailure
from core.interpretation_log import InterpretationLogger
from core.recipes import RecipeSuggester
from core.remote_interpreter import RemoteInterpreter

NOW = "2025-01-15T10:30:00"


class StubTransport:
    def __init__(self, reply: str = "", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error

    def complete(self, messages, *, temperature, max_tokens, response_format=None):
        if self.error:
            raise self.error
        return self.reply


def build_client(interpreter: CommandInterpreter | None = None) -> TestClient:
    app = create_app(interpreter=interpreter or CommandInterpreter(), recipe_suggester=RecipeSuggester())
    return TestClient(app)


def test_health_reports_remote_mode() -> None:
    offline = build_client().get("/api/health").json()
    online = build_client(CommandInterpreter(RemoteInterpreter(StubTransport()))).get("/api/health").json()

    assert offline["status"] == "ok"
    assert offline["remote"] is False
    assert online["remote"] is True


def test_interpret_returns_result_payload() -> None:
    client = build_client()

    response = client.post("/api/interpret", json={"text": "mujhe 2 kilo doodh lena hai", "language": "hi", "now": NOW})

    assert response.status_code == 200
    payload = response.json()
    assert payload["command"]["intent"] == "reminder"
    assert payload["command"]["fields"]["itemName"] == "दूध"
    assert payload["command"]["fields"]["quantity"] == 2
    assert payload["pending"] == ["manual_time"]
    assert payload["isShopping"] is True
    assert payload["source"] == "fallback"


def test_interpret_reports_remote_failure() -> None:
    interpreter = CommandInterpreter(RemoteInterpreter(StubTransport(error=TransportFailure("down"))))

    payload = build_client(interpreter).post("/api/interpret", json={"text": "I bought milk", "now": NOW}).json()

    assert payload["fallbackTriggered"] is True
    assert payload["failureReason"] == "transport_failure"
    assert payload["states"] == ["idle", "awaiting_remote", "remote_failed", "resolved"]


def test_interpret_rejects_empty_text_and_unknown_language() -> None:
    client = build_client()

    assert client.post("/api/interpret", json={"text": "   "}).status_code == 400
    assert client.post("/api/interpret", json={"text": "bonjour", "language": "fr"}).status_code == 400


def test_interpret_writes_audit_log(tmp_path: Path) -> None:
    path = tmp_path / "interpretations.jsonl"
    client = build_client(CommandInterpreter(log=InterpretationLogger(log_path=path)))

    client.post("/api/interpret", json={"text": "I bought milk", "now": NOW})

    record = json.loads(path.read_text(encoding="utf-8").splitlines()[0])
    assert record["intent"] == "pantry_add"


def test_schedule_uses_chosen_time_phrase() -> None:
    response = build_client().post(
        "/api/reminders/schedule",
        json={"text": "mujhe 2 kilo doodh lena hai", "language": "hi", "now": NOW, "chosen_time": "6 pm"},
    )

    assert response.status_code == 200
    reminder = response.json()["reminder"]
    assert reminder["title"] == "दूध खरीदना"
    assert reminder["dueAt"] == "2025-01-15T18:00:00"
    assert reminder["reminderType"] == "shopping"
    assert reminder["quantity"] == 2


def test_schedule_defaults_to_one_hour_later() -> None:
    response = build_client().post("/api/reminders/schedule", json={"text": "buy onions", "now": NOW})

    assert response.json()["reminder"]["dueAt"] == "2025-01-15T11:30:00"


def test_schedule_rejects_unreadable_time_and_non_reminders() -> None:
    client = build_client()

    unreadable = client.post(
        "/api/reminders/schedule", json={"text": "buy onions", "now": NOW, "chosen_time": "whenever"}
    )
    recipe = client.post("/api/reminders/schedule", json={"text": "what can I cook for dinner", "now": NOW})

    assert unreadable.status_code == 400
    assert recipe.status_code == 400


def test_recipe_suggestions_use_fallback_without_model() -> None:
    response = build_client().post(
        "/api/recipes/suggest",
        json={"pantry_items": [{"item_name": "दूध", "quantity": 1, "unit": "liter"}], "meal_type": "breakfast"},
    )

    assert response.status_code == 200
    recipes = response.json()["recipes"]
    assert recipes[0]["recipeName"] == "Milk Tea / दूध की चाय"


def test_recipe_suggestions_validate_language() -> None:
    response = build_client().post("/api/recipes/suggest", json={"pantry_items": [], "language": "fr"})

    assert response.status_code == 400
