"""FastAPI application exposing the command interpreter over HTTP."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from app.main import build_interpreter, build_recipe_suggester
from core.command_interpreter import CommandInterpreter
from core.followups import read_chosen_time, schedule_reminder
from core.recipes import PantryItem, RecipeSuggester


class InterpretRequest(BaseModel):
    text: str
    language: str = "en"
    context: List[str] = Field(default_factory=list)
    now: Optional[datetime] = None


class ScheduleRequest(InterpretRequest):
    chosen_time: Optional[str] = None
    chosen_at: Optional[datetime] = None


class PantryItemPayload(BaseModel):
    item_name: str
    quantity: float = 1
    unit: str = "pieces"
    category: Optional[str] = None


class RecipeRequest(BaseModel):
    pantry_items: List[PantryItemPayload] = Field(default_factory=list)
    meal_type: Optional[str] = None
    language: str = "en"


def _draft_dict(draft: Any) -> Dict[str, Any]:
    return {
        "title": draft.title,
        "dueAt": draft.due_at.isoformat() if draft.due_at else None,
        "reminderType": draft.reminder_type,
        "itemName": draft.item_name,
        "quantity": draft.quantity,
        "unit": draft.unit,
        "language": draft.language,
    }


def create_app(
    interpreter: Optional[CommandInterpreter] = None,
    recipe_suggester: Optional[RecipeSuggester] = None,
) -> FastAPI:
    """WHAT: build the FastAPI app around one shared interpreter.

    HOW: collaborators default to the same wiring the CLI uses
    (``app.main.build_interpreter``); tests pass stubs instead.
    """

    app = FastAPI(title="Bilingual command interpreter")
    app.state.interpreter = interpreter or build_interpreter()
    app.state.recipe_suggester = recipe_suggester or build_recipe_suggester()

    def _interpret(payload: InterpretRequest):
        clean = (payload.text or "").strip()
        if not clean:
            raise HTTPException(status_code=400, detail="Text is required.")
        try:
            return app.state.interpreter.interpret(clean, payload.language, payload.context, now=payload.now)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    @app.get("/api/health")
    def health_check() -> Dict[str, Any]:
        return {
            "status": "ok",
            "remote": app.state.interpreter.remote_enabled,
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        }

    @app.post("/api/interpret")
    def interpret(payload: InterpretRequest) -> Dict[str, Any]:
        return _interpret(payload).to_dict()

    @app.post("/api/reminders/schedule")
    def schedule(payload: ScheduleRequest) -> Dict[str, Any]:
        """Interpret a reminder phrase and complete its due time in one call."""

        result = _interpret(payload)
        if result.intent not in {"reminder", "pantry_add"}:
            raise HTTPException(status_code=400, detail=f"'{result.intent}' is not a reminder.")
        now = payload.now or datetime.now()
        try:
            chosen = payload.chosen_at or read_chosen_time(payload.chosen_time, now)
            draft = schedule_reminder(result, chosen, now)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        return {"interpretation": result.to_dict(), "reminder": _draft_dict(draft)}

    @app.post("/api/recipes/suggest")
    def suggest_recipes(payload: RecipeRequest) -> Dict[str, Any]:
        if payload.language not in {"en", "hi"}:
            raise HTTPException(status_code=400, detail="Language must be 'en' or 'hi'.")
        items = [
            PantryItem(item_name=item.item_name, quantity=item.quantity, unit=item.unit, category=item.category)
            for item in payload.pantry_items
        ]
        recipes = app.state.recipe_suggester.suggest(items, payload.meal_type, payload.language)
        return {"recipes": [recipe.to_dict() for recipe in recipes]}

    return app


if __name__ == "__main__":
    import uvicorn
    from app.config import get_web_host, get_web_port

    uvicorn.run(
        create_app(),
        host=get_web_host(),
        port=get_web_port(),
        reload=False,
    )
