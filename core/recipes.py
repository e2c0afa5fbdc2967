"""Recipe suggestions built from the current pantry contents."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from core.errors import InterpreterError
from core.prompts import RECIPE_SYSTEM_PROMPT, recipe_prompt
from core.transport import ChatTransport

logger = logging.getLogger(__name__)

TEMPERATURE = 0.3
MAX_TOKENS = 800
_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")
_RICE_NAMES = ("rice", "chawal", "चावल")
_MILK_NAMES = ("milk", "doodh", "दूध")


@dataclass(frozen=True)
class PantryItem:
    item_name: str
    quantity: float = 1
    unit: str = "pieces"
    category: Optional[str] = None

    def describe(self) -> str:
        return f"{self.item_name} ({self.quantity} {self.unit})"


@dataclass
class Ingredient:
    name: str
    quantity: Optional[str] = None
    unit: Optional[str] = None


@dataclass
class Recipe:
    recipe_name: str
    ingredients: List[Ingredient] = field(default_factory=list)
    instructions: str = ""
    meal_type: Optional[str] = None
    cuisine_type: Optional[str] = None
    missing_ingredients: List[Ingredient] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recipeName": self.recipe_name,
            "ingredients": [_ingredient_dict(item) for item in self.ingredients],
            "instructions": self.instructions,
            "mealType": self.meal_type,
            "cuisineType": self.cuisine_type,
            "missingIngredients": [_ingredient_dict(item) for item in self.missing_ingredients],
        }


def _ingredient_dict(ingredient: Ingredient) -> Dict[str, Any]:
    return {key: value for key, value in asdict(ingredient).items() if value is not None}


def _ingredients(raw: Any) -> List[Ingredient]:
    if not isinstance(raw, list):
        return []
    items: List[Ingredient] = []
    for entry in raw:
        if isinstance(entry, dict) and entry.get("name"):
            quantity = entry.get("quantity")
            unit = entry.get("unit")
            items.append(
                Ingredient(
                    name=str(entry["name"]),
                    quantity=str(quantity) if quantity is not None else None,
                    unit=str(unit) if unit is not None else None,
                )
            )
        elif isinstance(entry, str) and entry.strip():
            items.append(Ingredient(name=entry.strip()))
    return items


def recipe_from_dict(data: Dict[str, Any]) -> Optional[Recipe]:
    name = data.get("recipeName") or data.get("name")
    if not name:
        return None
    return Recipe(
        recipe_name=str(name),
        ingredients=_ingredients(data.get("ingredients")),
        instructions=str(data.get("instructions") or ""),
        meal_type=data.get("mealType"),
        cuisine_type=data.get("cuisineType"),
        missing_ingredients=_ingredients(data.get("missingIngredients")),
    )


def parse_recipes(reply: str) -> List[Recipe]:
    """Read a JSON array of recipes; a lone object is wrapped into a list."""

    data: Any = None
    match = _JSON_ARRAY.search(reply or "")
    if match:
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError:
            data = None
    if not isinstance(data, list) or not data:
        try:
            data = json.loads(reply or "")
        except json.JSONDecodeError:
            return []
        if isinstance(data, dict):
            # response_format=json_object replies may nest the list.
            nested = data.get("recipes")
            data = nested if isinstance(nested, list) else [data]
    if not isinstance(data, list):
        return []
    recipes = [recipe_from_dict(item) for item in data if isinstance(item, dict)]
    return [recipe for recipe in recipes if recipe is not None]


# ---------------------------------------------------------------------------
# Deterministic fallback
# ---------------------------------------------------------------------------


def _has(items: Sequence[PantryItem], names: Sequence[str]) -> bool:
    return any(any(name in item.item_name.lower() for name in names) for item in items)


def fallback_recipes(pantry_items: Sequence[PantryItem], meal_type: Optional[str] = None) -> List[Recipe]:
    has_rice = _has(pantry_items, _RICE_NAMES)
    has_vegetables = any(item.category == "vegetables" for item in pantry_items)
    recipes: List[Recipe] = []

    if has_rice and has_vegetables:
        recipes.append(
            Recipe(
                recipe_name="Vegetable Pulao / सब्जी पुलाव",
                ingredients=[
                    Ingredient("Rice / चावल", "2 cups"),
                    Ingredient("Mixed Vegetables / मिक्स सब्जियां", "1 cup"),
                    Ingredient("Spices / मसाले", "to taste"),
                ],
                instructions="Cook rice with vegetables and spices.",
                meal_type="lunch",
                cuisine_type="Indian",
            )
        )
    if _has(pantry_items, _MILK_NAMES):
        recipes.append(
            Recipe(
                recipe_name="Milk Tea / दूध की चाय",
                ingredients=[
                    Ingredient("Milk / दूध", "1 cup"),
                    Ingredient("Tea / चाय", "1 tsp"),
                    Ingredient("Sugar / चीनी", "to taste"),
                ],
                instructions="Boil milk with tea and sugar.",
                meal_type="breakfast",
                cuisine_type="Indian",
            )
        )
    if not recipes:
        first = pantry_items[0].item_name if pantry_items else "Simple Dish"
        recipes.append(
            Recipe(
                recipe_name=f"{first} Recipe",
                ingredients=[Ingredient(item.item_name, f"{item.quantity} {item.unit}") for item in pantry_items],
                instructions="Combine available ingredients and cook to taste.",
                meal_type=meal_type,
                cuisine_type="any",
            )
        )
    return recipes


class RecipeSuggester:
    """Asks the chat model for recipes; any failure yields the fallback list."""

    def __init__(self, transport: Optional[ChatTransport] = None):
        self._transport = transport

    def suggest(
        self,
        pantry_items: Sequence[PantryItem],
        meal_type: Optional[str] = None,
        language: str = "en",
    ) -> List[Recipe]:
        if self._transport is None:
            return fallback_recipes(pantry_items, meal_type)

        items_list = ", ".join(item.describe() for item in pantry_items)
        messages = [
            {"role": "system", "content": RECIPE_SYSTEM_PROMPT},
            {"role": "user", "content": recipe_prompt(items_list, meal_type, language)},
        ]
        try:
            reply = self._transport.complete(
                messages,
                temperature=TEMPERATURE,
                max_tokens=MAX_TOKENS,
                response_format={"type": "json_object"},
            )
        except InterpreterError as exc:
            logger.warning("Recipe request failed (%s): %s", exc.reason, exc)
            return fallback_recipes(pantry_items, meal_type)

        recipes = parse_recipes(reply)
        if not recipes:
            logger.warning("Recipe reply held no usable recipes; using fallback")
            return fallback_recipes(pantry_items, meal_type)
        return recipes


__all__ = [
    "Ingredient",
    "PantryItem",
    "Recipe",
    "RecipeSuggester",
    "fallback_recipes",
    "parse_recipes",
    "recipe_from_dict",
]
