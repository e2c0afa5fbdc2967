"""Language-conditioned instruction prompts for the chat transport."""

from __future__ import annotations

from typing import Iterable, Optional

COMMAND_SCHEMA = """Strict JSON only (no prose). Use this schema:
{
  "intent": "reminder" | "pantry_add" | "pantry_query" | "recipe_request" | "unknown",
  "confidence": number, // 0..1
  "data": {
    "title"?: string,             // for reminders
    "when"?: string,              // natural time string if present
    "itemName"?: string,          // normalized Hindi item name (e.g., "दूध", "टमाटर", "आलू")
    "quantity"?: number,
    "unit"?: "kg" | "liter" | "pieces" | string,
    "isNegated"?: boolean,        // true if user said NOT buying / haven't bought
    "addToPantry"?: boolean       // true only if user explicitly confirms item is now owned
  }
}"""

EXAMPLES_EN = """Examples:
User: "I need to buy 2 kg tomatoes tomorrow evening"
JSON: {"intent":"reminder","confidence":0.92,"data":{"title":"Buy tomatoes","when":"tomorrow 6pm","itemName":"टमाटर","quantity":2,"unit":"kg","isNegated":false,"addToPantry":false}}

User: "I bought milk"
JSON: {"intent":"pantry_add","confidence":0.9,"data":{"itemName":"दूध","quantity":1,"unit":"liter","addToPantry":true}}

User: "I haven't bought tomatoes"
JSON: {"intent":"reminder","confidence":0.9,"data":{"title":"Buy tomatoes","itemName":"टमाटर","isNegated":true,"addToPantry":false}}"""

EXAMPLES_HI = """उदाहरण:
यूज़र: "मुझे 2 किलो टमाटर कल शाम लेना है"
JSON: {"intent":"reminder","confidence":0.92,"data":{"title":"टमाटर खरीदना","when":"कल शाम 6 बजे","itemName":"टमाटर","quantity":2,"unit":"kg","isNegated":false,"addToPantry":false}}

यूज़र: "मैं दूध ले आया"
JSON: {"intent":"pantry_add","confidence":0.9,"data":{"itemName":"दूध","quantity":1,"unit":"liter","addToPantry":true}}

यूज़र: "अभी टमाटर नहीं खरीदे"
JSON: {"intent":"reminder","confidence":0.9,"data":{"title":"टमाटर खरीदना","itemName":"टमाटर","isNegated":true,"addToPantry":false}}"""

_PREAMBLE_EN = (
    'You understand Hindi and English. Shopping phrases default to "reminder"; only use "pantry_add" '
    "if the user clearly states the item is already bought/owned. Negative statements (\"haven't bought\") "
    "must not add to pantry; create a reminder."
)

_PREAMBLE_HI = (
    "तुम एक सहायक हो जो हिंदी और अंग्रेज़ी समझता है।\n"
    'खरीदना/लेना जैसे वाक्य पहले "reminder" होते हैं; "pantry_add" सिर्फ तभी जब यूज़र स्पष्ट रूप से बता दे कि '
    'सामान खरीद लिया/मौजूद है। नकारात्मक वाक्य ("नहीं खरीदा") पर pantry_add मत करना, reminder दो।'
)


def command_system_prompt(language: str, pantry_items: Iterable[str] = ()) -> str:
    """Build the interpretation instruction for ``language`` (``en``/``hi``)."""

    if language == "hi":
        base = f"{_PREAMBLE_HI}\n{COMMAND_SCHEMA}\n{EXAMPLES_HI}"
    else:
        base = f"{_PREAMBLE_EN}\n{COMMAND_SCHEMA}\n{EXAMPLES_EN}"
    items = [item for item in pantry_items if item]
    if items:
        return base + "\n\nAvailable pantry items: " + ", ".join(items)
    return base


# ---------------------------------------------------------------------------
# Recipes
# ---------------------------------------------------------------------------

RECIPE_SYSTEM_PROMPT = (
    "You are a helpful cooking assistant. Respond ONLY with valid JSON as specified by the user schema. "
    "Do not include prose or code fences."
)

_RECIPE_SCHEMA = """[
  {
    "recipeName": string,
    "ingredients": [{"name": string, "quantity": string}],
    "instructions": string,
    "mealType"?: string,
    "cuisineType"?: string,
    "missingIngredients": [{"name": string, "quantity"?: string, "unit"?: string}]
  }
]"""


def recipe_prompt(items_list: str, meal_type: Optional[str], language: str) -> str:
    """User prompt asking for one or two simple recipes from the pantry listing."""

    if language == "hi":
        meal = f"{meal_type} के लिए " if meal_type else ""
        return (
            f"पैंट्री में उपलब्ध सामग्री: {items_list}.\n"
            f"{meal}1-2 बहुत सरल रेसिपी बनाओ।\n"
            "नियम:\n"
            "1) रेसिपी के Ingredients में केवल पैंट्री की चीज़ें रखें (नाम और मात्रा)।\n"
            '2) जो चीज़ें पैंट्री में नहीं हैं/कम हैं उन्हें "missingIngredients" में सूचीबद्ध करो (नाम और वैकल्पिक मात्रा/यूनिट)।\n'
            "3) केवल वैध JSON लौटाओ, कोई prose या code fences नहीं।\n"
            f"स्कीमा:\n{_RECIPE_SCHEMA}\n"
            "यदि पैंट्री में 2 या उससे कम आइटम हैं, तो सिर्फ 1 आसान रेसिपी दो।"
        )
    meal = f"{meal_type} " if meal_type else ""
    return (
        f"Pantry items: {items_list}.\n"
        f"Return 1-2 very simple {meal}recipes.\n"
        "Rules:\n"
        '1) Use ONLY pantry items in "ingredients" (name + quantity).\n'
        '2) Anything not present (or insufficient) goes into "missingIngredients" with name and optional quantity/unit.\n'
        "3) Respond ONLY with valid JSON (no prose, no code fences).\n"
        f"Schema:\n{_RECIPE_SCHEMA}\n"
        "If the pantry has 2 or fewer items, return exactly 1 simple recipe."
    )


__all__ = ["COMMAND_SCHEMA", "RECIPE_SYSTEM_PROMPT", "command_system_prompt", "recipe_prompt"]
