import json

from core.errors import TransportFailure
from core.recipes import PantryItem, RecipeSuggester, fallback_recipes, parse_recipes

RICE = PantryItem("चावल", 2, "kg", "grains")
PEAS = PantryItem("मटर", 1, "kg", "vegetables")
MILK = PantryItem("दूध", 1, "liter", "dairy")


class FakeTransport:
    def __init__(self, reply: str = "", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []

    def complete(self, messages, *, temperature, max_tokens, response_format=None):
        self.calls.append(
            {"messages": messages, "temperature": temperature, "max_tokens": max_tokens, "response_format": response_format}
        )
        if self.error:
            raise self.error
        return self.reply


def test_parse_recipes_reads_array_in_prose():
    reply = 'Here you go: [{"recipeName": "Khichdi", "ingredients": [{"name": "rice", "quantity": 1, "unit": "cup"}]}]'

    recipes = parse_recipes(reply)

    assert len(recipes) == 1
    assert recipes[0].recipe_name == "Khichdi"
    assert recipes[0].to_dict()["ingredients"] == [{"name": "rice", "quantity": "1", "unit": "cup"}]


def test_parse_recipes_unwraps_object_replies():
    nested = json.dumps({"recipes": [{"recipeName": "Poha"}, {"recipeName": "Upma"}]})
    single = json.dumps({"recipeName": "Chai", "mealType": "breakfast"})

    assert [recipe.recipe_name for recipe in parse_recipes(nested)] == ["Poha", "Upma"]
    assert parse_recipes(single)[0].meal_type == "breakfast"
    assert parse_recipes("no recipes today") == []


def test_fallback_pulao_needs_rice_and_vegetables():
    names = [recipe.recipe_name for recipe in fallback_recipes([RICE, PEAS])]

    assert names == ["Vegetable Pulao / सब्जी पुलाव"]


def test_fallback_milk_tea():
    names = [recipe.recipe_name for recipe in fallback_recipes([RICE, MILK])]

    assert names == ["Milk Tea / दूध की चाय"]


def test_fallback_uses_first_item_when_nothing_matches():
    recipes = fallback_recipes([PantryItem("आलू", 3, "pieces")], "dinner")

    assert len(recipes) == 1
    recipe = recipes[0]
    assert recipe.recipe_name == "आलू Recipe"
    assert recipe.meal_type == "dinner"
    assert recipe.instructions == "Combine available ingredients and cook to taste."
    assert recipe.to_dict()["ingredients"] == [{"name": "आलू", "quantity": "3 pieces"}]


def test_suggester_without_transport_uses_fallback():
    assert RecipeSuggester().suggest([MILK])[0].recipe_name == "Milk Tea / दूध की चाय"


def test_suggester_asks_model_for_json():
    transport = FakeTransport(json.dumps({"recipes": [{"recipeName": "Kheer", "mealType": "dinner"}]}))

    recipes = RecipeSuggester(transport).suggest([RICE, MILK], "dinner", "hi")

    assert [recipe.recipe_name for recipe in recipes] == ["Kheer"]
    call = transport.calls[0]
    assert call["temperature"] == 0.3
    assert call["max_tokens"] == 800
    assert call["response_format"] == {"type": "json_object"}
    prompt = call["messages"][1]["content"]
    assert "चावल (2 kg)" in prompt
    assert "दूध (1 liter)" in prompt


def test_suggester_falls_back_on_failure_or_empty_reply():
    failing = RecipeSuggester(FakeTransport(error=TransportFailure("down")))
    empty = RecipeSuggester(FakeTransport("[]"))

    assert failing.suggest([MILK])[0].recipe_name == "Milk Tea / दूध की चाय"
    assert empty.suggest([MILK])[0].recipe_name == "Milk Tea / दूध की चाय"
