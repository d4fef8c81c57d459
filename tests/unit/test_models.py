# tests/unit/test_models.py
import pytest
from smart_pantry.core.models import PantryItem, RecipeSuggestion, UNNAMED_RECIPE


def test_pantry_item_name_is_stripped():
    it = PantryItem(name="  Tomatoes  ", quantity=2)
    assert it.name == "Tomatoes"


def test_pantry_item_name_cannot_be_blank():
    with pytest.raises(Exception):
        PantryItem(name="  ", quantity=1)


def test_pantry_item_quantity_cannot_be_negative():
    with pytest.raises(Exception):
        PantryItem(name="Milk", quantity=-1)


def test_recipe_defaults():
    r = RecipeSuggestion()
    assert r.name == UNNAMED_RECIPE
    assert r.ingredients == []
    assert r.instructions == []
    assert r.image_url is None and r.can_be_made is None


def test_recipe_accepts_and_emits_camel_case():
    r = RecipeSuggestion.model_validate({"name": "Toast", "imageUrl": "http://x/y.png", "canBeMade": True})
    assert r.image_url == "http://x/y.png"
    assert r.can_be_made is True
    dumped = r.model_dump(by_alias=True)
    assert dumped["imageUrl"] == "http://x/y.png"
    assert dumped["canBeMade"] is True


def test_recipe_accepts_snake_case_too():
    r = RecipeSuggestion(name="Toast", image_url="u", can_be_made=False)
    assert r.image_url == "u"
    assert r.can_be_made is False
