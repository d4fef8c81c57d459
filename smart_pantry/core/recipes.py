# smart_pantry/core/recipes.py
"""
Prompt construction and reply normalization for recipe generation.

Everything here is pure: no client, no I/O. The model reply is untrusted
text, and this module is where it becomes `RecipeSuggestion` records.
Every field is coerced explicitly; a missing or mistyped field falls back
to its default instead of failing the whole reply.
"""
from __future__ import annotations

import json
import re
from typing import Any, Iterable, List, Sequence, Tuple

from .models import PARSE_ERROR_NAME, UNNAMED_RECIPE, RecipeSuggestion

_LEADING_FENCE = re.compile(r"^\s*```[\w+-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```\s*$")


def build_prompt(ingredients: Sequence[str], count: int) -> str:
    joined = ", ".join(ingredients)
    return (
        f"Given these ingredients in the pantry: {joined}, suggest {count} recipes. "
        "For each recipe, provide:\n"
        "1. The recipe name\n"
        "2. A list of ingredients with their measurements\n"
        "3. Step-by-step cooking instructions\n\n"
        "Return a JSON array of objects, each with 'name', 'ingredients', and 'instructions' "
        "properties. The 'ingredients' should be an array of strings, each containing the "
        "ingredient name and its measurement. The 'instructions' should be an array of strings, "
        "each representing a step in the cooking process. "
        f"Always return {count} recipes, even if some pantry ingredients are not used. "
        "Do not include any markdown formatting or language identifiers in your response, "
        "just the raw JSON."
    )


def strip_code_fences(text: str) -> str:
    """Drop one leading ```/```json fence and one trailing ``` fence, then trim."""
    text = _LEADING_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def parse_reply(text: str) -> List[Any]:
    """Parse cleaned reply text. Raises ValueError unless it is a JSON array."""
    try:
        data = json.loads(text)  # JSONDecodeError is a ValueError
    except RecursionError as e:
        raise ValueError("recipe reply is nested too deeply to parse") from e
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array of recipes, got {type(data).__name__}")
    return data


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    out: List[str] = []
    for v in value:
        if isinstance(v, str):
            out.append(v)
        elif isinstance(v, (int, float)) and not isinstance(v, bool):
            out.append(str(v))
        # nested objects/arrays/nulls are dropped
    return out


def _recipe_name(value: Any) -> str:
    if not value:
        return UNNAMED_RECIPE
    name = value if isinstance(value, str) else str(value)
    return name.strip() or UNNAMED_RECIPE


def normalize_recipe(raw: Any) -> RecipeSuggestion:
    if not isinstance(raw, dict):
        raw = {}
    return RecipeSuggestion(
        name=_recipe_name(raw.get("name")),
        ingredients=_string_list(raw.get("ingredients")),
        instructions=_string_list(raw.get("instructions")),
    )


def parse_error_result(cleaned_text: str) -> List[RecipeSuggestion]:
    """The one-element sentinel list that carries the unparsed reply for display."""
    return [RecipeSuggestion(name=PARSE_ERROR_NAME, ingredients=[cleaned_text], instructions=[])]


def normalize_reply(text: str, count: int) -> Tuple[List[RecipeSuggestion], bool]:
    """
    Turn raw model output into recipes.

    Returns (recipes, malformed). When malformed is True, recipes is the
    sentinel list from `parse_error_result`. Never raises on bad content.
    """
    cleaned = strip_code_fences(text or "")
    try:
        rows = parse_reply(cleaned)
    except ValueError:
        return parse_error_result(cleaned), True
    return [normalize_recipe(r) for r in rows[:count]], False


def can_be_made(ingredients: Iterable[str], pantry_names: Iterable[str]) -> bool:
    """
    True iff every ingredient line contains some pantry item name
    (case-insensitive substring). "1 tsp salt" matches "salt", and so does
    "saltine crackers". An empty ingredient list counts as makeable.
    """
    names = [n.strip().lower() for n in pantry_names if n and n.strip()]
    return all(any(n in ing.lower() for n in names) for ing in ingredients)
