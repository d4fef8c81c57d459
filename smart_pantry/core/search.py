# smart_pantry/core/search.py
from __future__ import annotations

from typing import Iterable, List, Optional

from .models import PantryItem, RecipeSuggestion


def _needle(query: Optional[str]) -> str:
    return (query or "").strip().lower()


def filter_pantry(items: Iterable[PantryItem], query: Optional[str]) -> List[PantryItem]:
    """Case-insensitive substring match on item name. Blank query keeps everything."""
    q = _needle(query)
    return [it for it in items if q in it.name.lower()]


def filter_favorites(recipes: Iterable[RecipeSuggestion], query: Optional[str]) -> List[RecipeSuggestion]:
    """Match on the recipe name or on any ingredient line."""
    q = _needle(query)
    return [
        r for r in recipes
        if q in r.name.lower() or any(q in ing.lower() for ing in r.ingredients)
    ]
