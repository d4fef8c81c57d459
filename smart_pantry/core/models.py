# smart_pantry/core/models.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------- Pantry ----------

class PantryItem(BaseModel):
    """A named ingredient the user keeps track of. The name is the document key."""
    name: str = Field(..., min_length=1, description="Display name, also the unique key")
    quantity: int = Field(0, ge=0, description="Non-negative whole quantity")

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("PantryItem.name cannot be blank")
        return v


class Pantry(BaseModel):
    items: List[PantryItem] = Field(default_factory=list)

    def names(self) -> List[str]:
        return [it.name for it in self.items]


class QuantityUpdate(BaseModel):
    # Negative values are allowed here on purpose: anything <= 0 removes the item.
    quantity: int


# ---------- Recipes ----------

UNNAMED_RECIPE = "Unnamed Recipe"
PARSE_ERROR_NAME = "Parsing Error"


class RecipeSuggestion(BaseModel):
    """
    One recipe candidate from a generation call.

    `image_url` and `can_be_made` are only filled in the rich variant and
    serialize as `imageUrl` / `canBeMade`.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str = UNNAMED_RECIPE
    ingredients: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    image_url: Optional[str] = Field(None, alias="imageUrl")
    can_be_made: Optional[bool] = Field(None, alias="canBeMade")

    @field_validator("name")
    @classmethod
    def _non_blank_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("RecipeSuggestion.name cannot be blank")
        return v

    def is_parse_error(self) -> bool:
        return self.name == PARSE_ERROR_NAME


class SuggestResponse(BaseModel):
    recipes: List[RecipeSuggestion]
    # True when the model reply could not be parsed and `recipes` holds the sentinel
    malformed: bool = False


class FavoritesResponse(BaseModel):
    recipes: List[RecipeSuggestion]


# ---------- Auditing / events ----------

class ActivityEvent(BaseModel):
    ts: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    type: Literal["pantry", "favorite", "suggest"]
    payload: dict
    schema_version: int = 1
