from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional
from smart_pantry.core.models import ActivityEvent, PantryItem, RecipeSuggestion


class PantryRepo(ABC):
    @abstractmethod
    def list_items(self) -> List[PantryItem]: ...
    @abstractmethod
    def upsert_item(self, name: str, quantity: int) -> Optional[PantryItem]: ...
    @abstractmethod
    def adjust_item(self, name: str, delta: int) -> Optional[PantryItem]: ...
    @abstractmethod
    def delete_item(self, name: str) -> bool: ...


class FavoritesRepo(ABC):
    @abstractmethod
    def list_favorites(self) -> List[RecipeSuggestion]: ...
    @abstractmethod
    def save_favorite(self, recipe: RecipeSuggestion) -> None: ...
    @abstractmethod
    def delete_favorite(self, name: str) -> bool: ...


class EventRepo(ABC):
    @abstractmethod
    def append(self, event: ActivityEvent) -> None: ...
