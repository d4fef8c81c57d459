from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from smart_pantry.config import Settings
from smart_pantry.core.models import FavoritesResponse, RecipeSuggestion
from smart_pantry.core.search import filter_favorites
from smart_pantry.services.repo.json_repo import JSONEventRepo, JSONFavoritesRepo, record_event
from smart_pantry.services.exceptions import RepoError

router = APIRouter(tags=["favorites"])


def get_settings() -> Settings:
    return Settings()


def get_repo(settings: Settings = Depends(get_settings)):
    return JSONFavoritesRepo(settings)


def get_event_repo(settings: Settings = Depends(get_settings)):
    return JSONEventRepo(settings)


@router.get("/api/favorites", response_model=FavoritesResponse, response_model_exclude_none=True)
def list_favorites(search: Optional[str] = Query(None, description="Matches recipe name or any ingredient"),
                   repo: JSONFavoritesRepo = Depends(get_repo)):
    try:
        return FavoritesResponse(recipes=filter_favorites(repo.list_favorites(), search))
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/favorites", response_model=FavoritesResponse, response_model_exclude_none=True)
def add_favorite(recipe: RecipeSuggestion, repo: JSONFavoritesRepo = Depends(get_repo),
                 events: JSONEventRepo = Depends(get_event_repo)):
    # Re-favoriting the same name overwrites the stored copy.
    try:
        repo.save_favorite(recipe)
        recipes = repo.list_favorites()
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    record_event(events, "favorite", {"mode": "add", "name": recipe.name})
    return FavoritesResponse(recipes=recipes)


@router.delete("/api/favorites/{name:path}")
def remove_favorite(name: str, repo: JSONFavoritesRepo = Depends(get_repo),
                    events: JSONEventRepo = Depends(get_event_repo)):
    try:
        removed = repo.delete_favorite(name)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if not removed:
        raise HTTPException(status_code=404, detail="Recipe not found in favorites")
    record_event(events, "favorite", {"mode": "remove", "name": name})
    return {"ok": True}
