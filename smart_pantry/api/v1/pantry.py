from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from smart_pantry.config import Settings
from smart_pantry.core.models import Pantry, QuantityUpdate
from smart_pantry.core.search import filter_pantry
from smart_pantry.services.exceptions import DocumentNotFoundError, RepoError
from smart_pantry.services.repo.json_repo import JSONEventRepo, JSONPantryRepo, record_event

router = APIRouter(tags=["pantry"])

# ---- DI helpers --------------------------------------------------------------

def get_settings() -> Settings:
    return Settings()

def get_repos(settings: Settings = Depends(get_settings)):
    return JSONPantryRepo(settings), JSONEventRepo(settings)

# ---- Routes ------------------------------------------------------------------

@router.get("/api/pantry", response_model=Pantry)
def get_pantry(search: Optional[str] = Query(None, description="Case-insensitive name filter"),
               repos = Depends(get_repos)):
    pantry_repo, _event_repo = repos
    try:
        return Pantry(items=filter_pantry(pantry_repo.list_items(), search))
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/api/pantry/{name:path}", response_model=Pantry)
def set_item(name: str, update: QuantityUpdate, repos = Depends(get_repos)):
    """Add an item or overwrite its quantity. A quantity <= 0 removes it."""
    pantry_repo, event_repo = repos
    try:
        pantry_repo.upsert_item(name, update.quantity)
        pantry = Pantry(items=pantry_repo.list_items())
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    record_event(event_repo, "pantry", {"mode": "set", "name": name, "quantity": update.quantity})
    return pantry


def _adjust(name: str, delta: int, repos) -> Pantry:
    pantry_repo, event_repo = repos
    try:
        pantry_repo.adjust_item(name, delta)
        pantry = Pantry(items=pantry_repo.list_items())
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    record_event(event_repo, "pantry", {"mode": "adjust", "name": name, "delta": delta})
    return pantry


@router.post("/api/pantry/{name:path}/increment", response_model=Pantry)
def increment_item(name: str, repos = Depends(get_repos)):
    return _adjust(name, 1, repos)


@router.post("/api/pantry/{name:path}/decrement", response_model=Pantry)
def decrement_item(name: str, repos = Depends(get_repos)):
    """Decrementing the last unit removes the item."""
    return _adjust(name, -1, repos)


@router.delete("/api/pantry/{name:path}", response_model=Pantry)
def delete_item(name: str, repos = Depends(get_repos)):
    pantry_repo, event_repo = repos
    try:
        removed = pantry_repo.delete_item(name)
        if not removed:
            raise HTTPException(status_code=404, detail="Item not found in pantry")
        pantry = Pantry(items=pantry_repo.list_items())
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    record_event(event_repo, "pantry", {"mode": "delete", "name": name})
    return pantry
