from __future__ import annotations

import io
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, TypeVar

from smart_pantry.config import Settings
from smart_pantry.core.models import ActivityEvent, PantryItem, RecipeSuggestion
from smart_pantry.services.exceptions import DocumentNotFoundError, RepoError
from .base import EventRepo, FavoritesRepo, PantryRepo

logger = logging.getLogger(__name__)

T = TypeVar("T")


# Cross-platform file lock (fcntl for *nix; msvcrt for Windows)
@contextmanager
def _locked(path: str) -> Iterator[io.FileIO]:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    f = open(path, "a+b")  # create if missing
    try:
        import fcntl  # type: ignore
    except ImportError:
        fcntl = None
    try:
        if fcntl is not None:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
        else:
            import msvcrt  # type: ignore
            msvcrt.locking(f.fileno(), msvcrt.LK_LOCK, 1)
    except OSError as e:
        f.close()
        raise RepoError(f"Could not lock file {path}: {e}") from e
    try:
        yield f
    finally:
        try:
            if fcntl is not None:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
            else:
                import msvcrt  # type: ignore
                msvcrt.locking(f.fileno(), msvcrt.LK_UNLCK, 1)
        finally:
            f.close()


def _atomic_write(path: str, data: bytes) -> None:
    d = os.path.dirname(path) or "."
    os.makedirs(d, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp-", dir=d)
    try:
        with os.fdopen(fd, "wb") as w:
            w.write(data)
            w.flush()
            os.fsync(w.fileno())
        os.replace(tmp, path)
    except OSError as e:
        try:
            os.remove(tmp)
        except OSError:
            pass
        raise RepoError(f"Atomic write failed for {path}: {e}") from e


class JSONCollection:
    """
    One document collection in one JSON file: {key: document}.

    Reads are full scans. Every mutation is read-modify-write under an
    exclusive lock on a sidecar `.lock` file, then an atomic replace, so
    concurrent writers to the same key resolve last-writer-wins.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock_path = path + ".lock"

    def _read(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "rb") as f:
                raw = f.read() or b"{}"
            obj = json.loads(raw.decode("utf-8"))
        except (OSError, ValueError) as e:
            raise RepoError(f"Failed to read collection {self.path}: {e}") from e
        if not isinstance(obj, dict):
            raise RepoError(f"Collection {self.path} is not a JSON object")
        return obj

    def scan(self) -> Dict[str, Any]:
        with _locked(self._lock_path):
            return self._read()

    def mutate(self, fn: Callable[[Dict[str, Any]], T]) -> T:
        """Apply `fn` to the whole collection in place and persist it."""
        with _locked(self._lock_path):
            docs = self._read()
            result = fn(docs)
            payload = json.dumps(docs, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
            _atomic_write(self.path, payload)
            return result


class JSONPantryRepo(PantryRepo):
    """`pantry` collection: key = item name, value = {"quantity": int}."""

    def __init__(self, settings: Settings):
        self._docs = JSONCollection(settings.pantry_file)

    @property
    def path(self) -> str:
        return self._docs.path

    def list_items(self) -> List[PantryItem]:
        docs = self._docs.scan()
        try:
            items = [PantryItem(name=k, quantity=v.get("quantity") or 0) for k, v in docs.items()]
        except (AttributeError, ValueError) as e:
            raise RepoError(f"Malformed pantry document in {self.path}: {e}") from e
        items.sort(key=lambda it: (it.name.lower(), it.name))
        return items

    def upsert_item(self, name: str, quantity: int) -> Optional[PantryItem]:
        """Set the quantity for `name`. Anything <= 0 removes the item and returns None."""
        item = PantryItem(name=name, quantity=max(quantity, 0))

        def apply(docs: Dict[str, Any]) -> Optional[PantryItem]:
            if quantity <= 0:
                docs.pop(item.name, None)
                return None
            docs[item.name] = {"quantity": item.quantity}
            return item

        return self._docs.mutate(apply)

    def adjust_item(self, name: str, delta: int) -> Optional[PantryItem]:
        """Add `delta` to an existing item. Dropping to <= 0 removes it and returns None."""
        key = name.strip()

        def apply(docs: Dict[str, Any]) -> Optional[PantryItem]:
            if key not in docs:
                raise DocumentNotFoundError(f"Pantry item {key!r} not found")
            new_qty = int(docs[key].get("quantity") or 0) + delta
            if new_qty <= 0:
                del docs[key]
                return None
            docs[key] = {"quantity": new_qty}
            return PantryItem(name=key, quantity=new_qty)

        return self._docs.mutate(apply)

    def delete_item(self, name: str) -> bool:
        key = name.strip()
        return self._docs.mutate(lambda docs: docs.pop(key, None) is not None)


class JSONFavoritesRepo(FavoritesRepo):
    """`favoriteRecipes` collection: key = recipe name, value = the full recipe."""

    def __init__(self, settings: Settings):
        self._docs = JSONCollection(settings.favorites_file)

    @property
    def path(self) -> str:
        return self._docs.path

    def list_favorites(self) -> List[RecipeSuggestion]:
        out: List[RecipeSuggestion] = []
        for key, doc in self._docs.scan().items():
            try:
                out.append(RecipeSuggestion.model_validate({"name": key, **doc}))
            except (TypeError, ValueError) as e:
                raise RepoError(f"Malformed favorite {key!r} in {self.path}: {e}") from e
        return out

    def save_favorite(self, recipe: RecipeSuggestion) -> None:
        doc = recipe.model_dump(by_alias=True, exclude_none=True)

        def apply(docs: Dict[str, Any]) -> None:
            docs[recipe.name] = doc

        self._docs.mutate(apply)

    def delete_favorite(self, name: str) -> bool:
        key = name.strip()
        return self._docs.mutate(lambda docs: docs.pop(key, None) is not None)


class JSONEventRepo(EventRepo):
    def __init__(self, settings: Settings):
        self.path = settings.events_file

    def append(self, event: ActivityEvent) -> None:
        try:
            line = (json.dumps(event.model_dump(), ensure_ascii=False, separators=(",", ":"), default=str) + "\n").encode("utf-8")
            with _locked(self.path) as f:
                f.seek(0, os.SEEK_END)
                f.write(line)
                f.flush()
                os.fsync(f.fileno())
        except (OSError, TypeError, ValueError) as e:
            raise RepoError(f"Failed to append event to {self.path}: {e}") from e


def record_event(events: EventRepo, type_: str, payload: Dict[str, Any]) -> None:
    """Best-effort audit log: a failed append is logged, never raised."""
    try:
        events.append(ActivityEvent(type=type_, payload=payload))
    except RepoError as e:
        logger.warning("Activity log append failed: %s", e)
