from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

from openai import OpenAI

from .exceptions import ConfigurationError, GenerationServiceError, InvalidInputError, ServiceError
from .images import ImageResolver, PlaceholderImageResolver
from smart_pantry.config import Settings
from smart_pantry.core.models import RecipeSuggestion, SuggestResponse
from smart_pantry.core.recipes import build_prompt, can_be_made, normalize_reply

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a helpful home cook. You answer with raw JSON only."


def build_openai_client(settings: Settings) -> Optional[OpenAI]:
    """
    Build the shared OpenAI client once at startup. Returns None when no key is
    configured; the generator then reports a ConfigurationError per request.
    """
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; recipe generation is disabled")
        return None
    # Single attempt only: retries are the caller's call, not ours.
    return OpenAI(
        api_key=settings.openai_api_key,
        timeout=settings.openai_timeout_s,
        max_retries=0,
    )


class GenerationBusyError(ServiceError):
    """A recipe generation is already running in this process."""


class GenerationGate:
    """Server-side busy flag: one generation in flight at a time."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @contextmanager
    def hold(self) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise GenerationBusyError("Recipe generation already in progress")
        try:
            yield
        finally:
            self._lock.release()

    @property
    def busy(self) -> bool:
        return self._lock.locked()


class RecipeGenerator:
    """Interface-like base to keep types clear. Concrete impl below."""

    def suggest(self, ingredients: Sequence[str], pantry_names: Optional[Sequence[str]] = None) -> SuggestResponse:  # pragma: no cover
        raise NotImplementedError

    def get_recipe_recommendations(
        self, ingredients: Sequence[str], pantry_names: Optional[Sequence[str]] = None
    ) -> List[RecipeSuggestion]:
        return self.suggest(ingredients, pantry_names).recipes


class OpenAIRecipeGenerator(RecipeGenerator):
    def __init__(
        self,
        settings: Settings,
        client: Optional[OpenAI] = None,
        image_resolver: Optional[ImageResolver] = None,
    ):
        self._client = client
        self._api_key = settings.openai_api_key
        self._model = settings.openai_model_suggest
        self._count = settings.recipe_count
        self._rich = settings.rich_recipes
        self._image_workers = settings.image_workers
        self._images = image_resolver or PlaceholderImageResolver()

    @property
    def model(self) -> str:
        return self._model

    def suggest(self, ingredients: Sequence[str], pantry_names: Optional[Sequence[str]] = None) -> SuggestResponse:
        """
        Ask the model for recipes that use `ingredients` and normalize the reply.

        Raises ConfigurationError (no key), InvalidInputError (nothing to cook
        with) or GenerationServiceError (the call failed). An unparsable reply
        does not raise: it comes back as the single "Parsing Error" recipe with
        `malformed=True`.
        """
        if not self._api_key or self._client is None:
            raise ConfigurationError("OpenAI API key is missing; set OPENAI_API_KEY")

        names = [i.strip() for i in (ingredients or []) if i and i.strip()]
        if not names:
            raise InvalidInputError("No ingredients provided")

        prompt = build_prompt(names, self._count)
        logger.debug("Requesting %d recipes for %d ingredients from %s", self._count, len(names), self._model)
        text = self._complete(prompt)
        logger.debug("Raw recipe reply: %r", text)

        recipes, malformed = normalize_reply(text, self._count)
        if malformed:
            logger.warning("Recipe reply was not a JSON array; returning raw text (%d chars)", len(text))
            return SuggestResponse(recipes=recipes, malformed=True)
        if len(recipes) < self._count:
            logger.warning("Model returned %d recipes, asked for %d", len(recipes), self._count)

        if self._rich:
            recipes = self._enrich(recipes, names if pantry_names is None else pantry_names)
        return SuggestResponse(recipes=recipes)

    def _complete(self, prompt: str) -> str:
        try:
            resp = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "system", "content": SYSTEM_PROMPT},
                          {"role": "user", "content": prompt}],
            )
            return resp.choices[0].message.content or ""
        except Exception as e:
            # No retry, no fallback: bubble details up
            raise GenerationServiceError(f"OpenAI recipe generation failed: {e}") from e

    def _enrich(self, recipes: List[RecipeSuggestion], pantry_names: Sequence[str]) -> List[RecipeSuggestion]:
        if not recipes:
            return recipes
        workers = min(self._image_workers, len(recipes))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            # map() yields in input order regardless of completion order
            urls = list(pool.map(lambda r: self._images.image_for(r.name), recipes))
        return [
            r.model_copy(update={"image_url": url, "can_be_made": can_be_made(r.ingredients, pantry_names)})
            for r, url in zip(recipes, urls)
        ]
