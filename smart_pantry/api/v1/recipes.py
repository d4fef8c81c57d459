from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Request
from smart_pantry.config import Settings
from smart_pantry.core.models import SuggestResponse
from smart_pantry.services.exceptions import (
    ConfigurationError,
    GenerationServiceError,
    InvalidInputError,
    RepoError,
)
from smart_pantry.services.llm import GenerationBusyError, GenerationGate, OpenAIRecipeGenerator, RecipeGenerator
from smart_pantry.services.metrics import MetricsLogger
from smart_pantry.services.repo.json_repo import JSONEventRepo, JSONPantryRepo, record_event

logger = logging.getLogger(__name__)

router = APIRouter(tags=["recipes"])

# ---- Dependencies ------------------------------------------------------------

def get_settings() -> Settings:
    return Settings()

def get_repos(settings: Settings = Depends(get_settings)):
    return JSONPantryRepo(settings), JSONEventRepo(settings)

def get_generator(request: Request, settings: Settings = Depends(get_settings)) -> RecipeGenerator:
    # The client is built once in create_app; None means no key was configured.
    return OpenAIRecipeGenerator(settings, client=request.app.state.openai_client)

def get_gate(request: Request) -> GenerationGate:
    return request.app.state.generation_gate

# ---- Route ------------------------------------------------------------------

@router.post("/api/recipes/suggest", response_model=SuggestResponse, response_model_exclude_none=True)
def suggest_recipes(
    generator: RecipeGenerator = Depends(get_generator),
    gate: GenerationGate = Depends(get_gate),
    repos = Depends(get_repos),
    settings: Settings = Depends(get_settings),
    request: Request = None,
):
    pantry_repo, event_repo = repos
    try:
        names = [it.name for it in pantry_repo.list_items()]
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))

    try:
        with gate.hold():
            t0 = time.perf_counter()
            result = generator.suggest(names, pantry_names=names)
            dt_ms = (time.perf_counter() - t0) * 1000.0
    except GenerationBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InvalidInputError:
        raise HTTPException(status_code=400, detail="No ingredients in pantry")
    except ConfigurationError as e:
        logger.error("Recipe generation unavailable: %s", e)
        raise HTTPException(status_code=503, detail=str(e))
    except GenerationServiceError as e:
        logger.error("Recipe generation failed: %s", e)
        raise HTTPException(status_code=502, detail=f"Failed to get recipes. Error: {e}")

    corr_id = request.headers.get("X-Correlation-Id") if request else None
    MetricsLogger(settings).log_latency(
        name="suggest_generate",
        duration_ms=dt_ms,
        origin="backend",
        extra={
            "ingredients": len(names),
            "recipes": len(result.recipes),
            "malformed": result.malformed,
            "model": getattr(generator, "model", "unknown"),
        },
        corr_id=corr_id,
    )
    record_event(
        event_repo,
        "suggest",
        {"ingredient_count": len(names), "recipe_count": len(result.recipes), "malformed": result.malformed},
    )
    return result
