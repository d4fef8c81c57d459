from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from smart_pantry.api.v1.favorites import router as favorites_router
from smart_pantry.api.v1.metrics import router as metrics_router
from smart_pantry.api.v1.pantry import router as pantry_router
from smart_pantry.api.v1.recipes import router as recipes_router
from smart_pantry.config import Settings
from smart_pantry.services.llm import GenerationGate, build_openai_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Ensure data dir exists so repos can write
    settings = Settings()
    os.makedirs(settings.data_dir, exist_ok=True)
    yield


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    settings = Settings()
    configure_logging(settings.log_level)
    app = FastAPI(title="Smart Pantry API", version="1.0", lifespan=lifespan)

    # Shared across requests: one OpenAI client, one busy flag
    app.state.openai_client = build_openai_client(settings)
    app.state.generation_gate = GenerationGate()
    logger.info("Recipe generation: model=%s count=%d rich=%s",
                settings.openai_model_suggest, settings.recipe_count, settings.rich_recipes)

    # CORS (narrow it down in .env via CORS_ALLOW_ORIGINS if you want)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(pantry_router)
    app.include_router(recipes_router)
    app.include_router(favorites_router)
    app.include_router(metrics_router)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.get("/readyz")
    def readyz():
        return {"status": "ready", "generation": app.state.openai_client is not None}

    return app

app = create_app()
