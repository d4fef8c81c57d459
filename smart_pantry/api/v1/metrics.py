from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel, Field

from smart_pantry.config import Settings
from smart_pantry.services.metrics import MetricsLogger

router = APIRouter(tags=["metrics"])

# What the pantry UI measures on its side of a round trip
UIMetricName = Literal[
    "pantry_render",       # pantry list fetched and drawn
    "favorites_render",    # favorites list fetched and drawn
    "suggest_render",      # suggest response drawn as recipe cards
    "suggest_e2e",         # "Get Recipes" click to cards on screen
    "parse_error_render",  # raw-reply panel shown for a malformed reply
]


def get_settings() -> Settings:
    return Settings()


class UILatency(BaseModel):
    name: UIMetricName
    duration_ms: float = Field(..., ge=0)
    recipe_count: Optional[int] = Field(None, ge=0)
    item_count: Optional[int] = Field(None, ge=0)


@router.post("/api/v1/metrics/ui")
def log_ui_latency(
    payload: UILatency,
    settings: Settings = Depends(get_settings),
    x_correlation_id: Optional[str] = Header(None),
):
    """Record a frontend timing next to the backend's suggest_generate samples."""
    extra = payload.model_dump(include={"recipe_count", "item_count"}, exclude_none=True)
    MetricsLogger(settings).log_latency(
        payload.name,
        payload.duration_ms,
        origin="frontend",
        extra=extra or None,
        corr_id=x_correlation_id,
    )
    return {"ok": True}
