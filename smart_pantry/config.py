from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional, List
from dotenv import load_dotenv
load_dotenv()  # populates os.environ from .env


class Settings(BaseSettings):
    # LLM
    openai_api_key: Optional[str] = None
    openai_model_suggest: str = "gpt-4o-mini"
    openai_timeout_s: float = Field(30.0, gt=0)

    # Recipe variant: how many recipes to ask for, and whether to add imageUrl/canBeMade
    recipe_count: int = Field(5, ge=1)
    rich_recipes: bool = False
    image_workers: int = Field(4, ge=1)

    # Storage
    data_dir: str = "data"
    pantry_file: str = "data/pantry.json"
    favorites_file: str = "data/favoriteRecipes.json"
    events_file: str = "data/activity_log.jsonl"

    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://127.0.0.1:3000"])
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")
