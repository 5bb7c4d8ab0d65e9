"""
Service configuration read from the environment
"""
import os
from typing import Literal

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="COOK_")

    db_path: str = "cooking.db"
    store: Literal["sqlite", "memory"] = "sqlite"
    debug: bool = False
    tick_seconds: int = 1
    session_ttl_seconds: int = 12 * 60 * 60


def load_settings() -> Settings:
    """
    Build settings from COOK_* environment variables

    A .env file is only read for the local profile.
    """
    profile = os.getenv("PROFILE", "")
    if profile == "local" or profile == "":
        load_dotenv()

    return Settings()
