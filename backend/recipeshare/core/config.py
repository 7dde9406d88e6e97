# recipeshare/core/config.py
# Settings loaded from env / .env (store backend, paging, retry knobs)
from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    MONGO_URI: str = "mongodb://localhost:27017"  # split per prod/staging as needed
    MONGO_DB: str = "recipe-sharing"
    STORE_BACKEND: Literal["mongo", "memory"] = "mongo"

    DEFAULT_PAGE_SIZE: int = 12
    POPULAR_LIMIT: int = 12
    RATE_MAX_ATTEMPTS: int = 5

    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    LOG_LEVEL: str = "INFO"

settings = Settings()
