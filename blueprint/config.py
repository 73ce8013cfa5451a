from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path
from typing import List

from blueprint.feeds_config import (
    DEFAULT_GEMINI_API_VERSIONS,
    DEFAULT_GEMINI_MODELS,
    DEFAULT_NITTER_INSTANCES,
)

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    # System
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True
    DATA_DIR: Path = Path("./data")

    # Gemini
    GEMINI_API_KEY: str | None = None
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com"
    GEMINI_API_VERSIONS: List[str] = DEFAULT_GEMINI_API_VERSIONS
    GEMINI_MODELS: List[str] = DEFAULT_GEMINI_MODELS
    GENERATION_TIMEOUT: float = 20.0  # seconds, per matrix cell
    ANALYSIS_MAX_ATTEMPTS: int = 2
    ANALYSIS_RETRY_DELAY: float = 2.0  # seconds between analysis attempts

    # Sources
    NITTER_INSTANCES: List[str] = DEFAULT_NITTER_INSTANCES
    FETCH_TIMEOUT: float = 10.0
    MIN_ITEM_COUNT: int = 3  # Fewer posts than this is not worth analysing
    MAX_ITEM_COUNT: int = 10
    MIN_ITEM_CHARS: int = 11

    # Rate limiting (fixed window, per client IP)
    RATE_LIMIT_WINDOW: float = 60.0
    RATE_LIMIT_MAX_REQUESTS: int = 10

    # API
    CHAT_HISTORY_LIMIT: int = 5
    CORS_ALLOW_ORIGINS: List[str] = ["*"]
    DISCLAIMER: str = "AI-generated analysis based on public content only."

    def ensure_dirs(self):
        self.DATA_DIR.mkdir(parents=True, exist_ok=True)

settings = Settings()
