import os
from pathlib import Path
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv


dotenv_path = Path(__file__).resolve().parents[2] / '.env'
load_dotenv(dotenv_path)


class Settings(BaseSettings):
    """Global configurations."""

    model_config = SettingsConfigDict(extra="ignore", case_sensitive=True)

    # Article sources. A source is enabled only when its key is present.
    NEWS_API_KEY: str = Field("", validation_alias="NEWS_API_KEY")
    NEWS_API_BASE_URL: str = Field("https://newsapi.org/v2", validation_alias="NEWS_API_BASE_URL")
    GUARDIAN_API_KEY: str = Field("", validation_alias="GUARDIAN_API_KEY")
    NYT_API_KEY: str = Field("", validation_alias="NYT_API_KEY")

    # Language model ("ollama", "openai" or "none")
    LLM_PROVIDER: str = Field("ollama", validation_alias="LLM_PROVIDER")
    OLLAMA_ENDPOINT: str = Field("http://localhost:11434", validation_alias="OLLAMA_ENDPOINT")
    OLLAMA_MODEL: str = Field("mistral", validation_alias="OLLAMA_MODEL")
    OPENAI_API_KEY: str = Field("", validation_alias="OPENAI_API_KEY")
    OPENAI_MODEL: str = Field("gpt-4.1-mini", validation_alias="OPENAI_MODEL")

    # TTL (Time-To-Live) for the report cache, seconds
    CACHE_TTL_SECONDS: int = int(os.getenv("CACHE_TTL_SECONDS", 60 * 30))

    # Per-call timeouts, seconds
    PROVIDER_TIMEOUT_SECONDS: float = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", 10))
    LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", 10))

    ENRICHMENT_CONCURRENCY: int = int(os.getenv("ENRICHMENT_CONCURRENCY", 5))
    RECENT_SEARCHES_LIMIT: int = int(os.getenv("RECENT_SEARCHES_LIMIT", 50))

    ENV_STATE: str = Field('dev', validation_alias='ENV_STATE')
    LOG_LEVEL: str = Field('INFO', validation_alias='LOG_LEVEL')


# Avoid having to re-read the .env file and create the Settings object every time you access it
@lru_cache()
def get_settings():
    return Settings()


# Settings will be the object that contains all the configuration of the application.
settings = get_settings()
