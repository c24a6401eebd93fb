"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Day Planner Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "sqlite:///./dayplanner.db"
    auto_create_tables: bool = False
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "dayplanner"
    llm_api_key: str | None = None
    llm_base_url: str = "https://api.groq.com/openai/v1"
    llm_model: str = "llama3-8b-8192"
    llm_temperature: float = 0.1
    llm_max_tokens: int = 1024
    llm_timeout_seconds: float = 30.0
    retry_attempts: int = 3
    retry_base_delay_seconds: float = 1.0
    schedule_output_language: str = "Korean"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
