"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str | None = None
    openai_plan_model: str = "gpt-4"
    openai_swap_model: str = "gpt-3.5-turbo"
    llm_proxy_url: str | None = None
    llm_proxy_token: str | None = None
    use_mock_ai: bool = False
    max_retries: int = 3
    retry_delay_seconds: float = 1.0
    rate_limit_per_minute: int = 10
    use_cache: bool = True
    cache_ttl_seconds: int = 30 * 60
    supabase_url: str
    supabase_service_key: str
    recipe_api_key: str | None = None
    recipe_api_base_url: str = "https://api.spoonacular.com"
    meal_replacement_min_savings: float = 2.0
    bulk_discount: float = 0.15
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
