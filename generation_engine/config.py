from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Provider credentials: read from .env, never hardcode values here
    FAL_KEY: Optional[str] = None
    KIE_API_KEY: Optional[str] = None
    OPENAI_API_KEY: Optional[str] = None

    FAL_BASE_URL: str = "https://fal.run"
    KIE_BASE_URL: str = "https://api.kie.ai/v1"

    # Execution
    # PROVIDER_TIMEOUT_SECONDS bounds one whole provider call, KIE.AI submit+poll
    # included. Slow models (midjourney-v6 ~60s, hunyuan-video ~120s) need it
    # raised above their average time, otherwise they always fall back.
    PROVIDER_TIMEOUT_SECONDS: float = 30.0
    PLAN_TIMEOUT_SECONDS: Optional[float] = None
    SKIP_STEPS_WITH_FAILED_DEPENDENCIES: bool = False

    # KIE.AI is asynchronous: submit, then poll the task. Polling also stops
    # once the next poll would land past the provider timeout.
    KIE_POLL_INTERVAL_SECONDS: float = 5.0
    KIE_MAX_POLLS: int = 60

    # Minimum spacing between two calls to the same provider
    FAL_MIN_INTERVAL_SECONDS: float = 0.1
    KIE_MIN_INTERVAL_SECONDS: float = 0.5

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./generation_engine.db"

    LOG_LEVEL: str = "INFO"

    # Loads from a .env file in the root directory
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

# Singleton instance
settings = Settings()
