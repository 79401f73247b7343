"""Configuration management for the ROI Canvas Engine."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # Sandboxed environments may not expose .env; rely on real env vars
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    The financial policy (discount rate, horizon, risk multipliers) is fixed
    in ``roi_calculations`` and deliberately not exposed here.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Environment
    ROI_CANVAS_ENV: str = Field(default="dev", description="Environment: dev, test, prod")

    # Company context defaults
    DEFAULT_BUDGET: float = Field(
        default=1_000_000, description="Budget constraint used before the user states one"
    )

    # Canvas generation
    CANVAS_DESIGNED_BY: str = Field(
        default="AI ROI Canvas Agent", description="Author label stamped on generated canvases"
    )

    # Candidate ingestion limits
    MAX_EXTRACTION_CHARS: int = Field(
        default=200_000, description="Max characters of model output scanned for JSON blocks"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance
    """
    return Settings()
