"""
Configuration settings for the enrichment engine.
Loads settings from environment variables (and an optional .env file) with sensible defaults.
"""

import logging
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Application
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    # Provider API keys (empty = provider not registered)
    APOLLO_API_KEY: str = Field(default="", description="Apollo.io API key")
    LEADMAGIC_API_KEY: str = Field(default="", description="LeadMagic API key")
    PROSPEO_API_KEY: str = Field(default="", description="Prospeo API key")

    # Provider priorities (lower = tried first)
    APOLLO_PRIORITY: int = Field(default=1, description="Waterfall priority for Apollo")
    LEADMAGIC_PRIORITY: int = Field(default=2, description="Waterfall priority for LeadMagic")
    PROSPEO_PRIORITY: int = Field(default=3, description="Waterfall priority for Prospeo")

    # Outbound HTTP
    HTTP_TIMEOUT_SECONDS: float = Field(default=30.0, description="Default outbound request timeout in seconds")

    # Waterfall defaults
    WATERFALL_QUALITY_THRESHOLD: float = Field(default=0.7, description="Quality score at which the waterfall may stop")
    WATERFALL_MAX_PROVIDERS: int = Field(default=3, description="Maximum providers charged per waterfall")
    CREDIT_GATE_AMOUNT: float = Field(default=1.0, description="Balance required before each paid provider call")

    # Intelligence scoring weights
    SCORE_WEIGHT_ICP_FIT: float = Field(0.35, description="Weight for ICP fit in the composite score")
    SCORE_WEIGHT_SIGNALS: float = Field(0.30, description="Weight for buying signals in the composite score")
    SCORE_WEIGHT_ORIGINALITY: float = Field(0.20, description="Weight for data originality in the composite score")
    SCORE_WEIGHT_COST_EFFICIENCY: float = Field(0.15, description="Weight for cost efficiency in the composite score")

    def validate_settings(self) -> None:
        """Validate critical settings."""
        if not 0.0 <= self.WATERFALL_QUALITY_THRESHOLD <= 1.0:
            raise ValueError("WATERFALL_QUALITY_THRESHOLD must be between 0 and 1")
        if self.WATERFALL_MAX_PROVIDERS <= 0:
            raise ValueError("WATERFALL_MAX_PROVIDERS must be a positive integer")
        if self.CREDIT_GATE_AMOUNT < 0:
            raise ValueError("CREDIT_GATE_AMOUNT cannot be negative")


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for processes embedding the engine."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )


# Global settings instance
settings = Settings()

# Validate settings on import
try:
    settings.validate_settings()
except ValueError as e:
    logger.warning(f"Configuration validation warning: {e}")
