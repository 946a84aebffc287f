"""
Configuration settings for the Screenshop Engine
"""
import os
import logging
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

# Configure basic logger for config module
logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_DIR = str(Path(__file__).resolve().parent / "templates")


class Settings(BaseSettings):
    """Application settings"""

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Logging: "json" or "console"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")

    # Anthropic
    ANTHROPIC_API_KEY: str = os.getenv("ANTHROPIC_API_KEY", "")
    ANTHROPIC_BASE_URL: str = os.getenv("ANTHROPIC_BASE_URL", "https://api.anthropic.com")
    CLAUDE_MODEL: str = os.getenv("CLAUDE_MODEL", "claude-sonnet-4-5")
    MAX_TOKENS: int = 8192

    # Seconds; unset falls back to the SDK transport default
    MODEL_REQUEST_TIMEOUT: Optional[float] = None

    # Shopify values interpolated into the generated .env.local
    SHOPIFY_STORE_DOMAIN: str = os.getenv("SHOPIFY_STORE_DOMAIN", "")
    SHOPIFY_STOREFRONT_ACCESS_TOKEN: str = os.getenv("SHOPIFY_STOREFRONT_ACCESS_TOKEN", "")

    # Template payload
    TEMPLATE_DIR: str = os.getenv("TEMPLATE_DIR", DEFAULT_TEMPLATE_DIR)

    # Upload limits
    MAX_SCREENSHOTS: int = 5
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    MAX_IMAGE_DIMENSION: int = 1568
    IMAGE_QUALITY: int = 85

    # Reject model output that misses any of the required files
    ENFORCE_REQUIRED_FILES: bool = os.getenv("ENFORCE_REQUIRED_FILES", "true").lower() == "true"

    # Download artifact
    ARCHIVE_FILENAME: str = "screenshop-output.zip"

    # Monitoring
    SENTRY_DSN: Optional[str] = os.getenv("SENTRY_DSN")
    SENTRY_ENVIRONMENT: str = os.getenv("SENTRY_ENVIRONMENT", "development")
    SENTRY_TRACES_SAMPLE_RATE: float = float(
        os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")
    )

    # CORS - comma-separated list of allowed origins
    CORS_ORIGINS: str = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000"
    )

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()


def validate_required_config(config: Settings = settings) -> bool:
    """Validate required configuration on startup"""
    errors = []

    if not config.ANTHROPIC_API_KEY:
        errors.append("ANTHROPIC_API_KEY must be configured")

    if not Path(config.TEMPLATE_DIR).is_dir():
        errors.append(f"TEMPLATE_DIR does not exist: {config.TEMPLATE_DIR}")

    if not config.SHOPIFY_STORE_DOMAIN:
        logger.warning("SHOPIFY_STORE_DOMAIN not set, generated .env.local will be blank")

    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        if config.ENVIRONMENT == "production":
            raise ValueError(f"Missing required configuration: {', '.join(errors)}")

    return len(errors) == 0
