"""Configuration management for the Fitting Room app."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

from .errors import MissingCredential


class AppConfig(BaseSettings):
    """Main application configuration."""
    
    # Gemini credential (loaded from .env or the process environment)
    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("API_KEY", "GEMINI_API_KEY"),
    )
    
    log_level: str = "INFO"
    
    # Re-encode quality for JPEG sources, same default as canvas.toDataURL
    jpeg_quality: int = Field(default=92, ge=1, le=100)
    
    class Config:
        env_file = ".env"
        env_prefix = ""
        extra = "ignore"
        populate_by_name = True


def load_config(require_api_key: bool = True) -> AppConfig:
    """Load configuration from environment and defaults.
    
    Raises:
        MissingCredential: if ``require_api_key`` is set and no key is configured
    """
    config = AppConfig()
    if require_api_key and not config.api_key:
        raise MissingCredential("API_KEY environment variable not set")
    return config
