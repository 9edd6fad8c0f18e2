"""Application settings and configuration."""

from enum import Enum

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    """Environment types for deployment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Application settings."""

    # Environment
    ENVIRONMENT: Environment = Environment.DEVELOPMENT

    # Application
    APP_NAME: str = "PhishLens"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"

    # Ollama text generation
    OLLAMA_API_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "llama3.2:3b"
    OLLAMA_TIMEOUT: float = 60.0  # generation is slow
    OLLAMA_CONNECT_TIMEOUT: float = 10.0  # health checks, model listing
    OLLAMA_TEMPERATURE: float = 0.3
    OLLAMA_TOP_P: float = 0.9
    OLLAMA_TOP_K: int = 40

    # Analysis Configuration
    ENABLE_AI_ANALYSIS: bool = True
    NARRATIVE_BODY_CHARS: int = 1000
    MAX_CONCURRENT_ANALYSES: int = 5

    @field_validator("OLLAMA_API_URL")
    @classmethod
    def validate_ollama_url(cls, v: str) -> str:
        """Validate the text-generation endpoint URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("OLLAMA_API_URL must be an http(s) URL")
        return v.rstrip("/")

    @field_validator("OLLAMA_MODEL")
    @classmethod
    def validate_ollama_model(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("OLLAMA_MODEL must not be empty")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("console", "json"):
            raise ValueError("LOG_FORMAT must be 'console' or 'json'")
        return v

    @field_validator("MAX_CONCURRENT_ANALYSES", "NARRATIVE_BODY_CHARS")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    @model_validator(mode="after")
    def validate_timeouts(self) -> "Settings":
        """Generation must get a longer budget than ordinary calls."""
        if self.OLLAMA_TIMEOUT <= self.OLLAMA_CONNECT_TIMEOUT:
            raise ValueError("OLLAMA_TIMEOUT must be larger than OLLAMA_CONNECT_TIMEOUT")
        return self

    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Check if running in development."""
        return self.ENVIRONMENT == Environment.DEVELOPMENT

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore"  # Ignore extra environment variables
    }


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
