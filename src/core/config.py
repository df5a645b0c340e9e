"""
Configuration management via environment variables.

This module loads configuration from .env file using python-dotenv.
All configuration values are accessed through the Settings class.

Why environment variables:
1. Security - The upstream API key never lands in Git
2. Flexibility - Different values per environment (dev/staging/prod)
3. Easy deploy override - No code changes needed per environment
"""
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# Load .env file from project root
# This must happen before accessing os.environ
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(env_path)


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.
    
    frozen=True makes the dataclass immutable, preventing accidental
    modification of settings at runtime.
    
    Attributes:
        app_name: Application identifier for logging
        app_env: Environment name (development, staging, production)
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        database_url: SQLAlchemy URL of the ordered key-value store
        groq_api_key: API key for the upstream completion service
        llm_model: Model identifier used for chat completions
        llm_base_url: Optional override of the upstream endpoint
        llm_temperature: Sampling temperature, omitted upstream when unset
        llm_max_tokens: Response length cap, omitted upstream when unset
        cors_allow_origin: Value of Access-Control-Allow-Origin
        delete_batch_size: Keys removed per transaction in a delete sweep
    """
    # Application settings
    app_name: str
    app_env: str
    log_level: str
    host: str
    port: int
    
    # Store settings
    database_url: str
    delete_batch_size: int
    
    # LLM settings
    groq_api_key: str
    llm_model: str
    llm_base_url: Optional[str]
    llm_temperature: Optional[float]
    llm_max_tokens: Optional[int]
    
    # HTTP settings
    cors_allow_origin: str
    enable_audit_logging: bool
    
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env.lower() == "development"


def _get_env(key: str, default: Optional[str] = None) -> str:
    """
    Get environment variable with optional default.
    
    Args:
        key: Environment variable name
        default: Default value if not set
        
    Returns:
        Environment variable value
        
    Raises:
        ValueError: If required variable is not set and no default provided
    """
    value = os.environ.get(key, default)
    if value is None:
        raise ValueError(
            f"Required environment variable '{key}' is not set. "
            f"Please check your .env file."
        )
    return value


def _get_optional_env(key: str) -> Optional[str]:
    """Get environment variable, treating empty strings as unset."""
    value = os.environ.get(key, "").strip()
    return value or None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.
    
    Why lru_cache:
    - Settings are read once at startup
    - Avoids re-parsing .env on every access
    - maxsize=1 ensures only one instance exists
    
    Returns:
        Settings instance with all configuration values
        
    Raises:
        ValueError: If an environment variable holds an unparsable value
    """
    database_url = _get_env("DATABASE_URL", "sqlite:///./survey.db")
    
    # Heroku-style URLs use the legacy dialect name
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
    
    temperature = _get_optional_env("LLM_TEMPERATURE")
    max_tokens = _get_optional_env("LLM_MAX_TOKENS")
    
    return Settings(
        # Application
        app_name=_get_env("APP_NAME", "OnboardingEdgeService"),
        app_env=_get_env("APP_ENV", "development"),
        log_level=_get_env("LOG_LEVEL", "INFO"),
        host=_get_env("HOST", "0.0.0.0"),
        port=int(_get_env("PORT", "8000")),
        
        # Store
        database_url=database_url,
        delete_batch_size=max(1, int(_get_env("DELETE_BATCH_SIZE", "25"))),
        
        # LLM
        groq_api_key=_get_env("GROQ_API_KEY", ""),
        llm_model=_get_env("LLM_MODEL", "llama-3.3-70b-versatile"),
        llm_base_url=_get_optional_env("LLM_BASE_URL"),
        llm_temperature=float(temperature) if temperature else None,
        llm_max_tokens=int(max_tokens) if max_tokens else None,
        
        # HTTP
        cors_allow_origin=_get_env("CORS_ALLOW_ORIGIN", "*"),
        enable_audit_logging=_get_env("ENABLE_AUDIT_LOGGING", "true").lower() == "true",
    )
