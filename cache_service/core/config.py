"""Configuration settings for the cache service."""

from pydantic_settings import BaseSettings
from typing import Optional, List


class Settings(BaseSettings):
    """Application settings."""

    # API Configuration
    app_name: str = "LLM Response Cache Service"
    app_version: str = "0.3.0"
    api_prefix: str = ""
    debug: bool = False

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1  # Cache state lives in-process; more workers means separate caches

    # CORS
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:3001"]

    # Default Eviction Policy (applied at startup)
    default_policy: str = "LRU"
    default_maxsize: int = 4
    default_clean_size: int = 1

    # Quality Score defaults (used when switch-policy omits them)
    default_learning_rate: float = 0.3
    default_quality_weight: float = 0.8
    default_recency_weight: float = 0.15
    default_frequency_weight: float = 0.05

    # Random Replacement
    rr_seed: Optional[int] = None  # Fix for reproducible RR eviction

    # Status reporting
    status_sample_size: int = 5  # Keys listed under sample_cached_items

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    class Config:
        env_file = ".env"
        env_prefix = "CACHE_"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields in .env file


# Create settings instance
settings = Settings()
