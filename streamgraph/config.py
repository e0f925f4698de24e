"""Configuration management for streamgraph hosts.

This module provides centralized configuration using pydantic-settings,
loading values from environment variables (prefix `STREAMGRAPH_`) or a
`.env` file, with sensible defaults.

Example:
    >>> from streamgraph.config import get_settings
    >>> settings = get_settings()
    >>> settings.block_size
    256
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Host settings loaded from environment variables.
    
    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        block_size: Number of frames per push when running whole signals.
        default_graph: Graph expression used when none is given.
        default_rate: Frame rate assumed for raw arrays, in Hz.
        max_frames: Maximum frames per push announced in the descriptor.
    """
    
    model_config = SettingsConfigDict(
        env_prefix="STREAMGRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    
    # Streaming defaults
    block_size: int = Field(default=256, ge=1)
    default_graph: str = "thru"
    default_rate: float = Field(default=1000.0, gt=0)
    max_frames: int = Field(default=256, ge=1)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.
    
    Uses lru_cache to ensure settings are only loaded once.
    
    Returns:
        Settings instance with values from environment.
    """
    return Settings()
