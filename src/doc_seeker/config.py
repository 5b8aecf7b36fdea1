"""
Configuration management for the doc-seeker system.
"""

import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ManifestConfig(BaseSettings):
    """Configuration for reading search manifests."""

    line_prefix: str = Field(
        default="searchIndex",
        description="Prefix marking a manifest line that carries a fragment",
    )

    model_config = SettingsConfigDict(env_prefix="MANIFEST_")


class IndexConfig(BaseSettings):
    """Configuration for index building and persistence."""

    compression_level: int = Field(
        default=6, description="Zstd compression level (1-22) for saved indexes"
    )

    model_config = SettingsConfigDict(env_prefix="INDEX_")


class SearchConfig(BaseSettings):
    """Configuration for the bundled matchers."""

    default_edit_distance: int = Field(
        default=1, description="Edit distance used when a fuzzy search omits one"
    )
    levenshtein_state_limit: int = Field(
        default=10_000,
        description="Maximum distinct states a Levenshtein matcher may create",
    )

    model_config = SettingsConfigDict(env_prefix="SEARCH_")


class Config(BaseSettings):
    """Main configuration."""

    # Sub-configs
    manifest: ManifestConfig = Field(default_factory=ManifestConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)

    # Global settings
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_nested_delimiter="__"
    )


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (mainly for testing)."""
    global _config
    _config = None


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging using the configured (or given) level."""
    level = level or get_config().log_level
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
