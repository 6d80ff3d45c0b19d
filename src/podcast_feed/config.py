"""
Configuration management for podcast-feed.

Provides centralized configuration using Pydantic for validation and
environment variable support. Supports podcast.yaml for per-site settings.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type

import yaml
from pydantic import AliasChoices, Field
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


PODCAST_YAML = "podcast.yaml"
YAML_SECTION = "feed"


def load_podcast_yaml(search_dir: Optional[Path] = None) -> dict:
    """
    Load podcast.yaml configuration file.

    Searches for podcast.yaml starting from search_dir (or the current
    working directory) and walking up to 3 parent directories.

    Args:
        search_dir: Directory to start searching from

    Returns:
        Dictionary with podcast.yaml contents, or empty dict if not found
    """
    start = (search_dir or Path.cwd()).resolve()
    for parent in [start] + list(start.parents)[:3]:
        candidate = parent / PODCAST_YAML
        if candidate.exists():
            with open(candidate, "r", encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
    return {}


class PodcastYamlSettingsSource(PydanticBaseSettingsSource):
    """
    Settings source reading the ``feed:`` section of podcast.yaml.

    Example podcast.yaml:
        feed:
          rss_url: https://anchor.fm/s/1091ae5c8/podcast/rss
          output_path: site/episodes.json
          images_dir: site/images
          cache_images: true
    """

    def __init__(self, settings_cls: Type[BaseSettings]) -> None:
        super().__init__(settings_cls)
        section = load_podcast_yaml().get(YAML_SECTION) or {}
        self._data: Dict[str, Any] = section if isinstance(section, dict) else {}

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, False

    def __call__(self) -> Dict[str, Any]:
        return {
            name: value
            for name, value in self._data.items()
            if name in self.settings_cls.model_fields and value is not None
        }


class Config(BaseSettings):
    """
    Application configuration with environment variable support.

    Configuration can be provided via (highest priority first):
    1. Keyword arguments (e.g. from CLI flags)
    2. Environment variables (prefixed with PODCAST_FEED_)
    3. .env file
    4. podcast.yaml (``feed:`` section)
    5. Default values

    Example:
        export PODCAST_FEED_RSS_URL="https://example.com/feed.rss"
        export PODCAST_FEED_CACHE_IMAGES=true
    """

    model_config = SettingsConfigDict(
        env_prefix="PODCAST_FEED_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # RSS Feed
    rss_url: str = Field(
        default="",
        validation_alias=AliasChoices("rss_url", "PODCAST_FEED_RSS_URL", "RSS_URL"),
        description="RSS feed URL for the podcast",
    )

    # Output
    output_path: Path = Field(
        default=Path("episodes.json"),
        description="Where the canonical episode payload is written",
    )
    images_dir: Path = Field(
        default=Path("images"),
        description="Directory for cached episode artwork",
    )
    images_url_prefix: str = Field(
        default="images",
        description="Path prefix recorded in imageLocal for cached artwork",
    )
    cache_images: bool = Field(
        default=False,
        description="Download episode artwork into images_dir",
    )

    # HTTP
    user_agent: str = Field(
        default="PodcastSiteFetcher/1.0",
        description="User-Agent header for feed and image requests",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout in seconds",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            PodcastYamlSettingsSource(settings_cls),
            file_secret_settings,
        )

    def ensure_directories(self) -> None:
        """Create output directories if they don't exist."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        if self.cache_images:
            self.images_dir.mkdir(parents=True, exist_ok=True)


def get_config(**overrides: Any) -> Config:
    """
    Get the application configuration instance.

    Merges settings from keyword overrides, environment variables, .env
    file and podcast.yaml (if present). Overrides set to None are ignored
    so unset CLI flags fall through to the other sources.

    Returns:
        Config: Application configuration
    """
    return Config(**{key: value for key, value in overrides.items() if value is not None})
