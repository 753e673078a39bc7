"""Settings loading for Vault Sync.

Settings live in ``setting.toml`` at the blog's project root::

    source_root_path = "~/Documents/vault"
    blog_name = "My Blog"
    site_url = "https://example.com"
    locale = "ko"

    [posts]
    exclude_tags = ["private"]

    [posts.translate]
    enabled = true
    provider = "anthropic"
    api_key = "${ANTHROPIC_API_KEY}"
    model = "claude-sonnet-4-5"
    target_langs = ["en", "ja"]
"""

import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

SETTINGS_FILENAME = "setting.toml"


class ConfigError(Exception):
    """Settings file is missing, malformed or incomplete."""


class TranslateSettings(BaseModel):
    enabled: bool = Field(default=False)
    provider: Optional[str] = Field(default=None)
    api_key: Optional[str] = Field(default=None)
    model: Optional[str] = Field(default=None)
    target_langs: List[str] = Field(default_factory=list)


class PostsSettings(BaseModel):
    exclude_tags: List[str] = Field(default_factory=list)
    translate: TranslateSettings = Field(default_factory=TranslateSettings)


class Settings(BaseModel):
    source_root_path: str = Field(min_length=1)
    blog_name: str = Field(default="")
    site_url: Optional[str] = Field(default=None)
    locale: str = Field(default="en", min_length=1)
    posts: PostsSettings = Field(default_factory=PostsSettings)

    @property
    def source_path(self) -> Path:
        return Path(self.source_root_path).expanduser().resolve()


def settings_from_dict(data: Dict[str, Any]) -> Settings:
    """Validate parsed TOML data into Settings.

    Raises:
        ConfigError: If source_root_path is missing or a value has the
            wrong type
    """
    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e


def load_settings(path: Path) -> Settings:
    """Load settings from a TOML file.

    Args:
        path: Path to setting.toml

    Returns:
        Parsed Settings

    Raises:
        ConfigError: If the file cannot be read, parsed or validated
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        raise ConfigError(f"Settings file not found: {path}")
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to read {path}: {e}")

    return settings_from_dict(data)
