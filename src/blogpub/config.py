"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from blogpub.core.thumbnail import PLACEHOLDER_THUMBNAIL, TRANSIENT_PREFIXES


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:      str = "blogpub"
    backend:       str = Field(default="files", pattern="^(files|sql|memory)$", description="Store backend")
    data_dir:      str = Field(default=".", description="Root directory for the flat-file stores and uploads")
    index_file:    str = Field(default="BlogData.json", description="Index store file, relative to data_dir")
    snippets_file: str = Field(default="Snippets.json", description="Snippet store file, relative to data_dir")
    blogs_dir:     str = Field(default="blogs", description="Artifact directory, relative to data_dir")
    images_dir:    str = Field(default="assets/blog_images", description="Upload directory, relative to data_dir")
    upload_url_prefix: str = Field(default="", description="URL prefix for uploaded assets; empty = relative path")
    db_url:        str = "sqlite:///blogpub.db"
    snippet_length: int = Field(default=300, ge=1, description="Max visible snippet characters before '...'")
    placeholder_thumbnail: str = PLACEHOLDER_THUMBNAIL
    transient_prefixes: str = Field(default=",".join(TRANSIENT_PREFIXES), description="Comma-separated URL prefixes never persisted")
    log_level:     str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    @property
    def transient(self) -> tuple[str, ...]:
        """transient_prefixes as a tuple usable with str.startswith."""
        return tuple(p.strip() for p in self.transient_prefixes.split(",") if p.strip())

    def path(self, name: str) -> Path:
        """Resolve a data-relative setting (e.g. 'blogs_dir') against data_dir."""
        return Path(self.data_dir) / getattr(self, name)


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then BLOGPUB_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"BLOGPUB_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
