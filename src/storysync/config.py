"""Application configuration: settings schema and storysync.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from storysync.core.discover import SKIP_DIRS


CONFIG_FILE = "storysync.yaml"
LIST_FIELDS = {"skip_dirs"}


class Settings(BaseModel):
    stories_dir:       str = Field(default="docs/user-stories",    description="Story documents, relative to the project root")
    aggregates_dir:    str = Field(default="docs/changes-request", description="Aggregate documents, relative to the project root")
    story_pattern:     str = Field(default="*.md",                 description="File name pattern for story documents")
    aggregate_pattern: str = Field(default="*.blueprint.md",       description="File name pattern for aggregate documents; '*.md' accepts all")
    skip_dirs:   list[str] = Field(default=list(SKIP_DIRS),        description="Directory names pruned during scans")
    log_level:         str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$")


def load_config(overrides: dict[str, Any] = None, base_dir: Path = None) -> Settings:
    """Load Settings from storysync.yaml, then STORYSYNC_<FIELD> env vars, then non-None CLI overrides."""
    config_path = Path(base_dir or ".") / CONFIG_FILE
    data: dict[str, Any] = {}
    if config_path.exists():
        try:
            data = yaml.safe_load(config_path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"STORYSYNC_{name.upper()}"):
            data[name] = [v.strip() for v in val.split(",") if v.strip()] if name in LIST_FIELDS else val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
