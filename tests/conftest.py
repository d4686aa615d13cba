"""Root test configuration: a throwaway project tree with stories and blueprints"""

import os
from pathlib import Path

import pytest

from storysync.config import Settings
from support import BLUEPRINTS, MTIME, STORIES


@pytest.fixture(name="project")
def project_fixture(tmp_path, monkeypatch) -> Path:
    """Empty project root with story and blueprint directories, env cleared."""
    for name in Settings.model_fields:
        monkeypatch.delenv(f"STORYSYNC_{name.upper()}", raising=False)
    (tmp_path / STORIES).mkdir(parents=True)
    (tmp_path / BLUEPRINTS).mkdir(parents=True)
    return tmp_path


@pytest.fixture(name="write_story")
def write_story_fixture(project):
    """Write a story under the stories dir with a fixed mtime; returns its path."""
    def _write(name: str, content: str) -> Path:
        path = project / STORIES / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content.encode("utf-8"))
        os.utime(path, (MTIME, MTIME))
        return path
    return _write


@pytest.fixture(name="write_blueprint")
def write_blueprint_fixture(project):
    """Write an aggregate document under the blueprints dir; returns its path."""
    def _write(name: str, content: str) -> Path:
        path = project / BLUEPRINTS / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content.encode("utf-8"))
        return path
    return _write
