"""Unit tests for config.py"""

import pytest
from pydantic import ValidationError

from storysync.config import Settings, load_config
from storysync.core.discover import SKIP_DIRS


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in Settings.model_fields:
        monkeypatch.delenv(f"STORYSYNC_{name.upper()}", raising=False)


def test_load_config_defaults(tmp_path):
    """Defaults apply when no storysync.yaml, env var, or CLI override exists."""
    settings = load_config(base_dir=tmp_path)
    assert settings.stories_dir == "docs/user-stories"
    assert settings.aggregates_dir == "docs/changes-request"
    assert settings.aggregate_pattern == "*.blueprint.md"
    assert settings.skip_dirs == list(SKIP_DIRS)


def test_load_config_reads_yaml(tmp_path):
    (tmp_path / "storysync.yaml").write_text("aggregate_pattern: '*.md'\nskip_dirs: [archive]\n")
    settings = load_config(base_dir=tmp_path)
    assert settings.aggregate_pattern == "*.md"
    assert settings.skip_dirs == ["archive"]


def test_load_config_uses_cwd_by_default(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "storysync.yaml").write_text("stories_dir: stories\n")
    assert load_config().stories_dir == "stories"


def test_load_config_env_overrides_yaml(tmp_path, monkeypatch):
    """STORYSYNC_STORIES_DIR takes precedence over storysync.yaml."""
    (tmp_path / "storysync.yaml").write_text("stories_dir: from-yaml\n")
    monkeypatch.setenv("STORYSYNC_STORIES_DIR", "from-env")
    assert load_config(base_dir=tmp_path).stories_dir == "from-env"


def test_load_config_env_list_is_comma_separated(tmp_path, monkeypatch):
    monkeypatch.setenv("STORYSYNC_SKIP_DIRS", ".git, archive ,")
    assert load_config(base_dir=tmp_path).skip_dirs == [".git", "archive"]


def test_load_config_cli_overrides_env(tmp_path, monkeypatch):
    """A non-None CLI override beats the env var; None overrides are ignored."""
    monkeypatch.setenv("STORYSYNC_LOG_LEVEL", "INFO")
    settings = load_config(overrides={"log_level": "DEBUG", "stories_dir": None}, base_dir=tmp_path)
    assert settings.log_level == "DEBUG"
    assert settings.stories_dir == "docs/user-stories"


def test_load_config_invalid_yaml(tmp_path):
    (tmp_path / "storysync.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid storysync.yaml"):
        load_config(base_dir=tmp_path)


def test_load_config_non_mapping_yaml(tmp_path):
    (tmp_path / "storysync.yaml").write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="expected a mapping"):
        load_config(base_dir=tmp_path)


def test_load_config_rejects_bad_log_level(tmp_path):
    with pytest.raises(ValidationError):
        load_config(overrides={"log_level": "LOUD"}, base_dir=tmp_path)
