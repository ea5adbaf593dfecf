"""Unit tests for application settings configuration."""

from datetime import timedelta
from pathlib import Path

from article_lifecycle.config import Settings


def test_settings_uses_project_env_file_independent_of_cwd():
    """Settings should always include the project-root .env as an env source."""
    env_files = Settings.model_config.get("env_file")
    assert env_files is not None

    normalized = {str(Path(item)) for item in env_files}
    expected_project_env = str(Path(__file__).resolve().parents[2] / ".env")

    assert expected_project_env in normalized
    assert str(Path(".env")) in normalized


def test_retention_window_defaults_to_thirty_days():
    settings = Settings(_env_file=None)
    assert settings.retention_days == 30
    assert settings.retention_window == timedelta(days=30)


def test_sweep_intervals_are_configurable(monkeypatch):
    monkeypatch.setenv("PUBLISH_SWEEP_INTERVAL_SECONDS", "15")
    monkeypatch.setenv("RETENTION_DAYS", "7")

    settings = Settings(_env_file=None)

    assert settings.publish_sweep_interval_seconds == 15
    assert settings.retention_window == timedelta(days=7)
