"""
Configuration Tests

Environment loading, credential detection and wiring into JobOrchestrator.

Run with:
    python -m pytest tests/test_config.py -v
"""

import os
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import core.config
from core.config import Config, get_config, reload_config
from services.video_generation.orchestrator import JobOrchestrator

ENV_VARS = [
    "GOOGLE_API_KEY",
    "API_KEY",
    "VEO_MODEL",
    "VEO_POLL_INTERVAL",
    "VEO_POLL_MAX_ATTEMPTS",
    "VIDEO_OUTPUT_DIR",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test from an empty environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    core.config._config = None


class TestConfig:
    """Loading configuration from the environment."""

    def test_defaults(self):
        config = Config.from_env()
        assert config.models.video_model == "veo-3.0-generate-preview"
        assert config.polling.poll_interval_seconds == 10.0
        assert config.polling.max_poll_attempts == 1
        assert config.storage.output_dir == "output"
        assert not config.has_credentials()

    def test_google_api_key(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "g-key")
        monkeypatch.setenv("API_KEY", "fallback-key")
        assert Config.from_env().api.google_api_key == "g-key"

    def test_api_key_fallback(self, monkeypatch):
        monkeypatch.setenv("API_KEY", "fallback-key")
        config = Config.from_env()
        assert config.api.google_api_key == "fallback-key"
        assert config.has_credentials()

    def test_placeholder_key_is_missing(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "YOUR_API_KEY_HERE")
        config = Config.from_env()
        assert not config.has_credentials()
        assert any("GOOGLE_API_KEY" in issue for issue in config.validate())

    def test_polling_overrides(self, monkeypatch):
        monkeypatch.setenv("VEO_POLL_INTERVAL", "2.5")
        monkeypatch.setenv("VEO_POLL_MAX_ATTEMPTS", "4")
        config = Config.from_env()
        assert config.polling.poll_interval_seconds == 2.5
        assert config.polling.max_poll_attempts == 4

    def test_validate_flags_bad_polling(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "g-key")
        monkeypatch.setenv("VEO_POLL_INTERVAL", "-1")
        monkeypatch.setenv("VEO_POLL_MAX_ATTEMPTS", "0")
        issues = Config.from_env().validate()
        assert len(issues) == 2

    def test_valid_config_has_no_issues(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "g-key")
        assert Config.from_env().validate() == []

    def test_get_config_is_cached_until_reload(self, monkeypatch):
        reload_config()
        first = get_config()
        assert get_config() is first
        monkeypatch.setenv("VEO_MODEL", "veo-3.0-fast-generate-preview")
        reload_config()
        assert get_config() is not first
        assert get_config().models.video_model == "veo-3.0-fast-generate-preview"


class TestOrchestratorFromConfig:
    """JobOrchestrator picks up its settings from Config."""

    def test_wiring(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GOOGLE_API_KEY", "g-key")
        monkeypatch.setenv("VEO_MODEL", "veo-custom")
        monkeypatch.setenv("VEO_POLL_INTERVAL", "3")
        monkeypatch.setenv("VEO_POLL_MAX_ATTEMPTS", "2")
        monkeypatch.setenv("VIDEO_OUTPUT_DIR", str(tmp_path))
        service = MagicMock()

        orchestrator = JobOrchestrator.from_config(service, Config.from_env())

        assert orchestrator.service is service
        assert orchestrator.access_token == "g-key"
        assert orchestrator.model == "veo-custom"
        assert orchestrator.poll_interval == 3.0
        assert orchestrator.poll_retry.max_attempts == 2
        assert orchestrator.output_dir == Path(tmp_path)
