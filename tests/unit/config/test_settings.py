# tests/unit/config/test_settings.py — v1
"""Tests for config/settings.py — typed Settings and validation rules."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from doctasks.config.settings import ConfigurationError, Settings, load_settings


class TestSettingsDefaults:
    def test_default_store(self):
        s = Settings(_env_file=None)
        assert s.store_backend == "json"
        assert s.store_root == Path("~/.doctasks/store")
        assert s.store_redis_url == ""

    def test_default_delegation(self):
        s = Settings(_env_file=None)
        assert s.delegation_timeout_s == 600.0
        assert s.verify_timeout_s == 30.0
        assert s.context_url == "offscreen.html"
        assert s.context_reason == "DOM_SCRAPING"

    def test_default_features_enabled(self):
        s = Settings(_env_file=None)
        assert s.chunking_enabled is True
        assert s.chunking_gemini_enabled is True
        assert s.toc_enabled is True
        assert s.resume_on_startup is True

    def test_default_logging(self):
        s = Settings(_env_file=None)
        assert s.log_level == "INFO"
        assert s.log_format == "json"
        assert s.log_file is None


class TestSettingsValidation:
    def test_non_positive_timeout(self):
        with pytest.raises(ValidationError, match="timeouts must be > 0"):
            Settings(_env_file=None, delegation_timeout_s=0)

    def test_verify_longer_than_delegation(self):
        with pytest.raises(ConfigurationError, match="VERIFY_TIMEOUT_S"):
            Settings(_env_file=None, delegation_timeout_s=10, verify_timeout_s=20)

    def test_unknown_backend(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, store_backend="mongo")

    def test_valid_custom(self):
        s = Settings(_env_file=None, delegation_timeout_s=60, verify_timeout_s=5)
        assert s.delegation_timeout_s == 60.0


class TestEnvironment:
    def test_reads_env_vars(self, monkeypatch):
        monkeypatch.setenv("STORE_BACKEND", "sqlite")
        monkeypatch.setenv("TOC_ENABLED", "false")
        s = Settings(_env_file=None)
        assert s.store_backend == "sqlite"
        assert s.toc_enabled is False

    def test_reads_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("DELEGATION_TIMEOUT_S=120\nLOG_FORMAT=text\n")
        s = Settings(_env_file=env_file)
        assert s.delegation_timeout_s == 120.0
        assert s.log_format == "text"


class TestLoadSettings:
    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        s = load_settings(store_backend="memory", resume_on_startup=False)
        assert s.store_backend == "memory"
        assert s.resume_on_startup is False
