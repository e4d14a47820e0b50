"""
Tests for environment configuration and logging setup.
"""

import json
import logging

import pytest

from daggersheet.config import (
    ConfigError,
    EngineSettings,
    configure_logging,
    default_catalog,
    load_settings,
    logger,
    setup_logging,
)


class TestLoadSettings:

    def test_defaults(self):
        settings = load_settings({})
        assert settings.content_path is None
        assert settings.log_level == "INFO"

    def test_env_mapping(self, tmp_path):
        settings = load_settings({
            "DAGGERSHEET_CONTENT_PATH": str(tmp_path / "core.yaml"),
            "DAGGERSHEET_LOG_LEVEL": "debug",
        })
        assert settings.content_path == tmp_path / "core.yaml"
        assert settings.log_level == "DEBUG"

    def test_empty_values_use_defaults(self):
        settings = load_settings({"DAGGERSHEET_CONTENT_PATH": "", "DAGGERSHEET_LOG_LEVEL": ""})
        assert settings.content_path is None
        assert settings.log_level == "INFO"

    def test_invalid_level(self):
        with pytest.raises(ConfigError):
            load_settings({"DAGGERSHEET_LOG_LEVEL": "chatty"})

    def test_process_environment(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DAGGERSHEET_LOG_LEVEL", "warning")
        monkeypatch.delenv("DAGGERSHEET_CONTENT_PATH", raising=False)
        assert load_settings().log_level == "WARNING"


class TestDefaultCatalog:

    def test_empty_without_content_path(self):
        assert len(default_catalog(EngineSettings())) == 0

    def test_loads_configured_file(self, tmp_path):
        path = tmp_path / "content.json"
        path.write_text(json.dumps({
            "content": {"cards": [{"name": "Whirlwind", "domain": "Blade"}]}
        }), encoding="utf-8")
        catalog = default_catalog(EngineSettings(content_path=path))
        assert catalog.get_card_by_name("Whirlwind") is not None


class TestSetupLogging:

    def test_sets_package_level(self):
        previous_level = logger.level
        try:
            setup_logging(EngineSettings(log_level="ERROR"))
            assert logger.level == logging.ERROR
        finally:
            logger.setLevel(previous_level)

    def test_configure_logging_accepts_names_and_ints(self):
        previous_level = logger.level
        try:
            configure_logging("debug")
            assert logger.level == logging.DEBUG
            configure_logging(logging.WARNING)
            assert logger.level == logging.WARNING
        finally:
            logger.setLevel(previous_level)

    def test_child_loggers_share_package_level(self):
        previous_level = logger.level
        try:
            configure_logging("ERROR")
            assert logging.getLogger("daggersheet.catalog").getEffectiveLevel() == logging.ERROR
        finally:
            logger.setLevel(previous_level)
