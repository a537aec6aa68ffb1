from __future__ import annotations

import pytest
from pydantic import ValidationError

from finmodel.app import create_app
from finmodel.config import DEFAULT_CORS_ORIGINS, ConfigError, load_config


def test_defaults_without_environment(monkeypatch):
    for name in ("FINMODEL_CORS_ORIGINS", "FINMODEL_LOG_LEVEL", "FINMODEL_PORT"):
        monkeypatch.delenv(name, raising=False)

    config = load_config()

    assert config.cors_origins == DEFAULT_CORS_ORIGINS
    assert config.log_level == "INFO"
    assert config.port == 5000


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("FINMODEL_CORS_ORIGINS", "https://a.example, https://b.example")
    monkeypatch.setenv("FINMODEL_LOG_LEVEL", "debug")
    monkeypatch.setenv("FINMODEL_PORT", "8080")

    config = load_config()

    assert config.cors_origins == ["https://a.example", "https://b.example"]
    assert config.log_level == "DEBUG"
    assert config.port == 8080


def test_invalid_values_fail_loudly(monkeypatch):
    monkeypatch.setenv("FINMODEL_PORT", "eighty")
    with pytest.raises(ConfigError):
        load_config()

    monkeypatch.setenv("FINMODEL_PORT", "80")
    monkeypatch.setenv("FINMODEL_LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        load_config()


def test_app_keeps_its_config(monkeypatch):
    monkeypatch.setenv("FINMODEL_CORS_ORIGINS", "https://a.example")

    app = create_app()

    assert app.config["FINMODEL"].cors_origins == ["https://a.example"]
