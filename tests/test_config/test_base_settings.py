"""Testes das settings base (ambiente, CORS e shutdown)."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from config.settings.base import BaseSettings, get_base_settings


@pytest.fixture(autouse=True)
def _fresh_base_settings() -> Iterator[None]:
    get_base_settings.cache_clear()
    yield
    get_base_settings.cache_clear()


def test_loads_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "prod")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://painel.exemplo.com, https://admin.exemplo.com")
    monkeypatch.setenv("WEBHOOK_DRAIN_TIMEOUT_SECONDS", "12.5")

    settings = get_base_settings()

    assert settings.is_production is True
    assert settings.cors_allow_origins == ("https://painel.exemplo.com", "https://admin.exemplo.com")
    assert settings.webhook_drain_timeout_seconds == 12.5
    assert settings.validate() == []


def test_defaults_for_development(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("ENVIRONMENT", "CORS_ALLOW_ORIGINS", "SERVICE_NAME", "PORT"):
        monkeypatch.delenv(name, raising=False)

    settings = get_base_settings()

    assert settings.is_development is True
    assert settings.cors_allow_origins == ("*",)
    assert settings.service_name == "crm-multicanal"
    assert settings.port == 8080


def test_wildcard_cors_rejected_in_production() -> None:
    settings = BaseSettings(environment="production")

    assert settings.validate() == ["CORS_ALLOW_ORIGINS=* proibido em production"]


def test_drain_timeout_must_be_positive() -> None:
    settings = BaseSettings(webhook_drain_timeout_seconds=0)

    assert "WEBHOOK_DRAIN_TIMEOUT_SECONDS deve ser > 0" in settings.validate()
