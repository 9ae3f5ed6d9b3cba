"""Fixtures das rotas HTTP: app com stores em memória e providers simulados."""

from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

from app.app import create_app
from app.bootstrap import ServiceContainer, build_container
from app.domain.channels import Plan, Tenant
from config.settings import get_telegram_settings


class ProviderStub:
    """Respostas dos providers por host; registra as requisições."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json={"ok": False, "error_code": self.status_code})
        if request.url.host == "api.telegram.org":
            if request.url.path.endswith("/getMe"):
                return httpx.Response(200, json={"ok": True, "result": {"id": 1, "username": "bot"}})
            return httpx.Response(200, json={"ok": True, "result": {"message_id": 501}})
        if request.url.path.endswith("/messages"):
            return httpx.Response(200, json={"messages": [{"id": "wamid.out"}], "message_id": "mid.out"})
        return httpx.Response(200, json={"id": "123"})


@pytest.fixture
def provider() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
def container(provider: ProviderStub) -> ServiceContainer:
    built = build_container(transport=httpx.MockTransport(provider))
    built.crm_store.add_tenant(Tenant(id="t-basic", plan=Plan.BASIC))
    built.crm_store.add_tenant(Tenant(id="t-pro", plan=Plan.PRO))
    built.crm_store.add_tenant(Tenant(id="t-premium", plan=Plan.PREMIUM))
    return built


@pytest.fixture
def client(container: ServiceContainer) -> Iterator[TestClient]:
    # Sem `with`: o lifespan (agendador, seed) fica fora dos testes de rota
    yield TestClient(create_app(container))


@pytest.fixture
def inline_webhooks(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("TELEGRAM_WEBHOOK_PROCESSING_MODE", "inline")
    get_telegram_settings.cache_clear()
    yield
    monkeypatch.delenv("TELEGRAM_WEBHOOK_PROCESSING_MODE")
    get_telegram_settings.cache_clear()
