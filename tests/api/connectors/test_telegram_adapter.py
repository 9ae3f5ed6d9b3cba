"""Testes do adapter Telegram contra Bot API simulada."""

from __future__ import annotations

import json

import httpx
import pytest

from api.connectors.telegram import TelegramChannelAdapter
from app.domain.errors import ProviderCallFailedError
from app.domain.messaging import SendOptions
from config.settings import TelegramSettings

CONFIG = {"bot_token": "123:abc", "secret_token": "s3cret"}


def _adapter(handler) -> TelegramChannelAdapter:
    return TelegramChannelAdapter(TelegramSettings(), transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_send_text_calls_send_message() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"ok": True, "result": {"message_id": 77}})

    result = await _adapter(handler).send(CONFIG, "555", "Olá", SendOptions())

    assert result.success is True
    assert result.provider_message_id == "77"
    assert captured[0].url.path == "/bot123:abc/sendMessage"
    assert json.loads(captured[0].content) == {"chat_id": "555", "text": "Olá"}


@pytest.mark.asyncio
async def test_send_error_envelope_raises_provider_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            403, json={"ok": False, "error_code": 403, "description": "Forbidden: bot was blocked by the user"}
        )

    with pytest.raises(ProviderCallFailedError) as exc_info:
        await _adapter(handler).send(CONFIG, "555", "Olá", SendOptions())

    assert exc_info.value.status_code == 403
    assert exc_info.value.is_retryable is False


@pytest.mark.asyncio
async def test_send_server_error_is_retryable_failure() -> None:
    with pytest.raises(ProviderCallFailedError) as exc_info:
        await _adapter(lambda request: httpx.Response(502)).send(CONFIG, "555", "Olá", SendOptions())

    assert exc_info.value.is_retryable is True


@pytest.mark.asyncio
async def test_health_check_uses_get_me() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/getMe")
        return httpx.Response(
            200, json={"ok": True, "result": {"id": 99, "username": "loja_bot", "first_name": "Loja"}}
        )

    info = await _adapter(handler).health_check(CONFIG)

    assert info == {"bot_id": 99, "username": "loja_bot", "name": "Loja"}


@pytest.mark.asyncio
async def test_register_webhook_sends_secret_token() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"ok": True, "result": True})

    assert await _adapter(handler).register_webhook(CONFIG, "https://crm.test/webhooks/t1/telegram") is True
    assert bodies[0] == {"url": "https://crm.test/webhooks/t1/telegram", "secret_token": "s3cret"}


def test_verify_signature_with_secret_token() -> None:
    adapter = _adapter(lambda request: httpx.Response(200))

    assert adapter.verify_signature(b"{}", {"x-telegram-bot-api-secret-token": "s3cret"}, CONFIG).valid
    missing = adapter.verify_signature(b"{}", {}, CONFIG)
    assert (missing.valid, missing.error) == (False, "missing_signature")
    wrong = adapter.verify_signature(b"{}", {"X-Telegram-Bot-Api-Secret-Token": "x"}, CONFIG)
    assert (wrong.valid, wrong.error) == (False, "signature_mismatch")


def test_verify_signature_skipped_without_secret() -> None:
    result = _adapter(lambda request: httpx.Response(200)).verify_signature(b"{}", {}, {"bot_token": "1"})

    assert result.valid is True
    assert result.skipped is True


def test_validate_config() -> None:
    adapter = _adapter(lambda request: httpx.Response(200))

    assert adapter.validate_config({"bot_token": "1:a"}) == []
    assert adapter.validate_config({}) == ["Configuração do canal é obrigatória"]
    assert len(adapter.validate_config({"secret_token": "x"})) == 1
