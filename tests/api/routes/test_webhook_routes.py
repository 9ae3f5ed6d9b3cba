"""Testes dos endpoints de webhook por canal e tenant."""

from __future__ import annotations

import hashlib
import hmac
import json

import pytest

from app.domain.channels import ChannelType

TELEGRAM_CONFIG = {"bot_token": "123:abc", "secret_token": "s3cret", "verify_token": "canal-token"}
SECRET_HEADER = {"X-Telegram-Bot-Api-Secret-Token": "s3cret"}


def _update(message_id: int = 1) -> dict:
    return {
        "update_id": message_id,
        "message": {
            "message_id": message_id,
            "chat": {"id": 555},
            "from": {"id": 555, "first_name": "Ana"},
            "text": "Quero um orçamento",
        },
    }


@pytest.fixture
def telegram_channel(client) -> dict:
    response = client.post(
        "/tenants/t-premium/channels",
        json={"channel_type": "telegram", "config": TELEGRAM_CONFIG},
    )
    assert response.status_code == 201
    return response.json()["channel"]


def test_verify_uses_channel_verify_token(client, telegram_channel) -> None:
    params = {"hub.mode": "subscribe", "hub.verify_token": "canal-token", "hub.challenge": "987"}

    response = client.get("/webhook/telegram/t-premium", params=params)

    assert response.status_code == 200
    assert response.text == "987"


def test_verify_rejects_wrong_token(client, telegram_channel) -> None:
    params = {"hub.mode": "subscribe", "hub.verify_token": "outro", "hub.challenge": "987"}

    response = client.get("/webhook/telegram/t-premium", params=params)

    assert response.status_code == 403


def test_unknown_channel_is_acked_and_dropped(client, container) -> None:
    response = client.post("/webhook/sms/t-premium", content=b"{}")

    assert response.status_code == 200
    assert response.json() == {"status": "ignored"}
    assert container.crm_store.count_contacts() == 0


def test_unknown_channel_verification_is_bad_request(client) -> None:
    params = {"hub.mode": "subscribe", "hub.verify_token": "x", "hub.challenge": "1"}

    response = client.get("/webhook/sms/t-premium", params=params)

    assert response.status_code == 400
    assert response.json()["error_kind"] == "unsupported_channel"


def test_invalid_signature_is_unauthorized(client, telegram_channel) -> None:
    response = client.post(
        "/webhook/telegram/t-premium",
        content=json.dumps(_update()).encode(),
        headers={"X-Telegram-Bot-Api-Secret-Token": "errado"},
    )

    assert response.status_code == 401
    assert response.json() == {"status": "error", "error": "invalid_signature"}


def test_invalid_json_is_bad_request(client, telegram_channel) -> None:
    response = client.post("/webhook/telegram/t-premium", content=b"{quebrado", headers=SECRET_HEADER)

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_json"


@pytest.mark.usefixtures("inline_webhooks")
def test_inline_processing_persists_message(client, container, telegram_channel) -> None:
    response = client.post(
        "/webhook/telegram/t-premium",
        content=json.dumps(_update()).encode(),
        headers={**SECRET_HEADER, "x-correlation-id": "corr-42"},
    )

    assert response.status_code == 200
    assert response.json() == {"status": "received", "correlation_id": "corr-42"}
    assert container.crm_store.count_contacts() == 1
    assert container.crm_store.count_conversations() == 1


@pytest.mark.usefixtures("inline_webhooks")
def test_redelivery_does_not_duplicate_message(client, container, telegram_channel) -> None:
    for _ in range(2):
        response = client.post(
            "/webhook/telegram/t-premium",
            content=json.dumps(_update(7)).encode(),
            headers=SECRET_HEADER,
        )
        assert response.status_code == 200

    stats = client.get("/tenants/t-premium/channels/stats").json()
    assert stats["messages"]["telegram"] == 1


@pytest.mark.usefixtures("inline_webhooks")
def test_webhook_for_unconfigured_channel_still_answers_ok(client, container) -> None:
    response = client.post("/webhook/telegram/t-basic", content=json.dumps(_update()).encode())

    assert response.status_code == 200
    assert container.crm_store.count_contacts() == 0


def test_whatsapp_signature_validated_with_app_secret(client) -> None:
    setup = client.post(
        "/tenants/t-basic/channels",
        json={
            "channel_type": "whatsapp",
            "config": {"phone_number_id": "123", "access_token": "tok", "app_secret": "app-secret"},
        },
    )
    assert setup.status_code == 201
    body = b"not-json"
    signature = "sha256=" + hmac.new(b"app-secret", body, hashlib.sha256).hexdigest()

    response = client.post(
        f"/webhook/{ChannelType.WHATSAPP.value}/t-basic",
        content=body,
        headers={"X-Hub-Signature-256": signature},
    )

    # assinatura válida chega ao parse do JSON
    assert response.status_code == 400
