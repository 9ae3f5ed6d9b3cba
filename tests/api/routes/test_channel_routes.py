"""Testes da gestão de canais do tenant via HTTP."""

from __future__ import annotations

import json

WHATSAPP_CONFIG = {"phone_number_id": "123", "access_token": "tok-secreto"}
TELEGRAM_CONFIG = {"bot_token": "123:abc"}


def _setup(client, tenant_id: str, channel_type: str, config: dict, **extra):
    return client.post(
        f"/tenants/{tenant_id}/channels",
        json={"channel_type": channel_type, "config": config, **extra},
    )


def test_setup_returns_masked_config(client) -> None:
    response = _setup(client, "t-basic", "whatsapp", WHATSAPP_CONFIG, make_primary=True)

    assert response.status_code == 201
    channel = response.json()["channel"]
    assert channel["channel_type"] == "whatsapp"
    assert channel["is_primary"] is True
    assert channel["channel_config"]["access_token"] == "[OCULTO]"
    assert channel["channel_config"]["phone_number_id"] == "123"


def test_basic_plan_cannot_setup_telegram(client) -> None:
    response = _setup(client, "t-basic", "telegram", TELEGRAM_CONFIG)

    assert response.status_code == 403
    body = response.json()
    assert body["error_kind"] == "plan_restriction"
    assert body["upgrade_required"] is True
    assert body["current_plan"] == "basic"
    assert body["required_plan"] == "pro"


def test_pro_plan_allows_single_active_channel(client) -> None:
    assert _setup(client, "t-pro", "telegram", TELEGRAM_CONFIG).status_code == 201

    response = _setup(client, "t-pro", "whatsapp", WHATSAPP_CONFIG)

    assert response.status_code == 403
    assert response.json()["required_plan"] == "premium"


def test_setup_with_missing_credentials_is_bad_request(client) -> None:
    response = _setup(client, "t-premium", "whatsapp", {"phone_number_id": "123"})

    assert response.status_code == 400
    assert response.json()["errors"] == ["Campo obrigatório ausente no channel_config: access_token"]


def test_setup_for_unknown_tenant_is_not_found(client) -> None:
    response = _setup(client, "t-desconhecido", "whatsapp", WHATSAPP_CONFIG)

    assert response.status_code == 404


def test_list_channels_with_summary(client) -> None:
    _setup(client, "t-premium", "whatsapp", WHATSAPP_CONFIG, make_primary=True)
    _setup(client, "t-premium", "telegram", TELEGRAM_CONFIG)

    body = client.get("/tenants/t-premium/channels").json()

    assert body["plan"] == "premium"
    assert len(body["channels"]) == 2
    assert body["summary"]["total_active"] == 2
    assert body["summary"]["can_add_more"] is True
    assert body["summary"]["primary_channel"] == "whatsapp"
    assert all(c["channel_config"].get("bot_token") in (None, "[OCULTO]") for c in body["channels"])


def test_available_channels_by_plan(client) -> None:
    assert client.get("/tenants/t-basic/channels/available").json() == {"available_channels": ["whatsapp"]}
    pro = client.get("/tenants/t-pro/channels/available").json()["available_channels"]
    assert set(pro) == {"whatsapp", "instagram", "telegram"}


def test_primary_switch_keeps_single_primary(client) -> None:
    first = _setup(client, "t-premium", "whatsapp", WHATSAPP_CONFIG, make_primary=True).json()["channel"]
    second = _setup(client, "t-premium", "telegram", TELEGRAM_CONFIG).json()["channel"]

    response = client.post(f"/tenants/t-premium/channels/{second['id']}/primary")

    assert response.status_code == 200
    assert client.get(f"/tenants/t-premium/channels/{first['id']}").json()["is_primary"] is False
    assert client.get(f"/tenants/t-premium/channels/{second['id']}").json()["is_primary"] is True


def test_update_cannot_unset_primary(client) -> None:
    channel = _setup(client, "t-premium", "whatsapp", WHATSAPP_CONFIG, make_primary=True).json()["channel"]

    response = client.put(f"/tenants/t-premium/channels/{channel['id']}", json={"is_primary": False})

    assert response.status_code == 409
    assert response.json()["error_kind"] == "primary_channel_required"
    assert client.get(f"/tenants/t-premium/channels/{channel['id']}").json()["is_primary"] is True


def test_deleting_primary_promotes_remaining_channel(client) -> None:
    first = _setup(client, "t-premium", "whatsapp", WHATSAPP_CONFIG, make_primary=True).json()["channel"]
    second = _setup(client, "t-premium", "telegram", TELEGRAM_CONFIG).json()["channel"]

    client.delete(f"/tenants/t-premium/channels/{first['id']}")

    assert client.get(f"/tenants/t-premium/channels/{second['id']}").json()["is_primary"] is True


def test_deactivate_then_activate_rechecks_plan(client) -> None:
    telegram = _setup(client, "t-pro", "telegram", TELEGRAM_CONFIG).json()["channel"]
    client.post(f"/tenants/t-pro/channels/{telegram['id']}/deactivate")
    _setup(client, "t-pro", "whatsapp", WHATSAPP_CONFIG)

    response = client.post(f"/tenants/t-pro/channels/{telegram['id']}/activate")

    assert response.status_code == 403


def test_delete_channel_and_not_found(client) -> None:
    channel = _setup(client, "t-basic", "whatsapp", WHATSAPP_CONFIG).json()["channel"]

    assert client.delete(f"/tenants/t-basic/channels/{channel['id']}").json() == {"success": True}
    assert client.get(f"/tenants/t-basic/channels/{channel['id']}").status_code == 404


def test_send_text_through_active_channel(client, provider) -> None:
    _setup(client, "t-premium", "telegram", TELEGRAM_CONFIG)

    response = client.post(
        "/tenants/t-premium/channels/send",
        json={"channel_type": "telegram", "recipient_id": "555", "body": "Seu pedido saiu"},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "channel_type": "telegram", "provider_message_id": "501"}
    assert json.loads(provider.requests[-1].content) == {"chat_id": "555", "text": "Seu pedido saiu"}


def test_send_failure_is_reported_in_body(client, provider) -> None:
    _setup(client, "t-premium", "whatsapp", WHATSAPP_CONFIG)
    provider.status_code = 500

    response = client.post(
        "/tenants/t-premium/channels/send",
        json={"channel_type": "whatsapp", "recipient_id": "5511", "body": "Oi"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "PROVIDER_CALL_FAILED"


def test_send_media_without_url_is_unprocessable(client) -> None:
    response = client.post(
        "/tenants/t-premium/channels/send",
        json={"channel_type": "telegram", "recipient_id": "555", "kind": "media"},
    )

    assert response.status_code == 422


def test_send_unsupported_media_type_is_bad_request(client, provider) -> None:
    _setup(client, "t-premium", "whatsapp", WHATSAPP_CONFIG)

    response = client.post(
        "/tenants/t-premium/channels/send",
        json={
            "channel_type": "whatsapp",
            "recipient_id": "5511",
            "kind": "media",
            "media_url": "https://cdn.exemplo.com/a.gif",
            "media_type": "gif",
        },
    )

    assert response.status_code == 400
    assert response.json()["error_kind"] == "invalid_outbound_message"


def test_send_without_channel_is_conflict(client) -> None:
    response = client.post(
        "/tenants/t-premium/channels/send",
        json={"channel_type": "instagram", "recipient_id": "ig-1", "body": "Oi"},
    )

    assert response.status_code == 409
    assert response.json()["error_kind"] == "channel_not_configured"


def test_validate_all_reports_each_channel(client, provider) -> None:
    _setup(client, "t-premium", "telegram", TELEGRAM_CONFIG)
    _setup(client, "t-premium", "whatsapp", WHATSAPP_CONFIG)

    body = client.post("/tenants/t-premium/channels/validate-all").json()

    assert body["all_healthy"] is True
    assert {result["channel_type"] for result in body["results"]} == {"telegram", "whatsapp"}
