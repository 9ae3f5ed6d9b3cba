"""Testes de challenge, assinatura e parsing de webhooks."""

from __future__ import annotations

import pytest

from api.connectors.errors import missing_keys, provider_call
from api.connectors.webhook import (
    InvalidJsonError,
    InvalidSignatureError,
    WebhookChallengeError,
    ensure_valid_signature,
    parse_webhook_json,
    verify_webhook_challenge,
)
from app.domain.channels import ChannelType
from app.domain.errors import ProviderCallFailedError
from app.domain.messaging import SignatureResult
from app.infra.http import HttpError


def test_verify_webhook_challenge_returns_challenge() -> None:
    assert verify_webhook_challenge("subscribe", "tok", "12345", "tok") == "12345"


@pytest.mark.parametrize(
    ("mode", "token", "expected"),
    [("subscribe", "errado", "tok"), ("unsubscribe", "tok", "tok"), ("subscribe", "tok", None)],
)
def test_verify_webhook_challenge_rejects(mode, token, expected) -> None:
    with pytest.raises(WebhookChallengeError):
        verify_webhook_challenge(mode, token, "1", expected)


def test_parse_webhook_json() -> None:
    assert parse_webhook_json(b'{"object": "page"}') == {"object": "page"}
    assert parse_webhook_json(b"") == {}
    with pytest.raises(InvalidJsonError):
        parse_webhook_json(b"{not json")
    with pytest.raises(InvalidJsonError):
        parse_webhook_json(b"[1, 2]")


def test_ensure_valid_signature() -> None:
    ensure_valid_signature(SignatureResult(valid=True, skipped=True))
    with pytest.raises(InvalidSignatureError, match="signature_mismatch"):
        ensure_valid_signature(SignatureResult(valid=False, error="signature_mismatch"))


def test_provider_call_wraps_http_error() -> None:
    with pytest.raises(ProviderCallFailedError) as exc_info:
        with provider_call(ChannelType.WHATSAPP, "send"):
            raise HttpError("http_timeout", is_retryable=True)

    assert exc_info.value.channel_type is ChannelType.WHATSAPP
    assert exc_info.value.is_retryable is True
    assert isinstance(exc_info.value.__cause__, HttpError)


def test_provider_call_lets_other_errors_through() -> None:
    with pytest.raises(ValueError):
        with provider_call(ChannelType.TELEGRAM, "send"):
            raise ValueError("bot_token é obrigatório")


def test_missing_keys() -> None:
    assert missing_keys({}, ("a",)) == ["Configuração do canal é obrigatória"]
    assert missing_keys({"a": "1", "b": ""}, ("a", "b")) == ["Campo obrigatório ausente no channel_config: b"]
