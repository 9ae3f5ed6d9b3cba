"""Parse seguro do corpo de webhooks (sem logar conteúdo)."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.domain.messaging import SignatureResult


class WebhookRequestError(ValueError):
    """Erro base para falhas de webhook."""


class InvalidSignatureError(WebhookRequestError):
    """Assinatura inválida do webhook."""


class InvalidJsonError(WebhookRequestError):
    """JSON inválido no payload do webhook."""


def parse_webhook_json(raw_body: bytes) -> dict[str, Any]:
    """Parseia o corpo do webhook.

    Raises:
        InvalidJsonError: Se o JSON estiver inválido ou não for objeto
    """
    try:
        payload = json.loads(raw_body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidJsonError("invalid_json") from exc

    if not isinstance(payload, dict):
        raise InvalidJsonError("payload_not_object")
    return payload


def ensure_valid_signature(result: SignatureResult) -> None:
    """Levanta InvalidSignatureError quando a verificação falhou.

    Assinatura pulada (canal sem secret) é aceita.
    """
    if not result.valid:
        raise InvalidSignatureError(result.error or "invalid_signature")
