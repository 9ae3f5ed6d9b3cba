"""Webhook de canais: challenge, assinatura e parsing seguro."""

from api.connectors.webhook.receive import (
    InvalidJsonError,
    InvalidSignatureError,
    WebhookRequestError,
    ensure_valid_signature,
    parse_webhook_json,
)
from api.connectors.webhook.verify import WebhookChallengeError, verify_webhook_challenge

__all__ = [
    "InvalidJsonError",
    "InvalidSignatureError",
    "WebhookChallengeError",
    "WebhookRequestError",
    "ensure_valid_signature",
    "parse_webhook_json",
    "verify_webhook_challenge",
]
