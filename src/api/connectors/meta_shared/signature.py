"""Validação de assinatura X-Hub-Signature-256 (webhooks Meta)."""

from __future__ import annotations

import hashlib
import hmac
from typing import TYPE_CHECKING

from app.domain.messaging import SignatureResult

if TYPE_CHECKING:
    from collections.abc import Mapping

SIGNATURE_HEADER = "x-hub-signature-256"


def get_header(headers: Mapping[str, str], name: str) -> str | None:
    """Busca header sem diferenciar maiúsculas."""
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


def verify_meta_signature(
    raw_body: bytes,
    headers: Mapping[str, str],
    secret: str | None,
) -> SignatureResult:
    """Compara HMAC-SHA256 do corpo com o header da Meta.

    Sem secret configurado a validação é pulada (skipped=True).
    """
    if not secret:
        return SignatureResult(valid=True, skipped=True)

    header_value = get_header(headers, SIGNATURE_HEADER)
    if not header_value or not header_value.startswith("sha256="):
        return SignatureResult(valid=False, error="missing_signature")

    expected = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()
    received = header_value.removeprefix("sha256=")
    if not hmac.compare_digest(expected, received):
        return SignatureResult(valid=False, error="signature_mismatch")
    return SignatureResult(valid=True)
