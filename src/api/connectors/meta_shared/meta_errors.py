"""Erros e helpers de parsing para a Graph API (WhatsApp e Instagram)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class MetaApiError:
    """Erro retornado pela Graph API."""

    error_type: str
    error_code: int
    error_message: str
    is_permanent: bool  # True se erro não é retentável


def is_permanent_error(error_code: int, error_type: str) -> bool:
    """Classifica erro como permanente ou transitório.

    Erros permanentes: 400, 401, 403, 404, 413 e OAuthException.
    Erros transitórios: rate limit (4, 80007, 130429) e falhas de servidor.
    """
    if error_code in {400, 401, 403, 404, 413, 100, 190}:
        return True
    return error_type in {"OAuthException", "InvalidRequest"}


def parse_meta_error(response_data: Any) -> MetaApiError | None:
    """Extrai `error` do JSON de resposta da Meta (None se sucesso)."""
    if not isinstance(response_data, dict):
        return None
    error_obj = response_data.get("error")
    if not error_obj or not isinstance(error_obj, dict):
        return None

    error_type = str(error_obj.get("type", "unknown"))
    error_code = int(error_obj.get("code", 0) or 0)
    return MetaApiError(
        error_type=error_type,
        error_code=error_code,
        error_message=str(error_obj.get("message", "Erro desconhecido")),
        is_permanent=is_permanent_error(error_code, error_type),
    )
