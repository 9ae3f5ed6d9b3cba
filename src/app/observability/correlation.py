"""Contexto de rastreamento (correlation_id e tenant) via ContextVar.

Uso:
    token = set_correlation_id(request.headers.get("x-correlation-id"))
    try:
        ...
    finally:
        reset_correlation_id(token)
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
_tenant_id: ContextVar[str] = ContextVar("tenant_id", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual (vazio se não definido)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id; gera UUID v4 quando None."""
    value = correlation_id or generate_correlation_id()
    return _correlation_id.set(value)


def reset_correlation_id(token: Token[str]) -> None:
    _correlation_id.reset(token)


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def get_tenant_id() -> str:
    """Tenant em processamento no contexto atual (vazio se não definido)."""
    return _tenant_id.get()


def set_tenant_id(tenant_id: str) -> Token[str]:
    return _tenant_id.set(tenant_id)


def reset_tenant_id(token: Token[str]) -> None:
    _tenant_id.reset(token)
