"""Protocolo de lock por tenant (serializa mutações de canal primário)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from contextlib import AbstractAsyncContextManager


class TenantLockProtocol(ABC):
    """Exclusão mútua por tenant.

    Uso:
        async with tenant_lock.hold(tenant_id):
            ...
    """

    @abstractmethod
    def hold(self, tenant_id: str) -> AbstractAsyncContextManager[None]:
        """Retorna context manager que segura o lock do tenant."""
