"""Protocolo do store de configurações do programa de parceiros."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class PartnerSettingsStoreProtocol(ABC):
    """Configurações chaveadas por nome (commission_rates, bonus_targets...)."""

    @abstractmethod
    async def get_setting(self, key: str) -> Any | None:
        """Retorna o valor da configuração ou None."""

    @abstractmethod
    async def set_setting(self, key: str, value: Any) -> None:
        """Grava o valor da configuração."""
