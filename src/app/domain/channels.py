"""Modelos de domínio de tenants e canais.

O tipo de canal é um enum fechado: todo dispatch por canal faz match
exaustivo sobre ChannelType em vez de lookup por string.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class ChannelType(StrEnum):
    """Canais de mensageria suportados."""

    WHATSAPP = "whatsapp"
    INSTAGRAM = "instagram"
    TELEGRAM = "telegram"


class Plan(StrEnum):
    """Planos de assinatura do tenant."""

    BASIC = "basic"
    PRO = "pro"
    PREMIUM = "premium"

    @classmethod
    def parse(cls, value: str | None) -> Plan:
        """Converte string em Plan; ausente ou desconhecido vira BASIC."""
        try:
            return cls((value or "").lower())
        except ValueError:
            return cls.BASIC


@dataclass(frozen=True, slots=True)
class Tenant:
    """Conta de negócio do CRM (unidade de plano e isolamento)."""

    id: str
    plan: Plan = Plan.BASIC
    name: str = ""

    def __post_init__(self) -> None:
        # stores podem entregar o plano como texto livre
        if not isinstance(self.plan, Plan):
            object.__setattr__(self, "plan", Plan.parse(self.plan))


@dataclass(frozen=True, slots=True)
class Channel:
    """Integração de mensageria configurada por um tenant.

    Attributes:
        id: ID do canal
        tenant_id: Tenant dono do canal
        channel_type: Tipo do canal
        channel_config: Credenciais opacas por tipo (tokens, ids, secrets)
        is_active: Canal habilitado para roteamento
        is_primary: Canal principal do tenant (no máximo um)
        created_at: Data de criação (UTC)
        updated_at: Data da última alteração (UTC)
    """

    id: str
    tenant_id: str
    channel_type: ChannelType
    channel_config: dict[str, Any] = field(default_factory=dict)
    is_active: bool = True
    is_primary: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True, slots=True)
class AccessDecision:
    """Resultado da política de acesso a canais."""

    allowed: bool
    reason: str | None = None
    current_plan: Plan | None = None
    required_plan: Plan | None = None


@dataclass(frozen=True, slots=True)
class ChannelHealth:
    """Resultado do health check de um canal no provider."""

    channel_id: str
    channel_type: ChannelType
    healthy: bool
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ChannelSummary:
    """Resumo de canais do tenant para o dashboard."""

    total_active: int
    available_channels: tuple[ChannelType, ...]
    can_add_more: bool
    primary_channel: Channel | None = None


@dataclass(frozen=True, slots=True)
class ChannelListing:
    """Canais do tenant acompanhados do resumo."""

    plan: Plan
    channels: tuple[Channel, ...]
    summary: ChannelSummary
