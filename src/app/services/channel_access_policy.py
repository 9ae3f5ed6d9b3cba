"""Política de acesso a canais por plano.

Função pura usada tanto no setup/ativação de canais quanto no roteamento
de mensagens, para que as duas pontas nunca divirjam.

Regras (primeira que casar vence):
1. basic: apenas WhatsApp.
2. pro: um canal simultâneo de qualquer tipo; permitido se o canal já
   está entre os ativos ou se não há nenhum ativo.
3. premium: sempre permitido.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

from app.domain.channels import AccessDecision, ChannelType, Plan

if TYPE_CHECKING:
    from collections.abc import Iterable

BASIC_ONLY_WHATSAPP = "Plano Básico permite apenas WhatsApp. Faça upgrade para Pro ou Premium."
PRO_SINGLE_CHANNEL = (
    "Plano Pro permite apenas 1 canal ativo. "
    "Desative o canal atual ou faça upgrade para Premium."
)


def can_use_channel(
    plan: Plan,
    requested: ChannelType,
    active_channels: Iterable[ChannelType],
) -> AccessDecision:
    """Decide se o tenant pode usar o canal solicitado.

    Args:
        plan: Plano atual do tenant
        requested: Tipo de canal solicitado
        active_channels: Tipos dos canais atualmente ativos do tenant

    Returns:
        AccessDecision com motivo e plano exigido quando negado.
    """
    active = set(active_channels)

    match plan:
        case Plan.BASIC:
            if requested is ChannelType.WHATSAPP:
                return AccessDecision(allowed=True, current_plan=plan)
            return AccessDecision(
                allowed=False,
                reason=BASIC_ONLY_WHATSAPP,
                current_plan=plan,
                required_plan=Plan.PRO,
            )
        case Plan.PRO:
            if not active or requested in active:
                return AccessDecision(allowed=True, current_plan=plan)
            return AccessDecision(
                allowed=False,
                reason=PRO_SINGLE_CHANNEL,
                current_plan=plan,
                required_plan=Plan.PREMIUM,
            )
        case Plan.PREMIUM:
            return AccessDecision(allowed=True, current_plan=plan)
        case _:
            assert_never(plan)


def available_channels(plan: Plan) -> tuple[ChannelType, ...]:
    """Tipos de canal que o plano pode configurar."""
    match plan:
        case Plan.BASIC:
            return (ChannelType.WHATSAPP,)
        case Plan.PRO | Plan.PREMIUM:
            return tuple(ChannelType)
        case _:
            assert_never(plan)


def max_active_channels(plan: Plan) -> int | None:
    """Limite de canais ativos simultâneos (None = sem limite)."""
    match plan:
        case Plan.BASIC | Plan.PRO:
            return 1
        case Plan.PREMIUM:
            return None
        case _:
            assert_never(plan)
