"""Cálculo puro de comissões (sem IO, determinístico).

Adesão:
    taxa = custom_commission_rate ou commission_rates[tier] (padrão 10)
    base = valor × 1.2 (se anual) × multiplicador do plano
    comissão = round(base × taxa / 100, 2)

Recorrente:
    taxa = custom × 0.5 ou recurring_rates[tier] (padrão 5)
    comissão = round(valor × taxa / 100, 2)

Bônus:
    soma de bonus_amount para cada regra com analytics[metric] >= target
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any

from app.domain.partners import (
    ZERO,
    CommissionDraft,
    CommissionType,
    round_money,
    to_decimal,
)
from app.services.partner_settings import (
    DEFAULT_PLAN_MULTIPLIER,
    DEFAULT_RECURRING_RATE,
    DEFAULT_SIGNUP_RATE,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from app.domain.partners import Partner, PartnerAnalytics, SubscriptionInfo
    from app.services.partner_settings import BonusRule, CommissionSchedule

YEARLY = "yearly"
RECURRING_CUSTOM_FACTOR = Decimal("0.5")
HUNDRED = Decimal("100")


def signup_rate(partner: Partner, schedule: CommissionSchedule) -> Decimal:
    if partner.custom_commission_rate:
        return to_decimal(partner.custom_commission_rate)
    return schedule.signup_rates.get(partner.commission_tier.value, DEFAULT_SIGNUP_RATE)


def recurring_rate(partner: Partner, schedule: CommissionSchedule) -> Decimal:
    if partner.custom_commission_rate:
        return to_decimal(partner.custom_commission_rate) * RECURRING_CUSTOM_FACTOR
    return schedule.recurring_rates.get(partner.commission_tier.value, DEFAULT_RECURRING_RATE)


def calculate_signup_commission(
    partner: Partner,
    subscription: SubscriptionInfo,
    schedule: CommissionSchedule,
    *,
    month: int,
    year: int,
    referral_id: str | None = None,
) -> CommissionDraft:
    """Comissão de adesão para a assinatura indicada."""
    rate = signup_rate(partner, schedule)
    original = to_decimal(subscription.amount)
    annual_bonus = schedule.annual_bonus_multiplier if subscription.billing_cycle == YEARLY else Decimal("1.0")
    plan_multiplier = schedule.plan_multipliers.get((subscription.plan or "").lower(), DEFAULT_PLAN_MULTIPLIER)

    base_amount = original * annual_bonus * plan_multiplier
    commission = round_money(base_amount * rate / HUNDRED)

    return CommissionDraft(
        partner_id=partner.id,
        commission_type=CommissionType.SIGNUP,
        commission_rate=rate,
        base_amount=round_money(base_amount),
        commission_amount=commission,
        reference_month=month,
        reference_year=year,
        referral_id=referral_id,
        calculation_details={
            "original_amount": str(original),
            "billing_cycle": subscription.billing_cycle,
            "plan": subscription.plan,
            "tier": partner.commission_tier.value,
            "plan_multiplier": str(plan_multiplier),
            "annual_bonus": str(annual_bonus),
        },
    )


def calculate_recurring_commission(
    partner: Partner,
    amount: Decimal,
    schedule: CommissionSchedule,
    *,
    referral_id: str,
    month: int,
    year: int,
) -> CommissionDraft:
    """Comissão recorrente do período (sem checagem de duplicidade)."""
    rate = recurring_rate(partner, schedule)
    base_amount = to_decimal(amount)
    return CommissionDraft(
        partner_id=partner.id,
        commission_type=CommissionType.RECURRING,
        commission_rate=rate,
        base_amount=base_amount,
        commission_amount=round_money(base_amount * rate / HUNDRED),
        reference_month=month,
        reference_year=year,
        referral_id=referral_id,
    )


def calculate_bonus_commission(
    partner_id: str,
    analytics: PartnerAnalytics | None,
    rules: Iterable[BonusRule],
    *,
    month: int,
    year: int,
) -> CommissionDraft:
    """Bônus por metas do mês; zero sem analytics ou sem meta atingida."""
    total = ZERO
    achieved: list[dict[str, Any]] = []
    if analytics is not None:
        for rule in rules:
            value = analytics.metric(rule.metric)
            if value is None or value < rule.target:
                continue
            total += rule.bonus_amount
            achieved.append(
                {
                    "metric": rule.metric,
                    "target": str(rule.target),
                    "achieved": str(value),
                    "bonus": str(rule.bonus_amount),
                }
            )

    return CommissionDraft(
        partner_id=partner_id,
        commission_type=CommissionType.BONUS,
        commission_rate=ZERO,
        base_amount=ZERO,
        commission_amount=round_money(total),
        reference_month=month,
        reference_year=year,
        calculation_details={"bonus_details": achieved},
    )
