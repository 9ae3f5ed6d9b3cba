"""Leitura tipada das configurações do programa de parceiros.

As configurações vivem no settings store (chave = nome). Chaves ausentes
ou malformadas caem nos valores padrão documentados abaixo.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

from app.domain.partners import CommissionTier, to_decimal

if TYPE_CHECKING:
    from collections.abc import Mapping

    from app.protocols.settings_store import PartnerSettingsStoreProtocol

logger = logging.getLogger(__name__)

DEFAULT_SIGNUP_RATE = Decimal("10")
DEFAULT_RECURRING_RATE = Decimal("5")
DEFAULT_PLAN_MULTIPLIER = Decimal("1.0")
DEFAULT_ANNUAL_BONUS = Decimal("1.2")
DEFAULT_PAYMENT_MINIMUM = Decimal("100")

DEFAULT_COMMISSION_RATES = {"bronze": Decimal("10"), "silver": Decimal("15"), "gold": Decimal("20")}
DEFAULT_RECURRING_RATES = {"bronze": Decimal("5"), "silver": Decimal("7.5"), "gold": Decimal("10")}
DEFAULT_PLAN_MULTIPLIERS = {"basic": Decimal("1.0"), "pro": Decimal("1.5"), "premium": Decimal("2.0")}


@dataclass(frozen=True, slots=True)
class BonusRule:
    """Meta mensal: bonus_amount se analytics[metric] >= target."""

    metric: str
    target: Decimal
    bonus_amount: Decimal


@dataclass(frozen=True, slots=True)
class TierRequirement:
    min_conversions: int
    min_commission: Decimal


DEFAULT_TIER_REQUIREMENTS = {
    CommissionTier.SILVER: TierRequirement(min_conversions=10, min_commission=Decimal("500")),
    CommissionTier.GOLD: TierRequirement(min_conversions=50, min_commission=Decimal("2500")),
}


@dataclass(frozen=True, slots=True)
class AutoApprovalRules:
    enabled: bool = False
    business_types: tuple[str, ...] = ()
    bank_data_required: bool = True


@dataclass(frozen=True, slots=True)
class CommissionSchedule:
    """Tabelas usadas pelo cálculo de comissões."""

    signup_rates: Mapping[str, Decimal] = field(default_factory=lambda: dict(DEFAULT_COMMISSION_RATES))
    recurring_rates: Mapping[str, Decimal] = field(default_factory=lambda: dict(DEFAULT_RECURRING_RATES))
    plan_multipliers: Mapping[str, Decimal] = field(default_factory=lambda: dict(DEFAULT_PLAN_MULTIPLIERS))
    annual_bonus_multiplier: Decimal = DEFAULT_ANNUAL_BONUS


def _decimal_table(value: Any, default: Mapping[str, Decimal]) -> dict[str, Decimal]:
    if not isinstance(value, dict):
        return dict(default)
    try:
        return {str(key).lower(): to_decimal(rate) for key, rate in value.items()}
    except InvalidOperation:
        logger.warning("partner_setting_malformed", extra={"setting": "rate_table"})
        return dict(default)


class PartnerSettingsReader:
    """Acesso tipado ao settings store do programa de parceiros."""

    def __init__(self, store: PartnerSettingsStoreProtocol) -> None:
        self._store = store

    async def commission_schedule(self) -> CommissionSchedule:
        annual = await self._store.get_setting("annual_bonus_multiplier")
        return CommissionSchedule(
            signup_rates=_decimal_table(
                await self._store.get_setting("commission_rates"), DEFAULT_COMMISSION_RATES
            ),
            recurring_rates=_decimal_table(
                await self._store.get_setting("recurring_rates"), DEFAULT_RECURRING_RATES
            ),
            plan_multipliers=_decimal_table(
                await self._store.get_setting("plan_multipliers"), DEFAULT_PLAN_MULTIPLIERS
            ),
            annual_bonus_multiplier=to_decimal(annual) if annual is not None else DEFAULT_ANNUAL_BONUS,
        )

    async def bonus_rules(self) -> list[BonusRule]:
        raw = await self._store.get_setting("bonus_targets")
        if not isinstance(raw, list):
            return []
        rules = []
        for item in raw:
            if not isinstance(item, dict) or "metric" not in item:
                logger.warning("bonus_rule_ignored", extra={"reason": "malformed"})
                continue
            rules.append(
                BonusRule(
                    metric=str(item["metric"]),
                    target=to_decimal(item.get("target", 0)),
                    bonus_amount=to_decimal(item.get("bonus_amount", 0)),
                )
            )
        return rules

    async def tier_requirements(self) -> dict[CommissionTier, TierRequirement]:
        raw = await self._store.get_setting("tier_requirements")
        if not isinstance(raw, dict):
            return dict(DEFAULT_TIER_REQUIREMENTS)
        requirements = dict(DEFAULT_TIER_REQUIREMENTS)
        for tier in (CommissionTier.SILVER, CommissionTier.GOLD):
            entry = raw.get(tier.value)
            if isinstance(entry, dict):
                requirements[tier] = TierRequirement(
                    min_conversions=int(entry.get("min_conversions", 0)),
                    min_commission=to_decimal(entry.get("min_commission", 0)),
                )
        return requirements

    async def payment_minimum(self) -> Decimal:
        raw = await self._store.get_setting("payment_schedule")
        if isinstance(raw, dict) and raw.get("minimum_amount") is not None:
            return to_decimal(raw["minimum_amount"])
        return DEFAULT_PAYMENT_MINIMUM

    async def auto_approval(self) -> AutoApprovalRules:
        raw = await self._store.get_setting("auto_approval")
        if not isinstance(raw, dict):
            return AutoApprovalRules()
        requirements = raw.get("min_requirements") or {}
        business_types = requirements.get("business_type") or []
        return AutoApprovalRules(
            enabled=bool(raw.get("enabled", False)),
            business_types=tuple(str(item) for item in business_types),
            bank_data_required=bool(requirements.get("bank_data_required", True)),
        )


async def seed_partner_settings(
    store: PartnerSettingsStoreProtocol, defaults: Mapping[str, Any]
) -> int:
    """Grava no store as chaves padrão ainda ausentes.

    Returns:
        Quantidade de chaves gravadas.
    """
    written = 0
    for key, value in defaults.items():
        if await store.get_setting(key) is None:
            await store.set_setting(key, value)
            written += 1
    logger.info("partner_settings_seeded", extra={"written": written, "total": len(defaults)})
    return written
