"""Partner Stats/Tier Aggregator.

Recalcula agregados do parceiro a partir das indicações e comissões e
avalia mudança de tier (gold, depois silver, senão bronze).
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from app.domain.errors import PartnerNotFoundError
from app.domain.partners import (
    ZERO,
    BatchSummary,
    CommissionStatus,
    CommissionTier,
    PartnerStatus,
    ReferralStatus,
    round_money,
)
from app.observability import record_batch_summary
from app.services.commission_reports import period_start

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.domain.partners import Partner, PartnerCommission
    from app.protocols.partner_store import PartnerStoreProtocol
    from app.services.partner_settings import PartnerSettingsReader

logger = logging.getLogger(__name__)


def _total(commissions: list[PartnerCommission], status: CommissionStatus | None = None) -> Decimal:
    return sum(
        (c.commission_amount for c in commissions if status is None or c.status is status),
        ZERO,
    )


class PartnerStatsAggregator:
    """Agregados mensais/totais e tier do parceiro."""

    def __init__(
        self,
        store: PartnerStoreProtocol,
        settings: PartnerSettingsReader,
        *,
        monotonic_tiers: bool = False,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._settings = settings
        self._monotonic = monotonic_tiers
        self._clock = clock or (lambda: datetime.now(UTC))

    async def update_partner_stats(self, partner_id: str) -> Partner:
        """Reescreve agregados do parceiro e reavalia o tier."""
        now = self._clock()
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        referrals = await self._store.list_referrals(partner_id=partner_id)
        commissions = await self._store.list_commissions(partner_id=partner_id)
        month_referrals = [r for r in referrals if r.created_at >= month_start]
        month_commissions = [
            c for c in commissions if c.reference_month == now.month and c.reference_year == now.year
        ]

        total_conversions = sum(1 for r in referrals if r.status is ReferralStatus.SUBSCRIBED)
        total_commission = _total(commissions)
        updated = await self._store.update_partner(
            partner_id,
            total_referrals=len(referrals),
            total_conversions=total_conversions,
            total_commission_earned=total_commission,
            current_month_referrals=len(month_referrals),
            current_month_conversions=sum(
                1 for r in month_referrals if r.status is ReferralStatus.SUBSCRIBED
            ),
            current_month_commission=_total(month_commissions),
        )
        if updated is None:
            raise PartnerNotFoundError(partner_id)

        tiered = await self.check_tier_upgrade(partner_id, total_conversions, total_commission)
        return tiered or updated

    async def check_tier_upgrade(
        self, partner_id: str, total_conversions: int, total_commission: Decimal
    ) -> Partner | None:
        """Grava o novo tier se diferente do atual.

        Returns:
            Parceiro atualizado, ou None se o tier não mudou.
        """
        requirements = await self._settings.tier_requirements()
        new_tier = CommissionTier.BRONZE
        for tier in (CommissionTier.GOLD, CommissionTier.SILVER):
            requirement = requirements.get(tier)
            if requirement is None:
                continue
            if (
                total_conversions >= requirement.min_conversions
                and total_commission >= requirement.min_commission
            ):
                new_tier = tier
                break

        partner = await self._store.get_partner(partner_id)
        if partner is None:
            raise PartnerNotFoundError(partner_id)
        if partner.commission_tier is new_tier:
            return None

        if self._monotonic and new_tier.rank < partner.commission_tier.rank:
            logger.info(
                "tier_downgrade_suppressed",
                extra={
                    "partner_id": partner_id,
                    "current_tier": partner.commission_tier.value,
                    "computed_tier": new_tier.value,
                },
            )
            return None

        updated = await self._store.update_partner(partner_id, commission_tier=new_tier)
        logger.info(
            "partner_tier_changed",
            extra={
                "partner_id": partner_id,
                "from_tier": partner.commission_tier.value,
                "to_tier": new_tier.value,
            },
        )
        return updated

    async def update_all_partner_stats(self) -> BatchSummary:
        """Atualiza todos os parceiros aprovados; falhas isoladas por parceiro."""
        summary = BatchSummary(operation="partner_stats")
        for partner in await self._store.list_partners(PartnerStatus.APPROVED):
            try:
                await self.update_partner_stats(partner.id)
            except Exception as exc:
                summary.failed += 1
                logger.error(
                    "partner_stats_update_failed",
                    extra={"partner_id": partner.id, "error_type": type(exc).__name__},
                )
                continue
            summary.processed += 1
        record_batch_summary(summary.operation, summary.processed, summary.skipped, summary.failed)
        return summary

    async def get_partner_stats(self, partner_id: str, period: str = "month") -> dict[str, Any]:
        """Métricas do parceiro no período (week|month|year|all)."""
        now = self._clock()
        since = None if period == "all" else (period_start(period, now) or period_start("month", now))
        referrals = [
            r
            for r in await self._store.list_referrals(partner_id=partner_id)
            if since is None or r.created_at >= since
        ]
        commissions = await self._store.list_commissions(partner_id=partner_id, created_from=since)

        clicks = len(referrals)
        conversions = sum(1 for r in referrals if r.status is ReferralStatus.SUBSCRIBED)
        rate = round_money(Decimal(conversions) * 100 / Decimal(clicks)) if clicks else ZERO
        return {
            "period": period,
            "total_clicks": clicks,
            "total_registrations": sum(1 for r in referrals if r.status is not ReferralStatus.CLICKED),
            "total_conversions": conversions,
            "total_commission": _total(commissions),
            "conversion_rate": rate,
            "pending_commission": _total(commissions, CommissionStatus.PENDING),
            "paid_commission": _total(commissions, CommissionStatus.PAID),
        }
