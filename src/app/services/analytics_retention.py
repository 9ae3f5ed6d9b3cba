"""Retenção e compactação de dados do programa de parceiros.

- Indicações `clicked` com mais de 90 dias são removidas.
- Analytics diários com mais de 1 ano são removidos.
- Analytics diários com mais de 3 meses são somados na linha mensal do
  (parceiro, ano, mês) e removidos. A linha mensal guarda exatamente os
  diários já compactados; `month_totals` soma o que ainda é diário.
"""

from __future__ import annotations

import calendar
import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from app.domain.partners import (
    ZERO,
    AnalyticsPeriod,
    PartnerAnalytics,
    ReferralStatus,
    conversion_rate,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from app.protocols.partner_store import PartnerStoreProtocol

logger = logging.getLogger(__name__)

STALE_REFERRAL_DAYS = 90
DAILY_ANALYTICS_MAX_AGE_YEARS = 1
CONSOLIDATE_AFTER_MONTHS = 3


def months_before(day: date, months: int) -> date:
    """Mesma data `months` meses antes (dia limitado ao fim do mês)."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


@dataclass(frozen=True, slots=True)
class RetentionReport:
    deleted_referrals: int = 0
    deleted_daily_rows: int = 0
    consolidated_months: int = 0
    consolidated_rows: int = 0
    failed_groups: int = 0


def _sum_rows(rows: Iterable[PartnerAnalytics]) -> tuple[int, int, int, Decimal]:
    clicks = registrations = subscriptions = 0
    revenue = ZERO
    for row in rows:
        clicks += row.clicks
        registrations += row.registrations
        subscriptions += row.subscriptions
        revenue += row.gross_revenue
    return clicks, registrations, subscriptions, revenue


class AnalyticsRetention:
    """Limpeza semanal e visão mensal de analytics."""

    def __init__(self, store: PartnerStoreProtocol) -> None:
        self._store = store

    async def month_totals(self, partner_id: str, month: int, year: int) -> PartnerAnalytics | None:
        """Totais do mês: linha mensal + diários restantes (sem escrita)."""
        monthly = await self._store.get_monthly_analytics(partner_id, month, year)
        daily = await self._store.list_analytics(
            period_type=AnalyticsPeriod.DAILY,
            partner_id=partner_id,
            month=month,
            year=year,
        )
        if monthly is None and not daily:
            return None

        clicks, registrations, subscriptions, revenue = _sum_rows(daily)
        base = monthly or PartnerAnalytics(
            id=str(uuid.uuid4()),
            partner_id=partner_id,
            period_type=AnalyticsPeriod.MONTHLY,
            reference_month=month,
            reference_year=year,
        )
        clicks += base.clicks
        subscriptions += base.subscriptions
        return replace(
            base,
            clicks=clicks,
            registrations=registrations + base.registrations,
            subscriptions=subscriptions,
            gross_revenue=revenue + base.gross_revenue,
            conversion_rate=conversion_rate(clicks, subscriptions),
        )

    async def cleanup(self, now: datetime | None = None) -> RetentionReport:
        now = now or datetime.now(UTC)
        today = now.date()

        stale = await self._store.list_referrals(
            status=ReferralStatus.CLICKED,
            created_before=now - timedelta(days=STALE_REFERRAL_DAYS),
        )
        deleted_referrals = await self._store.delete_referrals(r.id for r in stale)

        expired = await self._store.list_analytics(
            period_type=AnalyticsPeriod.DAILY,
            before=months_before(today, 12 * DAILY_ANALYTICS_MAX_AGE_YEARS),
        )
        deleted_daily = await self._store.delete_analytics(row.id for row in expired)

        months, rows, failed = await self.consolidate_daily(months_before(today, CONSOLIDATE_AFTER_MONTHS))
        report = RetentionReport(
            deleted_referrals=deleted_referrals,
            deleted_daily_rows=deleted_daily,
            consolidated_months=months,
            consolidated_rows=rows,
            failed_groups=failed,
        )
        logger.info(
            "retention_cleanup_completed",
            extra={
                "deleted_referrals": report.deleted_referrals,
                "deleted_daily_rows": report.deleted_daily_rows,
                "consolidated_months": report.consolidated_months,
                "consolidated_rows": report.consolidated_rows,
                "failed_groups": report.failed_groups,
            },
        )
        return report

    async def consolidate_daily(self, before: date) -> tuple[int, int, int]:
        """Compacta diários anteriores a `before` em linhas mensais.

        Returns:
            (meses consolidados, linhas diárias removidas, grupos com falha)
        """
        rows = await self._store.list_analytics(period_type=AnalyticsPeriod.DAILY, before=before)
        groups: dict[tuple[str, int, int], list[PartnerAnalytics]] = defaultdict(list)
        for row in rows:
            if row.period_date is None:
                continue
            groups[(row.partner_id, row.period_date.year, row.period_date.month)].append(row)

        months = removed = failed = 0
        for (partner_id, year, month), group in groups.items():
            try:
                await self._fold_into_month(partner_id, month, year, group)
                removed += await self._store.delete_analytics(row.id for row in group)
                months += 1
            except Exception as exc:
                failed += 1
                logger.error(
                    "analytics_consolidation_failed",
                    extra={
                        "partner_id": partner_id,
                        "month": month,
                        "year": year,
                        "error_type": type(exc).__name__,
                    },
                )
        return months, removed, failed

    async def _fold_into_month(
        self,
        partner_id: str,
        month: int,
        year: int,
        rows: list[PartnerAnalytics],
    ) -> PartnerAnalytics:
        clicks, registrations, subscriptions, revenue = _sum_rows(rows)
        monthly = await self._store.get_monthly_analytics(partner_id, month, year)
        if monthly is not None:
            clicks += monthly.clicks
            registrations += monthly.registrations
            subscriptions += monthly.subscriptions
            revenue += monthly.gross_revenue

        folded = PartnerAnalytics(
            id=monthly.id if monthly else str(uuid.uuid4()),
            partner_id=partner_id,
            period_type=AnalyticsPeriod.MONTHLY,
            reference_month=month,
            reference_year=year,
            clicks=clicks,
            registrations=registrations,
            subscriptions=subscriptions,
            gross_revenue=revenue,
            conversion_rate=conversion_rate(clicks, subscriptions),
        )
        return await self._store.upsert_analytics(folded)
