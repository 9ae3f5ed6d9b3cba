"""Store do programa de parceiros em memória — apenas dev/test.

Aplica as chaves únicas de partner_code, de idempotência de comissão e
de analytics por período.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from app.domain.partners import (
    ZERO,
    AnalyticsPeriod,
    PartnerAnalytics,
    commission_idempotency_key,
    conversion_rate,
)
from app.protocols.partner_store import PartnerStoreProtocol
from utils.errors import UniqueConstraintViolation

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date, datetime
    from decimal import Decimal

    from app.domain.partners import (
        CommissionStatus,
        CommissionType,
        Partner,
        PartnerCommission,
        PartnerReferral,
        PartnerStatus,
        ReferralCommissionStatus,
        ReferralStatus,
    )


def _analytics_key(row: PartnerAnalytics) -> tuple[Any, ...]:
    if row.period_type is AnalyticsPeriod.DAILY:
        return (row.partner_id, row.period_type.value, row.period_date)
    return (row.partner_id, row.period_type.value, row.reference_month, row.reference_year)


class MemoryPartnerStore(PartnerStoreProtocol):
    """Parceiros, indicações, comissões e analytics em memória."""

    def __init__(self) -> None:
        self._partners: dict[str, Partner] = {}
        self._referrals: dict[str, PartnerReferral] = {}
        self._commissions: dict[str, PartnerCommission] = {}
        self._commission_keys: dict[tuple[Any, ...], str] = {}
        self._analytics: dict[str, PartnerAnalytics] = {}

    # ── Partners ────────────────────────────────────────────────────────

    async def get_partner(self, partner_id: str) -> Partner | None:
        await asyncio.sleep(0)
        return self._partners.get(partner_id)

    async def get_partner_by_code(self, partner_code: str) -> Partner | None:
        await asyncio.sleep(0)
        return next(
            (p for p in self._partners.values() if p.partner_code == partner_code), None
        )

    async def insert_partner(self, partner: Partner) -> Partner:
        await asyncio.sleep(0)
        if any(p.partner_code == partner.partner_code for p in self._partners.values()):
            raise UniqueConstraintViolation("partner", (partner.partner_code,))
        self._partners[partner.id] = partner
        return partner

    async def update_partner(self, partner_id: str, **changes: Any) -> Partner | None:
        await asyncio.sleep(0)
        partner = self._partners.get(partner_id)
        if partner is None:
            return None
        updated = replace(partner, **changes)
        self._partners[partner_id] = updated
        return updated

    async def list_partners(self, status: PartnerStatus | None = None) -> list[Partner]:
        await asyncio.sleep(0)
        return [p for p in self._partners.values() if status is None or p.status is status]

    # ── Referrals ───────────────────────────────────────────────────────

    async def insert_referral(self, referral: PartnerReferral) -> PartnerReferral:
        await asyncio.sleep(0)
        if referral.id in self._referrals:
            raise UniqueConstraintViolation("referral", (referral.id,))
        self._referrals[referral.id] = referral
        return referral

    async def get_referral(self, referral_id: str) -> PartnerReferral | None:
        await asyncio.sleep(0)
        return self._referrals.get(referral_id)

    async def update_referral(self, referral_id: str, **changes: Any) -> PartnerReferral | None:
        await asyncio.sleep(0)
        referral = self._referrals.get(referral_id)
        if referral is None:
            return None
        updated = replace(referral, **changes)
        self._referrals[referral_id] = updated
        return updated

    async def transition_referral(
        self,
        referral_id: str,
        *,
        from_statuses: Iterable[ReferralStatus],
        **changes: Any,
    ) -> PartnerReferral | None:
        allowed = frozenset(from_statuses)
        await asyncio.sleep(0)
        # sem await entre a checagem e a escrita
        referral = self._referrals.get(referral_id)
        if referral is None or referral.status not in allowed:
            return None
        updated = replace(referral, **changes)
        self._referrals[referral_id] = updated
        return updated

    async def list_referrals(
        self,
        *,
        partner_id: str | None = None,
        status: ReferralStatus | None = None,
        commission_status: ReferralCommissionStatus | None = None,
        with_subscription: bool = False,
        created_before: datetime | None = None,
    ) -> list[PartnerReferral]:
        await asyncio.sleep(0)
        result = []
        for referral in self._referrals.values():
            if partner_id is not None and referral.partner_id != partner_id:
                continue
            if status is not None and referral.status is not status:
                continue
            if commission_status is not None and referral.commission_status is not commission_status:
                continue
            if with_subscription and not referral.subscription_id:
                continue
            if created_before is not None and referral.created_at >= created_before:
                continue
            result.append(referral)
        return result

    async def delete_referrals(self, referral_ids: Iterable[str]) -> int:
        await asyncio.sleep(0)
        deleted = 0
        for referral_id in list(referral_ids):
            if self._referrals.pop(referral_id, None) is not None:
                deleted += 1
        return deleted

    # ── Commissions ─────────────────────────────────────────────────────

    async def insert_commission(self, commission: PartnerCommission) -> PartnerCommission:
        await asyncio.sleep(0)
        key = commission.idempotency_key
        if key in self._commission_keys:
            raise UniqueConstraintViolation("commission", key)
        self._commission_keys[key] = commission.id
        self._commissions[commission.id] = commission
        return commission

    async def find_commission(
        self,
        *,
        partner_id: str,
        commission_type: CommissionType,
        referral_id: str | None,
        month: int,
        year: int,
    ) -> PartnerCommission | None:
        await asyncio.sleep(0)
        key = commission_idempotency_key(commission_type, partner_id, referral_id, month, year)
        commission_id = self._commission_keys.get(key)
        return self._commissions.get(commission_id) if commission_id else None

    async def list_commissions(
        self,
        *,
        partner_id: str | None = None,
        status: CommissionStatus | None = None,
        ids: Iterable[str] | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> list[PartnerCommission]:
        await asyncio.sleep(0)
        wanted = set(ids) if ids is not None else None
        result = []
        for commission in self._commissions.values():
            if wanted is not None and commission.id not in wanted:
                continue
            if partner_id is not None and commission.partner_id != partner_id:
                continue
            if status is not None and commission.status is not status:
                continue
            if created_from is not None and commission.created_at < created_from:
                continue
            if created_to is not None and commission.created_at > created_to:
                continue
            result.append(commission)
        return result

    async def update_commissions(
        self, commission_ids: Iterable[str], **changes: Any
    ) -> list[PartnerCommission]:
        await asyncio.sleep(0)
        updated = []
        for commission_id in list(commission_ids):
            commission = self._commissions.get(commission_id)
            if commission is None:
                continue
            self._commissions[commission_id] = replace(commission, **changes)
            updated.append(self._commissions[commission_id])
        return updated

    # ── Analytics ───────────────────────────────────────────────────────

    async def get_daily_analytics(self, partner_id: str, day: date) -> PartnerAnalytics | None:
        await asyncio.sleep(0)
        return next(
            (
                row
                for row in self._analytics.values()
                if row.partner_id == partner_id
                and row.period_type is AnalyticsPeriod.DAILY
                and row.period_date == day
            ),
            None,
        )

    async def get_monthly_analytics(
        self, partner_id: str, month: int, year: int
    ) -> PartnerAnalytics | None:
        await asyncio.sleep(0)
        return next(
            (
                row
                for row in self._analytics.values()
                if row.partner_id == partner_id
                and row.period_type is AnalyticsPeriod.MONTHLY
                and row.reference_month == month
                and row.reference_year == year
            ),
            None,
        )

    async def increment_daily_analytics(
        self,
        partner_id: str,
        day: date,
        *,
        clicks: int = 0,
        registrations: int = 0,
        subscriptions: int = 0,
        revenue: Decimal | None = None,
    ) -> PartnerAnalytics:
        await asyncio.sleep(0)
        key = (partner_id, AnalyticsPeriod.DAILY.value, day)
        row = next(
            (r for r in self._analytics.values() if _analytics_key(r) == key),
            None,
        ) or PartnerAnalytics(
            id=str(uuid.uuid4()),
            partner_id=partner_id,
            period_type=AnalyticsPeriod.DAILY,
            reference_month=day.month,
            reference_year=day.year,
            period_date=day,
        )
        total_clicks = row.clicks + clicks
        total_subscriptions = row.subscriptions + subscriptions
        updated = replace(
            row,
            clicks=total_clicks,
            registrations=row.registrations + registrations,
            subscriptions=total_subscriptions,
            gross_revenue=row.gross_revenue + (revenue or ZERO),
            conversion_rate=conversion_rate(total_clicks, total_subscriptions),
        )
        self._analytics[updated.id] = updated
        return updated

    async def upsert_analytics(self, row: PartnerAnalytics) -> PartnerAnalytics:
        await asyncio.sleep(0)
        key = _analytics_key(row)
        for existing_id, existing in list(self._analytics.items()):
            if _analytics_key(existing) == key and existing_id != row.id:
                del self._analytics[existing_id]
        self._analytics[row.id] = row
        return row

    async def list_analytics(
        self,
        *,
        period_type: AnalyticsPeriod,
        partner_id: str | None = None,
        before: date | None = None,
        month: int | None = None,
        year: int | None = None,
    ) -> list[PartnerAnalytics]:
        await asyncio.sleep(0)
        result = []
        for row in self._analytics.values():
            if row.period_type is not period_type:
                continue
            if partner_id is not None and row.partner_id != partner_id:
                continue
            if before is not None and (row.period_date is None or row.period_date >= before):
                continue
            if month is not None and row.reference_month != month:
                continue
            if year is not None and row.reference_year != year:
                continue
            result.append(row)
        return result

    async def delete_analytics(self, analytics_ids: Iterable[str]) -> int:
        await asyncio.sleep(0)
        deleted = 0
        for analytics_id in list(analytics_ids):
            if self._analytics.pop(analytics_id, None) is not None:
                deleted += 1
        return deleted
