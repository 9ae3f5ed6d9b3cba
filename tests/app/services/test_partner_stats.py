"""Testes do agregador de estatísticas e tier de parceiros."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from app.domain.errors import PartnerNotFoundError
from app.domain.partners import (
    CommissionStatus,
    CommissionTier,
    CommissionType,
    Partner,
    PartnerCommission,
    PartnerReferral,
    PartnerStatus,
    ReferralStatus,
)
from app.infra.stores.memory_partner_store import MemoryPartnerStore
from app.infra.stores.memory_stores import MemorySettingsStore
from app.services.partner_settings import PartnerSettingsReader
from app.services.partner_stats import PartnerStatsAggregator

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=UTC)
FEBRUARY = datetime(2026, 2, 10, 12, 0, tzinfo=UTC)


def _aggregator(store: MemoryPartnerStore, *, monotonic: bool = False) -> PartnerStatsAggregator:
    return PartnerStatsAggregator(
        store,
        PartnerSettingsReader(MemorySettingsStore()),
        monotonic_tiers=monotonic,
        clock=lambda: NOW,
    )


async def _seed(
    store: MemoryPartnerStore,
    *,
    tier: CommissionTier = CommissionTier.BRONZE,
    subscribed: int = 0,
    commission: str = "0",
) -> None:
    await store.insert_partner(
        Partner(id="p1", partner_code="PART1", status=PartnerStatus.APPROVED, commission_tier=tier)
    )
    for index in range(subscribed):
        await store.insert_referral(
            PartnerReferral(
                id=f"r{index}",
                partner_id="p1",
                status=ReferralStatus.SUBSCRIBED,
                subscription_id=f"s{index}",
                created_at=NOW,
            )
        )
    if Decimal(commission) > 0:
        await store.insert_commission(
            PartnerCommission(
                id="c-big",
                partner_id="p1",
                commission_type=CommissionType.BONUS,
                commission_rate=Decimal("0"),
                base_amount=Decimal("0"),
                commission_amount=Decimal(commission),
                reference_month=3,
                reference_year=2026,
                created_at=NOW,
            )
        )


class TestUpdatePartnerStats:
    @pytest.mark.asyncio
    async def test_totals_and_current_month(self) -> None:
        store = MemoryPartnerStore()
        await _seed(store)
        await store.insert_referral(
            PartnerReferral(id="old", partner_id="p1", status=ReferralStatus.SUBSCRIBED, created_at=FEBRUARY)
        )
        await store.insert_referral(PartnerReferral(id="new", partner_id="p1", created_at=NOW))
        for commission_id, month, amount in (("c-feb", 2, "30"), ("c-mar", 3, "20")):
            await store.insert_commission(
                PartnerCommission(
                    id=commission_id,
                    partner_id="p1",
                    commission_type=CommissionType.RECURRING,
                    commission_rate=Decimal("5"),
                    base_amount=Decimal("100"),
                    commission_amount=Decimal(amount),
                    reference_month=month,
                    reference_year=2026,
                    referral_id="old",
                    status=CommissionStatus.PAID,
                )
            )

        partner = await _aggregator(store).update_partner_stats("p1")

        assert partner.total_referrals == 2
        assert partner.total_conversions == 1
        assert partner.total_commission_earned == Decimal("50")
        assert partner.current_month_referrals == 1
        assert partner.current_month_conversions == 0
        assert partner.current_month_commission == Decimal("20")

    @pytest.mark.asyncio
    async def test_unknown_partner_raises(self) -> None:
        with pytest.raises(PartnerNotFoundError):
            await _aggregator(MemoryPartnerStore()).update_partner_stats("ghost")


class TestTiers:
    @pytest.mark.asyncio
    async def test_upgrade_to_silver(self) -> None:
        store = MemoryPartnerStore()
        await _seed(store, subscribed=10, commission="600")

        partner = await _aggregator(store).update_partner_stats("p1")

        assert partner.commission_tier is CommissionTier.SILVER

    @pytest.mark.asyncio
    async def test_both_thresholds_required(self) -> None:
        """Conversões suficientes sem comissão mínima mantêm bronze."""
        store = MemoryPartnerStore()
        await _seed(store, subscribed=60, commission="100")

        partner = await _aggregator(store).update_partner_stats("p1")

        assert partner.commission_tier is CommissionTier.BRONZE

    @pytest.mark.asyncio
    async def test_downgrade_applied_by_default(self) -> None:
        store = MemoryPartnerStore()
        await _seed(store, tier=CommissionTier.GOLD)

        partner = await _aggregator(store).update_partner_stats("p1")

        assert partner.commission_tier is CommissionTier.BRONZE

    @pytest.mark.asyncio
    async def test_monotonic_tiers_suppress_downgrade(self) -> None:
        store = MemoryPartnerStore()
        await _seed(store, tier=CommissionTier.GOLD)

        partner = await _aggregator(store, monotonic=True).update_partner_stats("p1")

        assert partner.commission_tier is CommissionTier.GOLD

    @pytest.mark.asyncio
    async def test_unchanged_tier_returns_none(self) -> None:
        store = MemoryPartnerStore()
        await _seed(store)

        assert await _aggregator(store).check_tier_upgrade("p1", 0, Decimal("0")) is None


class TestBatchAndReadModel:
    @pytest.mark.asyncio
    async def test_update_all_only_approved(self) -> None:
        store = MemoryPartnerStore()
        await _seed(store)
        await store.insert_partner(Partner(id="p2", partner_code="PART2"))

        summary = await _aggregator(store).update_all_partner_stats()

        assert (summary.processed, summary.failed) == (1, 0)

    @pytest.mark.asyncio
    async def test_get_partner_stats_all_period(self) -> None:
        store = MemoryPartnerStore()
        await _seed(store, subscribed=1, commission="40")
        await store.insert_referral(PartnerReferral(id="click", partner_id="p1", created_at=FEBRUARY))

        month = await _aggregator(store).get_partner_stats("p1", "month")
        everything = await _aggregator(store).get_partner_stats("p1", "all")

        assert month["total_clicks"] == 1
        assert everything["total_clicks"] == 2
        assert everything["total_conversions"] == 1
        assert everything["conversion_rate"] == Decimal("50.00")
        assert everything["pending_commission"] == Decimal("40")
        assert everything["paid_commission"] == Decimal("0")
