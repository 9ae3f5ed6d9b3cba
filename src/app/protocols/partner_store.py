"""Protocolo do data store do programa de parceiros.

Chaves únicas exigidas (UniqueConstraintViolation em conflito):
- partner_code
- comissão: PartnerCommission.idempotency_key
  (recurring por parceiro/indicação/mês/ano é a garantia central)
- analytics: (partner, período, data|mês/ano)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date, datetime
    from decimal import Decimal

    from app.domain.partners import (
        AnalyticsPeriod,
        CommissionStatus,
        CommissionType,
        Partner,
        PartnerAnalytics,
        PartnerCommission,
        PartnerReferral,
        PartnerStatus,
        ReferralCommissionStatus,
        ReferralStatus,
    )


class PartnerStoreProtocol(ABC):
    """Persistência de parceiros, indicações, comissões e analytics."""

    # ── Partners ────────────────────────────────────────────────────────

    @abstractmethod
    async def get_partner(self, partner_id: str) -> Partner | None: ...

    @abstractmethod
    async def get_partner_by_code(self, partner_code: str) -> Partner | None: ...

    @abstractmethod
    async def insert_partner(self, partner: Partner) -> Partner:
        """Raises UniqueConstraintViolation se partner_code já existir."""

    @abstractmethod
    async def update_partner(self, partner_id: str, **changes: Any) -> Partner | None: ...

    @abstractmethod
    async def list_partners(self, status: PartnerStatus | None = None) -> list[Partner]: ...

    # ── Referrals ───────────────────────────────────────────────────────

    @abstractmethod
    async def insert_referral(self, referral: PartnerReferral) -> PartnerReferral: ...

    @abstractmethod
    async def get_referral(self, referral_id: str) -> PartnerReferral | None: ...

    @abstractmethod
    async def update_referral(self, referral_id: str, **changes: Any) -> PartnerReferral | None: ...

    @abstractmethod
    async def transition_referral(
        self,
        referral_id: str,
        *,
        from_statuses: Iterable[ReferralStatus],
        **changes: Any,
    ) -> PartnerReferral | None:
        """Update condicional: aplica `changes` só se o status atual estiver em `from_statuses`.

        Returns:
            Indicação atualizada, ou None se não existe ou o status não casou.
        """

    @abstractmethod
    async def list_referrals(
        self,
        *,
        partner_id: str | None = None,
        status: ReferralStatus | None = None,
        commission_status: ReferralCommissionStatus | None = None,
        with_subscription: bool = False,
        created_before: datetime | None = None,
    ) -> list[PartnerReferral]: ...

    @abstractmethod
    async def delete_referrals(self, referral_ids: Iterable[str]) -> int: ...

    # ── Commissions ─────────────────────────────────────────────────────

    @abstractmethod
    async def insert_commission(self, commission: PartnerCommission) -> PartnerCommission:
        """Raises UniqueConstraintViolation se a chave de idempotência existir."""

    @abstractmethod
    async def find_commission(
        self,
        *,
        partner_id: str,
        commission_type: CommissionType,
        referral_id: str | None,
        month: int,
        year: int,
    ) -> PartnerCommission | None:
        """Busca pela chave de idempotência do tipo."""

    @abstractmethod
    async def list_commissions(
        self,
        *,
        partner_id: str | None = None,
        status: CommissionStatus | None = None,
        ids: Iterable[str] | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> list[PartnerCommission]: ...

    @abstractmethod
    async def update_commissions(
        self, commission_ids: Iterable[str], **changes: Any
    ) -> list[PartnerCommission]: ...

    # ── Analytics ───────────────────────────────────────────────────────

    @abstractmethod
    async def get_daily_analytics(self, partner_id: str, day: date) -> PartnerAnalytics | None: ...

    @abstractmethod
    async def get_monthly_analytics(
        self, partner_id: str, month: int, year: int
    ) -> PartnerAnalytics | None: ...

    @abstractmethod
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
        """Soma os deltas na linha diária (criando-a) e recalcula a conversão.

        Leitura e escrita formam uma única operação atômica no store.
        """

    @abstractmethod
    async def upsert_analytics(self, row: PartnerAnalytics) -> PartnerAnalytics:
        """Insere ou substitui a linha pela chave (partner, período, data|mês/ano)."""

    @abstractmethod
    async def list_analytics(
        self,
        *,
        period_type: AnalyticsPeriod,
        partner_id: str | None = None,
        before: date | None = None,
        month: int | None = None,
        year: int | None = None,
    ) -> list[PartnerAnalytics]: ...

    @abstractmethod
    async def delete_analytics(self, analytics_ids: Iterable[str]) -> int: ...
