"""Modelos de domínio do programa de parceiros (referral/comissões).

Valores monetários usam Decimal com arredondamento half-up em 2 casas.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Converte int/float/str/Decimal para Decimal sem erro binário de float."""
    if isinstance(value, Decimal):
        return value
    if value is None:
        return ZERO
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    """Arredonda para centavos (half-up)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def conversion_rate(clicks: int, subscriptions: int) -> Decimal:
    """Percentual de assinaturas sobre cliques (0 sem cliques)."""
    if clicks <= 0:
        return ZERO
    return round_money(Decimal(subscriptions) * 100 / Decimal(clicks))


class CommissionTier(StrEnum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]


_TIER_RANK = {CommissionTier.BRONZE: 0, CommissionTier.SILVER: 1, CommissionTier.GOLD: 2}


class PartnerStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReferralStatus(StrEnum):
    CLICKED = "clicked"
    REGISTERED = "registered"
    SUBSCRIBED = "subscribed"


class ReferralCommissionStatus(StrEnum):
    PENDING = "pending"
    CALCULATED = "calculated"


class CommissionType(StrEnum):
    SIGNUP = "signup"
    RECURRING = "recurring"
    BONUS = "bonus"


class CommissionStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"


class AnalyticsPeriod(StrEnum):
    DAILY = "daily"
    MONTHLY = "monthly"


@dataclass(frozen=True, slots=True)
class Partner:
    """Participante do programa de indicação."""

    id: str
    partner_code: str
    business_name: str = ""
    email: str = ""
    business_type: str = ""
    document: str = ""
    bank_data: dict[str, Any] | None = None
    commission_tier: CommissionTier = CommissionTier.BRONZE
    custom_commission_rate: Decimal | None = None
    status: PartnerStatus = PartnerStatus.PENDING
    total_referrals: int = 0
    total_conversions: int = 0
    total_commission_earned: Decimal = ZERO
    current_month_referrals: int = 0
    current_month_conversions: int = 0
    current_month_commission: Decimal = ZERO
    approved_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True, slots=True)
class PartnerReferral:
    """Indicação rastreada: clicked → registered → subscribed."""

    id: str
    partner_id: str
    status: ReferralStatus = ReferralStatus.CLICKED
    referred_user_id: str | None = None
    subscription_id: str | None = None
    subscription_plan: str | None = None
    subscription_value: Decimal = ZERO
    commission_status: ReferralCommissionStatus = ReferralCommissionStatus.PENDING
    commission_amount: Decimal = ZERO
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    registered_at: datetime | None = None
    subscribed_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class PartnerCommission:
    """Comissão calculada e persistida."""

    id: str
    partner_id: str
    commission_type: CommissionType
    commission_rate: Decimal
    base_amount: Decimal
    commission_amount: Decimal
    reference_month: int
    reference_year: int
    referral_id: str | None = None
    status: CommissionStatus = CommissionStatus.PENDING
    calculation_details: dict[str, Any] = field(default_factory=dict)
    approved_at: datetime | None = None
    paid_at: datetime | None = None
    payment_method: str | None = None
    payment_reference: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def idempotency_key(self) -> tuple[Any, ...]:
        return commission_idempotency_key(
            self.commission_type,
            self.partner_id,
            self.referral_id,
            self.reference_month,
            self.reference_year,
        )


def commission_idempotency_key(
    commission_type: CommissionType,
    partner_id: str,
    referral_id: str | None,
    month: int,
    year: int,
) -> tuple[Any, ...]:
    """Chave única por tipo de comissão.

    - recurring: (partner, referral, mês, ano)
    - signup: (partner, referral)
    - bonus: (partner, mês, ano)
    """
    if commission_type is CommissionType.RECURRING:
        return (commission_type.value, partner_id, referral_id, month, year)
    if commission_type is CommissionType.SIGNUP:
        return (commission_type.value, partner_id, referral_id)
    return (commission_type.value, partner_id, month, year)


@dataclass(frozen=True, slots=True)
class PartnerAnalytics:
    """Rollup periódico (diário ou mensal) por parceiro."""

    id: str
    partner_id: str
    period_type: AnalyticsPeriod
    reference_month: int
    reference_year: int
    period_date: date | None = None
    clicks: int = 0
    registrations: int = 0
    subscriptions: int = 0
    gross_revenue: Decimal = ZERO
    conversion_rate: Decimal = ZERO

    def metric(self, name: str) -> Decimal | None:
        """Valor da métrica usada em regras de bônus (None se desconhecida)."""
        mapping = {
            "conversions": self.subscriptions,
            "referrals": self.registrations,
            "revenue": self.gross_revenue,
            "conversion_rate": self.conversion_rate,
        }
        if name not in mapping:
            return None
        return to_decimal(mapping[name])


# ──────────────────────────────────────────────────────────────────────────────
# Descritores de cálculo (sem efeitos colaterais)
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class CommissionDraft:
    """Comissão calculada, ainda não persistida."""

    partner_id: str
    commission_type: CommissionType
    commission_rate: Decimal
    base_amount: Decimal
    commission_amount: Decimal
    reference_month: int
    reference_year: int
    referral_id: str | None = None
    calculation_details: dict[str, Any] = field(default_factory=dict)

    @property
    def idempotency_key(self) -> tuple[Any, ...]:
        return commission_idempotency_key(
            self.commission_type,
            self.partner_id,
            self.referral_id,
            self.reference_month,
            self.reference_year,
        )


@dataclass(frozen=True, slots=True)
class DuplicateCommissionSkipped:
    """No-op: já existe comissão para a chave de idempotência.

    Não é erro e não se confunde com comissão de valor zero.
    """

    partner_id: str
    commission_type: CommissionType
    reference_month: int
    reference_year: int
    referral_id: str | None = None
    existing_commission_id: str | None = None
    reason: str = "already_calculated"


@dataclass(frozen=True, slots=True)
class SubscriptionInfo:
    """Dados de assinatura usados no cálculo de comissão de adesão."""

    plan: str
    amount: Decimal
    billing_cycle: str = "monthly"


@dataclass(frozen=True, slots=True)
class PaymentDetails:
    method: str = "bank_transfer"
    reference: str | None = None


@dataclass(slots=True)
class BatchSummary:
    """Contadores de um sweep em lote (falhas isoladas por item)."""

    operation: str
    processed: int = 0
    skipped: int = 0
    failed: int = 0

    def as_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "processed": self.processed,
            "skipped": self.skipped,
            "failed": self.failed,
        }
