"""Commission Engine — cálculo, persistência idempotente e ciclo de vida.

O cálculo é puro (commission_calculator); aqui ficam as leituras de
estado, a persistência e os sweeps em lote. A chave única do store é a
garantia de idempotência: a checagem prévia só evita trabalho, e uma
violação no insert vira DuplicateCommissionSkipped.

Transições de status: pending → approved → paid. Com
`strict_transitions` ligado, qualquer id fora do estado de origem
aborta a operação inteira sem escrita.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from app.domain.errors import CommissionTransitionError, PartnerNotFoundError
from app.domain.partners import (
    ZERO,
    BatchSummary,
    CommissionStatus,
    CommissionType,
    DuplicateCommissionSkipped,
    PartnerCommission,
    PartnerStatus,
    PaymentDetails,
    ReferralCommissionStatus,
    ReferralStatus,
    SubscriptionInfo,
)
from app.observability import record_batch_summary
from app.services.commission_calculator import (
    calculate_bonus_commission,
    calculate_recurring_commission,
    calculate_signup_commission,
)
from utils.errors import UniqueConstraintViolation

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from decimal import Decimal

    from app.domain.partners import CommissionDraft, Partner
    from app.protocols.partner_store import PartnerStoreProtocol
    from app.services.analytics_retention import AnalyticsRetention
    from app.services.partner_settings import PartnerSettingsReader

logger = logging.getLogger(__name__)

CommissionOutcome = PartnerCommission | DuplicateCommissionSkipped


def previous_month(now: datetime) -> tuple[int, int]:
    """(mês, ano) anterior; janeiro volta para dezembro do ano anterior."""
    if now.month == 1:
        return 12, now.year - 1
    return now.month - 1, now.year


class CommissionEngine:
    """Comissões de adesão, recorrentes e bônus."""

    def __init__(
        self,
        store: PartnerStoreProtocol,
        settings: PartnerSettingsReader,
        retention: AnalyticsRetention,
        *,
        strict_transitions: bool = False,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._settings = settings
        self._retention = retention
        self._strict = strict_transitions
        self._clock = clock or (lambda: datetime.now(UTC))

    async def _partner(self, partner_id: str) -> Partner:
        partner = await self._store.get_partner(partner_id)
        if partner is None:
            raise PartnerNotFoundError(partner_id)
        return partner

    # ──────────────────────────────────────────────────────────────────────
    # Cálculo
    # ──────────────────────────────────────────────────────────────────────

    async def calculate_signup_commission(
        self,
        partner_id: str,
        subscription: SubscriptionInfo,
        *,
        referral_id: str | None = None,
    ) -> CommissionDraft:
        now = self._clock()
        return calculate_signup_commission(
            await self._partner(partner_id),
            subscription,
            await self._settings.commission_schedule(),
            month=now.month,
            year=now.year,
            referral_id=referral_id,
        )

    async def calculate_recurring_commission(
        self,
        partner_id: str,
        referral_id: str,
        amount: Decimal,
        month: int,
        year: int,
    ) -> CommissionDraft | DuplicateCommissionSkipped:
        """Comissão recorrente, ou no-op se o período já foi calculado."""
        existing = await self._store.find_commission(
            partner_id=partner_id,
            commission_type=CommissionType.RECURRING,
            referral_id=referral_id,
            month=month,
            year=year,
        )
        if existing is not None:
            return DuplicateCommissionSkipped(
                partner_id=partner_id,
                commission_type=CommissionType.RECURRING,
                reference_month=month,
                reference_year=year,
                referral_id=referral_id,
                existing_commission_id=existing.id,
            )
        return calculate_recurring_commission(
            await self._partner(partner_id),
            amount,
            await self._settings.commission_schedule(),
            referral_id=referral_id,
            month=month,
            year=year,
        )

    async def calculate_bonus_commission(self, partner_id: str, month: int, year: int) -> CommissionDraft:
        """Bônus do mês; zero sem analytics do período."""
        analytics = await self._retention.month_totals(partner_id, month, year)
        return calculate_bonus_commission(
            partner_id,
            analytics,
            await self._settings.bonus_rules(),
            month=month,
            year=year,
        )

    # ──────────────────────────────────────────────────────────────────────
    # Persistência
    # ──────────────────────────────────────────────────────────────────────

    async def persist(self, draft: CommissionDraft) -> CommissionOutcome:
        """Insere a comissão; conflito de chave vira DuplicateCommissionSkipped."""
        commission = PartnerCommission(
            id=str(uuid.uuid4()),
            partner_id=draft.partner_id,
            commission_type=draft.commission_type,
            commission_rate=draft.commission_rate,
            base_amount=draft.base_amount,
            commission_amount=draft.commission_amount,
            reference_month=draft.reference_month,
            reference_year=draft.reference_year,
            referral_id=draft.referral_id,
            calculation_details=dict(draft.calculation_details),
            created_at=self._clock(),
        )
        try:
            stored = await self._store.insert_commission(commission)
        except UniqueConstraintViolation:
            existing = await self._store.find_commission(
                partner_id=draft.partner_id,
                commission_type=draft.commission_type,
                referral_id=draft.referral_id,
                month=draft.reference_month,
                year=draft.reference_year,
            )
            logger.info(
                "commission_duplicate_skipped",
                extra={
                    "partner_id": draft.partner_id,
                    "commission_type": draft.commission_type.value,
                    "reference_month": draft.reference_month,
                    "reference_year": draft.reference_year,
                },
            )
            return DuplicateCommissionSkipped(
                partner_id=draft.partner_id,
                commission_type=draft.commission_type,
                reference_month=draft.reference_month,
                reference_year=draft.reference_year,
                referral_id=draft.referral_id,
                existing_commission_id=existing.id if existing else None,
            )

        logger.info(
            "commission_created",
            extra={
                "commission_id": stored.id,
                "partner_id": stored.partner_id,
                "commission_type": stored.commission_type.value,
                "commission_amount": str(stored.commission_amount),
            },
        )
        return stored

    async def process_recurring_commission(
        self,
        partner_id: str,
        referral_id: str,
        amount: Decimal,
        month: int,
        year: int,
    ) -> CommissionOutcome | None:
        """Calcula e persiste a recorrente do período.

        Returns:
            PartnerCommission criada, DuplicateCommissionSkipped, ou None
            quando o valor calculado é zero.
        """
        result = await self.calculate_recurring_commission(partner_id, referral_id, amount, month, year)
        if isinstance(result, DuplicateCommissionSkipped):
            return result
        if result.commission_amount <= ZERO:
            return None
        return await self.persist(result)

    # ──────────────────────────────────────────────────────────────────────
    # Sweeps
    # ──────────────────────────────────────────────────────────────────────

    async def process_all_pending_commissions(self) -> BatchSummary:
        """Adesão para indicações subscribed com comissão pendente."""
        summary = BatchSummary(operation="pending_commissions")
        referrals = await self._store.list_referrals(
            status=ReferralStatus.SUBSCRIBED,
            commission_status=ReferralCommissionStatus.PENDING,
        )
        for referral in referrals:
            try:
                draft = await self.calculate_signup_commission(
                    referral.partner_id,
                    SubscriptionInfo(
                        plan=referral.subscription_plan or "",
                        amount=referral.subscription_value,
                        billing_cycle="monthly",
                    ),
                    referral_id=referral.id,
                )
                outcome = await self.persist(draft)
                await self._store.update_referral(
                    referral.id,
                    commission_status=ReferralCommissionStatus.CALCULATED,
                    commission_amount=draft.commission_amount,
                )
            except Exception as exc:
                summary.failed += 1
                logger.error(
                    "commission_batch_item_failed",
                    extra={
                        "operation": summary.operation,
                        "referral_id": referral.id,
                        "error_type": type(exc).__name__,
                    },
                )
                continue
            if isinstance(outcome, DuplicateCommissionSkipped):
                summary.skipped += 1
            else:
                summary.processed += 1

        self._finish(summary)
        return summary

    async def process_recurring_commissions(self) -> BatchSummary:
        """Recorrentes do mês corrente para todas as assinaturas ativas."""
        now = self._clock()
        summary = BatchSummary(operation="recurring_commissions")
        referrals = await self._store.list_referrals(status=ReferralStatus.SUBSCRIBED, with_subscription=True)
        for referral in referrals:
            try:
                outcome = await self.process_recurring_commission(
                    referral.partner_id,
                    referral.id,
                    referral.subscription_value,
                    now.month,
                    now.year,
                )
            except Exception as exc:
                summary.failed += 1
                logger.error(
                    "commission_batch_item_failed",
                    extra={
                        "operation": summary.operation,
                        "referral_id": referral.id,
                        "error_type": type(exc).__name__,
                    },
                )
                continue
            if isinstance(outcome, PartnerCommission):
                summary.processed += 1
            else:
                summary.skipped += 1

        self._finish(summary)
        return summary

    async def process_monthly_bonuses(self) -> BatchSummary:
        """Bônus do mês anterior para cada parceiro aprovado."""
        month, year = previous_month(self._clock())
        summary = BatchSummary(operation="monthly_bonuses")
        for partner in await self._store.list_partners(PartnerStatus.APPROVED):
            try:
                draft = await self.calculate_bonus_commission(partner.id, month, year)
                outcome = await self.persist(draft) if draft.commission_amount > ZERO else None
            except Exception as exc:
                summary.failed += 1
                logger.error(
                    "commission_batch_item_failed",
                    extra={
                        "operation": summary.operation,
                        "partner_id": partner.id,
                        "error_type": type(exc).__name__,
                    },
                )
                continue
            if isinstance(outcome, PartnerCommission):
                summary.processed += 1
            else:
                summary.skipped += 1

        self._finish(summary, month=month, year=year)
        return summary

    async def process_commission_payments(self) -> BatchSummary:
        """Aprova pendentes de parceiros que atingiram o mínimo de pagamento."""
        minimum = await self._settings.payment_minimum()
        summary = BatchSummary(operation="commission_payments")
        for partner in await self._store.list_partners(PartnerStatus.APPROVED):
            try:
                pending = await self._store.list_commissions(
                    partner_id=partner.id, status=CommissionStatus.PENDING
                )
                total = sum((c.commission_amount for c in pending), ZERO)
                if not pending or total < minimum:
                    summary.skipped += 1
                    continue
                await self.approve_commissions([c.id for c in pending])
            except Exception as exc:
                summary.failed += 1
                logger.error(
                    "commission_batch_item_failed",
                    extra={
                        "operation": summary.operation,
                        "partner_id": partner.id,
                        "error_type": type(exc).__name__,
                    },
                )
                continue
            summary.processed += 1
            logger.info(
                "commission_payment_approved",
                extra={"partner_id": partner.id, "count": len(pending), "total": str(total)},
            )

        self._finish(summary, minimum_amount=str(minimum))
        return summary

    @staticmethod
    def _finish(summary: BatchSummary, **context: object) -> None:
        record_batch_summary(summary.operation, summary.processed, summary.skipped, summary.failed)
        logger.info("commission_batch_completed", extra={**summary.as_dict(), **context})

    # ──────────────────────────────────────────────────────────────────────
    # Transições de status
    # ──────────────────────────────────────────────────────────────────────

    async def _check_transition(
        self, ids: list[str], required: CommissionStatus, target: CommissionStatus
    ) -> None:
        if not self._strict:
            return
        found = {c.id: c for c in await self._store.list_commissions(ids=ids)}
        invalid = [cid for cid in ids if cid not in found or found[cid].status is not required]
        if invalid:
            logger.warning(
                "commission_transition_rejected",
                extra={"target_status": target.value, "invalid_count": len(invalid)},
            )
            raise CommissionTransitionError(target.value, invalid)

    async def approve_commissions(self, commission_ids: Iterable[str]) -> int:
        """pending → approved. Retorna quantidade atualizada."""
        ids = list(dict.fromkeys(commission_ids))
        await self._check_transition(ids, CommissionStatus.PENDING, CommissionStatus.APPROVED)
        updated = await self._store.update_commissions(
            ids, status=CommissionStatus.APPROVED, approved_at=self._clock()
        )
        logger.info("commissions_approved", extra={"requested": len(ids), "updated": len(updated)})
        return len(updated)

    async def mark_commissions_as_paid(
        self, commission_ids: Iterable[str], payment: PaymentDetails | None = None
    ) -> int:
        """approved → paid com método e referência de pagamento."""
        payment = payment or PaymentDetails()
        ids = list(dict.fromkeys(commission_ids))
        await self._check_transition(ids, CommissionStatus.APPROVED, CommissionStatus.PAID)
        updated = await self._store.update_commissions(
            ids,
            status=CommissionStatus.PAID,
            paid_at=self._clock(),
            payment_method=payment.method or "bank_transfer",
            payment_reference=payment.reference,
        )
        logger.info("commissions_marked_paid", extra={"requested": len(ids), "updated": len(updated)})
        return len(updated)
