"""Relatórios administrativos de comissões."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import UTC, datetime, time, timedelta
from typing import TYPE_CHECKING, Any

from app.domain.partners import ZERO, CommissionStatus, CommissionType, PartnerStatus

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from decimal import Decimal

    from app.domain.partners import PartnerCommission
    from app.protocols.partner_store import PartnerStoreProtocol

logger = logging.getLogger(__name__)


def period_start(period: str, now: datetime) -> datetime | None:
    """Início da janela do período (None = sem filtro)."""
    match period:
        case "week":
            return now - timedelta(days=7)
        case "month":
            return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        case "year":
            return now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
        case _:
            return None


def report_range(
    start: datetime | None, end: datetime | None
) -> tuple[datetime | None, datetime | None]:
    """Normaliza o intervalo do relatório para UTC.

    Limites sem fuso são lidos como UTC. Um `end` sem fuso à meia-noite
    (data pura vinda da query) cobre o dia inteiro.
    """
    if start is not None and start.tzinfo is None:
        start = start.replace(tzinfo=UTC)
    if end is not None and end.tzinfo is None:
        if end.time() == time.min:
            end = datetime.combine(end.date(), time.max)
        end = end.replace(tzinfo=UTC)
    return start, end


def _amount(commissions: Iterable[PartnerCommission], status: CommissionStatus | None = None) -> Decimal:
    return sum(
        (c.commission_amount for c in commissions if status is None or c.status is status),
        ZERO,
    )


@dataclass(frozen=True, slots=True)
class PartnerCommissionReport:
    partner_id: str
    partner_code: str
    business_name: str
    commission_tier: str
    total_commissions: int
    pending_amount: Decimal
    approved_amount: Decimal
    paid_amount: Decimal
    total_amount: Decimal


class CommissionReports:
    """Relatório por parceiro, estatísticas e resumo semanal."""

    def __init__(
        self,
        store: PartnerStoreProtocol,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or (lambda: datetime.now(UTC))

    async def generate_commission_report(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[PartnerCommissionReport]:
        """Totais por parceiro aprovado com comissões no intervalo.

        Ordenado por total decrescente.
        """
        start, end = report_range(start, end)
        report = []
        for partner in await self._store.list_partners(PartnerStatus.APPROVED):
            commissions = await self._store.list_commissions(
                partner_id=partner.id, created_from=start, created_to=end
            )
            if not commissions:
                continue
            report.append(
                PartnerCommissionReport(
                    partner_id=partner.id,
                    partner_code=partner.partner_code,
                    business_name=partner.business_name,
                    commission_tier=partner.commission_tier.value,
                    total_commissions=len(commissions),
                    pending_amount=_amount(commissions, CommissionStatus.PENDING),
                    approved_amount=_amount(commissions, CommissionStatus.APPROVED),
                    paid_amount=_amount(commissions, CommissionStatus.PAID),
                    total_amount=_amount(commissions),
                )
            )
        return sorted(report, key=lambda item: item.total_amount, reverse=True)

    async def get_commission_stats(self, period: str = "month") -> dict[str, Any]:
        commissions = await self._store.list_commissions(created_from=period_start(period, self._clock()))
        by_type = Counter(c.commission_type for c in commissions)
        return {
            "period": period,
            "total_commissions": len(commissions),
            "total_amount": _amount(commissions),
            "pending_amount": _amount(commissions, CommissionStatus.PENDING),
            "approved_amount": _amount(commissions, CommissionStatus.APPROVED),
            "paid_amount": _amount(commissions, CommissionStatus.PAID),
            "signup_commissions": by_type.get(CommissionType.SIGNUP, 0),
            "recurring_commissions": by_type.get(CommissionType.RECURRING, 0),
            "bonus_commissions": by_type.get(CommissionType.BONUS, 0),
        }

    async def weekly_report(self) -> dict[str, Any]:
        """Resumo dos últimos 7 dias, registrado como evento estruturado."""
        now = self._clock()
        report = await self.generate_commission_report(now - timedelta(days=7), now - timedelta(days=1))
        totals = {
            "total_partners": len(report),
            "total_commissions": sum(item.total_commissions for item in report),
            "total_amount": sum((item.total_amount for item in report), ZERO),
            "pending_amount": sum((item.pending_amount for item in report), ZERO),
            "approved_amount": sum((item.approved_amount for item in report), ZERO),
            "paid_amount": sum((item.paid_amount for item in report), ZERO),
        }
        logger.info(
            "weekly_partner_report",
            extra={key: str(value) if not isinstance(value, int) else value for key, value in totals.items()},
        )
        return totals
