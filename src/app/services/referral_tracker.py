"""Rastreamento de indicações: clicked → registered → subscribed.

Cada transição incrementa a linha diária de analytics do parceiro com
o increment atômico do store; transições são updates condicionais.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from app.domain.errors import PartnerNotFoundError, ReferralNotFoundError
from app.domain.partners import PartnerReferral, PartnerStatus, ReferralStatus, to_decimal

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.protocols.partner_store import PartnerStoreProtocol

logger = logging.getLogger(__name__)


class ReferralTracker:
    def __init__(
        self,
        store: PartnerStoreProtocol,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or (lambda: datetime.now(UTC))

    async def _referral(self, referral_id: str) -> PartnerReferral:
        referral = await self._store.get_referral(referral_id)
        if referral is None:
            raise ReferralNotFoundError(referral_id)
        return referral

    async def track_click(self, partner_code: str, metadata: dict[str, Any] | None = None) -> PartnerReferral:
        """Registra clique em link de parceiro aprovado.

        Raises:
            PartnerNotFoundError: código inexistente ou parceiro não aprovado.
        """
        partner = await self._store.get_partner_by_code(partner_code)
        if partner is None or partner.status is not PartnerStatus.APPROVED:
            raise PartnerNotFoundError(partner_code)

        referral = await self._store.insert_referral(
            PartnerReferral(
                id=str(uuid.uuid4()),
                partner_id=partner.id,
                metadata=dict(metadata or {}),
                created_at=self._clock(),
            )
        )
        await self._store.increment_daily_analytics(partner.id, self._clock().date(), clicks=1)
        logger.info("referral_clicked", extra={"partner_id": partner.id, "referral_id": referral.id})
        return referral

    async def mark_registered(self, referral_id: str, user_id: str) -> PartnerReferral:
        updated = await self._store.transition_referral(
            referral_id,
            from_statuses=(ReferralStatus.CLICKED,),
            status=ReferralStatus.REGISTERED,
            referred_user_id=user_id,
            registered_at=self._clock(),
        )
        if updated is None:
            return await self._referral(referral_id)

        await self._store.increment_daily_analytics(
            updated.partner_id, self._clock().date(), registrations=1
        )
        logger.info("referral_registered", extra={"partner_id": updated.partner_id, "referral_id": referral_id})
        return updated

    async def mark_subscribed(
        self,
        referral_id: str,
        subscription_id: str,
        plan: str,
        value: Decimal | float | str,
    ) -> PartnerReferral:
        """Transição para subscribed acontece uma única vez.

        Só quem vence o update condicional soma a assinatura no analytics.
        """
        amount = to_decimal(value)
        updated = await self._store.transition_referral(
            referral_id,
            from_statuses=(ReferralStatus.CLICKED, ReferralStatus.REGISTERED),
            status=ReferralStatus.SUBSCRIBED,
            subscription_id=subscription_id,
            subscription_plan=plan,
            subscription_value=amount,
            subscribed_at=self._clock(),
        )
        if updated is None:
            referral = await self._referral(referral_id)
            logger.info("referral_already_subscribed", extra={"referral_id": referral_id})
            return referral

        await self._store.increment_daily_analytics(
            updated.partner_id, self._clock().date(), subscriptions=1, revenue=amount
        )
        logger.info("referral_subscribed", extra={"partner_id": updated.partner_id, "referral_id": referral_id})
        return updated
