"""Cadastro de parceiros: código único e aprovação automática."""

from __future__ import annotations

import logging
import secrets
import string
import time
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from app.domain.errors import PartnerCodeGenerationError
from app.domain.partners import Partner, PartnerStatus
from utils.errors import UniqueConstraintViolation

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.protocols.partner_store import PartnerStoreProtocol
    from app.services.partner_settings import PartnerSettingsReader

logger = logging.getLogger(__name__)

CODE_PREFIX = "PART"
CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_CODE_ATTEMPTS = 10
MIN_DOCUMENT_LENGTH = 11


def generate_partner_code(now_ms: int | None = None) -> str:
    """PART + 6 últimos dígitos do epoch em ms + 3 alfanuméricos."""
    millis = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(3))
    return f"{CODE_PREFIX}{str(millis)[-6:]}{suffix}"


@dataclass(frozen=True, slots=True)
class PartnerApplication:
    """Dados de cadastro enviados pelo parceiro."""

    business_name: str
    email: str
    business_type: str = ""
    document: str = ""
    bank_data: dict[str, Any] | None = field(default=None)


class PartnerRegistry:
    def __init__(
        self,
        store: PartnerStoreProtocol,
        settings: PartnerSettingsReader,
        *,
        code_factory: Callable[[], str] = generate_partner_code,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._settings = settings
        self._code_factory = code_factory
        self._clock = clock or (lambda: datetime.now(UTC))

    async def check_auto_approval(self, application: PartnerApplication) -> bool:
        rules = await self._settings.auto_approval()
        if not rules.enabled:
            return False
        if rules.business_types and application.business_type not in rules.business_types:
            return False
        if len(application.document or "") < MIN_DOCUMENT_LENGTH:
            return False
        if rules.bank_data_required and not application.bank_data:
            return False
        return True

    async def register_partner(self, application: PartnerApplication) -> Partner:
        """Cria parceiro com código único (retry em colisão).

        Raises:
            PartnerCodeGenerationError: colisões em todas as tentativas.
        """
        approved = await self.check_auto_approval(application)
        now = self._clock()
        for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
            partner = Partner(
                id=str(uuid.uuid4()),
                partner_code=self._code_factory(),
                business_name=application.business_name,
                email=application.email,
                business_type=application.business_type,
                document=application.document,
                bank_data=application.bank_data,
                status=PartnerStatus.APPROVED if approved else PartnerStatus.PENDING,
                approved_at=now if approved else None,
                created_at=now,
            )
            try:
                created = await self._store.insert_partner(partner)
            except UniqueConstraintViolation:
                logger.info("partner_code_collision", extra={"attempt": attempt})
                continue
            logger.info(
                "partner_registered",
                extra={"partner_id": created.id, "status": created.status.value, "attempts": attempt},
            )
            return created

        raise PartnerCodeGenerationError(MAX_CODE_ATTEMPTS)
