"""Processamento inbound: normaliza, roteia e registra o resultado."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from app.domain.errors import UnsupportedChannelError
from app.observability import reset_tenant_id, set_tenant_id

if TYPE_CHECKING:
    from app.domain.channels import ChannelType
    from app.use_cases.inbound import InboundProcessingResult, ProcessChannelWebhookUseCase

logger = logging.getLogger(__name__)


async def process_inbound_payload(
    payload: dict[str, Any],
    correlation_id: str,
    use_case: ProcessChannelWebhookUseCase,
    tenant_id: str,
    channel_type: ChannelType,
) -> InboundProcessingResult | None:
    """Processa payload inbound de um tenant/canal.

    Sem logs com PII. Canal sem adapter é registrado e descartado
    (o webhook já respondeu 200).

    Returns:
        InboundProcessingResult, ou None se o canal não for suportado
    """
    token = set_tenant_id(tenant_id)
    try:
        result = await use_case.execute(
            tenant_id=tenant_id,
            channel_type=channel_type,
            payload=payload,
        )
    except UnsupportedChannelError as exc:
        logger.warning(
            "inbound_channel_unsupported",
            extra={"tenant_id": tenant_id, "channel": exc.channel, "correlation_id": correlation_id},
        )
        return None
    finally:
        reset_tenant_id(token)

    logger.info(
        "inbound_processed",
        extra={
            "tenant_id": tenant_id,
            "channel_type": channel_type.value,
            "correlation_id": correlation_id,
            "received": result.received,
            "processed": result.processed,
            "skipped": result.skipped,
            "dropped": result.dropped,
        },
    )
    return result
