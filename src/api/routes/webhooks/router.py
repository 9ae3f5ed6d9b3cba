"""Endpoints de webhook por canal e tenant.

Endpoints:
- GET /webhook/{channel}/{tenant_id}: verificação (hub challenge)
- POST /webhook/{channel}/{tenant_id}: recebimento de eventos inbound

Fluxo do POST:
1. Lê o corpo bruto e valida a assinatura com o secret do canal do tenant
2. JSON inválido → 400; assinatura inválida → 401
3. Responde 200 e processa em background (ou inline, conforme settings)

Canal desconhecido no POST responde 200 {"status": "ignored"}.

Falhas de processamento nunca viram resposta diferente de 200.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from api.connectors.webhook import (
    InvalidJsonError,
    InvalidSignatureError,
    WebhookChallengeError,
    ensure_valid_signature,
    parse_webhook_json,
    verify_webhook_challenge,
)
from api.routes.dependencies import ContainerDep
from api.routes.webhooks.tasks import schedule_processing_task
from app.bootstrap.channel_adapters import webhook_processing_mode, webhook_verify_token
from app.coordinators.inbound.handler import process_inbound_payload
from app.domain.errors import UnsupportedChannelError
from app.observability import get_correlation_id, reset_correlation_id, set_correlation_id
from app.services.channel_router import parse_channel_type

if TYPE_CHECKING:
    from app.domain.channels import ChannelType
    from app.use_cases.inbound import ProcessChannelWebhookUseCase

logger = logging.getLogger(__name__)

router = APIRouter()


async def process_inbound_payload_safe(
    *,
    payload: dict[str, Any],
    correlation_id: str,
    use_case: ProcessChannelWebhookUseCase,
    tenant_id: str,
    channel_type: ChannelType,
) -> None:
    """Processa o payload sem propagar exceções (o webhook já respondeu)."""
    try:
        await process_inbound_payload(
            payload=payload,
            correlation_id=correlation_id,
            use_case=use_case,
            tenant_id=tenant_id,
            channel_type=channel_type,
        )
    except Exception:
        logger.exception(
            "webhook_processing_failed",
            extra={
                "channel": channel_type.value,
                "tenant_id": tenant_id,
                "correlation_id": correlation_id,
            },
        )


@router.get("/{channel}/{tenant_id}")
async def verify_webhook(channel: str, tenant_id: str, request: Request, container: ContainerDep) -> Response:
    """Responde ao challenge com o verify_token do canal do tenant.

    Sem token no canal, usa o token padrão das settings do canal.
    """
    channel_type = parse_channel_type(channel)
    config = await container.router.channel_config(tenant_id, channel_type)
    expected = config.get("verify_token") or webhook_verify_token(channel_type)

    hub_mode = request.query_params.get("hub.mode")
    try:
        challenge = verify_webhook_challenge(
            hub_mode=hub_mode,
            hub_verify_token=request.query_params.get("hub.verify_token"),
            hub_challenge=request.query_params.get("hub.challenge"),
            expected_token=expected,
        )
    except WebhookChallengeError as exc:
        logger.warning(
            "webhook_verification_failed",
            extra={"channel": channel_type.value, "tenant_id": tenant_id, "error": str(exc)},
        )
        return Response(content="Forbidden", media_type="text/plain", status_code=status.HTTP_403_FORBIDDEN)

    logger.info(
        "webhook_verified",
        extra={"channel": channel_type.value, "tenant_id": tenant_id, "hub_mode": hub_mode},
    )
    return Response(content=challenge, media_type="text/plain", status_code=status.HTTP_200_OK)


@router.post("/{channel}/{tenant_id}", response_model=None)
async def receive_webhook(
    channel: str, tenant_id: str, request: Request, container: ContainerDep
) -> Response | dict[str, Any]:
    """Recebimento de eventos inbound do canal.

    Canal desconhecido ou sem adapter é aceito com 200 e descartado.
    """
    try:
        channel_type = parse_channel_type(channel)
        adapter = container.router.adapter_for(channel_type)
    except UnsupportedChannelError:
        logger.warning("webhook_channel_unsupported", extra={"channel": channel, "tenant_id": tenant_id})
        return {"status": "ignored"}

    token = set_correlation_id(request.headers.get("x-correlation-id"))
    try:
        raw_body = await request.body()
        config = await container.router.channel_config(tenant_id, channel_type)

        try:
            signature = adapter.verify_signature(raw_body, dict(request.headers), config)
            ensure_valid_signature(signature)
            payload = parse_webhook_json(raw_body)
        except InvalidSignatureError as exc:
            logger.warning(
                "webhook_signature_invalid",
                extra={"channel": channel_type.value, "tenant_id": tenant_id, "error": str(exc)},
            )
            return JSONResponse(
                content={"status": "error", "error": "invalid_signature"},
                status_code=status.HTTP_401_UNAUTHORIZED,
            )
        except InvalidJsonError as exc:
            logger.warning(
                "webhook_invalid_json",
                extra={"channel": channel_type.value, "tenant_id": tenant_id, "error": str(exc)},
            )
            return JSONResponse(
                content={"status": "error", "error": "invalid_json"},
                status_code=status.HTTP_400_BAD_REQUEST,
            )

        correlation_id = get_correlation_id()
        logger.info(
            "webhook_received",
            extra={
                "channel": channel_type.value,
                "tenant_id": tenant_id,
                "correlation_id": correlation_id,
                "signature_skipped": signature.skipped,
                "payload_size": len(raw_body),
            },
        )

        processing = process_inbound_payload_safe(
            payload=payload,
            correlation_id=correlation_id,
            use_case=container.inbound,
            tenant_id=tenant_id,
            channel_type=channel_type,
        )
        if webhook_processing_mode(channel_type).lower() == "inline":
            await processing
        else:
            schedule_processing_task(
                channel=channel_type.value,
                correlation_id=correlation_id,
                coroutine=processing,
            )
        return {"status": "received", "correlation_id": correlation_id}
    finally:
        reset_correlation_id(token)
