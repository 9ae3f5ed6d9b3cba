"""Mapeamento de erros de domínio para respostas HTTP.

Corpo padrão: {"success": false, "error_kind": ..., "message": ...}
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import status
from fastapi.responses import JSONResponse

from app.domain.errors import (
    ChannelNotConfiguredError,
    ChannelNotFoundError,
    CommissionTransitionError,
    CrmError,
    InvalidChannelConfigError,
    InvalidOutboundMessageError,
    JobNotFoundError,
    PartnerNotFoundError,
    PlanRestrictionError,
    PrimaryChannelRequiredError,
    ProviderCallFailedError,
    ReferralNotFoundError,
    TenantNotFoundError,
    UnsupportedChannelError,
)

if TYPE_CHECKING:
    from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[CrmError], int], ...] = (
    (PlanRestrictionError, status.HTTP_403_FORBIDDEN),
    (ChannelNotFoundError, status.HTTP_404_NOT_FOUND),
    (TenantNotFoundError, status.HTTP_404_NOT_FOUND),
    (PartnerNotFoundError, status.HTTP_404_NOT_FOUND),
    (ReferralNotFoundError, status.HTTP_404_NOT_FOUND),
    (JobNotFoundError, status.HTTP_404_NOT_FOUND),
    (UnsupportedChannelError, status.HTTP_400_BAD_REQUEST),
    (InvalidChannelConfigError, status.HTTP_400_BAD_REQUEST),
    (InvalidOutboundMessageError, status.HTTP_400_BAD_REQUEST),
    (ChannelNotConfiguredError, status.HTTP_409_CONFLICT),
    (CommissionTransitionError, status.HTTP_409_CONFLICT),
    (PrimaryChannelRequiredError, status.HTTP_409_CONFLICT),
    (ProviderCallFailedError, status.HTTP_502_BAD_GATEWAY),
)


def status_for(exc: CrmError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(exc: CrmError) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "error_kind": exc.error_kind, "message": exc.message}
    if isinstance(exc, PlanRestrictionError):
        decision = exc.decision
        body["upgrade_required"] = True
        body["current_plan"] = decision.current_plan.value if decision.current_plan else None
        body["required_plan"] = decision.required_plan.value if decision.required_plan else None
    elif isinstance(exc, InvalidChannelConfigError):
        body["errors"] = list(exc.errors)
    elif isinstance(exc, CommissionTransitionError):
        body["invalid_ids"] = list(exc.invalid_ids)
    return body


async def handle_crm_error(request: Request, exc: CrmError) -> JSONResponse:
    status_code = status_for(exc)
    log = logger.error if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.info
    log(
        "request_failed",
        extra={"error_kind": exc.error_kind, "status_code": status_code, "path": request.url.path},
    )
    return JSONResponse(content=error_body(exc), status_code=status_code)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CrmError, handle_crm_error)
