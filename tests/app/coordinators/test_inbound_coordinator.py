"""Testes do coordenador inbound (contexto de tenant e logs)."""

from __future__ import annotations

import logging

import pytest

from app.coordinators.inbound.handler import process_inbound_payload
from app.domain.channels import ChannelType
from app.domain.errors import UnsupportedChannelError
from app.observability import get_tenant_id
from app.use_cases.inbound import InboundProcessingResult


class StubUseCase:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.seen_tenant: str | None = None

    async def execute(self, *, tenant_id, channel_type, payload) -> InboundProcessingResult:
        self.seen_tenant = get_tenant_id()
        if self.error is not None:
            raise self.error
        return InboundProcessingResult(received=2, processed=1, skipped=1, dropped=0)


@pytest.mark.asyncio
async def test_process_inbound_sets_tenant_context_during_execution(caplog) -> None:
    use_case = StubUseCase()

    with caplog.at_level(logging.INFO, logger="app.coordinators.inbound.handler"):
        result = await process_inbound_payload({}, "corr-1", use_case, "t1", ChannelType.TELEGRAM)

    assert result == InboundProcessingResult(received=2, processed=1, skipped=1, dropped=0)
    assert use_case.seen_tenant == "t1"
    assert get_tenant_id() == ""
    record = next(r for r in caplog.records if r.getMessage() == "inbound_processed")
    assert record.correlation_id == "corr-1"
    assert record.processed == 1


@pytest.mark.asyncio
async def test_process_inbound_unsupported_channel_returns_none() -> None:
    use_case = StubUseCase(error=UnsupportedChannelError("sms"))

    result = await process_inbound_payload({}, "corr-2", use_case, "t1", ChannelType.WHATSAPP)

    assert result is None
    assert get_tenant_id() == ""


@pytest.mark.asyncio
async def test_process_inbound_propagates_unexpected_errors() -> None:
    use_case = StubUseCase(error=RuntimeError("store indisponível"))

    with pytest.raises(RuntimeError):
        await process_inbound_payload({}, "corr-3", use_case, "t1", ChannelType.WHATSAPP)
    assert get_tenant_id() == ""
