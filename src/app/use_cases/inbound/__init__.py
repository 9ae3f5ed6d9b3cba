"""Use cases inbound multicanal."""

from app.use_cases.inbound.process_channel_webhook import (
    InboundProcessingResult,
    ProcessChannelWebhookUseCase,
    inbound_dedupe_key,
)

__all__ = ["InboundProcessingResult", "ProcessChannelWebhookUseCase", "inbound_dedupe_key"]
