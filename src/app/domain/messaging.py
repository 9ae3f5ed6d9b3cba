"""Modelos de domínio de contatos, conversas e mensagens."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Literal

from app.domain.channels import ChannelType


class ConversationStatus(StrEnum):
    ACTIVE = "active"
    CLOSED = "closed"


class SenderType(StrEnum):
    CONTACT = "contact"
    USER = "user"
    ASSISTANT = "assistant"


MessageKind = Literal["text", "media"]


@dataclass(frozen=True, slots=True)
class Attachment:
    """Referência a mídia recebida ou enviada (nunca o binário)."""

    kind: str
    url: str | None = None
    media_id: str | None = None
    mime_type: str | None = None
    filename: str | None = None


@dataclass(frozen=True, slots=True)
class IncomingMessage:
    """Mensagem inbound normalizada, independente de canal.

    Attributes:
        tenant_id: Tenant destinatário
        channel_type: Canal de origem
        external_contact_id: Identidade do remetente no canal
            (número WhatsApp, instagram id, chat id Telegram)
        external_message_id: ID da mensagem no provider (dedupe)
        timestamp: Momento de envio informado pelo provider
        text: Texto da mensagem (ou legenda de mídia)
        attachment: Mídia anexada, quando houver
        contact_name: Nome de perfil exposto pelo canal
        message_type: Tipo original no provider (text, image, callback...)
    """

    tenant_id: str
    channel_type: ChannelType
    external_contact_id: str
    external_message_id: str | None
    timestamp: datetime
    text: str | None = None
    attachment: Attachment | None = None
    contact_name: str | None = None
    message_type: str = "text"


@dataclass(frozen=True, slots=True)
class Contact:
    id: str
    tenant_id: str
    channel_type: ChannelType
    external_id: str
    name: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True, slots=True)
class Conversation:
    id: str
    tenant_id: str
    contact_id: str
    channel_type: ChannelType
    status: ConversationStatus = ConversationStatus.ACTIVE
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True, slots=True)
class ResolvedConversation:
    """Par contato/conversa devolvido pelo resolver."""

    contact: Contact
    conversation: Conversation


@dataclass(frozen=True, slots=True)
class MessageRecord:
    """Mensagem persistida (imutável após criação)."""

    id: str
    tenant_id: str
    conversation_id: str
    channel_type: ChannelType
    sender_type: SenderType
    timestamp: datetime
    content: str | None = None
    attachment: Attachment | None = None
    external_message_id: str | None = None


@dataclass(frozen=True, slots=True)
class SendOptions:
    """Opções de envio outbound."""

    kind: MessageKind = "text"
    media_url: str | None = None
    media_type: str = "image"
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    """Resultado de envio outbound."""

    success: bool
    channel_type: ChannelType
    provider_message_id: str | None = None
    error_code: str | None = None
    error_message: str | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": self.success,
            "channel_type": self.channel_type.value,
        }
        if self.success:
            payload["provider_message_id"] = self.provider_message_id
        else:
            payload["error"] = {"code": self.error_code, "message": self.error_message}
        return payload


@dataclass(frozen=True, slots=True)
class SignatureResult:
    """Resultado da validação de assinatura de webhook."""

    valid: bool
    skipped: bool = False
    error: str | None = None
