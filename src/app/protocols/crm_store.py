"""Protocolos do data store de tenants, canais e mensagens.

Persistência é um colaborador externo; estes contratos definem o que o
core exige dele. Implementações DEVEM aplicar as chaves únicas abaixo e
levantar UniqueConstraintViolation em conflito:

- contato: (tenant, channel_type, external_id)
- conversa ativa: (tenant, contact, channel_type)
- mensagem: (tenant, channel_type, external_message_id) quando houver id
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from datetime import datetime

    from app.domain.channels import Channel, ChannelType, Tenant
    from app.domain.messaging import Contact, Conversation, MessageRecord


class TenantStoreProtocol(ABC):
    """Leitura de tenants (plano é mantido pelo billing externo)."""

    @abstractmethod
    async def get_tenant(self, tenant_id: str) -> Tenant | None:
        """Retorna tenant ou None."""


class ChannelStoreProtocol(ABC):
    """Persistência de canais do tenant."""

    @abstractmethod
    async def list_channels(self, tenant_id: str, *, active_only: bool = False) -> list[Channel]:
        """Lista canais do tenant (mais recentes primeiro)."""

    @abstractmethod
    async def get_channel(self, tenant_id: str, channel_id: str) -> Channel | None:
        """Retorna canal do tenant ou None."""

    @abstractmethod
    async def insert_channel(self, channel: Channel) -> Channel:
        """Insere canal."""

    @abstractmethod
    async def update_channel(
        self, tenant_id: str, channel_id: str, **changes: Any
    ) -> Channel | None:
        """Atualiza campos do canal; None se não existir."""

    @abstractmethod
    async def delete_channel(self, tenant_id: str, channel_id: str) -> bool:
        """Remove canal definitivamente."""

    @abstractmethod
    async def clear_primary(self, tenant_id: str) -> None:
        """Zera is_primary de todos os canais do tenant."""

    @abstractmethod
    async def set_primary(self, tenant_id: str, channel_id: str) -> Channel | None:
        """Zera os demais e marca o canal como primário numa única escrita."""


class ContactStoreProtocol(ABC):
    """Persistência de contatos, conversas e mensagens."""

    @abstractmethod
    async def find_contact(
        self, tenant_id: str, channel_type: ChannelType, external_id: str
    ) -> Contact | None:
        """Busca contato pela chave única."""

    @abstractmethod
    async def insert_contact(self, contact: Contact) -> Contact:
        """Insere contato.

        Raises:
            UniqueConstraintViolation: se a chave já existir.
        """

    @abstractmethod
    async def find_active_conversation(
        self, tenant_id: str, contact_id: str, channel_type: ChannelType
    ) -> Conversation | None:
        """Busca conversa ativa para (tenant, contato, canal)."""

    @abstractmethod
    async def insert_conversation(self, conversation: Conversation) -> Conversation:
        """Insere conversa.

        Raises:
            UniqueConstraintViolation: se já houver conversa ativa.
        """

    @abstractmethod
    async def insert_message(self, message: MessageRecord) -> MessageRecord:
        """Insere mensagem.

        Raises:
            UniqueConstraintViolation: se o external_message_id já existir.
        """

    @abstractmethod
    async def find_message_by_external_id(
        self, tenant_id: str, channel_type: ChannelType, external_message_id: str
    ) -> MessageRecord | None:
        """Busca mensagem pelo id do provider."""

    @abstractmethod
    async def list_messages_since(self, tenant_id: str, since: datetime) -> list[MessageRecord]:
        """Lista mensagens do tenant a partir de `since`."""
