"""Contrato dos adapters de canal (WhatsApp, Instagram, Telegram).

Adapters são objetos construídos explicitamente no bootstrap e injetados
no ChannelRouter. Credenciais chegam por chamada via `config` (blob do
canal do tenant), nunca por estado global.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from app.domain.channels import ChannelType
    from app.domain.messaging import (
        DeliveryResult,
        IncomingMessage,
        SendOptions,
        SignatureResult,
    )


@runtime_checkable
class ChannelAdapterProtocol(Protocol):
    """Tradução payload do provider ↔ modelo normalizado."""

    @property
    def channel_type(self) -> ChannelType:
        """Tipo de canal atendido pelo adapter."""
        ...

    def normalize(self, tenant_id: str, payload: Mapping[str, Any]) -> list[IncomingMessage]:
        """Converte payload de webhook em mensagens normalizadas."""
        ...

    def verify_signature(
        self,
        raw_body: bytes,
        headers: Mapping[str, str],
        config: Mapping[str, Any],
    ) -> SignatureResult:
        """Valida assinatura do webhook com o secret do canal."""
        ...

    def validate_config(self, config: Mapping[str, Any]) -> list[str]:
        """Lista credenciais obrigatórias ausentes (vazia = OK)."""
        ...

    async def send(
        self,
        config: Mapping[str, Any],
        recipient_id: str,
        body: str,
        options: SendOptions,
    ) -> DeliveryResult:
        """Envia mensagem pelo provider.

        Raises:
            ProviderCallFailedError: timeout, erro de transporte ou não-2xx.
        """
        ...

    async def health_check(self, config: Mapping[str, Any]) -> dict[str, Any]:
        """Consulta o provider para validar as credenciais.

        Raises:
            ProviderCallFailedError: se o provider rejeitar ou não responder.
        """
        ...
