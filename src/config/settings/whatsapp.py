"""Settings específicas de WhatsApp.

Configurações do canal WhatsApp via Graph API. Credenciais por tenant
(phone_number_id, access_token, app_secret) vivem no channel_config de
cada canal; aqui ficam endpoint, timeouts e o verify token de fallback.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

# Constantes do Graph API
GRAPH_API_VERSION: str = "v18.0"
GRAPH_API_BASE_URL: str = "https://graph.facebook.com"


@dataclass(frozen=True)
class WhatsAppSettings:
    """Configurações do canal WhatsApp.

    Attributes:
        verify_token: Token de verificação usado quando o canal não define um
        api_version: Versão da Graph API (ex: v18.0)
        api_base_url: URL base da Graph API
        request_timeout_seconds: Timeout para requisições HTTP
        max_retries: Tentativas extras no cliente HTTP (0 = sem retry)
        webhook_processing_mode: Modo de processamento do webhook (async|inline)
    """

    verify_token: str = ""
    api_version: str = GRAPH_API_VERSION
    api_base_url: str = GRAPH_API_BASE_URL
    request_timeout_seconds: float = 15.0
    max_retries: int = 0
    webhook_processing_mode: str = "async"

    @property
    def api_endpoint(self) -> str:
        """URL base completa da API com versão."""
        return f"{self.api_base_url}/{self.api_version}"

    def get_messages_endpoint(self, phone_number_id: str) -> str:
        """Retorna URL para envio de mensagens.

        Raises:
            ValueError: Se phone_number_id vazio.
        """
        if not phone_number_id:
            raise ValueError("phone_number_id é obrigatório")
        return f"{self.api_endpoint}/{phone_number_id}/messages"

    def validate(self) -> list[str]:
        """Valida configurações de WhatsApp.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if self.request_timeout_seconds <= 0:
            errors.append("WHATSAPP_REQUEST_TIMEOUT_SECONDS deve ser > 0")

        if self.max_retries < 0:
            errors.append("WHATSAPP_MAX_RETRIES deve ser >= 0")

        if self.webhook_processing_mode not in ("async", "inline"):
            errors.append("WHATSAPP_WEBHOOK_PROCESSING_MODE deve ser 'async' ou 'inline'")

        return errors


def _load_from_env() -> WhatsAppSettings:
    """Carrega WhatsAppSettings a partir de variáveis de ambiente."""
    return WhatsAppSettings(
        verify_token=os.getenv("WHATSAPP_VERIFY_TOKEN", ""),
        api_version=os.getenv("WHATSAPP_API_VERSION", GRAPH_API_VERSION),
        api_base_url=os.getenv("WHATSAPP_API_BASE_URL", GRAPH_API_BASE_URL),
        request_timeout_seconds=float(os.getenv("WHATSAPP_REQUEST_TIMEOUT_SECONDS", "15")),
        max_retries=int(os.getenv("WHATSAPP_MAX_RETRIES", "0")),
        webhook_processing_mode=os.getenv("WHATSAPP_WEBHOOK_PROCESSING_MODE", "async").lower(),
    )


@lru_cache(maxsize=1)
def get_whatsapp_settings() -> WhatsAppSettings:
    """Retorna instância cacheada de WhatsAppSettings."""
    return _load_from_env()
