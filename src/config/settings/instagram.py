"""Settings específicas de Instagram (Messenger Platform / Graph API)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from config.settings.whatsapp import GRAPH_API_BASE_URL, GRAPH_API_VERSION


@dataclass(frozen=True)
class InstagramSettings:
    """Configurações do canal Instagram.

    Attributes:
        verify_token: Token de verificação usado quando o canal não define um
        api_version: Versão da Graph API
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
        return f"{self.api_base_url}/{self.api_version}"

    @property
    def messages_endpoint(self) -> str:
        """Endpoint de envio da página (`/me/messages`)."""
        return f"{self.api_endpoint}/me/messages"

    def validate(self) -> list[str]:
        errors: list[str] = []
        if self.request_timeout_seconds <= 0:
            errors.append("INSTAGRAM_REQUEST_TIMEOUT_SECONDS deve ser > 0")
        if self.max_retries < 0:
            errors.append("INSTAGRAM_MAX_RETRIES deve ser >= 0")
        if self.webhook_processing_mode not in ("async", "inline"):
            errors.append("INSTAGRAM_WEBHOOK_PROCESSING_MODE deve ser 'async' ou 'inline'")
        return errors


def _load_from_env() -> InstagramSettings:
    return InstagramSettings(
        verify_token=os.getenv("INSTAGRAM_VERIFY_TOKEN", ""),
        api_version=os.getenv("INSTAGRAM_API_VERSION", GRAPH_API_VERSION),
        api_base_url=os.getenv("INSTAGRAM_API_BASE_URL", GRAPH_API_BASE_URL),
        request_timeout_seconds=float(os.getenv("INSTAGRAM_REQUEST_TIMEOUT_SECONDS", "15")),
        max_retries=int(os.getenv("INSTAGRAM_MAX_RETRIES", "0")),
        webhook_processing_mode=os.getenv("INSTAGRAM_WEBHOOK_PROCESSING_MODE", "async").lower(),
    )


@lru_cache(maxsize=1)
def get_instagram_settings() -> InstagramSettings:
    """Retorna instância cacheada de InstagramSettings."""
    return _load_from_env()
