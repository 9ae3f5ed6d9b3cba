"""Settings específicas de Telegram (Bot API)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

TELEGRAM_API_BASE_URL: str = "https://api.telegram.org"


@dataclass(frozen=True)
class TelegramSettings:
    """Configurações do canal Telegram.

    O bot_token de cada tenant fica no channel_config.

    Attributes:
        verify_token: Token de verificação usado quando o canal não define um
        api_base_url: URL base da Bot API
        request_timeout_seconds: Timeout para requisições HTTP
        max_retries: Tentativas extras no cliente HTTP (0 = sem retry)
        webhook_processing_mode: Modo de processamento do webhook (async|inline)
    """

    verify_token: str = ""
    api_base_url: str = TELEGRAM_API_BASE_URL
    request_timeout_seconds: float = 15.0
    max_retries: int = 0
    webhook_processing_mode: str = "async"

    def method_url(self, bot_token: str, method: str) -> str:
        """URL de um método da Bot API (ex: sendMessage).

        Raises:
            ValueError: Se bot_token vazio.
        """
        if not bot_token:
            raise ValueError("bot_token é obrigatório")
        return f"{self.api_base_url}/bot{bot_token}/{method}"

    def validate(self) -> list[str]:
        errors: list[str] = []
        if self.request_timeout_seconds <= 0:
            errors.append("TELEGRAM_REQUEST_TIMEOUT_SECONDS deve ser > 0")
        if self.max_retries < 0:
            errors.append("TELEGRAM_MAX_RETRIES deve ser >= 0")
        if self.webhook_processing_mode not in ("async", "inline"):
            errors.append("TELEGRAM_WEBHOOK_PROCESSING_MODE deve ser 'async' ou 'inline'")
        return errors


def _load_from_env() -> TelegramSettings:
    return TelegramSettings(
        verify_token=os.getenv("TELEGRAM_VERIFY_TOKEN", ""),
        api_base_url=os.getenv("TELEGRAM_API_BASE_URL", TELEGRAM_API_BASE_URL),
        request_timeout_seconds=float(os.getenv("TELEGRAM_REQUEST_TIMEOUT_SECONDS", "15")),
        max_retries=int(os.getenv("TELEGRAM_MAX_RETRIES", "0")),
        webhook_processing_mode=os.getenv("TELEGRAM_WEBHOOK_PROCESSING_MODE", "async").lower(),
    )


@lru_cache(maxsize=1)
def get_telegram_settings() -> TelegramSettings:
    """Retorna instância cacheada de TelegramSettings."""
    return _load_from_env()
