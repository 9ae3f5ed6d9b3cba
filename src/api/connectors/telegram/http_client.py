"""Cliente HTTP da Telegram Bot API.

A Bot API responde `{"ok": false, "error_code": ..., "description": ...}`
em falhas; esse envelope vira HttpError. O token do bot faz parte da URL
e nunca é logado.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from app.infra.http import HttpClient, HttpClientConfig, HttpError

if TYPE_CHECKING:
    import httpx

    from config.settings import TelegramSettings

logger = logging.getLogger(__name__)

# error_code da Bot API que não adianta repetir
PERMANENT_ERROR_CODES = frozenset({400, 401, 403, 404})


class TelegramBotClient(HttpClient):
    """Chamadas de método da Bot API (`/bot<token>/<method>`)."""

    def __init__(
        self,
        settings: TelegramSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(
            HttpClientConfig(
                timeout_seconds=settings.request_timeout_seconds,
                max_retries=settings.max_retries,
            ),
            transport=transport,
        )
        self._settings = settings

    async def call(self, bot_token: str, method: str, body: dict[str, Any] | None = None) -> Any:
        """Executa um método e retorna o campo `result`.

        Raises:
            ValueError: bot_token vazio
            HttpError: falha HTTP ou envelope `ok: false`
        """
        url = self._settings.method_url(bot_token, method)
        response = await self.post(url, json=body or {})
        try:
            data = response.json()
        except json.JSONDecodeError as exc:
            logger.error("telegram_response_invalid_json", extra={"method": method})
            raise HttpError("telegram_invalid_json", status_code=response.status_code) from exc

        if not isinstance(data, dict) or not data.get("ok"):
            error_code = data.get("error_code") if isinstance(data, dict) else None
            description = data.get("description") if isinstance(data, dict) else None
            logger.warning(
                "telegram_api_error",
                extra={"method": method, "error_code": error_code, "status_code": response.status_code},
            )
            status_code = error_code if isinstance(error_code, int) else response.status_code
            raise HttpError(
                f"Telegram API error: {description or 'unknown'}",
                status_code=status_code,
                is_retryable=status_code not in PERMANENT_ERROR_CODES,
            )
        return data.get("result")

    async def get_me(self, bot_token: str) -> dict[str, Any]:
        result = await self.call(bot_token, "getMe")
        return result if isinstance(result, dict) else {}

    async def set_webhook(
        self, bot_token: str, url: str, secret_token: str | None = None
    ) -> bool:
        body: dict[str, Any] = {"url": url}
        if secret_token:
            body["secret_token"] = secret_token
        return bool(await self.call(bot_token, "setWebhook", body))
