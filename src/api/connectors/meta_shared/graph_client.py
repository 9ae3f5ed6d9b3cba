"""Cliente HTTP para a Graph API da Meta (WhatsApp e Instagram).

Estende HttpClient com:
- Bearer token validado antes de cada chamada
- Parsing de `error` da Meta (permanente vs transitório)
- Logging sem tokens, números ou conteúdo
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from api.connectors.meta_shared.meta_errors import parse_meta_error
from app.infra.http import HttpClient, HttpClientConfig, HttpError

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)


class MetaGraphClient(HttpClient):
    """Cliente Graph API com tratamento de erros Meta."""

    async def post_json(
        self,
        url: str,
        access_token: str,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        """POST autenticado.

        Raises:
            ValueError: Se access_token vazio
            HttpError: Se erro HTTP, JSON inválido ou erro Meta
        """
        response = await self.post(url, json=payload, headers=self._auth_headers(access_token))
        return self._process_response(response, "POST", url)

    async def get_json(
        self,
        url: str,
        access_token: str,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """GET autenticado (usado em health checks)."""
        response = await self.get(url, params=params, headers=self._auth_headers(access_token))
        return self._process_response(response, "GET", url)

    @staticmethod
    def _auth_headers(access_token: str) -> dict[str, str]:
        if not access_token or not access_token.strip():
            msg = "access_token é obrigatório para chamadas à Graph API"
            raise ValueError(msg)
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {access_token}",
        }

    @staticmethod
    def _process_response(response: httpx.Response, method: str, url: str) -> dict[str, Any]:
        endpoint = url.split("?", 1)[0]
        try:
            data = response.json()
        except json.JSONDecodeError as exc:
            logger.error("meta_response_invalid_json", extra={"endpoint": endpoint})
            raise HttpError("meta_invalid_json", status_code=response.status_code) from exc

        meta_error = parse_meta_error(data)
        if meta_error is not None:
            logger.warning(
                "meta_api_error",
                extra={
                    "method": method,
                    "endpoint": endpoint,
                    "error_type": meta_error.error_type,
                    "error_code": meta_error.error_code,
                    "is_permanent": meta_error.is_permanent,
                },
            )
            raise HttpError(
                f"Meta API error: {meta_error.error_type} ({meta_error.error_code})",
                status_code=response.status_code,
                is_retryable=not meta_error.is_permanent,
            )

        if response.status_code >= 400:
            raise HttpError(f"http_status_{response.status_code}", status_code=response.status_code)

        logger.debug(
            "meta_api_success",
            extra={"method": method, "endpoint": endpoint, "status_code": response.status_code},
        )
        return data


def create_meta_graph_client(
    timeout_seconds: float,
    max_retries: int,
    transport: httpx.AsyncBaseTransport | None = None,
) -> MetaGraphClient:
    """Factory do cliente Graph API com timeout limitado."""
    return MetaGraphClient(
        HttpClientConfig(timeout_seconds=timeout_seconds, max_retries=max_retries),
        transport=transport,
    )
