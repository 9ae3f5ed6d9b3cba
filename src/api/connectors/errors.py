"""Tradução de falhas HTTP dos providers para o erro de domínio."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from app.domain.errors import ProviderCallFailedError
from app.infra.http import HttpError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from app.domain.channels import ChannelType

logger = logging.getLogger(__name__)

REQUIRED_KEY_MISSING = "Campo obrigatório ausente no channel_config: {key}"


@contextmanager
def provider_call(channel_type: ChannelType, operation: str) -> Iterator[None]:
    """Converte HttpError em ProviderCallFailedError.

    Uso:
        with provider_call(ChannelType.TELEGRAM, "send"):
            await client.post(...)
    """
    try:
        yield
    except HttpError as exc:
        logger.warning(
            "provider_call_failed",
            extra={
                "channel_type": channel_type.value,
                "operation": operation,
                "status_code": exc.status_code,
                "is_retryable": exc.is_retryable,
                "error": str(exc),
            },
        )
        raise ProviderCallFailedError(
            channel_type,
            str(exc),
            status_code=exc.status_code,
            is_retryable=exc.is_retryable,
        ) from exc


def missing_keys(config: object, required: tuple[str, ...]) -> list[str]:
    """Lista mensagens para chaves obrigatórias ausentes ou vazias."""
    if not isinstance(config, dict) or not config:
        return ["Configuração do canal é obrigatória"]
    return [REQUIRED_KEY_MISSING.format(key=key) for key in required if not config.get(key)]
