"""Helpers compartilhados pelos normalizers de canal."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any


def parse_unix_timestamp(value: Any, *, millis: bool = False) -> datetime:
    """Converte epoch (segundos ou ms, str ou número) em datetime UTC.

    Valores ausentes ou inválidos viram "agora", pois o provider às vezes
    omite o campo em eventos de sistema.
    """
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return datetime.now(UTC)
    if millis:
        seconds /= 1000
    return datetime.fromtimestamp(seconds, tz=UTC)


def as_dict(value: Any) -> dict[str, Any]:
    """Retorna o valor se for dict, senão dict vazio."""
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> list[Any]:
    """Retorna o valor se for list, senão lista vazia."""
    return value if isinstance(value, list) else []
