"""Exceções compartilhadas de infraestrutura e de armazenamento."""

from __future__ import annotations

from typing import Any


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""


class RedisConnectionError(InfrastructureError):
    """Falha de conexão/timeout ao acessar Redis."""


class UniqueConstraintViolation(Exception):
    """Conflito de chave única no data store.

    Resultado esperado de corridas entre escritores concorrentes: quem
    captura deve buscar e devolver a linha existente.

    Attributes:
        entity: Nome da entidade (ex: "contact", "commission")
        key: Chave única em conflito
    """

    def __init__(self, entity: str, key: tuple[Any, ...]) -> None:
        super().__init__(f"unique_constraint_violation:{entity}")
        self.entity = entity
        self.key = key
