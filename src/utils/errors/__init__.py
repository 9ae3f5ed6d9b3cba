"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    InfrastructureError,
    RedisConnectionError,
    UniqueConstraintViolation,
)

__all__ = [
    "InfrastructureError",
    "RedisConnectionError",
    "UniqueConstraintViolation",
]
