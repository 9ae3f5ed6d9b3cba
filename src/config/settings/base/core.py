"""Settings base do CRM multicanal.

Configurações comuns a todos os canais e serviços: ambiente, Redis
compartilhado, CORS da API administrativa e parâmetros de shutdown.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Literal

Environment = Literal["development", "staging", "production"]

_TRUTHY = frozenset({"true", "1", "yes"})


@dataclass(frozen=True)
class BaseSettings:
    """Configurações base do sistema.

    Attributes:
        environment: Ambiente de execução (development|staging|production)
        service_name: Nome do serviço para logs
        debug: Modo debug ativo
        redis_url: URL de conexão Redis (dedupe e lock por tenant)
        cors_allow_origins: Origens aceitas pelo painel administrativo
        webhook_drain_timeout_seconds: Espera por tasks de webhook no shutdown
        port: Porta do servidor em execução direta
    """

    environment: Environment = "development"
    service_name: str = "crm-multicanal"
    debug: bool = False
    redis_url: str = ""
    cors_allow_origins: tuple[str, ...] = field(default=("*",))
    webhook_drain_timeout_seconds: float = 30.0
    port: int = 8080

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def validate(self) -> list[str]:
        """Valida configurações base.

        Returns:
            Lista de erros (vazia = OK).
        """
        errors: list[str] = []

        if not self.service_name:
            errors.append("SERVICE_NAME não pode ser vazio")

        if self.is_production and "*" in self.cors_allow_origins:
            errors.append("CORS_ALLOW_ORIGINS=* proibido em production")

        if self.webhook_drain_timeout_seconds <= 0:
            errors.append("WEBHOOK_DRAIN_TIMEOUT_SECONDS deve ser > 0")

        return errors


def _parse_environment(env_str: str) -> Environment:
    """Converte string de ambiente para tipo Environment."""
    env_lower = env_str.lower()
    if env_lower in ("production", "prod"):
        return "production"
    if env_lower in ("staging", "stage"):
        return "staging"
    return "development"


def _parse_origins(raw: str) -> tuple[str, ...]:
    origins = tuple(item.strip() for item in raw.split(",") if item.strip())
    return origins or ("*",)


def _load_base_from_env() -> BaseSettings:
    """Carrega BaseSettings de variáveis de ambiente."""
    return BaseSettings(
        environment=_parse_environment(os.getenv("ENVIRONMENT", "development")),
        service_name=os.getenv("SERVICE_NAME", "crm-multicanal"),
        debug=os.getenv("DEBUG", "").lower() in _TRUTHY,
        redis_url=os.getenv("REDIS_URL", ""),
        cors_allow_origins=_parse_origins(os.getenv("CORS_ALLOW_ORIGINS", "*")),
        webhook_drain_timeout_seconds=float(os.getenv("WEBHOOK_DRAIN_TIMEOUT_SECONDS", "30")),
        port=int(os.getenv("PORT", "8080")),
    )


@lru_cache(maxsize=1)
def get_base_settings() -> BaseSettings:
    """Retorna instância cacheada de BaseSettings."""
    return _load_base_from_env()
