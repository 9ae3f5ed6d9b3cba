"""Bootstrap da aplicação — inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings
e monta o container de serviços.

Uso:
    from app.bootstrap import build_container, initialize_app

    initialize_app()
    container = build_container()
"""

from __future__ import annotations

import logging
import os

from app.bootstrap.container import ServiceContainer, build_container
from app.observability import get_correlation_id, get_tenant_id
from config.logging import configure_logging
from config.settings import (
    get_base_settings,
    get_dedupe_settings,
    get_instagram_settings,
    get_partner_program_settings,
    get_telegram_settings,
    get_tenant_lock_settings,
    get_whatsapp_settings,
)

__all__ = [
    "ServiceContainer",
    "build_container",
    "initialize_app",
    "initialize_test_app",
    "validate_runtime_settings",
]

# Nome do serviço para logs e métricas
SERVICE_NAME = "crm_multicanal"

DEFAULT_LOG_LEVEL = "INFO"
STRICT_VALIDATION_ENVS = {"staging", "production"}

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Configura logging estruturado JSON com correlation_id.

    Deve ser chamada uma vez no início do serviço.
    """
    log_level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    configure_logging(
        level=log_level,
        service_name=SERVICE_NAME,
        correlation_id_getter=get_correlation_id,
        tenant_id_getter=get_tenant_id,
    )


def initialize_test_app() -> None:
    """Inicializa logging em nível DEBUG para testes."""
    configure_logging(
        level="DEBUG",
        service_name=f"{SERVICE_NAME}_test",
        correlation_id_getter=get_correlation_id,
    )


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development` mantém alerta sem bloquear execução local.
    """
    base = get_base_settings()
    strict_mode = base.environment in STRICT_VALIDATION_ENVS
    errors: list[str] = []

    errors.extend(f"base: {error}" for error in base.validate())
    errors.extend(f"dedupe: {error}" for error in get_dedupe_settings().validate(base))
    errors.extend(f"tenant_lock: {error}" for error in get_tenant_lock_settings().validate(base))
    errors.extend(f"whatsapp: {error}" for error in get_whatsapp_settings().validate())
    errors.extend(f"instagram: {error}" for error in get_instagram_settings().validate())
    errors.extend(f"telegram: {error}" for error in get_telegram_settings().validate())
    errors.extend(f"partners: {error}" for error in get_partner_program_settings().validate())

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": base.environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": base.environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if strict_mode:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {base.environment}:\n{details}")
