"""Configuração de logging estruturado.

Uso:
    from config.logging import configure_logging, get_logger

    # Na inicialização (bootstrap)
    configure_logging(level="INFO", service_name="crm_multicanal")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("channel_setup_completed", extra={"channel_type": "telegram"})

Campos obrigatórios em todo log: correlation_id, service, level,
logger, message, asctime. Tokens, telefones e corpo de mensagem nunca
entram em logs.
"""

from config.logging.config import (
    NOISY_LOGGERS,
    configure_logging,
    get_logger,
)
from config.logging.filters import CorrelationIdFilter
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "NOISY_LOGGERS",
    "REQUIRED_LOG_FIELDS",
    "CorrelationIdFilter",
    "configure_logging",
    "create_json_formatter",
    "get_logger",
]
