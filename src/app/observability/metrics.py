"""Registro de métricas via structured logging.

As métricas são logs estruturados agregados depois pelo backend de logs.

Métricas suportadas:
- Latência por componente/operação
- Execução de job agendado (sucesso/falha, duração)
- Resumo de sweep em lote (processados, ignorados, falhas)
- Entrega outbound por canal
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "channel_router")
        operation: Nome da operação (ex: "route", "send")
        latency_ms: Latência em milissegundos
        correlation_id: ID de correlação para rastreamento
    """
    logger.info(
        "metric_latency",
        extra={
            "metric_type": "latency",
            "component": component,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
            "correlation_id": correlation_id,
        },
    )


def record_job_run(
    job_name: str,
    success: bool,
    duration_ms: float,
    error_type: str | None = None,
) -> None:
    """Registra execução de job agendado."""
    logger.info(
        "metric_job_run",
        extra={
            "metric_type": "job_run",
            "job_name": job_name,
            "success": success,
            "duration_ms": round(duration_ms, 2),
            "error_type": error_type,
        },
    )


def record_batch_summary(
    operation: str,
    processed: int,
    skipped: int,
    failed: int,
) -> None:
    """Registra resultado de um sweep em lote."""
    logger.info(
        "metric_batch_summary",
        extra={
            "metric_type": "batch_summary",
            "operation": operation,
            "processed": processed,
            "skipped": skipped,
            "failed": failed,
        },
    )


def record_delivery(channel_type: str, success: bool, error_code: str | None = None) -> None:
    """Registra tentativa de envio outbound."""
    logger.info(
        "metric_delivery",
        extra={
            "metric_type": "delivery",
            "channel_type": channel_type,
            "success": success,
            "error_code": error_code,
        },
    )
