"""Observabilidade — correlation_id, contexto de tenant e métricas.

Uso:
    from app.observability import get_correlation_id, set_correlation_id
    from app.observability import record_latency, record_job_run
"""

from app.observability.correlation import (
    generate_correlation_id,
    get_correlation_id,
    get_tenant_id,
    reset_correlation_id,
    reset_tenant_id,
    set_correlation_id,
    set_tenant_id,
)
from app.observability.metrics import (
    record_batch_summary,
    record_delivery,
    record_job_run,
    record_latency,
)

__all__ = [
    "generate_correlation_id",
    "get_correlation_id",
    "get_tenant_id",
    "record_batch_summary",
    "record_delivery",
    "record_job_run",
    "record_latency",
    "reset_correlation_id",
    "reset_tenant_id",
    "set_correlation_id",
    "set_tenant_id",
]
