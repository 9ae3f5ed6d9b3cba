"""Filter de logging para injeção de contexto.

Campos injetados:
- correlation_id: ID de rastreamento da requisição ou do job
- service: Nome do serviço
- tenant_id: Tenant em processamento, quando houver
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


class CorrelationIdFilter(logging.Filter):
    """Injeta correlation_id, service e tenant_id em cada record.

    Valores passados explicitamente via `extra` são preservados.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
        tenant_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")
        self._get_tenant_id = tenant_id_getter

    def filter(self, record: logging.LogRecord) -> bool:
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else self._get_correlation_id()
        record.service = self._service_name
        if self._get_tenant_id is not None and not getattr(record, "tenant_id", None):
            tenant_id = self._get_tenant_id()
            if tenant_id:
                record.tenant_id = tenant_id
        return True
