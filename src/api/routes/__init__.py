"""Rotas HTTP da API — adapters de entrada.

Estrutura:
- routes/health/: health checks e readiness
- routes/webhooks/: webhooks inbound por canal e tenant
- routes/channels/: gestão de canais do tenant
- routes/partners/: administração do programa de parceiros

Agregação:
- router.py: registra todos os routers no app principal
- errors.py: mapeamento de erros de domínio para HTTP
"""

from __future__ import annotations

from api.routes.errors import register_exception_handlers
from api.routes.router import create_api_router

__all__ = ["create_api_router", "register_exception_handlers"]
