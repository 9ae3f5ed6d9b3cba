"""Entrypoint da aplicação CRM multicanal.

Inicializa o bootstrap e expõe a aplicação ASGI (FastAPI).

Uso (produção):
    uvicorn app.app:app --host 0.0.0.0 --port 8080

Uso (desenvolvimento):
    uvicorn app.app:app --reload --host 0.0.0.0 --port 8080
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import create_api_router, register_exception_handlers
from api.routes.webhooks.tasks import drain_processing_tasks
from app.bootstrap import build_container, initialize_app, validate_runtime_settings
from app.bootstrap.clients import create_async_redis_client
from app.services.partner_settings import seed_partner_settings
from config.logging import get_logger
from config.settings import (
    get_base_settings,
    get_partner_program_settings,
    load_partner_program_defaults,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from app.bootstrap import ServiceContainer

# Inicializar logging ANTES de qualquer import que use logger
initialize_app()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Gerencia ciclo de vida da aplicação.

    Startup:
    - Valida configurações
    - Conecta Redis (quando configurado)
    - Semeia o settings store do programa de parceiros
    - Inicia o agendador de jobs

    Shutdown:
    - Para o agendador
    - Aguarda tasks de webhook pendentes
    - Fecha conexões
    """
    container: ServiceContainer = app.state.container
    base = get_base_settings()
    logger.info("app_starting", extra={"service": base.service_name})
    validate_runtime_settings()

    if base.redis_url and container.redis_client is None:
        container.redis_client = create_async_redis_client()

    program = get_partner_program_settings()
    defaults = load_partner_program_defaults(program.defaults_path)
    await seed_partner_settings(container.settings_store, defaults)

    if program.scheduler_enabled:
        container.scheduler.start()

    yield

    logger.info("app_shutting_down", extra={"service": base.service_name})
    container.scheduler.shutdown()
    await drain_processing_tasks(timeout_seconds=base.webhook_drain_timeout_seconds)
    if container.redis_client is not None:
        await container.redis_client.aclose()


def create_app(container: ServiceContainer | None = None) -> FastAPI:
    """Cria e configura a aplicação FastAPI.

    Args:
        container: Serviços já montados (testes injetam stores/transport)

    Returns:
        Aplicação FastAPI configurada.
    """
    fastapi_app = FastAPI(
        title="CRM Multicanal",
        description="Roteamento multicanal e programa de parceiros",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    fastapi_app.state.container = container or build_container()
    base = get_base_settings()

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=list(base.cors_allow_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(fastapi_app)
    fastapi_app.include_router(create_api_router())

    logger.info("app_configured", extra={"service": base.service_name})

    return fastapi_app


# Aplicação ASGI exposta para uvicorn
app = create_app()


def main() -> None:
    """Entrypoint para execução direta (desenvolvimento)."""
    import uvicorn

    logger.info("Starting CRM multicanal in development mode")
    uvicorn.run(
        "app.app:app",
        host="0.0.0.0",
        port=get_base_settings().port,
        reload=True,
    )


if __name__ == "__main__":
    main()
