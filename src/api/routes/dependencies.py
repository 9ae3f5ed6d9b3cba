"""Acesso ao container de serviços a partir da request."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from app.bootstrap.container import ServiceContainer


def get_container(request: Request) -> ServiceContainer:
    """Container montado no startup (app.state.container)."""
    return request.app.state.container


ContainerDep = Annotated[ServiceContainer, Depends(get_container)]
