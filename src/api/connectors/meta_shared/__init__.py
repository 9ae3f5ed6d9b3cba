"""Peças comuns aos conectores Meta (WhatsApp e Instagram)."""

from api.connectors.meta_shared.graph_client import MetaGraphClient, create_meta_graph_client
from api.connectors.meta_shared.meta_errors import MetaApiError, parse_meta_error
from api.connectors.meta_shared.signature import get_header, verify_meta_signature

__all__ = [
    "MetaApiError",
    "MetaGraphClient",
    "create_meta_graph_client",
    "get_header",
    "parse_meta_error",
    "verify_meta_signature",
]
