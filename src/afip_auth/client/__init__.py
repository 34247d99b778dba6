"""
HTTP transport module for the AFIP auth toolkit
"""

from afip_auth.client.registry import (
    SessionFactory,
    TransportRegistry,
    get_client,
    get_registry,
)
from afip_auth.client.response import check_response
from afip_auth.client.transport import (
    LegacyTlsAdapter,
    build_session,
    build_ssl_context,
)

__all__ = [
    "SessionFactory",
    "TransportRegistry",
    "get_client",
    "get_registry",
    "check_response",
    "LegacyTlsAdapter",
    "build_session",
    "build_ssl_context",
]
