"""
Configuration module
"""

from afip_auth.config.gateway_config import (
    AFIP_LEGACY_TLS,
    DEFAULT_ENDPOINTS,
    ENV_VAR_MAPPING,
    ConfigDefaults,
    Environment,
    GatewayConfig,
    TransportConfig,
)
from afip_auth.config.config_loader import ConfigLoader

__all__ = [
    "AFIP_LEGACY_TLS",
    "DEFAULT_ENDPOINTS",
    "ENV_VAR_MAPPING",
    "ConfigDefaults",
    "Environment",
    "GatewayConfig",
    "TransportConfig",
    "ConfigLoader",
]
