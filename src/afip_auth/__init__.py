"""
AFIP Auth Toolkit for Python

Credential generation and legacy-TLS transport for the AFIP web services
"""

from afip_auth.exceptions import (
    AfipError,
    AfipErrorCategory,
    KeyGenerationError,
    KeyStorageError,
    CSRGenerationError,
    EnvelopeInitError,
    SignerAttachError,
    EnvelopeFinalizeError,
    InvalidKeyFormatError,
    KeyParseError,
    InvalidCertificateFormatError,
    CertificateParseError,
    UnknownServiceError,
    EndpointTableError,
    TlsConfigError,
    TransportInitError,
    ConfigError,
    GatewayResponseError,
)

# Credentials
from afip_auth.crypto import (
    KeyMaterialGenerator,
    KeyPair,
    CertificateRequestBuilder,
    SignedEnvelopeBuilder,
    VerificationResult,
)

# Transport
from afip_auth.client import (
    TransportRegistry,
    LegacyTlsAdapter,
    get_client,
    get_registry,
    check_response,
)

# Configuration
from afip_auth.config import (
    AFIP_LEGACY_TLS,
    DEFAULT_ENDPOINTS,
    ConfigLoader,
    Environment,
    GatewayConfig,
    TransportConfig,
)

# Models
from afip_auth.models import ServiceEndpoint

__version__ = "0.1.0"

__all__ = [
    # Exceptions
    "AfipError",
    "AfipErrorCategory",
    "KeyGenerationError",
    "KeyStorageError",
    "CSRGenerationError",
    "EnvelopeInitError",
    "SignerAttachError",
    "EnvelopeFinalizeError",
    "InvalidKeyFormatError",
    "KeyParseError",
    "InvalidCertificateFormatError",
    "CertificateParseError",
    "UnknownServiceError",
    "EndpointTableError",
    "TlsConfigError",
    "TransportInitError",
    "ConfigError",
    "GatewayResponseError",
    # Credentials
    "KeyMaterialGenerator",
    "KeyPair",
    "CertificateRequestBuilder",
    "SignedEnvelopeBuilder",
    "VerificationResult",
    # Transport
    "TransportRegistry",
    "LegacyTlsAdapter",
    "get_client",
    "get_registry",
    "check_response",
    # Configuration
    "AFIP_LEGACY_TLS",
    "DEFAULT_ENDPOINTS",
    "ConfigLoader",
    "Environment",
    "GatewayConfig",
    "TransportConfig",
    # Models
    "ServiceEndpoint",
]
