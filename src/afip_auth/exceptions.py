"""Exception classes for the AFIP auth toolkit"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class AfipErrorCategory(str, Enum):
    """Error category codes"""
    FORMAT = "FORMAT"
    CRYPTO = "CRYPTO"
    LOOKUP = "LOOKUP"
    TRANSPORT = "TRANSPORT"
    CONFIG = "CONFIG"
    GATEWAY = "GATEWAY"
    UNKNOWN = "UNKNOWN"


class AfipError(Exception):
    """
    Base exception for the toolkit

    All errors raised by the package extend from this class.
    Provides consistent error handling and categorization.
    """

    default_code: Optional[str] = None

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code or self.default_code
        self.cause = cause
        self.details = details
        self.timestamp = datetime.now(timezone.utc)
        self.category = self._determine_category(self.code)

    def _determine_category(self, code: Optional[str]) -> AfipErrorCategory:
        """Determine error category from code"""
        if not code:
            return AfipErrorCategory.UNKNOWN

        for category in AfipErrorCategory:
            if code.startswith(category.value):
                return category

        return AfipErrorCategory.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary"""
        return {
            "name": self.__class__.__name__,
            "message": str(self),
            "code": self.code,
            "category": self.category.value,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
        }

    def has_code(self, code: str) -> bool:
        """Check if error has a specific code"""
        return self.code == code

    def is_category(self, category: AfipErrorCategory) -> bool:
        """Check if error belongs to a category"""
        return self.category == category

    def get_description(self) -> str:
        """Get human-readable error description"""
        parts = [str(self)]

        if self.code:
            parts.insert(0, f"[{self.code}]")

        if self.cause is not None:
            parts.append(f"(caused by {type(self.cause).__name__})")

        return " ".join(parts)


# Cryptographic construction errors

class KeyGenerationError(AfipError):
    """RSA key generation failed"""
    default_code = "CRYPTO01"


class KeyStorageError(AfipError):
    """Reading or writing key/CSR files failed"""
    default_code = "CRYPTO02"


class CSRGenerationError(AfipError):
    """Certificate signing request construction or signing failed"""
    default_code = "CRYPTO03"


class EnvelopeInitError(AfipError):
    """CMS signed-data structure could not be initialized"""
    default_code = "CRYPTO04"


class SignerAttachError(AfipError):
    """Certificate and key could not be attached as signer"""
    default_code = "CRYPTO05"


class EnvelopeFinalizeError(AfipError):
    """CMS signed-data structure could not be serialized"""
    default_code = "CRYPTO06"


# Caller input errors

class InvalidKeyFormatError(AfipError):
    """Private key PEM block missing or labelled with an unsupported type"""
    default_code = "FORMAT01"


class KeyParseError(AfipError):
    """Private key bytes are not a valid RSA private key"""
    default_code = "FORMAT02"


class InvalidCertificateFormatError(AfipError):
    """Certificate PEM block missing or not labelled CERTIFICATE"""
    default_code = "FORMAT03"


class CertificateParseError(AfipError):
    """Certificate bytes are not a valid X.509 certificate"""
    default_code = "FORMAT04"


class UnknownServiceError(AfipError):
    """No endpoint configured for a (service, environment) pair"""
    default_code = "LOOKUP01"

    def __init__(self, service_name: str, environment: Any) -> None:
        env_value = getattr(environment, "value", environment)
        super().__init__(
            f"Unknown service name: {service_name} (environment: {env_value})",
            details={"service_name": service_name, "environment": env_value},
        )
        self.service_name = service_name
        self.environment = environment


# Transport initialization errors

class EndpointTableError(AfipError):
    """Endpoint URL table is misconfigured"""
    default_code = "TRANSPORT01"


class TlsConfigError(AfipError):
    """Legacy TLS parameters rejected by the local SSL library"""
    default_code = "TRANSPORT02"


class TransportInitError(AfipError):
    """Shared HTTP transport could not be constructed"""
    default_code = "TRANSPORT03"


class ConfigError(AfipError):
    """Configuration error"""
    default_code = "CONFIG01"


class GatewayResponseError(AfipError):
    """Gateway returned an error list in its response"""
    default_code = "GATEWAY01"

    def __init__(self, errors: List[Any]) -> None:
        super().__init__(f"AFIP exception: {errors}", details={"errors": list(errors)})
        self.errors = list(errors)
