"""
AFIP gateway configuration types
Environments, the service endpoint table, and the legacy TLS parameters
"""

import ssl
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from pydantic import BaseModel, Field, field_validator


class Environment(str, Enum):
    """AFIP environment types"""
    PRODUCTION = "production"
    SANDBOX = "sandbox"


# WSDL endpoints per environment. Sandbox is AFIP's "homologacion" stack.
DEFAULT_ENDPOINTS: Dict[Environment, Dict[str, str]] = {
    Environment.PRODUCTION: {
        "wsaa": "https://wsaa.afip.gov.ar/ws/services/LoginCms?wsdl",
        "wsfe": "https://servicios1.afip.gov.ar/wsfev1/service.asmx?WSDL",
        "ws_sr_constancia_inscripcion": "https://aws.afip.gov.ar/sr-padron/webservices/personaServiceA5?WSDL",
        "ws_sr_padron_a13": "https://aws.afip.gov.ar/sr-padron/webservices/personaServiceA13?WSDL",
    },
    Environment.SANDBOX: {
        "wsaa": "https://wsaahomo.afip.gov.ar/ws/services/LoginCms?wsdl",
        "wsfe": "https://wswhomo.afip.gov.ar/wsfev1/service.asmx?WSDL",
        "ws_sr_constancia_inscripcion": "https://awshomo.afip.gov.ar/sr-padron/webservices/personaServiceA5?WSDL",
        "ws_sr_padron_a13": "https://awshomo.afip.gov.ar/sr-padron/webservices/personaServiceA13?WSDL",
    },
}


class ConfigDefaults:
    """Default configuration values"""
    ENVIRONMENT = Environment.SANDBOX


# Environment variable mapping
ENV_VAR_MAPPING = {
    "AFIP_ENVIRONMENT": "environment",
    "AFIP_ENDPOINTS": "endpoints",
}


@dataclass(frozen=True)
class TransportConfig:
    """
    TLS parameters for the shared gateway transport

    Attributes:
        minimum_version: Lowest TLS protocol version offered
        cipher_suites: OpenSSL names of the only suites offered (TLS <= 1.2)
        security_level: OpenSSL security level; 0 is required to
            negotiate TLS 1.0 with SHA-1 suites on OpenSSL 3
    """
    minimum_version: ssl.TLSVersion
    cipher_suites: Tuple[str, ...]
    security_level: int

    def cipher_string(self) -> str:
        """Build the OpenSSL cipher list string"""
        return ":".join(self.cipher_suites) + f":@SECLEVEL={self.security_level}"


# The AFIP legacy servers only complete a handshake with TLS 1.0 and
# TLS_RSA_WITH_AES_128_CBC_SHA. Do not replace with library defaults.
AFIP_LEGACY_TLS = TransportConfig(
    minimum_version=ssl.TLSVersion.TLSv1,
    cipher_suites=("AES128-SHA",),
    security_level=0,
)


class GatewayConfig(BaseModel):
    """
    Main gateway configuration class
    Selects the environment and the endpoint table used by the registry
    """

    environment: Environment = Field(
        default=ConfigDefaults.ENVIRONMENT,
        description="Environment: 'production' or 'sandbox'"
    )
    endpoints: Dict[Environment, Dict[str, str]] = Field(
        default_factory=lambda: {
            env: dict(services) for env, services in DEFAULT_ENDPOINTS.items()
        },
        description="Service name to WSDL URL, per environment"
    )

    model_config = {
        "str_strip_whitespace": True,
        "validate_assignment": True,
    }

    @field_validator("endpoints")
    @classmethod
    def validate_endpoints(
        cls, v: Dict[Environment, Dict[str, str]]
    ) -> Dict[Environment, Dict[str, str]]:
        """Validate every endpoint is an HTTP/HTTPS URL"""
        for env, services in v.items():
            for service_name, url in services.items():
                if not service_name:
                    raise ValueError(f"empty service name in {env.value} endpoints")
                if not url.startswith(("http://", "https://")):
                    raise ValueError(
                        f"endpoint for {service_name} ({env.value}) "
                        "must be a valid HTTP/HTTPS URL"
                    )
        return v
