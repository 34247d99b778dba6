"""
HTTP transport for the AFIP web services
Builds the requests session pinned to the gateway's legacy TLS parameters
"""

import logging
import ssl
from typing import Dict, Mapping, Optional
from urllib.parse import urlsplit

import requests
from requests.adapters import HTTPAdapter

from afip_auth.config.gateway_config import AFIP_LEGACY_TLS, Environment, TransportConfig
from afip_auth.exceptions import AfipError, EndpointTableError, TlsConfigError, TransportInitError


# Logger for this module
logger = logging.getLogger(__name__)


def build_ssl_context(transport_config: TransportConfig = AFIP_LEGACY_TLS) -> ssl.SSLContext:
    """
    Create a client SSL context restricted to the given TLS parameters

    Certificate and hostname verification stay enabled.

    Raises:
        TlsConfigError: If the local OpenSSL rejects the version or ciphers
    """
    try:
        ctx = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
        ctx.minimum_version = transport_config.minimum_version
        ctx.set_ciphers(transport_config.cipher_string())
    except (ssl.SSLError, ValueError) as e:
        raise TlsConfigError(
            f"TLS configuration rejected by the local SSL library: {e}",
            cause=e,
            details={
                "minimum_version": transport_config.minimum_version.name,
                "cipher_suites": list(transport_config.cipher_suites),
            }
        ) from e

    return ctx


class LegacyTlsAdapter(HTTPAdapter):
    """
    Transport adapter that hands urllib3 a fixed SSL context

    Every connection pool (direct or proxied) created by this adapter uses
    the legacy TLS context instead of the requests default.
    """

    def __init__(
        self,
        transport_config: TransportConfig = AFIP_LEGACY_TLS,
        **kwargs,
    ) -> None:
        self.transport_config = transport_config
        # Must exist before HTTPAdapter.__init__ calls init_poolmanager
        self.ssl_context = build_ssl_context(transport_config)
        super().__init__(**kwargs)

    def init_poolmanager(self, *args, **kwargs):
        kwargs["ssl_context"] = self.ssl_context
        return super().init_poolmanager(*args, **kwargs)

    def proxy_manager_for(self, *args, **kwargs):
        kwargs["ssl_context"] = self.ssl_context
        return super().proxy_manager_for(*args, **kwargs)


def build_session(
    endpoints: Mapping[Environment, Mapping[str, str]],
    transport_config: Optional[TransportConfig] = None,
) -> requests.Session:
    """
    Build the shared gateway session

    One ``LegacyTlsAdapter`` is mounted for the scheme and host of every
    endpoint in the table.

    Args:
        endpoints: Service table, per environment
        transport_config: TLS parameters (default: AFIP_LEGACY_TLS)

    Raises:
        EndpointTableError: If an endpoint URL has no scheme or host
        TlsConfigError: If the TLS parameters are rejected
        TransportInitError: If the session cannot be built for another reason
    """
    base_urls: Dict[str, str] = {}
    for environment, services in endpoints.items():
        for service_name, url in services.items():
            try:
                parsed = urlsplit(url)
            except (TypeError, ValueError, AttributeError) as e:
                raise EndpointTableError(
                    f"Failed to parse URL for {service_name}: {e}",
                    cause=e,
                    details={"service_name": service_name, "url": url}
                ) from e
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise EndpointTableError(
                    f"Endpoint for {service_name} is not an absolute HTTP/HTTPS URL: {url}",
                    details={"service_name": service_name, "url": url}
                )
            base_urls.setdefault(f"{parsed.scheme}://{parsed.netloc}", service_name)

    try:
        adapter = LegacyTlsAdapter(transport_config or AFIP_LEGACY_TLS)
        session = requests.Session()
        for base_url in sorted(base_urls):
            session.mount(base_url, adapter)
            logger.debug(f"Registered adapter for {base_url}")
    except AfipError:
        raise
    except Exception as e:
        raise TransportInitError(
            f"Failed to construct HTTP transport: {e}",
            cause=e
        ) from e

    return session
