"""
Transport registry
Maps logical AFIP service names to endpoints and one shared HTTP client
"""

import logging
import threading
from typing import Callable, Dict, Mapping, Optional, Union

import requests

from afip_auth.client.transport import build_session
from afip_auth.config.config_loader import ConfigLoader
from afip_auth.config.gateway_config import (
    AFIP_LEGACY_TLS,
    Environment,
    GatewayConfig,
    TransportConfig,
)
from afip_auth.exceptions import AfipError, TransportInitError, UnknownServiceError
from afip_auth.models.endpoint import ServiceEndpoint


# Logger for this module
logger = logging.getLogger(__name__)


# Session factory type
SessionFactory = Callable[
    [Mapping[Environment, Mapping[str, str]], TransportConfig],
    requests.Session,
]

EnvironmentLike = Union[Environment, str, None]


class TransportRegistry:
    """
    Registry of AFIP services sharing one legacy-TLS HTTP client

    The client is built on the first successful lookup and reused for the
    lifetime of the registry. Concurrent first callers block until it is
    built and all receive the same instance. A failed build is remembered
    and re-raised; it is not retried.

    Example:
        >>> registry = TransportRegistry()
        >>> session = registry.resolve('wsaa', Environment.PRODUCTION)
        >>> wsdl = registry.get_endpoint('wsaa')
    """

    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        transport_config: TransportConfig = AFIP_LEGACY_TLS,
        session_factory: Optional[SessionFactory] = None,
    ) -> None:
        """
        Create a new registry

        Args:
            config: Gateway configuration (environment and endpoint table)
            transport_config: TLS parameters for the shared client
            session_factory: Builds the shared client; defaults to build_session
        """
        self.config = config or GatewayConfig()
        self._transport_config = transport_config
        self._session_factory = session_factory or build_session

        self._client: Optional[requests.Session] = None
        self._init_error: Optional[AfipError] = None
        self._init_lock = threading.Lock()

        self._cache: Dict[str, str] = {}
        self._cache_lock = threading.Lock()

    def lookup(
        self,
        service_name: str,
        environment: EnvironmentLike = None,
    ) -> ServiceEndpoint:
        """
        Find the endpoint for a service without touching the client or cache

        Raises:
            UnknownServiceError: If no endpoint is configured for the pair
        """
        env = self._coerce_environment(service_name, environment)
        url = self.config.endpoints.get(env, {}).get(service_name)

        if url is None:
            raise UnknownServiceError(service_name, env)

        return ServiceEndpoint(service_name=service_name, environment=env, url=url)

    def resolve(
        self,
        service_name: str,
        environment: EnvironmentLike = None,
    ) -> requests.Session:
        """
        Resolve a service and return the shared HTTP client

        Args:
            service_name: Logical service name, e.g. 'wsaa' or 'wsfe'
            environment: Environment or its value; defaults to the configured one

        Returns:
            The shared requests session

        Raises:
            UnknownServiceError: If the service is not in the endpoint table
            EndpointTableError: If the shared client cannot be built from the table
            TlsConfigError: If the TLS parameters are rejected
            TransportInitError: If the shared client cannot be built
        """
        endpoint = self.lookup(service_name, environment)
        client = self._get_or_create_client()

        with self._cache_lock:
            self._cache[service_name] = endpoint.url

        return client

    def get_endpoint(self, service_name: str) -> Optional[str]:
        """Get the last resolved endpoint URL for a service name"""
        with self._cache_lock:
            return self._cache.get(service_name)

    @property
    def resolved_endpoints(self) -> Dict[str, str]:
        """Snapshot of the resolved endpoint cache"""
        with self._cache_lock:
            return dict(self._cache)

    @property
    def is_initialized(self) -> bool:
        """Whether the shared client has been built"""
        return self._client is not None

    # Private methods

    def _get_or_create_client(self) -> requests.Session:
        """Build the shared client exactly once"""
        client = self._client
        if client is not None:
            return client

        with self._init_lock:
            if self._client is not None:
                return self._client

            if self._init_error is not None:
                raise self._init_error

            try:
                self._client = self._session_factory(
                    self.config.endpoints, self._transport_config
                )
            except AfipError as e:
                self._init_error = e
                raise
            except Exception as e:
                self._init_error = TransportInitError(
                    f"Failed to construct HTTP transport: {e}",
                    cause=e
                )
                raise self._init_error from e

            logger.info(
                f"Shared AFIP transport initialized "
                f"(min TLS {self._transport_config.minimum_version.name}, "
                f"ciphers {':'.join(self._transport_config.cipher_suites)})"
            )
            return self._client

    def _coerce_environment(
        self, service_name: str, environment: EnvironmentLike
    ) -> Environment:
        """Map None/str/Environment to an Environment"""
        if environment is None:
            return self.config.environment
        if isinstance(environment, Environment):
            return environment
        try:
            return Environment(str(environment).lower())
        except ValueError:
            raise UnknownServiceError(service_name, environment) from None


# Process-wide registry
_registry: Optional[TransportRegistry] = None
_registry_lock = threading.Lock()


def get_registry(config: Optional[GatewayConfig] = None) -> TransportRegistry:
    """
    Get the process-wide registry, creating it on first call

    ``config`` is only used by the call that creates the registry; when it is
    omitted the configuration is loaded from the environment.
    """
    global _registry

    registry = _registry
    if registry is not None:
        return registry

    with _registry_lock:
        if _registry is None:
            _registry = TransportRegistry(config or ConfigLoader().load())
        return _registry


def get_client(service_name: str, sandbox: bool = False) -> requests.Session:
    """
    Resolve a service on the process-wide registry

    Args:
        service_name: Logical service name
        sandbox: Use the sandbox (homologacion) endpoints

    Returns:
        The shared requests session
    """
    environment = Environment.SANDBOX if sandbox else Environment.PRODUCTION
    return get_registry().resolve(service_name, environment)
