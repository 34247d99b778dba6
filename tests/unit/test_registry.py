"""
Transport Registry Unit Tests
"""

import threading
import time
from typing import List

import pytest
import requests

from afip_auth.client import TransportRegistry, get_client, get_registry
from afip_auth.client import registry as registry_module
from afip_auth.config import AFIP_LEGACY_TLS, DEFAULT_ENDPOINTS, Environment, GatewayConfig
from afip_auth.exceptions import TlsConfigError, TransportInitError, UnknownServiceError
from afip_auth.models import ServiceEndpoint


class CountingFactory:
    """Session factory that records how often it builds"""

    def __init__(self, delay: float = 0.0) -> None:
        self.calls = 0
        self.delay = delay
        self.sessions: List[requests.Session] = []
        self._lock = threading.Lock()

    def __call__(self, endpoints, transport_config) -> requests.Session:
        with self._lock:
            self.calls += 1
        time.sleep(self.delay)
        session = requests.Session()
        self.sessions.append(session)
        return session


class TestTransportRegistry:
    """Tests for TransportRegistry"""

    @pytest.fixture
    def factory(self) -> CountingFactory:
        return CountingFactory()

    @pytest.fixture
    def registry(self, factory: CountingFactory) -> TransportRegistry:
        return TransportRegistry(session_factory=factory)

    def test_concurrent_cold_resolution_builds_once(self):
        """Concurrent first callers should share one transport"""
        factory = CountingFactory(delay=0.05)
        registry = TransportRegistry(session_factory=factory)
        thread_count = 16
        barrier = threading.Barrier(thread_count)
        results: List[requests.Session] = []
        errors: List[BaseException] = []
        results_lock = threading.Lock()

        def worker():
            barrier.wait()
            try:
                client = registry.resolve("wsfe", Environment.PRODUCTION)
            except BaseException as e:
                with results_lock:
                    errors.append(e)
                return
            with results_lock:
                results.append(client)

        threads = [threading.Thread(target=worker) for _ in range(thread_count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert factory.calls == 1
        assert len(results) == thread_count
        assert all(client is factory.sessions[0] for client in results)

    def test_unknown_service(self, registry: TransportRegistry, factory: CountingFactory):
        """Should raise UnknownServiceError and leave the cache untouched"""
        with pytest.raises(UnknownServiceError) as exc_info:
            registry.resolve("not_a_real_service", Environment.SANDBOX)

        assert exc_info.value.service_name == "not_a_real_service"
        assert registry.resolved_endpoints == {}
        assert factory.calls == 0
        assert registry.is_initialized is False

    def test_unknown_environment(self, registry: TransportRegistry):
        """Should raise UnknownServiceError for an unknown environment value"""
        with pytest.raises(UnknownServiceError):
            registry.resolve("wsaa", "staging")

        assert registry.resolved_endpoints == {}

    def test_idempotent_resolution(self, registry: TransportRegistry, factory: CountingFactory):
        """Repeated resolution should keep returning the configured URL"""
        expected = DEFAULT_ENDPOINTS[Environment.PRODUCTION]["wsaa"]
        clients = set()

        for _ in range(5):
            clients.add(id(registry.resolve("wsaa", Environment.PRODUCTION)))
            assert registry.get_endpoint("wsaa") == expected

        assert len(clients) == 1
        assert factory.calls == 1

    def test_accepts_environment_string(self, registry: TransportRegistry):
        """Should accept the environment value as a string"""
        registry.resolve("wsfe", "sandbox")
        assert registry.get_endpoint("wsfe") == DEFAULT_ENDPOINTS[Environment.SANDBOX]["wsfe"]

    def test_defaults_to_configured_environment(self, factory: CountingFactory):
        """Should use the configured environment when none is given"""
        registry = TransportRegistry(
            GatewayConfig(environment=Environment.PRODUCTION), session_factory=factory
        )
        registry.resolve("ws_sr_padron_a13")

        assert registry.get_endpoint("ws_sr_padron_a13") == (
            DEFAULT_ENDPOINTS[Environment.PRODUCTION]["ws_sr_padron_a13"]
        )

    def test_last_writer_wins(self, registry: TransportRegistry):
        """Later resolution of the same name should overwrite the cache"""
        registry.resolve("wsaa", Environment.PRODUCTION)
        registry.resolve("wsaa", Environment.SANDBOX)

        assert registry.get_endpoint("wsaa") == DEFAULT_ENDPOINTS[Environment.SANDBOX]["wsaa"]

    def test_concurrent_resolution_of_distinct_services(self, registry: TransportRegistry):
        """Concurrent cache writes should not lose entries"""
        services = list(DEFAULT_ENDPOINTS[Environment.SANDBOX])
        barrier = threading.Barrier(len(services) * 4)

        def worker(name: str):
            barrier.wait()
            registry.resolve(name, Environment.SANDBOX)

        threads = [
            threading.Thread(target=worker, args=(name,))
            for name in services
            for _ in range(4)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert registry.resolved_endpoints == DEFAULT_ENDPOINTS[Environment.SANDBOX]

    def test_lookup_does_not_initialize(self, registry: TransportRegistry, factory: CountingFactory):
        """lookup should not build the transport or fill the cache"""
        endpoint = registry.lookup("wsaa", Environment.SANDBOX)

        assert endpoint == ServiceEndpoint(
            service_name="wsaa",
            environment=Environment.SANDBOX,
            url=DEFAULT_ENDPOINTS[Environment.SANDBOX]["wsaa"],
        )
        assert factory.calls == 0
        assert registry.get_endpoint("wsaa") is None

    def test_factory_receives_table_and_tls(self):
        """Factory should be handed the endpoint table and TLS parameters"""
        seen = {}

        def factory(endpoints, transport_config):
            seen["endpoints"] = endpoints
            seen["tls"] = transport_config
            return requests.Session()

        registry = TransportRegistry(session_factory=factory)
        registry.resolve("wsaa", Environment.SANDBOX)

        assert seen["endpoints"] == registry.config.endpoints
        assert seen["tls"] is AFIP_LEGACY_TLS

    def test_init_failure_is_sticky(self):
        """A failed build should be re-raised without retrying"""
        calls = []

        def factory(endpoints, transport_config):
            calls.append(1)
            raise TlsConfigError("rejected")

        registry = TransportRegistry(session_factory=factory)

        with pytest.raises(TlsConfigError) as first:
            registry.resolve("wsaa", Environment.SANDBOX)
        with pytest.raises(TlsConfigError) as second:
            registry.resolve("wsfe", Environment.SANDBOX)

        assert first.value is second.value
        assert len(calls) == 1
        assert registry.resolved_endpoints == {}

    def test_unexpected_failure_wrapped(self):
        """Non-toolkit exceptions should surface as TransportInitError"""
        def factory(endpoints, transport_config):
            raise RuntimeError("boom")

        registry = TransportRegistry(session_factory=factory)

        with pytest.raises(TransportInitError) as exc_info:
            registry.resolve("wsaa", Environment.SANDBOX)

        assert isinstance(exc_info.value.cause, RuntimeError)

    def test_default_factory_builds_legacy_session(self):
        """Without a factory the registry should mount the legacy adapter"""
        from afip_auth.client import LegacyTlsAdapter

        registry = TransportRegistry()
        try:
            client = registry.resolve("wsaa", Environment.PRODUCTION)
        except TlsConfigError as e:
            pytest.skip(f"local OpenSSL cannot offer the legacy suite: {e}")

        adapter = client.get_adapter(DEFAULT_ENDPOINTS[Environment.PRODUCTION]["wsaa"])
        assert isinstance(adapter, LegacyTlsAdapter)


class TestProcessRegistry:
    """Tests for get_registry and get_client"""

    @pytest.fixture(autouse=True)
    def fresh_registry(self, monkeypatch):
        monkeypatch.setattr(registry_module, "_registry", None)

    def test_get_registry_returns_same_instance(self):
        """Should create the registry once"""
        first = get_registry(GatewayConfig())
        second = get_registry(GatewayConfig(environment=Environment.PRODUCTION))

        assert first is second
        assert first.config.environment == Environment.SANDBOX

    def test_get_registry_concurrent(self):
        """Concurrent first calls should observe one registry"""
        barrier = threading.Barrier(8)
        seen = []
        lock = threading.Lock()

        def worker():
            barrier.wait()
            registry = get_registry(GatewayConfig())
            with lock:
                seen.append(registry)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len({id(r) for r in seen}) == 1

    def test_get_registry_loads_environment(self, monkeypatch):
        """Should load configuration from the environment when none is given"""
        monkeypatch.setenv("AFIP_ENVIRONMENT", "production")

        assert get_registry().config.environment == Environment.PRODUCTION

    def test_get_client(self, monkeypatch):
        """Should resolve through the process-wide registry"""
        factory = CountingFactory()
        monkeypatch.setattr(
            registry_module, "_registry", TransportRegistry(session_factory=factory)
        )

        client = get_client("wsaa", sandbox=True)

        assert client is factory.sessions[0]
        assert get_registry().get_endpoint("wsaa") == DEFAULT_ENDPOINTS[Environment.SANDBOX]["wsaa"]

        get_client("wsaa")
        assert get_registry().get_endpoint("wsaa") == DEFAULT_ENDPOINTS[Environment.PRODUCTION]["wsaa"]
        assert factory.calls == 1
