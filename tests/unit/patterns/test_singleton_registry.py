"""Tests for the lazy singleton registry."""

import threading
from unittest.mock import Mock

import pytest

from helpers import initialized_events, run_concurrently
from lazysingleton.config.schemas import FailurePolicy, RegistryConfig
from lazysingleton.domain.exceptions import (
    AlreadyInitializedError,
    ConstructionFailedError,
    RegistryClosedError,
    SingletonPoisonedError,
    UnregisteredSingletonError,
)
from lazysingleton.infrastructure.patterns.singleton_registry import (
    LazySingletonRegistry,
    get_registry,
    reset_registry,
)


class MetricsClient:
    created = 0

    def __init__(self, endpoint: str = "localhost"):
        MetricsClient.created += 1
        self.endpoint = endpoint
        self.closed = False

    def close(self):
        self.closed = True


class TestLazySingletonRegistry:
    """Test registration and resolution."""

    def setup_method(self):
        MetricsClient.created = 0
        self.registry = LazySingletonRegistry()

    def teardown_method(self):
        self.registry.close()

    def test_registration_is_lazy(self):
        factory = Mock(return_value="cache")
        self.registry.register("cache", factory)

        assert self.registry.is_registered("cache")
        assert not self.registry.is_populated("cache")
        factory.assert_not_called()

        assert self.registry.get("cache") == "cache"
        assert self.registry.is_populated("cache")
        factory.assert_called_once_with()

    def test_string_key_requires_factory(self):
        with pytest.raises(TypeError, match="A factory is required"):
            self.registry.register("cache")

    def test_unregistered_name_raises(self):
        self.registry.register("cache", Mock())

        with pytest.raises(UnregisteredSingletonError) as exc_info:
            self.registry.get("database")

        assert exc_info.value.details["available"] == ["cache"]

    def test_classes_are_auto_registered(self):
        client = self.registry.get(MetricsClient, endpoint="metrics:9000")

        assert self.registry.is_registered(MetricsClient)
        assert self.registry.get(MetricsClient) is client
        assert client.endpoint == "metrics:9000"
        assert MetricsClient.created == 1

    def test_register_class_without_factory(self):
        holder = self.registry.register(MetricsClient)

        assert holder.name.endswith("MetricsClient")
        assert isinstance(self.registry.get(MetricsClient), MetricsClient)

    def test_reregister_before_population_replaces_factory(self):
        self.registry.register("cache", Mock(return_value="old"))
        self.registry.register("cache", Mock(return_value="new"))

        assert self.registry.get("cache") == "new"

    def test_reregister_after_population_rejected(self):
        self.registry.register("cache", Mock(return_value="old"))
        original = self.registry.get("cache")

        with pytest.raises(AlreadyInitializedError):
            self.registry.register("cache", Mock(return_value="new"))

        assert self.registry.get("cache") is original

    def test_ensure_constructible(self):
        self.registry.ensure_constructible(MetricsClient)
        self.registry.get(MetricsClient)

        with pytest.raises(AlreadyInitializedError):
            self.registry.ensure_constructible(MetricsClient)

    def test_peek_does_not_construct(self):
        self.registry.register(MetricsClient)

        assert self.registry.peek(MetricsClient) is None
        assert self.registry.peek("unknown") is None
        assert MetricsClient.created == 0

    def test_registered_keys_and_describe(self):
        self.registry.register("cache", Mock(return_value="cache"))
        self.registry.register(MetricsClient, failure_policy=FailurePolicy.FAIL_FAST)
        self.registry.get("cache")

        assert set(self.registry.registered_keys()) == {"cache", MetricsClient}
        summary = {entry["name"]: entry for entry in self.registry.describe()}
        assert summary["cache"]["state"] == "populated"
        metrics_name = next(name for name in summary if name.endswith("MetricsClient"))
        assert summary[metrics_name]["state"] == "empty"
        assert summary[metrics_name]["failure_policy"] == "fail_fast"

    def test_registry_failure_policy_applies_to_holders(self):
        registry = LazySingletonRegistry(RegistryConfig(failure_policy=FailurePolicy.FAIL_FAST))
        registry.register("db", Mock(side_effect=OSError("down")))

        with pytest.raises(ConstructionFailedError):
            registry.get("db")
        with pytest.raises(SingletonPoisonedError):
            registry.get("db")

    def test_per_registration_policy_overrides_registry(self):
        factory = Mock(side_effect=[OSError("down"), "db"])
        registry = LazySingletonRegistry(RegistryConfig(failure_policy=FailurePolicy.FAIL_FAST))
        registry.register("db", factory, failure_policy=FailurePolicy.RETRY)

        with pytest.raises(ConstructionFailedError):
            registry.get("db")
        assert registry.get("db") == "db"

    def test_factory_can_resolve_other_singletons(self):
        self.registry.register("config", Mock(return_value={"endpoint": "metrics:9000"}))
        self.registry.register(
            "metrics", lambda: MetricsClient(self.registry.get("config")["endpoint"])
        )

        assert self.registry.get("metrics").endpoint == "metrics:9000"

    def test_separate_registries_are_isolated(self):
        other = LazySingletonRegistry()

        assert self.registry.get(MetricsClient) is not other.get(MetricsClient)
        assert MetricsClient.created == 2


class TestLazySingletonRegistryLifecycle:
    """Test registry teardown."""

    def test_close_closes_instances_in_reverse_population_order(self):
        registry = LazySingletonRegistry()
        closed = []

        for name in ("first", "second", "third"):
            resource = Mock()
            resource.close.side_effect = lambda name=name: closed.append(name)
            registry.register(name, Mock(return_value=resource))

        registry.get("second")
        registry.get("first")
        registry.get("third")
        registry.close()

        assert closed == ["third", "first", "second"]

    def test_close_skips_unpopulated_and_closeless_instances(self):
        registry = LazySingletonRegistry()
        never_built = Mock()
        registry.register("lazy", Mock(return_value=never_built))
        registry.register("plain", Mock(return_value=42))
        registry.get("plain")

        registry.close()

        never_built.close.assert_not_called()

    def test_close_failure_does_not_stop_teardown(self, caplog):
        registry = LazySingletonRegistry()
        broken = Mock()
        broken.close.side_effect = RuntimeError("close failed")
        healthy = Mock()
        registry.register("healthy", Mock(return_value=healthy))
        registry.register("broken", Mock(return_value=broken))
        registry.get("healthy")
        registry.get("broken")

        registry.close()

        healthy.close.assert_called_once_with()
        assert any(
            isinstance(record.msg, dict) and record.msg.get("event") == "Failed to close singleton"
            for record in caplog.records
        )

    def test_close_reports_only_successful_closes(self, info_caplog):
        registry = LazySingletonRegistry()
        broken = Mock()
        broken.close.side_effect = RuntimeError("close failed")
        registry.register("healthy", Mock(return_value=Mock()))
        registry.register("broken", Mock(return_value=broken))
        registry.register("plain", Mock(return_value=42))
        for name in ("healthy", "broken", "plain"):
            registry.get(name)

        registry.close()

        summaries = [
            record.msg
            for record in info_caplog.records
            if isinstance(record.msg, dict) and record.msg.get("event") == "Singleton registry closed"
        ]
        assert len(summaries) == 1
        assert summaries[0]["closed_count"] == 1
        assert summaries[0]["populated_count"] == 3

    def test_instance_populated_during_close_is_closed(self):
        registry = LazySingletonRegistry()
        resource = Mock()
        started = threading.Event()
        release = threading.Event()

        def slow_factory():
            started.set()
            release.wait(timeout=5)
            return resource

        registry.register("slow", slow_factory)
        worker = threading.Thread(target=registry.get, args=("slow",))
        worker.start()
        assert started.wait(timeout=5)

        registry.close()
        resource.close.assert_not_called()

        release.set()
        worker.join()
        resource.close.assert_called_once_with()

    def test_closed_registry_rejects_use(self):
        registry = LazySingletonRegistry()
        registry.register("cache", Mock(return_value="cache"))
        registry.close()

        assert registry.closed
        with pytest.raises(RegistryClosedError):
            registry.get("cache")
        with pytest.raises(RegistryClosedError):
            registry.register("other", Mock())

    def test_close_is_idempotent(self):
        registry = LazySingletonRegistry()
        resource = Mock()
        registry.register("resource", Mock(return_value=resource))
        registry.get("resource")

        registry.close()
        registry.close()

        resource.close.assert_called_once_with()

    def test_context_manager_closes(self):
        with LazySingletonRegistry() as registry:
            client = registry.get(MetricsClient)

        assert client.closed
        assert registry.closed


class TestProcessRegistry:
    """Test the process-scoped registry accessor."""

    def test_get_registry_returns_same_registry(self):
        assert get_registry() is get_registry()

    def test_concurrent_get_registry_creates_one(self):
        registries = run_concurrently(get_registry, 20)
        assert all(registry is registries[0] for registry in registries)

    def test_reset_registry_closes_and_replaces(self):
        registry = get_registry()
        client = registry.get(MetricsClient)

        reset_registry()

        assert registry.closed
        assert client.closed
        assert get_registry() is not registry

    def test_process_registry_uses_configuration(self, monkeypatch):
        monkeypatch.setenv("LAZYSINGLETON_REGISTRY__FAILURE_POLICY", "fail_fast")
        reset_registry()

        assert get_registry().config.failure_policy is FailurePolicy.FAIL_FAST


@pytest.mark.concurrency
class TestLazySingletonRegistryConcurrency:
    """Test concurrent access through the registry."""

    def setup_method(self):
        MetricsClient.created = 0

    def test_fifty_concurrent_callers(self, info_caplog):
        registry = LazySingletonRegistry()

        results = run_concurrently(lambda: registry.get(MetricsClient), 50)

        assert MetricsClient.created == 1
        assert all(result is results[0] for result in results)
        assert len(initialized_events(info_caplog)) == 1

    def test_concurrent_auto_registration_creates_one_holder(self):
        registry = LazySingletonRegistry()

        holders = run_concurrently(lambda: registry.holder(MetricsClient), 30)

        assert all(holder is holders[0] for holder in holders)

    def test_independent_singletons_populate_concurrently(self):
        registry = LazySingletonRegistry()
        started = threading.Event()
        release = threading.Event()

        def slow_factory():
            started.set()
            release.wait(timeout=5)
            return "slow"

        registry.register("slow", slow_factory)
        registry.register("fast", Mock(return_value="fast"))

        worker = threading.Thread(target=registry.get, args=("slow",))
        worker.start()
        assert started.wait(timeout=5)

        # Another holder's construction must not block this one.
        assert registry.get("fast") == "fast"

        release.set()
        worker.join()
        assert registry.get("slow") == "slow"
