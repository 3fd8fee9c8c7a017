"""Unit tests for the process-wide shared factory."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

import tsid
from tsid.core.config import FactoryConfig
from tsid.core.exceptions import AlreadyInitializedError, NotInitializedError
from tsid.services import registry
from tsid.services.factory import ClockRegressionPolicy, ExhaustionPolicy, TsidFactory


class TestLifecycle:
    """Tests for configure, current, instance and reset."""

    def test_current_before_configure(self):
        """current() raises before anything is configured."""
        assert registry.is_initialized() is False
        with pytest.raises(NotInitializedError):
            registry.current()

    def test_configure(self):
        """configure() creates the shared factory from a config."""
        factory = registry.configure(FactoryConfig(node=100, epoch=1_000_000))
        assert isinstance(factory, TsidFactory)
        assert registry.current() is factory
        assert registry.instance() is factory
        assert factory.node == 100
        assert factory.epoch == 1_000_000
        assert factory.generate().node == 100

    def test_configure_twice(self):
        """A second configure() without reset() fails loudly."""
        registry.configure(FactoryConfig(node=1, epoch=0))
        with pytest.raises(AlreadyInitializedError):
            registry.configure(FactoryConfig(node=2, epoch=0))
        assert registry.current().node == 1

    def test_configure_after_instance(self):
        """configure() fails after instance() created the factory lazily."""
        registry.instance()
        with pytest.raises(AlreadyInitializedError):
            registry.configure(FactoryConfig(node=2, epoch=0))

    def test_reset_then_configure(self):
        """reset() followed by configure() is always legal."""
        registry.configure(FactoryConfig(node=1, epoch=0))
        registry.reset()
        assert registry.is_initialized() is False
        factory = registry.configure(FactoryConfig(node=2, epoch=0))
        assert registry.current() is factory
        assert factory.node == 2

    def test_reset_without_factory(self):
        """reset() on an empty registry is a no-op."""
        registry.reset()
        assert registry.is_initialized() is False


class TestLazyInstance:
    """Tests for instance() creating the factory on first use."""

    def test_from_environment(self, monkeypatch):
        """The lazy factory reads TSID_NODE and TSID_EPOCH."""
        monkeypatch.setenv("TSID_NODE", "42")
        monkeypatch.setenv("TSID_EPOCH", "1000")
        factory = registry.instance()
        assert factory.node == 42
        assert factory.epoch == 1000
        assert registry.instance() is factory

    def test_derived_default(self):
        """Without configuration the node comes from the thread id."""
        factory = registry.instance()
        assert factory.node == threading.get_native_id() % 1024
        assert factory.epoch == 0

    def test_policies_from_environment(self, monkeypatch):
        """Policies and random start are read from the environment."""
        monkeypatch.setenv("TSID_NODE", "1")
        monkeypatch.setenv("TSID_ON_EXHAUSTED", "fail")
        monkeypatch.setenv("TSID_ON_CLOCK_REGRESSION", "wait")
        monkeypatch.setenv("TSID_RANDOM_START", "1")
        factory = registry.instance()
        assert factory._on_exhausted is ExhaustionPolicy.FAIL
        assert factory._on_clock_regression is ClockRegressionPolicy.WAIT
        assert factory._random_start is True

    def test_keyword_arguments_override_environment(self, monkeypatch):
        """Arguments to configure() beat the environment."""
        monkeypatch.setenv("TSID_ON_EXHAUSTED", "fail")
        factory = registry.configure(
            FactoryConfig(node=1, epoch=0), on_exhausted="wait"
        )
        assert factory._on_exhausted is ExhaustionPolicy.WAIT

    def test_log_level_from_environment(self, monkeypatch):
        """TSID_LOG_LEVEL sets the tsid logger level without the HTTP app."""
        tsid_logger = logging.getLogger("tsid")
        original_level = tsid_logger.level
        monkeypatch.setenv("TSID_NODE", "1")
        monkeypatch.setenv("TSID_LOG_LEVEL", "warning")
        try:
            registry.instance()
            assert tsid_logger.level == logging.WARNING
            assert not logging.getLogger("tsid.factory").isEnabledFor(logging.INFO)
        finally:
            tsid_logger.setLevel(original_level)

    def test_concurrent_first_use(self, monkeypatch):
        """Concurrent first callers all see one factory."""
        monkeypatch.setenv("TSID_NODE", "7")
        thread_count = 32
        start = threading.Barrier(thread_count)

        def first_use():
            start.wait()
            return registry.instance()

        with ThreadPoolExecutor(max_workers=thread_count) as pool:
            factories = list(pool.map(lambda _: first_use(), range(thread_count)))

        assert len({id(factory) for factory in factories}) == 1


class TestPublicSurface:
    """Tests for the package-level exports."""

    def test_registry_exported(self):
        """The registry helpers are reachable from the package."""
        assert tsid.registry is registry
        assert "registry" in tsid.__all__
        factory = tsid.registry.configure(FactoryConfig(node=3, epoch=0))
        assert tsid.registry.current() is factory
