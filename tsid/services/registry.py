"""
Process-wide shared TSID factory.

For single-producer applications that want one factory configured at the entry
point and reached from anywhere. Libraries and services running several
producers should create and pass around their own TsidFactory instances.

Lifecycle:
    configure() -> instance()/current() ... -> reset() -> configure() ...

All operations share one lock, so concurrent first callers of instance() see
the same factory.
"""

import logging
import threading
from typing import Optional

from tsid.core.config import FactoryConfig, Settings, resolve_config, settings_source
from tsid.core.exceptions import AlreadyInitializedError, NotInitializedError
from tsid.services.factory import TsidFactory
from tsid.services.logger import set_level

logger = logging.getLogger("tsid.registry")

_factory: Optional[TsidFactory] = None
_lock = threading.Lock()


def _factory_options(settings: Settings) -> dict:
    return {
        "on_exhausted": settings.TSID_ON_EXHAUSTED,
        "on_clock_regression": settings.TSID_ON_CLOCK_REGRESSION,
        "random_start": settings.TSID_RANDOM_START,
    }


def configure(config: Optional[FactoryConfig] = None, **factory_kwargs) -> TsidFactory:
    """Creates the shared factory.

    Args:
        config: Resolved node and epoch. Resolved from the environment when omitted.
        **factory_kwargs: Passed to TsidFactory, overriding the settings.

    Raises:
        AlreadyInitializedError: If the shared factory already exists.
    """
    global _factory
    with _lock:
        if _factory is not None:
            raise AlreadyInitializedError(
                "Shared TSID factory is already configured. Call reset() first."
            )
        _factory = _build(config, factory_kwargs)
        logger.info("Shared TSID factory configured: %r", _factory)
        return _factory


def instance() -> TsidFactory:
    """Returns the shared factory, creating it from the environment on first use."""
    global _factory
    factory = _factory
    if factory is not None:
        return factory
    with _lock:
        if _factory is None:
            _factory = _build(None, {})
            logger.info("Shared TSID factory created on first use: %r", _factory)
        return _factory


def current() -> TsidFactory:
    """Returns the shared factory.

    Raises:
        NotInitializedError: If the shared factory has not been created.
    """
    factory = _factory
    if factory is None:
        raise NotInitializedError("Shared TSID factory is not configured.")
    return factory


def reset():
    """Drops the shared factory so it can be configured again."""
    global _factory
    with _lock:
        if _factory is not None:
            logger.info("Shared TSID factory reset: %r", _factory)
        _factory = None


def is_initialized() -> bool:
    return _factory is not None


def _build(config: Optional[FactoryConfig], factory_kwargs: dict) -> TsidFactory:
    settings = Settings()
    set_level(settings.TSID_LOG_LEVEL)
    if config is None:
        config = resolve_config(settings_source(settings))
    options = _factory_options(settings)
    options.update(factory_kwargs)
    return TsidFactory.from_config(config, **options)
