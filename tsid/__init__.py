"""Time-sorted 64-bit identifiers (TSIDs) and a thread-safe factory for them."""

from tsid.core.config import FactoryConfig, Settings, resolve_config
from tsid.core.exceptions import (
    AlreadyInitializedError,
    ClockRegressionError,
    InvalidCharacterError,
    InvalidLengthError,
    NotInitializedError,
    OutOfRangeError,
    SequenceExhaustedError,
    TsidError,
)
from tsid.core.identifier import Tsid
from tsid.services import registry
from tsid.services.factory import ClockRegressionPolicy, ExhaustionPolicy, TsidFactory

__version__ = "1.0.0"

__all__ = [
    "AlreadyInitializedError",
    "ClockRegressionError",
    "ClockRegressionPolicy",
    "ExhaustionPolicy",
    "FactoryConfig",
    "InvalidCharacterError",
    "InvalidLengthError",
    "NotInitializedError",
    "OutOfRangeError",
    "SequenceExhaustedError",
    "Settings",
    "Tsid",
    "TsidError",
    "TsidFactory",
    "registry",
    "resolve_config",
]
