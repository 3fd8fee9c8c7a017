"""
TSID Factory Module

A thread-safe generator of TSIDs, following Twitter's Snowflake algorithm.
Each factory represents one producer: it owns a node number, an epoch offset,
and the mutable pair (last timestamp, sequence) that keeps identifiers unique
and ordered when many are requested within the same millisecond.

Algorithm Overview:
    On every call the factory reads the clock and subtracts its epoch:

    - Same millisecond as the previous id: the sequence is incremented
    - New millisecond: the sequence restarts at 0 (or at a random value when
      `random_start` is enabled)
    - Sequence past 4095: the factory either waits for the next millisecond
      (default) or raises SequenceExhaustedError
    - Clock behind the previous id: the factory either raises
      ClockRegressionError (default) or waits for the clock to catch up

Thread Safety:
    - Uses threading.Lock() around the read-modify-write of the state
    - Two concurrent calls never return the same identifier
    - Waiting is a short spin on the clock, bounded by one millisecond for an
      exhausted sequence

Clock Considerations:
    - The clock is injectable: any zero-argument callable returning integer
      milliseconds since the Unix epoch
    - Identifiers from one factory are strictly increasing under a monotonic
      clock

Node Numbers:
    - A node must be unique among the producers that write to the same table.
      The factory does not coordinate this; two factories with the same node
      may produce the same identifier.
"""

import logging
import secrets
import threading
from enum import Enum
from typing import Callable, Optional, Union

from tsid.core.config import FactoryConfig
from tsid.core.exceptions import (
    ClockRegressionError,
    OutOfRangeError,
    SequenceExhaustedError,
)
from tsid.core.identifier import MAX_NODE, MAX_SEQUENCE, MAX_TIMESTAMP, Tsid
from tsid.utils.clock import current_millis

logger = logging.getLogger("tsid.factory")


class ExhaustionPolicy(str, Enum):
    """What to do when more than 4096 ids are requested in one millisecond."""

    WAIT = "wait"
    FAIL = "fail"


class ClockRegressionPolicy(str, Enum):
    """What to do when the clock reads earlier than the last id's timestamp."""

    WAIT = "wait"
    FAIL = "fail"


class TsidFactory:
    """A thread-safe TSID generator for one producer.

    Attributes:
        node: The node number stamped on every id (0-1023).
        epoch: The epoch offset in milliseconds subtracted from the clock.
    """

    def __init__(
        self,
        node: int,
        epoch: int = 0,
        *,
        clock: Optional[Callable[[], int]] = None,
        on_exhausted: Union[ExhaustionPolicy, str] = ExhaustionPolicy.WAIT,
        on_clock_regression: Union[
            ClockRegressionPolicy, str
        ] = ClockRegressionPolicy.FAIL,
        random_start: bool = False,
    ):
        """Initializes a new TSID factory.

        Args:
            node: A unique identifier for this producer (0-1023).
            epoch: The custom epoch in milliseconds since the Unix epoch.
            clock: Returns the current time in milliseconds since the Unix epoch.
            on_exhausted: Policy for a sequence that runs past 4095.
            on_clock_regression: Policy for a clock that moves backward.
            random_start: Start each millisecond's sequence at a random value.

        Raises:
            OutOfRangeError: If node or epoch is outside its valid range.
            ValueError: If a policy name is unknown.
        """
        if not 0 <= node <= MAX_NODE:
            raise OutOfRangeError(f"Node must be between 0 and {MAX_NODE}, got {node}")
        if not 0 <= epoch <= MAX_TIMESTAMP:
            raise OutOfRangeError(
                f"Epoch must be between 0 and {MAX_TIMESTAMP}, got {epoch}"
            )

        self._node = node
        self._epoch = epoch
        self._clock = clock or current_millis
        self._on_exhausted = ExhaustionPolicy(on_exhausted)
        self._on_clock_regression = ClockRegressionPolicy(on_clock_regression)
        self._random_start = random_start

        self._sequence = 0
        self._prev_timestamp = -1
        self._lock = threading.Lock()

        logger.info(
            "TSID factory created: node=%d epoch=%d on_exhausted=%s "
            "on_clock_regression=%s random_start=%s",
            node,
            epoch,
            self._on_exhausted.value,
            self._on_clock_regression.value,
            random_start,
        )

    @classmethod
    def from_config(cls, config: FactoryConfig, **kwargs) -> "TsidFactory":
        """Builds a factory from a resolved FactoryConfig.

        Extra keyword arguments are passed to the constructor.
        """
        return cls(config.node, config.epoch, **kwargs)

    @property
    def node(self) -> int:
        return self._node

    @property
    def epoch(self) -> int:
        return self._epoch

    def _current_timestamp(self) -> int:
        """Returns the current timestamp in milliseconds since the epoch."""
        return self._clock() - self._epoch

    def _wait_until(self, target: int) -> int:
        """Spins until the clock reaches the target timestamp.

        Args:
            target: The first acceptable timestamp.

        Returns:
            The current timestamp, at least target.
        """
        timestamp = self._current_timestamp()
        while timestamp < target:
            timestamp = self._current_timestamp()
        return timestamp

    def _start_sequence(self) -> int:
        if self._random_start:
            return secrets.randbelow(MAX_SEQUENCE + 1)
        return 0

    def _next(self) -> Tsid:
        """Advances the state by one id. Must be called with the lock held."""
        timestamp = self._current_timestamp()

        if not 0 <= timestamp <= MAX_TIMESTAMP:
            raise OutOfRangeError(
                f"Timestamp {timestamp} is outside the 41-bit window of epoch"
                f" {self._epoch}"
            )

        if timestamp < self._prev_timestamp:
            logger.warning(
                "Clock moved backward by %d ms on node %d",
                self._prev_timestamp - timestamp,
                self._node,
            )
            if self._on_clock_regression is ClockRegressionPolicy.FAIL:
                raise ClockRegressionError(
                    f"Clock moved backward by {self._prev_timestamp - timestamp} ms."
                    " Refusing to generate TSID."
                )
            timestamp = self._wait_until(self._prev_timestamp)

        if timestamp == self._prev_timestamp:
            if self._sequence >= MAX_SEQUENCE:
                if self._on_exhausted is ExhaustionPolicy.FAIL:
                    raise SequenceExhaustedError(
                        f"Sequence exhausted for timestamp {timestamp} on node"
                        f" {self._node}"
                    )
                logger.debug(
                    "Sequence exhausted on node %d, waiting for next millisecond",
                    self._node,
                )
                timestamp = self._wait_until(self._prev_timestamp + 1)
                self._sequence = self._start_sequence()
            else:
                self._sequence += 1
        else:
            self._sequence = self._start_sequence()

        tsid = Tsid(timestamp, self._node, self._sequence)
        self._prev_timestamp = timestamp
        return tsid

    def generate(self) -> Tsid:
        """Generates a new unique TSID.

        Returns:
            Tsid: The new identifier.

        Raises:
            SequenceExhaustedError: If the sequence runs out and the policy is "fail".
            ClockRegressionError: If the clock moved backward and the policy is "fail".
            OutOfRangeError: If the clock is before the epoch or past the 41-bit window.
        """
        with self._lock:
            return self._next()

    def generate_many(self, count: int) -> list[Tsid]:
        """Generates count TSIDs under a single lock acquisition.

        Raises:
            ValueError: If count is not positive.
        """
        if count < 1:
            raise ValueError(f"Count must be positive, got {count}")
        with self._lock:
            return [self._next() for _ in range(count)]

    def quick_generate(self) -> Tsid:
        """Generates a TSID with a random sequence, bypassing the factory state.

        Faster under contention but not collision-free: two calls in the same
        millisecond can pick the same sequence. Use generate() for keys.
        """
        return Tsid(
            self._current_timestamp(),
            self._node,
            secrets.randbelow(MAX_SEQUENCE + 1),
        )

    def __repr__(self) -> str:
        return f"TsidFactory(node={self._node}, epoch={self._epoch})"
