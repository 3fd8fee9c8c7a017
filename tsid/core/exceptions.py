class TsidError(Exception):
    """Base class for every error raised by this package."""

    pass


class OutOfRangeError(TsidError, ValueError):
    """Raised when a field or packed value does not fit its bit width."""

    pass


class InvalidLengthError(TsidError, ValueError):
    """Raised when a TSID string is not 13 characters long after trimming."""

    pass


class InvalidCharacterError(TsidError, ValueError):
    """Raised when a TSID string holds a character outside Crockford Base32."""

    pass


class SequenceExhaustedError(TsidError):
    """Raised when more than 4096 ids are requested within one millisecond."""

    pass


class ClockRegressionError(TsidError):
    """Raised when the clock reads earlier than the last generated timestamp."""

    pass


class AlreadyInitializedError(TsidError):
    """Raised when the shared factory is configured twice without a reset."""

    pass


class NotInitializedError(TsidError):
    """Raised when the shared factory is read before it is configured."""

    pass
