"""
TSID Value Type Module

A TSID (Time-Sorted ID) is a 64-bit identifier that sorts by creation time,
so it keeps database indexes append-friendly while staying unique across
producers the way a UUID would.

Layout:
    The identifier is a non-negative 64-bit integer with the following structure:

    |1 bit|         41 bits          |  10 bits |  12 bits  |
    |sign |        timestamp         |   node   | sequence  |
    | 0   | ms since factory epoch   |  0-1023  |  0-4095   |

    - Sign bit: Always 0, so the value fits a signed BIGINT column
    - Timestamp: milliseconds since the epoch configured on the factory
    - Node: the producer that created the identifier
    - Sequence: disambiguates identifiers made in the same millisecond

Representations:
    - Integer: the packed 64-bit value, e.g. 1541815603606036480
    - String: 13 Crockford Base32 characters, e.g. "2NJT27V22YG00"

Both representations sort in the same order as the identifiers themselves.

Based on: Twitter's Snowflake ID and Vlad Mihalcea's TSID posts
"""

from datetime import datetime, timedelta, timezone
from functools import total_ordering

from pydantic_core import core_schema

from tsid.core.exceptions import (
    InvalidCharacterError,
    InvalidLengthError,
    OutOfRangeError,
)
from tsid.utils import crockford

TIMESTAMP_BITS = 41
NODE_BITS = 10
SEQUENCE_BITS = 12

MAX_TIMESTAMP = (1 << TIMESTAMP_BITS) - 1
MAX_NODE = (1 << NODE_BITS) - 1
MAX_SEQUENCE = (1 << SEQUENCE_BITS) - 1
MAX_VALUE = (1 << 63) - 1

NODE_SHIFT = SEQUENCE_BITS
TIMESTAMP_SHIFT = NODE_BITS + SEQUENCE_BITS

TSID_STRING_LENGTH = crockford.ENCODED_LENGTH

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _check_range(name: str, value: int, maximum: int):
    if not 0 <= value <= maximum:
        raise OutOfRangeError(f"{name} must be between 0 and {maximum}, got {value}")


@total_ordering
class Tsid:
    """An immutable, time-sortable 64-bit identifier.

    Instances compare, hash and sort by their packed integer value, which
    orders them by timestamp, then node, then sequence.

    Attributes:
        timestamp: Milliseconds since the producing factory's epoch.
        node: The producer discriminator (0-1023).
        sequence: The per-millisecond counter (0-4095).
    """

    __slots__ = ("_value",)

    def __init__(self, timestamp: int, node: int, sequence: int):
        """Packs and validates the three components.

        Raises:
            OutOfRangeError: If any component does not fit its bit width.
        """
        _check_range("Timestamp", timestamp, MAX_TIMESTAMP)
        _check_range("Node", node, MAX_NODE)
        _check_range("Sequence", sequence, MAX_SEQUENCE)

        object.__setattr__(
            self,
            "_value",
            (timestamp << TIMESTAMP_SHIFT) | (node << NODE_SHIFT) | sequence,
        )

    @classmethod
    def from_int(cls, value: int) -> "Tsid":
        """Builds a TSID from its packed integer form.

        Raises:
            TypeError: If value is not an integer.
            OutOfRangeError: If value is negative or wider than 63 bits.
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"TSID value must be an int, got {type(value).__name__}")
        if not 0 <= value <= MAX_VALUE:
            raise OutOfRangeError(
                f"TSID value must be a non-negative 64-bit integer, got {value}"
            )
        return cls(
            value >> TIMESTAMP_SHIFT,
            (value >> NODE_SHIFT) & MAX_NODE,
            value & MAX_SEQUENCE,
        )

    @classmethod
    def from_string(cls, text: str) -> "Tsid":
        """Builds a TSID from its 13-character Crockford Base32 form.

        Surrounding whitespace is ignored, lowercase is accepted, and the
        ambiguous characters I, L and O are read as 1, 1 and 0.

        Raises:
            TypeError: If text is None or not a string.
            InvalidLengthError: If the trimmed text is not 13 characters long.
            InvalidCharacterError: If the text holds a non-Crockford character.
            OutOfRangeError: If the decoded value sets the sign bit.
        """
        if not isinstance(text, str):
            raise TypeError(f"TSID string must be a str, got {type(text).__name__}")

        trimmed = text.strip()
        if len(trimmed) != TSID_STRING_LENGTH:
            raise InvalidLengthError(
                f"TSID string length must be {TSID_STRING_LENGTH}, got {len(trimmed)}"
            )

        for position, char in enumerate(trimmed):
            if not crockford.is_valid_char(char):
                raise InvalidCharacterError(
                    f"Invalid Crockford character {char!r} at position {position}"
                )

        return cls.from_int(crockford.decode(trimmed))

    @property
    def timestamp(self) -> int:
        return self._value >> TIMESTAMP_SHIFT

    @property
    def node(self) -> int:
        return (self._value >> NODE_SHIFT) & MAX_NODE

    @property
    def sequence(self) -> int:
        return self._value & MAX_SEQUENCE

    def as_int(self) -> int:
        return self._value

    def as_string(self) -> str:
        return crockford.encode(self._value)

    def as_lowercase_string(self) -> str:
        return self.as_string().lower()

    def created_at(self, epoch: int = 0) -> datetime:
        """Returns the creation instant as an aware UTC datetime.

        Args:
            epoch: The epoch offset in milliseconds used by the producing factory.
        """
        return _UNIX_EPOCH + timedelta(milliseconds=self.timestamp + epoch)

    def __int__(self) -> int:
        return self._value

    def __str__(self) -> str:
        return self.as_string()

    def __repr__(self) -> str:
        return f"Tsid('{self.as_string()}')"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Tsid):
            return NotImplemented
        return self._value == other._value

    def __lt__(self, other) -> bool:
        if not isinstance(other, Tsid):
            return NotImplemented
        return self._value < other._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __setattr__(self, name, value):
        raise AttributeError("Tsid is immutable")

    def __delattr__(self, name):
        raise AttributeError("Tsid is immutable")

    def __reduce__(self):
        return (Tsid.from_int, (self._value,))

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    @classmethod
    def _validate(cls, value) -> "Tsid":
        if isinstance(value, Tsid):
            return value
        if isinstance(value, str):
            return cls.from_string(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return cls.from_int(value)
        raise ValueError(f"Cannot build a TSID from {type(value).__name__}")

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        """Lets Tsid be used as a field type in pydantic models.

        Accepts a Tsid, an int or a 13-character string and serializes to the
        string form.
        """
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, when_used="always"
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, schema, handler):
        return {
            "type": "string",
            "minLength": TSID_STRING_LENGTH,
            "maxLength": TSID_STRING_LENGTH,
            "examples": ["2NJT27V22YG00"],
        }
