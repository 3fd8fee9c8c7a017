"""
Crockford Base32 codec for 64-bit TSID values.

The text form is always 13 characters long. The first 12 characters carry
5 bits each, taken from the most significant end of the 64-bit value, and the
13th character carries the remaining 4 low bits:

    |  5  |  5  |  5  |  5  |  5  |  5  |  5  |  5  |  5  |  5  |  5  |  5  | 4 |
    |63-59|58-54|53-49|48-44|43-39|38-34|33-29|28-24|23-19|18-14|13-9 | 8-4 |3-0|

Because bit 63 is always zero for a valid TSID, the first character is at most
'F' and the last character is at most 'F'. Decoding is case-insensitive and
tolerates Crockford's ambiguous characters: I and L read as 1, O reads as 0.

See: https://www.crockford.com/base32.html
"""

ENCODING_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
ENCODED_LENGTH = 13

# Bit offset of each of the first 12 characters, most significant first.
_SHIFTS = tuple(64 - 5 * position for position in range(1, ENCODED_LENGTH))

DECODING_TABLE = {}
for _value, _char in enumerate(ENCODING_ALPHABET):
    DECODING_TABLE[_char] = _value
    DECODING_TABLE[_char.lower()] = _value
for _char, _value in (("I", 1), ("L", 1), ("O", 0)):
    DECODING_TABLE[_char] = _value
    DECODING_TABLE[_char.lower()] = _value
del _value, _char


def encode(value: int) -> str:
    """Encode a non-negative 64-bit integer as 13 Crockford characters."""
    chars = [ENCODING_ALPHABET[(value >> shift) & 0x1F] for shift in _SHIFTS]
    chars.append(ENCODING_ALPHABET[value & 0xF])
    return "".join(chars)


def decode(text: str) -> int:
    """Decode 13 Crockford characters back into an integer.

    The caller is expected to have trimmed the text and checked its length.

    Raises:
        KeyError: If a character is not part of the decoding table. The key is
            the offending character.
    """
    result = 0
    for char, shift in zip(text, _SHIFTS):
        result |= DECODING_TABLE[char] << shift
    result |= DECODING_TABLE[text[ENCODED_LENGTH - 1]]
    return result


def is_valid_char(char: str) -> bool:
    return char in DECODING_TABLE
