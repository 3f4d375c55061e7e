"""
=============================================================================
BYTE / TEXT CODEC
=============================================================================

Pure functions for moving between raw bytes and base-N text.

Used by the URL decoder (percent escapes such as "%2F") and anywhere binary
data has to be rendered as text (digests, ETags, debug dumps).

=============================================================================
HEX DIGIT DECODING WITHOUT A TABLE
=============================================================================

decode_hex_digit() maps an ASCII character to its value with three integer
operations instead of a lookup table:

    d = (c & 0x1f) + ((c >> 6) * 0x19) - 0x10

    ┌──────────┬──────┬──────────┬──────────────┬─────────────────────┐
    │   char   │  c   │ c & 0x1f │ (c >> 6)*25  │  d                  │
    ├──────────┼──────┼──────────┼──────────────┼─────────────────────┤
    │   '0'    │  48  │    16    │      0       │  16 + 0  - 16 = 0   │
    │   '9'    │  57  │    25    │      0       │  25 + 0  - 16 = 9   │
    │   'A'    │  65  │     1    │     25       │   1 + 25 - 16 = 10  │
    │   'f'    │ 102  │     6    │     25       │   6 + 25 - 16 = 15  │
    │   'g'    │ 103  │     7    │     25       │   7 + 25 - 16 = 16  │ ✗
    └──────────┴──────┴──────────┴──────────────┴─────────────────────┘

Anything landing outside 0..15 is rejected with MalformedNumber. A handful of
non-hex characters (control bytes 0x10-0x1f, ':' to '?', '@' and '`') also
land inside the range; that is how the arithmetic behaves and callers rely
on it being exactly this formula.

=============================================================================
OUTPUT CASING
=============================================================================

    bytes_to_hex(b"\\x1a\\xff")       → "1aFf"
                                      │└── low nibble:  lowercase letters
                                      └─── high nibble: uppercase letters

    bytes_to_base_n(b"\\x1a\\xff", 16) → "1aff"   (lowercase throughout)

The two formatters disagree on casing, and bytes_to_base_n always emits two
digits per byte, (b // base) % base then b % base, which is only a true
positional encoding when base is 16. Both behaviors are kept as they are;
changing either one changes output that callers compare against.

=============================================================================
"""

from typing import Optional, Union


DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"

MIN_BASE = 2
MAX_BASE = 36


class MalformedNumber(ValueError):
    """
    Raised when text cannot be read as a number in the requested base.

    Carries the offending text so the caller can report exactly what was
    rejected:

        >>> parse_unsigned_int("1g", base=16)
        Traceback (most recent call last):
        ...
        MalformedNumber: 1g
    """

    def __init__(self, text: str, message: Optional[str] = None):
        super().__init__(message or text)
        self.text = text


def _check_base(base: int) -> None:
    if not MIN_BASE <= base <= MAX_BASE:
        raise ValueError(f"base must be {MIN_BASE}-{MAX_BASE}, got {base}")


# =============================================================================
# DECODING
# =============================================================================

def decode_hex_digit(char: Union[str, int]) -> int:
    """
    Decode one ASCII hex digit ('0'-'9', 'a'-'f', 'A'-'F') to 0..15.

    Args:
        char: A single character, or its integer code point.

    Returns:
        The digit value.

    Raises:
        MalformedNumber: If the character does not decode to 0..15.
    """
    c = ord(char) if isinstance(char, str) else char
    d = (c & 0x1F) + ((c >> 6) * 0x19) - 0x10
    if d < 0 or d > 15:
        shown = char if isinstance(char, str) else str(char)
        raise MalformedNumber(shown, f"!hex {shown}")
    return d


def parse_unsigned_int(text: str, offset: int = 0, length: int = -1, base: int = 10) -> int:
    """
    Parse an unsigned integer from a substring.

    Reads ``length`` characters starting at ``offset`` (the rest of the
    string when ``length`` is negative). Every character goes through
    decode_hex_digit(), so only digits worth 0..15 are recognised even for
    bases above 16.

    Signs are not handled. Strip a leading '-' or '+' before calling.

    Args:
        text: String holding the number.
        offset: Index of the first digit.
        length: Number of digits, or -1 for the remainder of the string.
        base: Radix, 2 to 36.

    Returns:
        The parsed value.

    Raises:
        MalformedNumber: If any character is not a digit below ``base``.
            The exception carries the whole substring being parsed.
        IndexError: If ``offset`` is negative or past the end of ``text``.
    """
    _check_base(base)

    if not 0 <= offset <= len(text):
        raise IndexError(f"offset {offset} outside {len(text)} characters")
    if length < 0:
        length = len(text) - offset

    chunk = text[offset:offset + length]
    if len(chunk) < length:
        # Ran off the end of the string
        raise MalformedNumber(chunk)

    value = 0
    for char in chunk:
        try:
            digit = decode_hex_digit(char)
        except MalformedNumber as e:
            raise MalformedNumber(chunk) from e
        if digit >= base:
            raise MalformedNumber(chunk)
        value = value * base + digit
    return value


# =============================================================================
# ENCODING
# =============================================================================

def encode_hex_digit(value: int, upper: bool = False) -> str:
    """Render a single digit value 0..35 as a character."""
    if not 0 <= value < MAX_BASE:
        raise ValueError(f"digit out of range: {value}")
    digit = DIGITS[value]
    return digit.upper() if upper else digit


def bytes_to_hex(data: bytes, offset: int = 0, length: Optional[int] = None) -> str:
    """
    Render bytes as hex, two characters per byte.

    The high nibble uses uppercase letters and the low nibble lowercase:
    b"\\x1a\\xff" renders as "1aFf".

    Args:
        data: Source bytes.
        offset: First byte to render.
        length: Number of bytes to render (defaults to the rest).

    Returns:
        A string of exactly ``2 * length`` characters.
    """
    if length is None:
        length = len(data) - offset
    if offset < 0 or length < 0 or offset + length > len(data):
        raise IndexError(f"range {offset}+{length} outside {len(data)} bytes")

    parts = []
    for b in data[offset:offset + length]:
        b &= 0xFF
        parts.append(encode_hex_digit((b // 16) % 16, upper=True))
        parts.append(encode_hex_digit(b % 16))
    return "".join(parts)


def byte_to_hex(b: int) -> str:
    """Render a single byte with bytes_to_hex() casing."""
    return bytes_to_hex(bytes([b & 0xFF]))


def bytes_to_base_n(data: bytes, base: int) -> str:
    """
    Render every byte as two lowercase digits in ``base``.

    The digits are ``(b // base) % base`` followed by ``b % base``. For
    base 16 that is ordinary lowercase hex; for any other base the high
    digit wraps, so the output is not a positional rendering of the value.

    Args:
        data: Source bytes.
        base: Radix, 2 to 36.

    Returns:
        A string of exactly ``2 * len(data)`` characters.
    """
    _check_base(base)

    parts = []
    for b in data:
        b &= 0xFF
        parts.append(DIGITS[(b // base) % base])
        parts.append(DIGITS[b % base])
    return "".join(parts)
