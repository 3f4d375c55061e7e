"""
=============================================================================
URL DECODING
=============================================================================

Percent-decoding for request paths, identifiers and query strings, built on
the codec's hex routines.

=============================================================================
ESCAPE FORMS
=============================================================================

    "%2F"     → one byte, 0x2F                (RFC 3986)
    "%C3%A9"  → two bytes, decoded together   → "é" in UTF-8
    "%u00E9"  → one code point, U+00E9        (legacy browser form)
    "+"       → " "   only for form/query data (plus_as_space=True)

Consecutive %XX bytes are collected and decoded as a unit, so multi-byte
UTF-8 sequences come out as single characters. Byte sequences that are not
valid in the target encoding decode to U+FFFD rather than failing the
request.

Malformed escapes ("%G1", a trailing "%4") raise MalformedNumber.

=============================================================================
"""

from typing import Dict, List

from .codec import MalformedNumber, parse_unsigned_int


def url_decode(text: str, encoding: str = "utf-8", plus_as_space: bool = False) -> str:
    """
    Decode percent escapes in ``text``.

    Args:
        text: Encoded string.
        encoding: Charset used to turn escaped bytes into characters.
        plus_as_space: Treat '+' as a space (query strings, form bodies).

    Returns:
        The decoded string.

    Raises:
        MalformedNumber: If an escape is truncated or not hex.
    """
    if "%" not in text and not (plus_as_space and "+" in text):
        return text

    out = bytearray()
    i = 0
    end = len(text)
    while i < end:
        c = text[i]
        if c == "%":
            if i + 1 < end and text[i + 1] == "u":
                if i + 6 > end:
                    raise MalformedNumber(text[i:])
                code_point = parse_unsigned_int(text, i + 2, 4, 16)
                out += chr(code_point).encode(encoding, errors="replace")
                i += 6
                continue
            if i + 3 > end:
                raise MalformedNumber(text[i:])
            out.append(parse_unsigned_int(text, i + 1, 2, 16))
            i += 3
        elif c == "+" and plus_as_space:
            out.append(0x20)
            i += 1
        else:
            out += c.encode(encoding, errors="replace")
            i += 1

    return out.decode(encoding, errors="replace")


def parse_query(query: str, encoding: str = "utf-8") -> Dict[str, List[str]]:
    """
    Parse a query string into a dict of value lists.

        "?a=1&a=2&b=x+y" → {"a": ["1", "2"], "b": ["x y"]}

    Parameters without '=' get an empty value. Empty segments are skipped.
    """
    params: Dict[str, List[str]] = {}
    for segment in query.lstrip("?").split("&"):
        if not segment:
            continue
        name, _, value = segment.partition("=")
        name = url_decode(name, encoding, plus_as_space=True)
        value = url_decode(value, encoding, plus_as_space=True)
        params.setdefault(name, []).append(value)
    return params
