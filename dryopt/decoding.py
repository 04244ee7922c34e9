"""
dryopt argument decoding.

decode(option, token, position, context) turns the text of `token` starting at
`position` into a Decoded(value, position) pair, where the returned position
points just past the argument. The meaning of the return value:

- Decoded(value, end): an argument was recognized; `value` is handed to the
  writer.
- Decoded(Unset, end): an argument was recognized but rejected (range error,
  negative unsigned); the fault has already been reported and nothing is
  written (an optional argument falls back to its default).
- None: no argument here (the numeric parser made no progress, no enumerated
  choice matched, a callback consumed nothing, or the text is empty for Char).

Numeric syntax follows the C library conversions the option kinds are named
after:
- integers (strtoll/strtoull, base 0): leading whitespace, optional sign,
  "0x"/"0X" hexadecimal, leading "0" octal, decimal otherwise; the longest
  valid prefix is taken.
- floating (strtod): decimal and hexadecimal literals, "inf", "infinity",
  "nan" and "nan(...)", case-insensitive.
"""
import math
import os
import re
from typing import NamedTuple

from .faults import InvalidArgumentError, strerror, ERANGE
from .fitting import MASK
from .options import Kind
from .utils import Unset

SPACE = r"[ \t\n\v\f\r]*"

INTEGER = re.compile(SPACE + r"(?P<sign>[+-]?)(?P<digits>0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")
NEGATIVE = re.compile(SPACE + r"-")
FLOATING = re.compile(
    SPACE + r"(?P<literal>[+-]?(?:"
    r"(?P<hex>0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?[0-9]+)?)"
    r"|(?P<infinity>(?i:inf(?:inity)?))"
    r"|(?P<nan>(?i:nan)(?:\([0-9A-Za-z_]*\))?)"
    r"|(?P<decimal>(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)"
    r"))"
)

SIGNED_RANGE = range(-(1 << 63), 1 << 63)
UNSIGNED_LIMIT = MASK


class Decoded(NamedTuple):
    value: object
    position: int


def _out_of_range(text, context, /):
    context.report(InvalidArgumentError("%s: %s" % (text, strerror(ERANGE))))


def _integer(token, position, /):
    """
    longest strtoll-style integer prefix of token[position:].

    returns (sign, magnitude, end) or None when no digits were found.
    """
    if not (match := INTEGER.match(token, position)):
        return None
    digits = match["digits"]
    if digits[:2] in ("0x", "0X"):
        magnitude = int(digits[2:], 16)
    elif digits.startswith("0"):
        magnitude = int(digits, 8)
    else:
        magnitude = int(digits, 10)
    return -1 if match["sign"] == "-" else 1, magnitude, match.end()


def decode_signed(token, position, context, /):
    if (parsed := _integer(token, position)) is None:
        return None
    sign, magnitude, end = parsed
    if (value := sign * magnitude) not in SIGNED_RANGE:
        _out_of_range(token[position:], context)
        return Decoded(Unset, end)
    return Decoded(value, end)


def decode_unsigned(token, position, context, /):
    """
    strtoull wraps negative input instead of failing, so the sign is checked
    separately: any argument starting with optional whitespace then "-" is a
    range error.
    """
    if (parsed := _integer(token, position)) is None:
        return None
    sign, magnitude, end = parsed
    if magnitude > UNSIGNED_LIMIT or NEGATIVE.match(token, position):
        _out_of_range(token[position:], context)
        return Decoded(Unset, end)
    return Decoded(magnitude, end)


def decode_floating(token, position, context, /):
    """
    overflow to infinity and underflow to zero of a non-zero literal are
    range errors; explicit infinities and NaNs are not.
    """
    if not (match := FLOATING.match(token, position)):
        return None
    literal, end = match["literal"], match.end()
    negative = literal.startswith("-")

    if match["infinity"]:
        return Decoded(-math.inf if negative else math.inf, end)
    if match["nan"]:
        return Decoded(math.nan, end)

    if match["hex"]:
        try:
            value = float.fromhex(literal)
        except OverflowError:
            _out_of_range(token[position:], context)
            return Decoded(Unset, end)
        nonzero = re.search(r"[1-9a-fA-F]", match["hex"][2:].split("p")[0].split("P")[0])
    else:
        value = float(literal)
        nonzero = re.search(r"[1-9]", re.split(r"[eE]", match["decimal"])[0])

    if math.isinf(value) or (value == 0.0 and nonzero):
        _out_of_range(token[position:], context)
        return Decoded(Unset, end)
    return Decoded(value, end)


def decode_char(token, position, /):
    """
    one raw byte: the first byte of the next character in the filesystem
    encoding (argv's original bytes). The whole character is consumed, so "é"
    yields its UTF-8 lead byte 0xc3 and an escaped undecodable byte
    (surrogateescape) yields itself.
    """
    if position >= len(token):
        return None
    return Decoded(os.fsencode(token[position])[0], position + 1)


def decode_callback(option, token, position, /):
    """
    hand the remaining text to the handler; it returns how much it consumed.
    """
    text = token[position:]
    consumed = option.handler(option, text)
    if not isinstance(consumed, int) or isinstance(consumed, bool):
        raise TypeError("callback handler must return the number of characters consumed")
    if not 0 <= consumed <= len(text):
        raise ValueError("callback handler consumed %d of %d characters" % (consumed, len(text)))
    if not consumed:
        return None
    return Decoded(None, position + consumed)


def decode_enumerated(option, token, position, /):
    text = token[position:]
    for index, choice in enumerate(option.choices):
        if text == choice:
            return Decoded(index, len(token))
    return None


def decode(option, token, position, context, /):
    """
    decode the argument of `option` from token[position:].

    Kinds dispatch to the decoders above; an unknown kind is a programming
    error and raises TypeError.
    """
    match option.kind:
        case Kind.STRING:
            return Decoded(token[position:], len(token))
        case Kind.CHAR:
            return decode_char(token, position)
        case Kind.SIGNED:
            return decode_signed(token, position, context)
        case Kind.UNSIGNED:
            return decode_unsigned(token, position, context)
        case Kind.FLOATING:
            return decode_floating(token, position, context)
        case Kind.CALLBACK:
            return decode_callback(option, token, position)
        case Kind.ENUMERATED:
            return decode_enumerated(option, token, position)
        case kind:
            raise TypeError("cannot decode an argument for option kind %r" % (kind,))


__all__ = (
    "Decoded",
    "decode",
    "decode_signed",
    "decode_unsigned",
    "decode_floating",
    "decode_char",
    "decode_callback",
    "decode_enumerated",
)
