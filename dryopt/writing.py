"""
dryopt value writer: commit decoded values into option slots.

- write(option, value, context): dispatch on the option kind.
  • String: the cell's `value` is replaced.
  • Char: the raw byte is written unsigned at the slot width.
  • Signed / Unsigned / Enumerated: range-checked with fits() (unless the slot
    is a full scratch word), optionally combined with the current slot
    content (AND/OR/XOR), then narrowed into the slot.
  • Floating: packed at the slot width; finite values beyond the narrower
    format's range are rejected, infinities and NaN pass through.
  • Callback: nothing; the handler already did its own work.
- negate(option, context): undo a boolean-shaped option ("--no-x", "+x").

Rejected values leave the slot untouched and are reported as
InvalidArgumentError through the context.
"""
import ctypes
import operator
import struct

from .faults import InvalidArgumentError, strerror, ERANGE
from .fitting import WORD, fits, narrow, widen
from .options import Kind, Combine

COMBINERS = {
    Combine.AND: operator.and_,
    Combine.OR: operator.or_,
    Combine.XOR: operator.xor,
}

PACKINGS = {
    2: "e",
    4: "f",
    8: "d",
}


def _out_of_range(value, context, /):
    context.report(InvalidArgumentError("%s: %s" % (value, strerror(ERANGE))))
    return False


def _write_integer(option, value, context, /):
    signed = option.kind is Kind.SIGNED
    size = option.size
    # the check applies to the decoded value; combining comes after
    if size != WORD and not fits(value, size * 8, signed):
        return _out_of_range(value, context)
    if option.combine is not Combine.OVERWRITE:
        current = widen(option.slot.read(), signed=signed, byteorder=context.byteorder)
        value = COMBINERS[option.combine](current, value)
    option.slot.write(narrow(value, size, byteorder=context.byteorder))
    return True


def _write_floating(option, value, context, /):
    size = option.size
    if size not in PACKINGS:
        # platform long double: only the native layout is meaningful
        option.slot.write(bytes(ctypes.c_longdouble(value)))
        return True
    prefix = "<" if context.byteorder == "little" else ">"
    try:
        data = struct.pack(prefix + PACKINGS[size], value)
    except OverflowError:
        return _out_of_range("%g" % value, context)
    option.slot.write(data)
    return True


def write(option, value, context, /):
    """
    commit `value` into the slot of `option`.

    returns True when the slot was written, False when the value was rejected
    (and reported). An unknown kind is a programming error (TypeError).
    """
    match option.kind:
        case Kind.STRING:
            option.target.value = value
            return True
        case Kind.CHAR:
            if not fits(value, option.size * 8, False):
                return _out_of_range(value, context)
            option.slot.write(narrow(value, option.size, byteorder=context.byteorder))
            return True
        case Kind.SIGNED | Kind.UNSIGNED | Kind.ENUMERATED:
            return _write_integer(option, value, context)
        case Kind.FLOATING:
            return _write_floating(option, value, context)
        case Kind.CALLBACK:
            return True
        case kind:
            raise TypeError("cannot write a value for option kind %r" % (kind,))


def assign(option, context, /):
    """
    apply an option matched without argument: call a Callback handler with
    no text, otherwise write the option's default (None defaults are skipped).
    """
    if option.kind is Kind.CALLBACK:
        option.handler(option, None)
        return True
    if option.default is None:
        return False
    return write(option, option.default, context)


def negate(option, context, /):
    """
    undo a boolean-shaped option.

    - OR-combined flag: clear exactly the bits of its default.
    - plain boolean: zero the slot.
    """
    if option.combine is Combine.OR:
        current = widen(option.slot.read(), signed=False, byteorder=context.byteorder)
        option.slot.write(narrow(current & ~option.default, option.size, byteorder=context.byteorder))
    else:
        option.slot.clear()


__all__ = (
    "write",
    "assign",
    "negate",
)
