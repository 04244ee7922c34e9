"""
dryopt numeric fitting and endian copy.

Scope
- fits(): does a decoded 64-bit integer survive narrowing to N bits?
- copy_word(): move the significant bytes of a scratch word into (or out of) a
  narrower or wider slot, honoring the byte order of the session.
- narrow()/widen(): the integer <-> N-byte primitives every integer-like kind
  goes through (Signed, Unsigned, Enumerated and Char).

Conventions
- Decoded integers are Python ints but are always treated as 64-bit two's
  complement bit patterns, matching the scratch word the decoder produces.
- byteorder is "little" or "big"; it comes from the Context and is fixed for
  the whole session.
"""
import sys

WORD = 8
"""byte width of the scratch word integers are decoded into."""

MASK = (1 << WORD * 8) - 1


def pattern(value, /):
    """
    return the unsigned 64-bit two's complement pattern of `value`.
    """
    return value & MASK


def fits(value, bits, signed, /):
    """
    tell whether the 64-bit pattern `value` is representable in `bits` bits.

    rules
    - the mask spans `bits` bits, one fewer when `signed` (the sign bit is kept
      out of the magnitude).
    - for signed targets, a negative pattern is complemented first (bitwise
      abs), so -128 fits 8 signed bits and -129 does not.
    - the test is whether clearing everything outside the mask leaves the
      pattern unchanged.

    examples
    - fits(255, 8, False)  -> True
    - fits(256, 8, False)  -> False
    - fits(-1, 8, True)    -> True
    - fits(128, 8, True)   -> False
    """
    bits = int(bits)
    if bits <= 0:
        raise ValueError("fits() bits must be a positive integer")
    if bits > WORD * 8:
        raise ValueError("fits() bits cannot exceed the scratch word width")
    word = pattern(value)
    mask = (1 << (bits - bool(signed))) - 1
    if signed and word >> (WORD * 8 - 1):
        word = ~word & MASK
    return word & mask == word


def copy_word(dest, src, byteorder=sys.byteorder, /):
    """
    copy the significant bytes of `src` into the writable buffer `dest`.

    narrowing (len(dest) <= len(src))
    - little-endian: the low-order bytes live at the start of `src`.
    - big-endian: the low-order bytes live at the end of `src`.

    widening (len(dest) > len(src))
    - `dest` is zero-filled and `src` lands at its low-order end.

    both directions behave like a native truncating (or zero-extending)
    assignment on the given byte order.
    """
    if byteorder not in ("little", "big"):
        raise ValueError("copy_word() byteorder must be 'little' or 'big'")
    dest = memoryview(dest).cast("B")
    src = memoryview(src).cast("B")
    size, width = len(dest), len(src)

    if size <= width:
        start = width - size if byteorder == "big" else 0
        dest[:] = src[start:start + size]
        return

    dest[:] = bytes(size)
    start = size - width if byteorder == "big" else 0
    dest[start:start + width] = src


def narrow(value, size, /, *, byteorder=sys.byteorder):
    """
    render `value` as the `size` low-order bytes of its scratch word.

    no range check happens here; callers decide with fits() first.
    """
    word = pattern(value).to_bytes(WORD, byteorder)
    if size == WORD:
        return word
    data = bytearray(size)
    copy_word(data, word, byteorder)
    return bytes(data)


def widen(data, /, *, signed, byteorder=sys.byteorder):
    """
    read an N-byte slot image back into a Python int.

    the bytes are first copied into a zeroed scratch word (copy_word), then
    interpreted; signed reads sign-extend from the slot width.
    """
    data = bytes(data)
    if len(data) > WORD:
        raise ValueError("widen() data cannot exceed the scratch word width")
    word = bytearray(WORD)
    copy_word(word, data, byteorder)
    value = int.from_bytes(word, byteorder)
    bits = len(data) * 8
    if signed and bits and value >> (bits - 1) & 1:
        value -= 1 << bits
    return value


__all__ = (
    "WORD",
    "pattern",
    "fits",
    "copy_word",
    "narrow",
    "widen",
)
