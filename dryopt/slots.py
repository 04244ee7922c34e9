"""
dryopt slots: the caller-owned storage an option writes into.

Two shapes of storage are accepted:
- buffers (numeric, char and enumerated kinds): any object exporting a
  writable buffer, e.g. bytearray(2), ctypes.c_short(), array("i", [0]) or a
  memoryview slice of a larger record. The slot width is the buffer's byte
  length; the engine never resizes, allocates or frees it.
- cells (string kind): any object with a writable `value` attribute, such as
  Cell() below or ctypes.c_wchar_p().
"""
from rich.text import Text

from .utils import Unset


class Slot:
    """
    Byte view over a caller-owned writable buffer.

    The view is taken once at construction; reads and writes go straight to
    the caller's memory.
    """
    __slots__ = ("_target", "_view")

    def __init__(self, target, /):
        try:
            view = memoryview(target)
        except TypeError:
            raise TypeError("slot target must support the buffer protocol") from None
        if view.readonly:
            raise TypeError("slot target must be a writable buffer")
        if not view.c_contiguous:
            raise TypeError("slot target must be a contiguous buffer")
        self._target = target
        self._view = view.cast("B")

    @property
    def target(self):
        return self._target

    @property
    def size(self):
        return self._view.nbytes

    def read(self):
        return bytes(self._view)

    def write(self, data, /):
        data = bytes(data)
        if len(data) != self.size:
            raise ValueError("slot write of %d bytes into a %d-byte slot" % (len(data), self.size))
        self._view[:] = data

    def clear(self):
        self._view[:] = bytes(self.size)

    def __repr__(self):
        return "slot(size=%d, data=%s)" % (self.size, self.read().hex())


class Cell:
    """
    Minimal mutable holder for string-kind options.

    Mirrors the `value` attribute of ctypes pointer cells, so either may be
    used as a String target.
    """
    __slots__ = ("value",)

    def __init__(self, value=None, /):
        self.value = value

    def __repr__(self):
        return "cell(%r)" % (self.value,)

    def __rich__(self):
        return Text.assemble("cell(", (repr(self.value), "green"), ")")

    def __eq__(self, other):
        if isinstance(other, Cell):
            return self.value == other.value
        return NotImplemented

    __hash__ = None


def writable(target, /):
    """
    tell whether `target` is usable as a String cell (has a settable `value`).
    """
    if target is None or target is Unset:
        return False
    try:
        value = target.value
        target.value = value
    except (AttributeError, TypeError):
        return False
    return True


__all__ = (
    "Slot",
    "Cell",
    "writable",
)
