"""
dryopt utilities (internal helpers shared by the descriptor and context layers)

Overview
- UnsetType / Unset
  • Singleton sentinel for "argument not given", distinct from None (None is a
    legitimate String default and a legitimate "no short spelling").
- coalesce(value, default=None)
  • Materialize Unset into a concrete default, keeping None/0/"" untouched.
- rename(callable, name) / @rename("name")
  • Stable __name__/__qualname__ for generated accessors.
- mirror("attr")
  • Read-only property over a private backing field (self._attr).

Stability
- Names not in __all__ are internal and may change without notice.
"""
import builtins
import functools
from collections.abc import Sequence, Mapping


@functools.cache
def _sentinel(cls):
    return object.__new__(cls)


class UnsetType:
    """
    Sentinel type for "value not provided".

    - Falsey, printable as "Unset", a single instance per process.
    - Sealed: subclassing raises TypeError.
    """

    def __new__(cls):
        return _sentinel(cls)

    def __or__(self, other, /):
        # lets `int | Unset` be used inside isinstance() checks
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return `object`, or `default` when `object` is the Unset sentinel.

    Falsey values are preserved:
    - coalesce(Unset, 1) -> 1
    - coalesce(None, 1)  -> None
    - coalesce(0, 1)     -> 0
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Assign __name__/__qualname__ to a callable, or return a decorator doing so.

    - rename(callable, name) -> callable
    - rename(name)           -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def mirror(name, /):
    """
    Build a read-only property that serves the private field "_{name}".

    Sequences (other than strings) are handed out as tuples and mappings as
    plain dict copies, so descriptor metadata cannot be mutated through the
    public attribute.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        value = getattr(self, "_" + name)
        if isinstance(value, Sequence) and not isinstance(value, str | bytes | bytearray):
            return tuple(value)
        if isinstance(value, Mapping):
            return dict(value)
        return value

    return property(getter)


Unset = UnsetType()
"""
The single "not provided" marker.

Use it as a parameter default when None is meaningful, then materialize with
coalesce(value, default).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
