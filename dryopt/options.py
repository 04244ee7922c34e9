r"""
dryopt option descriptors.

Overview
- One descriptor class per value kind (a closed sum type):
  • String: stores the argument text into a cell (`.value`).
  • Char: stores one raw argument byte into a buffer slot.
  • Signed / Unsigned: integer arguments narrowed into a 1..8 byte slot.
  • Floating: floating arguments stored as half, single, double or the
    platform long double, depending on the slot width.
  • Callback: hands the raw argument to a handler that reports how many
    characters it consumed.
  • Enumerated: a fixed, ordered token list; the matched index is stored.

- Helpers
  • declare(...): infer the kind and width from a ctypes target.
  • switch(...): boolean (or OR-combined bit flag) Unsigned option.
  • @callback(...): bind a handler function as a Callback option.
  • Table: the resolved, read-only view of an option table used by a parse.

Shared metadata (sanitized on construction)
- short: None | one character (not "-" and not whitespace).
- long: None | non-empty string without "=", ":" or whitespace.
- descr: None | non-empty string (help text).
- arity: Arity.NONE | OPTIONAL | REQUIRED.
- default: the value written when the option matches without an argument.
- combine (integer kinds): Combine.OVERWRITE | AND | OR | XOR.

Descriptors are immutable once built; __replace__ returns a new descriptor
that shares the caller's target.
"""
import builtins
import copy
import ctypes
import functools
import operator
import os
import re
from collections.abc import Sequence
from enum import Enum

from .slots import Slot, Cell, writable
from .utils import *


class Kind(Enum):
    STRING = "STR"
    CHAR = "CHAR"
    SIGNED = "SIGNED"
    UNSIGNED = "UNSIGNED"
    FLOATING = "FLOATING"
    CALLBACK = "CALLBACK"
    ENUMERATED = "ENUM"


class Arity(Enum):
    NONE = 0
    OPTIONAL = 1
    REQUIRED = 2


class Combine(Enum):
    OVERWRITE = "overwrite"
    AND = "and"
    OR = "or"
    XOR = "xor"


INTEGER_WIDTHS = range(1, 9)
FLOATING_WIDTHS = frozenset({2, 4, 8, ctypes.sizeof(ctypes.c_longdouble)})


class OptionType(type):
    """
    Metaclass giving descriptor classes their introspection surface.

    - __typename__: lowercase, hyphenated class name used in messages.
    - read-only properties for every name in __introspectable__ (mirror()).
    - stable __repr__/__rich_repr__ built from __displayable__ (or
      __introspectable__ when unset).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate the spellings, help text and arity shared by all kinds.

    Raises
    - TypeError: wrong types, or neither spelling given.
    - ValueError: malformed spellings or empty help text.
    """
    short, long = metadata["short"], metadata["long"]

    if short is not None:
        if not isinstance(short, str):
            raise TypeError(f"{cls.__typename__} 'short' must be a string")
        if len(short) != 1 or short == "-" or short.isspace():
            raise ValueError(f"{cls.__typename__} 'short' must be a single non-dash character")

    if long is not None:
        if not isinstance(long, str):
            raise TypeError(f"{cls.__typename__} 'long' must be a string")
        if not long or re.search(r"[=:\s]", long) or long.startswith("-"):
            raise ValueError(f"{cls.__typename__} 'long' must be a non-empty name without '=', ':' or spaces")

    if short is None and long is None:
        raise TypeError(f"{cls.__typename__} must specify a short or a long spelling")

    if not isinstance(descr := metadata["descr"], str | None):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = descr

    if not isinstance(metadata["arity"], Arity):
        raise TypeError(f"{cls.__typename__} 'arity' must be an Arity")


def _sanitize_slot_metadata(cls, metadata, widths, /):
    """
    Internal: wrap the target into a Slot and check its width.
    """
    if metadata["target"] is Unset:
        raise TypeError(f"{cls.__typename__} requires a 'target'")
    slot = Slot(metadata["target"])
    if slot.size not in widths:
        raise ValueError(f"{cls.__typename__} target of {slot.size} bytes is not supported")
    return slot


def _sanitize_integer_metadata(cls, metadata, /):
    """
    Internal: integer defaults and combine operations.
    """
    if not isinstance(default := metadata["default"], int) or isinstance(default, bool):
        raise TypeError(f"{cls.__typename__} 'default' must be an integer")
    if not -(1 << 63) <= default < (1 << 64):
        raise ValueError(f"{cls.__typename__} 'default' does not fit a 64-bit word")
    if not isinstance(metadata["combine"], Combine):
        raise TypeError(f"{cls.__typename__} 'combine' must be a Combine")


class Option(metaclass=OptionType):
    """
    Base of every option descriptor.

    Subclasses set `kind` and implement __new__ with their own payload; the
    common spellings, help and arity handling live in _build().
    """
    __introspectable__ = (
        "short",
        "long",
        "descr",
        "arity",
        "default",
    )

    kind = Unset

    def __new__(cls, *args, **kwargs):
        raise TypeError("option is abstract; use one of its kinds")

    @classmethod
    def _build(cls, metadata, /, slot=None):
        self = object.__new__(cls)
        self._arguments = dict(metadata)
        self._slot = slot
        for name, value in metadata.items():
            setattr(self, "_" + name, value)
        return self

    @property
    def target(self):
        return self._arguments.get("target")

    @property
    def slot(self):
        """
        the Slot view over the target (None for String and Callback).
        """
        return self._slot

    @property
    def size(self):
        """
        slot width in bytes (None when the kind has no buffer slot).
        """
        return self._slot.size if self._slot is not None else None

    @property
    def strict(self):
        """
        True for kinds whose decoder reliably recognizes "no value here",
        which makes peeking at the next argv entry safe.
        """
        return self.kind in (Kind.SIGNED, Kind.UNSIGNED, Kind.FLOATING, Kind.CALLBACK)

    @property
    def metavar(self):
        """
        argument label for help output.
        """
        return self.kind.value

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(**{**self._arguments, **overrides})


class String(Option):
    """
    Text argument stored into a cell (any object with a writable `value`).

    The argument always consumes the whole remainder of its token; the empty
    string is a valid value.
    """
    kind = Kind.STRING

    def __new__(cls, short=None, long=None, target=Unset, descr=None, *, arity=Arity.REQUIRED, default=None):
        metadata = {
            "short": short,
            "long": long,
            "target": target,
            "descr": descr,
            "arity": arity,
            "default": default,
        }
        _sanitize_metadata(cls, metadata)
        if not writable(target):
            raise TypeError(f"{cls.__typename__} 'target' must have a writable 'value' attribute")
        if not isinstance(default, str | None):
            raise TypeError(f"{cls.__typename__} 'default' must be a string")
        return cls._build(metadata)


class Char(Option):
    """
    Single-byte argument: the first byte of the argument character (in the
    filesystem encoding) is written unsigned into the slot.
    """
    kind = Kind.CHAR

    def __new__(cls, short=None, long=None, target=Unset, descr=None, *, arity=Arity.REQUIRED, default=0):
        metadata = {
            "short": short,
            "long": long,
            "target": target,
            "descr": descr,
            "arity": arity,
            "default": default,
        }
        _sanitize_metadata(cls, metadata)
        slot = _sanitize_slot_metadata(cls, metadata, INTEGER_WIDTHS)
        if isinstance(default, str):
            if len(default) != 1:
                raise ValueError(f"{cls.__typename__} 'default' must be a single character")
            metadata["default"] = os.fsencode(default)[0]
        elif not isinstance(default, int) or isinstance(default, bool) or default < 0:
            raise TypeError(f"{cls.__typename__} 'default' must be a character or a byte value")
        return cls._build(metadata, slot)


class Signed(Option):
    """
    Signed integer argument (strtoll syntax), narrowed into a 1..8 byte slot.
    """
    __introspectable__ = Option.__introspectable__ + ("combine",)

    kind = Kind.SIGNED

    def __new__(
            cls,
            short=None,
            long=None,
            target=Unset,
            descr=None,
            *,
            arity=Arity.REQUIRED,
            default=0,
            combine=Combine.OVERWRITE
    ):
        metadata = {
            "short": short,
            "long": long,
            "target": target,
            "descr": descr,
            "arity": arity,
            "default": default,
            "combine": combine,
        }
        _sanitize_metadata(cls, metadata)
        slot = _sanitize_slot_metadata(cls, metadata, INTEGER_WIDTHS)
        _sanitize_integer_metadata(cls, metadata)
        return cls._build(metadata, slot)


class Unsigned(Option):
    """
    Unsigned integer argument (strtoull syntax, negatives rejected).

    With arity NONE this is the boolean shape: the default (1 unless given)
    is written on a match, and "--no-name" / "+x" clear it again. Combined
    with Combine.OR it becomes a bit flag over a shared mask slot.
    """
    __introspectable__ = Option.__introspectable__ + ("combine",)

    kind = Kind.UNSIGNED

    def __new__(
            cls,
            short=None,
            long=None,
            target=Unset,
            descr=None,
            *,
            arity=Arity.REQUIRED,
            default=Unset,
            combine=Combine.OVERWRITE
    ):
        metadata = {
            "short": short,
            "long": long,
            "target": target,
            "descr": descr,
            "arity": arity,
            "default": coalesce(default, 1 if arity is Arity.NONE else 0),
            "combine": combine,
        }
        _sanitize_metadata(cls, metadata)
        slot = _sanitize_slot_metadata(cls, metadata, INTEGER_WIDTHS)
        _sanitize_integer_metadata(cls, metadata)
        if metadata["default"] < 0:
            raise ValueError(f"{cls.__typename__} 'default' cannot be negative")
        return cls._build(metadata, slot)

    @property
    def boolean(self):
        """
        True when the option can be negated ("--no-name", "+x").
        """
        if self._arity is not Arity.NONE:
            return False
        if self._combine is Combine.OR:
            return True
        return self._combine is Combine.OVERWRITE and self._default == 1


class Floating(Option):
    """
    Floating argument (strtod syntax).

    Slot widths: 2 (half), 4 (single), 8 (double) or the platform long double.
    """
    kind = Kind.FLOATING

    def __new__(cls, short=None, long=None, target=Unset, descr=None, *, arity=Arity.REQUIRED, default=0.0):
        metadata = {
            "short": short,
            "long": long,
            "target": target,
            "descr": descr,
            "arity": arity,
            "default": default,
        }
        _sanitize_metadata(cls, metadata)
        slot = _sanitize_slot_metadata(cls, metadata, FLOATING_WIDTHS)
        if not isinstance(default, int | float) or isinstance(default, bool):
            raise TypeError(f"{cls.__typename__} 'default' must be a number")
        metadata["default"] = float(default)
        return cls._build(metadata, slot)


class Callback(Option):
    """
    Argument handed to a caller-supplied handler.

    handler(option, text) must return how many characters of `text` it
    consumed; 0 means "no valid argument here". With arity NONE (or an
    absent optional argument) it is called with text=None. The handler owns
    the destination of the value: the engine writes nothing for it.
    """
    __introspectable__ = (
        "short",
        "long",
        "descr",
        "arity",
        "handler",
    )

    kind = Kind.CALLBACK

    def __new__(cls, short=None, long=None, handler=Unset, descr=None, *, arity=Arity.REQUIRED):
        metadata = {
            "short": short,
            "long": long,
            "handler": handler,
            "descr": descr,
            "arity": arity,
            "default": None,
        }
        _sanitize_metadata(cls, metadata)
        if not builtins.callable(handler):
            raise TypeError(f"{cls.__typename__} 'handler' must be callable")
        self = cls._build(metadata)
        self._arguments.pop("default")
        return self

    @property
    def metavar(self):
        return "ARG"


class Enumerated(Option):
    """
    One of a fixed, ordered list of tokens; the matched index is stored.

    Matching is exact, case-sensitive and covers the whole argument. The
    argument is always required once parsing starts, whatever the declared
    arity (see Table).
    """
    __introspectable__ = Option.__introspectable__ + ("choices", "combine")

    kind = Kind.ENUMERATED

    def __new__(
            cls,
            short=None,
            long=None,
            target=Unset,
            choices=(),
            descr=None,
            *,
            arity=Arity.REQUIRED,
            default=0,
            combine=Combine.OVERWRITE
    ):
        metadata = {
            "short": short,
            "long": long,
            "target": target,
            "choices": choices,
            "descr": descr,
            "arity": arity,
            "default": default,
            "combine": combine,
        }
        _sanitize_metadata(cls, metadata)
        slot = _sanitize_slot_metadata(cls, metadata, INTEGER_WIDTHS)
        _sanitize_integer_metadata(cls, metadata)

        if isinstance(choices, str) or not isinstance(choices, Sequence):
            raise TypeError(f"{cls.__typename__} 'choices' must be a sequence of strings")
        sanitized = []
        for choice in choices:
            if not isinstance(choice, str):
                raise TypeError(f"{cls.__typename__} 'choices' must be strings")
            if not choice:
                raise ValueError(f"{cls.__typename__} 'choices' cannot contain empty strings")
            if choice in sanitized:
                raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
            sanitized.append(choice)
        if not sanitized:
            raise ValueError(f"{cls.__typename__} 'choices' cannot be empty")
        metadata["choices"] = tuple(sanitized)
        return cls._build(metadata, slot)

    @property
    def metavar(self):
        return ",".join(self._choices)


_CTYPES_KINDS = {
    "b": Signed, "h": Signed, "i": Signed, "l": Signed, "q": Signed,
    "B": Unsigned, "H": Unsigned, "I": Unsigned, "L": Unsigned, "Q": Unsigned,
    "f": Floating, "d": Floating, "g": Floating,
    "c": Char, "u": Char,
    "Z": String,
}


def declare(short=None, long=None, target=Unset, descr=None, /, **options):
    """
    Build a descriptor whose kind and width are inferred from `target`.

    Inference
    - ctypes.c_bool            → Unsigned, arity NONE, default 1 (boolean)
    - signed ctypes integers   → Signed
    - unsigned ctypes integers → Unsigned
    - c_float/c_double/c_longdouble → Floating
    - c_char/c_wchar           → Char
    - c_wchar_p or Cell        → String
    - any other callable       → Callback (target is the handler)

    Remaining keyword options (arity, default, combine, choices) are passed to
    the inferred class unchanged.
    """
    if isinstance(target, Cell):
        return String(short, long, target, descr, **options)

    if isinstance(target, ctypes._SimpleCData):
        code = type(target)._type_
        if code == "?":
            options.setdefault("arity", Arity.NONE)
            options.setdefault("default", 1)
            return Unsigned(short, long, target, descr, **options)
        try:
            cls = _CTYPES_KINDS[code]
        except KeyError:
            raise TypeError("declare() cannot infer an option kind for %s" % type(target).__name__) from None
        return cls(short, long, target, descr, **options)

    if builtins.callable(target):
        return Callback(short, long, target, descr, **options)

    raise TypeError("declare() cannot infer an option kind for %s" % type(target).__name__)


def switch(short=None, long=None, target=Unset, descr=None, /, *, bit=Unset):
    """
    Boolean Unsigned option.

    - without `bit`: writes 1 on a match.
    - with `bit`: ORs `bit` into the slot, so several switches can share one
      mask; negation clears exactly that bit.
    """
    if bit is Unset:
        return Unsigned(short, long, target, descr, arity=Arity.NONE, default=1)
    if not isinstance(bit, int) or isinstance(bit, bool) or bit <= 0:
        raise ValueError("switch() 'bit' must be a positive integer")
    return Unsigned(short, long, target, descr, arity=Arity.NONE, default=bit, combine=Combine.OR)


def callback(short=None, long=None, descr=None, /, *, arity=Arity.REQUIRED):
    """
    Decorator binding a handler function as a Callback option.

        @callback("c", "callback", "call the callback")
        def on_callback(option, text):
            print("callback saw:", text)
            return len(text)

    The decorated name is bound to the resulting Callback descriptor.
    """
    @rename("callback")
    def wrapper(handler, /):
        if not builtins.callable(handler):
            raise TypeError("@callback() must be applied to a callable")
        return Callback(short, long, handler, descr, arity=arity)

    return wrapper


class Table:
    """
    Resolved, read-only view of an option table for one parse call.

    - Enumerated options are replaced by copies with arity REQUIRED; the
      caller's descriptors are never modified.
    - Lookups are linear scans in declaration order; the first match wins.
    """
    __slots__ = ("_options",)

    def __init__(self, options, /):
        if isinstance(options, Table):
            self._options = options._options
            return
        resolved = []
        for option in options:
            if not isinstance(option, Option):
                raise TypeError("option table entries must be options, not %s" % type(option).__name__)
            if option.kind is Kind.ENUMERATED and option.arity is not Arity.REQUIRED:
                option = copy.replace(option, arity=Arity.REQUIRED)
            resolved.append(option)
        self._options = tuple(resolved)

    def __iter__(self):
        return iter(self._options)

    def __len__(self):
        return len(self._options)

    def __getitem__(self, index):
        return self._options[index]

    def short(self, char, /):
        for option in self._options:
            if option.short == char:
                return option
        return None

    def long(self, name, /):
        for option in self._options:
            if option.long == name:
                return option
        return None

    def negatable(self, name, /):
        """
        boolean-shaped option spelled `name` (for "--no-name"), if any.
        """
        for option in self._options:
            if option.long == name and option.kind is Kind.UNSIGNED and option.boolean:
                return option
        return None


__all__ = (
    # Enumerations
    "Kind",
    "Arity",
    "Combine",

    # Descriptors
    "Option",
    "String",
    "Char",
    "Signed",
    "Unsigned",
    "Floating",
    "Callback",
    "Enumerated",

    # Helpers
    "declare",
    "switch",
    "callback",
    "Table",
)

del OptionType
