"""
dryopt faults (diagnostics raised while scanning argv) and their rendering.

Scope
- FaultCode: stable numeric identifiers for every runtime input error the
  engine can report, grouped by domain.
- Policy: what happens once a fault is reported (exit, complain, stay silent,
  or raise for library embeddings).
- OptionError and its subclasses: one class per fault kind, carrying the
  message and the reporting options, able to render themselves with rich.
- trigger(): the single entry point that surfaces a fault.

Message copy
- Messages keep the terse getopt-like register of classic C tools:
  "prog: unrecognised option: x", "prog: 99999: Numerical result out of range".
  The program name is prepended by the renderer, never by the message itself.

Integration
- The engine never calls trigger() directly; it goes through
  Context.report(fault), which merges the session options (context, policy)
  before triggering.
"""
import copy
import errno
import os
import sys
from enum import Enum, IntEnum
from types import MappingProxyType

from rich.console import Console
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - spelling (2110x): UNRECOGNISED_OPTION, UNRECOGNISED_LONG_OPTION,
      MALFORMED_ENCODING
    - arguments (2120x): MISSING_ARGUMENT, INVALID_ARGUMENT, TRAILING_JUNK,
      UNRECOGNISED_CHOICE, UNEXPECTED_ARGUMENT
    - negation (2130x): BITMASK_NEGATION_MISUSE
    """
    # --- spelling errors ---
    UNRECOGNISED_OPTION         = 21101
    UNRECOGNISED_LONG_OPTION    = 21102
    MALFORMED_ENCODING          = 21103

    # --- argument errors ---
    MISSING_ARGUMENT            = 21201
    INVALID_ARGUMENT            = 21202
    TRAILING_JUNK               = 21203
    UNRECOGNISED_CHOICE         = 21204
    UNEXPECTED_ARGUMENT         = 21205

    # --- negation errors ---
    BITMASK_NEGATION_MISUSE     = 21301


class Policy(Enum):
    """
    error-reporting policy.

    - DIE: render through the hook, then exit with status 1 right away.
    - COMPLAIN: render through the hook and keep parsing.
    - NOOP: only remember that something failed.
    - RAISE: raise the fault (library embeddings; nothing is rendered).
    """
    DIE = "die"
    COMPLAIN = "complain"
    NOOP = "noop"
    RAISE = "raise"


def render(prog, message, /, *, colorful=False):
    """
    build the one-line "prog: message" diagnostic as rich Text.
    """
    if not colorful:
        return Text("%s: %s" % (prog, message))
    return Text.assemble((str(prog), "bold #E6E6F0"), ": ", (str(message), "#FF4DA6"))


def echo(prog, message, /, *, console=Unset, colorful=False):
    """
    default error hook: print the diagnostic on a stderr console.
    """
    if console is Unset:
        console = Console(stderr=True)
    console.print(render(prog, message, colorful=colorful), soft_wrap=True, highlight=False)


class OptionError(Exception):
    """
    base class of every fault the engine reports.

    - message: the diagnostic body (without the program name).
    - options: read-only reporting context merged in by trigger(); the engine
      sets at least `code`, `context` and `policy`.
    """
    code = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        context = self.options.get("context")
        prog = getattr(context, "prog", None) or os.path.basename(sys.argv[0]) or "dryopt"
        return render(prog, self.message, colorful=getattr(context, "colorful", False))

    def __trigger__(self):
        context = self.options["context"]
        context.mistakes_were_made = True

        match self.options.get("policy", context.policy):
            case Policy.NOOP:
                return
            case Policy.RAISE:
                raise self from None
            case Policy.COMPLAIN:
                context.hook(context.prog, self.message)
            case Policy.DIE:
                context.hook(context.prog, self.message)
                sys.exit(1)
            case policy:
                raise RuntimeError("unexpected policy %r" % (policy,))

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnrecognisedOptionError(OptionError):
    code = FaultCode.UNRECOGNISED_OPTION

class UnrecognisedLongOptionError(OptionError):
    code = FaultCode.UNRECOGNISED_LONG_OPTION

class MalformedEncodingError(OptionError):
    code = FaultCode.MALFORMED_ENCODING

class MissingArgumentError(OptionError):
    code = FaultCode.MISSING_ARGUMENT

class InvalidArgumentError(OptionError):
    code = FaultCode.INVALID_ARGUMENT

class TrailingJunkError(OptionError):
    code = FaultCode.TRAILING_JUNK

class UnrecognisedChoiceError(OptionError):
    code = FaultCode.UNRECOGNISED_CHOICE

class UnexpectedArgumentError(OptionError):
    code = FaultCode.UNEXPECTED_ARGUMENT

class BitmaskNegationError(OptionError):
    code = FaultCode.BITMASK_NEGATION_MISUSE


def strerror(code, /):
    """
    libc wording of an errno value ("Numerical result out of range", ...).
    """
    return os.strerror(code)


ERANGE = errno.ERANGE
EILSEQ = errno.EILSEQ


def trigger(fault, /, **options):
    """
    surface a fault with the given reporting options.

    contract
    - fault must provide __trigger__ and __replace__ (see OptionError).
    - options are merged into a copy of the fault via copy.replace() before
      triggering; the original fault object is left untouched.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "Policy",
    "OptionError",
    "UnrecognisedOptionError",
    "UnrecognisedLongOptionError",
    "MalformedEncodingError",
    "MissingArgumentError",
    "InvalidArgumentError",
    "TrailingJunkError",
    "UnrecognisedChoiceError",
    "UnexpectedArgumentError",
    "BitmaskNegationError",
    "render",
    "echo",
    "strerror",
    "trigger",
)
