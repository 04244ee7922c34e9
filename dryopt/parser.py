"""
dryopt top-level driver.

parse(argv, options, context) walks argv from index 1 and hands each
option-shaped token to a scanner:

- "--"            consumed, parsing stops.
- "--name..."     LongScanner.
- "-abc..."       ShortScanner.
- "-"             parsing stops, not consumed (stdin placeholder).
- "+abc..."       PlusScanner, only when context.plus_negates is set.
- anything else   parsing stops, not consumed.

The return value is the number of entries consumed after argv[0]; the caller
treats argv[1 + consumed:] as positional arguments.
"""
from collections.abc import Sequence

from .context import Context
from .options import Table
from .scanners import ShortScanner, LongScanner, PlusScanner
from .utils import Unset


def classify(token, context, /):
    """
    the scanner class for `token`, or None when parsing stops before it.
    """
    if token.startswith("--"):
        return LongScanner
    if token.startswith("-") and len(token) > 1:
        return ShortScanner
    if context.plus_negates and token.startswith("+") and len(token) > 1:
        return PlusScanner
    return None


def parse(argv, options, /, context=Unset):
    """
    Parse the options at the front of `argv` into their slots.

    - argv: program name followed by the arguments (e.g. sys.argv).
    - options: iterable of option descriptors; never modified.
    - context: parse session; a fresh Context() when omitted.

    Returns the number of argv entries consumed after argv[0].

    Raises
    - TypeError: argv is not a sequence of strings, or the table holds
      something other than options.
    - the matching OptionError subclass, under Policy.RAISE.
    - SystemExit: on help (status 0) or under Policy.DIE (status 1).
    """
    if isinstance(argv, str) or not isinstance(argv, Sequence):
        raise TypeError("parse() argv must be a sequence of strings")
    if not all(isinstance(token, str) for token in argv[1:]):
        raise TypeError("parse() argv must be a sequence of strings")
    if context is Unset:
        context = Context()
    elif not isinstance(context, Context):
        raise TypeError("parse() context must be a Context")

    table = Table(options)
    if not argv:
        return 0

    context.capture(argv[0])
    context.localize()

    index = 1
    while index < len(argv):
        if argv[index] == "--":
            index += 1
            break
        if (scanner := classify(argv[index], context)) is None:
            break
        scanner = scanner(argv, index, table, context)
        index += scanner.run()
        if scanner.helped:
            break

    return index - 1


__all__ = (
    "classify",
    "parse",
)
