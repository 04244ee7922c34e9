"""
dryopt scanners: explicit state machines over one argv token.

Every scanner starts at argv[index], may consume following entries as option
arguments, and reports how many entries it used through `consumed`.

States
- SCANNING: looking at the next option character (or the long option name).
- AWAITING: an option that takes an argument was matched; find its argument
  in the rest of the token or in the next argv entry.
- DONE: the token is exhausted (or the argument came from the next entry).
- FAILED: the token was abandoned after a reported fault.

step() performs exactly one transition; run() steps until DONE or FAILED.

Scanners
- ShortScanner: "-abc", "-ofile", "-n5"; clustered short options.
- LongScanner: "--name", "--name=value", "--name:value", "--no-name".
- PlusScanner: "+abc"; clears boolean-shaped options (only when the context
  enables plus_negates).
"""
import os
import re
import sys
from enum import Enum

from .decoding import decode
from .faults import (
    UnrecognisedOptionError,
    UnrecognisedLongOptionError,
    MalformedEncodingError,
    MissingArgumentError,
    TrailingJunkError,
    UnrecognisedChoiceError,
    UnexpectedArgumentError,
    BitmaskNegationError,
    strerror,
    EILSEQ,
)
from .helper import render_help
from .options import Kind, Arity
from .utils import Unset
from .writing import write, assign, negate


class State(Enum):
    SCANNING = "scanning"
    AWAITING = "awaiting"
    DONE = "done"
    FAILED = "failed"


def _escaped(char, /):
    return "\udc80" <= char <= "\udcff"


def _bytes(text, /):
    """
    byte length of `text` in the filesystem encoding (argv's original bytes).
    """
    return len(os.fsencode(text))


class Scanner:
    """
    Shared plumbing of the token scanners.

    - argv / index: the argument vector and the position of the current token.
    - table: resolved option Table.
    - context: the parse session.
    """
    def __init__(self, argv, index, table, context, /):
        self._argv = argv
        self._index = index
        self._table = table
        self._context = context
        self.state = State.SCANNING
        self.consumed = 1
        self.helped = False

    @property
    def token(self):
        return self._argv[self._index]

    def _peek(self):
        """
        the argv entry after everything consumed so far, or None.
        """
        index = self._index + self.consumed
        return self._argv[index] if index < len(self._argv) else None

    def _fail(self, fault, /):
        self._context.report(fault)
        self.state = State.FAILED

    def _help(self):
        context = self._context
        render_help(
            self._table,
            context.stdout,
            prog=context.prog,
            usage=context.usage,
            extra=context.extra,
            width=context.width,
            colorful=context.colorful,
        )
        if context.exit_on_help:
            sys.exit(0)
        context.helped = True
        self.helped = True
        self.state = State.DONE

    def _malformed(self, position, /):
        token = self.token
        self._fail(MalformedEncodingError("%s: byte %d of `%s'" % (
            strerror(EILSEQ), _bytes(token[:position]), os.fsencode(token).decode("utf-8", "backslashreplace")
        )))

    def _default(self, option, /):
        # optional argument absent: callbacks and None defaults leave the slot alone
        if option.kind is not Kind.CALLBACK and option.default is not None:
            write(option, option.default, self._context)

    def _commit(self, option, decoded, /):
        # Unset marks an argument that was recognized but already reported;
        # an optional argument then falls back to the default
        if decoded.value is not Unset:
            write(option, decoded.value, self._context)
        elif option.arity is Arity.OPTIONAL:
            self._default(option)

    def _missing(self, option, spelling, text=None, /):
        if option.kind is Kind.ENUMERATED and text is not None:
            return UnrecognisedChoiceError("unrecognised argument to %s: %s (expected %s)" % (
                spelling, text, option.metavar
            ))
        if option.kind is Kind.CALLBACK:
            return MissingArgumentError("missing argument to %s" % spelling)
        return MissingArgumentError("missing %s argument to %s" % (option.kind.value, spelling))

    def _lookahead(self, option, /):
        """
        optional argument without inline text: take the next entry only when
        the kind is strictly defined and the whole entry decodes to an accepted
        value; otherwise the option gets its default and the entry is left
        alone.
        """
        if option.strict and (entry := self._peek()) is not None:
            decoded = decode(option, entry, 0, self._context)
            if decoded is not None and decoded.value is not Unset and decoded.position == len(entry):
                self.consumed += 1
                self._commit(option, decoded)
                return
        self._default(option)

    def _separate(self, option, spelling, /):
        """
        required argument without inline text: the next entry is consumed
        wholesale, whether or not it decodes.
        """
        if (entry := self._peek()) is None:
            return self._fail(self._missing(option, spelling))
        self.consumed += 1
        if (decoded := decode(option, entry, 0, self._context)) is None:
            return self._fail(self._missing(option, spelling, entry))
        self._commit(option, decoded)
        if decoded.position < len(entry):
            return self._fail(TrailingJunkError("trailing junk after %d bytes of argument to %s: %s" % (
                _bytes(entry[:decoded.position]), spelling, entry
            )))
        self.state = State.DONE

    def step(self):
        raise NotImplementedError

    def run(self):
        while self.state in (State.SCANNING, State.AWAITING):
            self.step()
        return self.consumed


class ShortScanner(Scanner):
    """
    Clustered short options: "-abc", "-ab42", "-o" "file".

    After an option's argument is decoded inside the token, the rest of the
    token is scanned as further options.
    """
    def __init__(self, argv, index, table, context, /):
        super().__init__(argv, index, table, context)
        self._position = 1
        self._option = None

    def step(self):
        match self.state:
            case State.SCANNING:
                self._scan()
            case State.AWAITING:
                self._await()
            case state:
                raise RuntimeError("cannot step a scanner in state %s" % state.name)

    def _scan(self):
        token = self.token
        if self._position >= len(token):
            self.state = State.DONE
            return
        char = token[self._position]
        if _escaped(char):
            return self._malformed(self._position)
        self._position += 1

        if (option := self._table.short(char)) is None:
            if char in "h?":
                return self._help()
            self._context.report(UnrecognisedOptionError("unrecognised option: %s" % char))
            return

        if option.arity is Arity.NONE:
            assign(option, self._context)
            return

        self._option = option
        self.state = State.AWAITING

    def _await(self):
        token, option = self.token, self._option
        spelling = "-" + option.short
        self.state = State.SCANNING

        if self._position < len(token):
            decoded = decode(option, token, self._position, self._context)
            if decoded is not None:
                self._commit(option, decoded)
                self._position = decoded.position
            elif option.arity is Arity.OPTIONAL:
                self._default(option)
            else:
                self._fail(self._missing(option, spelling, token[self._position:]))
            return

        if option.arity is Arity.OPTIONAL:
            self._lookahead(option)
            self.state = State.DONE
            return

        self._separate(option, spelling)


class LongScanner(Scanner):
    """
    One long option: "--name", "--name=value", "--name:value", "--no-name".

    An inline argument suppresses the lookahead; text left over after decoding
    it is reported as trailing junk.
    """
    def __init__(self, argv, index, table, context, /):
        super().__init__(argv, index, table, context)
        name, *inline = re.split(r"[=:]", self.token[2:], maxsplit=1)
        self.name = name
        self.inline = inline[0] if inline else None
        self._option = None

    def step(self):
        match self.state:
            case State.SCANNING:
                self._scan()
            case State.AWAITING:
                self._await()
            case state:
                raise RuntimeError("cannot step a scanner in state %s" % state.name)

    def _scan(self):
        name, inline = self.name, self.inline

        if inline is None and name.startswith("no"):
            suffix = name[2:]
            if suffix.startswith("-"):
                suffix = suffix[1:]
            if (option := self._table.negatable(suffix)) is not None:
                negate(option, self._context)
                self.state = State.DONE
                return

        if (option := self._table.long(name)) is None:
            if name == "help":
                return self._help()
            return self._fail(UnrecognisedLongOptionError("unrecognised long option: %s" % name))

        if option.arity is Arity.NONE:
            if inline is not None:
                return self._fail(UnexpectedArgumentError("option --%s does not take an argument" % name))
            assign(option, self._context)
            self.state = State.DONE
            return

        self._option = option
        self.state = State.AWAITING

    def _await(self):
        option, inline = self._option, self.inline
        spelling = "--" + self.name
        self.state = State.DONE

        if inline is not None:
            if (decoded := decode(option, inline, 0, self._context)) is None:
                if option.arity is Arity.OPTIONAL:
                    return self._default(option)
                return self._fail(self._missing(option, spelling, inline))
            self._commit(option, decoded)
            if decoded.position < len(inline):
                self._fail(TrailingJunkError("trailing junk after %d bytes of argument to %s: %s" % (
                    _bytes(inline[:decoded.position]), spelling, inline
                )))
            return

        if option.arity is Arity.OPTIONAL:
            return self._lookahead(option)

        self._separate(option, spelling)


class PlusScanner(Scanner):
    """
    Bitmask negation cluster: "+abc" clears each named boolean-shaped option.

    Always consumes exactly its own token.
    """
    def __init__(self, argv, index, table, context, /):
        super().__init__(argv, index, table, context)
        self._position = 1

    def step(self):
        if self.state is not State.SCANNING:
            raise RuntimeError("cannot step a scanner in state %s" % self.state.name)

        token = self.token
        if self._position >= len(token):
            self.state = State.DONE
            return
        char = token[self._position]
        if _escaped(char):
            return self._malformed(self._position)
        self._position += 1

        if (option := self._table.short(char)) is None:
            self._context.report(UnrecognisedOptionError("unrecognised option: %s" % char))
        elif option.kind is Kind.UNSIGNED and option.boolean:
            negate(option, self._context)
        else:
            self._context.report(BitmaskNegationError("can't unset a non-boolean option: %s" % char))


__all__ = (
    "State",
    "Scanner",
    "ShortScanner",
    "LongScanner",
    "PlusScanner",
)
