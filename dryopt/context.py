"""
dryopt parse context: configuration plus per-session state.

A Context replaces the process-wide state a C option parser would keep in
globals (program name, byte order, "mistakes were made" flag, config block).
Construct one per logical parse session and pass it to every parse() call;
the engine mutates only its session fields.

Configuration (validated at construction, read-only afterwards)
- policy: Policy.DIE | COMPLAIN | NOOP | RAISE.
- plus_negates: parse "+xyz" tokens as bitmask-negation clusters.
- no_setlocale: skip locale activation on the first parse.
- exit_on_help: exit(0) after rendering help; when False, parsing stops and
  `helped` is set instead.
- width: help wrap width (None follows the console).
- colorful: style help and diagnostics.
- usage / extra: usage-line argument label and extra text under it.
- hook: error collaborator, called as hook(prog, message).
- stdout / stderr: rich consoles for help and diagnostics.
- byteorder: "little" | "big", defaults to the host's.

Session state (mutated by the engine)
- prog: captured from argv[0] by the first parse, never overwritten.
- mistakes_were_made: set on every report; reset only through reset().
- helped: set when a help request was served without exiting.
"""
import functools
import locale
import sys

from rich.console import Console

from .faults import Policy, echo, trigger
from .utils import Unset, coalesce, mirror


class Context:
    """
    Parse session: configuration and accumulated state.
    """
    __introspectable__ = (
        "policy",
        "plus_negates",
        "no_setlocale",
        "exit_on_help",
        "width",
        "colorful",
        "usage",
        "extra",
        "stdout",
        "stderr",
        "byteorder",
    )

    policy = mirror("policy")
    plus_negates = mirror("plus_negates")
    no_setlocale = mirror("no_setlocale")
    exit_on_help = mirror("exit_on_help")
    width = mirror("width")
    colorful = mirror("colorful")
    usage = mirror("usage")
    extra = mirror("extra")
    stdout = mirror("stdout")
    stderr = mirror("stderr")
    byteorder = mirror("byteorder")

    def __init__(
            self,
            *,
            policy=Policy.DIE,
            plus_negates=False,
            no_setlocale=False,
            exit_on_help=True,
            width=None,
            colorful=False,
            usage="[ARGS]",
            extra=None,
            hook=Unset,
            stdout=Unset,
            stderr=Unset,
            byteorder=sys.byteorder,
            prog=Unset
    ):
        if not isinstance(policy, Policy):
            raise TypeError("context 'policy' must be a Policy")
        if width is not None and (not isinstance(width, int) or isinstance(width, bool)):
            raise TypeError("context 'width' must be an integer")
        if width is not None and width < 20:
            raise ValueError("context 'width' must be at least 20 columns")
        if not isinstance(usage, str):
            raise TypeError("context 'usage' must be a string")
        if extra is not None and not isinstance(extra, str):
            raise TypeError("context 'extra' must be a string")
        if hook is not Unset and not callable(hook):
            raise TypeError("context 'hook' must be callable")
        for name, console in (("stdout", stdout), ("stderr", stderr)):
            if console is not Unset and not isinstance(console, Console):
                raise TypeError(f"context {name!r} must be a rich console")
        if byteorder not in ("little", "big"):
            raise ValueError("context 'byteorder' must be 'little' or 'big'")
        if prog is not Unset and not isinstance(prog, str):
            raise TypeError("context 'prog' must be a string")

        self._policy = policy
        self._plus_negates = bool(plus_negates)
        self._no_setlocale = bool(no_setlocale)
        self._exit_on_help = bool(exit_on_help)
        self._width = width
        self._colorful = bool(colorful)
        self._usage = usage
        self._extra = extra
        self._stdout = Console() if stdout is Unset else stdout
        self._stderr = Console(stderr=True) if stderr is Unset else stderr
        self._byteorder = byteorder
        self._hook = hook

        self.prog = coalesce(prog)
        self.mistakes_were_made = False
        self.helped = False
        self._localized = False

    @property
    def hook(self):
        """
        the error collaborator; defaults to printing on the stderr console.
        """
        if self._hook is Unset:
            return functools.partial(echo, console=self._stderr, colorful=self._colorful)
        return self._hook

    def capture(self, argv0, /):
        """
        record the program name from argv[0] unless one is already known.
        """
        if self.prog is None and argv0 is not None:
            self.prog = str(argv0)
        return self.prog

    def localize(self):
        """
        activate the environment's locale once per context (unless disabled).
        """
        if self._no_setlocale or self._localized:
            return
        self._localized = True
        try:
            locale.setlocale(locale.LC_ALL, "")
        except locale.Error:
            # unsupported environment locale: keep running in the C locale
            pass

    def report(self, fault, /, **options):
        """
        surface `fault` under this context's policy.

        Always sets mistakes_were_made, whatever the policy.
        """
        trigger(fault, context=self, policy=self._policy, **options)

    def reset(self):
        """
        clear the accumulated session flags (the engine never does this).
        """
        self.mistakes_were_made = False
        self.helped = False

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        options = {name: getattr(self, "_" + name) for name in type(self).__introspectable__}
        options["hook"] = self._hook
        options["prog"] = Unset if self.prog is None else self.prog
        return type(self)(**{**options, **overrides})

    def __repr__(self):
        return "context(prog=%r, policy=%s, mistakes_were_made=%r)" % (
            self.prog, self._policy.name, self.mistakes_were_made
        )


__all__ = (
    "Context",
    "Policy",
)
