"""
dryopt help rendering.

render_help(options, console, *, prog, usage, extra, width, colorful) prints

    Usage: PROG [OPTS] USAGE
    EXTRA
      -x, --name=TYPE      help text, wrapped with a hanging indent
      -o, --opt=[TYPE]     optional arguments are bracketed
      -m, --mode=a,b,c     enumerated options list their choices

Palette keys
- usage-label, program-name, usage-section, extra-section
- option-name, metavar, choice, option-description

Customization
- A mapping named __styles__ in __main__ overrides palette entries.
- When colorful is False, styling is suppressed.
"""
from collections import defaultdict

from rich.console import Console, Group
from rich.text import Text

from .options import Kind, Arity
from .utils import Unset

INDENT_LIMIT = 30


def render_help(options, console=Unset, /, *, prog=None, usage="[ARGS]", extra=None, width=None, colorful=False):
    console = Console() if console is Unset else console
    styles = defaultdict(str, {
        # === Head ===
        "usage-label": "bold #00E6FF",  # CYAN
        "program-name": "bold #FF4D94",  # MAGENTA-PINK
        "usage-section": "bold #36C5F0",  # SKY-BLUE
        "extra-section": "italic #A3A3A3",  # Neutral gray

        # === Options ===
        "option-name": "bold #00E6FF",
        "metavar": "bold #FFD600",  # AMBER
        "choice": "bold #FF4D94",
        "option-description": "#9CA3AF",  # Muted gray
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text()
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    width = width or console.width

    renders = []

    head = Text()
    head.append("Usage", styler("usage-label")).append(": ")
    head.append(text(prog, styler("program-name")))
    head.append(" [OPTS] ")
    head.append(text(usage, styler("usage-section")))
    renders.append(head)

    if extra:
        renders.append(text(extra, styler("extra-section")))

    def names(option):
        section = Text("  ")
        if option.short is not None:
            section.append(text("-" + option.short, styler("option-name")))
        if option.long is not None:
            if option.short is not None:
                section.append(", ")
            section.append(text("--" + option.long, styler("option-name")))

        if option.kind is Kind.ENUMERATED:
            section.append("=")
            section.append(Text(",").join(text(choice, styler("choice")) for choice in option.choices))
        elif option.arity is not Arity.NONE:
            section.append("=")
            if option.arity is Arity.OPTIONAL:
                section.append("[").append(text(option.metavar, styler("metavar"))).append("]")
            else:
                section.append(text(option.metavar, styler("metavar")))
        return section

    sections = [(names(option), option.descr) for option in options]

    # Description column: after the widest name section, unless it is too wide
    indent = min(max((len(section) for section, _ in sections), default=0) + 3, INDENT_LIMIT)

    for section, descr in sections:
        if descr:
            if len(section) >= indent:
                section.append("\n").append(" " * indent)
            else:
                section.append(" " * (indent - len(section)))
            wrapped = text(descr, styler("option-description")).wrap(console, max(width - indent, 10))
            try:
                section.append(wrapped.pop(0))
            except IndexError:
                pass
            for line in wrapped:
                section.append("\n").append(" " * indent).append(line)
        renders.append(section)

    console.print(Group(*renders), soft_wrap=True, highlight=False)


__all__ = (
    "render_help",
)
