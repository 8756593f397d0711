"""
Argstream help screens, rendered with rich.

- usage_form(spec): the decorated usage fragment of one spec:
    X          required, single
    [ X ]      optional, single
    ( X )*     optional, repeatable
    ( X )+     required, repeatable
  where X is "--name=METAVAR" ("--name" for flags, the metavar for positionals).
- exhaustive_form(spec): every way to write the spec, comma separated
  ("--output=FILE, --out=FILE, -o FILE").
- render_usage(registry): the usage line (program name plus required specs).
- render_help(registry): usage line, description, one row per visible spec.

Palette keys
- usage-label, program-name, usage-section, description-section
- option-name, flag-name, metavar, argument-description
- panel-title

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- A registry built with colorful=False renders plain text; fancy=True wraps the
  help screen in a panel.
"""
from collections import defaultdict, deque

from rich.console import Console, Group
from rich.containers import Lines
from rich.panel import Panel
from rich.text import Text

from .utils import *

_PALETTE = {
    # head
    "usage-label": "bold #00E6FF",  # cyan signature label
    "program-name": "bold #FF4D94",  # magenta-pink brand pop
    "usage-section": "bold #36C5F0",  # sky-blue usage items
    "description-section": "italic #A3A3A3",  # neutral gray

    # rows
    "option-name": "bold #00E6FF",
    "flag-name": "bold #22C55E",
    "metavar": "bold #FFD600",
    "argument-description": "#9CA3AF",

    # fancy panel
    "panel-title": "bold #FF4D94",
}

INDENT = 30


def _stylist(colorful):
    styles = defaultdict(str, _PALETTE | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    return styler, text


def _forms(spec, styler, text):
    # Every spelling of a spec as styled Text, longs then shorts then positional.
    style = styler("flag-name" if spec.kind.nullary else "option-name")
    metavar = text(spec.metavar, styler("metavar")) if spec.metavar else None

    for name in spec.longs:
        if metavar:
            yield Text.assemble(text("--" + name, style), "=", metavar)
        else:
            yield text("--" + name, style)

    for name in spec.shorts:
        if metavar:
            yield Text.assemble(text("-" + name, style), " ", metavar)
        else:
            yield text("-" + name, style)

    if spec.positional:
        yield metavar or text("ARG", styler("metavar"))


def _simple(spec, styler, text):
    if spec.positional:
        return text(spec.metavar or "ARG", styler("metavar"))
    return next(_forms(spec, styler, text))


def _decorate(spec, simple):
    if spec.required and spec.list:
        return Text.assemble("( ", simple, " )+")
    if spec.list:
        return Text.assemble("( ", simple, " )*")
    if not spec.required:
        return Text.assemble("[ ", simple, " ]")
    return simple


def usage_form(spec, /, *, colorful=False):
    """
    Decorated usage fragment of `spec` as rich Text.
    """
    styler, text = _stylist(colorful)
    return _decorate(spec, _simple(spec, styler, text))


def exhaustive_form(spec, /, *, colorful=False):
    """
    Every spelling of `spec`, comma separated, as rich Text.
    """
    styler, text = _stylist(colorful)
    return Text(", ").join(_forms(spec, styler, text))


def _compiled(registry):
    # Help only reads metadata, but a defective registry has nothing to show.
    if hasattr(registry, "compile"):
        return registry.compile()
    return registry


def render_usage(registry, /, *, console=Unset):
    """
    Usage line: "usage: <command> <required specs...>", wrapped to the console.
    """
    registry = _compiled(registry)
    console = Console(stderr=True) if console is Unset else console
    styler, text = _stylist(registry.colorful)
    width = console.width - 4 * registry.fancy

    usage = Text()
    usage.append(text("usage", styler("usage-label"))).append(":")
    usage.append(" ")
    usage.append(text(registry.command, styler("program-name")))

    offset = len(usage) + 1  # hanging indent for wrapped items
    inputs = deque(
        _decorate(spec, _simple(spec, styler, text))
        for spec in registry
        if spec.required and not spec.hidden
    )

    lines = Lines()
    while inputs:
        input = inputs.popleft()
        if not lines or len(lines[-1]) + 1 + len(input) > width - offset:
            lines.append(input)
        else:
            lines[-1].append(Text(" ") + input)

    for index, line in enumerate(lines):
        usage.append(" " if index == 0 else "\n" + " " * offset).append(line)

    return usage


def render_help(registry, /, *, console=Unset):
    """
    Full help screen: usage line, description and one row per visible spec.

    Each row lists every spelling of the spec; the description starts at
    column 30 (on the next line when the spellings are wider) and wraps to the
    console width.
    """
    registry = _compiled(registry)
    console = Console(stderr=True) if console is Unset else console
    styler, text = _stylist(registry.colorful)
    width = console.width - 4 * registry.fancy

    renders = [render_usage(registry, console=console).append("\n")]

    if registry.descr:
        paragraph = Text()
        for line in text(registry.descr, styler("description-section")).wrap(console, width):
            paragraph.append(line).append("\n")
        renders.append(paragraph)

    rows = Text()
    for spec in registry:
        if spec.hidden:
            continue

        section = Text.assemble(Text(", ").join(_forms(spec, styler, text)))
        if descr := text(spec.descr, styler("argument-description")):
            if len(section) >= INDENT:
                section.append("\n").append(" " * INDENT)
            else:
                section.append(" " * (INDENT - len(section)))
            wrapped = descr.wrap(console, max(width - INDENT, 20))
            try:
                section.append(wrapped.pop(0))
            except IndexError:
                pass
            for line in wrapped:
                section.append("\n").append(" " * INDENT).append(line)

        rows.append(section).append("\n")

    if rows:
        renders.append(rows)

    renders[-1].rstrip()

    renderable = Group(*renders)

    if registry.fancy:
        renderable = Panel(
            renderable,
            title=Text.assemble("[", " ", f"{registry.command} HELP".upper(), " ", "]", style=styler("panel-title")),
            title_align="left",
        )

    return renderable


__all__ = (
    "usage_form",
    "exhaustive_form",
    "render_usage",
    "render_help",
)
