"""
Argot help rendering.

Builds the help screen of a command from its resolved specs (usage line,
description, arguments, options) as a rich renderable, and provides the handler
auto-registered on every command for the `help` option (-h/--help).

Palette keys
- usage-label, program-name, usage-section, description-section
- group-label, argument-name, option-name, argument-description, default
- panel-title

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- Define __prog__ in __main__ to prefix the usage line with the program name.
- When the command is not colorful, styling is suppressed.
"""
import json
from collections import defaultdict

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .arguments import LiteralDefault
from .faults import ExitCode
from .handlers import Continue, Stop
from .values import ValueType, Arity, OptionArity


def usage(command, /):
    """
    plain usage line: name, [options], optional arguments, then required ones
    (the array argument last, as '...name').
    """
    parts = [command.name]
    if command.options:
        parts.append("[options]")

    optional = []
    required = []
    for argument in command.positionals:
        match argument.arity:
            case Arity.OPTIONAL:
                optional.append(f"[{argument.name}]")
            case Arity.ARRAY:
                required.append(f"...{argument.name}")
            case _:
                required.append(argument.name)

    prog = getattr(__import__("__main__"), "__prog__", None)
    return " ".join(([prog] if prog else []) + parts + optional + required)


def _suffix(spec):
    """
    ' [default: ...]' for optional fields carrying a meaningful literal default.
    """
    if spec.arity not in (Arity.OPTIONAL, OptionArity.VALUE_OPTIONAL):
        return ""
    if not isinstance(spec.default, LiteralDefault) or spec.type is ValueType.BOOLEAN:
        return ""
    if (value := spec.default.value) is None or value == "":
        return ""
    return " [default: %s]" % json.dumps(value)


def render_help(command, /):
    """
    build the help screen of command as a rich renderable.
    """
    styles = defaultdict(str, {
        "usage-label": "bold #00E6FF",
        "program-name": "bold #FF4D94",
        "usage-section": "bold #36C5F0",
        "description-section": "italic #A3A3A3",
        "group-label": "bold #FFFFFF",
        "argument-name": "bold #FFD600",
        "option-name": "bold #22C55E",
        "argument-description": "#9CA3AF",
        "default": "#FFD600 dim",
        "panel-title": "bold #FF4D94",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def text(fragment, style=""):
        if isinstance(fragment, Text):
            return fragment if command.colorful else Text(fragment.plain)
        return Text(str(fragment), styles[style] if command.colorful else "")

    renders = []

    head = Text()
    head.append(text("usage", "usage-label")).append(":\n  ")
    head.append(text(usage(command), "usage-section"))
    renders.append(head)

    renders.append(Text.assemble(
        text("description", "group-label"), ":\n  ",
        text(command.descr or "no description given for this command", "description-section"),
    ))

    if command.arguments:
        table = Table.grid(padding=(0, 2))
        table.add_column(no_wrap=True)
        table.add_column()
        for argument in command.positionals:
            table.add_row(
                Text.assemble("  ", text(argument.name, "argument-name")),
                Text.assemble(
                    text(argument.descr or "no description given for this argument", "argument-description"),
                    text(_suffix(argument), "default"),
                ),
            )
        renders.append(Group(Text.assemble(text("arguments", "group-label"), ":"), table))

    if command.options:
        table = Table.grid(padding=(0, 2))
        table.add_column(no_wrap=True)
        table.add_column()
        for option in command.options.values():
            table.add_row(
                Text.assemble("  ", text(", ".join(flag.label for flag in option.flags), "option-name")),
                Text.assemble(
                    text(option.descr or "no description given for this option", "argument-description"),
                    text(_suffix(option), "default"),
                ),
            )
        renders.append(Group(Text.assemble(text("options", "group-label"), ":"), table))

    renderable = Group(*renders)

    if command.fancy:
        renderable = Panel(
            renderable,
            title=text(f"[ {command.name} help ]".upper(), "panel-title"),
            title_align="left",
        )
    return renderable


def help_handler(output, result, command, /):
    """
    handler bound to the 'help' trigger: renders help and stops when truthy.
    """
    if not result.get("help"):
        return Continue
    output.out(render_help(command))
    return Stop(ExitCode.SUCCESS)


__all__ = (
    "usage",
    "render_help",
    "help_handler",
)
