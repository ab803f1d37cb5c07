"""
Argot faults (exit codes, errors) and rendering.

Scope
- ExitCode: the numeric outcomes a command invocation can report. These are the
  only values the core produces; mapping them to a process exit is the host's job.
- DefinitionError: builder-time schema problems (empty/duplicate names, duplicate
  or digit-leading flags, a second array argument, badly typed defaults). Raised
  immediately; a program must not run with a malformed schema.
- CommandError and subclasses: per-invocation failures (invalid values, missing
  required fields, no runner attached, runner crashed). Each carries a message,
  an ExitCode and free-form context options, and knows how to render itself
  with rich.

Rendering
- Lowercased, soft tone: a bracketed header (program name, code and title) followed by the message.
- fancy=True wraps the message in a rich Panel; colorful=False drops the palette.
- The palette can be overridden with a __styles__ mapping in __main__, and the
  program name with __prog__.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset


class ExitCode(IntEnum):
    """
    invocation outcomes (stable contract with the surrounding dispatcher).
    """
    SUCCESS = 0
    FAILURE = 1
    INVALID = 2
    CANNOT_EXECUTE = 126
    NOT_FOUND = 127

    @property
    def title(self):
        return {
            ExitCode.SUCCESS: "success",
            ExitCode.FAILURE: "command failure",
            ExitCode.INVALID: "invalid command",
            ExitCode.CANNOT_EXECUTE: "command cannot execute",
            ExitCode.NOT_FOUND: "command not found",
        }[self]


class DefinitionError(ValueError):
    """
    a command definition is malformed (raised while building, never deferred).
    """


class CommandError(Exception):
    """
    base of every per-invocation failure.

    parameters
    - message: str | Unset
      human-readable message naming the offending field; defaults to the
      code's title ("invalid command", "command cannot execute", ...).
    - code: ExitCode (keyword)
      numeric outcome reported by the invocation.
    - **options: any
      context for renderers and callers (input, argument, expected, given, ...).
      'colorful' and 'fancy' control rendering; 'command' provides the program name.
    """
    __exitcode__ = ExitCode.FAILURE

    def __init__(self, message=Unset, /, *, code=Unset, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__} message must be a string")
        code = ExitCode(code if code is not Unset else type(self).__exitcode__)
        self.code = code
        self.message = message if message is not Unset else code.title
        self.options = MappingProxyType(options)
        super().__init__(self.message)

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)

        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
        } | getattr(main, "__styles__", {}))

        def text(fragment, style):
            return Text(str(fragment), styles[style] if colorful else "")

        command = self.options.get("command")
        prog = getattr(main, "__prog__", getattr(command, "name", "argot"))

        header = Text.assemble(
            "[ ",
            text(prog, "prog-name"),
            " — ",
            text(int(self.code), "code"),
            " | ",
            text(self.code.title, "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")

        if self.options.get("fancy", False):
            return Panel(message, title=header, title_align="left")
        return Group(header, message)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, code=self.code, **{**self.options, **overrides})


class InvalidOptionError(CommandError):
    __exitcode__ = ExitCode.INVALID


class InvalidArgumentError(CommandError):
    __exitcode__ = ExitCode.INVALID


class MissingRequiredError(CommandError):
    __exitcode__ = ExitCode.INVALID


class NotImplementedCommandError(CommandError):
    __exitcode__ = ExitCode.CANNOT_EXECUTE


class DelegatedCommandError(CommandError):
    __exitcode__ = ExitCode.FAILURE


__all__ = (
    "ExitCode",
    "DefinitionError",
    "CommandError",
    "InvalidOptionError",
    "InvalidArgumentError",
    "MissingRequiredError",
    "NotImplementedCommandError",
    "DelegatedCommandError",
)
