"""
Argot output sink.

The core only hands pre-built messages (plain strings or rich renderables such as
faults and help screens) to an Output; styling and terminal handling belong to
the sink. ConsoleOutput is the default sink, backed by two rich consoles.
"""
from typing import Protocol, runtime_checkable

from rich.console import Console

from .utils import Unset


@runtime_checkable
class Output(Protocol):
    def out(self, *messages): ...
    def err(self, *messages): ...


class ConsoleOutput:
    """
    rich-backed output sink.

    parameters
    - stdout: Console | Unset, console for regular output (a stdout console when Unset).
    - stderr: Console | Unset, console for errors (a stderr console when Unset).

    plain strings are printed verbatim (no markup or highlighting); renderables
    are printed through rich.
    """

    def __init__(self, stdout=Unset, stderr=Unset):
        self.stdout = Console() if stdout is Unset else stdout
        self.stderr = Console(stderr=True) if stderr is Unset else stderr

    @staticmethod
    def _print(console, messages):
        for message in messages:
            if isinstance(message, str):
                console.print(message, markup=False, highlight=False, end="")
            else:
                console.print(message)

    def out(self, *messages):
        self._print(self.stdout, messages)
        return self

    def err(self, *messages):
        self._print(self.stderr, messages)
        return self


__all__ = (
    "Output",
    "ConsoleOutput",
)
