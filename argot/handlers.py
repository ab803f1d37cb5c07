"""
Argot handler chain.

Handlers are cross-cutting hooks (the built-in one answers --help) that run, in
registration order, against a parse result before the command's primary body.

Contract
- A handler is registered under a trigger name (a field of the command) and is
  called as handler(output, result, command) whenever the parse result maps the
  trigger to a non-None value.
- It answers with a tagged result:
  • Continue: not applicable, move on to the next handler (None means the same).
  • Stop(code): end the invocation now and report `code`; required-field checks
    and the primary body are skipped. Stop() reports SUCCESS.
- Returning anything else is a programming error (TypeError).
"""
import functools
from typing import NamedTuple, final

from .faults import ExitCode


@final
class ContinueType:
    """
    singleton marker: the handler did not apply, the chain goes on.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __repr__(self):
        return "Continue"

    def __reduce__(self):
        return "Continue"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'ContinueType' is not an acceptable base type")


Continue = ContinueType()


class Stop(NamedTuple):
    """
    short-circuit marker carrying the code the invocation reports.
    """
    code: ExitCode | int = ExitCode.SUCCESS


class Handler(NamedTuple):
    trigger: str
    callback: object

    def triggered(self, result, /):
        return result.get(self.trigger) is not None


def run_handlers(handlers, output, result, command, /):
    """
    run handlers in order and return the first Stop, or None when none stopped.

    parameters
    - handlers: Iterable[Handler]
    - output: Output sink handed to every handler.
    - result: ParseResult of the current invocation.
    - command: the Command being invoked.
    """
    for handler in handlers:
        if not handler.triggered(result):
            continue

        match outcome := handler.callback(output, result, command):
            case Stop():
                if not isinstance(code := outcome.code, int) or isinstance(code, bool):
                    raise TypeError(f"handler {handler.trigger!r} stopped with a non-integer code")
                return Stop(ExitCode(code) if code in ExitCode else code)
            case ContinueType() | None:
                continue
            case _:
                raise TypeError(
                    f"handler {handler.trigger!r} must return Continue or Stop, not {type(outcome).__name__}"
                )
    return None


__all__ = (
    "ContinueType",
    "Continue",
    "Stop",
    "Handler",
    "run_handlers",
)
