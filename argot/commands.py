"""
Argot command layer: declare, parse and run one command.

What this module provides
- Command: a command definition plus its executor.
  • Builder: add_argument(), add_option(), add_handler(), attach(); every call is
    validated on the spot and raises DefinitionError for a malformed schema.
  • Parsing: parse() turns an argument vector into a typed ParseResult.
  • Execution: __invoke__() runs handlers, checks required fields and calls the
    primary body; run() does the same but reports failures as exit codes.
  • A boolean 'help' option (-h/--help) and its handler are registered on every
    command unless it is built with helper=False.

- Factories and helpers:
  • command(...): create a Command around a function (or return a decorator).
  • invoke(obj, prompt): convenience runner returning the exit code.

Quick start
    from argot import command, invoke, Arity, OptionArity, ValueType

    @command("greet", "say hello to someone")
    def greet(output, args):
        for _ in range(args["times"]):
            output.out(f"hello {args['name']}\\n")

    greet.add_argument("name", Arity.REQUIRED, ValueType.STRING)
    greet.add_option("times", ("t", "times"), OptionArity.VALUE_OPTIONAL, ValueType.INTEGER, 1)

    if __name__ == "__main__":
        raise SystemExit(invoke(greet))

Lifecycle
- The schema is built once; the first parse seals it, after which builder calls
  raise DefinitionError. Specs and the flag index are only read while parsing,
  so one command may be parsed any number of times, concurrently.

Subclassing
- Override configure() to declare the schema and execute() to provide the body
  instead of attaching a runner.
"""
import copy
import functools
import inspect
import operator
import re
import shlex
import sys
from collections.abc import Iterable

from rich.text import Text

from .arguments import ArgumentSpec, OptionSpec
from .faults import *
from .handlers import Handler, run_handlers
from .help import help_handler
from .output import ConsoleOutput
from .parser import parse
from .utils import *
from .values import ValueType, Arity, OptionArity


class CommandType(type):
    """
    Metaclass giving commands read-only introspection and stable representations.

    - Every name listed in __introspectable__ becomes a read-only property that
      mirrors the private backing field ("_" + name).
    - __displayable__ narrows which fields __rich_repr__ (and __repr__) show.
    - __typename__ is derived from the class name (camel-case split with hyphens).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Command(metaclass=CommandType):
    """
    Command definition and executor.

    Parameters
    - name: str
      non-empty command name (used in usage lines and fault headers).
    - descr: str | Text
      short description shown in help.
    - runner: Callable[[Output, ParseResult], int | None] | Unset
      primary body; may also be attached later with attach().
    - helper: bool (keyword)
      register the boolean 'help' option (-h/--help) and its handler. False marks
      the definition as the help definition itself.
    - colorful / fancy: bool (keyword)
      rendering switches for help screens and faults.

    Introspection (read-only)
    - arguments: Mapping[str, ArgumentSpec] in declaration order.
    - options: Mapping[str, OptionSpec] in declaration order.
    - flags: Mapping[str, str], flag token → option name.
    - positionals: tuple[ArgumentSpec, ...], the array argument (if any) last.
    - handlers: tuple[Handler, ...] in registration order.
    """
    __introspectable__ = (
        "name",
        "descr",
        "runner",
        "arguments",
        "options",
        "flags",
        "positionals",
        "handlers",
        "helper",
        "colorful",
        "fancy",
        "sealed",
    )

    __displayable__ = (
        "name",
        "descr",
        "arguments",
        "options",
        "helper",
    )

    def __init__(self, name, descr="", runner=Unset, *, helper=True, colorful=True, fancy=False):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} name must be a string")
        elif not (name := name.strip()):
            raise DefinitionError("command name can't be empty")
        if not isinstance(descr, str | Text):
            raise TypeError(f"{type(self).__typename__} description must be a string")
        if runner is not Unset and not callable(runner):
            raise TypeError(f"{type(self).__typename__} runner must be callable")

        self._name = name
        self._descr = descr.strip() if isinstance(descr, str) else descr
        self._runner = runner
        self._arguments = {}
        self._options = {}
        self._flags = {}
        self._positionals = []
        self._handlers = []
        self._helper = bool(helper)
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)
        self._sealed = False

        if self._helper:
            self.add_option(
                "help",
                ("h", "help"),
                OptionArity.VALUE_OPTIONAL,
                ValueType.BOOLEAN,
                False,
                "display help for the given command"
            )
            self.add_handler("help", help_handler)

        self.configure()

    def configure(self):
        """
        Hook for subclasses: declare arguments, options and handlers here.
        """

    def _ensure_open(self):
        if self._sealed:
            raise DefinitionError(f"command '{self._name}' cannot be modified once parsing started")

    def _ensure_unique(self, kind, name):
        if name in self._arguments or name in self._options:
            raise DefinitionError(
                f"command {kind} '{name}' already exists as an "
                f"{'argument' if name in self._arguments else 'option'}"
            )

    def add_argument(self, name, arity=Arity.REQUIRED, type=ValueType.STRING, default=Unset, descr=""):
        """
        Declare a positional argument and return self.

        Raises DefinitionError when the name is empty or already used, when a second
        array argument is declared, or when a literal default fails validation.
        """
        self._ensure_open()
        argument = ArgumentSpec(name, arity, type, default, descr)
        self._ensure_unique("argument", argument.name)

        if argument.array and any(other.array for other in self._arguments.values()):
            raise DefinitionError(
                f"command argument '{argument.name}' cannot be defined, an array argument already exists"
            )

        self._arguments[argument.name] = argument
        # the array slot never advances, it has to stay the last one consumed
        if self._positionals and self._positionals[-1].array:
            self._positionals.insert(len(self._positionals) - 1, argument)
        else:
            self._positionals.append(argument)
        return self

    def add_option(self, name, flags, arity=OptionArity.VALUE_OPTIONAL, type=ValueType.STRING, default=Unset, descr=""):
        """
        Declare an option bound to one or more flag tokens and return self.

        Raises DefinitionError when the name is empty or already used, when flags
        is empty, when a flag starts with a digit or is already registered, or
        when a literal default fails validation.
        """
        self._ensure_open()
        option = OptionSpec(name, flags, arity, type, default, descr)
        self._ensure_unique("option", option.name)

        for flag in option.flags:
            if flag.token in self._flags:
                raise DefinitionError(f"command flag '{flag.token}' already defined")

        self._options[option.name] = option
        self._flags.update(dict.fromkeys((flag.token for flag in option.flags), option.name))
        return self

    def add_handler(self, trigger, handler):
        """
        Register handler(output, result, command) under a trigger field name and return self.
        """
        self._ensure_open()
        if not isinstance(trigger, str):
            raise TypeError(f"{type(self).__typename__} handler trigger must be a string")
        elif not (trigger := trigger.strip()):
            raise DefinitionError("command handler trigger can't be empty")
        if not callable(handler):
            raise TypeError(f"{type(self).__typename__} handler must be callable")

        self._handlers.append(Handler(trigger, handler))
        return self

    def attach(self, runner, /):
        """
        Set the primary body and return it unchanged (usable as a decorator).
        """
        self._ensure_open()
        if not callable(runner):
            raise TypeError("attach() argument must be callable")
        self._runner = runner
        return runner

    def with_name(self, name, /):
        """
        Return an unsealed copy of this definition registered under another name.
        """
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} name must be a string")
        elif not (name := name.strip()):
            raise DefinitionError("command name can't be empty")

        clone = copy.copy(self)
        clone._name = name
        clone._arguments = dict(self._arguments)
        clone._options = dict(self._options)
        clone._flags = dict(self._flags)
        clone._positionals = list(self._positionals)
        clone._handlers = list(self._handlers)
        clone._sealed = False
        return clone

    @staticmethod
    def _tokenize(prompt):
        """
        Normalize a prompt into a list of tokens.

        - Unset: sys.argv[1:]
        - str: split shell-style (shlex.split)
        - Iterable[str]: taken as-is
        """
        if prompt is Unset:
            return sys.argv[1:]
        elif isinstance(prompt, str):
            return shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("prompt must be a string or an iterable of strings")
            return tokens
        raise TypeError("prompt must be a string or an iterable of strings")

    def parse(self, prompt=Unset, /):
        """
        Parse prompt into a ParseResult; seals the definition.

        Raises InvalidOptionError / InvalidArgumentError (ExitCode.INVALID) for values
        that do not match their declared type.
        """
        tokens = self._tokenize(prompt)
        self._sealed = True
        return parse(self, tokens)

    def execute(self, output, result):
        """
        Run the primary body; override in subclasses or attach a runner.

        Raises NotImplementedCommandError (ExitCode.CANNOT_EXECUTE) without a runner.
        """
        if self._runner is Unset:
            raise NotImplementedCommandError(
                f"{type(self).__name__}.execute() not implemented for command '{self._name}'",
                command=self,
            )
        return self._runner(output, result)

    def __invoke__(self, prompt=Unset, output=Unset):
        """
        Parse, run the handler chain, check required fields, then execute.

        Returns the exit code; raises CommandError on failure. Exceptions escaping
        the body are wrapped in DelegatedCommandError (ExitCode.FAILURE).
        """
        output = ConsoleOutput() if output is Unset else output
        result = self.parse(prompt)

        if (stop := run_handlers(self._handlers, output, result, self)) is not None:
            return stop.code

        for name, kind in result.missing:
            raise MissingRequiredError(
                f"required {kind} '{name}' does not exist",
                input=name,
                kind=kind,
                command=self,
            )

        try:
            code = self.execute(output, result)
        except CommandError:
            raise
        except Exception as exception:
            raise DelegatedCommandError(
                f"{type(exception).__name__} has been thrown: {exception}",
                exception=exception,
                command=self,
            ) from exception

        if not isinstance(code, int) or isinstance(code, bool):
            return ExitCode.SUCCESS
        return ExitCode(code) if code in ExitCode else code

    def run(self, prompt=Unset, output=Unset):
        """
        Like __invoke__(), but a CommandError is rendered on the error stream and
        its code returned instead of being raised.
        """
        output = ConsoleOutput() if output is Unset else output
        try:
            return self.__invoke__(prompt, output)
        except CommandError as error:
            output.err(copy.replace(error, command=self, colorful=self._colorful, fancy=self._fancy))
            return error.code


def command(source=Unset, /, descr=Unset, **options):
    """
    Create a Command around a runner function, or return a decorator doing so.

    Invocation modes
    - Direct:            cmd = command(func)
    - Bare decorator:    @command
    - Named decorator:   @command("name", "description", helper=..., colorful=..., fancy=...)

    The function becomes the runner (called as func(output, result)); the name
    defaults to its __name__ and the description to its docstring.
    """
    name = Unset
    if isinstance(source, str):
        name, source = source, Unset

    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return Command(
            coalesce(name, getattr(source, "__name__", "command")),
            coalesce(descr, inspect.getdoc(source) or ""),
            source,
            **options
        )

    return wrapper(source) if source is not Unset else wrapper


def invoke(object, prompt=Unset, /, output=Unset):
    """
    Convenience runner: run a Command (or a plain runner function wrapped with
    command()) and return its exit code.
    """
    if isinstance(object, Command):
        return object.run(prompt, output)

    if callable(object):
        return invoke(command(object), prompt, output=output)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must be a command or a callable")


__all__ = (
    "Command",
    "command",
    "invoke",
)

del CommandType
