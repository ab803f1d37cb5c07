"""
Argot tokenizing parser.

Turns an already tokenized argument vector into a ParseResult for one command,
in a single left-to-right pass with one piece of lookback state: the pending
flag cluster (flags seen in the previous token that still wait for a value).

Token classes
- negative number  '-5', '-1,5', '-.5'       → a plain value (comma becomes a dot)
- switch           '-abc', '--name', '-x=1'  → flags; '--' selects one long name,
                                               '-' splits into single characters
- plain            anything else             → a value for the pending cluster,
                                               or the next positional slot

Rules
- boolean flags resolve to true on sight and never consume the next token.
- the remaining (non-boolean) flags of a cluster share the next plain token.
- a switch arriving while a cluster is pending resolves that cluster with no
  value, i.e. with each option's default.
- an inline value ('--name=value', '-ab=value') resolves every flag of the token
  with that value right away.
- unknown flags are dropped.
- the positional cursor moves on once a non-array slot received a value; the
  array slot (always last) collects every later positional token.
- positional tokens left once every slot is filled end up in `remaining`.

After the pass the missing required fields are recorded, then every field
absent from the input receives its (materialized) default.

The parser keeps all of its state on a Parser instance created per invocation;
the command is only read, so concurrent parses never interfere.
"""
import re
from collections import deque
from collections.abc import Mapping
from typing import NamedTuple

from .faults import InvalidOptionError, InvalidArgumentError
from .values import ValueType

_NUMBER = re.compile(r"-(?:[.,]?\d+|\d+[.,]\d+)")
_SWITCH = re.compile(r"(-{1,2})(\w.*)", re.DOTALL)


class Missing(NamedTuple):
    name: str
    kind: str


class ParseResult(Mapping):
    """
    typed values of one invocation.

    - mapping: field name → typed value, for every argument then every option
      (declaration order); always fully populated with defaults.
    - missing: tuple[Missing, ...], required fields absent from the raw input.
    - remaining: tuple[str, ...], positional tokens no slot accepted.
    """
    __slots__ = ("_values", "_missing", "_remaining")

    def __init__(self, values, /, missing=(), remaining=()):
        self._values = dict(values)
        self._missing = tuple(Missing(*item) for item in missing)
        self._remaining = tuple(remaining)

    @property
    def missing(self):
        return self._missing

    @property
    def remaining(self):
        return self._remaining

    def __getitem__(self, name, /):
        return self._values[name]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __eq__(self, other, /):
        if isinstance(other, ParseResult):
            return (
                self._values == other._values and
                self._missing == other._missing and
                self._remaining == other._remaining
            )
        return super().__eq__(other)

    __hash__ = None

    def __repr__(self):
        return f"parse-result({self._values!r}, missing={self._missing!r}, remaining={self._remaining!r})"

    def __rich_repr__(self):
        yield "values", self._values
        yield "missing", self._missing
        yield "remaining", self._remaining


def _label(token):
    return ("-" if len(token) == 1 else "--") + token


class Parser:
    """
    one-shot parser binding a command to a token stream.

    parameters
    - command: Command, read-only source of specs and the flag index.
    - tokens: Iterable[str], argument vector without program/command names.
    """

    def __init__(self, command, tokens, /):
        self._command = command
        self._arguments = command.arguments
        self._options = command.options
        self._flags = command.flags
        self._tokens = deque(tokens)
        self._positionals = deque(command.positionals)
        self._values = {}
        self._pending = []
        self._remaining = []

    def parse(self):
        while self._tokens:
            token = self._tokens.popleft()

            if _NUMBER.fullmatch(token):
                token = token.replace(",", ".")
            elif match := _SWITCH.fullmatch(token):
                self._resolve_switch(*match.groups())
                continue

            if self._pending:
                self._resolve(self._pending, token)
                self._pending = []
            else:
                self._resolve_positional(token)

        if self._pending:
            self._resolve(self._pending, None)
            self._pending = []

        return self._finalize()

    def _resolve_switch(self, dashes, remainder):
        """
        handle one switch token; leaves non-boolean flags pending.
        """
        if self._pending:
            self._resolve(self._pending, None)
            self._pending = []

        name, separator, value = remainder.partition("=")
        tokens = [name] if dashes == "--" else list(name)

        if separator:
            self._resolve(tokens, value)
            return

        for token in tokens:
            try:
                option = self._options[self._flags[token]]
            except KeyError:
                continue
            if option.boolean:
                self._resolve([token], "true")
            else:
                self._pending.append(token)

    def _resolve(self, tokens, value):
        """
        assign one raw value (or the default, when value is None) to every flag in tokens.
        """
        for token in tokens:
            try:
                option = self._options[name := self._flags[token]]
            except KeyError:
                continue

            if value is None:
                converted = option.materialize()
                values = converted if option.array else [converted]
            else:
                values = [converted := option.type.convert(value)]

            for element in values:
                if not option.type.validate(element):
                    given = ValueType.describe(element)
                    raise InvalidOptionError(
                        f"option {_label(token)} is invalid: {option.type.value} expected, "
                        f"{given} {element!r} given",
                        input=_label(token),
                        argument=option,
                        value=value,
                        expected=option.type.value,
                        given=given,
                        command=self._command,
                    )

            if option.array:
                self._values.setdefault(name, []).extend(values)
            else:
                self._values[name] = converted

    def _resolve_positional(self, token):
        if not self._positionals:
            self._remaining.append(token)
            return

        argument = self._positionals[0]
        converted = argument.type.convert(token)

        if not argument.type.validate(converted):
            given = ValueType.describe(converted)
            raise InvalidArgumentError(
                f"argument '{argument.name}' is invalid: {argument.type.value} expected, "
                f"{given} {converted!r} given",
                input=argument.name,
                argument=argument,
                value=token,
                expected=argument.type.value,
                given=given,
                command=self._command,
            )

        if argument.array:
            self._values.setdefault(argument.name, []).append(converted)
        else:
            self._values[argument.name] = converted
            self._positionals.popleft()

    def _finalize(self):
        specs = (*self._arguments.values(), *self._options.values())

        missing = [
            (spec.name, spec.kind) for spec in specs if spec.required and spec.name not in self._values
        ]

        values = {}
        for spec in specs:
            value = self._values.get(spec.name)
            values[spec.name] = value if value is not None else spec.materialize()

        return ParseResult(values, missing, self._remaining)


def parse(command, tokens, /):
    """
    parse tokens against command and return a fresh ParseResult.
    """
    return Parser(command, tokens).parse()


__all__ = (
    "Missing",
    "ParseResult",
    "Parser",
    "parse",
)
