r"""
Argot argument and option specifications.

Overview
- Specs
  • ArgumentSpec: positional, value-bearing field (required, optional or trailing array).
  • OptionSpec: named, value-bearing field selected by one or more flag tokens.
  • Flag: a dash-stripped flag token and whether it is short (one character).

- Defaults
  • LiteralDefault(value): a concrete value, validated when the spec is built.
  • ComputedDefault(provider): a zero-argument callable evaluated when a parse
    needs the default; the materialized value is validated at that time.
  Passing a plain callable as `default` wraps it in a ComputedDefault; anything
  else is wrapped in a LiteralDefault. Unset/None fall back to the value type's
  canonical default ([] for array arities).

- Introspection & representation
  • SpecType metaclass provides stable __repr__/__rich_repr__ and exposes the
    fields declared in __introspectable__ via read-only properties.

Validation highlights
- name: non-empty string after trimming.
- flags (OptionSpec): at least one; each is trimmed then dash-stripped, must be
  non-empty, must not start with a digit and must not repeat within the spec.
  uniqueness across a whole command is enforced by the command builder.
- default: literal defaults must satisfy the value type (every element for arrays).

Examples
    >>> ArgumentSpec("path", Arity.REQUIRED, ValueType.STRING)
    argument-spec(name='path', descr='', type=<ValueType.STRING: 'string'>, ...)
    >>> OptionSpec("verbose", ("v", "--verbose"), type=ValueType.BOOLEAN).flags
    (Flag(token='v', short=True), Flag(token='verbose', short=False))
"""
import functools
import operator
import re
from collections.abc import Iterable
from typing import NamedTuple

from rich.text import Text

from .faults import DefinitionError
from .utils import *
from .values import ValueType, Arity, OptionArity


class LiteralDefault:
    """
    a concrete default value.

    array values are kept as a tuple and materialized as a fresh list on each
    call, so the list a parse hands out can be mutated without touching the spec.
    """
    __slots__ = ("_value",)

    def __init__(self, value, /):
        self._value = tuple(value) if isinstance(value, list) else value

    @property
    def value(self):
        return self._value

    def materialize(self):
        return list(self._value) if isinstance(self._value, tuple) else self._value

    def __eq__(self, other, /):
        if not isinstance(other, LiteralDefault):
            return NotImplemented
        return self._value == other._value

    def __hash__(self):
        return hash((LiteralDefault, self._value))

    def __repr__(self):
        return f"literal({self._value!r})"


class ComputedDefault:
    """
    a default produced by a zero-argument callable, evaluated once per parse
    whenever the parse needs it.
    """
    __slots__ = ("_provider",)

    def __init__(self, provider, /):
        if not callable(provider):
            raise TypeError("ComputedDefault() argument must be callable")
        self._provider = provider

    @property
    def provider(self):
        return self._provider

    def materialize(self):
        return self._provider()

    def __repr__(self):
        return f"computed({getattr(self._provider, '__qualname__', self._provider)!r})"


class Flag(NamedTuple):
    token: str
    short: bool

    @property
    def label(self):
        """
        command-line spelling: '-x' for short flags, '--name' otherwise.
        """
        return ("-" if self.short else "--") + self.token


class SpecType(type):
    """
    Metaclass that turns spec classes into introspectable, read-only descriptors.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private backing field ("_" + name).
    - Provide stable, readable __repr__/__rich_repr__ implementations.
    - Derive __typename__ from the class name (camel-case split with hyphens).
    """
    __introspectable__ = ()

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
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the fields shared by every spec.

    - name: non-empty string after trimming.
    - descr: string or rich Text; trimmed (may be empty).
    - type: a ValueType member.
    - arity: a member of the spec's arity enum (cls.__arity__).

    Mutates the metadata dict in place.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__kind__} name must be a string")
    elif not (name := name.strip()):
        raise DefinitionError(f"{cls.__kind__} name can't be empty")
    metadata["name"] = name

    if not isinstance(descr := metadata["descr"], str | Text):
        raise TypeError(f"{cls.__kind__} '{name}' description must be a string")
    metadata["descr"] = descr.strip() if isinstance(descr, str) else descr

    if not isinstance(metadata["type"], ValueType):
        raise TypeError(f"{cls.__kind__} '{name}' value type must be a ValueType")

    if not isinstance(metadata["arity"], cls.__arity__):
        raise TypeError(f"{cls.__kind__} '{name}' arity must be a {cls.__arity__.__name__}")


def _sanitize_default(cls, metadata, /):
    """
    Internal: wrap the default into its variant and validate literal defaults.

    - LiteralDefault / ComputedDefault instances are taken as-is.
    - callables become ComputedDefault (validated when materialized).
    - Unset / None become the canonical default: [] for arrays, else type.default.
    - array defaults must be a list or tuple whose every element validates.
    - scalar defaults must validate against the value type.
    """
    name, type, default = metadata["name"], metadata["type"], metadata["default"]
    array = metadata["arity"] is cls.__array__

    if isinstance(default, ComputedDefault):
        return
    if not isinstance(default, LiteralDefault):
        if callable(default):
            metadata["default"] = ComputedDefault(default)
            return
        if default is Unset or default is None:
            default = [] if array else type.default
        default = LiteralDefault(default)

    _check(cls, name, type, array, default.materialize())
    metadata["default"] = default


def _check(cls, name, type, array, value, /):
    """
    Internal: raise DefinitionError unless value is a valid default.
    """
    if array:
        if not isinstance(value, list | tuple):
            raise DefinitionError(f"{cls.__kind__} '{name}' default value must be an array")
        for element in value:
            if not type.validate(element):
                raise DefinitionError(
                    f"{cls.__kind__} '{name}' default value contains an invalid value: "
                    f"{type.value}[] expected, {ValueType.describe(element)}[] given"
                )
    elif not type.validate(value):
        raise DefinitionError(
            f"{cls.__kind__} '{name}' default value is an invalid value: "
            f"{type.value} expected, {ValueType.describe(value)} given"
        )


def _sanitize_flags(cls, metadata, /):
    """
    Internal: normalize the flag tokens of an option into Flag tuples.

    Tokens are trimmed and dash-stripped ('--verbose' → 'verbose', '-v' → 'v').
    """
    name = metadata["name"]
    if isinstance(flags := metadata["flags"], str) or not isinstance(flags, Iterable):
        raise TypeError(f"{cls.__kind__} '{name}' flags must be an iterable of strings")

    tokens = []
    for flag in flags:
        if not isinstance(flag, str):
            raise TypeError(f"{cls.__kind__} '{name}' flags must be strings")
        if not (token := flag.strip().lstrip("-")):
            raise DefinitionError(f"{cls.__kind__} '{name}' flag {flag!r} is empty")
        if token[0].isdigit():
            raise DefinitionError(f"command flag '{token}' cannot begin with a digit")
        if token in tokens:
            raise DefinitionError(f"command flag '{token}' already defined")
        tokens.append(token)

    if not tokens:
        raise DefinitionError(f"{cls.__kind__} '{name}' must have at least one flag")

    metadata["flags"] = [Flag(token, len(token) < 2) for token in tokens]


class _Spec(metaclass=SpecType):
    __kind__ = "field"
    __arity__ = None
    __array__ = None

    @property
    def kind(self):
        return type(self).__kind__

    @property
    def required(self):
        return self._arity in (Arity.REQUIRED, OptionArity.VALUE_REQUIRED)

    @property
    def array(self):
        return self._arity is type(self).__array__

    def materialize(self):
        """
        return the default value for one parse.

        computed defaults are evaluated now and validated; an invalid value is
        a schema bug and raises DefinitionError.
        """
        value = self._default.materialize()
        if isinstance(self._default, ComputedDefault):
            _check(type(self), self._name, self._type, self.array, value)
            if self.array:
                value = list(value)
        return value


class ArgumentSpec(_Spec):
    """
    positional argument specification.

    parameters
    - name: str, unique key in the parse result.
    - arity: Arity, REQUIRED (default), OPTIONAL or ARRAY.
    - type: ValueType, STRING by default.
    - default: any | callable | LiteralDefault | ComputedDefault
    - descr: str | Text, short help text.
    """
    __kind__ = "argument"
    __arity__ = Arity
    __array__ = Arity.ARRAY

    __introspectable__ = (
        "name",
        "descr",
        "type",
        "arity",
        "default",
    )

    def __new__(cls, name, arity=Arity.REQUIRED, type=ValueType.STRING, default=Unset, descr=""):
        metadata = {
            "name": name,
            "descr": descr,
            "type": type,
            "arity": arity,
            "default": default,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_default(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self


class OptionSpec(_Spec):
    """
    option specification.

    parameters
    - name: str, unique key in the parse result.
    - flags: Iterable[str], flag tokens, dashes optional ('v', '-v', '--verbose').
    - arity: OptionArity, VALUE_OPTIONAL by default.
    - type: ValueType, STRING by default.
    - default: any | callable | LiteralDefault | ComputedDefault
    - descr: str | Text, short help text.
    """
    __kind__ = "option"
    __arity__ = OptionArity
    __array__ = OptionArity.VALUE_ARRAY

    __introspectable__ = (
        "name",
        "descr",
        "type",
        "arity",
        "default",
        "flags",
    )

    def __new__(cls, name, flags, arity=OptionArity.VALUE_OPTIONAL, type=ValueType.STRING, default=Unset, descr=""):
        metadata = {
            "name": name,
            "descr": descr,
            "type": type,
            "arity": arity,
            "default": default,
            "flags": flags,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_default(cls, metadata)
        _sanitize_flags(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def boolean(self):
        return self._type is ValueType.BOOLEAN


__all__ = (
    "LiteralDefault",
    "ComputedDefault",
    "Flag",
    "ArgumentSpec",
    "OptionSpec",
)
