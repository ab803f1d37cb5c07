"""
Argot utilities.

Scope
- Helpers shared by the argument, parser and command layers.

Contents
- Unset: "not provided" marker for parameters where None is a meaningful value
  (option defaults, runners, prompts). Falsy, singleton, cannot be subclassed.
- coalesce(value, fallback): swap Unset for a fallback, leaving None/0/"" alone.
- rename(...): give generated functions (metaclass reprs, decorators) a readable
  __name__/__qualname__.
- mirror(name): read-only property over self._name that hands out frozen views,
  so specs and command tables cannot be edited through their public attributes.

Quick examples
    >>> coalesce(Unset, "string")
    'string'
    >>> coalesce(None, "string") is None
    True
    >>> class Table:
    ...     rows = mirror("rows")
    ...     def __init__(self): self._rows = ["a"]
    >>> Table().rows
    ('a',)
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    type of the Unset marker.

    - bool(Unset) is False, yet Unset is neither None nor 0.
    - UnsetType() always returns the one instance; copies and pickles keep it.
    - usable in annotations and isinstance checks: `str | Unset`.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    __ror__ = __or__

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    object, unless it is Unset, in which case default.
    """
    return default if object is Unset else object


def rename(*parameters):
    """
    rename(function, name) renames function in place and returns it;
    rename(name) returns a decorator doing the same.
    """
    if len(parameters) == 1:
        name, = parameters
        if not isinstance(name, str):
            raise TypeError("@rename() argument must be a string")
        return lambda function: rename(function, name)

    if len(parameters) != 2:
        raise TypeError(f"rename() takes 1 or 2 arguments but {len(parameters)} were given")

    function, name = parameters
    if not builtins.callable(function):
        raise TypeError("rename() first argument must be callable")
    if not isinstance(name, str):
        raise TypeError("rename() second argument must be a string")
    try:
        function.__name__ = function.__qualname__ = name
    except (AttributeError, TypeError):
        raise TypeError(f"cannot rename {function!r}") from None
    return function


def _freeze(object):
    # mappings are proxied, not copied; sequences and sets are snapshotted
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    elif isinstance(object, Set):
        return frozenset(object)
    elif isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    return object


def mirror(name, /):
    """
    read-only property returning a frozen view of self._<name>.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


Unset = UnsetType()


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "UnsetType",
    "Unset",
)
