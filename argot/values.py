"""
Argot value kinds and arities.

- ValueType: the primitive kinds a field can hold. Each kind owns a converter
  (raw text → typed value), a validation predicate and a canonical default.
- Arity: how a positional argument consumes tokens (required, optional, array).
- OptionArity: how an option consumes values (value required/optional, array).

Conversion never raises: a raw token that cannot be decoded as the declared kind
is handed back unchanged, so it fails validation later and surfaces as an
invalid-value fault naming the field.
"""
import json
import re
from enum import Enum, IntEnum


class ValueType(Enum):
    """
    primitive value kinds; the enum value is the label shown in diagnostics.

    conversion
    - NONE: always None.
    - STRING: the raw text unchanged.
    - BOOLEAN: true/false, 1/0, yes/no, on/off (case-insensitive).
    - INTEGER / FLOAT: a decimal comma is normalized to a dot and the text is
      decoded as a numeric literal; FLOAT promotes integral literals.
    """
    NONE = "null"
    STRING = "string"
    BOOLEAN = "bool"
    INTEGER = "int"
    FLOAT = "float"

    def convert(self, raw, /):
        if not isinstance(raw, str):
            raise TypeError(f"{self.name.lower()} convert() argument must be a string")

        match self:
            case ValueType.NONE:
                return None
            case ValueType.STRING:
                return raw
            case ValueType.BOOLEAN:
                return _BOOLEANS.get(raw.strip().lower(), raw)

        # bare decimal point literals (".5", "-.5") are not valid json numbers
        text = re.sub(r"^(\s*-?)\.(?=\d)", r"\g<1>0.", raw.replace(",", "."))
        try:
            value = json.loads(text, parse_constant=_reject)
        except ValueError:
            return raw

        if self is ValueType.FLOAT and isinstance(value, int) and not isinstance(value, bool):
            return float(value)
        # only numeric literals count as a decoded value
        if isinstance(value, int | float) and not isinstance(value, bool):
            return value
        return raw

    def validate(self, value, /):
        match self:
            case ValueType.NONE:
                return value is None
            case ValueType.STRING:
                return isinstance(value, str)
            case ValueType.BOOLEAN:
                return isinstance(value, bool)
            case ValueType.INTEGER:
                return isinstance(value, int) and not isinstance(value, bool)
            case ValueType.FLOAT:
                return isinstance(value, float)

    @property
    def default(self):
        return {
            ValueType.NONE: None,
            ValueType.STRING: "",
            ValueType.BOOLEAN: False,
            ValueType.INTEGER: 0,
            ValueType.FLOAT: 0.0,
        }[self]

    @staticmethod
    def describe(value, /):
        """
        kind label of an arbitrary python value, aligned with the enum labels.
        """
        if value is None:
            return "null"
        return type(value).__name__


def _reject(constant, /):
    # NaN and Infinity are python extensions, not json numbers
    raise ValueError(f"{constant} is not a number literal")


_BOOLEANS = {
    "true": True,
    "1": True,
    "yes": True,
    "on": True,
    "false": False,
    "0": False,
    "no": False,
    "off": False,
}


class Arity(IntEnum):
    """
    positional argument arity.

    - REQUIRED: must be present in the raw input.
    - OPTIONAL: falls back to its default.
    - ARRAY: trailing, unbounded; collects every remaining positional token.
      at most one per command and always consumed last.
    """
    REQUIRED = 1
    OPTIONAL = 2
    ARRAY = 4


class OptionArity(IntEnum):
    """
    option arity.

    - VALUE_REQUIRED: the option must be present in the raw input.
    - VALUE_OPTIONAL: falls back to its default.
    - VALUE_ARRAY: every occurrence appends to a list.
    """
    VALUE_REQUIRED = 1
    VALUE_OPTIONAL = 2
    VALUE_ARRAY = 4


__all__ = (
    "ValueType",
    "Arity",
    "OptionArity",
)
