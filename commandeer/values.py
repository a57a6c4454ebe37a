"""
Lazily-typed command-line values.

A Value wraps one raw token (an argument, a flag or an environment variable)
and converts it only when read. Each conversion is independent and may fail
with a ParseError; nothing is cached and nothing is defaulted.

Accepted forms
- bool: 1 t T TRUE true True / 0 f F FALSE false False
- int, int64: optional leading sign then ASCII digits, base 10
- uint64: ASCII digits only, base 10

Examples
    >>> Value("42").int()
    42
    >>> Value("673758150012174337").uint64()
    673758150012174337
    >>> Value("673758150012174337").int()
    Traceback (most recent call last):
    ...
    commandeer.faults.ParseError: cannot parse '673758150012174337' as int: value out of range
"""
import re

from .faults import ParseError

_TRUTHS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSITIES = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_SIGNED = re.compile(r"[+-]?[0-9]+")
_UNSIGNED = re.compile(r"[0-9]+")

# inclusive bounds per integer width
LIMITS = {
    "int": (-(1 << 31), (1 << 31) - 1),
    "int64": (-(1 << 63), (1 << 63) - 1),
    "uint64": (0, (1 << 64) - 1),
}


class Value(str):
    """
    Immutable textual token with on-demand typed conversions.

    Value is a str, so equality, hashing and emptiness checks operate on the
    raw text: Value("") is falsey and Value("x") == "x".
    """
    __slots__ = ()

    def __new__(cls, text="", /):
        if not isinstance(text, str):
            raise TypeError("value must be built from a string")
        return super().__new__(cls, text)

    def __repr__(self):
        return f"Value({str.__repr__(self)})"

    def string(self):
        return str(self)

    def bool(self):
        if self in _TRUTHS:
            return True
        if self in _FALSITIES:
            return False
        raise ParseError(
            f"cannot parse {str.__repr__(self)} as bool: invalid syntax",
            text=str(self),
            type="bool",
            reason="invalid syntax",
            hint="expected one of 1, t, true, 0, f, false",
        )

    def int(self):
        return self._integer("int", _SIGNED)

    def int64(self):
        return self._integer("int64", _SIGNED)

    def uint64(self):
        return self._integer("uint64", _UNSIGNED)

    def _integer(self, typename, pattern):
        if not pattern.fullmatch(self):
            reason = "invalid syntax"
        elif not LIMITS[typename][0] <= (number := int(self, 10)) <= LIMITS[typename][1]:
            reason = "value out of range"
        else:
            return number
        raise ParseError(
            f"cannot parse {str.__repr__(self)} as {typename}: {reason}",
            text=str(self),
            type=typename,
            reason=reason,
            hint="expected a base-10 %s between %d and %d" % (typename, *LIMITS[typename]),
        )


__all__ = (
    "Value",
)
