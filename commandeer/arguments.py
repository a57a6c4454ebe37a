r"""
Commandeer argument declarations.

Overview
- Arg: one positional slot of a command (name, descr, variable).
  A variable Arg consumes every remaining positional token and must come last.
- Flag: one named, typed option of a command with a default.
- Kind: the closed set of flag kinds (string, bool, int, uint).

Flags carry their default and every parsed override as canonical text, so
reading a flag always goes through a Value, the same as positionals:
    bool  -> "true" / "false"
    int   -> decimal, signed 64-bit
    uint  -> decimal, unsigned 64-bit

Validation highlights
- Arg names: non-empty strings without whitespace.
- Flag names: bare names (no leading dashes) matching
  r"[^\W\d_](-?[^\W_]+)*"; "help" is reserved for usage rendering.
- Descriptions: strings, trimmed; empty is allowed.
- Defaults are type checked per kind (TypeError) and range checked for the
  integer kinds (ValueError).
"""
import re
from enum import StrEnum

from .utils import *
from .values import LIMITS, Value


class Kind(StrEnum):
    """
    Flag kinds.

    parse() turns a command-line token into canonical text (raising
    ParseError); canonical() does the same for a declared Python default
    (raising TypeError/ValueError).
    """
    STRING = "string"
    BOOL = "bool"
    INT = "int"
    UINT = "uint"

    def parse(self, text, /):
        value = Value(text)
        match self:
            case Kind.BOOL:
                return "true" if value.bool() else "false"
            case Kind.INT:
                return str(value.int64())
            case Kind.UINT:
                return str(value.uint64())
            case _:
                return value.string()

    def canonical(self, default, /):
        match self:
            case Kind.BOOL:
                if not isinstance(default, bool):
                    raise TypeError(f"{self} flag default must be a boolean")
                return "true" if default else "false"
            case Kind.INT | Kind.UINT:
                if not isinstance(default, int) or isinstance(default, bool):
                    raise TypeError(f"{self} flag default must be an integer")
                lower, upper = LIMITS["int64" if self is Kind.INT else "uint64"]
                if not lower <= default <= upper:
                    raise ValueError(f"{self} flag default must be between {lower} and {upper}")
                return str(default)
            case _:
                if not isinstance(default, str):
                    raise TypeError(f"{self} flag default must be a string")
                return default


def _sanitize_descr(cls, descr, /):
    if not isinstance(descr, str):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    return descr.strip()


class Arg(metaclass=SpecType):
    """
    Positional argument declaration. Immutable once built.
    """
    __introspectable__ = (
        "name",
        "descr",
        "variable",
    )

    def __init__(self, name, descr="", /, variable=False):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{type(self).__typename__} 'name' cannot be empty")
        elif re.search(r"\s", name):
            raise ValueError(f"{type(self).__typename__} 'name' cannot contain whitespace")
        self._name = name
        self._descr = _sanitize_descr(type(self), descr)
        self._variable = bool(variable)


class Flag(metaclass=SpecType):
    """
    Named flag declaration. Immutable once built.

    'default' is the canonical text of the declared default (see Kind).
    """
    __introspectable__ = (
        "name",
        "kind",
        "default",
        "descr",
    )

    def __init__(self, name, kind, default, descr="", /):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif not re.fullmatch(r"[^\W\d_](-?[^\W_]+)*", name):
            raise ValueError(f"{type(self).__typename__} name {name!r} must be a bare option name (no dashes in front)")
        elif name == "help":
            raise ValueError(f"{type(self).__typename__} name 'help' is reserved")
        self._name = name
        self._kind = Kind(kind)
        self._default = self._kind.canonical(default)
        self._descr = _sanitize_descr(type(self), descr)

    @property
    def boolean(self):
        return self._kind is Kind.BOOL


__all__ = (
    "Kind",
    "Arg",
    "Flag",
)
