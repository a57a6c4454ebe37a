"""
Commandeer utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the value, argument, command and app layers.

Overview
- UnsetType / Unset
  • Singleton sentinel for “not provided”, distinct from None/""/False.
  • Falsey, printable as "Unset", non-subclassable, usable in PEP 604 unions
    (isinstance(x, str | Unset)).

- coalesce(value, *defaults)
  • Return the first argument that is not Unset; None and other falsey values
    are preserved.

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callables.

- mirror("attr")
  • Read-only property over a private backing field (self._attr); containers
    are copied so callers cannot mutate declared state through the public API.

- progname(default)
  • Program name used in usage lines and fault headers.

- SpecType
  • Metaclass deriving __typename__, mirrored properties, __repr__ and
    __rich_repr__ from a class-level __introspectable__ tuple.
"""
import builtins
import functools
import os.path
import re
import sys
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Sentinel type representing a value that was not provided.

    Used where None (or an empty string) is a legitimate user value and the API
    still needs to tell “not given” apart, e.g. a command that did not pick its
    own environment mapping and should inherit the app's one.
    """

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()
"""
Sentinel for “not provided”. Singleton, falsey, distinct from None.
"""


def coalesce(*objects):
    """
    Return the first object that is not the Unset sentinel.

    Falsey values like None, 0 or "" are returned as-is; they are not treated
    as “unset”. With a single argument, Unset resolves to None.

    Examples
    - coalesce("name", "fallback")   -> "name"
    - coalesce(Unset, "fallback")    -> "fallback"
    - coalesce(Unset, Unset, 3)      -> 3
    - coalesce(Unset)                -> None
    """
    for object in objects:
        if object is not Unset:
            return object
    return None


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    - Function form: rename(callable, name) -> callable
    - Decorator form: rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Recursively copy container values so the copy can be handed out safely.

    Strings (and Value tokens, which are strings) are returned unchanged.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return list(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_immortalize, object.values())))
    elif isinstance(object, Set):
        return set(map(_immortalize, object))
    else:
        return coalesce(object)


def mirror(name, /):
    """
    Define a read-only property that mirrors the private attribute "_{name}".

    Example
    - Given self._args, declare args = mirror("args") to expose a copy.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


def progname(default=Unset, /):
    """
    Resolve the program name shown in usage lines and fault headers.

    Lookup order: a __prog__ attribute on the host's __main__ module, then
    the given default, then the basename of sys.argv[0].
    """
    main = __import__("__main__")
    if isinstance(prog := getattr(main, "__prog__", Unset), str) and prog:
        return prog
    if default:
        return default
    return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "program"


class SpecType(type):
    """
    Metaclass for declarative objects (args, flags, commands, apps).

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens)
      for consistent messages: "Arg" -> "arg", "VarArg" -> "var-arg".
    - Expose every name listed in __introspectable__ as a read-only property
      backed by "_" + name (see mirror()).
    - Provide stable __repr__/__rich_repr__ built from __displayable__ (or
      __introspectable__ when unset) unless the class defines its own.
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
                field: mirror(field) for field in namespace.get("__introspectable__", ())
            },
        )

        if "__rich_repr__" not in namespace:
            @rename("__rich_repr__")
            def __rich_repr__(self):
                for field in coalesce(type(self).__displayable__, type(self).__introspectable__):
                    yield field, getattr(self, field)
            self.__rich_repr__ = __rich_repr__

        if "__repr__" not in namespace:
            @rename("__repr__")
            def __repr__(self):
                return "%s(%s)" % (
                    type(self).__typename__,
                    ", ".join("%s=%r" % pair for pair in self.__rich_repr__()),
                )
            self.__repr__ = __repr__

        return self


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "progname",

    # Types
    "UnsetType",
    "SpecType",

    # Constants
    "Unset",
)
