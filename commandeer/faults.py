"""
Commandeer faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing issue, grouped
  by domain (routing, flags, positionals, environment, values, warnings).
- CommandException: base error carrying a message plus a read-only options
  mapping; renders itself for rich via __rich__.
- UsageError: an error bound to a zero-argument usage renderer, so the caller
  can show context-appropriate help (command usage beats app usage) without
  the error knowing how usage is drawn.
- FlagError family: strict flag scanning failures; always fatal.
- ParseError: a Value token did not convert to the requested type.
- CommandWarning: non-fatal conditions surfaced through the warnings module.

Integration
- Commands and apps raise these faults; they never print or exit on their own.
- App.main (or any host) catches UsageError and calls show_usage() to render
  the message followed by the bound usage.
- Host hooks in __main__: __prog__ (program name), __codes__ (code labels),
  __styles__ (palette overrides used when colorful rendering is on).
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset, coalesce, progname

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - routing (1110x): INVALID_USAGE, NO_COMMAND, INVALID_COMMAND
    - flags (1111x): MALFORMED_FLAG, UNKNOWN_FLAG, MISSING_FLAG_VALUE, INVALID_FLAG_VALUE
    - positionals (1112x): WRONG_ARITY
    - environment (1113x): UNSET_ENVIRONMENT
    - values (1114x): UNPARSABLE_VALUE
    - warnings (12xxx): DUPLICATE_COMMAND
    """
    # --- routing errors (1110x) ---
    INVALID_USAGE      = 11100
    NO_COMMAND         = 11101
    INVALID_COMMAND    = 11102

    # --- flag errors (1111x) ---
    MALFORMED_FLAG     = 11111
    UNKNOWN_FLAG       = 11112
    MISSING_FLAG_VALUE = 11113
    INVALID_FLAG_VALUE = 11114

    # --- positional errors (1112x) ---
    WRONG_ARITY        = 11121

    # --- environment errors (1113x) ---
    UNSET_ENVIRONMENT  = 11131

    # --- value errors (1114x) ---
    UNPARSABLE_VALUE   = 11141

    # --- warnings (12xxx) ---
    DUPLICATE_COMMAND  = 12101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


_ERROR_STYLES = {
    "prog-name": "bold #E6E6F0",
    "code": "bold #00E5FF",
    "title": "bold #FF4DA6",
    "message": "#C8C8D0",
    "hint-arrow": "#9CE19C dim",
    "hint": "italic #9CE19C",
}

_WARNING_STYLES = _ERROR_STYLES | {
    "code": "bold #FFB400",
    "title": "bold #FFC2E0",
    "message": "#D6D6DE",
}


def _render(fault, palette):
    """
    build the rich renderable shared by errors and warnings.

    layout
        [ prog — code | Title ]
        message
         → hint            (only when a hint is set)
    """
    styles = defaultdict(str, palette | getattr(__import__("__main__"), "__styles__", {}))
    colorful = fault.options.get("colorful", False)

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    header = Text.assemble(
        "[ ",
        text(progname(fault.options.get("prog", Unset)), styler("prog-name")),
        " — ",
        text(fault.code.normalize(), styler("code")),
        " | ",
        text(fault.title.title(), styler("title")),
        " ]",
    )
    renders = [header, text(fault.message, styler("message"))]
    if fault.hint:
        renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(fault.hint, styler("hint"))))
    return Group(*renders)


class CommandException(Exception):
    """
    base class for every error raised by the framework.

    options
    - code: FaultCode (defaults to the class' __faultcode__)
    - title: short headline (defaults to the class' __faulttitle__)
    - hint: one actionable sentence, optional
    - prog, colorful, console: rendering context
    - anything else the raiser wants to attach (e.g. flag=, text=, type=)
    """
    __faultcode__ = FaultCode.INVALID_USAGE
    __faulttitle__ = "invalid usage"

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__} message must be a string")
        self.message = coalesce(message, "") or type(self).__faulttitle__
        self.options = MappingProxyType(options)
        super().__init__(self.message)

    @property
    def code(self):
        return self.options.get("code", type(self).__faultcode__)

    @property
    def title(self):
        return self.options.get("title", type(self).__faulttitle__)

    @property
    def hint(self):
        return self.options.get("hint")

    def __rich__(self):
        return _render(self, _ERROR_STYLES)


class UsageError(CommandException):
    """
    error bound to a usage renderer.

    the usage action is a zero-argument callable chosen by whoever raises the
    error: a command binds its own usage, the app binds the app usage. the
    message is never empty and defaults to "invalid usage".
    """

    def __init__(self, message=Unset, /, usage=Unset, **options):
        if not callable(usage) and usage is not Unset:
            raise TypeError(f"{type(self).__name__} usage must be callable")
        super().__init__(message, **options)
        self.usage = coalesce(usage)

    def show_usage(self):
        """
        print the message, a blank line, then the bound usage (if any).

        output goes to the console passed as the 'console' option, falling back
        to this module's stderr console. the bound usage renders wherever its
        owner renders.
        """
        target = self.options.get("console") or console
        target.print(self)
        target.print()
        if self.usage is not None:
            self.usage()


class FlagError(UsageError):
    """
    strict flag scanning failure. never recovered: the invocation stops here.
    """
    __faulttitle__ = "bad flag"


class MalformedFlagError(FlagError):
    __faultcode__ = FaultCode.MALFORMED_FLAG
    __faulttitle__ = "malformed flag"


class UnknownFlagError(FlagError):
    __faultcode__ = FaultCode.UNKNOWN_FLAG
    __faulttitle__ = "unknown flag"


class MissingFlagValueError(FlagError):
    __faultcode__ = FaultCode.MISSING_FLAG_VALUE
    __faulttitle__ = "missing flag value"


class InvalidFlagValueError(FlagError):
    __faultcode__ = FaultCode.INVALID_FLAG_VALUE
    __faulttitle__ = "invalid flag value"


class ParseError(CommandException, ValueError):
    """
    a token did not match the requested type.

    options
    - text: the offending token
    - type: the requested type name ("bool", "int", "int64", "uint64")
    - reason: "invalid syntax" or "value out of range"
    """
    __faultcode__ = FaultCode.UNPARSABLE_VALUE
    __faulttitle__ = "unparsable value"

    @property
    def text(self):
        return self.options.get("text")

    @property
    def type(self):
        return self.options.get("type")

    @property
    def reason(self):
        return self.options.get("reason")


class CommandWarning(Warning):
    __faultcode__ = FaultCode.DUPLICATE_COMMAND
    __faulttitle__ = "warning"

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__} message must be a string")
        self.message = coalesce(message, "") or type(self).__faulttitle__
        self.options = MappingProxyType(options)
        super().__init__(self.message)

    code = CommandException.code
    title = CommandException.title
    hint = CommandException.hint

    def __rich__(self):
        return _render(self, _WARNING_STYLES)


class DuplicateCommandWarning(CommandWarning):
    __faulttitle__ = "duplicate command"


__all__ = (
    "FaultCode",
    "CommandException",
    "UsageError",
    "FlagError",
    "MalformedFlagError",
    "UnknownFlagError",
    "MissingFlagValueError",
    "InvalidFlagValueError",
    "ParseError",
    "CommandWarning",
    "DuplicateCommandWarning",
)
