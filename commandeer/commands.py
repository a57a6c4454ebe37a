"""
Commandeer command layer: declare, parse and run one subcommand.

What this module provides
- Command: a named subcommand owning
  • ordered positional Args (the last one may be variable),
  • typed Flags with defaults,
  • required environment variables,
  • a setup callback (declares the above) and a run callback (does the work).
- command(...): decorator factory turning a run function into a Command.

Lifecycle
- construct → setup(cmd) once (App.add_command, or Command.build) → frozen
  → parse(tokens) per invocation → cmd() runs the callback.
- Declaration methods raise TypeError once the command is frozen.
- parse() resets every piece of parse state, so tests may parse the same
  command repeatedly. Concurrent parse() calls on a shared Command are not
  supported: there is no locking.

Parsing
- Flags come first; "--" or the first non-flag token ends flag scanning.
- Flag forms: --name value, --name=value, --name (bool only), and the same
  with a single dash. Repeated flags: the last one wins.
- Flag failures raise FlagError subclasses immediately.
- Positional arity and required environment variables raise UsageError.
- Every fault is bound to this command's usage renderer.

Quick start
    from commandeer import command

    def declare(cmd):
        cmd.append_arg("source", "file to copy")
        cmd.append_vararg("targets", "destinations")
        cmd.add_flag_bool("force", False, "overwrite existing files")

    @command("copy", "files", "copy one file to many places", declare)
    def copy(cmd):
        for target in cmd.varargs():
            ...
"""
import os
import re
from collections import deque
from collections.abc import Iterable, Mapping

from rich.console import Console
from rich.text import Text

from .arguments import Arg, Flag, Kind
from .faults import *
from .utils import *
from .values import Value

console = Console()

# name column used by every usage listing
PADDING = 4
WIDTH = 18


def usage_row(name, descr, /):
    """
    One listing row: indented, name left-aligned in a fixed-width column.
    """
    return Text.assemble(" " * PADDING, name, " " * (max(WIDTH - len(name), 0) + 1), descr)


class Command(metaclass=SpecType):
    """
    A subcommand: declared contract plus setup/run callbacks.

    Parameters
    - name, group, descr: identity; group only clusters commands in app usage.
    - setup: callable(cmd) declaring args/flags/environment, run once.
    - run: callable(cmd) executed by cmd() after a successful parse; its return
      value and exceptions pass through untouched.
    - environ: Mapping read by envarg(); Unset inherits the app's, then os.environ.
    - console: rich Console used by usage(); Unset inherits the app's.
    - colorful: style usage with the palette; Unset inherits the app's.
    """
    __introspectable__ = (
        "name",
        "group",
        "descr",
        "args",
        "flags",
        "envargs",
        "parent",
        "frozen",
    )

    __displayable__ = (
        "name",
        "group",
        "descr",
        "args",
        "flags",
        "envargs",
        "frozen",
    )

    def __init__(
            self,
            name,
            group,
            descr,
            setup=Unset,
            run=Unset,
            /,
            *,
            environ=Unset,
            console=Unset,
            colorful=Unset
    ):
        for field, object in (("name", name), ("group", group), ("descr", descr)):
            if not isinstance(object, str):
                raise TypeError(f"{type(self).__typename__} {field!r} must be a string")
        if not (name := name.strip()) or name.startswith("-") or re.search(r"\s", name):
            raise ValueError(f"{type(self).__typename__} name {name!r} is not a valid command name")
        for field, object in (("setup", setup), ("run", run)):
            if object is not None and object is not Unset and not callable(object):
                raise TypeError(f"{type(self).__typename__} {field!r} must be callable")
        if not isinstance(environ, Mapping | Unset):
            raise TypeError(f"{type(self).__typename__} 'environ' must be a mapping")
        if not isinstance(console, Console | Unset):
            raise TypeError(f"{type(self).__typename__} 'console' must be a rich console")

        self._name = name
        self._group = group.strip()
        self._descr = descr.strip()
        self._setup = coalesce(setup)
        self._callback = coalesce(run)
        self._environ = environ
        self._console = console
        self._colorful = colorful
        self._args = []
        self._flags = {}
        self._envargs = {}
        self._parent = Unset
        self._frozen = False
        # parse state
        self._positionals = []
        self._overrides = {}

    @property
    def environ(self):
        if self._environ is not Unset:
            return self._environ
        return self._parent.environ if self._parent else os.environ

    @property
    def console(self):
        if self._console is not Unset:
            return self._console
        return self._parent.console if self._parent else console

    @property
    def colorful(self):
        return bool(coalesce(self._colorful, getattr(self._parent, "colorful", False)))

    @property
    def prog(self):
        return self._parent.prog if self._parent else progname()

    def declare(self, setup, /):
        """
        Register the setup callback once; usable as a decorator.

            @cmd.declare
            def _(cmd):
                cmd.append_arg("path", "where to look")
        """
        if not callable(setup):
            raise TypeError(f"{type(self).__typename__} setup must be callable")
        if self._setup is not None or self._frozen:
            raise TypeError(f"{type(self).__typename__} setup cannot be overridden")
        self._setup = coalesce(setup)
        return setup

    def build(self):
        """
        Run the setup callback (once) and freeze the declarations.
        """
        if self._frozen:
            return self
        if self._setup is not None:
            self._setup(self)
        self._frozen = True
        return self

    def _mutable(self):
        if self._frozen:
            raise TypeError(f"{type(self).__typename__} {self._name!r} cannot be modified after setup")

    def _append(self, arg):
        self._mutable()
        if self._args and self._args[-1].variable:
            raise ValueError(f"{type(self).__typename__} {self._name!r} already ends with a variable argument")
        if any(declared.name == arg.name for declared in self._args):
            raise ValueError(f"{type(self).__typename__} argument name {arg.name!r} is already in use")
        self._args.append(arg)

    def append_arg(self, name, descr="", /):
        self._append(Arg(name, descr))

    def append_vararg(self, name, descr="", /):
        self._append(Arg(name, descr, variable=True))

    def _add(self, flag):
        self._mutable()
        if flag.name in self._flags:
            raise ValueError(f"{type(self).__typename__} flag name {flag.name!r} is already in use")
        self._flags[flag.name] = flag

    def add_flag(self, name, default="", descr="", /):
        self._add(Flag(name, Kind.STRING, default, descr))

    def add_flag_bool(self, name, default=False, descr="", /):
        self._add(Flag(name, Kind.BOOL, default, descr))

    def add_flag_int(self, name, default=0, descr="", /):
        self._add(Flag(name, Kind.INT, default, descr))

    def add_flag_uint(self, name, default=0, descr="", /):
        self._add(Flag(name, Kind.UINT, default, descr))

    def add_envarg(self, name, descr="", /):
        self._mutable()
        if not isinstance(name, str) or not (name := name.strip()):
            raise ValueError(f"{type(self).__typename__} environment variable name must be a non-empty string")
        if not isinstance(descr, str):
            raise TypeError(f"{type(self).__typename__} environment variable 'descr' must be a string")
        self._envargs[name] = descr.strip()

    def arg(self, name, /):
        """
        Value bound to the declared positional slot 'name'.

        For the variable slot only the first bound token is returned (see
        varargs()). Unbound slots read as Value("").
        """
        for index, declared in enumerate(self._args):
            if declared.name == name:
                return Value(self._positionals[index] if index < len(self._positionals) else "")
        raise KeyError(f"{type(self).__typename__} {self._name!r} has no argument {name!r}")

    def varargs(self):
        """
        Values of every positional from the variable slot onward, in input order.
        """
        if not self._args or not self._args[-1].variable:
            return []
        return [Value(token) for token in self._positionals[len(self._args) - 1:]]

    def flag(self, name, /):
        try:
            flag = self._flags[name]
        except KeyError:
            raise KeyError(f"{type(self).__typename__} {self._name!r} has no flag {name!r}") from None
        return Value(self._overrides.get(name, flag.default))

    def envarg(self, name, /):
        return Value((self.environ.get(name) or "").strip())

    def requests_help(self, tokens, /):
        """
        Whether 'tokens' ask for this command's usage: "--help" or "-help"
        anywhere, or "-h"/"--h" while no flag named "h" is declared.
        """
        aliases = {"--help", "-help"} | (set() if "h" in self._flags else {"-h", "--h"})
        return any(token in aliases for token in tokens)

    def _trigger(self, fault, message, /, **options):
        """
        raise 'fault' bound to this command's usage and rendering context.
        """
        raise fault(
            message,
            usage=self.usage,
            **{"prog": self.prog, "console": self.console, "colorful": self.colorful} | options
        )

    def _resolve_token(self, token):
        """
        split a flag token into (flag, inline value or None).
        """
        body = token[2:] if token.startswith("--") else token[1:]
        if not body or body[0] in "-=":
            self._trigger(MalformedFlagError, f"bad flag syntax: {token}", flag=token)
        name, assigned, value = body.partition("=")
        if (flag := self._flags.get(name)) is None:
            self._trigger(
                UnknownFlagError,
                f"flag provided but not defined: {token.partition('=')[0]}",
                flag=name,
                hint=f"run with --help to list the flags of {self._name!r}",
            )
        return flag, value if assigned else None

    def parse(self, tokens, /):
        """
        Scan flags, bind positionals and check the declared contract.

        Returns None on success; raises FlagError or UsageError otherwise.
        """
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError(f"{type(self).__typename__} tokens must be an iterable of strings")
        self._frozen = True
        self._positionals = []
        self._overrides = {}

        tokens = deque(tokens)
        overrides = {}
        while tokens:
            if not isinstance(token := tokens[0], str):
                raise TypeError(f"{type(self).__typename__} tokens must be an iterable of strings")
            if token == "--":
                tokens.popleft()
                break
            if len(token) < 2 or not token.startswith("-"):
                break
            tokens.popleft()

            flag, value = self._resolve_token(token)
            if value is None and flag.boolean:
                value = "true"
            elif value is None:
                if not tokens:
                    self._trigger(MissingFlagValueError, f"flag needs an argument: --{flag.name}", flag=flag.name)
                value = tokens.popleft()
            try:
                overrides[flag.name] = flag.kind.parse(value)
            except ParseError as error:
                self._trigger(
                    InvalidFlagValueError,
                    f"invalid value {value!r} for flag --{flag.name}: {error.reason}",
                    flag=flag.name,
                    hint=error.hint,
                )

        self._overrides = overrides
        self._positionals = list(tokens)

        variable = bool(self._args) and self._args[-1].variable
        if variable and len(self._positionals) < len(self._args):
            self._trigger(
                UsageError,
                "wrong number of command arguments",
                code=FaultCode.WRONG_ARITY,
                hint=f"expected at least {len(self._args)} but got {len(self._positionals)}",
            )
        elif not variable and len(self._positionals) != len(self._args):
            self._trigger(
                UsageError,
                "wrong number of command arguments",
                code=FaultCode.WRONG_ARITY,
                hint=f"expected {len(self._args)} but got {len(self._positionals)}",
            )

        for name in self._envargs:
            if not self.envarg(name):
                self._trigger(
                    UsageError,
                    f"environment variable {name} is unset",
                    code=FaultCode.UNSET_ENVIRONMENT,
                    variable=name,
                )

    def __call__(self):
        """
        Run the callback with this command; returns whatever it returns.
        """
        if self._callback is None:
            return None
        return self._callback(self)

    def usage(self):
        """
        Render command usage to the console.

        Sections: invocation line, description, "Command Arguments",
        "Flags" (only if any) and "Required environment variables" (only if
        any). Palette keys (override through __main__.__styles__):
        usage-label, program-name, command-name, section-label, argument-name,
        flag-name, variable-name, description.
        """
        styles = {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "command-name": "bold #36C5F0",
            "section-label": "bold #FFFFFF",
            "argument-name": "bold #FFD600",
            "variable-name": "bold italic #FFD600",
            "flag-name": "bold #22C55E",
            "description": "#9CA3AF",
        } | getattr(__import__("__main__"), "__styles__", {})

        def text(fragment, style=""):
            return Text(str(fragment), styles.get(style, "") if self.colorful else "")

        invocation = [text(self.prog, "program-name"), text(self._name, "command-name")]
        if self._flags:
            invocation.append(Text("[flags]"))
        for arg in self._args:
            if arg.variable:
                invocation.append(text(arg.name + "...", "variable-name"))
            else:
                invocation.append(text(arg.name, "argument-name"))

        lines = [Text.assemble(text("usage", "usage-label"), ": ", Text(" ").join(invocation)), Text()]

        if self._descr:
            lines.extend((text(self._descr, "description"), Text()))

        if self._args:
            lines.append(text("Command Arguments:", "section-label"))
            for arg in self._args:
                if arg.variable:
                    name = text(arg.name + "[...]", "variable-name")
                else:
                    name = text(arg.name, "argument-name")
                lines.append(usage_row(name, text(arg.descr, "description")))
            lines.append(Text())

        if self._flags:
            lines.append(text("Flags:", "section-label"))
            for flag in self._flags.values():
                name = text("--" + flag.name, "flag-name")
                if not flag.boolean:
                    name.append(f" <{flag.kind}>")
                descr = flag.descr
                if flag.default and flag.default != "false":
                    descr = f"{descr} (default: {flag.default})".strip()
                lines.append(usage_row(name, text(descr, "description")))
            lines.append(Text())

        if self._envargs:
            lines.append(text("Required environment variables:", "section-label"))
            for name, descr in self._envargs.items():
                lines.append(usage_row(text(name, "argument-name"), text(descr, "description")))
            lines.append(Text())

        self.console.print(Text("\n").join(lines[:-1]))


def command(name, group, descr, setup=Unset, /, **options):
    """
    Decorator factory: wrap a run function into a Command.

        @command("greet", "demo", "say hello")
        def greet(cmd):
            print("hello", cmd.arg("who"))

        @greet.declare
        def _(cmd):
            cmd.append_arg("who", "person to greet")

    Keyword options are forwarded to Command (environ, console, colorful).
    """
    @rename("command")
    def wrapper(run, /):
        if not callable(run):
            raise TypeError("@command() must be applied to a callable")
        return Command(name, group, descr, setup, run, **options)

    return wrapper


__all__ = (
    "Command",
    "command",
)
