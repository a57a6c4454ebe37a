"""
Commandeer app layer: the command registry and top-level dispatch.

App maps command names to Commands. It is built once at process start and
only read afterwards; registration is not thread-safe and concurrent
registration is unsupported.

Dispatch (App.run)
1. fewer than two tokens (program + command) → UsageError("no command given")
2. "--help" as the command token → app usage, success
3. unknown command → UsageError("invalid command")
4. "--help" anywhere after the command (or -h, -help) → command usage,
   success
5. cmd.parse(rest); failures propagate as raised (already bound to the
   command usage); then the command's run callback result is returned.

App.run never prints faults and never exits. App.main is the thin process
wrapper: it renders a UsageError with its usage and maps it to an ExitCode.

Quick start
    import sys
    from commandeer import App

    app = App("file helpers")

    def declare(cmd):
        cmd.append_vararg("paths", "files to count")

    @app.command("count", "files", "count lines", declare)
    def count(cmd):
        for path in cmd.varargs():
            ...

    if __name__ == "__main__":
        sys.exit(app.main())
"""
import os.path
import sys
import warnings
from collections.abc import Iterable, Mapping
from enum import IntEnum

from rich.console import Console
from rich.text import Text

from . import commands
from .commands import Command, usage_row
from .faults import *
from .utils import *


class ExitCode(IntEnum):
    SUCCESS = 0
    USAGE = 1
    FLAGS = 2


class App(metaclass=SpecType):
    """
    Command registry.

    Parameters
    - descr: optional application description shown in app usage.
    - prog: program name; Unset uses __main__.__prog__, then the first token
      given to run(), then sys.argv[0].
    - environ: Mapping inherited by commands that did not pick their own.
    - console: rich Console inherited by commands for usage rendering.
    - colorful: style usage and faults with the palette.
    - overwrite: when True a duplicate command name replaces the earlier
      registration with a DuplicateCommandWarning; otherwise ValueError.
    """
    __introspectable__ = (
        "descr",
        "commands",
        "colorful",
        "overwrite",
    )

    def __init__(
            self,
            descr=Unset,
            /,
            *,
            prog=Unset,
            environ=Unset,
            console=Unset,
            colorful=False,
            overwrite=False
    ):
        if not isinstance(descr, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'descr' must be a string")
        if not isinstance(prog, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'prog' must be a string")
        if not isinstance(environ, Mapping | Unset):
            raise TypeError(f"{type(self).__typename__} 'environ' must be a mapping")
        if not isinstance(console, Console | Unset):
            raise TypeError(f"{type(self).__typename__} 'console' must be a rich console")
        self._descr = coalesce(descr, "").strip()
        self._prog = prog
        self._invoked = Unset
        self._environ = environ
        self._console = console
        self._colorful = bool(colorful)
        self._overwrite = bool(overwrite)
        self._commands = {}

    @property
    def prog(self):
        return progname(coalesce(self._prog, self._invoked, ""))

    @property
    def environ(self):
        return coalesce(self._environ, os.environ)

    @property
    def console(self):
        return coalesce(self._console, commands.console)

    def add_command(self, command, /):
        """
        Register 'command', run its setup and freeze it. Returns the command.
        """
        if not isinstance(command, Command):
            raise TypeError(f"{type(self).__typename__} can only register commands")
        if command.parent is not None and command.parent is not self:
            raise ValueError(f"command {command.name!r} is already registered to another app")

        if (registered := self._commands.get(command.name)) is not None and registered is not command:
            if not self._overwrite:
                raise ValueError(f"{type(self).__typename__} command name {command.name!r} is already in use")
            warnings.warn(
                DuplicateCommandWarning(
                    f"command {command.name!r} replaces an earlier registration",
                    code=FaultCode.DUPLICATE_COMMAND,
                    prog=self.prog,
                ),
                stacklevel=2,
            )
            registered._parent = Unset

        self._commands[command.name] = command
        command._parent = self
        return command.build()

    def command(self, name, group, descr, setup=Unset, /, **options):
        """
        Decorator: build a Command around the decorated run function and
        register it.
        """
        @rename("command")
        def wrapper(run, /):
            if not callable(run):
                raise TypeError("@app.command() must be applied to a callable")
            return self.add_command(Command(name, group, descr, setup, run, **options))

        return wrapper

    def _trigger(self, message, /, **options):
        raise UsageError(
            message,
            usage=self.usage,
            **{"prog": self.prog, "console": self.console, "colorful": self._colorful} | options
        )

    def run(self, tokens, /):
        """
        Dispatch one invocation. 'tokens' includes the program name first.

        Returns the run callback's result (None for --help); raises UsageError
        subclasses for contract failures and lets callback exceptions through.
        """
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError(f"{type(self).__typename__} tokens must be an iterable of strings")
        tokens = list(tokens)
        if tokens and tokens[0]:
            self._invoked = os.path.basename(tokens[0])

        if len(tokens) < 2:
            self._trigger("no command given", code=FaultCode.NO_COMMAND)

        if tokens[1] == "--help":
            self.usage()
            return None

        if (command := self._commands.get(tokens[1])) is None:
            self._trigger(
                "invalid command",
                code=FaultCode.INVALID_COMMAND,
                command=tokens[1],
                hint="run with --help to list the available commands",
            )

        if command.requests_help(tokens[2:]):
            command.usage()
            return None

        command.parse(tokens[2:])
        return command()

    def main(self, tokens=Unset, /):
        """
        Run with sys.argv (or 'tokens') and return an ExitCode.

        UsageError is rendered with its bound usage; FlagError maps to
        ExitCode.FLAGS, any other UsageError to ExitCode.USAGE. Every other
        exception propagates to the caller.
        """
        try:
            self.run(coalesce(tokens, sys.argv))
        except FlagError as fault:
            fault.show_usage()
            return ExitCode.FLAGS
        except UsageError as fault:
            fault.show_usage()
            return ExitCode.USAGE
        return ExitCode.SUCCESS

    def usage(self):
        """
        Render app usage: invocation pattern, description, then every group
        (sorted) with its commands (sorted by name).
        """
        styles = {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "group-label": "bold #FFFFFF",
            "command-name": "bold #36C5F0",
            "description": "#9CA3AF",
        } | getattr(__import__("__main__"), "__styles__", {})

        def text(fragment, style=""):
            return Text(str(fragment), styles.get(style, "") if self._colorful else "")

        lines = [Text.assemble(
            text("usage", "usage-label"), ": ", text(self.prog, "program-name"), " cmd [cmd-flags] [cmd-args]"
        )]

        if self._descr:
            lines.extend((Text(), text(self._descr, "description")))

        grouped = {}
        for command in self._commands.values():
            grouped.setdefault(command.group, []).append(command)

        for group in sorted(grouped):
            lines.extend((Text(), Text.assemble(text(group, "group-label"), ":")))
            for command in sorted(grouped[group], key=lambda command: command.name):
                lines.append(usage_row(text(command.name, "command-name"), text(command.descr, "description")))

        self.console.print(Text("\n").join(lines))


__all__ = (
    "App",
    "ExitCode",
)
