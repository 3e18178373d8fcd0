"""
Duplex interactive shell: a line-oriented session over prompt_toolkit.

What this module provides
- Shell: a registry of shell commands plus a REPL loop. Lines are read through a
  prompt_toolkit PromptSession (created on first use) or through any injected
  reader callable taking the prompt and returning one line.
- ShellContext: what a shell command receives: its arguments, print helpers and
  line reading.
- Prompting helpers used by the interactive flow:
  • collect_value(ctx, info): prompt "<name>:" and store the converted line.
  • present_options(ctx, fields): numbered menu of optional fields, 0 means done.
  • print_error(ctx, error): asterisk-bordered box titled "error".

Built-in commands
- help: list registered commands with their short help.
- exit / quit: leave the loop (end of input does the same).
"""
import re
import shlex
from dataclasses import dataclass
from typing import Callable

from prompt_toolkit import PromptSession
from rich.console import Console

from .faults import InputConversionError, InvalidOptionError, UnknownCommandError
from .logging_setup import get_logger

MIN_ERROR_WIDTH = 37
ERROR_TITLE = "error"

INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1

_INTEGER = re.compile(r"[+-]?[0-9]+")

logger = get_logger("duplex.shell")


@dataclass(frozen=True)
class ShellCommand:
    """One command known to a Shell."""

    name: str
    help: str
    func: Callable


class ShellContext:
    """Per-invocation handle passed to shell command functions."""

    def __init__(self, shell, args=(), line=""):
        self.shell = shell
        self.args = tuple(args)
        self.line = line

    def print(self, *objects, end="\n"):
        self.shell.console.print(*objects, end=end, markup=False, highlight=False, soft_wrap=True)

    def println(self):
        self.print()

    def read_line(self, prompt=""):
        return self.shell.read_line(prompt)


class Shell:
    """
    Interactive session dispatching input lines to registered commands.

    Parameters
    - reader: optional callable(prompt) -> str; raising EOFError ends input.
      Defaults to a lazily created prompt_toolkit PromptSession.
    - console: rich Console used for all output (stdout by default).
    - prompt: prompt shown while waiting for a command line.
    """

    def __init__(self, reader=None, console=None, prompt="> "):
        self._reader = reader
        self._session = None
        self._commands = {}
        self._running = False
        self.console = console or Console(highlight=False, emoji=False)
        self.prompt = prompt

    def read_line(self, prompt=""):
        if self._reader is not None:
            return self._reader(prompt)
        if self._session is None:
            self._session = PromptSession()
        return self._session.prompt(prompt)

    def add_command(self, command, /):
        if not isinstance(command, ShellCommand):
            raise TypeError("add_command() argument must be a ShellCommand")
        self._commands[command.name] = command

    def commands(self):
        return tuple(self._commands[name] for name in sorted(self._commands))

    def process(self, line, /):
        """Run one input line; returns False once the session should end."""
        context = ShellContext(self, line=line)
        try:
            tokens = shlex.split(line)
        except ValueError as exc:
            print_error(context, exc)
            return True

        if not tokens:
            return True

        name, *args = tokens
        context = ShellContext(self, args, line)

        if name in ("exit", "quit"):
            return False
        if name == "help" and name not in self._commands:
            self.print_help(context)
            return True

        try:
            command = self._commands[name]
        except KeyError:
            print_error(context, UnknownCommandError(f"unknown command: {name}"))
            return True

        logger.debug("shell dispatch %s %s", name, args)
        command.func(context)
        return True

    def print_help(self, context, /):
        commands = self.commands()
        width = max((len(command.name) for command in commands), default=0)
        for command in commands:
            context.print(f"{command.name.ljust(width)} - {command.help}")

    def run(self):
        """Read and process lines until exit, quit or end of input."""
        self._running = True
        while self._running:
            try:
                line = self.read_line(self.prompt)
            except EOFError:
                break
            except KeyboardInterrupt:
                continue
            self._running = self.process(line)
        self._running = False

    def stop(self):
        self._running = False


def print_error(context, error, /):
    """
    Print an error inside an asterisk box, at least MIN_ERROR_WIDTH wide.

        *************** error ***************
        invalid option, try again
        *************************************
    """
    message = str(error)
    width = max(len(message), MIN_ERROR_WIDTH)
    padding = (width - len(ERROR_TITLE) - 2) // 2

    context.print(f"{'*' * padding} {ERROR_TITLE} {'*' * padding}")
    context.print(message)
    context.print("*" * width)


def present_options(context, fields, /):
    """
    Offer the optional fields as a numbered menu.

    Returns
    - the zero-based position of the chosen field, or None once "[0] - I'm done"
      is chosen, input ends, or there is nothing to offer.

    Non-numeric and out-of-range answers print an error box and show the menu again.
    """
    while fields:
        context.println()
        context.print("Optional query parameters:")
        context.println()
        context.print("[0] - I'm done")
        for position, info in enumerate(fields, 1):
            context.print(f"[{position}] - {info.path}")
        context.println()

        try:
            selected = context.read_line("Select an option: ").strip()
        except EOFError:
            return None

        if not _INTEGER.fullmatch(selected):
            print_error(context, InvalidOptionError("invalid option, try again", input=selected))
            continue

        choice = int(selected) - 1
        if choice == -1:
            return None
        if not 0 <= choice < len(fields):
            print_error(context, InvalidOptionError("invalid option, try again", input=selected))
            continue

        return choice

    return None


def collect_value(context, info, /):
    """
    Prompt for one field and store the answer in place.

    Raises
    - InputConversionError: the line is not a valid 64-bit integer for an int field,
      the field kind cannot be collected, or input ended.
    """
    try:
        line = context.read_line(f"{info.name}:")
    except EOFError:
        raise InputConversionError(f"no input for {info.path!r}", field=info.path) from None

    if info.kind is str:
        info.set(line)
    elif info.kind is int:
        if not _INTEGER.fullmatch(line) or not INT_MIN <= (number := int(line)) <= INT_MAX:
            raise InputConversionError("failed to convert user input to integer", field=info.path, input=line)
        info.set(number)
    else:
        raise InputConversionError(f"unsupported value type: {info.kind.__name__}", field=info.path)


__all__ = (
    "Shell",
    "ShellCommand",
    "ShellContext",
    "collect_value",
    "present_options",
    "print_error",
)
