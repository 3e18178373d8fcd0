"""
Duplex commander: the registry of commands and of process-wide defaults.

What this module provides
- Defaults: the explicit configuration object holding the six global slots
  (registration, request, response, error, static exec, shell exec). A commander
  takes its own copy at construction and only changes it through its setters.
- Commander: owns the commands (by name), the defaults and the ordered pre/post
  request hooks, and attaches itself to every command it adopts.

Concurrency
- One reader/writer lock guards the command map, the hook lists and the default
  slots. Lookups, resolution and snapshots take the read side; add, set and append
  take the write side. The lock is never held while a handler runs, so a handler
  may register more commands.

Ownership
- A command belongs to exactly one commander (OwnershipError otherwise) and its
  name is unique within it (DuplicateCommandError otherwise).
"""
import dataclasses
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable

from rich.console import Console

from .commands import Command, Slot
from .faults import CommandFault, DuplicateCommandError, UnknownCommandError
from .handlers import (
    default_error_handler,
    default_registration_handler,
    generic_shell_handler,
    generic_static_handler,
)
from .logging_setup import get_logger
from .rendering import xml_pretty_print_response_handler
from .utils import ReadWriteLock, Unset, coalesce

logger = get_logger("duplex.commander")


@dataclass
class Defaults:
    """Global handlers used by every command that does not override them."""

    registration: Callable | None = default_registration_handler
    request: Callable | None = None
    response: Callable | None = xml_pretty_print_response_handler
    error: Callable | None = default_error_handler
    static_exec: Callable | None = generic_static_handler
    shell_exec: Callable | None = generic_shell_handler


def _field(slot):
    return slot.name.lower()


class Commander:
    """
    Registry of commands plus process-wide defaults and hooks.

    Parameters
    - root: the click group every command's static node is attached to.
    - defaults: a Defaults instance (copied); stock defaults when omitted.
    - fancy / colorful: presentation options merged into faults before they reach
      the error handler.
    """

    def __init__(self, root, /, defaults=Unset, *, fancy=True, colorful=True):
        defaults = coalesce(defaults, Defaults())
        if not isinstance(defaults, Defaults):
            raise TypeError("commander 'defaults' must be a Defaults instance")

        self._lock = ReadWriteLock()
        self._root = root
        self._commands = {}
        self._pre_request = []
        self._post_request = []
        self._defaults = dataclasses.replace(defaults)
        if self._defaults.error is None:
            self._defaults.error = default_error_handler

        self.fancy = fancy
        self.colorful = colorful

    @property
    def root(self):
        return self._root

    # -- defaults -----------------------------------------------------------

    def default(self, slot, /):
        """Return the commander-level handler for a slot (None when unset)."""
        with self._lock.reading():
            return getattr(self._defaults, _field(Slot(slot)))

    def _set_default(self, slot, handler):
        if handler is not None and not callable(handler):
            raise TypeError(f"default {slot} handler must be callable or None")
        with self._lock.writing():
            setattr(self._defaults, _field(slot), handler)

    def registration_handler(self):
        return self.default(Slot.REGISTRATION)

    def set_default_registration_handler(self, handler, /):
        self._set_default(Slot.REGISTRATION, handler)

    def default_request_handler(self):
        return self.default(Slot.REQUEST)

    def set_default_request_handler(self, handler, /):
        """
        Set the request handler used by every command without its own.
        """
        self._set_default(Slot.REQUEST, handler)

    def default_response_handler(self):
        return self.default(Slot.RESPONSE)

    def set_default_response_handler(self, handler, /):
        """
        Set the response handler used by every command without its own.
        """
        self._set_default(Slot.RESPONSE, handler)

    def static_exec(self):
        return self.default(Slot.STATIC_EXEC)

    def set_default_static_exec(self, handler, /):
        self._set_default(Slot.STATIC_EXEC, handler)

    def shell_exec(self):
        return self.default(Slot.SHELL_EXEC)

    def set_default_shell_exec(self, handler, /):
        self._set_default(Slot.SHELL_EXEC, handler)

    # -- errors -------------------------------------------------------------

    def error_handler(self):
        with self._lock.reading():
            return self._defaults.error

    def set_error_handler(self, handler, /):
        """
        Set the handler receiving every hook and flow failure; None restores the
        stock fatal handler.
        """
        if handler is not None and not callable(handler):
            raise TypeError("error handler must be callable or None")
        with self._lock.writing():
            self._defaults.error = handler if handler is not None else default_error_handler

    def handle_error(self, error, /):
        handler = self.error_handler()
        if isinstance(error, CommandFault):
            error = error.__replace__(**{"fancy": self.fancy, "colorful": self.colorful} | dict(error.options))
        handler(error)

    # -- hooks --------------------------------------------------------------

    def add_pre_request_hooks(self, *hooks):
        """Append hooks run before every execution, in both modes."""
        if not all(map(callable, hooks)):
            raise TypeError("pre-request hooks must be callable")
        with self._lock.writing():
            self._pre_request.extend(hooks)

    def pre_request_hooks(self):
        with self._lock.reading():
            return tuple(self._pre_request)

    def add_post_request_hooks(self, *hooks):
        """Append hooks run after every execution, in both modes."""
        if not all(map(callable, hooks)):
            raise TypeError("post-request hooks must be callable")
        with self._lock.writing():
            self._post_request.extend(hooks)

    def post_request_hooks(self):
        with self._lock.reading():
            return tuple(self._post_request)

    # -- registry -----------------------------------------------------------

    def add(self, *commands):
        """
        Adopt and register commands.

        Each command is attached and stored under the write lock, then registered
        (outside the lock) below the root group. Registration failures propagate.
        """
        for command in commands:
            if not isinstance(command, Command):
                raise TypeError("add() arguments must be commands")

            with self._lock.writing():
                existing = self._commands.get(command.name)
                if existing is not None and existing is not command:
                    raise DuplicateCommandError(f"command {command.name!r} is already registered", command=command.name)
                if existing is None:
                    command._attach(self)
                    self._commands[command.name] = command

            if existing is command:
                continue

            logger.debug("registering command %s", command.name)
            command.register(self._root)

    def cmd(self, name, /):
        """Return the command registered under name."""
        with self._lock.reading():
            try:
                return self._commands[name]
            except KeyError:
                raise UnknownCommandError(f"failed to resolve command {name!r} in register", command=name) from None

    def all(self):
        """Read-only snapshot of every registered command, by name."""
        with self._lock.reading():
            return MappingProxyType(dict(self._commands))

    def register_shell(self, shell, /):
        """
        Register every command with an interactive shell; call once all commands
        have been added.
        """
        with self._lock.reading():
            commands = [self._commands[name] for name in sorted(self._commands)]
        for command in commands:
            command.register_to_shell(shell)

    def print_command_list(self, console=None, /):
        """
        Print "name - short description" for every command, alphabetically, with
        names padded so descriptions line up.
        """
        with self._lock.reading():
            entries = sorted((name, command.short_desc) for name, command in self._commands.items())

        console = console or Console(highlight=False, emoji=False)
        width = max((len(name) for name, _ in entries), default=0)
        for name, description in entries:
            console.print(f"{name.ljust(width)} - {description}", markup=False, soft_wrap=True)


__all__ = (
    "Commander",
    "Defaults",
)
