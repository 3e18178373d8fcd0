"""
Duplex command layer: one named operation, runnable statically or from a shell.

What this module provides
- Command: a request/response record pair plus optional per-command overrides for
  every extension point:
  • register_func(parent, command): builds the static node and binds flags.
  • request_handler(request, response): does the work, populates the response.
  • response_handler(response): presents the response.
  • static_exec(command, node, args): the non-interactive flow.
  • shell_exec(command, ctx): the interactive flow.
- Slot: the names of those extension points.

Resolution chain
- Command.resolve(slot) is a pure read evaluated at call time: the command's own
  override wins, otherwise the commander's default for that slot, otherwise
  NotConfiguredError("no <slot> handler defined"). Changing a commander default
  after registration therefore affects every command without an override.
- Failures raised by a resolved handler are wrapped in DelegatedCommandError whose
  message and options say whether the "command" or the "commander" handler failed.

Execution
- handle_static(node, args, values): reset request/response to blank records and
  write the flag values into the request, then pre-request hooks, static exec,
  post-request hooks.
- handle_shell(ctx): the same reset, then the same sequence with the shell exec.
  Every run starts from blank records, so nothing carries over between runs.
- Every failure in either flow is handed to Commander.handle_error(); hook failures
  do not stop the remaining hooks.

Quick start
    from dataclasses import dataclass
    import click
    from duplex import Command, Commander, tag

    @dataclass
    class Hello:
        name: str = tag("", valid="required", long="name", short="n", hint="Name")

    @dataclass
    class Greeting:
        text: str = ""

    def hello(request, response):
        response.text = f"hello {request.name}"

    root = click.Group("tool")
    commander = Commander(root)
    commander.add(Command("hello", Hello(), Greeting(), short_desc="say hello", request_handler=hello))
    root.main(["hello", "--name=Ada"])
"""
from enum import StrEnum

import click

from .faults import CommandFault, DelegatedCommandError, NotConfiguredError, OwnershipError, RecordExpectedError
from .inspector import inspect_record, is_record, reset
from .logging_setup import get_logger
from .shell import ShellCommand
from .utils import ReadWriteLock, Unset, coalesce, rename

logger = get_logger("duplex.commands")


class Slot(StrEnum):
    """Extension points resolved through the command → commander chain."""

    REGISTRATION = "registration"
    REQUEST = "request"
    RESPONSE = "response"
    STATIC_EXEC = "static exec"
    SHELL_EXEC = "shell exec"

    @property
    def attribute(self):
        """Name of the Command attribute holding this slot's override."""
        return _ATTRIBUTES[self]


_ATTRIBUTES = {
    Slot.REGISTRATION: "register_func",
    Slot.REQUEST: "request_handler",
    Slot.RESPONSE: "response_handler",
    Slot.STATIC_EXEC: "static_exec",
    Slot.SHELL_EXEC: "shell_exec",
}


def _override(slot):
    """
    Build the property exposing one override slot; reads and writes are guarded
    by the command's reader/writer lock. None means "use the commander default".
    """
    @rename(slot.attribute)
    def getter(self):
        with self._lock.reading():
            return self._overrides[slot]

    @rename(slot.attribute)
    def setter(self, handler):
        if handler is not None and not callable(handler):
            raise TypeError(f"command {slot.attribute!r} must be callable or None")
        with self._lock.writing():
            self._overrides[slot] = handler

    return property(getter, setter, doc=f"command-level {slot} handler override (None falls back)")


class Command:
    """
    One named operation with its own request/response records.

    Parameters
    - name: unique key within the owning commander; immutable once attached.
    - request / response: dataclass instances; fields are mutated in place.
    - short_desc / long_desc: help texts for the static node and the shell.
    - register_func, request_handler, response_handler, static_exec, shell_exec:
      optional overrides of the commander defaults.
    """

    register_func = _override(Slot.REGISTRATION)
    request_handler = _override(Slot.REQUEST)
    response_handler = _override(Slot.RESPONSE)
    static_exec = _override(Slot.STATIC_EXEC)
    shell_exec = _override(Slot.SHELL_EXEC)

    def __init__(
            self,
            name,
            /,
            request,
            response,
            *,
            short_desc=Unset,
            long_desc=Unset,
            register_func=None,
            request_handler=None,
            response_handler=None,
            static_exec=None,
            shell_exec=None,
    ):
        if not isinstance(name, str):
            raise TypeError("command 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError("command 'name' cannot be empty")

        for label, record in (("request", request), ("response", response)):
            if not is_record(record):
                raise RecordExpectedError(f"command {name!r} {label} must be a record instance", value=record)

        self._lock = ReadWriteLock()
        self._overrides = dict.fromkeys(Slot)
        self._commander = None
        self._name = name

        self.short_desc = coalesce(short_desc, "")
        self.long_desc = coalesce(long_desc, "")
        self.request = request
        self.response = response

        self.register_func = register_func
        self.request_handler = request_handler
        self.response_handler = response_handler
        self.static_exec = static_exec
        self.shell_exec = shell_exec

    @property
    def name(self):
        return self._name

    @name.setter
    def name(self, value):
        with self._lock.writing():
            if self._commander is not None:
                raise AttributeError(f"command {self._name!r} is attached; its name is immutable")
            if not isinstance(value, str) or not value.strip():
                raise ValueError("command 'name' must be a non-empty string")
            self._name = value.strip()

    @property
    def commander(self):
        with self._lock.reading():
            return self._commander

    def _attach(self, commander):
        with self._lock.writing():
            if self._commander is not None and self._commander is not commander:
                raise OwnershipError(f"command {self._name!r} already belongs to another commander", command=self._name)
            self._commander = commander

    def _require_commander(self):
        if (commander := self.commander) is None:
            raise NotConfiguredError(f"command {self._name!r} is not attached to a commander", command=self._name)
        return commander

    def resolve(self, slot, /):
        """
        Return (handler, origin) for a slot: origin is "command" for an override,
        "commander" for the commander default.

        Raises
        - NotConfiguredError: neither level provides a handler.
        """
        slot = Slot(slot)
        if (handler := getattr(self, slot.attribute)) is not None:
            return handler, "command"
        if (handler := self._require_commander().default(slot)) is None:
            raise NotConfiguredError(f"no {slot} handler defined", slot=slot, command=self._name)
        return handler, "commander"

    def _delegate(self, slot, /, *args):
        handler, origin = self.resolve(slot)
        try:
            return handler(*args)
        except Exception as exc:
            raise DelegatedCommandError(
                f"error from {origin} {slot} handler: {exc}",
                origin=origin,
                slot=slot,
                command=self._name,
            ) from exc

    def register(self, parent, /):
        """Register the command below a parent click group (resolved registration)."""
        self._delegate(Slot.REGISTRATION, parent, self)

    def static(self):
        """
        Build the click command used for static invocations.

        The node accepts trailing positional arguments, forwarded to the static exec.
        Flag values arrive as field_<index> keyword arguments.
        """
        node = click.Command(
            self.name,
            help=self.long_desc or None,
            short_help=self.short_desc or None,
            params=[click.Argument(["args"], nargs=-1)],
        )

        @rename("callback")
        def callback(args, **values):
            self.handle_static(node, args, values)

        node.callback = callback
        return node

    def register_to_shell(self, shell, /):
        shell.add_command(ShellCommand(self.name, self.short_desc, self.handle_shell))

    def handle_request(self, request, response, /):
        """Invoke the resolved request handler (command override preferred)."""
        self._delegate(Slot.REQUEST, request, response)

    def handle_response(self, response, /):
        """Invoke the resolved response handler (command override preferred)."""
        self._delegate(Slot.RESPONSE, response)

    def _run_hooks(self, commander, hooks):
        for hook in hooks:
            try:
                hook(self)
            except Exception as exc:
                logger.warning("hook %s failed for command %s: %s", getattr(hook, "__name__", hook), self.name, exc)
                commander.handle_error(exc)

    def _reset(self, values=None):
        self.request = reset(self.request)
        self.response = reset(self.response)
        if not values:
            return

        fields = inspect_record(self.request)
        for key, value in values.items():
            if value is not None and key.startswith("field_"):
                fields[int(key.removeprefix("field_"))].set(value)

    def handle_static(self, node, args=(), values=None, /):
        commander = self._require_commander()

        try:
            self._reset(values)
        except Exception as exc:
            commander.handle_error(exc)
            return

        self._run_hooks(commander, commander.pre_request_hooks())

        try:
            self._delegate(Slot.STATIC_EXEC, self, node, tuple(args))
        except Exception as exc:
            commander.handle_error(exc)

        self._run_hooks(commander, commander.post_request_hooks())

    def handle_shell(self, context, /):
        commander = self._require_commander()

        try:
            self._reset()
        except CommandFault as exc:
            commander.handle_error(exc)
            return

        self._run_hooks(commander, commander.pre_request_hooks())

        try:
            self._delegate(Slot.SHELL_EXEC, self, context)
        except Exception as exc:
            commander.handle_error(exc)

        self._run_hooks(commander, commander.post_request_hooks())

    def __rich_repr__(self):
        yield "name", self.name
        yield "short_desc", self.short_desc
        yield "request", self.request
        yield "response", self.response
        for slot in Slot:
            if (handler := getattr(self, slot.attribute)) is not None:
                yield slot.attribute, handler

    def __repr__(self):
        return "command(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


__all__ = (
    "Command",
    "Slot",
)
