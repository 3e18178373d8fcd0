"""
Duplex faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every failure the framework
  raises. Codes are grouped by domain so logs and searches stay predictable.
- CommandFault: base exception that carries a message + options and knows how to
  render itself in a friendly, lowercased and actionable way (rich).
- trigger(): surface a fault on the console and terminate (or return when deferred).

Domains
- configuration: a handler cannot be resolved, a command cannot be found or owned.
- contract: a request/response is not a record, or holds an unsupported field kind.
- validation: a populated request fails structural validation.
- input: interactive collection received something it cannot use.
- delegated: a resolved handler failed; the fault records whether the command-level
  or the commander-level handler produced it.
- rendering: a response could not be marshalled.

Integration
- Flows funnel failures through Commander.handle_error(); the default error handler
  logs, renders the fault with rich on stderr and exits with status 1.
- Host applications may expose __prog__, __styles__ and __codes__ in __main__ to
  rename the program, restyle the output and relabel codes.
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - configuration (2110x)
      • NOT_CONFIGURED, UNKNOWN_COMMAND, DUPLICATE_COMMAND, FOREIGN_COMMAND
    - contract (2111x)
      • RECORD_EXPECTED, UNSUPPORTED_KIND, UNHANDLED_TYPE
    - validation (2112x)
      • INVALID_RECORD
    - input (2113x)
      • INPUT_CONVERSION, INVALID_OPTION
    - delegated (2114x)
      • DELEGATED_ERROR
    - rendering (2115x)
      • RENDER_FAILURE
    - anything else (2119x)
      • UNEXPECTED_ERROR
    """
    # --- configuration errors ---
    NOT_CONFIGURED    = 21101
    UNKNOWN_COMMAND   = 21102
    DUPLICATE_COMMAND = 21103
    FOREIGN_COMMAND   = 21104

    # --- contract violations ---
    RECORD_EXPECTED   = 21111
    UNSUPPORTED_KIND  = 21112
    UNHANDLED_TYPE    = 21113

    # --- validation errors ---
    INVALID_RECORD    = 21121

    # --- user input errors ---
    INPUT_CONVERSION  = 21131
    INVALID_OPTION    = 21132

    # --- delegated errors ---
    DELEGATED_ERROR   = 21141

    # --- rendering errors ---
    RENDER_FAILURE    = 21151

    # --- unexpected ---
    UNEXPECTED_ERROR  = 21199

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandFault(Exception):
    """
    base type of every framework failure.

    class-level defaults (code, title, hint) are used unless the raiser passes
    its own through options; any other option is free context (slot, origin,
    field, input, ...) kept read-only in self.options.
    """
    code = FaultCode.UNEXPECTED_ERROR
    title = "unexpected error"
    hint = "check the traceback above for the original failure"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __getattr__(self, name):
        # options double as read-only attributes (fault.origin, fault.slot, ...)
        options = self.__dict__.get("options", {})
        try:
            return options[name]
        except KeyError:
            raise AttributeError(name) from None

    def describe(self, name, /):
        """
        return option `name` if the raiser provided it, else the class default.
        """
        return self.options.get(name, getattr(type(self), name, None))

    def __rich__(self):
        main = __import__("__main__")

        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", True)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style])

        header = Text.assemble(
            "[ ",
            text(getattr(main, "__prog__", "duplex"), "prog-name"),
            " | ",
            text(self.describe("code").normalize(), "code"),
            " | ",
            text(self.describe("title").title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        hint = Text.assemble(text(" → ", "hint-arrow"), text(self.describe("hint"), "hint"))

        if fancy:
            return Panel(Group(message, hint), title=header, title_align="left")

        return Group(header, message, hint)

    def __trigger__(self):
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        fault = type(self)(self.message, **{**self.options, **overrides})
        fault.__cause__ = self.__cause__
        fault.__traceback__ = self.__traceback__
        return fault


class NotConfiguredError(CommandFault):
    code = FaultCode.NOT_CONFIGURED
    title = "not configured"
    hint = "set a handler on the command or a default on its commander"


class UnknownCommandError(CommandFault):
    code = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"
    hint = "add the command to the commander before looking it up"


class DuplicateCommandError(CommandFault):
    code = FaultCode.DUPLICATE_COMMAND
    title = "duplicate command"
    hint = "command names must be unique within a commander"


class OwnershipError(CommandFault):
    code = FaultCode.FOREIGN_COMMAND
    title = "foreign command"
    hint = "a command belongs to exactly one commander; build a new command instead"


class RecordExpectedError(CommandFault):
    code = FaultCode.RECORD_EXPECTED
    title = "record expected"
    hint = "pass a dataclass instance, not a class or a primitive value"


class UnsupportedKindError(CommandFault):
    code = FaultCode.UNSUPPORTED_KIND
    title = "unsupported kind"
    hint = "record leaves must be str, int or bool; nest other records for structure"


class UnhandledTypeError(CommandFault):
    code = FaultCode.UNHANDLED_TYPE
    title = "unhandled type"
    hint = "only str and int fields can be bound to flags; drop the long flag or the hint"


class InvalidRecordError(CommandFault):
    code = FaultCode.INVALID_RECORD
    title = "validation error"
    hint = "provide every required field with a non-zero value of the declared type"


class InputConversionError(CommandFault):
    code = FaultCode.INPUT_CONVERSION
    title = "invalid input"
    hint = "integers are written as an optional sign followed by digits"


class InvalidOptionError(CommandFault):
    code = FaultCode.INVALID_OPTION
    title = "invalid option"
    hint = "type one of the numbers shown in brackets"


class DelegatedCommandError(CommandFault):
    code = FaultCode.DELEGATED_ERROR
    title = "handler failed"
    hint = "the original error is chained as the cause of this one"


class RenderError(CommandFault):
    code = FaultCode.RENDER_FAILURE
    title = "render error"
    hint = "responses must be records whose leaves are str, int or bool"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandFault).
    - options are merged into the fault via __replace__(**options) before triggering.
    - the fault is printed on stderr; the process exits unless deferred=True.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "CommandFault",
    "NotConfiguredError",
    "UnknownCommandError",
    "DuplicateCommandError",
    "OwnershipError",
    "RecordExpectedError",
    "UnsupportedKindError",
    "UnhandledTypeError",
    "InvalidRecordError",
    "InputConversionError",
    "InvalidOptionError",
    "DelegatedCommandError",
    "RenderError",
    "trigger",
)
