"""
Stock handlers bound as commander defaults.

- default_registration_handler: static node + one click option per tagged field.
- generic_static_handler: validate → request handler → response handler.
- generic_shell_handler: prompt required fields → optional menu → request handler
  → response handler.
- default_error_handler: log, render the fault on stderr, exit with status 1.
"""
import click

from .faults import CommandFault, UnhandledTypeError, UnsupportedKindError, trigger
from .inspector import inspect_record, split_required
from .logging_setup import get_logger
from .shell import collect_value, present_options
from .validation import parse_rules, validate

logger = get_logger("duplex.handlers")

_CLICK_TYPES = {
    str: click.STRING,
    int: click.INT,
}


def default_registration_handler(parent, command, /):
    """
    Build the command's click node, declare a flag for every field carrying both
    a long flag and a hint, and attach the node to the parent group.

    A flag is named after the field index (field_<index>); the node callback
    writes the parsed values into a freshly reset request on every run.

    Raises
    - UnhandledTypeError: a flagged field is neither str nor int.
    - InvalidRecordError: a field carries a validation rule that is not understood.
    - RecordExpectedError / UnsupportedKindError: from the inspector, for fields
      that carry no flag.
    """
    node = command.static()

    try:
        fields = inspect_record(command.request)
    except UnsupportedKindError as exc:
        tags = exc.options.get("tags", {})
        if not (tags.get("long") and tags.get("hint")):
            raise
        logger.error("field %s of command %s cannot be bound to a flag (%s)", exc.field, command.name, exc)
        raise UnhandledTypeError("unhandled type", field=exc.field) from exc

    for info in fields:
        parse_rules(info.tags.get("valid", ""))
        if not (info.long and info.hint):
            continue

        try:
            kind = _CLICK_TYPES[info.kind]
        except KeyError:
            logger.error("field %s of command %s cannot be bound to a flag (%s)", info.path, command.name, info.kind.__name__)
            raise UnhandledTypeError("unhandled type", field=info.path, kind=info.kind.__name__) from None

        declarations = [f"--{info.long}"]
        if len(info.short) == 1:
            declarations.insert(0, f"-{info.short}")
        declarations.append(f"field_{info.index}")

        node.params.append(click.Option(
            declarations,
            type=kind,
            default=None,
            help=info.hint,
        ))

    parent.add_command(node)


def generic_static_handler(command, node, args, /):
    validate(command.request)
    command.handle_request(command.request, command.response)
    command.handle_response(command.response)


def generic_shell_handler(command, context, /):
    """
    Interactive flow over the command's (freshly reset) request.

    Required fields are prompted one by one in encounter order; the optional ones
    are offered through a numbered menu until "[0] - I'm done" is chosen. Choosing
    a field again overwrites its previous value.
    """
    required, optional = split_required(inspect_record(command.request))

    for info in required:
        collect_value(context, info)

    while (selected := present_options(context, optional)) is not None:
        collect_value(context, optional[selected])

    command.handle_request(command.request, command.response)
    command.handle_response(command.response)


def default_error_handler(error, /):
    """
    Fatal policy: log the error, render it and terminate the process.
    """
    logger.critical("%s", error)
    if not isinstance(error, CommandFault):
        fault = CommandFault(str(error) or type(error).__name__)
        fault.__cause__ = error
        error = fault
    trigger(error)


__all__ = (
    "default_registration_handler",
    "generic_static_handler",
    "generic_shell_handler",
    "default_error_handler",
)
