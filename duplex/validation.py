"""
Structural validation of populated records (pydantic-backed).

validate(record) builds a strict pydantic model out of the record's FieldInfos,
one model field per leaf typed with the leaf's kind, and validates the current
values against it. Failures surface as InvalidRecordError, chained from the
pydantic ValidationError and listing every offending field path.

Rules
- A leaf's "valid" tag is a comma-separated rule list, e.g. "required,email" or
  "length(2|32),alphanum".
- required: the value must not be its kind's zero value.
- optional: no constraint (the default for untagged fields).
- email, alpha, alphanum, numeric: the value's text must match the format.
- length(min|max): the text is between min and max characters long.
- range(min|max): the number is between min and max, bounds included.
- Every rule but required accepts the zero value, so an unset optional field
  always passes.
- Unknown or malformed rules raise InvalidRecordError; registration checks them
  up front through parse_rules().
"""
import re
from typing import Annotated

from pydantic import AfterValidator, ConfigDict, ValidationError, create_model

from .faults import InvalidRecordError
from .inspector import inspect_record

_RULE = re.compile(r"(?P<name>[a-z]+)(?:\((?P<low>[+-]?[0-9]+)\|(?P<high>[+-]?[0-9]+)\))?")

_FORMATS = {
    "email": re.compile(r"[^@\s]+@[^@\s]+\.[^@\s.]+"),
    "alpha": re.compile(r"[A-Za-z]+"),
    "alphanum": re.compile(r"[A-Za-z0-9]+"),
    "numeric": re.compile(r"[0-9]+"),
}


def _is_zero(value):
    return value == type(value)()


def _non_zero(value):
    if _is_zero(value):
        raise ValueError("non zero value required")
    return value


def _format(name, pattern):
    def check(value):
        if not _is_zero(value) and not pattern.fullmatch(str(value)):
            raise ValueError(f"does not validate as {name}")
        return value
    return check


def _length(low, high):
    def check(value):
        if not _is_zero(value) and not low <= len(str(value)) <= high:
            raise ValueError(f"length must be between {low} and {high}")
        return value
    return check


def _range(low, high):
    def check(value):
        if _is_zero(value):
            return value
        try:
            number = value if isinstance(value, int) else float(value)
        except ValueError:
            raise ValueError("does not validate as a number") from None
        if not low <= number <= high:
            raise ValueError(f"must be between {low} and {high}")
        return value
    return check


def parse_rules(valid, /):
    """
    Turn a "valid" tag into the list of checks it stands for.

    Returns
    - list of callables taking the value and returning it, raising ValueError
      when the value breaks the rule.

    Raises
    - InvalidRecordError: a rule is unknown or its arguments are malformed.
    """
    checks = []

    for rule in filter(None, (part.strip() for part in valid.split(","))):
        match = _RULE.fullmatch(rule)
        name = match["name"] if match else rule
        bounded = match is not None and match["low"] is not None

        if name in ("required", "optional") and match and not bounded:
            if name == "required":
                checks.append(_non_zero)
        elif name in _FORMATS and match and not bounded:
            checks.append(_format(name, _FORMATS[name]))
        elif name in ("length", "range") and bounded:
            low, high = int(match["low"]), int(match["high"])
            if low > high:
                raise InvalidRecordError(f"invalid validation rule: {rule}", rule=rule)
            checks.append((_length if name == "length" else _range)(low, high))
        else:
            raise InvalidRecordError(f"unknown validation rule: {rule}", rule=rule)

    return checks


def validate(record, /):
    """
    Validate a record's current values against its kinds and "valid" rules.

    Raises
    - InvalidRecordError: one or more leaves fail, or a rule cannot be understood.
    - RecordExpectedError / UnsupportedKindError: from the inspector.
    """
    fields = inspect_record(record)

    definitions = {}
    values = {}
    paths = {}
    for info in fields:
        key = f"field_{info.index}"
        checks = parse_rules(info.tags.get("valid", ""))
        annotation = Annotated[(info.kind, *map(AfterValidator, checks))] if checks else info.kind
        definitions[key] = (annotation, ...)
        values[key] = info.get()
        paths[key] = info.path

    model = create_model(
        f"{type(record).__name__}Validation",
        __config__=ConfigDict(strict=True),
        **definitions,
    )

    try:
        model.model_validate(values)
    except ValidationError as exc:
        reasons = []
        for error in exc.errors():
            location = paths.get(error["loc"][0], str(error["loc"][0])) if error["loc"] else type(record).__name__
            reasons.append(f"{location}: {error['msg'].lower()}")
        raise InvalidRecordError(
            "validation error: %s" % "; ".join(reasons),
            fields=tuple(reason.split(":", 1)[0] for reason in reasons),
        ) from exc


__all__ = (
    "parse_rules",
    "validate",
)
