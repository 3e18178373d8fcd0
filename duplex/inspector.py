"""
Duplex field inspector: walk a record's field tree and describe every leaf.

Records
- A record is an instance of a dataclass. Leaves are str, int or bool fields;
  a field typed with another dataclass (holding an instance of it) is a nested
  record and is walked recursively.
- Per-field metadata is declared with tag(...), which wraps dataclasses.field:
    @dataclass
    class Lookup:
        name: str = tag("", valid="required", long="name", short="n", hint="Name")
        limit: int = tag(0, long="limit", hint="Maximum results")

Inspection (inspect_record)
- Depth-first pre-order over the declared fields.
- Every captured leaf becomes a FieldInfo with a globally unique index; one counter
  threads through the whole walk, so nested and sibling leaves interleave in the
  order they are met.
- Namespaces are the "->"-joined chain of enclosing field names ("" at top level).
- Fields named in EXCLUDED_FIELDS (serialization bookkeeping) are skipped and do not
  consume an index.
- Any other kind is fatal: UnsupportedKindError("unsupported kind: <kind>").

Zero values
- blank(cls) builds an instance whose leaves hold their kind's zero value ("", 0,
  False) and whose nested records are blank too; reset(record) does the same from
  an existing record. Shell mode resets request/response with it on every call.

Both flag binding and interactive prompting consume the same FieldInfo list, so a
field's flag, prompt, requiredness and hint always come from one declaration.
"""
import dataclasses
import functools
import itertools
import types
import typing
from dataclasses import dataclass, field as datafield
from types import MappingProxyType

from .faults import RecordExpectedError, UnsupportedKindError
from .utils import Unset

EXCLUDED_FIELDS = frozenset({"xml_name", "xmlns"})
"""Serialization bookkeeping fields the inspector never reports."""

LEAF_KINDS = (str, int, bool)

_TAGS = ("valid", "short", "long", "hint", "xml")


def tag(default=Unset, /, *, default_factory=Unset, valid=Unset, short=Unset, long=Unset, hint=Unset, xml=Unset, **options):
    """
    Declare a record field together with its flag/prompt/validation metadata.

    Parameters
    - default / default_factory: forwarded to dataclasses.field when provided.
    - valid: validation rules; a value starting with "required" makes the field mandatory.
    - short: one-character short flag (without dash).
    - long: long flag name (without dashes).
    - hint: human-readable description; a field needs both long and hint to get a flag.
    - xml: output element name, or "<name>,attr" to render the field as an attribute.
    - **options: any other dataclasses.field keyword (repr, compare, init, ...).

    Returns
    - a dataclasses.Field whose metadata holds the provided tags.
    """
    metadata = {}
    for name, value in zip(_TAGS, (valid, short, long, hint, xml)):
        if value is Unset:
            continue
        if not isinstance(value, str):
            raise TypeError(f"tag() {name!r} must be a string")
        metadata[name] = value

    if default is not Unset:
        options["default"] = default
    if default_factory is not Unset:
        options["default_factory"] = default_factory

    return datafield(metadata=metadata, **options)


def is_record(object, /):
    """
    Return True when object is a dataclass instance (not a dataclass type).
    """
    return dataclasses.is_dataclass(object) and not isinstance(object, type)


def _is_record_type(object):
    return isinstance(object, type) and dataclasses.is_dataclass(object)


def _holds_record(kind):
    # Record, or an optional Record (Record | None)
    if _is_record_type(kind):
        return True
    if typing.get_origin(kind) in (typing.Union, types.UnionType):
        return any(map(_is_record_type, typing.get_args(kind)))
    return False


@functools.cache
def _hints(cls):
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        # forward references that cannot be resolved fall back to field.type / the value
        return {}


def _kind_name(kind):
    return getattr(kind, "__name__", None) or repr(kind)


@dataclass(eq=False)
class FieldInfo:
    """
    Metadata about one leaf field of a record.

    The pair (owner, name) is the direct reference to the storage location:
    get() reads it, set() writes it in place.
    """
    index: int
    namespace: str
    name: str
    kind: type
    owner: object = datafield(repr=False)
    tags: MappingProxyType = datafield(default_factory=lambda: MappingProxyType({}), repr=False)
    required: bool = False
    zero: bool = False
    hint: str = ""
    short: str = ""
    long: str = ""
    value: object = None
    children: tuple = ()

    @property
    def path(self):
        """namespace->name, or just name at top level."""
        return f"{self.namespace}->{self.name}" if self.namespace else self.name

    def get(self):
        return getattr(self.owner, self.name)

    def set(self, value):
        if not isinstance(value, self.kind) or (self.kind is int and isinstance(value, bool)):
            raise TypeError(f"field {self.path!r} expects {_kind_name(self.kind)}, got {_kind_name(type(value))}")
        setattr(self.owner, self.name, value)


def inspect_record(record, /):
    """
    Describe every leaf field of a record, nested records included.

    Parameters
    - record: a dataclass instance.

    Returns
    - list[FieldInfo] in depth-first pre-order, indexed 0..N-1.

    Raises
    - RecordExpectedError: record (or a nested record field) is not a dataclass instance.
    - UnsupportedKindError: a field is neither a leaf kind nor a nested record.
    """
    if not is_record(record):
        raise RecordExpectedError(
            f"record instance expected, got {_kind_name(record if isinstance(record, type) else type(record))}",
            value=record,
        )

    fields = []
    _walk(record, (), fields, itertools.count())
    return fields


def _walk(record, chain, fields, counter):
    hints = _hints(type(record))

    for field in dataclasses.fields(record):
        if field.name in EXCLUDED_FIELDS:
            continue

        value = getattr(record, field.name)
        kind = hints.get(field.name, field.type)
        if isinstance(kind, str):
            kind = type(value)

        path = "->".join(chain + (field.name,))

        if _holds_record(kind) or is_record(value):
            if not is_record(value):
                raise RecordExpectedError(f"cannot dereference {path!r}: record instance expected, got {value!r}", field=path)
            _walk(value, chain + (field.name,), fields, counter)
        elif kind in LEAF_KINDS:
            tags = field.metadata
            fields.append(FieldInfo(
                index=next(counter),
                namespace="->".join(chain),
                name=field.name,
                kind=kind,
                owner=record,
                tags=MappingProxyType(dict(tags)),
                required=tags.get("valid", "").startswith("required"),
                zero=type(value) is kind and value == kind(),
                hint=tags.get("hint", ""),
                short=tags.get("short", ""),
                long=tags.get("long", ""),
                value=value,
            ))
        else:
            raise UnsupportedKindError(
                f"unsupported kind: {_kind_name(kind)}",
                field=path,
                tags=MappingProxyType(dict(field.metadata)),
            )


def split_required(fields, /):
    """
    Partition FieldInfos into (required, optional), flattening nested children.

    Required and optional fields each keep their encounter order.
    """
    required = []
    optional = []

    for info in fields:
        if info.children:
            nested = split_required(info.children)
            required.extend(nested[0])
            optional.extend(nested[1])
        elif info.required:
            required.append(info)
        else:
            optional.append(info)

    return required, optional


def blank(cls, /):
    """
    Build a zero-valued instance of a record type.

    Leaves get their kind's zero value, nested records are blank themselves;
    excluded fields and fields that are not part of __init__ keep their declared default.
    """
    if not _is_record_type(cls):
        raise RecordExpectedError(f"record type expected, got {cls!r}", value=cls)

    hints = _hints(cls)
    values = {}

    for field in dataclasses.fields(cls):
        if not field.init:
            continue

        declared = field.default is not dataclasses.MISSING or field.default_factory is not dataclasses.MISSING
        kind = hints.get(field.name, field.type)

        if field.name in EXCLUDED_FIELDS:
            if not declared:
                values[field.name] = kind() if kind in LEAF_KINDS else None
        elif _is_record_type(kind):
            values[field.name] = blank(kind)
        elif kind in LEAF_KINDS:
            values[field.name] = kind()
        elif not declared:
            raise UnsupportedKindError(f"unsupported kind: {_kind_name(kind)}", field=field.name)

    return cls(**values)


def reset(record, /):
    """
    Return a fresh, zero-valued instance of the record's own type.
    """
    if not is_record(record):
        raise RecordExpectedError(f"record instance expected, got {record!r}", value=record)
    return blank(type(record))


__all__ = (
    "EXCLUDED_FIELDS",
    "FieldInfo",
    "tag",
    "is_record",
    "inspect_record",
    "split_required",
    "blank",
    "reset",
)
