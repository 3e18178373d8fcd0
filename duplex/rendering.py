"""
Response rendering: records to XML, printed through a rich console.

Element naming
- the root element is the record's xml_name field when set, else its class name;
  an xmlns field becomes the namespace attribute.
- every other field becomes a child element named after its "xml" tag, else
  (for nested records) after the nested xml_name, else after the field;
  "<name>,attr" renders an attribute instead.
- nested records nest, bool renders as true/false, None is omitted.

Handlers
- xml_pretty_print_response_handler: two-space indented output (the default).
- xml_compact_print_response_handler: a single line.
"""
import dataclasses
import xml.etree.ElementTree as ElementTree

from rich.console import Console

from .faults import RenderError
from .inspector import EXCLUDED_FIELDS, is_record
from .utils import Unset

console = Console(highlight=False, emoji=False)


def _text(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | str):
        return str(value)
    raise RenderError(f"unable to marshal value {value!r} of type {type(value).__name__}")


def _element(name, record, tagged=False):
    # a name given by the parent's xml tag wins over the record's own xml_name
    element = ElementTree.Element(name if tagged else getattr(record, "xml_name", "") or name)
    if namespace := getattr(record, "xmlns", ""):
        element.set("xmlns", namespace)

    for field in dataclasses.fields(record):
        if field.name in EXCLUDED_FIELDS:
            continue
        if (value := getattr(record, field.name)) is None:
            continue

        tagname, _, mode = field.metadata.get("xml", "").partition(",")

        if is_record(value):
            element.append(_element(tagname or field.name, value, bool(tagname)))
            continue

        tagname = tagname or field.name
        if mode == "attr":
            element.set(tagname, _text(value))
        else:
            ElementTree.SubElement(element, tagname).text = _text(value)

    return element


def marshal(record, /, *, indent=Unset):
    """
    Render a record as XML.

    Parameters
    - record: a dataclass instance.
    - indent: Unset for a single line, or the indentation step as a string.

    Raises
    - RenderError: record is not a dataclass instance or holds an unsupported value.
    """
    if not is_record(record):
        raise RenderError(f"record instance expected, got {type(record).__name__}")

    element = _element(type(record).__name__, record)
    if indent is not Unset:
        ElementTree.indent(element, space=indent)
    return ElementTree.tostring(element, encoding="unicode", short_empty_elements=False)


def xml_compact_print_response_handler(response, /):
    try:
        output = marshal(response)
    except RenderError as exc:
        raise RenderError(f"unable to marshal response: {exc}") from exc
    console.print(output, markup=False, soft_wrap=True)


def xml_pretty_print_response_handler(response, /):
    try:
        output = marshal(response, indent="  ")
    except RenderError as exc:
        raise RenderError(f"unable to marshal response: {exc}") from exc
    console.print(output, markup=False, soft_wrap=True)


__all__ = (
    "marshal",
    "xml_compact_print_response_handler",
    "xml_pretty_print_response_handler",
)
