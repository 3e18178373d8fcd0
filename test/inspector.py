"""
Inspector behavioral tests (ordering, namespaces, tags, zero values).

Scope
- Validate depth-first pre-order indexing across nested records.
- Validate namespace/path construction and excluded bookkeeping fields.
- Validate requiredness and zero-value classification from tags.
- Validate contract faults for non-records and unsupported kinds.
- Validate blank/reset and in-place writes through FieldInfo.

Conventions
- Test method names follow CamelCase per project convention.
- Records are declared at module level so their annotations resolve.
"""

from __future__ import annotations

import unittest
from dataclasses import dataclass, field
from unittest import TestCase

from duplex import (
    EXCLUDED_FIELDS,
    RecordExpectedError,
    UnsupportedKindError,
    blank,
    inspect_record,
    reset,
    split_required,
    tag,
)


@dataclass
class Street:
    street: str = tag("", valid="required", hint="Street name")
    number: int = 0


@dataclass
class Location:
    street: Street = field(default_factory=Street)
    verified: bool = False


@dataclass
class Contact:
    first: str = tag("", valid="required,alpha", long="first", short="f", hint="First name")
    location: Location = field(default_factory=Location)
    age: int = tag(0, valid="optional", long="age", hint="Age")


@dataclass
class Envelope:
    xml_name: str = "envelope"
    xmlns: str = "urn:duplex"
    body: str = ""


@dataclass
class Measured:
    label: str = ""
    ratio: float = 0.0


@dataclass
class Dangling:
    location: Location | None = None


class TestInspectRecord(TestCase):
    """Walk order, namespaces and per-field metadata."""

    def testIndicesFollowDepthFirstPreOrder(self):
        fields = inspect_record(Contact())

        self.assertEqual([info.index for info in fields], [0, 1, 2, 3, 4])
        self.assertEqual(
            [info.name for info in fields],
            ["first", "street", "number", "verified", "age"],
        )

    def testNamespacesChainEnclosingFieldNames(self):
        fields = inspect_record(Contact())

        self.assertEqual(
            [info.namespace for info in fields],
            ["", "location->street", "location->street", "location", ""],
        )
        self.assertEqual(fields[1].path, "location->street->street")
        self.assertEqual(fields[0].path, "first")

    def testKindsAreReported(self):
        fields = inspect_record(Contact())
        self.assertEqual([info.kind for info in fields], [str, str, int, bool, int])

    def testRequiredFollowsValidTagPrefix(self):
        fields = {info.path: info for info in inspect_record(Contact())}

        self.assertTrue(fields["first"].required)
        self.assertTrue(fields["location->street->street"].required)
        self.assertFalse(fields["age"].required)
        self.assertFalse(fields["location->street->number"].required)

    def testTagsAreCopiedOntoFieldInfo(self):
        first = inspect_record(Contact())[0]

        self.assertEqual(first.long, "first")
        self.assertEqual(first.short, "f")
        self.assertEqual(first.hint, "First name")
        self.assertEqual(first.tags["valid"], "required,alpha")

    def testZeroReflectsCurrentValue(self):
        contact = Contact(first="Ada", age=0)
        contact.location.verified = True

        fields = {info.path: info for info in inspect_record(contact)}

        self.assertFalse(fields["first"].zero)
        self.assertTrue(fields["age"].zero)
        self.assertFalse(fields["location->verified"].zero)
        self.assertEqual(fields["first"].value, "Ada")

    def testExcludedFieldsAreSkipped(self):
        fields = inspect_record(Envelope())

        self.assertEqual([info.name for info in fields], ["body"])
        self.assertEqual(fields[0].index, 0)
        self.assertIn("xml_name", EXCLUDED_FIELDS)

    def testUnsupportedKindRaises(self):
        with self.assertRaises(UnsupportedKindError) as context:
            inspect_record(Measured())
        self.assertEqual(str(context.exception), "unsupported kind: float")
        self.assertEqual(context.exception.field, "ratio")

    def testNonRecordInputRaises(self):
        for value in (Contact, 42, "text", None):
            with self.subTest(value=value):
                with self.assertRaises(RecordExpectedError):
                    inspect_record(value)

    def testNestedRecordMustBeInstance(self):
        with self.assertRaises(RecordExpectedError) as context:
            inspect_record(Dangling())
        self.assertIn("location", str(context.exception))

    def testSetWritesInPlace(self):
        contact = Contact()
        fields = inspect_record(contact)

        fields[0].set("Grace")
        fields[2].set(12)

        self.assertEqual(contact.first, "Grace")
        self.assertEqual(contact.location.street.number, 12)
        self.assertEqual(fields[2].get(), 12)

    def testSetRejectsWrongKind(self):
        fields = inspect_record(Contact())

        with self.assertRaises(TypeError):
            fields[0].set(3)
        with self.assertRaises(TypeError):
            fields[2].set(True)


class TestSplitRequired(TestCase):
    """Partition into required/optional, preserving encounter order."""

    def testPartitionKeepsOrder(self):
        required, optional = split_required(inspect_record(Contact()))

        self.assertEqual([info.path for info in required], ["first", "location->street->street"])
        self.assertEqual(
            [info.path for info in optional],
            ["location->street->number", "location->verified", "age"],
        )

    def testEmptyInput(self):
        self.assertEqual(split_required([]), ([], []))


class TestBlank(TestCase):
    """Zero-valued instances and reset."""

    def testBlankZeroesNestedLeaves(self):
        contact = blank(Contact)

        self.assertEqual(contact.first, "")
        self.assertEqual(contact.age, 0)
        self.assertEqual(contact.location.street.number, 0)
        self.assertFalse(contact.location.verified)

    def testBlankKeepsExcludedDefaults(self):
        envelope = blank(Envelope)

        self.assertEqual(envelope.xml_name, "envelope")
        self.assertEqual(envelope.xmlns, "urn:duplex")
        self.assertEqual(envelope.body, "")

    def testResetReturnsFreshInstance(self):
        contact = Contact(first="Ada", age=36)
        contact.location.street.street = "Main"

        fresh = reset(contact)

        self.assertIsNot(fresh, contact)
        self.assertIsNot(fresh.location, contact.location)
        self.assertEqual(fresh, Contact())
        self.assertEqual(contact.first, "Ada")

    def testBlankRequiresRecordType(self):
        with self.assertRaises(RecordExpectedError):
            blank(Contact())
        with self.assertRaises(RecordExpectedError):
            reset(Contact)


class TestTag(TestCase):
    """tag() argument handling."""

    def testTagValuesMustBeStrings(self):
        with self.assertRaises(TypeError):
            tag("", long=1)

    def testTagForwardsDefaultFactory(self):
        declared = tag(default_factory=list)
        self.assertIs(declared.default_factory, list)
        self.assertEqual(dict(declared.metadata), {})


if __name__ == "__main__":
    unittest.main()
