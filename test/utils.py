"""
Utilities behavioral tests (Unset, coalesce, rename, ReadWriteLock).

Conventions
- Test method names follow CamelCase per project convention.
- Lock tests coordinate threads with events and bounded waits only.
"""

from __future__ import annotations

import threading
import time
import unittest
from unittest import TestCase

from duplex.utils import ReadWriteLock, Unset, UnsetType, coalesce, rename


def wait_until(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            return False
        time.sleep(0.001)
    return True


class TestUnset(TestCase):

    def testSingletonAndFalsey(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnionWithTypes(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("text", str | Unset))
        self.assertFalse(isinstance(3, str | Unset))

    def testCannotBeSubclassed(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})

    def testCoalesceKeepsNone(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)


class TestRename(TestCase):

    def testRenameSetsNames(self):
        @rename("accessor")
        def function():
            pass

        self.assertEqual(function.__name__, "accessor")
        self.assertEqual(function.__qualname__, "accessor")

    def testRenameRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            rename(3)
        with self.assertRaises(TypeError):
            rename("name")("not callable")


class TestReadWriteLock(TestCase):

    def testReadersShareTheLock(self):
        lock = ReadWriteLock()
        with lock.reading():
            entered = threading.Event()

            def reader():
                with lock.reading():
                    entered.set()

            thread = threading.Thread(target=reader)
            thread.start()
            self.assertTrue(entered.wait(2))
            thread.join(2)

    def testWriterExcludesReaders(self):
        lock = ReadWriteLock()
        entered = threading.Event()

        def reader():
            with lock.reading():
                entered.set()

        with lock.writing():
            thread = threading.Thread(target=reader)
            thread.start()
            self.assertFalse(entered.wait(0.05))

        self.assertTrue(entered.wait(2))
        thread.join(2)

    def testWaitingWriterGoesBeforeNewReaders(self):
        lock = ReadWriteLock()
        order = []

        def writer():
            with lock.writing():
                order.append("writer")

        def reader():
            with lock.reading():
                order.append("reader")

        with lock.reading():
            writing = threading.Thread(target=writer)
            writing.start()
            self.assertTrue(wait_until(lambda: lock._waiting == 1))

            reading = threading.Thread(target=reader)
            reading.start()
            time.sleep(0.05)
            self.assertEqual(order, [])

        writing.join(2)
        reading.join(2)
        self.assertEqual(order, ["writer", "reader"])


if __name__ == "__main__":
    unittest.main()
