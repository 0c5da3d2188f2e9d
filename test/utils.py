"""
Utils module behavioral tests (shared helpers).

Scope
- Validate the Unset marker: identity, falsiness, sealing and unions.
- Validate coalesce, rename, mirror and dehyphenate.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from types import MappingProxyType
from unittest import TestCase

from clad.utils import Unset, UnsetType, coalesce, dehyphenate, mirror, rename


class TestUnset(TestCase):
    """The Unset marker."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertEqual(repr(Unset), "Unset")
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testSealed(self):
        with self.assertRaises(TypeError):
            class Other(UnsetType):
                pass

    def testUnion(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", str | Unset))
        self.assertFalse(isinstance(1, str | Unset))


class TestHelpers(TestCase):
    """coalesce, rename, mirror and dehyphenate."""

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "-"), "-")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce("", "-"), "")
        self.assertIsNone(coalesce(None, "-"))

    def testRename(self):
        @rename("shown")
        def hidden():
            pass

        self.assertEqual(hidden.__name__, "shown")
        self.assertEqual(hidden.__qualname__, "shown")
        with self.assertRaises(TypeError):
            rename(1)
        with self.assertRaises(TypeError):
            rename("shown")("not callable")

    def testMirror(self):
        class Record:
            items = mirror("items")
            table = mirror("table")
            missing = mirror("missing")

            def __init__(self):
                self._items = ["a", ["b"]]
                self._table = {"k": {"v"}}
                self._missing = Unset

        record = Record()
        self.assertEqual(record.items, ("a", ("b",)))
        self.assertIsInstance(record.table, MappingProxyType)
        self.assertEqual(record.table["k"], frozenset({"v"}))
        self.assertIsNone(record.missing)
        with self.assertRaises(AttributeError):
            record.items = ()

    def testDehyphenate(self):
        self.assertEqual(dehyphenate("--out"), "out")
        self.assertEqual(dehyphenate("-o"), "o")
        self.assertEqual(dehyphenate("o"), "o")
        self.assertEqual(dehyphenate("--"), "")
        with self.assertRaises(TypeError):
            dehyphenate(None)


if __name__ == "__main__":
    unittest.main()
