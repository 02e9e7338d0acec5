"""
Tests for the utils module: the Unset sentinel and small helpers.
"""
import unittest
from unittest import TestCase

from optionist.utils import *


class UnsetTest(TestCase):
    """
    The Unset sentinel is a falsy, final singleton usable in runtime unions.
    """

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsy(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testRepr(self):
        self.assertEqual(repr(Unset), "Unset")

    def testRuntimeUnion(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", Unset | str)
        self.assertNotIsInstance(0, str | Unset)

    def testFinal(self):
        with self.assertRaises(TypeError):
            type("Subclass", (UnsetType,), {})


class HelpersTest(TestCase):
    """
    coalesce(), ordinal(), and mirror().
    """

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)

    def testOrdinalWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")

    def testOrdinalSuffixes(self):
        for number, label in ((11, "11th"), (12, "12th"), (13, "13th"), (21, "21st"),
                              (22, "22nd"), (23, "23rd"), (101, "101st"), (111, "111th")):
            with self.subTest(number=number):
                self.assertEqual(ordinal(number), label)

    def testMirrorFreezesContainers(self):
        class Holder:
            items = mirror("items")
            table = mirror("table")
            scalar = mirror("scalar")

            def __init__(self):
                self._items = [1, 2]
                self._table = {"a": 1}
                self._scalar = "text"

        holder = Holder()
        self.assertEqual(holder.items, (1, 2))
        self.assertEqual(holder.scalar, "text")
        with self.assertRaises(TypeError):
            holder.table["b"] = 2
        with self.assertRaises(AttributeError):
            holder.items = []

    def testMirrorNamesProperty(self):
        self.assertEqual(mirror("aliases").fget.__name__, "aliases")
        with self.assertRaises(TypeError):
            mirror(42)


if __name__ == "__main__":
    unittest.main()
