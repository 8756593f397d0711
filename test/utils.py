"""
Tests for the shared helpers.

This module verifies:
- The Unset sentinel: singleton identity, falsy semantics, copying and pickling,
  union support in isinstance checks, finality.
- coalesce(), mirror(), ordinal() and casefold().
"""
import copy
import pickle
import unittest
from unittest import TestCase

from argstream.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` singleton.
    """

    def testSingleton(self) -> None:
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsey(self) -> None:
        self.assertFalse(Unset)
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, False)  # noqa: E712

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testCopyDeepcopyPickle(self) -> None:
        """
        copy(), deepcopy() and pickle round-trips preserve identity.
        """
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testUnionInIsinstance(self) -> None:
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", str | Unset))
        self.assertFalse(isinstance(1, str | Unset))
        self.assertTrue(isinstance(None, Unset | None))

    def testCannotSubclass(self) -> None:
        with self.assertRaises(TypeError):
            class Derived(UnsetType):  # NOQA: F-841
                pass


class HelpersTest(TestCase):

    def testCoalesce(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        # Falsey values are real values.
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertEqual(coalesce("", "x"), "")

    def testMirrorReturnsCopies(self) -> None:
        class Holder:
            items = mirror("items")
            label = mirror("label")

            def __init__(self):
                self._items = ("a", "b")
                self._label = "name"

        holder = Holder()
        self.assertEqual(holder.items, ["a", "b"])
        holder.items.append("c")
        self.assertEqual(holder.items, ["a", "b"])
        self.assertEqual(holder.label, "name")
        with self.assertRaises(AttributeError):
            holder.items = []

    def testMirrorRejectsNonString(self) -> None:
        with self.assertRaises(TypeError):
            mirror(1)

    def testOrdinalWords(self) -> None:
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(2), "second")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")

    def testOrdinalSuffixes(self) -> None:
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(13), "13th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(101), "101st")
        self.assertEqual(ordinal(111), "111th")

    def testCasefold(self) -> None:
        self.assertEqual(casefold("Output"), "output")
        self.assertEqual(casefold("STRASSE"), casefold("straße"))


if __name__ == "__main__":
    unittest.main()
