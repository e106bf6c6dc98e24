"""
Tests for the internal helpers.

This module verifies semantic guarantees of:
- The `Unset` sentinel (singleton identity, falsy semantics, representation,
  PEP 604 unions, finality).
- coalesce(), rename(), view(), and hyphenate().
"""
import copy
import unittest
from types import MappingProxyType
from unittest import TestCase

from optbind.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `UnsetType` singleton.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the same object reference on every call.
        """
        self.assertIs(UnsetType(), UnsetType())
        self.assertIs(Unset, UnsetType())

    def testFalsely(self) -> None:
        """
        The sentinel is falsy but not equal to other falsy values.
        """
        self.assertFalse(bool(Unset))
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, False)  # noqa: E712

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testUnion(self) -> None:
        """
        PEP 604 unions work on either side of the sentinel.
        """
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", str | Unset)
        self.assertIsInstance(Unset, Unset | str)
        self.assertNotIsInstance(1, str | Unset)

    def testCopyPreservesSingleton(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testFinalClass(self) -> None:
        """
        The class is final: attempts to subclass must fail with TypeError.
        """
        with self.assertRaises(TypeError):
            type("UnsetType", (UnsetType,), {})


class HelpersTest(TestCase):
    """
    Test suite for the helper functions.
    """

    def testCoalesce(self) -> None:
        self.assertEqual(coalesce("name", "fallback"), "name")
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(Unset))

    def testRenameInPlace(self) -> None:
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testRenameDecorator(self) -> None:
        @rename("renamed")
        def function():
            pass

        self.assertEqual(function.__name__, "renamed")

    def testRenameRejectsBadArguments(self) -> None:
        with self.assertRaises(TypeError):
            rename("not callable", "name")
        with self.assertRaises(TypeError):
            rename(print, 1)
        with self.assertRaises(TypeError):
            rename()

    def testView(self) -> None:
        class Holder:
            items = view("items")
            table = view("table")
            tags = view("tags")
            label = view("label")

            def __init__(self):
                self._items = ["a", "b"]
                self._table = {"a": 1}
                self._tags = {"x"}
                self._label = "text"

        holder = Holder()
        self.assertEqual(holder.items, ("a", "b"))
        self.assertIsInstance(holder.table, MappingProxyType)
        self.assertEqual(holder.tags, frozenset({"x"}))
        self.assertEqual(holder.label, "text")
        with self.assertRaises(AttributeError):
            holder.items = ()

    def testHyphenate(self) -> None:
        self.assertEqual(hyphenate("MyTool"), "my-tool")
        self.assertEqual(hyphenate("Option"), "option")
        self.assertEqual(hyphenate("tool"), "tool")
        with self.assertRaises(TypeError):
            hyphenate(1)


if __name__ == '__main__':
    unittest.main()
