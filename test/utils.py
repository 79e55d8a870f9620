"""
Utilities behavioral tests (sentinel, coalesce, rename, mirror, replace).

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from helmsman.utils import Unset, UnsetType, coalesce, mirror, rename, replace


class Box:
    value = mirror("value")

    def __init__(self, value):
        self._value = value


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsy(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testRepr(self):
        self.assertEqual(repr(Unset), "Unset")

    def testFinal(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testUnion(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("name", str | Unset)


class TestHelpers(TestCase):
    """Behavioral tests for the helper functions."""

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(Unset))

    def testRenameDirect(self):
        def work():
            pass

        self.assertIs(rename(work, "job"), work)
        self.assertEqual(work.__name__, "job")
        self.assertEqual(work.__qualname__, "job")

    def testRenameDecorator(self):
        @rename("job")
        def work():
            pass

        self.assertEqual(work.__name__, "job")

    def testRenameArguments(self):
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename(len, 42)

    def testMirrorFreezesContainers(self):
        self.assertEqual(Box([1, 2]).value, (1, 2))
        self.assertEqual(Box({3}).value, frozenset({3}))
        self.assertEqual(Box("text").value, "text")
        with self.assertRaises(TypeError):
            Box({"a": 1}).value["b"] = 2

    def testMirrorReadOnly(self):
        with self.assertRaises(AttributeError):
            Box(1).value = 2

    def testReplaceRequiresHook(self):
        with self.assertRaises(TypeError):
            replace(object(), value=1)


if __name__ == "__main__":
    unittest.main()
