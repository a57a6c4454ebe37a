"""
Utility tests (Unset, coalesce, rename, SpecType).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import importlib.util
import unittest
from unittest import TestCase

import commandeer.utils
from commandeer.utils import Unset, UnsetType, SpecType, coalesce, rename, progname


class Sample(metaclass=SpecType):
    __introspectable__ = ("name", "items")

    def __init__(self, name, items):
        self._name = name
        self._items = items


class TestUnset(TestCase):

    def testFreshModuleDefinesSentinelBeforeUse(self):
        location = importlib.util.spec_from_file_location("fresh_utils", commandeer.utils.__file__)
        module = importlib.util.module_from_spec(location)
        location.loader.exec_module(module)
        self.assertIsInstance(module.Unset, module.UnsetType)
        self.assertIs(module.SpecType.__displayable__, module.Unset)
        self.assertEqual(module.progname("tool"), "tool")

    def testSingletonAndFalsey(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testUnion(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", str | Unset))
        self.assertFalse(isinstance(1, str | Unset))


class TestHelpers(TestCase):

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(Unset, Unset, 3), 3)
        self.assertIsNone(coalesce(Unset))

    def testRename(self):
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")
        with self.assertRaises(TypeError):
            rename(1, "x")

    def testProgname(self):
        self.assertEqual(progname("tool"), "tool")
        self.assertTrue(progname())


class TestSpecType(TestCase):

    def testTypename(self):
        self.assertEqual(Sample.__typename__, "sample")

    def testMirroredPropertiesAreCopies(self):
        sample = Sample("x", [1, 2])
        items = sample.items
        items.append(3)
        self.assertEqual(sample.items, [1, 2])
        with self.assertRaises(AttributeError):
            sample.name = "y"

    def testRepr(self):
        self.assertEqual(repr(Sample("x", [])), "sample(name='x', items=[])")


if __name__ == "__main__":
    unittest.main()
