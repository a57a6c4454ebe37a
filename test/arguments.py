"""
Argument declaration tests (Arg, Flag, Kind).

Scope
- Arg name/descr validation and immutability.
- Flag name validation, reserved names and per-kind default checks.
- Kind parsing of command-line tokens into canonical text.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from commandeer import Arg, Flag, Kind, ParseError


class TestArg(TestCase):
    """Behavioral tests for positional declarations."""

    def testFields(self):
        arg = Arg("names", "  pet names ", variable=True)
        self.assertEqual(arg.name, "names")
        self.assertEqual(arg.descr, "pet names")
        self.assertTrue(arg.variable)

    def testFixedByDefault(self):
        self.assertFalse(Arg("a").variable)

    def testNameMustBeNonEmpty(self):
        with self.assertRaises(ValueError):
            Arg("   ")

    def testNameRejectsWhitespace(self):
        with self.assertRaises(ValueError):
            Arg("two words")

    def testNameMustBeString(self):
        with self.assertRaises(TypeError):
            Arg(1)

    def testDescrMustBeString(self):
        with self.assertRaises(TypeError):
            Arg("a", None)

    def testReadOnly(self):
        arg = Arg("a")
        with self.assertRaises(AttributeError):
            arg.name = "b"

    def testRepr(self):
        self.assertEqual(repr(Arg("a", "first")), "arg(name='a', descr='first', variable=False)")


class TestFlag(TestCase):
    """Behavioral tests for flag declarations."""

    def testStringDefault(self):
        flag = Flag("flag", Kind.STRING, "default", "description")
        self.assertEqual(flag.default, "default")
        self.assertFalse(flag.boolean)

    def testBoolDefaultIsCanonical(self):
        self.assertEqual(Flag("force", Kind.BOOL, False).default, "false")
        self.assertEqual(Flag("force", Kind.BOOL, True).default, "true")
        self.assertTrue(Flag("force", Kind.BOOL, True).boolean)

    def testKindFromString(self):
        self.assertIs(Flag("count", "int", 12).kind, Kind.INT)

    def testIntDefault(self):
        self.assertEqual(Flag("count", Kind.INT, -12).default, "-12")

    def testIntDefaultRejectsBool(self):
        with self.assertRaises(TypeError):
            Flag("count", Kind.INT, True)

    def testUintDefaultRejectsNegative(self):
        with self.assertRaises(ValueError):
            Flag("count", Kind.UINT, -1)

    def testStringDefaultTypeChecked(self):
        with self.assertRaises(TypeError):
            Flag("name", Kind.STRING, 3)

    def testBoolDefaultTypeChecked(self):
        with self.assertRaises(TypeError):
            Flag("force", Kind.BOOL, "true")

    def testNamesAreBare(self):
        for name in ("--flag", "-f", "", "9lives", "under_score", "trailing-"):
            with self.assertRaises(ValueError, msg=name):
                Flag(name, Kind.STRING, "")

    def testHyphenatedNamesAllowed(self):
        self.assertEqual(Flag("dry-run", Kind.BOOL, False).name, "dry-run")

    def testHelpIsReserved(self):
        with self.assertRaises(ValueError):
            Flag("help", Kind.BOOL, False)

    def testUnknownKind(self):
        with self.assertRaises(ValueError):
            Flag("flag", "float", 1.0)


class TestKind(TestCase):
    """Behavioral tests for token parsing per flag kind."""

    def testBoolParse(self):
        self.assertEqual(Kind.BOOL.parse("T"), "true")
        self.assertEqual(Kind.BOOL.parse("0"), "false")

    def testIntParseNormalizes(self):
        self.assertEqual(Kind.INT.parse("+20"), "20")

    def testUintParseRejectsSign(self):
        with self.assertRaises(ParseError):
            Kind.UINT.parse("-3")

    def testStringParseIsIdentity(self):
        self.assertEqual(Kind.STRING.parse(""), "")
        self.assertEqual(Kind.STRING.parse("trump"), "trump")


if __name__ == "__main__":
    unittest.main()
