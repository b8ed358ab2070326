"""
Arguments module tests (option markers, reflection, classification, conversion).

Scope
- Option marker sanitization and immutability.
- Kind tags and parameter reflection (Annotated, Optional, defaults).
- Role classification and alias derivation.
- Strict boolean parsing and best-effort conversion.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from decimal import Decimal
from enum import IntEnum, IntFlag, StrEnum
from fractions import Fraction
from inspect import Parameter
from typing import Annotated, Optional
from unittest import TestCase

from commanda import Option, Kind, ParameterSpec, Positional, Named, Injected
from commanda import kindof, reflect, classify, aliasof, parse_boolean, convert
from commanda import Unset


class Service:
    pass


class Level(IntEnum):
    LOW = 1
    HIGH = 2


class Permission(IntFlag):
    READ = 1
    WRITE = 2


class Color(StrEnum):
    RED = "red"


class OptionTest(TestCase):

    def testAliasPrefixIsStripped(self):
        self.assertEqual(Option("--yes").name, "yes")
        self.assertEqual(Option("yes").name, "yes")

    def testBlankValuesAreAbsent(self):
        option = Option("  ", "   ")
        self.assertIs(option.name, Unset)
        self.assertIsNone(option.descr)

    def testDefaultIsServedVerbatim(self):
        option = Option(default=[1, 2])
        self.assertIsInstance(option.default, list)
        self.assertEqual(option.default, [1, 2])

    def testRejectsNonStringName(self):
        with self.assertRaises(TypeError):
            Option(5)

    def testImmutable(self):
        with self.assertRaises(AttributeError):
            Option().name = "other"

    def testRepr(self):
        self.assertEqual(repr(Option("yes")), "option(name='yes', descr=None, default=Unset)")


class KindTest(TestCase):

    def testPrimitives(self):
        self.assertIs(kindof(str), Kind.STRING)
        self.assertIs(kindof(bool), Kind.BOOLEAN)
        for type in (int, float, complex, Decimal, Fraction):
            with self.subTest(type=type):
                self.assertIs(kindof(type), Kind.NUMERIC)

    def testEverythingElseIsExternal(self):
        for type in (Service, object, list, list[int], None):
            with self.subTest(type=type):
                self.assertIs(kindof(type), Kind.EXTERNAL)

    def testEnumsAreExternal(self):
        for type in (Level, Permission, Color):
            with self.subTest(type=type):
                self.assertIs(kindof(type), Kind.EXTERNAL)

    def testEnumParameterIsInjected(self):
        def handler(level: Level):
            pass

        level, = reflect(handler)
        self.assertIsInstance(classify(level), Injected)


class ReflectTest(TestCase):

    def testPlainSignature(self):
        def handler(name, count: int, verbose: bool = Option(), svc: Service = None, *args, **kwargs):
            pass

        name, count, verbose, svc = reflect(handler)
        self.assertIs(name.type, str)
        self.assertFalse(name.has_default)
        self.assertIs(count.type, int)
        self.assertIsInstance(verbose.option, Option)
        self.assertIs(verbose.default, Unset)
        self.assertIs(svc.tag, Kind.EXTERNAL)
        self.assertIsNone(svc.default)

    def testAnnotatedOption(self):
        def handler(force: Annotated[bool, Option("yes", "skip prompts")] = False):
            pass

        force, = reflect(handler)
        self.assertIs(force.type, bool)
        self.assertEqual(force.option.name, "yes")
        self.assertEqual(force.option.descr, "skip prompts")
        self.assertIs(force.default, False)

    def testOptionalIsUnwrapped(self):
        def handler(count: int | None = None, label: Optional[str] = None):
            pass

        count, label = reflect(handler)
        self.assertIs(count.type, int)
        self.assertIs(label.type, str)
        self.assertIsNone(count.default)

    def testOptionDefaultWins(self):
        def handler(replicas: int = Option(default=3)):
            pass

        replicas, = reflect(handler)
        self.assertEqual(replicas.default, 3)

    def testUnannotatedTypeFollowsDefault(self):
        def handler(retries=3, ratio=None, label="x"):
            pass

        retries, ratio, label = reflect(handler)
        self.assertIs(retries.type, int)
        self.assertIs(ratio.type, str)
        self.assertIs(label.type, str)

    def testKeywordOnlyKindIsKept(self):
        def handler(name, *, loud: bool = Option()):
            pass

        _, loud = reflect(handler)
        self.assertIs(loud.kind, Parameter.KEYWORD_ONLY)

    def testTwoOptionsRaise(self):
        def handler(force: Annotated[bool, Option("a")] = Option("b")):
            pass

        with self.assertRaises(TypeError):
            reflect(handler)

    def testRejectsNonCallable(self):
        with self.assertRaises(TypeError):
            reflect(42)


class ParameterSpecTest(TestCase):

    def testRejectsInvalidName(self):
        with self.assertRaises(ValueError):
            ParameterSpec("not a name")

    def testRejectsVariadicKind(self):
        with self.assertRaises(ValueError):
            ParameterSpec("args", kind=Parameter.VAR_POSITIONAL)

    def testImmutable(self):
        with self.assertRaises(AttributeError):
            ParameterSpec("name").default = 1


class ClassifyTest(TestCase):

    def testPositional(self):
        self.assertIsInstance(classify(ParameterSpec("name")), Positional)

    def testNamedWithDerivedAlias(self):
        role = classify(ParameterSpec("containerName", option=Option(descr="target")))
        self.assertIsInstance(role, Named)
        self.assertEqual(role.alias, "--container-name")
        self.assertEqual(role.descr, "target")

    def testNamedWithOverride(self):
        spec = ParameterSpec("force", type=bool, option=Option("--yes"))
        self.assertEqual(aliasof(spec), "--yes")

    def testExternalIgnoresOptionMetadata(self):
        role = classify(ParameterSpec("svc", type=Service, option=Option("svc")))
        self.assertIsInstance(role, Injected)


class ConvertTest(TestCase):

    def testParseBoolean(self):
        self.assertIs(parse_boolean("TRUE"), True)
        self.assertIs(parse_boolean(" false "), False)
        self.assertIs(parse_boolean("yes"), Unset)
        self.assertIs(parse_boolean("1"), Unset)

    def testStrings(self):
        self.assertEqual(convert("  padded ", str), "  padded ")

    def testNumbers(self):
        self.assertEqual(convert("42", int), 42)
        self.assertEqual(convert("1.5", float), 1.5)
        self.assertEqual(convert("1.5", Decimal), Decimal("1.5"))
        self.assertEqual(convert("1/3", Fraction), Fraction(1, 3))

    def testFailuresAreUnset(self):
        self.assertIs(convert("abc", int), Unset)
        self.assertIs(convert("abc", Decimal), Unset)
        self.assertIs(convert("maybe", bool), Unset)

    def testExternalTypesAreNotConverted(self):
        with self.assertRaises(TypeError):
            convert("x", Service)


if __name__ == '__main__':
    unittest.main()
