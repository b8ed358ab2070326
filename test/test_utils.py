"""
Utilities tests (Unset sentinel, coalesce, rename, kebabize, records).

Conventions
- Test method names follow CamelCase per project convention.
"""
import copy
import pickle
import unittest
from unittest import TestCase

from commanda.utils import Unset, UnsetType, ReflectiveType, coalesce, kebabize, populate, rename


class UnsetTest(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(type(Unset)(), Unset)

    def testFalsely(self):
        self.assertFalse(bool(Unset))

    def testRepr(self):
        self.assertEqual(repr(Unset), "Unset")
        self.assertEqual(str(Unset), "Unset")

    def testUnionWithTypes(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", Unset | str)
        self.assertNotIsInstance(1, str | Unset)

    def testCopyAndPicklePreserveSingleton(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testCannotSubclass(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})


class CoalesceTest(TestCase):

    def testUnsetFallsBack(self):
        self.assertEqual(coalesce(Unset, 3), 3)
        self.assertIsNone(coalesce(Unset))

    def testFalseyValuesPassThrough(self):
        self.assertIsNone(coalesce(None, 1))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertEqual(coalesce("", "x"), "")


class RenameTest(TestCase):

    def testDirectForm(self):
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testDecoratorForm(self):
        @rename("handler")
        def function():
            pass

        self.assertEqual(function.__name__, "handler")

    def testRejectsNonCallable(self):
        with self.assertRaises(TypeError):
            rename(42, "name")


class KebabizeTest(TestCase):

    def testCamelCase(self):
        self.assertEqual(kebabize("containerName"), "container-name")

    def testAcronymFollowedByWord(self):
        self.assertEqual(kebabize("HTTPServer"), "http-server")

    def testTrailingAcronym(self):
        self.assertEqual(kebabize("fileID"), "file-id")

    def testSnakeCase(self):
        self.assertEqual(kebabize("dry_run"), "dry-run")
        self.assertEqual(kebabize("_force"), "force")

    def testLowercaseUnchanged(self):
        self.assertEqual(kebabize("name"), "name")

    def testRejectsNonString(self):
        with self.assertRaises(TypeError):
            kebabize(None)


class Sample(metaclass=ReflectiveType):
    __introspectable__ = ("items", "raw")
    __verbatim__ = ("raw",)

    def __new__(cls, items, raw):
        return populate(super().__new__(cls), {"items": items, "raw": raw})


class ReflectiveTypeTest(TestCase):

    def testTypename(self):
        self.assertEqual(Sample.__typename__, "sample")

    def testMirroredPropertiesFreeze(self):
        sample = Sample([1, 2], [3])
        self.assertEqual(sample.items, (1, 2))
        self.assertEqual(sample.raw, [3])
        self.assertIsInstance(sample.raw, list)

    def testImmutable(self):
        sample = Sample([], None)
        with self.assertRaises(AttributeError):
            sample.items = [1]
        with self.assertRaises(AttributeError):
            sample.extra = 1

    def testRepr(self):
        self.assertEqual(repr(Sample(["a"], None)), "sample(items=('a',), raw=None)")


if __name__ == '__main__':
    unittest.main()
