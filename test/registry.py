"""
Registry module behavioral tests (discovery, validation, indexing).

Scope
- Validate that build_registry() is deterministic and keeps declaration order.
- Validate the short/long side indexes and the read-only mapping surface.
- Validate declaration faults: missing @command, interfaces, descriptions,
  arity, return kinds, and duplicate names.
- Validate inheritance: base options first, overrides resolved to the subclass.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (command, option, build_registry, ValidationError).
"""
import unittest
from abc import ABC, abstractmethod
from typing import Protocol
from unittest import TestCase

from optbind import command, option, build_registry, Long, ValidationError
from optbind.utils import Unset


@command("tool")
class Tool:
    @option("-v", "--verbose", descr="print more", multiple=True)
    def verbose(self):
        pass

    @option("-c", "--count", descr="repeat count", metavar="N")
    def count(self, value: int):
        pass

    @option("--size", descr="size in bytes", metavar="BYTES")
    def size(self, value: Long):
        pass

    @option("-n", descr="a name", metavar="NAME")
    def name(self, value):
        pass

    @option("-h", "--help", descr="show usage and exit", exit=True)
    def help(self) -> int:
        return 1

    def run(self):
        pass


class TestRegistryBuilding(TestCase):
    """Behavioral tests for successful registry construction."""

    def testRegistryIsDeterministic(self):
        first = build_registry(Tool)
        second = build_registry(Tool)
        self.assertEqual(first, second)
        self.assertEqual(list(first), list(second))

    def testDeclarationOrderIsPreserved(self):
        registry = build_registry(Tool)
        self.assertEqual([option.display for option in registry], ["--verbose", "--count", "--size", "-n", "--help"])

    def testShortAndLongIndexesShareBindings(self):
        registry = build_registry(Tool)
        self.assertIs(registry.short("c"), registry.long("count"))
        self.assertEqual(registry.short("c").attribute, "count")
        self.assertIsNone(registry.short("x"))
        self.assertIsNone(registry.long("nothing"))

    def testParameterTypesAreResolved(self):
        registry = build_registry(Tool)
        self.assertIsNone(registry.long("verbose").type)
        self.assertEqual(registry.long("verbose").arity, 0)
        self.assertIs(registry.long("count").type, int)
        self.assertIs(registry.long("size").type, Long)
        self.assertIs(registry.short("n").type, str)
        self.assertEqual(registry.short("n").arity, 1)

    def testReturnKindsAreResolved(self):
        registry = build_registry(Tool)
        self.assertIs(registry.long("help").returns, int)
        self.assertIs(registry.long("verbose").returns, Unset)

    def testCommandAndMultiplicity(self):
        registry = build_registry(Tool)
        self.assertEqual(registry.command.name, "tool")
        self.assertTrue(registry.multiple)
        self.assertEqual(len(registry), 5)

    def testRegistryIsReadOnly(self):
        registry = build_registry(Tool)
        with self.assertRaises(TypeError):
            registry[Tool.verbose] = None  # type: ignore[index]

    def testCommandWithoutOptions(self):
        @command("bare")
        class Bare:
            def run(self):
                pass

        registry = build_registry(Bare)
        self.assertEqual(len(registry), 0)
        self.assertFalse(registry.multiple)

    def testNoneReturnAnnotationAccepted(self):
        @command("quiet")
        class Quiet:
            @option("-q", descr="be quiet")
            def quiet(self) -> None:
                pass

        self.assertIsNone(build_registry(Quiet).short("q").returns)


class TestRegistryInheritance(TestCase):
    """Behavioral tests for options declared on base classes."""

    def testInheritedOptionsComeFirst(self):
        class Base:
            @option("-a", "--alpha", descr="alpha")
            def alpha(self):
                pass

        @command("child")
        class Child(Base):
            @option("-b", "--beta", descr="beta")
            def beta(self):
                pass

        self.assertEqual([option.long for option in build_registry(Child)], ["alpha", "beta"])

    def testOverrideKeepsBasePosition(self):
        class Base:
            @option("-a", "--alpha", descr="alpha")
            def alpha(self):
                pass

            @option("-b", "--beta", descr="beta")
            def beta(self):
                pass

        @command("child")
        class Child(Base):
            @option("-a", "--alpha", descr="alpha, overridden")
            def alpha(self):
                pass

        registry = build_registry(Child)
        self.assertEqual([option.long for option in registry], ["alpha", "beta"])
        self.assertEqual(registry.long("alpha").declaration.descr, "alpha, overridden")

    def testPlainOverrideDropsOption(self):
        class Base:
            @option("-a", "--alpha", descr="alpha")
            def alpha(self):
                pass

        @command("child")
        class Child(Base):
            def alpha(self):
                pass

        self.assertIsNone(build_registry(Child).long("alpha"))

    def testCommandDeclarationIsNotInherited(self):
        @command("parent")
        class Parent:
            pass

        class Child(Parent):
            pass

        with self.assertRaises(ValidationError):
            build_registry(Child)


class TestRegistryValidation(TestCase):
    """Behavioral tests for declaration faults."""

    def testMissingCommandDeclarationRejected(self):
        class Plain:
            pass

        with self.assertRaises(ValidationError):
            build_registry(Plain)

    def testInstanceRejected(self):
        with self.assertRaises(ValidationError):
            build_registry(Tool())

    def testAbstractCommandRejected(self):
        @command("abstract")
        class Abstract(ABC):
            @abstractmethod
            def run(self):
                pass

        with self.assertRaises(ValidationError):
            build_registry(Abstract)

    def testProtocolCommandRejected(self):
        @command("protocol")
        class Runnable(Protocol):
            def run(self): ...

        with self.assertRaises(ValidationError):
            build_registry(Runnable)

    def testEmptyCommandNameRejected(self):
        @command("  ")
        class Nameless:
            pass

        with self.assertRaises(ValidationError):
            build_registry(Nameless)

    def testMissingDescriptionRejected(self):
        @command("tool")
        class Undescribed:
            @option("-x")
            def x(self):
                pass

        with self.assertRaises(ValidationError):
            build_registry(Undescribed)

    def testBlankDescriptionRejected(self):
        @command("tool")
        class Blank:
            @option("-x", descr="   ")
            def x(self):
                pass

        with self.assertRaises(ValidationError):
            build_registry(Blank)

    def testTwoParametersRejected(self):
        @command("tool")
        class Pair:
            @option("-p", descr="pair", metavar="P")
            def pair(self, first, second):
                pass

        with self.assertRaises(ValidationError):
            build_registry(Pair)

    def testVariadicParameterRejected(self):
        @command("tool")
        class Variadic:
            @option("-p", descr="values", metavar="P")
            def values(self, *values):
                pass

        with self.assertRaises(ValidationError):
            build_registry(Variadic)

    def testKeywordOnlyParameterRejected(self):
        @command("tool")
        class KeywordOnly:
            @option("-p", descr="value", metavar="P")
            def value(self, *, value):
                pass

        with self.assertRaises(ValidationError):
            build_registry(KeywordOnly)

    def testFunctionWithoutInstanceParameterRejected(self):
        @command("tool")
        class Static:
            @option("-p", descr="nothing")
            def nothing():
                pass

        with self.assertRaises(ValidationError):
            build_registry(Static)

    def testUnsupportedReturnAnnotationRejected(self):
        @command("tool")
        class Textual:
            @option("-t", descr="text")
            def text(self) -> str:
                return ""

        with self.assertRaises(ValidationError):
            build_registry(Textual)

    def testBooleanReturnAnnotationRejected(self):
        @command("tool")
        class Boolean:
            @option("-b", descr="boolean")
            def boolean(self) -> bool:
                return True

        with self.assertRaises(ValidationError):
            build_registry(Boolean)

    def testDuplicateShortNameRejected(self):
        @command("tool")
        class Twins:
            @option("-x", "--first", descr="first")
            def first(self):
                pass

            @option("-x", "--second", descr="second")
            def second(self):
                pass

        with self.assertRaises(ValidationError):
            build_registry(Twins)

    def testDuplicateLongNameRejected(self):
        @command("tool")
        class Twins:
            @option("-a", "--same", descr="first")
            def first(self):
                pass

            @option("-b", "--same", descr="second")
            def second(self):
                pass

        with self.assertRaises(ValidationError):
            build_registry(Twins)

    def testDuplicateAcrossInheritanceRejected(self):
        class Base:
            @option("-x", "--first", descr="first")
            def first(self):
                pass

        @command("tool")
        class Child(Base):
            @option("-x", "--second", descr="second")
            def second(self):
                pass

        with self.assertRaises(ValidationError):
            build_registry(Child)

    def testUnresolvableAnnotationRejected(self):
        @command("tool")
        class Broken:
            @option("-b", descr="broken", metavar="B")
            def broken(self, value: "DoesNotExist"):  # NOQA: F-821
                pass

        with self.assertRaises(ValidationError):
            build_registry(Broken)


if __name__ == "__main__":
    unittest.main()
