"""
Registry behavioral tests (registration, compile, declarative tables).

Scope
- The built-in help spec and the factory methods.
- Ownership and canonical-name rules at register().
- compile(): name clashes, positional slot, idempotence, permanent failure, freezing.
- CompiledRegistry lookups and read-only indices.
- declare(): rows, aliases, unknown kinds.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from argstream import Registry, CompiledRegistry, Kind, Spec, string
from argstream.faults import (
    ArgstreamError,
    CompileError,
    DuplicateLongNameError,
    DuplicateShortNameError,
    DuplicatePositionalError,
    DuplicateSpecError,
    RegistryFrozenError,
    UnconstructibleKindError,
)


class TestRegistration(TestCase):
    """register() and the factory methods."""

    def testBuiltInHelpSpec(self):
        registry = Registry()
        help = registry.help
        self.assertIs(help.kind, Kind.HELP)
        self.assertEqual(help.longs, ["help"])
        self.assertEqual(help.shorts, ["h", "?"])
        self.assertIs(registry.specs["help"], help)
        self.assertEqual(help.descr, "Print an informative help message.")

    def testFactoriesRegister(self):
        registry = Registry()
        count = registry.integer("count", "-c", default=2)
        self.assertIs(count.kind, Kind.INTEGER)
        self.assertIs(count.registry, registry)
        self.assertIn(count, registry)
        self.assertEqual(list(registry.specs), ["help", "count"])

    def testEveryKindHasAFactoryMethod(self):
        registry = Registry()
        for name, kind in (
                ("string", Kind.STRING),
                ("integer", Kind.INTEGER),
                ("double", Kind.DOUBLE),
                ("boolean", Kind.BOOLEAN),
                ("flag", Kind.FLAG),
                ("path", Kind.PATH),
                ("uri", Kind.URI),
                ("date", Kind.DATE),
        ):
            with self.subTest(factory=name):
                self.assertEqual(getattr(Registry, name).__name__, name)
                self.assertIs(getattr(registry, name)("x-" + name).kind, kind)
        self.assertIs(registry.enumeration("x-enum", choices=["a"]).kind, Kind.ENUM)
        self.assertIs(registry.custom("x-custom", converter=lambda stream, spec, seen: None).kind, Kind.CUSTOM)
        self.assertIsInstance(Registry.specs, property)

    def testRegisterReturnsSpec(self):
        registry = Registry()
        spec = string("name")
        self.assertIs(registry.register(spec), spec)

    def testSpecBelongsToOneRegistry(self):
        first, second = Registry(), Registry()
        spec = first.string("name")
        with self.assertRaises(DuplicateSpecError):
            second.register(spec)
        with self.assertRaises(DuplicateSpecError):
            first.register(spec)

    def testCanonicalNameTaken(self):
        registry = Registry()
        registry.string("name")
        with self.assertRaises(DuplicateSpecError):
            registry.string("name")

    def testRegisterRejectsNonSpecs(self):
        with self.assertRaises(TypeError):
            Registry().register("name")

    def testConfiguration(self):
        registry = Registry(command="tool", descr="Does things.", fancy=True, colorful=False)
        self.assertEqual(registry.command, "tool")
        self.assertEqual(registry.descr, "Does things.")
        self.assertTrue(registry.fancy)
        self.assertFalse(registry.colorful)

    def testCommandMustBeString(self):
        with self.assertRaises(TypeError):
            Registry(command=3)


class TestCompile(TestCase):
    """compile() rules."""

    def testDuplicateLongNameAnyCase(self):
        registry = Registry()
        registry.string("name")
        registry.string("other", "--NAME")
        with self.assertRaises(DuplicateLongNameError):
            registry.compile()

    def testDuplicateCanonicalNamesDifferingInCase(self):
        registry = Registry()
        registry.string("name")
        registry.string("Name")
        with self.assertRaises(DuplicateLongNameError):
            registry.compile()

    def testDuplicateShortName(self):
        registry = Registry()
        registry.flag("all", "-a")
        registry.flag("append", "-a")
        with self.assertRaises(DuplicateShortNameError):
            registry.compile()

    def testShortNameClashesWithHelp(self):
        registry = Registry()
        registry.flag("human", "-h")
        with self.assertRaises(DuplicateShortNameError):
            registry.compile()

    def testTwoPositionals(self):
        registry = Registry()
        registry.string("source", positional=True)
        registry.string("target", positional=True)
        with self.assertRaises(DuplicatePositionalError):
            registry.compile()

    def testCompileErrorsAreArgstreamErrors(self):
        for error in (DuplicateLongNameError, DuplicateShortNameError, DuplicatePositionalError,
                      DuplicateSpecError, RegistryFrozenError, UnconstructibleKindError):
            with self.subTest(error=error.__name__):
                self.assertTrue(issubclass(error, CompileError))
                self.assertTrue(issubclass(error, ArgstreamError))

    def testCompileIsIdempotent(self):
        registry = Registry()
        registry.string("name")
        compiled = registry.compile()
        self.assertIsInstance(compiled, CompiledRegistry)
        self.assertIs(registry.compile(), compiled)
        self.assertTrue(registry.compiled)

    def testFailedCompileIsPermanent(self):
        registry = Registry()
        registry.string("source", positional=True)
        registry.string("target", positional=True)
        with self.assertRaises(DuplicatePositionalError) as first:
            registry.compile()
        with self.assertRaises(DuplicatePositionalError) as second:
            registry.compile()
        self.assertIs(first.exception, second.exception)
        self.assertFalse(registry.compiled)

    def testRegisterAfterCompileRaises(self):
        registry = Registry()
        registry.compile()
        with self.assertRaises(RegistryFrozenError):
            registry.string("late")

    def testRegisterAfterFailedCompileRaises(self):
        registry = Registry()
        registry.flag("human", "-h")
        with self.assertRaises(CompileError):
            registry.compile()
        with self.assertRaises(RegistryFrozenError):
            registry.string("late")


class TestCompiledRegistry(TestCase):
    """Lookups over the compiled indices."""

    def setUp(self):
        self.registry = Registry()
        self.count = self.registry.integer("count", "--number", "-c")
        self.source = self.registry.path("source", positional=True)
        self.compiled = self.registry.compile()

    def testLookupLongIsCaseInsensitive(self):
        self.assertIs(self.compiled.lookup_long("count"), self.count)
        self.assertIs(self.compiled.lookup_long("COUNT"), self.count)
        self.assertIs(self.compiled.lookup_long("Number"), self.count)
        self.assertIsNone(self.compiled.lookup_long("missing"))

    def testLookupShortIsExact(self):
        self.assertIs(self.compiled.lookup_short("c"), self.count)
        self.assertIsNone(self.compiled.lookup_short("C"))
        self.assertIs(self.compiled.lookup_short("?"), self.registry.help)

    def testLookupPositional(self):
        self.assertIs(self.compiled.lookup_positional(), self.source)

    def testLookupPositionalNone(self):
        self.assertIsNone(Registry().compile().lookup_positional())

    def testLookupByCanonicalName(self):
        self.assertIs(self.compiled.lookup("count"), self.count)
        self.assertIsNone(self.compiled.lookup("number"))

    def testIndicesAreReadOnly(self):
        with self.assertRaises(TypeError):
            self.compiled.longs["other"] = self.count  # NOQA
        with self.assertRaises(TypeError):
            self.compiled.specs["other"] = self.count  # NOQA

    def testIterationInRegistrationOrder(self):
        self.assertEqual([spec.name for spec in self.compiled], ["help", "count", "source"])
        self.assertEqual(len(self.compiled), 3)
        self.assertIn(self.count, self.compiled)
        self.assertNotIn(string("count"), self.compiled)

    def testHelpSpec(self):
        self.assertIs(self.compiled.help, self.registry.help)


class TestDeclare(TestCase):
    """Declarative tables."""

    def testDeclareRows(self):
        registry = Registry()
        output, verbose, level = registry.declare([
            {"name": "output", "kind": "path", "aliases": ["-o"], "target": "output"},
            {"name": "verbose", "kind": Kind.FLAG, "aliases": "-v"},
            {"name": "level", "kind": "ENUM", "choices": ["low", "high"], "default": "low"},
        ])
        self.assertIs(output.kind, Kind.PATH)
        self.assertEqual(output.shorts, ["o"])
        self.assertEqual(verbose.shorts, ["v"])
        self.assertEqual(level.default, "low")
        self.assertIs(registry.specs["level"], level)

    def testDeclareDefaultsToString(self):
        (name,) = Registry().declare([{"name": "name"}])
        self.assertIs(name.kind, Kind.STRING)

    def testUnknownKind(self):
        with self.assertRaises(UnconstructibleKindError) as context:
            Registry().declare([{"name": "ratio", "kind": "fraction"}])
        self.assertIn("'fraction'", str(context.exception))

    def testRowsNeedNames(self):
        with self.assertRaises(TypeError):
            Registry().declare([{"kind": "string"}])

    def testTableMustBeIterableOfMappings(self):
        with self.assertRaises(TypeError):
            Registry().declare({"name": "x"})
        with self.assertRaises(TypeError):
            Registry().declare(["name"])

    def testDeclaredSpecsAreOrdinarySpecs(self):
        (spec,) = Registry().declare([{"name": "count", "kind": "integer"}])
        self.assertIsInstance(spec, Spec)


if __name__ == "__main__":
    unittest.main()
