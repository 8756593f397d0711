"""
Help screens and the run() routine.

Scope
- usage_form()/exhaustive_form(): arity decorations and spellings.
- render_usage()/render_help(): usage line, description, option rows, hidden specs.
- Registry.run(): success, parse errors, help requests, warnings, compile errors.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured from a colorless console of fixed width.
"""
import unittest
from unittest import TestCase

from rich.console import Console

from argstream import (
    Registry,
    ParseResult,
    flag,
    path,
    string,
    exhaustive_form,
    render_help,
    render_usage,
    usage_form,
)
from argstream.faults import DuplicateShortNameError


def make_console():
    return Console(color_system=None, force_terminal=False, width=100)


class TestForms(TestCase):
    """Usage and exhaustive forms of single specs."""

    def testUsageDecorations(self):
        self.assertEqual(usage_form(string("name", required=True)).plain, "--name=STRING")
        self.assertEqual(usage_form(string("name")).plain, "[ --name=STRING ]")
        self.assertEqual(usage_form(string("tag", list=True)).plain, "( --tag=STRING )*")
        self.assertEqual(usage_form(string("tag", list=True, required=True)).plain, "( --tag=STRING )+")
        self.assertEqual(usage_form(flag("verbose")).plain, "[ --verbose ]")
        self.assertEqual(usage_form(path("file", positional=True, required=True)).plain, "FILE")

    def testExhaustiveForms(self):
        self.assertEqual(
            exhaustive_form(path("output", "--out", "-o")).plain,
            "--output=FILE, --out=FILE, -o FILE"
        )
        self.assertEqual(exhaustive_form(path("file", positional=True)).plain, "--file=FILE, FILE")
        self.assertEqual(exhaustive_form(Registry().help).plain, "--help, -h, -?")


class TestRender(TestCase):
    """Usage lines and help screens."""

    def setUp(self):
        self.registry = Registry(command="tool", descr="Copy things around.", colorful=False)
        self.registry.string("name", "-n", required=True, descr="who is copying")
        self.registry.integer("count", "-c", default=1)
        self.registry.string("secret", hidden=True, descr="not for you")
        self.registry.path("file", positional=True, required=True, list=True)

    def render(self, renderable):
        console = make_console()
        with console.capture() as capture:
            console.print(renderable)
        return capture.get()

    def testUsageListsRequiredSpecs(self):
        usage = render_usage(self.registry, console=make_console())
        self.assertEqual(usage.plain, "usage: tool --name=STRING ( FILE )+")

    def testHelpScreen(self):
        output = self.render(render_help(self.registry, console=make_console()))
        lines = output.splitlines()
        self.assertEqual(lines[0], "usage: tool --name=STRING ( FILE )+")
        self.assertIn("Copy things around.", output)

        (help,) = [line for line in lines if line.startswith("--help")]
        self.assertTrue(help.startswith("--help, -h, -?"))
        self.assertEqual(help.index("Print an informative help message."), 30)

        (name,) = [line for line in lines if line.startswith("--name")]
        self.assertTrue(name.startswith("--name=STRING, -n STRING"))
        self.assertEqual(name.index("who is copying"), 30)

        self.assertIn("--count=INTEGER, -c INTEGER", output)
        self.assertIn("--file=FILE, FILE", output)

    def testHiddenSpecsAreLeftOut(self):
        output = self.render(render_help(self.registry, console=make_console()))
        self.assertNotIn("--secret", output)
        self.assertNotIn("not for you", output)

    def testWideSpellingsPushDescriptionDown(self):
        registry = Registry(command="tool", colorful=False)
        registry.path("configuration-file", "--config", "-C", descr="where settings live")
        output = self.render(render_help(registry, console=make_console()))
        lines = output.splitlines()
        index = next(index for index, line in enumerate(lines) if line.startswith("--configuration-file"))
        self.assertEqual(lines[index + 1], " " * 30 + "where settings live")

    def testFancyPanel(self):
        registry = Registry(command="tool", fancy=True, colorful=False)
        output = self.render(render_help(registry, console=make_console()))
        self.assertIn("TOOL HELP", output)


class TestRun(TestCase):
    """Registry.run()."""

    def setUp(self):
        self.registry = Registry(command="tool", colorful=False)
        self.name = self.registry.string("name", "-n", required=True)
        self.console = make_console()

    def run_captured(self, argv):
        with self.console.capture() as capture:
            result = self.registry.run(argv, console=self.console)
        return result, capture.get()

    def testSuccessReturnsResult(self):
        result, output = self.run_captured(["-n", "x"])
        self.assertIsInstance(result, ParseResult)
        self.assertEqual(result.value(self.name), "x")
        self.assertEqual(output, "")

    def testStringArgv(self):
        result, _ = self.run_captured("--name 'a b'")
        self.assertEqual(result.value(self.name), "a b")

    def testParseErrorPrintsFaultAndHelp(self):
        result, output = self.run_captured(["--nope"])
        self.assertIsNone(result)
        self.assertIn("unknown option '--nope' at first position", output)
        self.assertIn("Unknown Option", output)
        self.assertIn("usage: tool --name=STRING", output)

    def testMissingRequiredPrintsFault(self):
        result, output = self.run_captured([])
        self.assertIsNone(result)
        self.assertIn("missing required option '--name'", output)

    def testHelpRequestPrintsHelp(self):
        result, output = self.run_captured(["--help"])
        self.assertIsNone(result)
        self.assertIn("usage: tool", output)
        self.assertIn("Print an informative help message.", output)

    def testWarningsArePrinted(self):
        result, output = self.run_captured(["--name="])
        self.assertEqual(result.value(self.name), "")
        self.assertIn("empty inline value for option '--name'", output)

    def testCompileErrorsPropagate(self):
        self.registry.flag("human", "-h")
        with self.assertRaises(DuplicateShortNameError):
            self.registry.run([], console=self.console)


if __name__ == "__main__":
    unittest.main()
