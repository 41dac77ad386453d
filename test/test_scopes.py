# python
"""
Scopes module behavioral tests (declaration, parse passes, help, faults).

Scope
- Validate that a pass binds every declared definition and hands back the
  tokens nobody claimed, in order.
- Validate help short-circuiting (usage on stdout, exit status 0).
- Validate that faults of a pass are surfaced together (raised as CommandExit
  in non-shell mode, rendered + exit status 1 in shell mode).
- Validate declaration rules (unique names, at least one name).

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Scope, Argument, slots, faults).
"""

from __future__ import annotations

import contextlib
import io
import sys
import unittest
from unittest import TestCase
from unittest.mock import patch

from argbinder import Scope, Argument, FlagSlot, HelpSlot
from argbinder.faults import (
    ArityMismatchError,
    CommandExit,
    DuplicateOptionError,
    InvalidChoiceError,
    MissingRequiredError,
    UnparsedTokensError,
)


class TestScopeParsing(TestCase):
    """Behavioral tests for a parse pass."""

    def testBindsAndReturnsLeftovers(self):
        scope = Scope("tool")
        verbose = scope.flag("v", "verbose")
        output = scope.string("o", "out")
        leftovers = scope.parse(["-v", "src", "--out", "dst", "more"])
        self.assertEqual(leftovers, ["src", "more"])
        self.assertIs(verbose.value, True)
        self.assertEqual(output.value, "dst")

    def testTokensAreBlankedInPlace(self):
        scope = Scope("tool")
        scope.string("o")
        tokens = ["-o", "dst", "src"]
        scope.parse(tokens)
        self.assertEqual(tokens, ["", "", "src"])

    def testFlagClusterIsSplitAcrossDefinitions(self):
        scope = Scope("tool")
        verbose = scope.flag("v")
        quiet = scope.flag("q")
        leftovers = scope.parse(["-vqz"])
        self.assertEqual(leftovers, ["-z"])
        self.assertIs(verbose.value, True)
        self.assertIs(quiet.value, True)

    def testUndeclaredFlagsStayFalse(self):
        scope = Scope("tool")
        verbose = scope.flag("v")
        self.assertEqual(scope.parse(["src"]), ["src"])
        self.assertIs(verbose.value, False)

    def testListAccumulatesAcrossOccurrences(self):
        scope = Scope("tool")
        tags = scope.list("t", "tag")
        self.assertEqual(scope.parse(["-t", "a", "x", "--tag", "b", "-t", "a"]), ["x"])
        self.assertEqual(tags.value, ["a", "b", "a"])

    def testSelectorBindsDeclaredChoice(self):
        scope = Scope("tool")
        mode = scope.selector("m", "mode", choices=("fast", "safe"), default="fast")
        self.assertEqual(mode.value, "fast")
        scope.parse(["--mode", "safe"])
        self.assertEqual(mode.value, "safe")

    def testFileUsesOpener(self):
        opened = []
        scope = Scope("tool")
        log = scope.file("l", "log", mode="a", permission=0o600, opener=lambda *args: opened.append(args) or "handle")
        scope.parse(["--log", "run.log"])
        self.assertEqual(opened, [("run.log", "a", 0o600)])
        self.assertEqual(log.value, "handle")

    def testDefaultsToProcessArguments(self):
        scope = Scope("tool")
        verbose = scope.flag("v")
        argv = ["prog", "-v", "rest"]
        with patch.object(sys, "argv", argv):
            self.assertEqual(scope.parse(), ["rest"])
        self.assertEqual(argv, ["prog", "-v", "rest"])
        self.assertIs(verbose.value, True)

    def testParseRequiresAList(self):
        with self.assertRaises(TypeError):
            Scope("tool").parse(("-v",))


class TestScopeFaults(TestCase):
    """Behavioral tests for faults collected during a pass."""

    def testMissingValueRaisesCommandExit(self):
        scope = Scope("tool")
        scope.string("o", "out")
        with self.assertRaises(CommandExit) as caught:
            scope.parse(["-o"])
        self.assertEqual(len(caught.exception.exceptions), 1)
        self.assertIsInstance(caught.exception.exceptions[0], ArityMismatchError)

    def testDuplicateKeepsFirstValue(self):
        scope = Scope("tool")
        output = scope.string("o")
        with self.assertRaises(CommandExit) as caught:
            scope.parse(["-o", "a", "-o", "b"])
        self.assertIsInstance(caught.exception.exceptions[0], DuplicateOptionError)
        self.assertEqual(output.value, "a")

    def testFaultsAreCollectedTogether(self):
        scope = Scope("tool")
        scope.selector("m", choices=("fast", "safe"))
        scope.string("o", required=True)
        with self.assertRaises(CommandExit) as caught:
            scope.parse(["-m", "slow"])
        kinds = [type(exception) for exception in caught.exception.exceptions]
        self.assertEqual(kinds, [InvalidChoiceError, MissingRequiredError])

    def testFailedRequiredIsNotReportedAsMissing(self):
        scope = Scope("tool")
        scope.string("o", required=True)
        with self.assertRaises(CommandExit) as caught:
            scope.parse(["-o"])
        kinds = [type(exception) for exception in caught.exception.exceptions]
        self.assertEqual(kinds, [ArityMismatchError])

    def testOpenFailureIsReportedUnchanged(self):
        error = PermissionError(13, "Permission denied", "locked.txt")

        def opener(path, mode, permission):
            raise error

        scope = Scope("tool")
        scope.file("f", opener=opener)
        with self.assertRaises(CommandExit) as caught:
            scope.parse(["-f", "locked.txt"])
        self.assertIs(caught.exception.exceptions[0], error)

    def testStrictScopeRejectsLeftovers(self):
        with self.assertRaises(CommandExit) as caught:
            Scope("tool", strict=True).parse(["stray"])
        self.assertIsInstance(caught.exception.exceptions[0], UnparsedTokensError)
        self.assertIn("stray", str(caught.exception.exceptions[0]))

    def testFaultsCarryTheScope(self):
        scope = Scope("tool")
        scope.string("o", required=True)
        with self.assertRaises(CommandExit) as caught:
            scope.parse([])
        self.assertIs(caught.exception.exceptions[0].options["tool"], scope)

    def testShellModeRendersAndExits(self):
        scope = Scope("tool", shell=True, colorful=False)
        scope.string("o", "out")
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as caught:
            scope.parse(["--out"])
        self.assertEqual(caught.exception.code, 1)
        self.assertIn("must be followed by a string", stderr.getvalue())

    def testShellModeReportsValidatorErrorsAsInvalidValues(self):
        scope = Scope("tool", shell=True, colorful=False)
        scope.string("n", "number", validator=lambda values: None if values[0].isdigit() else ValueError("not a number"))
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as caught:
            scope.parse(["-n", "abc"])
        self.assertEqual(caught.exception.code, 1)
        output = stderr.getvalue()
        self.assertIn("not a number", output)
        self.assertIn("11131", output)
        self.assertNotIn("11161", output)

    def testTriggerLetsCallerOverrideScopeOptions(self):
        scope = Scope("tool", shell=True)
        other = Scope("other")
        with self.assertRaises(MissingRequiredError) as caught:
            scope.trigger(MissingRequiredError("-o is required"), tool=other, shell=False)
        self.assertIs(caught.exception.options["tool"], other)


class TestScopeHelp(TestCase):
    """Behavioral tests for help requests and usage rendering."""

    def testHelpShortCircuitsThePass(self):
        scope = Scope("tool", "copy things around")
        output = scope.string("o", "out", required=True, descr="where to write")
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout), self.assertRaises(SystemExit) as caught:
            scope.parse(["-o", "dst", "--help"])
        self.assertEqual(caught.exception.code, 0)
        self.assertIsNone(output.value)
        self.assertIn("usage: tool", stdout.getvalue())
        self.assertIn("where to write", stdout.getvalue())

    def testShortHelpMarker(self):
        scope = Scope("tool")
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout), self.assertRaises(SystemExit) as caught:
            scope.parse(["-h"])
        self.assertEqual(caught.exception.code, 0)
        self.assertIn("[-h|--help]", stdout.getvalue())

    def testHelpSlotBindRequestsHelp(self):
        scope = Scope("tool")
        scope.add(Argument(HelpSlot(), long="manual", renderer=lambda: "the manual"))
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout), self.assertRaises(SystemExit) as caught:
            scope.parse(["--manual"])
        self.assertEqual(caught.exception.code, 0)
        self.assertIn("the manual", stdout.getvalue())

    def testUsageComposesFragments(self):
        scope = Scope("tool", "copy things around")
        scope.flag("v", "verbose", descr="talk more")
        scope.string("o", "out", required=True, descr="where to write")
        usage = scope.usage()
        self.assertIn('usage: tool [-h|--help] [-v|--verbose] -o|--out "<value>"', usage)
        self.assertIn("copy things around", usage)
        self.assertIn("show this help message and exit", usage)
        self.assertIn("talk more", usage)
        self.assertIn("options:", usage)


class TestScopeDeclarations(TestCase):
    """Behavioral tests for declaring definitions."""

    def testHelpIsDeclaredFirst(self):
        scope = Scope("tool")
        self.assertEqual([argument.name() for argument in scope.arguments], ["-h|--help"])

    def testDeclarationHelpersSetUniqueness(self):
        scope = Scope("tool")
        scope.flag("v")
        scope.string("o")
        scope.selector("m", choices=("a",))
        scope.file("f")
        scope.list("t")
        self.assertEqual([argument.unique for argument in scope.arguments[1:]], [True, True, True, True, False])

    def testNamesMustBeUnique(self):
        scope = Scope("tool")
        scope.flag("v", "verbose")
        with self.assertRaises(ValueError):
            scope.string("v")
        with self.assertRaises(ValueError):
            scope.list(long="verbose")
        with self.assertRaises(ValueError):
            scope.flag("h")

    def testDefinitionsNeedAName(self):
        with self.assertRaises(TypeError):
            Scope("tool").add(Argument(FlagSlot()))
        with self.assertRaises(TypeError):
            Scope("tool").add("-v")

    def testSelectorRequiresChoices(self):
        with self.assertRaises(TypeError):
            Scope("tool").selector("m")

    def testScopeNameIsSanitized(self):
        with self.assertRaises(ValueError):
            Scope("  ")
        with self.assertRaises(TypeError):
            Scope(1)
        self.assertEqual(Scope(" tool ").name, "tool")


if __name__ == "__main__":
    unittest.main()
