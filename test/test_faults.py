"""
Fault behavioral tests (codes, options, rendering, trigger and describe).

Scope
- Validate class-level codes/titles and per-instance option overrides.
- Validate trigger() in raise and shell modes, including ValidationExit.
- Validate describe() chat copy.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from commandeer.faults import (
    ArgumentParseError,
    CommandException,
    DescriptorError,
    ExecutionError,
    FaultCode,
    MissingArgsError,
    NotFoundError,
    UnexpectedArgsError,
    UnknownSubcommandError,
    ValidationExit,
    console,
    describe,
    trigger,
)


class TestFaults(TestCase):
    def testCodesAndTitles(self):
        fault = MissingArgsError("Expected a required argument 'a' of type 'bool'")
        self.assertIs(fault.code, FaultCode.MISSING_ARGS)
        self.assertEqual(fault.options["title"], "missing arguments")
        self.assertEqual(UnknownSubcommandError().code, FaultCode.UNKNOWN_SUBCOMMAND)

    def testHierarchy(self):
        self.assertTrue(issubclass(ArgumentParseError, UnexpectedArgsError))
        self.assertTrue(issubclass(UnknownSubcommandError, NotFoundError))
        self.assertTrue(issubclass(DescriptorError, CommandException))

    def testOptionsAreReadOnly(self):
        fault = NotFoundError("Command 'x' does not exist", text="x")
        self.assertEqual(fault.options["text"], "x")
        with self.assertRaises(TypeError):
            fault.options["text"] = "y"

    def testReplaceKeepsMessageAndType(self):
        fault = ArgumentParseError("bad", text="x")
        replaced = fault.__replace__(hint="try again")
        self.assertIs(type(replaced), ArgumentParseError)
        self.assertEqual(str(replaced), "bad")
        self.assertEqual(replaced.options["hint"], "try again")
        self.assertEqual(replaced.options["text"], "x")
        self.assertIsNone(fault.options["hint"])

    def testMissingMessage(self):
        self.assertEqual(str(ExecutionError()), "")


class TestTrigger(TestCase):
    def testRaises(self):
        with self.assertRaises(MissingArgsError) as context:
            trigger(MissingArgsError("missing"), hint="give it")
        self.assertEqual(context.exception.options["hint"], "give it")

    def testShellModeRenders(self):
        with console.capture() as capture:
            trigger(MissingArgsError("something is missing"), shell=True, colorful=False, hint="give it")
        output = capture.get()
        self.assertIn(str(FaultCode.MISSING_ARGS.value), output)
        self.assertIn("Missing Arguments", output)
        self.assertIn("something is missing", output)
        self.assertIn("give it", output)

    def testShellModeFancyPanel(self):
        with console.capture() as capture:
            trigger(NotFoundError("Command 'x' does not exist"), shell=True, fancy=True)
        self.assertIn("Command 'x' does not exist", capture.get())

    def testValidationExitShellModeExits(self):
        group = ValidationExit([DescriptorError("first"), DescriptorError("second")])
        with console.capture() as capture, self.assertRaises(SystemExit) as context:
            trigger(group, shell=True)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("first", capture.get())
        self.assertIn("second", capture.get())

    def testValidationExitRaises(self):
        with self.assertRaises(ValidationExit) as context:
            trigger(ValidationExit([DescriptorError("first")]))
        self.assertEqual(str(context.exception), "first")

    def testRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))


class TestDescribe(TestCase):
    def testTitleAndMessage(self):
        self.assertEqual(describe(NotFoundError("Command 'x' does not exist")), "Command not found: Command 'x' does not exist")

    def testMessageStartingWithTitle(self):
        self.assertEqual(describe(ExecutionError("Execution failed badly")), "Execution failed badly")

    def testTitleOnly(self):
        self.assertEqual(describe(ExecutionError()), "Execution failed")

    def testValidationExit(self):
        group = ValidationExit([DescriptorError("first"), DescriptorError("second")])
        self.assertEqual(describe(group), "first; second")

    def testOtherErrors(self):
        self.assertEqual(describe(ValueError("plain")), "plain")
        self.assertEqual(describe(KeyError()), "KeyError")


if __name__ == "__main__":
    unittest.main()
