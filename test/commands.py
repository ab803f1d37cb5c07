"""
Command builder and executor tests (schema rules, lifecycle, invocation outcomes).

Scope
- Validate builder conflicts: duplicate names, duplicate flags, second array argument.
- Validate sealing, cloning and the auto-registered help option.
- Validate exit codes of invocations: success, missing fields, delegated failures.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured through ConsoleOutput over in-memory rich consoles.
"""
import io
import unittest
from unittest import TestCase

from rich.console import Console

from argot import (
    Command,
    command,
    invoke,
    ConsoleOutput,
    ExitCode,
    ValueType,
    Arity,
    OptionArity,
    DefinitionError,
    MissingRequiredError,
    NotImplementedCommandError,
    DelegatedCommandError,
    InvalidOptionError,
)


def capture():
    stdout, stderr = io.StringIO(), io.StringIO()
    output = ConsoleOutput(
        Console(file=stdout, width=120, color_system=None),
        Console(file=stderr, width=120, color_system=None),
    )
    return output, stdout, stderr


class TestCommandBuilder(TestCase):
    """Schema rules enforced while building a command."""

    def testHelpOptionIsRegisteredByDefault(self):
        cmd = Command("tool")
        self.assertIn("help", cmd.options)
        self.assertEqual(cmd.flags["h"], "help")
        self.assertEqual(cmd.flags["help"], "help")
        self.assertEqual(len(cmd.handlers), 1)

    def testHelperCanBeDisabled(self):
        cmd = Command("help", helper=False)
        self.assertEqual(dict(cmd.options), {})
        self.assertEqual(cmd.handlers, ())
        self.assertFalse(cmd.helper)

    def testEmptyNameRejected(self):
        with self.assertRaises(DefinitionError):
            Command("  ")

    def testBuilderIsFluent(self):
        cmd = Command("tool")
        self.assertIs(cmd.add_argument("path"), cmd)
        self.assertIs(cmd.add_option("level", ("l",)), cmd)

    def testDuplicateArgumentNameRejected(self):
        cmd = Command("tool").add_argument("path")
        with self.assertRaises(DefinitionError) as context:
            cmd.add_argument("path")
        self.assertIn("already exists as an argument", str(context.exception))

    def testOptionCannotReuseArgumentName(self):
        cmd = Command("tool").add_argument("path")
        with self.assertRaises(DefinitionError) as context:
            cmd.add_option("path", ("p",))
        self.assertIn("already exists as an argument", str(context.exception))

    def testArgumentCannotReuseOptionName(self):
        cmd = Command("tool")
        with self.assertRaises(DefinitionError) as context:
            cmd.add_argument("help")
        self.assertIn("already exists as an option", str(context.exception))

    def testDuplicateFlagAcrossOptionsRejected(self):
        cmd = Command("tool").add_option("verbose", ("v",), type=ValueType.BOOLEAN)
        with self.assertRaises(DefinitionError) as context:
            cmd.add_option("version", ("v", "version"), type=ValueType.BOOLEAN)
        self.assertIn("command flag 'v' already defined", str(context.exception))
        self.assertNotIn("version", cmd.options)

    def testHelpFlagIsReserved(self):
        with self.assertRaises(DefinitionError):
            Command("tool").add_option("host", ("h", "host"))

    def testSecondArrayArgumentRejected(self):
        cmd = Command("tool").add_argument("files", Arity.ARRAY)
        with self.assertRaises(DefinitionError):
            cmd.add_argument("more", Arity.ARRAY)

    def testArrayArgumentStaysLast(self):
        cmd = Command("tool")
        cmd.add_argument("files", Arity.ARRAY)
        cmd.add_argument("target")
        self.assertEqual([argument.name for argument in cmd.positionals], ["target", "files"])
        self.assertEqual(list(cmd.arguments), ["files", "target"])

    def testInvalidDefaultRejectedByBuilder(self):
        with self.assertRaises(DefinitionError):
            Command("tool").add_option("count", ("c",), type=ValueType.INTEGER, default="many")

    def testParsingSealsTheDefinition(self):
        cmd = Command("tool")
        self.assertFalse(cmd.sealed)
        cmd.parse([])
        self.assertTrue(cmd.sealed)
        with self.assertRaises(DefinitionError):
            cmd.add_argument("late")

    def testWithNameReturnsIndependentUnsealedCopy(self):
        cmd = Command("tool").add_argument("path")
        cmd.parse(["x"])
        clone = cmd.with_name("alias")
        self.assertEqual(clone.name, "alias")
        self.assertEqual(cmd.name, "tool")
        self.assertFalse(clone.sealed)
        clone.add_argument("extra", Arity.OPTIONAL)
        self.assertNotIn("extra", cmd.arguments)

    def testConfigureHook(self):
        class Greeter(Command):
            def configure(self):
                self.add_argument("name", descr="who to greet")

        self.assertIn("name", Greeter("greet").arguments)

    def testRunnerMustBeCallable(self):
        with self.assertRaises(TypeError):
            Command("tool", runner="nope")


class TestCommandInvocation(TestCase):
    """Exit codes and body execution."""

    def setUp(self):
        self.calls = []

        def runner(output, args):
            self.calls.append(dict(args))
            output.out(f"hello {args['name']}\n")

        self.command = Command("greet", "say hello", runner)
        self.command.add_argument("name")
        self.command.add_option("times", ("t", "times"), OptionArity.VALUE_OPTIONAL, ValueType.INTEGER, 1)

    def testSuccessfulInvocation(self):
        output, stdout, _ = capture()
        self.assertEqual(self.command.run(["bob"], output), ExitCode.SUCCESS)
        self.assertEqual(stdout.getvalue(), "hello bob\n")
        self.assertEqual(self.calls, [{"name": "bob", "help": False, "times": 1}])

    def testStringPromptIsSplit(self):
        output, stdout, _ = capture()
        self.assertEqual(self.command.run("'bob smith' -t 2", output), ExitCode.SUCCESS)
        self.assertEqual(self.calls[0]["name"], "bob smith")
        self.assertEqual(self.calls[0]["times"], 2)

    def testMissingRequiredArgumentNeverRunsBody(self):
        output, stdout, stderr = capture()
        self.assertEqual(self.command.run([], output), ExitCode.INVALID)
        self.assertEqual(self.calls, [])
        self.assertEqual(stdout.getvalue(), "")
        self.assertIn("required argument 'name' does not exist", stderr.getvalue())

    def testMissingRequiredRaisesFromInvoke(self):
        output, _, _ = capture()
        with self.assertRaises(MissingRequiredError) as context:
            self.command.__invoke__([], output)
        self.assertEqual(context.exception.code, ExitCode.INVALID)

    def testMissingRequiredOption(self):
        output, _, stderr = capture()
        cmd = Command("deploy", runner=lambda output, args: None)
        cmd.add_option("token", ("token",), OptionArity.VALUE_REQUIRED)
        self.assertEqual(cmd.run([], output), ExitCode.INVALID)
        self.assertIn("required option 'token' does not exist", stderr.getvalue())

    def testHelpShortCircuits(self):
        output, stdout, _ = capture()
        self.assertEqual(self.command.run(["--help"], output), ExitCode.SUCCESS)
        self.assertEqual(self.calls, [])
        self.assertIn("usage", stdout.getvalue())

    def testInvalidOptionValue(self):
        output, _, stderr = capture()
        self.assertEqual(self.command.run(["bob", "--times=abc"], output), ExitCode.INVALID)
        self.assertIn("option --times is invalid: int expected, str 'abc' given", stderr.getvalue())
        with self.assertRaises(InvalidOptionError):
            self.command.__invoke__(["bob", "-t", "abc"], output)

    def testMissingRunner(self):
        output, _, _ = capture()
        cmd = Command("tool")
        self.assertEqual(cmd.run([], output), ExitCode.CANNOT_EXECUTE)
        with self.assertRaises(NotImplementedCommandError):
            cmd.__invoke__([], output)

    def testRunnerExceptionIsDelegated(self):
        def runner(output, args):
            raise ValueError("kaboom")

        output, _, stderr = capture()
        cmd = Command("tool", runner=runner)
        self.assertEqual(cmd.run([], output), ExitCode.FAILURE)
        self.assertIn("ValueError has been thrown: kaboom", stderr.getvalue())
        with self.assertRaises(DelegatedCommandError) as context:
            cmd.__invoke__([], output)
        self.assertIsInstance(context.exception.__cause__, ValueError)

    def testRunnerReturnCode(self):
        output, _, _ = capture()
        self.assertEqual(Command("tool", runner=lambda output, args: 2).run([], output), ExitCode.INVALID)
        self.assertEqual(Command("tool", runner=lambda output, args: 3).run([], output), 3)
        self.assertEqual(Command("tool", runner=lambda output, args: "ok").run([], output), ExitCode.SUCCESS)

    def testExecuteOverride(self):
        class Echo(Command):
            def configure(self):
                self.add_argument("words", Arity.ARRAY)

            def execute(self, output, result):
                output.out(" ".join(result["words"]) + "\n")
                return ExitCode.SUCCESS

        output, stdout, _ = capture()
        self.assertEqual(Echo("echo").run(["a", "b"], output), ExitCode.SUCCESS)
        self.assertEqual(stdout.getvalue(), "a b\n")

    def testInvocationIsRepeatable(self):
        output, stdout, _ = capture()
        self.command.run(["bob"], output)
        self.command.run(["alice", "-t", "2"], output)
        self.assertEqual([call["name"] for call in self.calls], ["bob", "alice"])


class TestCommandFactory(TestCase):
    """The command() factory and invoke() helper."""

    def testBareDecorator(self):
        @command
        def build(output, args):
            """compile the project"""

        self.assertIsInstance(build, Command)
        self.assertEqual(build.name, "build")
        self.assertEqual(build.descr, "compile the project")

    def testNamedDecorator(self):
        @command("make", "make things", helper=False)
        def build(output, args):
            pass

        self.assertEqual(build.name, "make")
        self.assertEqual(build.descr, "make things")
        self.assertFalse(build.helper)

    def testDecoratorRejectsNonCallable(self):
        with self.assertRaises(TypeError):
            command("make")(42)

    def testAttachReturnsRunner(self):
        cmd = Command("tool")

        @cmd.attach
        def runner(output, args):
            return 3

        self.assertIs(cmd.runner, runner)
        self.assertEqual(cmd.run([], capture()[0]), 3)

    def testInvokeCommand(self):
        output, stdout, _ = capture()
        cmd = command("hi")(lambda output, args: output.out("hi\n"))
        self.assertEqual(invoke(cmd, [], output=output), ExitCode.SUCCESS)
        self.assertEqual(stdout.getvalue(), "hi\n")

    def testInvokePlainCallable(self):
        output, _, _ = capture()
        self.assertEqual(invoke(lambda output, args: 1, [], output=output), ExitCode.FAILURE)

    def testInvokeRejectsOtherObjects(self):
        with self.assertRaises(TypeError):
            invoke(42, [])


if __name__ == "__main__":
    unittest.main()
