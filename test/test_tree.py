"""
Command tree behavioral tests (builders, validation, help, registry).

Scope
- Validate builder finalization, handler kind inference and option bookkeeping.
- Validate aggregated validation faults (missing function kinds, descriptors).
- Validate generated usage help.
- Validate the registry: duplicate binding, aggregated validation, descriptors.

Conventions
- Test method names follow CamelCase per project convention.
- Handlers are declared at module level so their annotations resolve.
"""
import unittest
from unittest import TestCase

from commandeer.faults import DescriptorError, MissingFunctionsError, ValidationExit
from commandeer.models import (
    ClassicRequest,
    FunctionKind,
    MessageRequest,
    Permissions,
    Response,
    SlashRequest,
    UserRequest,
)
from commandeer.schema import BoolKind, boolean, integer, string
from commandeer.tree import BaseCommand, Commands, CommandsBuilder, command, group, infer_kind, sub


async def on_classic(ctx, request: ClassicRequest):
    return Response.none()


async def on_slash(ctx, request: SlashRequest):
    return Response.none()


async def on_message(ctx, request: MessageRequest):
    return Response.none()


async def on_user(ctx, request: UserRequest):
    return Response.none()


async def bare(ctx, request):
    return Response.none()


def blocking(ctx, request: ClassicRequest):
    return Response.none()


class TestBuilders(TestCase):
    def testAttachInfersKind(self):
        for handler, kind in (
            (on_classic, FunctionKind.CLASSIC),
            (on_slash, FunctionKind.SLASH),
            (on_message, FunctionKind.MESSAGE),
            (on_user, FunctionKind.USER),
        ):
            with self.subTest(kind=kind):
                self.assertIs(infer_kind(handler), kind)

    def testAttachWithoutAnnotationRaises(self):
        with self.assertRaises(TypeError):
            command("x", "description").attach(bare)

    def testAttachBlockingHandlerRaises(self):
        with self.assertRaises(TypeError):
            command("x", "description").attach(blocking)

    def testExplicitAttach(self):
        built = (
            command("x", "description")
            .attach_classic(bare)
            .attach_slash(bare)
            .attach_message(bare)
            .attach_user(bare)
            .attach_slash(on_slash)
            .build()
        )
        self.assertEqual(built.command.kinds, (
            FunctionKind.CLASSIC,
            FunctionKind.SLASH,
            FunctionKind.MESSAGE,
            FunctionKind.USER,
        ))
        self.assertEqual(len(built.command.functions_of(FunctionKind.SLASH)), 2)

    def testEmptyDescriptionBecomesDash(self):
        self.assertEqual(sub("s", "").build().description, "-")
        self.assertEqual(command("c", "").build().description, "-")

    def testOptionsKeepOrderAndKind(self):
        root = (
            command("root", "description")
            .option(boolean("a", "description").required())
            .option(sub("s", "description"))
            .option(group("g", "description").option(sub("t", "description")))
            .build()
            .command
        )
        self.assertEqual([option.name for option in root.options], ["a", "s", "g"])
        self.assertIsInstance(root.options[0].arg.kind, BoolKind)
        self.assertTrue(root.options[0].arg.required)
        self.assertEqual(root.options[1].sub.name, "s")
        self.assertEqual(root.options[2].group.subs[0].name, "t")
        self.assertEqual(root.args(), (root.options[0].arg,))
        self.assertIsNone(root.child("a"))
        self.assertIs(root.child("g").group, root.options[2].group)

    def testDuplicateOptionRaises(self):
        with self.assertRaises(ValueError):
            command("c", "description").option(boolean("a", "description")).option(sub("a", "description"))
        with self.assertRaises(ValueError):
            group("g", "description").option(sub("s", "description")).option(sub("s", "description"))

    def testInvalidNamesRaise(self):
        with self.assertRaises(ValueError):
            sub("two words", "description").build()
        with self.assertRaises(TypeError):
            command(None, "description").build()

    def testBuiltTreeIsReadOnly(self):
        root = command("c", "description").option(boolean("a", "description")).build()
        self.assertIsInstance(root.command.options, tuple)
        with self.assertRaises(AttributeError):
            root.command.name = "other"


class TestValidation(TestCase):
    def testSubsetKindsAreValid(self):
        command("root", "description") \
            .attach(on_classic) \
            .attach(on_slash) \
            .option(sub("a", "description").attach(on_slash)) \
            .option(group("g", "description").option(sub("b", "description").attach(on_classic))) \
            .build() \
            .validate()

    def testUncoveredKindsAreAllReported(self):
        built = (
            command("root", "description")
            .attach(on_classic)
            .option(sub("a", "description").attach(on_slash))
            .option(group("g", "description").option(sub("b", "description").attach(on_user)))
            .build()
        )
        with self.assertRaises(ValidationExit) as context:
            built.validate()
        faults = context.exception.exceptions
        self.assertEqual(len(faults), 2)
        self.assertTrue(all(isinstance(fault, MissingFunctionsError) for fault in faults))
        self.assertEqual(
            str(faults[0]),
            "Base command 'root' does not map to a function of a kind 'Slash', but the subcommand 'a' does",
        )
        self.assertIn("'User'", str(faults[1]))
        self.assertIn("'b'", str(faults[1]))

    def testArgumentsDoNotHideSubcommands(self):
        built = (
            command("root", "description")
            .attach(on_classic)
            .option(boolean("flag", "description"))
            .option(sub("a", "description").attach(on_slash))
            .build()
        )
        with self.assertRaises(ValidationExit) as context:
            built.validate()
        self.assertEqual(len(context.exception.exceptions), 1)

    def testNearestAncestorIsChecked(self):
        built = (
            command("root", "description")
            .attach(on_classic)
            .option(sub("a", "description").attach(on_classic).option(sub("b", "description").attach(on_slash)))
            .build()
        )
        with self.assertRaises(ValidationExit) as context:
            built.validate()
        faults = context.exception.exceptions
        self.assertEqual(len(faults), 1)
        self.assertIn("Base command 'a'", str(faults[0]))
        self.assertIn("subcommand 'b'", str(faults[0]))

    def testDescriptorFailuresAreReported(self):
        built = command("Root", "description").attach(on_slash).attach(on_user).build()
        with self.assertRaises(ValidationExit) as context:
            built.validate()
        faults = context.exception.exceptions
        self.assertEqual(len(faults), 1)
        self.assertIsInstance(faults[0], DescriptorError)

    def testBuilderValidate(self):
        with self.assertRaises(ValidationExit):
            command("Root", "description").attach(on_slash).validate()


class TestHelp(TestCase):
    def testUsageBlock(self):
        built = (
            command("c", "description")
            .attach(on_classic)
            .permissions(Permissions.SEND_MESSAGES)
            .option(boolean("ca", "first").required())
            .option(boolean("cb", "second"))
            .build()
        )
        self.assertEqual(built.generate_help(), "\n".join([
            "```yaml",
            "%-16s %s" % ("c", "description"),
            "\t%-16s %s" % ("<ca>", "first"),
            "\t%-16s %s" % ("[cb]", "second"),
            "",
            "Permissions required: SEND_MESSAGES",
            "Enabled in DMs: No",
            "Types: Classic",
            "```",
        ]))

    def testNestedUsageWithHelpText(self):
        built = (
            command("e", "description")
            .attach(on_classic)
            .attach(on_slash)
            .help("Some help.")
            .dm()
            .permissions(Permissions(0))
            .option(group("g", "group").option(sub("s", "leaf").option(integer("n", "count").required())))
            .build()
        )
        self.assertEqual(built.generate_help(), "\n".join([
            "```yaml",
            "%-16s %s" % ("e", "description"),
            "\t%-16s %s" % ("g", "group"),
            "\t\t%-16s %s" % ("s", "leaf"),
            "\t\t\t%-16s %s" % ("<n>", "count"),
            "",
            "Some help.",
            "Permissions required: Administrator",
            "Enabled in DMs: Yes",
            "Types: Classic, Slash",
            "```",
        ]))

    def testPermissionsListing(self):
        built = command("c", "d").permissions(Permissions.SEND_MESSAGES | Permissions.KICK_MEMBERS).build()
        self.assertIn("Permissions required: KICK_MEMBERS, SEND_MESSAGES", built.generate_help())
        anyone = command("c", "d").build()
        self.assertIn("Permissions required: None", anyone.generate_help())
        administrator = command("c", "d").permissions(Permissions.ADMINISTRATOR | Permissions.KICK_MEMBERS).build()
        self.assertIn("Permissions required: Administrator", administrator.generate_help())


class TestRegistry(TestCase):
    def testBindRejectsDuplicates(self):
        builder = CommandsBuilder().bind(command("ping", "description"))
        with self.assertRaises(ValueError):
            builder.bind(command("ping", "other"))

    def testLookup(self):
        commands = CommandsBuilder().bind(command("ping", "description")).bind(command("pong", "description")).build()
        self.assertIsInstance(commands, Commands)
        self.assertIsInstance(commands.get("ping"), BaseCommand)
        self.assertIsNone(commands.get("nope"))
        self.assertIn("pong", commands)
        self.assertEqual([base.name for base in commands], ["ping", "pong"])

    def testValidateAggregatesEveryCommand(self):
        builder = (
            CommandsBuilder()
            .bind(command("Bad", "description").attach(on_slash))
            .bind(command("root", "description").attach(on_classic).option(sub("a", "description").attach(on_slash)))
            .bind(command("good", "description").attach(on_slash))
        )
        with self.assertRaises(ValidationExit) as context:
            builder.validate()
        self.assertEqual(len(context.exception.exceptions), 2)

    def testDescriptorsSkipClassicAndDeduplicate(self):
        commands = (
            CommandsBuilder()
            .bind(command("ping", "description").attach(on_classic).attach(on_slash).attach(on_slash))
            .bind(command("quote", "description").attach(on_message).attach(on_user))
            .bind(command("classic", "description").attach(on_classic))
            .build()
        )
        commands.validate()
        self.assertEqual([(descriptor["name"], descriptor["type"]) for descriptor in commands.descriptors()], [
            ("ping", 1),
            ("quote", 3),
            ("quote", 2),
        ])

    def testStringLengthsAreKept(self):
        built = command("say", "description").attach(on_slash).option(string("text", "what").max_length(10)).build()
        self.assertEqual(built.descriptors()[0]["options"][0]["max_length"], 10)


if __name__ == "__main__":
    unittest.main()
