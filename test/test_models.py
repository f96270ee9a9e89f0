"""
Platform model tests (identifiers, payload decoding, responses).

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from commandeer.models import (
    ChannelType,
    CommandDataOption,
    CommandType,
    FunctionKind,
    Interaction,
    Message,
    OptionType,
    Permissions,
    Response,
    ResponseKind,
    snowflake,
)


class TestSnowflake(TestCase):
    def testValid(self):
        self.assertEqual(snowflake(1), 1)
        self.assertEqual(snowflake("18446744073709551615"), 2 ** 64 - 1)

    def testInvalid(self):
        for value in (0, -1, 2 ** 64, "abc", "", "١٢"):
            with self.subTest(value=value), self.assertRaises(ValueError):
                snowflake(value)
        for value in (True, 1.0, None):
            with self.subTest(value=value), self.assertRaises(TypeError):
                snowflake(value)


class TestPayloads(TestCase):
    def testMessage(self):
        message = Message.from_payload({
            "id": "10",
            "channel_id": "20",
            "guild_id": "30",
            "author": {"id": "1", "username": "someone"},
            "content": "!ping",
            "referenced_message": {"id": "11", "channel_id": "20", "author": {"id": "2"}},
            "attachments": [{"id": "40", "filename": "a.png", "size": 3}],
        })
        self.assertEqual((message.id, message.channel_id, message.guild_id), (10, 20, 30))
        self.assertEqual(message.author.name, "someone")
        self.assertEqual(message.referenced_message.id, 11)
        self.assertEqual(message.attachments[0].filename, "a.png")

    def testGuildInteraction(self):
        interaction = Interaction.from_payload({
            "id": "1",
            "token": "token",
            "guild_id": "2",
            "member": {"user": {"id": "3", "global_name": "Someone"}},
            "data": {
                "name": "root",
                "type": 1,
                "options": [{
                    "name": "s",
                    "type": 1,
                    "options": [{"name": "who", "type": 6, "value": "4"}],
                }],
                "resolved": {"users": {"4": {"id": "4", "username": "other"}}},
            },
        })
        self.assertEqual(interaction.user.name, "Someone")
        data = interaction.data
        self.assertIs(data.kind, CommandType.CHAT_INPUT)
        leaf = data.options[0].value[0]
        self.assertIs(leaf.kind, OptionType.USER)
        self.assertEqual(leaf.value, 4)
        self.assertEqual(data.resolved.lookup(OptionType.USER, 4).name, "other")
        self.assertIsNone(data.resolved.lookup(OptionType.ROLE, 4))

    def testContextMenuInteraction(self):
        interaction = Interaction.from_payload({
            "id": "1",
            "token": "token",
            "user": {"id": "3"},
            "data": {"name": "Quote", "type": 3, "target_id": "9"},
        })
        self.assertIs(interaction.data.kind, CommandType.MESSAGE)
        self.assertEqual(interaction.data.target_id, 9)
        self.assertIsNone(interaction.guild_id)

    def testDataMustBeCommandData(self):
        with self.assertRaises(TypeError):
            Interaction(1, "token", None, {"name": "x"})

    def testNestedOptionsMustBeOptions(self):
        with self.assertRaises(TypeError):
            CommandDataOption("s", OptionType.SUB_COMMAND, [object()])


class TestResponse(TestCase):
    def testKinds(self):
        self.assertIs(Response.none().kind, ResponseKind.NONE)
        self.assertIs(Response.clear().kind, ResponseKind.CLEAR)
        self.assertEqual(Response.create_message("hi").text, "hi")
        self.assertIsNone(Response.clear().text)

    def testEquality(self):
        self.assertEqual(Response.create_message("a"), Response.create_message("a"))
        self.assertNotEqual(Response.create_message("a"), Response.create_message("b"))
        self.assertNotEqual(Response.none(), Response.clear())

    def testMessageNeedsText(self):
        with self.assertRaises(TypeError):
            Response.create_message(None)


class TestEnums(TestCase):
    def testFunctionKindDisplay(self):
        self.assertEqual(str(FunctionKind.SLASH), "Slash")

    def testPermissionBits(self):
        self.assertEqual(Permissions.ADMINISTRATOR, 1 << 3)
        self.assertEqual(Permissions.SEND_MESSAGES, 1 << 11)
        self.assertEqual(ChannelType.GUILD_FORUM, 15)


if __name__ == "__main__":
    unittest.main()
