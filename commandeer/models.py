"""
Commandeer platform model: the data the engine reads and produces.

What this module provides
- Identifiers: snowflake() validation of platform ids (positive 64-bit integers).
- Enumerations: ChannelType, Permissions, OptionType, CommandType, FunctionKind, ResponseKind.
- Entities: User, Role, Channel, Attachment, Message (free-text invocations).
- Interactions: Interaction, CommandData, CommandDataOption, Resolved (structured invocations).
- Requests: ClassicRequest, SlashRequest, MessageRequest, UserRequest (resolved command + Args).
- Response: the single outcome of a dispatch ({none, clear, create_message(text)}).

Notes
- Every entity is an introspectable, read-only record (see utils.IntrospectableType):
  fields are exposed as properties and containers are frozen snapshots.
- from_payload() constructors accept decoded platform JSON mappings; transport and
  delivery stay with the host application.
"""
from enum import Enum, IntEnum, IntFlag

from .utils import *

# Largest valid identifier (unsigned 64-bit).
MAX_ID = 2 ** 64 - 1


def snowflake(value, /):
    """
    Validate and normalize a platform identifier.

    Accepts an int or a decimal string (as sent on the wire). Identifiers are
    positive and fit into an unsigned 64-bit integer.

    Raises
    - ValueError: non-numeric text, zero, negative or out-of-range values.
    - TypeError: any other type (bool included).
    """
    if isinstance(value, bool) or not isinstance(value, int | str):
        raise TypeError("identifier must be an integer or a decimal string")
    if isinstance(value, str):
        if not value.isascii() or not value.isdecimal():
            raise ValueError("invalid digit found in identifier %r" % value)
        value = int(value)
    if not 0 < value <= MAX_ID:
        raise ValueError("identifier %d out of range" % value)
    return value


def _optional(mapping, key, convert):
    value = mapping.get(key)
    return None if value is None else convert(value)


class ChannelType(IntEnum):
    GUILD_TEXT = 0
    PRIVATE = 1
    GUILD_VOICE = 2
    GROUP = 3
    GUILD_CATEGORY = 4
    GUILD_ANNOUNCEMENT = 5
    ANNOUNCEMENT_THREAD = 10
    PUBLIC_THREAD = 11
    PRIVATE_THREAD = 12
    GUILD_STAGE_VOICE = 13
    GUILD_DIRECTORY = 14
    GUILD_FORUM = 15


class Permissions(IntFlag):
    """
    Guild member permission bits.

    BaseCommand.permissions semantics
    - None: anyone.
    - Permissions(0) or anything containing ADMINISTRATOR: administrators only.
    - otherwise: the member must hold every contained bit.
    """
    CREATE_INSTANT_INVITE = 1 << 0
    KICK_MEMBERS = 1 << 1
    BAN_MEMBERS = 1 << 2
    ADMINISTRATOR = 1 << 3
    MANAGE_CHANNELS = 1 << 4
    MANAGE_GUILD = 1 << 5
    ADD_REACTIONS = 1 << 6
    VIEW_AUDIT_LOG = 1 << 7
    PRIORITY_SPEAKER = 1 << 8
    STREAM = 1 << 9
    VIEW_CHANNEL = 1 << 10
    SEND_MESSAGES = 1 << 11
    SEND_TTS_MESSAGES = 1 << 12
    MANAGE_MESSAGES = 1 << 13
    EMBED_LINKS = 1 << 14
    ATTACH_FILES = 1 << 15
    READ_MESSAGE_HISTORY = 1 << 16
    MENTION_EVERYONE = 1 << 17
    USE_EXTERNAL_EMOJIS = 1 << 18
    VIEW_GUILD_INSIGHTS = 1 << 19
    CONNECT = 1 << 20
    SPEAK = 1 << 21
    MUTE_MEMBERS = 1 << 22
    DEAFEN_MEMBERS = 1 << 23
    MOVE_MEMBERS = 1 << 24
    USE_VAD = 1 << 25
    CHANGE_NICKNAME = 1 << 26
    MANAGE_NICKNAMES = 1 << 27
    MANAGE_ROLES = 1 << 28
    MANAGE_WEBHOOKS = 1 << 29
    MANAGE_GUILD_EXPRESSIONS = 1 << 30
    USE_APPLICATION_COMMANDS = 1 << 31
    MANAGE_THREADS = 1 << 34
    MODERATE_MEMBERS = 1 << 40


class OptionType(IntEnum):
    """Wire type of a structured command option."""
    SUB_COMMAND = 1
    SUB_COMMAND_GROUP = 2
    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    USER = 6
    CHANNEL = 7
    ROLE = 8
    MENTIONABLE = 9
    NUMBER = 10
    ATTACHMENT = 11


class CommandType(IntEnum):
    """Wire type of a structured command (and of its descriptor)."""
    CHAT_INPUT = 1
    USER = 2
    MESSAGE = 3


class FunctionKind(Enum):
    """Invocation kinds a handler can be bound to."""
    CLASSIC = "classic"
    SLASH = "slash"
    MESSAGE = "message"
    USER = "user"

    def __str__(self):
        return self.name.capitalize()


class ResponseKind(Enum):
    NONE = "none"
    CLEAR = "clear"
    CREATE_MESSAGE = "create-message"


class User(metaclass=IntrospectableType):
    __introspectable__ = ("id", "name", "bot")

    def __init__(self, id, name="", bot=False):
        self._id = snowflake(id)
        self._name = name
        self._bot = bool(bot)

    @classmethod
    def from_payload(cls, payload):
        return cls(payload["id"], payload.get("global_name") or payload.get("username", ""), payload.get("bot", False))


class Role(metaclass=IntrospectableType):
    __introspectable__ = ("id", "name", "permissions")

    def __init__(self, id, name="", permissions=Permissions(0)):
        self._id = snowflake(id)
        self._name = name
        self._permissions = Permissions(int(permissions))

    @classmethod
    def from_payload(cls, payload):
        return cls(payload["id"], payload.get("name", ""), int(payload.get("permissions", 0)))


class Channel(metaclass=IntrospectableType):
    __introspectable__ = ("id", "kind", "name", "guild_id")

    def __init__(self, id, kind=ChannelType.GUILD_TEXT, name="", guild_id=None):
        self._id = snowflake(id)
        self._kind = ChannelType(kind)
        self._name = name
        self._guild_id = None if guild_id is None else snowflake(guild_id)

    @classmethod
    def from_payload(cls, payload):
        return cls(payload["id"], payload.get("type", 0), payload.get("name") or "", payload.get("guild_id"))


class Attachment(metaclass=IntrospectableType):
    __introspectable__ = ("id", "filename", "url", "size", "content_type")

    def __init__(self, id, filename, url="", size=0, content_type=None):
        self._id = snowflake(id)
        self._filename = filename
        self._url = url
        self._size = size
        self._content_type = content_type

    @classmethod
    def from_payload(cls, payload):
        return cls(
            payload["id"],
            payload.get("filename", ""),
            payload.get("url", ""),
            payload.get("size", 0),
            payload.get("content_type"),
        )


class Message(metaclass=IntrospectableType):
    """
    A chat message: the input of a classic (free-text) invocation.

    The replied-to message and the uploaded attachments are the implicit sources
    for message/attachment arguments.
    """
    __introspectable__ = ("id", "channel_id", "guild_id", "author", "content", "referenced_message", "attachments")
    __displayable__ = ("id", "channel_id", "guild_id", "author", "content")

    def __init__(self, id, channel_id, author, content="", guild_id=None, referenced_message=None, attachments=()):
        if not isinstance(author, User):
            raise TypeError("message 'author' must be a user")
        if referenced_message is not None and not isinstance(referenced_message, Message):
            raise TypeError("message 'referenced_message' must be a message")
        self._id = snowflake(id)
        self._channel_id = snowflake(channel_id)
        self._guild_id = None if guild_id is None else snowflake(guild_id)
        self._author = author
        self._content = content
        self._referenced_message = referenced_message
        self._attachments = tuple(attachments)

    @classmethod
    def from_payload(cls, payload):
        return cls(
            payload["id"],
            payload["channel_id"],
            User.from_payload(payload["author"]),
            payload.get("content", ""),
            payload.get("guild_id"),
            _optional(payload, "referenced_message", cls.from_payload),
            [Attachment.from_payload(attachment) for attachment in payload.get("attachments", ())],
        )


class CommandDataOption(metaclass=IntrospectableType):
    """
    One node of a structured payload.

    - sub-command/group wrappers carry nested options in 'value' (a tuple).
    - leaf options carry the raw scalar (bool/int/float/str or an id).
    """
    __introspectable__ = ("name", "kind", "value", "focused")

    def __init__(self, name, kind, value=None, focused=False):
        self._name = name
        self._kind = OptionType(kind)
        self._focused = bool(focused)
        if self._kind in (OptionType.SUB_COMMAND, OptionType.SUB_COMMAND_GROUP):
            value = tuple(() if value is None else value)
            if not all(isinstance(option, CommandDataOption) for option in value):
                raise TypeError("sub-command option values must be options")
        elif self._kind in (OptionType.USER, OptionType.CHANNEL, OptionType.ROLE, OptionType.MENTIONABLE, OptionType.ATTACHMENT):
            value = snowflake(value)
        self._value = value

    @property
    def nested(self):
        return self.kind in (OptionType.SUB_COMMAND, OptionType.SUB_COMMAND_GROUP)

    @classmethod
    def from_payload(cls, payload):
        kind = OptionType(payload["type"])
        if kind in (OptionType.SUB_COMMAND, OptionType.SUB_COMMAND_GROUP):
            value = [cls.from_payload(option) for option in payload.get("options", ())]
        else:
            value = payload.get("value")
        return cls(payload["name"], kind, value, payload.get("focused", False))


class Resolved(metaclass=IntrospectableType):
    """Table of pre-resolved objects referenced by a structured payload (id → object)."""
    __introspectable__ = ("users", "roles", "channels", "messages", "attachments")

    def __init__(self, users=(), roles=(), channels=(), messages=(), attachments=()):
        self._users = {user.id: user for user in users}
        self._roles = {role.id: role for role in roles}
        self._channels = {channel.id: channel for channel in channels}
        self._messages = {message.id: message for message in messages}
        self._attachments = {attachment.id: attachment for attachment in attachments}

    def lookup(self, kind, id):
        """
        Return the resolved object of an option type (or None when not present).
        """
        table = {
            OptionType.USER: self._users,
            OptionType.ROLE: self._roles,
            OptionType.CHANNEL: self._channels,
            OptionType.ATTACHMENT: self._attachments,
        }.get(kind, {})
        return table.get(id)

    @classmethod
    def from_payload(cls, payload):
        return cls(
            [User.from_payload(user) for user in payload.get("users", {}).values()],
            [Role.from_payload(role) for role in payload.get("roles", {}).values()],
            [Channel.from_payload(channel) for channel in payload.get("channels", {}).values()],
            [Message.from_payload(message) for message in payload.get("messages", {}).values()],
            [Attachment.from_payload(attachment) for attachment in payload.get("attachments", {}).values()],
        )


class CommandData(metaclass=IntrospectableType):
    """
    Structured invocation: a command name plus nested options.

    For message/user (context menu) commands, target_id points at the selected
    message or user, usually present in the resolved table.
    """
    __introspectable__ = ("name", "kind", "options", "resolved", "target_id")

    def __init__(self, name, kind=CommandType.CHAT_INPUT, options=(), resolved=None, target_id=None):
        self._name = name
        self._kind = CommandType(kind)
        self._options = tuple(options)
        self._resolved = resolved if resolved is not None else Resolved()
        self._target_id = None if target_id is None else snowflake(target_id)

    @classmethod
    def from_payload(cls, payload):
        return cls(
            payload["name"],
            payload.get("type", CommandType.CHAT_INPUT),
            [CommandDataOption.from_payload(option) for option in payload.get("options", ())],
            _optional(payload, "resolved", Resolved.from_payload),
            payload.get("target_id"),
        )


class Interaction(metaclass=IntrospectableType):
    __introspectable__ = ("id", "token", "user", "data", "guild_id", "channel_id")

    def __init__(self, id, token, user, data, guild_id=None, channel_id=None):
        if not isinstance(data, CommandData):
            raise TypeError("interaction 'data' must be command data")
        self._id = snowflake(id)
        self._token = token
        self._user = user
        self._data = data
        self._guild_id = None if guild_id is None else snowflake(guild_id)
        self._channel_id = None if channel_id is None else snowflake(channel_id)

    @classmethod
    def from_payload(cls, payload):
        # Guild interactions carry the invoking user inside 'member'.
        user = payload.get("user") or payload.get("member", {}).get("user")
        return cls(
            payload["id"],
            payload["token"],
            _optional({"user": user}, "user", User.from_payload),
            CommandData.from_payload(payload["data"]),
            payload.get("guild_id"),
            payload.get("channel_id"),
        )


class Response(metaclass=IntrospectableType):
    """
    The single outcome of a dispatch.

    Mapping for the delivery collaborator
    - none: no visible action.
    - clear: remove the placeholder / deferred acknowledgement (or the command message).
    - create_message(text): send or edit a reply with text.
    """
    __introspectable__ = ("kind", "text")

    def __init__(self, kind, text=None):
        self._kind = ResponseKind(kind)
        if self._kind is ResponseKind.CREATE_MESSAGE and not isinstance(text, str):
            raise TypeError("response message text must be a string")
        self._text = text if self._kind is ResponseKind.CREATE_MESSAGE else None

    @classmethod
    def none(cls):
        return cls(ResponseKind.NONE)

    @classmethod
    def clear(cls):
        return cls(ResponseKind.CLEAR)

    @classmethod
    def create_message(cls, text):
        return cls(ResponseKind.CREATE_MESSAGE, text)

    def __eq__(self, other):
        if not isinstance(other, Response):
            return NotImplemented
        return (self.kind, self.text) == (other.kind, other.text)

    def __hash__(self):
        return hash((self.kind, self.text))


class Request(metaclass=IntrospectableType):
    """
    Base for resolved invocations: the base command, the bound Args and context.

    Handlers receive their own shallow copy of the request.
    """
    __introspectable__ = ("command", "args")
    kind = None

    def __init__(self, command, args):
        self._command = command
        self._args = args


class ClassicRequest(Request):
    __introspectable__ = ("command", "args", "message")
    kind = FunctionKind.CLASSIC

    def __init__(self, command, message, args):
        super().__init__(command, args)
        self._message = message


class SlashRequest(Request):
    __introspectable__ = ("command", "args", "interaction", "data")
    kind = FunctionKind.SLASH

    def __init__(self, command, interaction, data, args):
        super().__init__(command, args)
        self._interaction = interaction
        self._data = data


class MessageRequest(SlashRequest):
    __introspectable__ = ("command", "args", "interaction", "data", "target")
    kind = FunctionKind.MESSAGE

    def __init__(self, command, interaction, data, args, target):
        super().__init__(command, interaction, data, args)
        self._target = target


class UserRequest(SlashRequest):
    __introspectable__ = ("command", "args", "interaction", "data", "target")
    kind = FunctionKind.USER

    def __init__(self, command, interaction, data, args, target):
        super().__init__(command, interaction, data, args)
        self._target = target


__all__ = (
    "snowflake",
    "ChannelType",
    "Permissions",
    "OptionType",
    "CommandType",
    "FunctionKind",
    "ResponseKind",
    "User",
    "Role",
    "Channel",
    "Attachment",
    "Message",
    "CommandDataOption",
    "Resolved",
    "CommandData",
    "Interaction",
    "Response",
    "Request",
    "ClassicRequest",
    "SlashRequest",
    "MessageRequest",
    "UserRequest",
)
