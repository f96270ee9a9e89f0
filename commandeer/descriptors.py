"""
Commandeer platform descriptors: registration payloads derived from base commands.

convert(base, kind) produces a JSON-ready mapping for one invocation kind:
- slash: chat-input command with nested subcommand/group/argument options.
- message / user: context-menu commands (name only).

The platform's own registration rules are checked during conversion, so invalid
commands fail at startup rather than on registration:
- names: 1-32 characters; slash names are lowercase letters, digits, '-' or '_'.
- descriptions: 1-100 characters (slash only).
- at most 25 options per level and 25 choices per argument; choice names 1-100
  characters, string choice values at most 100 characters.
- string lengths: min_length 0-6000, max_length 1-6000.
- integer bounds within ±2**53.
- required arguments before optional ones.
- subcommands and groups cannot be mixed with arguments; groups only contain
  subcommands, subcommands only contain arguments.
- at most 4000 characters over every name, description and choice.
"""
from .faults import DescriptorError
from .models import CommandType, FunctionKind, OptionType
from .schema import (
    AttachmentKind,
    BoolKind,
    ChannelKind,
    IntegerKind,
    MentionKind,
    MessageKind,
    NumberKind,
    RoleKind,
    StringKind,
    UserKind,
)

MAX_NAME = 32
MAX_DESCRIPTION = 100
MAX_OPTIONS = 25
MAX_CHOICES = 25
MAX_CHOICE = 100
MAX_STRING_LENGTH = 6000
MAX_SAFE_INTEGER = 2 ** 53
MAX_TOTAL = 4000

OPTION_TYPES = {
    BoolKind: OptionType.BOOLEAN,
    NumberKind: OptionType.NUMBER,
    IntegerKind: OptionType.INTEGER,
    StringKind: OptionType.STRING,
    ChannelKind: OptionType.CHANNEL,
    # Messages are passed as text (a raw message id) on structured invocations.
    MessageKind: OptionType.STRING,
    AttachmentKind: OptionType.ATTACHMENT,
    UserKind: OptionType.USER,
    RoleKind: OptionType.ROLE,
    MentionKind: OptionType.MENTIONABLE,
}

COMMAND_TYPES = {
    FunctionKind.SLASH: CommandType.CHAT_INPUT,
    FunctionKind.MESSAGE: CommandType.MESSAGE,
    FunctionKind.USER: CommandType.USER,
}


class _Conversion:
    """Conversion state of one command: the path for messages and the character count."""

    def __init__(self, base):
        self.base = base
        self.total = 0

    def fail(self, reason):
        raise DescriptorError(f"Failed to validate command '{self.base.name}': {reason}", text=self.base.name)

    def count(self, *texts):
        self.total += sum(map(len, texts))

    def name(self, name, *, lowercase=True):
        if not 1 <= len(name) <= MAX_NAME:
            self.fail(f"name '{name}' must be between 1 and {MAX_NAME} characters")
        if lowercase:
            if not all(character.isalnum() or character in "-_" for character in name):
                self.fail(f"name '{name}' can only contain letters, digits, '-' or '_'")
            if name.lower() != name:
                self.fail(f"name '{name}' must be lowercase")
        self.count(name)
        return name

    def description(self, owner, description):
        if not 1 <= len(description) <= MAX_DESCRIPTION:
            self.fail(f"description of '{owner}' must be between 1 and {MAX_DESCRIPTION} characters")
        self.count(description)
        return description

    def choices(self, desc, choices, stringly):
        if len(choices) > MAX_CHOICES:
            self.fail(f"argument '{desc.name}' has more than {MAX_CHOICES} choices")
        converted = []
        for name, value in choices:
            if not 1 <= len(name) <= MAX_CHOICE:
                self.fail(f"choice '{name}' of '{desc.name}' must be between 1 and {MAX_CHOICE} characters")
            if stringly and len(value) > MAX_CHOICE:
                self.fail(f"choice value of '{name}' in '{desc.name}' exceeds {MAX_CHOICE} characters")
            self.count(name, value if stringly else "")
            converted.append({"name": name, "value": value})
        return converted

    def arg(self, desc):
        option = {
            "type": int(OPTION_TYPES[type(desc.kind)]),
            "name": self.name(desc.name),
            "description": self.description(desc.name, desc.description),
            "required": desc.required,
        }
        match kind := desc.kind:
            case NumberKind() | IntegerKind():
                for label, bound in (("min_value", kind.min), ("max_value", kind.max)):
                    if bound is None:
                        continue
                    if isinstance(kind, IntegerKind) and abs(bound) > MAX_SAFE_INTEGER:
                        self.fail(f"bound '{label}' of '{desc.name}' is out of the safe integer range")
                    option[label] = bound
                if kind.choices:
                    option["choices"] = self.choices(desc, kind.choices, stringly=False)
            case StringKind():
                if kind.min_length is not None:
                    if not 0 <= kind.min_length <= MAX_STRING_LENGTH:
                        self.fail(f"'min_length' of '{desc.name}' must be between 0 and {MAX_STRING_LENGTH}")
                    option["min_length"] = kind.min_length
                if kind.max_length is not None:
                    if not 1 <= kind.max_length <= MAX_STRING_LENGTH:
                        self.fail(f"'max_length' of '{desc.name}' must be between 1 and {MAX_STRING_LENGTH}")
                    option["max_length"] = kind.max_length
                if kind.choices:
                    option["choices"] = self.choices(desc, kind.choices, stringly=True)
            case ChannelKind():
                if kind.types:
                    option["channel_types"] = [int(channel) for channel in kind.types]
        return option

    def options(self, owner, options, *, depth):
        """
        Convert a level of options.

        depth 0 is the root command, depth 1 a subcommand or group, depth 2 a
        subcommand inside a group.
        """
        if len(options) > MAX_OPTIONS:
            self.fail(f"'{owner}' has more than {MAX_OPTIONS} options")

        args = [option.arg for option in options if option.arg is not None]
        if args and len(args) != len(options):
            self.fail(f"'{owner}' mixes arguments with subcommands or groups")

        converted, optional = [], None
        for option in options:
            if (arg := option.arg) is not None:
                if arg.required and optional is not None:
                    self.fail(f"required argument '{arg.name}' of '{owner}' follows the optional argument '{optional}'")
                if not arg.required:
                    optional = arg.name
                converted.append(self.arg(arg))
            elif (sub := option.sub) is not None:
                converted.append(self.nested(OptionType.SUB_COMMAND, sub, sub.options, depth=depth + 1))
            else:
                group = option.group
                if depth >= 1:
                    self.fail(f"group '{group.name}' can only be declared on a base command")
                if not group.subs:
                    self.fail(f"group '{group.name}' has no subcommands")
                converted.append(self.nested(OptionType.SUB_COMMAND_GROUP, group, group.options, depth=depth + 1))
        return converted

    def nested(self, option_type, node, options, *, depth):
        if option_type is OptionType.SUB_COMMAND and any(option.arg is None for option in options):
            self.fail(f"subcommand '{node.name}' can only contain arguments")
        nested = {
            "type": int(option_type),
            "name": self.name(node.name),
            "description": self.description(node.name, node.description),
        }
        if options:
            nested["options"] = self.options(node.name, options, depth=depth)
        return nested


def _permissions(base, /):
    return None if base.permissions is None else str(int(base.permissions))


def convert(base, kind, /):
    """
    Convert a base command into the platform descriptor for one invocation kind.

    Raises
    - DescriptorError: the command breaks a platform rule (see module docstring).
    - ValueError: kind is FunctionKind.CLASSIC (free-text commands are not registered).
    """
    if kind not in COMMAND_TYPES:
        raise ValueError(f"cannot build a descriptor for {kind} commands")

    conversion = _Conversion(base)
    descriptor = {
        "type": int(COMMAND_TYPES[kind]),
        "dm_permission": base.dm,
        "default_member_permissions": _permissions(base),
    }
    if kind is FunctionKind.SLASH:
        descriptor["name"] = conversion.name(base.name)
        descriptor["description"] = conversion.description(base.name, base.description)
        descriptor["options"] = conversion.options(base.name, base.command.options, depth=0)
        if conversion.total > MAX_TOTAL:
            conversion.fail(f"combined text length {conversion.total} exceeds {MAX_TOTAL} characters")
    else:
        descriptor["name"] = conversion.name(base.name, lowercase=False)
        descriptor["description"] = ""
    return descriptor


__all__ = (
    "OPTION_TYPES",
    "COMMAND_TYPES",
    "convert",
)
