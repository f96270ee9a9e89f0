"""
Commandeer argument values: typed data bound to one invocation.

Overview
- Ref: a reference to a platform entity, either a bare id or a materialized object.
  Both states expose .id.
- ArgValue: a decoded value tagged with its argument kind.
  • bool → bool, number → float, integer → int, string → str
  • channel/message/attachment/user/role → Ref
  • mention → int (raw id, of any mention kind)
- Arg / Args: named values in declaration order, with typed accessors.
- decode(kind, token): free-text token → ArgValue.
- ArgValue.from_option(desc, option, resolved): structured option → ArgValue.

Accessor contract
- absent name → MissingArgsError
- present under another kind → ArgsMismatchError
"""
import re

from .faults import *
from .models import OptionType, snowflake
from .schema import (
    ArgKind,
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
from .utils import *

# Platform mention syntax, keyed by the kind a mention refers to.
MENTIONS = {
    UserKind: re.compile(r"<@!?(\d+)>"),
    RoleKind: re.compile(r"<@&(\d+)>"),
    ChannelKind: re.compile(r"<#(\d+)>"),
}

MIN_INTEGER = -2 ** 63
MAX_INTEGER = 2 ** 63 - 1


class Ref(metaclass=IntrospectableType):
    """
    Reference to a platform entity.

    Ref(12345) holds an id only; Ref(user) holds the object (anything with an .id).
    """
    __introspectable__ = ("id", "object")

    def __init__(self, target):
        if isinstance(target, int | str):
            self._id = snowflake(target)
            self._object = None
        elif isinstance(getattr(target, "id", None), int):
            self._id = target.id
            self._object = target
        else:
            raise TypeError("reference target must be an identifier or an object with an 'id'")

    @property
    def resolved(self):
        return self._object is not None

    def upgrade(self, object):
        """Return a reference to object when it matches this id, else self."""
        if object is None or object.id != self._id:
            return self
        return Ref(object)

    def __eq__(self, other):
        if not isinstance(other, Ref):
            return NotImplemented
        return (self.id, self.object) == (other.id, other.object)

    def __hash__(self):
        return hash(self.id)


class ArgValue(metaclass=IntrospectableType):
    """
    A decoded argument value tagged with its kind (an ArgKind subclass).
    """
    __introspectable__ = ("kind", "value")
    __displayable__ = ("value",)

    def __init__(self, kind, value):
        if not isinstance(kind, type) or not issubclass(kind, ArgKind):
            raise TypeError("argument value kind must be an argument kind type")
        self._kind = kind
        self._value = value

    @property
    def name(self):
        return self._kind.__typename__.removesuffix("-kind")

    def __repr__(self):
        return "%s(%r)" % (self.name, self._value)

    def __eq__(self, other):
        if not isinstance(other, ArgValue):
            return NotImplemented
        return self.kind is other.kind and self.value == other.value

    def __hash__(self):
        return hash((self.kind, self.value))

    @classmethod
    def boolean(cls, value):
        return cls(BoolKind, bool(value))

    @classmethod
    def number(cls, value):
        return cls(NumberKind, float(value))

    @classmethod
    def integer(cls, value):
        return cls(IntegerKind, int(value))

    @classmethod
    def string(cls, value):
        return cls(StringKind, str(value))

    @classmethod
    def channel(cls, target):
        return cls(ChannelKind, _ref(target))

    @classmethod
    def message(cls, target):
        return cls(MessageKind, _ref(target))

    @classmethod
    def attachment(cls, target):
        return cls(AttachmentKind, _ref(target))

    @classmethod
    def user(cls, target):
        return cls(UserKind, _ref(target))

    @classmethod
    def role(cls, target):
        return cls(RoleKind, _ref(target))

    @classmethod
    def mention(cls, id):
        return cls(MentionKind, snowflake(id))

    @classmethod
    def from_option(cls, desc, option, resolved=None):
        """
        Convert a structured leaf option into a value of desc's kind.

        Behavior
        - references are upgraded to objects found in the resolved table.
        - a string option declared as a message argument is decoded as a message id.

        Raises
        - UnexpectedArgsError: sub-command or group options (they carry no value).
        - ArgumentParseError: the option type does not fit the declared kind.
        """
        if option.nested:
            raise UnexpectedArgsError(
                f"Cannot convert {option.kind.name.lower().replace('_', '-')} '{option.name}' into an argument value",
                text=option.name,
            )

        expected = type(desc.kind)
        match option.kind:
            case OptionType.STRING if expected is MessageKind:
                value = decode(desc.kind, option.value)
            case OptionType.STRING:
                value = cls.string(option.value)
            case OptionType.BOOLEAN:
                value = cls.boolean(option.value)
            case OptionType.INTEGER if expected is NumberKind:
                value = cls.number(option.value)
            case OptionType.INTEGER:
                value = cls.integer(option.value)
            case OptionType.NUMBER:
                value = cls.number(option.value)
            case OptionType.MENTIONABLE:
                value = cls.mention(option.value)
            case OptionType.USER | OptionType.ROLE | OptionType.CHANNEL | OptionType.ATTACHMENT:
                factory = {
                    OptionType.USER: cls.user,
                    OptionType.ROLE: cls.role,
                    OptionType.CHANNEL: cls.channel,
                    OptionType.ATTACHMENT: cls.attachment,
                }[option.kind]
                ref = Ref(option.value)
                if resolved is not None:
                    ref = ref.upgrade(resolved.lookup(option.kind, ref.id))
                value = factory(ref)
            case _:
                raise ArgumentParseError(f"Unsupported option type '{option.kind.name}'", text=option.name)

        if value.kind is not expected:
            raise ArgumentParseError(
                f"Argument '{desc.name}' expects a value of type '{desc.kind}', found '{value.name}'",
                text=option.name,
            )
        return value


def _ref(target, /):
    return target if isinstance(target, Ref) else Ref(target)


class Arg(metaclass=IntrospectableType):
    __introspectable__ = ("name", "value")

    def __init__(self, name, value):
        if not isinstance(value, ArgValue):
            raise TypeError("argument 'value' must be an argument value")
        self._name = name
        self._value = value

    def __eq__(self, other):
        if not isinstance(other, Arg):
            return NotImplemented
        return (self.name, self.value) == (other.name, other.value)

    def __hash__(self):
        return hash((self.name, self.value))


class Args(metaclass=IntrospectableType):
    """
    Ordered, immutable collection of named argument values for one invocation.

    Typed accessors return the decoded payload and raise MissingArgsError when the
    name is absent, or ArgsMismatchError when it holds a value of another kind.
    """
    __introspectable__ = ("args",)

    def __init__(self, args=()):
        self._args = tuple(args)
        names = [arg.name for arg in self._args]
        if len(set(names)) != len(names):
            raise ValueError("arguments cannot contain duplicate names")

    @classmethod
    def from_pairs(cls, *pairs, **named):
        """Args.from_pairs(("a", ArgValue.boolean(True)), b=ArgValue.integer(1))."""
        return cls([Arg(name, value) for name, value in pairs] + [Arg(name, value) for name, value in named.items()])

    def __iter__(self):
        return iter(self._args)

    def __len__(self):
        return len(self._args)

    def __contains__(self, name):
        return self.get(name) is not None

    def __eq__(self, other):
        if not isinstance(other, Args):
            return NotImplemented
        return self._args == other._args

    def __hash__(self):
        return hash(self._args)

    def get(self, name):
        """Return the raw ArgValue bound to name, or None."""
        for arg in self._args:
            if arg.name == name:
                return arg.value
        return None

    def _typed(self, name, kind):
        if (value := self.get(name)) is None:
            raise MissingArgsError(f"Missing argument '{name}'", text=name)
        if value.kind is not kind:
            raise ArgsMismatchError(
                f"Argument '{name}' is of type '{value.name}', not '{kind.__typename__.removesuffix('-kind')}'",
                text=name,
            )
        return value.value

    def bool(self, name):
        return self._typed(name, BoolKind)

    def number(self, name):
        return self._typed(name, NumberKind)

    def integer(self, name):
        return self._typed(name, IntegerKind)

    def string(self, name):
        return self._typed(name, StringKind)

    def channel(self, name):
        return self._typed(name, ChannelKind)

    def message(self, name):
        return self._typed(name, MessageKind)

    def attachment(self, name):
        return self._typed(name, AttachmentKind)

    def user(self, name):
        return self._typed(name, UserKind)

    def role(self, name):
        return self._typed(name, RoleKind)

    def mention(self, name):
        return self._typed(name, MentionKind)


def parse_mention(token, /):
    """
    Recognize platform mention syntax.

    Returns (kind, id) where kind is UserKind, RoleKind or ChannelKind, or None when
    token is not a mention.
    """
    for kind, pattern in MENTIONS.items():
        if match := pattern.fullmatch(token):
            return kind, snowflake(match[1])
    return None


def _parse_id(token, /):
    try:
        return snowflake(token)
    except ValueError as error:
        raise ArgumentParseError(f"'{escape(token)}' is not a valid id: {error}", text=token) from None


def _parse_reference(kind, token, /):
    """
    Decode a channel/user/role token: mention syntax first, raw id second.

    A mention of another kind is rejected outright; when neither form parses both
    failures are reported.
    """
    name = kind.__typename__.removesuffix("-kind")
    try:
        mention = parse_mention(token)
    except ValueError as error:
        mention, reason = None, str(error)
    else:
        reason = "not a mention"
    if mention is not None:
        found, id = mention
        if found is not kind:
            raise UnexpectedArgsError(
                f"Expected a {name} mention, found a {found.__typename__.removesuffix('-kind')} mention",
                text=token,
            )
        return id

    try:
        return _parse_id(token)
    except ArgumentParseError as error:
        raise ArgumentParseError(
            f"Failed to parse '{escape(token)}' as a {name} (as mention): {reason}; (as id): {error}",
            text=token,
        ) from error


def decode(kind, token, /):
    """
    Decode one free-text token into an ArgValue of the given kind.

    Rules
    - bool: "true" / "false", case-insensitive.
    - number: a decimal or exponent float literal (also inf / nan).
    - integer: a signed 64-bit decimal integer.
    - string: the token verbatim.
    - channel / user / role: mention syntax, then raw id.
    - message / attachment: raw id.
    - mention: raw id or any mention syntax.

    Raises
    - ArgumentParseError: the token does not decode (message names the token).
    - UnexpectedArgsError: a mention of the wrong kind.
    """
    if isinstance(kind, ArgKind):
        kind = type(kind)
    name = kind.__typename__.removesuffix("-kind")

    if kind is BoolKind:
        match token.lower():
            case "true":
                return ArgValue.boolean(True)
            case "false":
                return ArgValue.boolean(False)
        raise ArgumentParseError(f"'{escape(token)}' is not a valid bool, expected 'true' or 'false'", text=token)

    if kind is NumberKind or kind is IntegerKind:
        try:
            if "_" in token or not token.isascii():
                raise ValueError(token)
            value = float(token) if kind is NumberKind else int(token, 10)
        except ValueError:
            raise ArgumentParseError(f"'{escape(token)}' is not a valid {name}", text=token) from None
        if kind is IntegerKind and not MIN_INTEGER <= value <= MAX_INTEGER:
            raise ArgumentParseError(f"'{escape(token)}' is out of range for an {name}", text=token)
        return ArgValue(kind, value)

    if kind is StringKind:
        return ArgValue.string(token)

    if kind in MENTIONS:
        return ArgValue(kind, Ref(_parse_reference(kind, token)))

    if kind is MessageKind or kind is AttachmentKind:
        return ArgValue(kind, Ref(_parse_id(token)))

    if kind is MentionKind:
        try:
            mention = parse_mention(token)
        except ValueError as error:
            raise ArgumentParseError(f"'{escape(token)}' is not a valid mention: {error}", text=token) from None
        return ArgValue.mention(mention[1] if mention is not None else _parse_id(token))

    raise TypeError("decode() argument must be an argument kind")


__all__ = (
    "MENTIONS",
    "Ref",
    "ArgValue",
    "Arg",
    "Args",
    "parse_mention",
    "decode",
)
