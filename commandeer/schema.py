"""
Commandeer argument schema: kinds, descriptors and their fluent builders.

Overview
- Kinds (closed set, immutable once declared)
  • BoolKind, NumberKind(min, max, choices), IntegerKind(min, max, choices),
    StringKind(min_length, max_length, choices), ChannelKind(types),
    MessageKind, AttachmentKind, UserKind, RoleKind, MentionKind.
  • Every kind has a display name ("bool", "number", ..., "mention") used in help
    output and fault messages.

- ArgDesc
  • {name, description, kind, required}: one declared parameter of a command.

- Builders
  • boolean(), number(), integer(), string(), channel(), message(), attachment(),
    user(), role(), mention(): one constructor per kind, each returning a builder.
  • .required() marks the argument mandatory; constraint methods depend on the kind
    (.min/.max/.choices, .min_length/.max_length/.choices, .types).
  • .build() freezes the builder into an ArgDesc (done implicitly by .option()).

Validation highlights
- Names are non-empty strings without whitespace (free-text tokens are whitespace split).
- Bounds must be numbers of the kind's type and ordered (min <= max).
- Choices are (name, value) pairs with unique, non-empty names.
- Platform-specific limits (lengths, counts) are checked on descriptor conversion.

Quick example:
    >>> from commandeer.schema import integer
    >>> integer("count", "How many").min(1).max(10).required().build()
    arg-desc(name='count', description='How many', kind=integer-kind(min=1, max=10, choices=()), required=True)
"""
from collections.abc import Iterable, Mapping

from .models import ChannelType
from .utils import *

# Largest string length the platform descriptors can carry (unsigned 16-bit).
MAX_LENGTH = 2 ** 16 - 1


def _sanitize_bound(cls, label, value, types, /):
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, types):
        raise TypeError(f"{cls.__typename__} {label!r} must be {'an integer' if types is int else 'a number'}")
    return value


def _sanitize_bounds(cls, labels, lower, upper, /):
    if lower is not None and upper is not None and lower > upper:
        raise ValueError(f"{cls.__typename__} {labels[0]!r} cannot exceed {labels[1]!r}")


def _sanitize_choices(cls, choices, types, /):
    """
    Internal: normalize choices into a tuple of (name, value) pairs.

    - mappings are accepted and read in insertion order.
    - names must be non-empty strings and unique.
    - values must match the kind's payload type (bool is never a number).
    """
    if isinstance(choices, Mapping):
        choices = choices.items()
    if not isinstance(choices, Iterable) or isinstance(choices, str):
        raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of pairs")

    pairs, names = [], set()
    for choice in choices:
        try:
            name, value = choice
        except (TypeError, ValueError):
            raise TypeError(f"{cls.__typename__} 'choices' must contain (name, value) pairs") from None
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} choice names must be strings")
        elif not name.strip():
            raise ValueError(f"{cls.__typename__} choice names cannot be empty")
        elif name in names:
            raise ValueError(f"{cls.__typename__} choice names cannot contain duplicates")
        if isinstance(value, bool) or not isinstance(value, types):
            raise TypeError(f"{cls.__typename__} choice {name!r} has a value of the wrong type")
        names.add(name)
        pairs.append((name, value))
    return tuple(pairs)


class ArgKind(metaclass=IntrospectableType):
    """
    Base of the closed set of argument kinds.

    Kinds are value objects: two kinds compare equal when they are the same variant
    with the same constraints.
    """
    __introspectable__ = ()

    @property
    def name(self):
        return type(self).__typename__.removesuffix("-kind")

    def __str__(self):
        return self.name

    def __eq__(self, other):
        if not isinstance(other, ArgKind):
            return NotImplemented
        return type(self) is type(other) and dict(self.__rich_repr__()) == dict(other.__rich_repr__())

    def __hash__(self):
        return hash((type(self), tuple(value for _, value in self.__rich_repr__())))


class BoolKind(ArgKind):
    pass


class _NumericKind(ArgKind):
    __introspectable__ = ("min", "max", "choices")
    __payload__ = int | float

    def __init__(self, min=None, max=None, choices=()):
        cls = type(self)
        self._min = _sanitize_bound(cls, "min", min, cls.__payload__)
        self._max = _sanitize_bound(cls, "max", max, cls.__payload__)
        _sanitize_bounds(cls, ("min", "max"), self._min, self._max)
        self._choices = _sanitize_choices(cls, choices, cls.__payload__)


class NumberKind(_NumericKind):
    pass


class IntegerKind(_NumericKind):
    __payload__ = int


class StringKind(ArgKind):
    __introspectable__ = ("min_length", "max_length", "choices")

    def __init__(self, min_length=None, max_length=None, choices=()):
        cls = type(self)
        self._min_length = _sanitize_bound(cls, "min_length", min_length, int)
        self._max_length = _sanitize_bound(cls, "max_length", max_length, int)
        for label, length in (("min_length", self._min_length), ("max_length", self._max_length)):
            if length is not None and not 0 <= length <= MAX_LENGTH:
                raise ValueError(f"{cls.__typename__} {label!r} must be between 0 and {MAX_LENGTH}")
        _sanitize_bounds(cls, ("min_length", "max_length"), self._min_length, self._max_length)
        self._choices = _sanitize_choices(cls, choices, str)


class ChannelKind(ArgKind):
    __introspectable__ = ("types",)

    def __init__(self, types=()):
        if not isinstance(types, Iterable) or isinstance(types, str):
            raise TypeError(f"{type(self).__typename__} 'types' must be an iterable of channel types")
        # Deduplicated, declaration order kept.
        self._types = tuple(dict.fromkeys(ChannelType(kind) for kind in types))


class MessageKind(ArgKind):
    pass


class AttachmentKind(ArgKind):
    pass


class UserKind(ArgKind):
    pass


class RoleKind(ArgKind):
    pass


class MentionKind(ArgKind):
    pass


class ArgDesc(metaclass=IntrospectableType):
    """
    One declared parameter: name, description, kind and whether it is mandatory.
    """
    __introspectable__ = ("name", "description", "kind", "required")

    def __init__(self, name, description, kind, required=False):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif not name or any(character.isspace() for character in name):
            raise ValueError(f"{type(self).__typename__} 'name' must be a non-empty word")
        if not isinstance(description, str):
            raise TypeError(f"{type(self).__typename__} 'description' must be a string")
        if not isinstance(kind, ArgKind):
            raise TypeError(f"{type(self).__typename__} 'kind' must be an argument kind")
        self._name = name
        self._description = description
        self._kind = kind
        self._required = bool(required)

    def usage(self):
        """Return the help token for this argument: "<name>" if required, "[name]" otherwise."""
        return ("<%s>" if self.required else "[%s]") % self.name


class ArgDescBuilder(metaclass=IntrospectableType):
    """
    Mutable staging area for an ArgDesc.

    Constraint methods update the staged kind arguments and return the builder so
    calls can be chained; build() produces the immutable descriptor.
    """
    __introspectable__ = ("name", "description")
    __kind__ = ArgKind

    def __init__(self, name, description):
        self._name = name
        self._description = description
        self._required = False
        self._constraints = {}

    def required(self):
        self._required = True
        return self

    def build(self):
        return ArgDesc(self._name, self._description, self.__kind__(**self._constraints), self._required)


class _ChoicesBuilder(ArgDescBuilder):
    def choices(self, choices):
        self._constraints["choices"] = choices
        return self


class NumericOptionBuilder(_ChoicesBuilder):
    __kind__ = NumberKind

    def min(self, value):
        self._constraints["min"] = value
        return self

    def max(self, value):
        self._constraints["max"] = value
        return self


class IntegerOptionBuilder(NumericOptionBuilder):
    __kind__ = IntegerKind


class StringOptionBuilder(_ChoicesBuilder):
    __kind__ = StringKind

    def min_length(self, value):
        self._constraints["min_length"] = value
        return self

    def max_length(self, value):
        self._constraints["max_length"] = value
        return self


class ChannelOptionBuilder(ArgDescBuilder):
    __kind__ = ChannelKind

    def types(self, *types):
        self._constraints["types"] = types
        return self


def boolean(name, description):
    return _builder(BoolKind, name, description)


def number(name, description):
    return NumericOptionBuilder(name, description)


def integer(name, description):
    return IntegerOptionBuilder(name, description)


def string(name, description):
    return StringOptionBuilder(name, description)


def channel(name, description):
    return ChannelOptionBuilder(name, description)


def message(name, description):
    return _builder(MessageKind, name, description)


def attachment(name, description):
    return _builder(AttachmentKind, name, description)


def user(name, description):
    return _builder(UserKind, name, description)


def role(name, description):
    return _builder(RoleKind, name, description)


def mention(name, description):
    return _builder(MentionKind, name, description)


def _builder(kind, name, description, /):
    builder = ArgDescBuilder(name, description)
    builder.__kind__ = kind
    return builder


__all__ = (
    "ArgKind",
    "BoolKind",
    "NumberKind",
    "IntegerKind",
    "StringKind",
    "ChannelKind",
    "MessageKind",
    "AttachmentKind",
    "UserKind",
    "RoleKind",
    "MentionKind",
    "ArgDesc",
    "ArgDescBuilder",
    "NumericOptionBuilder",
    "IntegerOptionBuilder",
    "StringOptionBuilder",
    "ChannelOptionBuilder",
    "boolean",
    "number",
    "integer",
    "string",
    "channel",
    "message",
    "attachment",
    "user",
    "role",
    "mention",
)
