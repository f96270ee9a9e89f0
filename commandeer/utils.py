"""
Commandeer utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the schema, tree, values and models layers.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the higher-level layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callables for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) as a frozen snapshot
    (tuple / MappingProxyType / frozenset) so build-once structures stay immutable.

- IntrospectableType
  • Metaclass deriving __typename__, mirrored properties for __introspectable__ names,
    and stable __repr__/__rich_repr__ implementations.

- nicelist(items) / escape(text)
  • Human-friendly enumerations and chat-markup escaping for fault messages.

Stability and contract
- Names not in __all__ are internal and may change without notice.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> nicelist(["a", "b", "c"])
    "'a', 'b' or 'c'"
"""
import builtins
import functools
import operator
import re
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value, but the API needs a way
    to distinguish “not provided” from “provided as None”. A single instance,
    Unset, is exposed for use as the default in internal parameters.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when Unset appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        """
        Ensure a single instance for this sentinel type.
        """
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        """
        Disallow subclassing to preserve sentinel semantics.
        """
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Resolve an internal Unset sentinel to a concrete default.

    Falsey values like None, 0, "" or [] are preserved as-is; they are not
    treated as “unset”.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (updated in place)
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)
            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def freeze(object, /):
    """
    Return a shallow, read-only snapshot of a container.

    Freezing rules
    - Sequence (non-string) → tuple
    - Mapping → MappingProxyType over a private dict copy
    - Set → frozenset
    - Other types → returned as-is
    """
    if isinstance(object, (tuple, MappingProxyType, frozenset)):
        return object
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(dict(object))
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads "_{name}" on the instance and returns a frozen
    snapshot for container types (see freeze()).
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return freeze(getattr(self, "_" + name))
    return property(getter)


class IntrospectableType(type):
    """
    Metaclass that turns plain classes into introspectable, read-only records.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens),
      used in messages (“string-option-builder 'choices' ...”).
    - Expose every name listed in __introspectable__ as a read-only property
      backed by the "_{name}" attribute (see mirror()).
    - Provide stable __repr__/__rich_repr__ implementations driven by
      __displayable__ (or __introspectable__ when unset).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        if "__repr__" not in namespace:
            @rename("__repr__")
            def __repr__(self):
                return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
            self.__repr__ = __repr__

        if "__rich_repr__" not in namespace:
            @rename("__rich_repr__")
            def __rich_repr__(self):
                for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                    yield name, getattr(self, name)
            self.__rich_repr__ = __rich_repr__

        return self


def nicelist(items, /, *, conjunction="or"):
    """
    Render an iterable as a quoted, human-friendly enumeration.

    Examples
    - nicelist(["a"])             -> "'a'"
    - nicelist(["a", "b", "c"])   -> "'a', 'b' or 'c'"
    """
    quoted = ["'%s'" % item for item in items]
    if len(quoted) < 2:
        return "".join(quoted)
    return "%s %s %s" % (", ".join(quoted[:-1]), conjunction, quoted[-1])


# Characters with a markup meaning in chat messages.
MARKUP_CHARACTERS = frozenset("\\*_~`|>")


def escape(text, /):
    """
    Escape chat markup characters so offending input is echoed back verbatim.
    """
    return "".join("\\" + character if character in MARKUP_CHARACTERS else character for character in text)


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "freeze",
    "mirror",
    "IntrospectableType",
    "nicelist",
    "escape",
)
