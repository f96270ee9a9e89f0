"""
Commandeer command tree: declaration, validation, help and registry.

Overview
- Values (immutable once built)
  • Function: a handler coroutine function tagged with its invocation kind.
  • CommandFunction: {name, description, functions, options}; a node that maps to handlers.
  • CommandGroup: {name, description, subs}; a named bundle of subcommands.
  • CommandOption: tagged union over Arg(ArgDesc), Sub(CommandFunction), Group(CommandGroup).
  • BaseCommand: root CommandFunction plus help text, DM flag and member permissions.
  • Commands: registry name → BaseCommand, shared read-only after startup.

- Builders (mutable staging, finalized by build())
  • command(name, description) → BaseCommandBuilder
  • sub(name, description) → CommandFunctionBuilder
  • group(name, description) → CommandGroupBuilder
  • CommandsBuilder: bind() base commands, then build() the registry.

Handlers
- Coroutine functions with the signature handler(ctx, request) returning a Response.
- attach() infers the invocation kind from the annotation of the request parameter
  (ClassicRequest, SlashRequest, MessageRequest or UserRequest); attach_classic(),
  attach_slash(), attach_message() and attach_user() bind unannotated handlers.

Validation (collects every violation, see validate())
- every handler kind of a subcommand must exist on its nearest ancestor command
  (groups are transparent).
- each distinct non-classic handler kind must convert into a platform descriptor.

Quick example:
    >>> from commandeer.tree import command, sub
    >>> from commandeer.schema import boolean
    >>> async def pong(ctx, request: ClassicRequest):
    ...     return Response.create_message("pong")
    >>> ping = command("ping", "Pong!").attach(pong).option(boolean("loud", "Shout")).dm().build()
    >>> ping.validate()
"""
import inspect
import itertools
import typing
from types import MappingProxyType

from . import descriptors
from .faults import *
from .models import FunctionKind, Permissions, Request
from .schema import ArgDesc, ArgDescBuilder
from .utils import *

# Column width of names in generated help.
HELP_COLUMN = 16


def _sanitize_name(cls, name, /):
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name or any(character.isspace() for character in name):
        raise ValueError(f"{cls.__typename__} 'name' must be a non-empty word")
    return name


def _sanitize_description(cls, description, /):
    if not isinstance(description, str):
        raise TypeError(f"{cls.__typename__} 'description' must be a string")
    return description


def infer_kind(handler, /):
    """
    Infer the invocation kind of a handler from its request parameter annotation.

    Raises
    - TypeError: the handler is not a coroutine function taking (ctx, request), or its
      request parameter is not annotated with a request type.
    """
    if not inspect.iscoroutinefunction(handler):
        raise TypeError("handler must be a coroutine function")
    parameters = list(inspect.signature(handler).parameters.values())
    if len(parameters) != 2:
        raise TypeError("handler must accept exactly two parameters: (ctx, request)")
    annotation = typing.get_type_hints(handler).get(parameters[1].name)
    if not isinstance(annotation, type) or not issubclass(annotation, Request) or annotation.kind is None:
        raise TypeError(
            f"cannot infer the invocation kind of handler {handler.__qualname__!r}: annotate its request "
            f"parameter or use attach_classic(), attach_slash(), attach_message() or attach_user()"
        )
    return annotation.kind


class Function(metaclass=IntrospectableType):
    """
    A handler bound to one invocation kind.
    """
    __introspectable__ = ("kind", "handler")

    def __init__(self, kind, handler):
        if not isinstance(kind, FunctionKind):
            raise TypeError(f"{type(self).__typename__} 'kind' must be a function kind")
        if not inspect.iscoroutinefunction(handler):
            raise TypeError(f"{type(self).__typename__} 'handler' must be a coroutine function")
        self._kind = kind
        self._handler = handler

    def __call__(self, ctx, request):
        return self._handler(ctx, request)


class CommandOption(metaclass=IntrospectableType):
    """
    Tagged union of the children a command can declare.

    - arg: an ArgDesc (a parameter).
    - sub: a CommandFunction (a subcommand).
    - group: a CommandGroup (a bundle of subcommands).
    Exactly one of the three accessors returns a value, the others return None.
    """
    __introspectable__ = ("value",)

    def __init__(self, value):
        if not isinstance(value, ArgDesc | CommandFunction | CommandGroup):
            raise TypeError(f"{type(self).__typename__} must wrap an argument, a subcommand or a group")
        self._value = value

    @classmethod
    def of(cls, option):
        """
        Convert any supported declaration (built value, builder or option) into an option.
        """
        if isinstance(option, CommandOption):
            return option
        if isinstance(option, ArgDescBuilder | CommandFunctionBuilder | CommandGroupBuilder):
            option = option.build()
        return cls(option)

    @property
    def name(self):
        return self._value.name

    @property
    def arg(self):
        return self._value if isinstance(self._value, ArgDesc) else None

    @property
    def sub(self):
        return self._value if isinstance(self._value, CommandFunction) else None

    @property
    def group(self):
        return self._value if isinstance(self._value, CommandGroup) else None

    def generate_help(self, indent=0):
        if (arg := self.arg) is not None:
            return "%s %s" % (arg.usage().ljust(HELP_COLUMN), arg.description)
        return self._value.generate_help(indent)


class CommandFunction(metaclass=IntrospectableType):
    """
    A command node that maps to handlers.

    Notes
    - an empty description is stored as "-".
    - functions keep attachment order; options keep declaration order.
    """
    __introspectable__ = ("name", "description", "functions", "options")
    __displayable__ = ("name", "description", "kinds", "options")

    def __init__(self, name, description, functions=(), options=()):
        self._name = _sanitize_name(type(self), name)
        self._description = _sanitize_description(type(self), description) or "-"
        self._functions = tuple(functions)
        self._options = tuple(map(CommandOption.of, options))

    @property
    def kinds(self):
        """Distinct handler kinds, in attachment order."""
        return tuple(dict.fromkeys(function.kind for function in self._functions))

    def has(self, kind):
        return any(function.kind is kind for function in self._functions)

    def functions_of(self, kind):
        return tuple(function for function in self._functions if function.kind is kind)

    def args(self):
        """Declared parameters (ArgDesc), in declaration order."""
        return tuple(option.arg for option in self._options if option.arg is not None)

    def child(self, name):
        """Return the subcommand or group option with this name, or None."""
        for option in self._options:
            if option.arg is None and option.name == name:
                return option
        return None

    def generate_help(self, indent=0):
        lines = ["%s %s" % (self.name.ljust(HELP_COLUMN), self.description)]
        for option in self._options:
            lines.append("\t" * (indent + 1) + option.generate_help(indent + 1))
        return "\n".join(lines)


class CommandGroup(metaclass=IntrospectableType):
    __introspectable__ = ("name", "description", "subs")

    def __init__(self, name, description, subs=()):
        self._name = _sanitize_name(type(self), name)
        self._description = _sanitize_description(type(self), description)
        self._subs = tuple(sub.build() if isinstance(sub, CommandFunctionBuilder) else sub for sub in subs)
        if not all(isinstance(sub, CommandFunction) for sub in self._subs):
            raise TypeError(f"{type(self).__typename__} can only contain subcommands")

    @property
    def options(self):
        """The subcommands wrapped as options."""
        return tuple(map(CommandOption, self._subs))

    def child(self, name):
        for sub in self._subs:
            if sub.name == name:
                return CommandOption(sub)
        return None

    def generate_help(self, indent=0):
        lines = ["%s %s" % (self.name.ljust(HELP_COLUMN), self.description)]
        for sub in self._subs:
            lines.append("\t" * (indent + 1) + sub.generate_help(indent + 1))
        return "\n".join(lines)


def _missing_functions(base, node, /):
    """
    Walk node's descendants and report subcommands supporting kinds that their
    nearest ancestor command (base) does not.
    """
    for option in node.options:
        if option.arg is not None:
            continue
        for sub in (option.group.subs if option.group is not None else (option.sub,)):
            for kind in sub.kinds:
                if not base.has(kind):
                    yield MissingFunctionsError(
                        f"Base command '{base.name}' does not map to a function of a kind '{kind}', "
                        f"but the subcommand '{sub.name}' does",
                        text=sub.name,
                    )
            yield from _missing_functions(sub, sub)


class BaseCommand(metaclass=IntrospectableType):
    """
    A top-level command: the root CommandFunction plus metadata.

    Metadata
    - help: additional usage text shown by generate_help().
    - dm: whether the command may be used in direct messages.
    - permissions: required member permissions (None: anyone; empty or containing
      ADMINISTRATOR: administrators only; otherwise every contained permission).
    """
    __introspectable__ = ("command", "help", "dm", "permissions")

    def __init__(self, command, help="", dm=False, permissions=None):
        if not isinstance(command, CommandFunction):
            raise TypeError(f"{type(self).__typename__} 'command' must be a command function")
        if not isinstance(help, str):
            raise TypeError(f"{type(self).__typename__} 'help' must be a string")
        if permissions is not None and not isinstance(permissions, Permissions):
            raise TypeError(f"{type(self).__typename__} 'permissions' must be permissions")
        self._command = command
        self._help = help
        self._dm = bool(dm)
        self._permissions = permissions

    @property
    def name(self):
        return self._command.name

    @property
    def description(self):
        return self._command.description

    def descriptors(self):
        """
        Convert into platform descriptors, one per distinct non-classic handler kind.

        Raises
        - DescriptorError: on the first kind that cannot be converted.
        """
        return [
            descriptors.convert(self, kind)
            for kind in self._command.kinds
            if kind is not FunctionKind.CLASSIC
        ]

    def violations(self):
        """Every validation fault of this command (empty when valid)."""
        faults = list(_missing_functions(self._command, self._command))
        for kind in self._command.kinds:
            if kind is FunctionKind.CLASSIC:
                continue
            try:
                descriptors.convert(self, kind)
            except DescriptorError as error:
                faults.append(error)
        return faults

    def validate(self):
        """
        Check the whole command and report every violation at once.

        Raises
        - ValidationExit: grouping every MissingFunctionsError and DescriptorError found.
        """
        if faults := self.violations():
            raise ValidationExit(faults)

    def generate_help(self):
        """
        Render the usage block of this command (a fenced yaml block).

        Layout
        - the command tree, with <required> and [optional] arguments, tab-indented.
        - the additional help text, when set.
        - required permissions, DM availability and the supported invocation types.
        """
        match self._permissions:
            case None:
                permissions = "None"
            case permissions if not permissions or Permissions.ADMINISTRATOR in permissions:
                permissions = "Administrator"
            case permissions:
                permissions = ", ".join(flag.name for flag in permissions)

        types = ", ".join(str(kind) for kind in FunctionKind if self._command.has(kind))
        return "\n".join([
            "```yaml",
            self._command.generate_help(0),
            *(["", self._help] if self._help else [""]),
            "Permissions required: %s" % permissions,
            "Enabled in DMs: %s" % ("Yes" if self._dm else "No"),
            "Types: %s" % types,
            "```",
        ])


class _FunctionsBuilder:
    """
    Shared staging of handlers and options for command-like builders.
    """

    def __init__(self, name, description):
        self._name = name
        self._description = description
        self._functions = []
        self._options = []

    def _attach(self, kind, handler):
        self._functions.append(Function(kind, handler))
        return self

    def attach(self, handler):
        """Attach a handler, inferring its invocation kind (see infer_kind())."""
        return self._attach(infer_kind(handler), handler)

    def attach_classic(self, handler):
        return self._attach(FunctionKind.CLASSIC, handler)

    def attach_slash(self, handler):
        return self._attach(FunctionKind.SLASH, handler)

    def attach_message(self, handler):
        return self._attach(FunctionKind.MESSAGE, handler)

    def attach_user(self, handler):
        return self._attach(FunctionKind.USER, handler)

    def option(self, option):
        """
        Append an argument, a subcommand or a group (builders are finalized here).

        Raises
        - ValueError: another option of this command already uses the name.
        """
        option = CommandOption.of(option)
        if any(existing.name == option.name for existing in self._options):
            raise ValueError(f"command {self._name!r} already has an option named {option.name!r}")
        self._options.append(option)
        return self

    def _build(self):
        return CommandFunction(self._name, self._description, self._functions, self._options)


class CommandFunctionBuilder(_FunctionsBuilder):
    def build(self):
        return self._build()


class CommandGroupBuilder:
    def __init__(self, name, description):
        self._name = name
        self._description = description
        self._subs = []

    def option(self, sub):
        """
        Add a subcommand to this group.

        Raises
        - ValueError: another subcommand of this group already uses the name.
        """
        if isinstance(sub, CommandFunctionBuilder):
            sub = sub.build()
        if not isinstance(sub, CommandFunction):
            raise TypeError("command groups can only contain subcommands")
        if any(existing.name == sub.name for existing in self._subs):
            raise ValueError(f"group {self._name!r} already has a subcommand named {sub.name!r}")
        self._subs.append(sub)
        return self

    def subs(self, subs):
        for sub in subs:
            self.option(sub)
        return self

    def build(self):
        return CommandGroup(self._name, self._description, self._subs)


class BaseCommandBuilder(_FunctionsBuilder):
    def __init__(self, name, description):
        super().__init__(name, description)
        self._help = ""
        self._dm = False
        self._permissions = None

    def help(self, text):
        """Additional help shown in the usage block (not the full usage)."""
        self._help = text
        return self

    def dm(self):
        """Allow the command in direct messages."""
        self._dm = True
        return self

    def permissions(self, permissions):
        self._permissions = Permissions(permissions)
        return self

    def validate(self):
        self.build().validate()

    def build(self):
        return BaseCommand(self._build(), self._help, self._dm, self._permissions)


def command(name, description):
    return BaseCommandBuilder(name, description)


def sub(name, description):
    return CommandFunctionBuilder(name, description)


def group(name, description):
    return CommandGroupBuilder(name, description)


class Commands(metaclass=IntrospectableType):
    """
    Registry of base commands by name, frozen at startup.
    """
    __introspectable__ = ("commands",)

    def __init__(self, commands=()):
        self._commands = {}
        for command in commands:
            if command.name in self._commands:
                raise ValueError(f"command {command.name!r} is already bound")
            self._commands[command.name] = command
        self._commands = MappingProxyType(self._commands)

    def get(self, name):
        return self._commands.get(name)

    def __getitem__(self, name):
        return self._commands[name]

    def __contains__(self, name):
        return name in self._commands

    def __iter__(self):
        return iter(self._commands.values())

    def __len__(self):
        return len(self._commands)

    def validate(self):
        """
        Validate every command, reporting all violations of all commands together.

        Raises
        - ValidationExit
        """
        if faults := list(itertools.chain.from_iterable(command.violations() for command in self)):
            raise ValidationExit(faults)

    def descriptors(self):
        """All platform descriptors of all commands, in registration order."""
        return [descriptor for command in self for descriptor in command.descriptors()]


class CommandsBuilder:
    """
    Staging registry: bind() base commands (or their builders), then build().
    """

    def __init__(self):
        self._commands = {}

    def bind(self, command):
        """
        Raises
        - ValueError: a command with the same name is already bound.
        """
        if isinstance(command, BaseCommandBuilder):
            command = command.build()
        if not isinstance(command, BaseCommand):
            raise TypeError("only base commands can be bound")
        if command.name in self._commands:
            raise ValueError(f"command {command.name!r} is already bound")
        self._commands[command.name] = command
        return self

    def validate(self):
        self.build().validate()

    def build(self):
        return Commands(self._commands.values())


__all__ = (
    "infer_kind",
    "Function",
    "CommandOption",
    "CommandFunction",
    "CommandGroup",
    "BaseCommand",
    "CommandFunctionBuilder",
    "CommandGroupBuilder",
    "BaseCommandBuilder",
    "command",
    "sub",
    "group",
    "Commands",
    "CommandsBuilder",
)
