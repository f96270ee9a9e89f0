"""
Commandeer router: resolve an invocation to a leaf command, its handlers and Args.

Free-text path (route_classic)
1. unprefix the content with the configured prefix (NotPrefixedError otherwise).
2. expand an alias in the first word, once.
3. look up the base command by name (NotFoundError).
4. descend through subcommands and groups while the next word names a child.
5. bind arguments from the remaining text (see bind_classic()).

Structured path (route_interaction)
- chat-input: unwind the nested subcommand/group options (UnknownSubcommandError),
  then bind the leaf options against the declared arguments (see bind_slash()).
- message / user (context menu): bind the target to the root command's first
  argument of the matching kind.

Both paths reject a group as the final node (ExpectedSubcommandError) and a leaf
without handlers of the invocation kind (MissingHandlersError).
"""
import logging

from .faults import *
from .models import ClassicRequest, CommandType, FunctionKind, MessageRequest, SlashRequest, UserRequest
from .parser import ensure_rest_is_empty, maybe_quoted_arg, split_once_whitespace, unprefix_with
from .schema import AttachmentKind, MessageKind, UserKind
from .tree import CommandGroup
from .values import Arg, Args, ArgValue, Ref, decode
from .utils import *

logger = logging.getLogger(__name__)


class Route(metaclass=IntrospectableType):
    """A resolved invocation: the request to hand out and the handlers to run."""
    __introspectable__ = ("request", "functions")

    def __init__(self, request, functions):
        self._request = request
        self._functions = tuple(functions)


def _lookup(commands, name, /):
    if (base := commands.get(name)) is None:
        raise NotFoundError(f"Command '{name}' does not exist", text=name)
    return base


def _leaf(node, kind, /):
    """
    Ensure node is a command with handlers of kind, returning those handlers.
    """
    if isinstance(node, CommandGroup):
        raise ExpectedSubcommandError(f"Expected a subcommand, found group '{node.name}'", text=node.name)
    if not (functions := node.functions_of(kind)):
        raise MissingHandlersError(
            f"No {str(kind).lower()} handlers found for command '{node.name}'",
            text=node.name,
        )
    return functions


def expand_alias(text, aliases, /):
    """
    Replace the first word of text with its alias command text, if it is an alias.
    Expansion is not recursive.
    """
    name, rest = split_once_whitespace(text)
    if (command := aliases.get(name)) is None:
        return text
    logger.debug("expanding alias %r to %r", name, command)
    return command if rest is None else "%s %s" % (command, rest)


def descend(node, rest, /):
    """
    Walk down from node while the next word names a subcommand or group.

    Returns (node, rest): the deepest node found and the text left after its name.
    """
    while rest is not None:
        name, remainder = split_once_whitespace(rest.lstrip())
        if (child := node.child(name)) is None:
            break
        node = child.sub if child.sub is not None else child.group
        rest = remainder
    return node, rest


def bind_classic(node, message, rest, /):
    """
    Bind a command's arguments from free text.

    Rules
    - arguments are read in declaration order, one token each (see maybe_quoted_arg()).
    - a message argument takes the replied-to message, when there is one.
    - an attachment argument takes the next uploaded attachment, when there is one.
    - a missing required argument raises MissingArgsError naming it and its kind;
      optional arguments are bound only while text remains.
    - leftover text raises UnexpectedArgsError.
    """
    parsed = []
    uploads = iter(message.attachments)
    for desc in node.args():
        if type(desc.kind) is MessageKind and message.referenced_message is not None:
            parsed.append(Arg(desc.name, ArgValue.message(message.referenced_message)))
            continue
        if type(desc.kind) is AttachmentKind and (upload := next(uploads, None)) is not None:
            parsed.append(Arg(desc.name, ArgValue.attachment(upload)))
            continue

        if rest is None or not rest.strip():
            if desc.required:
                raise MissingArgsError(
                    f"Expected a required argument '{desc.name}' of type '{desc.kind}'",
                    text=desc.name,
                )
            break

        token, rest = maybe_quoted_arg(rest)
        try:
            value = decode(desc.kind, token)
        except CommandException as error:
            raise error.__replace__(hint=f"argument '{desc.name}' expects a value of type '{desc.kind}'") from None
        parsed.append(Arg(desc.name, value))

    ensure_rest_is_empty(rest)
    return Args(parsed)


def route_classic(commands, message, prefix, aliases=None, /):
    """
    Resolve a free-text message into a Route.

    Raises
    - NotPrefixedError: the message is not a command at all.
    - NotFoundError, ExpectedSubcommandError, MissingHandlersError: routing failures.
    - MissingArgsError, UnexpectedArgsError (and subclasses): argument failures.
    """
    if (unprefixed := unprefix_with([prefix], message.content)) is None:
        raise NotPrefixedError(f"Message is not prefixed with '{prefix}'", text=message.content)
    _, text = unprefixed
    if aliases:
        text = expand_alias(text, aliases)

    name, rest = split_once_whitespace(text)
    base = _lookup(commands, name)
    node, rest = descend(base.command, rest)
    functions = _leaf(node, FunctionKind.CLASSIC)

    logger.debug("resolved classic command %r to %r by user %d", name, node.name, message.author.id)
    return Route(ClassicRequest(base, message, bind_classic(node, message, rest)), functions)


def unwind(node, options, /):
    """
    Follow nested subcommand/group options from node down to the leaf.

    Options are consumed from the end; a level holds either one nested option or
    leaf options. Returns (leaf, options) with the leaf options in payload order.
    """
    pending, collected = list(options), []
    while pending:
        option = pending.pop()
        if not option.nested:
            collected.append(option)
            continue
        if (child := node.child(option.name)) is None:
            raise UnknownSubcommandError(
                f"Subcommand or group '{option.name}' does not exist in '{node.name}'",
                text=option.name,
            )
        node = child.sub if child.sub is not None else child.group
        pending = list(option.value)
    collected.reverse()
    return node, collected


def bind_slash(node, options, resolved=None, /):
    """
    Bind leaf options against node's declared arguments.

    Raises
    - UnexpectedArgsError: an option that is not declared on the command.
    - ArgumentParseError: an option whose type does not fit the declaration.
    - MissingArgsError: a required argument with no option.
    """
    declared = {desc.name: desc for desc in node.args()}
    parsed = []
    for option in options:
        if (desc := declared.get(option.name)) is None:
            raise UnexpectedArgsError(
                f"Unexpected argument '{option.name}' for command '{node.name}'",
                text=option.name,
            )
        parsed.append(Arg(desc.name, ArgValue.from_option(desc, option, resolved)))

    names = {arg.name for arg in parsed}
    for desc in declared.values():
        if desc.required and desc.name not in names:
            raise MissingArgsError(
                f"Expected a required argument '{desc.name}' of type '{desc.kind}'",
                text=desc.name,
            )
    return Args(parsed)


def bind_target(node, kind, target, /):
    """
    Bind a context-menu target to node's first argument of kind (MessageKind or
    UserKind). Returns empty Args when no such argument is declared.
    """
    for desc in node.args():
        if type(desc.kind) is kind:
            return Args([Arg(desc.name, ArgValue(kind, target))])
    return Args()


def route_interaction(commands, interaction, /):
    """
    Resolve a structured interaction into a Route.

    Raises
    - NotFoundError, UnknownSubcommandError, ExpectedSubcommandError,
      MissingHandlersError: routing failures.
    - MissingArgsError, UnexpectedArgsError (and subclasses): argument failures.
    """
    data = interaction.data
    base = _lookup(commands, data.name)

    if data.kind is CommandType.CHAT_INPUT:
        node, options = unwind(base.command, data.options)
        functions = _leaf(node, FunctionKind.SLASH)
        logger.debug("resolved slash command %r to %r", data.name, node.name)
        return Route(SlashRequest(base, interaction, data, bind_slash(node, options, data.resolved)), functions)

    if data.target_id is None:
        raise MissingArgsError(f"Command '{data.name}' was invoked without a target", text=data.name)

    if data.kind is CommandType.MESSAGE:
        kind, request, table = FunctionKind.MESSAGE, MessageRequest, data.resolved.messages
        argument = MessageKind
    else:
        kind, request, table = FunctionKind.USER, UserRequest, data.resolved.users
        argument = UserKind
    functions = _leaf(base.command, kind)
    target = table.get(data.target_id)
    target = Ref(target if target is not None else data.target_id)

    logger.debug("resolved %s command %r on target %d", str(kind).lower(), data.name, target.id)
    return Route(request(base, interaction, data, bind_target(base.command, argument, target), target), functions)


__all__ = (
    "Route",
    "expand_alias",
    "descend",
    "bind_classic",
    "route_classic",
    "unwind",
    "bind_slash",
    "bind_target",
    "route_interaction",
)
