"""
Commandeer execution engine and dispatcher.

execute(ctx, functions, request)
- runs every handler of a resolved command concurrently (one asyncio task each),
  handing each its own shallow copy of the context and the request;
- waits for all of them and records outcomes in completion order;
- aborted (cancelled) handlers are logged and left out;
- when any handler failed, the first failure is raised and the others are logged;
- otherwise the response of the last handler to complete wins.

Dispatcher
- classic(message) / interaction(interaction): resolve (see router), check the
  optional access guard, execute and return the single Response, or raise the fault.
- Delivery stays with the caller; deliver() maps a Response onto reply/clear actions.

Handlers are not timed out or cancelled by the engine.
"""
import asyncio
import copy
import inspect
import logging

from .config import Config
from .faults import *
from .models import Response, ResponseKind
from .router import route_classic, route_interaction
from .utils import *

logger = logging.getLogger(__name__)


class Context(metaclass=IntrospectableType):
    """
    Shared services handed to handlers: the command registry, the configuration and
    host state (clients, caches, ...). Handlers receive shallow copies.
    """
    __introspectable__ = ("commands", "config")
    __displayable__ = ("config",)

    def __init__(self, commands, config=None, state=None):
        self._commands = commands
        self._config = config if config is not None else Config()
        self._state = state if state is not None else {}

    @property
    def state(self):
        # Shared and mutable, unlike the mirrored fields.
        return self._state

    def classic_prefix(self, guild_id=None):
        return self._config.classic_prefix(guild_id)


def _outcome(task, /):
    if task.cancelled():
        return None
    if (error := task.exception()) is not None:
        return error
    if not isinstance(result := task.result(), Response):
        return ExecutionError(
            f"Handler '{task.get_name()}' returned {type(result).__name__!r} instead of a response",
            text=task.get_name(),
        )
    return result


async def execute(ctx, functions, request, /):
    """
    Run every handler concurrently and reduce their outcomes to one Response.

    Raises
    - the first handler error, in completion order.
    - ExecutionError: no handler produced a result.
    """
    order = []
    tasks = []
    for function in functions:
        handler = getattr(function, "handler", function)
        task = asyncio.create_task(
            function(copy.copy(ctx), copy.copy(request)),
            name=getattr(handler, "__qualname__", repr(handler)),
        )
        task.add_done_callback(order.append)
        tasks.append(task)

    if tasks:
        try:
            await asyncio.wait(tasks)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise

    errors, responses = [], []
    for task in order:
        match _outcome(task):
            case None:
                logger.error("handler %r was aborted", task.get_name())
            case Response() as response:
                responses.append(response)
            case error:
                errors.append(error)

    if errors:
        first, *others = errors
        for error in others:
            logger.error("suppressed handler error: %s", describe(error), exc_info=error)
        raise first
    if not responses:
        raise ExecutionError("No results from command handlers")
    return responses[-1]


class Dispatcher(metaclass=IntrospectableType):
    """
    Entry point for inbound invocations.

    States: received → resolved → dispatched → reduced → delivered | cleared | failed.
    The guard, when given, is called with the resolved request (plain or coroutine
    function); a falsy result raises AccessDeniedError.
    """
    __introspectable__ = ("context", "guard")
    __displayable__ = ("context",)

    def __init__(self, commands, config=None, *, guard=None, state=None):
        if guard is not None and not callable(guard):
            raise TypeError(f"{type(self).__typename__} 'guard' must be callable")
        self._context = Context(commands, config, state)
        self._guard = guard

    async def _authorize(self, request):
        if self._guard is None:
            return
        allowed = self._guard(request)
        if inspect.isawaitable(allowed):
            allowed = await allowed
        if not allowed:
            raise AccessDeniedError(
                f"Access to command '{request.command.name}' was denied",
                text=request.command.name,
            )

    async def _dispatch(self, route):
        request = route.request
        logger.debug("dispatching %r to %d handler(s)", request.command.name, len(route.functions))
        await self._authorize(request)
        try:
            response = await execute(self._context, route.functions, request)
        except Exception as error:
            logger.debug("command %r failed: %s", request.command.name, describe(error))
            raise
        logger.debug("command %r reduced to %s", request.command.name, response.kind.value)
        return response

    async def classic(self, message):
        """
        Resolve and run a free-text message.

        Raises NotPrefixedError for messages that are not commands; callers usually
        ignore it.
        """
        route = route_classic(
            self._context.commands,
            message,
            self._context.classic_prefix(message.guild_id),
            self._context.config.aliases(message.guild_id),
        )
        return await self._dispatch(route)

    async def interaction(self, interaction):
        """Resolve and run a structured interaction."""
        return await self._dispatch(route_interaction(self._context.commands, interaction))


async def deliver(response, /, *, reply, clear):
    """
    Apply a Response through the delivery collaborator.

    - create_message(text): await reply(text).
    - clear: await clear() (drop the deferred acknowledgement or placeholder).
    - none: no visible action, neither collaborator is called.

    Returns "delivered", "cleared" or "none".
    """
    match response.kind:
        case ResponseKind.CREATE_MESSAGE:
            await reply(response.text)
            return "delivered"
        case ResponseKind.CLEAR:
            await clear()
            return "cleared"
    return "none"


__all__ = (
    "Context",
    "execute",
    "Dispatcher",
    "deliver",
)
