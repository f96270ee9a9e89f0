"""
Commandeer faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault the engine can
  raise. Codes are grouped by domain to keep copy consistent and make logs/searches
  predictable.
- CommandException: base type carrying a message plus read-only options (title,
  code, hint, offending text, ...) that knows how to render itself through rich.
- ValidationExit: exception group aggregating every startup validation fault.
- trigger(): central entry point to surface a fault (raise, or render in shell mode).
- describe(): one-line, chat-friendly text for a fault.

Taxonomy
- parsing (211xx)
  • MissingArgsError, ArgsMismatchError, UnexpectedArgsError,
    UnmatchedDelimiterError, ArgumentParseError
- routing (221xx)
  • NotFoundError, UnknownSubcommandError, NotPrefixedError,
    ExpectedSubcommandError, MissingHandlersError
- access (231xx)
  • AccessDeniedError
- execution (241xx)
  • ExecutionError
- validation (251xx, startup only)
  • MissingFunctionsError, DescriptorError, ValidationExit

Integration
- Parsing, routing and execution faults are raised to the dispatch caller, which owns
  user-visible surfacing (replying, clearing a deferred acknowledgement).
- NotPrefixedError is a classification signal ("not a command"), not a failure.
- Validation faults are collected, never raised one by one; a non-empty ValidationExit
  must abort startup.
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    numeric ranges encode domains; spacing leaves room for future additions
    without reshuffling existing codes. normalize() allows host remapping to
    custom labels while keeping code-stability.
    """
    # --- parsing (211xx) ---
    MISSING_ARGS            = 21101
    ARGS_MISMATCH           = 21102
    UNEXPECTED_ARGS         = 21103
    UNMATCHED_DELIMITER     = 21111
    ARGUMENT_PARSE          = 21112

    # --- routing (221xx) ---
    NOT_FOUND               = 22101
    UNKNOWN_SUBCOMMAND      = 22102
    NOT_PREFIXED            = 22103
    EXPECTED_SUBCOMMAND     = 22104
    MISSING_HANDLERS        = 22105

    # --- access (231xx) ---
    ACCESS_DENIED           = 23101

    # --- execution (241xx) ---
    EXECUTION_FAILED        = 24101

    # --- validation (251xx) ---
    VALIDATION_FAILED       = 25100
    MISSING_FUNCTIONS       = 25101
    DESCRIPTOR_CONVERSION   = 25102

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _styles(defaults):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


class CommandException(Exception):
    """
    Base fault: a message plus read-only rendering/context options.

    Class-level defaults
    - __code__ / __title__ seed the "code" and "title" options unless given.

    Common options
    - title, code, hint: rendering copy.
    - text: the offending input (already trimmed to the relevant substring).
    - colorful, fancy: rendering switches (default colorful, plain layout).
    """
    __code__ = FaultCode.UNEXPECTED_ARGS
    __title__ = "command error"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType({
            "code": type(self).__code__,
            "title": type(self).__title__,
            "hint": None,
            "colorful": True,
            "fancy": False,
        } | options)

    @property
    def code(self):
        return self.options["code"]

    def __str__(self):
        return "" if self.message is Unset else self.message

    def __rich__(self):
        styles = _styles({
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

        def styler(style):
            return styles[style] if self.options["colorful"] else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            return Text(str(fragment), style)

        header = Text.assemble(
            "[ ",
            text(self.code.normalize(), styler("code")),
            " | ",
            text(self.options["title"].title(), styler("error-title")),
            " ]"
        )
        message = text(str(self), styler("error-message"))
        body = [message]
        if self.options["hint"]:
            body.append(Text.assemble(text(" → ", styler("hint-arrow")), text(self.options["hint"], styler("hint"))))

        if self.options["fancy"]:
            return Panel(Group(*body), title=header, title_align="left")
        return Group(header, *body)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class MissingArgsError(CommandException):
    """A required argument or token is absent."""
    __code__ = FaultCode.MISSING_ARGS
    __title__ = "missing arguments"


class ArgsMismatchError(CommandException):
    """An argument is present under a different type than requested."""
    __code__ = FaultCode.ARGS_MISMATCH
    __title__ = "argument type mismatch"


class UnexpectedArgsError(CommandException):
    """Unconsumed input, a wrong reference kind, or an unprocessable argument."""
    __code__ = FaultCode.UNEXPECTED_ARGS
    __title__ = "unexpected arguments"


class UnmatchedDelimiterError(UnexpectedArgsError):
    __code__ = FaultCode.UNMATCHED_DELIMITER
    __title__ = "missing matching delimiter"


class ArgumentParseError(UnexpectedArgsError):
    __code__ = FaultCode.ARGUMENT_PARSE
    __title__ = "argument parse error"


class ExpectedSubcommandError(UnexpectedArgsError):
    __code__ = FaultCode.EXPECTED_SUBCOMMAND
    __title__ = "expected a subcommand"


class MissingHandlersError(UnexpectedArgsError):
    __code__ = FaultCode.MISSING_HANDLERS
    __title__ = "no handlers"


class NotFoundError(CommandException):
    """Unknown top-level command."""
    __code__ = FaultCode.NOT_FOUND
    __title__ = "command not found"


class UnknownSubcommandError(NotFoundError):
    __code__ = FaultCode.UNKNOWN_SUBCOMMAND
    __title__ = "subcommand not found"


class NotPrefixedError(CommandException):
    """The message did not start with a configured prefix (not a command)."""
    __code__ = FaultCode.NOT_PREFIXED
    __title__ = "not prefixed"


class AccessDeniedError(CommandException):
    __code__ = FaultCode.ACCESS_DENIED
    __title__ = "access denied"


class ExecutionError(CommandException):
    __code__ = FaultCode.EXECUTION_FAILED
    __title__ = "execution failed"


class ValidationError(CommandException):
    __code__ = FaultCode.VALIDATION_FAILED
    __title__ = "invalid command"


class MissingFunctionsError(ValidationError):
    """A subcommand supports a handler kind its nearest ancestor command does not."""
    __code__ = FaultCode.MISSING_FUNCTIONS
    __title__ = "missing function kind"


class DescriptorError(ValidationError):
    """A command could not be converted into a platform descriptor."""
    __code__ = FaultCode.DESCRIPTOR_CONVERSION
    __title__ = "invalid descriptor"


class ValidationExit(ExceptionGroup):
    """
    Aggregate of every validation fault found in a command tree (or registry).

    Startup must treat any ValidationExit as fatal. In shell mode, trigger()
    renders the whole group through rich and exits with status 1.
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "invalid commands", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("invalid commands", tuple(exceptions))
        self.options = MappingProxyType({"colorful": True, "fancy": False} | options)

    def derive(self, exceptions):
        return type(self)(exceptions, **self.options)

    def __str__(self):
        return "; ".join(map(str, self.exceptions))

    def __rich__(self):
        styles = _styles({
            "title": "bold #FF4DA6",  # friendly pinky group title
        })
        header = Text.assemble(
            "[ ",
            Text(self.message.title(), styles["title"] if self.options["colorful"] else ""),
            " | ",
            str(len(self.exceptions)),
            " ]"
        )
        renders = [exception.__replace__(colorful=self.options["colorful"]) for exception in self.exceptions]
        if self.options["fancy"]:
            return Panel(Group(*renders), title=header, title_align="left")
        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode (shell=True), rendering happens via the rich console on stderr;
      otherwise the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def describe(fault, /):
    """
    one-line, plain text for a fault, suitable for a chat reply.

    - CommandException: "<Title>: <message>" (message alone when it already starts
      with the title, title alone when there is no message).
    - ValidationExit: every member joined with "; ".
    - anything else: str(fault), or its type name when empty.
    """
    if isinstance(fault, CommandException):
        title = fault.options["title"]
        message = str(fault)
        if not message:
            return title.capitalize()
        return message if message.lower().startswith(title) else "%s: %s" % (title.capitalize(), message)
    return str(fault) or type(fault).__name__


__all__ = (
    "FaultCode",
    "CommandException",
    "MissingArgsError",
    "ArgsMismatchError",
    "UnexpectedArgsError",
    "UnmatchedDelimiterError",
    "ArgumentParseError",
    "ExpectedSubcommandError",
    "MissingHandlersError",
    "NotFoundError",
    "UnknownSubcommandError",
    "NotPrefixedError",
    "AccessDeniedError",
    "ExecutionError",
    "ValidationError",
    "MissingFunctionsError",
    "DescriptorError",
    "ValidationExit",
    "trigger",
    "describe",
)
