"""
Helmsman faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every issue the
  dispatcher can surface. Codes are grouped by domain to keep logs/searches
  predictable.
- CommandException / CommandWarning: base types that carry a message plus
  read-only options and know how to render themselves through rich.
- trigger(): central entry point to surface any fault (print in shell mode,
  raise or warn otherwise).
- getdoc(): long description of a code, as provided by the host.

Taxonomy
- routing: CommandNotFoundError (empty input, unknown command, nothing to run).
- access: CommandAccessError (the sender's permission check declined).
- registration: InvalidRegistrationError and its kinds, raised synchronously by
  register() before any state is touched.
- invocation: CommandInvocationError wraps whatever the bound action raised.

Integration
- Hosts catch CommandException around Dispatcher.call() and decide messaging,
  or use Dispatcher.dispatch() in shell mode to have faults printed for them.
- Host customization hooks are read from __main__: __prog__, __styles__,
  __codes__ and __docs__.
"""
import warnings
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
    canonical fault codes used across the dispatcher (stable identifiers).

    ranges
    - routing (1110x)
      • COMMAND_NOT_FOUND, ACTION_NOT_FOUND
    - access (1120x)
      • ACCESS_DENIED
    - registration (1130x)
      • INVALID_NAME, DUPLICATE_NAME, INVALID_RETURN, MISSING_SENDER,
        MISPLACED_COLLECTION, MISSING_PARSER, EMPTY_SOURCE, INVALID_SIGNATURE
    - invocation (1140x)
      • INVOCATION_FAILURE
    - warnings (12xxx)
      • PARSER_REBOUND, COMPLETER_REBOUND, COMPLETION_FAILURE

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- routing errors (111xx) ---
    COMMAND_NOT_FOUND       = 11101
    ACTION_NOT_FOUND        = 11102

    # --- access errors (112xx) ---
    ACCESS_DENIED           = 11201

    # --- registration errors (113xx) ---
    INVALID_NAME            = 11301
    DUPLICATE_NAME          = 11302
    INVALID_RETURN          = 11303
    MISSING_SENDER          = 11304
    MISPLACED_COLLECTION    = 11305
    MISSING_PARSER          = 11306
    EMPTY_SOURCE            = 11307
    INVALID_SIGNATURE       = 11308

    # --- invocation errors (114xx) ---
    INVOCATION_FAILURE      = 11401

    # --- warnings (12xxx) ---
    PARSER_REBOUND          = 12101
    COMPLETER_REBOUND       = 12102
    COMPLETION_FAILURE      = 12201

    def normalize(self):
        """
        label shown in rendered faults: the host __codes__ entry, else the number.
        """
        labels = getattr(__import__("__main__"), "__codes__", {})
        return str(labels[self]) if self in labels else str(self.value)


def _renderer(fault, defaults):
    """
    Build the rich renderable shared by errors and warnings.

    defaults carries the per-kind palette; host __styles__ in __main__ win.
    """
    main = __import__("__main__")
    options = fault.options

    styles = defaultdict(str, defaults | getattr(main, "__styles__", {}))
    colorful = options.get("colorful", True)
    fancy = options.get("fancy", False)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style])

    prog = getattr(main, "__prog__", options.get("prog", "helmsman"))

    header = Text.assemble(
        "[ ",
        text(prog, "prog-name"),
        " — ",
        text(options["code"].normalize(), "code"),
        " | ",
        text(options["title"].title(), "title"),
        " ]"
    )
    message = text(fault.message, "message")
    hint = Text.assemble(text(" → ", "hint-arrow"), text(options["hint"], "hint")) if options["hint"] else Text("")

    if fancy:
        return Panel(Group(message, hint), title=header, title_align="left")

    return Group(header, message, hint)


class CommandException(Exception):
    """
    base type of every dispatcher error.

    contract
    - message: one sentence, lowercased tone.
    - options: read-only mapping; always has code, title and hint (class
      defaults, overridable per instance), plus any context the raiser
      attached (input, command, action, source, parameter...).
    """
    __code__ = FaultCode.COMMAND_NOT_FOUND
    __title__ = "command error"
    __hint__ = Unset

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({
            "code": type(self).__code__,
            "title": type(self).__title__,
            "hint": type(self).__hint__,
        } | options)

    @property
    def code(self):
        return self.options["code"]

    def __rich__(self):
        return _renderer(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "title": "bold #FF4DA6",
            "message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

    def __trigger__(self):
        if not self.options.get("shell"):
            raise self
        console.print(self)

    def __replace__(self, /, **overrides):
        fault = type(self)(self.message, **self.options | overrides)
        fault.__cause__ = self.__cause__
        return fault


class CommandNotFoundError(CommandException):
    __code__ = FaultCode.COMMAND_NOT_FOUND
    __title__ = "unknown command"
    __hint__ = "press tab to list the available commands"


class CommandAccessError(CommandException):
    __code__ = FaultCode.ACCESS_DENIED
    __title__ = "access denied"
    __hint__ = "ask an operator for the permission"


class CommandInvocationError(CommandException):
    __code__ = FaultCode.INVOCATION_FAILURE
    __title__ = "invocation failure"


class InvalidRegistrationError(CommandException):
    __code__ = FaultCode.INVALID_SIGNATURE
    __title__ = "invalid registration"


class InvalidNameError(InvalidRegistrationError, ValueError):
    __code__ = FaultCode.INVALID_NAME
    __hint__ = "command names must be non-empty and contain no whitespace"


class DuplicateNameError(InvalidRegistrationError, ValueError):
    __code__ = FaultCode.DUPLICATE_NAME
    __hint__ = "unregister the previous owner first"


class InvalidReturnError(InvalidRegistrationError, TypeError):
    __code__ = FaultCode.INVALID_RETURN
    __hint__ = "actions must return None or bool"


class MissingSenderError(InvalidRegistrationError, TypeError):
    __code__ = FaultCode.MISSING_SENDER
    __hint__ = "annotate the first parameter with a Sender type"


class MisplacedCollectionError(InvalidRegistrationError, TypeError):
    __code__ = FaultCode.MISPLACED_COLLECTION
    __hint__ = "move the collection parameter to the end"


class MissingParserError(InvalidRegistrationError, TypeError):
    __code__ = FaultCode.MISSING_PARSER
    __hint__ = "bind a parser for the type before registering"


class EmptySourceError(InvalidRegistrationError, ValueError):
    __code__ = FaultCode.EMPTY_SOURCE
    __hint__ = "mark at least one callable with @action"


class CommandWarning(Warning):
    """
    base type of every dispatcher warning; same options contract as CommandException.
    """
    __code__ = FaultCode.PARSER_REBOUND
    __title__ = "command warning"
    __hint__ = Unset

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({
            "code": type(self).__code__,
            "title": type(self).__title__,
            "hint": type(self).__hint__,
        } | options)

    @property
    def code(self):
        return self.options["code"]

    def __rich__(self):
        return _renderer(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "title": "bold #FFC2E0",
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })

    def __trigger__(self):
        if not self.options.get("shell"):
            return warnings.warn(self, stacklevel=self.options.get("stacklevel", 4))
        console.print(self)

    def __replace__(self, /, **overrides):
        return type(self)(self.message, **self.options | overrides)


class ParserReboundWarning(CommandWarning):
    __code__ = FaultCode.PARSER_REBOUND
    __title__ = "parser rebound"


class CompleterReboundWarning(CommandWarning):
    __code__ = FaultCode.COMPLETER_REBOUND
    __title__ = "completer rebound"


class CompletionFailureWarning(CommandWarning):
    __code__ = FaultCode.COMPLETION_FAILURE
    __title__ = "completion failure"
    __hint__ = "completers should return an empty list instead of raising"


def trigger(fault, /, **options):
    """
    merge options into a copy of fault, then let it surface itself.

    errors are raised and warnings go through warnings.warn, unless
    options["shell"] is set: then both are printed on the stderr console.
    other options understood by the renderer: fancy, colorful, prog,
    stacklevel (warnings only).
    """
    for method in ("__trigger__", "__replace__"):
        if not callable(getattr(fault, method, None)):
            raise TypeError(f"trigger() argument must define {method}, not {type(fault).__name__!r}")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    long description of a code from the host __docs__ mapping, or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "FaultCode",
    "CommandException",
    "CommandNotFoundError",
    "CommandAccessError",
    "CommandInvocationError",
    "InvalidRegistrationError",
    "InvalidNameError",
    "DuplicateNameError",
    "InvalidReturnError",
    "MissingSenderError",
    "MisplacedCollectionError",
    "MissingParserError",
    "EmptySourceError",
    "CommandWarning",
    "ParserReboundWarning",
    "CompleterReboundWarning",
    "CompletionFailureWarning",
    "trigger",
    "getdoc",
    "console",
)
