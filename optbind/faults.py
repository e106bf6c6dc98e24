"""
Optbind faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain (declarations, arguments, runtime) so logs and
  searches stay predictable.
- CommandException: base type carrying a message + options; knows how to render
  itself in a friendly, lowercased, and actionable way.
- ArgumentError: base of every fault raised while scanning the argument vector.
- trigger(): central entry point to surface a fault (raise, or print and exit in shell mode).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- The registry and executor raise faults directly; the shell wrapper (invoke)
  catches them and calls trigger(fault, shell=True, ...) to print them through rich.
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
    canonical fault codes used across optbind (stable identifiers).

    grouping (by high-level domain)
    - declarations (111xx)
      • INVALID_DECLARATION, MISSING_PARAMETER_NAME
    - arguments (112xx)
      • MALFORMED_ARGUMENT, UNKNOWN_OPTION, DUPLICATE_OPTION, MISSING_ARGUMENT,
        INVALID_VALUE, UNSUPPORTED_TYPE
    - runtime (113xx)
      • INSTANTIATION_FAILURE, INVOCATION_FAILURE, UNSUPPORTED_OPERATION

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- declaration faults (111xx) ---
    INVALID_DECLARATION     = 11101
    MISSING_PARAMETER_NAME  = 11102

    # --- argument faults (112xx) ---
    MALFORMED_ARGUMENT      = 11211
    UNKNOWN_OPTION          = 11212
    DUPLICATE_OPTION        = 11213
    MISSING_ARGUMENT        = 11214
    INVALID_VALUE           = 11215
    UNSUPPORTED_TYPE        = 11216

    # --- runtime faults (113xx) ---
    INSTANTIATION_FAILURE   = 11301
    INVOCATION_FAILURE      = 11302
    UNSUPPORTED_OPERATION   = 11303

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base of every optbind fault.

    carries a one-sentence message and a read-only mapping of options:
    - code: FaultCode
    - title: short lowercase title
    - hint: a single actionable hint
    - docs: optional documentation line, rendered as a footer
    - any context the reporter may want to show (token, input, type, exception, ...)
    - rendering flags merged by trigger(): prog, shell, colorful, fancy
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return "" if self.message is Unset else self.message

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
            "docs": "dim #C8C8D0",  # muted documentation footer
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.options.get("prog", "optbind")), styler("prog-name"))
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else "?", styler("code")),
            " | ",
            text(str(self.options.get("title", "error")).title(), styler("error-title")),
            " ]"
        )
        message = text(str(self), styler("error-message"))

        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))
        if docs := self.options.get("docs"):
            renders.append(text(docs, styler("docs")))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        fault = type(self)(self.message, **{**self.options, **overrides})
        fault.__cause__ = self.__cause__
        return fault


# Declaration faults
class ValidationError(CommandException): ...
class MissingParameterNameError(CommandException): ...

# Argument faults (scan phase; nothing has been invoked yet)
class ArgumentError(CommandException): ...
class MalformedArgumentError(ArgumentError): ...
class UnknownOptionError(ArgumentError): ...
class DuplicateOptionError(ArgumentError): ...
class MissingArgumentError(ArgumentError): ...
class InvalidValueError(ArgumentError): ...
class UnsupportedTypeError(ArgumentError): ...

# Runtime faults
class InstantiationError(CommandException): ...
class InvocationError(CommandException): ...
class UnsupportedOperationError(CommandException): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console and the process exits
      with status 1; otherwise, the fault is raised.

    typical options
    - prog, shell, fancy, colorful, plus any context the reporter may want to show.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CommandException",
    "ValidationError",
    "MissingParameterNameError",
    "ArgumentError",
    "MalformedArgumentError",
    "UnknownOptionError",
    "DuplicateOptionError",
    "MissingArgumentError",
    "InvalidValueError",
    "UnsupportedTypeError",
    "InstantiationError",
    "InvocationError",
    "UnsupportedOperationError",
    "FaultCode",
    "trigger",
    "getdoc",
)
