"""
Argbinder faults (binding errors, help requests) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing binding issue.
- BindingError: base type carrying a message + options; renders itself with rich
  in a short, lowercased, actionable way.
- HelpRequested: not an error. The outcome of meeting -h/--help; carries the
  owning scope's usage and, once triggered, prints it and exits with status 0.
- CommandExit: every fault of one parse pass, surfaced together.
- trigger(): central entry point to surface any of the above.
- getdoc(): optional description lookup for a code from the host application.

Integration
- Definitions never raise these for bad input: they return them as values.
  The owning scope collects them and calls trigger(fault, **ctx).
- In non-shell mode, errors are raised; in shell mode, they are rendered via rich
  and the process exits.
"""
import copy
import sys
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, palette

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes for binding (stable identifiers).

    numbering follows the Seralix Fault Codes convention: the
    1111x/1112x range holds option faults, 1113x delegated (validator) faults,
    1114x leftovers and 1115x/1116x binder and environment faults.
    """
    DUPLICATE_OPTION     = 11115
    ARITY_MISMATCH       = 11117
    INVALID_CHOICE       = 11124
    MISSING_REQUIRED     = 11125
    VALIDATION_FAILED    = 11131
    UNPARSED_TOKENS      = 11141
    UNSUPPORTED_KIND     = 11151
    RESOURCE_OPEN_FAILED = 11161

    def normalize(self):
        """
        return a host-normalized string for this code.

        a __codes__ mapping in __main__ may relabel codes; otherwise the numeric
        value is used.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _program(options):
    main = __import__("__main__")
    try:
        return getattr(main, "__prog__", options["tool"].name)
    except KeyError:
        return getattr(main, "__prog__", "argbinder")


class BindingError(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)
        styler, text = palette({
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        }, colorful)

        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            text(_program(self.options), styler("prog-name")),
            " | ",
            text(code.normalize() if code is not None else "", styler("code")),
            " | ",
            text(self.options.get("title", "error").title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        parts = [message]
        if hint := self.options.get("hint"):
            parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            try:
                width = int((console.width - 4) * self.options["ratio"])
            except KeyError:
                width = None
            return Panel(Group(*parts), title=header, title_align="left", width=width)

        return Group(header, *parts)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DuplicateOptionError(BindingError): ...
class ValidationError(BindingError): ...
class ArityMismatchError(BindingError): ...
class InvalidChoiceError(BindingError): ...
class UnsupportedKindError(BindingError): ...
class MissingRequiredError(BindingError): ...
class UnparsedTokensError(BindingError): ...


class HelpRequested:
    """
    outcome of a help marker: usage for the owning scope, not yet printed.

    `usage` is a string or any rich renderable. triggering prints it to stdout
    and exits with status 0, bypassing every other fault of the pass.
    """
    __slots__ = ("usage", "options")

    def __init__(self, usage, /, **options):
        self.usage = usage
        self.options = MappingProxyType(options)

    def __repr__(self):
        return "HelpRequested(...)"

    def __trigger__(self):
        Console(highlight=False, no_color=not self.options.get("colorful", False)).print(self.usage, markup=False)
        sys.exit(0)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.usage, **{**self.options, **overrides})


class CommandExit(ExceptionGroup):
    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad exit", exceptions)

    def __init__(self, exceptions, **options):
        super().__init__("bad exit", tuple(exceptions))
        self.options = MappingProxyType(options)

    def __rich__(self):
        colorful = self.options.get("colorful", False)
        styler, text = palette({
            "prog-name": "bold #E6E6F0",  # near-white program name
            "title": "bold #FF4DA6",  # friendly pinky group title (Bad Exit)
        }, colorful)

        header = Text.assemble(
            "[ ", text(_program(self.options), styler("prog-name")), " | ", text(self.message.title(), styler("title")), " ]"
        )

        renders = []
        for exception in self.exceptions:
            if isinstance(exception, BindingError):
                renders.append(copy.replace(exception, ratio=2/3))
            elif isinstance(exception, OSError):
                # resource errors are kept as the environment raised them
                renders.append(BindingError(str(exception), **{
                    **self.options, "title": "cannot open file", "code": FaultCode.RESOURCE_OPEN_FAILED
                }))
            else:
                # a validator's own exception
                renders.append(BindingError(str(exception), **{
                    **self.options, "title": "invalid value", "code": FaultCode.VALIDATION_FAILED
                }))

        if self.options.get("fancy", False):
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
    - fault must provide __trigger__ and __replace__ methods (see the types above).
    - options are merged into the fault via copy.replace(fault, **options) first.
    - errors raise in non-shell mode and render + exit(1) in shell mode;
      HelpRequested always prints usage and exits with status 0.

    typical options
    - tool, shell, fancy, colorful, title, code, hint, docs, argument.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation for a fault code, read from a __docs__ mapping in __main__.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "BindingError",
    "DuplicateOptionError",
    "ValidationError",
    "ArityMismatchError",
    "InvalidChoiceError",
    "UnsupportedKindError",
    "MissingRequiredError",
    "UnparsedTokensError",
    "HelpRequested",
    "CommandExit",
    "FaultCode",
    "trigger",
    "getdoc",
)
