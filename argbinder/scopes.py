"""
Argbinder scopes: a flat owner of option definitions.

A Scope declares definitions, renders the help screen they share, and drives one
parse pass over a token list. It is the caller that interprets what definitions
return: faults are collected and surfaced together as a CommandExit, and a help
request ends the pass immediately (usage on stdout, exit status 0).

Tokens are consumed in place: every match is blanked out of the list, and the
tokens nobody claimed are returned, in order, for other parsers (subcommands,
positionals) to pick up.

Example
    >>> scope = Scope("tool", "copy things around")
    >>> verbose = scope.flag("v", "verbose")
    >>> output = scope.string("o", "out", required=True)
    >>> scope.parse(["-v", "-o", "dst", "src"])
    ['src']
    >>> verbose.value, output.value
    (True, 'dst')
"""
import copy
import logging
import sys

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .arguments import Argument
from .faults import *
from .slots import FlagSlot, StringSlot, FileSlot, ListSlot, HelpSlot
from .utils import *

logger = logging.getLogger(__name__)


class Scope:
    """
    Owner of a set of definitions for one parse pass.

    Parameters
    - name: str
      Program (or scope) name shown in usage and fault headers.
    - descr: Unset | str
      Description shown under the usage line.
    - shell: bool
      Render faults with rich and exit instead of raising them.
    - fancy: bool
      Wrap help screens and faults in rich panels.
    - colorful: bool
      Style output with the palette (overridable via __styles__ in __main__).
    - strict: bool
      Report tokens left unclaimed after a pass as a fault.

    A "-h|--help" definition is registered first, so it leads every usage line.
    """

    name = mirror("name")
    descr = mirror("descr")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")
    strict = mirror("strict")

    def __init__(self, name, descr=Unset, /, *, shell=False, fancy=False, colorful=True, strict=False):
        if not isinstance(name, str):
            raise TypeError("scope 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError("scope 'name' cannot be empty")
        if not isinstance(descr, str | Unset):
            raise TypeError("scope 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError("scope 'descr' cannot be empty")

        self._name = name
        self._descr = coalesce(descr)
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._strict = bool(strict)
        self._arguments = []

        self.add(Argument(HelpSlot(), "h", "help", descr="show this help message and exit", renderer=self._render))

    @property
    def arguments(self):
        return tuple(self._arguments)

    def __repr__(self):
        return "scope(name=%r, arguments=%r)" % (self._name, [argument.name() for argument in self._arguments])

    def __rich_repr__(self):
        yield "name", self._name
        yield "descr", self._descr
        yield "arguments", self.arguments

    def add(self, argument, /):
        """
        Register a prebuilt definition. Names must be unique within the scope.
        """
        if not isinstance(argument, Argument):
            raise TypeError("add() argument must be an Argument")
        if argument.short is None and argument.long is None:
            raise TypeError("argument must specify at least one of 'short' or 'long'")
        for other in self._arguments:
            if argument.short is not None and argument.short == other.short:
                raise ValueError("short name %r is already used by %s" % (argument.short, other.name()))
            if argument.long is not None and argument.long == other.long:
                raise ValueError("long name %r is already used by %s" % (argument.long, other.name()))
        self._arguments.append(argument)
        return argument

    def _declare(self, slot, short, long, /, **options):
        self.add(Argument(slot, short, long, renderer=self._render, **options))
        return slot

    def flag(self, short=Unset, long=Unset, **options):
        """Presence-only flag; clusters with other flags (-abc). Returns its FlagSlot."""
        return self._declare(FlagSlot(), short, long, unique=True, **options)

    def string(self, short=Unset, long=Unset, default=None, **options):
        """Single string value. Returns its StringSlot (value starts as `default`)."""
        return self._declare(StringSlot(default), short, long, unique=True, **options)

    def selector(self, short=Unset, long=Unset, choices=Unset, default=None, **options):
        """Single string value restricted to `choices`. Returns its StringSlot."""
        if choices is Unset:
            raise TypeError("selector() requires 'choices'")
        return self._declare(StringSlot(default), short, long, unique=True, choices=choices, **options)

    def file(self, short=Unset, long=Unset, mode="r", permission=0o666, opener=Unset, **options):
        """Path opened with `mode`/`permission` at bind time. Returns its FileSlot."""
        return self._declare(FileSlot(mode, permission, opener), short, long, unique=True, **options)

    def list(self, short=Unset, long=Unset, **options):
        """Repeatable string value, accumulated in order. Returns its ListSlot."""
        return self._declare(ListSlot(), short, long, unique=False, **options)

    def _render(self):
        """
        Build the help screen as a rich renderable.

        Palette keys
        - usage-label, program-name, usage-section, description-section
        - group-label, option-name, argument-description, panel-title
        """
        styler, text = palette({
            "usage-label": "bold #00E6FF",  # CYAN → signature info color
            "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
            "usage-section": "bold #36C5F0",  # SKY-BLUE → softer than cyan
            "description-section": "italic #A3A3A3",  # Neutral gray
            "group-label": "bold #FFFFFF",  # Pure white headers
            "option-name": "bold #00E6FF",  # CYAN for options
            "argument-description": "#9CA3AF",  # Muted gray
            "panel-title": "bold #FF4D94",  # Magenta branding
        }, self._colorful)

        usage = Text()
        usage.append("usage", styler("usage-label")).append(": ")
        usage.append(text(self._name, styler("program-name")))
        for argument in self._arguments:
            usage.append(" ").append(text(argument.usage(), styler("usage-section")))

        renders = [usage]
        if self._descr:
            renders.extend((Text(""), text(self._descr, styler("description-section"))))

        table = Table.grid(padding=(0, 4, 0, 2))
        table.add_column(no_wrap=True)
        table.add_column()
        for argument in self._arguments:
            # the table always shows the bare fragment; brackets only matter on the usage line
            fragment = argument.usage() if argument.required else argument.usage()[1:-1]
            table.add_row(text(fragment, styler("option-name")), text(argument.descr or "", styler("argument-description")))
        renders.extend((Text(""), text("options:", styler("group-label")), table))

        if self._fancy:
            return Panel(Group(*renders), title=text(self._name, styler("panel-title")), title_align="left")
        return Group(*renders)

    def usage(self):
        """
        The help screen as plain text.
        """
        console = Console(width=80, color_system=None, highlight=False)
        with console.capture() as capture:
            console.print(self._render())
        return capture.get()

    def trigger(self, fault, /, **options):
        trigger(fault, **{
            "tool": self, "shell": self._shell, "fancy": self._fancy, "colorful": self._colorful, **options
        })

    def parse(self, tokens=Unset, /):
        """
        Run one pass over `tokens` (default: a copy of sys.argv[1:]).

        For every definition, in declaration order, each non-empty token is checked;
        on a match the follow-on values are bound and the consumed tokens blanked.
        Help ends the pass at once. Faults are surfaced together once the pass is
        over. Returns the unclaimed tokens, in order.
        """
        tokens = coalesce(tokens, sys.argv[1:])
        if not isinstance(tokens, list):
            raise TypeError("parse() argument must be a list of strings")

        logger.debug("parsing %d tokens for %s", len(tokens), self._name)
        faults = []

        for argument in self._arguments:
            seen = False
            for position in range(len(tokens)):
                if not (token := tokens[position]):
                    continue
                result = argument.check(token)
                if isinstance(result, HelpRequested):
                    return self.trigger(result)
                if not result:
                    continue
                seen = True
                result = argument.parse(tokens[position + 1:position + 1 + argument.arity])
                if isinstance(result, HelpRequested):
                    return self.trigger(result)
                if result is not None:
                    faults.append(result)
                argument.reduce(position, tokens)

            if argument.required and not seen:
                faults.append(MissingRequiredError(
                    "%s is required" % argument.name(),
                    title="missing required option",
                    code=FaultCode.MISSING_REQUIRED,
                    hint="add %s" % argument.usage(),
                    argument=argument,
                    docs=getdoc(FaultCode.MISSING_REQUIRED),
                ))

        leftovers = [token for token in tokens if token]

        if self._strict and leftovers:
            faults.append(UnparsedTokensError(
                "unrecognized arguments: %s" % " ".join(leftovers),
                title="unparsed input",
                code=FaultCode.UNPARSED_TOKENS,
                hint="try '%s --help' to see all available options" % self._name,
                docs=getdoc(FaultCode.UNPARSED_TOKENS),
            ))

        if faults:
            logger.debug("%s finished with %d faults", self._name, len(faults))
            self.trigger(CommandExit([
                copy.replace(fault, tool=self, fancy=self._fancy, colorful=self._colorful)
                if isinstance(fault, BindingError) else fault
                for fault in faults
            ]))

        return leftovers


__all__ = (
    "Scope",
)
