r"""
Argbinder option definitions.

Overview
- Argument: one declared option. It owns the option's names, uniqueness,
  requiredness, validator, choices and output slot, and exposes:
  • check(token): does a raw token name this option? (help markers short-circuit)
  • reduce(position, tokens): blank out, in place, the tokens a match consumed
  • parse(values): enforce uniqueness, run the validator, bind into the slot
  • name() / usage(): the rendered name and the usage fragment

Token grammar
- long:  "--" + long name (the third character must not be "-")
- short: "-" + short name (the second character must not be "-")
  • flags match when the remainder *contains* the short name, so "-abc"
    matches the flags "a", "b" and "c" (a cluster)
  • every other kind requires the remainder to equal the short name exactly
- "-h" and "--help" always request help, whatever option is asking

Results, not raises
- parse() returns None on success, a fault (BindingError subclass, the
  validator's own error, or the OSError of a failed open) on failure, or a
  HelpRequested. It never prints or exits; the owning scope decides what to do.
- Failures leave `parsed` unchanged.

Quick example:
    >>> from argbinder.arguments import Argument
    >>> from argbinder.slots import FlagSlot
    >>> verbose = Argument(FlagSlot(), "v", "verbose")
    >>> tokens = ["-vq", "file"]
    >>> verbose.check(tokens[0])
    True
    >>> verbose.parse()
    >>> verbose.reduce(0, tokens)
    >>> tokens
    ['-q', 'file']
"""
import logging
import re
from collections.abc import Iterable

from .faults import *
from .slots import Kind, Slot
from .utils import *

logger = logging.getLogger(__name__)

MARKER = "-"
HELPERS = ("-h", "--help")


def _sanitize_name(field, name, /):
    if name is Unset:
        return None
    if not isinstance(name, str):
        raise TypeError(f"argument {field!r} name must be a string")
    elif not name:
        raise ValueError(f"argument {field!r} name cannot be empty")
    elif name.startswith(MARKER):
        raise ValueError(f"argument {field!r} name must be given without leading {MARKER!r}")
    elif re.search(r"\s", name):
        raise ValueError(f"argument {field!r} name cannot contain whitespace")
    return name


def _sanitize_choices(slot, choices, /):
    if choices is Unset:
        return None
    if slot.kind is not Kind.STRING:
        raise TypeError("argument 'choices' only apply to string slots")
    if isinstance(choices, str) or not isinstance(choices, Iterable):
        raise TypeError("argument 'choices' must be an iterable of strings")

    sanitized = []
    for choice in choices:
        if not isinstance(choice, str):
            raise TypeError("argument 'choices' must be an iterable of strings")
        if choice in sanitized:
            raise ValueError("argument 'choices' cannot contain duplicates")
        sanitized.append(choice)
    if not sanitized:
        raise ValueError("argument 'choices' cannot be empty")
    return tuple(sanitized)


class Argument:
    """
    One option definition, bound to one output slot.

    Parameters
    - slot: Slot
      Destination of the parsed value; its kind drives matching and binding.
    - short: Unset | str
      Short name, matched after a single "-" (e.g. "o" for "-o").
    - long: Unset | str
      Long name, matched after "--" (e.g. "output" for "--output").
    - unique: bool
      Reject a second successful bind.
    - required: bool
      Render the usage fragment without brackets. Enforcement is up to the owner.
    - validator: Unset | Callable[[tuple[str, ...]], Any]
      Pre-check over the raw values. Returns None to accept; anything else is
      the failure (Exception instances are passed through, other values are
      wrapped in a ValidationError with their text as the message).
    - choices: Unset | Iterable[str]
      Allowed values, string slots only. Declaration order is kept for usage.
    - descr: Unset | str
      Short description for help screens.
    - renderer: Unset | Callable[[], str | RenderableType]
      Produces the owning scope's help; defaults to this definition's usage().
    """

    __introspectable__ = (
        "short",
        "long",
        "slot",
        "unique",
        "required",
        "choices",
        "descr",
        "parsed",
    )

    short = mirror("short")
    long = mirror("long")
    unique = mirror("unique")
    required = mirror("required")
    choices = mirror("choices")
    descr = mirror("descr")
    parsed = mirror("parsed")

    def __init__(
            self,
            slot,
            /,
            short=Unset,
            long=Unset,
            *,
            unique=False,
            required=False,
            validator=Unset,
            choices=Unset,
            descr=Unset,
            renderer=Unset,
    ):
        if not isinstance(slot, Slot):
            raise TypeError("argument 'slot' must be a Slot instance")
        if validator is not Unset and not callable(validator):
            raise TypeError("argument 'validator' must be callable")
        if renderer is not Unset and not callable(renderer):
            raise TypeError("argument 'renderer' must be callable")
        if not isinstance(descr, str | Unset):
            raise TypeError("argument 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError("argument 'descr' cannot be empty")

        self._slot = slot
        self._short = _sanitize_name("short", short)
        self._long = _sanitize_name("long", long)
        self._unique = bool(unique)
        self._required = bool(required)
        self._validator = coalesce(validator)
        self._choices = _sanitize_choices(slot, choices)
        self._descr = coalesce(descr)
        self._renderer = renderer
        self._parsed = False

    @property
    def slot(self):
        return self._slot

    @property
    def kind(self):
        return self._slot.kind

    @property
    def arity(self):
        return self._slot.arity

    def __repr__(self):
        return "argument(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def _match(self, token):
        """
        classify a token against this option: "long", "short", "cluster" or None.
        """
        if self._long is not None:
            if len(token) > 2 and token.startswith(MARKER * 2) and token[2] != MARKER:
                if token[2:] == self._long:
                    return "long"
        if self._short is not None:
            if len(token) > 1 and token.startswith(MARKER) and token[1] != MARKER:
                if self._slot.kind is Kind.FLAG:
                    if self._short in token[1:]:
                        return "cluster"
                elif token[1:] == self._short:
                    return "short"
        return None

    def _helped(self):
        return HelpRequested(coalesce(self._renderer, self.usage)())

    def check(self, token, /):
        """
        Test a single raw token against this option's names.

        Returns True or False, or a HelpRequested when the token is "-h"/"--help".
        """
        if token in HELPERS:
            logger.debug("help requested by %r while checking %s", token, self.name())
            return self._helped()
        return self._match(token) is not None

    def reduce(self, position, tokens, /):
        """
        Blank out, in place, the tokens consumed by a match at `position`.

        Value-bearing matches blank the option token plus `arity` follow-on
        tokens (as many as exist). A flag matched inside a cluster only loses its
        own letters; a cluster left as a bare "-" is blanked. No match, no change.
        """
        match self._match(token := tokens[position]):
            case "long" | "short":
                for index in range(position, min(position + self.arity + 1, len(tokens))):
                    tokens[index] = ""
            case "cluster":
                token = token.replace(self._short, "")
                tokens[position] = "" if token == MARKER else token
            case _:
                return
        logger.debug("reduced %s at position %d", self.name(), position)

    def _single(self, values, what):
        if len(values) < 1:
            return ArityMismatchError(
                "%s must be followed by %s" % (self.name(), what),
                title="option value required",
                code=FaultCode.ARITY_MISMATCH,
                hint="pass a value after it (for example: %s)" % self.usage().strip("[]"),
                argument=self,
                docs=getdoc(FaultCode.ARITY_MISMATCH),
            )
        if len(values) > 1:
            return ArityMismatchError(
                "%s followed by too many arguments" % self.name(),
                title="too many values",
                code=FaultCode.ARITY_MISMATCH,
                hint="pass exactly one value; repeat the option for more",
                argument=self,
                docs=getdoc(FaultCode.ARITY_MISMATCH),
            )
        return None

    def parse(self, values=(), /):
        """
        Bind the values isolated for this option into its slot.

        Order: uniqueness, validator, then dispatch on the slot kind. Returns None
        on success, the fault on failure, or HelpRequested for help slots.
        """
        values = tuple(values)

        if self._unique and self._parsed:
            return DuplicateOptionError(
                "%s can only be present once" % self.name(),
                title="duplicate option",
                code=FaultCode.DUPLICATE_OPTION,
                hint="remove the repeated %s" % self.name(),
                argument=self,
                docs=getdoc(FaultCode.DUPLICATE_OPTION),
            )

        if self._validator is not None:
            if (fault := self._validator(values)) is not None:
                if isinstance(fault, Exception):
                    return fault
                return ValidationError(
                    str(fault),
                    title="invalid value",
                    code=FaultCode.VALIDATION_FAILED,
                    argument=self,
                    docs=getdoc(FaultCode.VALIDATION_FAILED),
                )

        slot = self._slot
        match slot.kind:
            case Kind.HELP:
                return self._helped()
            case Kind.FLAG:
                slot.value = True
            case Kind.STRING:
                if fault := self._single(values, "a string"):
                    return fault
                if self._choices is not None and values[0] not in self._choices:
                    return InvalidChoiceError(
                        "bad value for %s. allowed values are %s" % (self.name(), list(self._choices)),
                        title="invalid choice",
                        code=FaultCode.INVALID_CHOICE,
                        hint="choose one of: %s" % ", ".join(self._choices),
                        argument=self,
                        docs=getdoc(FaultCode.INVALID_CHOICE),
                    )
                slot.value = values[0]
            case Kind.FILE:
                if fault := self._single(values, "a path to file"):
                    return fault
                try:
                    slot.value = slot.open(values[0])
                except OSError as error:
                    logger.debug("opening %r for %s failed: %s", values[0], self.name(), error)
                    return error
            case Kind.LIST:
                if fault := self._single(values, "a string"):
                    return fault
                slot.value.append(values[0])
            case _:
                return UnsupportedKindError(
                    "unsupported type [%s] for %s" % (type(slot).__name__, self.name()),
                    title="unsupported type",
                    code=FaultCode.UNSUPPORTED_KIND,
                    argument=self,
                    docs=getdoc(FaultCode.UNSUPPORTED_KIND),
                )

        self._parsed = True
        logger.debug("bound %s from %r", self.name(), values)
        return None

    def name(self):
        """
        "-s", "--long" or "-s|--long", depending on the names declared.
        """
        if self._long is None:
            return MARKER + (self._short or "")
        if self._short is None:
            return MARKER * 2 + self._long
        return MARKER + self._short + "|" + MARKER * 2 + self._long

    def usage(self):
        """
        Usage fragment: the name plus a value placeholder, bracketed unless required.
        """
        result = self.name()
        match self._slot.kind:
            case Kind.STRING if self._choices is not None:
                result += " (" + "|".join(self._choices) + ")"
            case Kind.STRING:
                result += ' "<value>"'
            case Kind.FILE:
                result += " <file>"
            case Kind.LIST:
                result += ' "<string>"'
        if not self._required:
            result = "[" + result + "]"
        return result


__all__ = (
    "Argument",
    "MARKER",
    "HELPERS",
)
