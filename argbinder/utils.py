"""
Argbinder utilities (internal helpers).

Overview
- UnsetType / Unset
  • Singleton sentinel for "not provided", distinct from None (falsey, sealed).

- coalesce(value, default=None)
  • Replace Unset with a default; None/0/""/[] are preserved as given.

- mirror("attr")
  • Read-only property over a private backing field (self._attr). Containers are
    handed out as fresh copies so callers cannot mutate definition state.

- palette(defaults, colorful)
  • Build the (styler, text) pair used by every rich renderer in the package.
    Host applications override entries through a __styles__ mapping in __main__.

Names not in __all__ are internal and may change without notice.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
"""
import functools
from collections import defaultdict
from collections.abc import Sequence, Mapping, Set
from typing import final

from rich.text import Text


@final
class UnsetType:
    """
    Sentinel type for values that were not provided.

    Used where None is a meaningful user value. bool(Unset) is False, repr is
    "Unset", there is one instance per process and the type cannot be subclassed.
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return `object` unless it is Unset, in which case return `default`.

    Examples
    - coalesce("-o", "x")  -> "-o"
    - coalesce(Unset, "x") -> "x"
    - coalesce(None, "x")  -> None
    """
    return object if object is not Unset else default


def _detach(object):
    # Fresh containers all the way down; tuples stay tuples so choices keep their shape.
    if isinstance(object, tuple):
        return tuple(map(_detach, object))
    elif isinstance(object, Sequence) and not isinstance(object, str):
        return list(map(_detach, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_detach, object.values())))
    elif isinstance(object, Set):
        return set(map(_detach, object))
    return object


def mirror(name, /):
    """
    Define a read-only property reading the private field "_{name}".

    Container values are returned as detached copies.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    def getter(self):
        return _detach(getattr(self, "_" + name))

    getter.__name__ = getter.__qualname__ = name
    return property(getter)


def palette(defaults, colorful, /):
    """
    Return a (styler, text) pair for rich renderers.

    - styler(key): the style for a palette key, or "" when colorful is False.
      Keys containing "deprecated" keep a strike-through even without colors.
    - text(fragment, style=""): normalize a fragment to rich Text, dropping the
      style in non-colorful mode and passing existing Text through untouched.

    Entries of a __styles__ mapping in __main__ take precedence over `defaults`.
    """
    styles = defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        if "deprecated" in style and not colorful:
            return "strike"
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    return styler, text


Unset = UnsetType()
"""
The only UnsetType instance: "not provided", as opposed to an explicit None.
"""


__all__ = (
    # Functions
    "coalesce",
    "mirror",
    "palette",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
