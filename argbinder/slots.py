"""
Output slots: the destinations a definition binds parsed tokens into.

A slot is a small mutable holder with a `value` attribute. Its class fixes the
kind, which decides how a definition matches, binds and renders:

    FlagSlot    presence-only, clusterable (-abc), value becomes True
    StringSlot  one token, optionally restricted to choices
    FileSlot    one token, opened as a resource with a mode and permission
    ListSlot    one token per occurrence, appended in call order
    HelpSlot    help marker, requests the owning scope's usage

The set of kinds is closed. A bare Slot, or a subclass that does not declare one
of these kinds, is accepted as a destination but rejected when binding.

Example
    >>> from argbinder.slots import ListSlot
    >>> tags = ListSlot()
    >>> tags.value
    []
"""
import os
from enum import Enum

from .utils import Unset, coalesce


class Kind(Enum):
    """
    tag of an output slot (fixed per slot class).
    """
    FLAG = "flag"
    STRING = "string"
    FILE = "file"
    LIST = "list"
    HELP = "help"


class Slot:
    """
    Base destination. Carries no kind, so binding into it is unsupported.
    """
    __slots__ = ("value",)

    kind = Unset
    arity = 0

    def __init__(self, value=None, /):
        self.value = value

    def __repr__(self):
        return f"{type(self).__name__}({self.value!r})"

    def __rich_repr__(self):
        yield self.value


class FlagSlot(Slot):
    __slots__ = ()

    kind = Kind.FLAG

    def __init__(self, value=False, /):
        super().__init__(bool(value))


class StringSlot(Slot):
    __slots__ = ()

    kind = Kind.STRING
    arity = 1


class FileSlot(Slot):
    """
    Destination for a file-backed option.

    Parameters
    - mode: str
      Mode handed to the opener verbatim ("r", "w", "a", "x", "rb", ...).
    - permission: int
      Permission bits used when the file gets created. Passed verbatim.
    - opener: Unset | Callable[[str, str, int], Any]
      Replaces the default opener; called as opener(path, mode, permission).
      Whatever it returns becomes the slot value. OSError raised by it is what
      the definition reports for a failed open.
    """
    __slots__ = ("mode", "permission", "opener")

    kind = Kind.FILE
    arity = 1

    def __init__(self, mode="r", permission=0o666, opener=Unset):
        if not isinstance(mode, str):
            raise TypeError("file slot 'mode' must be a string")
        if not isinstance(permission, int):
            raise TypeError("file slot 'permission' must be an integer")
        if opener is not Unset and not callable(opener):
            raise TypeError("file slot 'opener' must be callable")
        super().__init__(None)
        self.mode = mode
        self.permission = permission
        self.opener = opener

    def open(self, path, /):
        if self.opener is not Unset:
            return self.opener(path, self.mode, self.permission)
        return open(path, self.mode, opener=lambda path, flags: os.open(path, flags, self.permission))


class ListSlot(Slot):
    __slots__ = ()

    kind = Kind.LIST
    arity = 1

    def __init__(self, value=Unset, /):
        if value is not Unset and not isinstance(value, list):
            raise TypeError("list slot value must be a list")
        super().__init__(coalesce(value, []))


class HelpSlot(Slot):
    __slots__ = ()

    kind = Kind.HELP


__all__ = (
    "Kind",
    "Slot",
    "FlagSlot",
    "StringSlot",
    "FileSlot",
    "ListSlot",
    "HelpSlot",
)
