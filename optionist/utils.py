"""
Small helpers shared by the options, parser, and faults modules.

- Unset: "not given" marker for keyword parameters where None is meaningful
  (an option description left out vs. an explicit value).
- coalesce(value, default): Unset → default, anything else passes through.
- mirror("attr"): read-only property over self._attr; containers come back frozen
  so callers cannot edit an option's aliases or a parser's registry in place.
- ordinal(n): "first", "second", ..., "11th", "22nd" for token positions in messages.

    >>> coalesce(Unset, 0), coalesce("", 0)
    (0, '')
    >>> ordinal(3), ordinal(11), ordinal(42)
    ('third', '11th', '42nd')
"""
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker. There is exactly one instance.

    Unset is falsy and prints as "Unset". It can appear in runtime unions,
    e.g. isinstance(descr, str | Unset).
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
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
    `default` when `object` is Unset, otherwise `object` (None, 0, and "" included).
    """
    return default if object is Unset else object


def _freeze(object):
    # str is a Sequence but already immutable
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Read-only property exposing `self._<name>`.

    Lists become tuples, dicts become mapping proxies, and sets become frozensets.
    Other values are returned unchanged.

        class Option:
            aliases = mirror("aliases")  # reads self._aliases
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    def getter(self):
        return _freeze(getattr(self, "_" + name))

    getter.__name__ = getter.__qualname__ = name
    return property(getter)


_WORDS = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")


@functools.cache
def ordinal(number, /):
    """
    Ordinal label for a 1-based position: words up to ten, then "11th", "21st", ...
    """
    if 1 <= number <= len(_WORDS):
        return _WORDS[number - 1]
    if number % 100 in (11, 12, 13):
        return "%dth" % number
    return "%d%s" % (number, {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th"))


Unset = UnsetType()


__all__ = (
    "coalesce",
    "mirror",
    "ordinal",
    "UnsetType",
    "Unset",
)
