"""
Argstream utilities (small helpers shared by every layer).

Overview
- UnsetType / Unset
  • Singleton sentinel for "value not provided", distinct from None. Specs use
    None as the "absent default", so accessors need a separate marker to know
    whether the caller passed a default at all.

- coalesce(value, default=None)
  • Replace Unset with a concrete default; None and other falsey values pass through.

- mirror("attr")
  • Read-only property over a private backing field (self._attr). Containers are
    handed out as fresh copies so callers cannot mutate spec metadata.

- ordinal(number)
  • Human-friendly ordinal for 1-based token positions in messages.

- casefold(name)
  • The one normalization applied to long option names, both when indices are
    built and when the parser looks a name up.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
    >>> ordinal(3), ordinal(22)
    ('third', '22nd')
"""
import functools
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Sentinel type for a parameter that was not provided.

    Characteristics
    - Falsey, but not equal to None, 0 or "".
    - repr(Unset) -> "Unset".
    - Process-wide singleton: UnsetType() always returns the same object.
    - Sealed: subclassing raises TypeError.
    """

    def __or__(self, other, /):
        """
        Support `UnsetType | str` style unions in isinstance checks.
        """
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

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return `object`, or `default` when `object` is the Unset sentinel.

    Falsey values (None, 0, "", []) are real values and are preserved.
    """
    return object if object is not Unset else default


def _thaw(object):
    # Fresh, mutable copies for containers; scalars are returned unchanged.
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes)):
        return list(object)
    elif isinstance(object, Mapping):
        return dict(object)
    elif isinstance(object, Set):
        return set(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the private field "_{name}".

    Containers are copied on every access, so `spec.longs.append(...)` changes
    nothing on the spec itself.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    def getter(self):
        return _thaw(getattr(self, "_" + name))

    getter.__name__ = getter.__qualname__ = name
    return property(getter)


@functools.cache
def ordinal(number, /):
    """
    Return an ordinal label for a 1-based position.

    - 1..10 read as words ("first" ... "tenth").
    - Larger numbers use numeric suffixes, honoring the 11th/12th/13th exception.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    if 10 < number % 100 < 20:
        return f"{number}th"

    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def casefold(name, /):
    """
    Normalize a long option name for index keys and lookups.
    """
    return name.casefold()


Unset = UnsetType()
"""
Process-wide "not provided" marker.

Use it as a parameter default when None is a meaningful value for the caller,
then materialize the fallback with coalesce(value, fallback).
"""


__all__ = (
    # Functions
    "coalesce",
    "mirror",
    "ordinal",
    "casefold",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
