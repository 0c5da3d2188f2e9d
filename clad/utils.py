"""
Clad utilities shared by the argument, schema and command layers.

- Unset: "not given" marker for optional parameters whose natural default
  (None) must stay distinguishable from an omitted value. Falsey, sealed, and
  usable on the right of `|` in isinstance checks (`str | Unset`).
- coalesce(object, default=None): Unset -> default, anything else unchanged.
- rename(name): decorator naming generated functions (repr, tracebacks).
- mirror(name): read-only property over `self._<name>`; containers come back
  as immutable copies.
- dehyphenate(flag): "--out" -> "out", "-o" -> "o".
"""
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker. Only one instance ever exists.
    """
    __slots__ = ()
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")

    def __ror__(self, other, /):
        # str | Unset -> str | UnsetType
        try:
            return other | UnsetType
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return `default` for Unset, else `object` (falsey values included).

    >>> coalesce(Unset, "-"), coalesce("", "-"), coalesce(Unset)
    ('-', '', None)
    """
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator setting __name__ and __qualname__ of a generated function.
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        if not callable(function):
            raise TypeError("rename() must decorate a callable")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _freeze(object):
    # sequences -> tuples, mappings -> read-only proxies, sets -> frozensets;
    # an Unset field reads as None
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(_freeze(item) for item in object)
    if isinstance(object, Mapping):
        return MappingProxyType({key: _freeze(value) for key, value in object.items()})
    if isinstance(object, Set):
        return frozenset(_freeze(item) for item in object)
    return coalesce(object)


def mirror(name, /):
    """
    Read-only property exposing the private attribute "_<name>".
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


def dehyphenate(flag, /):
    """
    Strip the leading hyphens of a flag alias.
    """
    if not isinstance(flag, str):
        raise TypeError("dehyphenate() argument must be a string")
    return flag.lstrip("-")


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "dehyphenate",
    "UnsetType",
    "Unset",
)
