"""
Clad parse results.

Every argument of a successful parse maps to exactly one of four shapes:
- Count(count): an argument without a value; how many times it was given.
- Absent(): a single-value argument that was not given and has no default.
- One(value): a single-value argument's value.
- Many(values): a multi-value argument's values, in input order.

The shapes form a closed set; consumers are expected to match on them:

    match matches["words"]:
        case Many(words): ...
        case One(word): ...

`ArgMatches.plain()` unwraps everything into ordinary Python values
(int, None, str, list[str]) for callers that do not care about the shape.
"""
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import final


class Value(ABC):
    """
    Base of the closed set of result shapes. Not subclassable outside this module.
    """
    __slots__ = ()

    def __init_subclass__(cls, **options):
        if cls.__module__ != __name__:
            raise TypeError(f"type {cls.__name__!r} is not an acceptable base type")
        super().__init_subclass__(**options)

    @property
    @abstractmethod
    def value(self):
        """
        The plain Python value (int, None, str or list[str]).
        """


@final
@dataclass(frozen=True, slots=True)
class Count(Value):
    count: int

    @property
    def value(self):
        return self.count


@final
@dataclass(frozen=True, slots=True)
class Absent(Value):

    @property
    def value(self):
        return None


@final
@dataclass(frozen=True, slots=True)
class One(Value):
    text: str

    @property
    def value(self):
        return self.text


@final
@dataclass(frozen=True, slots=True)
class Many(Value):
    texts: tuple[str, ...]

    @property
    def value(self):
        return list(self.texts)


class ArgMatches(Mapping):
    """
    Read-only mapping of argument key -> Value, in schema order.
    """

    def __init__(self, values, /):
        for key, value in values.items():
            if not isinstance(value, Value):
                raise TypeError(f"match for {key!r} must be a value, not {type(value).__name__}")
        self._values = MappingProxyType(dict(values))

    def __getitem__(self, key):
        return self._values[key]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __eq__(self, other):
        if isinstance(other, ArgMatches):
            return dict(self._values) == dict(other._values)
        return NotImplemented

    __hash__ = None

    def __repr__(self):
        return f"arg-matches({dict(self._values)!r})"

    def unwrap(self, key, /):
        """
        Plain Python value of one argument (int, None, str or list[str]).
        """
        return self._values[key].value

    def plain(self):
        """
        Plain Python values of every argument, as a new dict.
        """
        return {key: value.value for key, value in self._values.items()}


__all__ = (
    "Value",
    "Count",
    "Absent",
    "One",
    "Many",
    "ArgMatches",
)
