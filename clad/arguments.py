r"""
Clad argument specifications and value validators.

Overview
- Argument: one entry of an argument table. Flagged (one or more aliases such
  as "-o"/"--out") or positional (no aliases at all).
- Validators
  • Membership: generated from `possible`; an inspectable membership check.
  • Custom: wraps a caller-supplied `str -> str | None` callable.

Normalization (applied on construction)
- Aliases are de-hyphenated ("--out" and "out" are the same alias) and must be
  non-empty afterwards; duplicates are rejected.
- `possible` replaces any custom validator with a Membership check.
- `possible`, `validate`, `default` and being positional all force
  takes_value=True; `default` also forces required=False.

Introspection & representation
- ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes the
  fields declared in __introspectable__ as read-only properties.

Quick example:
    >>> from clad.arguments import Argument
    >>> bump = Argument("b", "bump", possible=["major", "minor", "patch"], ignore_case=True)
    >>> bump.takes_value, bump.validator("MINOR")
    (True, None)
"""
import functools
import operator
import re
import warnings
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import final

from .faults import FaultCode, SchemaError, SchemaWarning
from .utils import *


class ArgumentType(type):
    """
    Metaclass that turns specs into sealed, introspectable records.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations.
    - Seal the resulting class against subclassing.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - argument(flags=('o', 'out'), takes_value=True, ...)
            """
            fields = ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            return f"{type(self).__typename__}({fields})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        @rename("__init_subclass__")
        def __init_subclass__(cls, **options):  # NOQA: F-841
            raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
        self.__init_subclass__ = classmethod(__init_subclass__)

        return self


class Validator(ABC):
    """
    A value check run on every collected value of an argument.

    Calling a validator returns None when the value is accepted, otherwise the
    message explaining why it was rejected.
    """
    __slots__ = ()

    @abstractmethod
    def __call__(self, value, /):
        raise NotImplementedError


@final
class Membership(Validator):
    """
    Accept only values listed in `values`, optionally ignoring case.
    """
    __slots__ = ("values", "ignore_case")
    __match_args__ = ("values", "ignore_case")

    def __init__(self, values, /, ignore_case=False):
        self.values = tuple(values)
        self.ignore_case = bool(ignore_case)

    def __call__(self, value, /):
        if self.ignore_case:
            accepted = value.casefold() in (possible.casefold() for possible in self.values)
        else:
            accepted = value in self.values
        if accepted:
            return None
        return "value must be one of [%s]" % ", ".join(self.values)

    def __eq__(self, other):
        if not isinstance(other, Membership):
            return NotImplemented
        return (self.values, self.ignore_case) == (other.values, other.ignore_case)

    def __hash__(self):
        return hash((self.values, self.ignore_case))

    def __repr__(self):
        return f"membership(values={self.values!r}, ignore_case={self.ignore_case!r})"


@final
class Custom(Validator):
    """
    Delegate to a caller-supplied callable returning None or a message.

    The result is checked on every call: anything but None or a string (a bool
    included) is a programming error and raises TypeError.
    """
    __slots__ = ("function",)
    __match_args__ = ("function",)

    def __init__(self, function, /):
        if not callable(function):
            raise TypeError("custom validator must be callable")
        self.function = function

    def __call__(self, value, /):
        result = self.function(value)
        if result is not None and not isinstance(result, str):
            raise TypeError(f"validator {self.function!r} must return a string or None, not {type(result).__name__}")
        return result

    def __repr__(self):
        return f"custom(function={self.function!r})"


def _sanitize_flags(cls, metadata, /):
    """
    Internal: de-hyphenate and validate the aliases of an argument.

    - every alias must be a string, non-empty once its leading hyphens are gone.
    - aliases must be unique within the argument ("-o" and "o" collide).
    - the aliases are stored as a tuple, in authoring order.
    """
    flags = []
    for flag in metadata["flags"]:
        if not isinstance(flag, str):
            raise TypeError(f"{cls.__typename__} flags must be strings")
        elif not (alias := dehyphenate(flag)):
            raise SchemaError(f"{cls.__typename__} contains an empty flag ({flag!r})", code=FaultCode.EMPTY_FLAG)
        elif alias in flags:
            raise SchemaError(f"{cls.__typename__} flags cannot contain duplicates ({alias!r})", code=FaultCode.DUPLICATED_FLAG)
        flags.append(alias)
    metadata["flags"] = tuple(flags)


def _sanitize_help(cls, metadata, /):
    """
    Internal: help text is optional; when given it must be a non-empty string.
    """
    if not isinstance(help := metadata["help"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'help' must be a string")
    elif isinstance(help, str) and not (help := help.strip()):
        raise ValueError(f"{cls.__typename__} 'help' cannot be empty")
    metadata["help"] = coalesce(help)


def _sanitize_value_metadata(cls, metadata, /):
    """
    Internal: normalize everything that decides whether and how a value is taken.

    Responsibilities
    - default: Unset or a string; stored as None when Unset.
    - possible: iterable of unique strings, stored as a tuple in authoring order.
    - validate: Unset or callable; replaced by a Membership check when `possible`
      is non-empty (a SchemaWarning is emitted when both were given).
    - takes_value is forced on for positionals, `possible`, validators and defaults.
    - required is forced off by a default, and has no effect without a value.

    Side effects
    - Mutates the provided metadata dict in place ('validate' becomes 'validator').
    """
    if not isinstance(default := metadata["default"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'default' must be a string")
    metadata["default"] = coalesce(default)

    if isinstance(possible := metadata["possible"], str) or not isinstance(possible, Iterable):
        raise TypeError(f"{cls.__typename__} 'possible' must be an iterable of strings")
    sanitized = []
    for value in possible:
        if not isinstance(value, str):
            raise TypeError(f"{cls.__typename__} 'possible' must be an iterable of strings")
        if value in sanitized:
            raise SchemaError(f"{cls.__typename__} 'possible' cannot contain duplicates ({value!r})", code=FaultCode.DUPLICATED_POSSIBLE)
        sanitized.append(value)
    metadata["possible"] = possible = tuple(sanitized)

    validate = metadata.pop("validate")
    if possible:
        if validate is not Unset:
            warnings.warn(SchemaWarning(f"{cls.__typename__} 'validate' is ignored because 'possible' is given"), stacklevel=3)
        metadata["validator"] = Membership(possible, metadata["ignore_case"])
    elif validate is not Unset:
        metadata["validator"] = validate if isinstance(validate, Validator) else Custom(validate)
    else:
        metadata["validator"] = None

    metadata["takes_value"] = (
        metadata["takes_value"]
        or not metadata["flags"]
        or metadata["validator"] is not None
        or metadata["default"] is not None
    )

    if metadata["required"] and metadata["default"] is not None:
        warnings.warn(SchemaWarning(f"{cls.__typename__} 'required' is ignored because 'default' is given"), stacklevel=3)
        metadata["required"] = False
    elif metadata["required"] and not metadata["takes_value"]:
        warnings.warn(SchemaWarning(f"{cls.__typename__} 'required' has no effect on a flag without a value"), stacklevel=3)


def _sanitize_references(cls, metadata, /):
    """
    Internal: `conflicts` and `requires` are iterables of argument keys.

    Only the shape is checked here; whether the keys exist (and are not the
    argument itself) is decided by the schema, which knows every key.
    """
    for field in ("conflicts", "requires"):
        if isinstance(references := metadata[field], str) or not isinstance(references, Iterable):
            raise TypeError(f"{cls.__typename__} '{field}' must be an iterable of argument keys")
        sanitized = []
        for reference in references:
            if not isinstance(reference, str):
                raise TypeError(f"{cls.__typename__} '{field}' must be an iterable of argument keys")
            if reference not in sanitized:
                sanitized.append(reference)
        metadata[field] = tuple(sanitized)


class Argument(metaclass=ArgumentType):
    """
    Specification of one named (flagged) or positional argument.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes
      on instances, mirroring the sanitized metadata values.
    - positional, shorts and longs are derived from the aliases.
    """

    __introspectable__ = (
        "flags",
        "takes_value",
        "multi",
        "required",
        "default",
        "possible",
        "ignore_case",
        "validator",
        "conflicts",
        "requires",
        "help",
    )

    __displayable__ = (
        "flags",
        "takes_value",
        "multi",
        "required",
        "default",
        "possible",
        "conflicts",
        "requires",
    )

    def __new__(
            cls,
            *flags,
            takes_value=False,
            multi=False,
            required=False,
            default=Unset,
            possible=(),
            ignore_case=False,
            validate=Unset,
            conflicts=(),
            requires=(),
            help=Unset
    ):
        """
        Construct an argument spec.

        Parameters
        - flags: zero or more str
          Aliases, with or without hyphens. One character makes a short alias,
          more make a long one. No aliases at all makes the argument positional.
        - takes_value: bool
          Whether a value follows the flag. Forced on where implied.
        - multi: bool
          Whether the argument may be given more than once.
        - required: bool
          Whether a value must be supplied. Only meaningful with a value.
        - default: Unset | str
          Value used when the argument is absent.
        - possible: Iterable[str]
          Allowed values; checked with `ignore_case` folding.
        - validate: Unset | Callable[[str], str | None]
          Custom check; returns None when valid, else the failure message.
          Any other result (True/False included) raises TypeError when the
          value is checked.
        - conflicts / requires: Iterable[str]
          Keys of other arguments that must be absent / present alongside.
        - help: Unset | str
          Description used by help output.
        """
        metadata = {
            "flags": flags,
            "takes_value": bool(takes_value),
            "multi": bool(multi),
            "required": bool(required),
            "default": default,
            "possible": possible,
            "ignore_case": bool(ignore_case),
            "validate": validate,
            "conflicts": conflicts,
            "requires": requires,
            "help": help,
        }
        _sanitize_flags(cls, metadata)
        _sanitize_help(cls, metadata)
        _sanitize_value_metadata(cls, metadata)
        _sanitize_references(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def positional(self):
        return not self._flags

    @property
    def shorts(self):
        return tuple(flag for flag in self._flags if len(flag) == 1)

    @property
    def longs(self):
        return tuple(flag for flag in self._flags if len(flag) > 1)


__all__ = (
    "Argument",
    "Validator",
    "Membership",
    "Custom",
)
