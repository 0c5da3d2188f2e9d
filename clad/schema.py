"""
Clad schema: the normalized, immutable argument table.

What this module provides
- Slot: one argument bound to its key, with its display name and its
  symmetrized conflicts.
- Schema: ordered, read-only mapping of key -> Slot built from the caller's
  mapping of key -> Argument (or plain mapping of Argument keywords).

Checks performed on construction (all raise SchemaError)
- keys are non-empty strings.
- every alias belongs to exactly one argument.
- `conflicts`/`requires` name existing keys other than the argument's own.
- a positional that takes several values (multi) is the last positional.

The schema never changes after construction; parse state lives elsewhere, so a
single schema can serve any number of parses.
"""
from collections.abc import Mapping
from types import MappingProxyType

from .arguments import Argument
from .faults import FaultCode, SchemaError
from .utils import *


class Slot:
    """
    An argument bound to its key inside a schema.

    Attributes other than the ones below are read from the underlying
    Argument (takes_value, multi, required, default, validator, ...).
    """
    __slots__ = ("key", "argument", "display", "conflicts")

    def __init__(self, key, argument, /):
        self.key = key
        self.argument = argument
        self.display = _display(key, argument)
        self.conflicts = argument.conflicts

    def __getattr__(self, name):
        if name == "argument":
            raise AttributeError(name)
        return getattr(self.argument, name)

    def __repr__(self):
        return f"slot({self.key!r}, display={self.display!r})"


def _display(key, argument, /):
    """
    Usage/error name of an argument.

    - flagged: "-x --long", "-x" or "--long" (first short, first long alias),
      followed by " <key>" or " <key...>" when a value is taken.
    - positional: "<key>" or "<key...>".
    """
    metavar = "<%s%s>" % (key, "..." if argument.multi else "")
    if argument.positional:
        return metavar
    names = []
    if argument.shorts:
        names.append("-" + argument.shorts[0])
    if argument.longs:
        names.append("--" + argument.longs[0])
    if argument.takes_value:
        names.append(metavar)
    return " ".join(names)


def _process_arguments(arguments, /):
    """
    Bind every authored argument to its key, converting plain mappings.
    """
    slots = {}
    for key, argument in arguments.items():
        if not isinstance(key, str):
            raise TypeError("schema keys must be strings")
        elif not key.strip():
            raise SchemaError("schema keys cannot be empty", code=FaultCode.EMPTY_KEY)
        if isinstance(argument, Mapping):
            options = dict(argument)
            flags = options.pop("flags", ())
            if isinstance(flags, str):
                raise TypeError(f"argument {key!r} 'flags' must be a sequence of strings")
            argument = Argument(*flags, **options)
        elif not isinstance(argument, Argument):
            raise TypeError(f"argument {key!r} must be an argument or a mapping of argument options")
        slots[key] = Slot(key, argument)
    return slots


def _process_aliases(slots, /):
    """
    Build the alias -> key maps, rejecting aliases claimed twice.
    """
    shorts = {}
    longs = {}
    for key, slot in slots.items():
        for alias in slot.flags:
            aliases = shorts if len(alias) == 1 else longs
            if alias in aliases:
                raise SchemaError(
                    f"flag {alias!r} of {key!r} is already used by {aliases[alias]!r}",
                    code=FaultCode.DUPLICATED_FLAG
                )
            aliases[alias] = key
    return shorts, longs


def _process_references(slots, /):
    """
    Validate `conflicts`/`requires` targets and make conflicts symmetric.

    If `a` conflicts with `b`, `b` conflicts with `a` as well; the reverse
    entries are appended after the authored ones.
    """
    for key, slot in slots.items():
        for field in ("conflicts", "requires"):
            for reference in getattr(slot.argument, field):
                if reference == key:
                    raise SchemaError(
                        f"argument {key!r} cannot reference itself in '{field}'",
                        code=FaultCode.SELF_REFERENCE
                    )
                if reference not in slots:
                    raise SchemaError(
                        f"argument {key!r} references an unknown argument {reference!r} in '{field}'",
                        code=FaultCode.UNKNOWN_REFERENCE
                    )

    for key, slot in slots.items():
        for reference in slot.argument.conflicts:
            other = slots[reference]
            if key not in other.conflicts:
                other.conflicts += (key,)


def _process_positionals(slots, /):
    """
    A multi positional must be the last positional in authoring order.
    """
    multi = None
    for slot in slots.values():
        if not slot.positional:
            continue
        if multi is not None:
            raise SchemaError(
                f"positionals with multiple values are only allowed as the last positional ({multi.display})",
                code=FaultCode.MISPLACED_MULTI_POSITIONAL
            )
        if slot.multi:
            multi = slot


class Schema(Mapping):
    """
    Ordered, immutable table of argument slots.

    Order is the authoring order: it decides positional assignment and the
    order of help output and validation.
    """

    shorts = mirror("shorts")
    longs = mirror("longs")

    def __init__(self, arguments, /):
        if isinstance(arguments, Schema):
            arguments = {key: slot.argument for key, slot in arguments.items()}
        elif not isinstance(arguments, Mapping):
            raise TypeError("schema arguments must be a mapping of keys to arguments")
        slots = _process_arguments(arguments)
        shorts, longs = _process_aliases(slots)
        _process_references(slots)
        _process_positionals(slots)

        self._slots = MappingProxyType(slots)
        self._shorts = shorts
        self._longs = longs
        self._positionals = tuple(slot for slot in slots.values() if slot.positional)

    def __getitem__(self, key):
        return self._slots[key]

    def __iter__(self):
        return iter(self._slots)

    def __len__(self):
        return len(self._slots)

    def __repr__(self):
        return f"schema({list(self._slots.values())!r})"

    @property
    def positionals(self):
        return self._positionals

    def takes_value(self, *, short):
        """
        alias -> takes_value lookup for short (or long) aliases, as consumed
        by the tokenizer.
        """
        aliases = self._shorts if short else self._longs
        return {alias: self._slots[key].takes_value for alias, key in aliases.items()}

    def find(self, alias, /, *, short):
        """
        Return the slot owning a (de-hyphenated) short or long alias, or None.
        """
        aliases = self._shorts if short else self._longs
        key = aliases.get(alias)
        return self._slots[key] if key is not None else None

    def next_positional(self, occurrences, /):
        """
        Return the next open positional slot, or None.

        The first positional not seen yet (per `occurrences`, key -> count) is
        open; once every positional was seen, the last one stays open only if
        it is multi.
        """
        for slot in self._positionals:
            if not occurrences[slot.key]:
                return slot
        if self._positionals and self._positionals[-1].multi:
            return self._positionals[-1]
        return None


__all__ = (
    "Slot",
    "Schema",
)
