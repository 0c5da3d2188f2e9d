"""
Clad faults (errors, exits and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every schema and input fault.
- SchemaError: programmer mistakes in an argument table (raised at construction).
- CommandException (alias InputError) and its subclasses: user mistakes on the
  command line, one class per failure kind.
- CommandExit: successful short-circuits (help and version output).
- SchemaWarning: advisories about ignored authoring options.
- trigger(): central entry point to surface a fault.

Protocol
- Every fault provides __trigger__() and __replace__(**options).
- With shell=False (the default carried by the fault itself), __trigger__ raises.
- With shell=True, __trigger__ renders through rich on standard output and
  terminates the process (status 1 for errors, 0 for exits).
"""
import sys
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - schema (101xx): problems in the argument table, found at construction.
    - input (111xx): problems in the command line, found while parsing.
    - exits (120xx): help/version short-circuits.
    """
    # --- schema errors (101xx) ---
    EMPTY_FLAG                 = 10101
    DUPLICATED_FLAG            = 10102
    DUPLICATED_POSSIBLE        = 10103
    SELF_REFERENCE             = 10104
    UNKNOWN_REFERENCE          = 10105
    MISPLACED_MULTI_POSITIONAL = 10106
    EMPTY_KEY                  = 10107

    # --- input errors (111xx) ---
    UNKNOWN_OPTION             = 11101
    UNEXPECTED_VALUE           = 11102
    MISSING_VALUE              = 11103
    DUPLICATED_ARGUMENT        = 11104
    MISSING_REQUIRED           = 11105
    CONFLICTING_ARGUMENTS      = 11106
    MISSING_REQUIREMENT        = 11107
    INVALID_VALUE              = 11108

    # --- exits (120xx) ---
    HELP                       = 12001
    VERSION                    = 12002


class SchemaError(ValueError):
    """
    A malformed argument table. Always a bug in the calling program.
    """

    def __init__(self, message, /, code=Unset):
        super().__init__(message)
        self.message = message
        self.code = code


class SchemaWarning(UserWarning):
    """
    An authoring option that has no effect and was ignored.
    """


def _console():
    # standard output, no highlighting, no wrapping: messages are shown verbatim
    return Console(highlight=False, soft_wrap=True)


class CommandException(Exception):
    """
    Base class for command-line input errors.

    options
    - code: FaultCode of the failure.
    - hint: optional one-line suggestion shown below the message.
    - argument: display name of the argument involved (when any).
    - shell: render and exit instead of raising (set by the command).
    - suggest: append "run with --help for more info" when rendered.
    """

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({"shell": False, "suggest": True} | options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def hint(self):
        return self.options.get("hint")

    @property
    def argument(self):
        return self.options.get("argument")

    def __rich__(self):
        lines = [Text("error: " + self.message)]
        if self.hint:
            lines.append(Text(self.hint))
        if self.options["suggest"]:
            lines.append(Text("run with --help for more info"))
        return Group(*lines)

    def __trigger__(self):
        if not self.options["shell"]:
            raise self from None
        _console().print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


InputError = CommandException


class UnknownOptionError(CommandException): ...
class UnexpectedValueError(CommandException): ...
class MissingValueError(CommandException): ...
class DuplicatedArgumentError(CommandException): ...
class MissingRequiredError(CommandException): ...
class ConflictingArgumentsError(CommandException): ...
class MissingRequirementError(CommandException): ...
class InvalidValueError(CommandException): ...


class CommandExit(Exception):
    """
    A successful short-circuit of parsing (help or version was requested).

    The renderable is printed on standard output and the process exits with
    status 0 in shell mode; otherwise the exit is raised so embedding code can
    inspect `renderable`.
    """

    def __init__(self, renderable, /, **options):
        super().__init__("exit requested")
        self.renderable = renderable
        self.options = MappingProxyType({"shell": False} | options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def text(self):
        """
        The renderable as plain text (what shell mode prints).
        """
        console = _console()
        with console.capture() as capture:
            console.print(self.renderable)
        return capture.get()

    def __rich__(self):
        return self.renderable

    def __trigger__(self):
        if not self.options["shell"]:
            raise self from None
        _console().print(self)
        sys.exit(0)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.renderable, **{**self.options, **overrides})


class HelpRequested(CommandExit): ...
class VersionRequested(CommandExit): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into a copy of the fault before triggering.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "SchemaError",
    "SchemaWarning",
    "CommandException",
    "InputError",
    "UnknownOptionError",
    "UnexpectedValueError",
    "MissingValueError",
    "DuplicatedArgumentError",
    "MissingRequiredError",
    "ConflictingArgumentsError",
    "MissingRequirementError",
    "InvalidValueError",
    "CommandExit",
    "HelpRequested",
    "VersionRequested",
    "trigger",
)
