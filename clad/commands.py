"""
Clad command layer: match, validate and report.

What this module provides
- Command: an argument schema plus the program identity (name, description,
  version), able to
  • match(tokens): the core. Tokenize, match, validate and build ArgMatches;
    raise an input error or a help/version exit otherwise. Never prints.
  • parse(tokens): the CLI adapter around match(). Faults are printed and the
    process exits (shell=True, the default) or they are raised (shell=False),
    unless a fallback handler was registered.
  • usage()/help()/version_text(): rich renderables built from the schema.

Parsing phases
- tokenize: clad.tokens.preprocess() with the schema's alias lookups.
- match: walk the canonical tokens; every token resolves to a flag (by alias)
  or to the next open positional slot; values are collected per key.
- validate: in schema order, per argument: conflicts, requirements,
  cardinality, then (value-taking only) requiredness, default, validator.
- collect: Count / Absent / One / Many per key.

Each parse builds fresh occurrence/value state, so one Command can be used for
any number of sequential parses.

Quick start
    from clad import Command, Argument

    concat = Command({
        "sep": Argument("s", "sep", default="-", help="The separator"),
        "words": Argument(multi=True, required=True, help="Words to join"),
    }, name="concat")

    matches = concat.parse()          # sys.argv[1:], prints and exits on error
    print(matches.unwrap("sep").join(matches.unwrap("words")))
"""
import difflib
import os.path
import shlex
import sys
from collections import deque
from collections.abc import Iterable

from rich.console import Group
from rich.padding import Padding
from rich.table import Table
from rich.text import Text

from .faults import *
from .matches import ArgMatches, Absent, Count, Many, One
from .schema import Schema
from .tokens import preprocess
from .utils import *

_HELP = ("h", "help")
_VERSION = ("V", "version")


def _process_strings(metadata, /):
    """
    Validate the identity strings of a command.

    - name: required non-empty string (after trimming).
    - descr, version: Unset or non-empty strings; stored as None when Unset.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError("command 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError("command 'name' cannot be empty")
    metadata["name"] = name

    for field in ("descr", "version"):
        if not isinstance(value := metadata[field], str | Unset):
            raise TypeError(f"command '{field}' must be a string")
        elif isinstance(value, str) and not (value := value.strip()):
            raise ValueError(f"command '{field}' cannot be empty")
        metadata[field] = coalesce(value)


def _sanitize_tokens(prompt, /):
    """
    Normalize a prompt into a list of tokens.

    - str: shell-like string, split via shlex.split.
    - Iterable[str]: used as-is (tokens are not trimmed; empty strings are values too).
    """
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if not isinstance(prompt, Iterable):
        raise TypeError("tokens must be a string or an iterable of strings")
    tokens = list(prompt)
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("tokens must be a string or an iterable of strings")
    return tokens


class Command:
    """
    Argument schema bound to a program identity, with parsing and reporting.

    Properties (read-only)
    - schema: the normalized Schema.
    - name, descr, version: program identity used by help/version output.
    - shell: whether parse() prints and exits on faults (True) or raises them.

    Reserved flags
    - -h / --help: short / long help, unless the schema claims "h" / "help".
    - -V / --version: version output when a version is set, unless the schema
      claims "V" / "version".
    """

    name = mirror("name")
    descr = mirror("descr")
    version = mirror("version")
    shell = mirror("shell")

    def __new__(
            cls,
            arguments,
            /,
            name=Unset,
            descr=Unset,
            version=Unset,
            *,
            shell=True
    ):
        """
        Construct a command.

        Parameters
        - arguments: Mapping[str, Argument | Mapping] | Schema
          The argument table, in authoring order.
        - name: Unset | str
          Program name; defaults to __main__.__prog__ or the basename of sys.argv[0].
        - descr: Unset | str
          One-paragraph description shown by help.
        - version: Unset | str
          Program version; enables -V/--version.
        - shell: bool (keyword-only)
          True: parse() prints faults and exits. False: parse() raises them.

        Raises
        - SchemaError/TypeError/ValueError on a malformed table or identity.
        """
        main = __import__("__main__")
        metadata = {
            "schema": Schema(arguments),
            "name": coalesce(name, getattr(main, "__prog__", os.path.basename(sys.argv[0]) or "command")),
            "descr": descr,
            "version": version,
            "shell": bool(shell),
        }
        _process_strings(metadata)

        self = super().__new__(cls)
        self._fallback = Unset
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def schema(self):
        return self._schema

    def __repr__(self):
        return "command(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        yield "name", self._name
        yield "descr", self._descr
        yield "version", self._version
        yield "shell", self._shell
        yield "arguments", tuple(self._schema)

    def fallback(self, fallback, /):
        """
        Register a one-time handler receiving faults instead of the default
        print-and-exit / raise behavior of parse().

        Returns the same callable, enabling decorator-style usage: @cmd.fallback
        """
        if not callable(fallback):
            raise TypeError("command fallback must be callable")
        if self._fallback is not Unset:
            raise TypeError("command fallback cannot be overridden")
        self._fallback = fallback
        return fallback

    def trigger(self, fault, /):
        """
        Report a fault through the fallback, or through clad.faults.trigger().
        """
        if self._fallback is not Unset:
            return self._fallback(fault)
        trigger(fault, shell=self._shell)

    # ── parsing ─────────────────────────────────────────────────────────────

    def parse(self, tokens=Unset, /):
        """
        Parse tokens (sys.argv[1:] when Unset) and report faults.

        Returns ArgMatches on success. On a fault: prints and exits (shell),
        raises (not shell), or returns None after calling the fallback.
        """
        try:
            return self.match(sys.argv[1:] if tokens is Unset else tokens)
        except (CommandException, CommandExit) as fault:
            self.trigger(fault)
        return None

    def match(self, tokens, /):
        """
        Core parse: tokens -> ArgMatches.

        Raises
        - CommandException subclasses for invalid input (first violation wins).
        - HelpRequested / VersionRequested when a reserved flag is met.
        """
        tokens, separator = preprocess(
            _sanitize_tokens(tokens),
            self._schema.takes_value(short=True),
            self._schema.takes_value(short=False),
        )
        occurrences = dict.fromkeys(self._schema, 0)
        values = {key: [] for key in self._schema}

        self._match(tokens, separator, occurrences, values)
        self._validate(occurrences, values)
        return self._collect(occurrences, values)

    def _resolve(self, token, occurrences, literal):
        """
        Resolve one canonical token to a slot, or raise.
        """
        flagged = not literal and token.startswith("-") and len(token) > 1
        if not flagged:
            slot = self._schema.next_positional(occurrences)
        elif token.startswith("--"):
            slot = self._schema.find(token[2:], short=False)
        else:
            slot = self._schema.find(token[1:], short=True)

        if slot is not None:
            return slot
        if not flagged:
            raise UnexpectedValueError(
                f"unexpected value {token}",
                code=FaultCode.UNEXPECTED_VALUE,
                input=token,
            )
        if token in ("-h", "--help"):
            raise HelpRequested(self.help(long=token == "--help"), code=FaultCode.HELP)
        if token in ("-V", "--version") and self._version is not None:
            raise VersionRequested(self.version_text(), code=FaultCode.VERSION)

        hint = f"if you meant to supply `{token}` as a value rather than a flag, use `-- {token}`"
        if suggestions := difflib.get_close_matches(token, self._spellings(), 3):
            hint = f"did you mean `{suggestions[0]}`? " + hint
        raise UnknownOptionError(
            f"unknown option `{token}`",
            code=FaultCode.UNKNOWN_OPTION,
            hint=hint,
            input=token,
            suggestions=tuple(suggestions),
        )

    def _match(self, tokens, separator, occurrences, values):
        """
        Walk the canonical tokens, counting occurrences and collecting values.

        After the separator (the index of the raw "--", if any) every token goes
        to the next open positional. Any other "--" is an unknown option.
        """
        queue = deque(enumerate(tokens))
        literal = False
        while queue:
            index, token = queue.popleft()
            if index == separator:
                literal = True
                continue

            slot = self._resolve(token, occurrences, literal)
            occurrences[slot.key] += 1
            if not slot.takes_value:
                continue
            if slot.positional:
                values[slot.key].append(token)
            elif queue:
                values[slot.key].append(queue.popleft()[1])
            else:
                raise MissingValueError(
                    f"the argument {slot.display} requires a value but none was supplied",
                    code=FaultCode.MISSING_VALUE,
                    argument=slot.display,
                )

    def _validate(self, occurrences, values):
        """
        Enforce the per-argument rules in schema order; the first violation raises.

        A requirement on an argument that has a default is always satisfied.
        Defaults are seeded into `values` without counting as occurrences.
        """
        for key, slot in self._schema.items():
            if occurrences[key]:
                for other in slot.conflicts:
                    if occurrences[other]:
                        raise ConflictingArgumentsError(
                            f"{slot.display} cannot be used together with {self._schema[other].display}",
                            code=FaultCode.CONFLICTING_ARGUMENTS,
                            argument=slot.display,
                            other=self._schema[other].display,
                        )
                for other in slot.requires:
                    target = self._schema[other]
                    if not occurrences[other] and target.default is None:
                        raise MissingRequirementError(
                            f"using {slot.display} requires {target.display} to be present",
                            code=FaultCode.MISSING_REQUIREMENT,
                            argument=slot.display,
                            other=target.display,
                        )

            if not slot.multi and occurrences[key] > 1:
                raise DuplicatedArgumentError(
                    f"{slot.display} can be specified only once",
                    code=FaultCode.DUPLICATED_ARGUMENT,
                    argument=slot.display,
                )

            # flags without a value are always optional
            if not slot.takes_value:
                continue

            if slot.required and not occurrences[key]:
                raise MissingRequiredError(
                    f"missing required value for {slot.display}",
                    code=FaultCode.MISSING_REQUIRED,
                    argument=slot.display,
                )

            if not occurrences[key] and slot.default is not None:
                values[key].append(slot.default)

            if slot.validator is None:
                continue
            for value in values[key]:
                if (message := slot.validator(value)) is not None:
                    raise InvalidValueError(
                        f"failed to validate the '{value}' value of {slot.display}: {message}",
                        code=FaultCode.INVALID_VALUE,
                        argument=slot.display,
                        input=value,
                    )

    def _collect(self, occurrences, values):
        matches = {}
        for key, slot in self._schema.items():
            if not slot.takes_value:
                matches[key] = Count(occurrences[key])
            elif slot.multi:
                matches[key] = Many(tuple(values[key]))
            elif values[key]:
                matches[key] = One(values[key][0])
            else:
                matches[key] = Absent()
        return ArgMatches(matches)

    # ── rendering ───────────────────────────────────────────────────────────

    def _reserved(self, aliases, /):
        """
        Display name for the reserved (short, long) pair, minus what the schema claims.
        """
        short, long = aliases
        names = []
        if self._schema.find(short, short=True) is None:
            names.append("-" + short)
        if self._schema.find(long, short=False) is None:
            names.append("--" + long)
        return " ".join(names)

    def _spellings(self):
        spellings = ["-" + alias for alias in self._schema.shorts]
        spellings += ["--" + alias for alias in self._schema.longs]
        spellings += self._reserved(_HELP).split()
        if self._version is not None:
            spellings += self._reserved(_VERSION).split()
        return spellings

    def usage(self):
        """
        One-line usage string, e.g. "usage: concat [-s --sep <sep>] <words...>".
        """
        parts = ["usage:", self._name]
        for slot in self._schema.values():
            if slot.required:
                parts.append(slot.display)
            elif slot.multi and not slot.takes_value:
                parts.append("[%s]..." % slot.display)
            else:
                parts.append("[%s]" % slot.display)
        return " ".join(parts)

    def version_text(self):
        return Text(f"{self._name} {self._version}" if self._version is not None else self._name)

    def help(self, *, long=False):
        """
        Help renderable: identity, usage and one row per argument.

        Short help (long=False) shows the first line of each description. Long
        help shows full descriptions plus possible values, defaults and
        required marks.
        """
        sections = [self.version_text()]
        if self._descr is not None:
            sections.append(Text(self._descr if long else self._descr.splitlines()[0]))
        sections += [Text(), Text(self.usage()), Text(), Text("arguments:")]

        table = Table.grid(padding=(0, 3))
        table.add_column(no_wrap=True)
        table.add_column()
        for slot in self._schema.values():
            table.add_row(Text(slot.display), Text(self._describe(slot, long)))
        if help := self._reserved(_HELP):
            table.add_row(Text(help), Text("print help information"))
        if self._version is not None and (version := self._reserved(_VERSION)):
            table.add_row(Text(version), Text("print version information"))

        sections.append(Padding(table, (0, 0, 0, 2)))
        return Group(*sections)

    def _describe(self, slot, long, /):
        if not long:
            return slot.help.splitlines()[0] if slot.help else ""
        lines = [slot.help] if slot.help else []
        if slot.possible:
            lines.append("possible values: %s" % ", ".join(slot.possible))
        if slot.default is not None:
            lines.append("default: %s" % slot.default)
        if slot.required:
            lines.append("required")
        return "\n".join(lines)


__all__ = (
    "Command",
)
