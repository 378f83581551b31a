"""Parsing of the interactive command language."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union

from memori.memory_reader import ValueType


class CommandError(Exception):
    """Raised when a line is not a valid command; the message explains why."""


class FilterOperator(Enum):
    """Comparison used to filter scanned addresses."""

    LESS = "less"
    LESS_EQUAL = "less-equal"
    GREATER = "greater"
    GREATER_EQUAL = "greater-equal"
    EQUAL = "equal"
    NOT_EQUAL = "not-equal"
    CHANGED = "changed"
    NOT_CHANGED = "not-changed"
    UNKNOWN = "unknown"

    @property
    def symbol(self) -> str | None:
        return _SYMBOLS.get(self.value)

    @classmethod
    def from_token(cls, token: str) -> FilterOperator:
        """Look an operator up by name or by symbol such as ``<=``."""
        try:
            return cls(_ALIASES.get(token, token))
        except ValueError:
            names = ", ".join(op.value for op in cls)
            raise CommandError(
                f"invalid value '{token}' for '<OPERATOR>'\n  [possible values: {names}]"
            ) from None


_SYMBOLS = {
    "less": "<",
    "less-equal": "<=",
    "greater": ">",
    "greater-equal": ">=",
    "equal": "==",
    "not-equal": "!=",
}
_ALIASES = {symbol: name for name, symbol in _SYMBOLS.items()}


@dataclass(frozen=True)
class TypeCommand:
    value_type: ValueType


@dataclass(frozen=True)
class ProcessCommand:
    pid: int


@dataclass(frozen=True)
class FilterCommand:
    operator: FilterOperator
    operand: str | None = None


@dataclass(frozen=True)
class PrintCommand:
    pass


@dataclass(frozen=True)
class SelectCommand:
    index: int


@dataclass(frozen=True)
class UnselectCommand:
    index: int


@dataclass(frozen=True)
class SetCommand:
    index: int
    value: str


@dataclass(frozen=True)
class FreezeCommand:
    index: int


@dataclass(frozen=True)
class ExitCommand:
    pass


Command = Union[
    TypeCommand,
    ProcessCommand,
    FilterCommand,
    PrintCommand,
    SelectCommand,
    UnselectCommand,
    SetCommand,
    FreezeCommand,
    ExitCommand,
]

_UINT = re.compile(r"\+?[0-9]+")


def _uint(text: str, bits: int, arg: str) -> int:
    if not _UINT.fullmatch(text) or int(text) >= 1 << bits:
        raise CommandError(f"invalid value '{text}' for '<{arg}>': invalid digit or out of range")
    return int(text)


@dataclass(frozen=True)
class _Spec:
    name: str
    aliases: tuple[str, ...]
    about: str
    required: tuple[str, ...]
    optional: tuple[str, ...]
    build: Callable[[list], Command]

    @property
    def usage(self) -> str:
        parts = [self.name]
        parts += [f"<{arg}>" for arg in self.required]
        parts += [f"[{arg}]" for arg in self.optional]
        return " ".join(parts)

    @property
    def help(self) -> str:
        return f"{self.about}\n\nUsage: {self.usage}"

    def parse(self, args: list[str]) -> Command:
        if len(args) < len(self.required):
            missing = self.required[len(args)]
            raise CommandError(
                "the following required arguments were not provided:\n"
                f"  <{missing}>\n\nUsage: {self.usage}"
            )
        limit = len(self.required) + len(self.optional)
        if len(args) > limit:
            raise CommandError(
                f"unexpected argument '{args[limit]}' found\n\nUsage: {self.usage}"
            )
        return self.build(args + [None] * (limit - len(args)))


def _build_type(args: list) -> TypeCommand:
    try:
        return TypeCommand(ValueType(args[0]))
    except ValueError:
        names = ", ".join(t.value for t in ValueType)
        raise CommandError(
            f"invalid value '{args[0]}' for '<VAL_TYPE>'\n  [possible values: {names}]"
        ) from None


_SPECS = (
    _Spec("type", ("t",), "Change type of the variables we scan for",
          ("VAL_TYPE",), (), _build_type),
    _Spec("process", ("proc",), "PID of the process to scan the memory of",
          ("PID",), (), lambda a: ProcessCommand(_uint(a[0], 32, "PID"))),
    _Spec("filter", ("f",), "Expression by which to filter addresses",
          ("OPERATOR",), ("OPERAND",),
          lambda a: FilterCommand(FilterOperator.from_token(a[0]), a[1])),
    _Spec("print", ("p",), "Print addresses", (), (), lambda a: PrintCommand()),
    _Spec("select", ("s",), "Add address to selected",
          ("TO_SELECT",), (), lambda a: SelectCommand(_uint(a[0], 64, "TO_SELECT"))),
    _Spec("unselect", ("u", "uns"), "Remove address from selected",
          ("TO_UNSELECT",), (),
          lambda a: UnselectCommand(_uint(a[0], 64, "TO_UNSELECT"))),
    _Spec("set", (), "Set selected address to value",
          ("SELECTED", "VALUE"), (),
          lambda a: SetCommand(_uint(a[0], 64, "SELECTED"), a[1])),
    _Spec("freeze", (), "Freeze selected address so the value doesn't change",
          ("SELECTED",), (), lambda a: FreezeCommand(_uint(a[0], 64, "SELECTED"))),
    _Spec("exit", ("quit",), "Exit the program", (), (), lambda a: ExitCommand()),
)

_BY_NAME = {name: spec for spec in _SPECS for name in (spec.name, *spec.aliases)}


def _help_text() -> str:
    lines = ["Usage: <COMMAND>", "", "Commands:"]
    for spec in _SPECS:
        about = spec.about
        if spec.aliases:
            about += f" [aliases: {', '.join(spec.aliases)}]"
        lines.append(f"  {spec.name:<9} {about}")
    lines.append(f"  {'help':<9} Print this message or the help of the given subcommand(s)")
    return "\n".join(lines)


def parse_command(line: str) -> Command:
    """Parse one input line into a command.

    Raises ``CommandError`` for anything that is not a valid command,
    including requests for help, whose message is the help text.
    """
    tokens = line.split()
    if not tokens:
        raise CommandError(_help_text())

    name, *args = tokens
    if name == "help":
        if args and args[0] in _BY_NAME:
            raise CommandError(_BY_NAME[args[0]].help)
        raise CommandError(_help_text())

    spec = _BY_NAME.get(name)
    if spec is None:
        raise CommandError(f"unrecognized subcommand '{name}'\n\n{_help_text()}")
    if "-h" in args or "--help" in args:
        raise CommandError(spec.help)
    return spec.parse(args)