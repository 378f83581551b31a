"""Helpers that connect parsed commands with scanning and output."""

from __future__ import annotations

import sys
from typing import Iterable, Optional, TextIO

from memori.addresses import AddressSet, ScanExpr, ScanOp
from memori.commands import FilterCommand, FilterOperator

_RED = "\x1b[31m"
_RESET_FG = "\x1b[39m"

_OPS = {
    FilterOperator.LESS: ScanOp.LESS,
    FilterOperator.LESS_EQUAL: ScanOp.LESS_EQUAL,
    FilterOperator.GREATER: ScanOp.GREATER,
    FilterOperator.GREATER_EQUAL: ScanOp.GREATER_EQUAL,
    FilterOperator.EQUAL: ScanOp.EQUAL,
    FilterOperator.NOT_EQUAL: ScanOp.NOT_EQUAL,
    FilterOperator.CHANGED: ScanOp.CHANGED,
    FilterOperator.NOT_CHANGED: ScanOp.NOT_CHANGED,
    FilterOperator.UNKNOWN: ScanOp.UNKNOWN,
}
_WITHOUT_OPERAND = {ScanOp.CHANGED, ScanOp.NOT_CHANGED, ScanOp.UNKNOWN}


def filter_to_scan_expr(command: FilterCommand) -> ScanExpr:
    """Turn a filter command into a scan expression.

    Comparisons need an operand and raise ``ValueError`` without one.
    """
    op = _OPS[command.operator]
    if op in _WITHOUT_OPERAND:
        return ScanExpr(op)
    if command.operand is None:
        raise ValueError(f"filter {command.operator.value} needs an operand")
    return ScanExpr(op, command.operand)


def format_rows(rows: Iterable[tuple[int, str, str]]) -> list[str]:
    """Format ``(address, old, current)`` rows, highlighting changed values."""
    lines = []
    for idx, (addr, old, new) in enumerate(rows):
        shown = new if old == new else f"{_RED}{new}{_RESET_FG}"
        lines.append(f"{idx:3}: {addr:x}\t{old}\t{shown}")
    return lines


def print_addrs(addresses: AddressSet, out: Optional[TextIO] = None) -> None:
    """Print every found address with its scanned and current value."""
    stream = out if out is not None else sys.stdout
    for line in format_rows(addresses.rows()):
        print(line, file=stream)