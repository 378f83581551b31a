"""Scanning a process's memory for values and narrowing the results down."""

from __future__ import annotations

import operator
import os
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Iterator, Optional

from memori.memory_map import MemoryMap
from memori.memory_reader import MemoryReader, ValueType
from memori.process import Process

ProgressCallback = Callable[[int, int], None]

# Width of a machine word, used to estimate how much work a scan is.
_WORD_SIZE = 8
# Bytes fetched from the target at a time during an initial scan.
_CHUNK_SIZE = 1 << 20
_STRUCT_CODES = {1: "b", 2: "h", 4: "i", 8: "q"}


class ScanOp(Enum):
    """The kinds of filter expression."""

    LESS = "less"
    LESS_EQUAL = "less-equal"
    GREATER = "greater"
    GREATER_EQUAL = "greater-equal"
    EQUAL = "equal"
    NOT_EQUAL = "not-equal"
    CHANGED = "changed"
    NOT_CHANGED = "not-changed"
    REFRESH = "refresh"
    UNKNOWN = "unknown"


_COMPARISONS = {
    ScanOp.LESS: operator.lt,
    ScanOp.LESS_EQUAL: operator.le,
    ScanOp.GREATER: operator.gt,
    ScanOp.GREATER_EQUAL: operator.ge,
    ScanOp.EQUAL: operator.eq,
    ScanOp.NOT_EQUAL: operator.ne,
}


@dataclass(frozen=True)
class ScanExpr:
    """A filter expression; comparisons carry their operand as text."""

    op: ScanOp
    operand: Optional[str] = None

    def __post_init__(self) -> None:
        if self.op in _COMPARISONS and self.operand is None:
            raise ValueError(f"{self.op.value} needs an operand")

    def _predicate(
        self, value_type: ValueType, reader: Optional[MemoryReader]
    ) -> Callable[[int, int], bool]:
        compare = _COMPARISONS.get(self.op)
        if compare is not None:
            operand = value_type.parse(self.operand)
            return lambda value, _addr: compare(value, operand)
        if self.op in (ScanOp.CHANGED, ScanOp.NOT_CHANGED):
            if reader is None:
                raise ValueError(f"{self.op.value} needs a memory reader")
            if self.op is ScanOp.CHANGED:
                return lambda value, addr: value != reader.read(addr, value_type)
            return lambda value, addr: value == reader.read(addr, value_type)
        return lambda _value, _addr: True

    def evaluate(
        self,
        values: Iterable[int],
        addrs: Iterable[int],
        value_type: ValueType,
        reader: Optional[MemoryReader] = None,
    ) -> Iterator[tuple[int, int]]:
        """Yield the ``(value, address)`` pairs for which the expression holds.

        The operand is parsed before anything is yielded, so a bad operand
        raises ``ValueError`` straight away.
        """
        holds = self._predicate(value_type, reader)
        return ((value, addr) for value, addr in zip(values, addrs) if holds(value, addr))


def _word_count(memory_map: MemoryMap) -> int:
    return (memory_map.addr_end - memory_map.addr_start) // _WORD_SIZE


def _pread_exact(fd: int, addr: int, length: int) -> Optional[bytes]:
    offset = addr - (1 << 64) if addr >= (1 << 63) else addr
    data = bytearray()
    try:
        while len(data) < length:
            chunk = os.pread(fd, length - len(data), offset + len(data))
            if not chunk:
                return None
            data += chunk
    except (OSError, OverflowError):
        return None
    return bytes(data)


class AddressSet:
    """Addresses found by scanning, with the value each held when scanned."""

    def __init__(self, process: Process, value_type: ValueType) -> None:
        self.process = process
        self.value_type = value_type
        self._values: list[int] = []
        self._addresses: list[int] = []
        self._reader = MemoryReader(process.pid)

    def __len__(self) -> int:
        return len(self._values)

    def addresses(self) -> list[int]:
        return list(self._addresses)

    def values(self) -> list[str]:
        return [str(value) for value in self._values]

    def rows(self) -> list[tuple[int, str, str]]:
        """Return ``(address, value when scanned, current value)`` triples."""
        return [
            (addr, str(value), str(self._reader.read(addr, self.value_type)))
            for addr, value in zip(self._addresses, self._values)
        ]

    def copy(self) -> AddressSet:
        duplicate = AddressSet(self.process, self.value_type)
        duplicate._values = list(self._values)
        duplicate._addresses = list(self._addresses)
        return duplicate

    def type_name(self) -> str:
        return self.value_type.value

    def scan(self, expr: ScanExpr, report_progress: Optional[ProgressCallback] = None) -> None:
        """Scan the whole process, or narrow down the earlier results."""
        report = report_progress or (lambda _scanned, _to_scan: None)
        if self._values:
            self._rescan(expr, report)
        else:
            self._initial_scan(expr, report)

    def _keep(self, found: Iterable[tuple[int, int]]) -> None:
        for value, addr in found:
            self._values.append(value)
            self._addresses.append(addr)

    def _rescan(self, expr: ScanExpr, report: ProgressCallback) -> None:
        old_values, old_addresses = self._values, self._addresses
        self._values, self._addresses = [], []
        to_scan = len(old_addresses)

        def tracked() -> Iterator[int]:
            for i, addr in enumerate(old_addresses):
                if i % 1000 == 0:
                    report(i, to_scan)
                yield addr

        self._keep(expr.evaluate(old_values, tracked(), self.value_type, self._reader))
        report(to_scan, to_scan)

    def _initial_scan(self, expr: ScanExpr, report: ProgressCallback) -> None:
        maps = self.process.memory_maps
        to_scan = sum(_word_count(m) for m in maps)
        scanned = 0
        fd = os.open(f"/proc/{self.process.pid}/mem", os.O_RDONLY)
        try:
            for memory_map in maps:
                scanned += _word_count(memory_map)
                if not memory_map.perms.read:
                    continue
                self._keep(self._scan_region(fd, memory_map, expr))
                report(scanned, to_scan)
        finally:
            os.close(fd)

    def _scan_region(
        self, fd: int, memory_map: MemoryMap, expr: ScanExpr
    ) -> Iterator[tuple[int, int]]:
        start, end = memory_map.addr_start, memory_map.addr_end
        if expr.op is ScanOp.EQUAL:
            yield from self._find_equal(fd, start, end, self.value_type.parse(expr.operand))
            return
        addrs = range(start, end, self.value_type.size)
        values = self._region_values(fd, start, end)
        yield from expr.evaluate(values, addrs, self.value_type, self._reader)

    def _region_chunks(self, fd: int, start: int, end: int) -> Iterator[tuple[int, bytes]]:
        size = self.value_type.size
        for base in range(start, end, _CHUNK_SIZE):
            length = min(_CHUNK_SIZE, end - base)
            length = -(-length // size) * size
            data = _pread_exact(fd, base, length)
            if data is None:
                data = b"".join(
                    self._encode(self._reader.read(addr, self.value_type))
                    for addr in range(base, base + length, size)
                )
            yield base, data

    def _encode(self, value: int) -> bytes:
        return value.to_bytes(
            self.value_type.size, "little", signed=self.value_type.signed
        )

    def _decode_all(self, data: bytes) -> Iterable[int]:
        size = self.value_type.size
        code = _STRUCT_CODES.get(size)
        if code is None:
            return (self.value_type.decode(data[i:i + size]) for i in range(0, len(data), size))
        if not self.value_type.signed:
            code = code.upper()
        return struct.unpack(f"<{len(data) // size}{code}", data)

    def _region_values(self, fd: int, start: int, end: int) -> Iterator[int]:
        for _base, data in self._region_chunks(fd, start, end):
            yield from self._decode_all(data)

    def _find_equal(
        self, fd: int, start: int, end: int, operand: int
    ) -> Iterator[tuple[int, int]]:
        size = self.value_type.size
        needle = self._encode(operand)
        for base, data in self._region_chunks(fd, start, end):
            pos = data.find(needle)
            while pos != -1:
                if pos % size == 0:
                    yield operand, base + pos
                    pos = data.find(needle, pos + size)
                else:
                    pos = data.find(needle, pos + 1)