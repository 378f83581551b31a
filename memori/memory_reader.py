"""Reading integer values out of another process's memory."""

from __future__ import annotations

import os
import re
from enum import Enum

_SIGNED_DEC = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_DEC = re.compile(r"\+?[0-9]+")


class ValueType(Enum):
    """Fixed-width little-endian integer types that can be scanned for."""

    I128 = "i128"
    U128 = "u128"
    I64 = "i64"
    U64 = "u64"
    I32 = "i32"
    U32 = "u32"
    I16 = "i16"
    U16 = "u16"
    I8 = "i8"
    U8 = "u8"

    @property
    def size(self) -> int:
        """Width in bytes."""
        return int(self.value[1:]) // 8

    @property
    def signed(self) -> bool:
        return self.value.startswith("i")

    @property
    def min(self) -> int:
        return -(1 << (self.size * 8 - 1)) if self.signed else 0

    @property
    def max(self) -> int:
        bits = self.size * 8
        return (1 << (bits - 1)) - 1 if self.signed else (1 << bits) - 1

    def decode(self, data: bytes) -> int:
        """Decode exactly ``size`` little-endian bytes."""
        data = bytes(data)
        if len(data) != self.size:
            raise ValueError(
                f"{self.value} needs {self.size} bytes, got {len(data)}"
            )
        return int.from_bytes(data, "little", signed=self.signed)

    def parse(self, text: str) -> int:
        """Parse a decimal literal, checking that it fits this type."""
        pattern = _SIGNED_DEC if self.signed else _UNSIGNED_DEC
        if not pattern.fullmatch(text):
            raise ValueError(f"invalid {self.value} literal: {text!r}")
        value = int(text)
        if not self.min <= value <= self.max:
            raise ValueError(f"{text} does not fit in {self.value}")
        return value


class MemoryReader:
    """Reads values from ``/proc/<pid>/mem``.

    Failed reads are not reported: the bytes that could not be read are
    taken as zero, so a region unmapped between scans yields zeros.
    """

    def __init__(self, pid: int) -> None:
        self.pid = pid
        self._fd: int | None = os.open(f"/proc/{pid}/mem", os.O_RDONLY)

    def read(self, addr: int, value_type: ValueType) -> int:
        """Return the value of type ``value_type`` stored at ``addr``."""
        size = value_type.size
        data = self._read_bytes(addr, size)
        return value_type.decode(data.ljust(size, b"\0"))

    def _read_bytes(self, addr: int, size: int) -> bytes:
        if self._fd is None:
            raise ValueError("read from a closed MemoryReader")
        # The mem file accepts unsigned offsets; the system call takes a signed one.
        offset = addr - (1 << 64) if addr >= (1 << 63) else addr
        data = bytearray()
        try:
            while len(data) < size:
                chunk = os.pread(self._fd, size - len(data), offset + len(data))
                if not chunk:
                    break
                data += chunk
        except (OSError, OverflowError):
            pass
        return bytes(data)

    def close(self) -> None:
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None

    def __enter__(self) -> MemoryReader:
        return self

    def __exit__(self, *args) -> None:
        self.close()