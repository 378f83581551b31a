"""Parsing of the lines of a process's memory map listing."""

from __future__ import annotations

import re
from dataclasses import dataclass

_HEX = re.compile(r"\+?[0-9a-fA-F]+")
_DEC = re.compile(r"\+?[0-9]+")


def _hex(text: str, what: str) -> int:
    if not _HEX.fullmatch(text):
        raise ValueError(f"{what} is not a hex number: {text!r}")
    return int(text, 16)


def _dec(text: str, what: str) -> int:
    if not _DEC.fullmatch(text):
        raise ValueError(f"{what} is not a number: {text!r}")
    return int(text)


@dataclass(frozen=True)
class Permissions:
    """Access flags of a mapped region."""

    read: bool
    write: bool
    execute: bool
    private: bool
    shared: bool

    @classmethod
    def parse(cls, text: str) -> Permissions:
        """Parse a four character permission string such as ``r-xp``."""
        raw = text.encode()
        if len(raw) != 4:
            raise ValueError(f"incorrect permission string supplied: {text!r}")
        return cls(
            read=raw[0:1] == b"r",
            write=raw[1:2] == b"w",
            execute=raw[2:3] == b"x",
            private=raw[3:4] == b"p",
            shared=raw[3:4] == b"s",
        )


@dataclass(frozen=True)
class Device:
    """Major and minor number of the device a region is backed by."""

    major: int
    minor: int

    @classmethod
    def parse(cls, text: str) -> Device:
        """Parse a ``major:minor`` pair of hex numbers."""
        major, sep, minor = text.partition(":")
        if not sep:
            raise ValueError(f"bad device string supplied: {text!r}")
        return cls(major=_hex(major, "major"), minor=_hex(minor, "minor"))


@dataclass(frozen=True)
class MemoryMap:
    """One mapped region of a process's address space."""

    addr_start: int
    addr_end: int
    perms: Permissions
    offset: int
    dev: Device
    inode: int
    pathname: str

    @classmethod
    def from_line(cls, line: str) -> MemoryMap:
        """Parse one line of a maps listing.

        The format is ``start-end perms offset dev inode [pathname]``.
        """
        cols = line.split()
        if len(cols) < 5:
            raise ValueError(f"incorrect line supplied for MemoryMap: {line!r}")

        start, sep, end = cols[0].partition("-")
        if not sep:
            raise ValueError(f"incorrect address range in memory maps: {cols[0]!r}")

        return cls(
            addr_start=_hex(start, "address"),
            addr_end=_hex(end, "address"),
            perms=Permissions.parse(cols[1]),
            offset=_hex(cols[2], "offset"),
            dev=Device.parse(cols[3]),
            inode=_dec(cols[4], "inode"),
            pathname=cols[5] if len(cols) > 5 else "",
        )