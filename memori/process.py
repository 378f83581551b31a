"""A running process as seen through the proc filesystem."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from memori.memory_map import MemoryMap

PROC_ROOT = Path("/proc")


@dataclass
class Process:
    """A process's id, command line and memory maps."""

    pid: int
    command: str
    memory_maps: list[MemoryMap] = field(default_factory=list)

    @classmethod
    def open(cls, pid: int) -> Process:
        """Read the command line and memory maps of ``pid``.

        Raises ``OSError`` when the process cannot be inspected.
        """
        base = PROC_ROOT / str(pid)
        content = (base / "cmdline").read_bytes().decode("utf-8")
        command = " ".join(content.rstrip("\0").split("\0"))

        maps = (base / "maps").read_bytes().decode("utf-8")
        memory_maps = [MemoryMap.from_line(line) for line in maps.splitlines()]

        return cls(pid=pid, command=command, memory_maps=memory_maps)