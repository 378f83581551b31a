"""State shared between the commands of one session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from memori.addresses import AddressSet
from memori.memory_reader import ValueType
from memori.process import Process


@dataclass
class Context:
    """The attached process and the current scan results."""

    quit: bool = False
    process: Optional[Process] = None
    addrs: Optional[AddressSet] = None

    def attach(self, pid: int) -> None:
        """Attach to ``pid``; raises ``OSError`` if it cannot be inspected."""
        self.process = Process.open(pid)

    def change_type(self, value_type: ValueType) -> None:
        """Start a fresh result set scanning for ``value_type``."""
        if self.process is None:
            raise ValueError("You have to select a process first")
        self.addrs = AddressSet(self.process, value_type)

    def type_name(self) -> str:
        return "none" if self.addrs is None else self.addrs.type_name()