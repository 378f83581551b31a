"""The interactive read-eval-print loop."""

from __future__ import annotations

import queue
import sys
import threading
from dataclasses import dataclass
from typing import Callable, Optional, TextIO

from memori import util
from memori.animations.bar import game_of_life
from memori.commands import (
    CommandError,
    ExitCommand,
    FilterCommand,
    PrintCommand,
    ProcessCommand,
    TypeCommand,
    parse_command,
)
from memori.context import Context


def default_prompt() -> str:
    return "\x1b[3m\x1b[31mmemori\x1b[39m\x1b[0m \x1b[33mλ\x1b[39m "


_ERROR_HEADER = "\x1b[4m\x1b[1m\x1b[31mError while executing command:\x1b[39m\x1b[0m\x1b[0m"


@dataclass(frozen=True)
class Message:
    """Outcome of one command, to be shown to the user."""

    message: str = ""
    is_error: bool = False


class Repl:
    """Reads commands, runs them against a context and prints the results."""

    def __init__(
        self,
        input_func: Optional[Callable[[str], str]] = None,
        out: Optional[TextIO] = None,
    ) -> None:
        self._input = input_func if input_func is not None else input
        self.out = out if out is not None else sys.stdout
        self.prompt = default_prompt()

    def read(self) -> Optional[str]:
        """Read a line; ``None`` means interrupt, end of input or a read error."""
        try:
            return self._input(self.prompt)
        except (EOFError, KeyboardInterrupt):
            return None
        except OSError as err:
            print(f"Error: {err!r}", file=sys.stderr)
            return None

    def eval(self, command, ctx: Context) -> Message:
        """Run ``command`` against ``ctx``."""
        match command:
            case ProcessCommand(pid=pid):
                try:
                    ctx.attach(pid)
                except OSError as err:
                    return Message(str(err), True)
                return Message(f"connected to process: {ctx.process.command}")
            case TypeCommand(value_type=value_type):
                if ctx.process is None:
                    return Message("You have to select a process first", True)
                ctx.change_type(value_type)
                return Message(f"changed type successfuly to {ctx.type_name()}")
            case FilterCommand():
                return self._filter(command, ctx)
            case PrintCommand():
                if ctx.addrs is None:
                    return Message("You have to select a type first", True)
                util.print_addrs(ctx.addrs, self.out)
                return Message()
            case ExitCommand():
                ctx.quit = True
                return Message()
            case _:
                return Message(f"unsupported command: {command!r}", True)

    def _filter(self, command: FilterCommand, ctx: Context) -> Message:
        addrs = ctx.addrs
        if addrs is None:
            return Message("You have to select a type first")
        try:
            expr = util.filter_to_scan_expr(command)
            if expr.operand is not None:
                addrs.value_type.parse(expr.operand)
        except ValueError as err:
            return Message(str(err), True)

        progress: queue.Queue = queue.Queue()
        animation = threading.Thread(target=game_of_life, args=(progress, self.out))
        animation.start()
        try:
            addrs.scan(expr, lambda scanned, to_scan: progress.put((scanned, to_scan)))
        except (OSError, ValueError) as err:
            return Message(str(err), True)
        finally:
            progress.put(None)
            animation.join()
        return Message(f"scanner found {len(addrs)} addresses")

    def print(self, msg: Message) -> None:
        if msg.is_error:
            print(f"{_ERROR_HEADER} {msg.message}", file=self.out)
        elif msg.message:
            print(msg.message, file=self.out)
        print(file=self.out)

    def run(self) -> None:
        """Loop until the user exits or input ends."""
        ctx = Context()
        while not ctx.quit:
            line = self.read()
            if line is None:
                print("WHYYY???", file=self.out)
                break
            try:
                command = parse_command(line)
            except CommandError as err:
                print(err, file=sys.stderr)
                continue
            self.print(self.eval(command, ctx))


def main(argv=None) -> int:
    """Start an interactive session."""
    try:
        import readline  # noqa: F401  (line editing and history for input())
    except ImportError:
        pass
    Repl().run()
    return 0


if __name__ == "__main__":
    sys.exit(main())