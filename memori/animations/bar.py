"""Terminal animations shown while a scan is running."""

from __future__ import annotations

import queue
import shutil
import sys
import time
from enum import Enum
from typing import Optional, TextIO

BOARD_WIDTH = 20
BOARD_HEIGHT = 10
BAR_MAX_WIDTH = 64
FRAME_DELAY = 0.333

_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_LINE = "\x1b[2K"
_CLEAR_BELOW = "\x1b[J"
_BG_MAGENTA = "\x1b[48;5;5m"
_BG_RESET = "\x1b[49m"

# A pattern that looks okay: a blinker, a toad and a block.
_SEED = (
    (5, 10), (5, 11), (5, 12),
    (2, 3), (2, 4), (2, 5),
    (3, 2), (3, 3), (3, 4),
    (6, 2), (6, 3),
    (7, 2), (7, 3),
)

_NEIGHBOURS = tuple(
    (dy, dx) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dy, dx) != (0, 0)
)


class Cell(Enum):
    """State of one cell of the game of life board."""

    DEAD = "dead"
    NEWBORN = "newborn"
    ALIVE = "alive"


_GLYPHS = {
    Cell.DEAD: ".",
    Cell.NEWBORN: "\x1b[42m\x1b[32m \x1b[39m\x1b[49m",
    Cell.ALIVE: "\x1b[43m\x1b[33m \x1b[39m\x1b[49m",
}

Board = list[list[Cell]]


def initial_board() -> Board:
    """Return the starting board, ``BOARD_HEIGHT`` rows of ``BOARD_WIDTH`` cells."""
    board = [[Cell.DEAD] * BOARD_WIDTH for _ in range(BOARD_HEIGHT)]
    for y, x in _SEED:
        board[y][x] = Cell.ALIVE
    return board


def step(board: Board) -> Board:
    """Return the next generation; cells on the border stay dead."""
    height = len(board)
    width = len(board[0]) if board else 0
    following = [[Cell.DEAD] * width for _ in range(height)]
    for y in range(1, height - 1):
        for x in range(1, width - 1):
            neighbours = sum(
                board[y + dy][x + dx] is not Cell.DEAD for dy, dx in _NEIGHBOURS
            )
            if board[y][x] is Cell.DEAD:
                following[y][x] = Cell.NEWBORN if neighbours == 3 else Cell.DEAD
            else:
                following[y][x] = Cell.ALIVE if neighbours in (2, 3) else Cell.DEAD
    return following


def render_board(board: Board) -> list[str]:
    """Return one line of text per board row."""
    return ["".join(_GLYPHS[cell] for cell in row) for row in board]


def render_bar(scanned: int, to_scan: int, width: int) -> str:
    """Return a progress bar ``width`` cells wide, between brackets."""
    if to_scan:
        filled = min(int(scanned / to_scan * width), width)
    else:
        filled = 0 if scanned == 0 else width
    filled = max(filled, 0)
    return f"[{_BG_MAGENTA}{'-' * filled}{_BG_RESET}{' ' * (width - filled)}]"


def _percentage(done: int, total: int) -> int:
    return int(done / total * 100) if total else 0


def bar(progress_queue: queue.Queue, out: Optional[TextIO] = None) -> None:
    """Draw a progress bar from ``(scanned, to_scan)`` items until ``None`` arrives."""
    stream = out if out is not None else sys.stdout
    width = max(0, min(BAR_MAX_WIDTH, shutil.get_terminal_size().columns - 3))
    stream.write(_HIDE_CURSOR)
    while (item := progress_queue.get()) is not None:
        scanned, to_scan = item
        stream.write(f"\r{_CLEAR_LINE}{render_bar(scanned, to_scan, width)}")
        stream.flush()
    stream.write(f"\r{_CLEAR_LINE}{_SHOW_CURSOR}")
    stream.flush()


def game_of_life(progress_queue: queue.Queue, out: Optional[TextIO] = None) -> None:
    """Play the game of life with a percentage line below it.

    Stops once a ``(done, total)`` item with ``done == total`` or ``None``
    is taken from the queue, then clears what it drew.
    """
    stream = out if out is not None else sys.stdout
    board = initial_board()
    percentage = 0
    stream.write(_HIDE_CURSOR)
    while True:
        board = step(board)
        frame = "".join(f"\r{_CLEAR_LINE}{row}\n" for row in render_board(board))
        stream.write(
            f"{frame}\r{_CLEAR_LINE}Scanning... {percentage}%\x1b[{len(board)}A\r"
        )
        stream.flush()

        try:
            item = progress_queue.get_nowait()
        except queue.Empty:
            pass
        else:
            if item is None:
                break
            done, total = item
            percentage = _percentage(done, total)
            if done == total:
                break

        time.sleep(FRAME_DELAY)

    stream.write(f"\r{_CLEAR_BELOW}{_SHOW_CURSOR}")
    stream.flush()