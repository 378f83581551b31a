import io
import queue
import re

from memori.animations.bar import (
    BOARD_HEIGHT,
    BOARD_WIDTH,
    Cell,
    bar,
    game_of_life,
    initial_board,
    render_bar,
    render_board,
    step,
)

_ESCAPE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")


def _empty(height, width):
    return [[Cell.DEAD] * width for _ in range(height)]


def _visible(text):
    return _ESCAPE.sub("", text)


def test_initial_board_shape_and_seed():
    board = initial_board()
    assert len(board) == BOARD_HEIGHT
    assert all(len(row) == BOARD_WIDTH for row in board)
    assert board[5][10] is Cell.ALIVE
    assert board[3][2] is Cell.ALIVE
    assert board[7][3] is Cell.ALIVE
    assert board[0][0] is Cell.DEAD
    alive = sum(cell is Cell.ALIVE for row in board for cell in row)
    assert alive == 13


def test_blinker_turns_vertical_with_newborn_ends():
    board = _empty(5, 5)
    for x in (1, 2, 3):
        board[2][x] = Cell.ALIVE
    nxt = step(board)
    assert nxt[1][2] is Cell.NEWBORN
    assert nxt[3][2] is Cell.NEWBORN
    assert nxt[2][2] is Cell.ALIVE
    assert nxt[2][1] is Cell.DEAD
    assert nxt[2][3] is Cell.DEAD


def test_blinker_returns_after_two_steps():
    board = _empty(5, 5)
    for x in (1, 2, 3):
        board[2][x] = Cell.ALIVE
    twice = step(step(board))
    assert [twice[2][x] for x in (1, 2, 3)] == [Cell.NEWBORN, Cell.ALIVE, Cell.NEWBORN]
    live = {(y, x) for y, row in enumerate(twice) for x, c in enumerate(row) if c is not Cell.DEAD}
    assert live == {(2, 1), (2, 2), (2, 3)}


def test_block_is_still_life():
    board = _empty(4, 4)
    for y, x in ((1, 1), (1, 2), (2, 1), (2, 2)):
        board[y][x] = Cell.ALIVE
    assert step(board) == board


def test_step_keeps_border_dead_and_input_untouched():
    board = [[Cell.ALIVE] * 6 for _ in range(6)]
    snapshot = [list(row) for row in board]
    nxt = step(board)
    assert board == snapshot
    assert all(c is Cell.DEAD for c in nxt[0])
    assert all(c is Cell.DEAD for c in nxt[-1])
    assert all(row[0] is Cell.DEAD and row[-1] is Cell.DEAD for row in nxt)


def test_render_board_one_line_per_row():
    board = initial_board()
    lines = render_board(board)
    assert len(lines) == BOARD_HEIGHT
    assert all(len(_visible(line)) == BOARD_WIDTH for line in lines)
    assert lines[0] == "." * BOARD_WIDTH


def test_render_board_marks_live_cells():
    board = _empty(3, 3)
    board[1][1] = Cell.NEWBORN
    lines = render_board(board)
    assert _visible(lines[1]) == ". ."
    assert "\x1b[42m" in lines[1]


def test_render_bar_half_full():
    result = render_bar(5, 10, 10)
    assert result.count("-") == 5
    assert result.startswith("[") and result.endswith("]")
    assert len(_visible(result)) == 12


def test_render_bar_caps_and_empty():
    assert render_bar(20, 10, 4).count("-") == 4
    assert render_bar(0, 0, 4).count("-") == 0
    assert len(_visible(render_bar(0, 0, 4))) == 6


def test_bar_draws_until_end_marker():
    q = queue.Queue()
    q.put((1, 2))
    q.put((2, 2))
    q.put(None)
    out = io.StringIO()
    bar(q, out)
    text = out.getvalue()
    assert text.startswith("\x1b[?25l")
    assert text.endswith("\x1b[?25h")
    assert text.count("[") >= 2


def test_game_of_life_stops_when_done():
    q = queue.Queue()
    q.put((10, 10))
    out = io.StringIO()
    game_of_life(q, out)
    text = out.getvalue()
    assert "Scanning... 0%" in text
    assert text.endswith("\x1b[?25h")
    assert q.empty()


def test_game_of_life_stops_on_end_marker():
    q = queue.Queue()
    q.put(None)
    out = io.StringIO()
    game_of_life(q, out)
    assert out.getvalue().count("Scanning...") == 1