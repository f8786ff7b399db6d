"""
Line codec for the Connect Four wire protocol.

Every message is one line: a discriminator token from
``connectfour.protocol.constants`` followed by space separated positional
fields. ``decode`` turns a line into one of the message classes below and
``encode`` does the reverse; the trailing newline is left to the transport.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple, Union

from connectfour.config import MAX_DIMENSION
from connectfour.errors import MalformedMessage
from connectfour.game.board import Disc, Status
from connectfour.protocol.constants import Command, Response


@dataclass(frozen=True)
class Connect:
    cols: int
    rows: int
    player: Disc


@dataclass(frozen=True)
class MakeMove:
    pass


@dataclass(frozen=True)
class MoveMade:
    column: int
    row: int
    player: Disc


@dataclass(frozen=True)
class BoardState:
    cols: int
    rows: int
    cells: Tuple[Tuple[Disc, ...], ...]


@dataclass(frozen=True)
class GameOver:
    status: Status


@dataclass(frozen=True)
class ServerError:
    reason: str = ""


@dataclass(frozen=True)
class Move:
    column: int


Message = Union[Connect, MakeMove, MoveMade, BoardState, GameOver, ServerError, Move]

GAME_OVER_TOKENS = {
    Response.GAME_WON: Status.I_WON,
    Response.GAME_LOST: Status.I_LOST,
    Response.GAME_TIED: Status.TIED,
}
PLAYER_TOKENS = {"1": Disc.PLAYER_ONE, "2": Disc.PLAYER_TWO}
CELL_TOKENS = {disc.value: disc for disc in Disc}


def decode(line: str) -> Message:
    text = line.rstrip("\r\n")
    parts = text.split()
    if not parts:
        raise MalformedMessage("Empty line", line)

    kind = parts[0]
    fields = parts[1:]

    if kind == Response.ERROR:
        # The reason is free text; keep its spacing.
        pieces = text.split(maxsplit=1)
        return ServerError(pieces[1] if len(pieces) > 1 else "")

    if kind == Response.CONNECT:
        _expect_fields(fields, 3, line)
        cols = _parse_size(fields[0], line)
        rows = _parse_size(fields[1], line)
        return Connect(cols, rows, _parse_player(fields[2], line))

    if kind == Response.MAKE_MOVE:
        _expect_fields(fields, 0, line)
        return MakeMove()

    if kind == Response.MOVE_MADE:
        _expect_fields(fields, 3, line)
        return MoveMade(
            column=_parse_int(fields[0], line),
            row=_parse_int(fields[1], line),
            player=_parse_player(fields[2], line),
        )

    if kind == Response.BOARD:
        _expect_fields(fields, 3, line)
        cols = _parse_size(fields[0], line)
        rows = _parse_size(fields[1], line)
        return BoardState(cols, rows, _parse_cells(fields[2], cols, rows, line))

    if kind in GAME_OVER_TOKENS:
        _expect_fields(fields, 0, line)
        return GameOver(GAME_OVER_TOKENS[kind])

    if kind == Command.MOVE:
        _expect_fields(fields, 1, line)
        return Move(_parse_int(fields[0], line))

    raise MalformedMessage(f"Unknown message kind {kind}", line)


def encode(message: Message) -> str:
    if isinstance(message, Connect):
        return f"{Response.CONNECT} {message.cols} {message.rows} {message.player.value}"
    if isinstance(message, MakeMove):
        return Response.MAKE_MOVE
    if isinstance(message, MoveMade):
        return f"{Response.MOVE_MADE} {message.column} {message.row} {message.player.value}"
    if isinstance(message, BoardState):
        cells = "".join(cell.value for row in message.cells for cell in row)
        return f"{Response.BOARD} {message.cols} {message.rows} {cells}"
    if isinstance(message, GameOver):
        for token, status in GAME_OVER_TOKENS.items():
            if status is message.status:
                return token
        raise ValueError(f"{message.status} is not a game over status")
    if isinstance(message, ServerError):
        return f"{Response.ERROR} {message.reason}".rstrip()
    if isinstance(message, Move):
        return f"{Command.MOVE} {message.column}"
    raise TypeError(f"Cannot encode {message!r}")


def board_state(grid: List[List[Disc]]) -> BoardState:
    """Build a BOARD message from a board grid (rows top to bottom)."""
    rows = len(grid)
    cols = len(grid[0]) if grid else 0
    return BoardState(cols, rows, tuple(tuple(row) for row in grid))


def _expect_fields(fields: List[str], count: int, line: str):
    if len(fields) != count:
        raise MalformedMessage(f"Expected {count} field(s), got {len(fields)}", line)


def _parse_int(token: str, line: str) -> int:
    if not (token.isascii() and token.isdigit()):
        raise MalformedMessage(f"Expected a non-negative integer, got {token!r}", line)
    return int(token)


def _parse_size(token: str, line: str) -> int:
    value = _parse_int(token, line)
    if value < 1:
        raise MalformedMessage(f"Board dimensions must be positive, got {value}", line)
    if value > MAX_DIMENSION:
        raise MalformedMessage(f"Board dimensions are limited to {MAX_DIMENSION}, got {value}", line)
    return value


def _parse_player(token: str, line: str) -> Disc:
    player = PLAYER_TOKENS.get(token)
    if player is None:
        raise MalformedMessage(f"Unknown player {token!r}", line)
    return player


def _parse_cells(token: str, cols: int, rows: int, line: str) -> Tuple[Tuple[Disc, ...], ...]:
    if len(token) != cols * rows:
        raise MalformedMessage(f"Expected {cols * rows} cells, got {len(token)}", line)
    try:
        flat = [CELL_TOKENS[char] for char in token]
    except KeyError as exc:
        raise MalformedMessage(f"Unknown cell {exc.args[0]!r}", line) from None
    return tuple(tuple(flat[r * cols:(r + 1) * cols]) for r in range(rows))
