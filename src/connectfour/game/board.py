from __future__ import annotations

import threading
from enum import Enum
from typing import List, Optional, Sequence

from connectfour.config import DEFAULT_COLS, DEFAULT_ROWS, WIN_LENGTH
from connectfour.errors import InvalidMove, OutOfRange
from connectfour.game.observer import Observer


class Disc(Enum):
    """Cell contents. The values double as the wire representation."""

    EMPTY = "."
    PLAYER_ONE = "1"
    PLAYER_TWO = "2"

    def opponent(self) -> "Disc":
        if self is Disc.PLAYER_ONE:
            return Disc.PLAYER_TWO
        if self is Disc.PLAYER_TWO:
            return Disc.PLAYER_ONE
        raise ValueError("EMPTY has no opponent")


class Status(Enum):
    NOT_OVER = "NOT_OVER"
    I_WON = "I_WON"
    I_LOST = "I_LOST"
    TIED = "TIED"
    ERROR = "ERROR"

    @property
    def is_terminal(self) -> bool:
        return self is not Status.NOT_OVER


# (dc, dr) for row, column, rising and falling diagonal
DIRECTIONS = [(1, 0), (0, 1), (1, -1), (1, 1)]


class Board:
    """
    Client-side mirror of one Connect Four game.

    Row 0 is the top of the board, so discs land on the highest free row
    index of a column. ``player`` is the disc owned by the local side; it
    decides whether a four-in-a-row reads as I_WON or I_LOST.
    """

    def __init__(self, cols: int = DEFAULT_COLS, rows: int = DEFAULT_ROWS, player: Disc = Disc.PLAYER_ONE):
        self._lock = threading.RLock()
        self._observers: List[Observer] = []
        self._reset(cols, rows, player)

    def _reset(self, cols: int, rows: int, player: Disc):
        if cols < 1 or rows < 1:
            raise ValueError(f"Board must be at least 1x1, got {cols}x{rows}")
        if player is Disc.EMPTY:
            raise ValueError("Local player cannot be EMPTY")
        self.cols = cols
        self.rows = rows
        self.player = player
        self.grid: List[List[Disc]] = [[Disc.EMPTY for _ in range(cols)] for _ in range(rows)]
        self.moves_left = cols * rows
        self.my_turn = False
        self.status = Status.NOT_OVER
        self.reason: Optional[str] = None

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def add_observer(self, observer: Observer):
        with self._lock:
            if observer not in self._observers:
                self._observers.append(observer)

    def remove_observer(self, observer: Observer):
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def _notify_observers(self):
        for observer in list(self._observers):
            observer.update(self)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------
    def is_on_board(self, col: int, row: int) -> bool:
        return 0 <= col < self.cols and 0 <= row < self.rows

    def get_contents(self, col: int, row: int) -> Disc:
        if not self.is_on_board(col, row):
            raise OutOfRange(f"No cell at column {col}, row {row} on a {self.cols}x{self.rows} board")
        return self.grid[row][col]

    def get_moves_left(self) -> int:
        return self.moves_left

    def is_my_turn(self) -> bool:
        return self.my_turn

    def get_status(self) -> Status:
        return self.status

    def get_player(self) -> Disc:
        return self.player

    def is_valid_column(self, column: int) -> bool:
        """True if a disc can be dropped into ``column`` right now."""
        if self.status.is_terminal:
            return False
        return 0 <= column < self.cols and self.grid[0][column] is Disc.EMPTY

    def landing_row(self, column: int) -> Optional[int]:
        """Row a disc dropped into ``column`` would land on, or None when full."""
        for row in range(self.rows - 1, -1, -1):
            if self.grid[row][column] is Disc.EMPTY:
                return row
        return None

    def snapshot(self) -> List[List[Disc]]:
        return [row[:] for row in self.grid]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def configure(self, cols: int, rows: int, player: Disc):
        """Start a fresh game with the geometry and seat from the handshake."""
        with self._lock:
            self._reset(cols, rows, player)
            self._notify_observers()

    def apply_move(self, column: int, player: Disc) -> int:
        """Drop ``player``'s disc into ``column`` and return the row it landed on."""
        with self._lock:
            row = self._check_move(column, player)
            self._place(column, row, player)
            self._notify_observers()
            return row

    def apply_update(self, column: int, row: int, player: Disc) -> bool:
        """
        Apply a server-resolved cell update.

        Returns False when the cell already holds ``player``'s disc, i.e. the
        update is a replay of one already applied.
        """
        with self._lock:
            if player is not Disc.EMPTY and self.is_on_board(column, row) and self.grid[row][column] is player:
                return False
            landing = self._check_move(column, player)
            if landing != row:
                raise InvalidMove(f"Disc in column {column} lands on row {landing}, not row {row}")
            self._place(column, row, player)
            self._notify_observers()
            return True

    def apply_snapshot(self, cells: Sequence[Sequence[Disc]]) -> bool:
        """
        Replace the grid with a full server snapshot.

        Turn ownership is derived from the disc counts since player one
        always moves first. Returns False if nothing changed.
        """
        with self._lock:
            if [list(row) for row in cells] == self.grid:
                return False
            if self.status.is_terminal:
                raise InvalidMove(f"Game is over ({self.status.value})")
            grid = self._validate_snapshot(cells)

            self.grid = grid
            ones = sum(row.count(Disc.PLAYER_ONE) for row in grid)
            twos = sum(row.count(Disc.PLAYER_TWO) for row in grid)
            self.moves_left = self.cols * self.rows - ones - twos
            to_move = Disc.PLAYER_ONE if ones == twos else Disc.PLAYER_TWO
            self.my_turn = to_move is self.player

            winner = self._find_winner()
            if winner is not None:
                self.status = Status.I_WON if winner is self.player else Status.I_LOST
            elif self.moves_left == 0:
                self.status = Status.TIED
            self._notify_observers()
            return True

    def set_my_turn(self) -> bool:
        with self._lock:
            if self.status.is_terminal or self.my_turn:
                return False
            self.my_turn = True
            self._notify_observers()
            return True

    def game_won(self) -> bool:
        return self._finish(Status.I_WON)

    def game_lost(self) -> bool:
        return self._finish(Status.I_LOST)

    def game_tied(self) -> bool:
        return self._finish(Status.TIED)

    def error(self, reason: str) -> bool:
        return self._finish(Status.ERROR, reason)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _finish(self, status: Status, reason: Optional[str] = None) -> bool:
        with self._lock:
            if self.status.is_terminal:
                return False
            self.status = status
            self.reason = reason
            self._notify_observers()
            return True

    def _check_move(self, column: int, player: Disc) -> int:
        if self.status.is_terminal:
            raise InvalidMove(f"Game is over ({self.status.value})")
        if player is Disc.EMPTY:
            raise InvalidMove("Cannot play an EMPTY disc")
        if not 0 <= column < self.cols:
            raise InvalidMove(f"Column {column} out of range 0-{self.cols - 1}")
        row = self.landing_row(column)
        if row is None:
            raise InvalidMove(f"Column {column} is full")
        return row

    def _place(self, column: int, row: int, player: Disc):
        self.grid[row][column] = player
        self.moves_left -= 1
        self.my_turn = not self.my_turn
        # A winning drop on the last cell is a win, not a tie.
        if self._is_winning_cell(column, row):
            self.status = Status.I_WON if player is self.player else Status.I_LOST
        elif self.moves_left == 0:
            self.status = Status.TIED

    def _is_winning_cell(self, col: int, row: int) -> bool:
        disc = self.grid[row][col]
        if disc is Disc.EMPTY:
            return False
        for dc, dr in DIRECTIONS:
            count = 1
            for sign in (1, -1):
                c, r = col + dc * sign, row + dr * sign
                while self.is_on_board(c, r) and self.grid[r][c] is disc:
                    count += 1
                    c += dc * sign
                    r += dr * sign
            if count >= WIN_LENGTH:
                return True
        return False

    def _find_winner(self) -> Optional[Disc]:
        for row in range(self.rows):
            for col in range(self.cols):
                if self._is_winning_cell(col, row):
                    return self.grid[row][col]
        return None

    def _validate_snapshot(self, cells: Sequence[Sequence[Disc]]) -> List[List[Disc]]:
        if len(cells) != self.rows or any(len(row) != self.cols for row in cells):
            raise InvalidMove(f"Snapshot does not match the {self.cols}x{self.rows} board")
        grid = [list(row) for row in cells]
        for col in range(self.cols):
            for row in range(self.rows - 1):
                if grid[row][col] is not Disc.EMPTY and grid[row + 1][col] is Disc.EMPTY:
                    raise InvalidMove(f"Floating disc in column {col} at row {row}")
        ones = sum(row.count(Disc.PLAYER_ONE) for row in grid)
        twos = sum(row.count(Disc.PLAYER_TWO) for row in grid)
        if ones - twos not in (0, 1):
            raise InvalidMove(f"Impossible disc counts: {ones} for player one, {twos} for player two")
        for col in range(self.cols):
            for row in range(self.rows):
                if self.grid[row][col] is not Disc.EMPTY and grid[row][col] is not self.grid[row][col]:
                    raise InvalidMove(f"Snapshot overwrites the disc at column {col}, row {row}")
        return grid

    def __str__(self) -> str:
        return "\n".join("".join(cell.value for cell in row) for row in self.grid)
