from __future__ import annotations

from typing import Tuple

from connectfour.config import ClientSettings
from connectfour.game.board import Board, Disc, Status
from connectfour.network.session import NetworkSession
from connectfour.protocol.interface import GameInterface


class ConnectFourClient(GameInterface):
    """GameInterface backed by a local Board mirrored from a NetworkSession."""

    def __init__(self, board: Board, session: NetworkSession):
        super().__init__()
        self.board = board
        self.session = session
        self.board.add_observer(self)

    @classmethod
    def connect(cls, settings: ClientSettings) -> "ConnectFourClient":
        """Raises SessionConnectionError if the server cannot be reached."""
        board = Board()
        session = NetworkSession.connect(settings.host, settings.port, board, timeout=settings.connect_timeout)
        return cls(board, session)

    # Board observer
    def update(self, board: Board):
        self._emit()

    def start(self):
        self.session.start_listener()

    def submit_move(self, column: int) -> bool:
        return self.session.send_move(column)

    def get_cell_state(self, col: int, row: int) -> Disc:
        return self.board.get_contents(col, row)

    def get_turn_status(self) -> bool:
        return self.board.is_my_turn()

    def get_outcome(self) -> Status:
        return self.board.get_status()

    def get_moves_left(self) -> int:
        return self.board.get_moves_left()

    def get_dimensions(self) -> Tuple[int, int]:
        return self.board.cols, self.board.rows

    def get_player(self) -> Disc:
        return self.board.get_player()

    def shutdown(self):
        self.session.close()
