from abc import ABC, abstractmethod
from typing import Callable, List, Tuple

from connectfour.game.board import Disc, Status


class GameInterface(ABC):
    """
    What the presentation layer talks to.
    This decouples the UI from how the game state reaches it; the UI submits
    columns and re-reads state whenever a registered callback fires.
    """

    def __init__(self):
        self._callbacks: List[Callable[[], None]] = []

    def register_for_updates(self, callback: Callable[[], None]):
        """
        Register a zero-argument callback fired after every state change.

        The callback may run on a background thread; it must hand off to the
        UI's own event loop before touching any widgets.
        """
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    @abstractmethod
    def start(self):
        """Begin receiving game state."""
        pass

    @abstractmethod
    def submit_move(self, column: int) -> bool:
        """Ask to drop a disc into ``column``. False if rejected locally."""
        pass

    @abstractmethod
    def get_cell_state(self, col: int, row: int) -> Disc:
        pass

    @abstractmethod
    def get_turn_status(self) -> bool:
        """True when it is the local player's turn."""
        pass

    @abstractmethod
    def get_outcome(self) -> Status:
        pass

    @abstractmethod
    def get_moves_left(self) -> int:
        pass

    @abstractmethod
    def get_dimensions(self) -> Tuple[int, int]:
        """(cols, rows) of the current game."""
        pass

    @abstractmethod
    def get_player(self) -> Disc:
        """Disc owned by the local player."""
        pass

    @abstractmethod
    def shutdown(self):
        """Release the connection. Safe to call more than once."""
        pass

    def _emit(self):
        """Helper to fire every registered callback."""
        for callback in list(self._callbacks):
            callback()
