from __future__ import annotations

from typing import Any, Callable, Protocol


class Observer(Protocol):
    """
    Anything interested in board changes.

    ``update`` runs synchronously on the thread that mutated the board, which
    for a networked game is the session's receive thread. Implementations that
    touch UI state must hand the work over to their own event loop first.
    """

    def update(self, board: Any) -> None:
        ...


class CallbackObserver:
    """Adapts a zero-argument callable to the Observer protocol."""

    def __init__(self, callback: Callable[[], None]):
        self.callback = callback

    def update(self, board: Any) -> None:
        self.callback()

    def __eq__(self, other):
        if isinstance(other, CallbackObserver):
            return self.callback == other.callback
        return NotImplemented

    def __hash__(self):
        return hash(self.callback)
