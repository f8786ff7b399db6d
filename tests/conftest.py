"""
Pytest will auto-discover / import this file called 'conftest.py'.
Fixtures shared by the board, session, server and UI tests.
"""

import socket
import time
from typing import Callable, Iterator

import pytest

from connectfour.game.board import Board
from connectfour.network.session import NetworkSession


class RecordingObserver:
    """Observer that remembers every notification it received."""

    def __init__(self):
        self.calls = []

    def update(self, board):
        self.calls.append(board)

    @property
    def count(self) -> int:
        return len(self.calls)


@pytest.fixture
def recorder() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def board(recorder: RecordingObserver) -> Board:
    """Standard 7x6 board seen from player one, with a recorder attached."""
    board = Board()
    board.add_observer(recorder)
    return board


@pytest.fixture
def wait_for() -> Callable[..., None]:
    """Poll ``predicate`` until it holds; fail the test after ``timeout`` seconds."""

    def _wait(predicate: Callable[[], bool], timeout: float = 5.0):
        deadline = time.monotonic() + timeout
        while not predicate():
            if time.monotonic() > deadline:
                pytest.fail("Condition not reached in time")
            time.sleep(0.01)

    return _wait


@pytest.fixture
def socket_pair() -> Iterator[tuple[socket.socket, socket.socket]]:
    """(client side, server side) of a connected socket pair."""
    client_sock, server_sock = socket.socketpair()
    try:
        yield client_sock, server_sock
    finally:
        client_sock.close()
        server_sock.close()


@pytest.fixture
def session(socket_pair, recorder) -> Iterator[NetworkSession]:
    """Session attached to the client end of ``socket_pair``, listener not started."""
    client_sock, _ = socket_pair
    board = Board()
    board.add_observer(recorder)
    session = NetworkSession(board)
    session.attach(client_sock)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def free_port() -> int:
    """A localhost port nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]

