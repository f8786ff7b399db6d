from __future__ import annotations

import logging
import socket
import threading
from enum import Enum
from typing import Callable, Optional

from connectfour.config import ENCODING, validate_port
from connectfour.errors import InvalidMove, MalformedMessage, SessionConnectionError
from connectfour.game.board import Board, Status
from connectfour.protocol.codec import (
    BoardState,
    Connect,
    GameOver,
    MakeMove,
    Message,
    Move,
    MoveMade,
    ServerError,
    decode,
    encode,
)

logger = logging.getLogger(__name__)


class SessionState(Enum):
    CONNECTING = "CONNECTING"
    AWAITING_HANDSHAKE = "AWAITING_HANDSHAKE"
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"


class NetworkSession:
    """
    Owns the stream to the server and keeps a Board in sync with it.

    Incoming lines are decoded and applied to the board on a background
    receive thread, so board observers are notified on that thread. Outgoing
    moves are only requests: the board changes when the server's
    authoritative update comes back.
    """

    def __init__(self, board: Board):
        self.board = board
        self.state = SessionState.CONNECTING
        self._sock: Optional[socket.socket] = None
        self._reader = None
        # Held while a message is applied so close() cannot interleave.
        self._lock = threading.RLock()
        self._send_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._move_pending = False

    @classmethod
    def connect(cls, host: str, port: int, board: Board, timeout: Optional[float] = None) -> "NetworkSession":
        session = cls(board)
        session.open(host, port, timeout)
        return session

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def open(self, host: str, port: int, timeout: Optional[float] = None):
        if self.state is not SessionState.CONNECTING:
            raise SessionConnectionError(f"Session already {self.state.value.lower()}")
        try:
            if not host:
                raise ValueError("Host must not be empty")
            validate_port(port)
            sock = socket.create_connection((host, port), timeout=timeout)
        except (OSError, ValueError, TypeError) as exc:
            self.state = SessionState.CLOSED
            raise SessionConnectionError(f"Cannot connect to {host}:{port}: {exc}") from exc
        sock.settimeout(None)
        logger.info("Connected to %s:%s", host, port)
        self.attach(sock)

    def attach(self, sock: socket.socket):
        """Adopt an already connected socket."""
        if self.state is not SessionState.CONNECTING:
            raise SessionConnectionError(f"Session already {self.state.value.lower()}")
        self._sock = sock
        self._reader = sock.makefile("r", encoding=ENCODING, newline="\n")
        self.state = SessionState.AWAITING_HANDSHAKE

    def start_listener(self):
        with self._lock:
            if self._thread is not None:
                logger.debug("Receive loop already started")
                return
            if self._sock is None:
                raise SessionConnectionError("Session is not connected")
            self._thread = threading.Thread(target=self._receive_loop, name="connectfour-receiver", daemon=True)
            self._thread.start()

    def close(self):
        with self._lock:
            if self.state is SessionState.CLOSED:
                return
            self.state = SessionState.CLOSED
            sock, reader = self._sock, self._reader

        if sock is not None:
            try:
                # Unblocks a receive thread sitting in readline().
                sock.shutdown(socket.SHUT_RDWR)
            except OSError as exc:
                logger.debug("Socket shutdown: %s", exc)
            reader.close()
            sock.close()
        logger.info("Session closed")

    def join(self, timeout: Optional[float] = None):
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    @property
    def closed(self) -> bool:
        return self.state is SessionState.CLOSED

    # ------------------------------------------------------------------
    # Outgoing
    # ------------------------------------------------------------------
    def send_move(self, column: int) -> bool:
        """
        Request a disc drop in ``column``.

        Rejected locally (nothing sent, returns False) outside the active
        state, out of turn, after the game ended, for an unplayable column,
        or while an earlier request is still unanswered.
        """
        with self._lock:
            if self.state is not SessionState.ACTIVE:
                logger.debug("Move %s ignored in state %s", column, self.state.value)
                return False
            if not self.board.is_my_turn() or self._move_pending:
                logger.debug("Move %s ignored: not our turn", column)
                return False
            if not self.board.is_valid_column(column):
                logger.debug("Move %s ignored: column not playable", column)
                return False
            self._move_pending = True

        try:
            self._write(encode(Move(column)))
        except SessionConnectionError as exc:
            logger.error("%s", exc)
            with self._lock:
                if self.state is not SessionState.CLOSED:
                    self.board.error(str(exc))
            self.close()
            return False
        return True

    def _write(self, line: str):
        sock = self._sock
        if sock is None:
            raise SessionConnectionError("Session is not connected")
        logger.debug(">> %s", line)
        try:
            with self._send_lock:
                sock.sendall(f"{line}\n".encode(ENCODING))
        except OSError as exc:
            raise SessionConnectionError(f"Write failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Incoming
    # ------------------------------------------------------------------
    def process_line(self, line: str) -> bool:
        """
        Decode one line from the server and apply it.

        Raises MalformedMessage before touching the board if the line cannot
        be decoded or breaks the message order. Returns False once the
        session is closed.
        """
        with self._lock:
            if self.state is SessionState.CLOSED:
                return False
            logger.debug("<< %s", line.rstrip("\r\n"))
            self._dispatch(decode(line))
            return self.state is not SessionState.CLOSED

    def _receive_loop(self):
        try:
            while True:
                try:
                    line = self._reader.readline()
                except (OSError, ValueError) as exc:
                    # ValueError: the reader was closed under us.
                    self._connection_lost(f"Read failed: {exc}")
                    return
                if not line:
                    self._connection_lost("Connection closed by server")
                    return
                try:
                    if not self.process_line(line):
                        return
                except MalformedMessage as exc:
                    logger.error("Protocol error: %s", exc)
                    self._fail(str(exc))
                    return
                except Exception as exc:
                    logger.exception("Failed to handle %r", line)
                    self._fail(f"Internal error: {exc}")
                    return
        finally:
            self.close()

    def _dispatch(self, message: Message):
        if isinstance(message, ServerError):
            reason = message.reason or "Server reported an error"
            logger.error("Server error: %s", reason)
            self.board.error(reason)
            return

        if self.state is SessionState.AWAITING_HANDSHAKE:
            if not isinstance(message, Connect):
                raise MalformedMessage("Expected handshake first", encode(message))
            if self.board.get_status().is_terminal:
                # A handshake must not revive a game that already ended.
                raise MalformedMessage("Handshake after the game ended", encode(message))
            self.board.configure(message.cols, message.rows, message.player)
            self.state = SessionState.ACTIVE
            logger.info(
                "Joined a %dx%d game as player %s", message.cols, message.rows, message.player.value
            )
            return

        if isinstance(message, Connect):
            raise MalformedMessage("Duplicate handshake", encode(message))
        if isinstance(message, Move):
            raise MalformedMessage("Client message received from server", encode(message))

        self._move_pending = False
        if isinstance(message, MakeMove):
            self.board.set_my_turn()
        elif isinstance(message, MoveMade):
            self._apply(lambda: self.board.apply_update(message.column, message.row, message.player))
        elif isinstance(message, BoardState):
            self._apply(lambda: self.board.apply_snapshot(message.cells))
        elif isinstance(message, GameOver):
            self._game_over(message.status)

    def _apply(self, update: Callable[[], bool]):
        try:
            if not update():
                logger.debug("Update already applied")
        except InvalidMove as exc:
            logger.warning("Rejected update from server: %s", exc)
            self.board.error(str(exc))

    def _game_over(self, status: Status):
        finish = {
            Status.I_WON: self.board.game_won,
            Status.I_LOST: self.board.game_lost,
            Status.TIED: self.board.game_tied,
        }[status]
        if not finish() and self.board.get_status() is not status:
            logger.warning(
                "Server reports %s but the board already shows %s",
                status.value,
                self.board.get_status().value,
            )
        logger.info("Game over: %s", self.board.get_status().value)

    def _connection_lost(self, reason: str):
        with self._lock:
            if self.state is SessionState.CLOSED:
                return
            if self.board.get_status().is_terminal:
                logger.info("Server closed the connection")
                return
            logger.error("%s", reason)
            self.board.error(reason)

    def _fail(self, reason: str):
        with self._lock:
            if self.state is SessionState.CLOSED:
                return
            self.board.error(reason)
