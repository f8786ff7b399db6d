from __future__ import annotations

import logging
import socket
from typing import List, Optional, Tuple

from connectfour.config import ENCODING, ServerSettings
from connectfour.errors import InvalidMove, MalformedMessage
from connectfour.game.board import Board, Disc, Status
from connectfour.protocol.codec import (
    Connect,
    GameOver,
    MakeMove,
    Message,
    Move,
    MoveMade,
    ServerError,
    board_state,
    decode,
    encode,
)
from connectfour.protocol.constants import Command

logger = logging.getLogger(__name__)


class _Seat:
    """One connected player."""

    def __init__(self, sock: socket.socket, address, disc: Disc):
        self.sock = sock
        self.address = address
        self.disc = disc
        self.reader = sock.makefile("r", encoding=ENCODING, newline="\n")

    def send(self, message: Message) -> bool:
        try:
            self.sock.sendall(f"{encode(message)}\n".encode(ENCODING))
        except OSError as exc:
            logger.warning("Could not reach player %s: %s", self.disc.value, exc)
            return False
        return True

    def receive(self) -> Optional[str]:
        try:
            line = self.reader.readline()
        except (OSError, ValueError) as exc:
            logger.warning("Could not read from player %s: %s", self.disc.value, exc)
            return None
        return line or None

    def close(self):
        self.reader.close()
        self.sock.close()


class GameServer:
    """
    Referee for exactly one game between two connections.

    The first connection plays PLAYER_ONE and moves first. The server keeps
    the authoritative board, seen from player one's side, so I_WON on it
    means player one won.
    """

    def __init__(self, settings: ServerSettings):
        self.settings = settings
        self.board = Board(settings.cols, settings.rows, Disc.PLAYER_ONE)
        self._listener: Optional[socket.socket] = None
        self._seats: List[_Seat] = []

    def bind(self) -> Tuple[str, int]:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.settings.host, self.settings.port))
            sock.listen(2)
        except OSError:
            sock.close()
            raise
        self._listener = sock
        host, port = sock.getsockname()[:2]
        logger.info("Listening on %s:%s", host, port)
        return host, port

    def serve(self) -> Status:
        """Play one game and return its outcome from player one's side."""
        if self._listener is None:
            self.bind()
        try:
            try:
                self._accept_players()
            except OSError as exc:
                logger.error("Stopped accepting players: %s", exc)
                return Status.ERROR
            return self._play()
        finally:
            self.close()

    def close(self):
        for seat in self._seats:
            seat.close()
        self._seats = []
        if self._listener is not None:
            self._listener.close()
            self._listener = None

    def _accept_players(self):
        for disc in (Disc.PLAYER_ONE, Disc.PLAYER_TWO):
            conn, address = self._listener.accept()
            logger.info("Player %s connected from %s", disc.value, address)
            seat = _Seat(conn, address, disc)
            self._seats.append(seat)
            seat.send(Connect(self.settings.cols, self.settings.rows, disc))

    def _play(self) -> Status:
        current = 0
        while not self.board.get_status().is_terminal:
            seat = self._seats[current]
            other = self._seats[1 - current]
            if not seat.send(MakeMove()):
                return self._abort(f"Player {seat.disc.value} disconnected", [other])

            line = seat.receive()
            if line is None:
                return self._abort(f"Player {seat.disc.value} disconnected", [other])
            try:
                message = decode(line)
            except MalformedMessage as exc:
                return self._abort(f"Bad message from player {seat.disc.value}: {exc}")
            if not isinstance(message, Move):
                return self._abort(f"Expected {Command.MOVE} from player {seat.disc.value}")

            try:
                row = self.board.apply_move(message.column, seat.disc)
            except InvalidMove as exc:
                return self._abort(f"Illegal move by player {seat.disc.value}: {exc}")
            logger.info("Player %s dropped into column %d, row %d", seat.disc.value, message.column, row)

            if self.settings.snapshots:
                update: Message = board_state(self.board.snapshot())
            else:
                update = MoveMade(message.column, row, seat.disc)
            self._broadcast(update)
            current = 1 - current

        self._announce_outcome()
        return self.board.get_status()

    def _announce_outcome(self):
        status = self.board.get_status()
        first, second = self._seats
        if status is Status.I_WON:
            first.send(GameOver(Status.I_WON))
            second.send(GameOver(Status.I_LOST))
            logger.info("Player 1 wins")
        elif status is Status.I_LOST:
            first.send(GameOver(Status.I_LOST))
            second.send(GameOver(Status.I_WON))
            logger.info("Player 2 wins")
        else:
            self._broadcast(GameOver(Status.TIED))
            logger.info("Tie game")

    def _abort(self, reason: str, seats: Optional[List[_Seat]] = None) -> Status:
        logger.error("Game aborted: %s", reason)
        self.board.error(reason)
        for seat in self._seats if seats is None else seats:
            seat.send(ServerError(reason))
        return Status.ERROR

    def _broadcast(self, message: Message):
        for seat in self._seats:
            seat.send(message)
