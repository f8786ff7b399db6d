class ConnectFourError(Exception):
    """Base exception for the Connect Four client and server."""


class InvalidMove(ConnectFourError, ValueError):
    """Move not legal under the current board state."""


class OutOfRange(ConnectFourError, IndexError):
    """Cell coordinates outside the board."""


class MalformedMessage(ConnectFourError, ValueError):
    """Protocol line that cannot be decoded, or arrives out of order."""

    def __init__(self, reason: str, line: str | None = None):
        self.reason = reason
        self.line = line
        if line is None:
            super().__init__(reason)
        else:
            super().__init__(f"{reason}: {line!r}")


class SessionConnectionError(ConnectFourError, ConnectionError):
    """Stream to the server could not be opened, read or written."""
