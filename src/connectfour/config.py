from __future__ import annotations

from dataclasses import dataclass

DEFAULT_COLS = 7
DEFAULT_ROWS = 6
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 55555
ENCODING = "utf-8"
# Largest board side accepted from the wire or the command line.
MAX_DIMENSION = 64

# Four discs in a line win the game.
WIN_LENGTH = 4


def validate_port(port: int) -> int:
    """Return ``port`` if it is a usable TCP port number, else raise ValueError."""
    if isinstance(port, bool) or not isinstance(port, int):
        raise ValueError(f"Port must be an integer, got {port!r}")
    if not 0 <= port <= 65535:
        raise ValueError(f"Port {port} out of range 0-65535")
    return port


@dataclass(frozen=True)
class ClientSettings:
    host: str
    port: int
    # None blocks until the OS gives up on the connect.
    connect_timeout: float | None = None

    def __post_init__(self):
        if not self.host:
            raise ValueError("Host must not be empty")
        validate_port(self.port)
        if self.port == 0:
            raise ValueError("Port 0 cannot be connected to")


@dataclass(frozen=True)
class ServerSettings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    cols: int = DEFAULT_COLS
    rows: int = DEFAULT_ROWS
    snapshots: bool = False

    def __post_init__(self):
        validate_port(self.port)
        if self.cols < 1 or self.rows < 1:
            raise ValueError(f"Board must be at least 1x1, got {self.cols}x{self.rows}")
        if self.cols > MAX_DIMENSION or self.rows > MAX_DIMENSION:
            raise ValueError(f"Board sides are limited to {MAX_DIMENSION}, got {self.cols}x{self.rows}")
