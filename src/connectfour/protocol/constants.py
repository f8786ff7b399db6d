class Command:
    """Client -> server."""
    MOVE = "MOVE"               # MOVE <column>


class Response:
    """Server -> client."""
    CONNECT = "CONNECT"         # CONNECT <cols> <rows> <player>
    MAKE_MOVE = "MAKE_MOVE"
    MOVE_MADE = "MOVE_MADE"     # MOVE_MADE <column> <row> <player>
    BOARD = "BOARD"             # BOARD <cols> <rows> <cells>, rows top to bottom
    GAME_WON = "GAME_WON"
    GAME_LOST = "GAME_LOST"
    GAME_TIED = "GAME_TIED"
    ERROR = "ERROR"             # ERROR <reason...>
