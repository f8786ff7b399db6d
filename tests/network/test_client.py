import pytest

from connectfour.config import ClientSettings
from connectfour.errors import SessionConnectionError
from connectfour.game.board import Board, Disc, Status
from connectfour.network.client import ConnectFourClient
from connectfour.network.session import NetworkSession


@pytest.fixture
def client(socket_pair):
    client_sock, _ = socket_pair
    board = Board()
    session = NetworkSession(board)
    session.attach(client_sock)
    client = ConnectFourClient(board, session)
    try:
        yield client
    finally:
        client.shutdown()


def test_client_reads_through_to_the_board(client: ConnectFourClient):
    client.session.process_line("CONNECT 6 5 2\n")
    client.session.process_line("MOVE_MADE 1 4 1\n")
    client.session.process_line("MAKE_MOVE\n")

    assert client.get_dimensions() == (6, 5)
    assert client.get_player() is Disc.PLAYER_TWO
    assert client.get_cell_state(1, 4) is Disc.PLAYER_ONE
    assert client.get_turn_status()
    assert client.get_moves_left() == 29
    assert client.get_outcome() is Status.NOT_OVER


def test_callbacks_fire_on_every_board_change(client: ConnectFourClient):
    hits = []
    client.register_for_updates(lambda: hits.append(client.get_moves_left()))
    client.session.process_line("CONNECT 7 6 1\n")
    client.session.process_line("MOVE_MADE 0 5 1\n")
    client.session.process_line("GAME_WON\n")
    assert hits == [42, 41, 41]


def test_callback_registered_twice_fires_once(client: ConnectFourClient):
    hits = []

    def callback():
        hits.append(1)

    client.register_for_updates(callback)
    client.register_for_updates(callback)
    client.session.process_line("CONNECT 7 6 1\n")
    assert hits == [1]


def test_submit_move_goes_to_the_server(client: ConnectFourClient, socket_pair):
    _, server_sock = socket_pair
    assert not client.submit_move(0)
    client.session.process_line("CONNECT 7 6 1\n")
    client.session.process_line("MAKE_MOVE\n")
    assert client.submit_move(6)
    assert server_sock.recv(64) == b"MOVE 6\n"


def test_shutdown_is_idempotent(client: ConnectFourClient):
    client.shutdown()
    client.shutdown()
    assert client.session.closed


def test_connect_failure_raises(free_port: int):
    with pytest.raises(SessionConnectionError):
        ConnectFourClient.connect(ClientSettings("127.0.0.1", free_port, connect_timeout=2))


@pytest.mark.parametrize("host, port", [("", 5000), ("localhost", 0), ("localhost", 65536)])
def test_client_settings_validation(host, port):
    with pytest.raises(ValueError):
        ClientSettings(host, port)
