import socket
import threading

import pytest

from connectfour.config import ClientSettings, ServerSettings
from connectfour.game.board import Disc, Status
from connectfour.network.client import ConnectFourClient
from connectfour.network.server import GameServer
from connectfour.network.session import SessionState


class RunningServer:
    """GameServer playing one game on a background thread."""

    def __init__(self, **options):
        self.server = GameServer(ServerSettings(host="127.0.0.1", port=0, **options))
        _, self.port = self.server.bind()
        self.outcome = None
        self.thread = threading.Thread(target=self._run, daemon=True)
        self.thread.start()

    def _run(self):
        self.outcome = self.server.serve()

    def join(self) -> Status:
        self.thread.join(10)
        assert not self.thread.is_alive()
        return self.outcome


@pytest.fixture
def running_server():
    servers = []

    def _start(**options) -> RunningServer:
        running = RunningServer(**options)
        servers.append(running)
        return running

    yield _start
    for running in servers:
        running.server.close()


def join_players(port: int, wait_for):
    players = []
    for _ in range(2):
        client = ConnectFourClient.connect(ClientSettings("127.0.0.1", port, connect_timeout=5))
        client.start()
        # Seats are handed out in connection order.
        wait_for(lambda: client.session.state is SessionState.ACTIVE)
        players.append(client)
    return players


def play(players, columns, wait_for):
    for i, column in enumerate(columns):
        mover = players[i % 2]
        wait_for(lambda: mover.submit_move(column))


def finish(players, wait_for):
    wait_for(lambda: all(p.get_outcome().is_terminal for p in players))


@pytest.fixture
def players_cleanup():
    players = []
    yield players
    for player in players:
        player.shutdown()


@pytest.mark.parametrize("snapshots", [False, True], ids=["deltas", "snapshots"])
def test_full_game_to_a_win(running_server, players_cleanup, wait_for, snapshots):
    running = running_server(snapshots=snapshots)
    first, second = join_players(running.port, wait_for)
    players_cleanup.extend([first, second])

    assert first.get_player() is Disc.PLAYER_ONE
    assert second.get_player() is Disc.PLAYER_TWO

    play([first, second], [3, 0, 3, 0, 3, 0, 3], wait_for)
    finish([first, second], wait_for)

    assert first.get_outcome() is Status.I_WON
    assert second.get_outcome() is Status.I_LOST
    assert running.join() is Status.I_WON
    for player in (first, second):
        assert player.get_moves_left() == 35
        assert [player.get_cell_state(3, row) for row in range(2, 6)] == [Disc.PLAYER_ONE] * 4


def test_full_game_to_a_tie(running_server, players_cleanup, wait_for):
    running = running_server(cols=2, rows=2)
    players = join_players(running.port, wait_for)
    players_cleanup.extend(players)
    assert players[0].get_dimensions() == (2, 2)

    play(players, [0, 1, 0, 1], wait_for)
    finish(players, wait_for)

    assert [p.get_outcome() for p in players] == [Status.TIED, Status.TIED]
    assert running.join() is Status.TIED


def test_second_player_can_win(running_server, players_cleanup, wait_for):
    running = running_server()
    players = join_players(running.port, wait_for)
    players_cleanup.extend(players)

    play(players, [0, 4, 1, 4, 0, 4, 1, 4], wait_for)
    finish(players, wait_for)

    assert players[0].get_outcome() is Status.I_LOST
    assert players[1].get_outcome() is Status.I_WON
    assert running.join() is Status.I_LOST


# --- Raw connections ---


def raw_player(port: int):
    sock = socket.create_connection(("127.0.0.1", port), timeout=5)
    return sock, sock.makefile("r", encoding="utf-8", newline="\n")


def test_handshake_lines(running_server):
    running = running_server(cols=8, rows=5)
    one, one_reader = raw_player(running.port)
    assert one_reader.readline() == "CONNECT 8 5 1\n"
    two, two_reader = raw_player(running.port)
    assert two_reader.readline() == "CONNECT 8 5 2\n"
    assert one_reader.readline() == "MAKE_MOVE\n"

    one.sendall(b"MOVE 2\n")
    assert one_reader.readline() == "MOVE_MADE 2 4 1\n"
    assert two_reader.readline() == "MOVE_MADE 2 4 1\n"
    assert two_reader.readline() == "MAKE_MOVE\n"
    for sock in (one, two):
        sock.close()


def test_illegal_move_aborts_for_both(running_server):
    running = running_server()
    one, one_reader = raw_player(running.port)
    one_reader.readline()
    two, two_reader = raw_player(running.port)
    two_reader.readline()
    assert one_reader.readline() == "MAKE_MOVE\n"

    one.sendall(b"MOVE 9\n")
    assert one_reader.readline().startswith("ERROR Illegal move")
    assert two_reader.readline().startswith("ERROR Illegal move")
    assert running.join() is Status.ERROR
    for sock in (one, two):
        sock.close()


def test_garbage_aborts_the_game(running_server):
    running = running_server()
    one, one_reader = raw_player(running.port)
    one_reader.readline()
    two, two_reader = raw_player(running.port)
    two_reader.readline()
    one_reader.readline()

    one.sendall(b"MAKE_MOVE\n")
    assert one_reader.readline().startswith("ERROR")
    assert two_reader.readline().startswith("ERROR")
    assert running.join() is Status.ERROR
    for sock in (one, two):
        sock.close()


def test_disconnect_is_reported_to_the_opponent(running_server):
    running = running_server()
    one, one_reader = raw_player(running.port)
    one_reader.readline()
    two, two_reader = raw_player(running.port)
    two_reader.readline()
    one_reader.readline()

    one_reader.close()
    one.close()
    assert two_reader.readline() == "ERROR Player 1 disconnected\n"
    assert running.join() is Status.ERROR
    two.close()


def test_bind_fails_on_a_busy_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
        busy.bind(("127.0.0.1", 0))
        busy.listen(1)
        port = busy.getsockname()[1]
        server = GameServer(ServerSettings(host="127.0.0.1", port=port))
        with pytest.raises(OSError):
            server.bind()
