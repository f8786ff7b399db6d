from connectfour.game.board import Disc
from connectfour.ui.components.board import (
    DISC_COLORS,
    FRAME_COLOR,
    FRAME_COLOR_DISABLED,
    BoardComponent,
)
from connectfour.ui.components.scoreboard import ScoreboardComponent


def make_board(cols=7, rows=6):
    clicks = []
    component = BoardComponent(cols, rows, on_click_callback=clicks.append)
    component.create_board()
    return component, clicks


def test_grid_has_one_cell_per_position():
    component, _ = make_board(7, 6)
    assert len(component.board_grid.controls) == 6
    assert all(len(row.controls) == 7 for row in component.board_grid.controls)
    assert set(component.discs) == {(c, r) for c in range(7) for r in range(6)}


def test_clicks_are_ignored_while_disabled():
    component, clicks = make_board()
    component.handle_click(3)
    assert clicks == []

    component.set_enabled(True)
    component.handle_click(3)
    assert clicks == [3]


def test_enabling_recolors_the_frame():
    component, _ = make_board(2, 2)
    assert all(cell.bgcolor == FRAME_COLOR_DISABLED for cell in component.cells.values())
    component.set_enabled(True)
    assert all(cell.bgcolor == FRAME_COLOR for cell in component.cells.values())


def test_update_disc_only_redraws_changes():
    component, _ = make_board()
    assert component.update_disc(3, 5, Disc.PLAYER_TWO)
    assert component.discs[(3, 5)].bgcolor == DISC_COLORS[Disc.PLAYER_TWO]
    assert component.discs[(3, 5)].shadow is not None
    assert not component.update_disc(3, 5, Disc.PLAYER_TWO)


def test_update_disc_outside_the_grid():
    component, _ = make_board(2, 2)
    assert not component.update_disc(5, 5, Disc.PLAYER_ONE)


def test_rebuild_changes_geometry():
    component, _ = make_board()
    component.update_disc(0, 5, Disc.PLAYER_ONE)
    component.rebuild(4, 3)
    assert (component.cols, component.rows) == (4, 3)
    assert len(component.board_grid.controls) == 3
    assert component.contents[(0, 2)] is Disc.EMPTY
    assert (0, 5) not in component.discs


def test_scoreboard_texts():
    scoreboard = ScoreboardComponent()
    scoreboard.create()
    scoreboard.set_player(Disc.PLAYER_TWO)
    scoreboard.set_moves_left(12)
    scoreboard.set_status("Your turn", "#1565c0")
    assert scoreboard.player_text.value == "You play Red"
    assert scoreboard.moves_left_text.value == "12 moves left"
    assert scoreboard.status_text.color == "#1565c0"
