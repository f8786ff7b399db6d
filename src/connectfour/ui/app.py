import flet as ft

from connectfour.game.board import Status
from connectfour.protocol.interface import GameInterface
from connectfour.ui.components.board import BoardComponent
from connectfour.ui.components.scoreboard import ScoreboardComponent

OUTCOME_MESSAGES = {
    Status.I_WON: ("You won!", "#1b5e20"),
    Status.I_LOST: ("You lost.", "#b71c1c"),
    Status.TIED: ("Tie game.", "#37474f"),
    Status.ERROR: ("Game aborted.", "#b71c1c"),
}


def status_message(outcome: Status, my_turn: bool) -> tuple[str, str]:
    """Status line text and color for the given game state."""
    if outcome in OUTCOME_MESSAGES:
        return OUTCOME_MESSAGES[outcome]
    if my_turn:
        return "Your turn: pick a column", "#1565c0"
    return "Waiting for opponent...", "#333333"


class ConnectFourApp:
    def __init__(self, client: GameInterface):
        self.client = client
        self.client.register_for_updates(self.handle_state_changed)
        self.page: ft.Page | None = None

        cols, rows = client.get_dimensions()
        self.board_component = BoardComponent(cols, rows, on_click_callback=self.on_column_click)
        self.scoreboard_component = ScoreboardComponent()
        self.log_view = ft.ListView(expand=True, spacing=4, padding=0, auto_scroll=True)
        self._last_outcome = Status.NOT_OVER

    def main(self, page: ft.Page):
        self.page = page
        page.title = "Connect Four"
        page.theme_mode = ft.ThemeMode.LIGHT
        page.window.width = 900
        page.window.height = 720
        page.padding = 20
        page.on_disconnect = self.on_disconnect

        board_grid = self.board_component.create_board()
        scoreboard = self.scoreboard_component.create()

        log_container = ft.Container(
            content=self.log_view,
            border=ft.border.all(1, "grey400"),
            border_radius=5,
            padding=5,
            expand=True,
            bgcolor="grey100"
        )
        sidebar = ft.Container(
            content=ft.Column(
                [
                    ft.Text("Connect Four", size=30, weight=ft.FontWeight.BOLD),
                    ft.Divider(),
                    ft.Text("Game Log", size=16, weight=ft.FontWeight.BOLD),
                    log_container,
                ],
                spacing=10,
                expand=True,
            ),
            width=280,
            padding=10,
            bgcolor="grey50"
        )
        board_area = ft.Container(
            content=ft.Column(
                [
                    scoreboard,
                    ft.Container(
                        content=board_grid,
                        padding=16,
                        border_radius=16,
                        bgcolor="#0d47a1",
                    ),
                ],
                spacing=16,
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            ),
            alignment=ft.alignment.center,
            expand=True,
            padding=16,
            bgcolor="grey200"
        )

        page.add(
            ft.Row(
                [sidebar, ft.VerticalDivider(width=1), board_area],
                expand=True,
                vertical_alignment=ft.CrossAxisAlignment.STRETCH
            )
        )
        page.update()

        self.refresh()
        # Only start receiving once the controls exist.
        self.client.start()
        self.log("System: Connected, waiting for the server")

    def handle_state_changed(self):
        """
        Board notification. Runs on the session's receive thread, so the
        actual redraw is handed to the page's event loop.
        """
        page = self.page
        if page is None:
            return
        page.run_task(self._refresh_async)

    async def _refresh_async(self):
        self.refresh()

    def refresh(self):
        cols, rows = self.client.get_dimensions()
        if (cols, rows) != (self.board_component.cols, self.board_component.rows):
            self.log(f"System: Board is {cols}x{rows}")
            self.board_component.rebuild(cols, rows)

        for row in range(rows):
            for col in range(cols):
                self.board_component.update_disc(col, row, self.client.get_cell_state(col, row))

        outcome = self.client.get_outcome()
        my_turn = self.client.get_turn_status()
        self.board_component.set_enabled(my_turn and outcome is Status.NOT_OVER)
        self.scoreboard_component.set_player(self.client.get_player())
        self.scoreboard_component.set_moves_left(self.client.get_moves_left())
        self.scoreboard_component.set_status(*status_message(outcome, my_turn))

        if outcome is not self._last_outcome:
            self._last_outcome = outcome
            self.log(f"GAME OVER: {status_message(outcome, my_turn)[0]}")

    def on_column_click(self, col: int):
        if self.client.submit_move(col):
            self.log(f"GUI: Dropped into column {col + 1}")
            self.board_component.set_enabled(False)
        else:
            self.log(f"Warning: Column {col + 1} not accepted")

    def on_disconnect(self, e):
        self.client.shutdown()

    def log(self, message: str):
        self.log_view.controls.append(
            ft.Text(message, font_family="monospace", size=10, selectable=True)
        )
        if self.log_view.page:
            self.log_view.update()
