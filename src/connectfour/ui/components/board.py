import flet as ft

from connectfour.game.board import Disc

DISC_COLORS = {
    Disc.EMPTY: "#f5f5f5",
    Disc.PLAYER_ONE: "#1a1a1a",
    Disc.PLAYER_TWO: "#c62828",
}
FRAME_COLOR = "#1565c0"
FRAME_COLOR_DISABLED = "#5c7ea6"


class BoardComponent:
    def __init__(self, cols: int, rows: int, on_click_callback, cell_size: float = 64):
        self.cols = cols
        self.rows = rows
        self.on_click = on_click_callback
        self.cell_size = cell_size
        self.enabled = False

        # State
        self.discs = {}  # Map (col, row) -> disc Container
        self.cells = {}  # Map (col, row) -> cell Container
        self.contents = {}  # Map (col, row) -> Disc currently drawn
        self.board_grid: ft.Column | None = None

    def create_board(self) -> ft.Column:
        self.board_grid = ft.Column(self._build_rows(), spacing=0)
        return self.board_grid

    def rebuild(self, cols: int, rows: int):
        """Redraw an empty grid for new geometry from the handshake."""
        self.cols = cols
        self.rows = rows
        rows_controls = self._build_rows()
        if self.board_grid is not None:
            self.board_grid.controls = rows_controls
            self._refresh(self.board_grid)

    def _build_rows(self) -> list:
        self.discs = {}
        self.cells = {}
        self.contents = {}
        rows = []
        disc_size = int(self.cell_size * 0.78)
        for r in range(self.rows):
            row_controls = []
            for c in range(self.cols):
                disc = ft.Container(
                    width=disc_size,
                    height=disc_size,
                    border_radius=disc_size / 2,
                    bgcolor=DISC_COLORS[Disc.EMPTY],
                )
                cell = ft.Container(
                    content=disc,
                    width=self.cell_size,
                    height=self.cell_size,
                    bgcolor=self._frame_color(),
                    alignment=ft.alignment.center,
                    on_click=lambda e, col=c: self.handle_click(col),
                    data=(c, r),
                )
                self.discs[(c, r)] = disc
                self.cells[(c, r)] = cell
                self.contents[(c, r)] = Disc.EMPTY
                row_controls.append(cell)
            rows.append(ft.Row(row_controls, spacing=0, tight=True))
        return rows

    def handle_click(self, col: int):
        # Clicking anywhere in a column drops into that column.
        if self.enabled:
            self.on_click(col)

    def update_disc(self, col: int, row: int, disc: Disc) -> bool:
        if (col, row) not in self.discs or self.contents.get((col, row)) is disc:
            return False
        self.contents[(col, row)] = disc
        piece = self.discs[(col, row)]
        piece.bgcolor = DISC_COLORS[disc]
        if disc is Disc.EMPTY:
            piece.shadow = None
        else:
            piece.shadow = ft.BoxShadow(
                blur_radius=8,
                spread_radius=1,
                color="rgba(0,0,0,0.35)",
                offset=ft.Offset(0, 3),
            )
        self._refresh(piece)
        return True

    def set_enabled(self, enabled: bool):
        if self.enabled == enabled:
            return
        self.enabled = enabled
        for cell in self.cells.values():
            cell.bgcolor = self._frame_color()
        if self.board_grid is not None:
            self._refresh(self.board_grid)

    def _frame_color(self) -> str:
        return FRAME_COLOR if self.enabled else FRAME_COLOR_DISABLED

    @staticmethod
    def _refresh(control: ft.Control):
        if control.page:
            control.update()
