import flet as ft

from connectfour.game.board import Disc

PLAYER_NAMES = {Disc.PLAYER_ONE: "Black", Disc.PLAYER_TWO: "Red"}


class ScoreboardComponent:
    def __init__(self, height: float = 82):
        self.height = height
        self.player_text = ft.Text("Connecting...", size=20, weight=ft.FontWeight.BOLD, color="#111111")
        self.moves_left_text = ft.Text("", size=14, color="#333333")
        self.status_text = ft.Text("Waiting for server...", size=13, color="#333333", weight=ft.FontWeight.BOLD)
        self.container = None

    def create(self) -> ft.Container:
        header_row = ft.Row(
            [self.player_text, self.moves_left_text],
            alignment=ft.MainAxisAlignment.SPACE_BETWEEN,
            vertical_alignment=ft.CrossAxisAlignment.CENTER,
        )
        self.container = ft.Container(
            content=ft.Column(
                [header_row, self.status_text],
                spacing=4,
                alignment=ft.MainAxisAlignment.START,
                horizontal_alignment=ft.CrossAxisAlignment.STRETCH
            ),
            padding=ft.padding.symmetric(vertical=6, horizontal=14),
            bgcolor="#f9f9f9",
            border_radius=14,
            border=ft.border.all(1, "#e0e0e0"),
            shadow=ft.BoxShadow(
                blur_radius=6,
                color="rgba(0,0,0,0.08)",
                offset=ft.Offset(0, 3)
            ),
            height=self.height,
            alignment=ft.alignment.center
        )
        return self.container

    def set_player(self, player: Disc):
        self.player_text.value = f"You play {PLAYER_NAMES.get(player, '?')}"
        if self.player_text.page:
            self.player_text.update()

    def set_moves_left(self, moves_left: int):
        self.moves_left_text.value = f"{moves_left} moves left"
        if self.moves_left_text.page:
            self.moves_left_text.update()

    def set_status(self, message: str, color: str = "#333333"):
        self.status_text.value = message
        self.status_text.color = color
        if self.status_text.page:
            self.status_text.update()
