"""Breach grid widget — draws live cells and the player's cursor."""

from __future__ import annotations

from rich.text import Text
from textual.reactive import reactive
from textual.widget import Widget

from breach.data.cell_kinds import CELL_KINDS, CellKind
from breach.engine.minigame import MiniGame

_KIND_STYLES = {
    CellKind.PLAIN: "cyan",
    CellKind.REINFORCED: "bold blue",
    CellKind.CRITICAL: "bold yellow",
    CellKind.HAZARD: "bold red",
    CellKind.PAPERWORK: "white",
    CellKind.EXPLOSIVE: "bold dark_orange",
    CellKind.PATHOGEN: "bold green",
    CellKind.SHIELDED: "bold bright_blue",
    CellKind.CURRENCY_NODE: "bold magenta",
}


class BreachGrid(Widget):
    """Square grid of cells.  Each cell is three characters wide."""

    DEFAULT_CSS = """
    BreachGrid {
        width: 100%;
        height: auto;
        min-height: 9;
        content-align: center middle;
        padding: 1;
    }
    """

    cursor_x: reactive[int] = reactive(0)
    cursor_y: reactive[int] = reactive(0)

    def __init__(self, game: MiniGame, **kwargs) -> None:
        super().__init__(**kwargs)
        self._game = game

    def move_cursor(self, dx: int, dy: int) -> None:
        size = self._game.state.grid_size
        self.cursor_x = (self.cursor_x + dx) % size
        self.cursor_y = (self.cursor_y + dy) % size

    def render(self) -> Text:
        game = self._game
        size = game.state.grid_size
        stealth = game.config.has("stealth")
        text = Text()

        for y in range(size):
            text.append("  ")
            for x in range(size):
                cell = game.registry.find_at(x, y)
                selected = x == self.cursor_x and y == self.cursor_y
                left, right = ("[", "]") if selected else (" ", " ")
                if cell is None:
                    text.append(f"{left}·{right}", style="bold white" if selected else "dim")
                    continue
                kdef = CELL_KINDS[cell.kind]
                style = _KIND_STYLES[cell.kind]
                if stealth and cell.life_fraction > 0.5:
                    style = "dim " + style
                elif cell.life_fraction < 0.25:
                    style = "blink " + style
                glyph = kdef.glyph if cell.hits_remaining <= 1 else str(min(cell.hits_remaining, 9))
                text.append(f"{left}{glyph}{right}", style=style)
            text.append("\n")
        return text
