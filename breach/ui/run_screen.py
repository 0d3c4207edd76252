"""Run screen — hosts one breach run and returns its result on exit."""

from __future__ import annotations

import time

from rich.text import Text
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import Screen
from textual.timer import Timer
from textual.widgets import Footer, Static

from breach.data.modifiers import ALL_MODIFIERS
from breach.engine import events
from breach.engine.game_state import Contract
from breach.engine.minigame import MiniGame
from breach.engine.run_state import RunResult, RunStatus
from breach.ui.breach_grid import BreachGrid

FRAME_HZ = 60.0

# Notices worth a floating line in the run log
_LOG_STYLES = {
    events.HIT: "green",
    events.LUCKY_CRIT: "bold yellow",
    events.PARTIAL_HIT: "cyan",
    events.FILED: "white",
    events.CURRENCY_GAINED: "bold magenta",
    events.HAZARD_TRIGGERED: "bold red",
    events.MISS: "red",
    events.REPLICATED: "green",
    events.GRID_GROWN: "bold cyan",
}


class RunScreen(Screen[RunResult]):
    """Full-screen breach run.  Dismisses with the finalized RunResult."""

    BINDINGS = [
        Binding("up,w", "move(0, -1)", "Up", show=False),
        Binding("down,s", "move(0, 1)", "Down", show=False),
        Binding("left,a", "move(-1, 0)", "Left", show=False),
        Binding("right,d", "move(1, 0)", "Right", show=False),
        Binding("space", "strike", "Strike", show=True, priority=True),
        Binding("p", "toggle_pause", "Pause", show=True),
        Binding("x", "extract", "Extract", show=True),
        Binding("escape", "abandon", "Abandon", show=True),
        Binding("enter", "done", "Continue", show=False),
    ]

    DEFAULT_CSS = """
    RunScreen {
        background: $surface;
        align: center top;
        padding: 1 2;
    }

    #run-header {
        width: 100%;
        height: auto;
    }

    #run-body {
        width: 100%;
        height: auto;
    }

    #run-log {
        width: 100%;
        height: auto;
        padding-top: 1;
    }
    """

    def __init__(self, game: MiniGame, contract: Contract, **kwargs) -> None:
        super().__init__(**kwargs)
        self._game = game
        self._contract = contract
        self._log: list[tuple[str, str]] = []
        self._timer: Timer | None = None

    def compose(self):
        yield Static(id="run-header")
        with Vertical(id="run-body"):
            yield BreachGrid(self._game, id="breach-grid")
        yield Static(id="run-log")
        yield Footer()

    def on_mount(self) -> None:
        self._timer = self.set_interval(1.0 / FRAME_HZ, self._frame)
        self._refresh_display()

    def on_screen_suspend(self) -> None:
        self._game.visibility_lost()

    # ── Loop ─────────────────────────────────────────────────────

    def _frame(self) -> None:
        game = self._game
        result = game.tick(time.monotonic() * 1000.0)
        self._absorb(result.events)

        # Simulations run until the bought time is used up
        if game.config.is_infinite and game.state.elapsed_s >= game.config.duration_s:
            game.extract()
            self._absorb(game.advance_frame(0).events)

        if game.finished and self._timer is not None:
            self._timer.stop()
            self._timer = None
        self._refresh_display()

    def _absorb(self, notices: list[events.Notice]) -> None:
        for notice in notices:
            style = _LOG_STYLES.get(notice.kind)
            if style and notice.text:
                self._log.append((notice.text, style))
        self._log = self._log[-6:]

    # ── Actions ──────────────────────────────────────────────────

    def action_move(self, dx: int, dy: int) -> None:
        self.query_one("#breach-grid", BreachGrid).move_cursor(dx, dy)

    def action_strike(self) -> None:
        grid = self.query_one("#breach-grid", BreachGrid)
        self._absorb(self._game.click_at(grid.cursor_x, grid.cursor_y))
        self._refresh_display()

    def action_toggle_pause(self) -> None:
        self._game.toggle_pause()
        self._refresh_display()

    def action_extract(self) -> None:
        if self._game.config.is_infinite:
            self._game.extract()
            self._absorb(self._game.advance_frame(0).events)
            self._refresh_display()

    def action_abandon(self) -> None:
        if self._game.finished:
            self.action_done()
            return
        self._game.abandon()
        self._absorb(self._game.advance_frame(0).events)
        self._refresh_display()

    def action_done(self) -> None:
        result = self._game.finalize()
        if result is not None:
            self.dismiss(result)

    # ── Rendering ────────────────────────────────────────────────

    def _refresh_display(self) -> None:
        game = self._game
        s = game.state
        cfg = game.config

        h = Text()
        h.append(f"  {self._contract.title}\n", style="bold cyan")
        if cfg.modifiers:
            names = ", ".join(ALL_MODIFIERS[m].name for m in sorted(cfg.modifiers) if m in ALL_MODIFIERS)
            h.append(f"  {names}\n", style="italic yellow")
        h.append("  Score: ", style="dim")
        h.append(f"{s.score}", style="bold green")
        if cfg.quota is not None and not cfg.is_infinite:
            h.append(f" / {cfg.quota}", style="green")
        h.append("   Combo: ", style="dim")
        h.append(f"{s.combo}", style="bold yellow")
        h.append(f" (best {s.max_combo})", style="yellow")
        h.append("   Time: ", style="dim")
        h.append(f"{s.elapsed_s}/{cfg.duration_s}s\n", style="bold")

        pct = 0 if s.max_stability <= 0 else s.stability / s.max_stability
        filled = round(20 * pct)
        bar_style = "green" if pct > 0.5 else "yellow" if pct > 0.25 else "bold red"
        h.append("  Stability ", style="dim")
        h.append("█" * filled + "░" * (20 - filled), style=bar_style)
        h.append(f" {s.stability:.0f}/{s.max_stability:.0f}\n", style=bar_style)

        if s.status == RunStatus.PAUSED:
            h.append("\n  ❚❚ PAUSED — [P] to resume\n", style="bold yellow")
        elif s.status == RunStatus.WON:
            h.append("\n  ✔ BREACH SUCCESSFUL — [Enter] to continue\n", style="bold green")
        elif s.status == RunStatus.LOST:
            h.append("\n  ✖ SYSTEM FAILURE — [Enter] to continue\n", style="bold red")
        self.query_one("#run-header", Static).update(h)

        log = Text()
        for line, style in self._log:
            log.append(f"  {line}\n", style=style)
        self.query_one("#run-log", Static).update(log)

        self.query_one("#breach-grid", BreachGrid).refresh()
