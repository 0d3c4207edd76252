"""Breach — Main Textual Application.

Wires the economy ticker, contract pool and breach runs into a playable TUI.
"""

from __future__ import annotations

import logging
import time

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.logging import TextualHandler
from textual.timer import Timer
from textual.widgets import Footer, Header

from breach.data.balance import BALANCE
from breach.engine import events
from breach.engine.contracts import (
    complete_contract,
    fulfill_trade,
    generate_contract,
    listed_offers,
    qualifying_creatures,
    run_config_for,
    start_contract,
    start_simulation,
)
from breach.engine.economy import EconomyDriver, catch_up_offline, compute_bonuses, replenish_contracts
from breach.engine.events import Notice
from breach.engine.gacha import perform_creature_gacha, perform_staff_gacha
from breach.engine.game_state import Contract, EconomyState
from breach.engine.minigame import MiniGame
from breach.engine.run_state import RunResult
from breach.engine.save import load_state, save_state
from breach.ui.contract_board import ContractBoard
from breach.ui.hud import LabHUD
from breach.ui.lab_screen import LabScreen
from breach.ui.run_screen import RunScreen

logger = logging.getLogger(__name__)

_SIM_STEP_S = 30


class BreachApp(App):
    """The Breach TUI game application."""

    TITLE = "Breach Protocol"
    SUB_TITLE = "Hire. Contain. Breach."

    CSS = """
    #lab-container {
        height: 1fr;
    }

    #hud-panel {
        width: 40;
        border-right: solid $primary;
    }

    #contract-board {
        width: 1fr;
    }
    """

    BINDINGS = [
        *[Binding(str(i), f"pick_offer({i - 1})", f"Offer {i}", show=False) for i in range(1, 10)],
        Binding("s", "simulation", "Simulation", show=True),
        Binding("[", "sim_duration(-1)", "Shorter sim", show=False),
        Binding("]", "sim_duration(1)", "Longer sim", show=False),
        Binding("g", "staff_gacha", "Recruit staff", show=True),
        Binding("k", "creature_gacha", "Contain creature", show=True),
        Binding("l", "show_lab", "Lab", show=True),
        Binding("q", "quit_game", "Quit", show=True),
    ]

    # Auto-save every N seconds
    _AUTO_SAVE_INTERVAL: float = 30.0

    def __init__(self) -> None:
        super().__init__()
        saved = load_state()
        self._state: EconomyState = saved if saved is not None else EconomyState()
        self._driver = EconomyDriver(self._state, contract_factory=generate_contract)
        self._last_autosave: float = time.time()
        self._sim_duration: int = 60
        self._in_run: Contract | None = None
        self._tick_timer: Timer | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="lab-container"):
            yield LabHUD(id="hud-panel")
            yield ContractBoard(id="contract-board")
        yield Footer()

    def on_mount(self) -> None:
        notices = catch_up_offline(self._state, contract_factory=generate_contract)
        replenish_contracts(self._state, generate_contract)
        gained = sum(n.amount for n in notices if n.kind == events.RESOURCE_GAINED and n.subject == "credits")
        if gained > 0:
            logger.info("Offline catch-up granted %.0f credits", gained)
            self.notify(f"While you were away: +{gained:.0f} credits", timeout=4)
        self._driver.tick()
        self._tick_timer = self.set_interval(1.0, self._economy_tick)
        self._sync_ui()

    def _economy_tick(self) -> None:
        self._report(self._driver.tick())
        now = time.time()
        if now - self._last_autosave >= self._AUTO_SAVE_INTERVAL:
            if not save_state(self._state):
                logger.warning("Autosave failed")
            self._last_autosave = now
        self._sync_ui()

    def _sync_ui(self) -> None:
        self.query_one("#hud-panel", LabHUD).update_from_state(self._state)
        self.query_one("#contract-board", ContractBoard).update_from_state(self._state, self._sim_duration)

    def _report(self, notices: list[Notice]) -> None:
        """Turn notable notices into toasts."""
        for notice in notices:
            if notice.kind == events.ACTION_DECLINED:
                self.notify(f"✗ {notice.text}", severity="error", timeout=2)
            elif notice.kind == events.STAFF_INCAPACITATED:
                self.notify(f"☣ {notice.text}", severity="error", timeout=4)
            elif notice.kind == events.EMERGENCY_GRANT:
                self.notify(f"Emergency funding: +{notice.amount:.0f} credits", severity="warning", timeout=4)
            elif notice.kind == events.RECRUITED:
                self.notify(f"★ Recruited {notice.text}", severity="warning", timeout=3)
            elif notice.kind == events.DUPLICATE_REFUND:
                self.notify(f"Duplicate {notice.text} → +{notice.amount:.0f} data", timeout=3)
            elif notice.kind == events.STAFF_LEVEL_UP:
                self.notify(f"{notice.text} reached Lv{notice.amount:.0f}", timeout=3)
            elif notice.kind == events.FACTION_LEVEL_UP:
                self.notify(f"Standing with {notice.subject} rose to Lv{notice.amount:.0f}", timeout=3)
            elif notice.kind == events.CONTRACT_COMPLETED:
                self.notify(f"✔ {notice.text}: +{notice.amount:.0f} credits", timeout=3)
            elif notice.kind == events.CONTRACT_FAILED:
                self.notify(f"✖ {notice.text} failed", severity="error", timeout=3)
            elif notice.kind == events.TRADE_FULFILLED:
                self.notify(f"Sold {notice.text} for {notice.amount:.0f} credits", timeout=3)

    # ── Runs ─────────────────────────────────────────────

    def _launch(self, contract: Contract) -> None:
        config = run_config_for(contract, compute_bonuses(self._state))
        self._in_run = contract
        self.push_screen(RunScreen(MiniGame(config), contract), self._on_run_finished)

    def _on_run_finished(self, result: RunResult | None) -> None:
        contract = self._in_run
        self._in_run = None
        if contract is None or result is None:
            return
        self._report(complete_contract(self._state, contract, result))
        save_state(self._state)
        self._sync_ui()

    def action_pick_offer(self, index: int) -> None:
        offers = listed_offers(self._state)
        if index >= len(offers):
            return
        offer = offers[index]
        if offer.is_trade:
            matches = qualifying_creatures(self._state, offer)
            if not matches:
                self.notify("No creature meets that requirement.", severity="error", timeout=2)
                return
            self._report(fulfill_trade(self._state, offer.id, matches[0]))
            self._sync_ui()
            return

        contract, notices = start_contract(self._state, offer.id)
        self._report(notices)
        if contract is not None:
            self._launch(contract)

    def action_simulation(self) -> None:
        contract, notices = start_simulation(self._state, self._sim_duration)
        self._report(notices)
        if contract is not None:
            self._launch(contract)

    def action_sim_duration(self, step: int) -> None:
        bal = BALANCE.simulation
        self._sim_duration = max(bal.min_duration_s, min(bal.max_duration_s, self._sim_duration + step * _SIM_STEP_S))
        self._sync_ui()

    # ── Lab actions ──────────────────────────────────────

    def action_staff_gacha(self) -> None:
        self._report(perform_staff_gacha(self._state))
        self._sync_ui()

    def action_creature_gacha(self) -> None:
        self._report(perform_creature_gacha(self._state))
        self._sync_ui()

    def action_show_lab(self) -> None:
        self.push_screen(LabScreen(self._state), lambda _: self._sync_ui())

    def action_quit_game(self) -> None:
        save_state(self._state)
        self.exit()


def configure_logging(level: int = logging.INFO) -> None:
    """Route engine logs to the Textual devtools console."""
    logging.basicConfig(level=level, handlers=[TextualHandler()])
