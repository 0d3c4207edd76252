"""Contract board — numbered list of open offers."""

from __future__ import annotations

import time

from rich.text import Text
from textual.widget import Widget

from breach.data.factions import ALL_FACTIONS
from breach.data.modifiers import ALL_MODIFIERS
from breach.engine.contracts import listed_offers, qualifying_creatures, simulation_cost
from breach.engine.economy import format_number
from breach.engine.game_state import EconomyState

_DIFFICULTY_STYLES = {
    "Low": "green",
    "Medium": "yellow",
    "High": "dark_orange",
    "Extreme": "red",
    "Black Ops": "bold red",
    "Omega": "bold magenta",
}


class ContractBoard(Widget):
    """Shows up to nine offers; the number keys pick one."""

    DEFAULT_CSS = """
    ContractBoard {
        width: 100%;
        height: 100%;
        padding: 1;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._state: EconomyState | None = None
        self._sim_duration = 60

    def render(self) -> Text:
        text = Text()
        if self._state is None:
            return text
        s = self._state
        now = time.time()

        text.append("  ─── Contracts ───\n\n", style="bold cyan")
        offers = listed_offers(s)
        if not offers:
            text.append("  No offers right now.\n", style="dim")

        for i, contract in enumerate(offers, start=1):
            fdef = ALL_FACTIONS.get(contract.faction_id)
            faction_name = fdef.name if fdef else contract.faction_id
            color = fdef.color if fdef else "white"
            left = max(0, int(contract.expires_at - now))

            text.append(f"  [{i}] ", style="bold cyan")
            if contract.is_trade:
                ok = bool(qualifying_creatures(s, contract))
                text.append(f"{contract.title} ", style="bold white" if ok else "dim")
                text.append(f"({faction_name})\n", style=color)
                text.append(
                    f"      {contract.trade_req_stat} > {contract.trade_req_value}"
                    f"  → {format_number(contract.reward_credits)} credits  {left}s\n",
                    style="dim",
                )
                continue

            affordable = s.credits >= contract.deposit
            text.append(f"{contract.title} ", style="bold white" if affordable else "dim")
            text.append(f"({faction_name}) ", style=color)
            text.append(f"{contract.difficulty}\n", style=_DIFFICULTY_STYLES.get(contract.difficulty, "white"))
            text.append(
                f"      T{contract.tier}  quota {contract.quota}  {contract.duration_s}s"
                f"  {contract.grid_size}x{contract.grid_size}  deposit {contract.deposit}  {left}s\n",
                style="dim",
            )
            reward = f"      +{format_number(contract.reward_credits)} cr  +{format_number(contract.reward_data)} data"
            if contract.reward_gems:
                reward += f"  +{contract.reward_gems} gems"
            text.append(reward + "\n", style="green")
            if contract.modifiers:
                names = ", ".join(
                    ALL_MODIFIERS[m].name if m in ALL_MODIFIERS else m for m in contract.modifiers
                )
                text.append(f"      {names}\n", style="italic yellow")

        text.append("\n  ─── Simulation ───\n", style="bold magenta")
        text.append(f"  [S] Deep dive {self._sim_duration}s ", style="bold")
        text.append(f"— {format_number(simulation_cost(self._sim_duration))} credits", style="yellow")
        text.append("  [ [ / ] ] adjust\n", style="dim")
        return text

    def update_from_state(self, state: EconomyState, sim_duration: int) -> None:
        self._state = state
        self._sim_duration = sim_duration
        self.refresh()
