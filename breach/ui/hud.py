"""Lab HUD — resource pools, passive income, and the active roster."""

from __future__ import annotations

from rich.text import Text
from textual.widget import Widget

from breach.data.roster import ALL_STAFF
from breach.engine.economy import compute_bonuses, format_number, passive_rates
from breach.engine.game_state import EconomyState


def _bar(value: float, maximum: float, width: int = 10) -> str:
    filled = 0 if maximum <= 0 else round(width * max(0.0, min(1.0, value / maximum)))
    return "█" * filled + "░" * (width - filled)


class LabHUD(Widget):
    """Heads-up display for the economy side of the game."""

    DEFAULT_CSS = """
    LabHUD {
        width: 100%;
        height: 100%;
        padding: 1;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._state: EconomyState | None = None

    def render(self) -> Text:
        text = Text()
        if self._state is None:
            return text
        s = self._state
        credit_rate, data_rate = passive_rates(s)
        bonuses = compute_bonuses(s)

        text.append("  === LAB ===\n\n", style="bold cyan")

        text.append("  Credits: ", style="dim")
        text.append(f"{format_number(s.credits)}", style="bold green")
        text.append(f"  (+{format_number(credit_rate)}/s)\n", style="green")
        text.append("  Data:    ", style="dim")
        text.append(f"{format_number(s.data)}", style="bold bright_blue")
        text.append(f"  (+{format_number(data_rate)}/s)\n", style="bright_blue")
        text.append("  Gems:    ", style="dim")
        text.append(f"{format_number(s.gems)}\n", style="bold magenta")

        text.append("\n  Contracts done: ", style="dim")
        text.append(f"{s.contracts_completed}\n", style="bold")
        text.append("  Creatures: ", style="dim")
        text.append(f"{len(s.owned_creature_ids)}\n", style="bold")

        text.append("\n  ─── Bonuses ───\n", style="bold yellow")
        text.append(f"  Click power {bonuses.click_power:.0f}  ", style="yellow")
        text.append(f"Crit {bonuses.crit_chance * 100:.0f}%\n", style="yellow")
        text.append(f"  Stability {bonuses.max_stability:.0f}  ", style="yellow")
        text.append(f"Regen {bonuses.stability_regen:.1f}/s\n", style="yellow")
        text.append(f"  Credits x{bonuses.credit_mult:.2f}  ", style="yellow")
        text.append(f"Data x{bonuses.data_mult:.2f}\n", style="yellow")

        text.append("\n  ─── Active staff ───\n", style="bold cyan")
        if not s.active_staff_ids:
            text.append("  (none — [L] to manage)\n", style="dim")
        for sid in s.active_staff_ids:
            sdef = ALL_STAFF.get(sid)
            progress = s.progress(sid)
            name = sdef.name if sdef else sid
            text.append(f"  {name} Lv{progress.level}\n", style="bold")
            text.append(f"    HP  {_bar(progress.health, 100)} {progress.health:.0f}\n", style="green")
            text.append(f"    FTG {_bar(progress.fatigue, 100)} {progress.fatigue:.0f}\n", style="red")
            if progress.disease:
                text.append(f"    ☣ {progress.disease}\n", style="bold red")

        return text

    def update_from_state(self, state: EconomyState) -> None:
        self._state = state
        self.refresh()
