"""Lab screen — manage the staff roster and buy research."""

from __future__ import annotations

from rich.text import Text
from textual.binding import Binding
from textual.screen import Screen
from textual.widgets import Footer, Static

from breach.data.research import ALL_RESEARCH
from breach.data.roster import ALL_STAFF
from breach.engine import events
from breach.engine.economy import (
    buy_research,
    format_number,
    research_cost,
    staff_contribution,
    toggle_staff,
    treat_staff,
    treatment_cost,
)
from breach.engine.events import Notice
from breach.engine.game_state import EconomyState

_RESEARCH_KEYS = "12345"


class LabScreen(Screen[None]):
    """Staff roster (select with ↑/↓) and research projects (number keys)."""

    BINDINGS = [
        Binding("escape", "close", "Back"),
        Binding("up", "select(-1)", "Prev", show=False),
        Binding("down", "select(1)", "Next", show=False),
        Binding("t", "toggle", "Toggle active", show=True),
        Binding("h", "treat('heal')", "Heal", show=True),
        Binding("c", "treat('cure')", "Cure", show=True),
        *[Binding(k, f"research({i})", f"Research {k}", show=False) for i, k in enumerate(_RESEARCH_KEYS)],
    ]

    DEFAULT_CSS = """
    LabScreen {
        background: $surface;
        padding: 1 2;
    }

    #lab-staff {
        width: 100%;
        height: auto;
    }

    #lab-research {
        width: 100%;
        height: auto;
        padding-top: 1;
    }
    """

    def __init__(self, state: EconomyState, **kwargs) -> None:
        super().__init__(**kwargs)
        self._state = state
        self._selected = 0

    def compose(self):
        yield Static(id="lab-staff")
        yield Static(id="lab-research")
        yield Footer()

    def on_mount(self) -> None:
        self._refresh_display()

    # ── Actions ──────────────────────────────────────────────────

    def action_close(self) -> None:
        self.dismiss(None)

    def action_select(self, step: int) -> None:
        owned = self._state.owned_staff_ids
        if owned:
            self._selected = (self._selected + step) % len(owned)
        self._refresh_display()

    def _selected_id(self) -> str | None:
        owned = self._state.owned_staff_ids
        if not owned:
            return None
        return owned[min(self._selected, len(owned) - 1)]

    def action_toggle(self) -> None:
        sid = self._selected_id()
        if sid is not None:
            self._report(toggle_staff(self._state, sid))

    def action_treat(self, treatment: str) -> None:
        sid = self._selected_id()
        if sid is not None:
            self._report(treat_staff(self._state, sid, treatment))

    def action_research(self, index: int) -> None:
        ids = list(ALL_RESEARCH)
        if index < len(ids):
            self._report(buy_research(self._state, ids[index]))

    def _report(self, notices: list[Notice]) -> None:
        for notice in notices:
            if notice.kind == events.ACTION_DECLINED:
                self.notify(f"✗ {notice.text}", severity="error", timeout=2)
            elif notice.kind == events.RESEARCH_BOUGHT:
                self.notify(f"{notice.text} → Lv{notice.amount:.0f}", timeout=2)
        self._refresh_display()

    # ── Rendering ────────────────────────────────────────────────

    def _refresh_display(self) -> None:
        s = self._state
        staff = Text()
        staff.append("  ─── Staff ───\n", style="bold cyan")
        staff.append(f"  Credits {format_number(s.credits)}   Data {format_number(s.data)}\n\n", style="dim")
        if not s.owned_staff_ids:
            staff.append("  Nobody hired yet — recruit from the main screen with [G].\n", style="dim")

        selected = self._selected_id()
        for sid in s.owned_staff_ids:
            sdef = ALL_STAFF.get(sid)
            if sdef is None:
                continue
            progress = s.progress(sid)
            marker = "▶" if sid == selected else " "
            active = sid in s.active_staff_ids
            staff.append(f"  {marker} ", style="bold yellow")
            staff.append(f"{sdef.name} ", style="bold white" if active else "white")
            staff.append(f"[{sdef.rarity}] {sdef.role} Lv{progress.level} ", style="dim")
            staff.append("ACTIVE " if active else "", style="bold green")
            bonus = staff_contribution(sdef, progress.level)
            staff.append(f"+{bonus:g} {sdef.bonus.name.lower()}\n", style="yellow")
            staff.append(
                f"      HP {progress.health:.0f}  Fatigue {progress.fatigue:.0f}"
                f"  heal {treatment_cost(s, sid, 'heal')}cr",
                style="dim",
            )
            if progress.disease:
                staff.append(f"  ☣ {progress.disease} (cure {treatment_cost(s, sid, 'cure')}cr)", style="red")
            staff.append("\n")
        self.query_one("#lab-staff", Static).update(staff)

        research = Text()
        research.append("  ─── Research ───\n", style="bold magenta")
        for key, (rid, rdef) in zip(_RESEARCH_KEYS, ALL_RESEARCH.items()):
            level = s.research_levels.get(rid, 0)
            cost = research_cost(s, rid)
            affordable = getattr(s, rdef.cost_type) >= cost
            research.append(f"  [{key}] ", style="bold cyan" if affordable else "dim")
            research.append(f"{rdef.name} Lv{level} ", style="bold white" if affordable else "dim")
            research.append(f"— {format_number(cost)} {rdef.cost_type} ", style="yellow" if affordable else "dim red")
            research.append(f"({rdef.description})\n", style="dim italic")
        self.query_one("#lab-research", Static).update(research)
