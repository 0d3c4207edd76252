"""Notices — discrete things that happened, for hosts to render or log.

Both the breach engine and the economy ticker report what they did as a
list of ``Notice`` records instead of touching any UI. Hosts drain them
into toasts, floating text, or the log.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

# ── Breach run ───────────────────────────────────────────────────
HIT = "hit"
PARTIAL_HIT = "partial_hit"
LUCKY_CRIT = "lucky_crit"
FILED = "filed"
CURRENCY_GAINED = "currency_gained"
HAZARD_TRIGGERED = "hazard_triggered"
MISS = "miss"
EXPIRED = "expired"
REPLICATED = "replicated"
COMBO_BROKEN = "combo_broken"
GRID_GROWN = "grid_grown"
PAUSED = "paused"
RESUMED = "resumed"
RUN_WON = "run_won"
RUN_LOST = "run_lost"

# ── Economy ──────────────────────────────────────────────────────
RESOURCE_GAINED = "resource_gained"
STAFF_INCAPACITATED = "staff_incapacitated"
CONTRACT_EXPIRED = "contract_expired"
EMERGENCY_GRANT = "emergency_grant"
ACTION_DECLINED = "action_declined"
CONTRACT_STARTED = "contract_started"
CONTRACT_COMPLETED = "contract_completed"
CONTRACT_FAILED = "contract_failed"
STAFF_LEVEL_UP = "staff_level_up"
FACTION_LEVEL_UP = "faction_level_up"
RECRUITED = "recruited"
DUPLICATE_REFUND = "duplicate_refund"
RESEARCH_BOUGHT = "research_bought"
STAFF_TREATED = "staff_treated"
STAFF_TOGGLED = "staff_toggled"
TRADE_FULFILLED = "trade_fulfilled"


@dataclass(frozen=True)
class Notice:
    """One discrete event.

    ``subject`` names what the notice is about (a cell id, staff id,
    contract id, resource pool...). ``amount`` carries the magnitude
    where there is one.
    """

    kind: str
    subject: str = ""
    amount: float = 0.0
    text: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


def declined(action: str, reason: str) -> Notice:
    """Build the notice for a refused one-shot action."""
    return Notice(ACTION_DECLINED, subject=action, text=reason)
