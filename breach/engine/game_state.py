"""Game state — single source of truth for the persistent economy."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from breach.data.balance import BALANCE
from breach.data.factions import ALL_FACTIONS

SAVE_VERSION = 2


@dataclass
class StaffProgress:
    """Per-staff mutable attributes."""

    level: int = 1
    xp: float = 0.0
    health: float = 100.0
    fatigue: float = 0.0
    disease: str = ""          # "" = healthy

    @property
    def alive(self) -> bool:
        return self.health > 0


@dataclass
class CreatureStatus:
    fatigue: float = 0.0


@dataclass
class FactionState:
    reputation: float = 0.0
    max_reputation: float = 100.0
    level: int = 1


@dataclass
class Contract:
    """A mission or trade offer in the pool (or a paid simulation)."""

    id: str
    faction_id: str
    title: str
    kind: str = "MISSION"      # MISSION | TRADE
    difficulty: str = "Low"
    tier: int = 1
    deposit: int = 0
    reward_credits: int = 0
    reward_data: int = 0
    reward_gems: int = 0
    duration_s: int = 0
    quota: int = 0
    grid_size: int = 4
    modifiers: list[str] = field(default_factory=list)
    expires_at: float = 0.0
    is_infinite: bool = False
    # Accepted offers are in a run and survive pool pruning
    accepted: bool = False
    trade_req_type: str = ""
    trade_req_stat: str = ""
    trade_req_value: int = 0

    @property
    def is_trade(self) -> bool:
        return self.kind == "TRADE"


@dataclass(frozen=True)
class Bonuses:
    """Player stats derived from staff, research, and faction levels."""

    credit_mult: float = 1.0
    data_mult: float = 1.0
    xp_mult: float = 1.0
    gem_mult: float = 1.0
    stability_regen: float = 1.0
    crit_chance: float = 0.05
    max_stability: float = 100.0
    click_power: float = 1.0
    life_extension: float = 1.0


def _default_factions() -> dict[str, FactionState]:
    return {fid: FactionState() for fid in ALL_FACTIONS}


def _default_creatures() -> list[str]:
    return list(BALANCE.economy.starting_creatures)


@dataclass
class EconomyState:
    """Complete mutable state of the lab between runs."""

    # ── Resource pools ───────────────────────────────────
    credits: float = BALANCE.economy.starting_credits
    data: float = BALANCE.economy.starting_data
    gems: float = BALANCE.economy.starting_gems

    # ── Staff (multipliers) ──────────────────────────────
    owned_staff_ids: list[str] = field(default_factory=list)
    active_staff_ids: list[str] = field(default_factory=list)
    staff_progress: dict[str, StaffProgress] = field(default_factory=dict)
    free_recruit_available: bool = True

    # ── Creatures (generators) ───────────────────────────
    owned_creature_ids: list[str] = field(default_factory=_default_creatures)
    creature_status: dict[str, CreatureStatus] = field(default_factory=dict)

    # ── Research & factions ──────────────────────────────
    research_levels: dict[str, int] = field(default_factory=dict)
    factions: dict[str, FactionState] = field(default_factory=_default_factions)

    # ── Contracts ────────────────────────────────────────
    contracts: list[Contract] = field(default_factory=list)
    contracts_completed: int = 0

    # ── Bookkeeping ──────────────────────────────────────
    last_tick_time: float = field(default_factory=time.time)
    emergency_cooldown_s: float = 0.0
    version: int = SAVE_VERSION

    def progress(self, staff_id: str) -> StaffProgress:
        """Progress record for *staff_id*, created on first access."""
        return self.staff_progress.setdefault(staff_id, StaffProgress())

    def creature(self, creature_id: str) -> CreatureStatus:
        return self.creature_status.setdefault(creature_id, CreatureStatus())

    def find_contract(self, contract_id: str) -> Contract | None:
        for contract in self.contracts:
            if contract.id == contract_id:
                return contract
        return None
