"""Economy engine — bonuses, passive accrual, staff upkeep, and lab purchases."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable

from breach.data.balance import BALANCE
from breach.data.research import ALL_RESEARCH, ResearchEffect
from breach.data.roster import ALL_CREATURES, ALL_STAFF, StaffBonus, StaffDef
from breach.engine import events
from breach.engine.clock import CoarseClock
from breach.engine.events import Notice, declined
from breach.engine.game_state import Bonuses, Contract, EconomyState, FactionState

logger = logging.getLogger(__name__)

ContractFactory = Callable[[str, FactionState, int], Contract]

_STAFF_BONUS_FIELD: dict[StaffBonus, str] = {
    StaffBonus.CREDIT_MULT: "credit_mult",
    StaffBonus.DATA_MULT: "data_mult",
    StaffBonus.STABILITY_REGEN: "stability_regen",
    StaffBonus.CLICK_POWER: "click_power",
    StaffBonus.LIFE_EXTENSION: "life_extension",
}

_RESEARCH_FIELD: dict[ResearchEffect, str] = {
    ResearchEffect.DATA_MULT: "data_mult",
    ResearchEffect.CREDIT_MULT: "credit_mult",
    ResearchEffect.XP_MULT: "xp_mult",
    ResearchEffect.STABILITY_MAX: "max_stability",
    ResearchEffect.CLICK_POWER: "click_power",
}


# ── Bonuses ──────────────────────────────────────────────────────


def staff_contribution(sdef: StaffDef, level: int) -> float:
    """Bonus an active staff member adds at *level*."""
    return sdef.bonus_value * (1.0 + (level - 1) * BALANCE.economy.staff_bonus_per_level)


def _working_staff(state: EconomyState) -> list[tuple[StaffDef, int]]:
    """Active staff that are still on their feet, with their levels."""
    out = []
    for sid in state.active_staff_ids:
        sdef = ALL_STAFF.get(sid)
        progress = state.staff_progress.get(sid)
        if sdef is None or progress is None or not progress.alive:
            continue
        out.append((sdef, progress.level))
    return out


def compute_bonuses(state: EconomyState) -> Bonuses:
    """Derive player stats from active staff, research levels and faction perks."""
    base = BALANCE.bonuses
    totals = {
        "credit_mult": base.credit_mult,
        "data_mult": base.data_mult,
        "xp_mult": base.xp_mult,
        "gem_mult": base.gem_mult,
        "stability_regen": base.stability_regen,
        "crit_chance": base.crit_chance,
        "max_stability": base.max_stability,
        "click_power": base.click_power,
        "life_extension": base.life_extension,
    }

    for sdef, level in _working_staff(state):
        totals[_STAFF_BONUS_FIELD[sdef.bonus]] += staff_contribution(sdef, level)

    for rid, level in state.research_levels.items():
        rdef = ALL_RESEARCH.get(rid)
        if rdef and level > 0:
            totals[_RESEARCH_FIELD[rdef.effect]] += level * rdef.base_effect

    for faction_id, min_level, name, amount in base.faction_perks:
        faction = state.factions.get(faction_id)
        if faction and faction.level >= min_level:
            totals[name] += amount

    return Bonuses(**totals)


def passive_rates(state: EconomyState) -> tuple[float, float]:
    """(credits/s, data/s) at full efficiency.

    Creatures produce; active healthy staff only multiply.
    """
    bal = BALANCE.economy
    production = sum(
        ALL_CREATURES[cid].production_bonus
        for cid in state.owned_creature_ids
        if cid in ALL_CREATURES
    )
    credit_boost = 0.0
    data_boost = 0.0
    for sdef, level in _working_staff(state):
        if sdef.bonus == StaffBonus.CREDIT_MULT:
            credit_boost += staff_contribution(sdef, level)
        elif sdef.bonus == StaffBonus.DATA_MULT:
            data_boost += staff_contribution(sdef, level)
    return (
        production * bal.credits_per_production * (1.0 + credit_boost),
        production * bal.data_per_production * (1.0 + data_boost),
    )


# ── Ticking ──────────────────────────────────────────────────────


def _seconds_until_incapacitation(state: EconomyState) -> float:
    """Time until the first active staff member's health runs out."""
    drain = BALANCE.economy.disease_health_drain
    soonest = math.inf
    for sid in state.active_staff_ids:
        progress = state.staff_progress.get(sid)
        if progress and progress.disease and progress.alive:
            soonest = min(soonest, progress.health / drain)
    return soonest


def _recover(state: EconomyState, dt: float) -> None:
    bal = BALANCE.economy
    active = set(state.active_staff_ids)
    for sid in state.owned_staff_ids:
        progress = state.progress(sid)
        sdef = ALL_STAFF.get(sid)
        stamina = sdef.base_stamina if sdef else 0
        working = sid in active

        if not working and progress.fatigue > 0:
            rate = bal.fatigue_recovery_base + stamina * bal.fatigue_recovery_per_stamina
            progress.fatigue = max(0.0, progress.fatigue - rate * dt)

        if progress.disease:
            progress.health = max(0.0, progress.health - bal.disease_health_drain * dt)
            if progress.health < 1e-9:
                progress.health = 0.0
        elif not working and progress.alive and progress.health < bal.max_health:
            progress.health = min(bal.max_health, progress.health + bal.health_regen * dt)

    for cid in state.owned_creature_ids:
        status = state.creature(cid)
        if status.fatigue > 0:
            status.fatigue = max(0.0, status.fatigue - bal.creature_fatigue_recovery * dt)


def _bench_incapacitated(state: EconomyState) -> list[Notice]:
    notices = []
    for sid in list(state.active_staff_ids):
        progress = state.staff_progress.get(sid)
        if progress is not None and not progress.alive:
            state.active_staff_ids.remove(sid)
            name = ALL_STAFF[sid].name if sid in ALL_STAFF else sid
            logger.info("Staff %s incapacitated and removed from the active roster", sid)
            notices.append(Notice(events.STAFF_INCAPACITATED, sid, text=f"{name} collapsed"))
    return notices


def prune_contracts(state: EconomyState, now: float) -> list[Notice]:
    """Drop offers past their expiry that nobody accepted."""
    kept: list[Contract] = []
    notices: list[Notice] = []
    for contract in state.contracts:
        if contract.is_infinite or contract.accepted or contract.expires_at > now:
            kept.append(contract)
        else:
            notices.append(Notice(events.CONTRACT_EXPIRED, contract.id, text=contract.title))
    state.contracts = kept
    return notices


def replenish_contracts(state: EconomyState, factory: ContractFactory) -> int:
    """Top each faction's pool back up to its target size.  Returns offers added."""
    target = BALANCE.contracts.offers_per_faction
    added = 0
    for faction_id, faction in state.factions.items():
        have = sum(
            1 for c in state.contracts
            if c.faction_id == faction_id and not c.is_infinite
        )
        for _ in range(target - have):
            state.contracts.append(factory(faction_id, faction, state.contracts_completed))
            added += 1
    return added


def tick_economy(
    state: EconomyState,
    dt: float,
    *,
    now: float | None = None,
    efficiency: float = 1.0,
    contract_factory: ContractFactory | None = None,
) -> list[Notice]:
    """Advance the economy by *dt* seconds.

    Args:
        state: Economy to mutate.
        dt: Elapsed seconds; anything non-positive is a no-op.
        now: Wall-clock time used for offer expiry (default: now).
        efficiency: Multiplier on resource accrual only.
        contract_factory: Generator used to refill the contract pool.

    Returns:
        Notices describing what happened.
    """
    if dt <= 0:
        return []
    bal = BALANCE.economy
    now = time.time() if now is None else now
    notices: list[Notice] = []

    # Split the interval wherever an active staff member drops, so the
    # multiplier set is constant inside every segment.
    credits_gained = 0.0
    data_gained = 0.0
    remaining = dt
    while remaining > 0:
        segment = min(remaining, _seconds_until_incapacitation(state))
        credit_rate, data_rate = passive_rates(state)
        credits_gained += credit_rate * segment * efficiency
        data_gained += data_rate * segment * efficiency
        _recover(state, segment)
        notices.extend(_bench_incapacitated(state))
        remaining -= segment

    state.credits += credits_gained
    state.data += data_gained
    if credits_gained > 0:
        notices.append(Notice(events.RESOURCE_GAINED, "credits", credits_gained))
    if data_gained > 0:
        notices.append(Notice(events.RESOURCE_GAINED, "data", data_gained))

    notices.extend(prune_contracts(state, now))
    if contract_factory is not None:
        replenish_contracts(state, contract_factory)

    state.emergency_cooldown_s = max(0.0, state.emergency_cooldown_s - dt)
    if state.credits < bal.emergency_threshold and state.emergency_cooldown_s <= 0:
        state.credits += bal.emergency_amount
        state.emergency_cooldown_s = bal.emergency_cooldown_s
        logger.info("Emergency funding granted: %.0f credits", bal.emergency_amount)
        notices.append(Notice(events.EMERGENCY_GRANT, "credits", bal.emergency_amount))

    return notices


def catch_up_offline(
    state: EconomyState,
    now: float | None = None,
    contract_factory: ContractFactory | None = None,
) -> list[Notice]:
    """Credit the time spent away at the reduced offline efficiency."""
    now = time.time() if now is None else now
    elapsed = max(0.0, now - state.last_tick_time)
    state.last_tick_time = now
    if elapsed <= 0:
        return []
    logger.info("Offline catch-up: %.0fs", elapsed)
    return tick_economy(
        state,
        elapsed,
        now=now,
        efficiency=BALANCE.economy.offline_efficiency,
        contract_factory=contract_factory,
    )


class EconomyDriver:
    """Feeds whole seconds of wall-clock time to the economy ticker."""

    def __init__(
        self,
        state: EconomyState,
        contract_factory: ContractFactory | None = None,
    ) -> None:
        self.state = state
        self.contract_factory = contract_factory
        self.clock = CoarseClock()
        self._last: float | None = None

    def tick(self, now: float | None = None) -> list[Notice]:
        now = time.time() if now is None else now
        if self._last is None:
            self._last = now
            return []
        seconds = self.clock.advance(now - self._last)
        self._last = now
        if seconds <= 0:
            return []
        notices = tick_economy(
            self.state, seconds, now=now, contract_factory=self.contract_factory
        )
        self.state.last_tick_time = now
        return notices


# ── One-shot actions ─────────────────────────────────────────────


def update_resources(
    state: EconomyState,
    credits: float = 0.0,
    data: float = 0.0,
    gems: float = 0.0,
) -> None:
    """Add (or remove) resources; pools never go below zero."""
    state.credits = max(0.0, state.credits + credits)
    state.data = max(0.0, state.data + data)
    state.gems = max(0.0, state.gems + gems)


def research_cost(state: EconomyState, research_id: str) -> int:
    rdef = ALL_RESEARCH[research_id]
    return rdef.cost_at_level(state.research_levels.get(research_id, 0))


def buy_research(state: EconomyState, research_id: str) -> list[Notice]:
    """Buy the next level of a research project."""
    rdef = ALL_RESEARCH.get(research_id)
    if rdef is None:
        return [declined("research", f"unknown research {research_id!r}")]
    cost = research_cost(state, research_id)
    pool = getattr(state, rdef.cost_type)
    if pool < cost:
        return [declined("research", f"need {cost} {rdef.cost_type}")]
    setattr(state, rdef.cost_type, pool - cost)
    level = state.research_levels.get(research_id, 0) + 1
    state.research_levels[research_id] = level
    return [Notice(events.RESEARCH_BOUGHT, research_id, level, rdef.name)]


def treatment_cost(state: EconomyState, staff_id: str, treatment: str) -> int:
    if treatment == "cure":
        return int(BALANCE.economy.cure_cost)
    progress = state.progress(staff_id)
    return math.ceil(BALANCE.economy.max_health - progress.health)


def treat_staff(state: EconomyState, staff_id: str, treatment: str) -> list[Notice]:
    """Heal a staff member to full health or cure their disease."""
    if staff_id not in state.owned_staff_ids:
        return [declined("treat", f"staff {staff_id!r} not owned")]
    if treatment not in ("heal", "cure"):
        return [declined("treat", f"unknown treatment {treatment!r}")]
    progress = state.progress(staff_id)
    if treatment == "cure" and not progress.disease:
        return [declined("treat", "nothing to cure")]
    cost = treatment_cost(state, staff_id, treatment)
    if state.credits < cost:
        return [declined("treat", f"need {cost} credits")]
    state.credits -= cost
    if treatment == "heal":
        progress.health = BALANCE.economy.max_health
    else:
        progress.disease = ""
    return [Notice(events.STAFF_TREATED, staff_id, cost, treatment)]


def toggle_staff(state: EconomyState, staff_id: str) -> list[Notice]:
    """Move a staff member on or off the active roster."""
    if staff_id not in state.owned_staff_ids:
        return [declined("toggle", f"staff {staff_id!r} not owned")]
    if staff_id in state.active_staff_ids:
        state.active_staff_ids.remove(staff_id)
        return [Notice(events.STAFF_TOGGLED, staff_id, 0, "benched")]
    if len(state.active_staff_ids) >= BALANCE.economy.max_active_staff:
        return [declined("toggle", "active roster full")]
    if not state.progress(staff_id).alive:
        return [declined("toggle", "staff is incapacitated")]
    state.active_staff_ids.append(staff_id)
    return [Notice(events.STAFF_TOGGLED, staff_id, 1, "active")]


def format_number(n: float) -> str:
    """Format a large number with suffix (e.g. 1.23K, 4.56M)."""
    if n < 0:
        return "-" + format_number(-n)
    suffixes = BALANCE.economy.suffixes
    for threshold, suffix in reversed(suffixes):
        if n >= threshold:
            return f"{n / threshold:.2f}{suffix}"
    if n == int(n):
        return str(int(n))
    return f"{n:.1f}"
