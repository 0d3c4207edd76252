"""Contracts — offer generation, starting runs, and folding results back in."""

from __future__ import annotations

import logging
import math
import random
import time
import uuid

from breach.data.balance import BALANCE
from breach.data.factions import ALL_FACTIONS
from breach.data.modifiers import MODIFIER_POOL
from breach.data.roster import ALL_CREATURES, ALL_STAFF, CREATURE_STATS, CREATURE_TYPES
from breach.engine import events
from breach.engine.economy import compute_bonuses
from breach.engine.events import Notice, declined
from breach.engine.game_state import Bonuses, Contract, EconomyState, FactionState
from breach.engine.run_state import RunConfig, RunResult

logger = logging.getLogger(__name__)

_TITLES = (
    "Data Extraction", "Security Override", "Pattern Analysis", "Asset Recovery",
    "Firewall Breach", "Quantum Stabilization", "Neural Mapping", "Hazard Cleanup",
    "Protocol Omega", "Void Stare", "Core Dump", "System Shock", "Mainframe Dive",
    "Ghost Hunt", "Logic Bomb", "Zero Day", "Encryption Break", "Satellite Uplink",
    "Memory Retrieval", "Code Injection", "Server Farm Raid", "Bioshack Defense",
    "AI Containment", "Algorithm Training", "Dark Web Scan", "Signal Intercept",
)

_GEM_ROLLS: dict[str, tuple[int, int]] = {
    # difficulty: (base, random spread)
    "Omega": (15, 15),
    "Black Ops": (8, 8),
    "Extreme": (3, 5),
    "High": (1, 2),
}


def _first_match(table, value, default):
    for threshold, result in table:
        if value >= threshold:
            return result
    return default


def difficulty_for_tier(tier: int) -> str:
    return _first_match(BALANCE.contracts.difficulty_by_tier, tier, "Low")


def grid_for_tier(tier: int) -> int:
    for above, size in BALANCE.contracts.grid_by_tier:
        if tier > above:
            return size
    return 4


def quota_for_tier(tier: int) -> int:
    bal = BALANCE.contracts
    return max(bal.quota_floor, math.floor(bal.quota_floor + tier * bal.quota_per_tier * bal.quota_growth ** tier))


# ── Generation ───────────────────────────────────────────────────


def generate_contract(
    faction_id: str,
    faction: FactionState,
    completed: int,
    *,
    now: float | None = None,
    rng: random.Random | None = None,
) -> Contract:
    """Build a fresh offer for *faction_id*, scaled by overall progress.

    Args:
        faction_id: Issuing faction.
        faction: That faction's standing (its level sweetens rewards).
        completed: Contracts completed so far; every few raise the tier.
        now: Wall-clock time used for expiry (default: now).
        rng: Random source (default: the ``random`` module).

    Returns:
        A MISSION or, occasionally, a TRADE offer.
    """
    bal = BALANCE.contracts
    rng = rng or random
    now = time.time() if now is None else now
    fdef = ALL_FACTIONS[faction_id]

    tier = max(1, completed // bal.contracts_per_tier + 1 + rng.randint(-1, 1))

    if rng.random() < bal.trade_chance:
        req_type = rng.choice(CREATURE_TYPES)
        req_stat = rng.choice(CREATURE_STATS)
        req_value = min(90, 20 + tier * 2 + rng.randrange(20))
        price = (500 + tier * 150) * (0.8 + rng.random() * 0.4)
        return Contract(
            id=f"t_{faction_id}_{uuid.uuid4().hex[:8]}",
            faction_id=faction_id,
            title=f"Acquisition: {req_type} Asset",
            kind="TRADE",
            tier=tier,
            reward_credits=math.floor(price),
            grid_size=0,
            expires_at=now + bal.trade_expiry_s,
            trade_req_type=req_type,
            trade_req_stat=req_stat,
            trade_req_value=req_value,
        )

    difficulty = difficulty_for_tier(tier)
    scaling = bal.reward_growth ** (tier - 1)
    credits = bal.base_reward_credits * scaling * fdef.credit_mult
    data = bal.base_reward_data * scaling * fdef.data_mult
    duration = dict(bal.base_duration_by_difficulty).get(difficulty, 30) + fdef.bonus_duration_s

    modifiers: list[str] = []
    for _ in range(min(bal.max_modifiers, tier // bal.modifiers_per_tier)):
        modifiers.append(rng.choice(MODIFIER_POOL))
    if fdef.signature_modifier:
        modifiers.append(fdef.signature_modifier)

    rep_mult = max(0.5, 1 + faction.level * 0.1)
    reward_credits = math.floor(credits * rep_mult * (0.9 + rng.random() * 0.2))
    reward_data = math.floor(data * rep_mult * (0.9 + rng.random() * 0.2))

    gems = 0
    if difficulty in _GEM_ROLLS:
        base, spread = _GEM_ROLLS[difficulty]
        gems = base + rng.randrange(spread)
    if fdef.extra_gem_chance and rng.random() < fdef.extra_gem_chance:
        gems += 1

    title = f"{rng.choice(_TITLES)} {rng.randrange(999)}"
    if tier > 10:
        title += f" MK-{tier}"

    return Contract(
        id=f"c_{faction_id}_{uuid.uuid4().hex[:8]}",
        faction_id=faction_id,
        title=title,
        difficulty=difficulty,
        tier=tier,
        deposit=math.floor(reward_credits * bal.deposit_fraction),
        reward_credits=reward_credits,
        reward_data=reward_data,
        reward_gems=gems,
        duration_s=duration,
        quota=quota_for_tier(tier),
        grid_size=grid_for_tier(tier),
        # Dedupe, keeping first-seen order
        modifiers=list(dict.fromkeys(modifiers)),
        expires_at=now + bal.offer_expiry_min_s + rng.randrange(int(bal.offer_expiry_spread_s)),
    )


def simulation_cost(duration_s: int) -> int:
    bal = BALANCE.simulation
    return math.floor(duration_s * bal.cost_per_second * bal.cost_growth ** (duration_s / bal.cost_growth_period_s))


def clamp_duration(duration_s: float) -> int:
    bal = BALANCE.simulation
    return int(min(bal.max_duration_s, max(bal.min_duration_s, duration_s)))


# ── Starting runs ────────────────────────────────────────────────


def run_config_for(contract: Contract, bonuses: Bonuses) -> RunConfig:
    """Combine a contract's terms with the player's stats."""
    return RunConfig(
        duration_s=clamp_duration(contract.duration_s),
        quota=None if contract.is_infinite else contract.quota,
        grid_size=contract.grid_size,
        difficulty=contract.difficulty,
        modifiers=frozenset(contract.modifiers),
        is_infinite=contract.is_infinite,
        click_power=bonuses.click_power,
        crit_chance=bonuses.crit_chance,
        max_stability=bonuses.max_stability,
        stability_regen=bonuses.stability_regen,
        life_extension=bonuses.life_extension,
    )


def start_contract(state: EconomyState, contract_id: str) -> tuple[Contract | None, list[Notice]]:
    """Pay the deposit and lock an offer in for a run."""
    contract = state.find_contract(contract_id)
    if contract is None:
        return None, [declined("start", f"unknown contract {contract_id!r}")]
    if contract.is_trade:
        return None, [declined("start", "trade offers are fulfilled, not run")]
    if contract.accepted:
        return None, [declined("start", "contract already in progress")]
    if state.credits < contract.deposit:
        return None, [declined("start", f"need {contract.deposit} credits deposit")]
    state.credits -= contract.deposit
    contract.accepted = True
    logger.info("Contract %s started (tier %d, %s)", contract.id, contract.tier, contract.difficulty)
    return contract, [Notice(events.CONTRACT_STARTED, contract.id, contract.deposit, contract.title)]


def start_simulation(state: EconomyState, duration_s: float) -> tuple[Contract | None, list[Notice]]:
    """Buy an infinite simulation run.  Duration is clamped, not rejected."""
    duration = clamp_duration(duration_s)
    cost = simulation_cost(duration)
    if state.credits < cost:
        return None, [declined("simulation", f"need {cost} credits")]
    state.credits -= cost
    sim = BALANCE.simulation
    contract = Contract(
        id=f"sim_{uuid.uuid4().hex[:8]}",
        faction_id="omnicorp",
        title="Deep Dive Simulation",
        difficulty="Simulation",
        tier=sim.tier,
        duration_s=duration,
        quota=sim.quota,
        grid_size=BALANCE.breach.infinite_start_grid,
        is_infinite=True,
        accepted=True,
    )
    return contract, [Notice(events.CONTRACT_STARTED, contract.id, cost, contract.title)]


# ── Completion ───────────────────────────────────────────────────


def xp_for_next_level(level: int) -> int:
    bal = BALANCE.contracts
    return math.floor(bal.base_xp * level ** bal.xp_level_exponent)


def _train_staff(state: EconomyState, score: int, bonuses: Bonuses) -> list[Notice]:
    bal = BALANCE.contracts
    notices = []
    for sid in state.active_staff_ids:
        sdef = ALL_STAFF.get(sid)
        progress = state.progress(sid)
        if sdef is None or not progress.alive:
            continue
        gain = math.floor(
            bal.base_xp * bonuses.xp_mult * (1 + score / bal.xp_score_divisor)
            * (1 + sdef.base_intelligence * bal.xp_per_intelligence)
        )
        progress.xp += gain
        while progress.xp >= xp_for_next_level(progress.level):
            progress.xp -= xp_for_next_level(progress.level)
            progress.level += 1
            notices.append(Notice(events.STAFF_LEVEL_UP, sid, progress.level, sdef.name))
        fatigue = max(1.0, bal.fatigue_gain_base - sdef.base_stamina * bal.fatigue_gain_per_stamina)
        progress.fatigue = min(BALANCE.economy.max_fatigue, progress.fatigue + fatigue)
    return notices


def _gain_reputation(state: EconomyState, contract: Contract) -> list[Notice]:
    faction = state.factions.setdefault(contract.faction_id, FactionState())
    faction.reputation += BALANCE.contracts.base_rep_gain + contract.tier
    if faction.reputation < faction.max_reputation:
        return []
    faction.level += 1
    faction.reputation = 0
    faction.max_reputation = math.floor(faction.max_reputation * BALANCE.contracts.rep_growth)
    return [Notice(events.FACTION_LEVEL_UP, contract.faction_id, faction.level)]


def complete_contract(
    state: EconomyState,
    contract: Contract,
    result: RunResult,
    *,
    rng: random.Random | None = None,
    now: float | None = None,
) -> list[Notice]:
    """Fold a finished run back into the economy.

    Gems collected from currency nodes are kept whatever the outcome.
    Pool missions are replaced with a fresh offer either way.
    """
    if not contract.is_infinite and contract not in state.contracts:
        return []

    bonuses = compute_bonuses(state)
    notices: list[Notice] = []
    if result.gems:
        state.gems += result.gems

    if result.success:
        notices.extend(_train_staff(state, result.score, bonuses))
        credits = math.floor(contract.reward_credits * bonuses.credit_mult)
        data = math.floor(contract.reward_data * bonuses.data_mult)
        gems = math.floor(contract.reward_gems * bonuses.gem_mult)
        state.credits += credits
        state.data += data
        state.gems += gems
        if not contract.is_infinite:
            notices.extend(_gain_reputation(state, contract))
            state.contracts_completed += 1
        notices.append(Notice(events.CONTRACT_COMPLETED, contract.id, credits, contract.title))
        logger.info("Contract %s completed: score=%d credits=%d data=%d", contract.id, result.score, credits, data)
    else:
        notices.append(Notice(events.CONTRACT_FAILED, contract.id, result.score, contract.title))
        logger.info("Contract %s failed: score=%d", contract.id, result.score)

    if not contract.is_infinite:
        index = state.contracts.index(contract)
        faction = state.factions.setdefault(contract.faction_id, FactionState())
        state.contracts[index] = generate_contract(
            contract.faction_id, faction, state.contracts_completed, rng=rng, now=now
        )
    return notices


def fulfill_trade(
    state: EconomyState,
    contract_id: str,
    creature_id: str,
    *,
    rng: random.Random | None = None,
    now: float | None = None,
) -> list[Notice]:
    """Sell an owned creature that meets a trade offer's requirement.

    The sold offer is replaced with a fresh one from the same faction.
    """
    contract = state.find_contract(contract_id)
    if contract is None or not contract.is_trade:
        return [declined("trade", f"unknown trade offer {contract_id!r}")]
    if creature_id not in state.owned_creature_ids:
        return [declined("trade", f"creature {creature_id!r} not owned")]
    cdef = ALL_CREATURES[creature_id]
    if cdef.type != contract.trade_req_type or cdef.stat(contract.trade_req_stat) <= contract.trade_req_value:
        return [declined("trade", "creature does not meet the requirement")]

    state.owned_creature_ids.remove(creature_id)
    state.creature_status.pop(creature_id, None)
    index = state.contracts.index(contract)
    faction = state.factions.setdefault(contract.faction_id, FactionState())
    state.contracts[index] = generate_contract(
        contract.faction_id, faction, state.contracts_completed, rng=rng, now=now
    )
    state.credits += contract.reward_credits
    return [Notice(events.TRADE_FULFILLED, contract_id, contract.reward_credits, cdef.variant)]


def listed_offers(state: EconomyState, limit: int = 9) -> list[Contract]:
    """Open offers in display order: missions by tier, then trades."""
    open_offers = [c for c in state.contracts if not c.accepted and not c.is_infinite]
    open_offers.sort(key=lambda c: (c.is_trade, c.tier, c.faction_id))
    return open_offers[:limit]


def qualifying_creatures(state: EconomyState, contract: Contract) -> list[str]:
    """Owned creatures that would satisfy a trade offer."""
    return [
        cid for cid in state.owned_creature_ids
        if cid in ALL_CREATURES
        and ALL_CREATURES[cid].type == contract.trade_req_type
        and ALL_CREATURES[cid].stat(contract.trade_req_stat) > contract.trade_req_value
    ]
