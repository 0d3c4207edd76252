"""Recruitment pulls for staff and creatures."""

from __future__ import annotations

import logging
import random

from breach.data.balance import BALANCE
from breach.data.roster import ALL_CREATURES, ALL_STAFF
from breach.engine import events
from breach.engine.events import Notice, declined
from breach.engine.game_state import EconomyState

logger = logging.getLogger(__name__)


def roll_rarity(rng: random.Random | None = None) -> str:
    roll = (rng or random).random()
    for threshold, rarity in BALANCE.gacha.rarity_thresholds:
        if roll > threshold:
            return rarity
    return "R"


def _pick(pool_by_rarity: dict[str, list[str]], rarity: str, rng) -> tuple[str, str]:
    """Pick an id of *rarity*, stepping down a rarity when that pool is empty."""
    order = ["UR", "SSR", "SR", "R"]
    for candidate in order[order.index(rarity):]:
        pool = pool_by_rarity.get(candidate)
        if pool:
            return rng.choice(pool), candidate
    raise ValueError("empty recruitment pool")


def perform_staff_gacha(state: EconomyState, rng: random.Random | None = None) -> list[Notice]:
    """Recruit one staff member.  The very first recruit is free."""
    rng = rng or random
    cost = 0.0 if state.free_recruit_available else BALANCE.gacha.staff_cost_gems
    if state.gems < cost:
        return [declined("staff_gacha", f"need {cost:.0f} gems")]
    state.gems -= cost
    state.free_recruit_available = False

    pools: dict[str, list[str]] = {}
    for sdef in ALL_STAFF.values():
        pools.setdefault(sdef.rarity, []).append(sdef.id)
    staff_id, rarity = _pick(pools, roll_rarity(rng), rng)
    sdef = ALL_STAFF[staff_id]

    if staff_id in state.owned_staff_ids:
        refund = dict(BALANCE.gacha.staff_duplicate_data)[rarity]
        state.data += refund
        return [Notice(events.DUPLICATE_REFUND, staff_id, refund, sdef.name)]

    state.owned_staff_ids.append(staff_id)
    state.progress(staff_id)
    logger.info("Recruited %s (%s)", sdef.name, rarity)
    return [Notice(events.RECRUITED, staff_id, cost, f"{sdef.name} [{rarity}]")]


def perform_creature_gacha(state: EconomyState, rng: random.Random | None = None) -> list[Notice]:
    """Contain one creature."""
    rng = rng or random
    cost = BALANCE.gacha.creature_cost_gems
    if state.gems < cost:
        return [declined("creature_gacha", f"need {cost:.0f} gems")]
    state.gems -= cost

    pools: dict[str, list[str]] = {}
    for cdef in ALL_CREATURES.values():
        pools.setdefault(cdef.rarity, []).append(cdef.id)
    creature_id, rarity = _pick(pools, roll_rarity(rng), rng)
    cdef = ALL_CREATURES[creature_id]

    if creature_id in state.owned_creature_ids:
        refund = dict(BALANCE.gacha.creature_duplicate_data)[rarity]
        state.data += refund
        return [Notice(events.DUPLICATE_REFUND, creature_id, refund, cdef.variant)]

    state.owned_creature_ids.append(creature_id)
    state.creature(creature_id)
    logger.info("Contained %s (%s)", cdef.variant, rarity)
    return [Notice(events.RECRUITED, creature_id, cost, f"{cdef.variant} [{rarity}]")]
