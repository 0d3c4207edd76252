"""Resolution engine — scoring and penalties for hits, misses and expiries.

Every function here assumes the caller already checked the run is live.
Terminal transitions are left to the caller so it can order them.
"""

from __future__ import annotations

import math
import random
from collections.abc import Callable
from dataclasses import dataclass, field

from breach.data.balance import BALANCE
from breach.data.cell_kinds import CELL_KINDS, CellKind, CellKindDef, ExpiryEffect
from breach.engine import events
from breach.engine.cells import CellRegistry
from breach.engine.events import Notice
from breach.engine.run_state import RunConfig, RunState


def apply_stability(state: RunState, delta: float) -> None:
    """Shift stability by *delta*, clamped to [0, max_stability]."""
    state.stability = min(state.max_stability, max(0.0, state.stability + delta))


def combo_multiplier(combo: int) -> float:
    bal = BALANCE.breach
    return 1.0 + (combo // bal.combo_tier_size) * bal.combo_tier_bonus


def base_score(kind_def: CellKindDef, config: RunConfig, combo: int) -> int:
    """Score for a final hit before the lucky-crit roll."""
    points = kind_def.points(config.is_infinite) + config.click_power
    return math.floor(points * combo_multiplier(combo))


# ── Hits & misses ────────────────────────────────────────────────


def resolve_hit(
    state: RunState,
    config: RunConfig,
    registry: CellRegistry,
    cell_id: int,
    rng: random.Random,
) -> list[Notice]:
    """Resolve one click on a live cell.  A stale id is a silent no-op."""
    cell = registry.get(cell_id)
    if cell is None:
        return []
    bal = BALANCE.breach
    subject = str(cell.id)

    if cell.kind is CellKind.HAZARD:
        penalty = bal.hazard_penalty_volatile if config.has("volatile") else bal.hazard_penalty
        registry.remove(cell.id)
        apply_stability(state, -penalty)
        state.combo = 0
        return [Notice(events.HAZARD_TRIGGERED, subject, penalty, "TRAP")]

    if cell.hits_remaining > 1:
        cell.hits_remaining -= 1
        label = "SHIELD HIT" if cell.kind is CellKind.SHIELDED else "HIT"
        return [Notice(events.PARTIAL_HIT, subject, cell.hits_remaining, label)]

    kind_def = CELL_KINDS[cell.kind]
    notices: list[Notice] = []
    if cell.kind is CellKind.CURRENCY_NODE:
        state.gems_collected += bal.currency_node_gems
        notices.append(Notice(events.CURRENCY_GAINED, subject, bal.currency_node_gems, "+GEM"))
    elif not kind_def.scores:
        notices.append(Notice(events.FILED, subject, 0, "FILED"))
    else:
        points = base_score(kind_def, config, state.combo)
        if kind_def.crit_eligible and rng.random() < config.crit_chance:
            points = math.floor(points * bal.lucky_crit_mult)
            notices.append(Notice(events.LUCKY_CRIT, subject, points, "CRIT!"))
        state.score += points
        notices.append(Notice(events.HIT, subject, points, f"+{points}"))

    state.combo += 1
    state.max_combo = max(state.max_combo, state.combo)
    registry.remove(cell.id)
    return notices


def resolve_miss(state: RunState, config: RunConfig) -> list[Notice]:
    """Resolve a click on empty space."""
    bal = BALANCE.breach
    if config.has("precision"):
        penalty = bal.miss_penalty_precision
    elif config.has("volatile"):
        penalty = bal.miss_penalty_volatile
    else:
        penalty = bal.miss_penalty
    apply_stability(state, -penalty)
    state.combo = 0
    return [Notice(events.MISS, amount=penalty, text="MISS")]


# ── Expiry ───────────────────────────────────────────────────────


@dataclass
class ExpiryOutcome:
    """Summed effects of every cell that expired in one frame."""

    damage: float = 0.0
    score_penalty: int = 0
    replicas: int = 0
    combo_broken: bool = False
    notices: list[Notice] = field(default_factory=list)


def _expire_nothing(outcome: ExpiryOutcome, config: RunConfig) -> None:
    pass


def _expire_combo_break(outcome: ExpiryOutcome, config: RunConfig) -> None:
    outcome.combo_broken = True


def _expire_stability(outcome: ExpiryOutcome, config: RunConfig) -> None:
    bal = BALANCE.breach
    outcome.combo_broken = True
    outcome.damage += bal.expiry_penalty_volatile if config.has("volatile") else bal.expiry_penalty


def _expire_score(outcome: ExpiryOutcome, config: RunConfig) -> None:
    outcome.combo_broken = True
    outcome.score_penalty += BALANCE.breach.paperwork_score_penalty


def _expire_explosion(outcome: ExpiryOutcome, config: RunConfig) -> None:
    outcome.combo_broken = True
    outcome.damage += BALANCE.breach.explosion_penalty


def _expire_replicate(outcome: ExpiryOutcome, config: RunConfig) -> None:
    bal = BALANCE.breach
    outcome.combo_broken = True
    outcome.damage += bal.pathogen_penalty
    outcome.replicas += (
        bal.replicas_per_expiry_replicator if config.has("replicator") else bal.replicas_per_expiry
    )


_EXPIRY_HANDLERS: dict[ExpiryEffect, Callable[[ExpiryOutcome, RunConfig], None]] = {
    ExpiryEffect.NOTHING: _expire_nothing,
    ExpiryEffect.COMBO_BREAK: _expire_combo_break,
    ExpiryEffect.STABILITY: _expire_stability,
    ExpiryEffect.SCORE: _expire_score,
    ExpiryEffect.EXPLOSION: _expire_explosion,
    ExpiryEffect.REPLICATE: _expire_replicate,
}


def collect_expiries(
    config: RunConfig,
    registry: CellRegistry,
    dt_ms: float,
) -> ExpiryOutcome:
    """Age every live cell by *dt_ms* and remove the ones that ran out.

    Nothing is applied to the run here; see ``apply_expiries``.
    """
    outcome = ExpiryOutcome()
    for cell in registry.all():
        cell.life_ms -= dt_ms
        if cell.life_ms > 0:
            continue
        registry.remove(cell.id)
        _EXPIRY_HANDLERS[CELL_KINDS[cell.kind].expiry](outcome, config)
        outcome.notices.append(Notice(events.EXPIRED, str(cell.id), text=cell.kind.name))
    return outcome


def apply_expiries(state: RunState, outcome: ExpiryOutcome) -> None:
    """Apply one frame's summed expiry effects as a single batch."""
    if outcome.combo_broken and state.combo > 0:
        state.combo = 0
        outcome.notices.append(Notice(events.COMBO_BROKEN))
    if outcome.damage:
        apply_stability(state, -outcome.damage)
    if outcome.score_penalty:
        state.score = max(0, state.score - outcome.score_penalty)


def regenerate(state: RunState, config: RunConfig, dt_ms: float) -> None:
    """Passive stability regen for *dt_ms* of running time."""
    if config.stability_regen <= 0 or config.has("fragile"):
        return
    apply_stability(state, config.stability_regen * dt_ms / 1000.0)
