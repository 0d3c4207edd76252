"""Spawn policy — when, where, what and how long-lived new cells are."""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Callable
from dataclasses import dataclass

from breach.data.balance import BALANCE
from breach.data.cell_kinds import CELL_KINDS, CellKind
from breach.engine.cells import Cell, CellRegistry
from breach.engine.run_state import RunConfig, RunState

logger = logging.getLogger(__name__)

Predicate = Callable[[RunConfig, RunState], bool]
Threshold = Callable[[RunConfig, RunState], float]


def _always(config: RunConfig, state: RunState) -> bool:
    return True


def _modifier(name: str) -> Predicate:
    return lambda config, state: config.has(name)


def _high_tier(config: RunConfig, state: RunState) -> bool:
    return state.elapsed_s > BALANCE.breach.infinite_high_tier_s


def _fixed(chance: float) -> Threshold:
    return lambda config, state: chance


def _hazard_threshold(config: RunConfig, state: RunState) -> float:
    return 0.2 if config.has("volatile") else 0.1


@dataclass(frozen=True)
class SpawnRule:
    """One guarded entry in a kind-selection table.

    A rule whose guard passes draws a number and matches when the draw is
    below its threshold.  ``shared_roll`` rules all compare against the
    same single draw instead of drawing their own.
    """

    kind: CellKind
    threshold: Threshold
    guard: Predicate = _always
    shared_roll: bool = False


# Evaluated top to bottom, first match wins.  This is deliberately not a
# normalized weighted draw: reordering rules changes the drop rates.
FIXED_RULES: tuple[SpawnRule, ...] = (
    SpawnRule(CellKind.PAPERWORK, _fixed(0.20), _modifier("bureaucracy")),
    SpawnRule(CellKind.EXPLOSIVE, _fixed(0.15), _modifier("bombardment")),
    SpawnRule(CellKind.PATHOGEN, _fixed(0.15), _modifier("replicator")),
    SpawnRule(CellKind.SHIELDED, _fixed(0.25), _modifier("shielded")),
    SpawnRule(CellKind.HAZARD, _hazard_threshold, shared_roll=True),
    SpawnRule(
        CellKind.CRITICAL,
        lambda config, state: _hazard_threshold(config, state) + config.crit_chance,
        shared_roll=True,
    ),
    SpawnRule(
        CellKind.REINFORCED,
        lambda config, state: 0.5 if config.has("hardened") else 0.3,
        shared_roll=True,
    ),
)

INFINITE_RULES: tuple[SpawnRule, ...] = (
    SpawnRule(CellKind.CURRENCY_NODE, _fixed(0.03)),
    SpawnRule(CellKind.PAPERWORK, _fixed(0.05)),
    SpawnRule(CellKind.EXPLOSIVE, _fixed(0.05), _high_tier),
    SpawnRule(CellKind.PATHOGEN, _fixed(0.05), _high_tier),
    SpawnRule(CellKind.SHIELDED, _fixed(0.08), _high_tier),
    SpawnRule(CellKind.HAZARD, _fixed(0.10)),
    SpawnRule(CellKind.CRITICAL, _fixed(0.15)),
    SpawnRule(CellKind.REINFORCED, _fixed(0.20)),
)


def choose_kind(config: RunConfig, state: RunState, rng: random.Random) -> CellKind:
    """Walk the rule table for this mode and return the first matching kind."""
    rules = INFINITE_RULES if config.is_infinite else FIXED_RULES
    roll: float | None = None
    for rule in rules:
        if not rule.guard(config, state):
            continue
        if rule.shared_roll:
            if roll is None:
                roll = rng.random()
            draw = roll
        else:
            draw = rng.random()
        if draw < rule.threshold(config, state):
            return rule.kind
    return CellKind.PLAIN


def spawn_interval_ms(config: RunConfig, state: RunState) -> float:
    """Milliseconds that must pass between two spawns."""
    bal = BALANCE.breach
    if config.is_infinite:
        return max(
            bal.infinite_interval_floor_ms,
            bal.infinite_interval_start_ms - state.elapsed_s * bal.infinite_interval_decay_ms,
        )

    interval = dict(bal.spawn_interval_by_difficulty).get(
        config.difficulty, bal.default_spawn_interval_ms
    )
    if config.has("rushed"):
        interval *= bal.rushed_interval_mult
    if config.has("chaos"):
        interval *= bal.chaos_interval_mult
    if state.combo > bal.hot_combo_threshold:
        interval *= bal.hot_combo_interval_mult
    return interval


def lifetime_ms(kind: CellKind, config: RunConfig, state: RunState) -> float:
    """Starting life of a freshly spawned cell of *kind*."""
    bal = BALANCE.breach
    life = CELL_KINDS[kind].base_life_ms
    if config.is_infinite:
        life *= 1.0 - min(bal.infinite_speed_cap, state.elapsed_s / bal.infinite_speed_span_s)
    if config.has("chaos"):
        life = math.floor(life * bal.chaos_life_mult)
    return float(math.floor(life * (1.0 + config.life_extension)))


def spawn_due(config: RunConfig, state: RunState) -> bool:
    return state.since_last_spawn_ms > spawn_interval_ms(config, state)


def spawn_cell(
    registry: CellRegistry,
    config: RunConfig,
    state: RunState,
    rng: random.Random,
    new_id: Callable[[], int],
) -> Cell | None:
    """Place one new cell.  Returns None when the spawn is skipped."""
    if not registry.has_room(state.grid_size):
        return None
    pos = registry.find_free_position(
        state.grid_size, rng, BALANCE.breach.placement_attempts
    )
    if pos is None:
        logger.debug("Spawn skipped: no free position on %dx%d grid", state.grid_size, state.grid_size)
        return None

    kind = choose_kind(config, state, rng)
    life = lifetime_ms(kind, config, state)
    cell = Cell(
        id=new_id(),
        kind=kind,
        x=pos[0],
        y=pos[1],
        hits_remaining=CELL_KINDS[kind].hits(config.has("hardened")),
        life_total_ms=life,
        life_ms=life,
    )
    if not registry.add(cell):
        return None
    return cell


def spawn_replicas(
    registry: CellRegistry,
    state: RunState,
    count: int,
    rng: random.Random,
    new_id: Callable[[], int],
) -> list[Cell]:
    """Place up to *count* pathogen replicas left behind by expired pathogens."""
    bal = BALANCE.breach
    placed: list[Cell] = []
    for _ in range(count):
        if not registry.has_room(state.grid_size):
            break
        pos = registry.find_free_position(state.grid_size, rng, bal.placement_attempts)
        if pos is None:
            continue
        cell = Cell(
            id=new_id(),
            kind=CellKind.PATHOGEN,
            x=pos[0],
            y=pos[1],
            hits_remaining=1,
            life_total_ms=bal.replica_life_ms,
            life_ms=bal.replica_life_ms,
        )
        if not registry.add(cell):
            continue
        placed.append(cell)
    return placed
