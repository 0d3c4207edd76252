"""Tests for the spawn policy — kind rules, pacing and placement."""

import random

from breach.data.cell_kinds import CellKind
from breach.engine.cells import Cell, CellRegistry
from breach.engine.run_state import RunConfig, RunState
from breach.engine.spawn import (
    choose_kind,
    lifetime_ms,
    spawn_cell,
    spawn_due,
    spawn_interval_ms,
    spawn_replicas,
)


class ScriptedRng:
    """Returns queued values from ``random()``; everything else is seeded."""

    def __init__(self, *values):
        self._values = list(values)
        self._fallback = random.Random(0)

    def random(self):
        return self._values.pop(0) if self._values else 0.99

    def randrange(self, n):
        return self._fallback.randrange(n)


def _counter(start=1):
    n = iter(range(start, 10_000))
    return lambda: next(n)


# ── Kind selection ───────────────────────────────────────────────


def test_plain_when_nothing_matches():
    assert choose_kind(RunConfig(), RunState(), ScriptedRng(0.99)) is CellKind.PLAIN


def test_modifier_rule_wins_first():
    config = RunConfig(modifiers=frozenset({"bureaucracy", "shielded"}))
    assert choose_kind(config, RunState(), ScriptedRng(0.0)) is CellKind.PAPERWORK


def test_later_modifier_rule_when_earlier_misses():
    config = RunConfig(modifiers=frozenset({"bureaucracy", "shielded"}))
    # paperwork draw misses, shielded draw hits
    assert choose_kind(config, RunState(), ScriptedRng(0.5, 0.1)) is CellKind.SHIELDED


def test_hazard_on_low_roll():
    assert choose_kind(RunConfig(), RunState(), ScriptedRng(0.05)) is CellKind.HAZARD


def test_critical_band_above_hazard():
    config = RunConfig(crit_chance=0.05)
    assert choose_kind(config, RunState(), ScriptedRng(0.12)) is CellKind.CRITICAL


def test_reinforced_uses_the_same_roll():
    """A second draw would be 0.99 and miss; one shared draw of 0.2 hits reinforced."""
    config = RunConfig(crit_chance=0.05)
    assert choose_kind(config, RunState(), ScriptedRng(0.2, 0.99, 0.99)) is CellKind.REINFORCED


def test_volatile_widens_hazard_band():
    config = RunConfig(modifiers=frozenset({"volatile"}))
    assert choose_kind(config, RunState(), ScriptedRng(0.15)) is CellKind.HAZARD


def test_infinite_currency_node_first():
    config = RunConfig(is_infinite=True)
    assert choose_kind(config, RunState(), ScriptedRng(0.01)) is CellKind.CURRENCY_NODE


def test_infinite_high_tier_kinds_gated_by_time():
    config = RunConfig(is_infinite=True)
    early = RunState(elapsed_s=10)
    late = RunState(elapsed_s=60)
    # currency miss, paperwork miss, then a low draw
    assert choose_kind(config, early, ScriptedRng(0.9, 0.9, 0.01)) is CellKind.HAZARD
    assert choose_kind(config, late, ScriptedRng(0.9, 0.9, 0.01)) is CellKind.EXPLOSIVE


# ── Pacing ───────────────────────────────────────────────────────


def test_interval_by_difficulty():
    assert spawn_interval_ms(RunConfig(difficulty="Low"), RunState()) == 800
    assert spawn_interval_ms(RunConfig(difficulty="Omega"), RunState()) == 220
    assert spawn_interval_ms(RunConfig(difficulty="Unheard Of"), RunState()) == 800


def test_interval_modifiers_and_combo():
    rushed = RunConfig(modifiers=frozenset({"rushed"}))
    assert spawn_interval_ms(rushed, RunState()) == 800 * 0.85
    assert spawn_interval_ms(RunConfig(), RunState(combo=11)) == 800 * 0.9
    assert spawn_interval_ms(RunConfig(), RunState(combo=10)) == 800


def test_infinite_interval_shrinks_to_floor():
    config = RunConfig(is_infinite=True)
    assert spawn_interval_ms(config, RunState(elapsed_s=100)) == 500
    assert spawn_interval_ms(config, RunState(elapsed_s=1000)) == 200


def test_spawn_due():
    config = RunConfig()
    assert not spawn_due(config, RunState(since_last_spawn_ms=800))
    assert spawn_due(config, RunState(since_last_spawn_ms=801))
    assert spawn_due(config, RunState())


def test_lifetime_with_extension():
    config = RunConfig(life_extension=1.0)
    assert lifetime_ms(CellKind.PLAIN, config, RunState()) == 4000
    assert lifetime_ms(CellKind.PLAIN, RunConfig(life_extension=0), RunState()) == 2000


def test_lifetime_chaos_and_infinite():
    chaos = RunConfig(life_extension=0, modifiers=frozenset({"chaos"}))
    assert lifetime_ms(CellKind.PLAIN, chaos, RunState()) == 1400
    infinite = RunConfig(life_extension=0, is_infinite=True)
    assert lifetime_ms(CellKind.PLAIN, infinite, RunState(elapsed_s=150)) == 1000
    # shrink is capped at 60%
    assert lifetime_ms(CellKind.PLAIN, infinite, RunState(elapsed_s=900)) == 800


# ── Placement ────────────────────────────────────────────────────


def test_spawn_cell_places_on_free_tile():
    reg = CellRegistry()
    cell = spawn_cell(reg, RunConfig(), RunState(grid_size=4), random.Random(1), _counter())
    assert cell is not None
    assert reg.get(cell.id) is cell
    assert 0 <= cell.x < 4 and 0 <= cell.y < 4
    assert cell.life_ms == cell.life_total_ms


def test_spawn_cell_skips_full_grid():
    reg = CellRegistry()
    for i, (x, y) in enumerate([(0, 0), (1, 0), (0, 1)]):
        reg.add(Cell(100 + i, CellKind.PLAIN, x, y, 1, 1000, 1000))
    cell = spawn_cell(reg, RunConfig(), RunState(grid_size=2), random.Random(1), _counter())
    assert cell is None
    assert len(reg) == 3


def test_hardened_reinforced_takes_three_hits():
    config = RunConfig(modifiers=frozenset({"hardened"}), crit_chance=0.05)
    reg = CellRegistry()
    rng = ScriptedRng(0.4)
    cell = spawn_cell(reg, config, RunState(), rng, _counter())
    assert cell.kind is CellKind.REINFORCED
    assert cell.hits_remaining == 3


def test_spawn_replicas_respects_capacity():
    reg = CellRegistry()
    reg.add(Cell(1, CellKind.PLAIN, 0, 0, 1, 1000, 1000))
    placed = spawn_replicas(reg, RunState(grid_size=2), 5, random.Random(2), _counter(start=2))
    assert len(reg) <= 3
    assert len(placed) == len(reg) - 1
    for cell in placed:
        assert cell.kind is CellKind.PATHOGEN
        assert cell.life_total_ms == 2500


def test_refused_cells_are_not_reported():
    reg = CellRegistry()
    reg.add(Cell(1, CellKind.PLAIN, 0, 0, 1, 1000, 1000))

    def same_id():
        return 1

    assert spawn_cell(reg, RunConfig(), RunState(), random.Random(0), same_id) is None
    assert spawn_replicas(reg, RunState(), 3, random.Random(0), same_id) == []
    assert len(reg) == 1
