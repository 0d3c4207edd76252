"""Tests for the run driver — frame order, terminal states and invariants."""

import random

from breach.data.cell_kinds import CellKind
from breach.engine import events
from breach.engine.cells import Cell
from breach.engine.minigame import Click, MiniGame
from breach.engine.run_state import RunConfig, RunStatus


def _place(game, cell_id, kind, x=0, y=0, hits=1, life=5000.0):
    cell = Cell(cell_id, kind, x, y, hits, life, life)
    assert game.registry.add(cell)
    return cell


def _kinds(notices):
    return [n.kind for n in notices]


def test_hazard_hit_mid_run():
    game = MiniGame(RunConfig(crit_chance=0.0), rng=random.Random(0))
    game.state.combo = 4
    _place(game, 900, CellKind.HAZARD)
    game.hit(900)
    assert game.state.stability == 75.0
    assert game.state.combo == 0
    assert game.status == RunStatus.RUNNING


def test_quota_reached_wins_immediately():
    game = MiniGame(RunConfig(quota=50, duration_s=60, crit_chance=0.0), rng=random.Random(0))
    game.state.score = 49
    _place(game, 900, CellKind.PLAIN)
    notices = game.hit(900)
    assert game.state.score == 51
    assert game.status == RunStatus.WON
    assert game.state.elapsed_s < 60
    assert events.RUN_WON in _kinds(notices)


def test_pathogen_expiry_leaves_exactly_one_replica():
    game = MiniGame(RunConfig(stability_regen=0.0, crit_chance=0.0), rng=random.Random(3))
    _place(game, 900, CellKind.PATHOGEN, life=50.0)
    game.state.since_last_spawn_ms = 0.0

    result = game.advance_frame(60.0)

    assert game.state.stability == 95.0
    cells = game.registry.all()
    assert len(cells) == 1
    assert cells[0].kind is CellKind.PATHOGEN
    assert cells[0].id != 900
    assert cells[0].life_total_ms == 2500
    assert events.REPLICATED in _kinds(result.events)


def test_collapse_loses_fixed_run():
    game = MiniGame(RunConfig(), rng=random.Random(0))
    game.state.stability = 10.0
    _place(game, 900, CellKind.HAZARD)
    notices = game.hit(900)
    assert game.status == RunStatus.LOST
    assert events.RUN_LOST in _kinds(notices)
    assert game.finalize().success is False


def test_infinite_collapse_extracts_with_score():
    game = MiniGame(RunConfig(is_infinite=True), rng=random.Random(0))
    game.state.score = 42
    game.state.stability = 10.0
    _place(game, 900, CellKind.HAZARD)
    game.hit(900)
    assert game.status == RunStatus.WON
    result = game.finalize()
    assert result.success is True
    assert result.score == 42


def test_finalize_is_idempotent():
    game = MiniGame(RunConfig(), rng=random.Random(0))
    assert game.finalize() is None
    game.abandon()
    first = game.finalize()
    second = game.finalize()
    assert first is second
    assert first.success is False
    # Further frames and input change nothing
    game.advance_frame(100.0, Click())
    assert game.finalize() is first
    assert game.state.stability == 100.0


def test_time_budget_ends_fixed_run():
    game = MiniGame(RunConfig(duration_s=1), rng=random.Random(0))
    for _ in range(10):
        game.advance_frame(100.0)
    assert game.state.elapsed_s == 1
    assert game.status == RunStatus.WON


def test_infinite_run_ignores_time_budget():
    game = MiniGame(RunConfig(duration_s=1, is_infinite=True), rng=random.Random(0))
    for _ in range(20):
        game.advance_frame(100.0)
    assert game.state.elapsed_s == 2
    assert game.status == RunStatus.RUNNING
    game.extract()
    assert game.finalize().success is True


def test_frame_delta_is_clamped():
    game = MiniGame(RunConfig(), rng=random.Random(0))
    game.advance_frame(5000.0)
    assert game.state.elapsed_s == 0
    assert game.state.second_accumulator_ms == 100.0


def test_tick_uses_frame_clock():
    game = MiniGame(RunConfig(), rng=random.Random(0))
    game.tick(10_000.0)
    assert game.state.second_accumulator_ms == 0.0
    game.tick(10_050.0)
    assert game.state.second_accumulator_ms == 50.0
    game.tick(60_000.0)
    assert game.state.second_accumulator_ms == 150.0


def test_pause_freezes_the_run():
    game = MiniGame(RunConfig(), rng=random.Random(0))
    game.advance_frame(16.0)
    cells_before = [c.snapshot() for c in game.registry.all()]
    assert game.toggle_pause() is True
    for _ in range(30):
        game.advance_frame(100.0)
    assert game.state.elapsed_s == 0
    assert [c.snapshot() for c in game.registry.all()] == cells_before
    assert game.miss() == []
    assert game.state.stability == 100.0

    game.toggle_pause()
    result = game.advance_frame(0.0)
    assert game.status == RunStatus.RUNNING
    assert events.RESUMED in _kinds(result.events)


def test_visibility_lost_pauses():
    game = MiniGame(RunConfig(), rng=random.Random(0))
    game.visibility_lost()
    assert game.status == RunStatus.PAUSED


def test_click_applied_before_simulation():
    game = MiniGame(RunConfig(crit_chance=0.0), rng=random.Random(0))
    _place(game, 900, CellKind.PLAIN, life=50.0)
    game.state.since_last_spawn_ms = 0.0
    result = game.advance_frame(100.0, Click(900))
    # Hit before it could expire in this frame
    assert game.state.score == 2
    assert game.state.stability == 100.0
    assert events.EXPIRED not in _kinds(result.events)


def test_recently_resolved_id_is_ignored():
    game = MiniGame(RunConfig(crit_chance=0.0), rng=random.Random(0))
    _place(game, 900, CellKind.PLAIN)
    game.hit(900)
    _place(game, 900, CellKind.PLAIN, x=1)
    assert game.hit(900) == []
    assert game.state.score == 2

    game.state.since_last_spawn_ms = 0.0
    game.advance_frame(100.0)
    game.hit(900)
    assert game.state.score > 2


def test_infinite_grid_grows():
    game = MiniGame(RunConfig(is_infinite=True), rng=random.Random(0))
    assert game.state.grid_size == 3
    game.state.elapsed_s = 19
    game.state.second_accumulator_ms = 950.0
    result = game.advance_frame(60.0)
    assert game.state.elapsed_s == 20
    assert game.state.grid_size == 4
    assert events.GRID_GROWN in _kinds(result.events)


def test_frame_result_shape():
    game = MiniGame(RunConfig(), rng=random.Random(0))
    result = game.advance_frame(16.0)
    assert len(result.cells) == 1
    assert set(result.cells[0]) >= {"id", "kind", "x", "y", "hits_remaining", "life_ms"}
    assert result.run["status"] == "RUNNING"


def test_invariants_hold_over_a_long_random_run():
    config = RunConfig(
        duration_s=40,
        difficulty="Omega",
        modifiers=frozenset({"replicator", "chaos", "bombardment"}),
    )
    game = MiniGame(config, rng=random.Random(11))
    player = random.Random(5)
    last_max_combo = 0

    for _ in range(3000):
        click = None
        cells = game.registry.all()
        roll = player.random()
        if cells and roll < 0.3:
            click = Click(player.choice(cells).id)
        elif roll < 0.33:
            click = Click()
        game.advance_frame(16.0, click)

        cells = game.registry.all()
        positions = {(c.x, c.y) for c in cells}
        assert len(positions) == len(cells)
        assert all(0 <= c.x < game.state.grid_size and 0 <= c.y < game.state.grid_size for c in cells)
        assert 0.0 <= game.state.stability <= game.state.max_stability
        assert game.state.max_combo >= last_max_combo
        assert game.state.max_combo >= game.state.combo
        last_max_combo = game.state.max_combo
        if game.finished:
            break

    assert game.finished
