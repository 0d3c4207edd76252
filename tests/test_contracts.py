"""Tests for contract generation, runs and completion."""

import math
import random

import pytest

from breach.data.balance import BALANCE
from breach.engine import events
from breach.engine.contracts import (
    clamp_duration,
    complete_contract,
    fulfill_trade,
    generate_contract,
    listed_offers,
    qualifying_creatures,
    quota_for_tier,
    run_config_for,
    simulation_cost,
    start_contract,
    start_simulation,
    xp_for_next_level,
)
from breach.engine.game_state import Bonuses, Contract, EconomyState, FactionState
from breach.engine.run_state import RunResult


def _kinds(notices):
    return [n.kind for n in notices]


def _mission(**overrides):
    fields = dict(
        id="c_test",
        faction_id="omnicorp",
        title="Core Dump 7",
        difficulty="Low",
        tier=1,
        deposit=18,
        reward_credits=180,
        reward_data=100,
        reward_gems=0,
        duration_s=30,
        quota=35,
        expires_at=1e12,
    )
    fields.update(overrides)
    return Contract(**fields)


def _trade(**overrides):
    fields = dict(
        id="t_test",
        faction_id="bio_syn",
        title="Acquisition: Biological Asset",
        kind="TRADE",
        reward_credits=700,
        grid_size=0,
        expires_at=1e12,
        trade_req_type="Biological",
        trade_req_stat="strength",
        trade_req_value=50,
    )
    fields.update(overrides)
    return Contract(**fields)


# ── Generation ───────────────────────────────────────────────────


def test_generated_offers_are_well_formed():
    rng = random.Random(8)
    kinds = set()
    for _ in range(200):
        contract = generate_contract("omnicorp", FactionState(), 12, now=1_000.0, rng=rng)
        kinds.add(contract.kind)
        assert contract.faction_id == "omnicorp"
        if contract.is_trade:
            assert contract.trade_req_value <= 90
            assert contract.expires_at == 1_000.0 + BALANCE.contracts.trade_expiry_s
            continue
        assert contract.deposit == math.floor(contract.reward_credits * BALANCE.contracts.deposit_fraction)
        assert contract.quota == quota_for_tier(contract.tier)
        assert contract.quota >= BALANCE.contracts.quota_floor
        assert 1_060.0 <= contract.expires_at < 1_180.0
        assert len(contract.modifiers) == len(set(contract.modifiers))
    assert kinds == {"MISSION", "TRADE"}


def test_faction_signature_modifier_is_applied():
    rng = random.Random(2)
    missions = [
        c for c in (generate_contract("red_cell", FactionState(), 0, now=0.0, rng=rng) for _ in range(30))
        if not c.is_trade
    ]
    assert missions
    assert all("volatile" in m.modifiers for m in missions)


def test_tier_drives_difficulty():
    rng = random.Random(1)
    early = [generate_contract("omnicorp", FactionState(), 0, now=0.0, rng=rng) for _ in range(20)]
    late = [generate_contract("omnicorp", FactionState(), 200, now=0.0, rng=rng) for _ in range(20)]
    early_tier = max(c.tier for c in early)
    late_tier = min(c.tier for c in late)
    assert late_tier > early_tier


# ── Starting runs ────────────────────────────────────────────────


def test_start_contract_pays_deposit():
    state = EconomyState(credits=100.0, contracts=[_mission()])
    contract, notices = start_contract(state, "c_test")
    assert contract is not None and contract.accepted
    assert state.credits == 82.0
    assert _kinds(notices) == [events.CONTRACT_STARTED]
    assert listed_offers(state) == []

    again, notices = start_contract(state, "c_test")
    assert again is None
    assert _kinds(notices) == [events.ACTION_DECLINED]


def test_start_contract_declined_when_poor_or_unknown():
    state = EconomyState(credits=5.0, contracts=[_mission()])
    assert start_contract(state, "c_test")[0] is None
    assert state.credits == 5.0
    assert start_contract(state, "nope")[0] is None
    state.contracts.append(_trade())
    assert start_contract(state, "t_test")[0] is None


def test_simulation_duration_is_clamped():
    assert clamp_duration(5) == 30
    assert clamp_duration(10_000) == 600
    state = EconomyState(credits=100_000.0)
    contract, _ = start_simulation(state, 5)
    assert contract.duration_s == 30
    assert contract.is_infinite
    assert state.credits == 100_000.0 - simulation_cost(30)


def test_simulation_cost_grows():
    assert simulation_cost(60) == math.floor(60 * 50 * 1.1)
    assert simulation_cost(600) > 10 * simulation_cost(60)


def test_simulation_declined_when_poor():
    state = EconomyState(credits=10.0)
    contract, notices = start_simulation(state, 60)
    assert contract is None
    assert state.credits == 10.0
    assert _kinds(notices) == [events.ACTION_DECLINED]


def test_run_config_for_contract():
    config = run_config_for(_mission(modifiers=["volatile"]), Bonuses(click_power=3.0))
    assert config.quota == 35
    assert config.duration_s == 30
    assert config.has("volatile")
    assert config.click_power == 3.0

    sim = run_config_for(_mission(is_infinite=True, quota=9_999_999, duration_s=120), Bonuses())
    assert sim.is_infinite
    assert sim.quota is None


# ── Completion ───────────────────────────────────────────────────


def test_xp_curve():
    assert xp_for_next_level(1) == 100
    assert xp_for_next_level(2) == math.floor(100 * 2 ** 2.2)


def test_successful_contract_pays_and_is_replaced():
    mission = _mission(accepted=True)
    state = EconomyState(credits=0.0, data=0.0, gems=0.0, contracts=[mission])
    notices = complete_contract(state, mission, RunResult(success=True, score=60, gems=2), rng=random.Random(0), now=0.0)

    assert state.credits == 180.0
    assert state.data == 100.0
    assert state.gems == 2.0
    assert state.contracts_completed == 1
    assert state.factions["omnicorp"].reputation == 11
    assert len(state.contracts) == 1
    assert state.contracts[0].id != "c_test"
    assert state.contracts[0].faction_id == "omnicorp"
    assert events.CONTRACT_COMPLETED in _kinds(notices)


def test_failed_contract_keeps_collected_gems_only():
    mission = _mission(accepted=True)
    state = EconomyState(credits=0.0, data=0.0, gems=0.0, contracts=[mission])
    notices = complete_contract(state, mission, RunResult(success=False, score=10, gems=1), rng=random.Random(0), now=0.0)

    assert state.credits == 0.0
    assert state.gems == 1.0
    assert state.contracts_completed == 0
    assert len(state.contracts) == 1
    assert state.contracts[0].id != "c_test"
    assert _kinds(notices) == [events.CONTRACT_FAILED]


def test_completion_is_ignored_for_unknown_contract():
    state = EconomyState(credits=0.0)
    assert complete_contract(state, _mission(), RunResult(True, 99)) == []
    assert state.credits == 0.0


def test_completion_trains_active_staff():
    mission = _mission(accepted=True)
    state = EconomyState(contracts=[mission], owned_staff_ids=["s_r1"], active_staff_ids=["s_r1"])
    progress = state.progress("s_r1")
    notices = complete_contract(state, mission, RunResult(success=True, score=500), rng=random.Random(0), now=0.0)

    assert progress.level > 1
    assert events.STAFF_LEVEL_UP in _kinds(notices)
    # Kaito: stamina 4 → 5 - 0.8
    assert progress.fatigue == pytest.approx(4.2)


def test_simulation_completion_is_not_pooled():
    state = EconomyState(credits=100_000.0, owned_staff_ids=["s_r1"], active_staff_ids=["s_r1"])
    sim, _ = start_simulation(state, 60)
    before = state.credits
    complete_contract(state, sim, RunResult(success=True, score=80))
    assert state.contracts == []
    assert state.contracts_completed == 0
    assert state.credits == before
    assert state.progress("s_r1").xp > 0 or state.progress("s_r1").level > 1


def test_faction_levels_up():
    state = EconomyState()
    state.factions["omnicorp"].reputation = 95
    mission = _mission(accepted=True)
    state.contracts = [mission]
    notices = complete_contract(state, mission, RunResult(True, 40), rng=random.Random(0), now=0.0)
    faction = state.factions["omnicorp"]
    assert faction.level == 2
    assert faction.reputation == 0
    assert faction.max_reputation == 150
    assert events.FACTION_LEVEL_UP in _kinds(notices)


# ── Trades ───────────────────────────────────────────────────────


def test_trade_sells_qualifying_creature():
    trade = _trade()
    state = EconomyState(credits=0.0, contracts=[trade])
    assert qualifying_creatures(state, trade) == ["c_dog_doberman"]
    notices = fulfill_trade(state, "t_test", "c_dog_doberman", rng=random.Random(0), now=0.0)
    assert state.credits == 700.0
    assert state.owned_creature_ids == []
    assert len(state.contracts) == 1
    assert state.contracts[0].id != "t_test"
    assert state.contracts[0].faction_id == "bio_syn"
    assert _kinds(notices) == [events.TRADE_FULFILLED]


def test_trade_requires_stat_strictly_above():
    trade = _trade(trade_req_value=60)
    state = EconomyState(credits=0.0, contracts=[trade])
    assert qualifying_creatures(state, trade) == []
    notices = fulfill_trade(state, "t_test", "c_dog_doberman")
    assert _kinds(notices) == [events.ACTION_DECLINED]
    assert state.owned_creature_ids == ["c_dog_doberman"]


def test_trade_requires_matching_type():
    trade = _trade(trade_req_type="Mechanical")
    state = EconomyState(contracts=[trade])
    assert fulfill_trade(state, "t_test", "c_dog_doberman")[0].kind == events.ACTION_DECLINED
    assert fulfill_trade(state, "t_test", "c_mut_ooze")[0].kind == events.ACTION_DECLINED
