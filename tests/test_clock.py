"""Tests for the frame clock, the coarse clock and the economy driver."""

import pytest

from breach.engine.clock import CoarseClock, FrameClock
from breach.engine.economy import EconomyDriver
from breach.engine.game_state import EconomyState


def test_frame_clock_anchors_on_first_call():
    clock = FrameClock()
    assert clock.delta(5_000.0) == 0.0
    assert clock.delta(5_016.0) == 16.0


def test_frame_clock_clamps_stalls():
    clock = FrameClock()
    clock.delta(0.0)
    assert clock.delta(3_000.0) == 100.0
    # The stall is discarded, not carried into the next frame
    assert clock.delta(3_010.0) == 10.0


def test_frame_clock_ignores_time_going_backwards():
    clock = FrameClock()
    clock.delta(1_000.0)
    assert clock.delta(900.0) == 0.0


def test_frame_clock_reset():
    clock = FrameClock(max_step_ms=50.0)
    clock.delta(0.0)
    assert clock.delta(80.0) == 50.0
    clock.reset()
    assert clock.delta(10_000.0) == 0.0


def test_coarse_clock_carries_remainder():
    clock = CoarseClock()
    assert clock.advance(0.4) == 0
    assert clock.advance(0.7) == 1
    assert clock.remainder_s == pytest.approx(0.1)
    assert clock.advance(2.95) == 3
    assert clock.advance(-5.0) == 0


def test_economy_driver_feeds_whole_seconds():
    state = EconomyState(credits=100.0, last_tick_time=1_000.0)
    driver = EconomyDriver(state)
    assert driver.tick(now=1_000.0) == []
    driver.tick(now=1_002.5)
    # One doberman: 1 credit/s, two whole seconds released
    assert state.credits == pytest.approx(102.0)
    assert state.last_tick_time == 1_002.5
    driver.tick(now=1_003.0)
    assert state.credits == pytest.approx(103.0)
