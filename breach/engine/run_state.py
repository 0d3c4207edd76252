"""Run state machine — status and transitions of a single breach run.

    RUNNING ⇄ PAUSED
    RUNNING → WON | LOST   (terminal, never left again)

Infinite simulations never end as LOST: running out of stability counts
as an early extraction and keeps the score.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum, auto

from breach.data.balance import BALANCE
from breach.engine import events
from breach.engine.events import Notice

logger = logging.getLogger(__name__)


class RunStatus(Enum):
    RUNNING = auto()
    PAUSED = auto()
    WON = auto()
    LOST = auto()

    @property
    def terminal(self) -> bool:
        return self in (RunStatus.WON, RunStatus.LOST)


@dataclass(frozen=True)
class RunConfig:
    """Immutable inputs of one run: the contract terms plus player stats."""

    duration_s: int = 60
    # None = survive the clock only
    quota: int | None = None
    grid_size: int = 4
    difficulty: str = "Low"
    modifiers: frozenset[str] = frozenset()
    is_infinite: bool = False

    # ── Player stats ─────────────────────────────────────
    click_power: float = 1.0
    crit_chance: float = 0.05
    max_stability: float = 100.0
    stability_regen: float = 1.0
    life_extension: float = 1.0

    def has(self, modifier: str) -> bool:
        return modifier in self.modifiers


@dataclass
class RunState:
    """Mutable state of one run."""

    status: RunStatus = RunStatus.RUNNING
    score: int = 0
    stability: float = 100.0
    max_stability: float = 100.0
    combo: int = 0
    max_combo: int = 0
    elapsed_s: int = 0
    grid_size: int = 4
    gems_collected: int = 0

    # ── Driver bookkeeping ───────────────────────────────
    second_accumulator_ms: float = 0.0
    # Infinite so the first frame spawns straight away
    since_last_spawn_ms: float = field(default=math.inf)

    @property
    def active(self) -> bool:
        return self.status == RunStatus.RUNNING

    def snapshot(self) -> dict:
        return {
            "status": self.status.name,
            "score": self.score,
            "stability": self.stability,
            "max_stability": self.max_stability,
            "combo": self.combo,
            "max_combo": self.max_combo,
            "elapsed_s": self.elapsed_s,
            "grid_size": self.grid_size,
            "gems_collected": self.gems_collected,
        }


@dataclass(frozen=True)
class RunResult:
    """What the host folds back into the economy once a run is over."""

    success: bool
    score: int
    gems: int = 0


def new_run_state(config: RunConfig) -> RunState:
    grid = BALANCE.breach.infinite_start_grid if config.is_infinite else config.grid_size
    return RunState(
        stability=config.max_stability,
        max_stability=config.max_stability,
        grid_size=grid,
    )


# ── Transitions ──────────────────────────────────────────────────


def end_run(state: RunState, config: RunConfig, success: bool) -> Notice | None:
    """Move to a terminal status.  No-op once terminal."""
    if state.status.terminal:
        return None
    if config.is_infinite:
        # Simulations always extract
        success = True
    state.status = RunStatus.WON if success else RunStatus.LOST
    logger.info(
        "Run ended %s: score=%d max_combo=%d elapsed=%ds",
        state.status.name, state.score, state.max_combo, state.elapsed_s,
    )
    kind = events.RUN_WON if success else events.RUN_LOST
    return Notice(kind, amount=state.score)


def check_collapse(state: RunState, config: RunConfig) -> Notice | None:
    """End the run if stability is exhausted."""
    if state.stability <= 0:
        return end_run(state, config, success=False)
    return None


def check_quota(state: RunState, config: RunConfig) -> Notice | None:
    """End the run as a win once the quota is met."""
    if config.is_infinite or config.quota is None:
        return None
    if state.score >= config.quota:
        return end_run(state, config, success=True)
    return None


def check_time(state: RunState, config: RunConfig) -> Notice | None:
    """End a fixed-duration run once its time budget is used up."""
    if config.is_infinite:
        return None
    if state.elapsed_s >= config.duration_s:
        return end_run(state, config, success=True)
    return None


def pause(state: RunState) -> Notice | None:
    if state.status != RunStatus.RUNNING:
        return None
    state.status = RunStatus.PAUSED
    return Notice(events.PAUSED)


def resume(state: RunState) -> Notice | None:
    if state.status != RunStatus.PAUSED:
        return None
    state.status = RunStatus.RUNNING
    return Notice(events.RESUMED)
