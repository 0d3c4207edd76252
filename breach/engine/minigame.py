"""Breach run driver — one object per run, advanced by the host's scheduler.

The host owns the loop (a Textual interval, an HTTP request, a test) and
calls ``tick`` or ``advance_frame``.  Paused and finished runs can keep
being ticked; they just stop doing game work.
"""

from __future__ import annotations

import itertools
import logging
import random
from dataclasses import dataclass, field

from breach.data.balance import BALANCE
from breach.data.cell_kinds import CellKind
from breach.engine import events
from breach.engine.cells import CellRegistry
from breach.engine.clock import FrameClock
from breach.engine.events import Notice
from breach.engine.resolution import (
    apply_expiries,
    collect_expiries,
    regenerate,
    resolve_hit,
    resolve_miss,
)
from breach.engine.run_state import (
    RunConfig,
    RunResult,
    RunStatus,
    check_collapse,
    check_quota,
    check_time,
    end_run,
    new_run_state,
    pause,
    resume,
)
from breach.engine.spawn import spawn_cell, spawn_due, spawn_replicas

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Click:
    """Pointer input for one frame.  ``cell_id=None`` is a click on empty space."""

    cell_id: int | None = None


@dataclass
class FrameResult:
    """Everything a host needs to draw one frame."""

    cells: list[dict]
    run: dict
    events: list[Notice] = field(default_factory=list)


class MiniGame:
    """A single breach run: registry, run state, and the frame loop."""

    def __init__(self, config: RunConfig, rng: random.Random | None = None) -> None:
        self.config = config
        self.state = new_run_state(config)
        self.registry = CellRegistry()
        self.rng = rng if rng is not None else random.Random()
        self.clock = FrameClock()
        self._ids = itertools.count(1)
        # Driver time: advances on every frame, paused or not
        self._now_ms = 0.0
        # cell id -> driver time the de-dup token lapses
        self._recent: dict[int, float] = {}
        self._pending: list[Notice] = []
        self._result: RunResult | None = None

    def _next_id(self) -> int:
        return next(self._ids)

    @property
    def status(self) -> RunStatus:
        return self.state.status

    @property
    def finished(self) -> bool:
        return self.state.status.terminal

    # ── Driving ──────────────────────────────────────────────────

    def tick(self, timestamp_ms: float, click: Click | None = None) -> FrameResult:
        """Advance using an absolute host timestamp (ms)."""
        return self.advance_frame(self.clock.delta(timestamp_ms), click)

    def advance_frame(self, delta_ms: float, click: Click | None = None) -> FrameResult:
        """Apply *click* (if any), then simulate *delta_ms* of run time."""
        dt = min(max(0.0, delta_ms), BALANCE.breach.max_frame_ms)
        self._now_ms += dt
        self._recent = {cid: until for cid, until in self._recent.items() if until > self._now_ms}

        notices = self._pending
        self._pending = []
        if click is not None:
            notices.extend(self._apply_click(click))
        if self.state.active:
            notices.extend(self._simulate(dt))
        return self.snapshot(notices)

    def snapshot(self, notices: list[Notice] | None = None) -> FrameResult:
        return FrameResult(
            cells=[cell.snapshot() for cell in self.registry.all()],
            run=self.state.snapshot(),
            events=notices or [],
        )

    def _simulate(self, dt: float) -> list[Notice]:
        s, cfg = self.state, self.config
        notices: list[Notice] = []

        s.second_accumulator_ms += dt
        if s.second_accumulator_ms >= 1000.0:
            s.second_accumulator_ms -= 1000.0
            s.elapsed_s += 1
            if cfg.is_infinite:
                notices.extend(self._grow_grid())
            ended = check_time(s, cfg)
            if ended:
                notices.append(ended)
                return notices

        s.since_last_spawn_ms += dt

        outcome = collect_expiries(cfg, self.registry, dt)
        apply_expiries(s, outcome)
        notices.extend(outcome.notices)
        ended = check_collapse(s, cfg)
        if ended:
            notices.append(ended)
            return notices

        if outcome.replicas:
            for cell in spawn_replicas(self.registry, s, outcome.replicas, self.rng, self._next_id):
                notices.append(Notice(events.REPLICATED, str(cell.id)))

        regenerate(s, cfg, dt)

        ended = check_quota(s, cfg)
        if ended:
            notices.append(ended)
            return notices

        if spawn_due(cfg, s):
            spawn_cell(self.registry, cfg, s, self.rng, self._next_id)
            s.since_last_spawn_ms = 0.0
        return notices

    def _grow_grid(self) -> list[Notice]:
        s = self.state
        for threshold, size in BALANCE.breach.infinite_grid_steps:
            if s.elapsed_s >= threshold:
                if size > s.grid_size:
                    s.grid_size = size
                    logger.debug("Grid grown to %dx%d at %ds", size, size, s.elapsed_s)
                    return [Notice(events.GRID_GROWN, amount=size)]
                break
        return []

    # ── Input ────────────────────────────────────────────────────

    def hit(self, cell_id: int) -> list[Notice]:
        """Resolve a click on *cell_id* right away, outside a frame."""
        return self._apply_click(Click(cell_id))

    def miss(self) -> list[Notice]:
        """Resolve a click on empty space right away, outside a frame."""
        return self._apply_click(Click())

    def click_at(self, x: int, y: int) -> list[Notice]:
        """Resolve a click on grid position (x, y), whatever is there."""
        cell = self.registry.find_at(x, y)
        return self.hit(cell.id) if cell is not None else self.miss()

    def _apply_click(self, click: Click) -> list[Notice]:
        s, cfg = self.state, self.config
        if not s.active:
            return []

        if click.cell_id is None:
            notices = resolve_miss(s, cfg)
        else:
            if click.cell_id in self._recent:
                return []
            cell = self.registry.get(click.cell_id)
            if cell is None:
                return []
            kind = cell.kind
            notices = resolve_hit(s, cfg, self.registry, click.cell_id, self.rng)
            if click.cell_id not in self.registry:
                bal = BALANCE.breach
                window = bal.hazard_dedup_window_ms if kind is CellKind.HAZARD else bal.dedup_window_ms
                self._recent[click.cell_id] = self._now_ms + window

        for check in (check_collapse, check_quota):
            ended = check(s, cfg)
            if ended:
                notices.append(ended)
                break
        return notices

    # ── Status controls ──────────────────────────────────────────

    def pause(self) -> bool:
        notice = pause(self.state)
        if notice:
            self._pending.append(notice)
        return notice is not None

    def resume(self) -> bool:
        notice = resume(self.state)
        if notice:
            self._pending.append(notice)
        return notice is not None

    def toggle_pause(self) -> bool:
        """Flip between running and paused.  Returns True when now paused."""
        if self.state.status == RunStatus.PAUSED:
            self.resume()
        else:
            self.pause()
        return self.state.status == RunStatus.PAUSED

    def visibility_lost(self) -> None:
        """The host lost foreground; stop the clock until the player comes back."""
        self.pause()

    def abandon(self) -> None:
        """Give up the run.  Infinite simulations still extract."""
        self._end(success=False)

    def extract(self) -> None:
        """End the run successfully, keeping the score (infinite simulations)."""
        self._end(success=True)

    def _end(self, success: bool) -> None:
        notice = end_run(self.state, self.config, success)
        if notice:
            self._pending.append(notice)

    # ── Completion ───────────────────────────────────────────────

    def finalize(self) -> RunResult | None:
        """The run's result once it is over; the same object on every call."""
        if not self.finished:
            return None
        if self._result is None:
            self._result = RunResult(
                success=self.state.status == RunStatus.WON,
                score=self.state.score,
                gems=self.state.gems_collected,
            )
        return self._result
