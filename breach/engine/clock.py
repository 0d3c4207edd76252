"""Clocks — turn host timestamps into simulation time steps.

The two drivers are deliberately separate:

* ``FrameClock`` feeds the breach run.  A stall (tab hidden, debugger,
  slow terminal) is clamped away so the run never fast-forwards.
* ``CoarseClock`` feeds the economy in whole seconds.  It carries the
  remainder over so no second is ever lost.
"""

from __future__ import annotations

from breach.data.balance import BALANCE


class FrameClock:
    """Converts absolute timestamps (ms) into clamped frame deltas."""

    def __init__(self, max_step_ms: float | None = None) -> None:
        self.max_step_ms = BALANCE.breach.max_frame_ms if max_step_ms is None else max_step_ms
        self._last_ms: float | None = None

    def delta(self, timestamp_ms: float) -> float:
        """Milliseconds since the previous call, clamped to the max step.

        The first call only anchors the clock and returns 0.
        """
        if self._last_ms is None:
            self._last_ms = timestamp_ms
            return 0.0
        dt = max(0.0, timestamp_ms - self._last_ms)
        self._last_ms = timestamp_ms
        return min(dt, self.max_step_ms)

    def reset(self) -> None:
        self._last_ms = None


class CoarseClock:
    """Accumulates elapsed seconds and releases them one whole second at a time."""

    def __init__(self) -> None:
        self.remainder_s = 0.0

    def advance(self, dt_s: float) -> int:
        """Add *dt_s* and return how many whole seconds are now due."""
        if dt_s <= 0:
            return 0
        self.remainder_s += dt_s
        whole = int(self.remainder_s)
        self.remainder_s -= whole
        return whole
