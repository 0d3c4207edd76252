"""Target registry — the live cells on the breach grid."""

from __future__ import annotations

import random
from dataclasses import dataclass

from breach.data.cell_kinds import CellKind


@dataclass
class Cell:
    """A transient, clickable target on the grid."""

    id: int
    kind: CellKind
    x: int
    y: int
    hits_remaining: int
    life_total_ms: float
    life_ms: float

    @property
    def life_fraction(self) -> float:
        if self.life_total_ms <= 0:
            return 0.0
        return max(0.0, self.life_ms / self.life_total_ms)

    def snapshot(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind.name,
            "x": self.x,
            "y": self.y,
            "hits_remaining": self.hits_remaining,
            "life_ms": self.life_ms,
            "life_total_ms": self.life_total_ms,
        }


class CellRegistry:
    """Live cells keyed by id, with at most one cell per grid position.

    Cells leave the registry the moment they are consumed or expire;
    nothing is kept around as a tombstone.
    """

    def __init__(self) -> None:
        self._cells: dict[int, Cell] = {}
        self._positions: dict[tuple[int, int], int] = {}

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, cell_id: object) -> bool:
        return cell_id in self._cells

    def all(self) -> list[Cell]:
        return list(self._cells.values())

    def get(self, cell_id: int) -> Cell | None:
        return self._cells.get(cell_id)

    def find_at(self, x: int, y: int) -> Cell | None:
        cell_id = self._positions.get((x, y))
        return None if cell_id is None else self._cells[cell_id]

    def occupied(self, x: int, y: int) -> bool:
        return (x, y) in self._positions

    def add(self, cell: Cell) -> bool:
        """Insert *cell*.  Refuses (returns False) on an id or position clash."""
        if cell.id in self._cells or self.occupied(cell.x, cell.y):
            return False
        self._cells[cell.id] = cell
        self._positions[(cell.x, cell.y)] = cell.id
        return True

    def remove(self, cell_id: int) -> Cell | None:
        cell = self._cells.pop(cell_id, None)
        if cell is not None:
            del self._positions[(cell.x, cell.y)]
        return cell

    def clear(self) -> None:
        self._cells.clear()
        self._positions.clear()

    def has_room(self, grid_size: int) -> bool:
        """True while at least two cells are empty (one must always stay free)."""
        return len(self._cells) < grid_size * grid_size - 1

    def find_free_position(
        self,
        grid_size: int,
        rng: random.Random,
        attempts: int = 20,
    ) -> tuple[int, int] | None:
        """Pick a random unoccupied position.

        Args:
            grid_size: Side length of the square grid.
            rng: Random source.
            attempts: Draws tried before giving up.

        Returns:
            ``(x, y)`` or ``None`` when every draw collided.
        """
        for _ in range(attempts):
            x = rng.randrange(grid_size)
            y = rng.randrange(grid_size)
            if not self.occupied(x, y):
                return x, y
        return None
