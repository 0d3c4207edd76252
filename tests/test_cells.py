"""Tests for the target registry."""

import random

from breach.data.cell_kinds import CellKind
from breach.engine.cells import Cell, CellRegistry


def _cell(cell_id, x=0, y=0, kind=CellKind.PLAIN, life=1000.0):
    return Cell(cell_id, kind, x, y, 1, life, life)


def test_add_and_find():
    reg = CellRegistry()
    assert reg.add(_cell(1, 2, 3))
    assert len(reg) == 1
    assert 1 in reg
    assert reg.find_at(2, 3).id == 1
    assert reg.find_at(0, 0) is None


def test_add_refuses_occupied_position():
    reg = CellRegistry()
    reg.add(_cell(1, 0, 0))
    assert not reg.add(_cell(2, 0, 0))
    assert len(reg) == 1
    assert reg.find_at(0, 0).id == 1


def test_add_refuses_duplicate_id():
    reg = CellRegistry()
    reg.add(_cell(1, 0, 0))
    assert not reg.add(_cell(1, 1, 1))
    assert not reg.occupied(1, 1)


def test_remove_frees_position():
    reg = CellRegistry()
    reg.add(_cell(1, 1, 1))
    removed = reg.remove(1)
    assert removed is not None and removed.id == 1
    assert not reg.occupied(1, 1)
    assert reg.remove(1) is None
    assert reg.add(_cell(2, 1, 1))


def test_has_room_keeps_one_cell_free():
    reg = CellRegistry()
    # 2x2 grid holds at most three cells
    for i, (x, y) in enumerate([(0, 0), (1, 0), (0, 1)]):
        assert reg.has_room(2)
        reg.add(_cell(i + 1, x, y))
    assert not reg.has_room(2)


def test_find_free_position_avoids_occupied():
    reg = CellRegistry()
    reg.add(_cell(1, 0, 0))
    reg.add(_cell(2, 1, 0))
    reg.add(_cell(3, 0, 1))
    rng = random.Random(4)
    for _ in range(20):
        pos = reg.find_free_position(2, rng, attempts=50)
        assert pos in (None, (1, 1))


def test_find_free_position_gives_up():
    reg = CellRegistry()
    reg.add(_cell(1, 0, 0))
    assert reg.find_free_position(1, random.Random(0)) is None


def test_life_fraction():
    cell = _cell(1, life=1000.0)
    cell.life_ms = 250.0
    assert cell.life_fraction == 0.25
    cell.life_ms = -10.0
    assert cell.life_fraction == 0.0
