"""Cell kind definitions — the one table every kind-specific rule reads from."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class CellKind(Enum):
    """Every kind of target that can appear on the breach grid."""

    PLAIN = auto()
    REINFORCED = auto()
    CRITICAL = auto()
    HAZARD = auto()           # never click these
    PAPERWORK = auto()        # scores nothing, fines you if ignored
    EXPLOSIVE = auto()
    PATHOGEN = auto()         # replicates when left alone
    SHIELDED = auto()
    CURRENCY_NODE = auto()    # pays out gems instead of score


class ExpiryEffect(Enum):
    """What happens when a cell runs out of life unclicked."""

    NOTHING = auto()          # vanishes harmlessly
    COMBO_BREAK = auto()      # only breaks the combo
    STABILITY = auto()        # standard stability hit
    SCORE = auto()            # small score fine
    EXPLOSION = auto()        # large stability hit
    REPLICATE = auto()        # small stability hit + spawns replicas


@dataclass(frozen=True)
class CellKindDef:
    """Static definition of a cell kind."""

    kind: CellKind
    name: str
    glyph: str
    base_points: int
    base_hits: int
    base_life_ms: float
    expiry: ExpiryEffect
    # Points used instead of base_points during infinite simulations
    infinite_points: int | None = None
    # Hits used instead of base_hits under the "hardened" modifier
    hardened_hits: int | None = None
    # Eligible for the secondary lucky-crit roll
    crit_eligible: bool = True
    # False = final hit never adds score
    scores: bool = True

    def points(self, infinite: bool) -> int:
        if infinite and self.infinite_points is not None:
            return self.infinite_points
        return self.base_points

    def hits(self, hardened: bool) -> int:
        if hardened and self.hardened_hits is not None:
            return self.hardened_hits
        return self.base_hits


# ── Kinds ────────────────────────────────────────────────────────

CELL_KINDS: dict[CellKind, CellKindDef] = {
    CellKind.PLAIN: CellKindDef(
        kind=CellKind.PLAIN, name="Node", glyph="■",
        base_points=1, infinite_points=3, base_hits=1, base_life_ms=2000.0,
        expiry=ExpiryEffect.STABILITY,
    ),
    CellKind.REINFORCED: CellKindDef(
        kind=CellKind.REINFORCED, name="Firewall", glyph="▣",
        base_points=5, base_hits=2, hardened_hits=3, base_life_ms=3000.0,
        expiry=ExpiryEffect.STABILITY,
    ),
    CellKind.CRITICAL: CellKindDef(
        kind=CellKind.CRITICAL, name="Critical", glyph="◆",
        base_points=10, base_hits=1, base_life_ms=1300.0,
        expiry=ExpiryEffect.STABILITY, crit_eligible=False,
    ),
    CellKind.HAZARD: CellKindDef(
        kind=CellKind.HAZARD, name="Trap", glyph="✖",
        base_points=0, base_hits=1, base_life_ms=1600.0,
        expiry=ExpiryEffect.NOTHING, crit_eligible=False, scores=False,
    ),
    CellKind.PAPERWORK: CellKindDef(
        kind=CellKind.PAPERWORK, name="Red Tape", glyph="≡",
        base_points=0, base_hits=1, base_life_ms=2500.0,
        expiry=ExpiryEffect.SCORE, scores=False,
    ),
    CellKind.EXPLOSIVE: CellKindDef(
        kind=CellKind.EXPLOSIVE, name="Time Bomb", glyph="●",
        base_points=5, base_hits=1, base_life_ms=1600.0,
        expiry=ExpiryEffect.EXPLOSION,
    ),
    CellKind.PATHOGEN: CellKindDef(
        kind=CellKind.PATHOGEN, name="Virus", glyph="☣",
        base_points=2, base_hits=1, base_life_ms=2300.0,
        expiry=ExpiryEffect.REPLICATE,
    ),
    CellKind.SHIELDED: CellKindDef(
        kind=CellKind.SHIELDED, name="Shielded Core", glyph="⬢",
        base_points=15, base_hits=4, base_life_ms=3000.0,
        expiry=ExpiryEffect.STABILITY, crit_eligible=False,
    ),
    CellKind.CURRENCY_NODE: CellKindDef(
        kind=CellKind.CURRENCY_NODE, name="Gem Node", glyph="♦",
        base_points=0, base_hits=1, base_life_ms=1500.0,
        expiry=ExpiryEffect.COMBO_BREAK, crit_eligible=False, scores=False,
    ),
}
