"""Research definitions — infinitely levelable lab projects."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class ResearchEffect(Enum):
    """Which bonus a research project raises."""

    DATA_MULT = auto()
    CREDIT_MULT = auto()
    XP_MULT = auto()
    STABILITY_MAX = auto()
    CLICK_POWER = auto()


@dataclass(frozen=True)
class ResearchDef:
    """Definition of a research project."""

    id: str
    name: str
    description: str
    effect: ResearchEffect
    # Bonus added per level
    base_effect: float
    base_cost: float
    cost_scaling: float
    # Pool the cost is paid from: "credits" or "data"
    cost_type: str = "credits"

    def cost_at_level(self, level: int) -> int:
        """Cost to buy the next level from *level*."""
        return int(self.base_cost * (self.cost_scaling ** level))


ALL_RESEARCH: dict[str, ResearchDef] = {
    r.id: r
    for r in (
        ResearchDef(
            id="computing",
            name="Quantum Processing",
            description="Boosts Data yield from contracts.",
            effect=ResearchEffect.DATA_MULT,
            base_effect=0.05,
            base_cost=150,
            cost_scaling=1.45,
            cost_type="credits",
        ),
        ResearchDef(
            id="finance",
            name="Algorithmic Trading",
            description="Boosts Credit yield from contracts.",
            effect=ResearchEffect.CREDIT_MULT,
            base_effect=0.05,
            base_cost=150,
            cost_scaling=1.45,
            cost_type="data",
        ),
        ResearchDef(
            id="cognition",
            name="Deep Learning",
            description="Increases Staff XP gain.",
            effect=ResearchEffect.XP_MULT,
            base_effect=0.10,
            base_cost=300,
            cost_scaling=1.5,
            cost_type="data",
        ),
        ResearchDef(
            id="security",
            name="Firewall Hardening",
            description="Increases Max Stability.",
            effect=ResearchEffect.STABILITY_MAX,
            base_effect=10,
            base_cost=200,
            cost_scaling=1.4,
            cost_type="credits",
        ),
        ResearchDef(
            id="efficiency",
            name="Overclocking",
            description="Increases Manual Click Power.",
            effect=ResearchEffect.CLICK_POWER,
            base_effect=1,
            base_cost=500,
            cost_scaling=1.6,
            cost_type="data",
        ),
    )
}
