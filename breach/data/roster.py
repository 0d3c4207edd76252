"""Recruitable staff and creatures.

Staff are multipliers: they only help while active and healthy.
Creatures are generators: every owned creature feeds passive income.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class StaffBonus(Enum):
    """Which player stat a staff member boosts while active."""

    CREDIT_MULT = auto()
    DATA_MULT = auto()
    STABILITY_REGEN = auto()
    CLICK_POWER = auto()
    LIFE_EXTENSION = auto()


RARITIES: tuple[str, ...] = ("R", "SR", "SSR", "UR")


@dataclass(frozen=True)
class StaffDef:
    """Definition of a recruitable staff member."""

    id: str
    name: str
    role: str
    rarity: str
    description: str
    bonus: StaffBonus
    bonus_value: float
    base_stamina: int
    base_intelligence: int
    faction_id: str = ""


@dataclass(frozen=True)
class CreatureDef:
    """Definition of a containable creature."""

    id: str
    type: str
    subtype: str
    variant: str
    rarity: str
    description: str
    production_bonus: float
    strength: int
    size: int
    wildness: int
    menace: int

    def stat(self, name: str) -> int:
        return getattr(self, name, 0)


# ── Staff ────────────────────────────────────────────────────────

_LEADERS = (
    StaffDef("d1", "Anastasia", "OmniCorp Director", "UR", "Profit is the ultimate logic.",
             StaffBonus.CREDIT_MULT, 2.0, 8, 10, "omnicorp"),
    StaffDef("d2", "Scarlet", "Red Cell General", "UR", "The revolution requires sacrifice.",
             StaffBonus.CLICK_POWER, 10, 10, 7, "red_cell"),
    StaffDef("d3", "Cortex", "Neural Net Prime", "UR", "We are all connected.",
             StaffBonus.DATA_MULT, 2.0, 5, 10, "neural_net"),
    StaffDef("d4", "Nyx", "Void Queen", "UR", "Stare into the abyss.",
             StaffBonus.CREDIT_MULT, 3.0, 9, 9, "void_syndicate"),
    StaffDef("d5", "Valkyrie", "Aegis Warden", "UR", "The absolute wall.",
             StaffBonus.LIFE_EXTENSION, 1.0, 10, 6, "aegis_systems"),
    StaffDef("d6", "Dr. Spore", "BioSyn Labs Lead", "UR", "Evolution is mandatory.",
             StaffBonus.LIFE_EXTENSION, 1.5, 7, 10, "bio_syn"),
    StaffDef("d7", "Prophet Glitch", "Neon High Priest", "UR", "The code is divine.",
             StaffBonus.DATA_MULT, 1.5, 10, 8, "neon_covenant"),
)

_RECRUITS = (
    StaffDef("s_r1", "Kaito", "Script Kiddie", "R", "Fast typer, low accuracy.",
             StaffBonus.CLICK_POWER, 1, 4, 5),
    StaffDef("s_r2", "Lena", "Data Analyst", "R", "Finds patterns in noise.",
             StaffBonus.DATA_MULT, 0.05, 5, 7),
    StaffDef("s_r3", "Marcus", "Sysadmin", "R", "Keeps the servers cold.",
             StaffBonus.STABILITY_REGEN, 1, 6, 6),
    StaffDef("s_r4", "Sarah", "Accountant", "R", "Pennypincher.",
             StaffBonus.CREDIT_MULT, 0.05, 3, 8),
    StaffDef("s_r5", "Unit 734", "Android Helper", "R", "Does not sleep.",
             StaffBonus.LIFE_EXTENSION, 0.05, 10, 4),
    StaffDef("s_sr1", "Cipher", "White Hat", "SR", "Security expert.",
             StaffBonus.STABILITY_REGEN, 3, 7, 8),
    StaffDef("s_sr2", "Viper", "Penetration Tester", "SR", "Breaks things to fix them.",
             StaffBonus.CLICK_POWER, 2, 8, 7),
    StaffDef("s_sr3", "Nova", "AI Researcher", "SR", "Pushing boundaries.",
             StaffBonus.DATA_MULT, 0.15, 4, 9),
    StaffDef("s_sr4", "Midas", "Crypto Broker", "SR", "Turns data to gold.",
             StaffBonus.CREDIT_MULT, 0.15, 5, 9),
    StaffDef("s_ssr1", "Ghost", "Legendary Hacker", "SSR", "Does not exist.",
             StaffBonus.CLICK_POWER, 5, 9, 10),
    StaffDef("s_ssr2", "Oracle", "Predictive AI", "SSR", "Sees the future.",
             StaffBonus.DATA_MULT, 0.30, 10, 10),
    StaffDef("s_ssr3", "Titan", "Infrastructure Lead", "SSR", "Unbreakable.",
             StaffBonus.STABILITY_REGEN, 8, 10, 7),
)

ALL_STAFF: dict[str, StaffDef] = {s.id: s for s in _LEADERS + _RECRUITS}


# ── Creatures ────────────────────────────────────────────────────

ALL_CREATURES: dict[str, CreatureDef] = {
    c.id: c
    for c in (
        CreatureDef("c_dog_doberman", "Biological", "Canid", "Doberman", "R",
                    "Loyal guard dog.", 1, 60, 50, 20, 5),
        CreatureDef("c_dog_wolf", "Biological", "Canid", "Grey Wolf", "SR",
                    "Wild instincts intact.", 2, 75, 60, 80, 10),
        CreatureDef("c_dog_cerberus", "Biological", "Canid", "Cyber-Cerberus", "SSR",
                    "Three heads, three times the bite.", 5, 95, 90, 90, 40),
        CreatureDef("c_cat_sphinx", "Biological", "Feline", "Sphinx", "R",
                    "Hairless and judging.", 1, 20, 30, 40, 20),
        CreatureDef("c_cat_panther", "Biological", "Feline", "Void Panther", "SR",
                    "Melds with shadows.", 3, 70, 60, 70, 25),
        CreatureDef("c_mut_ooze", "Mutant", "Amorphous", "Green Ooze", "R",
                    "Radioactive waste byproduct.", 1, 30, 40, 10, 60),
        CreatureDef("c_mut_shoggoth", "Mutant", "Amorphous", "Proto-Shoggoth", "UR",
                    "Tekeli-li!", 10, 100, 100, 100, 100),
        CreatureDef("c_mech_spider", "Mechanical", "Drone", "Spider Bot", "R",
                    "Crawls in vents.", 1, 40, 20, 0, 30),
        CreatureDef("c_mech_sentinel", "Mechanical", "Drone", "Heavy Sentinel", "SR",
                    "Armed and dangerous.", 3, 85, 80, 10, 15),
        CreatureDef("c_eld_spawn", "Eldritch", "Tentacle", "Abyssal Spawn", "SR",
                    "Reaches from the dark.", 4, 60, 70, 90, 85),
    )
}

CREATURE_TYPES: tuple[str, ...] = ("Biological", "Mechanical", "Mutant", "Eldritch")
CREATURE_STATS: tuple[str, ...] = ("strength", "size", "wildness", "menace")
