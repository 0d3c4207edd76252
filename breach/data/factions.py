"""Faction definitions — contract issuers and the flavour they add to offers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FactionDef:
    """Static definition of a faction."""

    id: str
    name: str
    description: str
    color: str
    # Reward flavour applied to every mission this faction issues
    credit_mult: float = 1.0
    data_mult: float = 1.0
    bonus_duration_s: int = 0
    signature_modifier: str = ""
    # Chance of one extra gem on any mission
    extra_gem_chance: float = 0.0


ALL_FACTIONS: dict[str, FactionDef] = {
    f.id: f
    for f in (
        FactionDef(
            id="omnicorp",
            name="OmniCorp",
            description="The standard for corporate research.",
            color="blue",
        ),
        FactionDef(
            id="red_cell",
            name="Red Cell",
            description="Rogue paramilitary science division.",
            color="red",
            credit_mult=1.5,
            data_mult=0.7,
            signature_modifier="volatile",
        ),
        FactionDef(
            id="neural_net",
            name="Neural Net",
            description="A collective of AI enthusiasts.",
            color="green",
            credit_mult=0.8,
            data_mult=1.5,
            signature_modifier="dense",
        ),
        FactionDef(
            id="void_syndicate",
            name="The Void",
            description="Black market research collective.",
            color="magenta",
            credit_mult=2.0,
            data_mult=0.5,
            signature_modifier="chaos",
            extra_gem_chance=0.2,
        ),
        FactionDef(
            id="aegis_systems",
            name="Aegis Systems",
            description="High-tech defense contractors.",
            color="dark_orange",
            signature_modifier="hardened",
        ),
        FactionDef(
            id="bio_syn",
            name="BioSyn Labs",
            description="Merging flesh and silicon.",
            color="chartreuse3",
            bonus_duration_s=10,
            signature_modifier="replicator",
        ),
        FactionDef(
            id="neon_covenant",
            name="Neon Covenant",
            description="Techno-religious fanatics.",
            color="bright_magenta",
            credit_mult=1.2,
            data_mult=1.2,
            signature_modifier="glitch",
            extra_gem_chance=0.2,
        ),
    )
}
