"""Contract modifiers — run-wide rule tweaks attached to a contract.

Modifiers make breaches harder in specific ways. The engine checks for
them by id; the magnitudes live in ``BALANCE.breach``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ModifierDef:
    """Definition of a single contract modifier."""

    id: str
    name: str
    description: str


# ── Modifiers ────────────────────────────────────────────────────

ALL_MODIFIERS: dict[str, ModifierDef] = {
    m.id: m
    for m in (
        ModifierDef("volatile", "Volatile", "Traps and missed targets hit harder."),
        ModifierDef("hardened", "Hardened", "Firewalls need an extra click."),
        ModifierDef("rushed", "Rushed", "Targets spawn faster."),
        ModifierDef("dense", "Dense", "Grid density increased."),
        ModifierDef("fragile", "Fragile", "Stability regen disabled."),
        ModifierDef("chaos", "Chaos", "Spawns are erratic and short-lived."),
        ModifierDef("precision", "Precision", "Misses deal 5x damage."),
        ModifierDef("glitch", "Glitch", "Targets shift position unexpectedly."),
        ModifierDef("bureaucracy", "Bureaucracy", "Red tape hurts score if ignored."),
        ModifierDef("bombardment", "Bombardment", "Time bombs explode for massive damage."),
        ModifierDef("replicator", "Replicator", "Viruses multiply rapidly."),
        ModifierDef("stealth", "Stealth", "Targets are partially invisible."),
        ModifierDef("shielded", "Shielded", "Heavy shielded cores appear."),
    )
}

# Order matters: contract generation draws from this pool by index
MODIFIER_POOL: tuple[str, ...] = tuple(ALL_MODIFIERS)
