"""Balance constants — all tuning knobs in one place.

Tweak these to adjust run pacing, economy flow, and contract difficulty.
Research costs follow: base_cost * (cost_scaling ^ level)
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class BreachBalance:
    """Tuning for the breach-protocol mini-game."""

    # Frame clock: max simulated ms per frame (excess is discarded)
    max_frame_ms: float = 100.0

    # Placement: retries against occupied cells before the spawn is dropped
    placement_attempts: int = 20

    # Spawn interval (ms) per contract difficulty; unknown difficulties use default
    spawn_interval_by_difficulty: tuple[tuple[str, float], ...] = (
        ("Omega", 220.0),
        ("Black Ops", 300.0),
        ("Extreme", 400.0),
        ("High", 500.0),
        ("Medium", 650.0),
    )
    default_spawn_interval_ms: float = 800.0
    rushed_interval_mult: float = 0.85
    chaos_interval_mult: float = 0.7
    hot_combo_threshold: int = 10
    hot_combo_interval_mult: float = 0.9

    # Infinite mode spawn interval: max(floor, start - elapsed_s * decay)
    infinite_interval_start_ms: float = 800.0
    infinite_interval_decay_ms: float = 3.0
    infinite_interval_floor_ms: float = 200.0

    # Infinite mode lifetime shrink: life *= 1 - min(cap, elapsed_s / span)
    infinite_speed_span_s: float = 300.0
    infinite_speed_cap: float = 0.6
    # Elapsed seconds after which the nastier kinds can appear in infinite mode
    infinite_high_tier_s: float = 45.0
    infinite_start_grid: int = 3
    # (elapsed seconds, grid size): checked highest first
    infinite_grid_steps: tuple[tuple[int, int], ...] = (
        (200, 7),
        (120, 6),
        (60, 5),
        (20, 4),
    )

    chaos_life_mult: float = 0.7

    # Combo tiers: every combo_tier_size hits adds combo_tier_bonus to the multiplier
    combo_tier_size: int = 10
    combo_tier_bonus: float = 0.5
    lucky_crit_mult: float = 2.0

    # Stability penalties
    hazard_penalty: float = 25.0
    hazard_penalty_volatile: float = 40.0
    miss_penalty: float = 5.0
    miss_penalty_volatile: float = 10.0
    miss_penalty_precision: float = 25.0
    expiry_penalty: float = 8.0
    expiry_penalty_volatile: float = 15.0
    explosion_penalty: float = 30.0
    pathogen_penalty: float = 5.0
    paperwork_score_penalty: int = 3

    # Pathogen replication
    replicas_per_expiry: int = 1
    replicas_per_expiry_replicator: int = 2
    replica_life_ms: float = 2500.0

    # De-dup windows for resolved cells
    dedup_window_ms: float = 100.0
    hazard_dedup_window_ms: float = 200.0

    # Gems granted by a currency node
    currency_node_gems: int = 1


@dataclass(frozen=True)
class EconomyBalance:
    """Tuning for the idle economy ticker."""

    starting_credits: float = 1000.0
    starting_data: float = 300.0
    starting_gems: float = 10.0
    starting_creatures: tuple[str, ...] = ("c_dog_doberman",)

    # Passive accrual per point of creature production
    credits_per_production: float = 1.0
    data_per_production: float = 0.25

    # Accrual efficiency while the player is away
    offline_efficiency: float = 0.5

    # Staff recovery (per second)
    fatigue_recovery_base: float = 0.5
    fatigue_recovery_per_stamina: float = 0.1
    disease_health_drain: float = 0.2
    health_regen: float = 0.1
    max_health: float = 100.0
    max_fatigue: float = 100.0
    creature_fatigue_recovery: float = 0.3

    # Active roster capacity
    max_active_staff: int = 3
    # Staff multiplier growth per level above 1
    staff_bonus_per_level: float = 0.1

    # Emergency top-up against soft-locks
    emergency_threshold: float = 50.0
    emergency_amount: float = 500.0
    emergency_cooldown_s: float = 300.0

    # Treatment
    cure_cost: float = 300.0

    # Large number formatting thresholds
    suffixes: tuple[tuple[float, str], ...] = (
        (1e3, "K"),
        (1e6, "M"),
        (1e9, "B"),
        (1e12, "T"),
    )


@dataclass(frozen=True)
class BonusBalance:
    """Baseline player stats before staff, research and faction perks."""

    credit_mult: float = 1.0
    data_mult: float = 1.0
    xp_mult: float = 1.0
    gem_mult: float = 1.0
    stability_regen: float = 1.0
    crit_chance: float = 0.05
    max_stability: float = 100.0
    click_power: float = 1.0
    life_extension: float = 1.0

    # Faction level perks: (faction id, min level, bonus field, amount)
    faction_perks: tuple[tuple[str, int, str, float], ...] = (
        ("omnicorp", 10, "credit_mult", 0.1),
        ("omnicorp", 50, "credit_mult", 0.2),
        ("red_cell", 2, "crit_chance", 0.05),
        ("neural_net", 2, "data_mult", 0.05),
    )


@dataclass(frozen=True)
class ContractBalance:
    """Tuning for contract generation and completion."""

    offers_per_faction: int = 4
    contracts_per_tier: int = 5
    trade_chance: float = 0.2
    trade_expiry_s: float = 300.0
    offer_expiry_min_s: float = 60.0
    offer_expiry_spread_s: float = 120.0

    # (min tier, difficulty): checked highest first
    difficulty_by_tier: tuple[tuple[int, str], ...] = (
        (60, "Omega"),
        (40, "Black Ops"),
        (25, "Extreme"),
        (12, "High"),
        (5, "Medium"),
        (0, "Low"),
    )
    base_duration_by_difficulty: tuple[tuple[str, int], ...] = (
        ("Omega", 60),
        ("Black Ops", 55),
        ("Extreme", 50),
        ("High", 45),
        ("Medium", 40),
        ("Low", 30),
    )
    # (tier above, grid size): checked highest first
    grid_by_tier: tuple[tuple[int, int], ...] = (
        (50, 7),
        (30, 6),
        (10, 5),
        (0, 4),
    )

    reward_growth: float = 1.15
    base_reward_credits: float = 180.0
    base_reward_data: float = 100.0
    deposit_fraction: float = 0.1

    quota_floor: int = 30
    quota_per_tier: float = 5.0
    quota_growth: float = 1.04

    modifiers_per_tier: int = 6
    max_modifiers: int = 6

    # Completion
    base_rep_gain: int = 10
    rep_growth: float = 1.5
    base_xp: float = 100.0
    xp_score_divisor: float = 25.0
    xp_per_intelligence: float = 0.05
    xp_level_exponent: float = 2.2
    fatigue_gain_base: float = 5.0
    fatigue_gain_per_stamina: float = 0.2


@dataclass(frozen=True)
class SimulationBalance:
    """Tuning for paid infinite simulation runs."""

    min_duration_s: int = 30
    max_duration_s: int = 600
    cost_per_second: float = 50.0
    cost_growth: float = 1.1
    cost_growth_period_s: float = 60.0
    quota: int = 9_999_999
    tier: int = 999


@dataclass(frozen=True)
class GachaBalance:
    """Tuning for recruitment pulls."""

    staff_cost_gems: float = 25.0
    creature_cost_gems: float = 50.0
    # (roll above, rarity): checked in order
    rarity_thresholds: tuple[tuple[float, str], ...] = (
        (0.995, "UR"),
        (0.95, "SSR"),
        (0.70, "SR"),
    )
    staff_duplicate_data: tuple[tuple[str, float], ...] = (
        ("UR", 5000.0),
        ("SSR", 1000.0),
        ("SR", 250.0),
        ("R", 50.0),
    )
    creature_duplicate_data: tuple[tuple[str, float], ...] = (
        ("UR", 2000.0),
        ("SSR", 500.0),
        ("SR", 100.0),
        ("R", 20.0),
    )


@dataclass(frozen=True)
class GameBalance:
    """Top-level container for all balance constants."""

    breach: BreachBalance = field(default_factory=BreachBalance)
    economy: EconomyBalance = field(default_factory=EconomyBalance)
    bonuses: BonusBalance = field(default_factory=BonusBalance)
    contracts: ContractBalance = field(default_factory=ContractBalance)
    simulation: SimulationBalance = field(default_factory=SimulationBalance)
    gacha: GachaBalance = field(default_factory=GachaBalance)


# Singleton: import this everywhere
BALANCE = GameBalance()
