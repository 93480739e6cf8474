"""Game constants — timing, scaling, thresholds.

Defaults for every tunable in ``config/game.yaml``, centralized here.
"""

# -- Timing --------------------------------------------------------------

TICK_INTERVAL_S: float = 1.0
"""Main game loop tick interval in seconds."""

AUTOSAVE_INTERVAL_S: float = 300.0
"""Seconds between automatic snapshot writes."""

# -- Economy -------------------------------------------------------------

MILESTONE_SIZE: int = 25
"""Owned count per production doubling."""

SECONDS_PER_MINUTE: float = 60.0
"""Factory rates are defined per minute."""

ECONOMY_MONEY = "money"
ECONOMY_WEAPONS = "weapons"

# -- Raids ---------------------------------------------------------------

ENEMY_SCALE_MIN: float = 0.6
ENEMY_SCALE_MAX: float = 1.2
BATTLE_NOISE_MIN: float = 0.9
BATTLE_NOISE_MAX: float = 1.1
RAID_REWARD_BASE: float = 10.0

DEFENSE_WEIGHT: float = 0.5
RANGE_WEIGHT: float = 0.3

# -- Siege ---------------------------------------------------------------

SIEGE_DURATION_S: float = 14 * 3600.0
"""Siege missions complete 14 hours after launch."""

SIEGE_REWARD_MULTIPLIER: float = 25.0

# -- Misc ----------------------------------------------------------------

STONE_AGE = "stone"
ALL_RESEARCH_DONE = "All research completed"
