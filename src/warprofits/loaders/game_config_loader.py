"""Game configuration — loads tunable constants from config/game.yaml.

Provides a single ``GameConfig`` dataclass that is loaded once at startup
and then passed (or injected) wherever constants are needed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from warprofits.util import constants as c

log = logging.getLogger(__name__)

DEFAULT_GAME_CONFIG_PATH = "config/game.yaml"


@dataclass
class GameConfig:
    """All tunable gameplay constants.

    Loaded from ``config/game.yaml``.  Every field has a sensible default
    so the server can start even without the file.
    """

    # -- Timing ------------------------------------------------------
    tick_interval_s: float = c.TICK_INTERVAL_S
    autosave_interval_s: float = c.AUTOSAVE_INTERVAL_S
    max_elapsed_seconds: Optional[float] = None

    # -- Economy -----------------------------------------------------
    economy_mode: str = c.ECONOMY_MONEY
    milestone_size: int = c.MILESTONE_SIZE
    starting_money: float = 0.0

    # -- Raids -------------------------------------------------------
    enemy_scale_min: float = c.ENEMY_SCALE_MIN
    enemy_scale_max: float = c.ENEMY_SCALE_MAX
    battle_noise_min: float = c.BATTLE_NOISE_MIN
    battle_noise_max: float = c.BATTLE_NOISE_MAX
    raid_reward_base: float = c.RAID_REWARD_BASE

    # -- Siege -------------------------------------------------------
    siege_duration_s: float = c.SIEGE_DURATION_S
    siege_reward_multiplier: float = c.SIEGE_REWARD_MULTIPLIER

    # -- Persistence / network ---------------------------------------
    state_file: str = "warprofits_save.yaml"
    rest_port: int = 8080

    @property
    def weapon_economy(self) -> bool:
        """True when factories stock weapons instead of producing money."""
        return self.economy_mode == c.ECONOMY_WEAPONS


def load_game_config(path: str | Path = DEFAULT_GAME_CONFIG_PATH) -> GameConfig:
    """Load game configuration from a YAML file.

    Missing keys fall back to dataclass defaults.  If the file does not
    exist, a warning is logged and pure defaults are returned.
    """
    p = Path(path)
    if not p.exists():
        log.warning("Game config not found at %s, using defaults", p)
        return GameConfig()

    with p.open() as f:
        raw = yaml.safe_load(f) or {}

    log.info("Loaded game config from %s (%d keys)", p, len(raw))

    cfg = GameConfig(**{
        k: v for k, v in raw.items()
        if k in GameConfig.__dataclass_fields__ and v is not None
    })
    if cfg.economy_mode not in (c.ECONOMY_MONEY, c.ECONOMY_WEAPONS):
        raise ValueError(f"Unknown economy_mode: {cfg.economy_mode!r}")
    return cfg
