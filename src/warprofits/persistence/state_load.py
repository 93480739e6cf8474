"""State load — restores the game state from a YAML snapshot.

Every field is optional: anything missing or malformed falls back to
the fresh-game default from the catalog, so an old or partial snapshot
never prevents the game from starting.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any, Optional

import yaml

from warprofits.models.catalog import Catalog
from warprofits.models.game_state import GameState, SiegeMission, new_game_state
from warprofits.persistence.state_save import DEFAULT_STATE_PATH

log = logging.getLogger(__name__)


# ===================================================================
# Public API
# ===================================================================


async def load_state(catalog: Catalog, path: str = DEFAULT_STATE_PATH,
                     now: float = 0.0) -> Optional[GameState]:
    """Load the game state from a YAML file.

    Returns None if the file does not exist or cannot be parsed; the
    caller then starts a fresh game.

    Args:
        catalog: Static content the snapshot refers to.
        path: Path to the YAML snapshot.
        now: Fallback ``last_update`` for snapshots without one.
    """
    state_file = Path(path)
    if not state_file.exists():
        log.info("No save file found at %s", path)
        return None

    try:
        raw = yaml.safe_load(state_file.read_text(encoding="utf-8"))
    except Exception:
        log.exception("Failed to parse save file %s", path)
        return None

    if not isinstance(raw, dict):
        log.warning("Save file %s has unexpected format (not a dict)", path)
        return None

    meta = raw.get("meta") if isinstance(raw.get("meta"), dict) else {}
    log.info("Restoring state from %s (saved at %s, version %s)",
             path, meta.get("saved_at", "?"), meta.get("version", "?"))
    try:
        return restore_state(raw, catalog, now=now)
    except Exception:
        log.exception("Failed to restore save file %s", path)
        return None


def restore_state(raw: dict[str, Any], catalog: Catalog, now: float = 0.0) -> GameState:
    """Rebuild a GameState from a snapshot mapping, defaulting every gap."""
    state = new_game_state(catalog, now=now)

    state.money = max(0.0, _float(raw.get("money"), 0.0))
    state.last_update = _float(raw.get("last_update"), now) or now
    state.scientists.count = max(0, _int(raw.get("scientists"), 0))

    unlocked = raw.get("ages_unlocked")
    if isinstance(unlocked, dict):
        for key, age in state.ages.items():
            if key in unlocked:
                age.unlocked = age.unlocked or bool(unlocked[key])

    factories = raw.get("age_factories")
    if isinstance(factories, dict):
        for age_key, counts in factories.items():
            age = state.ages.get(age_key)
            if age is None or not isinstance(counts, dict):
                continue
            for fkey, owned in counts.items():
                factory = age.factories.get(fkey)
                if factory is not None:
                    factory.owned = max(0, _int(owned, 0))

    progress = _as_list(raw.get("research_progress"), len(state.research_tasks))
    flags = _as_list(raw.get("research_unlocked"), len(state.research_tasks))
    for i, task in enumerate(state.research_tasks):
        if i < len(flags):
            task.unlocked = bool(flags[i])
        if i < len(progress):
            task.progress = min(task.required, max(0.0, _float(progress[i], 0.0)))
        if task.unlocked:
            task.progress = task.required
            state.ages[task.age_key].unlocked = True

    index = max(0, _int(raw.get("research_index"), 0))
    while index < len(state.research_tasks) and state.research_tasks[index].unlocked:
        index += 1
    state.research_index = min(index, len(state.research_tasks))

    inventory = raw.get("weapon_inventory")
    if isinstance(inventory, dict):
        for key in state.weapon_inventory:
            if key in inventory:
                state.weapon_inventory[key] = max(0.0, _float(inventory[key], 0.0))

    state.siege = _deserialize_siege(raw.get("siege"))
    return state


# ===================================================================
# Helpers
# ===================================================================

def _deserialize_siege(d: Any) -> SiegeMission:
    if not isinstance(d, dict) or not d.get("active"):
        return SiegeMission()
    return SiegeMission(
        active=True,
        end_timestamp=_float(d.get("end_timestamp"), 0.0),
        reward=max(0.0, _float(d.get("reward"), 0.0)),
        weapon_type=d.get("weapon_type"),
        weapons_sent=max(0, _int(d.get("weapons_sent"), 0)),
    )


def _float(value: Any, default: float) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def _int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def _as_list(value: Any, length: int) -> list[Any]:
    """Accept a list, or a mapping keyed by task index, truncated to ``length``."""
    if isinstance(value, list):
        return value[:length]
    if isinstance(value, dict):
        indexed = {}
        for k, v in value.items():
            i = _int(k, -1)
            if 0 <= i < length:
                indexed[i] = v
        return [indexed.get(i) for i in range(max(indexed, default=-1) + 1)]
    return []
