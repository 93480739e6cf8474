"""State save — serializes the game state to a YAML snapshot.

The snapshot is a flat mapping of plain values: balance, timestamps,
scientist count, per-age unlock flags, per-factory owned counts, the
research queue, the weapon inventory and the siege mission.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any

import yaml

from warprofits.models.game_state import GameState, SiegeMission

log = logging.getLogger(__name__)

DEFAULT_STATE_PATH = "warprofits_save.yaml"
SNAPSHOT_VERSION = 1


# ===================================================================
# Public API
# ===================================================================


async def save_state(state: GameState, path: str = DEFAULT_STATE_PATH) -> None:
    """Write the game state to a YAML file.

    The file is written to a temporary sibling first and then moved into
    place, so a crash mid-write never leaves a truncated snapshot.
    """
    snapshot = serialize_state(state)

    out = Path(path)
    tmp = out.with_suffix(out.suffix + ".tmp")
    try:
        tmp.write_text(
            yaml.dump(snapshot, default_flow_style=False, allow_unicode=True, sort_keys=False),
            encoding="utf-8",
        )
        tmp.replace(out)
        log.info("Game state saved to %s (money=%.0f)", path, state.money)
    except Exception:
        log.exception("Failed to save game state to %s", path)
        if tmp.exists():
            tmp.unlink(missing_ok=True)
        raise


def serialize_state(state: GameState) -> dict[str, Any]:
    """Convert the game state into the snapshot mapping."""
    return {
        "meta": _serialize_meta(),
        "money": state.money,
        "last_update": state.last_update,
        "scientists": state.scientists.count,
        "ages_unlocked": {key: age.unlocked for key, age in state.ages.items()},
        "age_factories": {
            key: {fkey: f.owned for fkey, f in age.factories.items()}
            for key, age in state.ages.items()
        },
        "research_index": state.research_index,
        "research_progress": [task.progress for task in state.research_tasks],
        "research_unlocked": [task.unlocked for task in state.research_tasks],
        "weapon_inventory": dict(state.weapon_inventory),
        "siege": _serialize_siege(state.siege),
    }


# ===================================================================
# Helpers
# ===================================================================

def _serialize_meta() -> dict[str, Any]:
    return {
        "version": SNAPSHOT_VERSION,
        "saved_at": time.strftime("%Y-%m-%dT%H:%M:%S"),
        "saved_at_unix": time.time(),
    }


def _serialize_siege(siege: SiegeMission) -> dict[str, Any]:
    return {
        "active": siege.active,
        "end_timestamp": siege.end_timestamp,
        "reward": siege.reward,
        "weapon_type": siege.weapon_type,
        "weapons_sent": siege.weapons_sent,
    }
