"""Raid service — enemy generation and battle resolution.

A raid is one atomic transaction:

1.  Validate the army against the weapon inventory.
2.  Debit the sent weapons.
3.  Generate an enemy of the chosen tier, sized relative to the army.
4.  Resolve the battle with noisy power comparison.
5.  Credit survivors back to the inventory and the reward to the balance.

Power of an army::

    sum(count * (attack + 0.5 * defense + 0.3 * range) * effectiveness)

Casualties on each side are the opponent's share of the combined power
times the own army size (floored, capped at the army size).

All randomness comes from the injected ``random.Random`` so battles are
reproducible with a fixed seed.
"""

from __future__ import annotations

import logging
import math
import random
from typing import TYPE_CHECKING, Mapping, Optional

from warprofits.models.battle import BattleResult, Enemy, RaidResult
from warprofits.util import constants as c
from warprofits.util.events import RaidResolved

if TYPE_CHECKING:
    from warprofits.loaders.game_config_loader import GameConfig
    from warprofits.models.catalog import Catalog, WeaponStats
    from warprofits.models.game_state import GameState
    from warprofits.util.events import EventBus

log = logging.getLogger(__name__)


def weapon_power(weapon: WeaponStats) -> float:
    """Power of a single unit before effectiveness."""
    return weapon.attack + c.DEFENSE_WEIGHT * weapon.defense + c.RANGE_WEIGHT * weapon.range


def army_power(
    army: Mapping[str, int],
    weapons: Mapping[str, WeaponStats],
    effectiveness: Optional[Mapping[str, float]] = None,
) -> float:
    """Total power of an army. Weapons without stats contribute nothing."""
    effectiveness = effectiveness or {}
    total = 0.0
    for key, count in army.items():
        weapon = weapons.get(key)
        if weapon is None or count <= 0:
            continue
        total += count * weapon_power(weapon) * effectiveness.get(key, 1.0)
    return total


def distribute_survivors(sent: Mapping[str, int], survivors: int) -> dict[str, int]:
    """Split ``survivors`` over weapon types in proportion to ``sent``.

    Each type first gets the floor of its proportional share; the units
    lost to rounding are then handed out one at a time, cycling through
    the types in ``sent`` order. The result always sums to ``survivors``
    and never gives a type more than it sent.
    """
    kinds = [k for k, n in sent.items() if n > 0]
    total = sum(sent[k] for k in kinds)
    result = {k: 0 for k in sent}
    if total <= 0 or survivors <= 0:
        return result
    survivors = min(survivors, total)

    for key in kinds:
        result[key] = (survivors * sent[key]) // total

    remainder = survivors - sum(result.values())
    i = 0
    while remainder > 0:
        key = kinds[i % len(kinds)]
        if result[key] < sent[key]:
            result[key] += 1
            remainder -= 1
        i += 1
    return result


class RaidService:
    """Service for raids against generated enemies.

    Args:
        catalog: Static content (weapon stats, enemy archetypes).
        event_bus: Event bus for raid outcome notifications.
        game_config: Raid tuning (enemy scale, noise, reward base).
        rng: Random source; pass a seeded ``random.Random`` for
            reproducible battles.
    """

    def __init__(self, catalog: Catalog, event_bus: EventBus,
                 game_config: GameConfig | None = None,
                 rng: random.Random | None = None) -> None:
        self._catalog = catalog
        self._events = event_bus
        self._rng = rng or random.Random()
        if game_config is not None:
            self._scale = (game_config.enemy_scale_min, game_config.enemy_scale_max)
            self._noise = (game_config.battle_noise_min, game_config.battle_noise_max)
            self._reward_base = game_config.raid_reward_base
        else:
            self._scale = (c.ENEMY_SCALE_MIN, c.ENEMY_SCALE_MAX)
            self._noise = (c.BATTLE_NOISE_MIN, c.BATTLE_NOISE_MAX)
            self._reward_base = c.RAID_REWARD_BASE

    # -- Enemy -----------------------------------------------------------

    def generate_enemy(self, player_total: int, tier: str) -> Enemy:
        """Create an enemy of ``tier`` sized relative to the player's army.

        Raises:
            ValueError: If the catalog has no enemies or weapons for the tier.
        """
        archetypes = self._catalog.enemies_for_tier(tier)
        weapons = self._catalog.weapons_for_tier(tier)
        if not archetypes or not weapons:
            raise ValueError(f"No enemies or weapons for tier {tier!r}")

        archetype = self._rng.choice(archetypes)
        scale = self._rng.uniform(*self._scale)
        total = max(1, math.floor(player_total * scale))

        army: dict[str, int] = {}
        for _ in range(total):
            weapon = self._rng.choice(weapons)
            army[weapon.key] = army.get(weapon.key, 0) + 1

        return Enemy(
            name=archetype.name,
            tier=tier,
            wealth=archetype.wealth,
            army=army,
            effectiveness=dict(archetype.effectiveness),
        )

    # -- Battle ----------------------------------------------------------

    def resolve_battle(self, player_army: Mapping[str, int], enemy: Enemy) -> BattleResult:
        """Fight ``player_army`` against ``enemy``. Ties go to the player."""
        weapons = self._catalog.weapons
        player_power = army_power(player_army, weapons, enemy.effectiveness)
        enemy_power = army_power(enemy.army, weapons)
        player_power *= self._rng.uniform(*self._noise)
        enemy_power *= self._rng.uniform(*self._noise)

        player_total = sum(player_army.values())
        enemy_total = enemy.total
        combined = player_power + enemy_power
        if combined > 0:
            player_share = player_power / combined
            enemy_share = enemy_power / combined
        else:
            player_share = enemy_share = 0.5

        player_casualties = min(player_total, math.floor(enemy_share * player_total))
        enemy_casualties = min(enemy_total, math.floor(player_share * enemy_total))

        player_won = player_power >= enemy_power
        reward = 0
        if player_won:
            strongest = max(player_power, enemy_power)
            margin = abs(player_power - enemy_power) / strongest if strongest > 0 else 0.0
            reward = math.floor(self._reward_base * enemy_total * enemy.wealth * (1 + margin))

        return BattleResult(
            player_power=player_power,
            enemy_power=enemy_power,
            player_won=player_won,
            player_casualties=player_casualties,
            enemy_casualties=enemy_casualties,
            reward=reward,
        )

    # -- Actions ---------------------------------------------------------

    def validate_army(self, state: GameState, tier: str, army: Mapping[str, int]) -> Optional[str]:
        """Check a raid request. Returns error message or None."""
        age = state.ages.get(tier)
        if age is None:
            return f"Unknown tier: {tier}"
        if not age.unlocked:
            return f"{age.name} is locked"
        if not self._catalog.enemies_for_tier(tier) or not self._catalog.weapons_for_tier(tier):
            return f"No enemies to raid in {age.name}"

        for key, amount in army.items():
            if key not in self._catalog.weapons:
                return f"Unknown weapon: {key}"
            if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
                return f"Weapon amount must be a non-negative integer: {key}={amount}"
            have = state.weapon_inventory.get(key, 0.0)
            if have < amount:
                return f"Not enough {key} (need {amount}, have {int(have)})"
        if sum(army.values()) <= 0:
            return "No weapons sent"
        return None

    def raid(self, state: GameState, tier: str, army: Mapping[str, int]) -> RaidResult | str:
        """Send ``army`` on a raid against an enemy of ``tier``.

        Returns the RaidResult, or an error string if validation fails.
        Nothing changes on failure.
        """
        error = self.validate_army(state, tier, army)
        if error is not None:
            log.debug("Raid rejected: %s", error)
            return error

        sent = {k: n for k, n in army.items() if n > 0}
        total = sum(sent.values())
        for key, amount in sent.items():
            state.weapon_inventory[key] -= amount

        enemy = self.generate_enemy(total, tier)
        battle = self.resolve_battle(sent, enemy)
        survivors = distribute_survivors(sent, total - battle.player_casualties)

        for key, amount in survivors.items():
            state.weapon_inventory[key] = state.weapon_inventory.get(key, 0.0) + amount
        state.money += battle.reward

        log.info(
            "Raid vs %s (%s): sent=%d enemy=%d power=%.1f/%.1f %s reward=%d casualties=%d",
            enemy.name, tier, total, enemy.total, battle.player_power, battle.enemy_power,
            "WIN" if battle.player_won else "LOSS", battle.reward, battle.player_casualties,
        )
        self._events.emit(RaidResolved(
            enemy_name=enemy.name,
            player_won=battle.player_won,
            reward=battle.reward,
            casualties=battle.player_casualties,
        ))
        return RaidResult(enemy=enemy, battle=battle, sent=sent, survivors=survivors)
