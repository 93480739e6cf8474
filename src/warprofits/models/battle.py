"""Raid models — ephemeral enemy and battle outcome records.

None of these are persisted; they live for the duration of one raid.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Enemy:
    """A generated opponent.

    Attributes:
        name: Archetype name.
        tier: Age key of the enemy's weapons.
        wealth: Payout scale.
        army: Unit counts keyed by weapon key.
        effectiveness: Multipliers on the player's weapons against this enemy.
    """

    name: str
    tier: str
    wealth: float
    army: dict[str, int] = field(default_factory=dict)
    effectiveness: dict[str, float] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.army.values())


@dataclass(frozen=True)
class BattleResult:
    """Outcome of resolving one battle."""

    player_power: float
    enemy_power: float
    player_won: bool
    player_casualties: int
    enemy_casualties: int
    reward: int


@dataclass
class RaidResult:
    """Everything a raid changed, for display.

    Attributes:
        enemy: The opponent fought.
        battle: Battle resolution.
        sent: Units sent, keyed by weapon.
        survivors: Units returned to the inventory, keyed by weapon.
    """

    enemy: Enemy
    battle: BattleResult
    sent: dict[str, int] = field(default_factory=dict)
    survivors: dict[str, int] = field(default_factory=dict)

    @property
    def reward(self) -> int:
        return self.battle.reward
