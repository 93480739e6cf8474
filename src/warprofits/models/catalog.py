"""Catalog models — static game content.

Defines ages, factories, research tasks, scientist pricing, weapon stats
and enemy archetypes. Loaded from config/catalog.yaml via the catalog_loader.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FactoryDetails:
    """Definition of a purchasable factory.

    Attributes:
        key: Unique factory identifier (also the weapon key it produces).
        name: Display name.
        base_rate: Production per minute for a single unit, before milestones.
        base_cost: Price of the first unit.
        cost_multiplier: Price growth per owned unit.
        starting_owned: Units granted on a fresh game.
    """

    key: str
    name: str = ""
    base_rate: float = 0.0
    base_cost: float = 0.0
    cost_multiplier: float = 1.0
    starting_owned: int = 0


@dataclass(frozen=True)
class AgeDetails:
    """A progression tier gating a set of factories."""

    key: str
    name: str = ""
    unlocked: bool = False
    factories: tuple[FactoryDetails, ...] = ()


@dataclass(frozen=True)
class ResearchDetails:
    """A research task that unlocks ``age_key`` once ``required`` points accrue."""

    name: str
    age_key: str
    required: float


@dataclass(frozen=True)
class ScientistDetails:
    """Scientist pricing."""

    base_cost: float = 1000.0
    cost_multiplier: float = 1.2


@dataclass(frozen=True)
class WeaponStats:
    """Combat stats of the weapon a factory produces.

    Attributes:
        key: Factory key producing this weapon.
        tier: Age key the weapon belongs to.
    """

    key: str
    tier: str
    attack: float = 0.0
    defense: float = 0.0
    range: float = 0.0


@dataclass(frozen=True)
class EnemyArchetype:
    """A kind of enemy a raid can meet.

    Attributes:
        name: Display name.
        tier: Age key whose weapons the enemy fields.
        wealth: Payout scale on defeat.
        effectiveness: Multiplier on the player's weapons against this enemy.
            Weapons not listed count with 1.
    """

    name: str
    tier: str
    wealth: float = 1.0
    effectiveness: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class Catalog:
    """All static content, read-only after loading."""

    ages: tuple[AgeDetails, ...] = ()
    research: tuple[ResearchDetails, ...] = ()
    scientists: ScientistDetails = field(default_factory=ScientistDetails)
    weapons: dict[str, WeaponStats] = field(default_factory=dict)
    enemies: tuple[EnemyArchetype, ...] = ()

    def get_age(self, age_key: str) -> AgeDetails | None:
        for age in self.ages:
            if age.key == age_key:
                return age
        return None

    def factory_keys(self) -> list[str]:
        """All factory keys in catalog order."""
        return [f.key for age in self.ages for f in age.factories]

    def weapons_for_tier(self, tier: str) -> list[WeaponStats]:
        return [w for w in self.weapons.values() if w.tier == tier]

    def enemies_for_tier(self, tier: str) -> list[EnemyArchetype]:
        return [e for e in self.enemies if e.tier == tier]
