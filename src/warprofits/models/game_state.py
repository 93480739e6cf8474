"""Game state model — the player's complete mutable state.

A GameState holds the currency balance, every age with its owned
factories, the scientist pool, the research queue, the weapon inventory
and the siege mission. It is owned by a single GameSession.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

from warprofits.models.catalog import Catalog


@dataclass
class Factory:
    """A factory line with its owned count.

    Attributes:
        key: Factory identifier.
        name: Display name.
        base_rate: Per-minute output of one unit before milestone bonuses.
        base_cost: Price of the first unit.
        cost_multiplier: Price growth per owned unit.
        owned: Units owned. Only increases.
    """

    key: str
    name: str
    base_rate: float
    base_cost: float
    cost_multiplier: float
    owned: int = 0


@dataclass
class Age:
    """A progression tier and its factories (in catalog order)."""

    key: str
    name: str
    factories: dict[str, Factory] = field(default_factory=dict)
    unlocked: bool = False


@dataclass
class ResearchTask:
    """One entry of the research queue.

    Attributes:
        name: Display name.
        age_key: Age unlocked on completion.
        required: Points needed.
        progress: Points accumulated so far, never above ``required``.
        unlocked: Terminal flag; set once.
    """

    name: str
    age_key: str
    required: float
    progress: float = 0.0
    unlocked: bool = False


@dataclass
class ScientistPool:
    """Hired scientists and their pricing."""

    count: int = 0
    base_cost: float = 1000.0
    cost_multiplier: float = 1.2


@dataclass
class SiegeMission:
    """The single siege slot."""

    active: bool = False
    end_timestamp: float = 0.0
    reward: float = 0.0
    weapon_type: Optional[str] = None
    weapons_sent: int = 0


@dataclass
class GameState:
    """Complete state of a single game.

    Attributes:
        money: Currency balance, never negative.
        last_update: Wall-clock timestamp (seconds) of the last tick.
        ages: Ages keyed by age key, in catalog order.
        scientists: Scientist pool.
        research_tasks: Ordered research queue.
        research_index: Index of the active research task.
        weapon_inventory: Weapon stock keyed by factory key.
        siege: The siege mission slot.
    """

    money: float = 0.0
    last_update: float = 0.0
    ages: dict[str, Age] = field(default_factory=dict)
    scientists: ScientistPool = field(default_factory=ScientistPool)
    research_tasks: list[ResearchTask] = field(default_factory=list)
    research_index: int = 0
    weapon_inventory: dict[str, float] = field(default_factory=dict)
    siege: SiegeMission = field(default_factory=SiegeMission)

    # -- Helpers ---------------------------------------------------------

    def get_factory(self, age_key: str, factory_key: str) -> Optional[Factory]:
        age = self.ages.get(age_key)
        if age is None:
            return None
        return age.factories.get(factory_key)

    def unlocked_factories(self) -> Iterator[Factory]:
        """Yield every factory of every unlocked age."""
        for age in self.ages.values():
            if age.unlocked:
                yield from age.factories.values()

    def current_task(self) -> Optional[ResearchTask]:
        """The head of the research queue, or None when all are done."""
        if 0 <= self.research_index < len(self.research_tasks):
            return self.research_tasks[self.research_index]
        return None


def new_game_state(catalog: Catalog, money: float = 0.0, now: float = 0.0) -> GameState:
    """Build a fresh game from the catalog.

    Ages keep their catalog unlock flag, factories start at their
    ``starting_owned`` count and the weapon inventory lists every
    factory key at zero.
    """
    ages: dict[str, Age] = {}
    for age_def in catalog.ages:
        factories = {
            f.key: Factory(
                key=f.key,
                name=f.name,
                base_rate=f.base_rate,
                base_cost=f.base_cost,
                cost_multiplier=f.cost_multiplier,
                owned=f.starting_owned,
            )
            for f in age_def.factories
        }
        ages[age_def.key] = Age(
            key=age_def.key, name=age_def.name,
            factories=factories, unlocked=age_def.unlocked,
        )

    return GameState(
        money=money,
        last_update=now,
        ages=ages,
        scientists=ScientistPool(
            count=0,
            base_cost=catalog.scientists.base_cost,
            cost_multiplier=catalog.scientists.cost_multiplier,
        ),
        research_tasks=[
            ResearchTask(name=r.name, age_key=r.age_key, required=r.required)
            for r in catalog.research
        ],
        research_index=0,
        weapon_inventory={key: 0.0 for key in catalog.factory_keys()},
        siege=SiegeMission(),
    )
