"""Unit tests for factory pricing and purchases."""

from pathlib import Path

import pytest

from warprofits.engine.economy_service import EconomyService, factory_cost
from warprofits.loaders.catalog_loader import load_catalog
from warprofits.models.game_state import Factory, new_game_state
from warprofits.util.events import EventBus, FactoryPurchased

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"


def _club(owned: int = 0) -> Factory:
    return Factory(key="club", name="Wood Club", base_rate=60.0,
                   base_cost=50.0, cost_multiplier=1.15, owned=owned)


@pytest.fixture
def catalog():
    return load_catalog(CONFIG_DIR)


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def service(bus):
    return EconomyService(bus)


@pytest.fixture
def state(catalog):
    return new_game_state(catalog)


class TestFactoryCost:
    def test_first_unit_costs_base(self):
        assert factory_cost(_club(0)) == 50

    def test_second_unit_is_floored(self):
        # floor(50 * 1.15) = floor(57.5 - epsilon) = 57
        assert factory_cost(_club(1)) == 57

    def test_cost_is_deterministic(self):
        assert factory_cost(_club(17)) == factory_cost(_club(17))

    def test_cost_strictly_increasing_for_all_catalog_factories(self, catalog):
        for age in catalog.ages:
            for details in age.factories:
                factory = Factory(key=details.key, name=details.name,
                                  base_rate=details.base_rate, base_cost=details.base_cost,
                                  cost_multiplier=details.cost_multiplier)
                previous = factory_cost(factory)
                for owned in range(1, 120):
                    factory.owned = owned
                    current = factory_cost(factory)
                    assert current > previous, f"{details.key} at owned={owned}"
                    previous = current


class TestPurchase:
    def test_purchase_debits_and_increments(self, service, state):
        club = state.get_factory("stone", "club")
        assert club.owned == 1  # starter factory
        state.money = 100.0

        result = service.purchase(state, "stone", "club")

        assert result is None
        assert club.owned == 2
        assert state.money == pytest.approx(100.0 - 57)

    def test_insufficient_money_is_a_noop(self, service, state):
        state.money = 10.0
        spear = state.get_factory("stone", "spear")

        result = service.purchase(state, "stone", "spear")

        assert result is not None
        assert "not enough money" in result.lower()
        assert spear.owned == 0
        assert state.money == 10.0

    def test_exact_balance_is_enough(self, service, state):
        state.money = 100.0
        assert service.purchase(state, "stone", "spear") is None
        assert state.money == 0.0

    def test_locked_age_rejected(self, service, state):
        state.money = 1_000_000.0
        result = service.purchase(state, "bronze", "bronzeSword")
        assert result is not None and "locked" in result
        assert state.get_factory("bronze", "bronzeSword").owned == 0
        assert state.money == 1_000_000.0

    def test_unknown_factory_rejected(self, service, state):
        state.money = 1000.0
        assert service.purchase(state, "stone", "trebuchet") is not None
        assert service.purchase(state, "space", "laser") is not None
        assert state.money == 1000.0

    def test_balance_never_negative(self, service, state):
        state.money = 5000.0
        while service.purchase(state, "stone", "sling") is None:
            assert state.money >= 0
        assert state.money >= 0
        assert state.money < factory_cost(state.get_factory("stone", "sling"))

    def test_purchase_emits_event(self, service, state, bus):
        received = []
        bus.on(FactoryPurchased, received.append)
        state.money = 57.0

        service.purchase(state, "stone", "club")
        service.purchase(state, "stone", "club")  # cannot afford another one

        assert received == [FactoryPurchased(age_key="stone", factory_key="club", owned=2, cost=57)]
