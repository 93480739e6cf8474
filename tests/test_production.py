"""Tests for milestone production bonuses and passive accrual."""

from pathlib import Path

import pytest

from warprofits.engine.economy_service import (
    EconomyService,
    effective_rate,
    units_to_next_milestone,
)
from warprofits.loaders.catalog_loader import load_catalog
from warprofits.loaders.game_config_loader import GameConfig
from warprofits.models.game_state import Factory, new_game_state
from warprofits.util.events import EventBus

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"


def _factory(owned: int, base_rate: float = 60.0) -> Factory:
    return Factory(key="club", name="Wood Club", base_rate=base_rate,
                   base_cost=50.0, cost_multiplier=1.15, owned=owned)


@pytest.fixture
def state():
    return new_game_state(load_catalog(CONFIG_DIR))


class TestEffectiveRate:
    @pytest.mark.parametrize("owned,expected", [
        (0, 60.0), (1, 60.0), (24, 60.0),
        (25, 120.0), (49, 120.0),
        (50, 240.0), (74, 240.0),
        (75, 480.0), (100, 960.0),
    ])
    def test_doubles_every_25(self, owned, expected):
        assert effective_rate(_factory(owned)) == expected

    def test_constant_between_milestones(self):
        rates = {effective_rate(_factory(n)) for n in range(25, 50)}
        assert rates == {120.0}

    def test_custom_milestone_size(self):
        assert effective_rate(_factory(10), milestone_size=10) == 120.0

    @pytest.mark.parametrize("owned,expected", [(0, 25), (1, 24), (24, 1), (25, 25), (30, 20)])
    def test_units_to_next_milestone(self, owned, expected):
        assert units_to_next_milestone(_factory(owned)) == expected


class TestMoneyAccrual:
    def test_starter_club_earns_one_per_second(self, state):
        service = EconomyService(EventBus())
        # one Wood Club: 60 per minute
        assert service.income_per_second(state) == pytest.approx(1.0)
        service.step(state, 10.0)
        assert state.money == pytest.approx(10.0)

    def test_locked_ages_do_not_produce(self, state):
        service = EconomyService(EventBus())
        state.get_factory("bronze", "bronzeSword").owned = 5
        service.step(state, 60.0)
        assert state.money == pytest.approx(60.0)

    def test_production_scales_with_owned_and_milestones(self, state):
        service = EconomyService(EventBus())
        state.get_factory("stone", "club").owned = 25
        # 25 units * 120/min / 60 = 50 per second
        service.step(state, 2.0)
        assert state.money == pytest.approx(100.0)

    def test_long_absence_is_not_capped(self, state):
        service = EconomyService(EventBus())
        service.step(state, 86_400.0)
        assert state.money == pytest.approx(86_400.0)

    def test_zero_or_negative_elapsed_is_noop(self, state):
        service = EconomyService(EventBus())
        service.step(state, 0.0)
        service.step(state, -5.0)
        assert state.money == 0.0


class TestWeaponAccrual:
    def test_weapon_economy_stocks_inventory(self, state):
        service = EconomyService(EventBus(), GameConfig(economy_mode="weapons"))
        state.get_factory("stone", "spear").owned = 2

        service.step(state, 30.0)

        assert state.money == 0.0
        assert state.weapon_inventory["club"] == pytest.approx(30.0)
        # 2 * 180 / 60 * 30
        assert state.weapon_inventory["spear"] == pytest.approx(180.0)
        assert state.weapon_inventory["sling"] == 0.0

    def test_fractional_stock_accumulates(self, state):
        service = EconomyService(EventBus(), GameConfig(economy_mode="weapons"))
        service.step(state, 0.5)
        service.step(state, 0.25)
        assert state.weapon_inventory["club"] == pytest.approx(0.75)
