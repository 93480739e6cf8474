"""Tests for the game loop tick and autosave."""

from __future__ import annotations

import asyncio
import random
from pathlib import Path

import pytest

from warprofits.engine.economy_service import EconomyService
from warprofits.engine.game_loop import GameLoop
from warprofits.engine.game_session import GameSession
from warprofits.engine.raid_service import RaidService
from warprofits.engine.research_service import ResearchService
from warprofits.engine.siege_service import SiegeService
from warprofits.loaders.catalog_loader import load_catalog
from warprofits.loaders.game_config_loader import GameConfig
from warprofits.models.game_state import new_game_state
from warprofits.util.events import EventBus

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"


def _make_loop(config: GameConfig) -> GameLoop:
    catalog = load_catalog(CONFIG_DIR)
    bus = EventBus()
    session = GameSession(
        new_game_state(catalog, now=1000.0), catalog, bus,
        EconomyService(bus, config), ResearchService(bus),
        RaidService(catalog, bus, config, rng=random.Random(0)),
        SiegeService(bus, config), game_config=config,
        clock=lambda: 1000.0,
    )
    return GameLoop(session, config)


@pytest.mark.asyncio
async def test_step_counts_ticks():
    loop = _make_loop(GameConfig())
    await loop.step(1001.0)
    await loop.step(1003.0)
    assert loop.tick_count == 2
    assert loop.last_tick_dt == 2.0
    assert loop._session.state.money == pytest.approx(3.0)


@pytest.mark.asyncio
async def test_autosave_interval(tmp_path: Path):
    path = tmp_path / "save.yaml"
    loop = _make_loop(GameConfig(autosave_interval_s=300.0, state_file=str(path)))

    await loop.step(1001.0)
    await loop.step(1200.0)
    assert loop.save_count == 0
    assert not path.exists()

    await loop.step(1301.0)
    assert loop.save_count == 1
    assert path.exists()

    await loop.step(1400.0)
    assert loop.save_count == 1


@pytest.mark.asyncio
async def test_autosave_failure_keeps_running(tmp_path: Path):
    path = tmp_path / "missing" / "save.yaml"
    loop = _make_loop(GameConfig(autosave_interval_s=10.0, state_file=str(path)))

    await loop.step(1001.0)
    await loop.step(1020.0)

    assert loop.save_count == 0
    assert loop.tick_count == 2


@pytest.mark.asyncio
async def test_run_until_stopped():
    loop = _make_loop(GameConfig(tick_interval_s=0.01))
    task = asyncio.create_task(loop.run())
    await asyncio.sleep(0.05)
    assert loop.is_running
    loop.stop()
    await asyncio.wait_for(task, timeout=1.0)
    assert not loop.is_running
    assert loop.tick_count >= 1
    assert loop.uptime_seconds > 0


def test_counters_before_first_step():
    loop = _make_loop(GameConfig())
    assert loop.tick_count == 0
    assert loop.save_count == 0
    assert loop.last_tick_dt == 0.0
    assert loop.uptime_seconds == 0.0
    assert not loop.is_running
