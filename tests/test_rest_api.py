"""Tests for the REST API.

Uses httpx AsyncClient with the ASGI transport to test REST endpoints
end-to-end without starting a real server.
"""

from __future__ import annotations

import random
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from warprofits.engine.economy_service import EconomyService
from warprofits.engine.game_session import GameSession
from warprofits.engine.raid_service import RaidService
from warprofits.engine.research_service import ResearchService
from warprofits.engine.siege_service import SiegeService
from warprofits.loaders.catalog_loader import load_catalog
from warprofits.loaders.game_config_loader import GameConfig
from warprofits.models.game_state import new_game_state
from warprofits.network.notices import NoticeBoard
from warprofits.network.rest_api import create_app
from warprofits.util.events import EventBus

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
NOW = 5_000.0


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def session(bus: EventBus, tmp_path: Path) -> GameSession:
    config = GameConfig(state_file=str(tmp_path / "save.yaml"))
    catalog = load_catalog(CONFIG_DIR)
    return GameSession(
        new_game_state(catalog, now=NOW), catalog, bus,
        EconomyService(bus, config), ResearchService(bus),
        RaidService(catalog, bus, config, rng=random.Random(11)),
        SiegeService(bus, config), game_config=config,
        clock=lambda: NOW,
    )


@pytest.fixture
def notices(bus: EventBus) -> NoticeBoard:
    board = NoticeBoard()
    board.subscribe(bus)
    return board


@pytest.fixture
async def client(session: GameSession, notices: NoticeBoard):
    app = create_app(session, notices)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ===================================================================
# Queries
# ===================================================================

class TestQueries:
    @pytest.mark.asyncio
    async def test_state(self, client: AsyncClient) -> None:
        resp = await client.get("/api/state")
        assert resp.status_code == 200
        data = resp.json()
        assert data["money"] == 0
        assert data["scientists"] == 0
        assert data["research"]["task"] == "Unlock Bronze Age"
        assert data["economy_mode"] == "money"

    @pytest.mark.asyncio
    async def test_factories(self, client: AsyncClient) -> None:
        resp = await client.get("/api/factories")
        rows = resp.json()["factories"]
        assert [r["key"] for r in rows] == ["club", "spear", "sling", "bow"]

    @pytest.mark.asyncio
    async def test_research_and_inventory(self, client: AsyncClient) -> None:
        research = (await client.get("/api/research")).json()
        assert research["required"] == 10000.0
        inventory = (await client.get("/api/inventory")).json()["inventory"]
        assert inventory["club"] == 0

    @pytest.mark.asyncio
    async def test_siege_idle(self, client: AsyncClient) -> None:
        data = (await client.get("/api/siege")).json()
        assert data["active"] is False
        assert data["remaining_seconds"] == 0.0


# ===================================================================
# Commands
# ===================================================================

class TestCommands:
    @pytest.mark.asyncio
    async def test_buy_factory(self, client: AsyncClient, session: GameSession) -> None:
        session.state.money = 200.0
        resp = await client.post("/api/factories/buy", json={"age": "stone", "factory": "spear"})
        data = resp.json()
        assert data["success"] is True
        assert data["money"] == 100
        assert session.state.get_factory("stone", "spear").owned == 1

    @pytest.mark.asyncio
    async def test_buy_factory_failure(self, client: AsyncClient) -> None:
        resp = await client.post("/api/factories/buy", json={"age": "iron", "factory": "ironSword"})
        data = resp.json()
        assert resp.status_code == 200
        assert data["success"] is False
        assert "locked" in data["error"]

    @pytest.mark.asyncio
    async def test_buy_factory_bad_body(self, client: AsyncClient) -> None:
        resp = await client.post("/api/factories/buy", json={"age": "stone"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_hire_scientist(self, client: AsyncClient, session: GameSession) -> None:
        session.state.money = 1000.0
        data = (await client.post("/api/scientists/hire")).json()
        assert data["success"] is True
        assert data["money"] == 0
        assert session.state.scientists.count == 1

    @pytest.mark.asyncio
    async def test_raid(self, client: AsyncClient, session: GameSession,
                        notices: NoticeBoard) -> None:
        session.state.weapon_inventory["club"] = 10.0
        resp = await client.post("/api/raids", json={"tier": "stone", "army": {"club": 10}})
        data = resp.json()
        assert data["success"] is True
        assert data["enemy"]
        assert sum(data["survivors"].values()) == 10 - data["casualties"]
        assert len(notices) == 1

    @pytest.mark.asyncio
    async def test_raid_rejected(self, client: AsyncClient) -> None:
        data = (await client.post("/api/raids", json={"tier": "stone", "army": {"club": 1}})).json()
        assert data["success"] is False
        assert "Not enough" in data["error"]

    @pytest.mark.asyncio
    async def test_siege(self, client: AsyncClient, session: GameSession) -> None:
        session.state.weapon_inventory["club"] = 3.0
        data = (await client.post("/api/siege", json={"weapon": "club", "amount": 3})).json()
        assert data["success"] is True
        assert data["siege"]["reward"] == 75.0
        again = (await client.post("/api/siege", json={"weapon": "club", "amount": 1})).json()
        assert again["success"] is False

    @pytest.mark.asyncio
    async def test_save_and_notice(self, client: AsyncClient, tmp_path: Path) -> None:
        data = (await client.post("/api/save")).json()
        assert data["success"] is True
        assert Path(data["path"]).exists()
        notices = (await client.get("/api/notices")).json()["notices"]
        assert notices == ["Game saved"]
        assert (await client.get("/api/notices")).json()["notices"] == []

    @pytest.mark.asyncio
    async def test_reset(self, client: AsyncClient, session: GameSession) -> None:
        session.state.money = 999.0
        data = (await client.post("/api/reset")).json()
        assert data["success"] is True
        assert data["money"] == 0
        assert session.state.money == 0.0
