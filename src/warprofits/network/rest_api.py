"""REST API — FastAPI application over the game session.

This is the adapter between the rendering layer and the simulation:
query endpoints return everything a client displays, command endpoints
invoke one session transition each and report the outcome.

Usage::

    from warprofits.network.rest_api import create_app

    app = create_app(session)
    # Start with uvicorn as an asyncio task alongside the game loop
"""

from __future__ import annotations

import logging
from typing import Any, TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from warprofits.network.rest_models import (
    BuyFactoryRequest,
    CommandResponse,
    RaidRequest,
    RaidResponse,
    SaveResponse,
    SiegeRequest,
    SiegeResponse,
)

if TYPE_CHECKING:
    from warprofits.engine.game_session import GameSession
    from warprofits.network.notices import NoticeBoard

log = logging.getLogger(__name__)


def create_app(session: "GameSession", notices: "NoticeBoard | None" = None) -> FastAPI:
    """Factory: create and return a configured FastAPI application.

    The ``session`` reference is captured by closure so every endpoint
    can access game logic without global state. ``notices`` backs
    ``/api/notices``; without it the endpoint always returns an empty list.
    """
    app = FastAPI(title="WarProfits", version="0.1.0")

    # CORS: the browser client is served from a different origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _command_result(error: str | None) -> dict[str, Any]:
        return {
            "success": error is None,
            "error": error or "",
            "money": session.balance(),
        }

    # =================================================================
    # Queries
    # =================================================================

    @app.get("/api/state")
    async def get_state() -> dict[str, Any]:
        return session.summary()

    @app.get("/api/factories")
    async def get_factories() -> dict[str, Any]:
        return {"factories": session.factories()}

    @app.get("/api/research")
    async def get_research() -> dict[str, Any]:
        return session.research()

    @app.get("/api/inventory")
    async def get_inventory() -> dict[str, Any]:
        return {"inventory": session.inventory()}

    @app.get("/api/siege")
    async def get_siege() -> dict[str, Any]:
        return session.siege()

    @app.get("/api/notices")
    async def get_notices() -> dict[str, Any]:
        return {"notices": notices.drain() if notices is not None else []}

    # =================================================================
    # Economy commands
    # =================================================================

    @app.post("/api/factories/buy", response_model=CommandResponse)
    async def buy_factory(body: BuyFactoryRequest) -> dict[str, Any]:
        return _command_result(session.buy_factory(body.age, body.factory))

    @app.post("/api/scientists/hire", response_model=CommandResponse)
    async def hire_scientist() -> dict[str, Any]:
        return _command_result(session.hire_scientist())

    # =================================================================
    # Raids & sieges
    # =================================================================

    @app.post("/api/raids", response_model=RaidResponse)
    async def launch_raid(body: RaidRequest) -> dict[str, Any]:
        result = session.launch_raid(body.tier, body.army)
        if isinstance(result, str):
            return {"success": False, "error": result}
        return {
            "success": True,
            "enemy": result.enemy.name,
            "enemy_army": dict(result.enemy.army),
            "player_won": result.battle.player_won,
            "player_power": result.battle.player_power,
            "enemy_power": result.battle.enemy_power,
            "casualties": result.battle.player_casualties,
            "enemy_casualties": result.battle.enemy_casualties,
            "reward": result.reward,
            "survivors": dict(result.survivors),
        }

    @app.post("/api/siege", response_model=SiegeResponse)
    async def start_siege(body: SiegeRequest) -> dict[str, Any]:
        result = session.start_siege(body.weapon, body.amount)
        if isinstance(result, str):
            return {"success": False, "error": result}
        return {"success": True, "siege": session.siege()}

    # =================================================================
    # Session
    # =================================================================

    @app.post("/api/save", response_model=SaveResponse)
    async def save_game() -> dict[str, Any]:
        try:
            path = await session.save()
        except OSError as exc:
            return {"success": False, "error": str(exc)}
        return {"success": True, "path": path}

    @app.post("/api/reset", response_model=CommandResponse)
    async def reset_game() -> dict[str, Any]:
        session.reset()
        return _command_result(None)

    return app
