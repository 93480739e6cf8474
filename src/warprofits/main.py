"""Game server entry point.

Initializes all components and starts the asyncio event loop:
1. Load configuration (game constants, catalog)
2. Restore the saved game, or start a fresh one
3. Create engine services and the game session
4. Wire event handlers
5. Start the REST API
6. Start game loop (1s tick, autosave every 300s)

Usage:
    python -m warprofits.main
    # or via entry point:
    warprofits --state_file save.yaml
    warprofits --game_config game.weapons.yaml
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import random
import signal
import time
from dataclasses import dataclass, field
from typing import Optional

from warprofits.engine.economy_service import EconomyService
from warprofits.engine.game_loop import GameLoop
from warprofits.engine.game_session import GameSession
from warprofits.engine.raid_service import RaidService
from warprofits.engine.research_service import ResearchService
from warprofits.engine.siege_service import SiegeService
from warprofits.loaders.catalog_loader import load_catalog
from warprofits.loaders.game_config_loader import GameConfig, load_game_config
from warprofits.models.catalog import Catalog
from warprofits.models.game_state import GameState, new_game_state
from warprofits.network.notices import NoticeBoard
from warprofits.persistence.state_load import load_state
from warprofits.util.events import (
    AgeUnlocked,
    EventBus,
    GameSaved,
    RaidResolved,
    SiegeCompleted,
)

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Container for all loaded configuration
# ---------------------------------------------------------------------------


@dataclass
class Configuration:
    """Holds all data loaded from config files."""

    catalog: Catalog = field(default_factory=Catalog)
    game: GameConfig = field(default_factory=GameConfig)


# ---------------------------------------------------------------------------
# Container for all services (makes passing around easier)
# ---------------------------------------------------------------------------


@dataclass
class Services:
    """Holds references to all engine services."""

    game_config: Optional[GameConfig] = None
    event_bus: Optional[EventBus] = None
    economy: Optional[EconomyService] = None
    research: Optional[ResearchService] = None
    raids: Optional[RaidService] = None
    sieges: Optional[SiegeService] = None
    session: Optional[GameSession] = None
    game_loop: Optional[GameLoop] = None
    notices: Optional[NoticeBoard] = None


# ===================================================================
# 1. Load configuration
# ===================================================================


def load_configuration(config_dir: str = "config", game_file: str = "game.yaml") -> Configuration:
    """Load game constants (``game_file``) and the catalog from ``config_dir``."""
    log.info("Loading configuration …")
    game_cfg = load_game_config(os.path.join(config_dir, game_file))
    catalog = load_catalog(os.path.join(config_dir, "catalog.yaml"))
    log.info("  catalog:      %d ages, %d enemies", len(catalog.ages), len(catalog.enemies))
    log.info("  economy mode: %s", game_cfg.economy_mode)
    return Configuration(catalog=catalog, game=game_cfg)


# ===================================================================
# 2. Restore state
# ===================================================================


async def init_state(config: Configuration, state_file: str, now: float) -> GameState:
    """Restore the saved game, or build a fresh one if there is none."""
    restored = await load_state(config.catalog, path=state_file, now=now)
    if restored is not None:
        log.info("  state:        restored from %s (money=%.0f)", state_file, restored.money)
        return restored
    log.info("  state:        no previous save found, fresh start")
    return new_game_state(config.catalog, money=config.game.starting_money, now=now)


# ===================================================================
# 3. Create engine services
# ===================================================================


def create_services(config: Configuration, state: GameState, seed: int | None = None) -> Services:
    """Instantiate all engine services with proper dependency injection."""
    log.info("Creating services …")

    gc = config.game
    event_bus = EventBus()
    economy = EconomyService(event_bus, gc)
    research = ResearchService(event_bus)
    raids = RaidService(config.catalog, event_bus, gc, rng=random.Random(seed))
    sieges = SiegeService(event_bus, gc)
    session = GameSession(state, config.catalog, event_bus, economy, research,
                          raids, sieges, game_config=gc)
    game_loop = GameLoop(session, gc)
    notices = NoticeBoard()

    log.info("  all services created")
    return Services(
        game_config=gc,
        event_bus=event_bus,
        economy=economy,
        research=research,
        raids=raids,
        sieges=sieges,
        session=session,
        game_loop=game_loop,
        notices=notices,
    )


# ===================================================================
# 4. Wire up event handlers
# ===================================================================


def wire_events(services: Services) -> None:
    """Register event handlers: client notices and the audit log."""
    log.info("Wiring event handlers …")
    bus = services.event_bus
    services.notices.subscribe(bus)

    bus.on(AgeUnlocked, lambda e: log.info("[UNLOCK] %s", e.age_name))
    bus.on(RaidResolved, lambda e: log.info(
        "[RAID] %s %s reward=%d casualties=%d",
        e.enemy_name, "WIN" if e.player_won else "LOSS", e.reward, e.casualties))
    bus.on(SiegeCompleted, lambda e: log.info("[SIEGE] %s paid %.0f", e.weapon_type, e.reward))
    bus.on(GameSaved, lambda e: log.debug("[SAVE] %s", e.path))

    log.info("  event handlers registered")


# ===================================================================
# 5. Start network server
# ===================================================================


async def start_network(services: Services) -> None:
    """Start the REST API as a background uvicorn task."""
    log.info("Starting REST API …")
    from warprofits.network.rest_api import create_app
    import uvicorn

    rest_app = create_app(services.session, services.notices)
    rest_port = services.game_config.rest_port if services.game_config else 8080
    config = uvicorn.Config(
        rest_app,
        host="0.0.0.0",
        port=rest_port,
        log_level="info",
        access_log=False,
    )
    rest_server = uvicorn.Server(config)
    # Store reference for shutdown
    services._rest_server = rest_server
    asyncio.create_task(rest_server.serve())
    log.info("  REST API listening on http://0.0.0.0:%d", rest_port)


# ===================================================================
# 6. Start game loop
# ===================================================================


async def start_game_loop(services: Services) -> None:
    """Run the game loop until a shutdown signal, then save and stop."""
    log.info("Starting game loop …")
    loop = asyncio.get_running_loop()

    def _request_shutdown() -> None:
        log.info("Shutdown signal received, stopping …")
        services.game_loop.stop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _request_shutdown)

    log.info("  game loop running (%.0f s tick)", services.game_config.tick_interval_s)
    await services.game_loop.run()

    # --- Cleanup after loop exits ---
    log.info("Shutting down …")
    try:
        await services.session.save()
    except Exception:
        log.exception("State save failed, continuing shutdown")

    rest_server = getattr(services, "_rest_server", None)
    if rest_server is not None:
        rest_server.should_exit = True
        log.info("  REST API server stopped")
    log.info("  goodbye")


# ===================================================================
# Entry points
# ===================================================================


async def _start(config_dir: str = "config", state_file: str | None = None,
                 seed: int | None = None, game_file: str = "game.yaml") -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    log.info("=== WarProfits starting ===")

    config = load_configuration(config_dir=config_dir, game_file=game_file)
    if state_file:
        config.game.state_file = state_file

    state = await init_state(config, config.game.state_file, now=time.time())
    services = create_services(config, state, seed=seed)
    wire_events(services)

    await start_network(services)
    await start_game_loop(services)


def main() -> None:
    """Entry point for the game server."""
    parser = argparse.ArgumentParser(description="WarProfits simulation server")
    parser.add_argument("--config_dir", default="config", help="configuration directory")
    parser.add_argument("--game_config", default="game.yaml",
                        help="game constants file inside the configuration directory")
    parser.add_argument("--state_file", default=None, help="save file (default from game.yaml)")
    parser.add_argument("--seed", type=int, default=None, help="seed for raid randomness")
    args = parser.parse_args()

    asyncio.run(_start(config_dir=args.config_dir, state_file=args.state_file,
                       seed=args.seed, game_file=args.game_config))


if __name__ == "__main__":
    main()
