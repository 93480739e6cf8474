"""Main game loop — asyncio-based 1-second tick.

Responsibilities:
- Advance the session by the real elapsed time (production, research,
  siege completion)
- Periodic autosave (every 300 seconds by default)
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from warprofits.util import constants as c

if TYPE_CHECKING:
    from warprofits.engine.game_session import GameSession
    from warprofits.loaders.game_config_loader import GameConfig

log = logging.getLogger(__name__)


class GameLoop:
    """The central 1-second game tick loop.

    Args:
        session: The game session to advance.
        game_config: Tick and autosave intervals.
    """

    def __init__(self, session: GameSession, game_config: GameConfig | None = None) -> None:
        self._session = session
        self._running = False
        if game_config is not None:
            self._step_interval = game_config.tick_interval_s
            self._autosave_interval = game_config.autosave_interval_s
        else:
            self._step_interval = c.TICK_INTERVAL_S
            self._autosave_interval = c.AUTOSAVE_INTERVAL_S
        self._last_save: float | None = None

        # --- Monitoring counters ---
        self.tick_count: int = 0
        self.started_at: float = 0.0
        self.last_tick_dt: float = 0.0
        self.save_count: int = 0

    async def run(self) -> None:
        """Start the game loop. Runs until stop() is called."""
        self._running = True
        self.started_at = time.monotonic()
        while self._running:
            await self.step(self._session.now())
            await asyncio.sleep(self._step_interval)

    @property
    def uptime_seconds(self) -> float:
        """Seconds since the loop started."""
        if self.started_at == 0.0:
            return 0.0
        return time.monotonic() - self.started_at

    @property
    def is_running(self) -> bool:
        return self._running

    def stop(self) -> None:
        """Signal the game loop to stop."""
        self._running = False

    async def step(self, now: float) -> None:
        """One tick of the game loop at wall-clock time ``now``."""
        dt = self._session.tick(now)
        self.tick_count += 1
        self.last_tick_dt = dt

        if self._last_save is None:
            self._last_save = now
        elif now - self._last_save >= self._autosave_interval:
            self._last_save = now
            try:
                await self._session.save()
                self.save_count += 1
            except Exception:
                log.exception("Autosave failed, will retry at next interval")
