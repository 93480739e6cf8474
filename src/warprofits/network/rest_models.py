"""Pydantic request/response models for the REST API.

These models define the HTTP request bodies and the command response
shapes. Query endpoints return the session's plain dict views.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


# ===================================================================
# Economy
# ===================================================================


class BuyFactoryRequest(BaseModel):
    age: str
    factory: str


class CommandResponse(BaseModel):
    success: bool
    error: str = ""
    money: int = 0


# ===================================================================
# Raids & sieges
# ===================================================================


class RaidRequest(BaseModel):
    tier: str
    army: Dict[str, int] = Field(default_factory=dict)


class RaidResponse(BaseModel):
    success: bool
    error: str = ""
    enemy: str = ""
    enemy_army: Dict[str, int] = Field(default_factory=dict)
    player_won: bool = False
    player_power: float = 0.0
    enemy_power: float = 0.0
    casualties: int = 0
    enemy_casualties: int = 0
    reward: int = 0
    survivors: Dict[str, int] = Field(default_factory=dict)


class SiegeRequest(BaseModel):
    weapon: str
    amount: int


class SiegeResponse(BaseModel):
    success: bool
    error: str = ""
    siege: Optional[Dict[str, Any]] = None


# ===================================================================
# Session
# ===================================================================


class SaveResponse(BaseModel):
    success: bool
    path: str = ""
    error: str = ""
