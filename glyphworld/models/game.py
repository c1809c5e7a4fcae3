"""
Game state models - Pydantic models for session state
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from glyphworld.models.world import (
    Container,
    Entity,
    GameStatus,
    Option,
    WealthTier,
)


class LogRole(str, Enum):
    SYSTEM = "system"
    USER = "user"


class LogEntry(BaseModel):
    """A single line of the narrative log"""
    id: str
    role: LogRole
    text: str
    turn_number: int | None = None
    location: str | None = None


class LlmTranscript(BaseModel):
    """Prompt/response pair kept for debugging the turn collaborator"""
    id: str
    turn: int
    prompt: str
    response: str


class GameState(BaseModel):
    """Authoritative state of one play session.

    The map, entities, interactables and containers are replaced wholesale
    by every full turn; local steps only rewrite `local_map`. The inventory
    persists across turns and only grows when items are taken from containers.
    """
    player_name: str = "Player"
    location: str = ""
    location_wealth: WealthTier = WealthTier.MODEST
    turn_count: int = 0
    status: GameStatus = GameStatus.ALIVE

    local_map: list[str] = Field(default_factory=list)
    entities: list[Entity] = Field(default_factory=list)
    interactables: list[str] = Field(default_factory=list)
    containers: list[Container] = Field(default_factory=list)
    options: list[Option] = Field(default_factory=list)
    inventory: list[str] = Field(default_factory=list)  # Items taken from containers

    history: list[LogEntry] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)  # Diagnostics from the last ingest
    debug_transcripts: list[LlmTranscript] = Field(default_factory=list)  # Last 10
