"""Pydantic models for glyphworld"""

from glyphworld.models.game import GameState, LogEntry, LogRole, LlmTranscript
from glyphworld.models.map import NormalizedMap
from glyphworld.models.movement import (
    Direction,
    MoveOutcome,
    MoveOutcomeType,
    MovementState,
)
from glyphworld.models.scene import (
    Palette,
    PrimitiveKind,
    Scene,
    ScenePrimitive,
    SceneTheme,
)
from glyphworld.models.world import (
    Container,
    ContainerType,
    Entity,
    EntityActivity,
    EntityCondition,
    EntityRole,
    EntityStatus,
    GameStatus,
    Option,
    TurnPayload,
    WealthTier,
)

__all__ = [
    # Session models
    "GameState",
    "LogEntry",
    "LogRole",
    "LlmTranscript",
    # Map models
    "NormalizedMap",
    # Movement models
    "Direction",
    "MoveOutcome",
    "MoveOutcomeType",
    "MovementState",
    # Scene models
    "Palette",
    "PrimitiveKind",
    "Scene",
    "ScenePrimitive",
    "SceneTheme",
    # Turn payload models
    "Container",
    "ContainerType",
    "Entity",
    "EntityActivity",
    "EntityCondition",
    "EntityRole",
    "EntityStatus",
    "GameStatus",
    "Option",
    "TurnPayload",
    "WealthTier",
]
