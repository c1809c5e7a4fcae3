"""
Scene models for the reconstructed 3D view.

The scene projector turns a normalized map into a flat list of visual
primitives plus a deterministic theme. Geometry and materials are left to
the renderer; these models only say what stands where and what it means.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from glyphworld.models.world import WealthTier


class PrimitiveKind(str, Enum):
    WALL = "wall"
    HEAVY_WALL = "heavy_wall"
    WATER = "water"
    CARPET = "carpet"
    DECOR = "decor"
    DOOR = "door"
    EXIT = "exit"
    CONTAINER = "container"
    INTERACTABLE = "interactable"
    FOUNTAIN = "fountain"
    WELL = "well"
    TREE = "tree"
    NPC = "npc"
    PLAYER = "player"


class ScenePrimitive(BaseModel):
    """One visual object anchored to a map cell.

    Attributes:
        kind: What to build
        x: Map column
        y: Map row
        world_x: Scene X, map centred on the origin
        world_z: Scene Z, map centred on the origin
        glyph: Source glyph
        label: Hover/click label (exit destination, item, NPC name)
        interactive: Whether clicking this should trigger game logic
        variant: Deterministic value in [0, 1) for visual variation
    """

    kind: PrimitiveKind
    x: int
    y: int
    world_x: float
    world_z: float
    glyph: str
    label: str | None = None
    interactive: bool = False
    variant: float = 0.0


class Palette(BaseModel):
    base: str
    accent: str
    shade: str  # Grout for floors, shadow for walls


class SceneTheme(BaseModel):
    """Visual parameters derived from (location, wealth tier, dimensions).

    Identical inputs always produce an identical theme.
    """

    seed: int
    floor_seed: int
    wall_seed: int
    sky_seed: int
    wealth_tier: WealthTier
    outdoor: bool
    floor: Palette
    wall: Palette


class Scene(BaseModel):
    """A complete projected scene."""

    width: int
    height: int
    theme: SceneTheme
    primitives: list[ScenePrimitive] = Field(default_factory=list)

    def interactive_primitives(self) -> list[ScenePrimitive]:
        return [p for p in self.primitives if p.interactive]

    def of_kind(self, kind: PrimitiveKind) -> list[ScenePrimitive]:
        return [p for p in self.primitives if p.kind == kind]
