"""
Scene projector for the reconstructed 3D view.

Builds visual primitives from the same normalized map and position index
the movement resolver uses, so anything clickable in 3D is interactive in
the 2D and logic layers too. Theme parameters come from a hash of
(location, wealth tier, dimensions); identical map text always projects to
an identical scene.

Example:
    >>> projector = SceneProjector()
    >>> scene = projector.rebuild(rows, entities, interactables, "Kitchen", WealthTier.POOR)
    >>> [p.label for p in scene.interactive_primitives()]
    ['Ahmad', 'Lamp']
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from glyphworld.engine.glyphs import (
    CONTAINER_KINDS,
    FEATURE_KINDS,
    HEAVY_WALL_GLYPHS,
    GlyphCategory,
    classify_glyph,
)
from glyphworld.engine.locations import is_outdoor_location
from glyphworld.engine.positions import (
    ITEM_PLACEHOLDER,
    build_entity_index,
    build_item_index,
    find_exit_label,
    label_spans,
)
from glyphworld.models.scene import (
    Palette,
    PrimitiveKind,
    Scene,
    ScenePrimitive,
    SceneTheme,
)
from glyphworld.models.world import WealthTier

if TYPE_CHECKING:
    from glyphworld.models.world import Entity

logger = logging.getLogger(__name__)

_MASK32 = 0xFFFFFFFF

FLOOR_PALETTES: dict[WealthTier, Palette] = {
    WealthTier.POOR: Palette(base="#5f4a3a", accent="#7b5d49", shade="#3e2d22"),
    WealthTier.MODEST: Palette(base="#7a6a5a", accent="#9a846e", shade="#4a3a2e"),
    WealthTier.MERCHANT: Palette(base="#a28664", accent="#c9a77c", shade="#5a4432"),
    WealthTier.ELITE: Palette(base="#c9c1b1", accent="#e6ddc8", shade="#7a6f60"),
}

WALL_PALETTES: dict[WealthTier, Palette] = {
    WealthTier.POOR: Palette(base="#6f5540", accent="#8a6a52", shade="#3b2b20"),
    WealthTier.MODEST: Palette(base="#8b7560", accent="#b49778", shade="#4b3b2e"),
    WealthTier.MERCHANT: Palette(base="#b59a78", accent="#d0b48b", shade="#5d4734"),
    WealthTier.ELITE: Palette(base="#d9d2c5", accent="#f0e7d7", shade="#807468"),
}

_SIMPLE_KINDS: dict[GlyphCategory, PrimitiveKind] = {
    GlyphCategory.WATER: PrimitiveKind.WATER,
    GlyphCategory.CARPET: PrimitiveKind.CARPET,
    GlyphCategory.DECOR: PrimitiveKind.DECOR,
    GlyphCategory.DOOR: PrimitiveKind.DOOR,
}


def fnv1a_32(value: str) -> int:
    """32-bit FNV-1a hash over UTF-16 code units."""
    h = 2166136261
    encoded = value.encode("utf-16-le")
    for i in range(0, len(encoded), 2):
        h ^= encoded[i] | (encoded[i + 1] << 8)
        h = (h * 16777619) & _MASK32
    return h


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


def mulberry32(seed: int) -> Callable[[], float]:
    """Small seeded PRNG returning floats in [0, 1)."""
    state = seed & _MASK32

    def next_float() -> float:
        nonlocal state
        state = (state + 0x6D2B79F5) & _MASK32
        t = _imul(state ^ (state >> 15), state | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
        return ((t ^ (t >> 14)) & _MASK32) / 4294967296

    return next_float


def build_theme(
    location: str, wealth_tier: WealthTier, width: int, height: int
) -> SceneTheme:
    seed = fnv1a_32(f"{location}-{wealth_tier.value}-{width}x{height}")
    return SceneTheme(
        seed=seed,
        floor_seed=(seed + 7) & _MASK32,
        wall_seed=(seed + 131) & _MASK32,
        sky_seed=(seed + 77) & _MASK32,
        wealth_tier=wealth_tier,
        outdoor=is_outdoor_location(location),
        floor=FLOOR_PALETTES[wealth_tier],
        wall=WALL_PALETTES[wealth_tier],
    )


def project_scene(
    rows: list[str],
    entities: list["Entity"],
    interactables: list[str],
    location: str,
    wealth_tier: WealthTier,
) -> Scene:
    """Project a normalized map into scene primitives.

    Args:
        rows: Normalized map rows
        entities: Entities present, in collaborator order
        interactables: Interactable labels, in collaborator order
        location: Location label
        wealth_tier: Wealth tier used for palettes

    Returns:
        Scene with one primitive per non-ground cell
    """
    height = len(rows)
    width = max((len(row) for row in rows), default=0)
    theme = build_theme(location, wealth_tier, width, height)
    random = mulberry32(theme.seed)

    entity_index = build_entity_index(rows, entities)
    item_index = build_item_index(rows, interactables)
    origin_x = -width * 0.5 + 0.5
    origin_z = -height * 0.5 + 0.5

    primitives: list[ScenePrimitive] = []
    for y, row in enumerate(rows):
        excluded = label_spans(row)
        for x, glyph in enumerate(row):
            if x in excluded:
                continue
            kind, label, interactive = _classify_cell(
                glyph, x, y, row, entity_index, item_index
            )
            if kind is None:
                continue
            primitives.append(
                ScenePrimitive(
                    kind=kind,
                    x=x,
                    y=y,
                    world_x=origin_x + x,
                    world_z=origin_z + y,
                    glyph=glyph,
                    label=label,
                    interactive=interactive,
                    variant=random(),
                )
            )

    return Scene(width=width, height=height, theme=theme, primitives=primitives)


def _classify_cell(
    glyph: str,
    x: int,
    y: int,
    row: str,
    entity_index: dict[tuple[int, int], "Entity"],
    item_index: dict[tuple[int, int], str],
) -> tuple[PrimitiveKind | None, str | None, bool]:
    """Pick the primitive kind, label and interactivity for one cell."""
    category = classify_glyph(glyph)

    if category == GlyphCategory.WALL:
        heavy = glyph in HEAVY_WALL_GLYPHS
        return (PrimitiveKind.HEAVY_WALL if heavy else PrimitiveKind.WALL), None, False
    if category in _SIMPLE_KINDS:
        return _SIMPLE_KINDS[category], None, False
    if category == GlyphCategory.FEATURE:
        return PrimitiveKind(FEATURE_KINDS[glyph]), None, False
    if category == GlyphCategory.EXIT:
        return PrimitiveKind.EXIT, find_exit_label(row, x), True
    if category == GlyphCategory.CONTAINER:
        return PrimitiveKind.CONTAINER, CONTAINER_KINDS[glyph], True
    if category == GlyphCategory.INTERACTABLE:
        return PrimitiveKind.INTERACTABLE, item_index.get((x, y), ITEM_PLACEHOLDER), True
    if category == GlyphCategory.NPC:
        entity = entity_index.get((x, y))
        if entity:
            return PrimitiveKind.NPC, entity.name, True
        return None, None, False
    if category == GlyphCategory.PLAYER:
        return PrimitiveKind.PLAYER, None, False
    return None, None, False


class SceneProjector:
    """Owns the currently projected scene and its lifecycle.

    Every rebuild releases the previous scene completely before building
    the next one; scenes are never patched in place.

    Attributes:
        scene: The current scene, if any
        released_total: Primitives released over the projector's lifetime
    """

    def __init__(self) -> None:
        self.scene: Scene | None = None
        self.released_total = 0

    def release(self) -> int:
        """Drop the current scene and return how many primitives it held."""
        if self.scene is None:
            return 0
        count = len(self.scene.primitives)
        self.scene.primitives.clear()
        self.scene = None
        self.released_total += count
        logger.debug(f"Released {count} scene primitives")
        return count

    def rebuild(
        self,
        rows: list[str],
        entities: list["Entity"],
        interactables: list[str],
        location: str,
        wealth_tier: WealthTier,
    ) -> Scene:
        self.release()
        self.scene = project_scene(rows, entities, interactables, location, wealth_tier)
        logger.debug(
            f"Projected scene {self.scene.width}x{self.scene.height} "
            f"with {len(self.scene.primitives)} primitives"
        )
        return self.scene
