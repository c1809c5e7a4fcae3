"""
Glyph legend for local maps.

Every component that interprets a map cell (normalizer, position index,
movement resolver, narrative, scene projector, cell inspector) classifies
glyphs through this module. Each glyph belongs to exactly one category.

Legend:
    @            player marker
    A-Z          NPC anchor (first letter of an entity name)
    * $ ! ?      interactable markers
    ▪ ◎          containers (chest, jar)
    ► ◄ ▲ ▼ ⇨ ◀  exits
    +            door
    # | - _ =    structural walls, plus box drawing and ▓ ▒ ⌂
    ◙ ○ ●        fountain, well, tree (block movement)
    ~ ≈          water
    ≋            carpet
    ◊            decor
    [ ... ]      zone label, never classified as a game object

Example:
    >>> classify_glyph("#")
    <GlyphCategory.WALL: 'wall'>
    >>> is_blocking("●")
    True
"""

from __future__ import annotations

from enum import Enum


class GlyphCategory(str, Enum):
    """Semantic category of a single map glyph."""

    PLAYER = "player"
    NPC = "npc"
    INTERACTABLE = "interactable"
    CONTAINER = "container"
    EXIT = "exit"
    DOOR = "door"
    WALL = "wall"
    FEATURE = "feature"  # Fountains, wells, trees
    WATER = "water"
    CARPET = "carpet"
    DECOR = "decor"
    TERRAIN = "terrain"  # Passable ground
    LABEL_BRACKET = "label_bracket"
    OTHER = "other"


PLAYER_GLYPH = "@"
BLANK_GLYPH = " "
FLOOR_GLYPH = "."
LABEL_OPEN = "["
LABEL_CLOSE = "]"

INTERACTABLE_GLYPHS = frozenset({"*", "$", "!", "?"})
CONTAINER_GLYPHS = frozenset({"▪", "◎"})
EXIT_GLYPHS = frozenset({"►", "◄", "▲", "▼", "⇨", "◀"})
DOOR_GLYPHS = frozenset({"+"})
WALL_GLYPHS = frozenset(
    {
        "#", "|", "-", "_", "=",
        "┌", "┐", "└", "┘", "─", "│", "├", "┤", "┬", "┴", "┼",
        "▓", "▒", "⌂",
    }
)
HEAVY_WALL_GLYPHS = frozenset({"▓", "▒"})
FEATURE_GLYPHS = frozenset({"◙", "○", "●"})
WATER_GLYPHS = frozenset({"~", "≈"})
CARPET_GLYPHS = frozenset({"≋"})
DECOR_GLYPHS = frozenset({"◊"})
TERRAIN_GLYPHS = frozenset({BLANK_GLYPH, FLOOR_GLYPH, ",", "░", "╱", "╲", "═", "║"})
LABEL_GLYPHS = frozenset({LABEL_OPEN, LABEL_CLOSE})

# Movement stops on these without a turn request.
BLOCKING_GLYPHS = WALL_GLYPHS | FEATURE_GLYPHS

# Terrain the player may stand on and leave behind unchanged.
PASSABLE_TERRAIN = TERRAIN_GLYPHS | WATER_GLYPHS | CARPET_GLYPHS | DECOR_GLYPHS

_CATEGORY_SETS: dict[GlyphCategory, frozenset[str]] = {
    GlyphCategory.PLAYER: frozenset({PLAYER_GLYPH}),
    GlyphCategory.INTERACTABLE: INTERACTABLE_GLYPHS,
    GlyphCategory.CONTAINER: CONTAINER_GLYPHS,
    GlyphCategory.EXIT: EXIT_GLYPHS,
    GlyphCategory.DOOR: DOOR_GLYPHS,
    GlyphCategory.WALL: WALL_GLYPHS,
    GlyphCategory.FEATURE: FEATURE_GLYPHS,
    GlyphCategory.WATER: WATER_GLYPHS,
    GlyphCategory.CARPET: CARPET_GLYPHS,
    GlyphCategory.DECOR: DECOR_GLYPHS,
    GlyphCategory.TERRAIN: TERRAIN_GLYPHS,
    GlyphCategory.LABEL_BRACKET: LABEL_GLYPHS,
}

_GLYPH_TO_CATEGORY: dict[str, GlyphCategory] = {
    glyph: category
    for category, glyphs in _CATEGORY_SETS.items()
    for glyph in glyphs
}

# Names used when describing a nearby object in prose.
OBJECT_NAMES: dict[str, str] = {
    "*": "something of interest",
    "$": "valuables",
    "!": "something dangerous",
    "?": "something curious",
    "▪": "a chest",
    "◎": "a jar",
    "►": "an exit",
    "◄": "an exit",
    "▲": "an exit",
    "▼": "an exit",
    "⇨": "an exit",
    "◀": "an exit",
    "+": "a doorway",
    "◙": "a fountain",
    "○": "a well",
    "●": "a tree",
    "†": "a religious site",
}

FEATURE_KINDS: dict[str, str] = {
    "◙": "fountain",
    "○": "well",
    "●": "tree",
}

CONTAINER_KINDS: dict[str, str] = {
    "▪": "chest",
    "◎": "jar",
}


def category_sets() -> dict[GlyphCategory, frozenset[str]]:
    """Return the explicit glyph set of every enumerated category.

    NPC and OTHER are open-ended and are not listed.
    """
    return dict(_CATEGORY_SETS)


def is_npc_glyph(glyph: str) -> bool:
    """Check whether a glyph can anchor an NPC (ASCII uppercase letter)."""
    return len(glyph) == 1 and "A" <= glyph <= "Z"


def classify_glyph(glyph: str) -> GlyphCategory:
    """Classify a single glyph without positional context.

    Args:
        glyph: One map character

    Returns:
        The glyph's category; OTHER for anything outside the legend
    """
    category = _GLYPH_TO_CATEGORY.get(glyph)
    if category is not None:
        return category
    if is_npc_glyph(glyph):
        return GlyphCategory.NPC
    return GlyphCategory.OTHER


def is_blocking(glyph: str) -> bool:
    return glyph in BLOCKING_GLYPHS


def is_passable_terrain(glyph: str) -> bool:
    return glyph in PASSABLE_TERRAIN
