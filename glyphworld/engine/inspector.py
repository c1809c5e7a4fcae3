"""
Cell inspector for the 2D symbolic map.

Produces the hover text for a map cell, using the shared glyph legend and
position index.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from glyphworld.engine.glyphs import (
    CONTAINER_KINDS,
    EXIT_GLYPHS,
    HEAVY_WALL_GLYPHS,
    INTERACTABLE_GLYPHS,
    PLAYER_GLYPH,
    WATER_GLYPHS,
    is_npc_glyph,
)
from glyphworld.engine.grid import cell_at
from glyphworld.engine.positions import (
    build_item_index,
    find_entity_at,
    find_exit_label,
    label_spans,
)

if TYPE_CHECKING:
    from glyphworld.models.world import Entity

LOCATION_LABEL = "Location Label"

_FIXED_DESCRIPTIONS: dict[str, str] = {
    "◙": "Fountain",
    "○": "Well",
    "●": "Tree/Plant",
    "#": "Structure",
    "-": "Structure",
    "|": "Structure",
    "+": "Passage",
}


def describe_cell(
    rows: list[str],
    x: int,
    y: int,
    entities: list["Entity"],
    interactables: list[str],
    player_name: str = "Player",
) -> str:
    """Describe what a map cell represents.

    Args:
        rows: Normalized map rows
        x: Column
        y: Row
        entities: Entities present
        interactables: Interactable labels
        player_name: Name shown for the player marker

    Returns:
        Hover text, or "" for plain ground and out-of-bounds cells
    """
    glyph = cell_at(rows, x, y)
    if glyph is None:
        return ""
    if x in label_spans(rows[y]):
        return LOCATION_LABEL
    if glyph == PLAYER_GLYPH:
        return f"YOU ({player_name})"

    if is_npc_glyph(glyph):
        entity = find_entity_at(rows, entities, x, y)
        return f"{entity.name} [{entity.status.value}]" if entity else "Unknown Figure"

    if glyph in INTERACTABLE_GLYPHS:
        return build_item_index(rows, interactables).get((x, y)) or "Interactable"

    if glyph in EXIT_GLYPHS:
        label = find_exit_label(rows[y], x)
        return f"EXIT to {label}" if label else "EXIT (Click or move here)"

    if glyph in CONTAINER_KINDS:
        return f"Container: {CONTAINER_KINDS[glyph].upper()}"
    if glyph in HEAVY_WALL_GLYPHS:
        return "Wall"
    if glyph in WATER_GLYPHS:
        return "Water Source"
    return _FIXED_DESCRIPTIONS.get(glyph, "")
