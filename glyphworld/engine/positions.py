"""
Position index: which glyph on the map stands for which entity or item.

Entities and interactables carry no coordinates. NPCs are anchored by the
first letter of their name; interactables are assigned to interactable
glyphs in order of appearance. Both indices are pure functions of the grid
and the ordered lists, rebuilt whenever either changes.

Example:
    >>> from glyphworld.models.world import Entity
    >>> index = build_entity_index(["A.B"], [Entity(name="Ahmad"), Entity(name="Bilal")])
    >>> index[(2, 0)].name
    'Bilal'
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from glyphworld.engine.glyphs import INTERACTABLE_GLYPHS, is_npc_glyph

if TYPE_CHECKING:
    from glyphworld.models.world import Entity

Coordinate = tuple[int, int]

ITEM_PLACEHOLDER = "object"

_LABEL_SPAN = re.compile(r"\[(.*?)\]")
_LABEL_AFTER = re.compile(r"\[([^\]]+)\]")
_LABEL_BEFORE = re.compile(r"\[([^\]]+)\][^\[]*$")


def label_spans(row: str) -> set[int]:
    """Columns covered by bracketed zone labels, brackets included."""
    columns: set[int] = set()
    for match in _LABEL_SPAN.finditer(row):
        columns.update(range(match.start(), match.end()))
    return columns


def find_exit_label(row: str, x: int) -> str | None:
    """Find the zone label an exit arrow at column x points to.

    Prefers the first label at or after the arrow; otherwise the closest
    complete label before it.
    """
    after = _LABEL_AFTER.search(row[x:])
    if after:
        return after.group(1)
    before = _LABEL_BEFORE.search(row[:x])
    return before.group(1) if before else None


def _match_entity(glyph: str, entities: list["Entity"], used: set[int]) -> int:
    """Index of the entity a glyph refers to, or -1.

    First unused entity whose name starts with the glyph, else the first
    matching entity even if already used.
    """
    first_any = -1
    for idx, entity in enumerate(entities):
        if not entity.name.upper().startswith(glyph):
            continue
        if idx not in used:
            return idx
        if first_any == -1:
            first_any = idx
    return first_any


def build_entity_index(
    rows: list[str], entities: list["Entity"]
) -> dict[Coordinate, "Entity"]:
    """Map NPC anchor cells to entities.

    Same-initial NPCs cannot be told apart; when more anchors than entities
    share an initial, the extra anchors reuse the first matching entity.
    Anchors with no matching entity are left out.

    Args:
        rows: Normalized map rows
        entities: Entities in the collaborator's order

    Returns:
        Dict of (x, y) -> Entity
    """
    index: dict[Coordinate, "Entity"] = {}
    used: set[int] = set()

    for y, row in enumerate(rows):
        excluded = label_spans(row)
        for x, glyph in enumerate(row):
            if not is_npc_glyph(glyph) or x in excluded:
                continue
            match = _match_entity(glyph, entities, used)
            if match == -1:
                continue
            used.add(match)
            index[(x, y)] = entities[match]

    return index


def build_item_index(
    rows: list[str], interactables: list[str]
) -> dict[Coordinate, str]:
    """Assign interactable labels to interactable glyphs in reading order.

    Glyphs beyond the end of the label list get ITEM_PLACEHOLDER.
    """
    coords: list[Coordinate] = []
    for y, row in enumerate(rows):
        excluded = label_spans(row)
        for x, glyph in enumerate(row):
            if glyph in INTERACTABLE_GLYPHS and x not in excluded:
                coords.append((x, y))

    return {
        coord: interactables[i] if i < len(interactables) else ITEM_PLACEHOLDER
        for i, coord in enumerate(coords)
    }


def find_entity_at(
    rows: list[str], entities: list["Entity"], x: int, y: int
) -> "Entity | None":
    return build_entity_index(rows, entities).get((x, y))
