"""
Flavor text for local steps.

Steps resolved on the client never reach the turn collaborator, so the log
line for them is composed here: one sentence from an indoor or outdoor
template set, plus at most one proximity clause (wall, NPC, object).

Only template choice is random; pass a seeded `random.Random` to pin it.

Example:
    >>> import random
    >>> generate_movement_narrative(
    ...     ["#####", "#.@.#", "#####"], 2, 1, Direction.EAST,
    ...     "Kitchen, House of Yusuf", [], rng=random.Random(1),
    ... )  # doctest: +SKIP
    'You tread east through the Kitchen. You are now approaching the northern wall.'
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from glyphworld.engine.glyphs import OBJECT_NAMES, PLAYER_GLYPH, WALL_GLYPHS
from glyphworld.engine.grid import cell_at
from glyphworld.engine.locations import is_outdoor_location, room_name
from glyphworld.engine.positions import build_entity_index

if TYPE_CHECKING:
    from glyphworld.models.movement import Direction
    from glyphworld.models.world import Entity

INDOOR_MOVEMENTS = (
    "You step {direction} in the {room}",
    "You move {direction} across the {room}",
    "You tread {direction} through the {room}",
    "You walk {direction} in the {room}",
    "Carefully, you move {direction} in the {room}",
)

OUTDOOR_MOVEMENTS = (
    "You head {direction} through the {room}",
    "You walk {direction} in the {room}",
    "You move {direction} across the {room}",
    "You proceed {direction} in the {room}",
    "You make your way {direction} through the {room}",
)

# Neighbor scan order: east, west, south, north.
_NEIGHBORS = (
    (1, 0, "east"),
    (-1, 0, "west"),
    (0, 1, "south"),
    (0, -1, "north"),
)


def pick_template(location: str, rng: random.Random | None = None) -> str:
    templates = OUTDOOR_MOVEMENTS if is_outdoor_location(location) else INDOOR_MOVEMENTS
    return (rng or random).choice(templates)


def wall_proximity(
    rows: list[str], x: int, y: int, direction: "Direction"
) -> str | None:
    """Name the wall the player is approaching, if any."""
    dx, dy = direction.delta
    if cell_at(rows, x + dx, y + dy) in WALL_GLYPHS:
        return f"the {direction.value}ern wall"

    for nx, ny, name in _NEIGHBORS:
        if cell_at(rows, x + nx, y + ny) in WALL_GLYPHS:
            return f"the {name}ern wall"
    return None


def npc_proximity(
    rows: list[str], x: int, y: int, entities: list["Entity"]
) -> str | None:
    """Name of an NPC standing next to (x, y), if any."""
    index = build_entity_index(rows, entities)
    for nx, ny, _ in _NEIGHBORS:
        entity = index.get((x + nx, y + ny))
        if entity:
            return entity.name
    return None


def object_proximity(
    rows: list[str], x: int, y: int, standing_on: str | None = None
) -> str | None:
    """Describe a notable object next to or under (x, y).

    Returns "approaching <object>" for neighbors, "standing on <object>" for
    the occupied cell. The occupied cell is read from `standing_on` when the
    grid already shows the player marker there. This is the glyph the cell
    held before the step, not the underfoot cache.
    """
    for nx, ny, _ in _NEIGHBORS:
        glyph = cell_at(rows, x + nx, y + ny)
        if glyph in OBJECT_NAMES:
            return f"approaching {OBJECT_NAMES[glyph]}"

    current = cell_at(rows, x, y)
    if current == PLAYER_GLYPH:
        current = standing_on
    if current in OBJECT_NAMES:
        return f"standing on {OBJECT_NAMES[current]}"
    return None


def generate_movement_narrative(
    rows: list[str],
    x: int,
    y: int,
    direction: "Direction",
    location: str,
    entities: list["Entity"],
    rng: random.Random | None = None,
    standing_on: str | None = None,
) -> str:
    """Compose the log line for a local step.

    Args:
        rows: Map rows after the step
        x: New player column
        y: New player row
        direction: Direction of travel
        location: Current location label
        entities: Entities present
        rng: Random source for template choice
        standing_on: Glyph the player stepped onto

    Returns:
        A non-empty sentence (or two) ending in a period
    """
    narrative = pick_template(location, rng).format(
        direction=direction.value, room=room_name(location)
    )

    wall = wall_proximity(rows, x, y, direction)
    if wall:
        clause = f"approaching {wall}"
    else:
        npc = npc_proximity(rows, x, y, entities)
        clause = f"near {npc}" if npc else object_proximity(rows, x, y, standing_on)

    if clause:
        narrative += f". You are now {clause}"
    return narrative + "."
