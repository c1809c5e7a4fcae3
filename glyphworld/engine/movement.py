"""
Movement resolver for single-cell player steps.

This module classifies a step against the local map and decides whether
it can be applied on the client (plain terrain) or must become a choice
for the turn collaborator (NPCs, items, exits, doors, the map edge).

Cells inside a [...] zone label are text, not map objects; steps onto them
are ignored. Otherwise the target glyph is classified in this order:
    1. NPC anchor resolved through the entity index -> "Approach <name>"
    2. Container glyph -> open the container at that coordinate
    3. Interactable glyph -> "Inspect the <label>"
    4. Blocking glyph -> "Blocked." log line, no movement
    5. Exit arrow -> "Go to <label>" or "Leave the area"
    6. Door -> "Move through the doorway"
    7. Anything else -> local step with generated narrative
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING

from glyphworld.engine.glyphs import (
    BLANK_GLYPH,
    PLAYER_GLYPH,
    GlyphCategory,
    classify_glyph,
    is_passable_terrain,
)
from glyphworld.engine.grid import cell_at, find_glyph, replace_cell
from glyphworld.engine.narrative import generate_movement_narrative
from glyphworld.engine.positions import (
    ITEM_PLACEHOLDER,
    build_item_index,
    find_entity_at,
    find_exit_label,
    label_spans,
)
from glyphworld.models.movement import (
    Direction,
    MoveOutcome,
    MoveOutcomeType,
    MovementState,
)

if TYPE_CHECKING:
    from glyphworld.models.game import GameState

logger = logging.getLogger(__name__)

BLOCKED_TEXT = "Blocked."
LEAVE_AREA_CHOICE = "Leave the area"
REASON_ZONE_LABEL = "zone_label"
DOORWAY_CHOICE = "Move through the doorway"


def approach_choice(name: str) -> str:
    return f"Approach {name}"


def inspect_choice(label: str | None) -> str:
    return f"Inspect the {label or ITEM_PLACEHOLDER}"


def exit_choice(label: str | None) -> str:
    return f"Go to {label}" if label else LEAVE_AREA_CHOICE


class MovementResolver:
    """Resolves a requested step into a MoveOutcome.

    The resolver never mutates its inputs. For a local step the outcome
    carries the updated rows and underfoot glyph; the caller applies them.

    Example:
        >>> resolver = MovementResolver(rng=random.Random(7))
        >>> outcome = resolver.resolve(Direction.EAST, game_state, movement_state)
        >>> if outcome.needs_turn:
        ...     await session.choose(outcome.choice_text)
    """

    def __init__(self, rng: random.Random | None = None):
        """Initialize the resolver.

        Args:
            rng: Random source for narrative templates
        """
        self.rng = rng

    def locate_player(
        self, rows: list[str], player_name: str
    ) -> tuple[int, int] | None:
        """Find the player marker, falling back to the player's initial.

        The generative source sometimes draws the player with the first
        letter of their name instead of '@'.
        """
        position = find_glyph(rows, PLAYER_GLYPH)
        if position:
            return position

        initial = player_name[:1].upper()
        if not initial:
            return None
        position = find_glyph(rows, initial)
        if position:
            logger.warning(
                f"Map used '{initial}' instead of '{PLAYER_GLYPH}' for the player "
                f"at {position}. Auto-correcting."
            )
        return position

    def resolve(
        self,
        direction: Direction,
        state: "GameState",
        movement: MovementState,
    ) -> MoveOutcome:
        """Classify a step and build its outcome.

        Args:
            direction: Requested cardinal direction
            state: Current game state (map, entities, items, containers)
            movement: Underfoot cache for this session

        Returns:
            MoveOutcome describing what should happen
        """
        rows = state.local_map
        player = self.locate_player(rows, state.player_name)
        if player is None:
            logger.debug("Player not found on map; ignoring move")
            return MoveOutcome(
                type=MoveOutcomeType.IGNORED,
                direction=direction,
                reason="player_not_found",
            )

        dx, dy = direction.delta
        target = (player[0] + dx, player[1] + dy)
        glyph = cell_at(rows, *target)

        if glyph is None:
            return self._choice(direction, player, target, None, LEAVE_AREA_CHOICE)

        if target[0] in label_spans(rows[target[1]]):
            return MoveOutcome(
                type=MoveOutcomeType.IGNORED,
                direction=direction,
                player=player,
                target=target,
                target_glyph=glyph,
                reason=REASON_ZONE_LABEL,
            )

        category = classify_glyph(glyph)

        if category == GlyphCategory.NPC:
            entity = find_entity_at(rows, state.entities, *target)
            if entity:
                return self._choice(
                    direction, player, target, glyph, approach_choice(entity.name)
                )

        if category == GlyphCategory.CONTAINER:
            return self._open_container(direction, player, target, glyph, state)

        if category == GlyphCategory.INTERACTABLE:
            label = build_item_index(rows, state.interactables).get(target)
            return self._choice(direction, player, target, glyph, inspect_choice(label))

        if category in (GlyphCategory.WALL, GlyphCategory.FEATURE):
            return MoveOutcome(
                type=MoveOutcomeType.BLOCKED,
                direction=direction,
                player=player,
                target=target,
                target_glyph=glyph,
                log_text=BLOCKED_TEXT,
            )

        if category == GlyphCategory.EXIT:
            label = find_exit_label(rows[target[1]], target[0])
            return self._choice(direction, player, target, glyph, exit_choice(label))

        if category == GlyphCategory.DOOR:
            return self._choice(direction, player, target, glyph, DOORWAY_CHOICE)

        return self._step(direction, player, target, glyph, state, movement)

    def _choice(
        self,
        direction: Direction,
        player: tuple[int, int],
        target: tuple[int, int],
        glyph: str | None,
        text: str,
    ) -> MoveOutcome:
        return MoveOutcome(
            type=MoveOutcomeType.CHOICE,
            direction=direction,
            player=player,
            target=target,
            target_glyph=glyph,
            choice_text=text,
        )

    def _open_container(
        self,
        direction: Direction,
        player: tuple[int, int],
        target: tuple[int, int],
        glyph: str,
        state: "GameState",
    ) -> MoveOutcome:
        container = next(
            (c for c in state.containers if (c.x, c.y) == target), None
        )
        if container is None:
            logger.debug(f"No container record at {target}; ignoring")
            return MoveOutcome(
                type=MoveOutcomeType.IGNORED,
                direction=direction,
                player=player,
                target=target,
                target_glyph=glyph,
                reason="unknown_container",
            )
        return MoveOutcome(
            type=MoveOutcomeType.CONTAINER_OPENED,
            direction=direction,
            player=player,
            target=target,
            target_glyph=glyph,
            container=container,
        )

    def _step(
        self,
        direction: Direction,
        player: tuple[int, int],
        target: tuple[int, int],
        glyph: str,
        state: "GameState",
        movement: MovementState,
    ) -> MoveOutcome:
        """Move the marker, restoring the terrain it was standing on."""
        rows = replace_cell(state.local_map, player[0], player[1], movement.underfoot)
        underfoot = glyph if is_passable_terrain(glyph) else BLANK_GLYPH
        rows = replace_cell(rows, target[0], target[1], PLAYER_GLYPH)

        narrative = generate_movement_narrative(
            rows,
            target[0],
            target[1],
            direction,
            state.location,
            state.entities,
            rng=self.rng,
            standing_on=glyph,
        )

        return MoveOutcome(
            type=MoveOutcomeType.LOCAL_STEP,
            direction=direction,
            player=player,
            target=target,
            target_glyph=glyph,
            rows=rows,
            underfoot=underfoot,
            narrative=narrative,
            log_text=narrative,
        )
