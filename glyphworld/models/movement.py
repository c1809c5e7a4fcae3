"""
Movement models for the client-side movement resolver.

A single step in one of the four cardinal directions resolves to a
MoveOutcome. Only steps onto plain terrain are applied locally; everything
that could change game state becomes a choice for the turn collaborator.

Example:
    >>> outcome = MoveOutcome(
    ...     type=MoveOutcomeType.CHOICE,
    ...     direction=Direction.EAST,
    ...     choice_text="Approach Ahmad",
    ... )
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from glyphworld.models.world import Container


class Direction(str, Enum):
    """Cardinal step directions, screen coordinates (y grows downward)."""

    NORTH = "north"
    SOUTH = "south"
    WEST = "west"
    EAST = "east"

    @property
    def delta(self) -> tuple[int, int]:
        """The (dx, dy) unit vector for this direction."""
        return _DELTAS[self]


_DELTAS: dict[Direction, tuple[int, int]] = {
    Direction.NORTH: (0, -1),
    Direction.SOUTH: (0, 1),
    Direction.WEST: (-1, 0),
    Direction.EAST: (1, 0),
}


class MoveOutcomeType(str, Enum):
    """How an attempted step was resolved.

    LOCAL_STEP: player moved on plain terrain, no turn request
    BLOCKED: step hit a wall or solid feature
    CHOICE: step needs a full turn (NPC, item, exit, door, map edge)
    CONTAINER_OPENED: step hit a known container
    IGNORED: nothing happened (player not found, busy, unknown container)
    """

    LOCAL_STEP = "local_step"
    BLOCKED = "blocked"
    CHOICE = "choice"
    CONTAINER_OPENED = "container_opened"
    IGNORED = "ignored"


class MoveOutcome(BaseModel):
    """Result of resolving one step.

    Attributes:
        type: How the step resolved
        direction: Requested direction
        player: Player position before the step, if located
        target: Target cell of the step
        target_glyph: Glyph at the target cell (None when out of bounds)
        choice_text: Text to send to the turn collaborator (CHOICE only)
        rows: Updated map rows (LOCAL_STEP only)
        underfoot: New underfoot glyph (LOCAL_STEP only)
        narrative: Flavor text for the step (LOCAL_STEP only)
        log_text: Log line to append (BLOCKED and LOCAL_STEP)
        container: Matched container (CONTAINER_OPENED only)
        reason: Short machine-readable reason (IGNORED only)
    """

    type: MoveOutcomeType
    direction: Direction
    player: tuple[int, int] | None = None
    target: tuple[int, int] | None = None
    target_glyph: str | None = None
    choice_text: str | None = None
    rows: list[str] | None = None
    underfoot: str | None = None
    narrative: str | None = None
    log_text: str | None = None
    container: Container | None = None
    reason: str | None = None

    @property
    def needs_turn(self) -> bool:
        """Whether this outcome must be sent to the turn collaborator."""
        return self.type == MoveOutcomeType.CHOICE


class MovementState(BaseModel):
    """Per-session mutable state owned by the movement subsystem.

    Attributes:
        underfoot: Terrain hidden under the player marker
        last_synced_location: Location label the viewport was last centred on
        last_sync_turn: Turn number of the last full-turn sync
    """

    underfoot: str = " "
    last_synced_location: str | None = None
    last_sync_turn: int = -1

    def reset_for_turn(self, turn: int) -> None:
        """Forget the underfoot glyph; a new turn brings a fresh map."""
        self.underfoot = " "
        self.last_sync_turn = turn

    def should_recenter(self, location: str) -> bool:
        """Return True once per location change, recording the new location."""
        if self.last_synced_location == location:
            return False
        self.last_synced_location = location
        return True
