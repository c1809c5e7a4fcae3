"""
Game session: the authoritative spatial state and the turn loop.

A session owns the current map, entities, containers and narrative log.
Local steps are resolved synchronously; anything with consequences becomes
a full turn requested from the turn collaborator. At most one turn is ever
in flight: while one is outstanding, movement and choices are ignored.
"""

from __future__ import annotations

import logging
import random
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from glyphworld.engine.ingest import IngestedTurn, ingest_turn
from glyphworld.engine.inspector import describe_cell
from glyphworld.engine.movement import MovementResolver
from glyphworld.engine.scene import SceneProjector
from glyphworld.models.game import GameState, LlmTranscript, LogEntry, LogRole
from glyphworld.models.movement import (
    Direction,
    MoveOutcome,
    MoveOutcomeType,
    MovementState,
)
from glyphworld.models.world import GameStatus

if TYPE_CHECKING:
    from glyphworld.engine.protocols import TurnCollaborator
    from glyphworld.models.scene import Scene
    from glyphworld.models.world import Container, TurnPayload

logger = logging.getLogger(__name__)

MAX_TRANSCRIPTS = 10
SILENT_TURN_TEXT = "The world holds its breath; nothing answers."


def _entry_id() -> str:
    return uuid.uuid4().hex


class GameSession:
    """Manages one play session.

    Attributes:
        session_id: Unique identifier for this session
        created_at: When the session was created
        collaborator: Source of full turns
        resolver: Client-side movement resolver
        movement: Underfoot cache and viewport sync marker
        projector: Owner of the current 3D scene
        active_container: Container opened by the last step, if any

    Example:
        >>> session = GameSession(collaborator, player_name="Yusuf")
        >>> session.start(opening_payload)
        >>> await session.move(Direction.NORTH)
        >>> session.get_state().history[-1].text
        'You step north in the Kitchen.'
    """

    def __init__(
        self,
        collaborator: "TurnCollaborator",
        player_name: str = "Player",
        rng: random.Random | None = None,
        session_id: str | None = None,
    ):
        """Initialize an empty session.

        Args:
            collaborator: Turn collaborator for full turns
            player_name: Player's name (used for marker fallback and hovers)
            rng: Random source for local-step narrative
            session_id: Optional fixed session id
        """
        self.session_id = session_id or str(uuid.uuid4())
        self.created_at = datetime.now()
        self.collaborator = collaborator
        self.resolver = MovementResolver(rng=rng)
        self.movement = MovementState()
        self.projector = SceneProjector()
        self.active_container: "Container | None" = None

        self._state = GameState(player_name=player_name)
        self._turn_in_flight = False
        self._scene_stale = True

    @property
    def busy(self) -> bool:
        """Whether a full turn is outstanding."""
        return self._turn_in_flight

    def get_state(self) -> GameState:
        return self._state

    # -------------------------------------------------------------------------
    # Turn ingestion
    # -------------------------------------------------------------------------

    def start(self, payload: "TurnPayload") -> IngestedTurn:
        """Load the opening turn without counting it as a played turn."""
        ingested = self._apply_payload(payload)
        self._append(LogRole.SYSTEM, payload.narrative, turn_number=0)
        self.movement.reset_for_turn(0)
        return ingested

    def _apply_payload(self, payload: "TurnPayload") -> IngestedTurn:
        """Replace the spatial state with a freshly ingested turn."""
        state = self._state
        ingested = ingest_turn(payload, previous_containers=state.containers)

        state.local_map = ingested.map.rows
        state.entities = ingested.entities
        state.interactables = ingested.interactables
        state.containers = ingested.containers
        state.options = ingested.options
        state.location = ingested.location or state.location
        state.location_wealth = ingested.wealth_tier
        state.status = ingested.status
        state.warnings = ingested.warnings
        self.active_container = None
        self._invalidate_scene()
        return ingested

    def _record_transcript(self, turn: int, payload: "TurnPayload") -> None:
        transcripts = self._state.debug_transcripts
        transcripts.append(
            LlmTranscript(
                id=f"turn-{turn}",
                turn=turn,
                prompt=payload.debug_prompt_used or "",
                response=payload.debug_raw_response or payload.model_dump_json(),
            )
        )
        del transcripts[:-MAX_TRANSCRIPTS]

    # -------------------------------------------------------------------------
    # Movement
    # -------------------------------------------------------------------------

    def resolve_move(self, direction: Direction) -> MoveOutcome:
        """Resolve a step and apply any local effect.

        Local steps and blocked steps are applied immediately. Choice
        outcomes are returned for the caller to dispatch.
        """
        if self._turn_in_flight:
            return MoveOutcome(
                type=MoveOutcomeType.IGNORED,
                direction=direction,
                reason="turn_in_flight",
            )
        if self._state.status != GameStatus.ALIVE:
            return MoveOutcome(
                type=MoveOutcomeType.IGNORED, direction=direction, reason="game_over"
            )

        outcome = self.resolver.resolve(direction, self._state, self.movement)

        if outcome.type == MoveOutcomeType.LOCAL_STEP:
            self._state.local_map = outcome.rows
            self.movement.underfoot = outcome.underfoot
            self._append(LogRole.SYSTEM, outcome.log_text)
            self._invalidate_scene()
        elif outcome.type == MoveOutcomeType.BLOCKED:
            self._append(LogRole.SYSTEM, outcome.log_text)
        elif outcome.type == MoveOutcomeType.CONTAINER_OPENED:
            self.active_container = outcome.container

        return outcome

    async def move(self, direction: Direction) -> MoveOutcome:
        """Resolve a step and, if it needs one, play the resulting turn."""
        outcome = self.resolve_move(direction)
        if outcome.needs_turn:
            await self.choose(outcome.choice_text)
        return outcome

    # -------------------------------------------------------------------------
    # Containers
    # -------------------------------------------------------------------------

    def take_item(self, name: str) -> bool:
        """Move one item from the open container into the inventory.

        Returns:
            True if the item was taken
        """
        container = self.active_container
        if self._turn_in_flight or container is None or name not in container.contents:
            return False

        contents = list(container.contents)
        contents.remove(name)
        self._update_container(container, contents)
        self._state.inventory.append(name)
        logger.info(f"Took '{name}' from {container.name}")
        return True

    def take_all(self) -> list[str]:
        """Empty the open container into the inventory and close it.

        Returns:
            The items taken, in container order
        """
        container = self.active_container
        if self._turn_in_flight or container is None:
            return []

        taken = list(container.contents)
        self._update_container(container, [])
        self._state.inventory.extend(taken)
        self.active_container = None
        logger.info(f"Took {len(taken)} item(s) from {container.name}")
        return taken

    def close_container(self) -> None:
        self.active_container = None

    def _update_container(self, container: "Container", contents: list[str]) -> None:
        """Replace the container record everywhere it is held, marked searched."""
        updated = container.model_copy(update={"contents": contents, "searched": True})
        self._state.containers = [
            updated if c.id == container.id else c for c in self._state.containers
        ]
        self.active_container = updated

    # -------------------------------------------------------------------------
    # Full turns
    # -------------------------------------------------------------------------

    async def choose(self, choice_text: str) -> bool:
        """Play a full turn for a choice or custom action.

        Args:
            choice_text: Text sent to the turn collaborator

        Returns:
            True if the turn ran, False if it was refused or failed
        """
        if self._turn_in_flight:
            logger.info(f"Ignoring '{choice_text}': a turn is already in flight")
            return False
        if self._state.status != GameStatus.ALIVE:
            logger.info(f"Ignoring '{choice_text}': game status is {self._state.status.value}")
            return False

        self._turn_in_flight = True
        try:
            return await self._play_turn(choice_text)
        finally:
            self._turn_in_flight = False

    async def _play_turn(self, choice_text: str) -> bool:
        state = self._state
        self._append(LogRole.USER, f"> {choice_text}")
        placeholder = self._append(LogRole.SYSTEM, "")

        def on_stream(narrative: str) -> None:
            placeholder.text = narrative

        logger.info(f"Requesting turn {state.turn_count + 1}: {choice_text}")
        try:
            payload = await self.collaborator.generate_turn(
                state, choice_text, on_stream=on_stream
            )
        except Exception as e:
            logger.error(f"Turn collaborator failed: {type(e).__name__}: {e}")
            self._replace_entry(placeholder, SILENT_TURN_TEXT)
            return False

        turn = state.turn_count + 1
        ingested = self._apply_payload(payload)
        state.turn_count = turn
        self.movement.reset_for_turn(turn)

        self._replace_entry(
            placeholder, payload.narrative, turn_number=turn, location=state.location
        )
        if ingested.parse_error:
            self._append(
                LogRole.SYSTEM,
                f"AI turn data invalid: {ingested.parse_error}. Using fallback.",
                turn_number=turn,
            )
        self._record_transcript(turn, payload)
        return True

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def scene(self) -> "Scene":
        """The 3D scene for the current map, rebuilt after any change."""
        if self._scene_stale or self.projector.scene is None:
            state = self._state
            self.projector.rebuild(
                state.local_map,
                state.entities,
                state.interactables,
                state.location,
                state.location_wealth,
            )
            self._scene_stale = False
        return self.projector.scene

    def describe(self, x: int, y: int) -> str:
        state = self._state
        return describe_cell(
            state.local_map,
            x,
            y,
            state.entities,
            state.interactables,
            state.player_name,
        )

    def should_recenter(self) -> bool:
        """Whether the 2D viewport should re-centre on the current location."""
        return self.movement.should_recenter(self._state.location)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _invalidate_scene(self) -> None:
        self.projector.release()
        self._scene_stale = True

    def _append(
        self,
        role: LogRole,
        text: str,
        turn_number: int | None = None,
        location: str | None = None,
    ) -> LogEntry:
        entry = LogEntry(
            id=_entry_id(),
            role=role,
            text=text,
            turn_number=turn_number,
            location=location,
        )
        self._state.history.append(entry)
        return entry

    def _replace_entry(
        self,
        entry: LogEntry,
        text: str,
        turn_number: int | None = None,
        location: str | None = None,
    ) -> None:
        """Swap a placeholder entry for its final version in one assignment."""
        history = self._state.history
        final = entry.model_copy(
            update={"text": text, "turn_number": turn_number, "location": location}
        )
        for i in range(len(history) - 1, -1, -1):
            if history[i].id == entry.id:
                history[i] = final
                return
        history.append(final)
