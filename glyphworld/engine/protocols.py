"""
Protocol definitions for the engine's external collaborators.

The engine performs no network or persistence I/O itself. Full turns are
delegated to a turn collaborator that receives the current state and the
player's choice and returns a structured TurnPayload.

Component Flow:
    raw map text -> normalize_map -> position index / scene projector
                                            |
                                            v
                                   MovementResolver
                                   /               \\
                         local step                 choice text
                    (narrative log line)                 |
                                                         v
                                            TurnCollaborator -> TurnPayload
                                                         |
                                                         v
                                                ingest_turn (loop)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from glyphworld.models.game import GameState
    from glyphworld.models.world import TurnPayload


StreamCallback = Callable[[str], None]


@runtime_checkable
class TurnCollaborator(Protocol):
    """Protocol for generating the next full turn.

    Implementations should never raise for bad model output; they return a
    fallback TurnPayload with `debug_parse_error` set instead.

    Example implementations:
        - LLMTurnGenerator: LiteLLM-backed generation with streaming
        - MockTurnCollaborator: Scripted payloads for tests
    """

    async def generate_turn(
        self,
        state: "GameState",
        choice_text: str,
        on_stream: StreamCallback | None = None,
    ) -> "TurnPayload":
        """Generate the outcome of a player's choice.

        Args:
            state: Current game state (read-only)
            choice_text: The choice or custom action taken
            on_stream: Called with the narrative so far as it streams in

        Returns:
            TurnPayload for the next turn
        """
        ...
