"""
Mock turn collaborator for deterministic testing.

Returns scripted TurnPayloads, streams each narrative word by word through
the `on_stream` callback, and records every call. A turn can be held open
with `hold()` to test behavior while a turn is in flight.

Example:
    >>> mock = MockTurnCollaborator(default=payload)
    >>> mock.queue(courtyard_payload)
    >>> result = await mock.generate_turn(state, "Go to Courtyard")
    >>> mock.calls[0].choice_text
    'Go to Courtyard'
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from glyphworld.models.world import TurnPayload

if TYPE_CHECKING:
    from glyphworld.engine.protocols import StreamCallback
    from glyphworld.models.game import GameState


@dataclass
class TurnCall:
    """Record of a single generate_turn call.

    Attributes:
        choice_text: The choice sent by the session
        turn_count: Session turn count at call time
        streamed: Narrative snapshots passed to on_stream
    """

    choice_text: str
    turn_count: int
    streamed: list[str] = field(default_factory=list)


class MockTurnCollaborator:
    """Scripted TurnCollaborator.

    Attributes:
        default: Payload returned when the queue is empty
        calls: All calls made, in order
        error: If set, raised instead of returning a payload
    """

    def __init__(self, default: TurnPayload | None = None) -> None:
        self.default = default or TurnPayload(narrative="Nothing happens.", local_map="@")
        self.calls: list[TurnCall] = []
        self.error: Exception | None = None
        self._queue: list[TurnPayload] = []
        self._gate: asyncio.Event | None = None

    def queue(self, *payloads: TurnPayload) -> None:
        """Return these payloads, in order, before falling back to default."""
        self._queue.extend(payloads)

    def hold(self) -> asyncio.Event:
        """Block subsequent turns until the returned event is set."""
        self._gate = asyncio.Event()
        return self._gate

    async def generate_turn(
        self,
        state: "GameState",
        choice_text: str,
        on_stream: "StreamCallback | None" = None,
    ) -> TurnPayload:
        call = TurnCall(choice_text=choice_text, turn_count=state.turn_count)
        self.calls.append(call)

        if self._gate is not None:
            await self._gate.wait()
        if self.error is not None:
            raise self.error

        payload = self._queue.pop(0) if self._queue else self.default
        if on_stream:
            words = payload.narrative.split(" ")
            for i in range(1, len(words) + 1):
                partial = " ".join(words[:i])
                call.streamed.append(partial)
                on_stream(partial)
        return payload.model_copy(deep=True)
