"""
LLM-backed turn collaborator.

Streams a turn from the configured model, surfaces the narrative to the
caller while the JSON is still arriving, then parses the full response
into a TurnPayload. Transport failures are retried once; after that, and
for unparseable output, a fallback payload is returned instead of raising.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from glyphworld.engine.grid import generate_fallback_map
from glyphworld.llm.client import stream_completion
from glyphworld.llm.prompt_loader import PromptLoader, get_loader
from glyphworld.llm.response_parser import extract_partial_narrative, parse_turn_json
from glyphworld.models.world import Container, Entity, GameStatus, Option, TurnPayload

if TYPE_CHECKING:
    from glyphworld.engine.protocols import StreamCallback
    from glyphworld.models.game import GameState

logger = logging.getLogger(__name__)

PROMPT_CATEGORY = "turn"
HISTORY_WINDOW = 6

GLITCH_NARRATIVE = "The simulation glitched. (Fallback: invalid AI turn response)"
CORRUPTED_MAP = " [ MAP DATA CORRUPTED ] "
GLITCH_OPTIONS = ("Try again", "Wait", "Pray")

BLACKOUT_NARRATIVE = (
    "Your vision dims and darkness closes in. When you awaken, time has passed, "
    "and the city feels different."
)
BLACKOUT_OPTIONS = (
    "Steady yourself and look around.",
    "Call out to see who else is nearby.",
    "Check your belongings.",
)

# Older clients of the prompt used camelCase keys
_KEY_ALIASES = {
    "localMapAscii": "local_map",
    "presentEntities": "present_entities",
    "presentInteractables": "present_interactables",
    "presentContainers": "present_containers",
    "newLocation": "new_location",
    "locationWealth": "location_wealth",
    "gameStatus": "game_status",
}


class EmptyResponseError(RuntimeError):
    """The model stream finished without producing any text."""


OFF_MAP = -1


def _options(texts: tuple[str, ...]) -> list[Option]:
    return [Option(id=i + 1, text=text) for i, text in enumerate(texts)]


def _keep_valid(entries: list[Any], model: type[BaseModel], field: str) -> list[Any]:
    """Drop list entries that do not validate, logging each one."""
    kept = []
    for entry in entries:
        try:
            model.model_validate(entry)
        except ValidationError as e:
            logger.warning(f"Dropping invalid {field} entry ({e.error_count()} errors): {entry!r}")
            continue
        kept.append(entry)
    return kept


def _container_entry(entry: Any, index: int) -> Any:
    """Validate a container, moving an unusable one off the map.

    Off-map containers are removed during ingestion, which reports them as
    having invalid coordinates.
    """
    try:
        Container.model_validate(entry)
        return entry
    except ValidationError as e:
        logger.warning(f"Invalid container entry ({e.error_count()} errors): {entry!r}")
    raw = entry if isinstance(entry, dict) else {}
    return {
        "id": str(raw.get("id") or f"container-{index}"),
        "name": str(raw.get("name") or "Container"),
        "x": OFF_MAP,
        "y": OFF_MAP,
    }


def _normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Map alias keys and loosely typed values onto the payload shape.

    List fields are checked entry by entry so one malformed record costs
    only itself, not the whole turn.
    """
    normalized = {_KEY_ALIASES.get(key, key): value for key, value in data.items()}

    local_map = normalized.get("local_map")
    if isinstance(local_map, list):
        normalized["local_map"] = "\n".join(str(row) for row in local_map)

    entities = normalized.get("present_entities")
    if isinstance(entities, list):
        entities = [{"name": e} if isinstance(e, str) else e for e in entities]
        normalized["present_entities"] = _keep_valid(entities, Entity, "entity")

    interactables = normalized.get("present_interactables")
    if isinstance(interactables, list):
        normalized["present_interactables"] = [
            str(item) for item in interactables if isinstance(item, (str, int, float))
        ]

    containers = normalized.get("present_containers")
    if isinstance(containers, list):
        normalized["present_containers"] = [
            _container_entry(entry, i) for i, entry in enumerate(containers)
        ]

    options = normalized.get("options")
    if isinstance(options, list):
        options = [
            {"id": i + 1, "text": option} if isinstance(option, str)
            else {"id": i + 1, **option} if isinstance(option, dict)
            else option
            for i, option in enumerate(options)
        ]
        normalized["options"] = _keep_valid(options, Option, "option")
    return normalized


class LLMTurnGenerator:
    """Generates full turns with LiteLLM.

    Example:
        >>> generator = LLMTurnGenerator()
        >>> payload = await generator.generate_turn(state, "Open the door", print)
        >>> payload.new_location
        'Courtyard, House of Yusuf, Bab Zuwayla, Cairo'
    """

    def __init__(
        self,
        model: str | None = None,
        temperature: float = 0.6,
        loader: PromptLoader | None = None,
    ):
        self.model = model
        self.temperature = temperature
        self.loader = loader or get_loader()

    async def generate_turn(
        self,
        state: "GameState",
        choice_text: str,
        on_stream: "StreamCallback | None" = None,
    ) -> TurnPayload:
        prompt = self._build_turn_prompt(state, choice_text)
        messages = [
            {"role": "system", "content": self.loader.get_prompt(PROMPT_CATEGORY, "system_prompt.txt")},
            {"role": "user", "content": prompt},
        ]

        try:
            return await self._run_once(state, messages, prompt, on_stream)
        except Exception as e:
            logger.warning(f"Turn generation failed, retrying: {type(e).__name__}: {e}")

        try:
            return await self._run_once(state, messages, prompt, on_stream)
        except Exception as e:
            logger.error(f"Turn generation failed after retry: {type(e).__name__}: {e}")
            return self._blackout_payload(state, prompt, str(e) or "Turn error")

    def _build_turn_prompt(self, state: "GameState", choice_text: str) -> str:
        recent = state.history[-HISTORY_WINDOW:]
        recent_history = "\n".join(f"{entry.role.value}: {entry.text}" for entry in recent)
        return self.loader.render(
            PROMPT_CATEGORY,
            "turn_prompt.txt",
            player_name=state.player_name,
            turn=state.turn_count + 1,
            location=state.location or "Unknown",
            inventory=", ".join(state.inventory) or "Nothing",
            recent_history=recent_history or "(none)",
            current_map="\n".join(state.local_map) or "(none)",
            choice_text=choice_text,
        )

    async def _run_once(
        self,
        state: "GameState",
        messages: list[dict[str, str]],
        prompt: str,
        on_stream: "StreamCallback | None",
    ) -> TurnPayload:
        full_text = ""
        streamed = ""

        async for delta in stream_completion(
            messages,
            model=self.model,
            temperature=self.temperature,
            response_format={"type": "json_object"},
        ):
            full_text += delta
            if on_stream:
                candidate = extract_partial_narrative(full_text)
                if candidate and candidate != streamed:
                    streamed = candidate
                    on_stream(streamed)

        if not full_text:
            raise EmptyResponseError("No response from AI")
        if on_stream and not streamed and full_text.strip():
            on_stream(full_text.strip())

        preview = full_text[:200] + "..." if len(full_text) > 200 else full_text
        logger.debug(f"Turn response preview: {preview}")

        data, reason = parse_turn_json(full_text)
        payload = None
        if data is not None:
            try:
                payload = TurnPayload.model_validate(_normalize_keys(data))
            except ValidationError as e:
                reason = f"Invalid turn fields ({e.error_count()} errors)"
        if payload is None:
            logger.warning(f"Turn response unusable: {reason}")
            payload = self._glitch_payload(state, reason or "Unknown parse error")

        payload.debug_prompt_used = prompt
        payload.debug_raw_response = full_text
        return payload

    def _glitch_payload(self, state: "GameState", reason: str) -> TurnPayload:
        """Fallback that keeps the current cast and location."""
        return TurnPayload(
            narrative=GLITCH_NARRATIVE,
            local_map=CORRUPTED_MAP,
            present_entities=list(state.entities),
            present_interactables=list(state.interactables),
            present_containers=list(state.containers),
            new_location=state.location,
            location_wealth=state.location_wealth.value,
            options=_options(GLITCH_OPTIONS),
            game_status=GameStatus.ALIVE,
            debug_parse_error=reason,
        )

    def _blackout_payload(self, state: "GameState", prompt: str, reason: str) -> TurnPayload:
        """Fallback after transport failure: an empty fallback room."""
        payload = TurnPayload(
            narrative=BLACKOUT_NARRATIVE,
            local_map="\n".join(generate_fallback_map()),
            present_containers=[],
            new_location=state.location,
            location_wealth=state.location_wealth.value,
            options=_options(BLACKOUT_OPTIONS),
            game_status=GameStatus.ALIVE,
        )
        payload.debug_prompt_used = prompt
        payload.debug_raw_response = json.dumps(payload.model_dump(mode="json"))
        payload.debug_parse_error = reason
        return payload
