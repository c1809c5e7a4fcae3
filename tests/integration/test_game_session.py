"""Integration tests for GameSession with a mock turn collaborator.

Tests cover:
- Opening turn ingestion
- Local steps, blocked steps and opened containers
- Taking items from containers into the inventory
- Full turns: streaming placeholder, turn counter, underfoot reset
- At most one turn in flight
- Fallback and game-over handling
"""

import asyncio
import random

import pytest

from glyphworld.engine.session import MAX_TRANSCRIPTS, SILENT_TURN_TEXT, GameSession
from glyphworld.models.game import LogRole
from glyphworld.models.movement import Direction, MoveOutcomeType
from glyphworld.models.world import GameStatus, Option, TurnPayload

pytestmark = pytest.mark.integration


@pytest.fixture
def session(mock_collaborator, sample_payload) -> GameSession:
    """Session started on the kitchen map."""
    game = GameSession(mock_collaborator, player_name="Yusuf", rng=random.Random(7))
    game.start(sample_payload)
    return game


def _courtyard_payload(**overrides) -> TurnPayload:
    values = {
        "narrative": "You step into the courtyard.",
        "local_map": "#######\n#..@..#\n#######",
        "new_location": "Courtyard, House of Yusuf",
        "options": [Option(id=1, text="Wait")],
    }
    values.update(overrides)
    return TurnPayload(**values)


class TestStart:
    def test_opening_turn(self, session, kitchen_rows) -> None:
        state = session.get_state()

        assert state.local_map == kitchen_rows
        assert state.turn_count == 0
        assert state.history[-1].text == "Morning light spills across the kitchen floor."
        assert state.history[-1].turn_number == 0
        assert session.busy is False

    def test_recenter_once_per_location(self, session) -> None:
        assert session.should_recenter() is True
        assert session.should_recenter() is False


class TestLocalMovement:
    """Tests for resolve_move."""

    def test_local_step_updates_map_and_log(self, session) -> None:
        outcome = session.resolve_move(Direction.SOUTH)
        state = session.get_state()

        assert outcome.type == MoveOutcomeType.LOCAL_STEP
        assert state.local_map[3][4] == "@"
        assert state.history[-1].text == outcome.narrative
        assert state.history[-1].role == LogRole.SYSTEM
        assert session.movement.underfoot == "."

    def test_walking_over_water_restores_it(self, session) -> None:
        session.resolve_move(Direction.WEST)
        session.resolve_move(Direction.SOUTH)
        assert session.movement.underfoot == "~"

        session.resolve_move(Direction.EAST)
        assert session.get_state().local_map[3][3] == "~"

    def test_blocked_step(self, session) -> None:
        session.resolve_move(Direction.SOUTH)
        before = list(session.get_state().local_map)

        outcome = session.resolve_move(Direction.SOUTH)

        assert outcome.type == MoveOutcomeType.BLOCKED
        assert session.get_state().local_map == before
        assert session.get_state().history[-1].text == "Blocked."

    def test_container_opened(self, session) -> None:
        for direction in (Direction.EAST, Direction.EAST, Direction.EAST, Direction.NORTH):
            session.resolve_move(direction)
        outcome = session.resolve_move(Direction.EAST)

        assert outcome.type == MoveOutcomeType.CONTAINER_OPENED
        assert session.active_container.name == "Cedar chest"

    def test_scene_is_rebuilt_after_step(self, session) -> None:
        first = session.scene()
        built = len(first.primitives)
        session.resolve_move(Direction.SOUTH)

        second = session.scene()

        assert session.projector.released_total == built
        player = second.of_kind("player")[0]
        assert (player.x, player.y) == (4, 3)


class TestContainers:
    """Tests for taking items from an opened container."""

    @pytest.fixture
    def opened(self, session) -> GameSession:
        for direction in (Direction.EAST, Direction.EAST, Direction.EAST, Direction.NORTH):
            session.resolve_move(direction)
        session.resolve_move(Direction.EAST)
        return session

    def test_take_item(self, opened) -> None:
        assert opened.take_item("Linen") is True
        state = opened.get_state()

        assert state.inventory == ["Linen"]
        assert opened.active_container.contents == ["Copper coins"]
        assert opened.active_container.searched is True
        assert state.containers[0].contents == ["Copper coins"]
        assert state.containers[0].searched is True

    def test_take_missing_item(self, opened) -> None:
        assert opened.take_item("Saffron") is False
        assert opened.get_state().inventory == []
        assert opened.active_container.searched is False

    def test_take_all_empties_and_closes(self, opened) -> None:
        taken = opened.take_all()
        state = opened.get_state()

        assert taken == ["Linen", "Copper coins"]
        assert state.inventory == ["Linen", "Copper coins"]
        assert state.containers[0].contents == []
        assert state.containers[0].searched is True
        assert opened.active_container is None

    def test_close_container(self, opened) -> None:
        opened.close_container()

        assert opened.active_container is None
        assert opened.take_item("Linen") is False
        assert opened.get_state().containers[0].contents == ["Linen", "Copper coins"]

    def test_nothing_open(self, session) -> None:
        assert session.take_item("Linen") is False
        assert session.take_all() == []

    @pytest.mark.asyncio
    async def test_inventory_survives_turns(self, opened, mock_collaborator) -> None:
        opened.take_all()
        mock_collaborator.queue(_courtyard_payload())

        await opened.choose("Go to Courtyard")

        assert opened.get_state().inventory == ["Linen", "Copper coins"]


class TestFullTurns:
    """Tests for choose and move."""

    @pytest.mark.asyncio
    async def test_move_into_item_plays_turn(self, session, mock_collaborator) -> None:
        mock_collaborator.queue(_courtyard_payload())

        outcome = await session.move(Direction.NORTH)
        state = session.get_state()

        assert outcome.choice_text == "Inspect the Lamp"
        assert mock_collaborator.calls[0].choice_text == "Inspect the Lamp"
        assert state.turn_count == 1
        assert state.location == "Courtyard, House of Yusuf"
        assert state.local_map == ["#######", "#..@..#", "#######"]

    @pytest.mark.asyncio
    async def test_placeholder_is_streamed_then_replaced(
        self, session, mock_collaborator
    ) -> None:
        mock_collaborator.queue(_courtyard_payload())

        await session.choose("Go outside")
        history = session.get_state().history

        assert history[-2].role == LogRole.USER
        assert history[-2].text == "> Go outside"
        assert history[-1].text == "You step into the courtyard."
        assert history[-1].turn_number == 1
        assert history[-1].location == "Courtyard, House of Yusuf"
        assert mock_collaborator.calls[0].streamed[0] == "You"

    @pytest.mark.asyncio
    async def test_turn_resets_underfoot(self, session) -> None:
        session.resolve_move(Direction.WEST)
        session.resolve_move(Direction.SOUTH)
        assert session.movement.underfoot == "~"

        await session.choose("Wait")

        assert session.movement.underfoot == " "
        assert session.movement.last_sync_turn == 1

    @pytest.mark.asyncio
    async def test_only_one_turn_in_flight(self, session, mock_collaborator) -> None:
        gate = mock_collaborator.hold()
        task = asyncio.create_task(session.choose("Wait"))
        while not mock_collaborator.calls:
            await asyncio.sleep(0)

        assert session.busy is True
        assert session.resolve_move(Direction.SOUTH).reason == "turn_in_flight"
        assert await session.choose("Pray") is False

        gate.set()
        assert await task is True
        assert session.busy is False
        assert [c.choice_text for c in mock_collaborator.calls] == ["Wait"]
        assert session.get_state().turn_count == 1

    @pytest.mark.asyncio
    async def test_parse_error_is_logged(self, session, mock_collaborator) -> None:
        mock_collaborator.queue(_courtyard_payload(debug_parse_error="Unknown parse error"))

        await session.choose("Wait")

        assert (
            session.get_state().history[-1].text
            == "AI turn data invalid: Unknown parse error. Using fallback."
        )

    @pytest.mark.asyncio
    async def test_options_are_padded(self, session, mock_collaborator) -> None:
        mock_collaborator.queue(_courtyard_payload())
        await session.choose("Wait")

        assert [o.text for o in session.get_state().options] == ["Wait", "Continue", "Continue"]

    @pytest.mark.asyncio
    async def test_transcripts_are_capped(self, session) -> None:
        for _ in range(MAX_TRANSCRIPTS + 2):
            await session.choose("Wait")

        transcripts = session.get_state().debug_transcripts
        assert len(transcripts) == MAX_TRANSCRIPTS
        assert transcripts[0].turn == 3
        assert transcripts[-1].turn == MAX_TRANSCRIPTS + 2

    @pytest.mark.asyncio
    async def test_game_over_stops_play(self, session, mock_collaborator) -> None:
        mock_collaborator.queue(_courtyard_payload(game_status=GameStatus.DEAD))
        await session.choose("Drink from the well")

        assert await session.choose("Wait") is False
        assert session.resolve_move(Direction.EAST).reason == "game_over"
        assert len(mock_collaborator.calls) == 1

    @pytest.mark.asyncio
    async def test_collaborator_error_releases_guard(
        self, session, mock_collaborator
    ) -> None:
        mock_collaborator.error = RuntimeError("boom")

        assert await session.choose("Wait") is False

        assert session.busy is False
        assert session.get_state().history[-1].text == SILENT_TURN_TEXT
        assert session.get_state().turn_count == 0
