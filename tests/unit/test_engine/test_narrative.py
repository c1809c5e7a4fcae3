"""Unit tests for local-step narrative.

Tests cover:
- Indoor vs outdoor template sets
- Proximity clause priority: wall, then NPC, then object
- Seeded template choice is reproducible
"""

import random

from glyphworld.engine.narrative import (
    INDOOR_MOVEMENTS,
    OUTDOOR_MOVEMENTS,
    generate_movement_narrative,
    npc_proximity,
    object_proximity,
    pick_template,
    wall_proximity,
)
from glyphworld.models.movement import Direction
from glyphworld.models.world import Entity


class TestTemplates:
    """Tests for template selection."""

    def test_indoor_templates(self) -> None:
        template = pick_template("Kitchen, House of Yusuf", random.Random(1))
        assert template in INDOOR_MOVEMENTS

    def test_outdoor_templates(self) -> None:
        template = pick_template("Courtyard, House of Yusuf", random.Random(1))
        assert template in OUTDOOR_MOVEMENTS

    def test_seeded_choice_is_reproducible(self) -> None:
        a = pick_template("Kitchen", random.Random(42))
        b = pick_template("Kitchen", random.Random(42))
        assert a == b


class TestProximity:
    """Tests for proximity clauses."""

    def test_wall_in_direction_of_travel(self) -> None:
        rows = ["#####", "#.@.#", "#####"]
        assert wall_proximity(rows, 2, 1, Direction.NORTH) == "the northern wall"

    def test_wall_scan_order_starts_east(self) -> None:
        rows = [".....", "..@#.", "....."]
        assert wall_proximity(rows, 2, 1, Direction.WEST) == "the eastern wall"

    def test_no_wall(self) -> None:
        rows = [".....", "..@..", "....."]
        assert wall_proximity(rows, 2, 1, Direction.NORTH) is None

    def test_npc_next_to_player(self) -> None:
        rows = ["...", ".@A", "..."]
        assert npc_proximity(rows, 1, 1, [Entity(name="Ahmad")]) == "Ahmad"

    def test_object_next_to_player(self) -> None:
        rows = ["...", ".@.", ".◙."]
        assert object_proximity(rows, 1, 1) == "approaching a fountain"

    def test_standing_on_object(self) -> None:
        rows = ["...", ".@.", "..."]
        assert object_proximity(rows, 1, 1, standing_on="†") == "standing on a religious site"


class TestGenerateMovementNarrative:
    """Tests for generate_movement_narrative."""

    def test_sentence_with_wall_clause(self) -> None:
        rows = ["#####", "#.@.#", "#####"]
        text = generate_movement_narrative(
            rows, 2, 1, Direction.EAST, "Kitchen, House of Yusuf", [], rng=random.Random(3)
        )
        assert "east" in text
        assert "Kitchen" in text
        assert text.endswith("You are now approaching the southern wall.")

    def test_wall_beats_npc(self) -> None:
        rows = ["#####", "#A@.#", "#####"]
        text = generate_movement_narrative(
            rows, 2, 1, Direction.SOUTH, "Kitchen", [Entity(name="Ahmad")]
        )
        assert "approaching the southern wall" in text
        assert "Ahmad" not in text

    def test_npc_clause(self) -> None:
        rows = [".....", ".A@..", "....."]
        text = generate_movement_narrative(
            rows, 2, 1, Direction.EAST, "Spice Souk", [Entity(name="Ahmad")]
        )
        assert text.endswith("You are now near Ahmad.")

    def test_no_clause(self) -> None:
        rows = [".....", "..@..", "....."]
        text = generate_movement_narrative(rows, 2, 1, Direction.NORTH, "", [])
        assert "the area" in text
        assert "You are now" not in text
        assert text.endswith(".")
