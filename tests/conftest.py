"""
Shared pytest fixtures for glyphworld tests.

This module provides:
- kitchen_rows: A small, fully-legend map with NPCs, items and exits
- sample_entities / sample_interactables / sample_containers
- sample_game_state: GameState positioned on kitchen_rows
- sample_payload: TurnPayload describing the same scene
- mock_collaborator: Deterministic turn collaborator
- Custom markers for test categorization
"""

from __future__ import annotations

import random
import sys
from pathlib import Path

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from glyphworld.models.game import GameState  # noqa: E402
from glyphworld.models.world import (  # noqa: E402
    Container,
    Entity,
    Option,
    TurnPayload,
    WealthTier,
)
from tests.mocks.turns import MockTurnCollaborator  # noqa: E402


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line(
        "markers", "e2e: marks tests as end-to-end tests requiring real LLM"
    )


# =============================================================================
# Map Fixtures
# =============================================================================

KITCHEN_LOCATION = "Kitchen, House of Yusuf, Bab Zuwayla, Cairo"

# Player at (4, 2). Ahmad at (1, 1), Bilal at (1, 4).
# Lamp '*' at (4, 1), Jug '?' at (7, 3), chest at (8, 1).
# Door at (9, 2), unlabeled exit at (9, 4), fountain at (4, 4).
KITCHEN_ROWS = [
    "##########",
    "#A..*...▪#",
    "#...@....+",
    "#.~~...?.#",
    "#B..◙....►",
    "##########",
]


@pytest.fixture
def kitchen_rows() -> list[str]:
    """Small map exercising every movement outcome."""
    return list(KITCHEN_ROWS)


@pytest.fixture
def sample_entities() -> list[Entity]:
    """Two NPCs with distinct initials."""
    return [
        Entity(name="Ahmad", status="active", role="servant", activity="working"),
        Entity(name="Bilal", status="sick", role="neighbor", condition="symptomatic"),
    ]


@pytest.fixture
def sample_interactables() -> list[str]:
    return ["Lamp", "Jug"]


@pytest.fixture
def sample_containers() -> list[Container]:
    return [
        Container(
            id="chest-1",
            name="Cedar chest",
            type="chest",
            contents=["Linen", "Copper coins"],
            x=8,
            y=1,
        )
    ]


@pytest.fixture
def sample_game_state(
    kitchen_rows, sample_entities, sample_interactables, sample_containers
) -> GameState:
    """GameState positioned on the kitchen map."""
    return GameState(
        player_name="Yusuf",
        location=KITCHEN_LOCATION,
        location_wealth=WealthTier.MODEST,
        local_map=kitchen_rows,
        entities=sample_entities,
        interactables=sample_interactables,
        containers=sample_containers,
        options=[
            Option(id=1, text="Speak to Ahmad"),
            Option(id=2, text="Light the lamp"),
            Option(id=3, text="Leave the house"),
        ],
    )


@pytest.fixture
def sample_payload(
    kitchen_rows, sample_entities, sample_interactables, sample_containers
) -> TurnPayload:
    """A well-formed turn describing the kitchen."""
    return TurnPayload(
        narrative="Morning light spills across the kitchen floor.",
        local_map="\n".join(kitchen_rows),
        present_entities=sample_entities,
        present_interactables=sample_interactables,
        present_containers=sample_containers,
        new_location=KITCHEN_LOCATION,
        location_wealth="modest",
        options=[
            Option(id=1, text="Speak to Ahmad"),
            Option(id=2, text="Light the lamp"),
            Option(id=3, text="Leave the house"),
        ],
    )


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for narrative templates."""
    return random.Random(7)


# =============================================================================
# Collaborator Fixtures
# =============================================================================


@pytest.fixture
def mock_collaborator(sample_payload) -> MockTurnCollaborator:
    """Collaborator that answers every choice with the kitchen turn."""
    return MockTurnCollaborator(default=sample_payload)
