"""
Turn payload models - the per-turn contract with the turn collaborator.

Every turn the collaborator returns a TurnPayload: raw map text, the NPCs
and interactables present, containers with absolute coordinates, the
location label and the next choices. Entity fields are small closed
enumerations; free text from the collaborator is coerced into them.
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, Field, field_validator

_ENUM_SPLIT = re.compile(r"[/,(]")


def _coerce_choice(value: object, enum_cls: type[Enum], fallback: Enum) -> Enum:
    """Coerce free text into a closed enumeration.

    Takes the text before the first '/', ',' or '(' and lowercases it.
    Anything outside the enumeration becomes the fallback.
    """
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str) or not value:
        return fallback
    normalized = _ENUM_SPLIT.split(value, maxsplit=1)[0].strip().lower()
    try:
        return enum_cls(normalized)
    except ValueError:
        return fallback


class EntityStatus(str, Enum):
    HEALTHY = "healthy"
    SICK = "sick"
    DEAD = "dead"
    ACTIVE = "active"
    IDLE = "idle"
    RESTING = "resting"
    MISSING = "missing"
    FLED = "fled"


class EntityRole(str, Enum):
    SPOUSE = "spouse"
    CHILD = "child"
    SERVANT = "servant"
    GUARD = "guard"
    MERCHANT = "merchant"
    NEIGHBOR = "neighbor"
    PARENT = "parent"
    SIBLING = "sibling"
    STRANGER = "stranger"


class EntityCondition(str, Enum):
    HEALTHY = "healthy"
    INCUBATING = "incubating"
    SYMPTOMATIC = "symptomatic"
    DYING = "dying"
    CORPSE = "corpse"


class EntityActivity(str, Enum):
    STANDING = "standing"
    PRAYING = "praying"
    WALKING = "walking"
    WORKING = "working"
    RESTING = "resting"
    FLEEING = "fleeing"
    TRADING = "trading"


class Entity(BaseModel):
    """An NPC present at the current location.

    Entities have no stable identity across turns; their map position is
    re-derived from the first letter of the name every time the map changes.

    Example:
        >>> Entity(name="Ahmad", status="Coughing (badly)").status
        <EntityStatus.ACTIVE: 'active'>
    """

    name: str = ""
    status: EntityStatus = EntityStatus.ACTIVE
    role: EntityRole = EntityRole.STRANGER
    condition: EntityCondition = EntityCondition.HEALTHY
    activity: EntityActivity = EntityActivity.STANDING

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: object) -> str:
        return value.strip() if isinstance(value, str) else ""

    @field_validator("status", mode="before")
    @classmethod
    def coerce_status(cls, value: object) -> EntityStatus:
        return _coerce_choice(value, EntityStatus, EntityStatus.ACTIVE)

    @field_validator("role", mode="before")
    @classmethod
    def coerce_role(cls, value: object) -> EntityRole:
        return _coerce_choice(value, EntityRole, EntityRole.STRANGER)

    @field_validator("condition", mode="before")
    @classmethod
    def coerce_condition(cls, value: object) -> EntityCondition:
        return _coerce_choice(value, EntityCondition, EntityCondition.HEALTHY)

    @field_validator("activity", mode="before")
    @classmethod
    def coerce_activity(cls, value: object) -> EntityActivity:
        return _coerce_choice(value, EntityActivity, EntityActivity.STANDING)


class ContainerType(str, Enum):
    CHEST = "chest"
    JAR = "jar"
    SACK = "sack"
    BOX = "box"


class Container(BaseModel):
    """A searchable container placed at explicit map coordinates.

    Coordinates are absolute in the collaborator's map; they must be
    translated by the normalizer's crop offset before use.
    """

    id: str
    name: str
    type: ContainerType = ContainerType.BOX
    symbol: str = "▪"
    contents: list[str] = Field(default_factory=list)
    x: int
    y: int
    searched: bool = False

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, value: object) -> ContainerType:
        return _coerce_choice(value, ContainerType, ContainerType.BOX)


class WealthTier(str, Enum):
    """Coarse wealth classification, used only for scene theming."""

    POOR = "poor"
    MODEST = "modest"
    MERCHANT = "merchant"
    ELITE = "elite"


class GameStatus(str, Enum):
    ALIVE = "alive"
    DEAD = "dead"
    SURVIVED = "survived"


class Option(BaseModel):
    """A suggested next choice offered to the player."""

    id: int
    text: str


class TurnPayload(BaseModel):
    """Structured result of one full turn from the turn collaborator.

    Attributes:
        narrative: Prose describing the outcome of the turn
        local_map: Raw, untrusted map text
        present_entities: NPCs at the location, in map order
        present_interactables: Labels for interactable glyphs, in map order
        present_containers: Containers, or None to keep the previous ones
        new_location: Location label ("Room, Building, Quarter, City")
        location_wealth: Optional explicit wealth tier for theming
        options: Suggested next choices
        game_status: Whether the game continues
        debug_parse_error: Set when this payload is a parse/transport fallback
    """

    narrative: str = ""
    local_map: str = ""
    present_entities: list[Entity] = Field(default_factory=list)
    present_interactables: list[str] = Field(default_factory=list)
    present_containers: list[Container] | None = None
    new_location: str = ""
    location_wealth: str | None = None
    options: list[Option] = Field(default_factory=list)
    game_status: GameStatus = GameStatus.ALIVE

    # Debugging
    debug_prompt_used: str | None = None
    debug_raw_response: str | None = None
    debug_parse_error: str | None = None
