"""
Turn payload ingestion.

Converts an untrusted TurnPayload into values the rest of the engine can
rely on: a normalized map, entities with names, containers translated into
cropped-map coordinates, and at least three options. Every repair is
recorded as a warning; nothing here raises for bad payload content.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from glyphworld.engine.glyphs import PLAYER_GLYPH
from glyphworld.engine.grid import generate_fallback_map, normalize_map
from glyphworld.engine.locations import resolve_wealth_tier
from glyphworld.models.map import NormalizedMap
from glyphworld.models.world import (
    Container,
    Entity,
    GameStatus,
    Option,
    TurnPayload,
    WealthTier,
)

logger = logging.getLogger(__name__)

MIN_OPTIONS = 3
DEFAULT_OPTIONS = ("Look around", "Wait", "Pray")
FILLER_OPTION = "Continue"

WARNING_FALLBACK_MAP = "Map missing player marker; generated fallback."
WARNING_CONTAINERS_DROPPED = "Removed containers with invalid coordinates."
WARNING_OPTIONS_PADDED = "Options list was incomplete; added defaults."


class IngestedTurn(BaseModel):
    """A sanitized turn ready to replace the session's spatial state."""

    map: NormalizedMap
    entities: list[Entity] = Field(default_factory=list)
    interactables: list[str] = Field(default_factory=list)
    containers: list[Container] = Field(default_factory=list)
    options: list[Option] = Field(default_factory=list)
    location: str = ""
    wealth_tier: WealthTier = WealthTier.MODEST
    status: GameStatus = GameStatus.ALIVE
    warnings: list[str] = Field(default_factory=list)
    parse_error: str | None = None


def sanitize_entities(entities: list[Entity]) -> list[Entity]:
    """Drop entities without a usable name."""
    return [entity for entity in entities if entity.name]


def translate_containers(
    containers: list[Container], offset_x: int, offset_y: int, width: int, height: int
) -> list[Container]:
    """Shift container coordinates into the cropped map, dropping outsiders."""
    translated = []
    for container in containers:
        x = container.x - offset_x
        y = container.y - offset_y
        if 0 <= x < width and 0 <= y < height:
            translated.append(container.model_copy(update={"x": x, "y": y}))
    return translated


def ensure_options(options: list[Option]) -> tuple[list[Option], bool]:
    """Guarantee at least MIN_OPTIONS options.

    Returns:
        Tuple of (options, whether an incomplete list was padded)
    """
    if not options:
        return [Option(id=i + 1, text=text) for i, text in enumerate(DEFAULT_OPTIONS)], False

    safe = list(options)
    padded = False
    while len(safe) < MIN_OPTIONS:
        safe.append(Option(id=len(safe) + 1, text=FILLER_OPTION))
        padded = True
    return safe, padded


def ingest_turn(
    payload: TurnPayload,
    previous_containers: list[Container] | None = None,
) -> IngestedTurn:
    """Sanitize a turn payload.

    Args:
        payload: Turn collaborator output
        previous_containers: Containers to keep when the payload omits them

    Returns:
        IngestedTurn with all repairs applied and listed in `warnings`
    """
    normalized = normalize_map(payload.local_map)
    warnings = list(normalized.warnings)

    if not any(PLAYER_GLYPH in row for row in normalized.rows):
        warnings.append(WARNING_FALLBACK_MAP)
        normalized = NormalizedMap(rows=generate_fallback_map(), warnings=warnings)

    if payload.present_containers is None:
        containers = list(previous_containers or [])
    else:
        containers = translate_containers(
            payload.present_containers,
            normalized.offset_x,
            normalized.offset_y,
            normalized.width,
            normalized.height,
        )
        if len(containers) != len(payload.present_containers):
            warnings.append(WARNING_CONTAINERS_DROPPED)

    options, padded = ensure_options(payload.options)
    if padded:
        warnings.append(WARNING_OPTIONS_PADDED)

    if warnings:
        logger.warning(f"SYSTEM NOTICE: {' '.join(warnings)}")

    return IngestedTurn(
        map=normalized,
        entities=sanitize_entities(payload.present_entities),
        interactables=list(payload.present_interactables),
        containers=containers,
        options=options,
        location=payload.new_location,
        wealth_tier=resolve_wealth_tier(
            payload.location_wealth, location=payload.new_location
        ),
        status=payload.game_status,
        warnings=warnings,
        parse_error=payload.debug_parse_error,
    )
