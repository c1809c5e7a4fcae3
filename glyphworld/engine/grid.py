"""
Grid normalizer for untrusted map text.

Map text arrives from a generative source and may be empty, ragged,
oversized, use CRLF line endings, or have zero or several player markers.
`normalize_map` always returns a rectangular grid of at most
MAX_MAP_COLS x MAX_MAP_ROWS with exactly one player marker, plus warnings
describing what was repaired.

Example:
    >>> nmap = normalize_map("#####\\n#.@.#\\n#####")
    >>> nmap.rows[1]
    '#.@.#'
    >>> nmap.warnings
    []
"""

from __future__ import annotations

import logging

from glyphworld.engine.glyphs import (
    BLANK_GLYPH,
    FLOOR_GLYPH,
    PLAYER_GLYPH,
    classify_glyph,
    is_blocking,
)
from glyphworld.models.map import NormalizedMap

logger = logging.getLogger(__name__)

MAX_MAP_COLS = 30
MAX_MAP_ROWS = 14

FALLBACK_WIDTH = 20
FALLBACK_HEIGHT = 10
FALLBACK_BORDER = "▓"

WARNING_MAP_MISSING = "Map data missing; generated fallback."
WARNING_MARKER_INJECTED = "Map missing player marker; placed one at the center."
WARNING_MARKERS_MERGED = "Map had {count} player markers; kept the first."


def split_rows(text: str | None) -> list[str]:
    """Split map text into rows, accepting both CRLF and LF endings."""
    sanitized = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    return sanitized.split("\n")


def find_glyph(rows: list[str], glyph: str) -> tuple[int, int] | None:
    """Return the first (x, y) of a glyph in row-major order."""
    for y, row in enumerate(rows):
        x = row.find(glyph)
        if x != -1:
            return x, y
    return None


def in_bounds(rows: list[str], x: int, y: int) -> bool:
    return 0 <= y < len(rows) and 0 <= x < len(rows[y])


def cell_at(rows: list[str], x: int, y: int) -> str | None:
    """Return the glyph at (x, y), or None outside the grid."""
    if not in_bounds(rows, x, y):
        return None
    return rows[y][x]


def replace_cell(rows: list[str], x: int, y: int, glyph: str) -> list[str]:
    """Return a copy of rows with one cell replaced."""
    updated = list(rows)
    row = updated[y]
    updated[y] = row[:x] + glyph + row[x + 1 :]
    return updated


def generate_fallback_map(
    width: int = FALLBACK_WIDTH, height: int = FALLBACK_HEIGHT
) -> list[str]:
    """Build a bordered room with the player centred.

    The south, west and east walls each get one exit arrow at their
    midpoint; the north wall is solid.

    Args:
        width: Room width, capped at MAX_MAP_COLS
        height: Room height, capped at MAX_MAP_ROWS

    Returns:
        Map rows
    """
    w = max(3, min(width, MAX_MAP_COLS))
    h = max(3, min(height, MAX_MAP_ROWS))
    center_x = w // 2
    center_y = h // 2

    rows: list[str] = []
    for y in range(h):
        cells = []
        for x in range(w):
            is_border = y == 0 or y == h - 1 or x == 0 or x == w - 1
            if is_border:
                if y == h - 1 and x == center_x:
                    cells.append("▲")
                elif x == 0 and y == center_y:
                    cells.append("►")
                elif x == w - 1 and y == center_y:
                    cells.append("◄")
                else:
                    cells.append(FALLBACK_BORDER)
            elif x == center_x and y == center_y:
                cells.append(PLAYER_GLYPH)
            else:
                cells.append(FLOOR_GLYPH)
        rows.append("".join(cells))
    return rows


def _viewport_origin(center: int, size: int, limit: int) -> int:
    """Clamp a viewport start so `center` sits mid-window inside [0, limit)."""
    return max(0, min(center - size // 2, limit - size))


def _crop(rows: list[str], width: int, height: int) -> tuple[list[str], int, int]:
    """Cut a MAX_MAP_COLS x MAX_MAP_ROWS window around the player marker."""
    player = find_glyph(rows, PLAYER_GLYPH)
    player_x, player_y = player if player else (0, 0)

    start_x = _viewport_origin(player_x, MAX_MAP_COLS, width) if player else 0
    start_y = _viewport_origin(player_y, MAX_MAP_ROWS, height) if player else 0
    crop_width = min(width, MAX_MAP_COLS)

    cropped = [
        rows[y][start_x : start_x + crop_width].ljust(crop_width, BLANK_GLYPH)
        for y in range(start_y, min(start_y + MAX_MAP_ROWS, height))
    ]
    return cropped, start_x, start_y


def _dedupe_markers(rows: list[str]) -> tuple[list[str], int]:
    """Blank every player marker after the first; return the marker count."""
    count = sum(row.count(PLAYER_GLYPH) for row in rows)
    if count <= 1:
        return rows, count

    first = find_glyph(rows, PLAYER_GLYPH)
    deduped = []
    for y, row in enumerate(rows):
        if PLAYER_GLYPH in row:
            keep_x = first[0] if first and first[1] == y else -1
            row = "".join(
                ch if ch != PLAYER_GLYPH or x == keep_x else BLANK_GLYPH
                for x, ch in enumerate(row)
            )
        deduped.append(row)
    return deduped, count


def normalize_map(raw: str | None) -> NormalizedMap:
    """Turn raw map text into a valid, bounded, single-marker grid.

    Steps:
        1. Normalize line endings, drop leading/trailing blank lines
        2. Empty input becomes a fallback room
        3. Pad rows to the widest row
        4. Crop oversized maps around the player marker
        5. Collapse duplicate markers, inject one at the center if absent

    Args:
        raw: Map text as produced by the turn collaborator

    Returns:
        NormalizedMap; never raises for any input string
    """
    lines = split_rows(raw)
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()

    if not lines:
        logger.warning(WARNING_MAP_MISSING)
        return NormalizedMap(
            rows=generate_fallback_map(), warnings=[WARNING_MAP_MISSING]
        )

    width = max(len(line) for line in lines)
    height = len(lines)
    rows = [line.ljust(width, BLANK_GLYPH) for line in lines]
    warnings: list[str] = []
    offset_x = 0
    offset_y = 0

    if width > MAX_MAP_COLS or height > MAX_MAP_ROWS:
        rows, offset_x, offset_y = _crop(rows, width, height)
        message = (
            f"Map exceeded bounds ({width}x{height}); "
            f"cropped to {MAX_MAP_COLS}x{MAX_MAP_ROWS}."
        )
        warnings.append(message)
        logger.warning(f"{message} Offset: ({offset_x}, {offset_y})")

    rows, marker_count = _dedupe_markers(rows)
    if marker_count > 1:
        message = WARNING_MARKERS_MERGED.format(count=marker_count)
        warnings.append(message)
        logger.warning(message)

    if marker_count == 0:
        center_x = len(rows[0]) // 2
        center_y = len(rows) // 2
        replaced = rows[center_y][center_x]
        rows = replace_cell(rows, center_x, center_y, PLAYER_GLYPH)
        warnings.append(WARNING_MARKER_INJECTED)
        logger.warning(f"{WARNING_MARKER_INJECTED} Position: ({center_x}, {center_y})")
        if is_blocking(replaced):
            # The marker may now be walled in.
            message = (
                f"Injected player marker overwrote a {classify_glyph(replaced).value} "
                f"glyph '{replaced}'."
            )
            warnings.append(message)
            logger.warning(message)

    return NormalizedMap(
        rows=rows, warnings=warnings, offset_x=offset_x, offset_y=offset_y
    )
