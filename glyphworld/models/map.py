"""
Map models - normalized local map grids.

A NormalizedMap is the only form of map the engine works with: rectangular,
bounded and holding exactly one player marker. Raw map text from the turn
collaborator is converted by `glyphworld.engine.grid.normalize_map`.

Example:
    >>> nmap = NormalizedMap(rows=["#.#", "#@#"], offset_x=0, offset_y=0)
    >>> nmap.width, nmap.height
    (3, 2)
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class NormalizedMap(BaseModel):
    """A sanitized local map plus the diagnostics produced while building it.

    Attributes:
        rows: Equal-length rows of single-character cells
        warnings: Non-fatal diagnostics (fallback room, crop, injected marker)
        offset_x: Columns cropped from the left of the source map
        offset_y: Rows cropped from the top of the source map
    """

    rows: list[str]
    warnings: list[str] = Field(default_factory=list)
    offset_x: int = 0
    offset_y: int = 0

    @property
    def width(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    @property
    def height(self) -> int:
        return len(self.rows)

    @property
    def text(self) -> str:
        """The map as newline-joined text."""
        return "\n".join(self.rows)

    @property
    def warning(self) -> str | None:
        """All warnings as a single string, or None when clean."""
        return " ".join(self.warnings) if self.warnings else None
