"""Game engine: grid normalization, movement resolution, turn ingestion and scene projection.

Import directly from submodules:
    from glyphworld.engine.grid import normalize_map
    from glyphworld.engine.session import GameSession
"""
