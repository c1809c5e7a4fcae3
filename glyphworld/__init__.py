"""glyphworld - map interpretation and spatial state for generated text worlds.

Packages:
- `engine/`: Grid normalization, position indexing, movement, narrative,
  scene projection and the turn loop.
- `models/`: Pydantic models shared by the engine, LLM and API layers.
- `llm/`: LiteLLM-backed turn collaborator and prompt loading.
- `api/`: FastAPI routers.
"""

__version__ = "0.1.0"
