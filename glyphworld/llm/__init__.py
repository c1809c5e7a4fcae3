"""LLM integration components.

- `client.py`: LiteLLM client wrapper (streaming completions)
- `prompt_loader.py`: Prompt template loading with hot reload
- `response_parser.py`: Tolerant JSON and partial-narrative parsing
- `turn_generator.py`: LLMTurnGenerator, the LiteLLM turn collaborator

Import the generator from its submodule:
    from glyphworld.llm.turn_generator import LLMTurnGenerator
"""

from glyphworld.llm.client import get_model_string, stream_completion
from glyphworld.llm.prompt_loader import get_loader
from glyphworld.llm.response_parser import extract_partial_narrative, parse_turn_json

__all__ = [
    "get_model_string",
    "stream_completion",
    "get_loader",
    "extract_partial_narrative",
    "parse_turn_json",
]
