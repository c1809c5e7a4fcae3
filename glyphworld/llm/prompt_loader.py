"""
Prompt Loader - Reads prompt templates from text files.

Prompts live in subdirectories of `prompts/` (currently only `turn/`).
Files are cached and re-read automatically when modified on disk, so
prompts can be tuned while a server is running.
"""

import logging
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_PROMPTS_DIR = Path(__file__).parent / "prompts"


class PromptLoader:
    """Loads and caches prompt templates with hot reloading."""

    def __init__(self, prompts_dir: Optional[Path] = None):
        self.prompts_dir = Path(prompts_dir or DEFAULT_PROMPTS_DIR)
        self._cache: dict[str, str] = {}
        self._mtimes: dict[str, float] = {}

    def _path(self, category: str, filename: str) -> Path:
        return self.prompts_dir / category / filename

    def get_prompt(self, category: str, filename: str, reload: bool = False) -> str:
        """
        Get a prompt, re-reading the file if it changed since the last load.

        Raises:
            FileNotFoundError: If the prompt was never loaded and the file is missing
        """
        key = f"{category}/{filename}"
        path = self._path(category, filename)

        if not path.exists():
            if key in self._cache:
                logger.warning(f"Prompt file deleted but using cached version: {key}")
                return self._cache[key]
            raise FileNotFoundError(f"Prompt file not found: {path}")

        mtime = path.stat().st_mtime
        if reload or key not in self._cache or mtime > self._mtimes.get(key, 0):
            if key in self._cache:
                logger.info(f"Hot reloading modified prompt: {key}")
            self._cache[key] = path.read_text(encoding="utf-8")
            self._mtimes[key] = mtime

        return self._cache[key]

    def render(self, category: str, filename: str, **values: Any) -> str:
        """Load a prompt and fill its `{placeholders}`."""
        return self.get_prompt(category, filename).format(**values)

    def clear(self):
        self._cache.clear()
        self._mtimes.clear()


_loader: Optional[PromptLoader] = None


def get_loader() -> PromptLoader:
    """Get the global prompt loader instance."""
    global _loader
    if _loader is None:
        _loader = PromptLoader()
    return _loader
