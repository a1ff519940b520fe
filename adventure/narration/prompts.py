from __future__ import annotations

from functools import lru_cache
from pathlib import Path

# adventure/narration/prompts.py -> project root
PROMPTS_DIR = Path(__file__).resolve().parents[2] / "prompts"


class PromptLoadError(RuntimeError):
    pass


@lru_cache(maxsize=8)
def load_prompt(name: str, prompts_dir: Path = PROMPTS_DIR) -> str:
    """Read a narrator prompt from `prompts/`, normalised to end with one newline.

    Missing and blank files both raise `PromptLoadError`.
    """

    path = prompts_dir / name
    try:
        text = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError as e:
        raise PromptLoadError(f"Prompt not found: {path}") from e
    if not text:
        raise PromptLoadError(f"Prompt is empty: {path}")
    return text + "\n"
