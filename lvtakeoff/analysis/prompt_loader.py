from pathlib import Path

from lvtakeoff.analysis.exceptions import PromptLoadError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"

LEGEND_PROMPT = "legend_prompt.txt"
GRID_COUNT_PROMPT = "grid_count_prompt.txt"
VALIDATION_PROMPT = "validation_prompt.txt"
QUICK_COUNT_PROMPT = "quick_count_prompt.txt"


def load_prompt_template(name: str, prompt_dir: Path | None = None) -> str:
    """Load a prompt template by file name.

    Args:
        name: File name inside the prompt directory.
        prompt_dir: Directory to read from. Defaults to the bundled prompts.

    Returns:
        The raw template string with ``str.format`` placeholders.

    Raises:
        PromptLoadError: if the file cannot be read.
    """
    path = (prompt_dir or _DEFAULT_PROMPT_DIR) / name
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PromptLoadError(f"Failed to load prompt template {name}: {exc}") from exc
