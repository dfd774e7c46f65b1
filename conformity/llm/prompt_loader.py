import json
from pathlib import Path

from conformity.llm.exceptions import LlmError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt_template(name: str, prompt_dir: Path | None = None) -> str:
    """Load a prompt template by file name.

    Args:
        name: File name inside the prompt directory, e.g. "sample_profile_prompt.txt".
        prompt_dir: Directory to read from. Defaults to the bundled prompts/.

    Returns:
        The raw template string with str.format placeholders.

    Raises:
        LlmError: if the file cannot be read.
    """
    path = (prompt_dir or _DEFAULT_PROMPT_DIR) / name
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise LlmError(f"Failed to load prompt template '{name}': {exc}") from exc


def load_json_schema(name: str, prompt_dir: Path | None = None) -> dict[str, object]:
    """Load and parse a JSON schema by file name.

    Raises:
        LlmError: if the file cannot be read or is not a JSON object.
    """
    path = (prompt_dir or _DEFAULT_PROMPT_DIR) / name
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise LlmError(f"Failed to load JSON schema '{name}': {exc}") from exc
    try:
        schema = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise LlmError(f"Invalid JSON schema '{name}': {exc}") from exc
    if not isinstance(schema, dict):
        raise LlmError(f"JSON schema '{name}' must be an object")
    return schema
