"""Loading and filling the prompt text files shipped with the package."""
from pathlib import Path
from string import Template
import typing as t


PROMPTS_DIR = Path(__file__).resolve().parent


def load_prompt(prompt_name: str, prompts_dir: t.Optional[str] = None) -> str:
    """
    Load a prompt from a text file.

    Args:
        prompt_name: Name of the prompt file (without .txt extension)
        prompts_dir: Optional custom path to prompts directory.
                    Defaults to this package's directory.

    Returns:
        The content of the prompt file as a string.

    Raises:
        FileNotFoundError: If the prompt file doesn't exist.
    """
    prompt_file = Path(prompts_dir or PROMPTS_DIR) / f"{prompt_name}.txt"

    if not prompt_file.exists():
        raise FileNotFoundError(f"Prompt file not found: {prompt_file}")

    return prompt_file.read_text(encoding="utf-8")


def render_prompt(prompt_name: str, prompts_dir: t.Optional[str] = None, **values: t.Any) -> str:
    """
    Load a prompt template and substitute its $placeholders.

    Templates use string.Template syntax so that literal JSON braces in the
    prompt need no escaping.

    Raises:
        KeyError: If a placeholder has no value.
    """
    return Template(load_prompt(prompt_name, prompts_dir)).substitute(**values)
