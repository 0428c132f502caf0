"""Review guideline loader."""

from pathlib import Path
from typing import Any

import yaml


_DEFAULT_PATH = Path(__file__).parent / "default.yaml"

REQUIRED_KEYS = ("review_guidelines", "language_focus", "chat_prompt")


def load_guidelines(path: Path | None = None) -> dict[str, Any]:
    """Load review and chat prompt data from a YAML file.

    Args:
        path: Optional path to a guidelines YAML file.
              Defaults to default.yaml in this directory.

    Returns:
        Dictionary with the prompt templates and the issue/practice lists.

    Raises:
        FileNotFoundError: If the guidelines file does not exist.
        ValueError: If a required template is missing.
        yaml.YAMLError: If the file contains invalid YAML.
    """
    config_path = path or _DEFAULT_PATH

    if not config_path.exists():
        raise FileNotFoundError(f"Guidelines file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        config: dict[str, Any] = yaml.safe_load(f) or {}

    missing = [key for key in REQUIRED_KEYS if not config.get(key)]
    if missing:
        raise ValueError(f"Guidelines file {config_path} is missing: {', '.join(missing)}")

    return config
