"""
YAML settings loader.

Example ``treehash.yaml``::

    treehash:
      algorithm: blake2b
      chunk_size: 4096
      max_workers: 8
      strict: true
"""

from pathlib import Path
from typing import Any, Union

import structlog
import yaml

from treehash.models import HashConfig

logger = structlog.get_logger(__name__)

ROOT_KEY = "treehash"


def load_config(config_path: Union[str, Path]) -> HashConfig:
    """
    Load and validate a YAML settings file.

    Args:
        config_path: YAML file with a ``treehash`` root key

    Returns:
        Validated HashConfig

    Raises:
        FileNotFoundError: File does not exist
        ValueError: Missing root key
        pydantic.ValidationError: Invalid values
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"treehash config not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict) or ROOT_KEY not in raw:
        raise ValueError(f"Invalid treehash config: missing '{ROOT_KEY}' root key")

    section = raw[ROOT_KEY] or {}
    if not isinstance(section, dict):
        raise ValueError(f"Invalid treehash config: '{ROOT_KEY}' must be a mapping")

    config = HashConfig(**section)
    logger.info("treehash_config_loaded", config_path=str(path), algorithm=config.algorithm)
    return config


def merge_overrides(config: HashConfig, **overrides: Any) -> HashConfig:
    """Return ``config`` with the non-None ``overrides`` applied (validated)."""
    values = config.model_dump()
    values.update({key: value for key, value in overrides.items() if value is not None})
    return HashConfig(**values)
