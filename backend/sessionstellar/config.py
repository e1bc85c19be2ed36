"""
Configuration module for SessionStellar.
Loads and validates configuration from a YAML file using Pydantic models.
"""

import os
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field

from .parser import MAX_INPUT_BYTES
from .signals import ScoringWeights


CONFIG_FILENAME = "sessionstellar.yaml"


class Config(BaseModel):
    """Main configuration model. Every field has a default."""
    scoring_weights: Optional[ScoringWeights] = None
    max_input_bytes: int = Field(default=MAX_INPUT_BYTES, gt=0)
    scores_dir: str = ".sessionstellar/scores"
    session_extensions: List[str] = Field(default_factory=lambda: [".md", ".txt", ".jsonl"])
    status_limit: int = Field(default=5, ge=1)
    max_workers: int = Field(default=4, ge=1)
    timeout: int = Field(default=30, gt=0)  # seconds per file


def load_config(path: str = CONFIG_FILENAME) -> Config:
    """
    Load and validate configuration from YAML file.

    Args:
        path: Path to configuration file (default: sessionstellar.yaml)

    Returns:
        Validated Config object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML syntax is invalid
        ValueError: If the file is empty or its structure is invalid
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Invalid YAML syntax in {path}: {e}")

    if data is None:
        raise ValueError(f"Configuration file {path} is empty")

    try:
        return Config(**data)
    except Exception as e:
        raise ValueError(f"Invalid configuration structure in {path}: {e}")


def find_config(root: Optional[str] = None) -> Config:
    """
    Load sessionstellar.yaml from a directory, or fall back to defaults.

    Args:
        root: Directory to look in (default: current working directory)

    Returns:
        Config loaded from the file, or Config() when there is no file
    """
    path = os.path.join(root or os.getcwd(), CONFIG_FILENAME)
    if not os.path.exists(path):
        return Config()
    return load_config(path)


def yaml_weight_provider(path: str):
    """
    Build an async weight provider backed by a YAML config file.

    The file is read on every call, so edits are picked up without a restart.

    Args:
        path: Path to a YAML file with an optional scoring_weights mapping

    Returns:
        Zero-argument coroutine function returning ScoringWeights or None
    """
    async def provider() -> Optional[ScoringWeights]:
        return load_config(path).scoring_weights

    return provider
