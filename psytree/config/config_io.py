"""
Configuration file I/O for saving and loading runnable trees.

File format (JSON):

    {
        "settings": { ...RunnerSettings fields... },
        "tree": { ...node description, see tree_config... }
    }
"""

import json
import os
from typing import Any, Dict, List, Tuple
import logging

from ..execution.runnable import Runnable
from .settings import RunnerSettings
from .tree_config import node_from_dict, node_to_dict, validate_tree

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ('tree',)


def _read_json(filepath: str) -> Dict[str, Any]:
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    with open(filepath, 'r', encoding='utf-8') as f:
        try:
            config_dict = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {filepath}: {e}") from e

    if not isinstance(config_dict, dict):
        raise ValueError(f"{filepath}: top level must be a JSON object")
    return config_dict


def load_config(filepath: str) -> Tuple[RunnerSettings, Runnable]:
    """
    Load settings and tree from a JSON configuration file.

    Args:
        filepath: Path to JSON configuration file

    Returns:
        (settings, root)

    Raises:
        FileNotFoundError: File does not exist
        ValueError: Invalid JSON or invalid structure
    """
    config_dict = _read_json(filepath)

    for key in REQUIRED_KEYS:
        if key not in config_dict:
            raise ValueError(f"{filepath}: missing required key '{key}'")

    settings = RunnerSettings.from_dict(config_dict.get('settings'))
    root = node_from_dict(config_dict['tree'])

    logger.info(f"Configuration loaded from {filepath}")
    return settings, root


def save_config(filepath: str, settings: RunnerSettings, root: Runnable):
    """
    Save settings and tree to a JSON configuration file.

    Args:
        filepath: Path where JSON file should be saved
        settings: Run settings
        root: Root of the tree (every leaf must be serializable)
    """
    config_dict = {
        'settings': settings.to_dict(),
        'tree': node_to_dict(root),
    }

    # Ensure directory exists
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(filepath, 'w', encoding='utf-8') as f:
        json.dump(config_dict, f, indent=2, ensure_ascii=False)

    logger.info(f"Configuration saved to {filepath}")


def validate_config_file(filepath: str) -> Tuple[bool, List[str]]:
    """
    Validate a configuration file.

    Args:
        filepath: Path to JSON configuration file

    Returns:
        Tuple of (valid: bool, errors: list[str])
    """
    errors = []

    try:
        config_dict = _read_json(filepath)
    except (FileNotFoundError, ValueError) as e:
        return False, [str(e)]

    for key in REQUIRED_KEYS:
        if key not in config_dict:
            errors.append(f"Missing required key: {key}")
    if errors:
        return False, errors

    try:
        settings = RunnerSettings.from_dict(config_dict.get('settings'))
        errors.extend(f"settings: {e}" for e in settings.validate())
        root = node_from_dict(config_dict['tree'])
        errors.extend(validate_tree(root))
    except (ValueError, TypeError) as e:
        errors.append(f"Validation error: {e}")

    return len(errors) == 0, errors
