"""
Configuration for psytree runs.

- RunnerSettings: how a tree is run (pause interval, seed, logging, output)
- tree_config: declarative tree descriptions and the leaf registry
- config_io: JSON load/save/validate
"""

from .settings import RunnerSettings
from .tree_config import (
    LEAF_TYPES,
    apply_settings,
    node_from_dict,
    node_to_dict,
    register_leaf_type,
    validate_tree,
)
from .config_io import load_config, save_config, validate_config_file

__all__ = [
    'RunnerSettings',
    'LEAF_TYPES',
    'apply_settings',
    'node_from_dict',
    'node_to_dict',
    'register_leaf_type',
    'validate_tree',
    'load_config',
    'save_config',
    'validate_config_file',
]
