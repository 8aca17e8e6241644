"""
Execution module for the psytree framework.

This module contains the hierarchical execution engine:
- Runnable: start/run/finish/abort contract shared by every tree member
- TreeNode: composite that repeats its children and honors flow signals
- FlowSignals: per-node abort/pause/skip/recalibrate flags
- CallList: ordered call list used as start/finish action hooks
- create_top_node: standard top-level node with start/finish call lists
"""

from .flow_signals import Checkpoint, FlowSignals
from .runnable import Runnable, RunnableComposite
from .tree_node import IterationMethod, TreeNode
from .call_list import CallList
from .factory import create_top_node
from .leaves import CallableLeaf, TimedLeaf
from .result import RunFailure, RunResult, find_origin

__all__ = [
    'Checkpoint',
    'FlowSignals',
    'Runnable',
    'RunnableComposite',
    'IterationMethod',
    'TreeNode',
    'CallList',
    'create_top_node',
    'CallableLeaf',
    'TimedLeaf',
    'RunFailure',
    'RunResult',
    'find_origin',
]
