"""
psytree: organize long-running procedures (behavioral experiments) as trees
of runnable nodes, and run them top-down-then-bottom-up with cooperative
pause/skip/abort control.
"""

from .execution import (
    CallList,
    CallableLeaf,
    Checkpoint,
    FlowSignals,
    IterationMethod,
    Runnable,
    RunnableComposite,
    RunFailure,
    RunResult,
    TimedLeaf,
    TreeNode,
    create_top_node,
)
from .runner import ExperimentRunner

__version__ = '1.0.0'

__all__ = [
    'CallList',
    'CallableLeaf',
    'Checkpoint',
    'FlowSignals',
    'IterationMethod',
    'Runnable',
    'RunnableComposite',
    'RunFailure',
    'RunResult',
    'TimedLeaf',
    'TreeNode',
    'create_top_node',
    'ExperimentRunner',
]
