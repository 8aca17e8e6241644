"""
Convenience constructor for a standard top-level TreeNode.
"""

from typing import Optional, Tuple

from .call_list import CallList
from .flow_signals import Monitor
from .tree_node import TreeNode


def create_top_node(name: str, monitor: Optional[Monitor] = None, **kwargs) -> Tuple[TreeNode, CallList, CallList]:
    """
    Create a top-level node with call lists as its start and finish actions.

    The call lists can be filled in by separate configuration routines, so
    none of them needs to know what the others added. The finish list runs
    in reverse order, so teardown mirrors setup.

    Args:
        name: Node name
        monitor: Optional monitor refreshed at the node's checkpoints
        **kwargs: Other TreeNode constructor arguments

    Returns:
        (node, start_calls, finish_calls)

    Example:
        node, start_calls, finish_calls = create_top_node("session")
        start_calls.add_call(screen.open)
        finish_calls.add_call(screen.close)
    """
    start_calls = CallList(f"{name} start")
    start_calls.always_running = False

    finish_calls = CallList(f"{name} finish")
    finish_calls.always_running = False
    finish_calls.invert_order = True

    kwargs.setdefault('iterations', 1)  # Go once through the set of tasks
    node = TreeNode(name, monitor=monitor, **kwargs)
    node.start_action = start_calls
    node.finish_action = finish_calls

    return node, start_calls, finish_calls
