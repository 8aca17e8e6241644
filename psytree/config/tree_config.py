"""
Declarative tree descriptions.

A tree is described as nested dicts (usually loaded from JSON):

    {
        "name": "session",
        "iterations": 1,
        "children": [
            {"name": "block", "iterations": 20, "iteration_method": "random",
             "children": [
                {"type": "TimedLeaf", "name": "fixation", "duration": 0.5},
                {"type": "TimedLeaf", "name": "stimulus", "duration": 1.0}
             ]}
        ]
    }

Entries without a "type" (or with type "TreeNode") are tree nodes; other
entries are looked up in the leaf registry.
"""

from typing import Any, Callable, Dict, List, Optional, Type
import logging
import random

from ..execution.leaves import TimedLeaf
from ..execution.runnable import Runnable
from ..execution.tree_node import IterationMethod, TreeNode
from .settings import RunnerSettings

logger = logging.getLogger(__name__)

NODE_TYPE = 'TreeNode'

# Leaf registry for deserialization
LEAF_TYPES: Dict[str, Type[Runnable]] = {
    'TimedLeaf': TimedLeaf,
}


def register_leaf_type(type_name: str, leaf_class: Type[Runnable]):
    """
    Make a leaf class available to node_from_dict().

    The class must provide a from_dict(data) classmethod.

    Args:
        type_name: Value of the "type" key that selects this class
        leaf_class: Runnable subclass
    """
    if not hasattr(leaf_class, 'from_dict'):
        raise TypeError(f"{leaf_class.__name__} has no from_dict() and cannot be registered")
    if type_name == NODE_TYPE:
        raise ValueError(f"'{NODE_TYPE}' is reserved for tree nodes")
    LEAF_TYPES[type_name] = leaf_class


def node_from_dict(data: Dict[str, Any], registry: Optional[Dict[str, Type[Runnable]]] = None) -> Runnable:
    """
    Build a runnable (usually a whole tree) from a dict.

    Args:
        data: Node or leaf description
        registry: Leaf types to use (defaults to LEAF_TYPES)

    Returns:
        TreeNode or leaf instance

    Raises:
        ValueError: Unknown type or invalid field value
        TypeError: Wrongly typed structure
    """
    if not isinstance(data, dict):
        raise TypeError(f"Node description must be a dict, got {type(data).__name__}")

    registry = LEAF_TYPES if registry is None else registry
    node_type = data.get('type', NODE_TYPE)

    if node_type != NODE_TYPE:
        if node_type not in registry:
            raise ValueError(f"Unknown leaf type: {node_type}")
        return registry[node_type].from_dict(data)

    iterations = data.get('iterations', 1)
    if isinstance(iterations, bool) or not isinstance(iterations, int):
        raise ValueError(f"Node '{data.get('name', '')}': iterations must be an integer, got {iterations!r}")

    node = TreeNode(
        name=data.get('name', ''),
        iterations=iterations,
        iteration_method=IterationMethod.parse(data.get('iteration_method', 'sequential')),
        node_data=data.get('node_data'),
        checkpoint_children=bool(data.get('checkpoint_children', True)),
        seed=data.get('seed'),
    )

    children = data.get('children', [])
    if not isinstance(children, list):
        raise TypeError(f"Node '{node.name}': children must be a list")
    for child_data in children:
        node.add_child(node_from_dict(child_data, registry))

    return node


def node_to_dict(node: Runnable) -> Dict[str, Any]:
    """
    Describe a runnable (and its subtree) as a dict.

    Raises:
        TypeError: A leaf in the tree cannot be serialized
    """
    if isinstance(node, TreeNode):
        data = {
            'name': node.name,
            'iterations': node.iterations,
            'iteration_method': node.iteration_method.value,
            'children': [node_to_dict(child) for child in node.children],
        }
        if node.node_data is not None:
            data['node_data'] = node.node_data
        if not node.checkpoint_children:
            data['checkpoint_children'] = False
        return data

    to_dict: Optional[Callable[[], Dict[str, Any]]] = getattr(node, 'to_dict', None)
    if to_dict is None:
        raise TypeError(f"Cannot serialize {type(node).__name__} '{node.name}'")
    return to_dict()


def validate_tree(root: Runnable) -> List[str]:
    """
    Validate every node and leaf in a tree.

    Returns:
        List of error messages (empty if valid)
    """
    errors = []
    nodes = root.walk() if isinstance(root, TreeNode) else [root]
    for node in nodes:
        if isinstance(node, TreeNode) and node.iterations > 0 and not node.children:
            logger.debug(f"Node '{node.name}' has no children (start/finish only)")

        validate = getattr(node, 'validate', None)
        if validate is not None:
            errors.extend(f"{node.name}: {e}" for e in validate())
    return errors


def apply_settings(root: Runnable, settings: RunnerSettings):
    """
    Push run settings down to every TreeNode in a tree.

    With a seed, every node gets its own generator derived from it, so the
    random orders of a given tree are reproducible.
    """
    master = random.Random(settings.seed) if settings.seed is not None else None
    nodes = root.walk() if isinstance(root, TreeNode) else []

    for node in nodes:
        if not isinstance(node, TreeNode):
            continue
        node.pause_interval = settings.pause_interval
        node.checkpoint_children = node.checkpoint_children and settings.checkpoint_children
        if master is not None:
            node.rng = random.Random(master.getrandbits(32))
