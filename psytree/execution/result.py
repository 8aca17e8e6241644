"""
Result types for psytree runs.

A run either completes (possibly cut short by an abort) or fails. A failure
carries the primary error from child execution and, when the best-effort
finish() that followed also failed, the secondary cleanup error. The
primary error always wins propagation.
"""

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .runnable import Runnable


def describe_error(error: BaseException) -> str:
    """Render an exception as 'Type: message'."""
    message = str(error)
    if message:
        return f"{type(error).__name__}: {message}"
    return type(error).__name__


@dataclass
class RunFailure:
    """
    Failure recorded by a node whose iteration body raised.

    Attributes:
        node_name: Name of the node that recorded the failure
        error: Primary error (the one re-raised to the caller of run())
        cleanup_error: Error raised by the best-effort finish(), if any
    """
    node_name: str
    error: BaseException
    cleanup_error: Optional[BaseException] = None

    def format(self) -> str:
        """Two-tier, human-readable failure report."""
        text = f"'{self.node_name}' failed: {describe_error(self.error)}"
        if self.cleanup_error is not None:
            text += f"\n  and failed to finish: {describe_error(self.cleanup_error)}"
        return text


@dataclass
class RunResult:
    """
    Outcome of running a tree from its root.

    Attributes:
        completed: True if run() returned without raising
        aborted: True if the run ended early through an abort
        failure: Failure details when run() raised
        duration: Wall-clock duration in seconds
    """
    completed: bool
    aborted: bool = False
    failure: Optional[RunFailure] = None
    duration: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.completed and self.failure is None

    def raise_for_failure(self):
        """Re-raise the primary error, if there was one."""
        if self.failure is not None:
            raise self.failure.error


def find_origin(root: 'Runnable', error: BaseException) -> Optional['Runnable']:
    """
    Find the deepest node whose recorded failure carries this error.

    Every node the error passes through records it, so the deepest one is
    where it came from (or the nearest node above a failing leaf).

    Args:
        root: Root of the tree that was run
        error: Error raised out of root.run()

    Returns:
        Originating node, or None if no node recorded the error
    """
    best = None
    best_depth = -1

    seen = set()
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        failure = getattr(node, 'failure', None)
        if failure is not None and failure.error is error and depth > best_depth:
            best, best_depth = node, depth
        for child in getattr(node, 'children', []):
            stack.append((child, depth + 1))

    return best
