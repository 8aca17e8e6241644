"""
TreeNode class for the psytree framework.

A tree-like way to organize an experiment. Every level of organization
(trials, sets of trials, tasks, whole sessions) is a TreeNode, and calling
run() on the topmost node drives the whole experiment:

- The node runs its start action
- The node does zero or more iterations, each calling run() on every child
  in the order chosen by its iteration method. Each child repeats the same
  sequence with its own children.
- The node runs its finish action

Start actions therefore happen top-down and finish actions bottom-up. Leaves
may be any Runnable, not just TreeNode.
"""

from enum import Enum
from typing import Any, Iterator, List, Optional, Union
import logging
import random
import time

from .flow_signals import Checkpoint, FlowSignals, Monitor
from .result import RunFailure, describe_error
from .runnable import Runnable, RunnableComposite

logger = logging.getLogger(__name__)

DEFAULT_PAUSE_INTERVAL = 0.01  # seconds between pause re-checks


class IterationMethod(Enum):
    """Order in which a node runs through its children each iteration."""

    SEQUENTIAL = 'sequential'
    RANDOM = 'random'

    @classmethod
    def parse(cls, value: Union[str, 'IterationMethod']) -> 'IterationMethod':
        """Accept an IterationMethod or its (case-insensitive) name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ', '.join(m.value for m in cls)
            raise ValueError(f"Unknown iteration method '{value}' (expected one of: {valid})")


class TreeNode(RunnableComposite):
    """
    Runnable composite that repeats its children and honors flow signals.

    Attributes:
        iterations: Number of passes through the children (<= 0 disables the node)
        iteration_count: 1-based index of the current pass (0 before the first)
        iteration_method: SEQUENTIAL or RANDOM child order
        node_data: Opaque payload for whoever configures the node
        signals: Abort/pause/skip/recalibrate flags for this node
        monitor: Optional display/monitor refreshed at every checkpoint
        failure: Failure recorded by the most recent run, if any

    Example:
        session = TreeNode("session")
        block = session.new_child_node("block")
        block.iterations = 20
        block.iteration_method = 'random'
        block.add_child(TimedLeaf("fixation", duration=0.5))
        session.run()
    """

    def __init__(
        self,
        name: str = "",
        iterations: int = 1,
        iteration_method: Union[str, IterationMethod] = IterationMethod.SEQUENTIAL,
        node_data: Any = None,
        monitor: Optional[Monitor] = None,
        pause_interval: float = DEFAULT_PAUSE_INTERVAL,
        checkpoint_children: bool = True,
        propagate_checks: bool = True,
        seed: Optional[int] = None,
    ):
        """
        Initialize tree node.

        Args:
            name: Human-readable node name
            iterations: Number of times to run through the children
            iteration_method: 'sequential' or 'random'
            node_data: Opaque payload (trial/task data)
            monitor: Optional monitor refreshed at checkpoints
            pause_interval: Seconds to sleep between pause re-checks
            checkpoint_children: Evaluate a checkpoint after every child run
            propagate_checks: Pass uneventful checkpoints on to our own caller,
                so signals set on any ancestor reach polling leaves
            seed: Seed for the random child order (None = unseeded)
        """
        super().__init__(name)
        self.iterations = iterations
        self.iteration_count: int = 0
        self.iteration_method = iteration_method
        self.node_data = node_data

        # Cooperative control
        self.signals = FlowSignals()
        self.monitor = monitor
        self.pause_interval = pause_interval
        self.checkpoint_children = checkpoint_children
        self.propagate_checks = propagate_checks

        self.rng = random.Random(seed)

        # Runtime state
        self.failure: Optional[RunFailure] = None
        self._started = False

    @property
    def iteration_method(self) -> IterationMethod:
        return self._iteration_method

    @iteration_method.setter
    def iteration_method(self, value: Union[str, IterationMethod]):
        self._iteration_method = IterationMethod.parse(value)

    def new_child_node(self, name: str = "", **kwargs) -> 'TreeNode':
        """
        Create a new TreeNode and add it beneath this node.

        The child inherits this node's pause interval unless given one.

        Args:
            name: Name for the new child node
            **kwargs: Other TreeNode constructor arguments

        Returns:
            The new child node
        """
        kwargs.setdefault('pause_interval', self.pause_interval)
        child = TreeNode(name, **kwargs)
        self.add_child(child)
        return child

    # ==================== LIFECYCLE ====================

    def start(self):
        super().start()
        self._started = True

    def finish(self):
        """Tear down, but only once per started run."""
        if not self._started:
            return
        self._started = False
        super().finish()

    def abort(self):
        """Stop this node and, recursively, every descendant."""
        self.is_running = False
        self.aborted = True
        for child in self.children:
            child.abort()

    def child_order(self, n_children: Optional[int] = None) -> List[int]:
        """
        Child indices for one iteration.

        RANDOM draws a fresh permutation on every call.

        Args:
            n_children: Number of children (defaults to current child count)

        Returns:
            List of 0-based child indices
        """
        if n_children is None:
            n_children = len(self.children)
        if self.iteration_method is IterationMethod.RANDOM:
            return self.rng.sample(range(n_children), n_children)
        return list(range(n_children))

    def run(self):
        """
        Recursively run this node and its subtree.

        Errors raised by start() propagate without a finish attempt. Errors
        raised while running children are reported, finish() is attempted as
        cleanup, and the original error is re-raised even if finish() fails
        too.
        """
        # Zero iterations disables the node entirely
        if self.iterations <= 0:
            return

        self.failure = None
        self.start()

        try:
            self._run_iterations()

        except Exception as recur_err:
            logger.warning(
                f"{type(self).__name__} named '{self.name}' failed: {describe_error(recur_err)}"
            )
            self.failure = RunFailure(self.name, recur_err)

            # Attempt to clean up despite error
            self.failure.cleanup_error = self.attempt_finish()
            raise

        self.finish()

    def _run_iterations(self):
        self.iteration_count = 0

        while self.iteration_count < self.iterations and self.is_running:
            self.iteration_count += 1

            # Snapshot so the order is fixed for this iteration
            children = list(self.children)
            order = self.child_order(len(children))
            logger.debug(
                f"{self.name}: iteration {self.iteration_count}/{self.iterations} "
                f"({self.iteration_method.value})"
            )

            for index in order:
                # Checked before every child so an abort stops the remaining siblings
                if not self.is_running:
                    break

                child = children[index]
                self._run_child(child)

                if self.checkpoint_children:
                    self.check_flags(child)

    def _run_child(self, child: Runnable):
        logger.debug(f"{self.name}: running child '{child.name}'")
        child.caller = self
        try:
            child.run()
        finally:
            child.caller = None

    # ==================== FLOW SIGNALS ====================

    def check_flags(self, child: Optional[Runnable] = None) -> Checkpoint:
        """
        Evaluate this node's flow signals.

        In order: refresh the monitor, wait out a pause, serve a pending
        recalibration, then handle abort (whole subtree) or skip (named child
        only). Abort wins over pause.

        Args:
            child: Child about to run or just run (target of a skip)

        Returns:
            Checkpoint outcome
        """
        self._refresh_monitor()

        # Pause: hold here until resumed or aborted
        if self.signals.pause and not self.signals.abort:
            logger.info(f"{self.name}: paused")
            while self.signals.pause and not self.signals.abort:
                time.sleep(self.pause_interval)
                self._refresh_monitor()
            logger.info(f"{self.name}: resumed")

        # One-shot recalibration
        calibrator = self.signals.recalibrate
        if calibrator is not None:
            self.signals.recalibrate = None
            logger.info(f"{self.name}: recalibrating")
            calibrator.calibrate()

        if self.signals.abort:
            self.signals.abort = False
            logger.info(f"{self.name}: aborted")
            self.abort()
            return Checkpoint.ABORTED

        if self.signals.skip:
            self.signals.skip = False
            if child is not None:
                logger.info(f"{self.name}: skipping '{child.name}'")
                child.abort()
            return Checkpoint.SKIPPED

        # Nothing here, so let the ancestors have their say
        if self.propagate_checks and self.caller is not None:
            return self.caller.check_flags(self)

        return Checkpoint.CONTINUE

    def _refresh_monitor(self):
        if self.monitor is not None:
            self.monitor.refresh()

    # ==================== INSPECTION ====================

    def walk(self) -> Iterator[Runnable]:
        """Depth-first iteration over this node and all descendants."""
        seen = set()
        stack: List[Runnable] = [self]
        while stack:
            node = stack.pop()
            if id(node) in seen:
                continue
            seen.add(id(node))
            yield node
            stack.extend(reversed(getattr(node, 'children', [])))

    def describe(self, indent: str = "  ") -> str:
        """
        Text outline of the tree beneath this node.

        Returns:
            One line per node, indented by depth
        """
        lines = []

        def visit(node, depth):
            label = f"{indent * depth}{node.name}"
            if isinstance(node, TreeNode):
                label += f" [x{node.iterations}, {node.iteration_method.value}]"
            else:
                label += f" ({type(node).__name__})"
            lines.append(label)
            for child in getattr(node, 'children', []):
                visit(child, depth + 1)

        visit(self, 0)
        return "\n".join(lines)

    def __repr__(self):
        return (
            f"TreeNode(name='{self.name}', children={len(self.children)}, "
            f"iterations={self.iterations}, method='{self.iteration_method.value}')"
        )
