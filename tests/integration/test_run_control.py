"""
Integration tests for supervising a running tree.

A controller on another thread sends commands through a queue; the tree
applies them at its checkpoints.
"""

import queue
import threading
import time

import pytest

from psytree.control.messages import (
    abort_command,
    pause_command,
    recalibrate_command,
    resume_command,
    skip_command,
)
from psytree.control.monitor import QueueMonitor
from psytree.execution.flow_signals import Checkpoint
from psytree.execution.leaves import CallableLeaf, TimedLeaf
from psytree.execution.tree_node import TreeNode
from psytree.runner import ExperimentRunner


def build_blocks(events):
    """root -> block_a, block_b; each block x2 -> trial leaf"""
    root = TreeNode("root", pause_interval=0.001)
    for block_name in ("block_a", "block_b"):
        block = root.new_child_node(block_name, iterations=2)
        block.add_child(CallableLeaf("trial", events.append, block_name))
    return root


class TestQueueCommands:
    """Commands queued before or during a run."""

    @pytest.mark.integration
    def test_queued_abort_stops_after_first_checkpoint(self, events):
        """An abort waiting in the queue is applied at the first checkpoint."""
        root = build_blocks(events)
        commands = queue.Queue()
        commands.put(abort_command())

        result = ExperimentRunner(root, monitor=QueueMonitor(root, commands)).run()

        assert result.aborted is True
        assert events == ["block_a"]

    @pytest.mark.integration
    def test_skip_command_targets_block(self, events):
        """Skipping the running block moves on to the next one."""
        root = build_blocks(events)
        commands = queue.Queue()
        monitor = QueueMonitor(root, commands)
        root.monitor = monitor

        # block_a's first trial asks the root to skip the running block
        block_a = root.get_child("block_a")
        block_a.remove_child_at(0)
        block_a.add_child(CallableLeaf(
            "trial", lambda: (events.append("block_a"), commands.put(skip_command()))
        ))

        result = ExperimentRunner(root).run()

        assert result.succeeded
        assert events == ["block_a", "block_b", "block_b"]

    @pytest.mark.integration
    def test_recalibration_served_once(self, events, mock_calibrator):
        """A recalibrate command calls the calibrator exactly once."""
        root = build_blocks(events)
        commands = queue.Queue()
        commands.put(recalibrate_command("block_b"))
        root.monitor = QueueMonitor(root, commands, calibrator=mock_calibrator)

        ExperimentRunner(root).run()

        mock_calibrator.calibrate.assert_called_once()
        assert events == ["block_a", "block_a", "block_b", "block_b"]


class TestControllerThread:
    """A controller on another thread, as a GUI or operator process would be."""

    @pytest.mark.integration
    @pytest.mark.slow
    def test_pause_then_resume_from_thread(self, events):
        """A paused run waits for a resume sent from another thread."""
        root = build_blocks(events)
        commands = queue.Queue()
        root.monitor = QueueMonitor(root, commands)
        commands.put(pause_command())

        resume_timer = threading.Timer(0.05, commands.put, args=(resume_command(),))
        start = time.monotonic()
        resume_timer.start()
        try:
            result = ExperimentRunner(root).run()
        finally:
            resume_timer.cancel()

        assert result.succeeded
        assert time.monotonic() - start >= 0.05
        assert events == ["block_a", "block_a", "block_b", "block_b"]

    @pytest.mark.integration
    @pytest.mark.slow
    def test_abort_interrupts_long_hold(self):
        """An abort from another thread cuts a long hold short."""
        root = TreeNode("root", pause_interval=0.001)
        block = root.new_child_node("block")
        hold = block.add_child(TimedLeaf("hold", duration=30.0, poll_interval=0.005))
        commands = queue.Queue()
        root.monitor = QueueMonitor(root, commands)

        abort_timer = threading.Timer(0.05, commands.put, args=(abort_command(),))
        abort_timer.start()
        try:
            result = ExperimentRunner(root).run()
        finally:
            abort_timer.cancel()

        assert result.aborted is True
        assert hold.interrupted is Checkpoint.ABORTED
        assert hold.elapsed < 5.0
