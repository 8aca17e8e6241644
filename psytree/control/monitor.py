"""
Monitors that turn controller commands into flow signals.

A monitor is refreshed at every checkpoint of the node it is attached to.
Because refreshes happen on the single experiment thread, commands are
applied to FlowSignals only between units of work, never concurrently.
"""

from typing import Any, Dict, List, Optional, Sequence
import logging
import queue

from ..execution.flow_signals import Calibrator, Monitor
from ..execution.tree_node import TreeNode
from .messages import ControlMessage, MessageType, progress_message

logger = logging.getLogger(__name__)


class QueueMonitor:
    """
    Applies commands from a queue to a tree's flow signals.

    Works with queue.Queue or multiprocessing.Queue, so the controller can
    live in another thread or another process (e.g. a GUI).

    Example:
        commands = multiprocessing.Queue()
        root.monitor = QueueMonitor(root, commands)
        # elsewhere: commands.put(pause_command())
    """

    def __init__(self, root: TreeNode, command_queue, calibrator: Optional[Calibrator] = None,
                 progress_queue=None):
        """
        Initialize queue monitor.

        Args:
            root: Root of the tree (commands without a target go here)
            command_queue: Queue of serialized ControlMessage dicts
            calibrator: Collaborator used for RECALIBRATE commands
            progress_queue: Optional queue to receive progress updates
        """
        self.root = root
        self.command_queue = command_queue
        self.calibrator = calibrator
        self.progress_queue = progress_queue
        self.commands_applied: int = 0
        self._last_progress = None

    def refresh(self):
        """Drain pending commands without blocking, then report progress."""
        while True:
            try:
                msg_dict = self.command_queue.get_nowait()
            except queue.Empty:
                break
            self.handle(msg_dict)

        self._post_progress()

    def handle(self, msg_dict: Dict[str, Any]) -> bool:
        """
        Apply one serialized command.

        Returns:
            True if the command was applied
        """
        try:
            msg = ControlMessage.from_dict(msg_dict)
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Ignoring malformed control message {msg_dict!r}: {e}")
            return False

        if not msg.is_command:
            logger.warning(f"Ignoring non-command message '{msg.type.value}'")
            return False

        node = self._resolve(msg.target)
        if node is None:
            logger.warning(f"Ignoring '{msg.type.value}' for unknown node '{msg.target}'")
            return False

        signals = node.signals
        if msg.type == MessageType.PAUSE:
            signals.request_pause()
        elif msg.type == MessageType.RESUME:
            signals.resume()
        elif msg.type == MessageType.ABORT:
            signals.request_abort()
        elif msg.type == MessageType.SKIP:
            signals.request_skip()
        elif msg.type == MessageType.RECALIBRATE:
            if self.calibrator is None:
                logger.warning(f"Ignoring recalibrate for '{node.name}': no calibrator configured")
                return False
            signals.request_recalibration(self.calibrator)

        logger.info(f"Received {msg.type.value.upper()} command for '{node.name}'")
        self.commands_applied += 1
        return True

    def _resolve(self, target: Optional[str]) -> Optional[TreeNode]:
        if target is None or target == self.root.name:
            return self.root
        for node in self.root.walk():
            if isinstance(node, TreeNode) and node.name == target:
                return node
        return None

    def _post_progress(self):
        if self.progress_queue is None:
            return
        progress = (self.root.iteration_count, self.root.iterations)
        if progress == self._last_progress:
            return
        self._last_progress = progress
        self.progress_queue.put(progress_message(self.root.name, *progress))


class CompositeMonitor:
    """Refreshes several monitors, in order."""

    def __init__(self, monitors: Optional[Sequence[Monitor]] = None):
        self.monitors: List[Monitor] = list(monitors or [])

    def add(self, monitor: Monitor):
        self.monitors.append(monitor)

    def refresh(self):
        for monitor in self.monitors:
            monitor.refresh()
