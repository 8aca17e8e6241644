"""
ExperimentRunner class for the psytree framework.

Top-level orchestrator: prepares a tree for running, runs it from the root
and packages the outcome as a RunResult.
"""

from typing import Any, Dict, List, Optional
import logging
import time

from .config.settings import RunnerSettings
from .config.tree_config import apply_settings, validate_tree
from .control.monitor import CompositeMonitor
from .data.data_log import DataLog
from .execution.flow_signals import Monitor
from .execution.result import RunFailure, RunResult, find_origin
from .execution.tree_node import TreeNode

logger = logging.getLogger(__name__)


class ExperimentRunner:
    """
    Runs a tree from its root.

    Responsibilities:
    - Apply run settings to every node
    - Attach monitors and the data log
    - Validate before running
    - Turn the outcome of root.run() into a RunResult
    - Forward pause/resume/abort/skip to the root's flow signals

    Lifecycle:
    1. __init__: wire settings, monitor, data log
    2. validate: check tree and settings
    3. run: execute root.run(), save data
    """

    def __init__(
        self,
        root: TreeNode,
        settings: Optional[RunnerSettings] = None,
        monitor: Optional[Monitor] = None,
        data_log: Optional[DataLog] = None,
    ):
        """
        Initialize runner.

        Args:
            root: Root node of the tree
            settings: Run settings (defaults if None)
            monitor: Extra monitor attached to the root (kept alongside any existing one)
            data_log: Data log attached to every node in the tree
        """
        if not isinstance(root, TreeNode):
            raise TypeError(f"Root must be a TreeNode, got {type(root).__name__}")

        self.root = root
        self.settings = settings if settings is not None else RunnerSettings()
        self.data_log = data_log
        self.last_result: Optional[RunResult] = None

        apply_settings(root, self.settings)

        if monitor is not None:
            self.attach_monitor(monitor)

        if data_log is not None:
            data_log.attach(root)

    def attach_monitor(self, monitor: Monitor):
        """Attach a monitor to the root, keeping any monitor already there."""
        if self.root.monitor is None:
            self.root.monitor = monitor
        elif isinstance(self.root.monitor, CompositeMonitor):
            self.root.monitor.add(monitor)
        else:
            self.root.monitor = CompositeMonitor([self.root.monitor, monitor])

    def validate(self) -> List[str]:
        """
        Validate settings and tree.

        Returns:
            List of error messages (empty if valid)
        """
        errors = [f"Settings: {e}" for e in self.settings.validate()]
        errors.extend(f"Tree: {e}" for e in validate_tree(self.root))
        return errors

    def run(self) -> RunResult:
        """
        Run the tree once from the root.

        Execution failures are not raised; they are logged and returned in
        the result. Ctrl+C aborts the run and is reported as a failure.

        Returns:
            RunResult

        Raises:
            RuntimeError: Validation failed (nothing was run)
        """
        errors = self.validate()
        if errors:
            for error in errors:
                logger.error(f"Validation error: {error}")
            raise RuntimeError(f"Run validation failed with {len(errors)} errors")

        logger.info(f"Starting run: {self.root.name}")
        start_time = time.monotonic()

        try:
            self.root.run()
            result = RunResult(completed=True, aborted=self.root.aborted)

        except KeyboardInterrupt as interrupt:
            logger.warning(f"Run of '{self.root.name}' interrupted by user")
            self.root.abort()
            result = RunResult(
                completed=False,
                aborted=True,
                failure=RunFailure(self.root.name, interrupt, self._finish_started()),
            )

        except Exception as e:
            result = RunResult(completed=False, failure=self._failure_for(e))
            logger.error(f"Run failed: {result.failure.format()}")

        finally:
            self._save_data()

        result.duration = time.monotonic() - start_time
        self.last_result = result

        if result.succeeded:
            state = "aborted" if result.aborted else "complete"
            logger.info(f"Run {state}: {self.root.name} ({result.duration:.1f}s)")
        return result

    def _failure_for(self, error: Exception) -> RunFailure:
        origin = find_origin(self.root, error)
        if origin is None:
            return RunFailure(self.root.name, error)

        # Report the originating node, but keep any cleanup error seen on the way up
        failure = RunFailure(origin.name, error, origin.failure.cleanup_error)
        if failure.cleanup_error is None and self.root.failure is not None:
            failure.cleanup_error = self.root.failure.cleanup_error
        return failure

    def _finish_started(self) -> Optional[BaseException]:
        """
        Finish every node that started but never finished, deepest first.

        Only needed after Ctrl+C, which skips the engine's own cleanup.

        Returns:
            The first error raised by a finish, if any
        """
        cleanup_error = None
        nodes = [node for node in self.root.walk() if isinstance(node, TreeNode)]
        for node in reversed(nodes):
            finish_err = node.attempt_finish()
            if cleanup_error is None:
                cleanup_error = finish_err
        return cleanup_error

    def _save_data(self):
        if self.data_log is None:
            return
        try:
            self.data_log.save()
        except OSError as e:
            logger.error(f"Failed to save data log: {e}")

    # ==================== CONTROL ====================

    def pause(self):
        """Pause at the root's next checkpoint."""
        self.root.signals.request_pause()
        logger.info("Pause requested")

    def resume(self):
        """Resume a paused run."""
        self.root.signals.resume()
        logger.info("Resuming")

    def abort(self):
        """Abort at the root's next checkpoint."""
        self.root.signals.request_abort()
        logger.info("Abort requested")

    def skip(self):
        """Skip the root's current child at the next checkpoint."""
        self.root.signals.request_skip()
        logger.info("Skip requested")

    def get_progress(self) -> Dict[str, Any]:
        """
        Get current run progress.

        Returns:
            Dictionary with progress information
        """
        return {
            'node': self.root.name,
            'iteration': self.root.iteration_count,
            'iterations': self.root.iterations,
            'running': self.root.is_running,
            'paused': self.root.signals.pause,
        }

    def __repr__(self):
        return f"ExperimentRunner(root='{self.root.name}', children={len(self.root.children)})"
