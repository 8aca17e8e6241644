"""
Flow signals for cooperative cancellation in psytree.

Each TreeNode owns one FlowSignals instance. Supervisory code (a control
panel, a command queue, a test) sets the flags; only the node's own
checkpoint reads and clears them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol


class Checkpoint(Enum):
    """Outcome of evaluating a checkpoint."""

    CONTINUE = "continue"  # Nothing happened, keep going
    ABORTED = "aborted"    # Node (and its subtree) was aborted
    SKIPPED = "skipped"    # Only the named child was aborted

    def __bool__(self):
        # Truthy when something interrupted the work
        return self is not Checkpoint.CONTINUE


class Calibrator(Protocol):
    """Collaborator invoked once per recalibration request."""

    def calibrate(self):
        ...


class Monitor(Protocol):
    """Live display/monitor handle refreshed at every checkpoint."""

    def refresh(self):
        ...


@dataclass
class FlowSignals:
    """
    Mutable per-node control flags.

    Attributes:
        abort: Stop this node and everything beneath it
        pause: Hold at the next checkpoint until resumed (or aborted)
        skip: Abort only the child being checked
        recalibrate: One-shot calibration request, cleared once served
    """
    abort: bool = False
    pause: bool = False
    skip: bool = False
    recalibrate: Optional[Calibrator] = None

    def request_abort(self):
        self.abort = True

    def request_pause(self):
        self.pause = True

    def resume(self):
        self.pause = False

    def request_skip(self):
        self.skip = True

    def request_recalibration(self, calibrator: Calibrator):
        """
        Ask for calibrator.calibrate() at the next checkpoint.

        Args:
            calibrator: Object exposing a no-argument calibrate()
        """
        self.recalibrate = calibrator

    def clear(self):
        """Reset every flag."""
        self.abort = False
        self.pause = False
        self.skip = False
        self.recalibrate = None

    def any_pending(self) -> bool:
        """True if any flag or request is set."""
        return self.abort or self.pause or self.skip or self.recalibrate is not None
