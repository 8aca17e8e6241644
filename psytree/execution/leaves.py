"""
Leaf runnables for psytree trees.

Leaves do the actual work beneath the tree nodes. Any Runnable subclass can
be a leaf; these cover the common cases of calling a function and holding
for a fixed time.
"""

from typing import Any, Callable, Dict, Optional
import logging
import time

from .flow_signals import Checkpoint
from .runnable import Runnable

logger = logging.getLogger(__name__)


class CallableLeaf(Runnable):
    """
    Leaf that calls a function once per run.

    The return value of the most recent call is kept in `result`.
    """

    def __init__(self, name: str, fn: Callable[..., Any], *args, **kwargs):
        """
        Initialize callable leaf.

        Args:
            name: Leaf name
            fn: Function to call on every run
            *args: Positional arguments for fn
            **kwargs: Keyword arguments for fn
        """
        super().__init__(name)
        if not callable(fn):
            raise TypeError(f"{name}: fn is not callable: {fn!r}")
        self.fn = fn
        self.args = args
        self.kwargs = kwargs
        self.result: Any = None
        self.run_count: int = 0

    def run(self):
        self.run_work(self._call)

    def _call(self):
        self.result = self.fn(*self.args, **self.kwargs)
        self.run_count += 1


class TimedLeaf(Runnable):
    """
    Leaf that holds for a fixed duration, polling checkpoints as it waits.

    Because polling goes through the caller chain, a pause, skip or abort
    requested on any ancestor takes effect within one poll interval instead
    of after the whole duration.
    """

    def __init__(self, name: str = "Hold", duration: float = 1.0, poll_interval: float = 0.01):
        """
        Initialize timed leaf.

        Args:
            name: Leaf name
            duration: Hold duration in seconds
            poll_interval: Seconds between checkpoints while holding
        """
        super().__init__(name)
        self.duration = duration
        self.poll_interval = poll_interval

        # Outcome of the most recent run
        self.elapsed: Optional[float] = None
        self.interrupted: Checkpoint = Checkpoint.CONTINUE

    def run(self):
        self.interrupted = self.run_work(self._hold)

    def _hold(self) -> Checkpoint:
        start_time = time.monotonic()
        end_time = start_time + self.duration
        outcome = Checkpoint.CONTINUE

        while self.is_running:
            remaining = end_time - time.monotonic()
            if remaining <= 0:
                break
            time.sleep(min(self.poll_interval, remaining))

            outcome = self.check_flags()
            if outcome:
                logger.debug(f"{self.name}: interrupted ({outcome.value})")
                break

        self.elapsed = time.monotonic() - start_time
        if outcome is Checkpoint.CONTINUE and not self.is_running:
            # Aborted directly, without a checkpoint reporting it
            outcome = Checkpoint.ABORTED
        return outcome

    def validate(self):
        """
        Validate leaf configuration.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []
        if self.duration < 0:
            errors.append(f"Duration must be non-negative, got {self.duration}")
        if self.poll_interval <= 0:
            errors.append(f"Poll interval must be positive, got {self.poll_interval}")
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': 'TimedLeaf',
            'name': self.name,
            'duration': self.duration,
            'poll_interval': self.poll_interval,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TimedLeaf':
        return cls(
            name=data.get('name', 'Hold'),
            duration=float(data.get('duration', 1.0)),
            poll_interval=float(data.get('poll_interval', 0.01)),
        )
