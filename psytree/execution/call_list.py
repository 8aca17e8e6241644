"""
CallList class for the psytree framework.

An ordered list of calls. Used as a start or finish action hook (the list
itself is a no-argument callable) or as a leaf in a tree.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

from .runnable import Runnable

logger = logging.getLogger(__name__)


@dataclass
class Call:
    """A single registered call."""
    name: str
    fn: Callable[..., Any]
    args: Tuple[Any, ...] = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)
    enabled: bool = True

    def __call__(self) -> Any:
        return self.fn(*self.args, **self.kwargs)


class CallList(Runnable):
    """
    Runs a sequence of registered calls.

    Example:
        start_calls = CallList("start")
        start_calls.add_call(screen.open, name="open screen")
        start_calls.add_call(tracker.connect, name="connect tracker")

        finish_calls = CallList("finish", invert_order=True)
        finish_calls.add_call(screen.close)       # runs last
        finish_calls.add_call(tracker.disconnect) # runs first

    Attributes:
        invert_order: Run calls last-added first
        always_running: When run as a leaf, keep repeating the calls until
            aborted or interrupted at a checkpoint
    """

    def __init__(self, name: str = "", invert_order: bool = False, always_running: bool = False):
        super().__init__(name)
        self.calls: List[Call] = []
        self.invert_order = invert_order
        self.always_running = always_running

    def add_call(self, fn: Callable[..., Any], *args, name: Optional[str] = None, **kwargs) -> Call:
        """
        Register a call.

        Args:
            fn: Callable to invoke
            *args: Positional arguments passed to fn
            name: Name used to find the call later (defaults to fn's name)
            **kwargs: Keyword arguments passed to fn

        Returns:
            The registered Call
        """
        if not callable(fn):
            raise TypeError(f"Call '{name}' is not callable: {fn!r}")
        if name is None:
            name = getattr(fn, '__name__', repr(fn))
        call = Call(name=name, fn=fn, args=args, kwargs=kwargs)
        self.calls.append(call)
        return call

    def remove_call(self, name: str):
        """Remove every call registered under name."""
        self.calls = [call for call in self.calls if call.name != name]

    def set_enabled(self, name: str, enabled: bool):
        """
        Enable or disable calls by name.

        Raises:
            KeyError: If no call has this name
        """
        matches = [call for call in self.calls if call.name == name]
        if not matches:
            raise KeyError(f"No call named '{name}' in {self.name}")
        for call in matches:
            call.enabled = enabled

    def run_calls(self) -> List[Any]:
        """
        Invoke every enabled call once, in list order (or reversed).

        Returns:
            Return values, in invocation order
        """
        calls = reversed(self.calls) if self.invert_order else self.calls
        results = []
        for call in calls:
            if not call.enabled:
                continue
            logger.debug(f"{self.name}: calling '{call.name}'")
            results.append(call())
        return results

    def __call__(self) -> List[Any]:
        return self.run_calls()

    def run(self):
        """Run the calls as a tree leaf."""
        self.run_work(self._repeat_calls)

    def _repeat_calls(self):
        while True:
            self.run_calls()
            if not (self.always_running and self.is_running):
                break
            if self.check_flags():
                break

    def __len__(self):
        return len(self.calls)

    def __repr__(self):
        return f"CallList(name='{self.name}', calls={len(self.calls)}, inverted={self.invert_order})"
