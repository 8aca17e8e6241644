"""
Runnable base classes for the psytree framework.

Every member of an execution tree (tree nodes and the leaves beneath them)
inherits from Runnable. Composites that own ordered children inherit from
RunnableComposite.
"""

from typing import Any, Callable, List, Optional
import logging
import weakref

from .flow_signals import Checkpoint
from .result import describe_error

logger = logging.getLogger(__name__)


class Runnable:
    """
    Minimal start/run/finish/abort contract shared by all tree members.

    Lifecycle:
    1. start: set up state, invoke start_action
    2. run: do this unit of work (default: nothing)
    3. finish: invoke finish_action, tear down

    abort() may be called at any time and only stops the node from
    continuing; it never raises and performs no cleanup.
    """

    def __init__(self, name: str = ""):
        """
        Initialize runnable.

        Args:
            name: Human-readable name, used in logs and failure reports
        """
        self.name = name or type(self).__name__
        self.is_running: bool = False
        self.aborted: bool = False  # Set by abort(), reset by start()

        # Action hooks (no-argument callables, return value ignored)
        self.start_action: Optional[Callable[[], Any]] = None
        self.finish_action: Optional[Callable[[], Any]] = None

        # Non-owning link to the runnable currently invoking our run()
        self._caller_ref: Optional[weakref.ref] = None

    @property
    def caller(self) -> Optional['Runnable']:
        """The runnable that is currently running us, or None."""
        if self._caller_ref is None:
            return None
        return self._caller_ref()

    @caller.setter
    def caller(self, value: Optional['Runnable']):
        self._caller_ref = weakref.ref(value) if value is not None else None

    def start(self):
        """Mark as running and invoke the start action."""
        logger.debug(f"{self.name}: start")
        self.is_running = True
        self.aborted = False
        try:
            if self.start_action is not None:
                self.start_action()
        except BaseException:
            # Never started, so not running either
            self.is_running = False
            raise

    def run(self):
        """
        Do this unit of work.

        The default has no work of its own: start, then finish.
        """
        self.start()
        self.finish()

    def run_work(self, work: Callable[[], Any]) -> Any:
        """
        Run work between start() and finish().

        If work raises, finish() is still attempted and the original error is
        re-raised, even when finish() fails as well. Leaves use this as the
        body of their run().

        Args:
            work: No-argument callable doing the leaf's job

        Returns:
            Whatever work returned
        """
        self.start()
        try:
            outcome = work()
        except BaseException:
            self.attempt_finish()
            raise
        self.finish()
        return outcome

    def attempt_finish(self) -> Optional[BaseException]:
        """
        Call finish() as cleanup after a failure.

        An error from finish() is logged, not raised, so the failure that
        triggered the cleanup stays the one that propagates.

        Returns:
            The error raised by finish(), or None
        """
        try:
            self.finish()
        except Exception as finish_err:
            logger.warning(
                f"{type(self).__name__} named '{self.name}' failed to finish: "
                f"{describe_error(finish_err)}"
            )
            return finish_err
        return None

    def finish(self):
        """Invoke the finish action and mark as no longer running."""
        logger.debug(f"{self.name}: finish")
        try:
            if self.finish_action is not None:
                self.finish_action()
        finally:
            self.is_running = False

    def abort(self):
        """Stop running. Does not call finish()."""
        self.is_running = False
        self.aborted = True

    def check_flags(self, child: Optional['Runnable'] = None) -> Checkpoint:
        """
        Ask the nearest ancestor whether this runnable should keep going.

        Leaves call this from inside run() to add their own checkpoints.
        The question travels up the caller chain until it reaches a node
        that owns flow signals.

        Args:
            child: Runnable the checkpoint concerns (defaults to self)

        Returns:
            Checkpoint outcome (CONTINUE when nothing is linked above us)
        """
        caller = self.caller
        if caller is None:
            return Checkpoint.CONTINUE
        return caller.check_flags(child if child is not None else self)

    def __repr__(self):
        return f"{type(self).__name__}(name='{self.name}', running={self.is_running})"


class RunnableComposite(Runnable):
    """
    Runnable that owns an ordered list of child runnables.

    Insertion order is the canonical order of the children.
    """

    def __init__(self, name: str = ""):
        super().__init__(name)
        self.children: List[Runnable] = []

    def add_child(self, child: Runnable, index: Optional[int] = None) -> Runnable:
        """
        Add a child runnable.

        Args:
            child: Runnable instance to add
            index: Position to insert (None = append to end)

        Returns:
            The child, for chaining
        """
        if not isinstance(child, Runnable):
            raise TypeError(f"Children must be Runnable, got {type(child).__name__}")
        if child is self:
            raise ValueError(f"{self.name} cannot be its own child")

        if index is None:
            self.children.append(child)
        else:
            self.children.insert(index, child)
        return child

    def remove_child(self, child: Runnable):
        """
        Remove a child runnable.

        Args:
            child: Child instance to remove (ValueError if not a child)
        """
        self.children.remove(child)

    def remove_child_at(self, index: int):
        """
        Remove child at index.

        Args:
            index: Child index to remove
        """
        del self.children[index]

    def reorder_child(self, old_index: int, new_index: int):
        """
        Move child from old_index to new_index.

        Args:
            old_index: Current child index
            new_index: Target child index
        """
        child = self.children.pop(old_index)
        self.children.insert(new_index, child)

    def get_child(self, name: str) -> Optional[Runnable]:
        """
        Get first child with the given name.

        Returns:
            Child runnable or None if not found
        """
        for child in self.children:
            if child.name == name:
                return child
        return None
