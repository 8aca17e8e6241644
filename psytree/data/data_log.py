"""
DataLog class for the psytree framework.

Records what happened during a run (node starts, finishes, custom events)
and writes it to CSV. The execution engine never calls the log directly;
it is hooked in through start/finish actions.
"""

from typing import Any, Dict, List, Optional, Union
import logging
import os
import time
import weakref

import pandas as pd

from ..execution.runnable import Runnable

logger = logging.getLogger(__name__)

EVENT_COLUMNS = ['timestamp', 'node', 'event', 'iteration']


class DataLog:
    """
    Collects run events and writes them to CSV.

    Responsibilities:
    - Record node start/finish events (via attach())
    - Record custom events from leaves or action hooks
    - Write the event table (and a per-node summary) to disk

    Example:
        log = DataLog("data", session_name="sub-001")
        log.attach(root)
        finish_calls.add_call(log.save)   # write the file on the way out
        root.run()
    """

    def __init__(self, output_dir: Optional[str] = ".", session_name: str = "session"):
        """
        Initialize data log.

        Args:
            output_dir: Directory to save data files (None disables saving)
            session_name: Prefix for output file names
        """
        self.output_dir = output_dir
        self.session_name = session_name
        self.events: List[Dict[str, Any]] = []
        self.data_saving_enabled: bool = output_dir is not None
        self._attached: "weakref.WeakSet[Runnable]" = weakref.WeakSet()

        if self.data_saving_enabled:
            os.makedirs(output_dir, exist_ok=True)
            logger.debug(f"DataLog initialized (output: {output_dir}/{session_name})")
        else:
            logger.info("DataLog: data saving DISABLED (no output directory)")

    def log_event(self, node: Union[Runnable, str], event: str, **data):
        """
        Record one event.

        Args:
            node: Runnable (or its name) the event belongs to
            event: Event name (e.g. 'start', 'finish', 'response')
            **data: Extra columns for this row
        """
        if isinstance(node, Runnable):
            name = node.name
            iteration = getattr(node, 'iteration_count', None)
        else:
            name = str(node)
            iteration = None

        record = {
            'timestamp': time.time(),
            'node': name,
            'event': event,
            'iteration': iteration,
        }
        record.update(data)
        self.events.append(record)

    def attach(self, root: Runnable) -> int:
        """
        Log start and finish of every runnable in a tree.

        Runnables already attached to this log are left alone, so attaching
        the same tree twice does not double its events.

        Existing start/finish actions are kept: the start event is logged
        before the original start action runs, the finish event after the
        original finish action.

        Args:
            root: Root of the tree (any Runnable; composites are walked)

        Returns:
            Number of runnables newly attached
        """
        count = 0
        for node in _walk(root):
            if node in self._attached:
                continue
            self._wrap(node)
            self._attached.add(node)
            count += 1
        logger.debug(f"DataLog attached to {count} runnables under '{root.name}'")
        return count

    def _wrap(self, node: Runnable):
        node_ref = weakref.ref(node)
        previous_start = node.start_action
        previous_finish = node.finish_action

        def start_hook():
            # The iteration counter still holds the previous run here
            self.log_event(node_ref(), 'start', iteration=None)
            if previous_start is not None:
                previous_start()

        def finish_hook():
            if previous_finish is not None:
                previous_finish()
            self.log_event(node_ref(), 'finish')

        node.start_action = start_hook
        node.finish_action = finish_hook

    def to_frame(self) -> pd.DataFrame:
        """
        Get all events as a DataFrame.

        Returns:
            One row per event (standard columns first, extras after)
        """
        if not self.events:
            return pd.DataFrame(columns=EVENT_COLUMNS)
        df = pd.DataFrame(self.events)
        extras = [c for c in df.columns if c not in EVENT_COLUMNS]
        return df[EVENT_COLUMNS + extras]

    def summary(self) -> pd.DataFrame:
        """
        Count events per node.

        Returns:
            DataFrame indexed by node name, one column per event type
        """
        df = self.to_frame()
        if df.empty:
            return pd.DataFrame()
        return df.groupby(['node', 'event']).size().unstack(fill_value=0)

    def _get_output_filename(self, suffix: str) -> str:
        return os.path.join(self.output_dir, f"{self.session_name}_{suffix}.csv")

    def save(self) -> Optional[str]:
        """
        Write the event table to CSV.

        Usable as a no-argument finish action.

        Returns:
            Path of the written file, or None if nothing was written
        """
        if not self.data_saving_enabled:
            logger.info("DataLog: data saving disabled - no files will be written")
            return None

        if not self.events:
            logger.info("DataLog: no events to save")
            return None

        events_file = self._get_output_filename("events")
        self.to_frame().to_csv(events_file, index=False)
        logger.info(f"DataLog: saved {len(self.events)} events to {events_file}")
        return events_file

    def get_event_count(self, event: Optional[str] = None) -> int:
        """
        Number of events recorded (optionally of one type).
        """
        if event is None:
            return len(self.events)
        return sum(1 for record in self.events if record['event'] == event)

    def clear(self):
        """Clear all recorded events."""
        self.events.clear()

    def __repr__(self):
        return f"DataLog(session='{self.session_name}', events={len(self.events)})"


def _walk(root: Runnable):
    walk = getattr(root, 'walk', None)
    if walk is not None:
        yield from walk()
        return

    seen = set()
    stack = [root]
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        yield node
        stack.extend(reversed(getattr(node, 'children', [])))
