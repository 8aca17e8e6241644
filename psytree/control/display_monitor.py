"""
Keeps pyglet stimulus windows responsive at checkpoints.

The tree runs on a single thread with no event loop of its own, so windows
only get serviced when something pumps them. Attaching a DisplayMonitor to a
node services its windows and the pyglet clock at every checkpoint,
including while the node is paused.

NOTE: pyglet is imported inside refresh(), not at module level, so that
importing psytree never touches the display system.
"""

from typing import Any, List, Sequence
import logging

logger = logging.getLogger(__name__)


class DisplayMonitor:
    """
    Monitor that services pyglet windows and the pyglet clock.

    Args:
        windows: pyglet windows to service (may be empty: clock only)
        redraw: Dispatch on_draw and flip each window on every refresh
    """

    def __init__(self, windows: Sequence[Any] = (), redraw: bool = True):
        self.windows: List[Any] = list(windows)
        self.redraw = redraw
        self.refresh_count: int = 0

    def add_window(self, window):
        self.windows.append(window)

    def refresh(self):
        """Tick the clock and dispatch pending window events."""
        import pyglet

        # Fire any callbacks scheduled on the pyglet clock
        pyglet.clock.tick()

        for window in list(self.windows):
            if getattr(window, 'has_exit', False):
                logger.debug("Dropping closed window from display monitor")
                self.windows.remove(window)
                continue

            window.switch_to()
            window.dispatch_events()
            if self.redraw:
                window.dispatch_event('on_draw')
                window.flip()

        self.refresh_count += 1

    def close(self):
        """Close every window still open."""
        for window in self.windows:
            window.close()
        self.windows.clear()
