"""
Supervisory control for running trees.

- messages: command/update protocol (pause, resume, abort, skip, recalibrate)
- QueueMonitor: applies queued commands to flow signals at checkpoints
- CompositeMonitor: refreshes several monitors at once

The Tk control panel (control_panel.ControlPanel) and the pyglet display
monitor (display_monitor.DisplayMonitor) are imported from their modules
directly, so importing this package never touches a display.
"""

from .messages import (
    ControlMessage,
    MessageType,
    pause_command,
    resume_command,
    abort_command,
    skip_command,
    recalibrate_command,
)
from .monitor import CompositeMonitor, QueueMonitor

__all__ = [
    'ControlMessage',
    'MessageType',
    'pause_command',
    'resume_command',
    'abort_command',
    'skip_command',
    'recalibrate_command',
    'CompositeMonitor',
    'QueueMonitor',
]
