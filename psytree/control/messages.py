"""
Message protocol for supervising a running tree.

Defines the commands a controller (control panel, another process) sends to
a running experiment, and the updates the experiment sends back. All
messages serialize to plain dicts for multiprocessing.Queue transport.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class MessageType(Enum):
    """Message types for controller communication."""

    # Controller → experiment commands
    PAUSE = "pause"
    RESUME = "resume"
    ABORT = "abort"
    SKIP = "skip"
    RECALIBRATE = "recalibrate"

    # Experiment → controller updates
    PROGRESS = "progress"
    ERROR = "error"
    COMPLETE = "complete"


COMMAND_TYPES = frozenset({
    MessageType.PAUSE,
    MessageType.RESUME,
    MessageType.ABORT,
    MessageType.SKIP,
    MessageType.RECALIBRATE,
})


@dataclass
class ControlMessage:
    """
    Base message for controller communication.

    Attributes:
        type: Message type
        target: Name of the node a command is addressed to (None = root)
        data: Optional payload
    """
    type: MessageType
    target: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    @property
    def is_command(self) -> bool:
        return self.type in COMMAND_TYPES

    def to_dict(self) -> Dict[str, Any]:
        """Serialize message to dictionary."""
        return {
            'type': self.type.value,
            'target': self.target,
            'data': self.data
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'ControlMessage':
        """
        Deserialize message from dictionary.

        Raises:
            ValueError: Unknown message type
            KeyError: Missing 'type' key
        """
        return cls(
            type=MessageType(d['type']),
            target=d.get('target'),
            data=d.get('data')
        )


def progress_message(node_name: str, iteration: int, iterations: int) -> Dict[str, Any]:
    """
    Create a progress update.

    Args:
        node_name: Node being reported on
        iteration: Current iteration (1-based)
        iterations: Total iterations of that node
    """
    return ControlMessage(
        type=MessageType.PROGRESS,
        target=node_name,
        data={'iteration': iteration, 'iterations': iterations}
    ).to_dict()


def error_message(error: str, traceback: str = "") -> Dict[str, Any]:
    """Create an error update."""
    return ControlMessage(
        type=MessageType.ERROR,
        data={'error': error, 'traceback': traceback}
    ).to_dict()


def complete_message(aborted: bool, duration_seconds: float) -> Dict[str, Any]:
    """Create a completion update."""
    return ControlMessage(
        type=MessageType.COMPLETE,
        data={'aborted': aborted, 'duration_seconds': duration_seconds}
    ).to_dict()


# Command message constructors (controller → experiment)

def pause_command(target: Optional[str] = None) -> Dict[str, Any]:
    """Create a pause command message."""
    return ControlMessage(type=MessageType.PAUSE, target=target).to_dict()


def resume_command(target: Optional[str] = None) -> Dict[str, Any]:
    """Create a resume command message."""
    return ControlMessage(type=MessageType.RESUME, target=target).to_dict()


def abort_command(target: Optional[str] = None) -> Dict[str, Any]:
    """Create an abort command message."""
    return ControlMessage(type=MessageType.ABORT, target=target).to_dict()


def skip_command(target: Optional[str] = None) -> Dict[str, Any]:
    """Create a skip command message."""
    return ControlMessage(type=MessageType.SKIP, target=target).to_dict()


def recalibrate_command(target: Optional[str] = None) -> Dict[str, Any]:
    """Create a recalibrate command message."""
    return ControlMessage(type=MessageType.RECALIBRATE, target=target).to_dict()
