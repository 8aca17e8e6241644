"""
Pytest configuration and fixtures for psytree tests.

Provides common test fixtures and configuration for unit and integration tests.
"""

import json
import pytest
import sys
from pathlib import Path
from unittest.mock import MagicMock

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from psytree.execution.runnable import Runnable


# ==================== PYTEST CONFIGURATION ====================

def pytest_configure(config):
    """Add custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: unit test (fast, no I/O)")
    config.addinivalue_line("markers", "integration: integration test (with mocks)")
    config.addinivalue_line("markers", "slow: slow test (real waiting)")
    config.addinivalue_line("markers", "gui: GUI tests (needs a display)")


# ==================== RECORDING RUNNABLES ====================

class RecordingLeaf(Runnable):
    """
    Leaf that records its lifecycle into a shared event log.

    Records '<name>.run' when its work happens. An optional action is called
    during the work (e.g. to raise, or to set a flag on an ancestor), and the
    caller seen during run() is kept for inspection.
    """

    def __init__(self, name, events, action=None):
        super().__init__(name)
        self.events = events
        self.action = action
        self.run_count = 0
        self.caller_during_run = None

    def run(self):
        self.run_work(self._record)

    def _record(self):
        self.caller_during_run = self.caller
        self.events.append(f"{self.name}.run")
        self.run_count += 1
        if self.action is not None:
            self.action(self)


def record_hooks(node, events):
    """Record '<name>.start' / '<name>.finish' from a node's action hooks."""
    node.start_action = lambda: events.append(f"{node.name}.start")
    node.finish_action = lambda: events.append(f"{node.name}.finish")
    return node


# ==================== FIXTURES ====================

@pytest.fixture
def events():
    """Shared, ordered event log."""
    return []


@pytest.fixture
def make_leaf(events):
    """
    Factory for RecordingLeaf instances writing to the shared event log.

    Usage:
        leaf = make_leaf("a")
        leaf = make_leaf("b", action=lambda leaf: ...)
    """
    def factory(name, action=None):
        return RecordingLeaf(name, events, action=action)
    return factory


@pytest.fixture
def hooks(events):
    """Attach recording start/finish hooks to a node."""
    def attach(node):
        return record_hooks(node, events)
    return attach


@pytest.fixture
def mock_monitor():
    """Monitor whose refresh() calls are counted."""
    monitor = MagicMock()
    monitor.refresh = MagicMock()
    return monitor


@pytest.fixture
def mock_calibrator():
    """Calibration collaborator with a counted calibrate()."""
    calibrator = MagicMock()
    calibrator.calibrate = MagicMock()
    return calibrator


# ==================== TEST DATA FIXTURES ====================

@pytest.fixture
def sample_tree_dict():
    """
    Small session tree description.

    Returns:
        dict: session -> block (x2, sequential) -> two short timed leaves
    """
    return {
        'name': 'session',
        'iterations': 1,
        'children': [
            {
                'name': 'block',
                'iterations': 2,
                'iteration_method': 'sequential',
                'node_data': {'condition': 'practice'},
                'children': [
                    {'type': 'TimedLeaf', 'name': 'fixation', 'duration': 0.0},
                    {'type': 'TimedLeaf', 'name': 'stimulus', 'duration': 0.0},
                ]
            }
        ]
    }


@pytest.fixture
def sample_config_file(tmp_path, sample_tree_dict):
    """
    Write a complete configuration file.

    Returns:
        str: Path to JSON file
    """
    config_file = tmp_path / "session.json"
    config_file.write_text(json.dumps({
        'settings': {
            'pause_interval': 0.001,
            'seed': 7,
            'log_level': 'DEBUG',
            'session_name': 'test',
        },
        'tree': sample_tree_dict,
    }))
    return str(config_file)
