"""
Unit tests for DataLog class.

Tests event recording and CSV output without real experiment hardware.
"""

import pytest
import pandas as pd

from psytree.data.data_log import EVENT_COLUMNS, DataLog
from psytree.execution.runnable import Runnable
from psytree.execution.tree_node import TreeNode


# ==================== INITIALIZATION TESTS ====================

@pytest.mark.unit
def test_data_log_initialization(tmp_path):
    """DataLog should create output directory."""
    output_dir = tmp_path / "output"

    log = DataLog(str(output_dir), "sub-001")

    assert output_dir.exists()
    assert log.session_name == "sub-001"
    assert log.data_saving_enabled is True
    assert log.get_event_count() == 0


@pytest.mark.unit
def test_data_log_saving_disabled():
    """output_dir=None disables saving."""
    log = DataLog(None)
    log.log_event("root", "start")

    assert log.data_saving_enabled is False
    assert log.save() is None


# ==================== EVENT TESTS ====================

@pytest.mark.unit
def test_log_event_by_name(tmp_path):
    """Events can be logged against a plain name with extra columns."""
    log = DataLog(str(tmp_path))

    log.log_event("trial", "response", key="space", rt=0.42)

    record = log.events[0]
    assert record['node'] == "trial"
    assert record['event'] == "response"
    assert record['iteration'] is None
    assert record['key'] == "space"
    assert record['rt'] == 0.42


@pytest.mark.unit
def test_log_event_records_iteration(tmp_path):
    """Events logged against a TreeNode carry its iteration count."""
    log = DataLog(str(tmp_path))
    node = TreeNode("block")
    node.iteration_count = 3

    log.log_event(node, "marker")

    assert log.events[0]['iteration'] == 3


@pytest.mark.unit
def test_attach_logs_start_and_finish(tmp_path, make_leaf):
    """attach() records start/finish for every runnable in the tree."""
    root = TreeNode("root", iterations=2)
    root.add_child(make_leaf("trial"))
    log = DataLog(str(tmp_path))

    assert log.attach(root) == 2
    root.run()

    assert [(e['node'], e['event']) for e in log.events] == [
        ("root", "start"),
        ("trial", "start"), ("trial", "finish"),
        ("trial", "start"), ("trial", "finish"),
        ("root", "finish"),
    ]
    assert log.get_event_count('start') == 3


@pytest.mark.unit
def test_attach_keeps_existing_actions(tmp_path, events):
    """Existing hooks still run: start event before, finish event after."""
    node = Runnable("leaf")
    log = DataLog(str(tmp_path))

    node.start_action = lambda: events.append(log.get_event_count())
    node.finish_action = lambda: events.append(log.get_event_count())
    log.attach(node)
    node.run()

    # Start event already logged when the start action ran,
    # finish event not yet logged when the finish action ran
    assert events == [1, 1]
    assert log.get_event_count() == 2


@pytest.mark.unit
def test_attach_twice_does_not_double_events(tmp_path, make_leaf):
    """Attaching the same tree again adds no second set of hooks."""
    root = TreeNode("root")
    root.add_child(make_leaf("trial"))
    log = DataLog(str(tmp_path))

    assert log.attach(root) == 2
    assert log.attach(root) == 0
    root.run()

    assert log.get_event_count() == 4


@pytest.mark.unit
def test_start_events_have_no_iteration(tmp_path, make_leaf):
    """Start events carry no iteration, even on a node that has run before."""
    root = TreeNode("root", iterations=3)
    root.add_child(make_leaf("trial"))
    log = DataLog(str(tmp_path))
    log.attach(root)

    root.run()
    root.run()

    root_events = [e for e in log.events if e['node'] == "root"]
    assert [(e['event'], e['iteration']) for e in root_events] == [
        ("start", None), ("finish", 3),
        ("start", None), ("finish", 3),
    ]


# ==================== OUTPUT TESTS ====================

@pytest.mark.unit
def test_to_frame_column_order(tmp_path):
    """Standard columns come first, extra columns after."""
    log = DataLog(str(tmp_path))
    log.log_event("trial", "response", rt=0.5)

    df = log.to_frame()

    assert list(df.columns) == EVENT_COLUMNS + ['rt']


@pytest.mark.unit
def test_to_frame_empty(tmp_path):
    """An empty log gives an empty frame with the standard columns."""
    df = DataLog(str(tmp_path)).to_frame()

    assert df.empty
    assert list(df.columns) == EVENT_COLUMNS


@pytest.mark.unit
def test_summary_counts_events(tmp_path, make_leaf):
    """summary() counts events per node and type."""
    root = TreeNode("root", iterations=3)
    root.add_child(make_leaf("trial"))
    log = DataLog(str(tmp_path))
    log.attach(root)

    root.run()
    summary = log.summary()

    assert summary.loc["trial", "start"] == 3
    assert summary.loc["root", "finish"] == 1


@pytest.mark.unit
def test_save_writes_csv(tmp_path):
    """save() writes the event table to <session>_events.csv."""
    log = DataLog(str(tmp_path), "sub-002")
    log.log_event("root", "start")
    log.log_event("root", "finish")

    path = log.save()

    assert path == str(tmp_path / "sub-002_events.csv")
    df = pd.read_csv(path)
    assert len(df) == 2
    assert list(df['event']) == ["start", "finish"]


@pytest.mark.unit
def test_save_without_events(tmp_path):
    """Nothing is written when no events were recorded."""
    log = DataLog(str(tmp_path))

    assert log.save() is None
    assert list(tmp_path.iterdir()) == []


@pytest.mark.unit
def test_clear(tmp_path):
    """clear() drops all recorded events."""
    log = DataLog(str(tmp_path))
    log.log_event("root", "start")

    log.clear()

    assert log.get_event_count() == 0
