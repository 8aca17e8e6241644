"""
Integration tests for the Tk run control panel.

Skipped when no display is available.
"""

from unittest.mock import patch

import pytest

tk = pytest.importorskip("tkinter")

from psytree.control.control_panel import ControlPanel
from psytree.execution.tree_node import TreeNode


@pytest.fixture
def node():
    return TreeNode("session", iterations=3)


@pytest.fixture
def make_panel(node):
    panels = []

    def factory(**kwargs):
        try:
            panel = ControlPanel(node, **kwargs)
        except tk.TclError as e:
            pytest.skip(f"No display available: {e}")
        panels.append(panel)
        return panel

    yield factory
    for panel in panels:
        panel.close()


@pytest.mark.gui
@pytest.mark.integration
def test_pause_button_toggles(make_panel, node):
    """Pause and resume through the same button."""
    panel = make_panel()

    panel.pause_button.invoke()
    assert node.signals.pause is True

    panel.refresh()
    assert panel.pause_button.cget('text') == "Resume"

    panel.pause_button.invoke()
    assert node.signals.pause is False


@pytest.mark.gui
@pytest.mark.integration
def test_skip_and_abort_buttons(make_panel, node):
    """Skip and Abort set flow signals; Abort disables the controls."""
    panel = make_panel(confirm_abort=False)

    panel.skip_button.invoke()
    panel.abort_button.invoke()

    assert node.signals.skip is True
    assert node.signals.abort is True
    assert str(panel.abort_button.cget('state')) == tk.DISABLED


@pytest.mark.gui
@pytest.mark.integration
def test_abort_needs_confirmation(make_panel, node):
    """Declining the confirmation leaves the run alone."""
    panel = make_panel()

    with patch('psytree.control.control_panel.messagebox.askyesno', return_value=False):
        panel.abort_button.invoke()

    assert node.signals.abort is False


@pytest.mark.gui
@pytest.mark.integration
def test_recalibrate_button(make_panel, node, mock_calibrator):
    """The Recalibrate button only exists with a calibrator."""
    assert not hasattr(make_panel(), 'calibrate_button')

    panel = make_panel(calibrator=mock_calibrator)
    panel.calibrate_button.invoke()

    assert node.signals.recalibrate is mock_calibrator


@pytest.mark.gui
@pytest.mark.integration
def test_refresh_shows_progress(make_panel, node):
    """The status line follows the node's iteration."""
    panel = make_panel()
    node.is_running = True
    node.iteration_count = 2

    panel.refresh()

    assert panel.status_label.cget('text') == "Running - iteration 2/3"


@pytest.mark.gui
@pytest.mark.integration
def test_close_request_aborts_running_node(make_panel, node):
    """Closing the window mid-run requests an abort."""
    panel = make_panel()
    node.is_running = True

    panel._on_close_requested()

    assert node.signals.abort is True
    assert panel.closed is True
    panel.refresh()
    panel.close()
