"""
Run control panel for live supervision of a running tree.

Provides:
- Current node / iteration display
- Pause/Resume, Skip and Abort controls
- Optional Recalibrate control

The panel is a monitor: the tree refreshes it at every checkpoint, which is
when Tk processes button clicks. Clicks only set flow signals; the tree acts
on them at its next checkpoint.
"""

import tkinter as tk
from tkinter import ttk, messagebox
from typing import Optional
import logging

from ..execution.flow_signals import Calibrator
from ..execution.tree_node import TreeNode

logger = logging.getLogger(__name__)


class ControlPanel(tk.Tk):
    """
    Window with run controls for one TreeNode (usually the root).

    Features:
    - Status line with node name and iteration progress
    - Pause/Resume toggle
    - Skip current child
    - Abort (with confirmation)
    - Recalibrate (only when a calibrator is given)
    """

    def __init__(self, node: TreeNode, calibrator: Optional[Calibrator] = None,
                 title: str = "Run Control", confirm_abort: bool = True):
        """
        Initialize control panel.

        Args:
            node: Node whose flow signals the controls set
            calibrator: Collaborator for the Recalibrate button (optional)
            title: Window title
            confirm_abort: Ask before aborting
        """
        super().__init__()

        self.node = node
        self.calibrator = calibrator
        self.confirm_abort = confirm_abort
        self.closed = False

        self.title(title)
        self.resizable(False, False)
        self.configure(bg="#F0F0F0")

        # Closing the window counts as an abort request
        self.protocol("WM_DELETE_WINDOW", self._on_close_requested)

        self._build_ui()

    def _build_ui(self):
        """Build the panel UI."""
        title_label = ttk.Label(
            self,
            text=f"Running: {self.node.name}",
            font=("Arial", 12, "bold")
        )
        title_label.pack(pady=(12, 6), padx=20)

        self.status_label = ttk.Label(self, text="Starting...", font=("Arial", 10))
        self.status_label.pack(pady=(0, 12), padx=20)

        button_frame = ttk.Frame(self)
        button_frame.pack(fill=tk.X, padx=20, pady=(0, 12))

        self.pause_button = ttk.Button(button_frame, text="Pause", command=self._on_pause)
        self.pause_button.pack(side=tk.LEFT, padx=5)

        self.skip_button = ttk.Button(button_frame, text="Skip", command=self._on_skip)
        self.skip_button.pack(side=tk.LEFT, padx=5)

        self.abort_button = ttk.Button(button_frame, text="Abort", command=self._on_abort)
        self.abort_button.pack(side=tk.LEFT, padx=5)

        if self.calibrator is not None:
            self.calibrate_button = ttk.Button(
                button_frame,
                text="Recalibrate",
                command=self._on_recalibrate
            )
            self.calibrate_button.pack(side=tk.LEFT, padx=5)

    # ==================== MONITOR ====================

    def refresh(self):
        """Update the status line and process pending UI events."""
        if self.closed:
            return

        signals = self.node.signals
        if signals.pause:
            state = "Paused"
        elif self.node.is_running:
            state = "Running"
        else:
            state = "Stopped"

        self.status_label.config(
            text=f"{state} - iteration {self.node.iteration_count}/{self.node.iterations}"
        )
        self.pause_button.config(text="Resume" if signals.pause else "Pause")

        try:
            self.update()
        except tk.TclError:
            # Window was destroyed outside our close handler
            self.closed = True

    def close(self):
        """Destroy the window (safe to call twice)."""
        if not self.closed:
            self.closed = True
            self.destroy()

    # ==================== CONTROLS ====================

    def _on_pause(self):
        """Handle pause button click."""
        if self.node.signals.pause:
            logger.info("Control panel: resume")
            self.node.signals.resume()
        else:
            logger.info("Control panel: pause")
            self.node.signals.request_pause()

    def _on_skip(self):
        """Handle skip button click."""
        logger.info("Control panel: skip")
        self.node.signals.request_skip()

    def _on_abort(self):
        """Handle abort button click."""
        if self.confirm_abort:
            confirmed = messagebox.askyesno(
                "Abort Run",
                f"Are you sure you want to abort '{self.node.name}'?",
                parent=self
            )
            if not confirmed:
                return

        logger.info("Control panel: abort")
        self.node.signals.request_abort()
        self.pause_button.config(state=tk.DISABLED)
        self.skip_button.config(state=tk.DISABLED)
        self.abort_button.config(state=tk.DISABLED)

    def _on_recalibrate(self):
        """Handle recalibrate button click."""
        logger.info("Control panel: recalibrate")
        self.node.signals.request_recalibration(self.calibrator)

    def _on_close_requested(self):
        """Handle window close request during a run."""
        if self.node.is_running:
            self.node.signals.request_abort()
        self.close()
