"""
Run-level settings for psytree.
"""

from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, List, Optional
import logging

VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class RunnerSettings:
    """
    Settings that control how a tree is run (not what it contains).

    Attributes:
        pause_interval: Seconds between re-checks while paused
        checkpoint_children: Evaluate a checkpoint after every child run
        seed: Seed for random child orders (None = unseeded)
        log_level: Logging level name
        log_file: Optional file to log to (in addition to the console)
        output_dir: Directory for data files (None = do not save data)
        session_name: Prefix for data file names
        show_gui: Open the run control panel
    """
    pause_interval: float = 0.01
    checkpoint_children: bool = True
    seed: Optional[int] = None
    log_level: str = 'INFO'
    log_file: Optional[str] = None
    output_dir: Optional[str] = None
    session_name: str = 'session'
    show_gui: bool = False

    def validate(self) -> List[str]:
        """
        Validate settings.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []
        if self.pause_interval <= 0:
            errors.append(f"pause_interval must be positive, got {self.pause_interval}")
        if str(self.log_level).upper() not in VALID_LOG_LEVELS:
            errors.append(f"Unknown log_level '{self.log_level}'")
        if self.seed is not None and not isinstance(self.seed, int):
            errors.append(f"seed must be an integer, got {self.seed!r}")
        if not self.session_name:
            errors.append("session_name must not be empty")
        return errors

    def get_log_level(self) -> int:
        """Numeric logging level."""
        return getattr(logging, str(self.log_level).upper(), logging.INFO)

    def update(self, **overrides):
        """
        Apply overrides, ignoring None values.

        Used to layer command-line options over file settings.
        """
        for key, value in overrides.items():
            if value is None:
                continue
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'RunnerSettings':
        """
        Deserialize from dictionary.

        Raises:
            ValueError: Unknown keys in data
        """
        data = data or {}
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")
        return cls(**data)
