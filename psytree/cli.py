"""
Command-line entry point for psytree.

Usage:
    psytree run CONFIG [--gui] [--seed N] [--log-level LEVEL] [--log-file FILE] [--output-dir DIR]
    psytree show CONFIG
    psytree validate CONFIG

Exit codes: 0 = run completed (or aborted), 1 = run failed, 2 = bad configuration.
"""

from typing import List, Optional
import argparse
import logging
import sys

from .config.config_io import load_config, validate_config_file
from .config.settings import RunnerSettings
from .data.data_log import DataLog
from .execution.tree_node import TreeNode
from .runner import ExperimentRunner

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG_ERROR = 2

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(settings: RunnerSettings):
    """
    Send log records to the console (and optionally a file).

    Args:
        settings: Provides log_level and log_file
    """
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file, encoding='utf-8'))

    logging.basicConfig(
        level=settings.get_log_level(),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='psytree',
        description='Run experiments organized as trees of runnable nodes'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    run_parser = subparsers.add_parser('run', help='Run a tree from a JSON configuration')
    run_parser.add_argument('config', help='Path to JSON configuration file')
    run_parser.add_argument('--gui', action='store_true', default=None,
                            help='Open the run control panel')
    run_parser.add_argument('--seed', type=int, help='Seed for random child order')
    run_parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                            help='Logging level')
    run_parser.add_argument('--log-file', help='Also log to this file')
    run_parser.add_argument('--output-dir', help='Directory for data files')

    show_parser = subparsers.add_parser('show', help='Print the tree outline')
    show_parser.add_argument('config', help='Path to JSON configuration file')

    validate_parser = subparsers.add_parser('validate', help='Check a configuration file')
    validate_parser.add_argument('config', help='Path to JSON configuration file')

    return parser


def cmd_run(args) -> int:
    try:
        settings, root = load_config(args.config)
    except (FileNotFoundError, ValueError, TypeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    settings.update(
        show_gui=args.gui,
        seed=args.seed,
        log_level=args.log_level,
        log_file=args.log_file,
        output_dir=args.output_dir,
    )
    configure_logging(settings)

    data_log = None
    if settings.output_dir:
        data_log = DataLog(settings.output_dir, settings.session_name)

    panel = None
    if settings.show_gui:
        # Tk is only needed when the panel is requested
        from .control.control_panel import ControlPanel
        panel = ControlPanel(root, title=f"psytree - {root.name}")

    try:
        runner = ExperimentRunner(root, settings, monitor=panel, data_log=data_log)
        result = runner.run()
    except (RuntimeError, TypeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    finally:
        if panel is not None:
            panel.close()

    if result.failure is not None and not result.completed:
        print(f"Run failed: {result.failure.format()}", file=sys.stderr)
        return EXIT_FAILED

    state = "aborted" if result.aborted else "completed"
    print(f"Run {state} in {result.duration:.1f}s")
    return EXIT_OK


def cmd_show(args) -> int:
    try:
        _, root = load_config(args.config)
    except (FileNotFoundError, ValueError, TypeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if not isinstance(root, TreeNode):
        print(f"Error: top-level 'tree' entry must be a tree node, got {type(root).__name__}",
              file=sys.stderr)
        return EXIT_CONFIG_ERROR

    print(root.describe())
    return EXIT_OK


def cmd_validate(args) -> int:
    valid, errors = validate_config_file(args.config)
    if valid:
        print(f"{args.config}: OK")
        return EXIT_OK

    print(f"{args.config}: {len(errors)} error(s)")
    for error in errors:
        print(f"  - {error}")
    return EXIT_CONFIG_ERROR


COMMANDS = {
    'run': cmd_run,
    'show': cmd_show,
    'validate': cmd_validate,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return COMMANDS[args.command](args)


if __name__ == '__main__':
    sys.exit(main())
