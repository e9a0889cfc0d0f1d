"""CLI entry point for taskflow."""

import argparse
from pathlib import Path

from . import __version__
from .config import Settings
from .logging import setup_logging
from .models import LabelColor, Status, When

STATUS_CHOICES = [status.value for status in Status]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="taskflow",
        description="Personal task board with guest mode and Supabase sync",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory for the local board cache (default: ~/.taskflow)",
    )
    parser.add_argument(
        "--guest",
        action="store_true",
        help="Use local storage only for this run",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v for INFO, -vv for DEBUG)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Path to write logs to file",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    board = commands.add_parser("board", help="Show the board")
    board.add_argument("-q", "--query", default="", help="Text to search in title/description")
    board.add_argument(
        "-w", "--when", choices=[w.value for w in When], default=When.ALL.value
    )
    board.add_argument("-l", "--label", action="append", help="Label name (repeatable)")

    add = commands.add_parser("add", help="Add a task")
    add.add_argument("title")
    add.add_argument("-s", "--status", choices=STATUS_CHOICES, default=Status.BACKLOG.value)
    add.add_argument("-d", "--description", default=None)
    add.add_argument("--due", default=None, help="Due date (YYYY-MM-DD)")
    add.add_argument("-l", "--label", action="append", help="Label name (repeatable)")

    update = commands.add_parser("update", help="Edit a task")
    update.add_argument("task", help="Task id or unique prefix")
    update.add_argument("-t", "--title", default=None)
    update.add_argument("-d", "--description", default=None, help="Empty string clears")
    update.add_argument("--due", default=None, help="Due date (YYYY-MM-DD), empty clears")
    update.add_argument("-l", "--label", nargs="*", default=None, help="Replace labels")

    move = commands.add_parser("move", help="Move a task to a column")
    move.add_argument("task", help="Task id or unique prefix")
    move.add_argument("status", choices=STATUS_CHOICES)
    move.add_argument("-i", "--index", type=int, default=None, help="Position in the column")

    delete = commands.add_parser("delete", help="Delete a task")
    delete.add_argument("task", help="Task id or unique prefix")

    commands.add_parser("labels", help="List labels")

    label_add = commands.add_parser("label-add", help="Add a label")
    label_add.add_argument("name")
    label_add.add_argument("color", choices=[c.value for c in LabelColor])

    label_delete = commands.add_parser("label-delete", help="Delete a label")
    label_delete.add_argument("label", help="Label id")

    guest = commands.add_parser("guest", help="Turn guest mode on or off for this device")
    guest.add_argument("mode", choices=["on", "off"])

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    # Build settings from CLI args
    settings_kwargs: dict = {}
    if args.data_dir:
        settings_kwargs["data_dir"] = args.data_dir
    if args.guest:
        settings_kwargs["guest"] = True
    if args.verbose:
        settings_kwargs["verbose"] = args.verbose
    if args.log_file:
        settings_kwargs["log_file"] = args.log_file

    settings = Settings(**settings_kwargs)

    setup_logging(settings.verbose, settings.log_file)

    # Import here so --help stays fast
    from .app import TaskflowApp
    from .cli import run_command

    raise SystemExit(run_command(TaskflowApp(settings), args))


if __name__ == "__main__":
    main()
