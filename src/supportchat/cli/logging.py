"""Command-line helpers for configuring supportchat logging."""

import logging

from supportchat.logging import configure_logging, current_level_name, get_logger, log_file_path
from supportchat.logging.config import save_log_level


def register_subcommands(subparsers):
    """Register logging subcommands on the provided ``argparse`` object."""

    set_level_parser = subparsers.add_parser("set-level", help="Set the logging level")
    set_level_parser.add_argument(
        "level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level to use",
    )

    subparsers.add_parser("show-path", help="Show the log file location")
    subparsers.add_parser("show-level", help="Show the configured logging level")


def dispatch(args):
    if args.subcommand == "set-level":
        level_name = args.level.upper()
        path = save_log_level(level_name)
        configure_logging(level=getattr(logging, level_name))
        get_logger(__name__).info("Log level set to %s (saved to %s)", level_name, path)
    elif args.subcommand == "show-path":
        print(log_file_path().resolve())
    elif args.subcommand == "show-level":
        get_logger()
        print(current_level_name())
    else:
        get_logger(__name__).error("No handler for subcommand: %s", args.subcommand)
