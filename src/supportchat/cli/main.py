# supportchat/cli/main.py
import argparse
import sys

from supportchat.cli import api, db, logging as logging_cli
from supportchat.cli.env import extract_env_files, load_env_files


def main(argv=None):
    raw_argv = list(sys.argv[1:] if argv is None else argv)
    env_files, remaining = extract_env_files(raw_argv)
    if env_files:
        load_env_files(env_files, override=True)

    parser = argparse.ArgumentParser(prog="supportchat", description="Support chat service")
    parser.add_argument(
        "--env-file",
        action="append",
        metavar="PATH",
        help="Load KEY=value pairs from PATH before running (repeatable)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    api_parser = subparsers.add_parser("api", help="API server control")
    api_subparsers = api_parser.add_subparsers(dest="subcommand", required=True)
    api.register_subcommands(api_subparsers)

    db_parser = subparsers.add_parser("db", help="Chat database operations")
    db_subparsers = db_parser.add_subparsers(dest="subcommand", required=True)
    db.register_subcommands(db_subparsers)

    logging_parser = subparsers.add_parser("logging", help="Logging utilities")
    logging_subparsers = logging_parser.add_subparsers(dest="subcommand", required=True)
    logging_cli.register_subcommands(logging_subparsers)

    args = parser.parse_args(remaining)

    handlers = {
        "api": api.dispatch,
        "db": db.dispatch,
        "logging": logging_cli.dispatch,
    }
    handlers[args.command](args)


if __name__ == "__main__":
    main()
