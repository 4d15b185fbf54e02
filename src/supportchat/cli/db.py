"""Command-line helpers for the chat database."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from sqlalchemy import func

from supportchat.chat.connect import get_chat_db_uri, get_chat_session, get_engine
from supportchat.chat.models import ChatConversation, ChatMessage
from supportchat.logging import get_logger


def register_subcommands(subparsers):
    """Attach database subcommands to an ``argparse`` parser.

    Examples
    --------
    >>> import argparse
    >>> parser = argparse.ArgumentParser(prog="supportchat db")
    >>> subparsers = parser.add_subparsers(dest="subcommand", required=True)
    >>> register_subcommands(subparsers)
    >>> parser.parse_args(["init", "--file", "chat.sqlite"])
    Namespace(subcommand='init', file='chat.sqlite')
    """

    init_parser = subparsers.add_parser("init", help="Create the chat tables")
    init_parser.add_argument("--file", required=False)

    status_parser = subparsers.add_parser("status", help="Show database location and row counts")
    status_parser.add_argument("--file", required=False)


def initialize(file_path=None) -> str:
    db_uri = get_chat_db_uri(file_path)
    get_engine(db_uri)
    return db_uri


def status(file_path=None) -> dict:
    db_uri = initialize(file_path)
    with get_chat_session(db_uri) as session:
        conversations = session.query(func.count(ChatConversation.id)).scalar() or 0
        messages = session.query(func.count(ChatMessage.id)).scalar() or 0
    return {"uri": db_uri, "conversations": int(conversations), "messages": int(messages)}


def print_status(info: dict, console: Console | None = None) -> None:
    if console is None:
        console = Console()

    table = Table(title="Chat Database", show_lines=True)
    table.add_column("Database", style="bold cyan")
    table.add_column("Conversations", justify="right", style="magenta")
    table.add_column("Messages", justify="right", style="green")
    table.add_row(info["uri"], str(info["conversations"]), str(info["messages"]))
    console.print(table)


def dispatch(args):
    logger = get_logger(__name__)
    file_path = getattr(args, "file", None)

    if args.subcommand == "init":
        db_uri = initialize(file_path)
        logger.info("Initialized chat database at %s", db_uri)
    elif args.subcommand == "status":
        print_status(status(file_path))
    else:
        message = f"No handler for db subcommand: {args.subcommand}"
        logger.error(message)
        raise ValueError(message)
