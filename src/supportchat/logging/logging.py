# supportchat/logging/logging.py
"""Handlers live on the ``supportchat`` logger; modules log through children.

``get_logger(__name__)`` from anywhere in the package returns a child of the
package logger, so a single file handler and a single stderr handler serve
the API, the chat service and the CLI alike.
"""

import os
import logging
import sys
from pathlib import Path

from .config import load_log_level

ROOT_LOGGER = "supportchat"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Marks handlers installed by configure_logging so they can be swapped out.
_HANDLER_TAG = "_supportchat_handler"


def log_file_path(log_dir=None):
    """Where the service log is written: ``<SUPPORTCHAT_LOG_DIR>/supportchat.log``."""

    if log_dir is None:
        log_dir = os.environ.get("SUPPORTCHAT_LOG_DIR") or Path.home() / ".supportchat" / "logs"
    return Path(log_dir).expanduser() / "supportchat.log"


def _owned_handlers(logger):
    return [h for h in logger.handlers if getattr(h, _HANDLER_TAG, False)]


def configure_logging(level=None, *, log_file=None, console=True):
    """(Re)attach the file and stderr handlers to the package logger.

    Previously installed handlers are closed first, so calling this again
    (after ``logging set-level`` or with a different file) never duplicates
    output. ``level`` defaults to the persisted level, else INFO.
    """

    root = logging.getLogger(ROOT_LOGGER)
    for handler in _owned_handlers(root):
        root.removeHandler(handler)
        handler.close()

    if level is None:
        level = load_log_level() or logging.INFO
    path = Path(log_file) if log_file is not None else log_file_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.FileHandler(path, mode="a", encoding="utf-8")]
    if console:
        handlers.append(logging.StreamHandler(sys.stderr))
    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_TAG, True)
        root.addHandler(handler)

    root.setLevel(level)
    root.propagate = False
    return root


def get_logger(name=ROOT_LOGGER):
    """Return ``name`` as a logger under the package logger.

    The package logger is configured on first use. Names outside the
    ``supportchat`` namespace are nested under it.
    """

    root = logging.getLogger(ROOT_LOGGER)
    if not _owned_handlers(root):
        configure_logging()
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return root.getChild(name)


def current_level_name():
    return logging.getLevelName(logging.getLogger(ROOT_LOGGER).getEffectiveLevel())
