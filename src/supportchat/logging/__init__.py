"""Logging helpers shared by the service, the API and the CLI."""

from .logging import configure_logging, current_level_name, get_logger, log_file_path

__all__ = ["configure_logging", "current_level_name", "get_logger", "log_file_path"]
