"""Tests for logging utilities."""

import logging

import pytest

from supportchat.logging import configure_logging, current_level_name, get_logger, log_file_path
from supportchat.logging.config import load_log_level, save_log_level


@pytest.fixture
def package_logger():
    yield logging.getLogger("supportchat")
    configure_logging(level=logging.INFO)


def _flush(logger):
    for handler in logger.handlers:
        handler.flush()


def test_module_loggers_share_package_handlers(tmp_path, package_logger):
    log_file = tmp_path / "service.log"
    configure_logging(level=logging.INFO, log_file=log_file, console=False)

    logger = get_logger("supportchat.chat.service")
    logger.info("reply generated")
    _flush(package_logger)

    assert logger.handlers == []
    assert logger.parent is package_logger
    assert "[supportchat.chat.service] reply generated" in log_file.read_text()


def test_foreign_names_are_nested_under_package(package_logger):
    assert get_logger("scratch").name == "supportchat.scratch"
    assert get_logger().name == "supportchat"


def test_reconfiguring_replaces_handlers(tmp_path, package_logger):
    first = tmp_path / "first.log"
    second = tmp_path / "second.log"

    configure_logging(level=logging.INFO, log_file=first, console=False)
    get_logger("supportchat.test").info("first message")
    configure_logging(level=logging.INFO, log_file=second, console=False)
    get_logger("supportchat.test").info("second message")
    _flush(package_logger)

    assert len(package_logger.handlers) == 1
    assert "first message" in first.read_text()
    assert "second message" in second.read_text()
    assert "second message" not in first.read_text()


def test_persisted_level_is_used_by_default(tmp_path, monkeypatch, package_logger):
    config_file = tmp_path / "logging.json"
    monkeypatch.setenv("SUPPORTCHAT_LOG_CONFIG", str(config_file))
    save_log_level("warning")

    assert load_log_level() == logging.WARNING

    configure_logging(log_file=tmp_path / "level.log", console=False)
    assert package_logger.level == logging.WARNING
    assert current_level_name() == "WARNING"


def test_log_file_path_follows_env(tmp_path, monkeypatch):
    monkeypatch.setenv("SUPPORTCHAT_LOG_DIR", str(tmp_path / "logs"))

    assert log_file_path() == tmp_path / "logs" / "supportchat.log"


def test_load_log_level_ignores_garbage(tmp_path):
    config_file = tmp_path / "logging.json"
    config_file.write_text("{not json", encoding="utf-8")

    assert load_log_level(config_file) is None
