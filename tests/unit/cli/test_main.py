import sys
import types
from unittest.mock import MagicMock

from supportchat.cli import main as cli_main


def test_api_status_does_not_start_server(monkeypatch):
    run_mock = MagicMock()
    fake_uvicorn = types.ModuleType("uvicorn")
    fake_uvicorn.run = run_mock
    monkeypatch.setitem(sys.modules, "uvicorn", fake_uvicorn)

    cli_main.main(["api", "status"])
    run_mock.assert_not_called()


def test_db_init_dispatches_with_file(monkeypatch, tmp_path):
    init_mock = MagicMock(return_value="sqlite:///x")
    monkeypatch.setattr("supportchat.cli.db.initialize", init_mock)

    cli_main.main(["db", "init", "--file", str(tmp_path / "chat.sqlite")])

    init_mock.assert_called_once_with(str(tmp_path / "chat.sqlite"))


def test_env_file_is_loaded_before_dispatch(monkeypatch, tmp_path):
    env_file = tmp_path / "service.env"
    env_file.write_text("SUPPORTCHAT_DB_PATH=data/chat.sqlite\n", encoding="utf-8")
    monkeypatch.setenv("SUPPORTCHAT_DB_PATH", "unset")

    seen = {}

    def fake_status(file_path=None):
        import os

        seen["db_path"] = os.environ.get("SUPPORTCHAT_DB_PATH")
        return {"uri": "sqlite:///x", "conversations": 0, "messages": 0}

    monkeypatch.setattr("supportchat.cli.db.status", fake_status)
    monkeypatch.setattr("supportchat.cli.db.print_status", lambda info: None)

    cli_main.main(["db", "status", "--env-file", str(env_file)])

    assert seen["db_path"] == str((tmp_path / "data" / "chat.sqlite").resolve())
