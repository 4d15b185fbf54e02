import os
import sys
from pathlib import Path

import pytest

# Ensure the src directory is on the path for imports
root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(root / "src"))

log_dir = root / "logs"
log_dir.mkdir(parents=True, exist_ok=True)
os.environ.setdefault("SUPPORTCHAT_LOG_DIR", str(log_dir))
os.environ.setdefault("SUPPORTCHAT_LOG_CONFIG", str(log_dir / "logging.json"))
os.environ.setdefault("SUPPORTCHAT_DB_DIR", str(root / "logs" / "db"))

from supportchat.chat.service import AssistantReply  # noqa: E402
from supportchat.chat.store import InMemoryConversationStore, SqlConversationStore  # noqa: E402


class RecordingGenerator:
    """Reply generator double that records every call."""

    def __init__(self, content="OK", *, ok=True):
        self.content = content
        self.ok = ok
        self.calls = []

    def generate(self, history, message):
        self.calls.append({"history": [dict(item) for item in history], "message": message})
        return AssistantReply(
            content=self.content,
            provider="test",
            model="test-model",
            ok=self.ok,
            error=None if self.ok else "simulated",
        )


@pytest.fixture
def recording_generator():
    return RecordingGenerator()


@pytest.fixture
def memory_store():
    return InMemoryConversationStore()


@pytest.fixture
def sql_store(tmp_path):
    return SqlConversationStore(tmp_path / "chat.sqlite")


@pytest.fixture(params=["memory", "sql"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryConversationStore()
    return SqlConversationStore(tmp_path / "chat.sqlite")


@pytest.fixture
def ticking_clock():
    """Clock returning strictly increasing millisecond timestamps."""

    state = {"now": 1_700_000_000_000}

    def clock():
        state["now"] += 5
        return state["now"]

    return clock
