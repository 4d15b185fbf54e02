"""Request-level coordination of a chat turn.

One call to :meth:`ConversationOrchestrator.send_message` validates the
text, resolves (or creates) the conversation, stores the user turn, asks the
reply generator for an answer and stores that answer. The user turn is
committed before generation starts, and the generator cannot raise, so a
provider outage still leaves a complete user/ai pair behind.
"""

from __future__ import annotations

import threading
import uuid
import weakref
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator

from supportchat.logging import get_logger

from .context import build_context
from .errors import ConversationNotFound, EmptyMessage, MessageTooLong
from .models import now_ms
from .service import ReplyGenerator
from .store import Conversation, ConversationStore, Message, Sender


logger = get_logger(__name__)

MAX_MESSAGE_CHARS = 4000


def new_session_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class SendResult:
    reply: str
    session_id: str


@dataclass(frozen=True)
class ConversationHistory:
    conversation: Conversation
    messages: list[Message]


class _SessionLock:
    __slots__ = ("lock", "__weakref__")

    def __init__(self) -> None:
        self.lock = threading.Lock()


class SessionLocks:
    """Per-session mutual exclusion.

    Locks are held weakly, so entries disappear once no request is using
    them.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: weakref.WeakValueDictionary[str, _SessionLock] = weakref.WeakValueDictionary()

    @contextmanager
    def hold(self, session_id: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(session_id)
            if entry is None:
                entry = _SessionLock()
                self._locks[session_id] = entry
        with entry.lock:
            yield


def validate_message(message: str | None) -> str:
    text = (message or "").strip()
    if not text:
        raise EmptyMessage()
    if len(text) > MAX_MESSAGE_CHARS:
        raise MessageTooLong(MAX_MESSAGE_CHARS)
    return text


class ConversationOrchestrator:
    def __init__(
        self,
        store: ConversationStore,
        generator: ReplyGenerator,
        *,
        clock: Callable[[], int] = now_ms,
        id_factory: Callable[[], str] = new_session_id,
    ) -> None:
        self.store = store
        self.generator = generator
        self.clock = clock
        self.id_factory = id_factory
        self.locks = SessionLocks()

    def _start_conversation(self) -> str:
        session_id = self.id_factory()
        self.store.create_conversation(session_id, self.clock())
        logger.info("Created conversation %s", session_id)
        return session_id

    def _resolve_session(self, session_id: str | None) -> str:
        # A supplied id is used as-is; the store rejects it on append if it
        # names no conversation.
        candidate = (session_id or "").strip()
        if not candidate:
            return self._start_conversation()
        return candidate

    def send_message(self, message: str | None, session_id: str | None = None) -> SendResult:
        text = validate_message(message)
        resolved = self._resolve_session(session_id)

        with self.locks.hold(resolved):
            user_ts = self.clock()
            self.store.append_message(resolved, Sender.USER, text, user_ts)

            history = build_context(self.store, resolved)
            reply = self.generator.generate(history, text)
            if not reply.ok:
                logger.info(
                    "Fallback reply for %s (provider=%s, error=%s)",
                    resolved,
                    reply.provider,
                    reply.error,
                )

            self.store.append_message(resolved, Sender.AI, reply.content, max(self.clock(), user_ts))

        return SendResult(reply=reply.content, session_id=resolved)

    def get_history(self, session_id: str) -> ConversationHistory:
        conversation = self.store.get_conversation(session_id)
        if conversation is None:
            raise ConversationNotFound(session_id)
        messages = list(self.store.list_messages(session_id, order="asc"))
        return ConversationHistory(conversation=conversation, messages=messages)
