"""Durable, append-only record of conversations and their messages."""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Literal, Protocol

from sqlalchemy.exc import IntegrityError

from .connect import get_chat_db_uri, get_chat_session, get_engine
from .errors import ConstraintViolation, DuplicateKey
from .models import ChatConversation, ChatMessage


Order = Literal["asc", "desc"]


class Sender(str, enum.Enum):
    USER = "user"
    AI = "ai"


@dataclass(frozen=True)
class Conversation:
    id: str
    created_at: int


@dataclass(frozen=True)
class Message:
    id: int
    conversation_id: str
    sender: Sender
    text: str
    created_at: int


class ConversationStore(Protocol):
    def create_conversation(self, conversation_id: str, created_at: int) -> None: ...

    def append_message(
        self,
        conversation_id: str,
        sender: Sender,
        text: str,
        created_at: int,
    ) -> int: ...

    def get_conversation(self, conversation_id: str) -> Conversation | None: ...

    def list_messages(
        self,
        conversation_id: str,
        *,
        limit: int | None = None,
        order: Order = "asc",
    ) -> Iterator[Message]: ...


def _check_order(order: str) -> None:
    if order not in ("asc", "desc"):
        raise ValueError(f"order must be 'asc' or 'desc', got {order!r}")


class SqlConversationStore:
    """Store backed by the SQLite chat database.

    Every write runs in its own session and is committed before the call
    returns. ``list_messages`` keeps its session open only while the caller
    iterates.
    """

    def __init__(self, db_path: str | Path | None = None) -> None:
        self.db_uri = get_chat_db_uri(db_path)
        get_engine(self.db_uri)

    def create_conversation(self, conversation_id: str, created_at: int) -> None:
        try:
            with get_chat_session(self.db_uri) as db:
                db.add(ChatConversation(id=conversation_id, created_at=int(created_at)))
                db.flush()
        except IntegrityError as exc:
            raise DuplicateKey(f"Conversation {conversation_id!r} already exists") from exc

    def append_message(
        self,
        conversation_id: str,
        sender: Sender,
        text: str,
        created_at: int,
    ) -> int:
        try:
            with get_chat_session(self.db_uri) as db:
                row = ChatMessage(
                    conversation_id=conversation_id,
                    sender=Sender(sender).value,
                    text=text,
                    created_at=int(created_at),
                )
                db.add(row)
                db.flush()
                message_id = int(row.id)
        except IntegrityError as exc:
            raise ConstraintViolation(
                f"Conversation {conversation_id!r} does not exist"
            ) from exc
        return message_id

    def get_conversation(self, conversation_id: str) -> Conversation | None:
        with get_chat_session(self.db_uri) as db:
            row = db.get(ChatConversation, conversation_id)
            if row is None:
                return None
            return Conversation(id=row.id, created_at=int(row.created_at))

    def list_messages(
        self,
        conversation_id: str,
        *,
        limit: int | None = None,
        order: Order = "asc",
    ) -> Iterator[Message]:
        _check_order(order)
        return self._iter_messages(conversation_id, limit=limit, order=order)

    def _iter_messages(self, conversation_id: str, *, limit: int | None, order: Order) -> Iterator[Message]:
        with get_chat_session(self.db_uri) as db:
            query = db.query(ChatMessage).filter(ChatMessage.conversation_id == conversation_id)
            if order == "desc":
                query = query.order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            else:
                query = query.order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
            if limit is not None:
                query = query.limit(max(0, int(limit)))

            for row in query:
                yield Message(
                    id=int(row.id),
                    conversation_id=row.conversation_id,
                    sender=Sender(row.sender),
                    text=row.text,
                    created_at=int(row.created_at),
                )


class InMemoryConversationStore:
    """Process-local store with the same contract, for tests and local runs."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._conversations: dict[str, Conversation] = {}
        self._messages: dict[str, list[Message]] = {}
        self._next_id = 1

    def create_conversation(self, conversation_id: str, created_at: int) -> None:
        with self._lock:
            if conversation_id in self._conversations:
                raise DuplicateKey(f"Conversation {conversation_id!r} already exists")
            self._conversations[conversation_id] = Conversation(conversation_id, int(created_at))
            self._messages[conversation_id] = []

    def append_message(
        self,
        conversation_id: str,
        sender: Sender,
        text: str,
        created_at: int,
    ) -> int:
        with self._lock:
            if conversation_id not in self._conversations:
                raise ConstraintViolation(f"Conversation {conversation_id!r} does not exist")
            message = Message(
                id=self._next_id,
                conversation_id=conversation_id,
                sender=Sender(sender),
                text=text,
                created_at=int(created_at),
            )
            self._next_id += 1
            self._messages[conversation_id].append(message)
            return message.id

    def get_conversation(self, conversation_id: str) -> Conversation | None:
        with self._lock:
            return self._conversations.get(conversation_id)

    def list_messages(
        self,
        conversation_id: str,
        *,
        limit: int | None = None,
        order: Order = "asc",
    ) -> Iterator[Message]:
        _check_order(order)
        with self._lock:
            rows = sorted(
                self._messages.get(conversation_id, ()),
                key=lambda m: (m.created_at, m.id),
                reverse=(order == "desc"),
            )
        if limit is not None:
            rows = rows[: max(0, int(limit))]
        return iter(rows)
