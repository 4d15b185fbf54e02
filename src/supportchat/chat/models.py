from __future__ import annotations

import time

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""

    return time.time_ns() // 1_000_000


class ChatBase(DeclarativeBase):
    pass


class ChatConversation(ChatBase):
    __tablename__ = "conversations"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    created_at: Mapped[int] = mapped_column(BigInteger)

    messages: Mapped[list["ChatMessage"]] = relationship(
        back_populates="conversation",
        order_by="ChatMessage.id",
    )


class ChatMessage(ChatBase):
    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_conversation_created", "conversation_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    conversation_id: Mapped[str] = mapped_column(ForeignKey("conversations.id"))

    sender: Mapped[str] = mapped_column(Text)  # user | ai
    text: Mapped[str] = mapped_column(Text)

    created_at: Mapped[int] = mapped_column(BigInteger)

    conversation: Mapped[ChatConversation] = relationship(back_populates="messages")
