"""Exceptions raised by the chat layer.

Input and lookup errors are meant for the caller (the API maps them to 4xx
responses); store errors indicate a broken invariant or infrastructure fault.
"""

from __future__ import annotations


class ChatInputError(ValueError):
    """The submitted message cannot be accepted."""


class EmptyMessage(ChatInputError):
    def __init__(self, message: str = "Message cannot be empty.") -> None:
        super().__init__(message)


class MessageTooLong(ChatInputError):
    def __init__(self, limit: int) -> None:
        super().__init__(
            f"Message is too long. Please keep it under {limit} characters "
            "so our agent can handle it."
        )
        self.limit = limit


class ConversationNotFound(LookupError):
    def __init__(self, conversation_id: str) -> None:
        super().__init__("Conversation not found.")
        self.conversation_id = conversation_id


class StoreError(RuntimeError):
    pass


class DuplicateKey(StoreError):
    pass


class ConstraintViolation(StoreError):
    pass
