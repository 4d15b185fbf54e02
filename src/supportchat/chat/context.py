from __future__ import annotations

from typing import Any

from .store import ConversationStore, Sender


# Rows read from storage per request, and entries handed to the model.
HISTORY_READ_LIMIT = 20
CONTEXT_WINDOW = 10

_ROLE_BY_SENDER = {
    Sender.USER: "user",
    Sender.AI: "assistant",
}


def build_context(
    store: ConversationStore,
    conversation_id: str,
    *,
    read_limit: int = HISTORY_READ_LIMIT,
    context_limit: int = CONTEXT_WINDOW,
) -> list[dict[str, Any]]:
    """Return the tail of a conversation as chat-completion messages.

    The newest ``read_limit`` rows are fetched, put back in chronological
    order, mapped to ``user``/``assistant`` roles and cut to the last
    ``context_limit`` entries.
    """

    rows = list(store.list_messages(conversation_id, limit=read_limit, order="desc"))
    rows.reverse()

    history = [
        {"role": _ROLE_BY_SENDER[row.sender], "content": row.text}
        for row in rows
        if row.text
    ]
    if context_limit <= 0:
        return []
    return history[-context_limit:]
