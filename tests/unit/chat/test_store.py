from __future__ import annotations

import pytest

from supportchat.chat.errors import ConstraintViolation, DuplicateKey
from supportchat.chat.models import ChatMessage
from supportchat.chat.connect import get_chat_session
from supportchat.chat.store import Conversation, Sender


def test_create_and_get_conversation(store):
    store.create_conversation("conv-1", 1000)

    assert store.get_conversation("conv-1") == Conversation(id="conv-1", created_at=1000)
    assert store.get_conversation("missing") is None


def test_create_conversation_rejects_duplicate_id(store):
    store.create_conversation("conv-1", 1000)

    with pytest.raises(DuplicateKey):
        store.create_conversation("conv-1", 2000)

    assert store.get_conversation("conv-1").created_at == 1000


def test_append_message_requires_existing_conversation(store):
    with pytest.raises(ConstraintViolation):
        store.append_message("nope", Sender.USER, "hello", 1000)

    assert list(store.list_messages("nope")) == []


def test_append_message_returns_increasing_ids(store):
    store.create_conversation("conv-1", 1000)
    first = store.append_message("conv-1", Sender.USER, "hi", 1001)
    second = store.append_message("conv-1", Sender.AI, "hello!", 1002)

    assert second > first


def test_list_messages_orders_by_time_then_insertion(store):
    store.create_conversation("conv-1", 1000)
    store.append_message("conv-1", Sender.USER, "late", 3000)
    store.append_message("conv-1", Sender.USER, "tie-a", 2000)
    store.append_message("conv-1", Sender.AI, "tie-b", 2000)
    store.append_message("conv-1", Sender.USER, "early", 1500)

    ascending = [m.text for m in store.list_messages("conv-1")]
    descending = [m.text for m in store.list_messages("conv-1", order="desc")]

    assert ascending == ["early", "tie-a", "tie-b", "late"]
    assert descending == list(reversed(ascending))


def test_list_messages_limit_applies_in_requested_order(store):
    store.create_conversation("conv-1", 1000)
    for idx in range(5):
        store.append_message("conv-1", Sender.USER, f"m{idx}", 1000 + idx)

    assert [m.text for m in store.list_messages("conv-1", limit=2)] == ["m0", "m1"]
    assert [m.text for m in store.list_messages("conv-1", limit=2, order="desc")] == ["m4", "m3"]
    assert list(store.list_messages("conv-1", limit=0)) == []


def test_list_messages_is_scoped_to_conversation(store):
    store.create_conversation("a", 1000)
    store.create_conversation("b", 1000)
    store.append_message("a", Sender.USER, "for a", 1001)
    store.append_message("b", Sender.USER, "for b", 1002)

    messages = list(store.list_messages("a"))
    assert [(m.conversation_id, m.text, m.sender) for m in messages] == [("a", "for a", Sender.USER)]


def test_list_messages_rejects_unknown_order(store):
    with pytest.raises(ValueError):
        store.list_messages("conv-1", order="sideways")


def test_list_messages_is_lazy_and_requeries(sql_store):
    sql_store.create_conversation("conv-1", 1000)
    sql_store.append_message("conv-1", Sender.USER, "one", 1001)

    pending = sql_store.list_messages("conv-1")
    sql_store.append_message("conv-1", Sender.AI, "two", 1002)

    # Nothing is read until iteration starts, so the later write is visible.
    assert [m.text for m in pending] == ["one", "two"]
    assert list(pending) == []
    assert len(list(sql_store.list_messages("conv-1"))) == 2


def test_sql_store_persists_sender_values(sql_store, tmp_path):
    sql_store.create_conversation("conv-1", 1000)
    sql_store.append_message("conv-1", Sender.USER, "hi", 1001)
    sql_store.append_message("conv-1", Sender.AI, "hello", 1002)

    with get_chat_session(tmp_path / "chat.sqlite") as db:
        senders = [row.sender for row in db.query(ChatMessage).order_by(ChatMessage.id).all()]

    assert senders == ["user", "ai"]


def test_sql_store_writes_survive_a_new_store_instance(tmp_path):
    from supportchat.chat.store import SqlConversationStore

    first = SqlConversationStore(tmp_path / "durable.sqlite")
    first.create_conversation("conv-1", 1000)
    first.append_message("conv-1", Sender.USER, "persisted", 1001)

    second = SqlConversationStore(tmp_path / "durable.sqlite")
    assert second.get_conversation("conv-1") is not None
    assert [m.text for m in second.list_messages("conv-1")] == ["persisted"]
