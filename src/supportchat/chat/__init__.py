"""Conversation state and message orchestration.

Conversations live in their own SQLite database (see
:mod:`supportchat.chat.connect`); the orchestrator only talks to it through a
:class:`~supportchat.chat.store.ConversationStore`, so an in-memory store can
stand in for tests.
"""
