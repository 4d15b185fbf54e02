from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from supportchat.chat.orchestrator import ConversationOrchestrator


def get_orchestrator(request: Request) -> ConversationOrchestrator:
    """Return the orchestrator attached to ``app.state`` at startup."""

    return request.app.state.orchestrator


OrchestratorDep = Annotated[ConversationOrchestrator, Depends(get_orchestrator)]
