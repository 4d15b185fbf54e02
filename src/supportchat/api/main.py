from __future__ import annotations

# src/supportchat/api/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from supportchat.api.routes.chat import router as chat_router
from supportchat.chat.orchestrator import ConversationOrchestrator
from supportchat.chat.service import make_reply_generator
from supportchat.chat.store import SqlConversationStore
from supportchat.config import Settings, load_settings
from supportchat.logging import get_logger


logger = get_logger(__name__)


def build_orchestrator(settings: Settings) -> ConversationOrchestrator:
    store = SqlConversationStore(settings.db_path)
    return ConversationOrchestrator(store, make_reply_generator(settings))


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body."
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = str(first.get("msg") or "invalid value")
    return f"Invalid request: {location}: {message}" if location else f"Invalid request: {message}"


def create_app(
    settings: Settings | None = None,
    orchestrator: ConversationOrchestrator | None = None,
) -> FastAPI:
    """Build the HTTP app.

    When ``orchestrator`` is omitted one is built from ``settings`` at
    startup, backed by the SQLite store.
    """

    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "orchestrator", None) is None:
            app.state.orchestrator = build_orchestrator(settings)
        yield

    app = FastAPI(title="supportchat", lifespan=lifespan)
    app.state.settings = settings
    app.state.orchestrator = orchestrator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(chat_router)
    return app


app = create_app()
