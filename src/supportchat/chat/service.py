from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, Protocol

import requests

from supportchat.config import Settings
from supportchat.logging import get_logger


logger = get_logger(__name__)

SUPPORT_EMAIL = "support@spurstore.test"

# Generator-facing bound on the latest user turn.
MAX_USER_CHARS = 1000
MAX_OUTPUT_TOKENS = 200
TEMPERATURE = 0.4

FALLBACK_NOT_CONFIGURED = (
    "Our AI agent is currently unavailable because the API key is not configured. "
    f"Please contact human support at {SUPPORT_EMAIL}."
)
FALLBACK_EMPTY_REPLY = (
    "Sorry, I couldn't generate a response just now. "
    f"Please try again, or contact human support at {SUPPORT_EMAIL}."
)
FALLBACK_PROVIDER_ERROR = (
    "Sorry, our AI agent ran into a problem. "
    f"Please try again in a moment or contact human support at {SUPPORT_EMAIL}."
)

SYSTEM_PROMPT = f"""
You are a helpful support agent for a small e-commerce store called Spur Store.
Answer clearly and concisely in 2-4 sentences.

Store FAQs:
- Shipping: We ship worldwide. Standard shipping takes 5-7 business days within the country and 7-14 business days for international orders.
- Returns: We accept returns within 30 days of delivery for unused items in original packaging. Refunds are processed within 5-7 business days after we receive the returned item.
- Refunds: Refunds are issued to the original payment method only.
- Support Hours: Our live support is available Monday to Friday, 9am-6pm IST. You can email us any time at {SUPPORT_EMAIL}.

If you are unsure or the user asks something unrelated to shopping, politely say you are a simple support bot and suggest contacting human support.
""".strip()


@dataclass(frozen=True)
class AssistantReply:
    content: str
    provider: str
    model: str | None = None
    meta: dict[str, Any] | None = None
    ok: bool = True
    error: str | None = None


class ReplyGenerator(Protocol):
    def generate(self, history: list[dict[str, Any]], message: str) -> AssistantReply: ...


def _truncate_text(value: str, *, limit: int) -> str:
    if limit <= 0:
        return ""
    text = value or ""
    if len(text) <= limit:
        return text
    return text[:limit]


def build_messages(*, history: list[dict[str, Any]] | None, message: str) -> list[dict[str, Any]]:
    """Assemble the chat-completion payload: system prompt, history, user turn."""

    messages: list[dict[str, Any]] = [{"role": "system", "content": SYSTEM_PROMPT}]

    history_items: list[dict[str, Any]] = []
    for item in history or []:
        if not isinstance(item, dict):
            continue
        role = str(item.get("role") or "user")
        if role not in {"user", "assistant"}:
            continue
        content = str(item.get("content", "") or "")
        if not content.strip():
            continue
        history_items.append({"role": role, "content": content})

    # The current user turn is already persisted, so it usually closes the
    # history too; send it only once.
    if (
        history_items
        and history_items[-1]["role"] == "user"
        and history_items[-1]["content"].strip() == message.strip()
    ):
        history_items.pop()

    messages.extend(history_items)
    messages.append({"role": "user", "content": _truncate_text(message, limit=MAX_USER_CHARS)})
    return messages


class FallbackReplyGenerator:
    """Used when no provider credential is configured."""

    provider = "fallback"

    def generate(self, history: list[dict[str, Any]], message: str) -> AssistantReply:
        return AssistantReply(
            content=FALLBACK_NOT_CONFIGURED,
            provider=self.provider,
            ok=False,
            error="not_configured",
        )


class OpenAIReplyGenerator:
    """OpenAI-compatible ``/v1/chat/completions`` client.

    :meth:`generate` never raises: transport errors, HTTP errors, unparsable
    bodies and empty completions are logged and answered with a fallback
    string that points at human support.
    """

    provider = "openai"

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str,
        model: str,
        timeout: float = 30.0,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"{self.base_url}/v1/chat/completions"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _failure(self, content: str, error: str, meta: dict[str, Any]) -> AssistantReply:
        return AssistantReply(
            content=content,
            provider=self.provider,
            model=self.model,
            meta=meta,
            ok=False,
            error=error,
        )

    def generate(self, history: list[dict[str, Any]], message: str) -> AssistantReply:
        url = self.url
        try:
            payload = {
                "model": self.model,
                "messages": build_messages(history=history, message=message),
                "max_tokens": MAX_OUTPUT_TOKENS,
                "temperature": TEMPERATURE,
                "stream": False,
            }
            started = time.monotonic()
            response = requests.post(url, json=payload, headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.HTTPError as exc:
            response_obj = getattr(exc, "response", None)
            status_code = getattr(response_obj, "status_code", None)
            error = f"{type(exc).__name__}: {exc}"
            logger.warning("LLM request failed (%s, status=%s): %s", url, status_code, error)
            return self._failure(
                FALLBACK_PROVIDER_ERROR,
                error,
                {"url": url, "status_code": status_code, "error": repr(exc)},
            )
        except Exception as exc:
            error = f"{type(exc).__name__}: {exc}"
            logger.warning("LLM request failed (%s): %s", url, error)
            return self._failure(FALLBACK_PROVIDER_ERROR, error, {"url": url, "error": repr(exc)})
        elapsed_ms = int((time.monotonic() - started) * 1000)

        content = ""
        usage: dict[str, Any] | None = None
        if isinstance(data, dict):
            usage_obj = data.get("usage")
            if isinstance(usage_obj, dict):
                usage = usage_obj

            choices = data.get("choices")
            if isinstance(choices, list) and choices:
                choice0 = choices[0]
                if isinstance(choice0, dict):
                    message_obj = choice0.get("message")
                    if isinstance(message_obj, dict):
                        content = str(message_obj.get("content") or "")

        meta: dict[str, Any] = {"url": url, "elapsed_ms": elapsed_ms}
        if usage is not None:
            meta["usage"] = usage

        content = content.strip()
        if not content:
            logger.warning(
                "LLM returned no usable content (%s): %s",
                url,
                _truncate_text(json.dumps(data, default=str), limit=500),
            )
            return self._failure(FALLBACK_EMPTY_REPLY, "empty_reply", meta)

        return AssistantReply(content=content, provider=self.provider, model=self.model, meta=meta)


def make_reply_generator(settings: Settings) -> ReplyGenerator:
    if not settings.llm_configured:
        logger.warning("No OpenAI API key configured; replies will use the fallback message.")
        return FallbackReplyGenerator()
    return OpenAIReplyGenerator(
        settings.openai_api_key or "",
        base_url=settings.openai_base_url,
        model=settings.openai_model,
        timeout=settings.openai_timeout_seconds,
    )
