"""Runtime settings read from the process environment.

Settings are resolved once (see :func:`load_settings`) and then passed
explicitly to whatever needs them, so tests can build a :class:`Settings`
by hand instead of patching ``os.environ``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


DEFAULT_OPENAI_BASE_URL = "https://api.openai.com"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_PORT = 4000

_DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


def _parse_csv_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def _is_truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_str(name: str) -> str | None:
    raw = (os.getenv(name) or "").strip()
    return raw or None


def _env_int(name: str, default: int, *, minimum: int = 0) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return max(minimum, int(raw))
    except ValueError:
        return default


def _env_float(name: str, default: float, *, minimum: float = 0.0) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return max(minimum, float(raw))
    except ValueError:
        return default


def normalize_openai_base_url(value: str) -> str:
    """Normalize OpenAI-style base URLs.

    Accepts values like:
      - https://api.openai.com
      - https://api.openai.com/v1
      - https://api.openai.com/v1/chat/completions

    Returns the base URL without the /v1 suffix or endpoint path.
    """

    raw = (value or "").strip().rstrip("/")
    if not raw:
        return ""

    for suffix in ("/v1/chat/completions", "/v1/models", "/v1"):
        if raw.endswith(suffix):
            raw = raw[: -len(suffix)].rstrip("/")
            break

    return raw


@dataclass(frozen=True)
class Settings:
    openai_api_key: str | None = None
    openai_base_url: str = DEFAULT_OPENAI_BASE_URL
    openai_model: str = DEFAULT_OPENAI_MODEL
    openai_timeout_seconds: float = 30.0
    db_path: str | None = None
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    cors_origins: list[str] = field(default_factory=lambda: list(_DEFAULT_CORS_ORIGINS))
    cors_allow_credentials: bool = True

    @property
    def llm_configured(self) -> bool:
        return bool(self.openai_api_key)


def load_settings() -> Settings:
    """Build :class:`Settings` from environment variables.

    Malformed numeric values fall back to their defaults rather than failing
    startup; a missing API key is allowed and selects fallback replies.
    """

    api_key = _env_str("SUPPORTCHAT_OPENAI_API_KEY") or _env_str("OPENAI_API_KEY")
    base_url = normalize_openai_base_url(
        os.getenv("SUPPORTCHAT_OPENAI_BASE_URL") or DEFAULT_OPENAI_BASE_URL
    )

    credentials_raw = os.getenv("SUPPORTCHAT_CORS_ALLOW_CREDENTIALS")
    return Settings(
        openai_api_key=api_key,
        openai_base_url=base_url or DEFAULT_OPENAI_BASE_URL,
        openai_model=_env_str("SUPPORTCHAT_OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
        openai_timeout_seconds=_env_float("SUPPORTCHAT_OPENAI_TIMEOUT_SECONDS", 30.0, minimum=1.0),
        db_path=_env_str("SUPPORTCHAT_DB_PATH"),
        host=_env_str("SUPPORTCHAT_HOST") or "0.0.0.0",
        port=_env_int("PORT", DEFAULT_PORT, minimum=1),
        cors_origins=_parse_csv_list(os.getenv("SUPPORTCHAT_CORS_ORIGINS")) or list(_DEFAULT_CORS_ORIGINS),
        cors_allow_credentials=True if credentials_raw is None else _is_truthy(credentials_raw),
    )
