"""Process configuration loaded from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from dotenv import load_dotenv

from app.storage.redis import DEFAULT_REDIS_URL
from app.storage.tokens import DEFAULT_TOKEN_TTL_SECONDS

DEFAULT_REQUIRED_SCOPE = "user:read"


def _to_int(value: str, key_name: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise RuntimeError(f"Invalid integer for {key_name}: {value!r}") from e


def _get_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = (env.get(key) or "").strip()
    return _to_int(raw, key) if raw else default


@dataclass(frozen=True, slots=True)
class Settings:
    redis_url: str = DEFAULT_REDIS_URL

    # Unset means the server's local zone.
    timezone: str | None = None

    ranking_required_scope: str = DEFAULT_REQUIRED_SCOPE
    default_page_size: int = 10
    max_page_size: int = 100

    auth_token_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.max_page_size < 1:
            raise RuntimeError("RANKING_MAX_PAGE_SIZE must be positive")
        if not 0 < self.default_page_size <= self.max_page_size:
            raise RuntimeError("RANKING_DEFAULT_PAGE_SIZE must be between 1 and RANKING_MAX_PAGE_SIZE")

    @classmethod
    def load(cls) -> "Settings":
        """
        Loads from process env (and .env if present).
        Fails fast on malformed values.
        """
        load_dotenv()
        env = os.environ

        return cls(
            redis_url=(env.get("REDIS_URL") or DEFAULT_REDIS_URL).strip(),
            timezone=(env.get("TIMEZONE") or "").strip() or None,
            ranking_required_scope=env.get("RANKING_REQUIRED_SCOPE", DEFAULT_REQUIRED_SCOPE).strip(),
            default_page_size=_get_int(env, "RANKING_DEFAULT_PAGE_SIZE", 10),
            max_page_size=_get_int(env, "RANKING_MAX_PAGE_SIZE", 100),
            auth_token_ttl_seconds=_get_int(env, "AUTH_TOKEN_TTL_SECONDS", DEFAULT_TOKEN_TTL_SECONDS),
            log_level=(env.get("LOG_LEVEL") or "INFO").strip().upper(),
        )
