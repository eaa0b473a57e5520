"""Bearer token lookup backed by Redis.

Tokens live at ``auth:token:<token>`` as JSON ``{"user_id": ..., "scopes": [...]}``
with a sliding expiry that is renewed on every successful lookup.
"""

from __future__ import annotations

import json
import secrets
from dataclasses import dataclass
from typing import Protocol

from redis.asyncio import Redis

TOKEN_KEY_PREFIX = "auth:token:"
DEFAULT_TOKEN_TTL_SECONDS = 8 * 60 * 60


class TokenNotFoundError(Exception):
    """Raised when a token is unknown or has expired."""


@dataclass(frozen=True, slots=True)
class TokenInfo:
    user_id: int
    scopes: tuple[str, ...] = ()


class TokenStorage(Protocol):
    async def get(self, token: str) -> TokenInfo: ...


class RedisTokenStorage:
    def __init__(
        self,
        redis_client: Redis,
        ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
        key_prefix: str = TOKEN_KEY_PREFIX,
    ):
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix

    def token_key(self, token: str) -> str:
        return f"{self.key_prefix}{token}"

    async def get(self, token: str) -> TokenInfo:
        key = self.token_key(token)
        raw = await self.redis.get(key)
        if raw is None:
            raise TokenNotFoundError("token not found")

        await self.redis.expire(key, self.ttl_seconds)
        payload = json.loads(raw)
        return TokenInfo(user_id=int(payload["user_id"]), scopes=tuple(payload.get("scopes") or ()))

    async def create(self, info: TokenInfo) -> str:
        token = secrets.token_urlsafe(48)
        payload = json.dumps({"user_id": info.user_id, "scopes": list(info.scopes)})
        await self.redis.set(self.token_key(token), payload, ex=self.ttl_seconds)
        return token

    async def delete(self, token: str) -> None:
        await self.redis.delete(self.token_key(token))
