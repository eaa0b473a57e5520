"""Authentication and scope dependencies for protected routes."""

from __future__ import annotations

import logging

from fastapi import Depends, Request

from app.api.errors import forbidden, unauthorized
from app.config import Settings
from app.services.scope import should_allow
from app.storage.tokens import TokenInfo, TokenNotFoundError, TokenStorage

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_storage(request: Request) -> TokenStorage:
    return request.app.state.token_storage


async def authenticate(request: Request, storage: TokenStorage) -> TokenInfo:
    header = request.headers.get("Authorization")
    if not header:
        raise unauthorized()

    scheme, _, token = header.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise unauthorized("Bad token format")

    try:
        return await storage.get(token.strip())
    except TokenNotFoundError as exc:
        raise unauthorized("Invalid or expired token") from exc


async def authorize_ranking(
    request: Request,
    settings: Settings = Depends(get_settings),
    storage: TokenStorage = Depends(get_token_storage),
) -> TokenInfo | None:
    required_scope = settings.ranking_required_scope
    if not required_scope:
        return None

    token_info = await authenticate(request, storage)
    if not should_allow(required_scope, token_info.scopes):
        logger.info("user %s lacks scope %s", token_info.user_id, required_scope)
        raise forbidden(required_scope)
    return token_info
