"""Opaque pagination cursors over the ranking sort key."""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass

from app.models.ranking import Direction
from app.services.ranker import SortKey, sort_key

CURSOR_VERSION = 1
MAX_CURSOR_LENGTH = 256


class InvalidInputError(Exception):
    """Raised when ranking query arguments cannot be honoured."""


class InvalidCursorError(InvalidInputError):
    """Raised when a cursor cannot be decoded."""


@dataclass(frozen=True, slots=True)
class CursorPosition:
    score: int
    user_id: int

    def key(self, order: Direction) -> SortKey:
        return sort_key(self.score, self.user_id, order)


def encode_cursor(score: int, user_id: int) -> str:
    payload = json.dumps({"v": CURSOR_VERSION, "s": score, "u": user_id}, separators=(",", ":"))
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")


def decode_cursor(cursor: str) -> CursorPosition:
    if len(cursor) > MAX_CURSOR_LENGTH:
        raise InvalidCursorError(f"Cursor longer than {MAX_CURSOR_LENGTH} characters")

    padded = cursor + "=" * (-len(cursor) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except ValueError as exc:
        # binascii.Error, UnicodeError and JSONDecodeError are all ValueErrors.
        raise InvalidCursorError(f"Malformed cursor: {cursor!r}") from exc

    if not isinstance(payload, dict) or payload.get("v") != CURSOR_VERSION:
        raise InvalidCursorError(f"Unsupported cursor: {cursor!r}")

    score = payload.get("s")
    user_id = payload.get("u")
    if type(score) is not int or type(user_id) is not int:
        raise InvalidCursorError(f"Malformed cursor: {cursor!r}")

    return CursorPosition(score=score, user_id=user_id)
