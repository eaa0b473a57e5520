from __future__ import annotations

import base64
import json

import pytest

from app.models.ranking import Direction
from app.services.cursor import (
    MAX_CURSOR_LENGTH,
    CursorPosition,
    InvalidCursorError,
    decode_cursor,
    encode_cursor,
)


def test_cursor_is_opaque_and_url_safe():
    cursor = encode_cursor(-40, 17)

    assert "{" not in cursor and ":" not in cursor
    assert all(ch.isalnum() or ch in "-_" for ch in cursor)
    assert decode_cursor(cursor) == CursorPosition(score=-40, user_id=17)


def test_cursor_key_follows_order():
    position = CursorPosition(score=10, user_id=3)

    assert position.key(Direction.DESC) == (-10, 3)
    assert position.key(Direction.ASC) == (10, 3)


def _raw(payload) -> str:
    return base64.urlsafe_b64encode(json.dumps(payload).encode()).decode()


@pytest.mark.parametrize(
    "cursor",
    [
        "definitely-not-a-cursor",
        "!!!",
        "e30",  # {}
        _raw([1, 2]),
        _raw({"v": 2, "s": 1, "u": 1}),
        _raw({"v": 1, "s": "1", "u": 1}),
        _raw({"v": 1, "s": 1, "u": True}),
        _raw({"v": 1, "s": 1}),
    ],
)
def test_undecodable_cursors_are_rejected(cursor):
    with pytest.raises(InvalidCursorError):
        decode_cursor(cursor)


def test_cursor_longer_than_limit_is_rejected_before_decoding():
    padded = encode_cursor(1, 1) + "A" * (MAX_CURSOR_LENGTH + 1)

    with pytest.raises(InvalidCursorError, match="longer than"):
        decode_cursor(padded)
