"""Scope matching for ``resource:action`` authorization strings."""

from __future__ import annotations

from collections.abc import Iterable

WILDCARD = "*"


def should_allow(required_scope: str, granted_scopes: Iterable[str]) -> bool:
    """Return whether any granted scope satisfies ``required_scope``.

    An empty required scope marks a public operation. Granted scopes may use
    ``*`` for the whole scope or for either component (``user:*``, ``*:read``).
    Granted scopes that are not a single ``resource:action`` pair are ignored.
    """
    if not required_scope:
        return True

    required_parts = required_scope.split(":")
    for scope in granted_scopes:
        if scope == WILDCARD:
            return True

        granted_parts = scope.split(":")
        if len(required_parts) != 2 or len(granted_parts) != 2:
            continue

        resource, action = required_parts
        granted_resource, granted_action = granted_parts
        resource_match = granted_resource in (WILDCARD, resource)
        action_match = granted_action in (WILDCARD, action)
        if resource_match and action_match:
            return True

    return False
