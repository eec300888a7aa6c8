"""
OAuth scopes and the authorize-redirect URL.
"""

from __future__ import annotations

from enum import IntFlag
from urllib.parse import urldefrag

from instafeed.core.errors import ConfigurationError

from .querystring import build_query_string


class Scope(IntFlag):
    """A bitmask of OAuth scopes."""

    BASIC = 0
    LIKES = 1
    COMMENTS = 2
    RELATIONSHIPS = 4
    ALL = 7


# Bit → scope name, in the order names are emitted.
_SCOPE_NAMES: tuple[tuple[int, str], ...] = (
    (Scope.LIKES, "likes"),
    (Scope.COMMENTS, "comments"),
    (Scope.RELATIONSHIPS, "relationships"),
)


def translate_scope(scope: int) -> list[str]:
    """
    Translate a scope bitmask into the scope names the authorize endpoint expects.

    "basic" is implied by every grant and always comes first; each set bit adds
    its own name. Zero bits, or bits outside Scope.ALL, are a ConfigurationError.
    """
    value = int(scope)
    if value <= 0 or value & ~int(Scope.ALL):
        raise ConfigurationError(f"Invalid scope {value}")
    return ["basic"] + [name for bit, name in _SCOPE_NAMES if value & bit]


def build_authorize_url(*, client_id: str, redirect_uri: str, scope: int, auth_url: str) -> str:
    """URL to send the user to for an implicit-grant (token in fragment) login."""
    redirect, _ = urldefrag(redirect_uri)
    if not redirect:
        raise ConfigurationError("A redirect URI is required to request a token")
    query = build_query_string(
        {
            "client_id": client_id,
            "redirect_uri": redirect,
            "response_type": "token",
            "scope": " ".join(translate_scope(scope)),
        }
    )
    return f"{auth_url}?{query}"


__all__ = ["Scope", "translate_scope", "build_authorize_url"]
