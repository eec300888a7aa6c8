"""
Query-string / URL-fragment codec.

The OAuth implicit grant hands the token back in the fragment of the
redirect address (`#access_token=...`), and every API call carries its
credential in the query string. Both directions live here.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, unquote, unquote_plus

# Characters left as-is when escaping (same set a browser's escape() keeps).
_SAFE = "@*_-./"


def parse_query_string(text: str) -> dict[str, str | bool]:
    """
    Turn a query string (after `?` or `#`) into a key/value dict.

    - Parts are separated by `&`; empty parts are skipped.
    - Each part is split at the first `=`.
    - A bare key (no `=`) maps to True.
    - `+` in values means space; percent escapes are decoded.

    Never raises: malformed input simply yields fewer keys.
    """
    params: dict[str, str | bool] = {}
    for part in text.split("&"):
        if not part:
            continue
        key, sep, value = part.partition("=")
        key = unquote(key)
        if not key:
            continue
        params[key] = unquote_plus(value) if sep else True
    return params


def build_query_string(params: Mapping[str, Any]) -> str:
    """
    Turn a mapping into a query string, preserving insertion order.

    Falsy values are skipped, True becomes a bare key, strings are escaped
    with spaces as `+`, anything else is stringified first.
    """
    parts: list[str] = []
    for key, value in params.items():
        if not value:
            continue
        if value is True:
            parts.append(quote(key, safe=_SAFE))
            continue
        escaped = quote(str(value), safe=_SAFE).replace("%20", "+")
        parts.append(f"{quote(key, safe=_SAFE)}={escaped}")
    return "&".join(parts)


__all__ = ["parse_query_string", "build_query_string"]
