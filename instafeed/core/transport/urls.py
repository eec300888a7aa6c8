# instafeed/core/transport/urls.py

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from instafeed.core.auth.querystring import build_query_string


def build_api_url(base_url: str, path: str, params: Mapping[str, Any] | None = None) -> str:
    """Join base URL and path (leading `/` added if missing) and append the query string."""
    if not path.startswith("/"):
        path = "/" + path
    return f"{base_url.rstrip('/')}{path}?{build_query_string(params or {})}"


def append_query_param(url: str, key: str, value: str) -> str:
    """Append one already-safe parameter using `?` or `&` as appropriate."""
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}{key}={value}"


__all__ = ["build_api_url", "append_query_param"]
