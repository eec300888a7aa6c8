"""
Script loaders: the single-use side channel a JSONP request goes through.

A loader fetches the body behind a callback-bearing URL and hands it back to
the transport, which evaluates the JSONP envelope. One implementation exists
per host environment; tests substitute a fake that answers from memory.
"""

from __future__ import annotations

import asyncio
from typing import Protocol, runtime_checkable

import requests

from instafeed.core.diagnostics import redact_url
from instafeed.core.errors import NetworkError
from instafeed.schemas.models import ClientPolicy


@runtime_checkable
class ScriptLoader(Protocol):
    """
    Protocol for loading a JSONP script body.

    Implementations perform exactly one load per call and must not retry.
    Failures raise (preferably NetworkError); the transport takes care of
    releasing its callback registration either way.
    """

    async def load(self, url: str) -> str: ...


class RequestsScriptLoader:
    """Loads script bodies with `requests` on a worker thread."""

    def __init__(self, policy: ClientPolicy | None = None) -> None:
        self._policy = policy or ClientPolicy()

    def _headers(self) -> dict[str, str]:
        return {
            "User-Agent": self._policy.user_agent,
            "Accept": "application/javascript, */*;q=0.1",
            "Connection": "close",
        }

    def _get(self, url: str) -> str:
        try:
            resp = requests.get(url, headers=self._headers(), timeout=self._policy.timeout_s)
        except requests.RequestException as e:
            raise NetworkError(redact_url(str(e))) from e

        if resp.status_code >= 400 and not self._policy.allow_non_200:
            raise NetworkError(f"HTTP {resp.status_code} while loading script")
        resp.encoding = resp.encoding or "utf-8"
        return resp.text

    async def load(self, url: str) -> str:
        return await asyncio.to_thread(self._get, url)


__all__ = ["ScriptLoader", "RequestsScriptLoader"]
