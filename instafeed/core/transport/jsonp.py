"""
Cross-origin (JSONP) transport.

A JSONP request appends a uniquely named callback parameter to the endpoint
URL, registers a transient handler under that name, and loads the resulting
script through a single-use side channel (a ScriptLoader). The response is a
script of the form `name({...});`, which the transport evaluates by decoding
the JSON argument and dispatching it to the registered handler.

Trust assumption
----------------
JSONP means "run what the remote endpoint sends back". This transport decodes
the argument as JSON instead of executing it, but it still trusts the endpoint
to return the caller's payload under the caller's callback name. Only point it
at endpoints you would let execute code in your origin.

Guarantees
----------
- `on_result` is invoked at most once per request, and exactly once when the
  response arrives and decodes.
- The transient handler is unregistered when the request completes, whether it
  succeeded, the loader failed, or `on_result` raised.
- A second completion signal for the same callback name is ignored.
- No timeout and no retry of its own: a load that never finishes leaves the
  awaiting coroutine pending.
"""

from __future__ import annotations

import itertools
import json
import re
import time
from collections.abc import Callable
from typing import Any

from instafeed.core.diagnostics import get_logger, redact_url
from instafeed.core.errors import MalformedResponseError, transport_error_guard
from instafeed.schemas.models import ClientPolicy

from .loader import RequestsScriptLoader, ScriptLoader
from .urls import append_query_param

logger = get_logger(__name__)

# `/**/ name( ... );` with an optional comment prefix and trailing semicolon.
_JSONP_ENVELOPE = re.compile(
    r"^\s*(?:/\*\*/\s*)?(?P<name>[A-Za-z_$][\w$]*)\s*\((?P<body>.*)\)\s*;?\s*$",
    re.DOTALL,
)

Handler = Callable[[Any], None]


class CallbackRegistry:
    """
    The table of transient, globally addressable JSONP handlers.

    Owned explicitly (by a transport, or shared between transports on purpose)
    instead of living in module state, so tests get a clean table each time.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}

    def register(self, name: str, handler: Handler) -> None:
        if name in self._handlers:
            raise ValueError(f"Callback {name!r} is already registered")
        self._handlers[name] = handler

    def unregister(self, name: str) -> bool:
        """Remove a handler; safe to call more than once."""
        return self._handlers.pop(name, None) is not None

    def dispatch(self, name: str, payload: Any) -> bool:
        """Invoke the handler registered under `name`. False if there is none."""
        handler = self._handlers.get(name)
        if handler is None:
            return False
        handler(payload)
        return True

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)


def parse_jsonp(body: str) -> tuple[str, Any]:
    """Split a JSONP script into (callback name, decoded argument)."""
    m = _JSONP_ENVELOPE.match(body)
    if not m:
        raise MalformedResponseError("Response is not a JSONP callback invocation")
    try:
        payload = json.loads(m.group("body"))
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"JSONP argument is not valid JSON: {e}") from e
    return m.group("name"), payload


class JsonpTransport:
    """One-shot, callback-based cross-origin requests over a ScriptLoader."""

    # Process-wide, so two names minted in the same clock tick still differ.
    _counter = itertools.count(1)

    def __init__(
        self,
        loader: ScriptLoader | None = None,
        *,
        registry: CallbackRegistry | None = None,
        policy: ClientPolicy | None = None,
    ) -> None:
        self.policy = policy or ClientPolicy()
        self.loader = loader or RequestsScriptLoader(self.policy)
        self.registry = registry if registry is not None else CallbackRegistry()

    def next_callback_name(self) -> str:
        return f"{self.policy.callback_prefix}{time.time_ns()}_{next(JsonpTransport._counter)}"

    def evaluate(self, body: str) -> bool:
        """Run a JSONP body against the registry. False if nobody was listening."""
        name, payload = parse_jsonp(body)
        if not self.registry.dispatch(name, payload):
            logger.debug("No handler registered for JSONP callback %s", name)
            return False
        return True

    async def request(self, url: str, on_result: Callable[[Any], None] | None = None) -> Any:
        """
        Load `url` as JSONP and return the decoded payload.

        `on_result`, when given, is called once with the payload before this
        coroutine returns. Exceptions from `on_result` propagate after cleanup.
        Loader and decoding failures raise a TransportError subclass and the
        callback is not called.
        """
        name = self.next_callback_name()
        target = append_query_param(url, self.policy.callback_param, name)
        received: list[Any] = []

        def _complete(payload: Any) -> None:
            if received:
                logger.debug("Ignoring duplicate completion for %s", name)
                return
            received.append(payload)

        self.registry.register(name, _complete)
        logger.debug("JSONP request %s", redact_url(target))
        try:
            with transport_error_guard():
                body = await self.loader.load(target)
                self.evaluate(body)
            if not received:
                raise MalformedResponseError(f"Response did not invoke callback {name}")
            payload = received[0]
            if on_result is not None:
                on_result(payload)
            return payload
        finally:
            self.registry.unregister(name)


__all__ = ["CallbackRegistry", "JsonpTransport", "parse_jsonp"]
