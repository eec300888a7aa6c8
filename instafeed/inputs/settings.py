"""
Settings loader for the API client.

Goals
-----
- File-first configuration validated with Pydantic (ClientPolicy).
- Works with no file at all: defaults point at the public v1 API.
- Minimal environment-variable overrides for CI/CLI convenience.

Supported JSON shapes
---------------------
1) Flat (root = ClientPolicy fields)
   { "timeout_s": 10, "user_agent": "my-app/1.0" }

2) Nested
   { "policy": { ... ClientPolicy fields ... } }

Environment overrides (optional)
--------------------------------
- INSTAFEED_BASE_URL       -> ClientPolicy.base_url
- INSTAFEED_TIMEOUT_S      -> ClientPolicy.timeout_s (float)
- INSTAFEED_USER_AGENT     -> ClientPolicy.user_agent
- INSTAFEED_ALLOW_NON_200  -> ClientPolicy.allow_non_200 (1/true/yes/on)

Public API
----------
- class SettingsLoader:
    - load(path: str | Path | None) -> ClientPolicy
    - load_json(text: str) -> ClientPolicy
    - with_overrides(policy, **kwargs) -> ClientPolicy (non-destructive copy)
- function load_policy(path: str | Path | None) -> ClientPolicy  (convenience)
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from pydantic import ValidationError

from instafeed.schemas.models import ClientPolicy

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class SettingsLoader:
    """
    File-first settings loader with light env overrides.

    Default search (when path=None):
        1) ./instafeed.json
        2) built-in defaults
    """

    env_prefix: str = "INSTAFEED_"

    # ---------- Public API ----------

    def load(self, path: str | Path | None = None) -> ClientPolicy:
        p = self._resolve_path(path)
        raw = self._read_json_file(p) if p is not None else {}
        policy = self._parse_root(raw)
        return self._apply_env_overrides(policy)

    def load_json(self, text: str) -> ClientPolicy:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON payload: {e}") from e
        if not isinstance(raw, dict):
            raise ValueError("Settings JSON must be an object.")
        policy = self._parse_root(raw)
        return self._apply_env_overrides(policy)

    def with_overrides(self, policy: ClientPolicy, **overrides: Any) -> ClientPolicy:
        """
        Return a *new* ClientPolicy with the non-null overrides applied (validated).
        Does not mutate the original instance.
        """
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return policy
        try:
            return ClientPolicy.model_validate({**policy.model_dump(), **updates})
        except ValidationError as e:
            raise ValueError(f"Settings validation failed:\n{e}") from e

    # ---------- Internals ----------

    def _resolve_path(self, path: str | Path | None) -> Path | None:
        if path is not None:
            p = Path(path)
            if not p.exists():
                raise FileNotFoundError(f"Settings file not found: {p}")
            return p
        default = Path("instafeed.json")
        return default if default.exists() else None

    def _read_json_file(self, p: Path) -> dict[str, Any]:
        if p.suffix.lower() != ".json":
            raise ValueError(f"Unsupported settings format for {p.name}; only .json is supported.")
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {p}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Settings in {p} must be a JSON object.")
        return cast(dict[str, Any], data)

    def _parse_root(self, data: dict[str, Any]) -> ClientPolicy:
        body = data.get("policy", data)
        try:
            return ClientPolicy.model_validate(body)
        except ValidationError as e:
            raise ValueError(f"Settings validation failed:\n{e}") from e

    def _apply_env_overrides(self, policy: ClientPolicy) -> ClientPolicy:
        prefix = self.env_prefix
        updates: dict[str, Any] = {}

        base_url = os.getenv(f"{prefix}BASE_URL")
        if base_url:
            updates["base_url"] = base_url.strip()

        timeout = os.getenv(f"{prefix}TIMEOUT_S")
        if timeout:
            try:
                value = float(timeout)
                if value > 0:
                    updates["timeout_s"] = value
            except ValueError:
                # Ignore bad value; keep validated timeout
                pass

        ua = os.getenv(f"{prefix}USER_AGENT")
        if ua:
            updates["user_agent"] = ua

        non_200 = os.getenv(f"{prefix}ALLOW_NON_200")
        if non_200:
            updates["allow_non_200"] = non_200.strip().lower() in _TRUTHY

        if not updates:
            return policy
        return policy.model_copy(update=updates)


# ----------------------------
# Convenience function
# ----------------------------


def load_policy(path: str | Path | None = None) -> ClientPolicy:
    """Convenience wrapper for one-shot callers."""
    return SettingsLoader().load(path)


__all__ = ["SettingsLoader", "load_policy"]
