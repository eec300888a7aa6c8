"""
Credential holder.

Holds the application's client id and, when the page was reached through an
OAuth implicit-grant redirect, the access token found in the URL fragment.
The token is read once at construction and never changes afterwards.
"""

from __future__ import annotations

from urllib.parse import urldefrag

from pydantic import BaseModel, ConfigDict, Field

from .querystring import parse_query_string


class Credentials(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    client_id: str = Field(..., description="Application identifier sent when no token is held.")
    access_token: str | None = Field(None, description="Token from the redirect fragment, if any.")

    @classmethod
    def from_fragment(cls, client_id: str, fragment: str) -> Credentials:
        """Build credentials from the part of the address after `#`."""
        params = parse_query_string(fragment.lstrip("#"))
        token = params.get("access_token")
        # A bare `access_token` key (value True) carries no token.
        return cls(client_id=client_id, access_token=token if isinstance(token, str) and token else None)

    @classmethod
    def from_page_url(cls, client_id: str, page_url: str) -> Credentials:
        """Build credentials from the full current page address."""
        _, fragment = urldefrag(page_url or "")
        return cls.from_fragment(client_id, fragment)

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    def auth_params(self) -> dict[str, str]:
        """Query parameters that authorize a request; the token wins over the client id."""
        if self.access_token:
            return {"access_token": self.access_token}
        return {"client_id": self.client_id}


__all__ = ["Credentials"]
