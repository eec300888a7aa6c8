# instafeed/core/auth/__init__.py
from .credentials import Credentials
from .querystring import build_query_string, parse_query_string
from .scopes import Scope, build_authorize_url, translate_scope

__all__ = [
    "Credentials",
    "Scope",
    "translate_scope",
    "build_authorize_url",
    "parse_query_string",
    "build_query_string",
]
