# instafeed/core/transport/__init__.py
from .jsonp import CallbackRegistry, JsonpTransport, parse_jsonp
from .loader import RequestsScriptLoader, ScriptLoader
from .urls import append_query_param, build_api_url

__all__ = [
    "CallbackRegistry",
    "JsonpTransport",
    "parse_jsonp",
    "ScriptLoader",
    "RequestsScriptLoader",
    "build_api_url",
    "append_query_param",
]
