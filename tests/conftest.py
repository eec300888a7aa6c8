# tests/conftest.py
from __future__ import annotations

import pytest

from instafeed.core.media import MediaCache, PreloadCoordinator
from instafeed.core.transport import CallbackRegistry, JsonpTransport
from instafeed.orchestrators.client import InstagramClient
from tests.utils import (
    DEFAULT_CLIENT_ID,
    DEFAULT_PAGE_URL,
    DEFAULT_TOKEN,
    FakeImageLoader,
    FakeScriptLoader,
    png_bytes as _make_png,
)


# -------- Environment isolation --------
@pytest.fixture(autouse=True)
def _clear_instafeed_env(monkeypatch):
    for key in (
        "INSTAFEED_BASE_URL",
        "INSTAFEED_TIMEOUT_S",
        "INSTAFEED_USER_AGENT",
        "INSTAFEED_ALLOW_NON_200",
        "INSTAFEED_DEBUG",
    ):
        monkeypatch.delenv(key, raising=False)
    yield


# -------- Fakes --------
@pytest.fixture
def image_loader():
    return FakeImageLoader()


@pytest.fixture
def script_loader_factory():
    """
    Callable factory for FakeScriptLoader.

    Usage:
        loader = script_loader_factory({"/media/popular": payload})
    """

    def _factory(payloads=None, *, error=None):
        return FakeScriptLoader(payloads, error=error)

    return _factory


@pytest.fixture
def registry():
    return CallbackRegistry()


@pytest.fixture
def client_factory(image_loader, registry):
    """
    Callable factory for an InstagramClient wired to in-memory fakes.

    Usage:
        client, loader = client_factory({"/users/self/media/recent": payload})
        client, loader = client_factory(payload_map, token=None)
    """

    def _factory(payloads=None, *, token: str | None = DEFAULT_TOKEN, page_url: str | None = None, navigator=None, cache=None):
        loader = FakeScriptLoader(payloads)
        if page_url is None:
            page_url = f"{DEFAULT_PAGE_URL}#access_token={token}" if token else DEFAULT_PAGE_URL
        client = InstagramClient(
            DEFAULT_CLIENT_ID,
            page_url=page_url,
            transport=JsonpTransport(loader, registry=registry),
            cache=cache if cache is not None else MediaCache(),
            preloader=PreloadCoordinator(image_loader),
            navigator=navigator or (lambda url: None),
        )
        return client, loader

    return _factory


@pytest.fixture
def png_bytes():
    """
    Fixture that returns a callable to generate PNG bytes.
    Usage:
        data = png_bytes(64, 64)
    """
    return _make_png


# -------- Pytest markers --------
def pytest_configure(config):
    config.addinivalue_line("markers", "integration: marks integration tests")
