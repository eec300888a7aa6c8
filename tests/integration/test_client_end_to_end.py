from __future__ import annotations

import asyncio
from urllib.parse import parse_qs, urlsplit

import pytest

from instafeed.core.errors import ApiResponseError, NetworkError
from instafeed.core.media import MediaCache
from instafeed.schemas.models import MediaRecord, PreloadStatus
from tests.utils import DEFAULT_TOKEN, make_payload, make_raw_media

pytestmark = pytest.mark.integration

FEED = "/users/self/media/recent"
LIKES = "/users/self/media/liked"
POPULAR = "/media/popular"


def test_feed_surfaces_only_images(client_factory) -> None:
    payload = {"data": [{"id": "1", "type": "image", "images": {"standard_resolution": {"url": "u1"}}}, {"id": "2", "type": "video"}]}
    client, loader = client_factory({FEED: payload})
    seen: list[list[MediaRecord]] = []

    records = asyncio.run(client.get_feed("self", seen.append))

    assert [r.id for r in records] == ["1"]
    assert records[0].image_url == "u1"
    assert seen == [records]
    assert len(client.transport.registry) == 0

    q = parse_qs(urlsplit(loader.urls[0]).query)
    assert q["access_token"] == [DEFAULT_TOKEN]
    assert "client_id" not in q
    assert q["callback"][0].startswith("_instagram_jsonp_cb_")


def test_each_operation_hits_its_endpoint(client_factory) -> None:
    client, loader = client_factory(
        {
            "/users/42/media/recent": make_payload(make_raw_media("a")),
            "/users/42/media/liked": make_payload(make_raw_media("b")),
            POPULAR: make_payload(make_raw_media("c")),
        },
        token=None,
    )

    async def scenario():
        return (
            await client.get_feed("42"),
            await client.get_likes("42"),
            await client.get_top_images(),
        )

    feed, likes, top = asyncio.run(scenario())
    assert [r.id for r in feed] == ["a"]
    assert [r.id for r in likes] == ["b"]
    assert [r.id for r in top] == ["c"]
    paths = [urlsplit(u).path for u in loader.urls]
    assert paths == ["/v1/users/42/media/recent", "/v1/users/42/media/liked", "/v1/media/popular"]
    assert all("client_id=client-123" in u for u in loader.urls)


def test_same_media_across_endpoints_is_one_record(client_factory) -> None:
    client, _ = client_factory(
        {
            FEED: make_payload(make_raw_media("1", "https://cdn.example.com/v1.jpg")),
            LIKES: make_payload(make_raw_media("1", "https://cdn.example.com/v2.jpg"), make_raw_media("2")),
        }
    )

    async def scenario():
        return await client.get_feed("self"), await client.get_likes("self")

    feed, likes = asyncio.run(scenario())
    assert likes[0] is feed[0]
    assert feed[0].image_url == "https://cdn.example.com/v2.jpg"
    assert len(client.cache) == 2


def test_shared_cache_across_clients(client_factory) -> None:
    shared = MediaCache()
    c1, _ = client_factory({POPULAR: make_payload(make_raw_media("1"))}, cache=shared)
    c2, _ = client_factory({POPULAR: make_payload(make_raw_media("1"))}, cache=shared)
    a = asyncio.run(c1.get_top_images())
    b = asyncio.run(c2.get_top_images())
    assert a[0] is b[0]


def test_preload_waits_for_assets(client_factory, image_loader) -> None:
    client, _ = client_factory(
        {POPULAR: make_payload(make_raw_media("1", "https://cdn.example.com/x.jpg"), make_raw_media("2", "https://cdn.example.com/x.jpg"), make_raw_media("3"))}
    )
    seen: list = []

    records = asyncio.run(client.get_top_images(seen.append, preload=True))

    assert [r.id for r in records] == ["1", "2", "3"]
    assert seen == [records] and seen[0] is records
    assert sorted(image_loader.calls) == ["https://cdn.example.com/3.jpg", "https://cdn.example.com/x.jpg"]
    assert all(client.preloader.status_of(r.image_url) is PreloadStatus.SUCCEEDED for r in records)


def test_without_preload_nothing_is_downloaded(client_factory, image_loader) -> None:
    client, _ = client_factory({POPULAR: make_payload(make_raw_media("1"))})
    asyncio.run(client.get_top_images())
    assert image_loader.calls == []


def test_concurrent_preloading_requests_download_once(client_factory, image_loader) -> None:
    shared_url = "https://cdn.example.com/shared.jpg"
    client, _ = client_factory(
        {
            FEED: make_payload(make_raw_media("1", shared_url)),
            LIKES: make_payload(make_raw_media("2", shared_url)),
        }
    )

    async def scenario():
        return await asyncio.gather(
            client.get_feed("self", preload=True),
            client.get_likes("self", preload=True),
        )

    feed, likes = asyncio.run(scenario())
    assert [r.id for r in feed] == ["1"] and [r.id for r in likes] == ["2"]
    assert image_loader.calls == [shared_url]


def test_api_error_envelope_raises_and_skips_callback(client_factory) -> None:
    error_payload = {"meta": {"code": 400, "error_type": "OAuthAccessTokenException", "error_message": "invalid token"}}
    client, _ = client_factory({FEED: error_payload})
    seen: list = []
    with pytest.raises(ApiResponseError):
        asyncio.run(client.get_feed("self", seen.append))
    assert seen == []


def test_network_failure_propagates_without_callback(client_factory) -> None:
    client, loader = client_factory()
    loader.error = NetworkError("unreachable")
    seen: list = []
    with pytest.raises(NetworkError):
        asyncio.run(client.get_top_images(seen.append, preload=True))
    assert seen == []
    assert len(client.transport.registry) == 0
