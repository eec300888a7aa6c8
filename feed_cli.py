# feed_cli.py

from __future__ import annotations

import argparse
import asyncio
import os

from instafeed.core.auth import Scope
from instafeed.core.diagnostics import configure_debug_log, debug_enabled
from instafeed.core.errors import InstagramError
from instafeed.inputs.settings import SettingsLoader
from instafeed.orchestrators.client import InstagramClient
from instafeed.schemas.models import MediaRecord, PreloadStatus


def _parse_scope(val: str) -> Scope:
    names = [v.strip().upper() for v in val.split(",") if v.strip()]
    scope = Scope.BASIC
    for name in names:
        if name not in Scope.__members__:
            raise argparse.ArgumentTypeError(f"invalid scope: {name.lower()!r}")
        scope |= Scope[name]
    return scope


async def _run(client: InstagramClient, args: argparse.Namespace) -> list[MediaRecord]:
    preload = bool(args.preload)
    if args.feed:
        return await client.get_feed(args.feed, preload=preload)
    if args.likes:
        return await client.get_likes(args.likes, preload=preload)
    return await client.get_top_images(preload=preload)


def main() -> int:
    p = argparse.ArgumentParser(description="Fetch recent media from the photo API")
    p.add_argument("--client-id", type=str, default=os.getenv("INSTAFEED_CLIENT_ID"))
    p.add_argument("--page-url", type=str, default="", help="Address the OAuth redirect landed on (token in #fragment)")
    p.add_argument("--config", type=str, default=None, help="Optional settings JSON")
    group = p.add_mutually_exclusive_group()
    group.add_argument("--feed", type=str, default=None, metavar="USER", help='Recent media of USER ("self" for you)')
    group.add_argument("--likes", type=str, default=None, metavar="USER", help='Recent likes of USER ("self" for you)')
    group.add_argument("--popular", action="store_true", help="Currently popular media (default)")
    p.add_argument("--preload", type=int, choices=(0, 1), default=0, help="Download images before printing")
    p.add_argument(
        "--authenticate",
        type=_parse_scope,
        default=None,
        metavar="SCOPES",
        help="Comma-separated scopes: likes,comments,relationships,all",
    )

    args = p.parse_args()
    if not args.client_id:
        p.error("--client-id (or INSTAFEED_CLIENT_ID) is required")

    if debug_enabled():
        configure_debug_log()

    try:
        policy = SettingsLoader().load(args.config)
        client = InstagramClient(args.client_id, page_url=args.page_url, policy=policy)

        if args.authenticate is not None and not client.authenticate(args.authenticate):
            print("opened the authorize page; rerun with --page-url set to the address you land on")
            return 0

        records = asyncio.run(_run(client, args))
    except InstagramError as e:
        print(f"error: {type(e).__name__}: {e}")
        return 2

    for r in records:
        print(f"{r.id} {r.image_url}")

    if args.preload:
        failed = sum(client.preloader.status_of(r.image_url) is PreloadStatus.FAILED for r in records)
        print(f"preloaded: {len(records) - failed}/{len(records)} (failed: {failed})")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
