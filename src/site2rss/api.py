"""FastAPI application serving the published feeds."""

import asyncio
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, Response

from site2rss import __version__
from site2rss.config import AppConfig, Site
from site2rss.pipeline import Poller
from site2rss.publish import FeedStore

FEED_FORMATS = {
    "rss": "application/rss+xml; charset=utf-8",
    "atom": "application/atom+xml; charset=utf-8",
    "json": "application/feed+json; charset=utf-8",
}

router = APIRouter()


def get_feed_store(request: Request) -> FeedStore:
    """Dependency to get the published feed store."""
    return request.app.state.feed_store


def get_sites(request: Request) -> dict[str, Site]:
    """Dependency to get configured sites keyed by lower-cased name."""
    return request.app.state.sites


@router.get("/")
async def root(sites: Annotated[dict[str, Site], Depends(get_sites)]):
    """Service info and the feed URLs of every configured site."""
    return {
        "name": "site2rss",
        "version": __version__,
        "feeds": {
            site.name: {fmt: f"/{key}/{fmt}" for fmt in FEED_FORMATS}
            for key, site in sites.items()
        },
    }


@router.get("/health")
async def health(
    sites: Annotated[dict[str, Site], Depends(get_sites)],
    feed_store: Annotated[FeedStore, Depends(get_feed_store)],
):
    """Report item count and last publish time per site."""
    published = feed_store.snapshot()
    return {
        "status": "ok",
        "sites": {
            site.name: {
                "items": published[key].item_count if key in published else None,
                "updated_at": published[key].updated_at.isoformat() if key in published else None,
            }
            for key, site in sites.items()
        },
    }


@router.get("/{site_name}/{feed_format}")
async def get_feed(
    site_name: str,
    feed_format: str,
    sites: Annotated[dict[str, Site], Depends(get_sites)],
    feed_store: Annotated[FeedStore, Depends(get_feed_store)],
):
    """Return the last published RSS, Atom or JSON feed of a site.

    Sites are matched case-insensitively. A site that has not completed an
    update yet answers 503.
    """
    key = site_name.lower()
    if key not in sites or feed_format not in FEED_FORMATS:
        raise HTTPException(status_code=404, detail="Feed not found")

    feeds = feed_store.get(key)
    if feeds is None:
        raise HTTPException(status_code=503, detail="Feed not available yet")

    return Response(content=getattr(feeds, feed_format), media_type=FEED_FORMATS[feed_format])


def create_app(config: AppConfig, feed_store: FeedStore, poller: Poller | None = None) -> FastAPI:
    """Build the app; the poller, if given, runs for the lifetime of the app."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if poller is not None:
            poller.start()
        try:
            yield
        finally:
            if poller is not None:
                await asyncio.to_thread(poller.stop, 30)

    app = FastAPI(
        title="site2rss",
        description="RSS, Atom and JSON feeds for sites that do not publish one",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.feed_store = feed_store
    app.state.sites = {site.key: site for site in config.sites}
    app.include_router(router)
    return app
