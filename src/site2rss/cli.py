"""CLI entry point: poll the configured sites and serve their feeds."""

from __future__ import annotations

import argparse
import logging
import sys

import uvicorn
from dotenv import load_dotenv

from common.cli_helpers import duration_arg, parse_listen_address, setup_logging
from common.config import lookup_env
from site2rss.api import create_app
from site2rss.config import load_config
from site2rss.errors import ConfigError
from site2rss.fetch import PageFetcher
from site2rss.pipeline import Poller
from site2rss.publish import FeedPublisher, FeedStore
from site2rss.snapshot import SnapshotStore

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    '''Parse CLI arguments; each flag defaults to an environment variable.'''

    parser = argparse.ArgumentParser(
        description="Serve RSS, Atom and JSON feeds for sites without one",
    )
    parser.add_argument(
        "--config",
        default=lookup_env("CONFIG", "config.yaml"),
        help="Path to the config file (env CONFIG, default: config.yaml)",
    )
    parser.add_argument(
        "--cache",
        default=lookup_env("CACHE", "cache"),
        help="Directory for item snapshots (env CACHE, default: cache)",
    )
    parser.add_argument(
        "--interval",
        type=duration_arg,
        default=lookup_env("INTERVAL", "1h"),
        help="Update interval, e.g. 30m or 1h (env INTERVAL, default: 1h)",
    )
    parser.add_argument(
        "--listen",
        type=parse_listen_address,
        default=lookup_env("LISTEN", ":8080"),
        help="Listen address HOST:PORT (env LISTEN, default: :8080)",
    )
    parser.add_argument(
        "--timeout",
        type=duration_arg,
        default=lookup_env("FETCH_TIMEOUT", "10s"),
        help="Per-fetch timeout (env FETCH_TIMEOUT, default: 10s)",
    )
    parser.add_argument(
        "--log-level",
        default=lookup_env("LOG_LEVEL", "INFO"),
        help="Logging level (env LOG_LEVEL, default: INFO)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error("%s", e)
        sys.exit(1)

    if not config.sites:
        logger.warning("No sites configured")

    feed_store = FeedStore()
    poller = Poller(
        sites=config.sites,
        interval=args.interval,
        fetcher=PageFetcher(timeout=args.timeout),
        snapshots=SnapshotStore(args.cache),
        publisher=FeedPublisher(),
        feed_store=feed_store,
    )
    app = create_app(config, feed_store, poller)

    host, port = args.listen
    logger.info("Listening on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_level=args.log_level.lower())
    logger.info("Shut down")


if __name__ == "__main__":
    main()
