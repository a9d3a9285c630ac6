#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-19 13:20:46 krylon>
#
# /data/code/python/rssbridge/src/rssbridge/feedcache.py
# created on 19. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the rssbridge feed relay. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
rssbridge.feedcache

(c) 2026 Benjamin Walkenhorst

Downloading and parsing of feeds, with a bounded, expiring in-memory cache
in front of it.
"""


import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta
from threading import RLock
from typing import Any, Callable, Final, Optional

import fastfeedparser as ffp  # type: ignore # pylint: disable-msg=E0401
import requests

from rssbridge import common
from rssbridge.common import BridgeError
from rssbridge.model import Feed, FeedItem

timepat: Final[str] = "%Y-%m-%dT%H:%M:%S%z"
timeout: Final[int] = 5
capacity: Final[int] = 512
ttl: Final[timedelta] = timedelta(minutes=19)


class FeedError(BridgeError):
    """FeedError indicates a feed that could not be fetched or parsed."""


def parse_stamp(timestr: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp as produced by fastfeedparser."""
    if not timestr:
        return None
    try:
        return datetime.fromisoformat(timestr)
    except ValueError:
        pass
    try:
        return datetime.strptime(timestr, timepat)
    except ValueError:
        common.get_logger("feedcache").info("Cannot parse timestamp %r", timestr)
        return None


def _item_content(entry: Any) -> str:
    content = entry.get("content")
    if isinstance(content, list) and len(content) > 0 and isinstance(content[0], dict):
        return content[0].get("value", "")
    if isinstance(content, str):
        return content
    return ""


def parse_feed(raw: Any) -> Feed:
    """Convert the result of fastfeedparser into a Feed."""
    meta = raw.get("feed", {})
    image = meta.get("image", "")
    if isinstance(image, dict):
        image = image.get("url", image.get("href", ""))

    feed = Feed(
        title=meta.get("title", "") or "",
        description=meta.get("description", meta.get("subtitle", "")) or "",
        link=meta.get("link", "") or "",
        image=image or "",
        published=parse_stamp(meta.get("published", meta.get("updated"))),
    )

    for entry in raw.get("entries", []):
        feed.items.append(FeedItem(
            title=entry.get("title", "") or "",
            link=entry.get("link", "") or "",
            description=entry.get("description", entry.get("summary", "")) or "",
            content=_item_content(entry),
            published=parse_stamp(entry.get("published")),
            updated=parse_stamp(entry.get("updated")),
        ))

    return feed


class FeedFetcher:
    """FeedFetcher downloads and parses feeds."""

    __slots__ = [
        "log",
        "session",
    ]

    log: logging.Logger
    session: requests.Session

    def __init__(self, session: Optional[requests.Session] = None) -> None:
        self.log = common.get_logger("fetcher")
        self.session = session if session is not None else requests.Session()

    def __call__(self, url: str) -> Feed:
        try:
            res = self.session.get(url, timeout=timeout)
        except requests.RequestException as err:
            raise FeedError(f"Failed to fetch {url}: {err}") from err

        if not 200 <= res.status_code < 300:
            raise FeedError(f"Fetching {url} returned status {res.status_code}")

        try:
            raw = ffp.parse(res.content)
        except Exception as err:  # pylint: disable-msg=W0718
            cname: Final[str] = err.__class__.__name__
            raise FeedError(f"{cname} trying to parse feed {url}: {err}") from err

        feed = parse_feed(raw)
        self.log.debug("Got %d items from %s", len(feed.items), url)
        return feed


def stamp_undated(feed: Feed, prev: Optional[Feed], now: datetime) -> None:
    """Give Items without any timestamp the time they were first seen.

    Stamps from prev, an older copy of the same Feed, are carried over, so
    an undated Item keeps its timestamp across refetches.
    """
    seen: dict[str, datetime] = {}
    if prev is not None:
        for item in prev.items:
            if item.published is not None:
                seen[item.link or item.title] = item.published

    for item in feed.items:
        if item.published is None and item.updated is None:
            item.published = seen.get(item.link or item.title, now)


@dataclass(kw_only=True, slots=True)
class CacheItem:
    """CacheItem is a parsed Feed plus the time it was stored."""

    feed: Feed
    inserted: datetime

    def valid(self, now: datetime) -> bool:
        """Return True if the item has not expired, yet."""
        return now - self.inserted < ttl


class FeedCache:
    """FeedCache keeps recently fetched feeds in memory.

    Entries expire after a fixed time, and if the cache is full, the least
    recently used entry is dropped.
    """

    __slots__ = [
        "log",
        "lock",
        "fetch",
        "clock",
        "size",
        "_items",
    ]

    log: logging.Logger
    lock: RLock
    fetch: Callable[[str], Feed]
    clock: Callable[[], datetime]
    size: int
    _items: OrderedDict[str, CacheItem]

    def __init__(self,
                 fetch: Optional[Callable[[str], Feed]] = None,
                 clock: Callable[[], datetime] = datetime.now,
                 size: int = capacity) -> None:
        self.log = common.get_logger("feedcache")
        self.lock = RLock()
        self.fetch = fetch if fetch is not None else FeedFetcher()
        self.clock = clock
        self.size = size
        self._items = OrderedDict()

    def __len__(self) -> int:
        with self.lock:
            return len(self._items)

    def __contains__(self, url: str) -> bool:
        with self.lock:
            item = self._items.get(url)
            return item is not None and item.valid(self.clock())

    def lookup(self, url: str) -> Optional[Feed]:
        """Return the cached Feed for url, or None if there is no valid entry."""
        with self.lock:
            item = self._items.get(url)
            if item is None:
                return None
            if not item.valid(self.clock()):
                del self._items[url]
                return None
            self._items.move_to_end(url)
            return item.feed

    def get(self, url: str) -> Feed:
        """Return the Feed at url, from the cache if possible.

        Raises FeedError if the Feed is not cached and fetching it fails.
        Failures are not cached.
        """
        with self.lock:
            prev: Optional[CacheItem] = self._items.get(url)

        feed = self.lookup(url)
        if feed is not None:
            return feed

        self.log.debug("Cache miss for %s, fetching.", url)
        feed = self.fetch(url)
        now: Final[datetime] = self.clock()

        # We only need the metadata, not the full articles.
        for item in feed.items:
            item.content = ""

        stamp_undated(feed, prev.feed if prev is not None else None, now)

        with self.lock:
            self._items[url] = CacheItem(feed=feed, inserted=now)
            self._items.move_to_end(url)
            while len(self._items) > self.size:
                old, _ = self._items.popitem(last=False)
                self.log.debug("Evict %s from cache", old)

        return feed

    def purge(self) -> int:
        """Remove expired entries, return how many were removed."""
        cnt: int = 0
        with self.lock:
            now = self.clock()
            for url in [k for k, v in self._items.items() if not v.valid(now)]:
                del self._items[url]
                cnt += 1
        return cnt

# Local Variables: #
# python-indent: 4 #
# End: #
