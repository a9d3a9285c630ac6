#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-19 18:21:09 krylon>
#
# /data/code/python/rssbridge/src/rssbridge/bridge.py
# created on 19. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the rssbridge feed relay. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
rssbridge.bridge

(c) 2026 Benjamin Walkenhorst

Bridge turns the Feeds registered with it into signed Events, both on demand
when the relay runs a query, and periodically for the relay's subscribers.
"""


import json
import logging
import time
from datetime import timedelta
from queue import SimpleQueue
from threading import Lock, Thread
from typing import Final, Optional, Union

from rssbridge import common
from rssbridge.common import BridgeError
from rssbridge.feedcache import FeedCache, FeedError
from rssbridge.host import RelayHost
from rssbridge.identity import derive_keypair
from rssbridge.locator import FeedLocator
from rssbridge.model import Entity, Event, Feed, Filter, Kind, Profile
from rssbridge.signer import Signer, SigningError
from rssbridge.store import EntityStore, StoreError
from rssbridge.synth import feed_to_profile, item_to_text_note
from rssbridge.watermark import Watermark


class Bridge:  # pylint: disable-msg=R0902
    """Bridge is the service object at the center of the application."""

    __slots__ = [
        "log",
        "secret",
        "store",
        "host",
        "feeds",
        "locator",
        "signer",
        "watermark",
        "interval",
        "updates",
        "lock",
        "_active",
    ]

    log: logging.Logger
    secret: str
    store: EntityStore
    host: RelayHost
    feeds: FeedCache
    locator: FeedLocator
    signer: Signer
    watermark: Watermark
    interval: timedelta
    updates: SimpleQueue
    lock: Lock
    _active: bool

    def __init__(self,  # pylint: disable-msg=R0913
                 secret: str,
                 store: EntityStore,
                 host: RelayHost,
                 interval: Union[int, float, timedelta] = 600,
                 *,
                 feeds: Optional[FeedCache] = None,
                 locator: Optional[FeedLocator] = None,
                 signer: Optional[Signer] = None) -> None:
        self.log = common.get_logger("bridge")
        self.secret = secret
        self.store = store
        self.host = host
        self.feeds = feeds if feeds is not None else FeedCache()
        self.locator = locator if locator is not None else FeedLocator()
        self.signer = signer if signer is not None else Signer()
        self.watermark = Watermark()
        self.updates = SimpleQueue()
        self.lock = Lock()
        self._active = False
        match interval:
            case int(x):
                self.interval = timedelta(seconds=x)
            case float(x):
                self.interval = timedelta(seconds=x)
            case x if isinstance(x, timedelta):
                self.interval = x
            case _:
                name = interval.__class__.__name__
                msg = f"Interval must be a number (of seconds) or a timedelta, not a {name}"
                raise ValueError(msg)

    @property
    def active(self) -> bool:
        """Return the Bridge's active flag."""
        with self.lock:
            return self._active

    @active.setter
    def active(self, value: bool) -> None:
        """Set the Bridge's active flag."""
        with self.lock:
            self._active = value

    # Registration

    def register(self, site_url: str, meta: Optional[Profile] = None) -> Optional[Entity]:
        """Find the feed for site_url and store an Entity for it.

        Return the Entity, or None if no usable feed was found. Nothing is
        stored in that case.
        """
        feed_url: Optional[str] = self.locator.locate(site_url)
        if feed_url is None:
            self.log.info("Couldn't find a feed url for %s", site_url)
            return None

        try:
            self.feeds.get(feed_url)
        except FeedError as err:
            self.log.info("Bad feed at %s: %s", feed_url, err)
            return None

        try:
            sk, pubkey = derive_keypair(self.secret, feed_url, self.signer)
        except SigningError as err:
            self.log.error("Bad private key for %s: %s", feed_url, err)
            return None

        entity: Final[Entity] = Entity(private_key=sk, url=feed_url, meta=meta)
        try:
            self.store.set(pubkey, entity.to_json())
        except StoreError as err:
            self.log.error("Failed to store feed %s: %s", feed_url, err)
            return None

        self.log.info("Saved feed at url %r as pubkey %s", feed_url, pubkey)
        return entity

    def load_entity(self, pubkey: str) -> Optional[Entity]:
        """Load the Entity for a public key. Return None if it is unknown or broken."""
        raw: Optional[bytes] = self.store.get(pubkey)
        if raw is None:
            return None
        try:
            return Entity.from_json(raw)
        except ValueError as err:
            self.log.error("Got invalid json from db at key %s: %s", pubkey, err)
            return None

    def _load(self, pubkey: str) -> Optional[tuple[Entity, Feed]]:
        entity = self.load_entity(pubkey)
        if entity is None:
            return None
        try:
            return entity, self.feeds.get(entity.url)
        except FeedError as err:
            self.log.info("Failed to parse feed at url %r: %s", entity.url, err)
            return None

    # Relay interface

    def accept_event(self, _evt: Event) -> bool:
        """We do not accept any Events from clients."""
        return False

    def save_event(self, _evt: Event) -> None:
        """Refuse to store an Event."""
        raise BridgeError("blocked: we don't accept any events")

    def delete_event(self, _id: str, _pubkey: str) -> None:
        """Refuse to delete an Event."""
        raise BridgeError("blocked: we can't delete any events")

    def query(self, flt: Filter) -> list[Event]:
        """Return the signed Events matching a Filter."""
        evts: list[Event] = []

        if flt.ids or flt.tags:
            return evts

        for pubkey in flt.authors:
            res = self._load(pubkey)
            if res is None:
                continue
            entity, feed = res

            try:
                if flt.wants(Kind.SetMetadata):
                    evt = feed_to_profile(pubkey, feed, entity.meta)
                    if flt.in_range(evt.created_at):
                        self.signer.sign(evt, entity.private_key)
                        evts.append(evt)

                if flt.wants(Kind.TextNote):
                    last: Optional[int] = None
                    for item in feed.items:
                        evt = item_to_text_note(pubkey, item)
                        if not flt.in_range(evt.created_at):
                            continue
                        self.signer.sign(evt, entity.private_key)
                        evts.append(evt)
                        if last is None or evt.created_at > last:
                            last = evt.created_at

                    if last is not None:
                        self.watermark.advance(entity.url, last)
            except SigningError as err:
                self.log.error("Cannot sign events for %s: %s", entity.url, err)

        return evts

    # Polling

    def start(self) -> None:
        """Begin to periodically check the Feeds the relay's subscribers listen for."""
        self.log.debug("Bridge is starting.")
        self.active = True
        poller: Thread = Thread(name="Poller", target=self._poll_loop, daemon=True)
        poller.start()

    def stop(self) -> None:
        """Ask the poller to quit after the current pass."""
        self.active = False

    def _poll_loop(self) -> None:
        self.log.debug("Poll loop is starting up.")
        while self.active:
            time.sleep(self.interval.total_seconds())
            if not self.active:
                break
            try:
                cnt = self.poll_once()
                self.log.debug("Poll pass queued %d events", cnt)
            except Exception as err:  # pylint: disable-msg=W0718
                self.log.error("%s in poll pass: %s",
                               err.__class__.__name__,
                               err)
        self.log.debug("Poll loop is quitting.")

    def poll_once(self) -> int:
        """Check the Feeds of all authors someone listens for, queue new Events.

        Return the number of Events queued.
        """
        filters: Final[list[Filter]] = self.host.active_filters()
        self.log.info("Checking for updates; %d filters active", len(filters))

        seen: set[str] = set()
        cnt: int = 0
        for flt in filters:
            if not flt.wants(Kind.TextNote):
                continue
            for pubkey in flt.authors:
                if pubkey in seen:
                    continue
                seen.add(pubkey)
                try:
                    cnt += self._poll_author(pubkey)
                except Exception as err:  # pylint: disable-msg=W0718
                    self.log.error("%s while polling %s: %s",
                                   err.__class__.__name__,
                                   pubkey,
                                   err)
        return cnt

    def _poll_author(self, pubkey: str) -> int:
        res = self._load(pubkey)
        if res is None:
            return 0
        entity, feed = res

        evts: list[Event] = []
        for item in feed.items:
            evt = item_to_text_note(pubkey, item)
            if not self.watermark.should_emit(entity.url, evt.created_at):
                continue
            self.signer.sign(evt, entity.private_key)
            evts.append(evt)

        # take_new checks again, another pass may have delivered some of these.
        fresh: list[Event] = self.watermark.take_new(entity.url, evts)
        for evt in fresh:
            self.updates.put(evt)

        if len(fresh) > 0:
            self.log.debug("Queued %d new events from %s", len(fresh), entity.url)
        return len(fresh)

    def registered(self) -> list[tuple[str, Entity]]:
        """Return all registered (pubkey, Entity) pairs."""
        res: list[tuple[str, Entity]] = []
        for key in self.store.keys():
            pubkey: str = key.decode()
            entity = self.load_entity(pubkey)
            if entity is not None:
                res.append((pubkey, entity))
        return res

    @staticmethod
    def profiles_from_file(path: str) -> list[Profile]:
        """Load a list of Profiles to register from a JSON file."""
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, list):
            raise BridgeError(f"{path} must contain a list of feeds")
        for x in data:
            if not isinstance(x, dict):
                raise BridgeError(f"{path} must contain a list of objects")
        return [Profile.from_dict(x) for x in data]

# Local Variables: #
# python-indent: 4 #
# End: #
