#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-19 23:17:42 krylon>
#
# /data/code/python/rssbridge/src/rssbridge/test_bridge.py
# created on 19. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the rssbridge feed relay. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
rssbridge.test_bridge

(c) 2026 Benjamin Walkenhorst
"""

import json
import os
import shutil
import time
import unittest
from datetime import datetime, timedelta, timezone
from typing import Final

from rssbridge import common
from rssbridge.bridge import Bridge
from rssbridge.common import BridgeError
from rssbridge.fakes import FakeClock, FakeFetcher, FakeResponse, FakeSession, FakeSigner
from rssbridge.feedcache import FeedCache
from rssbridge.host import Subscriptions
from rssbridge.identity import derive_private_key
from rssbridge.locator import FeedLocator
from rssbridge.model import Entity, Event, Feed, FeedItem, Filter, Kind, Profile
from rssbridge.store import EntityStore

test_dir: Final[str] = os.path.join(
    "/tmp",
    datetime.now().strftime(f"{common.AppName.lower()}_test_bridge_%Y%m%d_%H%M%S"))

secret: Final[str] = "correct horse battery staple"
site_url: Final[str] = "https://example.com/blog"
feed_url: Final[str] = "https://example.com/feed.xml"

site_html: Final[bytes] = b"""<html><head>
<title>Example Blog</title>
<link rel="alternate" type="application/rss+xml" href="/feed.xml">
</head><body><p>Hello</p></body></html>
"""


def stamp(hour: int) -> datetime:
    """Return a point in time on the first of January, 2026."""
    return datetime(2026, 1, 1, hour, 0, 0, tzinfo=timezone.utc)


def unix(hour: int) -> int:
    """Return the Unix time of stamp(hour)."""
    return int(stamp(hour).timestamp())


def sample_feed() -> Feed:
    """Return a Feed with three Items, deliberately out of order."""
    return Feed(
        title="Example Blog",
        description="Things happen",
        link="https://example.com/blog",
        published=stamp(1),
        items=[
            FeedItem(title="Second", link="https://example.com/2",
                     description="<p>two</p>", published=stamp(4)),
            FeedItem(title="First", link="https://example.com/1",
                     description="<p>one</p>", published=stamp(3)),
            FeedItem(title="Third", link="https://example.com/3",
                     description="<p>three</p>", published=stamp(5)),
        ],
    )


class CountingSigner(FakeSigner):
    """CountingSigner counts the Events it signs."""

    def __init__(self) -> None:
        self.count: int = 0

    def sign(self, evt: Event, private_key: str) -> str:
        self.count += 1
        return super().sign(evt, private_key)


class BridgeTest(unittest.TestCase):
    """Common scaffolding for the Bridge tests."""

    store: EntityStore
    session: FakeSession
    fetcher: FakeFetcher
    clock: FakeClock
    subs: Subscriptions
    bridge: Bridge

    @classmethod
    def setUpClass(cls) -> None:
        """Prepare the testing environment."""
        common.set_basedir(test_dir)

    @classmethod
    def tearDownClass(cls) -> None:
        """Clean up afterwards."""
        shutil.rmtree(test_dir, ignore_errors=True)

    def setUp(self) -> None:
        root: str = os.path.join(test_dir, "_".join(self.id().split(".")[-2:]))
        self.store = EntityStore(root)
        self.session = FakeSession(routes={
            ("GET", site_url): FakeResponse(content=site_html),
        })
        self.fetcher = FakeFetcher(feeds={feed_url: sample_feed()})
        self.clock = FakeClock()
        self.subs = Subscriptions()
        self.bridge = Bridge(secret,
                             self.store,
                             self.subs,
                             feeds=FeedCache(fetch=self.fetcher, clock=self.clock),
                             locator=FeedLocator(self.session),
                             signer=FakeSigner())

    def tearDown(self) -> None:
        self.bridge.stop()
        self.store.close()

    def pubkey(self) -> str:
        """Return the public key the example feed is expected to get."""
        return FakeSigner().public_key_for(derive_private_key(secret, feed_url))


class TestRegister(BridgeTest):
    """Test registering feeds."""

    def test_01_register_site(self) -> None:
        """Registering a web site finds its feed and stores an Entity for it."""
        meta = Profile(name="Example", nip05="ex@example.com")
        entity = self.bridge.register(site_url, meta)
        self.assertIsNotNone(entity)
        self.assertEqual(entity.url, feed_url)  # type: ignore
        self.assertEqual(entity.private_key,  # type: ignore
                         derive_private_key(secret, feed_url))

        raw = self.store.get(self.pubkey())
        self.assertIsNotNone(raw)
        stored = Entity.from_json(raw)  # type: ignore
        self.assertEqual(stored, entity)
        self.assertEqual(self.bridge.load_entity(self.pubkey()), entity)
        self.assertEqual(self.bridge.registered(), [(self.pubkey(), entity)])

    def test_02_register_feed(self) -> None:
        """Registering the feed itself works, too."""
        direct: Final[str] = "https://example.com/rss"
        self.session.routes[("GET", direct)] = \
            FakeResponse(content_type="application/rss+xml; charset=utf-8")
        self.fetcher.feeds[direct] = sample_feed()

        entity = self.bridge.register(direct)
        self.assertIsNotNone(entity)
        self.assertEqual(entity.url, direct)  # type: ignore

    def test_03_register_idempotent(self) -> None:
        """Registering the same feed twice yields the same key."""
        self.bridge.register(site_url)
        self.bridge.register(site_url)
        self.assertEqual(self.store.keys(), [self.pubkey().encode()])

    def test_04_register_failures(self) -> None:
        """Failed registrations store nothing."""
        broken_site: Final[str] = "https://broken.example.com/"
        self.session.routes[("GET", broken_site)] = FakeResponse(
            content=b'<html><head><link type="application/atom+xml" href="/atom"></head></html>')

        cases: Final[list[str]] = [
            "https://nowhere.example.com/",
            broken_site,
        ]

        for url in cases:
            with self.subTest(url=url):
                self.assertIsNone(self.bridge.register(url))
        self.assertEqual(self.store.keys(), [])
        self.assertEqual(self.fetcher.calls.get("https://broken.example.com/atom"), 1)

    def test_05_malformed(self) -> None:
        """Broken records in the store are skipped."""
        self.bridge.register(site_url)
        self.store.set("broken", b"{this is not json")

        self.assertIsNone(self.bridge.load_entity("broken"))
        self.assertIsNone(self.bridge.load_entity("unknown"))
        self.assertEqual(len(self.bridge.registered()), 1)
        self.assertEqual(self.bridge.query(Filter(authors=["broken"])), [])

    def test_06_profiles_from_file(self) -> None:
        """Load the list of feeds to register."""
        path: Final[str] = os.path.join(os.path.dirname(__file__),
                                        "..", "..", "etc", "feeds.json")
        profiles = Bridge.profiles_from_file(path)
        self.assertEqual(len(profiles), 4)
        self.assertEqual(profiles[0].name, "The Guardian")
        self.assertEqual(profiles[2].url, "https://hnrss.org/frontpage")
        self.assertEqual(profiles[2].banner, "")

        bogus: Final[str] = os.path.join(test_dir, "bogus.json")
        with open(bogus, "w", encoding="utf-8") as fh:
            json.dump({"Name": "Not a list"}, fh)
        with self.assertRaises(BridgeError):
            Bridge.profiles_from_file(bogus)

    def test_07_interval(self) -> None:
        """The poll interval may be given in several ways."""
        cases: Final[list[tuple[object, timedelta]]] = [
            (90, timedelta(seconds=90)),
            (1.5, timedelta(seconds=1.5)),
            (timedelta(minutes=5), timedelta(minutes=5)),
        ]

        for ival, expect in cases:
            with self.subTest(interval=ival):
                b = Bridge(secret, self.store, self.subs, ival)  # type: ignore
                self.assertEqual(b.interval, expect)

        with self.assertRaises(ValueError):
            Bridge(secret, self.store, self.subs, "600")  # type: ignore


class TestRelay(BridgeTest):
    """Test answering the relay's queries."""

    def setUp(self) -> None:
        super().setUp()
        self.bridge.register(site_url)

    def test_01_refuse(self) -> None:
        """Clients cannot write to us."""
        evt = Event(pubkey="x", created_at=0, kind=Kind.TextNote, tags=[], content="hi")
        self.assertFalse(self.bridge.accept_event(evt))
        with self.assertRaises(BridgeError):
            self.bridge.save_event(evt)
        with self.assertRaises(BridgeError):
            self.bridge.delete_event("abc", "x")

    def test_02_query_all(self) -> None:
        """Without restrictions we get the profile and all notes."""
        evts = self.bridge.query(Filter(authors=[self.pubkey()]))
        self.assertEqual(len(evts), 4)
        self.assertEqual(evts[0].kind, Kind.SetMetadata)
        self.assertEqual(evts[0].created_at, unix(1))
        self.assertEqual(json.loads(evts[0].content)["name"], "Example Blog")
        for evt in evts:
            self.assertEqual(evt.pubkey, self.pubkey())
            self.assertNotEqual(evt.id, "")
            self.assertNotEqual(evt.sig, "")
        self.assertEqual(sorted(e.created_at for e in evts[1:]),
                         [unix(3), unix(4), unix(5)])

    def test_03_query_kinds(self) -> None:
        """Filters by kind."""
        pk = self.pubkey()
        cases: Final[list[tuple[list[int], int]]] = [
            ([0], 1),
            ([1], 3),
            ([0, 1], 4),
            ([7], 0),
        ]

        for kinds, cnt in cases:
            with self.subTest(kinds=kinds):
                self.assertEqual(len(self.bridge.query(Filter(authors=[pk], kinds=kinds))), cnt)

    def test_04_query_window(self) -> None:
        """Filters by time."""
        pk = self.pubkey()
        cases: Final[list[tuple[Filter, int]]] = [
            (Filter(authors=[pk], kinds=[1], since=unix(4)), 2),
            (Filter(authors=[pk], kinds=[1], until=unix(3)), 1),
            (Filter(authors=[pk], kinds=[1], since=unix(4), until=unix(4)), 1),
            (Filter(authors=[pk], since=unix(6)), 0),
            (Filter(authors=[pk], until=unix(2)), 1),
        ]

        for flt, cnt in cases:
            with self.subTest(since=flt.since, until=flt.until):
                self.assertEqual(len(self.bridge.query(flt)), cnt)

    def test_05_query_ids_tags(self) -> None:
        """We cannot look up Events by ID or tag."""
        pk = self.pubkey()
        self.assertEqual(self.bridge.query(Filter(ids=["abc"], authors=[pk])), [])
        self.assertEqual(self.bridge.query(Filter(authors=[pk], tags={"e": ["abc"]})), [])
        self.assertEqual(self.bridge.query(Filter(authors=["unknown"])), [])

    def test_06_watermark(self) -> None:
        """Queries move the watermark forward, never back."""
        pk = self.pubkey()
        self.assertIsNone(self.bridge.watermark.get(feed_url))
        self.bridge.query(Filter(authors=[pk], kinds=[1], until=unix(3)))
        self.assertEqual(self.bridge.watermark.get(feed_url), unix(3))
        self.bridge.query(Filter(authors=[pk], kinds=[1]))
        self.assertEqual(self.bridge.watermark.get(feed_url), unix(5))
        self.bridge.query(Filter(authors=[pk], kinds=[1], until=unix(4)))
        self.assertEqual(self.bridge.watermark.get(feed_url), unix(5))

        # The profile alone does not count.
        self.bridge.watermark = type(self.bridge.watermark)()
        self.bridge.query(Filter(authors=[pk], kinds=[0]))
        self.assertIsNone(self.bridge.watermark.get(feed_url))

    def test_07_query_does_not_filter(self) -> None:
        """Queries return old items even past the watermark."""
        pk = self.pubkey()
        self.bridge.query(Filter(authors=[pk]))
        self.assertEqual(len(self.bridge.query(Filter(authors=[pk]))), 4)

    def test_08_query_malformed_types(self) -> None:
        """Records with fields of the wrong type are skipped, other authors still answer."""
        self.store.set("badkey", json.dumps({"PrivateKey": 5, "URL": feed_url}).encode())
        self.store.set("badurl", json.dumps({"PrivateKey": "ab" * 32, "URL": ["x"]}).encode())
        self.store.set("badmeta", json.dumps({"PrivateKey": "ab" * 32,
                                              "URL": feed_url,
                                              "Meta": {"Name": 7}}).encode())

        for key in ("badkey", "badurl", "badmeta"):
            with self.subTest(key=key):
                self.assertIsNone(self.bridge.load_entity(key))

        evts = self.bridge.query(Filter(authors=["badkey", "badurl", "badmeta", self.pubkey()]))
        self.assertEqual(len(evts), 4)
        for evt in evts:
            self.assertEqual(evt.pubkey, self.pubkey())


class TestPoll(BridgeTest):
    """Test polling for new items."""

    def setUp(self) -> None:
        super().setUp()
        self.bridge.register(site_url)

    def drain(self) -> list:
        """Return and remove everything from the update queue."""
        evts = []
        while not self.bridge.updates.empty():
            evts.append(self.bridge.updates.get())
        return evts

    def test_01_poll(self) -> None:
        """Each item is queued once."""
        self.subs.add("s1", [Filter(authors=[self.pubkey()])])

        self.assertEqual(self.bridge.poll_once(), 3)
        evts = self.drain()
        self.assertEqual([e.created_at for e in evts], [unix(3), unix(4), unix(5)])
        for evt in evts:
            self.assertEqual(evt.kind, Kind.TextNote)
            self.assertNotEqual(evt.sig, "")

        self.assertEqual(self.bridge.poll_once(), 0)
        self.assertEqual(self.drain(), [])

        self.fetcher.feeds[feed_url].items.append(
            FeedItem(title="Fourth", link="https://example.com/4", published=stamp(6)))
        self.assertEqual(self.bridge.poll_once(), 1)
        evts = self.drain()
        self.assertEqual(len(evts), 1)
        self.assertTrue(evts[0].content.startswith("**Fourth**"))

    def test_02_no_subscribers(self) -> None:
        """Nobody listens, nothing is polled."""
        self.assertEqual(self.bridge.poll_once(), 0)
        self.subs.add("s1", [Filter(authors=[self.pubkey()], kinds=[0])])
        self.assertEqual(self.bridge.poll_once(), 0)
        self.assertEqual(self.drain(), [])

    def test_03_duplicate_authors(self) -> None:
        """An author several filters ask for is polled once per pass."""
        pk = self.pubkey()
        self.subs.add("s1", [Filter(authors=[pk]), Filter(authors=[pk], kinds=[1])])
        self.subs.add("s2", [Filter(authors=[pk, pk])])
        self.assertEqual(self.bridge.poll_once(), 3)
        self.assertEqual(len(self.drain()), 3)

    def test_04_errors(self) -> None:
        """Authors that fail do not spoil the pass for the others."""
        gone = Entity(private_key="ab" * 32, url="https://gone.example.com/rss")
        badkey = Entity(private_key="00ff", url=feed_url)
        self.store.set("gone", gone.to_json())
        self.store.set("badkey", badkey.to_json())
        self.store.set("broken", b"not json at all")

        self.subs.add("s1", [Filter(authors=["unknown", "gone", "badkey", "broken",
                                             self.pubkey()])])
        self.assertEqual(self.bridge.poll_once(), 3)
        self.assertEqual(len(self.drain()), 3)

    def test_05_query_then_poll(self) -> None:
        """Items delivered by a query are not queued again."""
        pk = self.pubkey()
        self.bridge.query(Filter(authors=[pk], kinds=[1], until=unix(4)))
        self.subs.add("s1", [Filter(authors=[pk])])
        self.assertEqual(self.bridge.poll_once(), 1)
        self.assertEqual([e.created_at for e in self.drain()], [unix(5)])

    def test_06_cache(self) -> None:
        """Polling goes through the feed cache."""
        self.subs.add("s1", [Filter(authors=[self.pubkey()])])
        before: Final[int] = self.fetcher.total()
        self.bridge.poll_once()
        self.bridge.poll_once()
        self.assertEqual(self.fetcher.total(), before)

        self.clock.advance(timedelta(minutes=20))
        self.bridge.poll_once()
        self.assertEqual(self.fetcher.total(), before + 1)

    def test_07_loop(self) -> None:
        """The poller runs in the background until stopped."""
        self.bridge.interval = timedelta(milliseconds=10)
        self.subs.add("s1", [Filter(authors=[self.pubkey()])])
        self.bridge.start()
        self.assertTrue(self.bridge.active)

        deadline: Final[float] = time.time() + 5
        while self.bridge.updates.qsize() < 3 and time.time() < deadline:
            time.sleep(0.01)

        self.bridge.stop()
        self.assertFalse(self.bridge.active)
        self.assertEqual(len(self.drain()), 3)

    def test_08_undated(self) -> None:
        """Items without a timestamp are queued once, not on every pass."""
        self.fetcher.feeds[feed_url].items.append(
            FeedItem(title="Undated", link="https://example.com/undated"))
        self.clock.advance(timedelta(minutes=20))
        self.subs.add("s1", [Filter(authors=[self.pubkey()])])

        self.assertEqual(self.bridge.poll_once(), 4)
        self.assertEqual(len(self.drain()), 4)
        self.assertEqual(self.bridge.poll_once(), 0)

        self.clock.advance(timedelta(minutes=20))
        self.assertEqual(self.bridge.poll_once(), 0)
        self.assertEqual(self.drain(), [])

    def test_09_sign_new_only(self) -> None:
        """Items already delivered are not signed again."""
        signer = CountingSigner()
        self.bridge.signer = signer
        self.subs.add("s1", [Filter(authors=[self.pubkey()])])

        self.assertEqual(self.bridge.poll_once(), 3)
        self.assertEqual(signer.count, 3)
        self.assertEqual(self.bridge.poll_once(), 0)
        self.assertEqual(signer.count, 3)

        self.fetcher.feeds[feed_url].items.append(
            FeedItem(title="Fourth", link="https://example.com/4", published=stamp(6)))
        self.assertEqual(self.bridge.poll_once(), 1)
        self.assertEqual(signer.count, 4)

# Local Variables: #
# python-indent: 4 #
# End: #
