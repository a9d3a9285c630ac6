#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-19 20:15:33 krylon>
#
# /data/code/python/rssbridge/src/rssbridge/fakes.py
# created on 19. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the rssbridge feed relay. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
rssbridge.fakes

(c) 2026 Benjamin Walkenhorst

Stand-ins for HTTP sessions, feed fetchers and the Signer, for the tests.
"""


import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Union

from requests.structures import CaseInsensitiveDict

from rssbridge.feedcache import FeedError
from rssbridge.model import Event, Feed
from rssbridge.signer import SigningError


@dataclass(kw_only=True, slots=True)
class FakeResponse:
    """FakeResponse looks enough like a requests.Response for our purposes."""

    status_code: int = 200
    content_type: str = "text/html"
    content: bytes = b""
    reason: str = "OK"
    headers: CaseInsensitiveDict = field(init=False)

    def __post_init__(self) -> None:
        self.headers = CaseInsensitiveDict({"Content-Type": self.content_type})

    @property
    def text(self) -> str:
        """Return the body as a string."""
        return self.content.decode()


Answer = Union[FakeResponse, Exception]


@dataclass(kw_only=True, slots=True)
class FakeSession:
    """FakeSession answers requests from a table and counts them."""

    routes: dict[tuple[str, str], Answer] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)

    def count(self, method: str) -> int:
        """Return how many requests with the given method were made."""
        return len([c for c in self.calls if c[0] == method])

    def _answer(self, method: str, url: str) -> FakeResponse:
        self.calls.append((method, url))
        ans = self.routes.get((method, url),
                              FakeResponse(status_code=404, reason="Not Found"))
        if isinstance(ans, Exception):
            raise ans
        return ans

    def get(self, url: str, **_kwargs) -> FakeResponse:
        """Answer a GET request."""
        return self._answer("GET", url)

    def head(self, url: str, **_kwargs) -> FakeResponse:
        """Answer a HEAD request."""
        return self._answer("HEAD", url)


@dataclass(kw_only=True, slots=True)
class FakeFetcher:
    """FakeFetcher hands out prepared Feeds and counts how often it was asked."""

    feeds: dict[str, Feed] = field(default_factory=dict)
    calls: dict[str, int] = field(default_factory=dict)

    def __call__(self, url: str) -> Feed:
        self.calls[url] = self.calls.get(url, 0) + 1
        if url not in self.feeds:
            raise FeedError(f"No feed at {url}")
        return self.feeds[url]

    def total(self) -> int:
        """Return the number of fetches."""
        return sum(self.calls.values())


@dataclass(kw_only=True, slots=True)
class FakeClock:
    """FakeClock is a clock that only moves when told to."""

    now: datetime = field(default_factory=lambda: datetime(2026, 1, 1, 12, 0, 0))

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        """Move the clock forward."""
        self.now += delta


class FakeSigner:
    """FakeSigner derives a fake public key by hashing and signs with hashes."""

    def public_key_for(self, private_key: str) -> str:
        """Return the SHA-256 of the private key."""
        if len(private_key) != 64:
            raise SigningError(f"Invalid private key {private_key!r}")
        return hashlib.sha256(private_key.encode()).hexdigest()

    def sign(self, evt: Event, private_key: str) -> str:
        """Set the Event's ID and a made-up signature."""
        if len(private_key) != 64:
            raise SigningError(f"Invalid private key {private_key!r}")
        evt.id = hashlib.sha256(evt.serialize()).hexdigest()
        evt.sig = hashlib.sha256((evt.id + private_key).encode()).hexdigest() * 2
        return evt.sig

# Local Variables: #
# python-indent: 4 #
# End: #
