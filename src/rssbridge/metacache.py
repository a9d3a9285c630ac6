#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-19 16:38:22 krylon>
#
# /data/code/python/rssbridge/src/rssbridge/metacache.py
# created on 19. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the rssbridge feed relay. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
rssbridge.metacache

(c) 2026 Benjamin Walkenhorst
"""


import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from threading import Lock, Thread
from typing import Callable, Final, Optional, Union

from rssbridge import common
from rssbridge.model import MetaData

default_ttl: Final[timedelta] = timedelta(minutes=10)
sweep_interval: Final[timedelta] = timedelta(minutes=1)


@dataclass(kw_only=True, slots=True)
class CacheItem:
    """CacheItem is a piece of MetaData plus its expiration timestamp."""

    data: MetaData
    expires: datetime

    def valid(self, now: datetime) -> bool:
        """Return True if the item's expiration time has not passed, yet."""
        return self.expires > now


class MetadataCache:
    """MetadataCache keeps the MetaData of web pages for a while.

    Every entry carries its own deadline. A single sweeper thread removes
    entries whose deadline has passed, so refreshing an entry simply moves
    its deadline.
    """

    __slots__ = [
        "log",
        "lock",
        "ttl",
        "clock",
        "interval",
        "_items",
        "_active",
    ]

    log: logging.Logger
    lock: Lock
    ttl: timedelta
    clock: Callable[[], datetime]
    interval: timedelta
    _items: dict[str, CacheItem]
    _active: bool

    def __init__(self,
                 ttl: Union[int, float, timedelta] = default_ttl,
                 clock: Callable[[], datetime] = datetime.now,
                 interval: timedelta = sweep_interval) -> None:
        self.log = common.get_logger("metacache")
        self.lock = Lock()
        self.ttl = ttl if isinstance(ttl, timedelta) else timedelta(seconds=ttl)
        self.clock = clock
        self.interval = interval
        self._items = {}
        self._active = False

    def __len__(self) -> int:
        with self.lock:
            return len(self._items)

    @property
    def active(self) -> bool:
        """Return True if the sweeper is running."""
        with self.lock:
            return self._active

    @active.setter
    def active(self, value: bool) -> None:
        with self.lock:
            self._active = value

    def get(self, url: str) -> Optional[MetaData]:
        """Return the cached MetaData for url, if it has not expired."""
        with self.lock:
            item = self._items.get(url)
            if item is None or not item.valid(self.clock()):
                return None
            return item.data

    def put(self, url: str, data: MetaData) -> None:
        """Store MetaData for url, replacing any older entry and its deadline."""
        with self.lock:
            self._items[url] = CacheItem(data=data, expires=self.clock() + self.ttl)

    def purge(self) -> int:
        """Remove expired entries, return how many were removed."""
        with self.lock:
            now = self.clock()
            stale: list[str] = [k for k, v in self._items.items() if not v.valid(now)]
            for url in stale:
                del self._items[url]
        if len(stale) > 0:
            self.log.debug("Purged %d expired entries", len(stale))
        return len(stale)

    def start(self) -> None:
        """Start the sweeper thread."""
        self.active = True
        sweeper: Thread = Thread(name="MetaSweeper", target=self._sweep_loop, daemon=True)
        sweeper.start()

    def stop(self) -> None:
        """Ask the sweeper thread to quit."""
        self.active = False

    def _sweep_loop(self) -> None:
        self.log.debug("Sweeper is starting up.")
        while self.active:
            time.sleep(self.interval.total_seconds())
            try:
                self.purge()
            except Exception as err:  # pylint: disable-msg=W0718
                self.log.error("%s while purging cache: %s",
                               err.__class__.__name__,
                               err)
        self.log.debug("Sweeper is quitting.")

# Local Variables: #
# python-indent: 4 #
# End: #
