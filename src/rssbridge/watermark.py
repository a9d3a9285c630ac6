#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-19 14:25:50 krylon>
#
# /data/code/python/rssbridge/src/rssbridge/watermark.py
# created on 19. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the rssbridge feed relay. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
rssbridge.watermark

(c) 2026 Benjamin Walkenhorst
"""


from threading import Lock
from typing import Iterable, Optional

from rssbridge.model import Event


class Watermark:
    """Watermark remembers, per feed URL, the newest timestamp we delivered.

    The poller and the query path both use it, so every operation happens
    under the lock in one go.
    """

    __slots__ = [
        "lock",
        "_marks",
    ]

    lock: Lock
    _marks: dict[str, int]

    def __init__(self) -> None:
        self.lock = Lock()
        self._marks = {}

    def __len__(self) -> int:
        with self.lock:
            return len(self._marks)

    def get(self, url: str) -> Optional[int]:
        """Return the watermark for url, None if nothing was delivered yet."""
        with self.lock:
            return self._marks.get(url)

    def should_emit(self, url: str, stamp: int) -> bool:
        """Return True if an Event with the given timestamp is new for url."""
        with self.lock:
            return self._is_new(url, stamp)

    def advance(self, url: str, stamp: int) -> None:
        """Move the watermark for url forward to stamp. It never moves backwards."""
        with self.lock:
            self._advance(url, stamp)

    def take_new(self, url: str, events: Iterable[Event]) -> list[Event]:
        """Return the Events that are new for url, oldest first, and advance the
        watermark past them.
        """
        with self.lock:
            fresh: list[Event] = sorted((e for e in events if self._is_new(url, e.created_at)),
                                        key=lambda e: e.created_at)
            if len(fresh) > 0:
                self._advance(url, fresh[-1].created_at)
            return fresh

    def _is_new(self, url: str, stamp: int) -> bool:
        last: Optional[int] = self._marks.get(url)
        return last is None or stamp > last

    def _advance(self, url: str, stamp: int) -> None:
        last: Optional[int] = self._marks.get(url)
        if last is None or stamp > last:
            self._marks[url] = stamp

# Local Variables: #
# python-indent: 4 #
# End: #
