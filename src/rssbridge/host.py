#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-19 17:02:44 krylon>
#
# /data/code/python/rssbridge/src/rssbridge/host.py
# created on 19. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the rssbridge feed relay. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
rssbridge.host

(c) 2026 Benjamin Walkenhorst

The interface between the bridge and the relay that serves its Events.
"""


from threading import Lock
from typing import Protocol

from rssbridge.model import Filter


class RelayHost(Protocol):  # pylint: disable-msg=R0903
    """RelayHost is what the bridge needs to know about the relay."""

    def active_filters(self) -> list[Filter]:
        """Return the Filters of all open subscriptions."""


class Subscriptions:
    """Subscriptions tracks the Filters of the relay's open subscriptions.

    The relay frontend adds and removes subscriptions as clients come and go,
    the bridge's poller asks which authors anyone is listening for.
    """

    __slots__ = [
        "lock",
        "_subs",
    ]

    lock: Lock
    _subs: dict[str, list[Filter]]

    def __init__(self) -> None:
        self.lock = Lock()
        self._subs = {}

    def __len__(self) -> int:
        with self.lock:
            return len(self._subs)

    def add(self, sub_id: str, filters: list[Filter]) -> None:
        """Register (or replace) a subscription."""
        with self.lock:
            self._subs[sub_id] = list(filters)

    def remove(self, sub_id: str) -> None:
        """Drop a subscription. Unknown IDs are ignored."""
        with self.lock:
            self._subs.pop(sub_id, None)

    def active_filters(self) -> list[Filter]:
        """Return the Filters of all subscriptions."""
        with self.lock:
            return [f for filters in self._subs.values() for f in filters]

# Local Variables: #
# python-indent: 4 #
# End: #
