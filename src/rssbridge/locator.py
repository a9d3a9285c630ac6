#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-19 12:31:18 krylon>
#
# /data/code/python/rssbridge/src/rssbridge/locator.py
# created on 19. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the rssbridge feed relay. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
rssbridge.locator

(c) 2026 Benjamin Walkenhorst

Find the feed that belongs to a web site.
"""


import logging
import posixpath
from typing import Final, Optional
from urllib.parse import urlsplit, urlunsplit

import requests
from bs4 import BeautifulSoup

from rssbridge import common

timeout: Final[int] = 5

# The order matters, earlier markers win.
feed_types: Final[tuple[str, ...]] = (
    "rss+xml",
    "atom+xml",
    "feed+json",
    "text/xml",
    "application/xml",
)


def join_url(base: str, href: str) -> str:
    """Join href onto the path of base.

    This is a plain path join, not RFC 3986 resolution: an absolute href
    replaces the path, a relative one is appended to it.
    """
    parts = urlsplit(base)
    joined: str = posixpath.normpath(posixpath.join(parts.path or "/", href))
    if joined.startswith("//"):
        joined = "/" + joined.lstrip("/")
    return urlunsplit((parts.scheme, parts.netloc, joined, "", ""))


class FeedLocator:
    """FeedLocator resolves the URL of a web site to the URL of its feed."""

    __slots__ = [
        "log",
        "session",
    ]

    log: logging.Logger
    session: requests.Session

    def __init__(self, session: Optional[requests.Session] = None) -> None:
        self.log = common.get_logger("locator")
        self.session = session if session is not None else requests.Session()

    def locate(self, site_url: str) -> Optional[str]:
        """Return the URL of the feed for site_url, or None if we cannot find one."""
        url: Final[str] = common.fix_url(site_url)
        try:
            res = self.session.get(url, timeout=timeout)
        except requests.RequestException as err:
            self.log.info("Failed to fetch %s: %s", url, err)
            return None

        if res.status_code >= 400:
            self.log.info("Fetching %s returned status %d", url, res.status_code)
            return None

        ctype: Final[str] = res.headers.get("Content-Type", "")
        for typ in feed_types:
            if typ in ctype:
                return url

        if "text/html" not in ctype:
            self.log.debug("%s has unexpected content type %s", url, ctype)
            return None

        soup = BeautifulSoup(res.text, "html.parser")
        for typ in feed_types:
            link = soup.select_one(f"link[type*='{typ}']")
            if link is None:
                continue
            href = link.get("href", "")
            if href == "":
                continue
            if not href.startswith("http"):
                href = join_url(url, href)
            self.log.debug("Found %s feed for %s at %s", typ, url, href)
            return href

        return None

# Local Variables: #
# python-indent: 4 #
# End: #
