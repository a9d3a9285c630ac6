#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-19 16:04:37 krylon>
#
# /data/code/python/rssbridge/src/rssbridge/metadata.py
# created on 19. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the rssbridge feed relay. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
rssbridge.metadata

(c) 2026 Benjamin Walkenhorst

Fetch web pages and extract their Open Graph meta data.
"""


import logging
from datetime import datetime
from typing import Final, Optional, Union

import requests
from bs4 import BeautifulSoup
from bs4.element import Tag

from rssbridge import common
from rssbridge.common import BridgeError
from rssbridge.model import ArticleMeta, ImageInfo, MetaData, VideoInfo

timeout: Final[int] = 5

html_types: Final[tuple[str, ...]] = (
    "text/html",
    "application/xhtml+xml",
    "application/xml",
)

user_agent: Final[str] = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 " + \
    "(KHTML, like Gecko) Chrome/89.0.4389.82 Safari/537.36"

# Some sites refuse to talk to anything that does not look like a browser.
head_headers: Final[dict[str, str]] = {
    "User-Agent": user_agent,
    "Accept": "text/html,application/xhtml+xml,application/xml;",
    "Accept-Language": "en-US,en;q=0.5",
    "Cache-Control": "max-age=0",
}

get_headers: Final[dict[str, str]] = {
    "User-Agent": user_agent,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Encoding": "gzip, deflate",
    "Accept-Language": "en-US,en;q=0.5",
    "Cache-Control": "max-age=0",
}


class MetadataError(BridgeError):
    """MetadataError indicates a failure to get the meta data of a page."""

    status: Optional[int]

    def __init__(self, msg: str, status: Optional[int] = None) -> None:
        super().__init__(msg)
        self.status = status


class InvalidFormatError(MetadataError):
    """InvalidFormatError means the page is not something we can extract meta data from."""


class StatusError(MetadataError):
    """StatusError means the server answered with an unexpected status code."""


Scope = Union[BeautifulSoup, Tag]


def get_meta(scope: Scope, attr: str, tag: str, default: str = "") -> str:
    """Return the content of the first meta element whose attr equals tag."""
    found = scope.find("meta", attrs={attr: tag})
    if isinstance(found, Tag):
        content = found.get("content", default)
        return content if isinstance(content, str) else default
    return default


def get_meta_tag(scope: Scope, tag: str, default: str = "") -> str:
    """Look up a meta tag, a property attribute is preferred over a name attribute."""
    return get_meta(scope, "property", tag, get_meta(scope, "name", tag, default))


def get_int_meta(scope: Scope, tag: str) -> int:
    """Look up a meta tag holding a number. Return 0 if it is missing or invalid."""
    try:
        return int(get_meta_tag(scope, tag, "0"))
    except ValueError:
        return 0


def get_time_meta(scope: Scope, tag: str) -> Optional[datetime]:
    """Look up a meta tag holding an RFC 3339 timestamp."""
    timestr: Final[str] = get_meta_tag(scope, tag)
    if timestr == "":
        return None
    try:
        return datetime.fromisoformat(timestr)
    except ValueError:
        return None


def get_list_meta(scope: Scope, tag: str) -> list[str]:
    """Look up a meta tag holding a comma-separated list."""
    return [x.strip() for x in get_meta_tag(scope, tag).split(",") if x.strip() != ""]


def get_canonical_link(scope: Scope) -> str:
    """Return the href of the canonical link element, if there is one."""
    found = scope.find("link", rel="canonical")
    if isinstance(found, Tag):
        href = found.get("href", "")
        return href if isinstance(href, str) else ""
    return ""


def extract(html: Union[str, bytes]) -> MetaData:
    """Extract the MetaData from an HTML document."""
    soup = BeautifulSoup(html, "html.parser")
    head: Scope = soup.head if soup.head is not None else soup

    title: str = ""
    elt = head.find("title")
    if elt is not None:
        title = elt.get_text().strip()

    return MetaData(
        url=get_meta_tag(head, "og:url", get_canonical_link(head)),
        title=get_meta_tag(head, "og:title", title),
        description=get_meta_tag(head, "og:description", get_meta_tag(head, "description")),
        keywords=get_list_meta(head, "keywords"),
        image=ImageInfo(
            url=get_meta_tag(head, "og:image"),
            width=get_int_meta(head, "og:image:width"),
            height=get_int_meta(head, "og:image:height"),
            alt=get_meta_tag(head, "og:image:alt"),
        ),
        video=VideoInfo(
            url=get_meta_tag(head, "og:video"),
            width=get_int_meta(head, "og:video:width"),
            height=get_int_meta(head, "og:video:height"),
        ),
        article=ArticleMeta(
            author=get_meta_tag(head, "article:author"),
            publisher=get_meta_tag(head, "article:publisher"),
            section=get_meta_tag(head, "article:section"),
            published=get_time_meta(head, "article:published_time"),
            modified=get_time_meta(head, "article:modified_time"),
            tags=get_list_meta(head, "article:tag"),
        ),
    )


class MetaFetcher:
    """MetaFetcher downloads web pages and extracts their meta data."""

    __slots__ = [
        "log",
        "session",
    ]

    log: logging.Logger
    session: requests.Session

    def __init__(self, session: Optional[requests.Session] = None) -> None:
        self.log = common.get_logger("metadata")
        self.session = session if session is not None else requests.Session()

    def fetch(self, url: str) -> MetaData:
        """Fetch the page at url and return its MetaData.

        A HEAD request comes first, so we do not download things that are not
        web pages.
        """
        url = common.fix_url(url)
        self.log.debug("Fetch meta data for %s", url)

        try:
            res = self.session.head(url,
                                    headers=head_headers,
                                    timeout=timeout,
                                    allow_redirects=True)
        except requests.RequestException as err:
            raise MetadataError(f"HEAD {url} failed: {err}") from err

        ctype: Final[str] = res.headers.get("Content-Type", "")
        if not 200 <= res.status_code < 300:
            raise InvalidFormatError(f"invalid format: HEAD {url} returned status {res.status_code}",
                                     res.status_code)
        if not any(t in ctype for t in html_types):
            raise InvalidFormatError(f"invalid format: {url} has content type {ctype!r}",
                                     res.status_code)

        try:
            res = self.session.get(url,
                                   headers=get_headers,
                                   timeout=timeout)
        except requests.RequestException as err:
            raise MetadataError(f"GET {url} failed: {err}") from err

        if res.status_code != 200:
            raise StatusError(f"status code {res.status_code} error: {res.reason}",
                              res.status_code)

        return extract(res.content)

# Local Variables: #
# python-indent: 4 #
# End: #
