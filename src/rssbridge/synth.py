#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-19 14:02:13 krylon>
#
# /data/code/python/rssbridge/src/rssbridge/synth.py
# created on 19. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the rssbridge feed relay. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
rssbridge.synth

(c) 2026 Benjamin Walkenhorst

Turn Feeds and their Items into (unsigned) Events.
"""


import json
from datetime import datetime
from typing import Final, Optional

from bs4 import BeautifulSoup

from rssbridge.model import Event, Feed, FeedItem, Kind, Profile

max_content: Final[int] = 250


def strip_tags(html: str) -> str:
    """Return the text of an HTML fragment with all markup removed."""
    if html == "":
        return ""
    soup = BeautifulSoup(html, "html.parser")
    return soup.get_text()


def append_truncated_copy(content: str) -> str:
    """Handle content that is longer than max_content characters.

    Long content gets a truncated copy of itself appended instead of being
    shortened. Clients have seen this for a long time, so we keep doing it.
    """
    if len(content) > max_content:
        content += content[:max_content-1] + "…"
    return content


def item_timestamp(item: FeedItem, now: Optional[datetime] = None) -> int:
    """Return the Unix time of an Item: published beats updated beats now."""
    stamp: datetime = now if now is not None else datetime.now()
    if item.updated is not None:
        stamp = item.updated
    if item.published is not None:
        stamp = item.published
    return int(stamp.timestamp())


def item_content(item: FeedItem) -> str:
    """Assemble the text of the note for an Item."""
    content: str = ""
    if item.title != "":
        content = f"**{item.title}**\n\n"
    content += strip_tags(item.description)
    content = append_truncated_copy(content)
    content += "\n\n" + item.link
    return content


def item_to_text_note(pubkey: str, item: FeedItem, now: Optional[datetime] = None) -> Event:
    """Create a text note from a feed Item."""
    return Event(
        pubkey=pubkey,
        created_at=item_timestamp(item, now),
        kind=Kind.TextNote,
        tags=[],
        content=item_content(item),
    )


def feed_to_profile(pubkey: str,
                    feed: Feed,
                    meta: Optional[Profile] = None,
                    now: Optional[datetime] = None) -> Event:
    """Create the profile metadata Event for a Feed."""
    about: str = feed.description
    if feed.link != "":
        about = f"{about}\n\n{feed.link}" if about != "" else feed.link

    info: dict[str, str] = {
        "name": feed.title,
        "about": about,
    }
    if feed.image != "":
        info["picture"] = feed.image

    if meta is not None:
        if meta.name != "":
            info["name"] = meta.name
        if meta.picture != "":
            info["picture"] = meta.picture
        if meta.nip05 != "":
            info["nip05"] = meta.nip05
        if meta.banner != "":
            info["banner"] = meta.banner
        if meta.url != "":
            info["website"] = meta.url

    stamp: datetime = now if now is not None else datetime.now()
    if feed.published is not None:
        stamp = feed.published

    return Event(
        pubkey=pubkey,
        created_at=int(stamp.timestamp()),
        kind=Kind.SetMetadata,
        tags=[],
        content=json.dumps(info, ensure_ascii=False),
    )

# Local Variables: #
# python-indent: 4 #
# End: #
