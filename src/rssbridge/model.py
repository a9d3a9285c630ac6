#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-19 11:40:07 krylon>
#
# /data/code/python/rssbridge/src/rssbridge/model.py
# created on 19. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the rssbridge feed relay. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
rssbridge.model

(c) 2026 Benjamin Walkenhorst
"""


import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Optional, Union


class Kind(IntEnum):
    """Kind identifies the event types we produce."""

    SetMetadata = 0
    TextNote = 1


def _str_field(data: dict[str, Any], key: str) -> str:
    val = data.get(key, "")
    if not isinstance(val, str):
        raise ValueError(f"Field {key} must be a string, not {val.__class__.__name__}")
    return val


@dataclass(kw_only=True, slots=True)
class Profile:
    """Profile is the display information attached to a Feed's identity."""

    name: str = ""
    url: str = ""
    nip05: str = ""
    picture: str = ""
    banner: str = ""

    def to_dict(self) -> dict[str, str]:
        """Return the Profile using the field names of the stored records."""
        return {
            "Name": self.name,
            "Url": self.url,
            "Nip05": self.nip05,
            "Picture": self.picture,
            "Banner": self.banner,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Profile':
        """Create a Profile from a dict as written by to_dict.

        Raises ValueError if a field is not a string.
        """
        return cls(
            name=_str_field(data, "Name"),
            url=_str_field(data, "Url"),
            nip05=_str_field(data, "Nip05"),
            picture=_str_field(data, "Picture"),
            banner=_str_field(data, "Banner"),
        )


@dataclass(kw_only=True, slots=True)
class Entity:
    """Entity binds a derived private key to a feed URL."""

    private_key: str
    url: str
    meta: Optional[Profile] = None

    def to_json(self) -> bytes:
        """Serialize the Entity for the entity store."""
        rec: dict[str, Any] = {
            "PrivateKey": self.private_key,
            "URL": self.url,
        }
        if self.meta is not None:
            rec["Meta"] = self.meta.to_dict()
        return json.dumps(rec).encode()

    @classmethod
    def from_json(cls, raw: Union[str, bytes]) -> 'Entity':
        """De-serialize an Entity. Raises ValueError if the record is malformed."""
        rec = json.loads(raw)
        if not isinstance(rec, dict):
            raise ValueError(f"Entity record must be an object, not {rec.__class__.__name__}")
        for key in ("PrivateKey", "URL"):
            if key not in rec:
                raise ValueError(f"Entity record lacks field {key}")
        meta = rec.get("Meta")
        if meta is not None and not isinstance(meta, dict):
            raise ValueError(f"Meta must be an object, not {meta.__class__.__name__}")
        return cls(
            private_key=_str_field(rec, "PrivateKey"),
            url=_str_field(rec, "URL"),
            meta=Profile.from_dict(meta) if meta is not None else None,
        )


@dataclass(kw_only=True, slots=True)
class FeedItem:
    """FeedItem is a single entry of a Feed."""

    title: str = ""
    link: str = ""
    description: str = ""
    content: str = ""
    published: Optional[datetime] = None
    updated: Optional[datetime] = None


@dataclass(kw_only=True, slots=True)
class Feed:
    """Feed is a parsed RSS/Atom/JSON feed."""

    title: str = ""
    description: str = ""
    link: str = ""
    image: str = ""
    published: Optional[datetime] = None
    items: list[FeedItem] = field(default_factory=list)


@dataclass(kw_only=True, slots=True)
class Event:
    """Event is a Nostr event."""

    id: str = ""
    pubkey: str
    created_at: int
    kind: Kind
    tags: list[list[str]] = field(default_factory=list)
    content: str = ""
    sig: str = ""

    def serialize(self) -> bytes:
        """Return the canonical serialization the event ID is computed from."""
        return json.dumps([0,
                           self.pubkey,
                           self.created_at,
                           int(self.kind),
                           self.tags,
                           self.content],
                          separators=(",", ":"),
                          ensure_ascii=False).encode()

    def to_dict(self) -> dict[str, Any]:
        """Return the Event in its wire representation."""
        return {
            "id": self.id,
            "pubkey": self.pubkey,
            "created_at": self.created_at,
            "kind": int(self.kind),
            "tags": self.tags,
            "content": self.content,
            "sig": self.sig,
        }


@dataclass(kw_only=True, slots=True)
class Filter:
    """Filter is a subscription filter as received by the relay host."""

    ids: Optional[list[str]] = None
    authors: list[str] = field(default_factory=list)
    kinds: Optional[list[int]] = None
    since: Optional[int] = None
    until: Optional[int] = None
    tags: dict[str, list[str]] = field(default_factory=dict)

    def wants(self, kind: Kind) -> bool:
        """Return True if events of the given kind match the Filter."""
        return self.kinds is None or int(kind) in self.kinds

    def in_range(self, stamp: int) -> bool:
        """Return True if the timestamp lies within the since/until window."""
        if self.since is not None and stamp < self.since:
            return False
        if self.until is not None and stamp > self.until:
            return False
        return True


@dataclass(kw_only=True, slots=True)
class ImageInfo:
    """Open Graph image information."""

    url: str = ""
    width: int = 0
    height: int = 0
    alt: str = ""


@dataclass(kw_only=True, slots=True)
class VideoInfo:
    """Open Graph video information."""

    url: str = ""
    width: int = 0
    height: int = 0


@dataclass(kw_only=True, slots=True)
class ArticleMeta:
    """Open Graph article metadata."""

    author: str = ""
    publisher: str = ""
    section: str = ""
    published: Optional[datetime] = None
    modified: Optional[datetime] = None
    tags: list[str] = field(default_factory=list)


@dataclass(kw_only=True, slots=True)
class MetaData:
    """MetaData holds the relevant meta data of a web page."""

    title: str = ""
    description: str = ""
    url: str = ""
    keywords: list[str] = field(default_factory=list)
    image: ImageInfo = field(default_factory=ImageInfo)
    video: VideoInfo = field(default_factory=VideoInfo)
    article: ArticleMeta = field(default_factory=ArticleMeta)

    def to_dict(self) -> dict[str, Any]:
        """Return the MetaData as a dict suitable for JSON, omitting empty fields."""
        return _compact({
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "image": {
                "url": self.image.url,
                "width": self.image.width,
                "height": self.image.height,
                "alt": self.image.alt,
            },
            "video": {
                "url": self.video.url,
                "width": self.video.width,
                "height": self.video.height,
            },
            "keywords": self.keywords,
            "articleMeta": {
                "author": self.article.author,
                "publisher": self.article.publisher,
                "section": self.article.section,
                "published": _rfc3339(self.article.published),
                "modified": _rfc3339(self.article.modified),
                "tags": self.article.tags,
            },
        })


def _rfc3339(stamp: Optional[datetime]) -> Optional[str]:
    if stamp is None:
        return None
    return stamp.isoformat()


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop empty values, recursively."""
    res: dict[str, Any] = {}
    for key, val in data.items():
        if isinstance(val, dict):
            val = _compact(val)
        if val is None or val == "" or val == 0 or val == [] or val == {}:
            continue
        res[key] = val
    return res

# Local Variables: #
# python-indent: 4 #
# End: #
