#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-19 15:11:08 krylon>
#
# /data/code/python/rssbridge/src/rssbridge/store.py
# created on 19. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the rssbridge feed relay. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
rssbridge.store

(c) 2026 Benjamin Walkenhorst

EntityStore is a thin key-value layer on top of LMDB. It knows nothing about
what it stores, the values are opaque bytes.
"""


import logging
from contextlib import contextmanager
from typing import Final, Optional, Union

import lmdb

from rssbridge import common
from rssbridge.common import BridgeError

db_name: Final[bytes] = b"entity"


class StoreError(BridgeError):
    """StoreError indicates an error in the entity store."""


class EntityStore:
    """EntityStore persists Entities keyed by public key."""

    __slots__ = [
        "log",
        "env",
        "db",
        "path",
    ]

    log: logging.Logger
    env: lmdb.Environment
    db: 'lmdb._Database'
    path: str

    def __init__(self, root: str = "") -> None:
        self.log = common.get_logger("store")
        if root == "":
            root = str(common.path.db)
        self.path = root
        self.log.debug("Open entity store in %s", root)
        try:
            self.env = lmdb.Environment(root,
                                        subdir=True,
                                        map_size=(1 << 30),  # 1 GiB
                                        metasync=False,
                                        create=True,
                                        max_dbs=2,
                                        )
            self.db = self.env.open_db(db_name)
        except lmdb.Error as err:
            raise StoreError(f"Cannot open entity store in {root}: {err}") from err

    def close(self) -> None:
        """Close the LMDB environment."""
        self.env.close()

    @contextmanager
    def tx(self, rw: bool = False):
        """Run a transaction. Unless rw is True, it is a read-only snapshot."""
        tx: lmdb.Transaction = self.env.begin(write=rw, db=self.db)
        try:
            yield tx
        except lmdb.Error as err:
            tx.abort()
            raise StoreError(f"Abort transaction: {err}") from err
        except BaseException:
            tx.abort()
            raise
        else:
            tx.commit()

    def get(self, key: Union[str, bytes]) -> Optional[bytes]:
        """Return the value stored under key, or None."""
        with self.tx() as tx:
            return tx.get(_key(key))

    def set(self, key: Union[str, bytes], val: bytes) -> None:
        """Store val under key, replacing any previous value."""
        with self.tx(True) as tx:
            tx.put(_key(key), val, overwrite=True)

    def keys(self) -> list[bytes]:
        """Return all keys in the store."""
        with self.tx() as tx:
            return list(tx.cursor().iternext(keys=True, values=False))


def _key(key: Union[str, bytes]) -> bytes:
    return key.encode() if isinstance(key, str) else key

# Local Variables: #
# python-indent: 4 #
# End: #
