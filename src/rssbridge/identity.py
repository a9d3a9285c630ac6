#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-19 11:52:20 krylon>
#
# /data/code/python/rssbridge/src/rssbridge/identity.py
# created on 19. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the rssbridge feed relay. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
rssbridge.identity

(c) 2026 Benjamin Walkenhorst

Every Feed gets its own keypair, computed from the shared secret and the
feed URL, so the keys never have to be backed up separately.
"""


import hashlib
import hmac

from rssbridge.signer import Signer


def derive_private_key(secret: str, feed_url: str) -> str:
    """Return the hex-encoded HMAC-SHA256 of the feed URL keyed by the secret."""
    mac = hmac.new(secret.encode(), feed_url.encode(), hashlib.sha256)
    return mac.hexdigest()


def derive_keypair(secret: str, feed_url: str, signer: Signer) -> tuple[str, str]:
    """Return the (private, public) key pair for a feed URL.

    Raises SigningError if the derived key is not usable.
    """
    sk: str = derive_private_key(secret, feed_url)
    return sk, signer.public_key_for(sk)

# Local Variables: #
# python-indent: 4 #
# End: #
