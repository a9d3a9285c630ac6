#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-19 12:03:55 krylon>
#
# /data/code/python/rssbridge/src/rssbridge/signer.py
# created on 19. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the rssbridge feed relay. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
rssbridge.signer

(c) 2026 Benjamin Walkenhorst

Signer computes event IDs and BIP-340 Schnorr signatures over secp256k1.
"""


import hashlib

from coincurve import PrivateKey, PublicKeyXOnly

from rssbridge.common import BridgeError
from rssbridge.model import Event


class SigningError(BridgeError):
    """SigningError indicates a private key we cannot sign with."""


class Signer:
    """Sign Events with hex-encoded private keys."""

    __slots__: list[str] = []

    def public_key_for(self, private_key: str) -> str:
        """Return the hex-encoded x-only public key for a private key."""
        try:
            pub = PublicKeyXOnly.from_secret(bytes.fromhex(private_key))
        except ValueError as err:
            raise SigningError(f"Invalid private key: {err}") from err
        return pub.format().hex()

    def sign(self, evt: Event, private_key: str) -> str:
        """Set the Event's ID and signature, return the signature."""
        try:
            key = PrivateKey(bytes.fromhex(private_key))
        except ValueError as err:
            raise SigningError(f"Invalid private key: {err}") from err

        digest: bytes = hashlib.sha256(evt.serialize()).digest()
        evt.id = digest.hex()
        evt.sig = key.sign_schnorr(digest).hex()
        return evt.sig

    def verify(self, evt: Event) -> bool:
        """Return True if the Event's ID and signature are valid."""
        digest: bytes = hashlib.sha256(evt.serialize()).digest()
        if digest.hex() != evt.id:
            return False
        try:
            pub = PublicKeyXOnly(bytes.fromhex(evt.pubkey))
            return pub.verify(bytes.fromhex(evt.sig), digest)
        except ValueError:
            return False

# Local Variables: #
# python-indent: 4 #
# End: #
