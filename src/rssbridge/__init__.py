#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-19 10:05:12 krylon>
#
# /data/code/python/rssbridge/src/rssbridge/__init__.py
# created on 19. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the rssbridge feed relay. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
rssbridge

(c) 2026 Benjamin Walkenhorst

Bridge RSS/Atom feeds into signed Nostr events.
"""

# Local Variables: #
# python-indent: 4 #
# End: #
