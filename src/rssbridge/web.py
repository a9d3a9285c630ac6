#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-19 19:07:30 krylon>
#
# /data/code/python/rssbridge/src/rssbridge/web.py
# created on 19. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the rssbridge feed relay. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
rssbridge.web

(c) 2026 Benjamin Walkenhorst
"""


import json
import logging
import socket
from datetime import datetime
from typing import Any, Final, Optional

import bottle
import requests
from bottle import request, response

from rssbridge import common
from rssbridge.metacache import MetadataCache
from rssbridge.metadata import MetadataError, MetaFetcher
from rssbridge.model import MetaData


class WebUI:
    """Serve the meta data of web pages over HTTP."""

    __slots__ = [
        "log",
        "app",
        "host",
        "port",
        "fetcher",
        "cache",
    ]

    log: logging.Logger
    app: bottle.Bottle
    host: str
    port: int
    fetcher: MetaFetcher
    cache: MetadataCache

    def __init__(self,
                 host: str = "localhost",
                 port: int = 4107,
                 fetcher: Optional[MetaFetcher] = None,
                 cache: Optional[MetadataCache] = None) -> None:
        self.log = common.get_logger("web")
        self.log.info("Web interface is coming up...")

        self.host = host
        self.port = port
        self.fetcher = fetcher if fetcher is not None else MetaFetcher()
        self.cache = cache if cache is not None else MetadataCache()

        bottle.debug(common.Debug)
        self.app = bottle.Bottle()
        self.app.route("/og/<target:path>", method="GET", callback=self._handle_og)
        self.app.route("/og", method="GET", callback=self._handle_og_empty)
        self.app.route("/og/", method="GET", callback=self._handle_og_empty)
        self.app.route("/beacon", method="GET", callback=self._handle_beacon)

    def run(self) -> None:
        """Run the web server."""
        self.cache.start()
        try:
            bottle.run(app=self.app, host=self.host, port=self.port, debug=common.Debug)
        finally:
            self.cache.stop()

    def _handle_og(self, target: str) -> str:
        """Return the meta data of the page at target as JSON."""
        url: str = common.fix_url(target)
        if request.query_string != "":
            url += "?" + request.query_string

        self.log.info("[OG Triggered]: %s (from %s)", url, request.remote_addr)
        response.set_header("Cache-Control", "no-store, max-age=0")

        data: Optional[MetaData] = self.cache.get(url)
        if data is not None:
            response.set_header("Content-Type", "application/json")
            return json.dumps(data.to_dict())

        try:
            data = self.fetcher.fetch(url)
        except (MetadataError, requests.RequestException) as err:
            status: Final[Optional[int]] = getattr(err, "status", None)
            if status == 404:
                response.status = 404
                response.set_header("Content-Type", "text/plain; charset=UTF-8")
                return "Not Found"
            msg: Final[str] = f"could not fetch metadata {url}: {err}"
            self.log.error(msg)
            response.status = 400
            response.set_header("Content-Type", "application/json")
            return json.dumps({"error": msg})

        self.cache.put(url, data)
        response.set_header("Content-Type", "application/json")
        return json.dumps(data.to_dict())

    def _handle_og_empty(self) -> str:
        """Reject a request that names no target page."""
        response.status = 400
        response.set_header("Content-Type", "application/json")
        response.set_header("Cache-Control", "no-store, max-age=0")
        return json.dumps({"error": "no target url given"})

    def _handle_beacon(self) -> str:
        """Handle the call for the beacon."""
        jdata: dict[str, Any] = {
            "status": True,
            "message": f"{common.AppName} {common.AppVersion}",
            "timestamp": datetime.now().strftime(common.TimeFmt),
            "hostname": socket.gethostname(),
        }

        response.set_header("Content-Type", "application/json")
        response.set_header("Cache-Control", "no-store, max-age=0")

        return json.dumps(jdata)

# Local Variables: #
# python-indent: 4 #
# End: #
