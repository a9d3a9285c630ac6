#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-19 19:44:02 krylon>
#
# /data/code/python/rssbridge/src/rssbridge/main.py
# created on 19. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the rssbridge feed relay. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
rssbridge.main

(c) 2026 Benjamin Walkenhorst
"""


import argparse
import logging
import os
import pathlib
import signal
import sys
from threading import Thread

from rssbridge import common
from rssbridge.bridge import Bridge
from rssbridge.common import BridgeError
from rssbridge.host import Subscriptions
from rssbridge.store import EntityStore
from rssbridge.web import WebUI


def main() -> None:
    """Run the rssbridge application."""
    argp: argparse.ArgumentParser = argparse.ArgumentParser()
    argp.add_argument("-e", "--engine",
                      action="store_true",
                      help="Run the feed poller")
    argp.add_argument("-w", "--web",
                      action="store_true",
                      help="Run the web server for page meta data")
    argp.add_argument("-a", "--address",
                      default="localhost",
                      help="The IP address(es) or hostname to listen on")
    argp.add_argument("-p", "--port",
                      type=int,
                      default=4107,
                      help="The port for the web interface to listen on")
    argp.add_argument("-b", "--basedir",
                      type=pathlib.Path,
                      default=common.path.base(),
                      help="The directory to store application-specific files in")
    argp.add_argument("-s", "--secret",
                      default=os.environ.get("RSSBRIDGE_SECRET", ""),
                      help="The secret feed keys are derived from (default: $RSSBRIDGE_SECRET)")
    argp.add_argument("-i", "--interval",
                      type=int,
                      default=600,
                      help="Seconds to wait between two checks for new items")
    argp.add_argument("-f", "--feeds",
                      help="A JSON file listing feeds to register at startup")
    argp.add_argument("-r", "--register",
                      action="append",
                      default=[],
                      help="The URL of a site or feed to register (may be repeated)")
    argp.add_argument("-l", "--list",
                      action="store_true",
                      help="List the registered feeds and exit")

    args = argp.parse_args()

    common.set_basedir(args.basedir)
    lg: logging.Logger = common.get_logger("main")

    if args.secret == "":
        lg.critical("No secret was given, use --secret or set RSSBRIDGE_SECRET")
        sys.exit(1)

    store: EntityStore = EntityStore()
    subs: Subscriptions = Subscriptions()
    bridge: Bridge = Bridge(args.secret, store, subs, args.interval)

    if args.list:
        for pubkey, entity in bridge.registered():
            name: str = entity.meta.name if entity.meta is not None else ""
            print(f"{pubkey}  {entity.url}  {name}")
        store.close()
        return

    if args.feeds is not None:
        try:
            for prof in bridge.profiles_from_file(args.feeds):
                bridge.register(prof.url, prof)
        except (OSError, ValueError, BridgeError) as err:
            lg.error("Cannot load feeds from %s: %s", args.feeds, err)
            sys.exit(1)

    for url in args.register:
        bridge.register(url)

    if args.engine:
        bridge.start()

    if args.web:
        srv = WebUI(args.address, args.port)
        t = Thread(target=srv.run, daemon=True)
        t.start()

    if not (args.engine or args.web):
        store.close()
        return

    try:
        signal.pause()
    except KeyboardInterrupt:
        print("Quitting now, bye!")

    bridge.stop()
    store.close()

    print("So long, and thanks for all the fish.")


if __name__ == '__main__':
    main()


# Local Variables: #
# python-indent: 4 #
# End: #
