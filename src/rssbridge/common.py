#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-19 10:12:41 krylon>
#
# /data/code/python/rssbridge/src/rssbridge/common.py
# created on 19. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the rssbridge feed relay. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
rssbridge.common

(c) 2026 Benjamin Walkenhorst

Constants, paths, logging and the base exception shared by all modules.
"""


import logging
import logging.handlers
import os
import pathlib
import sys
from threading import Lock
from typing import Final, Union

AppName: Final[str] = "RSSBridge"
AppVersion: Final[str] = "0.1.0"
Debug: bool = True
TimeFmt: Final[str] = "%Y-%m-%d %H:%M:%S"


class BridgeError(Exception):
    """Base class for all exceptions raised by the application."""


class Path:
    """Path holds the file system locations the application uses."""

    __slots__ = ["__base"]

    __base: pathlib.Path

    def __init__(self, root: Union[str, pathlib.Path]) -> None:
        self.__base = pathlib.Path(root)

    def base(self, folder: Union[str, pathlib.Path, None] = None) -> pathlib.Path:
        """Return the base directory. If folder is given, set it first."""
        if folder is not None:
            self.__base = pathlib.Path(folder)
        return self.__base

    @property
    def db(self) -> pathlib.Path:
        """Return the path of the entity store."""
        return self.__base.joinpath("entities")

    @property
    def log(self) -> pathlib.Path:
        """Return the path of the log file."""
        return self.__base.joinpath(f"{AppName.lower()}.log")

    @property
    def cache(self) -> pathlib.Path:
        """Return the path of the cache directory."""
        return self.__base.joinpath("cache")


path: Path = Path(os.path.expanduser(f"~/.{AppName.lower()}.d"))

_lock: Final[Lock] = Lock()
_loggers: dict[str, logging.Logger] = {}
_fmt: Final[str] = "%(asctime)s (%(name)-16s) - %(levelname)-8s %(message)s"


def set_basedir(folder: Union[str, pathlib.Path]) -> None:
    """Relocate the base directory and drop cached loggers."""
    with _lock:
        path.base(folder)
        for lg in _loggers.values():
            for h in list(lg.handlers):
                lg.removeHandler(h)
                h.close()
        _loggers.clear()
        init_app()


def init_app() -> None:
    """Make sure the directories the application needs exist."""
    for folder in (path.base(), path.db, path.cache):
        folder.mkdir(parents=True, exist_ok=True)


def get_logger(name: str, terminal: bool = True) -> logging.Logger:
    """Return a Logger with the given name, creating it if necessary."""
    with _lock:
        if name in _loggers:
            return _loggers[name]

        init_app()

        log = logging.getLogger(f"{AppName.lower()}.{name}")
        log.setLevel(logging.DEBUG if Debug else logging.INFO)
        log.propagate = False

        fmt = logging.Formatter(_fmt)
        filehandler = logging.handlers.RotatingFileHandler(str(path.log),
                                                           "a",
                                                           10 * 2**20,
                                                           10)
        filehandler.setFormatter(fmt)
        log.addHandler(filehandler)

        if terminal:
            console = logging.StreamHandler(sys.stderr)
            console.setFormatter(fmt)
            log.addHandler(console)

        _loggers[name] = log
        return log


def fix_url(url: str) -> str:
    """Repair a scheme that lost one of its slashes, e.g. https:/example.com.

    Anything else is returned unchanged, this is not a general URL validator.
    """
    if url.startswith("http://") or url.startswith("https://"):
        return url
    if url.startswith("http:/"):
        return url.replace("http:/", "http://", 1)
    if url.startswith("https:/"):
        return url.replace("https:/", "https://", 1)
    return url

# Local Variables: #
# python-indent: 4 #
# End: #
