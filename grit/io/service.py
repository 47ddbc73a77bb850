#!/usr/bin/env python3

# GRIT - Automated grading of programming exercises
# Copyright © 2014 Team GRIT
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as
# published by the Free Software Foundation, either version 3 of the
# License, or (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import logging
import os
import signal
import time

import gevent
import gevent.event

from grit import config, mkdir
from grit.log import root_logger, shell_handler, ServiceFilter, \
    CustomFormatter, FileHandler


__all__ = ["Service", "initialize_logging"]


logger = logging.getLogger(__name__)


def initialize_logging(name: str) -> str:
    """Set up the file logging handler for the named process.

    Log to <log_dir>/<name>/<timestamp>.log, keep a last.log symlink to
    the newest file, and stamp every record with the process name.

    name: the name of the process.

    return: the path of the new log file.

    """
    filter_ = ServiceFilter(name)

    # Update shell handler to attach the process name.
    shell_handler.addFilter(filter_)

    # Determine location of log file, and make directories.
    log_dir = os.path.join(config.global_.log_dir, name)
    mkdir(log_dir)
    log_filename = "%d.log" % int(time.time())

    # Install a file handler.
    file_handler = FileHandler(os.path.join(log_dir, log_filename),
                               mode='w', encoding='utf-8')
    if config.global_.file_log_debug:
        file_log_level = logging.DEBUG
    else:
        file_log_level = logging.INFO
    file_handler.setLevel(file_log_level)
    file_handler.setFormatter(CustomFormatter(False))
    file_handler.addFilter(filter_)
    root_logger.addHandler(file_handler)

    # Provide a symlink to the latest log file.
    try:
        os.remove(os.path.join(log_dir, "last.log"))
    except OSError:
        pass
    os.symlink(log_filename, os.path.join(log_dir, "last.log"))

    return os.path.join(log_dir, log_filename)


class Service:
    """A long running process that stops on SIGINT or SIGTERM.

    Subclasses start their work in on_start and release it in on_stop;
    run blocks in between.

    """

    def __init__(self):
        self.name = self.__class__.__name__
        self._exit = gevent.event.Event()
        initialize_logging(self.name)

    def on_start(self):
        pass

    def on_stop(self):
        pass

    def exit(self):
        """Terminate the service at the next step."""
        logger.warning("%s received request to shut down.", self.name)
        self._exit.set()

    def run(self) -> bool:
        """Start the service and block until it is asked to exit.

        return: True if the service started and stopped cleanly.

        """
        for signum in (signal.SIGINT, signal.SIGTERM):
            gevent.signal_handler(signum, self.exit)

        try:
            self.on_start()
        except Exception:
            logger.critical("%s could not start.", self.name, exc_info=True)
            return False

        logger.info("%s up and running!", self.name)
        self._exit.wait()

        self.on_stop()
        logger.info("%s stopped.", self.name)
        return True
