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

"""The grading service: restores the stored courses, connections and
exercises and processes the exercises until it is stopped.

"""

# We enable monkey patching to make the libraries doing network I/O
# (smtplib, imaplib, the database drivers) gevent-friendly.
import gevent.monkey
gevent.monkey.patch_all()  # noqa

import argparse
import logging
import os
import sys

from sqlalchemy.engine import make_url

from grit import config
from grit.db import init_db
from grit.entities.controller import Controller
from grit.entities.state import StateStore
from grit.io import Service


logger = logging.getLogger(__name__)


class GradingService(Service):
    """Run every exercise of every course."""

    def __init__(self):
        super().__init__()
        self.controller = Controller(StateStore())

    def on_start(self):
        init_db()
        self.controller.restore_state()
        for course in self.controller.courses:
            for exercise in course.exercises:
                logger.info("Exercise %s of %s: %s.", exercise.name,
                            course.name, exercise.status)

    def on_stop(self):
        self.controller.stop_all()


def prepare_database_directory():
    """Create the directory of the SQLite database, if that is the
    configured database.

    """
    url = make_url(config.database.url)
    if url.get_backend_name() == "sqlite" and url.database:
        os.makedirs(os.path.dirname(os.path.abspath(url.database)),
                    exist_ok=True)


def main():
    """Parse arguments and launch the service.

    """
    parser = argparse.ArgumentParser(
        description="Fetch, check and report on the submissions of the "
                    "exercises of all courses.")
    parser.parse_args()

    prepare_database_directory()
    success = GradingService().run()
    return 0 if success is True else 1


if __name__ == "__main__":
    sys.exit(main())
