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

"""This script creates a new course.

"""

# We enable monkey patching to make many libraries gevent-friendly.
import gevent.monkey
gevent.monkey.patch_all()  # noqa

import argparse
import logging
import sys

from grit import utf8_decoder
from gritcontrib import load_controller


logger = logging.getLogger(__name__)


def add_course(name):
    controller = load_controller()
    course = controller.add_course(name)
    logger.info("Course %s added with id %d.", name, course.id)
    return True


def main():
    """Parse arguments and launch process.

    """
    parser = argparse.ArgumentParser(description="Add a course to GRIT.")
    parser.add_argument("name", action="store", type=utf8_decoder,
                        help="name of the course")

    args = parser.parse_args()

    success = add_course(args.name)
    return 0 if success is True else 1


if __name__ == "__main__":
    sys.exit(main())
