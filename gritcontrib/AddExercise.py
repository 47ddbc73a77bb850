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

"""This script creates a new exercise in a course.

"""

# We enable monkey patching to make many libraries gevent-friendly.
import gevent.monkey
gevent.monkey.patch_all()  # noqa

import argparse
import logging
import sys
from datetime import timedelta

from grit import utf8_decoder
from grit.entities.context import ExerciseMetadata, WrongDate
from gritcommon.conf_parser import ConfigError
from gritcommon.datetime import parse_local_datetime
from gritcontrib import load_controller


logger = logging.getLogger(__name__)


def add_exercise(course_id, connection_id, metadata):
    controller = load_controller()
    if controller.get_course(course_id) is None:
        logger.error("No course with id %d.", course_id)
        return False
    if controller.get_connection(connection_id) is None:
        logger.error("No connection with id %d.", connection_id)
        return False
    try:
        exercise = controller.add_exercise(course_id, connection_id,
                                           metadata)
    except (WrongDate, ConfigError) as error:
        logger.error("Couldn't add the exercise: %s", error)
        return False
    logger.info("Exercise %s added with id %d.", metadata.name, exercise.id)
    return True


def main():
    """Parse arguments and launch process.

    """
    parser = argparse.ArgumentParser(
        description="Add an exercise to a course of GRIT.")
    parser.add_argument("course_id", action="store", type=int)
    parser.add_argument("connection_id", action="store", type=int)
    parser.add_argument("name", action="store", type=utf8_decoder,
                        help="name of the exercise")
    parser.add_argument("language", action="store", type=utf8_decoder,
                        help="JAVA, C, CPP or HASKELL")
    parser.add_argument("start", action="store", type=parse_local_datetime,
                        help="local time, as 2014-05-01T10:00")
    parser.add_argument("deadline", action="store",
                        type=parse_local_datetime,
                        help="local time, as 2014-05-08T10:00")
    parser.add_argument("-P", "--period", action="store", type=int,
                        default=60,
                        help="minutes between fetches (default 60)")
    parser.add_argument("-f", "--flag", action="append", type=utf8_decoder,
                        default=[], dest="flags",
                        help="compiler flag, can be given several times")

    args = parser.parse_args()

    metadata = ExerciseMetadata(args.name, args.language, args.start,
                                args.deadline,
                                timedelta(minutes=args.period),
                                args.flags)
    success = add_exercise(args.course_id, args.connection_id, metadata)
    return 0 if success is True else 1


if __name__ == "__main__":
    sys.exit(main())
