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

"""Utility to remove an exercise.

"""

# We enable monkey patching to make many libraries gevent-friendly.
import gevent.monkey
gevent.monkey.patch_all()  # noqa

import argparse
import sys

from gritcontrib import load_controller


def ask(exercise_name):
    ans = input("This will delete exercise `%s' from the stored state. Are "
                "you sure? [y/N] " % exercise_name).strip().lower()
    return ans in ["y", "yes"]


def remove_exercise(course_id, exercise_id):
    controller = load_controller()
    if controller.get_course(course_id) is None:
        print("No course with id %d found." % course_id)
        return False
    exercise = controller.get_exercise(course_id, exercise_id)
    if exercise is None:
        print("No exercise with id %d found." % exercise_id)
        return False
    if not ask(exercise.name):
        print("Not removing exercise `%s'." % exercise.name)
        return False
    controller.delete_exercise(course_id, exercise_id)
    print("Exercise `%s' removed." % exercise.name)
    return True


def main():
    """Parse arguments and launch process.

    """
    parser = argparse.ArgumentParser(
        description="Remove an exercise from the stored state."
    )

    parser.add_argument("course_id", action="store", type=int)
    parser.add_argument("exercise_id", action="store", type=int)

    args = parser.parse_args()

    success = remove_exercise(args.course_id, args.exercise_id)
    return 0 if success is True else 1


if __name__ == "__main__":
    sys.exit(main())
