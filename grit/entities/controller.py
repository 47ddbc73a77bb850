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

"""The controller: the courses, connections and exercises of a running
grader, kept in sync with the stored state.

"""

import logging
import os

import gevent.lock

from grit import config, rmtree
from grit.entities.context import ExerciseMetadata, course_directory
from grit.entities.course import Course
from grit.errors import GritError
from grit.mail import Notifier
from grit.preprocess.connection import Connection, CouldNotConnect, \
    check_connection
from grit.report.generator import ReportGenerator
from gritcommon.conf_parser import ConfigError
from gritcommon.datetime import make_datetime


__all__ = ["Controller", "ConnectionUsed"]


logger = logging.getLogger(__name__)


class ConnectionUsed(GritError):
    """A connection cannot be deleted while exercises use it."""

    pass


class Controller:
    """Owner of all courses and connections.

    Every change goes through the controller, which applies it to the
    running exercises and to the state store under a lock. Exercises
    read connections through get_connection.

    """

    def __init__(self, state, clock=make_datetime, notifier=None,
                 report_generator=None, working_dir=None, output_dir=None,
                 arm_exercises=True, check_connections=True):
        """Init.

        state (StateStore): where the state is stored.
        clock (function): returns the current time, a naive UTC
            datetime.
        notifier (Notifier|None): sends the mails.
        report_generator (ReportGenerator|None): writes the reports.
        working_dir (str|None): where the working directories of the
            exercises go.
        output_dir (str|None): where the reports of the exercises go.
        arm_exercises (bool): whether exercises start their ticker
            when created.
        check_connections (bool): whether to refuse connections whose
            remote source is unreachable.

        """
        self.state = state
        self.clock = clock
        self.notifier = notifier if notifier is not None else Notifier()
        self.report_generator = report_generator \
            if report_generator is not None else ReportGenerator()
        self.working_dir = working_dir if working_dir is not None \
            else config.global_.working_dir
        self.output_dir = output_dir if output_dir is not None \
            else config.global_.output_dir
        self.arm_exercises = arm_exercises
        self.check_connections = check_connections

        self.lock = gevent.lock.RLock()
        self._courses: dict[int, Course] = dict()
        self._connections: dict[int, Connection] = dict()
        self._next_course_id = 0
        self._next_connection_id = 0

    # State.

    def restore_state(self):
        """Load the stored connections and courses, and start the
        exercises.

        An exercise that cannot be started is logged and skipped.

        """
        with self.lock:
            self._connections = self.state.restore_connections()
            if self._connections:
                self._next_connection_id = max(self._connections) + 1
            for stored in self.state.restore_courses():
                course = Course(stored.id, stored.name, self)
                for exercise in stored.exercises:
                    try:
                        course.restore_exercise(exercise.id,
                                                exercise.connection_id,
                                                exercise.metadata)
                    except (GritError, ConfigError):
                        logger.error("Couldn't restore exercise %d of "
                                     "course %s.", exercise.id, stored.name,
                                     exc_info=True)
                self._courses[course.id] = course
            if self._courses:
                self._next_course_id = max(self._courses) + 1
        logger.info("Restored %d connections and %d courses.",
                    len(self._connections), len(self._courses))

    def stop_all(self):
        with self.lock:
            for course in self._courses.values():
                course.stop_all_exercises()

    def reboot(self):
        """Stop everything and start again from the stored state."""
        with self.lock:
            self.stop_all()
            self._courses = dict()
            self._connections = dict()
            self._next_course_id = 0
            self._next_connection_id = 0
            self.restore_state()

    # Courses.

    @property
    def courses(self) -> list[Course]:
        with self.lock:
            return [self._courses[i] for i in sorted(self._courses)]

    def get_course(self, course_id: int) -> Course | None:
        with self.lock:
            return self._courses.get(course_id)

    def _course(self, course_id):
        course = self._courses.get(course_id)
        if course is None:
            raise KeyError("No course with id %d." % course_id)
        return course

    def add_course(self, name: str) -> Course:
        with self.lock:
            course = Course(self._next_course_id, name, self)
            self.state.add_course(course.id, name)
            self._courses[course.id] = course
            self._next_course_id += 1
        logger.info("Added course %s with id %d.", name, course.id)
        return course

    def update_course(self, course_id: int, name: str) -> Course:
        with self.lock:
            course = self._course(course_id)
            self.state.update_course(course_id, name)
            course.rename(name)
        return course

    def delete_course(self, course_id: int) -> Course | None:
        """Stop and forget a course, removing all its files."""
        with self.lock:
            course = self._courses.pop(course_id, None)
            if course is not None:
                course.stop_all_exercises()
            self.state.delete_course(course_id)
            for root in (self.working_dir, self.output_dir):
                path = course_directory(root, course_id)
                if os.path.isdir(path):
                    rmtree(path)
        return course

    # Connections.

    @property
    def connections(self) -> list[Connection]:
        with self.lock:
            return [self._connections[i] for i in sorted(self._connections)]

    def get_connection(self, connection_id: int) -> Connection | None:
        with self.lock:
            return self._connections.get(connection_id)

    def _checked(self, connection):
        if self.check_connections and not check_connection(connection):
            raise CouldNotConnect("Connection %s could not be established."
                                  % connection.name)
        return connection

    def add_connection(self, name: str, connection_type: str,
                       location: str, **fields) -> Connection:
        """Create a connection, once it was checked to work.

        fields: the other attributes of Connection.

        raise (CouldNotConnect): if the remote source is unreachable.
        raise (ValueError): if connection_type is unknown.

        """
        with self.lock:
            connection = self._checked(Connection(
                self._next_connection_id, name, connection_type, location,
                **fields))
            self.state.add_connection(connection)
            self._connections[connection.id] = connection
            self._next_connection_id += 1
        logger.info("Added connection %s with id %d.", name, connection.id)
        return connection

    def update_connection(self, connection_id: int, name: str,
                          connection_type: str, location: str,
                          **fields) -> Connection:
        """Replace a connection; the exercises using it see the new
        one from their next fetch on.

        raise (CouldNotConnect): if the remote source is unreachable.
        raise (KeyError): if there is no such connection.

        """
        with self.lock:
            if connection_id not in self._connections:
                raise KeyError("No connection with id %d." % connection_id)
            connection = self._checked(Connection(
                connection_id, name, connection_type, location, **fields))
            self.state.update_connection(connection)
            self._connections[connection_id] = connection
        return connection

    def delete_connection(self, connection_id: int) -> Connection | None:
        """Forget a connection.

        raise (ConnectionUsed): if an exercise uses the connection.

        """
        with self.lock:
            connection = self._connections.get(connection_id)
            for course in self._courses.values():
                for exercise in course.exercises:
                    if exercise.context.connection_id == connection_id:
                        raise ConnectionUsed(
                            "The connection %s is still used by exercise "
                            "%s of %s." % (connection_id, exercise.name,
                                           course.name))
            self._connections.pop(connection_id, None)
            self.state.delete_connection(connection_id)
        return connection

    # Exercises.

    def get_exercise(self, course_id: int, exercise_id: int):
        with self.lock:
            return self._course(course_id).get_exercise(exercise_id)

    def add_exercise(self, course_id: int, connection_id: int,
                     metadata: ExerciseMetadata):
        """Create and start an exercise.

        raise (KeyError): if there is no such course.
        raise (WrongDate): if the schedule is impossible.
        raise (ConfigError): if the language is not supported.

        """
        with self.lock:
            exercise = self._course(course_id).add_exercise(connection_id,
                                                            metadata)
            self.state.add_exercise(course_id, exercise.id, connection_id,
                                    metadata)
        return exercise

    def update_exercise(self, course_id: int, exercise_id: int,
                        connection_id: int, metadata: ExerciseMetadata):
        with self.lock:
            exercise = self._course(course_id).update_exercise(
                exercise_id, connection_id, metadata)
            if exercise is not None:
                self.state.update_exercise(course_id, exercise_id,
                                           connection_id, metadata)
        return exercise

    def delete_exercise(self, course_id: int, exercise_id: int):
        with self.lock:
            exercise = self._course(course_id).delete_exercise(exercise_id)
            self.state.delete_exercise(course_id, exercise_id)
        return exercise
