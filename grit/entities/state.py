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

"""Storing courses, connections and exercises in the database, so
that the grader resumes where it was after a restart.

"""

import logging
import typing

from grit.db import SessionGen, Course, Connection, Exercise
from grit.entities.context import ExerciseMetadata
from grit.preprocess import connection as connection_


__all__ = ["StateStore", "StoredCourse", "StoredExercise"]


logger = logging.getLogger(__name__)


class StoredExercise(typing.NamedTuple):
    id: int
    connection_id: int
    metadata: ExerciseMetadata


class StoredCourse(typing.NamedTuple):
    id: int
    name: str
    exercises: list[StoredExercise]


class StateStore:
    """Read and write the state of the grader.

    session_factory (sessionmaker|None): the database to use, by
        default the configured one.

    """

    def __init__(self, session_factory=None):
        self.session_factory = session_factory

    def _session(self):
        return SessionGen(self.session_factory)

    # Courses.

    def add_course(self, course_id: int, name: str):
        with self._session() as session:
            session.add(Course(id=course_id, name=name))
            session.commit()

    def update_course(self, course_id: int, name: str):
        with self._session() as session:
            course = session.get(Course, course_id)
            if course is None:
                raise KeyError("Course %d is not stored." % course_id)
            course.name = name
            session.commit()

    def delete_course(self, course_id: int):
        """Delete a course and its exercises."""
        with self._session() as session:
            course = session.get(Course, course_id)
            if course is not None:
                session.delete(course)
                session.commit()

    # Connections.

    @staticmethod
    def _set_connection_fields(db_connection, connection):
        db_connection.name = connection.name
        db_connection.connection_type = connection.connection_type
        db_connection.location = connection.location
        db_connection.protocol = connection.protocol
        db_connection.username = connection.username
        db_connection.password = connection.password
        db_connection.ssh_username = connection.ssh_username
        db_connection.ssh_key_file = connection.ssh_key_file
        db_connection.structure = list(connection.structure)
        db_connection.allowed_domain = connection.allowed_domain

    def add_connection(self, connection: connection_.Connection):
        with self._session() as session:
            db_connection = Connection(id=connection.id)
            self._set_connection_fields(db_connection, connection)
            session.add(db_connection)
            session.commit()

    def update_connection(self, connection: connection_.Connection):
        with self._session() as session:
            db_connection = session.get(Connection, connection.id)
            if db_connection is None:
                raise KeyError("Connection %d is not stored."
                               % connection.id)
            self._set_connection_fields(db_connection, connection)
            session.commit()

    def delete_connection(self, connection_id: int):
        with self._session() as session:
            db_connection = session.get(Connection, connection_id)
            if db_connection is not None:
                session.delete(db_connection)
                session.commit()

    # Exercises.

    @staticmethod
    def _set_exercise_fields(db_exercise, connection_id, metadata):
        db_exercise.name = metadata.name
        db_exercise.language = metadata.language
        db_exercise.start = metadata.start
        db_exercise.deadline = metadata.deadline
        db_exercise.period = metadata.period
        db_exercise.connection_id = connection_id
        db_exercise.compiler_flags = list(metadata.compiler_flags)

    def add_exercise(self, course_id: int, exercise_id: int,
                     connection_id: int, metadata: ExerciseMetadata):
        with self._session() as session:
            db_exercise = Exercise(course_id=course_id, id=exercise_id)
            self._set_exercise_fields(db_exercise, connection_id, metadata)
            session.add(db_exercise)
            session.commit()

    def update_exercise(self, course_id: int, exercise_id: int,
                        connection_id: int, metadata: ExerciseMetadata):
        with self._session() as session:
            db_exercise = session.get(Exercise, (course_id, exercise_id))
            if db_exercise is None:
                raise KeyError("Exercise %d of course %d is not stored."
                               % (exercise_id, course_id))
            self._set_exercise_fields(db_exercise, connection_id, metadata)
            session.commit()

    def delete_exercise(self, course_id: int, exercise_id: int):
        with self._session() as session:
            db_exercise = session.get(Exercise, (course_id, exercise_id))
            if db_exercise is not None:
                session.delete(db_exercise)
                session.commit()

    # Restoring.

    def restore_connections(self) -> dict[int, connection_.Connection]:
        """Return the stored connections, by id.

        raise (ValueError): if a stored connection is invalid.

        """
        connections = dict()
        with self._session() as session:
            for db_connection in session.query(Connection) \
                    .order_by(Connection.id):
                connections[db_connection.id] = connection_.Connection(
                    id=db_connection.id,
                    name=db_connection.name,
                    connection_type=db_connection.connection_type,
                    location=db_connection.location,
                    protocol=db_connection.protocol,
                    username=db_connection.username,
                    password=db_connection.password,
                    ssh_username=db_connection.ssh_username,
                    ssh_key_file=db_connection.ssh_key_file,
                    structure=tuple(db_connection.structure),
                    allowed_domain=db_connection.allowed_domain)
        return connections

    def restore_courses(self) -> list[StoredCourse]:
        """Return the stored courses with their exercises, by id."""
        courses = []
        with self._session() as session:
            for db_course in session.query(Course).order_by(Course.id):
                exercises = [
                    StoredExercise(
                        db_exercise.id, db_exercise.connection_id,
                        ExerciseMetadata(
                            db_exercise.name, db_exercise.language,
                            db_exercise.start, db_exercise.deadline,
                            db_exercise.period,
                            list(db_exercise.compiler_flags)))
                    for db_exercise in sorted(db_course.exercises,
                                              key=lambda e: e.id)]
                courses.append(StoredCourse(db_course.id, db_course.name,
                                            exercises))
        return courses
