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

"""A course: a numbered collection of exercises."""

import logging
import re

from grit.entities.context import ExerciseMetadata, make_exercise_context
from grit.entities.exercise import Exercise


__all__ = ["Course"]


logger = logging.getLogger(__name__)


class Course:

    def __init__(self, course_id: int, name: str, controller,
                 next_exercise_id: int = 0):
        """Init.

        course_id: the id of the course.
        name: the name of the course.
        controller (Controller): what the exercises of the course run in.
        next_exercise_id: the id the next exercise will get.

        """
        self.id = course_id
        self.name = name
        self.controller = controller
        self._exercises: dict[int, Exercise] = dict()
        self._next_exercise_id = next_exercise_id

    def __repr__(self):
        return "<Course %d %r>" % (self.id, self.name)

    @property
    def stripped_name(self) -> str:
        return re.sub(r"\W+", "", self.name)

    @property
    def exercises(self) -> list[Exercise]:
        return [self._exercises[i] for i in sorted(self._exercises)]

    def get_exercise(self, exercise_id: int) -> Exercise | None:
        return self._exercises.get(exercise_id)

    def _make_exercise(self, exercise_id, connection_id, metadata):
        context = make_exercise_context(
            self.id, self.name, exercise_id, connection_id, metadata,
            working_dir=self.controller.working_dir,
            output_dir=self.controller.output_dir)
        return Exercise(exercise_id, context, self.controller,
                        arm=self.controller.arm_exercises)

    def add_exercise(self, connection_id: int,
                     metadata: ExerciseMetadata) -> Exercise:
        """Create and start a new exercise.

        raise (WrongDate): if the schedule is impossible.
        raise (ConfigError): if the language is not supported.

        """
        exercise = self._make_exercise(self._next_exercise_id,
                                       connection_id, metadata)
        self._exercises[exercise.id] = exercise
        self._next_exercise_id += 1
        logger.info("Added exercise %d (%s) to course %s.",
                    exercise.id, metadata.name, self.name)
        return exercise

    def restore_exercise(self, exercise_id: int, connection_id: int,
                         metadata: ExerciseMetadata) -> Exercise:
        """Start again an exercise created before, keeping its id."""
        exercise = self._make_exercise(exercise_id, connection_id, metadata)
        self._exercises[exercise_id] = exercise
        self._next_exercise_id = max(self._next_exercise_id,
                                     exercise_id + 1)
        return exercise

    def update_exercise(self, exercise_id: int, connection_id: int,
                        metadata: ExerciseMetadata) -> Exercise | None:
        """Replace an exercise with one made from new metadata.

        return: the new exercise, or None if there is no exercise with
            that id.

        raise (WrongDate): if the schedule is impossible; the old
            exercise is kept running then.
        raise (ConfigError): if the language is not supported.

        """
        old = self.get_exercise(exercise_id)
        if old is None:
            return None
        context = make_exercise_context(
            self.id, self.name, exercise_id, connection_id, metadata,
            working_dir=self.controller.working_dir,
            output_dir=self.controller.output_dir)
        old.terminate()
        exercise = Exercise(exercise_id, context, self.controller,
                            arm=self.controller.arm_exercises)
        self._exercises[exercise_id] = exercise
        return exercise

    def delete_exercise(self, exercise_id: int) -> Exercise | None:
        exercise = self._exercises.pop(exercise_id, None)
        if exercise is not None:
            exercise.terminate()
        return exercise

    def rename(self, name: str):
        """Change the name of the course and restart its exercises, so
        that they use the new name.

        """
        self.name = name
        for exercise in self.exercises:
            self.update_exercise(exercise.id, exercise.context.connection_id,
                                 exercise.context.metadata())

    def stop_all_exercises(self):
        for exercise in self._exercises.values():
            exercise.terminate()
