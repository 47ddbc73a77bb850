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

"""Everything an exercise needs to know to process its submissions,
computed once when the exercise is created.

"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from grit import config
from grit.checking.compilechecker import CompileChecker
from grit.checking.language import Language
from grit.checking.languagemanager import get_language
from grit.checking.testing import Tester
from grit.errors import GritError
from gritcommon.conf_parser import ConfigError
from gritcommon.datetime import format_local_datetime


__all__ = ["ExerciseContext", "ExerciseMetadata", "WrongDate",
           "make_exercise_context"]


logger = logging.getLogger(__name__)


class WrongDate(GritError):
    """The schedule of an exercise is impossible."""

    pass


@dataclass
class ExerciseMetadata:
    """What admins choose about an exercise."""
    name: str
    language: str
    start: datetime
    deadline: datetime
    period: timedelta
    compiler_flags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ExerciseContext:
    course_id: int
    course_name: str
    exercise_id: int
    exercise_name: str
    language: Language
    compile_checker: CompileChecker
    compiler_name: str
    compiler_flags: tuple[str, ...]
    tester: Tester | None
    start: datetime
    deadline: datetime
    period: timedelta
    connection_id: int
    file_regex: str
    archive_regex: str
    fetch_path: str
    bin_path: str
    tests_path: str
    temp_pdf_path: str
    output_path: str

    @property
    def window(self) -> tuple[datetime, datetime]:
        return self.start, self.deadline

    @property
    def deadline_string(self) -> str:
        return format_local_datetime(self.deadline)

    @property
    def working_paths(self) -> tuple[str, ...]:
        return (self.fetch_path, self.bin_path, self.tests_path,
                self.temp_pdf_path, self.output_path)

    def metadata(self) -> ExerciseMetadata:
        """Return the metadata the context was made from."""
        return ExerciseMetadata(self.exercise_name, self.language.name,
                                self.start, self.deadline, self.period,
                                list(self.compiler_flags))


def course_directory(root: str, course_id: int) -> str:
    return os.path.join(root, "course-%d" % course_id)


def exercise_directory(root: str, course_id: int, exercise_id: int) -> str:
    return os.path.join(course_directory(root, course_id),
                        "exercise-%d" % exercise_id)


def make_exercise_context(course_id: int, course_name: str,
                          exercise_id: int, connection_id: int,
                          metadata: ExerciseMetadata,
                          working_dir: str | None = None,
                          output_dir: str | None = None) -> ExerciseContext:
    """Build the context of an exercise.

    course_id, course_name: the course of the exercise.
    exercise_id: the id of the exercise in the course.
    connection_id: the connection submissions are fetched from.
    metadata: what admins chose about the exercise.
    working_dir: where the directories of the exercise go, by default
        the configured working directory.
    output_dir: where the reports of the exercise go, by default the
        configured output directory.

    raise (WrongDate): if the deadline is not after the start or the
        period is not positive.
    raise (ConfigError): if the language is not supported.

    """
    if metadata.deadline <= metadata.start:
        raise WrongDate("Can't set the deadline (%s) before the start (%s)."
                        % (metadata.deadline, metadata.start))
    if metadata.period <= timedelta():
        raise WrongDate("The period must be positive, got %s."
                        % metadata.period)
    try:
        language = get_language(metadata.language)
    except KeyError as error:
        raise ConfigError(str(error)) from error

    if working_dir is None:
        working_dir = config.global_.working_dir
    if output_dir is None:
        output_dir = config.global_.output_dir
    base_path = exercise_directory(working_dir, course_id, exercise_id)
    tests_path = os.path.join(base_path, "tests")

    return ExerciseContext(
        course_id=course_id,
        course_name=course_name,
        exercise_id=exercise_id,
        exercise_name=metadata.name,
        language=language,
        compile_checker=language.get_compile_checker(tests_path),
        compiler_name=language.compiler_name,
        compiler_flags=tuple(metadata.compiler_flags),
        tester=language.get_tester(tests_path),
        start=metadata.start,
        deadline=metadata.deadline,
        period=metadata.period,
        connection_id=connection_id,
        file_regex=language.file_regex,
        archive_regex=language.archive_regex,
        fetch_path=os.path.join(base_path, "fetch"),
        bin_path=os.path.join(base_path, "bin"),
        tests_path=tests_path,
        temp_pdf_path=os.path.join(base_path, "tempPdf"),
        output_path=exercise_directory(output_dir, course_id, exercise_id))
