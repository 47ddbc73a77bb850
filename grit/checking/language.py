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

"""Interfaces for the programming languages exercises can use."""

import logging
from abc import ABCMeta, abstractmethod

from grit.checking.compilechecker import CompileChecker
from grit.checking.testing import Tester


__all__ = ["Language"]


logger = logging.getLogger(__name__)


class Language(metaclass=ABCMeta):
    """A programming language and the toolchain used to check it."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Returns the name of the language, as stored with exercises,
        for example "JAVA".

        """
        pass

    @property
    def source_extensions(self) -> list[str]:
        """Extensions used for sources for this language (including
        the dot), as shown to students.

        """
        return []

    @property
    @abstractmethod
    def file_regex(self) -> str:
        """Regular expression fully matching the names of source files."""
        pass

    @property
    def archive_regex(self) -> str:
        """Regular expression fully matching the names of the archives
        students may submit instead of plain sources.

        """
        return r".+\.[Zz][Ii][Pp]"

    @property
    @abstractmethod
    def compiler_name(self) -> str:
        """The executable used by default to compile sources."""
        pass

    @property
    def missing_files_message(self) -> str:
        """The sentence telling a student that the submission has no
        source files.

        """
        return "There are no %s files." % " or ".join(self.source_extensions)

    @abstractmethod
    def get_compile_checker(self, tests_location: str) -> CompileChecker:
        """Return the compile checker of an exercise.

        tests_location: the directory with the exercise's unit tests.

        """
        pass

    def get_tester(self, tests_location: str) -> Tester | None:
        """Return the tester of an exercise, or None if the language has
        no unit testing support.

        tests_location: the directory with the exercise's unit tests.

        """
        return None
