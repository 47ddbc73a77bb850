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

"""Fetchers: bringing the submissions of an exercise from a remote
source into its fetch directory.

"""

import logging
import re
from abc import ABCMeta, abstractmethod
from datetime import datetime
import typing

from grit.preprocess.connection import Connection
from grit.preprocess.submission import PreprocessingResult

if typing.TYPE_CHECKING:
    from grit.entities.context import ExerciseContext


__all__ = ["Fetcher", "SubmissionFetchingException", "underscore"]


logger = logging.getLogger(__name__)


class SubmissionFetchingException(Exception):
    """The submissions could not be fetched; trying again later may
    work.

    """

    pass


def underscore(name: str) -> str:
    """Replace whitespace in name with "_", to use it as a file name."""
    return re.sub(r"\s", "_", name)


class Fetcher(metaclass=ABCMeta):
    """Fetch the submissions of exercises from one kind of connection."""

    @property
    @abstractmethod
    def connection_type(self) -> str:
        """The ConnectionType this fetcher handles."""
        pass

    @abstractmethod
    def fetch(self, connection: Connection,
              window: tuple[datetime, datetime], target_dir: str,
              context: "ExerciseContext") -> PreprocessingResult:
        """Fetch the submissions made in window.

        connection: where to fetch from.
        window: the start and the deadline of the exercise; submissions
            made after the deadline are not fetched.
        target_dir: the directory to put the fetched files in; it is
            kept between calls.
        context: the exercise fetched for.

        return: the newest submission of each student.

        raise (SubmissionFetchingException): if the remote source
            could not be read.

        """
        pass

    def check_connection(self, connection: Connection) -> bool:
        """Tell whether the remote source of connection can be reached."""
        return True
