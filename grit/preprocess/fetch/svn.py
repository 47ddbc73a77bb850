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

"""Fetching submissions from a Subversion repository.

The repository holds a "students.txt" file at its root mapping the
directories of the students to their email addresses, one
"directory = email" line per student; empty lines and lines starting
with "#" are ignored. The submissions are laid out as the structure of
the connection says.

"""

import logging
import os

from grit import config, rmtree
from grit.errors import GritError
from grit.preprocess.connection import ConnectionType
from grit.preprocess.fetch import Fetcher, SubmissionFetchingException
from grit.preprocess.submission import PreprocessingResult, Student, \
    Submission
from grit.preprocess.tokenize import SubmissionStructure, Tokenizer
from gritcommon.commands import run_command


__all__ = ["SvnFetcher", "read_student_mapping"]


logger = logging.getLogger(__name__)


MAPPING_FILE = "students.txt"
CHECKOUT_DIR = "repository"


def read_student_mapping(path: str) -> dict[str, Student]:
    """Read the file mapping student directories to students.

    path: the path of the mapping file.

    return: the students, by directory.

    raise (FileNotFoundError): if there is no mapping file.

    """
    mapping = {}
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            parts = [part.strip() for part in line.split("=", 1)]
            if len(parts) < 2 or not parts[0] or not parts[1]:
                logger.warning("Malformed line in %s: %r.", path, line)
                continue
            directory, email = parts
            mapping[directory] = Student(email, email.split("@")[0])
    return mapping


def svn_date(when) -> str:
    """Format a naive UTC datetime as a Subversion revision date."""
    return "{%s}" % when.strftime("%Y-%m-%dT%H:%M:%SZ")


class SvnFetcher(Fetcher):
    """Fetch submissions by checking out (then updating) a repository,
    at the revision current at the deadline.

    """

    @property
    def connection_type(self):
        """See Fetcher.connection_type."""
        return ConnectionType.SVN

    @staticmethod
    def svn_command(connection, *args: str) -> list[str]:
        command = ["svn"] + list(args) + ["--non-interactive",
                                          "--no-auth-cache"]
        if connection.username:
            command += ["--username", connection.username]
        if connection.password:
            command += ["--password", connection.password]
        return command

    def fetch(self, connection, window, target_dir, context):
        """See Fetcher.fetch."""
        _, deadline = window
        checkout_dir = os.path.join(target_dir, CHECKOUT_DIR)
        self.update_working_copy(connection, checkout_dir, svn_date(deadline))

        try:
            mapping = read_student_mapping(
                os.path.join(checkout_dir, MAPPING_FILE))
        except FileNotFoundError as error:
            raise SubmissionFetchingException(
                "The repository has no %s." % MAPPING_FILE) from error

        try:
            structure = SubmissionStructure(connection.structure)
            tokenizer = Tokenizer(context.file_regex, context.archive_regex)
            locations = tokenizer.explore_submission_directory(
                structure, checkout_dir)
        except GritError as error:
            raise SubmissionFetchingException(
                "Cannot explore the repository: %s" % error) from error

        result = PreprocessingResult()
        for location in locations:
            student = self.find_student(mapping, checkout_dir, location)
            if student is None:
                logger.warning("No student maps to %s.", location)
                continue
            result.submissions_by_student[student] = \
                Submission.from_location(student, location)

        for student in mapping.values():
            if student not in result.submissions_by_student \
                    and student not in result.students_without_submission:
                result.students_without_submission.append(student)
        return result

    @staticmethod
    def find_student(mapping: dict[str, Student], root: str,
                     location: str) -> Student | None:
        """Return the student whose directory contains location."""
        for part in os.path.relpath(location, root).split(os.sep):
            if part in mapping:
                return mapping[part]
        return None

    def update_working_copy(self, connection, checkout_dir: str,
                            revision: str):
        """Check out the repository into checkout_dir, or update it if
        it is already there.

        raise (SubmissionFetchingException): if svn fails.

        """
        if os.path.isdir(os.path.join(checkout_dir, ".svn")):
            logger.info("Trying to update local svn repository.")
            command = self.svn_command(connection, "update", "--force",
                                       "-r", revision)
            cwd = checkout_dir
        else:
            if os.path.isdir(checkout_dir):
                rmtree(checkout_dir)
            parent = os.path.dirname(checkout_dir)
            os.makedirs(parent, exist_ok=True)
            logger.info("Checking out %s.", connection.location)
            command = self.svn_command(connection, "checkout", "--force",
                                       "-r", revision, connection.location,
                                       checkout_dir)
            cwd = parent

        result = run_command(command, cwd=cwd,
                             timeout=config.fetching.svn_timeout_s,
                             merge_stderr=True)
        if not result.success:
            raise SubmissionFetchingException(
                "svn failed: %s" % (result.stdout or result.stderr))

    def check_connection(self, connection):
        """See Fetcher.check_connection."""
        result = run_command(
            self.svn_command(connection, "ls", connection.location,
                             "--depth", "immediates"),
            timeout=config.fetching.svn_timeout_s, merge_stderr=True)
        if not result.success:
            logger.warning("Cannot reach %s: %s", connection.location,
                           result.stdout.strip())
        return result.success
