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

"""Fetching submissions from the exercise objects of an ILIAS
installation.

The members of the assignment and the files they returned are read
from the ILIAS database; the files are then copied from the ILIAS
server with scp into <fetch>/<email>/<exercise>/.

"""

import logging
import os
import re

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError

from grit import config
from grit.errors import GritError
from grit.preprocess.connection import ConnectionType
from grit.preprocess.fetch import Fetcher, SubmissionFetchingException
from grit.preprocess.submission import PreprocessingResult, Student, \
    Submission
from grit.preprocess.tokenize import SubmissionStructure, Tokenizer, \
    TOPLEVEL, SUBMISSION
from gritcommon.commands import pretty_print_cmdline, run_command


__all__ = ["IliasFetcher", "SUBMISSIONS_QUERY"]


logger = logging.getLogger(__name__)


DEFAULT_DIALECT = "mysql+pymysql"

SUBMISSIONS_QUERY = text("""\
SELECT EXC.title AS exc_title, E.title, U.email, U.firstname, U.lastname,
       ER.ts, ER.filename
FROM (((exc_assignment E JOIN exc_mem_ass_status ES ON E.id = ES.ass_id)
      JOIN usr_data U ON ES.usr_id = U.usr_id)
      LEFT JOIN exc_returned ER ON ER.user_id = U.usr_id AND ER.ass_id = E.id)
     JOIN (SELECT OD.type, OD.title, OD.obj_id FROM object_data OD) EXC
     ON E.exc_id = EXC.obj_id
WHERE EXC.title = :course AND E.title = :exercise
""")


class IliasFetcher(Fetcher):
    """Fetch submissions through the database and the file system of an
    ILIAS server.

    """

    @property
    def connection_type(self):
        """See Fetcher.connection_type."""
        return ConnectionType.ILIAS

    @staticmethod
    def database_url(connection) -> URL:
        return URL.create(
            connection.protocol or DEFAULT_DIALECT,
            username=connection.username or None,
            password=connection.password or None,
            host=connection.location,
            database=config.fetching.ilias_database)

    def query_members(self, connection, course_name: str,
                      exercise_name: str) -> list[dict]:
        """Return the members of the assignment with their returned files.

        raise (SubmissionFetchingException): if the database cannot be
            queried.

        """
        engine = create_engine(self.database_url(connection))
        try:
            with engine.connect() as conn:
                rows = conn.execute(SUBMISSIONS_QUERY, {
                    "course": course_name, "exercise": exercise_name,
                }).mappings().all()
        except SQLAlchemyError as error:
            raise SubmissionFetchingException(
                "Error while fetching from ILIAS database: %s" % error) \
                from error
        finally:
            engine.dispose()
        return [dict(row) for row in rows]

    def fetch(self, connection, window, target_dir, context):
        """See Fetcher.fetch."""
        start, deadline = window
        rows = self.query_members(connection, context.course_name,
                                  context.exercise_name)

        # The newest file each member returned in time.
        students: dict[str, Student] = {}
        returned: dict[str, dict] = {}
        for row in rows:
            address = row["email"]
            students.setdefault(address, Student(
                address, ("%s %s" % (row["firstname"] or "",
                                     row["lastname"] or "")).strip()))
            if not row["filename"] or row["ts"] is None:
                continue
            if not start <= row["ts"] <= deadline:
                logger.info("Ignoring file of %s returned at %s.",
                            address, row["ts"])
                continue
            if address not in returned or row["ts"] > returned[address]["ts"]:
                returned[address] = row

        os.makedirs(target_dir, exist_ok=True)
        if returned:
            self.download(connection, [row["filename"]
                                       for row in returned.values()],
                          target_dir)
            for address, row in returned.items():
                self.move_to_student_dir(target_dir, address,
                                         context.exercise_name,
                                         row["filename"])

        result = self.collect_submissions(target_dir, context, students)
        for address, student in students.items():
            if student not in result.submissions_by_student:
                result.students_without_submission.append(student)
        return result

    @staticmethod
    def download(connection, remote_files: list[str], target_dir: str):
        """Copy the files from the ILIAS server into target_dir.

        raise (SubmissionFetchingException): if scp fails.

        """
        command = ["scp", "-v", "-C", "-B", "-o", "IdentitiesOnly=yes",
                   "-i", os.path.abspath(connection.ssh_key_file)]
        command += ["%s@%s:%s" % (connection.ssh_username,
                                  connection.location, remote)
                    for remote in remote_files]
        command.append(os.path.abspath(target_dir))
        result = run_command(command, cwd=target_dir,
                             timeout=config.fetching.scp_timeout_s)
        for line in result.stderr.splitlines():
            logger.debug("scp: %s", line)
        if not result.success:
            raise SubmissionFetchingException(
                "Cannot copy files with %s (error %s)."
                % (pretty_print_cmdline(command[:2]), result.returncode))

    @staticmethod
    def move_to_student_dir(target_dir: str, address: str,
                            exercise_name: str, remote_file: str):
        filename = os.path.basename(remote_file)
        student_dir = os.path.join(target_dir, address, exercise_name)
        os.makedirs(student_dir, exist_ok=True)
        downloaded = os.path.join(target_dir, filename)
        if not os.path.isfile(downloaded):
            logger.error("%s was not downloaded.", filename)
            return
        # Only the newest file is kept.
        for name in os.listdir(student_dir):
            path = os.path.join(student_dir, name)
            if os.path.isfile(path):
                os.remove(path)
        os.replace(downloaded, os.path.join(student_dir, filename))

    @staticmethod
    def collect_submissions(target_dir: str, context,
                            students: dict[str, Student]) \
            -> PreprocessingResult:
        result = PreprocessingResult()
        structure = SubmissionStructure(
            [TOPLEVEL, ".*@.*", re.escape(context.exercise_name),
             SUBMISSION])
        tokenizer = Tokenizer(context.file_regex, context.archive_regex)
        try:
            locations = tokenizer.explore_submission_directory(structure,
                                                               target_dir)
        except GritError as error:
            raise SubmissionFetchingException(
                "Cannot explore the ILIAS submissions: %s" % error) \
                from error
        for location in locations:
            address = os.path.relpath(location, target_dir).split(os.sep)[0]
            student = students.get(address)
            if student is None:
                # A member who left the assignment.
                continue
            result.submissions_by_student[student] = \
                Submission.from_location(student, location)
        return result

    def check_connection(self, connection):
        """See Fetcher.check_connection."""
        engine = create_engine(self.database_url(connection))
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as error:
            logger.warning("Cannot connect to the ILIAS database on %s: %s",
                           connection.location, error)
            return False
        finally:
            engine.dispose()
        return True
