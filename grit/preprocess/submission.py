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

"""Students, their submissions and what a fetch found."""

import logging
from dataclasses import dataclass, field

from grit.checking.output import CheckingResult
from gritcommon.digest import tree_digest


__all__ = ["Student", "Submission", "PreprocessingResult"]


logger = logging.getLogger(__name__)


class Student:
    """A student, identified by the email address.

    The name is only informative and may be filled in later, when the
    mapping from the remote source to the students is resolved.

    """

    def __init__(self, email: str, name: str = ""):
        self.email = email
        self.name = name

    def __eq__(self, other):
        if not isinstance(other, Student):
            return NotImplemented
        return self.email == other.email

    def __hash__(self):
        return hash(self.email)

    def __repr__(self):
        return "Student(%r, %r)" % (self.email, self.name)

    @property
    def display_name(self) -> str:
        return self.name if self.name else self.email


class Submission:
    """The source tree a student submitted for an exercise.

    Two submissions are equal when their content is, so a submission
    fetched again without changes is recognized and not checked twice.

    """

    def __init__(self, student: Student, location: str, sha1: str):
        """Init.

        student: who submitted.
        location: the directory with the submitted files.
        sha1: digest of the content of location.

        """
        self.student = student
        self.location = location
        self.sha1 = sha1
        self.plausible = False
        self.checking_result: CheckingResult | None = None

    @classmethod
    def from_location(cls, student: Student, location: str) -> "Submission":
        """Create the submission of student found at location, computing
        the digest of its content.

        """
        return cls(student, location, tree_digest(location))

    def __eq__(self, other):
        if not isinstance(other, Submission):
            return NotImplemented
        return self.sha1 == other.sha1

    def __hash__(self):
        return hash(self.sha1)

    def __repr__(self):
        return "Submission(%r, %r, %s)" % (self.student, self.location,
                                           self.sha1[:8])


@dataclass
class PreprocessingResult:
    """What a fetcher found for an exercise.

    submissions_by_student: the newest submission of each student.
    students_without_submission: the students known to take part in
        the exercise who did not submit anything.
    invalid_subject_senders: the addresses of people who mailed during
        the exercise with a wrong subject (mail fetcher only).

    """
    submissions_by_student: dict[Student, Submission] = \
        field(default_factory=dict)
    students_without_submission: list[Student] = field(default_factory=list)
    invalid_subject_senders: list[str] = field(default_factory=list)
