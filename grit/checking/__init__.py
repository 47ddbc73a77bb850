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

"""Checking submissions: plausibility, compilation and unit tests."""

from .output import CheckingResult, CompilerOutput, TestOutput, TestResult
from .compilechecker import BadCompilerSpecified, BadFlag, CheckingError, \
    CompileChecker, CompilerOutputFolderExists
from .plausibility import check_plausibility
from .testing import JavaProjectTester, Tester
from .language import Language


__all__ = [
    # output
    "CheckingResult", "CompilerOutput", "TestOutput", "TestResult",
    # compilechecker
    "BadCompilerSpecified", "BadFlag", "CheckingError", "CompileChecker",
    "CompilerOutputFolderExists",
    # plausibility
    "check_plausibility",
    # testing
    "JavaProjectTester", "Tester",
    # language
    "Language",
]
