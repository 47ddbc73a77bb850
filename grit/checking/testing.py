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

"""Running the unit tests of an exercise against compiled submissions."""

import logging
import os
import re
from abc import ABCMeta, abstractmethod

from grit import config
from grit.checking.compilers.javac import SOURCE_FILE, make_classpath
from grit.checking.output import TestOutput, TestResult
from grit.util import find_files
from gritcommon.commands import run_command


__all__ = ["Tester", "JavaProjectTester"]


logger = logging.getLogger(__name__)


JUNIT_RUNNER = "org.junit.runner.JUnitCore"
PACKAGE_LINE = re.compile(r"\s*package\s+([^,;\s]+)\s*;.*")
OK_LINE = re.compile(r"OK \((\d+) tests?\)")
FAILURES_LINE = re.compile(r"Tests run: (\d+),\s+Failures: (\d+)")
FAILURE_HEADER = re.compile(r"\d+\) (.*)")


class Tester(metaclass=ABCMeta):
    """Run unit tests against a compiled submission."""

    @abstractmethod
    def test_submission(self, binary_path: str) -> TestOutput:
        """Run the tests.

        binary_path: the directory with the compiled submission.

        return: the results; did_test is False if there was nothing to
            run.

        """
        pass


def qualified_name(test_file: str) -> str:
    """Return the fully qualified class name declared in a Java file."""
    class_name = os.path.splitext(os.path.basename(test_file))[0]
    with open(test_file, encoding="utf-8", errors="replace") as f:
        for line in f:
            match = PACKAGE_LINE.fullmatch(line.rstrip("\n"))
            if match is not None:
                return match.group(1) + "." + class_name
    return class_name


def parse_junit_output(name: str, output: str) -> TestResult:
    """Read what JUnitCore printed when running one test class.

    name: the qualified name of the test class.
    output: the standard output of the run.

    """
    lines = output.splitlines()
    for line in lines:
        match = OK_LINE.fullmatch(line.strip())
        if match is not None:
            return TestResult(name, int(match.group(1)))

    run_count = None
    for line in lines:
        match = FAILURES_LINE.fullmatch(line.strip())
        if match is not None:
            run_count = int(match.group(1))
    if run_count is None:
        return TestResult(name, 0, ("%s could not be run.\n" % name,))

    # Every failure is a header line like "1) testAdd(TestFraction)"
    # followed by the message of the exception.
    failures = []
    for index, line in enumerate(lines):
        match = FAILURE_HEADER.fullmatch(line)
        if match is not None:
            message = lines[index + 1] if index + 1 < len(lines) else ""
            failures.append("%s: %s\n" % (match.group(1), message.strip()))
    return TestResult(name, run_count, tuple(failures))


class JavaProjectTester(Tester):
    """Run every JUnit test class in the tests directory of the exercise."""

    def __init__(self, tests_location: str | None,
                 junit_classpath: tuple[str, ...] = (),
                 lib_dir: str | None = None, timeout: float | None = None):
        if timeout is None:
            timeout = config.checking.test_timeout_s
        self.tests_location = tests_location
        self.junit_classpath = junit_classpath
        self.lib_dir = lib_dir
        self.timeout = timeout

    def test_submission(self, binary_path):
        """See Tester.test_submission."""
        if not self.tests_location:
            return TestOutput(did_test=False)
        test_files = find_files(self.tests_location, SOURCE_FILE)
        if not test_files:
            return TestOutput(did_test=False)

        classpath = make_classpath(os.path.abspath(self.tests_location),
                                   os.path.abspath(binary_path),
                                   *self.junit_classpath,
                                   lib_dir=self.lib_dir)
        results = []
        for test_file in test_files:
            name = qualified_name(test_file)
            result = run_command(["java", "-cp", classpath, JUNIT_RUNNER,
                                  name],
                                 cwd=binary_path, timeout=self.timeout)
            if not result.spawned:
                logger.error("Couldn't launch java. Check whether it's in "
                             "the system's PATH.")
                results.append(TestResult(name, 0, (
                    "%s could not be run.\n" % name,)))
            elif result.timed_out:
                results.append(TestResult(name, 0, (
                    "%s timed out after %s seconds.\n"
                    % (name, self.timeout),)))
            else:
                results.append(parse_junit_output(name, result.stdout))
        return TestOutput(tuple(results), did_test=True)
