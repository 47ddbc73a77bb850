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

import logging
import os
import re

from grit.checking.compilechecker import BadFlag, CompileChecker, \
    CompilerOutputFolderExists, OutputCollector
from grit.checking.output import CompilerOutput
from grit.util import find_files


logger = logging.getLogger(__name__)


CARET_LINE = re.compile(r"\s*\^\s*")
NOTE_LINE = re.compile(r"(Note|javac): .*")
SUMMARY_LINE = re.compile(r"\d+ (error|warning)s?")
SOURCE_FILE = r".+\.[Jj][Aa][Vv][Aa]"


def make_classpath(*entries: str | None, lib_dir: str | None = None) -> str:
    """Join classpath entries, adding the jars found in lib_dir."""
    classpath = [e for e in entries if e]
    if lib_dir is not None and os.path.isdir(lib_dir):
        classpath += [os.path.join(lib_dir, name)
                      for name in sorted(os.listdir(lib_dir))
                      if name.endswith(".jar")]
    return ":".join(classpath)


class JavacCompileChecker(CompileChecker):
    """Compile Java code with javac into a fresh output folder, then
    compile the unit tests of the exercise against it.

    """

    def __init__(self, tests_location: str | None,
                 junit_classpath: tuple[str, ...] = (),
                 lib_dir: str | None = None, timeout: float | None = None):
        """Create a checker.

        tests_location: the directory with the unit tests, compiled in
            place; None if the exercise has no tests.
        junit_classpath: the jars of JUnit.
        lib_dir: a directory of jars available to the students.

        """
        super().__init__(timeout)
        self.tests_location = tests_location
        self.junit_classpath = junit_classpath
        self.lib_dir = lib_dir

    def check_program(self, source_location, output_folder, compiler_name,
                      flags):
        """See CompileChecker.check_program."""
        self.validate(source_location, compiler_name)
        if output_folder is None:
            output_folder = source_location
        elif os.path.exists(output_folder) and os.listdir(output_folder):
            raise CompilerOutputFolderExists(
                "Output folder %s is not empty." % output_folder)
        os.makedirs(output_folder, exist_ok=True)

        sources = find_files(source_location, SOURCE_FILE)
        command = [compiler_name] + list(flags) + [
            "-cp", make_classpath(".", *self.junit_classpath,
                                  lib_dir=self.lib_dir),
            "-encoding", "UTF-8",
        ] + sources + ["-d", os.path.abspath(output_folder)]
        output = self.run_compiler(command, source_location)

        if output.compiler_invoked and not output.errors:
            self.compile_tests(compiler_name, output_folder)
        return output

    def compile_tests(self, compiler_name: str, output_folder: str):
        """Compile the unit tests against the compiled submission.

        Failures are only logged: they mean the submission does not
        have the classes the tests use, and the tests will fail.

        """
        if not self.tests_location or not os.path.isdir(self.tests_location):
            return
        tests = find_files(self.tests_location, SOURCE_FILE)
        if not tests:
            return
        command = [compiler_name,
                   "-cp", make_classpath(".", *self.junit_classpath,
                                         os.path.abspath(output_folder),
                                         lib_dir=self.lib_dir),
                   "-encoding", "UTF-8",
                   "-d", os.path.abspath(self.tests_location)] + tests
        output = self.run_compiler(command, self.tests_location)
        if not output.clean:
            logger.warning("Unit tests do not compile against %s: %s",
                           output_folder, "".join(output.errors))

    def split_compiler_output(self, lines: list[str]) -> CompilerOutput:
        """Split javac's diagnostics.

        A caret line closes an error made of the lines before it.
        "Note: ..." and "javac: ..." lines are warnings on their own.

        """
        collector = OutputCollector()
        for line in lines:
            if line.startswith("javac: invalid flag:") \
                    or line.startswith("error: invalid flag:"):
                raise BadFlag("Flag not supported. " + line)
            elif CARET_LINE.fullmatch(line):
                collector.append(line)
                collector.close_note(collector.errors)
            elif NOTE_LINE.fullmatch(line):
                collector.warnings.append(line + "\n")
            elif SUMMARY_LINE.fullmatch(line.strip()):
                continue
            else:
                collector.append(line)
        collector.close_note(collector.errors)
        return collector.build(clean=len(lines) == 0)
