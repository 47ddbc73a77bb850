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
    OutputCollector
from grit.checking.output import CompilerOutput
from grit.util import rmtree


logger = logging.getLogger(__name__)


# A caret pointing at the column, possibly underlined and behind the
# "|" gutter of recent gcc versions.
CARET_LINE = re.compile(r"\s*(\|\s*)?\^[~^]*\s*")
# <file>.<ext>:<line>:<column>: <message>.
LOCATION_LINE = re.compile(r".*\..\d+.\d+..*\.")
MAKEFILE = re.compile(r"[Mm][Aa][Kk][Ee][Ff][Ii][Ll][Ee]")
SOURCE_FILE = re.compile(r".+\.[Cc]([Pp][Pp])?")
ARTIFACT = re.compile(r".+\.([Oo]|[Ee][Xx][Ee])")


class GccCompileChecker(CompileChecker):
    """Compile C and C++ code with gcc or g++, or with make when the
    submission has a makefile.

    """

    def check_program(self, source_location, output_folder, compiler_name,
                      flags):
        """See CompileChecker.check_program."""
        self.validate(source_location, compiler_name)
        command = self.build_command(source_location, compiler_name, flags)
        existing = self.list_tree(source_location)
        try:
            return self.run_compiler(command, source_location)
        finally:
            self.remove_artifacts(source_location, existing)

    def build_command(self, source_location: str, compiler_name: str,
                      flags: list[str]) -> list[str]:
        """Return the invocation compiling the sources in source_location.

        Source files are given relative to source_location, which is
        where the compiler runs.

        """
        names = os.listdir(source_location)
        if any(MAKEFILE.fullmatch(name) for name in names
               if os.path.isfile(os.path.join(source_location, name))):
            logger.info("Found make-file. Compiling c-code with make.")
            return ["make", "-k", "-s"]

        command = [compiler_name] + list(flags)
        # Only check that the code compiles, without linking.
        if "-c" not in command:
            command.append("-c")
        sources = []
        for dirpath, _, filenames in os.walk(source_location):
            for filename in filenames:
                if SOURCE_FILE.fullmatch(filename):
                    sources.append(os.path.relpath(
                        os.path.join(dirpath, filename), source_location))
        return command + sorted(sources)

    @staticmethod
    def list_tree(root: str) -> set[str]:
        """Return the paths of every file and directory below root."""
        paths = set()
        for dirpath, dirnames, filenames in os.walk(root):
            for name in dirnames + filenames:
                paths.add(os.path.join(dirpath, name))
        return paths

    @staticmethod
    def remove_artifacts(source_location: str, existing: set[str]):
        """Delete what the build added to source_location.

        Everything not in existing goes (make may write executables and
        objects anywhere in the tree), and so do the top-level .o and
        .exe files.

        existing: the paths below source_location before the build, as
            returned by list_tree.

        """
        for dirpath, dirnames, filenames in os.walk(source_location):
            for name in list(dirnames):
                path = os.path.join(dirpath, name)
                if path in existing:
                    continue
                dirnames.remove(name)
                if os.path.islink(path):
                    os.remove(path)
                else:
                    rmtree(path)
            for name in filenames:
                path = os.path.join(dirpath, name)
                if path not in existing or (
                        dirpath == source_location
                        and ARTIFACT.fullmatch(name)):
                    os.remove(path)

    def split_compiler_output(self, lines: list[str]) -> CompilerOutput:
        """Split gcc's diagnostics.

        A line mentioning "error" opens an error note and one mentioning
        "warning" a warning note; both are closed by a caret line or by
        a location line. A line mentioning "note" opens an info note,
        closed by a line ending with a period (or a caret line). Lines
        outside of any note are dropped.

        """
        collector = OutputCollector()
        current = None
        for line in lines:
            if line.startswith("gcc: error: unrecognized command line option") \
                    or line.startswith(
                        "g++: error: unrecognized command line option"):
                raise BadFlag("Flag not supported. " + line)

            if current is None:
                if "error" in line:
                    current = collector.errors
                elif "warning" in line:
                    current = collector.warnings
                elif "note" in line:
                    current = collector.infos
                else:
                    continue

            collector.append(line)
            if current is collector.infos:
                closed = line.endswith(".") or CARET_LINE.fullmatch(line)
            else:
                closed = CARET_LINE.fullmatch(line) \
                    or LOCATION_LINE.fullmatch(line)
            if closed:
                collector.close_note(current)
                current = None

        if current is not None:
            collector.close_note(current)
        return collector.build(clean=len(lines) == 0)
