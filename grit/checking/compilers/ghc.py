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


logger = logging.getLogger(__name__)


SOURCE_FILE = re.compile(r".+\.[Ll]?[Hh][Ss]")


class GhcCompileChecker(CompileChecker):
    """Compile Haskell modules with ghc.

    ghc leaves .o and .hi files next to each module; they are removed
    once the diagnostics are read, so output_folder is ignored.

    """

    def check_program(self, source_location, output_folder, compiler_name,
                      flags):
        """See CompileChecker.check_program."""
        self.validate(source_location, compiler_name)
        sources = self.find_sources(source_location)
        command = [compiler_name] + list(flags) + ["-c"] + \
            [os.path.relpath(s, source_location) for s in sources]
        try:
            return self.run_compiler(command, source_location)
        finally:
            self.remove_artifacts(sources)

    @staticmethod
    def find_sources(source_location: str) -> list[str]:
        sources = []
        for dirpath, _, filenames in os.walk(source_location):
            for filename in filenames:
                if SOURCE_FILE.fullmatch(filename):
                    sources.append(os.path.join(dirpath, filename))
        return sorted(sources)

    @staticmethod
    def remove_artifacts(sources: list[str]):
        for source in sources:
            root, _ = os.path.splitext(source)
            for extension in (".o", ".hi"):
                try:
                    os.remove(root + extension)
                except FileNotFoundError:
                    pass

    def split_compiler_output(self, lines: list[str]) -> CompilerOutput:
        """Split ghc's diagnostics: every block of lines up to an empty
        line is an error.

        """
        collector = OutputCollector()
        for line in lines:
            if line.startswith("<command line>: does not exist:") \
                    or line.startswith("ghc: unrecognised flag:"):
                raise BadFlag("Flag not supported. " + line)
            if len(line.strip()) == 0:
                collector.close_note(collector.errors)
            else:
                collector.append(line)
        collector.close_note(collector.errors)
        return collector.build(clean=len(lines) == 0)
