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

"""Interface of the compile checkers and the machinery they share.

A compile checker runs a compiler on a submitted source tree and turns
its diagnostics into a CompilerOutput. Problems of the set-up (no
compiler given, a flag the compiler rejects) raise a CheckingError,
problems of the submission end up in the CompilerOutput.

"""

import logging
import os
from abc import ABCMeta, abstractmethod

from grit import config
from grit.checking.output import CompilerOutput
from grit.errors import GritError
from gritcommon.commands import pretty_print_cmdline, run_command


__all__ = [
    "CheckingError", "BadCompilerSpecified", "BadFlag",
    "CompilerOutputFolderExists", "CompileChecker", "OutputCollector",
]


logger = logging.getLogger(__name__)


class CheckingError(GritError):
    pass


class BadCompilerSpecified(CheckingError):
    """No usable compiler was configured for the exercise."""

    pass


class BadFlag(CheckingError):
    """The compiler rejected one of the configured flags."""

    pass


class CompilerOutputFolderExists(CheckingError):
    """The checker needs an output folder that does not exist yet."""

    pass


class OutputCollector:
    """Accumulate diagnostics while splitting the compiler's output."""

    def __init__(self):
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.infos: list[str] = []
        self._note: list[str] = []

    def append(self, line: str):
        """Add a line to the note being collected."""
        self._note.append(line + "\n")

    @property
    def pending(self) -> bool:
        return len(self._note) > 0

    def close_note(self, kind: list[str]):
        """End the note being collected, storing it in kind."""
        if self._note:
            kind.append("".join(self._note))
        self._note = []

    def build(self, clean: bool) -> CompilerOutput:
        return CompilerOutput(compiler_invoked=True,
                              clean=clean,
                              errors=tuple(self.errors),
                              warnings=tuple(self.warnings),
                              infos=tuple(self.infos))


class CompileChecker(metaclass=ABCMeta):
    """Check whether a submission compiles with a given toolchain."""

    def __init__(self, timeout: float | None = None):
        """Create a checker.

        timeout: seconds after which a compiler run is killed; by
            default the configured compile timeout.

        """
        if timeout is None:
            timeout = config.checking.compile_timeout_s
        self.timeout = timeout

    @abstractmethod
    def check_program(self, source_location: str, output_folder: str | None,
                      compiler_name: str,
                      flags: list[str]) -> CompilerOutput:
        """Compile the program at source_location.

        source_location: the directory with the submitted sources.
        output_folder: where compiled files go, for the toolchains
            that keep them.
        compiler_name: the executable of the compiler.
        flags: additional flags for the compiler.

        return: the outcome of the compilation.

        raise (BadCompilerSpecified): if compiler_name is empty.
        raise (FileNotFoundError): if source_location is not a
            directory.
        raise (BadFlag): if the compiler rejected a flag.
        raise (CompilerOutputFolderExists): if the checker needs a
            new output folder and output_folder already exists.

        """
        pass

    @staticmethod
    def validate(source_location: str, compiler_name: str):
        """Raise if the arguments make compiling impossible."""
        if not compiler_name:
            raise BadCompilerSpecified("No compiler specified.")
        if not source_location or not os.path.isdir(source_location):
            raise FileNotFoundError(
                "Program folder that should be compiled does not exist: "
                "\"%s\"" % source_location)

    @abstractmethod
    def split_compiler_output(self, lines: list[str]) -> CompilerOutput:
        """Group the diagnostic lines into errors, warnings and infos.

        lines: the diagnostics, in the order the compiler wrote them.

        raise (BadFlag): if the lines show that a flag was rejected.

        """
        pass

    def run_compiler(self, command: list[str], cwd: str) -> CompilerOutput:
        """Run command in cwd and turn what it wrote into a CompilerOutput.

        command: the compiler invocation.
        cwd: the directory the compiler runs in.

        raise (BadFlag): if the compiler rejected a flag.

        """
        logger.info("Compiling with %s.", pretty_print_cmdline(command))
        result = run_command(command, cwd=cwd, timeout=self.timeout)
        if not result.spawned:
            logger.error("Couldn't launch %s. Check whether it's in the "
                         "system's PATH.", command[0])
            return CompilerOutput(compiler_invoked=False, clean=False)
        if result.timed_out:
            return CompilerOutput(
                compiler_invoked=True, clean=False,
                errors=("Compilation timed out after %s seconds.\n"
                        % self.timeout,))

        lines = result.stderr.splitlines()
        if result.returncode is not None and result.returncode < 0:
            # Killed by a signal: the diagnostics are truncated.
            output = self.split_compiler_output(lines)
            return CompilerOutput(
                compiler_invoked=True, stream_broken=True, clean=False,
                errors=output.errors + (
                    "The compiler was killed by signal %d.\n"
                    % -result.returncode,),
                warnings=output.warnings, infos=output.infos)

        if len(lines) == 0:
            if result.returncode == 0:
                return CompilerOutput(compiler_invoked=True, clean=True)
            return CompilerOutput(
                compiler_invoked=True, clean=False,
                errors=("The compiler exited with status %d.\n"
                        % result.returncode,))
        return self.split_compiler_output(lines)
