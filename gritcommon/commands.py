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

"""Running the external tools GRIT drives (compilers, svn, scp, JUnit,
pdflatex) from greenlets.

"""

import logging
from shlex import quote
import typing

from gevent import subprocess


__all__ = [
    "CommandResult", "pretty_print_cmdline", "run_command",
]


logger = logging.getLogger(__name__)


def pretty_print_cmdline(cmdline: list[str]) -> str:
    """Pretty print a command line.

    Take a command line suitable to be passed to a Popen-like call and
    returns a string that represents it in a way that preserves the
    structure of arguments and can be passed to bash as is.

    """
    return " ".join(quote(x) for x in cmdline)


class CommandResult(typing.NamedTuple):
    """What came out of an external command.

    spawned: False if the executable could not be started at all.
    timed_out: True if the command was killed for exceeding its time.
    returncode: the exit status (None unless the command ended).
    stdout, stderr: the decoded output streams.

    """
    spawned: bool
    timed_out: bool
    returncode: int | None
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.spawned and not self.timed_out and self.returncode == 0


def run_command(
    cmdline: list[str], cwd: str | None = None,
    timeout: float | None = None, merge_stderr: bool = False,
) -> CommandResult:
    """Run a command without blocking the other greenlets.

    cmdline: the command and its arguments.
    cwd: the working directory of the command.
    timeout: seconds after which the command is killed.
    merge_stderr: whether stderr should be merged into stdout.

    return: the outcome of the command. Decoding errors in the output
        are replaced, since tools print whatever the students wrote.

    """
    logger.debug("Executing %s in %s.", pretty_print_cmdline(cmdline), cwd)
    try:
        process = subprocess.run(
            cmdline, cwd=cwd, timeout=timeout,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE)
    except subprocess.TimeoutExpired as error:
        logger.warning("Command %s timed out after %s seconds.",
                       pretty_print_cmdline(cmdline), timeout)
        return CommandResult(True, True, None,
                             _decode(error.stdout), _decode(error.stderr))
    except OSError as error:
        logger.warning("Cannot execute %s: %s.",
                       pretty_print_cmdline(cmdline), error)
        return CommandResult(False, False, None, "", str(error))
    return CommandResult(True, False, process.returncode,
                         _decode(process.stdout), _decode(process.stderr))


def _decode(data: bytes | None) -> str:
    if data is None:
        return ""
    return data.decode("utf-8", errors="replace")
