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

"""Tests for the commands module."""

import unittest
from unittest.mock import patch

from gevent import subprocess

from gritcommon.commands import CommandResult, pretty_print_cmdline, \
    run_command


class TestPrettyPrintCmdline(unittest.TestCase):

    def test_quoting(self):
        self.assertEqual(pretty_print_cmdline(["gcc", "-c", "my file.c"]),
                         "gcc -c 'my file.c'")


class TestRunCommand(unittest.TestCase):

    @patch("gritcommon.commands.subprocess.run")
    def test_success(self, run):
        run.return_value = subprocess.CompletedProcess(
            ["true"], 0, b"out\n", b"")
        result = run_command(["true"], cwd="/tmp", timeout=3)
        self.assertEqual(result, CommandResult(True, False, 0, "out\n", ""))
        self.assertTrue(result.success)
        self.assertEqual(run.call_args.kwargs["timeout"], 3)
        self.assertEqual(run.call_args.kwargs["cwd"], "/tmp")

    @patch("gritcommon.commands.subprocess.run")
    def test_failure_decodes_garbage(self, run):
        run.return_value = subprocess.CompletedProcess(
            ["gcc"], 1, b"", b"caf\xe9\n")
        result = run_command(["gcc"])
        self.assertFalse(result.success)
        self.assertEqual(result.stderr, "caf�\n")

    @patch("gritcommon.commands.subprocess.run")
    def test_timeout(self, run):
        run.side_effect = subprocess.TimeoutExpired(["sleep"], 1,
                                                    output=b"partial")
        result = run_command(["sleep", "10"], timeout=1)
        self.assertTrue(result.spawned)
        self.assertTrue(result.timed_out)
        self.assertIsNone(result.returncode)
        self.assertEqual(result.stdout, "partial")
        self.assertFalse(result.success)

    @patch("gritcommon.commands.subprocess.run")
    def test_not_spawned(self, run):
        run.side_effect = FileNotFoundError(2, "No such file or directory")
        result = run_command(["no-such-compiler"])
        self.assertFalse(result.spawned)
        self.assertFalse(result.success)


if __name__ == "__main__":
    unittest.main()
