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

"""Values describing what happened when a submission was checked.

All of them are immutable: a checker builds them once and the exercise
and the report generator only read them.

"""

from dataclasses import dataclass, field


__all__ = [
    "CompilerOutput", "TestResult", "TestOutput", "CheckingResult",
]


@dataclass(frozen=True)
class CompilerOutput:
    """The outcome of one compiler run.

    compiler_invoked: False if the compiler could not be started.
    stream_broken: True if the compiler died before its diagnostics
        could be read completely.
    clean: True if the compiler had nothing to say.
    errors, warnings, infos: the diagnostics, one (possibly
        multi-line) note per item.

    """
    compiler_invoked: bool = False
    stream_broken: bool = False
    clean: bool = False
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    infos: tuple[str, ...] = ()


@dataclass(frozen=True)
class TestResult:
    """The outcome of running one unit test class."""
    # Not a test case itself, despite the name.
    __test__ = False

    name: str
    run_count: int
    failures: tuple[str, ...] = ()

    @property
    def failure_count(self) -> int:
        return len(self.failures)


@dataclass(frozen=True)
class TestOutput:
    """The outcome of running the unit tests against a submission."""
    __test__ = False

    results: tuple[TestResult, ...] = ()
    did_test: bool = False

    @property
    def test_count(self) -> int:
        return sum(r.run_count for r in self.results)

    @property
    def failed_test_count(self) -> int:
        return sum(r.failure_count for r in self.results)

    @property
    def passed_test_count(self) -> int:
        return max(0, self.test_count - self.failed_test_count)

    @property
    def failures(self) -> list[str]:
        return [f for r in self.results for f in r.failures]


@dataclass(frozen=True)
class CheckingResult:
    compiler_output: CompilerOutput
    test_output: TestOutput = field(default_factory=TestOutput)
