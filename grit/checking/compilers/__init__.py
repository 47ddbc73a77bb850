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

"""Compile checkers, one per toolchain family."""

from .gcc import GccCompileChecker
from .ghc import GhcCompileChecker
from .javac import JavacCompileChecker


__all__ = [
    "GccCompileChecker", "GhcCompileChecker", "JavacCompileChecker",
]
