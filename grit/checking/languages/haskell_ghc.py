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

"""Haskell programming language definition."""

from grit import config
from grit.checking.compilers import GhcCompileChecker
from grit.checking.language import Language


__all__ = ["HaskellGhc"]


class HaskellGhc(Language):
    """This defines the Haskell programming language, checked with
    ghc. Literate Haskell sources are accepted too.

    """

    @property
    def name(self):
        """See Language.name."""
        return "HASKELL"

    @property
    def source_extensions(self):
        """See Language.source_extensions."""
        return [".hs", ".lhs"]

    @property
    def file_regex(self):
        """See Language.file_regex."""
        return r".+\.([Ll])?[Hh][Ss]"

    @property
    def compiler_name(self):
        """See Language.compiler_name."""
        return "ghc"

    def get_compile_checker(self, tests_location):
        """See Language.get_compile_checker."""
        return GhcCompileChecker(config.checking.compile_timeout_s)
