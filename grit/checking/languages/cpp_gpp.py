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

"""C++ programming language definition."""

from grit import config
from grit.checking.compilers import GccCompileChecker
from grit.checking.language import Language


__all__ = ["CppGpp"]


class CppGpp(Language):
    """This defines the C++ programming language, checked with g++ (the
    version available on the system).

    """

    @property
    def name(self):
        """See Language.name."""
        return "CPP"

    @property
    def source_extensions(self):
        """See Language.source_extensions."""
        return [".cpp"]

    @property
    def file_regex(self):
        """See Language.file_regex."""
        return r".+\.[Cc][Pp][Pp]"

    @property
    def compiler_name(self):
        """See Language.compiler_name."""
        return "g++"

    def get_compile_checker(self, tests_location):
        """See Language.get_compile_checker."""
        return GccCompileChecker(config.checking.compile_timeout_s)
