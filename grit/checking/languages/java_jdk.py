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

"""Java programming language definition."""

from grit import config
from grit.checking.compilers import JavacCompileChecker
from grit.checking.language import Language
from grit.checking.testing import JavaProjectTester


__all__ = ["JavaJdk"]


class JavaJdk(Language):
    """This defines the Java programming language, compiled with javac
    and unit tested with JUnit 4. Jar files are accepted as archives.

    """

    @property
    def name(self):
        """See Language.name."""
        return "JAVA"

    @property
    def source_extensions(self):
        """See Language.source_extensions."""
        return [".java"]

    @property
    def file_regex(self):
        """See Language.file_regex."""
        return r".+\.[Jj][Aa][Vv][Aa]"

    @property
    def archive_regex(self):
        """See Language.archive_regex."""
        return r".+\.(([Zz][Ii][Pp])|([Jj][Aa][Rr]))"

    @property
    def compiler_name(self):
        """See Language.compiler_name."""
        return "javac"

    def get_compile_checker(self, tests_location):
        """See Language.get_compile_checker."""
        return JavacCompileChecker(tests_location,
                                   config.checking.junit_classpath,
                                   config.checking.lib_dir,
                                   config.checking.compile_timeout_s)

    def get_tester(self, tests_location):
        """See Language.get_tester."""
        return JavaProjectTester(tests_location,
                                 config.checking.junit_classpath,
                                 config.checking.lib_dir,
                                 config.checking.test_timeout_s)
