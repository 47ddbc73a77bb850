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

"""Tests for the installed languages and fetchers."""

import unittest

from grit.checking.languagemanager import LANGUAGES, get_language
from grit.preprocess.connection import ConnectionType
from grit.preprocess.fetchermanager import get_fetcher


class TestLanguages(unittest.TestCase):

    def test_installed(self):
        self.assertEqual(sorted(language.name for language in LANGUAGES),
                         ["C", "CPP", "HASKELL", "JAVA"])

    def test_get(self):
        java = get_language("JAVA")
        self.assertEqual(java.compiler_name, "javac")
        self.assertEqual(java.missing_files_message,
                         "There are no .java files.")
        with self.assertRaises(KeyError):
            get_language("COBOL")


class TestFetchers(unittest.TestCase):

    def test_every_connection_type(self):
        for connection_type in ConnectionType.ALL:
            self.assertEqual(get_fetcher(connection_type).connection_type,
                             connection_type)
        with self.assertRaises(KeyError):
            get_fetcher("FTP")


if __name__ == "__main__":
    unittest.main()
