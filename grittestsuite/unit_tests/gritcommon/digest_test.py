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

"""Tests for the digest module"""

import os
import unittest

from gritcommon.digest import Digester, bytes_digest, path_digest, \
    tree_digest
from grittestsuite.unit_tests.filesystemmixin import FileSystemMixin


_EMPTY_DIGEST = "da39a3ee5e6b4b0d3255bfef95601890afd80709"
_CONTENT_DIGEST = "040f06fd774092478d450774f5ba30c5da78acc8"


class TestDigester(unittest.TestCase):

    def setUp(self):
        super().setUp()
        self.d = Digester()

    def test_success(self):
        self.assertEqual(self.d.digest(), _EMPTY_DIGEST)
        self.d.update(b"content")
        self.assertEqual(self.d.digest(), _CONTENT_DIGEST)

    def test_string(self):
        with self.assertRaises(TypeError):
            self.d.update("")


class TestPathDigest(FileSystemMixin, unittest.TestCase):

    def test_success(self):
        path = self.write_file("f", b"content")
        self.assertEqual(path_digest(path), _CONTENT_DIGEST)
        self.assertEqual(bytes_digest(b"content"), _CONTENT_DIGEST)

    def test_long(self):
        content = b"0" * 1_000_000
        path = self.write_file("f", content)
        self.assertEqual(path_digest(path), bytes_digest(content))

    def test_not_found(self):
        with self.assertRaises(FileNotFoundError):
            path_digest(self.get_path("f"))


class TestTreeDigest(FileSystemMixin, unittest.TestCase):

    def setUp(self):
        super().setUp()
        self.write_file("a/Main.java", b"class Main {}")
        self.write_file("a/util/Util.java", b"class Util {}")
        self.write_file("b/Main.java", b"class Main {}")
        self.write_file("b/util/Util.java", b"class Util {}")

    def test_same_content_same_digest(self):
        self.assertEqual(tree_digest(self.get_path("a")),
                         tree_digest(self.get_path("b")))

    def test_changed_content(self):
        self.write_file("b/util/Util.java", b"class Util { int x; }")
        self.assertNotEqual(tree_digest(self.get_path("a")),
                            tree_digest(self.get_path("b")))

    def test_renamed_file(self):
        os.rename(self.get_path("b/util/Util.java"),
                  self.get_path("b/util/Other.java"))
        self.assertNotEqual(tree_digest(self.get_path("a")),
                            tree_digest(self.get_path("b")))

    def test_added_file(self):
        self.write_file("b/README", b"")
        self.assertNotEqual(tree_digest(self.get_path("a")),
                            tree_digest(self.get_path("b")))

    def test_empty_directories_are_ignored(self):
        self.makedirs("b/empty")
        self.assertEqual(tree_digest(self.get_path("a")),
                         tree_digest(self.get_path("b")))

    def test_symlinks_are_ignored(self):
        os.symlink(self.get_path("a/Main.java"), self.get_path("b/Link.java"))
        self.assertEqual(tree_digest(self.get_path("a")),
                         tree_digest(self.get_path("b")))

    def test_single_file(self):
        self.assertEqual(tree_digest(self.get_path("a/Main.java")),
                         tree_digest(self.get_path("b/Main.java")))


if __name__ == "__main__":
    unittest.main()
