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

"""Tests for the configuration parser."""

import unittest
from dataclasses import dataclass, field

from gritcommon.conf_parser import ConfigError, ConfigTypeError, \
    parse_config, parse_config_obj
from grittestsuite.unit_tests.filesystemmixin import FileSystemMixin


@dataclass
class Inner:
    name: str
    timeout_s: float = 1.0
    flags: list[str] = field(default_factory=list)


@dataclass
class Outer:
    global_: Inner
    port: int = 465
    debug: bool = False
    lib_dir: str | None = None
    classpath: tuple[str, ...] = ()


@dataclass
class Defaults:
    port: int = 465
    inner: Inner = field(default_factory=lambda: Inner("grit"))


class TestParseConfigObj(unittest.TestCase):

    def test_defaults(self):
        conf = parse_config_obj({"global": {"name": "x"}}, Outer, "")
        self.assertEqual(conf, Outer(Inner("x")))

    def test_values(self):
        conf = parse_config_obj(
            {"global": {"name": "x", "timeout_s": 3, "flags": ["-Wall"]},
             "port": 587, "debug": True, "lib_dir": "/lib",
             "classpath": ["a.jar", "b.jar"]},
            Outer, "")
        self.assertEqual(conf.global_.timeout_s, 3.0)
        self.assertIsInstance(conf.global_.timeout_s, float)
        self.assertEqual(conf.global_.flags, ["-Wall"])
        self.assertEqual(conf.port, 587)
        self.assertTrue(conf.debug)
        self.assertEqual(conf.lib_dir, "/lib")
        self.assertEqual(conf.classpath, ("a.jar", "b.jar"))

    def test_missing_required(self):
        with self.assertRaisesRegex(ConfigError, "global.name"):
            parse_config_obj({"global": {}}, Outer, "")

    def test_wrong_type(self):
        with self.assertRaises(ConfigTypeError):
            parse_config_obj({"global": {"name": "x"}, "port": "465"},
                             Outer, "")

    def test_bool_is_not_a_number(self):
        with self.assertRaises(ConfigTypeError):
            parse_config_obj({"global": {"name": "x"}, "port": True},
                             Outer, "")

    def test_unknown_key_ignored(self):
        with self.assertLogs(level="WARNING"):
            conf = parse_config_obj({"global": {"name": "x"}, "what": 1},
                                    Outer, "")
        self.assertEqual(conf.port, 465)


class TestParseConfig(FileSystemMixin, unittest.TestCase):

    def test_file(self):
        path = self.write_file("grit.toml",
                               b'port = 25\n[global]\nname = "grit"\n')
        conf = parse_config(path, Outer)
        self.assertEqual(conf.port, 25)
        self.assertEqual(conf.global_.name, "grit")

    def test_missing_allowed(self):
        conf = parse_config(self.get_path("missing.toml"), Defaults,
                            allow_missing=True)
        self.assertEqual(conf, Defaults())

    def test_missing_not_allowed(self):
        with self.assertRaises(SystemExit):
            parse_config(self.get_path("missing.toml"), Outer)

    def test_invalid_toml(self):
        path = self.write_file("grit.toml", b"port = = 3\n")
        with self.assertRaises(SystemExit):
            parse_config(path, Outer)


if __name__ == "__main__":
    unittest.main()
