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

"""Tests for the controller, the courses and the exercise contexts."""

import os
import unittest
from datetime import datetime, timedelta
from unittest.mock import Mock, patch

from grit.checking.compilers import GccCompileChecker, JavacCompileChecker
from grit.checking.testing import JavaProjectTester
from grit.entities.context import ExerciseMetadata, WrongDate, \
    make_exercise_context
from grit.entities.controller import ConnectionUsed, Controller
from grit.entities.exercise import ExerciseStatus
from grit.preprocess.connection import ConnectionType, CouldNotConnect
from gritcommon.conf_parser import ConfigError
from grittestsuite.unit_tests.entities.state_test import make_store
from grittestsuite.unit_tests.filesystemmixin import FileSystemMixin


NOW = datetime(2014, 4, 2, 10, 0)


def metadata(name="ex1", language="JAVA", start=datetime(2014, 4, 1, 8, 0),
             deadline=datetime(2014, 4, 8, 12, 0),
             period=timedelta(minutes=10)):
    return ExerciseMetadata(name, language, start, deadline, period)


class TestMakeExerciseContext(FileSystemMixin, unittest.TestCase):

    def test_java(self):
        context = make_exercise_context(
            2, "Programming 1", 3, 1, metadata(), self.get_path("wdir"),
            self.get_path("out"))
        base = self.get_path("wdir/course-2/exercise-3")
        self.assertEqual(context.fetch_path, os.path.join(base, "fetch"))
        self.assertEqual(context.bin_path, os.path.join(base, "bin"))
        self.assertEqual(context.tests_path, os.path.join(base, "tests"))
        self.assertEqual(context.temp_pdf_path,
                         os.path.join(base, "tempPdf"))
        self.assertEqual(context.output_path,
                         self.get_path("out/course-2/exercise-3"))
        self.assertIsInstance(context.compile_checker, JavacCompileChecker)
        self.assertIsInstance(context.tester, JavaProjectTester)
        self.assertEqual(context.compiler_name, "javac")
        self.assertEqual(context.window, (context.start, context.deadline))
        self.assertEqual(context.metadata(), metadata())

    def test_c_has_no_tester(self):
        context = make_exercise_context(0, "C course", 0, 0,
                                        metadata(language="C"),
                                        self.base_dir, self.base_dir)
        self.assertIsInstance(context.compile_checker, GccCompileChecker)
        self.assertIsNone(context.tester)

    def test_wrong_dates(self):
        with self.assertRaises(WrongDate):
            make_exercise_context(0, "c", 0, 0, metadata(
                deadline=datetime(2014, 4, 1, 8, 0)), self.base_dir,
                self.base_dir)
        with self.assertRaises(WrongDate):
            make_exercise_context(0, "c", 0, 0, metadata(period=timedelta()),
                                  self.base_dir, self.base_dir)

    def test_unknown_language(self):
        with self.assertRaises(ConfigError):
            make_exercise_context(0, "c", 0, 0, metadata(language="COBOL"),
                                  self.base_dir, self.base_dir)


class TestController(FileSystemMixin, unittest.TestCase):

    def setUp(self):
        super().setUp()
        self.store = make_store()
        self.controller = self.make_controller()

    def make_controller(self, **kwargs):
        values = dict(clock=lambda: NOW, notifier=Mock(),
                      report_generator=Mock(),
                      working_dir=self.get_path("wdir"),
                      output_dir=self.get_path("out"),
                      arm_exercises=False, check_connections=False)
        values.update(kwargs)
        return Controller(self.store, **values)

    def populate(self):
        connection = self.controller.add_connection(
            "repo", ConnectionType.SVN, "svn://example.org/repo",
            structure=("TOPLEVEL", ".*", "SUBMISSION"))
        course = self.controller.add_course("Programming 1")
        exercise = self.controller.add_exercise(course.id, connection.id,
                                                metadata())
        return connection, course, exercise

    def test_add(self):
        connection, course, exercise = self.populate()
        self.assertEqual((connection.id, course.id, exercise.id), (0, 0, 0))
        self.assertEqual(self.controller.get_exercise(0, 0), exercise)
        self.assertEqual(exercise.status, ExerciseStatus.NOT_STARTED)
        self.assertFalse(exercise.ticker.armed)
        self.assertTrue(os.path.isdir(
            self.get_path("wdir/course-0/exercise-0/fetch")))
        second = self.controller.add_course("Algorithms")
        self.assertEqual(second.id, 1)
        self.assertEqual([c.name for c in self.controller.courses],
                         ["Programming 1", "Algorithms"])

    def test_restore(self):
        connection, course, _ = self.populate()
        self.controller.add_exercise(course.id, connection.id,
                                     metadata("ex2", "C"))
        self.controller.stop_all()

        restored = self.make_controller()
        restored.restore_state()
        self.assertEqual(restored.connections, [connection])
        self.assertEqual([c.name for c in restored.courses],
                         ["Programming 1"])
        self.assertEqual([e.name for e in restored.courses[0].exercises],
                         ["ex1", "ex2"])
        # New objects get fresh ids.
        self.assertEqual(restored.add_course("Algorithms").id, 1)
        self.assertEqual(restored.add_exercise(0, 0, metadata("ex3")).id, 2)
        self.assertEqual(restored.add_connection(
            "inbox", ConnectionType.MAIL, "imap.uni.de").id, 1)

    def test_restore_skips_broken_exercise(self):
        self.populate()
        self.store.add_exercise(0, 1, 0, metadata("old", "COBOL"))
        restored = self.make_controller()
        restored.restore_state()
        self.assertEqual([e.name for e in restored.courses[0].exercises],
                         ["ex1"])

    def test_reboot(self):
        _, _, exercise = self.populate()
        self.controller.reboot()
        self.assertEqual(exercise.status, ExerciseStatus.TERMINATED)
        rebooted = self.controller.get_exercise(0, 0)
        self.assertIsNot(rebooted, exercise)
        self.assertEqual(rebooted.name, "ex1")

    def test_wrong_exercise_not_stored(self):
        self.populate()
        with self.assertRaises(WrongDate):
            self.controller.add_exercise(0, 0, metadata(
                "bad", deadline=datetime(2014, 3, 1)))
        with self.assertRaises(ConfigError):
            self.controller.add_exercise(0, 0, metadata("bad", "COBOL"))
        self.assertEqual(len(self.store.restore_courses()[0].exercises), 1)
        with self.assertRaises(KeyError):
            self.controller.add_exercise(5, 0, metadata())

    def test_update_exercise(self):
        _, _, old = self.populate()
        new = self.controller.update_exercise(0, 0, 0, metadata("ex1b"))
        self.assertEqual(old.status, ExerciseStatus.TERMINATED)
        self.assertEqual(new.name, "ex1b")
        self.assertIs(self.controller.get_exercise(0, 0), new)
        self.assertEqual(
            self.store.restore_courses()[0].exercises[0].metadata.name,
            "ex1b")

    def test_update_exercise_with_wrong_dates_keeps_old(self):
        _, _, old = self.populate()
        with self.assertRaises(WrongDate):
            self.controller.update_exercise(0, 0, 0, metadata(
                deadline=datetime(2014, 3, 1)))
        self.assertFalse(old.finished)
        self.assertIs(self.controller.get_exercise(0, 0), old)

    def test_rename_course(self):
        _, _, old = self.populate()
        self.controller.update_course(0, "Programming I")
        exercise = self.controller.get_exercise(0, 0)
        self.assertEqual(exercise.context.course_name, "Programming I")
        self.assertEqual(old.status, ExerciseStatus.TERMINATED)
        self.assertEqual(self.store.restore_courses()[0].name,
                         "Programming I")

    def test_delete_exercise(self):
        _, _, exercise = self.populate()
        self.assertIs(self.controller.delete_exercise(0, 0), exercise)
        self.assertTrue(exercise.finished)
        self.assertEqual(self.controller.courses[0].exercises, [])
        self.assertEqual(self.store.restore_courses()[0].exercises, [])

    def test_delete_course(self):
        _, course, exercise = self.populate()
        self.assertIs(self.controller.delete_course(0), course)
        self.assertTrue(exercise.finished)
        self.assertEqual(self.controller.courses, [])
        self.assertEqual(self.store.restore_courses(), [])
        self.assertFalse(os.path.exists(self.get_path("wdir/course-0")))
        self.assertFalse(os.path.exists(self.get_path("out/course-0")))

    def test_connection_in_use(self):
        connection, _, _ = self.populate()
        with self.assertRaises(ConnectionUsed):
            self.controller.delete_connection(connection.id)
        self.controller.delete_exercise(0, 0)
        self.assertEqual(self.controller.delete_connection(connection.id),
                         connection)
        self.assertIsNone(self.controller.get_connection(connection.id))
        self.assertEqual(self.store.restore_connections(), {})

    def test_update_connection(self):
        connection, _, exercise = self.populate()
        updated = self.controller.update_connection(
            connection.id, "repo", ConnectionType.SVN,
            "svn://example.org/moved",
            structure=("TOPLEVEL", ".*", "SUBMISSION"))
        self.assertIs(self.controller.get_connection(connection.id), updated)
        self.assertEqual(self.store.restore_connections()[connection.id],
                         updated)
        with self.assertRaises(KeyError):
            self.controller.update_connection(9, "x", ConnectionType.SVN,
                                              "svn://x")

    def test_unreachable_connection(self):
        controller = self.make_controller(check_connections=True)
        with patch("grit.entities.controller.check_connection",
                   return_value=False):
            with self.assertRaises(CouldNotConnect):
                controller.add_connection("repo", ConnectionType.SVN,
                                          "svn://example.org/repo")
        self.assertEqual(controller.connections, [])
        self.assertEqual(self.store.restore_connections(), {})

    def test_unknown_connection_type(self):
        with self.assertRaises(ValueError):
            self.controller.add_connection("ftp", "FTP", "ftp://x")


if __name__ == "__main__":
    unittest.main()
