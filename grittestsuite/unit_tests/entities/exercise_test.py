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

"""Tests for the processing of an exercise."""

import os
import unittest
from datetime import datetime, timedelta
from types import SimpleNamespace
from unittest.mock import Mock, patch

from grit import config
from grit.checking.output import CompilerOutput
from grit.entities.context import ExerciseContext
from grit.entities.exercise import Exercise, ExerciseStatus
from grit.preprocess.connection import Connection, ConnectionType
from grit.preprocess.fetch import SubmissionFetchingException
from grit.preprocess.submission import PreprocessingResult, Student, \
    Submission
from grit.report.generator import ReportError
from grittestsuite.unit_tests.filesystemmixin import FileSystemMixin


START = datetime(2014, 4, 1, 8, 0)
DEADLINE = datetime(2014, 4, 8, 12, 0)
PERIOD = timedelta(minutes=10)

ALICE = Student("alice@uni.de", "alice")
BOB = Student("bob@uni.de", "bob")
CAROL = Student("carol@uni.de", "carol")

CLEAN = CompilerOutput(compiler_invoked=True, clean=True)
BROKEN = CompilerOutput(compiler_invoked=True, clean=False,
                        errors=("Main.java:1: error: ';' expected\n",))


class Clock:

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


class ExerciseTestCase(FileSystemMixin, unittest.TestCase):
    """Build an exercise whose collaborators are all mocks, run it tick
    by tick and look at what it did.

    """

    connection_type = ConnectionType.SVN

    def setUp(self):
        super().setUp()
        self.clock = Clock(START + timedelta(days=1))
        self.connection = Connection(1, "repo", self.connection_type,
                                     "svn://example.org/repo")
        self.controller = Mock()
        self.controller.clock = self.clock
        self.controller.get_connection.side_effect = \
            lambda cid: self.connection if cid == 1 else None

        self.compile_checker = Mock()
        self.compile_checker.check_program.return_value = CLEAN
        self.tester = Mock()
        self.context = self.make_context()

        self.fetcher = Mock()
        self.fetcher.fetch.return_value = PreprocessingResult()
        patcher = patch("grit.entities.exercise.get_fetcher",
                        return_value=self.fetcher)
        patcher.start()
        self.addCleanup(patcher.stop)

        patcher = patch.object(config.checking, "report_type", "PDF")
        patcher.start()
        self.addCleanup(patcher.stop)

    def make_context(self, **kwargs):
        base = self.get_path("wdir")
        values = dict(
            course_id=1, course_name="Programming 1",
            exercise_id=0, exercise_name="ex1",
            language=SimpleNamespace(
                name="JAVA", missing_files_message="No .java files."),
            compile_checker=self.compile_checker, compiler_name="javac",
            compiler_flags=("-Xlint",), tester=self.tester,
            start=START, deadline=DEADLINE, period=PERIOD, connection_id=1,
            file_regex=r".+\.java", archive_regex=r".+\.zip",
            fetch_path=os.path.join(base, "fetch"),
            bin_path=os.path.join(base, "bin"),
            tests_path=os.path.join(base, "tests"),
            temp_pdf_path=os.path.join(base, "tempPdf"),
            output_path=self.get_path("output"))
        values.update(kwargs)
        return ExerciseContext(**values)

    def make_exercise(self):
        return Exercise(0, self.context, self.controller, arm=False)

    def submission(self, student, content=b"class Main {}",
                   name="Main.java"):
        location = self.write_file(
            os.path.join("wdir/fetch", student.email, name), content)
        location = os.path.dirname(location)
        return Submission(student, location,
                          "%s-%d" % (student.email, hash(content)))

    def fetched(self, *submissions, without=(), invalid=()):
        result = PreprocessingResult(
            {s.student: s for s in submissions}, list(without),
            list(invalid))
        self.fetcher.fetch.return_value = result
        return result

    @property
    def checked_locations(self):
        return [c.args[0] for c in
                self.compile_checker.check_program.call_args_list]

    @property
    def notified(self):
        return [c.args[0] for c in
                self.controller.notifier.notify.call_args_list]


class TestPreDeadline(ExerciseTestCase):

    def test_creation(self):
        exercise = self.make_exercise()
        self.assertEqual(exercise.status, ExerciseStatus.NOT_STARTED)
        self.assertFalse(exercise.finished)
        for path in self.context.working_paths:
            self.assertTrue(os.path.isdir(path))
        self.assertEqual(exercise.report_path,
                         self.get_path("output/report.pdf"))

    def test_changed_submissions_only(self):
        exercise = self.make_exercise()
        alice, bob = self.submission(ALICE), self.submission(BOB)
        self.fetched(alice, bob)
        exercise.tick()
        self.assertEqual(sorted(self.checked_locations),
                         [alice.location, bob.location])
        self.assertEqual(exercise.status, ExerciseStatus.WAITING)
        self.controller.report_generator.concatenate_reports.\
            assert_called_once_with("PDF", self.context.temp_pdf_path,
                                    self.context.output_path,
                                    "Programming 1", "ex1", [], "tempReport")

        # Fetching the same content again checks nothing.
        self.compile_checker.check_program.reset_mock()
        self.fetched(self.submission(ALICE), self.submission(BOB))
        exercise.tick()
        self.assertEqual(self.checked_locations, [])

        new_bob = self.submission(BOB, b"class Main { int x; }")
        self.fetched(self.submission(ALICE), new_bob)
        exercise.tick()
        self.assertEqual(self.checked_locations, [new_bob.location])

    def test_checking_pipeline(self):
        exercise = self.make_exercise()
        alice = self.submission(ALICE)
        self.fetched(alice)
        exercise.tick()

        self.compile_checker.check_program.assert_called_once_with(
            alice.location, self.context.bin_path, "javac", ["-Xlint"])
        self.tester.test_submission.assert_called_once_with(
            self.context.bin_path)
        self.assertTrue(alice.plausible)
        self.assertEqual(alice.checking_result.compiler_output, CLEAN)
        self.controller.report_generator.generate_report.\
            assert_called_once_with(alice, self.context.temp_pdf_path,
                                    "Programming 1", "ex1", "PDF",
                                    file_regex=r".+\.java")

    def test_not_compiling_is_not_tested(self):
        self.compile_checker.check_program.return_value = BROKEN
        exercise = self.make_exercise()
        self.fetched(self.submission(ALICE))
        exercise.tick()
        self.tester.test_submission.assert_not_called()
        self.assertEqual(self.notified, [ALICE.email])

    def test_not_plausible(self):
        exercise = self.make_exercise()
        alice = self.submission(ALICE, b"notes", name="notes.txt")
        self.fetched(alice)
        exercise.tick()
        self.compile_checker.check_program.assert_not_called()
        self.controller.report_generator.generate_report.assert_not_called()
        self.assertFalse(alice.plausible)
        self.assertEqual(self.notified, [ALICE.email])
        _, (subject, body) = \
            self.controller.notifier.notify.call_args.args
        self.assertIn("No .java files.", body)

    def test_failures_are_isolated(self):
        def generate(submission, *args, **kwargs):
            if submission.student == ALICE:
                raise ReportError("pdflatex failed")
        self.controller.report_generator.generate_report.side_effect = \
            generate
        exercise = self.make_exercise()
        alice, bob = self.submission(ALICE), self.submission(BOB)
        self.fetched(alice, bob)
        exercise.tick()
        self.assertEqual(
            self.controller.report_generator.generate_report.call_count, 2)
        self.controller.report_generator.concatenate_reports.\
            assert_called_once()
        self.assertEqual(exercise.status, ExerciseStatus.WAITING)

    def test_checker_crash_is_isolated(self):
        alice, bob = self.submission(ALICE), self.submission(BOB)

        def check_program(location, *args):
            if location == alice.location:
                raise ValueError("compiler crash")
            return CLEAN
        self.compile_checker.check_program.side_effect = check_program
        exercise = self.make_exercise()
        self.fetched(alice, bob)
        exercise.tick()
        self.controller.report_generator.generate_report.\
            assert_called_once()
        self.assertIs(self.controller.report_generator.generate_report.
                      call_args.args[0], bob)
        self.controller.report_generator.concatenate_reports.\
            assert_called_once()
        self.assertEqual(exercise.status, ExerciseStatus.WAITING)

    def test_skipped_submission_checked_again(self):
        self.controller.report_generator.generate_report.side_effect = \
            ReportError("pdflatex timed out")
        exercise = self.make_exercise()
        self.fetched(self.submission(ALICE))
        exercise.tick()
        self.assertEqual(len(self.checked_locations), 1)

        # Same content, but the score card is still missing.
        self.controller.report_generator.generate_report.side_effect = None
        alice = self.submission(ALICE)
        self.fetched(alice)
        exercise.tick()
        self.assertEqual(len(self.checked_locations), 2)
        self.controller.report_generator.generate_report.\
            assert_called_with(alice, self.context.temp_pdf_path,
                               "Programming 1", "ex1", "PDF",
                               file_regex=r".+\.java")

        # Now that it went through, it is not checked a third time.
        self.fetched(self.submission(ALICE))
        exercise.tick()
        self.assertEqual(len(self.checked_locations), 2)

    def test_unexpected_error(self):
        exercise = self.make_exercise()
        self.fetcher.fetch.side_effect = RuntimeError("bad parse")
        exercise.tick()
        self.assertEqual(exercise.status, ExerciseStatus.PROCESSING_ERROR)
        self.assertFalse(exercise.finished)

        self.fetcher.fetch.side_effect = None
        self.fetched(self.submission(ALICE))
        exercise.tick()
        self.assertEqual(exercise.status, ExerciseStatus.WAITING)

    def test_terminated_while_processing(self):
        self.compile_checker.check_program.return_value = BROKEN
        exercise = self.make_exercise()

        def generate(*args, **kwargs):
            exercise.terminate()
        self.controller.report_generator.generate_report.side_effect = \
            generate
        self.fetched(self.submission(ALICE))
        exercise.tick()
        self.assertEqual(exercise.status, ExerciseStatus.TERMINATED)
        self.assertTrue(exercise.finished)
        self.controller.notifier.notify.assert_not_called()

    def test_old_score_card_removed(self):
        exercise = self.make_exercise()
        card = self.write_file("wdir/tempPdf/alice@uni.de.report.pdf", b"")
        self.fetched(self.submission(ALICE))
        exercise.tick()
        self.assertFalse(os.path.exists(card))

    def test_fetch_error(self):
        exercise = self.make_exercise()
        self.fetcher.fetch.side_effect = SubmissionFetchingException("down")
        exercise.tick()
        self.assertEqual(exercise.status, ExerciseStatus.FETCH_ERROR)
        self.assertFalse(exercise.finished)

        # The next tick tries again.
        self.fetcher.fetch.side_effect = None
        self.fetched(self.submission(ALICE))
        exercise.tick()
        self.assertEqual(exercise.status, ExerciseStatus.WAITING)

    def test_missing_connection(self):
        self.connection = None
        exercise = self.make_exercise()
        exercise.tick()
        self.assertEqual(exercise.status, ExerciseStatus.FETCH_ERROR)
        self.fetcher.fetch.assert_not_called()

    def test_merge_error_is_fatal(self):
        self.controller.report_generator.concatenate_reports.side_effect = \
            ReportError("broken pdf")
        exercise = self.make_exercise()
        self.fetched(self.submission(ALICE))
        exercise.tick()
        self.assertEqual(exercise.status, ExerciseStatus.REPORT_ERROR)
        self.assertTrue(exercise.finished)
        self.controller.notifier.notify.assert_not_called()

        self.fetcher.fetch.reset_mock()
        exercise.tick()
        self.fetcher.fetch.assert_not_called()

    def test_invalid_subjects_answered(self):
        exercise = self.make_exercise()
        self.fetched(invalid=["someone@uni.de"])
        exercise.tick()
        self.assertEqual(self.notified, ["someone@uni.de"])
        _, (subject, body) = \
            self.controller.notifier.notify.call_args.args
        self.assertIn("[Programming 1-ex1]", body)

    def test_terminate(self):
        exercise = self.make_exercise()
        exercise.terminate()
        self.assertEqual(exercise.status, ExerciseStatus.TERMINATED)
        self.assertTrue(exercise.finished)
        self.assertTrue(exercise.ticker.disarmed)
        exercise.tick()
        self.fetcher.fetch.assert_not_called()


class TestMailNotifications(ExerciseTestCase):

    connection_type = ConnectionType.MAIL

    def test_received(self):
        exercise = self.make_exercise()
        self.fetched(self.submission(ALICE), self.submission(BOB))
        exercise.tick()
        self.assertEqual(sorted(self.notified), [ALICE.email, BOB.email])

        self.controller.notifier.notify.reset_mock()
        self.fetched(self.submission(ALICE), self.submission(BOB))
        exercise.tick()
        self.assertEqual(self.notified, [])


class TestReminders(ExerciseTestCase):

    def test_each_reminder_sent_once(self):
        exercise = self.make_exercise()
        self.fetched(self.submission(ALICE), without=[BOB, CAROL])

        # Not yet 12 hours before the deadline.
        self.clock.now = DEADLINE - timedelta(hours=12, minutes=5)
        exercise.tick()
        self.assertEqual(self.notified, [])

        # The first tick past the 12 hours mark.
        self.clock.now = DEADLINE - timedelta(hours=11, minutes=55)
        exercise.tick()
        self.assertEqual(self.notified, [BOB.email, CAROL.email])

        self.controller.notifier.notify.reset_mock()
        self.clock.now = DEADLINE - timedelta(hours=11, minutes=45)
        exercise.tick()
        self.assertEqual(self.notified, [])

        self.clock.now = DEADLINE - timedelta(hours=5, minutes=59)
        exercise.tick()
        self.assertEqual(self.notified, [BOB.email, CAROL.email])

        self.controller.notifier.notify.reset_mock()
        exercise.tick()
        self.assertEqual(self.notified, [])


class TestPostDeadline(ExerciseTestCase):

    def test_final_processing(self):
        exercise = self.make_exercise()
        alice = self.submission(ALICE)
        self.fetched(alice)
        exercise.tick()

        self.write_file("output/tempReport.pdf", b"")
        self.write_file("output/report.pdf", b"")
        self.clock.now = DEADLINE + timedelta(minutes=3)
        self.compile_checker.check_program.reset_mock()
        self.controller.notifier.notify.reset_mock()
        with patch.object(config.admin, "email", "admin@uni.de"):
            exercise.tick()

        # Unchanged submissions are checked again.
        self.assertEqual(self.checked_locations, [alice.location])
        self.controller.report_generator.concatenate_reports.\
            assert_called_with("PDF", self.context.temp_pdf_path,
                               self.context.output_path, "Programming 1",
                               "ex1", [], "report")
        self.assertEqual(exercise.status, ExerciseStatus.READY)
        self.assertTrue(exercise.finished)
        self.assertEqual(os.listdir(self.context.output_path),
                         ["report.pdf"])
        for path in (self.context.fetch_path, self.context.bin_path,
                     self.context.tests_path, self.context.temp_pdf_path):
            self.assertFalse(os.path.exists(path))
        self.controller.notifier.notify.assert_called_once()
        self.assertEqual(self.notified, ["admin@uni.de"])
        self.assertEqual(
            self.controller.notifier.notify.call_args.kwargs["attachment"],
            exercise.report_path)

        self.fetcher.fetch.reset_mock()
        exercise.tick()
        self.fetcher.fetch.assert_not_called()

    def test_deadline_passing_while_processing(self):
        def compile_slowly(*args):
            self.clock.now = DEADLINE
            return CLEAN
        self.compile_checker.check_program.side_effect = compile_slowly
        self.clock.now = DEADLINE - timedelta(minutes=1)
        exercise = self.make_exercise()
        self.fetched(self.submission(ALICE))
        exercise.tick()
        self.assertEqual(self.fetcher.fetch.call_count, 2)
        self.assertEqual(exercise.status, ExerciseStatus.READY)

    def test_fetch_error_after_deadline(self):
        self.clock.now = DEADLINE
        exercise = self.make_exercise()
        self.fetcher.fetch.side_effect = SubmissionFetchingException("down")
        exercise.tick()
        self.assertEqual(exercise.status, ExerciseStatus.FETCH_ERROR)
        self.assertTrue(exercise.finished)

    def test_unexpected_error_after_deadline(self):
        self.clock.now = DEADLINE + timedelta(minutes=1)
        exercise = self.make_exercise()
        self.fetcher.fetch.side_effect = RuntimeError("bad parse")
        exercise.tick()
        self.assertEqual(exercise.status, ExerciseStatus.PROCESSING_ERROR)
        self.assertTrue(exercise.finished)
        self.assertTrue(exercise.ticker.disarmed)

        self.fetcher.fetch.reset_mock()
        exercise.tick()
        self.fetcher.fetch.assert_not_called()

    def test_checker_crash_after_deadline(self):
        self.clock.now = DEADLINE + timedelta(minutes=1)
        alice, bob = self.submission(ALICE), self.submission(BOB)

        def check_program(location, *args):
            if location == alice.location:
                raise ValueError("compiler crash")
            return CLEAN
        self.compile_checker.check_program.side_effect = check_program
        exercise = self.make_exercise()
        self.fetched(alice, bob)
        exercise.tick()
        self.assertEqual(self.controller.report_generator.generate_report.
                         call_args.args[0], bob)
        self.controller.report_generator.concatenate_reports.\
            assert_called_once_with("PDF", self.context.temp_pdf_path,
                                    self.context.output_path,
                                    "Programming 1", "ex1", [], "report")
        self.assertEqual(exercise.status, ExerciseStatus.READY)
        self.assertTrue(exercise.finished)

    def test_restart_after_completion(self):
        self.clock.now = DEADLINE + timedelta(days=1)
        self.write_file("output/report.pdf", b"")
        exercise = Exercise(0, self.context, self.controller, arm=True)
        self.assertEqual(exercise.status, ExerciseStatus.READY)
        self.assertTrue(exercise.finished)
        self.assertFalse(exercise.ticker.armed)
        exercise.tick()
        self.fetcher.fetch.assert_not_called()

    def test_creation_failure(self):
        self.write_file("blocker", b"")
        self.context = self.make_context(
            output_path=self.get_path("blocker/output"))
        exercise = self.make_exercise()
        self.assertEqual(exercise.status, ExerciseStatus.ABORTED_CREATION)
        self.assertTrue(exercise.finished)


if __name__ == "__main__":
    unittest.main()
