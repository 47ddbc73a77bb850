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

"""The processing of the submissions of an exercise.

An exercise fetches the submissions of its students at the instants
start + k * period. Before the deadline, every new or changed
submission is checked (plausibility, compilation, unit tests), gets a
score card and the student is told about problems by mail; an interim
report merges the score cards so far. The first time the exercise runs
after the deadline, every submission is checked again, the final
report is written, the working files are removed and the admin gets
the report. After that the exercise does nothing more, even after a
restart.

"""

import logging
import os
from datetime import timedelta

from grit import config, rmtree
from grit.checking.output import CheckingResult, CompilerOutput, TestOutput
from grit.checking.plausibility import check_plausibility
from grit.errors import GritError
from grit.io.ticker import Ticker
from grit.log import ExerciseAdapter, OperationAdapter
from grit.mail import admin_message, does_not_compile_message, \
    invalid_subject_message, no_submission_message, not_plausible_message, \
    received_message
from grit.preprocess.connection import ConnectionType
from grit.preprocess.fetch import SubmissionFetchingException
from grit.preprocess.fetch.mail import subject_tag
from grit.preprocess.fetchermanager import get_fetcher
from grit.preprocess.submission import PreprocessingResult, Submission
from grit.report.generator import ReportError, ReportType, report_basename
from grit.util import clean_directory
from gritcommon.conf_parser import ConfigError


__all__ = ["Exercise", "ExerciseStatus"]


logger = logging.getLogger(__name__)


class ExerciseStatus:
    NOT_STARTED = "not started yet"
    FETCHING = "fetching submissions"
    PROCESSING = "processing submissions"
    SENDING_EMAILS = "sending emails"
    WAITING = "waiting"
    READY = "ready for download"
    ABORTED_CREATION = "aborted exercise creation"
    FETCH_ERROR = "error while fetching submissions"
    REPORT_ERROR = "error while generating pdf for printout"
    PROCESSING_ERROR = "error while processing submissions"
    TERMINATED = "terminated"


REPORT_NAME = "report"
TEMP_REPORT_NAME = "tempReport"

# How long before the deadline students who did not submit are warned.
REMINDERS = (timedelta(hours=12), timedelta(hours=6))


class Exercise:
    """An exercise being processed.

    exercise_id (int): the id of the exercise in its course.
    context (ExerciseContext): everything about the exercise.
    controller (Controller): gives access to the connections, the
        clock, the notifier and the report generator.
    arm (bool): whether to start the ticker right away.

    """

    def __init__(self, exercise_id, context, controller, arm=True):
        self.id = exercise_id
        self.context = context
        self.controller = controller
        self.status = ExerciseStatus.NOT_STARTED
        self.submissions = dict()
        # The submissions checked without errors, by student; fetched
        # submissions equal to these are not checked again.
        self._checked = dict()
        self._reminded = set()
        self._finished = False
        self._final_pass = False
        self.logger = ExerciseAdapter(logger, context.course_id,
                                      context.exercise_id)
        self.ticker = Ticker(self.tick, context.start, context.period,
                             clock=controller.clock,
                             name="exercise %s of %s"
                             % (context.exercise_name, context.course_name))

        try:
            for path in context.working_paths:
                os.makedirs(path, exist_ok=True)
        except OSError as error:
            self.logger.critical("Couldn't create the directories of "
                                 "exercise %s: %s.",
                                 context.exercise_name, error)
            self.status = ExerciseStatus.ABORTED_CREATION
            self._finish()
            return

        if self.is_deadline_passed() and os.path.exists(self.report_path):
            self.logger.info("Exercise %s was already completed.",
                             context.exercise_name)
            self.status = ExerciseStatus.READY
            self._finish()
            return

        if arm:
            self.ticker.arm()

    def __repr__(self):
        return "<Exercise %d %r: %s>" % (self.id, self.name, self.status)

    @property
    def name(self):
        return self.context.exercise_name

    @property
    def report_type(self):
        return config.checking.report_type

    @property
    def report_path(self):
        """The final report, present once the exercise is completed."""
        return os.path.join(self.context.output_path,
                            REPORT_NAME + ReportType.extension(
                                self.report_type))

    @property
    def finished(self):
        return self._finished

    def is_deadline_passed(self):
        return self.controller.clock() >= self.context.deadline

    def terminate(self):
        """Stop the exercise; a tick in progress is let finish."""
        if not self._finished:
            self.status = ExerciseStatus.TERMINATED
            self.logger.info("Terminating exercise %s.", self.name)
        self._finish()

    def _finish(self):
        self._finished = True
        self.ticker.disarm()

    def _set_status(self, status):
        """Record the phase a tick reached, unless the exercise has
        been stopped in the meantime.

        """
        if not self._finished:
            self.status = status

    def tick(self):
        """Process the submissions, as done at each instant.

        An unexpected error stops the tick with an error status. The
        exercise goes on with the next tick, unless the error happened
        during the final processing, which is never tried again.

        """
        if self._finished:
            return
        try:
            if self.is_deadline_passed():
                self.post_deadline_processing()
            else:
                self.pre_deadline_processing()
        except Exception:
            self.logger.critical("Unexpected error while processing "
                                 "exercise %s.", self.name, exc_info=True)
            self._set_status(ExerciseStatus.PROCESSING_ERROR)
            if self._final_pass:
                self._finish()

    def fetch(self, log):
        """Fetch the current submissions of the exercise.

        return (PreprocessingResult|None): what was fetched, or None if
            the submissions could not be fetched; the status then tells
            so.

        """
        self._set_status(ExerciseStatus.FETCHING)
        connection = self.controller.get_connection(
            self.context.connection_id)
        try:
            if connection is None:
                raise SubmissionFetchingException(
                    "Connection %s does not exist."
                    % self.context.connection_id)
            fetcher = get_fetcher(connection.connection_type)
            os.makedirs(self.context.fetch_path, exist_ok=True)
            return fetcher.fetch(connection, self.context.window,
                                 self.context.fetch_path, self.context)
        except (SubmissionFetchingException, GritError, ConfigError,
                KeyError, OSError) as error:
            log.error("Couldn't fetch the submissions: %r.", error)
            self._set_status(ExerciseStatus.FETCH_ERROR)
            return None

    def pre_deadline_processing(self):
        log = OperationAdapter(self.logger, "pre-deadline processing")
        log.info("Started processing exercise %s of %s.",
                 self.name, self.context.course_name)

        result = self.fetch(log)
        if result is None:
            return

        fresh = result.submissions_by_student
        to_process = [submission for student, submission in fresh.items()
                      if submission != self._checked.get(student)]
        self.submissions = dict(fresh)
        self._checked = {student: submission
                         for student, submission in self._checked.items()
                         if student in fresh}
        log.info("%d submissions, %d new or changed, %d students without "
                 "submission.", len(fresh), len(to_process),
                 len(result.students_without_submission))

        self._set_status(ExerciseStatus.PROCESSING)
        checked = []
        for submission in to_process:
            if self.process_submission(submission, log):
                self._checked[submission.student] = submission
                checked.append(submission)
            else:
                # Checked again at the next tick.
                self._checked.pop(submission.student, None)

        if not self.merge_reports(result, TEMP_REPORT_NAME, log):
            return
        if self._finished:
            log.info("Exercise %s was stopped while processing.", self.name)
            return

        if self.is_deadline_passed():
            log.info("The deadline passed while processing.")
            self.post_deadline_processing()
            return

        self._set_status(ExerciseStatus.SENDING_EMAILS)
        self.send_notifications(checked, result)
        self._set_status(ExerciseStatus.WAITING)

    def post_deadline_processing(self):
        self._final_pass = True
        log = OperationAdapter(self.logger, "post-deadline processing")
        log.info("Started final processing of exercise %s of %s.",
                 self.name, self.context.course_name)

        result = self.fetch(log)
        if result is None:
            self._finish()
            return

        self.submissions = dict(result.submissions_by_student)
        self._set_status(ExerciseStatus.PROCESSING)
        for submission in self.submissions.values():
            self.process_submission(submission, log)

        if not self.merge_reports(result, REPORT_NAME, log):
            return

        self.cleanup(log)
        self._set_status(ExerciseStatus.READY)
        self.notify_admin()
        log.info("Exercise %s is ready for download.", self.name)
        self._finish()

    def process_submission(self, submission, log):
        """Check a submission and write its score card.

        Whatever goes wrong with one submission is logged and the
        submission is skipped, so that the other students are still
        processed.

        submission (Submission): the submission to check.
        log (LoggerAdapter): where to log.

        return (bool): whether the submission was checked, False if it
            was skipped.

        """
        context = self.context
        try:
            self._remove_score_card(submission)
            clean_directory(context.bin_path)

            submission.plausible = check_plausibility(submission.location,
                                                      context.file_regex)
            if not submission.plausible:
                log.info("Submission of %s is not plausible.",
                         submission.student.email)
                return True

            compiler_output = self.compile_submission(submission)
            test_output = self.test_submission(compiler_output)
            submission.checking_result = CheckingResult(compiler_output,
                                                        test_output)
            self.controller.report_generator.generate_report(
                submission, context.temp_pdf_path, context.course_name,
                context.exercise_name, self.report_type,
                file_regex=context.file_regex)
            return True
        except Exception:
            log.error("Error while processing the submission of %s, it "
                      "was skipped.", submission.student.email,
                      exc_info=True)
            return False
        finally:
            try:
                clean_directory(context.bin_path)
            except OSError as error:
                log.warning("Couldn't clean %s: %s.", context.bin_path, error)

    def compile_submission(self, submission):
        context = self.context
        compiler_output = context.compile_checker.check_program(
            submission.location, context.bin_path, context.compiler_name,
            list(context.compiler_flags))
        if not compiler_output.compiler_invoked:
            self.logger.warning("The compiler could not be invoked for %s.",
                                submission.student.email)
        return compiler_output

    def test_submission(self, compiler_output: CompilerOutput) -> TestOutput:
        if self.context.tester is None or not compiler_output.clean:
            return TestOutput()
        return self.context.tester.test_submission(self.context.bin_path)

    def _remove_score_card(self, submission):
        basename = report_basename(submission.student)
        for extension in (".tex", ".pdf", ".txt", ".log", ".aux"):
            path = os.path.join(self.context.temp_pdf_path,
                                basename + extension)
            if os.path.exists(path):
                os.remove(path)

    def merge_reports(self, result: PreprocessingResult, filename, log):
        """Merge the score cards into the report called filename.

        A failure is fatal to the exercise.

        return (bool): whether the report was written.

        """
        context = self.context
        try:
            self.controller.report_generator.concatenate_reports(
                self.report_type, context.temp_pdf_path, context.output_path,
                context.course_name, context.exercise_name,
                result.students_without_submission, filename)
        except (ReportError, OSError) as error:
            log.critical("Couldn't merge the score cards: %s.", error)
            self._set_status(ExerciseStatus.REPORT_ERROR)
            self._finish()
            return False
        return True

    def cleanup(self, log):
        """Remove every working file, except the final report."""
        context = self.context
        log.info("Cleaning up exercise %s.", self.name)
        try:
            for path in (context.bin_path, context.temp_pdf_path,
                         context.fetch_path, context.tests_path):
                if os.path.isdir(path):
                    rmtree(path)
            clean_directory(context.output_path,
                            keep=frozenset([os.path.basename(
                                self.report_path)]))
        except OSError as error:
            log.error("Error while cleaning up: %s.", error)

    def _connection_type(self):
        connection = self.controller.get_connection(
            self.context.connection_id)
        return connection.connection_type if connection is not None else None

    def send_notifications(self, changed, result: PreprocessingResult):
        """Tell students about their submissions.

        changed ([Submission]): the submissions checked in this tick.
        result (PreprocessingResult): the outcome of the fetch.

        """
        context = self.context
        notifier = self.controller.notifier
        deadline = context.deadline_string

        if self._connection_type() == ConnectionType.MAIL:
            for submission in changed:
                notifier.notify(submission.student.email, received_message(
                    context.exercise_name, submission.student, deadline))

        for submission in changed:
            message = self.problem_message(submission)
            if message is not None:
                notifier.notify(submission.student.email, message)

        reminders = self.due_reminders()
        if reminders:
            self._reminded.update(reminders)
            for student in result.students_without_submission:
                notifier.notify(student.email, no_submission_message(
                    context.exercise_name, student, deadline))

        for address in result.invalid_subject_senders:
            notifier.notify(address, invalid_subject_message(
                context.course_name, context.exercise_name,
                subject_tag(context.course_name, context.exercise_name)))

    def problem_message(self, submission: Submission):
        """Return the mail telling the student what is wrong with the
        submission, or None if nothing is.

        """
        context = self.context
        if not submission.plausible:
            return not_plausible_message(
                context.exercise_name, submission.student,
                context.language.missing_files_message,
                context.deadline_string)
        result = submission.checking_result
        if result is not None and not result.compiler_output.clean:
            return does_not_compile_message(
                context.exercise_name, submission.student,
                result.compiler_output, context.deadline_string)
        return None

    def due_reminders(self):
        """Return the reminders (times before the deadline) due now and
        not sent yet.

        A reminder is due at the first tick at or after its time before
        the deadline, that is when now plus that time falls in
        [deadline, deadline + period).

        """
        now = self.controller.clock()
        deadline = self.context.deadline
        return [reminder for reminder in REMINDERS
                if reminder not in self._reminded
                and deadline <= now + reminder
                < deadline + self.context.period]

    def notify_admin(self):
        admin = config.admin
        if not admin.email:
            return
        self.controller.notifier.notify(
            admin.email,
            admin_message(admin.name, self.context.course_name,
                          self.context.exercise_name, self.id),
            attachment=self.report_path)
