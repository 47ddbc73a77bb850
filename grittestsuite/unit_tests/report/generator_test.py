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

"""Tests for the score cards and the reports."""

import os
import unittest
from unittest.mock import patch

from PyPDF2 import PdfReader, PdfWriter

from grit.checking.output import CheckingResult, CompilerOutput, \
    TestOutput, TestResult
from grit.preprocess.submission import Student, Submission
from grit.report.generator import ReportError, ReportGenerator, \
    ReportType, report_basename
from gritcommon.commands import CommandResult
from grittestsuite.unit_tests.filesystemmixin import FileSystemMixin


ALICE = Student("alice@uni.de", "Alice")
BOB = Student("bob@uni.de", "Bob")


def write_blank_pdf(path, pages=1):
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=200, height=200)
    with open(path, "wb") as f:
        writer.write(f)


def fake_pdflatex(returncode=0, produce=True):
    """Stand in for pdflatex, writing a one page PDF for the document."""
    def run(command, cwd=None, timeout=None):
        root = os.path.splitext(command[-1])[0]
        if produce:
            write_blank_pdf(os.path.join(cwd, root + ".pdf"))
        for extension in (".aux", ".log"):
            with open(os.path.join(cwd, root + extension), "w") as f:
                f.write("")
        return CommandResult(True, False, returncode, "", "")
    return run


class TestReportBasename(unittest.TestCase):

    def test_basename(self):
        self.assertEqual(report_basename(ALICE), "alice@uni.de.report")
        self.assertEqual(report_basename(Student("o'neil/x@uni.de")),
                         "o_neil_x@uni.de.report")


class ReportTestCase(FileSystemMixin, unittest.TestCase):

    def setUp(self):
        super().setUp()
        self.generator = ReportGenerator(pdflatex_timeout=5)
        self.cards = self.makedirs("tempPdf")
        self.output = self.makedirs("output")

    def checked_submission(self, student, compiler_output=None,
                           test_output=None):
        location = self.makedirs(os.path.join("fetch", student.email))
        self.write_file(os.path.join("fetch", student.email, "Main.java"),
                        b"class Main { /* 100% & more */ }\n")
        self.write_file(os.path.join("fetch", student.email, "notes.txt"),
                        b"not code")
        submission = Submission(student, location, "sha")
        submission.plausible = True
        submission.checking_result = CheckingResult(
            compiler_output or CompilerOutput(compiler_invoked=True,
                                              clean=True),
            test_output or TestOutput())
        return submission


class TestPlainReports(ReportTestCase):

    def test_score_card(self):
        tests = TestOutput((TestResult("MainTest", 3,
                                       ("testAdd(MainTest): failed\n",)),),
                           did_test=True)
        submission = self.checked_submission(ALICE, test_output=tests)
        path = self.generator.generate_report(
            submission, self.cards, "Programming 1", "ex1", ReportType.PLAIN,
            file_regex=r".+\.java")
        self.assertEqual(path, os.path.join(self.cards,
                                            "alice@uni.de.report.txt"))
        with open(path, encoding="utf-8") as f:
            card = f.read()
        self.assertIn("Alice <alice@uni.de>", card)
        self.assertIn("Programming 1, ex1", card)
        self.assertIn("Submission compiles: YES", card)
        self.assertIn("2 of 3 tests passed", card)
        self.assertIn("testAdd(MainTest): failed", card)
        self.assertIn("--- Main.java ---", card)
        self.assertNotIn("notes.txt", card)

    def test_not_compiling(self):
        output = CompilerOutput(compiler_invoked=True, clean=False,
                                errors=("Main.java:1: error: oops\n",))
        submission = self.checked_submission(ALICE, compiler_output=output)
        path = self.generator.generate_report(
            submission, self.cards, "Programming 1", "ex1", ReportType.PLAIN)
        with open(path, encoding="utf-8") as f:
            card = f.read()
        self.assertIn("Submission compiles: NO", card)
        self.assertIn("Main.java:1: error: oops", card)

    def test_unchecked_submission(self):
        submission = Submission(ALICE, self.base_dir, "sha")
        with self.assertRaises(ReportError):
            self.generator.generate_report(submission, self.cards, "c", "e",
                                           ReportType.PLAIN)

    def test_concatenate(self):
        for student in (BOB, ALICE):
            self.generator.generate_report(
                self.checked_submission(student), self.cards,
                "Programming 1", "ex1", ReportType.PLAIN)
        path = self.generator.concatenate_reports(
            ReportType.PLAIN, self.cards, self.output, "Programming 1",
            "ex1", [Student("carol@uni.de", "Carol")], "report")
        self.assertEqual(path, os.path.join(self.output, "report.txt"))
        with open(path, encoding="utf-8") as f:
            report = f.read()
        self.assertIn("Carol <carol@uni.de>", report)
        self.assertLess(report.index("Alice <alice@uni.de>"),
                        report.index("Bob <bob@uni.de>"))


class TestPdfReports(ReportTestCase):

    @patch("grit.report.generator.run_command")
    def test_score_card(self, run_command):
        run_command.side_effect = fake_pdflatex()
        path = self.generator.generate_report(
            self.checked_submission(ALICE), self.cards, "Programming 1",
            "ex1", ReportType.PDF, file_regex=r".+\.java")
        root = os.path.join(self.cards, "alice@uni.de.report")
        self.assertEqual(path, root + ".pdf")
        self.assertEqual(run_command.call_args.args[0],
                         ["pdflatex", "-interaction", "nonstopmode",
                          "alice@uni.de.report.tex"])
        self.assertEqual(run_command.call_args.kwargs["cwd"], self.cards)
        with open(root + ".tex", encoding="utf-8") as f:
            tex = f.read()
        self.assertIn("\\begin{document}", tex)
        self.assertIn("100% & more", tex)
        self.assertIn("Programming 1", tex)
        self.assertFalse(os.path.exists(root + ".aux"))
        self.assertFalse(os.path.exists(root + ".log"))

    @patch("grit.report.generator.run_command")
    def test_pdflatex_complaints_tolerated(self, run_command):
        run_command.side_effect = fake_pdflatex(returncode=1)
        path = self.generator.generate_report(
            self.checked_submission(ALICE), self.cards, "c", "e",
            ReportType.PDF)
        self.assertTrue(os.path.exists(path))
        # The log is kept for inspection.
        self.assertTrue(os.path.exists(
            os.path.join(self.cards, "alice@uni.de.report.log")))

    @patch("grit.report.generator.run_command")
    def test_no_pdf(self, run_command):
        run_command.side_effect = fake_pdflatex(returncode=1, produce=False)
        with self.assertRaises(ReportError):
            self.generator.generate_report(
                self.checked_submission(ALICE), self.cards, "c", "e",
                ReportType.PDF)

    @patch("grit.report.generator.run_command")
    def test_concatenate(self, run_command):
        run_command.side_effect = fake_pdflatex()
        write_blank_pdf(os.path.join(self.cards, "alice@uni.de.report.pdf"),
                        pages=2)
        write_blank_pdf(os.path.join(self.cards, "bob@uni.de.report.pdf"))
        path = self.generator.concatenate_reports(
            ReportType.PDF, self.cards, self.output, "Programming 1", "ex1",
            [Student("carol@uni.de", "Carol")], "tempReport")
        self.assertEqual(path, os.path.join(self.output, "tempReport.pdf"))
        self.assertEqual(len(PdfReader(path).pages), 4)
        with open(os.path.join(self.cards, "title_page.tex"),
                  encoding="utf-8") as f:
            title = f.read()
        self.assertIn("carol@uni.de", title)

    @patch("grit.report.generator.run_command")
    def test_concatenate_broken_card(self, run_command):
        run_command.side_effect = fake_pdflatex()
        self.write_file("tempPdf/alice@uni.de.report.pdf", b"not a pdf")
        with self.assertRaises(ReportError):
            self.generator.concatenate_reports(
                ReportType.PDF, self.cards, self.output, "c", "e", [],
                "report")


if __name__ == "__main__":
    unittest.main()
