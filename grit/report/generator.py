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

"""Reports on the submissions of an exercise.

Each checked submission gets a score card (a LaTeX document rendered to
PDF, or a plain text file); the score cards of an exercise are then
merged into a single report behind a title page listing the students
who did not submit anything.

"""

import logging
import os
import re

from PyPDF2 import PdfMerger, PdfReader
from PyPDF2.errors import PyPdfError
from tornado import template

from grit import config
from grit.errors import GritError
from grit.util import read_text
from gritcommon.commands import pretty_print_cmdline, run_command
from gritcommon.datetime import format_local_datetime, make_datetime
from gritcommon.tex import escape_tex_normal, escape_tex_tt, \
    escape_tex_verbatim


__all__ = ["ReportError", "ReportGenerator", "ReportType"]


logger = logging.getLogger(__name__)


class ReportType:
    PDF = "PDF"
    PLAIN = "PLAIN"

    @staticmethod
    def extension(report_type: str) -> str:
        return ".txt" if report_type == ReportType.PLAIN else ".pdf"


class ReportError(GritError):
    """A report could not be produced."""

    pass


SCORE_CARD_SUFFIX = ".report"
LATEX_LEFTOVERS = (".aux", ".log", ".out")


def report_basename(student) -> str:
    """Return the file name (without extension) of a student's score card."""
    return re.sub(r"[^\w@.+-]", "_", student.email) + SCORE_CARD_SUFFIX


class ReportGenerator:
    """Render score cards and merge them into the report of an exercise."""

    def __init__(self, template_dir: str | None = None,
                 pdflatex_timeout: float | None = None):
        if template_dir is None:
            template_dir = os.path.join(os.path.dirname(__file__),
                                        "templates")
        if pdflatex_timeout is None:
            pdflatex_timeout = config.checking.pdflatex_timeout_s
        self.template_loader = template.Loader(template_dir, autoescape=None)
        self.pdflatex_timeout = pdflatex_timeout

    @staticmethod
    def _namespace(**kwargs) -> dict:
        kwargs.update(
            tex=escape_tex_normal,
            tt=escape_tex_tt,
            verbatim=lambda s: escape_tex_verbatim(s, "lstlisting"),
            date=format_local_datetime(make_datetime()))
        return kwargs

    @staticmethod
    def collect_sources(location: str, file_regex: str) -> list[tuple[str, str]]:
        """Return the relative path and the content of every source file
        of a submission.

        """
        pattern = re.compile(file_regex)
        sources = []
        for dirpath, dirnames, filenames in os.walk(location):
            dirnames.sort()
            for filename in sorted(filenames):
                if not pattern.fullmatch(filename):
                    continue
                path = os.path.join(dirpath, filename)
                sources.append((os.path.relpath(path, location),
                                read_text(path)))
        return sources

    def generate_report(self, submission, directory: str, course_name: str,
                        exercise_name: str, report_type: str,
                        file_regex: str = r".*") -> str:
        """Write the score card of a checked submission.

        submission (Submission): a submission with a checking result.
        directory: where to write the score card.
        course_name, exercise_name: shown in the header.
        report_type: a ReportType.
        file_regex: the source files to list.

        return: the path of the score card.

        raise (ReportError): if the score card cannot be rendered.
        raise (OSError): if directory cannot be written.

        """
        result = submission.checking_result
        if result is None:
            raise ReportError("%s was not checked." % (submission,))
        os.makedirs(directory, exist_ok=True)
        namespace = self._namespace(
            student=submission.student,
            course_name=course_name,
            exercise_name=exercise_name,
            compiler_output=result.compiler_output,
            test_output=result.test_output,
            sources=self.collect_sources(submission.location, file_regex))
        basename = report_basename(submission.student)

        if report_type == ReportType.PLAIN:
            path = os.path.join(directory, basename + ".txt")
            with open(path, "wb") as f:
                f.write(self.template_loader.load("score_card.txt")
                        .generate(**namespace))
            return path

        tex = os.path.join(directory, basename + ".tex")
        with open(tex, "wb") as f:
            f.write(self.template_loader.load("score_card.tex")
                    .generate(**namespace))
        return self.run_pdflatex(tex)

    def run_pdflatex(self, tex: str) -> str:
        """Render a LaTeX file to the PDF next to it.

        pdflatex exits with an error for any problem in the document,
        even when it managed to produce a PDF anyway: only a missing
        PDF is an error.

        return: the path of the PDF.

        raise (ReportError): if no PDF was produced.

        """
        directory = os.path.dirname(tex)
        root, _ = os.path.splitext(tex)
        pdf = root + ".pdf"
        if os.path.exists(pdf):
            os.remove(pdf)
        cmd = ["pdflatex", "-interaction", "nonstopmode",
               os.path.basename(tex)]
        ret = run_command(cmd, cwd=directory, timeout=self.pdflatex_timeout)
        if not os.path.exists(pdf):
            raise ReportError(
                "Failed to create PDF with command: %s (error %s)"
                % (pretty_print_cmdline(cmd), ret.returncode))
        if not ret.success:
            logger.warning("pdflatex complained about %s, see %s.log.",
                           tex, root)
        else:
            for extension in LATEX_LEFTOVERS:
                try:
                    os.remove(root + extension)
                except FileNotFoundError:
                    pass
        return pdf

    def concatenate_pdf_reports(self, src_dir: str, out_dir: str,
                                course_name: str, exercise_name: str,
                                missing_students: list,
                                filename: str) -> str:
        """Merge the PDF score cards in src_dir behind a title page.

        src_dir: the directory with the score cards.
        out_dir: where to write the merged report.
        course_name, exercise_name: shown on the title page.
        missing_students ([Student]): listed on the title page.
        filename: the name of the report, without extension.

        return: the path of the merged report.

        raise (ReportError): if the title page cannot be rendered or
            the score cards cannot be merged.
        raise (OSError): if a file cannot be read or written.

        """
        os.makedirs(src_dir, exist_ok=True)
        os.makedirs(out_dir, exist_ok=True)
        score_cards = sorted(
            os.path.join(src_dir, name) for name in os.listdir(src_dir)
            if name.endswith(SCORE_CARD_SUFFIX + ".pdf"))
        logger.info("Merging %d score cards into %s.pdf.",
                    len(score_cards), filename)

        title_tex = os.path.join(src_dir, "title_page.tex")
        with open(title_tex, "wb") as f:
            f.write(self.template_loader.load("report_title.tex").generate(
                **self._namespace(
                    course_name=course_name, exercise_name=exercise_name,
                    missing_students=sorted(missing_students,
                                            key=lambda s: s.email),
                    submission_count=len(score_cards))))
        title_pdf = self.run_pdflatex(title_tex)

        result = os.path.join(out_dir, filename + ".pdf")
        pdfmerger = PdfMerger()
        try:
            for pdf in [title_pdf] + score_cards:
                with open(pdf, "rb") as file_:
                    pdfmerger.append(PdfReader(file_))
            with open(result, "wb") as file_:
                pdfmerger.write(file_)
        except PyPdfError as error:
            raise ReportError("Cannot merge the score cards: %s"
                              % error) from error
        finally:
            pdfmerger.close()
        return result

    def concatenate_plain_reports(self, src_dir: str, out_dir: str,
                                  course_name: str, exercise_name: str,
                                  missing_students: list,
                                  filename: str) -> str:
        """Join the plain text score cards in src_dir, see
        concatenate_pdf_reports.

        """
        os.makedirs(src_dir, exist_ok=True)
        os.makedirs(out_dir, exist_ok=True)
        score_cards = sorted(
            os.path.join(src_dir, name) for name in os.listdir(src_dir)
            if name.endswith(SCORE_CARD_SUFFIX + ".txt"))
        result = os.path.join(out_dir, filename + ".txt")
        with open(result, "w", encoding="utf-8") as out:
            out.write("%s - %s\n\n" % (course_name, exercise_name))
            out.write("Students without submission:\n")
            for student in sorted(missing_students, key=lambda s: s.email):
                out.write("  %s <%s>\n" % (student.display_name,
                                           student.email))
            for score_card in score_cards:
                out.write("\n" + "=" * 72 + "\n")
                with open(score_card, encoding="utf-8") as f:
                    out.write(f.read())
        return result

    def concatenate_reports(self, report_type: str, *args, **kwargs) -> str:
        """Merge the score cards of the given ReportType."""
        if report_type == ReportType.PLAIN:
            return self.concatenate_plain_reports(*args, **kwargs)
        return self.concatenate_pdf_reports(*args, **kwargs)
