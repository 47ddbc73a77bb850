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

"""Tests for the mail fetcher."""

import imaplib
import os
import unittest
from datetime import datetime, timezone
from email.message import EmailMessage
from email.utils import format_datetime
from types import SimpleNamespace
from unittest.mock import Mock, call, patch

from grit.preprocess.connection import Connection, ConnectionType
from grit.preprocess.fetch import SubmissionFetchingException
from grit.preprocess.fetch.mail import MailFetcher, subject_tag
from grit.preprocess.submission import Student
from grittestsuite.unit_tests.filesystemmixin import FileSystemMixin


WINDOW = (datetime(2014, 4, 1, 8, 0), datetime(2014, 4, 8, 12, 30))
CONNECTION = Connection(id=2, name="mail", connection_type=ConnectionType.MAIL,
                        location="imap.uni.de", protocol="imaps",
                        username="grit", password="secret",
                        allowed_domain="uni.de")
CONTEXT = SimpleNamespace(course_name="Programming 1", exercise_name="ex1",
                          file_regex=r".+\.[Jj][Aa][Vv][Aa]",
                          archive_regex=r".+\.[Zz][Ii][Pp]")


def make_mail(sender, subject, sent, attachment=None):
    message = EmailMessage()
    message["From"] = sender
    message["To"] = "grit@uni.de"
    message["Subject"] = subject
    message["Date"] = format_datetime(sent.replace(tzinfo=timezone.utc))
    message.set_content("Here it is.")
    if attachment is not None:
        name, content = attachment
        message.add_attachment(content, maintype="application",
                               subtype="octet-stream", filename=name)
    return message.as_bytes()


class FakeImap:
    """Answer SEARCH and FETCH from a fixed set of mails."""

    def __init__(self, tagged, untagged):
        self.mails = dict(tagged)
        self.mails.update(untagged)
        self.results = [b" ".join(tagged), b" ".join(untagged)]
        self.select = Mock()
        self.store = Mock()
        self.logout = Mock()
        self.searches = []

    def search(self, charset, *criteria):
        self.searches.append(criteria)
        return "OK", [self.results[len(self.searches) - 1]]

    def fetch(self, number, parts):
        return "OK", [(number + b" (BODY[] {1}", self.mails[number]), b")"]


class TestSubjectTag(unittest.TestCase):

    def test_tag(self):
        self.assertEqual(subject_tag("Programming 1", "ex1"),
                         "[Programming 1-ex1]")


class TestMailFetcher(FileSystemMixin, unittest.TestCase):

    def setUp(self):
        super().setUp()
        self.fetcher = MailFetcher()
        self.imap = FakeImap(
            {b"1": make_mail("Alice <Alice@uni.de>",
                             "Solution [Programming 1-ex1]",
                             datetime(2014, 4, 2, 10, 0),
                             ("Main Class.java", b"class MainClass {}")),
             b"3": make_mail("eve@elsewhere.org",
                             "[Programming 1-ex1]",
                             datetime(2014, 4, 2, 11, 0),
                             ("Main.java", b"class Main {}"))},
            {b"2": make_mail("bob@uni.de", "my homework",
                             datetime(2014, 4, 3, 9, 0))})
        patcher = patch.object(MailFetcher, "connect",
                               return_value=self.imap)
        self.connect = patcher.start()
        self.addCleanup(patcher.stop)

    def test_fetch(self):
        result = self.fetcher.fetch(CONNECTION, WINDOW, self.base_dir,
                                    CONTEXT)

        alice = Student("alice@uni.de")
        self.assertEqual(list(result.submissions_by_student), [alice])
        location = self.get_path("Programming_1/alice@uni.de/ex1")
        self.assertEqual(result.submissions_by_student[alice].location,
                         location)
        self.assertEqual(os.listdir(location), ["Main_Class.java"])
        self.assertEqual(result.invalid_subject_senders, ["bob@uni.de"])
        self.assertFalse(os.path.exists(
            self.get_path("Programming_1/eve@elsewhere.org")))

        self.assertEqual(self.imap.searches[0][:5],
                         ("UNSEEN", "SINCE", "01-Apr-2014",
                          "BEFORE", "09-Apr-2014"))
        self.assertEqual(self.imap.searches[0][5:],
                         ("SUBJECT", '"[Programming 1-ex1]"'))
        self.assertEqual(self.imap.searches[1][5:],
                         ("NOT", "SUBJECT", '"[Programming 1-ex1]"'))
        self.assertEqual(self.imap.store.call_args_list,
                         [call(b"1", "+FLAGS", "\\Seen"),
                          call(b"2", "+FLAGS", "\\Seen")])
        self.imap.logout.assert_called_once_with()

    def test_mail_outside_window_ignored(self):
        self.imap.mails[b"1"] = make_mail(
            "alice@uni.de", "[Programming 1-ex1]",
            datetime(2014, 4, 8, 12, 31), ("Main.java", b""))
        result = self.fetcher.fetch(CONNECTION, WINDOW, self.base_dir,
                                    CONTEXT)
        self.assertEqual(result.submissions_by_student, {})

    def test_nothing_mailed(self):
        self.imap.results = [b"", b""]
        result = self.fetcher.fetch(CONNECTION, WINDOW, self.base_dir,
                                    CONTEXT)
        self.assertEqual(result.submissions_by_student, {})
        self.assertEqual(result.invalid_subject_senders, [])

    def test_login_failure(self):
        self.connect.side_effect = imaplib.IMAP4.error("LOGIN failed")
        with self.assertRaises(SubmissionFetchingException):
            self.fetcher.fetch(CONNECTION, WINDOW, self.base_dir, CONTEXT)

    def test_check_connection(self):
        self.assertTrue(self.fetcher.check_connection(CONNECTION))
        self.connect.side_effect = OSError("unreachable")
        self.assertFalse(self.fetcher.check_connection(CONNECTION))


if __name__ == "__main__":
    unittest.main()
