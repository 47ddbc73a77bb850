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

"""Fetching submissions mailed to an IMAP inbox.

Students send their submission as attachments of a mail whose subject
contains "[<course>-<exercise>]". Unread mails received during the
exercise from the allowed domain are read, their attachments saved
under <fetch>/<course>/<sender>/<exercise>/ and the mails marked as
read. Since saved attachments are kept, every fetch sees the newest
submission of every student who ever mailed one.

"""

import email
import email.message
import email.policy
import email.utils
import imaplib
import logging
import os
import re
from datetime import timedelta, timezone

from grit import config, rmtree
from grit.errors import GritError
from grit.preprocess.connection import ConnectionType
from grit.preprocess.fetch import Fetcher, SubmissionFetchingException, \
    underscore
from grit.preprocess.submission import PreprocessingResult, Student, \
    Submission
from grit.preprocess.tokenize import SubmissionStructure, Tokenizer, \
    TOPLEVEL, SUBMISSION


__all__ = ["MailFetcher", "subject_tag"]


logger = logging.getLogger(__name__)


EMAIL_ADDRESS = re.compile(
    r"[_A-Za-z0-9\-+]+(\.[_A-Za-z0-9\-]+)*@[A-Za-z0-9\-]+"
    r"(\.[A-Za-z0-9]+)*(\.[A-Za-z]{2,})")
IMAP_PORT = 143
IMAPS_PORT = 993


def subject_tag(course_name: str, exercise_name: str) -> str:
    """Return what the subject of a submission mail must contain."""
    return "[%s-%s]" % (course_name, exercise_name)


def imap_date(when) -> str:
    """Format a date for an IMAP SEARCH criterion."""
    return when.strftime("%d-%b-%Y")


def _quote(value: str) -> str:
    return '"%s"' % value.replace("\\", "\\\\").replace('"', '\\"')


class MailFetcher(Fetcher):
    """Fetch submissions from the inbox of a mail account."""

    @property
    def connection_type(self):
        """See Fetcher.connection_type."""
        return ConnectionType.MAIL

    @staticmethod
    def connect(connection) -> imaplib.IMAP4:
        """Open and authenticate an IMAP session.

        The location of the connection is "host" or "host:port"; the
        protocol "imap" means STARTTLS, anything else implicit TLS.

        """
        host, _, port = connection.location.partition(":")
        timeout = config.fetching.imap_timeout_s
        if connection.protocol.lower() == "imap":
            imap = imaplib.IMAP4(host, int(port or IMAP_PORT),
                                 timeout=timeout)
            imap.starttls()
        else:
            imap = imaplib.IMAP4_SSL(host, int(port or IMAPS_PORT),
                                     timeout=timeout)
        imap.login(connection.username, connection.password)
        return imap

    def fetch(self, connection, window, target_dir, context):
        """See Fetcher.fetch."""
        course_dir = os.path.join(target_dir,
                                  underscore(context.course_name))
        tag = subject_tag(context.course_name, context.exercise_name)
        try:
            imap = self.connect(connection)
        except (imaplib.IMAP4.error, OSError) as error:
            raise SubmissionFetchingException(
                "Cannot log in to %s: %s" % (connection.location, error)) \
                from error

        try:
            imap.select("INBOX")
            messages = self.search(imap, connection, window,
                                   ["SUBJECT", _quote(tag)])
            for _, sender, message in messages:
                self.save_attachments(message, sender, course_dir,
                                      context.exercise_name)
            invalid = self.search(imap, connection, window,
                                  ["NOT", "SUBJECT", _quote(tag)])
            invalid_senders = []
            for _, sender, _ in invalid:
                if sender not in invalid_senders:
                    invalid_senders.append(sender)
            for number, _, _ in messages + invalid:
                imap.store(number, "+FLAGS", "\\Seen")
        except (imaplib.IMAP4.error, OSError) as error:
            raise SubmissionFetchingException(
                "Error while reading mails from %s: %s"
                % (connection.location, error)) from error
        finally:
            try:
                imap.logout()
            except (imaplib.IMAP4.error, OSError):
                pass

        result = self.collect_submissions(course_dir, context)
        result.invalid_subject_senders = invalid_senders
        return result

    @staticmethod
    def search(imap, connection, window, criteria: list[str]) \
            -> list[tuple[bytes, str, email.message.EmailMessage]]:
        """Return the unread mails in window from the allowed domain
        matching criteria, oldest first.

        return: for each mail its number, its sender and the message.

        """
        start, deadline = window
        # SINCE and BEFORE have the granularity of a day: the exact
        # time is checked on the Date header.
        status, data = imap.search(
            None, "UNSEEN", "SINCE", imap_date(start),
            "BEFORE", imap_date(deadline + timedelta(days=1)), *criteria)
        if status != "OK":
            raise imaplib.IMAP4.error("SEARCH failed: %r" % (data,))

        found = []
        for number in data[0].split():
            status, parts = imap.fetch(number, "(BODY.PEEK[])")
            if status != "OK" or not parts or not isinstance(parts[0],
                                                             tuple):
                logger.warning("Cannot read mail %s.", number)
                continue
            message = email.message_from_bytes(parts[0][1],
                                               policy=email.policy.default)
            _, sender = email.utils.parseaddr(message.get("From", ""))
            sender = sender.lower()
            domain = sender.rpartition("@")[2]
            if connection.allowed_domain and \
                    domain != connection.allowed_domain.lower():
                logger.info("Ignoring mail from %s.", sender)
                continue
            try:
                sent = email.utils.parsedate_to_datetime(message["Date"])
            except (TypeError, ValueError):
                logger.info("Ignoring mail from %s without a valid date.",
                            sender)
                continue
            if sent.tzinfo is not None:
                sent = sent.astimezone(timezone.utc).replace(tzinfo=None)
            if not start <= sent <= deadline:
                continue
            found.append((sent, number, sender, message))
        found.sort(key=lambda item: item[0])
        return [(number, sender, message)
                for _, number, sender, message in found]

    @staticmethod
    def save_attachments(message, sender: str, course_dir: str,
                         exercise_name: str):
        """Store the attachments of message as the submission of sender,
        replacing the previous one.

        """
        attachments = [part for part in message.iter_attachments()
                       if part.get_filename()]
        if not attachments:
            logger.info("Mail from %s has no attachments.", sender)
            return
        directory = os.path.join(course_dir, sender,
                                 underscore(exercise_name))
        if os.path.isdir(directory):
            rmtree(directory)
        os.makedirs(directory)
        for part in attachments:
            filename = underscore(os.path.basename(part.get_filename()))
            with open(os.path.join(directory, filename), "wb") as f:
                f.write(part.get_payload(decode=True) or b"")
        logger.info("Saved %d attachments from %s.", len(attachments),
                    sender)

    @staticmethod
    def collect_submissions(course_dir: str, context) -> PreprocessingResult:
        result = PreprocessingResult()
        if not os.path.isdir(course_dir):
            logger.info("No submissions were mailed yet.")
            return result
        structure = SubmissionStructure(
            [TOPLEVEL, ".*@.*", re.escape(underscore(context.exercise_name)),
             SUBMISSION])
        tokenizer = Tokenizer(context.file_regex, context.archive_regex)
        try:
            locations = tokenizer.explore_submission_directory(structure,
                                                               course_dir)
        except GritError as error:
            raise SubmissionFetchingException(
                "Cannot explore the mailed submissions: %s" % error) \
                from error
        for location in locations:
            match = EMAIL_ADDRESS.search(os.path.relpath(location,
                                                         course_dir))
            if match is None:
                logger.warning("No email address in %s.", location)
                continue
            address = match.group(0)
            student = Student(address, address.split("@")[0])
            result.submissions_by_student[student] = \
                Submission.from_location(student, location)
        return result

    def check_connection(self, connection):
        """See Fetcher.check_connection."""
        try:
            imap = self.connect(connection)
            imap.logout()
        except (imaplib.IMAP4.error, OSError) as error:
            logger.warning("Cannot log in to %s: %s", connection.location,
                           error)
            return False
        return True
