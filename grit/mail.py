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

"""Mails sent to students and administrators.

Sending is best effort: a mail that cannot be delivered is logged and
otherwise forgotten, it never interrupts the processing of an exercise.

"""

import logging
import mimetypes
import os
import smtplib
from email.message import EmailMessage

from grit import config


__all__ = [
    "Notifier",
    "received_message", "not_plausible_message",
    "does_not_compile_message", "no_submission_message",
    "invalid_subject_message", "admin_message",
]


logger = logging.getLogger(__name__)


def add_attachment(mail: EmailMessage, path: str) -> None:
    """Add the file at path as attachment to mail."""
    ctype, encoding = mimetypes.guess_type(path)
    if ctype is None or encoding is not None:
        ctype = "application/octet-stream"
    maintype, subtype = ctype.split("/", 1)
    with open(path, "rb") as fp:
        mail.add_attachment(fp.read(),
                            maintype=maintype,
                            subtype=subtype,
                            filename=os.path.basename(path))


class Notifier:
    """Send mails through the configured SMTP server.

    mail_config (MailConfig|None): the server to use, defaults to the
        mail section of the configuration.

    """

    def __init__(self, mail_config=None):
        self.config = mail_config if mail_config is not None \
            else config.mail

    @property
    def sender(self) -> str:
        return self.config.sender_address

    @staticmethod
    def construct_email(sender: str, recipient: str, subject: str,
                        body: str, attachment: str | None = None
                        ) -> EmailMessage:
        mail = EmailMessage()
        mail.set_content(body)
        mail["Subject"] = subject
        mail["From"] = sender
        mail["To"] = recipient
        if attachment is not None:
            add_attachment(mail, attachment)
        return mail

    def _connect(self) -> smtplib.SMTP:
        if self.config.smtp_port == 465:
            smtp = smtplib.SMTP_SSL(self.config.smtp_host,
                                    self.config.smtp_port,
                                    timeout=self.config.timeout_s)
        else:
            smtp = smtplib.SMTP(self.config.smtp_host, self.config.smtp_port,
                                timeout=self.config.timeout_s)
            smtp.starttls()
        if self.config.username:
            smtp.login(self.config.username, self.config.password)
        return smtp

    def send(self, sender: str, recipient: str, subject: str, body: str,
             attachment: str | None = None) -> bool:
        """Send a mail.

        sender: the From address; nothing is sent when empty.
        recipient: the To address.
        subject: the subject line.
        body: the plain text content.
        attachment: the path of a file to attach, if any.

        return: whether the mail was handed to the server.

        """
        if not sender:
            logger.debug("No sender address configured, not mailing %s.",
                         recipient)
            return False
        try:
            mail = self.construct_email(sender, recipient, subject, body,
                                        attachment)
            with self._connect() as smtp:
                smtp.send_message(mail)
        except (OSError, smtplib.SMTPException) as error:
            logger.error("Could not send mail %r to %s: %s.",
                         subject, recipient, error)
            return False
        logger.info("Sent mail %r to %s.", subject, recipient)
        return True

    def notify(self, recipient: str, message: tuple[str, str],
               attachment: str | None = None) -> bool:
        """Send a (subject, body) pair built by one of the *_message
        functions from the configured sender.

        """
        subject, body = message
        return self.send(self.sender, recipient, subject, body, attachment)


# Message builders. Each returns a (subject, body) pair.

def _student_message(exercise_name, student, problem, deadline):
    subject = "[GRIT] %s" % exercise_name
    body = ("Hello %s,\n\n"
            "there is a problem with your submission for %s:\n\n"
            "%s\n\n"
            "You can resubmit until %s.\n\n"
            "This is an automatically generated message.\n"
            % (student.display_name, exercise_name, problem, deadline))
    return subject, body


def received_message(exercise_name, student, deadline):
    subject = "[GRIT] %s: submission received" % exercise_name
    body = ("Hello %s,\n\n"
            "we received your submission for %s. It will be checked "
            "again at the deadline, %s.\n\n"
            "This is an automatically generated message.\n"
            % (student.display_name, exercise_name, deadline))
    return subject, body


def not_plausible_message(exercise_name, student, missing_files, deadline):
    return _student_message(exercise_name, student, missing_files, deadline)


def does_not_compile_message(exercise_name, student, compiler_output,
                             deadline):
    sections = ["Your submission does not compile."]
    for title, notes in (("Compiler errors", compiler_output.errors),
                         ("Compiler warnings", compiler_output.warnings),
                         ("Compiler infos", compiler_output.infos)):
        if notes:
            sections.append("%s:\n\n%s" % (title, "\n\n".join(notes)))
    return _student_message(exercise_name, student, "\n\n".join(sections),
                            deadline)


def no_submission_message(exercise_name, student, deadline):
    return _student_message(exercise_name, student,
                            "You have not submitted anything yet.", deadline)


def invalid_subject_message(course_name, exercise_name, expected_subject):
    subject = "[GRIT] %s: unrecognized subject" % exercise_name
    body = ("Hello,\n\n"
            "we received a mail from you that looks like a submission for "
            "%s, but its subject does not name the exercise. Submissions "
            "for %s must have a subject containing %s.\n\n"
            "This is an automatically generated message.\n"
            % (course_name, exercise_name, expected_subject))
    return subject, body


def admin_message(admin_name, course_name, exercise_name, exercise_id):
    subject = "[GRIT] %s: report for %s" % (course_name, exercise_name)
    body = ("Hello %s,\n\n"
            "the deadline of exercise %s (id %s) of %s has passed and all "
            "submissions have been checked. The report is attached.\n\n"
            "This is an automatically generated message.\n"
            % (admin_name, exercise_name, exercise_id, course_name))
    return subject, body
