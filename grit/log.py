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

"""Logging set-up shared by the grading service and the scripts.

Importing this module installs a colored shell handler on the root
logger. Records can carry the coordinates of the exercise they are
about (see ExerciseAdapter) and the operation being performed, and the
formatters show them between brackets.

"""

import logging
import sys
import zlib

import gevent.lock

from gritcommon.terminal import colors, add_color_to_string, has_color_support


__all__ = [
    "StreamHandler", "FileHandler", "CustomFormatter", "DetailedFormatter",
    "ServiceFilter", "OperationAdapter", "ExerciseAdapter",
    "root_logger", "shell_handler", "set_detailed_logs",
]


class StreamHandler(logging.StreamHandler):
    """Subclass to make gevent-aware.

    Use a gevent lock instead of a threading one to block only the
    current greenlet.

    """
    def createLock(self):
        self.lock = gevent.lock.RLock()


class FileHandler(logging.FileHandler):
    """Subclass to make gevent-aware, see StreamHandler."""

    def createLock(self):
        self.lock = gevent.lock.RLock()


def get_color_hash(string: str) -> int:
    """Deterministically return a color based on the string's content.

    string: the string.

    return: a color, as a colors.* constant.

    """
    return [colors.BLACK,
            colors.RED,
            colors.GREEN,
            colors.YELLOW,
            colors.BLUE,
            colors.MAGENTA,
            colors.CYAN,
            colors.WHITE][zlib.crc32(string.encode("utf-8")) % 8]


class CustomFormatter(logging.Formatter):
    """Format log messages as we want them.

    Each line shows the time and the severity, then the coordinates of
    what originated the message (an exercise, or the service), then the
    operation if there is one, and finally the message. Every part can
    be colored, which the standard formatter cannot do.

    """
    SEVERITY_COLORS = {logging.CRITICAL: colors.RED,
                       logging.ERROR: colors.RED,
                       logging.WARNING: colors.YELLOW,
                       logging.INFO: colors.GREEN,
                       logging.DEBUG: colors.CYAN}

    def __init__(self, colors: bool = False):
        """Initialize a formatter.

        colors: whether to use colors in formatted output or not.

        """
        super().__init__("")
        self.colors = colors

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        record.asctime = self.formatTime(record, self.datefmt)
        s = self.do_format(record)
        if record.exc_info:
            # Cache the traceback text to avoid converting it multiple
            # times.
            if not record.exc_text:
                record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            if s[-1:] != "\n":
                s = s + "\n"
            s = s + record.exc_text
        return s

    def do_format(self, record: logging.LogRecord) -> str:
        """Produce a human-readable message from the given record.

        record: the data for the log message, with message and asctime
            already filled.

        return: the formatted log message.

        """
        severity = self.get_severity(record)
        coordinates = self.get_coordinates(record)
        operation = self.get_operation(record)
        message = record.message
        if self.colors:
            severity = add_color_to_string(
                severity, self.SEVERITY_COLORS[record.levelno],
                bold=True, force=True)
            if coordinates != "":
                coordinates = add_color_to_string(
                    coordinates, get_color_hash(coordinates),
                    bold=True, force=True)
            if operation != "":
                operation = add_color_to_string(
                    operation, get_color_hash(operation),
                    bold=True, force=True)

        fmt = severity
        if coordinates.strip() != "":
            fmt += " [%s]" % (coordinates.strip())
        if operation.strip() != "":
            fmt += " [%s]" % (operation.strip())
        fmt += " %s" % message
        return fmt

    def get_severity(self, record: logging.LogRecord) -> str:
        """Return the severity part of the log for the given record."""
        return record.asctime + " - " + record.levelname

    def get_coordinates(self, record: logging.LogRecord) -> str:
        """Return the coordinates part of the log for the given record.

        Messages about an exercise show "course-<id>/exercise-<id>",
        other messages the name of the process that logged them.

        """
        if hasattr(record, "course_id") and hasattr(record, "exercise_id"):
            return "course-%s/exercise-%s" % (record.course_id,
                                              record.exercise_id)
        if hasattr(record, "service_name"):
            return record.service_name
        return "<unknown>"

    def get_operation(self, record: logging.LogRecord) -> str:
        """Return the operation part of the log for the given record."""
        return record.operation if hasattr(record, "operation") else ""


class DetailedFormatter(CustomFormatter):
    """A version of custom formatter showing more information."""

    def get_coordinates(self, record: logging.LogRecord) -> str:
        """See CustomFormatter.get_coordinates

        The detailed log also contains the greenlet (thread) name, file
        and function name.

        """
        coordinates = super().get_coordinates(record)
        coordinates += " %s" % (
            record.threadName.replace("Thread", "").replace("Dummy-", ""))
        coordinates += " %s::%s" % (
            record.filename.replace(".py", ""), record.funcName)
        return coordinates


class ServiceFilter(logging.Filter):
    """Add the name of the running process to the log records.

    Nothing is filtered out: the filter only adds the "service_name"
    field to the records that do not have it.

    """
    def __init__(self, name: str):
        """Initialize a filter for the given process name."""
        super().__init__("")
        self.service_name = name

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "service_name"):
            record.service_name = self.service_name
        return True


class OperationAdapter(logging.LoggerAdapter):
    """Helper to attach operation to messages.

    Wraps a logger and adds the operation given to the constructor to
    the "operation" field of the "extra" argument of all messages
    logged with this adapter. If "operation" is already set it isn't
    altered.

    """
    def __init__(self, logger: logging.Logger | logging.LoggerAdapter,
                 operation: str):
        """Initialize an adapter to set the given operation.

        operation: a human-readable description of what the code will
            be performing while it's logging messages to this object.

        """
        super().__init__(logger, {"operation": operation})
        self.operation = operation

    def process(self, msg, kwargs):
        kwargs.setdefault("extra", {}).setdefault("operation", self.operation)
        return msg, kwargs


class ExerciseAdapter(logging.LoggerAdapter):
    """Helper to attach the coordinates of an exercise to messages."""

    def __init__(self, logger: logging.Logger, course_id: int,
                 exercise_id: int):
        super().__init__(logger, {"course_id": course_id,
                                  "exercise_id": exercise_id})

    def process(self, msg, kwargs):
        extra = kwargs.setdefault("extra", {})
        for key, value in self.extra.items():
            extra.setdefault(key, value)
        return msg, kwargs


def set_detailed_logs(detailed: bool):
    """Set or unset the shell logs to detailed."""
    color = has_color_support(sys.stdout)
    formatter = DetailedFormatter(color) \
        if detailed else CustomFormatter(color)
    shell_handler.setFormatter(formatter)


# Get the root logger.
root_logger = logging.getLogger()
root_logger.setLevel(logging.DEBUG)


# Install a shell handler.
shell_handler = StreamHandler(sys.stdout)
shell_handler.setLevel(logging.INFO)
shell_handler.setFormatter(CustomFormatter(has_color_support(sys.stdout)))
root_logger.addHandler(shell_handler)
