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

"""Terminal capabilities used to color the log output."""

import curses
import sys


__all__ = ["colors", "has_color_support", "add_color_to_string"]


class colors:
    BLACK = curses.COLOR_BLACK
    RED = curses.COLOR_RED
    GREEN = curses.COLOR_GREEN
    YELLOW = curses.COLOR_YELLOW
    BLUE = curses.COLOR_BLUE
    MAGENTA = curses.COLOR_MAGENTA
    CYAN = curses.COLOR_CYAN
    WHITE = curses.COLOR_WHITE


def has_color_support(stream) -> bool:
    """Try to determine if the given stream supports colored output.

    Return True only if the stream is a TTY whose terminfo entry
    declares support for colors. Streams without a real file
    descriptor (e.g. the ones pytest uses to capture output) are
    reported as not supporting colors.

    stream (fileobj): a file-like object.

    return (bool): True if we're sure that colors are supported.

    """
    try:
        if not stream.isatty():
            return False
        curses.setupterm(fd=stream.fileno())
        # See `man terminfo` for capabilities' names and meanings.
        return curses.tigetnum("colors") > 0
    except Exception:
        return False


def _capability(name: str, *params) -> str:
    sequence = curses.tigetstr(name)
    if sequence is None:
        return ""
    return curses.tparm(sequence, *params).decode("ascii")


def add_color_to_string(string: str, color: int, stream=sys.stdout,
                        bold: bool = False, force: bool = False) -> str:
    """Format the string to be printed with the given color.

    If the stream has color support (or force is set) wrap the string
    in the escape sequences that make it appear with the given
    foreground color, otherwise return it untouched.

    string: the string to color.
    color: a colors constant, like colors.RED.
    stream (fileobj): the stream the string will be written to.
    bold: whether the string should also be bold.
    force: format even if the stream has no color support.

    return: the formatted string.

    """
    if not (force or has_color_support(stream)):
        return string
    prefix = ""
    if color != colors.BLACK:
        prefix += _capability("setaf", color)
    if bold:
        prefix += _capability("bold")
    return prefix + string + _capability("sgr0")
