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

from datetime import datetime, timezone

import babel.dates


__all__ = [
    "make_datetime", "parse_local_datetime", "format_local_datetime",

    "utc", "local_tz",
    ]


utc = babel.dates.UTC
local_tz = babel.dates.LOCALTZ


def make_datetime(timestamp: int | float | None = None) -> datetime:
    """Return the naive UTC datetime of the given timestamp.

    All datetimes handled by GRIT are naive and expressed in UTC;
    timezones only matter when showing them to people.

    timestamp: a POSIX timestamp, or None to use now.

    """
    if timestamp is None:
        return datetime.now(timezone.utc).replace(tzinfo=None)
    return datetime.fromtimestamp(timestamp, timezone.utc).replace(
        tzinfo=None)


def parse_local_datetime(string: str) -> datetime:
    """Parse a local wall-clock time into a naive UTC datetime.

    string: a date in ISO 8601 format (e.g. "2014-06-30 23:59"),
        interpreted in the local timezone unless it carries an
        explicit offset.

    raise (ValueError): if the string is not a valid date.

    """
    value = datetime.fromisoformat(string)
    # astimezone reads naive datetimes as system local time.
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def format_local_datetime(_datetime: datetime, locale: str = "en") -> str:
    """Show a naive UTC datetime as local time, for humans."""
    return babel.dates.format_datetime(
        _datetime.replace(tzinfo=utc), "yyyy-MM-dd HH:mm",
        tzinfo=local_tz, locale=locale)
