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

"""Creating and dropping the tables."""

import logging

from . import engine, metadata


logger = logging.getLogger(__name__)


def init_db(bind=None):
    """Create all the tables that do not exist yet.

    bind (Engine|None): the database, by default the configured one.

    return (bool): True on success.

    """
    metadata.create_all(bind if bind is not None else engine)
    return True


def drop_db(bind=None):
    """Drop all the tables.

    bind (Engine|None): the database, by default the configured one.

    return (bool): True on success.

    """
    metadata.drop_all(bind if bind is not None else engine)
    return True
