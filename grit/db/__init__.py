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

"""The persistent state of the grader: courses, connections and
exercises, stored with SQLAlchemy.

"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import configure_mappers

from grit import config


logger = logging.getLogger(__name__)


# Define what this package will provide.

__all__ = [
    "engine",
    # session
    "Session", "SessionGen",
    # base
    "metadata", "Base",
    # course
    "Course",
    # connection
    "Connection",
    # exercise
    "Exercise",
    # init
    "init_db", "drop_db",
]


# Instantiate or import these objects.

engine = create_engine(config.database.url, echo=config.database.debug)


from .session import Session, SessionGen
from .base import metadata, Base
from .course import Course
from .connection import Connection
from .exercise import Exercise

from .init import init_db, drop_db


configure_mappers()
