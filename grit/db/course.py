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

"""Course-related database interface for SQLAlchemy.

"""

from sqlalchemy.orm import relationship
from sqlalchemy.schema import Column
from sqlalchemy.types import Integer, Unicode

from . import Base


class Course(Base):
    """Class to store a course, the group of exercises of a class."""

    __tablename__ = 'courses'

    # Primary key, chosen by the controller so that it never changes
    # once the working directories are named after it.
    id = Column(
        Integer,
        primary_key=True,
        autoincrement=False)

    # Name of the course (human readable).
    name = Column(
        Unicode,
        nullable=False)

    # These one-to-many relationships are the reversed directions of
    # the ones defined in the "child" classes using foreign keys.

    exercises = relationship(
        "Exercise",
        cascade="all, delete-orphan",
        back_populates="course")
