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

"""Exercise-related database interface for SQLAlchemy.

"""

from sqlalchemy.orm import relationship
from sqlalchemy.schema import Column, ForeignKey, CheckConstraint
from sqlalchemy.types import JSON, DateTime, Integer, Interval, Unicode

from . import Base, Course


class Exercise(Base):
    """Class to store an exercise of a course: what everything else
    about the exercise is computed from.

    """
    __tablename__ = 'exercises'
    __table_args__ = (
        CheckConstraint("start < deadline"),
    )

    # Course (id and object) the exercise belongs to.
    course_id = Column(
        Integer,
        ForeignKey(Course.id,
                   onupdate="CASCADE", ondelete="CASCADE"),
        primary_key=True)
    course = relationship(
        Course,
        back_populates="exercises")

    # Id of the exercise inside its course.
    id = Column(
        Integer,
        primary_key=True,
        autoincrement=False)

    name = Column(
        Unicode,
        nullable=False)

    # Name of a language, as returned by Language.name.
    language = Column(
        Unicode,
        nullable=False)

    # Naive UTC datetimes.
    start = Column(
        DateTime,
        nullable=False)
    deadline = Column(
        DateTime,
        nullable=False)

    # How often submissions are fetched.
    period = Column(
        Interval,
        nullable=False)

    # Id of the connection submissions are fetched from. Not a foreign
    # key: connections are replaced, not updated, when edited.
    connection_id = Column(
        Integer,
        nullable=False)

    # Additional compiler flags, a list of strings.
    compiler_flags = Column(
        JSON,
        nullable=False,
        default=list)
