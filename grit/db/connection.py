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

"""Connection-related database interface for SQLAlchemy.

"""

from sqlalchemy.schema import Column
from sqlalchemy.types import JSON, Integer, Unicode

from . import Base


class Connection(Base):
    """Class to store the description of a remote source of
    submissions.

    """

    __tablename__ = 'connections'

    # Primary key, chosen by the controller.
    id = Column(
        Integer,
        primary_key=True,
        autoincrement=False)

    # Name shown to admins.
    name = Column(
        Unicode,
        nullable=False)

    # One of SVN, ILIAS or MAIL.
    connection_type = Column(
        Unicode,
        nullable=False)

    location = Column(
        Unicode,
        nullable=False)

    protocol = Column(
        Unicode,
        nullable=False,
        default="")

    username = Column(
        Unicode,
        nullable=False,
        default="")

    password = Column(
        Unicode,
        nullable=False,
        default="")

    ssh_username = Column(
        Unicode,
        nullable=False,
        default="")

    ssh_key_file = Column(
        Unicode,
        nullable=False,
        default="")

    # The submission structure of SVN repositories, a list of strings.
    structure = Column(
        JSON,
        nullable=False,
        default=list)

    # Domain of the accepted senders, for MAIL connections.
    allowed_domain = Column(
        Unicode,
        nullable=False,
        default="")
