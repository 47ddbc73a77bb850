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

"""The declarative base of the models."""

from sqlalchemy.orm import declarative_base, object_session


class Base:
    """Base class for all classes managed by SQLAlchemy."""

    @property
    def sa_session(self):
        return object_session(self)

    def __repr__(self):
        return "<%s %s>" % (type(self).__name__,
                            getattr(self, "name", "?"))


Base = declarative_base(cls=Base)
metadata = Base.metadata
