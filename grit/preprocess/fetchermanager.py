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

"""Provide the fetchers of the connection types."""

import logging

from grit import plugin_list
from grit.preprocess.fetch import Fetcher


__all__ = [
    "FETCHERS", "get_fetcher",
]


logger = logging.getLogger(__name__)


FETCHERS: list[Fetcher] = list()
_BY_TYPE: dict[str, Fetcher] = dict()


def get_fetcher(connection_type: str) -> Fetcher:
    """Return the fetcher handling the given connection type.

    connection_type: one of ConnectionType.

    raise (KeyError): if no fetcher handles the type.

    """
    if connection_type not in _BY_TYPE:
        raise KeyError("Connection type `%s' not supported."
                       % connection_type)
    return _BY_TYPE[connection_type]


def _load_fetchers():
    """Load the available fetchers."""
    if len(FETCHERS) > 0:
        return

    for cls in plugin_list("grit.preprocess.fetchers"):
        fetcher = cls()
        FETCHERS.append(fetcher)
        _BY_TYPE[fetcher.connection_type] = fetcher


# Initialize!
_load_fetchers()
