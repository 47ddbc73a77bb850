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

import logging

from importlib.metadata import entry_points


logger = logging.getLogger(__name__)


def plugin_list(entry_point_group: str) -> list[type]:
    """Return the list of plugin classes of the given group.

    The parts of GRIT that depend on external tools (the languages,
    with their compilers and testers, and the fetchers, with their
    remote sources) are classes found through setuptools' entry
    points, so that other distributions can add their own by listing
    them in the same groups.

    entry_point_group: the name of the group of entry points that
        should be returned, grit.checking.languages or
        grit.preprocess.fetchers.

    return: the requested plugin classes.

    """
    classes = []
    for entry_point in entry_points(group=entry_point_group):
        try:
            classes.append(entry_point.load())
        except Exception:
            logger.warning(
                "Failed to load entry point %s for group %s from %s, "
                "provided by distribution %s.",
                entry_point.name,
                entry_point_group,
                entry_point.value,
                entry_point.dist.name if entry_point.dist else "unknown",
                exc_info=True,
            )
    return classes
