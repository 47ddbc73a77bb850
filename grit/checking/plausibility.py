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

"""Cheap structural check of a submission before compiling it."""

import logging
import os
import re


__all__ = ["check_plausibility"]


logger = logging.getLogger(__name__)


def check_plausibility(source_location: str, file_regex: str) -> bool:
    """Tell whether a submission contains at least one source file.

    source_location: the directory of the submission.
    file_regex: the regular expression the names of the source files
        of the exercise's language fully match.

    return: True if some file below source_location matches.

    """
    pattern = re.compile(file_regex)
    if not os.path.isdir(source_location):
        logger.warning("Submission %s is not a directory.", source_location)
        return False
    for _, _, filenames in os.walk(source_location):
        if any(pattern.fullmatch(name) for name in filenames):
            return True
    return False
