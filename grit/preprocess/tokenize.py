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

"""Finding the submissions in a fetched directory tree.

The layout of the tree is described by a SubmissionStructure: a list
whose first element is "TOPLEVEL" (the root of the tree), whose last is
"SUBMISSION" (a directory holding one submission) and whose elements
in between are regular expressions the names of the directories at
that depth must match. For example ["TOPLEVEL", ".*@.*", "ex1",
"SUBMISSION"] finds the submissions in <root>/<email>/ex1/*.

"""

import logging
import os
import re

from grit.errors import GritError
from grit.util import rmtree
from gritcommon.archive import Archive, ArchiveException, sanitize_names


__all__ = [
    "InvalidStructure", "MaximumDirectoryDepthExceeded",
    "SubmissionStructure", "Tokenizer",
    "TOPLEVEL", "SUBMISSION", "MAX_DIRECTORY_DEPTH", "MAX_ARCHIVE_NESTING",
]


logger = logging.getLogger(__name__)


TOPLEVEL = "TOPLEVEL"
SUBMISSION = "SUBMISSION"

MAX_DIRECTORY_DEPTH = 10
MAX_ARCHIVE_NESTING = 5


class InvalidStructure(GritError):
    pass


class MaximumDirectoryDepthExceeded(GritError):
    pass


class SubmissionStructure:
    """A validated description of the layout of a submission tree."""

    def __init__(self, structure: list[str] | tuple[str, ...]):
        """Validate structure.

        raise (InvalidStructure): if structure is empty, does not start
            with TOPLEVEL or end with SUBMISSION, or has an element in
            between that is not a regular expression.

        """
        structure = list(structure)
        if len(structure) < 2:
            raise InvalidStructure(
                "A structure needs at least %s and %s." % (TOPLEVEL,
                                                           SUBMISSION))
        if structure[0] != TOPLEVEL:
            raise InvalidStructure(
                "A structure must start with %s, not %r."
                % (TOPLEVEL, structure[0]))
        if structure[-1] != SUBMISSION:
            raise InvalidStructure(
                "A structure must end with %s, not %r."
                % (SUBMISSION, structure[-1]))
        self._patterns = []
        for element in structure[1:-1]:
            try:
                self._patterns.append(re.compile(element))
            except re.error as error:
                raise InvalidStructure(
                    "%r is not a valid regular expression: %s"
                    % (element, error)) from error
        self.structure = structure

    def __len__(self):
        return len(self.structure)

    def __repr__(self):
        return "SubmissionStructure(%r)" % (self.structure,)

    def pattern(self, level: int) -> re.Pattern | None:
        """Return the pattern of the directories at level (1-based), or
        None if level is the submission level.

        """
        if level >= len(self.structure) - 1:
            return None
        return self._patterns[level - 1]


class Tokenizer:
    """Walk a fetched tree and return the submissions it holds."""

    def __init__(self, file_regex: str, archive_regex: str):
        """Init.

        file_regex: fully matches the names of source files.
        archive_regex: fully matches the names of submitted archives.

        """
        self.file_regex = re.compile(file_regex)
        self.archive_regex = re.compile(archive_regex)
        self.empty_locations: list[str] = []

    def explore_submission_directory(
            self, structure: SubmissionStructure, root: str) -> list[str]:
        """Return the submission directories below root.

        Archives found in a submission directory are extracted next to
        themselves, whitespace in the names of the submitted files is
        replaced with "_", and submission directories with neither
        sources nor archives are collected in empty_locations.

        structure: the layout of the tree.
        root: the directory matching TOPLEVEL.

        return: the directories holding a submission each.

        raise (MaximumDirectoryDepthExceeded): if the structure is
            deeper than MAX_DIRECTORY_DEPTH.

        """
        self.empty_locations = []
        if not os.path.isdir(root) or len(os.listdir(root)) == 0:
            logger.warning("No files in %s.", root)
            return []
        return self._traverse(structure, 1, root)

    def _traverse(self, structure: SubmissionStructure, level: int,
                  location: str) -> list[str]:
        if level >= MAX_DIRECTORY_DEPTH:
            raise MaximumDirectoryDepthExceeded(
                "Encountered more than %d directories in %s."
                % (MAX_DIRECTORY_DEPTH, location))

        pattern = structure.pattern(level)
        if pattern is None:
            if self._collect_submission(location):
                return [location]
            logger.warning("Nothing found in %s.", location)
            self.empty_locations.append(location)
            return []

        found = []
        for name in sorted(os.listdir(location)):
            path = os.path.join(location, name)
            if not os.path.isdir(path) or name.startswith("."):
                continue
            if pattern.fullmatch(name):
                found += self._traverse(structure, level + 1, path)
            else:
                logger.info("Unexpected directory %s, expecting %s.",
                            path, pattern.pattern)
        return found

    def _collect_submission(self, location: str) -> bool:
        """Prepare the submission in location for checking.

        return: whether location contains sources or archives.

        """
        found = self._extract_archives(location, 0)
        sanitize_names(location)
        for _, _, filenames in os.walk(location):
            if any(self.file_regex.fullmatch(name) for name in filenames):
                found = True
                break
        return found

    def _extract_archives(self, location: str, nesting: int) -> bool:
        """Extract the archives in location, and recursively the ones
        they contain up to MAX_ARCHIVE_NESTING levels.

        return: whether location contains archives.

        """
        found = False
        for name in sorted(os.listdir(location)):
            path = os.path.join(location, name)
            if not os.path.isfile(path) or \
                    not self.archive_regex.fullmatch(name):
                continue
            found = True
            if nesting >= MAX_ARCHIVE_NESTING:
                logger.warning("Not extracting %s: archives nested more "
                               "than %d levels.", path, MAX_ARCHIVE_NESTING)
                continue
            archive = Archive(path)
            if os.path.isdir(archive.target_dir):
                rmtree(archive.target_dir)
            try:
                target = archive.unpack()
            except ArchiveException as error:
                logger.warning("Cannot extract %s: %s", path, error)
                continue
            self._extract_archives(target, nesting + 1)
        return found
