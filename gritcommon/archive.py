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

"""Abstraction layer for extracting the archives students submit.

"""

import os
import re
import shutil

import patoolib
from patoolib.util import PatoolError


__all__ = ["Archive", "ArchiveException", "sanitize_names"]


class ArchiveException(Exception):
    """Exception for archives that cannot be handled."""

    pass


def sanitize_names(root: str):
    """Replace whitespace with "_" in the names of everything below root.

    root: the directory whose content is renamed.

    """
    # Bottom-up, so that renaming a directory does not invalidate the
    # paths still to visit.
    for dirpath, dirnames, filenames in os.walk(root, topdown=False):
        for name in filenames + dirnames:
            new_name = re.sub(r"\s", "_", name)
            if new_name == name:
                continue
            new_path = os.path.join(dirpath, new_name)
            # A previous pass may have left a renamed copy behind.
            if os.path.isdir(new_path) and not os.path.islink(new_path):
                shutil.rmtree(new_path)
            os.replace(os.path.join(dirpath, name), new_path)


class Archive:
    """An archive file submitted by a student.

    Archives are extracted into a directory next to them named like the
    archive without its extension (so "hw1.zip" becomes "hw1/"), so that
    the tokenizer can explore the content as any other directory.

    """

    @staticmethod
    def extract_to_dir(archive_path: str, to_dir: str):
        """Extract the content of an archive in to_dir.

        archive_path: path of the archive to extract.
        to_dir: destination directory, created if missing.

        raise (ArchiveException): if patoolib fails.

        """
        os.makedirs(to_dir, exist_ok=True)
        try:
            patoolib.extract_archive(archive_path, verbosity=-1,
                                     outdir=to_dir, interactive=False)
        except PatoolError as error:
            raise ArchiveException(
                "Cannot extract %s: %s" % (archive_path, error)) from error

    def __init__(self, path: str):
        """Init.

        path: the path of the archive.

        """
        self.path = path

    @property
    def target_dir(self) -> str:
        """The directory the archive is extracted to."""
        root, _ = os.path.splitext(self.path)
        return root

    def unpack(self) -> str:
        """Extract the archive next to itself and sanitize the names.

        return: the path of the directory holding the content.

        raise (ArchiveException): if the archive cannot be extracted.

        """
        Archive.extract_to_dir(self.path, self.target_dir)
        sanitize_names(self.target_dir)
        return self.target_dir

