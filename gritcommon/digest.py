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

import binascii
import hashlib
import io
import os


__all__ = [
    "Digester", "bytes_digest", "path_digest", "tree_digest"
]


class Digester:
    """Simple wrapper of hashlib using our preferred hasher."""

    def __init__(self):
        self._hasher = hashlib.sha1()

    def update(self, b: bytes):
        """Add the bytes b to the hasher."""
        self._hasher.update(b)

    def update_from_file(self, path: str):
        """Add the content of the file at path to the hasher."""
        with open(path, "rb") as fin:
            buf = fin.read(io.DEFAULT_BUFFER_SIZE)
            while buf != b"":
                self._hasher.update(buf)
                buf = fin.read(io.DEFAULT_BUFFER_SIZE)

    def digest(self) -> str:
        """Return the digest as an hex string."""
        return binascii.b2a_hex(self._hasher.digest()).decode("ascii")


def bytes_digest(b: bytes) -> str:
    """Return the digest for the passed bytes.

    b: some bytes.

    return: digest of the bytes.

    """
    d = Digester()
    d.update(b)
    return d.digest()


def path_digest(path: str) -> str:
    """Return the digest of the content of a file, given by its path.

    path: path of the file we are interested in.

    return: digest of the content of the file in path.

    """
    d = Digester()
    d.update_from_file(path)
    return d.digest()


def tree_digest(root: str) -> str:
    """Return the digest of a whole directory tree.

    The digest covers the relative path and the content of every
    regular file below root, visited in a deterministic order, so two
    trees have the same digest exactly when they contain the same
    files with the same content. Symbolic links are not followed.

    root: the directory to digest. If it is a file, the digest covers
        just that file.

    return: digest of the tree.

    """
    d = Digester()
    if os.path.isfile(root):
        d.update(os.path.basename(root).encode("utf-8") + b"\0")
        d.update_from_file(root)
        return d.digest()

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for filename in sorted(filenames):
            path = os.path.join(dirpath, filename)
            if os.path.islink(path) or not os.path.isfile(path):
                continue
            relpath = os.path.relpath(path, root)
            d.update(relpath.encode("utf-8") + b"\0")
            d.update_from_file(path)
            d.update(b"\0")
    return d.digest()
