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
import os
import re
import stat

import chardet
import gevent


logger = logging.getLogger(__name__)


def mkdir(path: str) -> bool:
    """Make a directory (and its parents) without complaining for errors.

    path: the path of the directory to create
    returns: True if the dir is ok, False if it is not

    """
    try:
        os.makedirs(path, exist_ok=True)
        return True
    except OSError:
        return False


# This function uses os.fwalk() to avoid the symlink attack, see:
# - https://bugs.python.org/issue4489
# - https://bugs.python.org/issue13734
def rmtree(path: str):
    """Recursively delete a directory tree.

    Remove the directory at the given path, but first remove the files
    it contains and recursively remove the subdirectories it contains.
    Be cooperative with other greenlets by yielding often.

    path: the path to a directory.

    raise (OSError): in case of errors in the elementary operations.

    """
    # If path is a symlink, fwalk() yields no entries.
    for _, subdirnames, filenames, dirfd in os.fwalk(path, topdown=False):
        for filename in filenames:
            os.remove(filename, dir_fd=dirfd)
            gevent.sleep(0)
        for subdirname in subdirnames:
            if stat.S_ISLNK(os.lstat(subdirname, dir_fd=dirfd).st_mode):
                os.remove(subdirname, dir_fd=dirfd)
            else:
                os.rmdir(subdirname, dir_fd=dirfd)
            gevent.sleep(0)

    # Remove the directory itself. An exception is raised if path is a symlink.
    os.rmdir(path)


def clean_directory(path: str, keep: frozenset[str] = frozenset()):
    """Remove everything inside a directory, but not the directory.

    path: the directory to empty; nothing happens if it does not exist.
    keep: names of entries directly inside path to leave alone.

    raise (OSError): in case of errors in the elementary operations.

    """
    if not os.path.isdir(path):
        return
    for name in os.listdir(path):
        if name in keep:
            continue
        entry = os.path.join(path, name)
        if os.path.isdir(entry) and not os.path.islink(entry):
            rmtree(entry)
        else:
            os.remove(entry)


def find_files(root: str, regex: str) -> list[str]:
    """Return the files below root whose name fully matches regex.

    root: the directory to search.
    regex: a regular expression for the file names.

    return: the matching paths, sorted.

    """
    pattern = re.compile(regex)
    found = []
    for dirpath, _, filenames in os.walk(root):
        for filename in filenames:
            if pattern.fullmatch(filename):
                found.append(os.path.join(dirpath, filename))
    return sorted(found)


def utf8_decoder(value: str | bytes) -> str:
    """Decode given binary to text (if it isn't already) using UTF8, and
    falling back to other encodings when possible (using chardet to guess).

    value: value to decode.

    return: decoded value.

    raise (TypeError): if value isn't a string.

    """
    if isinstance(value, str):
        return value
    elif isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            try:
                return value.decode(chardet.detect(value).get("encoding"))
            except TypeError:
                pass

    raise TypeError("Not a string.")


def read_text(path: str) -> str:
    """Read a file written by a student, whatever its encoding."""
    with open(path, "rb") as f:
        data = f.read()
    try:
        return utf8_decoder(data)
    except (TypeError, UnicodeDecodeError, LookupError):
        return data.decode("latin-1")
