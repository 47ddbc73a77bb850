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

"""Provide utilities to work with programming language classes."""

import logging

from grit import plugin_list
from grit.checking.language import Language


__all__ = [
    "LANGUAGES", "get_language",
]


logger = logging.getLogger(__name__)


LANGUAGES: list[Language] = list()
_BY_NAME: dict[str, Language] = dict()


def get_language(name: str) -> Language:
    """Return the language object corresponding to the given name.

    name: name of the requested language.
    return: language object.

    raise (KeyError): if the name does not correspond to a language.

    """
    if name not in _BY_NAME:
        raise KeyError("Language `%s' not supported." % name)
    return _BY_NAME[name]


def _load_languages():
    """Load the available languages and fills all other data structures."""
    if len(LANGUAGES) > 0:
        return

    for cls in plugin_list("grit.checking.languages"):
        language = cls()
        LANGUAGES.append(language)
        _BY_NAME[language.name] = language


# Initialize!
_load_languages()
