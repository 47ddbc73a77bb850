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

__all__ = [
    "escape_tex_normal", "escape_tex_tt", "escape_tex_verbatim",
]


REPLACEMENTS = {"&": r"\&{}",
                "%": r"\%{}",
                "$": r"\${}",
                "#": r"\#{}",
                "_": r"\_{}",
                "{": r"\{{}",
                "}": r"\}{}",
                "~": r"\textasciitilde{}",
                "^": r"\textasciicircum{}",
                "\\": r"\textbackslash{}"}

_NORMAL_TABLE = str.maketrans(REPLACEMENTS)
_TT_TABLE = str.maketrans(
    {c: "\\char\"%02X{}" % ord(c) for c in REPLACEMENTS})


def escape_tex_normal(string: str) -> str:
    """Escape a string for use inside latex."""
    return string.translate(_NORMAL_TABLE)


def escape_tex_tt(string: str) -> str:
    """Escape a string for use inside latex with \\texttt."""
    return string.translate(_TT_TABLE)


def escape_tex_verbatim(string: str, environment: str = "verbatim") -> str:
    """Make a string safe to put inside a verbatim-like environment.

    Only the sequence closing the environment needs care. Tabs are
    expanded to four spaces.

    string: the text to show verbatim.
    environment: the name of the environment, e.g. "lstlisting".

    """
    closing = "\\end{%s}" % environment
    return string.expandtabs(4).replace(closing, "\\end {%s}" % environment)
