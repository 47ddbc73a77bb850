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

"""Build and installation routines for GRIT.

"""

import os
import re

from setuptools import setup, find_packages


PACKAGE_DATA = {
    "grit.report": [
        "templates/*.*",
    ],
}


def find_version():
    """Return the version string obtained from grit/__init__.py"""
    path = os.path.join("grit", "__init__.py")
    with open(path, "rt", encoding="utf-8") as f:
        version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]",
                                  f.read(), re.M)
    if version_match is not None:
        return version_match.group(1)
    raise RuntimeError("Unable to find version string.")


setup(
    name="grit",
    version=find_version(),
    author="Team GRIT",
    description="Automated fetching, checking and reporting of "
                "programming exercise submissions",
    packages=find_packages(include=["grit", "grit.*",
                                    "gritcommon", "gritcommon.*",
                                    "gritcontrib", "gritcontrib.*",
                                    "grittestsuite", "grittestsuite.*"]),
    package_data=PACKAGE_DATA,
    python_requires=">=3.11",
    install_requires=[
        "gevent>=23.9",
        "SQLAlchemy>=2.0",
        "patool>=1.12",
        "Babel>=2.12",
        "chardet>=5.0",
        "PyPDF2>=3.0",
        "tornado>=6.3",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
        "ilias": [
            "PyMySQL",
        ],
    },
    entry_points={
        "console_scripts": [
            "gritServer=grit.service.GradingService:main",
            "gritAddCourse=gritcontrib.AddCourse:main",
            "gritAddConnection=gritcontrib.AddConnection:main",
            "gritAddExercise=gritcontrib.AddExercise:main",
            "gritRemoveExercise=gritcontrib.RemoveExercise:main",
        ],
        "grit.checking.languages": [
            "C=grit.checking.languages.c_gcc:CGcc",
            "CPP=grit.checking.languages.cpp_gpp:CppGpp",
            "HASKELL=grit.checking.languages.haskell_ghc:HaskellGhc",
            "JAVA=grit.checking.languages.java_jdk:JavaJdk",
        ],
        "grit.preprocess.fetchers": [
            "SVN=grit.preprocess.fetch.svn:SvnFetcher",
            "MAIL=grit.preprocess.fetch.mail:MailFetcher",
            "ILIAS=grit.preprocess.fetch.ilias:IliasFetcher",
        ],
    },
    keywords="grading programming exercises submissions junit",
    license="Affero General Public License v3",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Natural Language :: English",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3.11",
        "License :: OSI Approved :: "
        "GNU Affero General Public License v3",
    ]
)
