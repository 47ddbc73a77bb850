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

"""Utilities for gritcontrib"""

from grit.db import init_db
from grit.entities.controller import Controller
from grit.entities.state import StateStore


def load_controller(check_connections=True):
    """Return a controller holding the stored state, with the
    exercises created but not running.

    The changes made through it are stored, and the grading service
    picks them up when restarted.

    check_connections (bool): whether new connections must be
        reachable.

    """
    init_db()
    controller = Controller(StateStore(), arm_exercises=False,
                            check_connections=check_connections)
    controller.restore_state()
    return controller
