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

"""Where submissions come from."""

import logging
from dataclasses import dataclass


__all__ = ["Connection", "ConnectionType", "CouldNotConnect",
           "check_connection"]


logger = logging.getLogger(__name__)


class ConnectionType:
    SVN = "SVN"
    ILIAS = "ILIAS"
    MAIL = "MAIL"

    ALL = (SVN, ILIAS, MAIL)


class CouldNotConnect(Exception):
    """The remote source of a connection cannot be reached."""

    pass


@dataclass(frozen=True)
class Connection:
    """The description of a remote source of submissions.

    Connections never change once created: editing one means replacing
    it, so an exercise always sees a consistent set of values.

    id: the id of the connection.
    name: a name for the admins.
    connection_type: one of ConnectionType.
    location: the repository URL (SVN), the database host (ILIAS) or
        the IMAP server (MAIL).
    protocol: for ILIAS, the SQLAlchemy dialect of the database; for
        MAIL, "imaps" or "imap".
    username, password: the credentials for location.
    ssh_username, ssh_key_file: the credentials to copy files from the
        ILIAS server.
    structure: how submissions are laid out in the repository (SVN).
    allowed_domain: the domain mails must come from (MAIL).

    """
    id: int
    name: str
    connection_type: str
    location: str
    protocol: str = ""
    username: str = ""
    password: str = ""
    ssh_username: str = ""
    ssh_key_file: str = ""
    structure: tuple[str, ...] = ()
    allowed_domain: str = ""

    def __post_init__(self):
        if self.connection_type not in ConnectionType.ALL:
            raise ValueError("Unknown connection type %r."
                             % self.connection_type)


def check_connection(connection: Connection) -> bool:
    """Tell whether the remote source of connection can be reached."""
    # Imported here since the fetchers depend on this module.
    from grit.preprocess.fetchermanager import get_fetcher

    try:
        fetcher = get_fetcher(connection.connection_type)
    except KeyError:
        logger.error("No fetcher for connections of type %s.",
                     connection.connection_type)
        return False
    return fetcher.check_connection(connection)
