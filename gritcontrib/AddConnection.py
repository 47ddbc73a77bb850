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

"""This script creates a new connection, the description of a remote
source of submissions.

"""

# We enable monkey patching to make many libraries gevent-friendly.
import gevent.monkey
gevent.monkey.patch_all()  # noqa

import argparse
import logging
import sys

from grit import utf8_decoder
from grit.preprocess.connection import ConnectionType, CouldNotConnect
from grit.preprocess.tokenize import InvalidStructure, SubmissionStructure
from gritcontrib import load_controller


logger = logging.getLogger(__name__)


def add_connection(name, connection_type, location, check=True, **fields):
    if fields.get("structure"):
        try:
            SubmissionStructure(fields["structure"])
        except InvalidStructure as error:
            logger.error("Invalid submission structure: %s", error)
            return False

    controller = load_controller(check_connections=check)
    try:
        connection = controller.add_connection(name, connection_type,
                                               location, **fields)
    except CouldNotConnect as error:
        logger.error("%s", error)
        return False
    logger.info("Connection %s added with id %d.", name, connection.id)
    return True


def main():
    """Parse arguments and launch process.

    """
    parser = argparse.ArgumentParser(
        description="Add a connection to GRIT.")
    parser.add_argument("name", action="store", type=utf8_decoder,
                        help="name of the connection")
    parser.add_argument("connection_type", action="store",
                        choices=ConnectionType.ALL,
                        help="kind of remote source")
    parser.add_argument("location", action="store", type=utf8_decoder,
                        help="repository URL, database host or IMAP "
                             "server")
    parser.add_argument("--protocol", action="store", type=utf8_decoder,
                        default="",
                        help="database dialect (ILIAS) or imap/imaps "
                             "(MAIL)")
    parser.add_argument("-u", "--username", action="store",
                        type=utf8_decoder, default="")
    parser.add_argument("-p", "--password", action="store",
                        type=utf8_decoder, default="")
    parser.add_argument("--ssh-username", action="store",
                        type=utf8_decoder, default="")
    parser.add_argument("--ssh-key-file", action="store",
                        type=utf8_decoder, default="")
    parser.add_argument("--structure", action="store", type=utf8_decoder,
                        nargs="+", default=[],
                        help="submission structure of the repository, "
                             "e.g. TOPLEVEL 'group.*' SUBMISSION")
    parser.add_argument("--allowed-domain", action="store",
                        type=utf8_decoder, default="")
    parser.add_argument("--no-check", action="store_true",
                        help="do not check that the source is reachable")

    args = parser.parse_args()

    success = add_connection(args.name, args.connection_type, args.location,
                             check=not args.no_check,
                             protocol=args.protocol,
                             username=args.username,
                             password=args.password,
                             ssh_username=args.ssh_username,
                             ssh_key_file=args.ssh_key_file,
                             structure=tuple(args.structure),
                             allowed_domain=args.allowed_domain)
    return 0 if success is True else 1


if __name__ == "__main__":
    sys.exit(main())
