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

import dataclasses
import logging
import os
import sys
from dataclasses import dataclass

from grit.log import set_detailed_logs
from gritcommon import conf_parser
from gritcommon.conf_parser import ConfigError

logger = logging.getLogger(__name__)


def default_path(name):
    return os.path.join(sys.prefix, name)


@dataclass()
class GlobalConfig:
    temp_dir: str = "/tmp"
    file_log_debug: bool = False
    stream_log_detailed: bool = False
    log_dir: str = default_path("log/grit")
    # Per exercise fetch, bin, tests and tempPdf directories.
    working_dir: str = default_path("lib/grit/wdir")
    # Per exercise reports, the ones admins download.
    output_dir: str = default_path("lib/grit/output")
    # Jars and other files the checkers need.
    resource_dir: str = default_path("share/grit")


@dataclass()
class DatabaseConfig:
    url: str = "sqlite:///" + default_path("lib/grit/state.db")
    debug: bool = False


@dataclass()
class MailConfig:
    smtp_host: str = "localhost"
    # 465 means implicit TLS, anything else STARTTLS.
    smtp_port: int = 465
    # Nothing is sent when empty.
    sender_address: str = ""
    username: str = ""
    password: str = ""
    timeout_s: float = 5.0


@dataclass()
class AdminConfig:
    name: str = ""
    email: str = ""


@dataclass()
class CheckingConfig:
    compile_timeout_s: float = 60.0
    test_timeout_s: float = 120.0
    junit_classpath: tuple[str, ...] = (
        "/usr/share/java/junit4.jar",
        "/usr/share/java/hamcrest-core.jar",
    )
    # Directory of jars put on the classpath of student Java code.
    lib_dir: str | None = None
    # "PDF" or "PLAIN".
    report_type: str = "PDF"
    pdflatex_timeout_s: float = 60.0


@dataclass()
class FetchingConfig:
    svn_timeout_s: float = 300.0
    imap_timeout_s: float = 30.0
    scp_timeout_s: float = 300.0
    # Name of the ILIAS schema on the database server.
    ilias_database: str = "ilias"


field_helper = lambda T: dataclasses.field(default_factory=T)

@dataclass(kw_only=True)
class Config:
    global_: GlobalConfig = field_helper(GlobalConfig)
    database: DatabaseConfig = field_helper(DatabaseConfig)
    mail: MailConfig = field_helper(MailConfig)
    admin: AdminConfig = field_helper(AdminConfig)
    checking: CheckingConfig = field_helper(CheckingConfig)
    fetching: FetchingConfig = field_helper(FetchingConfig)

    def __post_init__(self):
        if self.checking.report_type not in ("PDF", "PLAIN"):
            raise ConfigError("checking.report_type must be PDF or PLAIN, "
                              "got %r" % self.checking.report_type)

        # If the configuration says to print detailed log on stdout,
        # change the log configuration.
        set_detailed_logs(self.global_.stream_log_detailed)


def make_config():
    # Default config file path can be overridden using environment
    # variable 'GRIT_CONFIG'.
    default_config_file = default_path("etc/grit.toml")
    config_file = os.environ.get("GRIT_CONFIG", default_config_file)
    return conf_parser.parse_config(config_file, Config, allow_missing=True)


config = make_config()
