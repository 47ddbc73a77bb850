# This file is meant to be used for creating pytest fixtures.
# It's a bit of a hack, but we can put global initialization here.

# Keep the tests away from the configured database and directories.
import os
import tempfile

os.environ.setdefault("GRIT_CONFIG", os.path.join(tempfile.gettempdir(),
                                                  "grit-test-missing.toml"))

import grit.conf
grit.conf.config.database.url = "sqlite://"
grit.conf.config.mail.sender_address = ""
