"""Logging setup shared by the CLI and the daemon process."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level="WARNING", stream=None):
    """Configure the root logger once per process.

    Repeated calls only adjust the level, so the CLI can raise verbosity
    after settings are loaded.
    """
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT, stream=stream or sys.stderr)
    root.setLevel(level)
