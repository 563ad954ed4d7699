"""GTP - time based one-time passwords from the command line."""

import logging
import sys

from .cli import app as cli_app, read_config
from .errors import ConfigError


def main() -> None:
    """Main entry point for gtp.

    Configures logging from the config file, then runs the CLI.
    A malformed config is reported by the commands that read it, so the
    usage text still prints.
    """
    try:
        level = read_config().log_level
    except ConfigError:
        level = "WARNING"
    logging.basicConfig(stream=sys.stderr, level=level)
    cli_app()
