"""Logging configuration for the countdown CLI.

The library itself only creates module-level loggers; handlers and levels
are left to the application, which is what this helper sets up.
"""

import logging


def configure_logging(debug: bool = False) -> None:
    level = logging.DEBUG if debug else logging.INFO
    fmt = "%(asctime)s [%(levelname)5s] %(name)s: %(message)s"
    logging.basicConfig(level=level, format=fmt)
    logging.getLogger("countdown").setLevel(level)
