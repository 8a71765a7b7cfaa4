"""Logging configuration for the command line."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging once per CLI invocation.

    Commands print report warnings themselves, so by default only errors are
    logged; ``verbose`` adds settlement warnings and the DEBUG trail of report
    windows.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format=LOG_FORMAT,
        force=True,
    )
