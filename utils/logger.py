"""
Script contains logger for the pokedex ingestion
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(verbose=False):
    """Configure the root logger once for CLI and server entry points."""
    logging.basicConfig(
        format=LOG_FORMAT,
        level=logging.DEBUG if verbose else logging.INFO,
        datefmt=DATE_FORMAT,
        stream=sys.stdout,
    )
    # urllib3 logs every pooled connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.INFO)
