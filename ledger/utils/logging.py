"""Logging setup shared by the API and the CLI."""

import logging

from ledger.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once; later calls only adjust the level."""
    resolved = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt=DATE_FORMAT)
    root.setLevel(resolved)
    # requests/urllib3 are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(max(resolved, logging.INFO))
