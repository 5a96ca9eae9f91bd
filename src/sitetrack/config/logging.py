"""Root logger setup for the command line."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Install a timestamped stream handler on the root logger.

    ``--verbose`` passes ``logging.DEBUG`` to see per-row decisions from the
    reconciliation engine.
    """

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
