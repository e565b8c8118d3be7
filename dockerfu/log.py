from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


class BracketLevelFormatter(logging.Formatter):
    """`2024-01-01T00:00:00Z [info] dockerfu.reconciler: mapped ...`"""

    _TAGS = {
        logging.DEBUG: "[debug]",
        logging.INFO: "[info]",
        logging.WARNING: "[warn]",
        logging.ERROR: "[error]",
        logging.CRITICAL: "[crit]",
    }

    def formatTime(self, record, datefmt=None):
        return datetime.fromtimestamp(record.created, timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    def format(self, record):
        record.level_tag = self._TAGS.get(record.levelno, f"[lvl{record.levelno}]")
        return super().format(record)


def init_logging(level: str = "info", stream=None) -> None:
    """Configure the `dockerfu` logger tree once per process.

    Output goes to stderr so `show` tables on stdout stay clean.
    """
    logger = logging.getLogger("dockerfu")
    logger.setLevel(_LEVELS.get(str(level).lower(), logging.INFO))
    for h in list(logger.handlers):
        logger.removeHandler(h)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(BracketLevelFormatter(fmt="%(asctime)s %(level_tag)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
