"""
utils.py
--------
Logging and small numeric helpers shared across the engine.
"""

import os
import math
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from deal_valuation.config import CONFIG


def get_logger(name: str, log_dir: Optional[str] = None,
               level: Optional[str] = None) -> logging.Logger:
    """
    Return a named logger writing to stdout and, optionally, a daily file.

    Parameters
    ----------
    name    : Logger name (typically the module __name__).
    log_dir : Directory for log files. Defaults to CONFIG.log_dir; no file
              handler is attached when neither is set.
    level   : Logging level string ("DEBUG", "INFO", "WARNING", "ERROR").
              Defaults to CONFIG.log_level.

    Returns
    -------
    logging.Logger
    """
    logger = logging.getLogger(name)

    if logger.handlers:          # avoid duplicate handlers on re-import
        return logger

    level = level or CONFIG.log_level
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Console handler
    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    # File handler
    log_dir = log_dir or CONFIG.log_dir
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        log_file = os.path.join(
            log_dir, f"deal_valuation_{datetime.now().strftime('%Y%m%d')}.log"
        )
        fh = logging.FileHandler(log_file)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger


def safe_ratio(numerator: float, denominator: float,
               default: float = 0.0) -> float:
    """Return numerator / denominator, or `default` when denominator <= 0."""
    return numerator / denominator if denominator > 0 else default


def coverage_ratio(earnings: float, debt_service: float) -> float:
    """Debt service coverage; infinite when there is nothing to service."""
    return earnings / debt_service if debt_service != 0 else math.inf


def format_label(value) -> str:
    """
    Render a grid axis value as a label.

    Integral floats drop the trailing ".0" so 5.0 and 5 label identically;
    other floats use the shortest round-trip representation.
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
