#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Logging for the Spectra Pipeline
=================================

Library modules only *emit* records:

    - ``logger = get_logger(__name__)`` at module level
    - warnings for recoverable input problems (untrained MSC, PLS
      spectra without a reference value)
    - debug records for merges and ``LogTimer`` timings

Handlers belong to the application embedding the pipeline, which calls
``setup_logging()`` (directly or through ``Config.setup_logging()``) one
time. Console output goes through ``rich``; ``use_rich=False`` switches
to a ``colorlog`` stream handler. A plain-text file log is optional.

Usage:
------
    >>> from spectra_pipeline.utils.logging_utils import LogTimer, get_logger, setup_logging
    >>>
    >>> setup_logging(level='DEBUG', log_dir='runs/2024-05-01')
    >>> logger = get_logger('my_workflow')
    >>> with LogTimer(logger, 'msc + savgol_11'):
    ...     corrected = pipe.filter_batch(spectra)
"""

import logging
import sys
import time
from pathlib import Path
from typing import Optional, Union

import colorlog
from rich.console import Console
from rich.logging import RichHandler


# =============================================================================
# FORMATS
# =============================================================================

LINE_FORMAT = '%(asctime)s %(levelname)-8s [%(name)s] %(message)s'
COLOR_LINE_FORMAT = '%(log_color)s%(asctime)s %(levelname)-8s%(reset)s [%(name)s] %(message)s'
TIME_FORMAT = '%H:%M:%S'
LEVEL_COLORS = {
    'DEBUG': 'blue',
    'INFO': 'white',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'red,bg_white',
}

# third-party loggers kept at WARNING
QUIET_LOGGERS = ('joblib', 'sklearn')

_configured = False


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


# =============================================================================
# SETUP / TEARDOWN
# =============================================================================

def setup_logging(
    level: Union[str, int] = 'INFO',
    log_dir: Optional[Union[str, Path]] = None,
    log_filename: str = 'spectra_pipeline.log',
    log_to_console: bool = True,
    log_to_file: bool = True,
    use_rich: bool = True,
    fmt: Optional[str] = None,
    date_fmt: Optional[str] = None,
    capture_warnings: bool = True,
) -> logging.Logger:
    """
    Attach handlers to the root logger.

    Only the first call has an effect; ``reset_logging()`` re-arms it.
    Handlers already on the root logger are detached first.

    Parameters
    ----------
    level : str or int
        Level name (case-insensitive) or number; unknown names mean INFO.
    log_dir : str or Path, optional
        Folder of the file log; nothing is written to disk without it.
    log_filename : str
        File name inside ``log_dir``.
    log_to_console : bool
        Log to stderr.
    log_to_file : bool
        Log to ``log_dir / log_filename`` (requires ``log_dir``).
    use_rich : bool
        ``RichHandler`` on the console; ``False`` selects ``colorlog``.
    fmt, date_fmt : str, optional
        Line and timestamp formats of the file and colorlog handlers.
    capture_warnings : bool
        Redirect ``warnings.warn`` output (e.g. numpy) into logging.

    Returns
    -------
    logging.Logger
        The root logger.
    """
    global _configured

    root = logging.getLogger()
    if _configured:
        return root

    level = _resolve_level(level)
    line_format = fmt or LINE_FORMAT
    time_format = date_fmt or TIME_FORMAT

    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    if log_to_console:
        if use_rich:
            console = RichHandler(
                level=level,
                console=Console(stderr=True),
                show_path=False,
                rich_tracebacks=True,
                log_time_format=f"[{time_format}]",
            )
            console.setFormatter(logging.Formatter('[%(name)s] %(message)s'))
        else:
            console = colorlog.StreamHandler(sys.stderr)
            console.setLevel(level)
            console.setFormatter(colorlog.ColoredFormatter(
                COLOR_LINE_FORMAT, datefmt=time_format, log_colors=LEVEL_COLORS,
            ))
        root.addHandler(console)

    log_file = None
    if log_to_file and log_dir is not None:
        log_file = Path(log_dir) / log_filename
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(line_format, datefmt=time_format))
        root.addHandler(file_handler)

    if capture_warnings:
        logging.captureWarnings(True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True
    root.debug("Logging set up at %s (file: %s)", logging.getLevelName(level), log_file)
    return root


def reset_logging():
    """Close and detach all root handlers and allow ``setup_logging()`` again."""
    global _configured

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    logging.captureWarnings(False)
    _configured = False


def get_logger(name: str) -> logging.Logger:
    """Logger named after the calling module (pass ``__name__``)."""
    return logging.getLogger(name)


# =============================================================================
# TIMING
# =============================================================================

class LogTimer:
    """
    Log how long the ``with`` block took.

    Parameters
    ----------
    logger : logging.Logger
        Target logger.
    label : str
        Printed in front of the duration.
    level : int
        Record level; filters time themselves at DEBUG.

    Examples
    --------
    >>> with LogTimer(logger, "distance matrix", level=logging.DEBUG) as timer:
    ...     d = distance_matrix(filtered)
    >>> timer.elapsed
    0.0123
    """

    def __init__(self, logger: logging.Logger, label: str = "", level: int = logging.INFO):
        self.logger = logger
        self.label = label
        self.level = level
        self.elapsed: float = 0.0
        self._t0: float = 0.0

    def __enter__(self) -> 'LogTimer':
        self._t0 = time.perf_counter()
        return self

    def __exit__(self, *exc):
        self.elapsed = time.perf_counter() - self._t0
        minutes, seconds = divmod(self.elapsed, 60)
        if minutes:
            duration = f"{int(minutes)}m {seconds:.1f}s"
        else:
            duration = f"{seconds:.3f}s"
        self.logger.log(self.level, "[TIMER] %s: %s", self.label, duration)
        return False
