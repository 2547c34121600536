#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Utilities Package for the Spectra Pipeline
===========================================

Shared utility modules used across the project:
    - json_io: JSON save/load helpers for configs and pipeline specs
    - logging_utils: Centralized logging configuration
"""

from spectra_pipeline.utils.json_io import (
    ensure_dir,
    load_json,
    save_json,
    to_json_string,
)

from spectra_pipeline.utils.logging_utils import (
    LogTimer,
    get_logger,
    reset_logging,
    setup_logging,
)

__all__ = [
    # JSON helpers
    "ensure_dir",
    "load_json",
    "save_json",
    "to_json_string",
    # Logging utilities
    "LogTimer",
    "get_logger",
    "reset_logging",
    "setup_logging",
]
