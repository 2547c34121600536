#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Configuration for the Spectra Pipeline
=======================================

Plain dataclasses grouped by concern:

    - ``filters``:  default parameters used by the named-filter registry
    - ``logging``:  arguments for ``setup_logging``
    - ``parallel``: worker count for parallel-merge composites

Usage:
------
    >>> from spectra_pipeline.config import Config
    >>> config = Config()
    >>> config.filters.savgol_window_length = 11
    >>> config.save('outputs/config.json')
    >>> same = Config.from_json('outputs/config.json')
"""

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from spectra_pipeline.utils.json_io import load_json, save_json
from spectra_pipeline.utils.logging_utils import setup_logging


@dataclass
class FilterDefaults:
    """Default parameters of the registered filters."""
    savgol_window_length: int = 7
    savgol_polyorder: int = 2
    derivative_window: int = 11
    derivative_polyorder: int = 2
    scale_min_amplitude: float = 0.0
    scale_max_amplitude: float = 100.0
    log_base: str = '10'
    equidistance_num_points: int = -1
    equidistance_allow_oversampling: bool = False
    standardise_first: float = 600.0
    standardise_last: float = 4000.0
    standardise_step: float = 2.0
    standardise_polynomial: int = 2
    kennard_stone_subset_size: int = -1
    pls_reference_field: str = 'Reference'
    pls_num_components: int = 5


@dataclass
class LoggingConfig:
    level: str = 'INFO'
    log_dir: Optional[str] = None
    log_to_console: bool = True
    log_to_file: bool = False
    use_rich: bool = True


@dataclass
class ParallelConfig:
    n_jobs: int = 1


def _build(cls, values: Optional[Dict[str, Any]]):
    values = dict(values or {})
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} option(s): {', '.join(unknown)}")
    return cls(**values)


@dataclass
class Config:
    """Top-level project configuration."""

    filters: FilterDefaults = field(default_factory=FilterDefaults)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    parallel: ParallelConfig = field(default_factory=ParallelConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """
        Build a configuration from a nested dict; missing sections and
        options keep their defaults.

        Raises
        ------
        ValueError
            For unknown sections or options.
        """
        unknown = sorted(set(data) - {'filters', 'logging', 'parallel'})
        if unknown:
            raise ValueError(f"Unknown config section(s): {', '.join(unknown)}")
        return cls(
            filters=_build(FilterDefaults, data.get('filters')),
            logging=_build(LoggingConfig, data.get('logging')),
            parallel=_build(ParallelConfig, data.get('parallel')),
        )

    @classmethod
    def from_json(cls, filepath: Union[str, Path]) -> 'Config':
        """Load from a JSON file; a missing file yields the defaults."""
        return cls.from_dict(load_json(filepath, default={}))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def save(self, filepath: Union[str, Path]) -> Path:
        return save_json(self.to_dict(), filepath)

    def setup_logging(self):
        """Configure logging from the ``logging`` section."""
        return setup_logging(
            level=self.logging.level,
            log_dir=self.logging.log_dir,
            log_to_console=self.logging.log_to_console,
            log_to_file=self.logging.log_to_file,
            use_rich=self.logging.use_rich,
        )
