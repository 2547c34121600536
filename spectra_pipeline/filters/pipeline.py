#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Filter Registry and Pipelines
==============================

Named filters and composable, serialisable pipelines built from them.
A pipeline is a ``MultiFilter`` whose sub-filters are looked up by name;
defaults come from ``Config.filters``.

Features:
    - Registry of named filter factories (``get_filter``, ``list_filters``)
    - ``'+'``-separated short-hand (``build_pipeline('savgol_11+snv')``)
    - Pre-defined "sensible default" pipelines
    - Dict/JSON specification of arbitrary (nested) filter setups

Usage:
------
    >>> from spectra_pipeline.filters.pipeline import build_pipeline, filter_to_json
    >>> pipe = build_pipeline('savgol_11+snv', config)
    >>> out = pipe.process(spectrum)
    >>>
    >>> text = filter_to_json(pipe)
    >>> same = filter_from_json(text)
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from spectra_pipeline.config import Config, FilterDefaults
from spectra_pipeline.filters.base import PassThrough, Transform
from spectra_pipeline.filters.interpolation import EquiDistance, StandardiseByInterpolation
from spectra_pipeline.filters.kennard_stone import KennardStone
from spectra_pipeline.filters.multi import MultiFilter
from spectra_pipeline.filters.pls import PLS
from spectra_pipeline.filters.scatter import Detrend, MultiplicativeScatterCorrection, WaveNumberRange
from spectra_pipeline.filters.techniques import (
    LogTransform,
    Rebase,
    SavitzkyGolay,
    Scale,
    StandardNormalVariate,
    SubRange,
)
from spectra_pipeline.utils.json_io import load_json, save_json, to_json_string
from spectra_pipeline.utils.logging_utils import get_logger

logger = get_logger(__name__)


# =============================================================================
# REGISTRY: maps string names to filter factories
# =============================================================================

def _factory(cls, **defaults) -> Callable[..., Transform]:
    """Factory creating ``cls`` with ``defaults`` overridable by keyword."""
    def create(**params):
        return cls(**{**defaults, **params})
    return create


def _build_registry(defaults: FilterDefaults) -> Dict[str, Callable[..., Transform]]:
    """Build name → factory mapping."""
    d = defaults
    return {
        'pass_through':     _factory(PassThrough),

        # Smoothing
        'savitzky_golay':   _factory(SavitzkyGolay, window_length=d.savgol_window_length,
                                     polyorder=d.savgol_polyorder),
        'savgol_5':         _factory(SavitzkyGolay, window_length=5, polyorder=d.savgol_polyorder),
        'savgol_11':        _factory(SavitzkyGolay, window_length=11, polyorder=d.savgol_polyorder),
        'savgol_21':        _factory(SavitzkyGolay, window_length=21, polyorder=d.savgol_polyorder),

        # Derivatives
        'first_derivative':  _factory(SavitzkyGolay, window_length=d.derivative_window,
                                      polyorder=d.derivative_polyorder, deriv=1),
        'second_derivative': _factory(SavitzkyGolay, window_length=d.derivative_window,
                                      polyorder=d.derivative_polyorder, deriv=2),

        # Normalization
        'scale':            _factory(Scale, min_amplitude=d.scale_min_amplitude,
                                     max_amplitude=d.scale_max_amplitude),
        'snv':              _factory(StandardNormalVariate),
        'log':              _factory(LogTransform, base=d.log_base),

        # Wave numbers
        'rebase':           _factory(Rebase),
        'sub_range':        _factory(SubRange),
        'equi_distance':    _factory(EquiDistance, num_points=d.equidistance_num_points,
                                     allow_oversampling=d.equidistance_allow_oversampling),
        'standardise':      _factory(StandardiseByInterpolation, first=d.standardise_first,
                                     last=d.standardise_last, step=d.standardise_step,
                                     polynomial=d.standardise_polynomial),

        # Scatter / trend
        'msc':              _factory(MultiplicativeScatterCorrection),
        'detrend':          _factory(Detrend),

        # Batch
        'pls':              _factory(PLS, reference_field=d.pls_reference_field,
                                     num_components=d.pls_num_components),
        'kennard_stone':    _factory(KennardStone, subset_size=d.kennard_stone_subset_size),
    }


def _defaults(config: Optional[Config]) -> FilterDefaults:
    return config.filters if config is not None else FilterDefaults()


def get_filter(name: str, config: Optional[Config] = None, **params) -> Transform:
    """
    Create a filter by its registered name.

    Parameters
    ----------
    name : str
        Filter name as used in pipeline specifications.
    config : Config, optional
        Supplies default parameters.
    **params
        Override individual parameters.

    Raises
    ------
    KeyError
        If the name is unknown.
    """
    registry = _build_registry(_defaults(config))
    if name not in registry:
        available = ', '.join(sorted(registry.keys()))
        raise KeyError(f"Unknown filter: '{name}'. Available: {available}")
    return registry[name](**params)


def list_filters() -> List[str]:
    """Return sorted list of registered filter names."""
    return sorted(_build_registry(FilterDefaults()).keys())


# =============================================================================
# PIPELINE BUILDER
# =============================================================================

def build_pipeline(
    spec: str,
    config: Optional[Config] = None,
    parallel_and_merge: bool = False,
) -> MultiFilter:
    """
    Build a pipeline from a ``+``-separated string specification.

    Parameters
    ----------
    spec : str
        e.g. ``'savgol_11+snv'``; ``'raw'``/``'none'`` for no filtering.
    config : Config, optional
        Supplies filter defaults and the worker count.
    parallel_and_merge : bool
        Run the steps in parallel-merge mode instead of in series.

    Examples
    --------
    >>> pipe = build_pipeline('sub_range+equi_distance')
    >>> pipe = build_pipeline('raw')  # no filtering
    """
    n_jobs = config.parallel.n_jobs if config is not None else 1

    spec = spec.strip()
    if spec.lower() in ('raw', 'none', ''):
        return MultiFilter([], parallel_and_merge=parallel_and_merge, n_jobs=n_jobs)

    steps = [s.strip() for s in spec.split('+') if s.strip().lower() != 'none']
    filters = [get_filter(step, config) for step in steps]
    logger.debug("Built pipeline '%s' with %d step(s)", spec, len(filters))
    return MultiFilter(filters, parallel_and_merge=parallel_and_merge, n_jobs=n_jobs)


# =============================================================================
# PREDEFINED PIPELINES
# =============================================================================

_PREDEFINED_PIPELINES: Dict[str, List[str]] = {
    'raw':                      [],
    'snv_only':                 ['snv'],
    'savgol11_snv':             ['savgol_11', 'snv'],
    'savgol11_scale':           ['savgol_11', 'scale'],
    'd1_snv':                   ['first_derivative', 'snv'],
    'd2_snv':                   ['second_derivative', 'snv'],
    'detrend_snv':              ['detrend', 'snv'],
    'msc_savgol11':             ['msc', 'savgol_11'],
    'standardise_snv':          ['standardise', 'snv'],
    'equidistance_savgol11':    ['equi_distance', 'savgol_11'],
    'log_detrend':              ['log', 'detrend'],
}


def list_available_pipelines() -> List[str]:
    """Return names of all predefined pipelines."""
    return sorted(_PREDEFINED_PIPELINES.keys())


def get_predefined_pipeline(name: str, config: Optional[Config] = None) -> MultiFilter:
    """
    Get a predefined pipeline by name (see ``list_available_pipelines()``).

    Raises
    ------
    KeyError
        If the name is unknown.
    """
    if name not in _PREDEFINED_PIPELINES:
        available = ', '.join(sorted(_PREDEFINED_PIPELINES.keys()))
        raise KeyError(f"Unknown pipeline: '{name}'. Available: {available}")
    return build_pipeline('+'.join(_PREDEFINED_PIPELINES[name]) or 'raw', config)


# =============================================================================
# SERIALISATION
# =============================================================================

_FILTER_CLASSES: Dict[str, type] = {
    cls.name: cls
    for cls in (
        PassThrough, SavitzkyGolay, Scale, StandardNormalVariate, LogTransform,
        Rebase, SubRange, EquiDistance, StandardiseByInterpolation,
        MultiplicativeScatterCorrection, Detrend, PLS, KennardStone, MultiFilter,
    )
}


def _encode(value: Any) -> Any:
    if isinstance(value, Transform):
        return filter_to_dict(value)
    if isinstance(value, WaveNumberRange):
        return [value.minimum, value.maximum]
    if isinstance(value, (list, tuple)):
        return [_encode(v) for v in value]
    return value


def _decode(value: Any) -> Any:
    if isinstance(value, dict) and 'filter' in value:
        return filter_from_dict(value)
    if isinstance(value, list):
        return [_decode(v) for v in value]
    return value


def filter_to_dict(flt: Transform) -> Dict[str, Any]:
    """
    Serialise a filter (including nested sub-filters) to a dict of the
    form ``{'filter': <name>, 'params': {...}}``.
    """
    if type(flt).name not in _FILTER_CLASSES:
        raise KeyError(f"Filter type not serialisable: {type(flt).__name__}")
    return {
        'filter': type(flt).name,
        'params': {k: _encode(v) for k, v in flt.get_params().items()},
    }


def filter_from_dict(spec: Dict[str, Any]) -> Transform:
    """
    Reconstruct a filter from ``filter_to_dict`` output.

    Raises
    ------
    KeyError
        If the filter type is unknown.
    """
    name = spec['filter']
    if name not in _FILTER_CLASSES:
        available = ', '.join(sorted(_FILTER_CLASSES.keys()))
        raise KeyError(f"Unknown filter type: '{name}'. Available: {available}")
    params = {k: _decode(v) for k, v in spec.get('params', {}).items()}
    return _FILTER_CLASSES[name](**params)


def filter_to_json(flt: Transform) -> str:
    """Serialise to JSON string."""
    return to_json_string(filter_to_dict(flt))


def filter_from_json(json_str: str) -> Transform:
    """Reconstruct from JSON string."""
    return filter_from_dict(json.loads(json_str))


def save_filter(flt: Transform, filepath: Union[str, Path]) -> Path:
    """Write the filter specification to a JSON file."""
    return save_json(filter_to_dict(flt), filepath)


def load_filter(filepath: Union[str, Path]) -> Transform:
    """Read a filter specification written by ``save_filter``."""
    return filter_from_dict(load_json(filepath))
