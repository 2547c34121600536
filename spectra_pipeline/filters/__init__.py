#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Filters Package for the Spectra Pipeline
=========================================

Spectrum filters and their composition.

Modules:
    - base: Transform / BatchFilter / Trainable / Composite abstractions
    - techniques: stateless filters (Savitzky-Golay, Scale, SNV, log,
      rebase, sub-range)
    - interpolation: equi-distance resampling and Lagrange standardisation
    - scatter: multiplicative scatter correction and detrending
    - pls: PLS score projection (batch)
    - kennard_stone: Kennard-Stone subset selection
    - multi: series / parallel-merge composite
    - pipeline: named-filter registry, pipelines, dict/JSON specs

Usage:
------
    >>> from spectra_pipeline.filters import build_pipeline, MultiFilter
    >>> pipe = build_pipeline('savgol_11+snv', config)
    >>> processed = pipe.filter_batch(spectra)
"""

from spectra_pipeline.filters.base import (
    BatchFilter,
    Composite,
    PassThrough,
    Trainable,
    Transform,
    apply_batch,
)
from spectra_pipeline.filters.techniques import (
    LogTransform,
    Rebase,
    SavitzkyGolay,
    Scale,
    StandardNormalVariate,
    SubRange,
)
from spectra_pipeline.filters.interpolation import EquiDistance, StandardiseByInterpolation
from spectra_pipeline.filters.scatter import (
    Detrend,
    MultiplicativeScatterCorrection,
    WaveNumberRange,
)
from spectra_pipeline.filters.pls import PLS
from spectra_pipeline.filters.kennard_stone import KennardStone, select
from spectra_pipeline.filters.multi import MultiFilter
from spectra_pipeline.filters.pipeline import (
    build_pipeline,
    filter_from_dict,
    filter_from_json,
    filter_to_dict,
    filter_to_json,
    get_filter,
    get_predefined_pipeline,
    list_available_pipelines,
    list_filters,
    load_filter,
    save_filter,
)

__all__ = [
    # Abstractions
    "BatchFilter",
    "Composite",
    "PassThrough",
    "Trainable",
    "Transform",
    "apply_batch",
    # Filters
    "LogTransform",
    "Rebase",
    "SavitzkyGolay",
    "Scale",
    "StandardNormalVariate",
    "SubRange",
    "EquiDistance",
    "StandardiseByInterpolation",
    "Detrend",
    "MultiplicativeScatterCorrection",
    "WaveNumberRange",
    "PLS",
    "KennardStone",
    "select",
    "MultiFilter",
    # Pipelines
    "build_pipeline",
    "filter_from_dict",
    "filter_from_json",
    "filter_to_dict",
    "filter_to_json",
    "get_filter",
    "get_predefined_pipeline",
    "list_available_pipelines",
    "list_filters",
    "load_filter",
    "save_filter",
]
