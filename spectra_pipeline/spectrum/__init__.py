#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Spectrum Package
=================

Data model and wave-number keyed operations.

Modules:
    - point: immutable ``SpectrumPoint`` and the wave-number comparator
    - report: typed key/value annotations carried by every spectrum
    - container: the ``Spectrum`` container (points + header metadata)
    - search: binary-search lookups, regions and sign-change counts
    - utils: set algebra, merge, gap filling, diff, pad, average
    - resample: equi-distance resampling with linear interpolation
"""

from spectra_pipeline.spectrum.point import (
    DEFAULT_COMPARATOR,
    SpectrumPoint,
    SpectrumPointComparator,
)
from spectra_pipeline.spectrum.report import (
    BoolValue,
    DataType,
    Field,
    NumberValue,
    Report,
    TextValue,
)
from spectra_pipeline.spectrum.container import NO_ID, Spectrum
from spectra_pipeline.spectrum.search import (
    NOT_FOUND,
    count_regions,
    count_sign_changes,
    find_closest,
    find_enclosing,
    find_exact,
    get_consecutive_region,
    get_region,
)
from spectra_pipeline.spectrum.utils import (
    GapFilling,
    average,
    diff,
    fill_gaps,
    intersect,
    merge,
    minus,
    missing_regions,
    pad,
    to_array,
    union,
)
from spectra_pipeline.spectrum.resample import interpolate, resample

__all__ = [
    "DEFAULT_COMPARATOR",
    "SpectrumPoint",
    "SpectrumPointComparator",
    "BoolValue",
    "DataType",
    "Field",
    "NumberValue",
    "Report",
    "TextValue",
    "NO_ID",
    "Spectrum",
    "NOT_FOUND",
    "count_regions",
    "count_sign_changes",
    "find_closest",
    "find_enclosing",
    "find_exact",
    "get_consecutive_region",
    "get_region",
    "GapFilling",
    "average",
    "diff",
    "fill_gaps",
    "intersect",
    "merge",
    "minus",
    "missing_regions",
    "pad",
    "to_array",
    "union",
    "interpolate",
    "resample",
]
