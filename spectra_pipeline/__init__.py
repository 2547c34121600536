#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Spectra Pipeline
=================

Wave-number indexed spectra and composable filters: ordered search, set
algebra, gap filling, resampling, trainable batch filters, Kennard-Stone
subset selection and series / parallel-merge composites.

Usage:
------
    >>> from spectra_pipeline import Spectrum, build_pipeline
    >>> sp = Spectrum.from_arrays(waves, amplitudes, spectrum_id='sample-1')
    >>> out = build_pipeline('savgol_11+snv').process(sp)
"""

__version__ = '0.1.0'

from spectra_pipeline.config import Config
from spectra_pipeline.spectrum import Report, Spectrum, SpectrumPoint
from spectra_pipeline.filters import MultiFilter, build_pipeline, get_filter

__all__ = [
    "__version__",
    "Config",
    "Report",
    "Spectrum",
    "SpectrumPoint",
    "MultiFilter",
    "build_pipeline",
    "get_filter",
]
