#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Scatter and Trend Correction
=============================

Range-based linear corrections. Within each configured wave-number range
a straight line ``y = intercept + slope * x`` is fitted and the
amplitudes in that range are corrected as::

    a' = (a - intercept) / slope

    - ``MultiplicativeScatterCorrection`` (MSC): trainable; regresses each
      spectrum on the average spectrum of the training population
    - ``Detrend``: regresses the amplitudes on the wave numbers

The fitted parameters are stored in the spectrum's report under
``Intercept.<range>`` and ``Slope.<range>``.

Usage:
------
    >>> msc = MultiplicativeScatterCorrection(ranges=[WaveNumberRange(1000, 2000)])
    >>> corrected = msc.filter_batch(spectra)
    >>> corrected[0].report.get_value('Slope.[1000.0;2000.0]')
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
from scipy.stats import linregress

from spectra_pipeline.filters.base import PassThrough, Trainable, Transform
from spectra_pipeline.spectrum.container import Spectrum
from spectra_pipeline.spectrum.point import SpectrumPoint
from spectra_pipeline.spectrum.utils import average
from spectra_pipeline.utils.logging_utils import get_logger

logger = get_logger(__name__)

PREFIX_INTERCEPT = 'Intercept.'
PREFIX_SLOPE = 'Slope.'


# =============================================================================
# RANGES
# =============================================================================

@dataclass(frozen=True)
class WaveNumberRange:
    """Closed wave-number interval; a ``None`` bound is unbounded."""

    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def is_inside(self, wave_number: float) -> bool:
        if self.minimum is not None and wave_number < self.minimum:
            return False
        if self.maximum is not None and wave_number > self.maximum:
            return False
        return True

    def __str__(self) -> str:
        if self.minimum is None and self.maximum is None:
            return 'all'
        lo = '-inf' if self.minimum is None else str(float(self.minimum))
        hi = '+inf' if self.maximum is None else str(float(self.maximum))
        return f"[{lo};{hi}]"


FULL_RANGE = WaveNumberRange()


def _as_ranges(ranges) -> List[WaveNumberRange]:
    """Accept ``WaveNumberRange`` objects or ``(min, max)`` pairs."""
    result = []
    for r in ranges:
        if isinstance(r, WaveNumberRange):
            result.append(r)
        else:
            lo, hi = r
            result.append(WaveNumberRange(lo, hi))
    return result


def _correct_ranges(
    data: Spectrum,
    ranges: Sequence[WaveNumberRange],
    x: np.ndarray,
    y: np.ndarray,
    waves: np.ndarray,
) -> Spectrum:
    """
    Fit ``y`` on ``x`` within each range (selected via ``waves``) and apply
    the correction to a copy of ``data``.
    """
    result = data.clone()
    amplitudes = result.amplitudes()
    result_waves = result.wave_numbers()

    for rng in ranges:
        mask = np.array([rng.is_inside(w) for w in waves], dtype=bool)
        with np.errstate(divide='ignore', invalid='ignore'):
            fit = linregress(x[mask], y[mask])
        intercept, slope = float(fit.intercept), float(fit.slope)

        result.report.set_numeric_value(PREFIX_INTERCEPT + str(rng), intercept)
        result.report.set_numeric_value(PREFIX_SLOPE + str(rng), slope)
        logger.debug("%s/%s: intercept=%s, slope=%s", data.id, rng, intercept, slope)

        inside = np.array([rng.is_inside(w) for w in result_waves], dtype=bool)
        with np.errstate(divide='ignore', invalid='ignore'):
            amplitudes[inside] = (amplitudes[inside] - intercept) / slope

    result.replace_all(
        SpectrumPoint(w, a) for w, a in zip(result_waves, amplitudes)
    )
    return result


# =============================================================================
# MULTIPLICATIVE SCATTER CORRECTION
# =============================================================================

class MultiplicativeScatterCorrection(Trainable, Transform):
    """
    Multiplicative Scatter Correction against the training average.

    Parameters
    ----------
    pre_filter : Transform
        Applied to the training data before averaging and to each
        spectrum before fitting (the correction itself is applied to the
        unfiltered spectrum).
    ranges : sequence of WaveNumberRange or (min, max)
        Ranges fitted independently; the default is the whole spectrum.

    Notes
    -----
    ``process`` before training logs a warning and returns the input.
    """

    name = 'msc'

    def __init__(self, pre_filter: Optional[Transform] = None, ranges=(FULL_RANGE,)):
        self.pre_filter = pre_filter if pre_filter is not None else PassThrough()
        self.ranges = _as_ranges(ranges)
        self.average_spectrum: Optional[Spectrum] = None

    def _pre_filter(self, data: Spectrum) -> Spectrum:
        if isinstance(self.pre_filter, PassThrough):
            return data
        return self.pre_filter.process(data)

    # ----- training -------------------------------------------------------

    def _train(self, spectra: List[Spectrum]):
        logger.info("Training MSC on %d spectra", len(spectra))
        filtered = [self._pre_filter(sp) for sp in spectra]
        self.average_spectrum = average(filtered, new_id=f"avg({len(spectra)} spectra)").clone()

    def is_trained(self) -> bool:
        return self.average_spectrum is not None

    def reset_training(self):
        self.average_spectrum = None

    # ----- filtering ------------------------------------------------------

    def check_data(self, data):
        super().check_data(data)
        if self.is_trained():
            filtered = self._pre_filter(data)
            if len(filtered) != len(self.average_spectrum):
                raise ValueError(
                    f"Different number of wave numbers (avg vs filtered input): "
                    f"{len(self.average_spectrum)} != {len(filtered)}"
                )

    def _process(self, data: Spectrum) -> Spectrum:
        if not self.is_trained():
            logger.warning("Not trained, just returning input data: %s", data.id)
            return data

        filtered = self._pre_filter(data)
        return _correct_ranges(
            data,
            self.ranges,
            x=self.average_spectrum.amplitudes(),
            y=filtered.amplitudes(),
            waves=filtered.wave_numbers(),
        )


# =============================================================================
# DETREND
# =============================================================================

class Detrend(Transform):
    """
    Remove a linear trend (amplitude over wave number) per range.

    Parameters
    ----------
    ranges : sequence of WaveNumberRange or (min, max)
        Ranges fitted independently; the default is the whole spectrum.
    """

    name = 'detrend'

    def __init__(self, ranges=(FULL_RANGE,)):
        self.ranges = _as_ranges(ranges)

    def _process(self, data: Spectrum) -> Spectrum:
        waves = data.wave_numbers()
        return _correct_ranges(
            data,
            self.ranges,
            x=waves,
            y=data.amplitudes(),
            waves=waves,
        )
