#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Interpolating Filters
======================

    - ``EquiDistance``: linear resampling onto evenly spaced wave numbers
      (see ``spectra_pipeline.spectrum.resample``)
    - ``StandardiseByInterpolation``: Lagrange interpolation onto the fixed
      grid ``first, first + step, ..., last`` so spectra from different
      instruments share the same wave numbers

Usage:
------
    >>> from spectra_pipeline.filters.interpolation import StandardiseByInterpolation
    >>> grid = StandardiseByInterpolation(first=600, last=4000, step=2)
    >>> standardised = grid.process(spectrum.sorted())
"""

from typing import List

import numpy as np
from scipy.interpolate import lagrange

from spectra_pipeline.filters.base import Transform
from spectra_pipeline.spectrum.container import Spectrum
from spectra_pipeline.spectrum.point import SpectrumPoint
from spectra_pipeline.spectrum.resample import resample
from spectra_pipeline.spectrum.search import find_closest
from spectra_pipeline.utils.logging_utils import get_logger

logger = get_logger(__name__)


class EquiDistance(Transform):
    """
    Resample onto ``num_points`` equidistant wave numbers.

    Parameters
    ----------
    num_points : int
        Target size, ``-1`` for the size of the input.
    allow_oversampling : bool
        Allow more output than input points.
    offset : int
        If ``>= 0``, re-index the wave numbers to ``offset + 1, ...``.
    """

    name = 'equi_distance'

    def __init__(self, num_points: int = -1, allow_oversampling: bool = False, offset: int = -1):
        self.num_points = num_points
        self.allow_oversampling = allow_oversampling
        self.offset = offset

    def _process(self, data: Spectrum) -> Spectrum:
        return resample(
            data,
            num_points=self.num_points,
            allow_oversampling=self.allow_oversampling,
            offset=self.offset,
        )


class StandardiseByInterpolation(Transform):
    """
    Interpolate the spectrum at ``first, first + step, ... <= last`` with a
    Lagrange polynomial of degree ``polynomial`` through the closest points.

    The input must be sorted by ascending wave number.

    Raises
    ------
    ValueError
        If ``last < first``, ``step <= 0``, or the spectrum is empty.
    """

    name = 'standardise_by_interpolation'

    def __init__(self, first: float = 600.0, last: float = 4000.0, step: float = 2.0, polynomial: int = 2):
        self.first = first
        self.last = last
        self.step = step
        self.polynomial = polynomial

    @staticmethod
    def closest_points(points: List[SpectrumPoint], wave_number: float, count: int) -> List[SpectrumPoint]:
        """
        The ``count`` points nearest to ``wave_number``, grown outwards from
        the closest one (ties go to the right).
        """
        count = min(count, len(points))
        pos = find_closest(points, wave_number)
        result = [points[pos]]
        lo = hi = pos

        while len(result) < count:
            left_diff = abs(wave_number - points[lo - 1].wave_number) if lo > 0 else np.inf
            right_diff = abs(wave_number - points[hi + 1].wave_number) if hi + 1 < len(points) else np.inf
            if left_diff < right_diff:
                lo -= 1
                result.append(points[lo])
            else:
                hi += 1
                result.append(points[hi])

        return result

    def _process(self, data: Spectrum) -> Spectrum:
        if self.last < self.first:
            raise ValueError(f"last < first: {self.last} < {self.first}")
        if self.step <= 0:
            raise ValueError(f"Step must be positive: {self.step}")

        points = data.to_list()
        if not points:
            raise ValueError(f"Cannot interpolate empty spectrum: {data.id}")

        result = data.header()
        wave = float(self.first)
        while wave <= self.last + 0.0001:
            nearest = self.closest_points(points, wave, self.polynomial + 1)
            poly = lagrange(
                np.array([p.wave_number for p in nearest], dtype=np.float64),
                np.array([p.amplitude for p in nearest], dtype=np.float64),
            )
            result.add(SpectrumPoint(wave, poly(wave)))
            wave += self.step

        return result
