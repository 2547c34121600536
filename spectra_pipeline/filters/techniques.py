#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Stateless Spectrum Filters
===========================

Single-spectrum operations that can be composed into pipelines. Each
filter works on the amplitude vector of one spectrum and keeps its wave
numbers (unless the filter is about wave numbers), header and notes.

Filter Categories:
    1. Smoothing      — Savitzky-Golay (optionally as derivative)
    2. Normalization  — Scale (min/max), SNV, LogTransform
    3. Wave numbers   — Rebase, SubRange

Usage:
------
    >>> from spectra_pipeline.filters.techniques import SavitzkyGolay, Scale
    >>> smoothed = SavitzkyGolay(window_length=11).process(spectrum)
    >>> scaled = Scale(0.0, 1.0).process(smoothed)
"""

import math
from typing import Union

import numpy as np
from scipy.signal import savgol_filter

from spectra_pipeline.filters.base import Transform
from spectra_pipeline.spectrum.container import Spectrum
from spectra_pipeline.spectrum.point import SpectrumPoint
from spectra_pipeline.utils.logging_utils import get_logger

logger = get_logger(__name__)


# =============================================================================
# HELPER
# =============================================================================

def _with_amplitudes(data: Spectrum, amplitudes: np.ndarray) -> Spectrum:
    """Header of ``data`` carrying its wave numbers and new amplitudes."""
    result = data.header()
    result.add_all(
        SpectrumPoint(p.wave_number, a) for p, a in zip(data, amplitudes)
    )
    return result


# =============================================================================
# 1.  SMOOTHING
# =============================================================================

class SavitzkyGolay(Transform):
    """
    Savitzky-Golay smoothing (or differentiation for ``deriv > 0``).

    The window is adjusted to the spectrum length: shrunk below the
    number of points, grown to at least ``polyorder + 2`` and made odd.
    Spectra too short for any valid window are returned unchanged.

    Parameters
    ----------
    window_length : int
        Length of the filter window.
    polyorder : int
        Polynomial order.
    deriv : int
        Order of the derivative to compute (0 = smoothing only).
    """

    name = 'savitzky_golay'

    def __init__(self, window_length: int = 7, polyorder: int = 2, deriv: int = 0):
        self.window_length = window_length
        self.polyorder = polyorder
        self.deriv = deriv

    def _window_for(self, n_points: int) -> int:
        window_length = self.window_length
        if window_length >= n_points:
            window_length = n_points - 1 if n_points % 2 == 0 else n_points - 2
        if window_length < self.polyorder + 2:
            window_length = self.polyorder + 2
        if window_length % 2 == 0:
            window_length += 1
        return window_length

    def _process(self, data: Spectrum) -> Spectrum:
        amplitudes = data.amplitudes()
        window_length = self._window_for(len(amplitudes))

        if window_length > len(amplitudes):
            logger.debug(
                "%s: %d points too few for window %d, leaving unchanged",
                data.id, len(amplitudes), window_length,
            )
            return data.clone()

        smoothed = savgol_filter(
            amplitudes, window_length=window_length,
            polyorder=self.polyorder, deriv=self.deriv,
        )
        return _with_amplitudes(data, smoothed)


# =============================================================================
# 2.  NORMALIZATION
# =============================================================================

class Scale(Transform):
    """
    Linearly scale amplitudes into ``[min_amplitude, max_amplitude]``.

    A spectrum with constant amplitude has no range to scale and yields
    NaN amplitudes.

    Raises
    ------
    ValueError
        If ``min_amplitude > max_amplitude`` (checked when processing).
    """

    name = 'scale'

    def __init__(self, min_amplitude: float = 0.0, max_amplitude: float = 100.0):
        self.min_amplitude = min_amplitude
        self.max_amplitude = max_amplitude

    def _process(self, data: Spectrum) -> Spectrum:
        if self.min_amplitude > self.max_amplitude:
            raise ValueError(
                f"min amplitude > max amplitude: {self.min_amplitude} > {self.max_amplitude}"
            )

        amplitudes = data.amplitudes()
        if len(amplitudes) == 0:
            return data.header()

        lo, hi = amplitudes.min(), amplitudes.max()
        logger.debug("%s: min=%s, max=%s", data.id, lo, hi)

        with np.errstate(divide='ignore', invalid='ignore'):
            scale = np.float64(self.max_amplitude - self.min_amplitude) / (hi - lo)
            scaled = (amplitudes - lo) * scale + self.min_amplitude

        return _with_amplitudes(data, scaled)


class StandardNormalVariate(Transform):
    """
    Standard Normal Variate: centre each spectrum to zero mean and
    scale it to unit standard deviation. A flat spectrum is only centred.
    """

    name = 'snv'

    def _process(self, data: Spectrum) -> Spectrum:
        amplitudes = data.amplitudes()
        if len(amplitudes) == 0:
            return data.header()

        mean = np.mean(amplitudes)
        std = np.std(amplitudes)
        if std < 1e-12:
            result = amplitudes - mean
        else:
            result = (amplitudes - mean) / std
        return _with_amplitudes(data, result)


class LogTransform(Transform):
    """
    Logarithm of the amplitudes; non-positive amplitudes become 0.

    Parameters
    ----------
    base : str or float
        ``'10'``, ``'e'`` or any number greater than 1.
    """

    name = 'log'

    def __init__(self, base: Union[str, float] = '10'):
        self.base = base
        self._log_base = self._parse_base(base)

    @staticmethod
    def _parse_base(base: Union[str, float]) -> float:
        if isinstance(base, str):
            text = base.strip().lower()
            if text == 'e':
                return math.e
            try:
                value = float(text)
            except ValueError as e:
                raise ValueError(f"Invalid log base: {base!r}") from e
        else:
            value = float(base)
        if value <= 1.0:
            raise ValueError(f"Log base must be greater than 1: {base!r}")
        return value

    def _process(self, data: Spectrum) -> Spectrum:
        amplitudes = data.amplitudes()
        positive = amplitudes > 0
        result = np.zeros_like(amplitudes)
        result[positive] = np.log(amplitudes[positive]) / math.log(self._log_base)
        return _with_amplitudes(data, result)


# =============================================================================
# 3.  WAVE NUMBERS
# =============================================================================

class Rebase(Transform):
    """
    Move the spectrum so its first wave number is ``start``.

    By default every wave number is shifted by the same amount; with
    ``update_wave_numbers`` the wave numbers are rewritten to
    ``start, start + wave_step, ...``.
    """

    name = 'rebase'

    def __init__(self, start: float = 0.0, update_wave_numbers: bool = False, wave_step: float = 1.0):
        self.start = start
        self.update_wave_numbers = update_wave_numbers
        self.wave_step = wave_step

    def _process(self, data: Spectrum) -> Spectrum:
        result = data.header()
        points = data.to_list()
        if not points:
            return result

        if self.update_wave_numbers:
            result.add_all(
                p.with_wave_number(self.start + i * self.wave_step)
                for i, p in enumerate(points)
            )
        else:
            shift = self.start - points[0].wave_number
            logger.debug(
                "%s: shifting %s by %s", data.id,
                'left' if shift < 0 else 'right', shift,
            )
            result.add_all(p.with_wave_number(p.wave_number + shift) for p in points)

        return result


class SubRange(Transform):
    """
    Keep the points within ``[min_wave_number, max_wave_number]`` (or
    outside it, if ``invert``). A bound of ``-1`` means the spectrum's
    own minimum/maximum wave number.
    """

    name = 'sub_range'

    def __init__(self, min_wave_number: float = -1, max_wave_number: float = -1, invert: bool = False):
        self.min_wave_number = min_wave_number
        self.max_wave_number = max_wave_number
        self.invert = invert

    def _process(self, data: Spectrum) -> Spectrum:
        result = data.header()
        if len(data) == 0:
            return result

        lo = data.min_wave_number().wave_number if self.min_wave_number == -1 else self.min_wave_number
        hi = data.max_wave_number().wave_number if self.max_wave_number == -1 else self.max_wave_number

        for p in data:
            inside = lo <= p.wave_number <= hi
            if inside != self.invert:
                result.add(p)

        return result
